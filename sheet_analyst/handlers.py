"""
Operation handlers.

Each handler turns (query, rows, resolved columns, locale) into a QueryResult.
Handlers never raise on odd cell values: non-numeric cells are dropped from
numeric work, and missing inputs produce a low-confidence prompt instead.
"""

import math
import random
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from sheet_analyst.lib.localization import render
from sheet_analyst.lib.models import QueryResult, Row
from sheet_analyst.lib.query_signals import extract_column_keywords, extract_search_values, find_target_column
from sheet_analyst.lib.scalars import (
    format_cell,
    format_fixed,
    format_number,
    is_empty,
    is_strict_number,
    numeric_values,
    parse_float,
    search_text,
    value_key,
)

DISPLAY_LIMIT = 10
UNIQUE_ANSWER_LIMIT = 10
UNIQUE_DATA_LIMIT = 20
OVERVIEW_SAMPLE_ROWS = 10
CORRELATION_MIN_SAMPLES = 5
MAX_FOLLOW_UPS = 5
CORRELATION_PAIRINGS = ("independent", "row_aligned")

CONFIDENCE_OK = 0.9
CONFIDENCE_DEGRADED = 0.7
CONFIDENCE_AMBIGUOUS = 0.5
CONFIDENCE_NOT_UNDERSTOOD = 0.3


def _project(rows: Sequence[Row], columns: Sequence[str], limit: int) -> List[Dict[str, Any]]:
    return [{col: row.get(col) for col in columns} for row in rows[:limit]]


def _need_column(locale: str, key: str, operation: str, used: Sequence[str] = ()) -> QueryResult:
    return QueryResult(
        answer=render(locale, key),
        confidence=CONFIDENCE_AMBIGUOUS,
        used_columns=list(used),
        operation=operation,
    )


def _no_numeric(locale: str, column: str, operation: str) -> QueryResult:
    return QueryResult(
        answer=render(locale, "no_numeric", column=column),
        confidence=CONFIDENCE_DEGRADED,
        used_columns=[column],
        operation=operation,
    )


def calculate_average(
    query: str,
    rows: Sequence[Row],
    mentioned_columns: Sequence[str],
    locale: str,
    display_limit: int = DISPLAY_LIMIT,
) -> QueryResult:
    if not mentioned_columns:
        return _need_column(locale, "need_column_average", "average")
    column = mentioned_columns[0]
    values = numeric_values(rows, column)
    if not values:
        return _no_numeric(locale, column, "average")

    total = 0.0
    for v in values:
        total += v
    average = total / len(values)
    return QueryResult(
        answer=render(locale, "average_answer", column=column, value=format_fixed(average)),
        explanation=render(locale, "average_explanation", column=column, count=len(values)),
        data=_project(rows, [column], display_limit),
        follow_up_questions=[
            render(locale, "fq_sum_of", column=column),
            render(locale, "fq_max_of", column=column),
            render(locale, "fq_entries_in", column=column),
        ],
        confidence=CONFIDENCE_OK,
        used_columns=[column],
        operation="average",
    )


def calculate_sum(
    query: str,
    rows: Sequence[Row],
    mentioned_columns: Sequence[str],
    locale: str,
    display_limit: int = DISPLAY_LIMIT,
) -> QueryResult:
    if not mentioned_columns:
        return _need_column(locale, "need_column_sum", "sum")
    column = mentioned_columns[0]
    values = numeric_values(rows, column)
    if not values:
        return _no_numeric(locale, column, "sum")

    total = 0.0
    for v in values:
        total += v
    return QueryResult(
        answer=render(locale, "sum_answer", column=column, value=format_fixed(total)),
        explanation=render(locale, "sum_explanation", column=column),
        data=_project(rows, [column], display_limit),
        follow_up_questions=[
            render(locale, "fq_average_of", column=column),
            render(locale, "fq_min_of", column=column),
            render(locale, "fq_entries_in", column=column),
        ],
        confidence=CONFIDENCE_OK,
        used_columns=[column],
        operation="sum",
    )


def count_values(
    query: str,
    rows: Sequence[Row],
    mentioned_columns: Sequence[str],
    locale: str,
    display_limit: int = DISPLAY_LIMIT,
) -> QueryResult:
    if not mentioned_columns:
        return QueryResult(
            answer=render(locale, "count_rows_answer", count=len(rows)),
            explanation=render(locale, "count_rows_explanation"),
            confidence=CONFIDENCE_OK,
            operation="count",
        )

    column = mentioned_columns[0]
    non_empty = sum(1 for row in rows if not is_empty(row.get(column)))
    return QueryResult(
        answer=render(locale, "count_column_answer", count=non_empty, column=column),
        explanation=render(locale, "count_column_explanation", column=column),
        data=_project(rows, [column], display_limit),
        follow_up_questions=[
            render(locale, "fq_average_of", column=column),
            render(locale, "fq_unique_in", column=column),
            render(locale, "fq_total_entries"),
        ],
        confidence=CONFIDENCE_OK,
        used_columns=[column],
        operation="count",
    )


def _find_extremum(
    rows: Sequence[Row],
    mentioned_columns: Sequence[str],
    locale: str,
    operation: str,
    display_limit: int,
) -> QueryResult:
    if not mentioned_columns:
        return _need_column(locale, f"need_column_{operation}", operation)
    column = mentioned_columns[0]
    values = numeric_values(rows, column)
    if not values:
        return _no_numeric(locale, column, operation)

    target = min(values) if operation == "min" else max(values)
    matching = [row for row in rows if parse_float(row.get(column)) == target]
    other = "max" if operation == "min" else "min"
    return QueryResult(
        answer=render(locale, f"{operation}_answer", column=column, value=format_number(target)),
        explanation=render(locale, f"{operation}_explanation", column=column),
        data=[dict(row) for row in matching[:display_limit]],
        follow_up_questions=[
            render(locale, f"fq_{other}_of", column=column),
            render(locale, "fq_average_of", column=column),
            render(locale, f"fq_{operation}_entries"),
        ],
        confidence=CONFIDENCE_OK,
        used_columns=[column],
        operation=operation,
    )


def find_minimum(
    query: str,
    rows: Sequence[Row],
    mentioned_columns: Sequence[str],
    locale: str,
    display_limit: int = DISPLAY_LIMIT,
) -> QueryResult:
    return _find_extremum(rows, mentioned_columns, locale, "min", display_limit)


def find_maximum(
    query: str,
    rows: Sequence[Row],
    mentioned_columns: Sequence[str],
    locale: str,
    display_limit: int = DISPLAY_LIMIT,
) -> QueryResult:
    return _find_extremum(rows, mentioned_columns, locale, "max", display_limit)


def _paired_samples(
    rows: Sequence[Row], column1: str, column2: str, pairing: str
) -> Tuple[np.ndarray, np.ndarray, float, float]:
    if pairing == "row_aligned":
        pairs = [
            (parse_float(row.get(column1)), parse_float(row.get(column2)))
            for row in rows
        ]
        pairs = [(a, b) for a, b in pairs if not (math.isnan(a) or math.isnan(b))]
        x = np.asarray([a for a, _ in pairs], dtype=float)
        y = np.asarray([b for _, b in pairs], dtype=float)
        mean1 = float(x.mean()) if x.size else math.nan
        mean2 = float(y.mean()) if y.size else math.nan
        return x, y, mean1, mean2

    # Each column is filtered on its own and then paired by position; the means
    # cover every numeric value of the column, not just the paired prefix.
    values1 = np.asarray(numeric_values(rows, column1), dtype=float)
    values2 = np.asarray(numeric_values(rows, column2), dtype=float)
    n = min(values1.size, values2.size)
    mean1 = float(values1.mean()) if values1.size else math.nan
    mean2 = float(values2.mean()) if values2.size else math.nan
    return values1[:n], values2[:n], mean1, mean2


def pearson(x: np.ndarray, y: np.ndarray, mean1: float, mean2: float) -> float:
    """Pearson coefficient around the given means; NaN when it is undefined."""
    dx = x - mean1
    dy = y - mean2
    numerator = float(np.dot(dx, dy))
    denominator = math.sqrt(float(np.dot(dx, dx))) * math.sqrt(float(np.dot(dy, dy)))
    if denominator == 0 or not math.isfinite(denominator) or not math.isfinite(numerator):
        return math.nan
    return max(-1.0, min(1.0, numerator / denominator))


def correlation_strength(coefficient: float) -> str:
    magnitude = abs(coefficient)
    if magnitude < 0.3:
        return "weak"
    if magnitude < 0.7:
        return "moderate"
    return "strong"


def calculate_correlation(
    query: str,
    rows: Sequence[Row],
    mentioned_columns: Sequence[str],
    locale: str,
    display_limit: int = DISPLAY_LIMIT,
    min_samples: int = CORRELATION_MIN_SAMPLES,
    pairing: str = "independent",
) -> QueryResult:
    if len(mentioned_columns) < 2:
        return _need_column(locale, "need_two_columns", "correlation", used=mentioned_columns)
    if pairing not in CORRELATION_PAIRINGS:
        raise ValueError(f"unknown correlation pairing: {pairing}")

    column1, column2 = mentioned_columns[0], mentioned_columns[1]
    used = [column1, column2]
    x, y, mean1, mean2 = _paired_samples(rows, column1, column2, pairing)
    if x.size < min_samples:
        return QueryResult(
            answer=render(locale, "correlation_insufficient", column1=column1, column2=column2),
            confidence=CONFIDENCE_DEGRADED,
            used_columns=used,
            operation="correlation",
        )

    coefficient = pearson(x, y, mean1, mean2)
    if math.isnan(coefficient):
        return QueryResult(
            answer=render(locale, "correlation_undefined", column1=column1, column2=column2),
            confidence=CONFIDENCE_DEGRADED,
            used_columns=used,
            operation="correlation",
        )

    strength = render(locale, f"strength_{correlation_strength(coefficient)}")
    direction = render(locale, "direction_positive" if coefficient > 0 else "direction_negative")
    return QueryResult(
        answer=render(
            locale,
            "correlation_answer",
            column1=column1,
            column2=column2,
            value=format_fixed(coefficient),
            strength=strength,
            direction=direction,
        ),
        explanation=render(locale, "correlation_explanation", column1=column1, column2=column2),
        data=_project(rows, used, display_limit),
        follow_up_questions=[
            render(locale, "fq_average_of", column=column1),
            render(locale, "fq_average_of", column=column2),
            render(locale, "fq_other_correlations", column=column1),
        ],
        confidence=CONFIDENCE_OK,
        used_columns=used,
        operation="correlation",
    )


def unique_values(rows: Sequence[Row], column: str) -> List[Any]:
    """Distinct non-empty values of a column in order of first occurrence."""
    seen = set()
    out: List[Any] = []
    for row in rows:
        value = row.get(column)
        if is_empty(value):
            continue
        key = value_key(value)
        if key in seen:
            continue
        seen.add(key)
        out.append(value)
    return out


def find_unique_values(
    query: str,
    rows: Sequence[Row],
    mentioned_columns: Sequence[str],
    locale: str,
    answer_limit: int = UNIQUE_ANSWER_LIMIT,
    data_limit: int = UNIQUE_DATA_LIMIT,
) -> QueryResult:
    if not mentioned_columns:
        return _need_column(locale, "need_column_unique", "unique")
    column = mentioned_columns[0]
    distinct = unique_values(rows, column)
    if not distinct:
        return QueryResult(
            answer=render(locale, "unique_empty", column=column),
            confidence=CONFIDENCE_DEGRADED,
            used_columns=[column],
            operation="unique",
        )

    listed = ", ".join(format_cell(v) for v in distinct[:answer_limit])
    remaining = len(distinct) - answer_limit
    if remaining > 0:
        listed += render(locale, "unique_more", count=remaining)
    return QueryResult(
        answer=render(locale, "unique_answer", column=column, count=len(distinct), values=listed),
        explanation=render(locale, "unique_explanation", column=column),
        data=[{column: v} for v in distinct[:data_limit]],
        follow_up_questions=[
            render(locale, "fq_entries_in", column=column),
            render(locale, "fq_most_common", column=column),
            render(locale, "fq_distribution", column=column),
        ],
        confidence=CONFIDENCE_OK,
        used_columns=[column],
        operation="unique",
    )


def count_numeric_columns(rows: Sequence[Row], columns: Sequence[str], sample_rows: int = OVERVIEW_SAMPLE_ROWS) -> int:
    sample = rows[:sample_rows]
    return sum(1 for col in columns if all(is_strict_number(row.get(col)) for row in sample))


def get_data_overview(
    rows: Sequence[Row],
    columns: Sequence[str],
    locale: str,
    sample_rows: int = OVERVIEW_SAMPLE_ROWS,
) -> QueryResult:
    numeric = count_numeric_columns(rows, columns, sample_rows)
    return QueryResult(
        answer=render(
            locale,
            "overview_answer",
            rows=len(rows),
            columns=len(columns),
            numeric=numeric,
            names=", ".join(columns),
        ),
        explanation=render(locale, "overview_explanation"),
        follow_up_questions=[
            render(locale, "fq_numeric_columns"),
            render(locale, "fq_most_unique_column"),
            render(locale, "fq_numeric_correlations"),
        ],
        confidence=CONFIDENCE_OK,
        used_columns=list(columns),
        operation="overview",
    )


def _cell_equals(row: Row, column: str, needle: str) -> bool:
    return search_text(row, column).lower() == needle


def search_follow_up_questions(
    search_value: str,
    matching_rows: Sequence[Mapping[str, Any]],
    locale: str,
    rng: Optional[random.Random] = None,
) -> List[str]:
    if not matching_rows or not list(matching_rows[0].keys()):
        return [
            render(locale, "fq_values_in_column"),
            render(locale, "fq_overview"),
            render(locale, "fq_total_entries"),
        ]
    picker = rng or random
    column = picker.choice(list(matching_rows[0].keys()))
    return [
        render(locale, "fq_entries_with_value", value=search_value),
        render(locale, "fq_average_of", column=column),
        render(locale, "fq_similar_entries"),
    ]


def search_for_value(
    query: str,
    rows: Sequence[Row],
    columns: Sequence[str],
    locale: str,
    display_limit: int = DISPLAY_LIMIT,
    rng: Optional[random.Random] = None,
) -> QueryResult:
    search_values = extract_search_values(query)
    if not search_values:
        return QueryResult(
            answer=render(locale, "search_no_value"),
            confidence=CONFIDENCE_AMBIGUOUS,
            operation="search",
        )

    target = find_target_column(extract_column_keywords(query), columns)
    search_value = search_values[0]
    needle = search_value.lower()
    matching: List[Row] = []
    found_columns: List[str] = []
    if target:
        matching = [row for row in rows if _cell_equals(row, target, needle)]
    else:
        # a row is recorded once per matching column
        for row in rows:
            for col in columns:
                if _cell_equals(row, col, needle):
                    matching.append(row)
                    if col not in found_columns:
                        found_columns.append(col)

    scope = render(locale, "search_scope_column", column=target) if target else render(locale, "search_scope_all")
    if matching:
        return QueryResult(
            answer=render(locale, "search_found_answer", value=search_value, count=len(matching)),
            explanation=render(
                locale, "search_found_explanation", value=search_value, scope=scope, count=len(matching)
            ),
            data=[dict(row) for row in matching[:display_limit]],
            follow_up_questions=search_follow_up_questions(search_value, matching, locale, rng),
            confidence=CONFIDENCE_OK,
            used_columns=[target] if target else found_columns,
            operation="search",
        )

    return QueryResult(
        answer=render(locale, "search_missing_answer", value=search_value),
        explanation=render(locale, "search_missing_explanation", value=search_value, scope=scope),
        follow_up_questions=[
            render(locale, "fq_overview"),
            render(locale, "fq_values_in_column"),
            render(locale, "fq_total_entries"),
        ],
        confidence=CONFIDENCE_OK,
        used_columns=[target] if target else [],
        operation="search",
    )


def generate_follow_up_questions(
    columns: Sequence[str],
    locale: str,
    rng: Optional[random.Random] = None,
    max_questions: int = MAX_FOLLOW_UPS,
) -> List[str]:
    picker = rng or random
    picked = picker.sample(list(columns), min(3, len(columns)))
    questions: List[str] = []
    for column in picked:
        questions.append(render(locale, "fq_average_of", column=column))
        questions.append(render(locale, "fq_unique_count_in", column=column))
    questions.append(render(locale, "fq_overview"))
    questions.append(render(locale, "fq_total_entries"))
    return questions[:max_questions]


def not_understood_result(
    columns: Sequence[str],
    locale: str,
    rng: Optional[random.Random] = None,
    max_questions: int = MAX_FOLLOW_UPS,
) -> QueryResult:
    return QueryResult(
        answer=render(locale, "not_understood"),
        follow_up_questions=generate_follow_up_questions(columns, locale, rng, max_questions),
        confidence=CONFIDENCE_NOT_UNDERSTOOD,
        operation="unknown",
    )


def error_result(locale: str) -> QueryResult:
    return QueryResult(answer=render(locale, "error"), confidence=0.0, operation="error")
