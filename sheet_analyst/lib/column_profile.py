import math
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np

from sheet_analyst.lib.scalars import format_cell, is_empty, parse_float, value_key

MOST_COMMON_MAX_DISTINCT = 20


def _finite(value: float) -> Any:
    return value if math.isfinite(value) else None


def _distinct(values: Sequence[Any]) -> List[Any]:
    seen = set()
    out: List[Any] = []
    for value in values:
        key = value_key(value)
        if key in seen:
            continue
        seen.add(key)
        out.append(value)
    return out


def profile_column(rows: Sequence[Mapping[str, Any]], column: str) -> Dict[str, Any]:
    """
    Summarize one column.

    A column counts as numeric when more than half of its non-empty cells parse
    as numbers; the numeric stats then cover only the parsed values.
    """
    values = [row.get(column) for row in rows if not is_empty(row.get(column))]
    if not values:
        return {"type": "empty", "count": 0, "unique_count": 0}

    parsed = [parse_float(v) for v in values]
    numbers = np.asarray([p for p in parsed if not math.isnan(p)], dtype=float)
    if numbers.size > len(values) * 0.5:
        return {
            "type": "numeric",
            "count": int(numbers.size),
            "min": _finite(float(numbers.min())),
            "max": _finite(float(numbers.max())),
            "avg": _finite(float(numbers.mean())),
            "unique_count": int(np.unique(numbers).size),
        }

    distinct = _distinct(values)
    return {
        "type": "categorical",
        "count": len(values),
        "unique_count": len(distinct),
        "most_common": [format_cell(v) for v in distinct] if len(distinct) <= MOST_COMMON_MAX_DISTINCT else [],
    }


def profile_sheet(rows: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> Dict[str, Any]:
    return {
        "rows": len(rows),
        "cols": len(columns),
        "columns": [str(c) for c in columns],
        "stats": {str(col): profile_column(rows, col) for col in columns},
    }


__all__ = ["MOST_COMMON_MAX_DISTINCT", "profile_column", "profile_sheet"]
