"""Cell classification and numeric coercion shared by every operation."""

import datetime as _dt
import math
import numbers
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence


class ScalarKind(str, Enum):
    NULL = "null"
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"


# Leading-prefix float grammar used by spreadsheet hosts: "12abc" -> 12, "abc" -> NaN.
_LEADING_FLOAT_RE = re.compile(
    r"^[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)
_STRICT_FLOAT_RE = re.compile(
    r"^[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)$"
)
_RADIX_INT_RE = re.compile(r"^0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")


def scalar_kind(value: Any) -> ScalarKind:
    if value is None:
        return ScalarKind.NULL
    if isinstance(value, float) and math.isnan(value):
        return ScalarKind.NULL
    if isinstance(value, (_dt.date, _dt.datetime, _dt.time)):
        return ScalarKind.DATE
    if isinstance(value, bool):
        return ScalarKind.TEXT
    if isinstance(value, numbers.Number):
        return ScalarKind.NUMBER
    return ScalarKind.TEXT


def is_empty(value: Any) -> bool:
    """True for absent, null (including float NaN) and empty-string cells."""
    if isinstance(value, str):
        return value == ""
    return scalar_kind(value) is ScalarKind.NULL


def parse_float(value: Any) -> float:
    """Total coercion to float; anything that is not a number becomes NaN."""
    kind = scalar_kind(value)
    if kind is ScalarKind.NUMBER:
        try:
            return float(value)
        except (TypeError, ValueError, OverflowError):
            return math.nan
    if kind is not ScalarKind.TEXT or isinstance(value, bool):
        return math.nan
    m = _LEADING_FLOAT_RE.match(str(value).lstrip())
    if not m:
        return math.nan
    token = m.group(0).replace("Infinity", "inf")
    try:
        return float(token)
    except ValueError:
        return math.nan


def is_strict_number(value: Any) -> bool:
    """
    Whole-value numeric check used by the overview column heuristic.

    Follows the host's Number() conversion: blank-only text converts to 0,
    booleans and dates have a numeric form, and 0x/0o/0b literals parse.
    """
    if is_empty(value):
        return False
    kind = scalar_kind(value)
    if kind is ScalarKind.NUMBER:
        return not math.isnan(float(value))
    if kind is ScalarKind.DATE or isinstance(value, bool):
        return True
    text = str(value).strip()
    if not text:
        return True
    return bool(_STRICT_FLOAT_RE.match(text) or _RADIX_INT_RE.match(text))


def numeric_values(rows: Sequence[Mapping[str, Any]], column: str) -> List[float]:
    out: List[float] = []
    for row in rows:
        num = parse_float(row.get(column))
        if not math.isnan(num):
            out.append(num)
    return out


def format_number(value: float) -> str:
    """Shortest textual form of a number: 3.0 -> "3", 2.5 -> "2.5"."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, numbers.Integral):
        return str(int(value))
    num = float(value)
    if math.isnan(num):
        return "NaN"
    if math.isinf(num):
        return "Infinity" if num > 0 else "-Infinity"
    if num.is_integer() and abs(num) < 1e21:
        return str(int(num))
    return repr(num)


def format_fixed(value: float, digits: int = 2) -> str:
    """Fixed-point rendering with half-up rounding on the exact binary value."""
    num = float(value)
    if math.isnan(num):
        return "NaN"
    if math.isinf(num):
        return "Infinity" if num > 0 else "-Infinity"
    quantum = Decimal(1).scaleb(-digits)
    try:
        return str(Decimal(num).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return f"{num:.{digits}f}"


def format_cell(value: Any) -> str:
    """Text form of a cell for answers and value listings."""
    kind = scalar_kind(value)
    if kind is ScalarKind.NULL:
        return ""
    if kind is ScalarKind.NUMBER:
        return format_number(value)
    if kind is ScalarKind.DATE:
        return value.isoformat()
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def search_text(row: Mapping[str, Any], column: str) -> str:
    """Cell text as host string conversion renders it: a missing key is "undefined", null is "null"."""
    if column not in row:
        return "undefined"
    value = row[column]
    if value is None:
        return "null"
    if isinstance(value, float) and math.isnan(value):
        return "NaN"
    return format_cell(value)


def value_key(value: Any) -> Optional[tuple]:
    """Identity used for distinct-value sets; numbers compare by magnitude."""
    kind = scalar_kind(value)
    if kind is ScalarKind.NUMBER:
        return (kind.value, float(value))
    try:
        hash(value)
    except TypeError:
        return (kind.value, repr(value))
    return (kind.value, type(value).__name__, value)


__all__ = [
    "ScalarKind",
    "format_cell",
    "format_fixed",
    "format_number",
    "is_empty",
    "is_strict_number",
    "numeric_values",
    "parse_float",
    "scalar_kind",
    "search_text",
    "value_key",
]
