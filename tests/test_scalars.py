import datetime as dt
import math

from sheet_analyst.lib.scalars import (
    ScalarKind,
    format_cell,
    format_fixed,
    format_number,
    is_empty,
    is_strict_number,
    numeric_values,
    parse_float,
    scalar_kind,
    search_text,
)


def test_parse_float_reads_leading_number() -> None:
    assert parse_float("12abc") == 12.0
    assert parse_float("  3.5") == 3.5
    assert parse_float(".5") == 0.5
    assert parse_float("1e3") == 1000.0
    assert parse_float("-Infinity") == -math.inf
    assert parse_float(7) == 7.0


def test_parse_float_non_numbers_are_nan() -> None:
    for value in ("abc", "", None, True, dt.date(2024, 1, 2), float("nan")):
        assert math.isnan(parse_float(value))


def test_scalar_kind() -> None:
    assert scalar_kind(None) is ScalarKind.NULL
    assert scalar_kind(float("nan")) is ScalarKind.NULL
    assert scalar_kind(dt.datetime(2024, 1, 2, 3, 4)) is ScalarKind.DATE
    assert scalar_kind(False) is ScalarKind.TEXT
    assert scalar_kind(4.5) is ScalarKind.NUMBER
    assert scalar_kind("4.5") is ScalarKind.TEXT


def test_is_empty() -> None:
    assert is_empty(None)
    assert is_empty("")
    assert is_empty(float("nan"))
    assert not is_empty(0)
    assert not is_empty(" ")


def test_strict_number_requires_whole_value() -> None:
    assert is_strict_number("12")
    assert is_strict_number(" 12.5 ")
    assert is_strict_number(5)
    assert not is_strict_number("12abc")
    assert not is_strict_number(None)
    assert not is_strict_number("")


def test_strict_number_follows_host_number_conversion() -> None:
    assert is_strict_number(" ")
    assert is_strict_number("0x1F")
    assert is_strict_number(True)
    assert is_strict_number(dt.date(2024, 1, 1))
    assert not is_strict_number("-0x1F")
    assert not is_strict_number("1,5")


def test_numeric_values_drops_non_numeric_cells() -> None:
    rows = [{"x": "1"}, {"x": "n/a"}, {"x": 2.5}, {}, {"x": None}]
    assert numeric_values(rows, "x") == [1.0, 2.5]


def test_format_fixed_rounds_half_up_on_binary_value() -> None:
    assert format_fixed(3) == "3.00"
    assert format_fixed(0.125) == "0.13"
    assert format_fixed(2.675) == "2.67"
    assert format_fixed(-1.5, 0) == "-2"


def test_format_number_drops_trailing_zero() -> None:
    assert format_number(3.0) == "3"
    assert format_number(2.5) == "2.5"
    assert format_number(7) == "7"


def test_format_cell() -> None:
    assert format_cell(None) == ""
    assert format_cell(dt.date(2024, 1, 2)) == "2024-01-02"
    assert format_cell(True) == "true"
    assert format_cell(48.0) == "48"
    assert format_cell("Alice") == "Alice"


def test_search_text_renders_missing_and_null_cells() -> None:
    row = {"a": None, "b": float("nan"), "c": 48.0, "d": False}
    assert search_text(row, "a") == "null"
    assert search_text(row, "b") == "NaN"
    assert search_text(row, "c") == "48"
    assert search_text(row, "d") == "false"
    assert search_text(row, "missing") == "undefined"
