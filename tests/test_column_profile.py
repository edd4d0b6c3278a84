from sheet_analyst.lib.column_profile import profile_column, profile_sheet


ROWS = [
    {"name": "A", "price": "10", "empty": None},
    {"name": "B", "price": "abc", "empty": ""},
    {"name": "A", "price": 20, "empty": None},
]


def test_numeric_column_profile() -> None:
    stats = profile_column(ROWS, "price")
    assert stats == {"type": "numeric", "count": 2, "min": 10.0, "max": 20.0, "avg": 15.0, "unique_count": 2}


def test_categorical_column_profile() -> None:
    stats = profile_column(ROWS, "name")
    assert stats["type"] == "categorical"
    assert stats["count"] == 3
    assert stats["unique_count"] == 2
    assert stats["most_common"] == ["A", "B"]


def test_categorical_profile_hides_long_value_lists() -> None:
    rows = [{"code": f"c{i}"} for i in range(21)]
    stats = profile_column(rows, "code")
    assert stats["unique_count"] == 21
    assert stats["most_common"] == []


def test_empty_column_profile() -> None:
    assert profile_column(ROWS, "empty") == {"type": "empty", "count": 0, "unique_count": 0}


def test_infinite_values_are_not_reported() -> None:
    stats = profile_column([{"x": "Infinity"}, {"x": 1}], "x")
    assert stats["max"] is None
    assert stats["min"] == 1.0


def test_profile_sheet_shape() -> None:
    profile = profile_sheet(ROWS, ["name", "price", "empty"])
    assert profile["rows"] == 3
    assert profile["cols"] == 3
    assert profile["columns"] == ["name", "price", "empty"]
    assert set(profile["stats"]) == {"name", "price", "empty"}
