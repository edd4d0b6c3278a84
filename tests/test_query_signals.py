from sheet_analyst.lib.query_signals import (
    extract_column_keywords,
    extract_search_values,
    find_target_column,
    resolve_columns,
)


def test_resolve_columns_uses_sheet_order() -> None:
    assert resolve_columns("compare price and name", ["name", "price", "qty"]) == ["name", "price"]


def test_resolve_columns_is_case_insensitive_and_skips_blank_names() -> None:
    assert resolve_columns("AVERAGE OF SCORE", ["Score", "", " "]) == ["Score"]


def test_resolve_columns_empty_inputs() -> None:
    assert resolve_columns("", ["a"]) == []
    assert resolve_columns("anything", []) == []


def test_extract_search_values_keeps_scan_order_and_duplicates() -> None:
    values = extract_search_values('find "Alice" with id-456 and 12')
    assert values == ["456", "12", "Alice", "id-456"]


def test_extract_search_values_single_quotes_and_plain_identifiers() -> None:
    assert extract_search_values("look for 'north' or ID123") == ["123", "north", "ID123"]


def test_extract_search_values_none_found() -> None:
    assert extract_search_values("show everything") == []


def test_extract_column_keywords_follows_vocabulary_order() -> None:
    assert extract_column_keywords("what is the price of id 5") == ["id", "price"]


def test_find_target_column_first_keyword_wins() -> None:
    assert find_target_column(["id", "name"], ["full_name", "user_id"]) == "user_id"
    assert find_target_column(["price"], ["name"]) is None
    assert find_target_column([], ["name"]) is None
