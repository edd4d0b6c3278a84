import logging
import random

import pytest
from pydantic import ValidationError

import sheet_analyst
from sheet_analyst import Dataset, DatasetError, QueryEngine, QueryResult
from sheet_analyst.query_engine import _QueryTraceLoggingFilter


SCORES = Dataset.single_sheet([{"score": v} for v in [1, 2, 3, 4, 5]])


def _engine(**valves) -> QueryEngine:
    return QueryEngine(valves=QueryEngine.Valves(**valves), rng=random.Random(7))


def test_average_end_to_end() -> None:
    result = _engine().execute("what is the average of score", SCORES, "en-US")
    assert "3.00" in result.answer
    assert result.confidence == 0.9
    assert result.used_columns == ["score"]
    assert result.operation == "average"


def test_search_round_trip() -> None:
    dataset = Dataset.single_sheet([{"id": "48", "name": "A"}, {"id": "7", "name": "B"}])
    result = _engine().execute("is 48 in the data", dataset, "en-US")
    assert result.operation == "search"
    assert "1 match" in result.answer
    assert result.used_columns == ["id"]
    assert result.confidence == 0.9


def test_unknown_query_falls_back_to_clarification() -> None:
    result = _engine().execute("asdkjasdk", SCORES, "en-US")
    assert result.confidence == 0.3
    assert result.data is None
    assert result.operation == "unknown"
    assert result.answer.startswith("I don't fully understand your query.")
    assert "Give me an overview of the data." in result.follow_up_questions


def test_filter_intent_uses_search_when_it_finds_something() -> None:
    dataset = Dataset.single_sheet([{"item": "x", "price": "20"}, {"item": "y", "price": "5"}])
    result = _engine().execute("filter price 20", dataset, "en-US")
    assert result.operation == "search"
    assert result.used_columns == ["price"]
    assert result.data == [{"item": "x", "price": "20"}]


def test_filter_intent_without_value_falls_back() -> None:
    result = _engine().execute("only show names", SCORES, "en-US")
    assert result.confidence == 0.3
    assert result.operation == "unknown"


def test_fallback_threshold_is_configurable() -> None:
    result = _engine(fallback_confidence_threshold=0.0).execute("asdkjasdk", SCORES, "en-US")
    assert result.operation == "search"
    assert result.confidence == 0.5


def test_display_limit_valve() -> None:
    result = _engine(display_limit=2).execute("what is the average of score", SCORES, "en-US")
    assert result.data == [{"score": 1}, {"score": 2}]


def test_german_rendering() -> None:
    result = _engine().execute("mittelwert von score", SCORES, "de-DE")
    assert result.answer == "Der Durchschnitt von score ist 3.00."
    assert result.follow_up_questions[0] == "Was ist die Summe von score?"


def test_unsupported_locale_renders_default() -> None:
    result = _engine().execute("what is the average of score", SCORES, "fr-FR")
    assert result.answer == "The average of score is 3.00."


def test_mapping_dataset_with_active_sheet() -> None:
    payload = {
        "sheets": {"First": [{"a": 1}], "Second": [{"score": 10}, {"score": 30}]},
        "activeSheet": "Second",
    }
    result = _engine().execute("sum of score", payload, "en-US")
    assert result.answer == "The sum of score is 40.00."


def test_empty_sheet_asks_for_column() -> None:
    result = _engine().execute("what is the average of score", Dataset.single_sheet([]), "en-US")
    assert result.confidence == 0.5
    assert result.operation == "average"


def test_missing_active_sheet_returns_error_result() -> None:
    dataset = Dataset(sheets={"A": [{"x": 1}]}, active_sheet="B")
    result = _engine().execute("what is the average of x", dataset, "en-US")
    assert result.confidence == 0.0
    assert result.operation == "error"
    assert result.answer == "There was an error processing your query."


def test_malformed_mapping_returns_error_result() -> None:
    result = _engine().execute("count", {"rows": []}, "de-DE")
    assert result.operation == "error"
    assert result.answer == "Es gab einen Fehler bei der Verarbeitung Ihrer Anfrage."


def test_dataset_validation() -> None:
    with pytest.raises(DatasetError):
        Dataset.from_mapping({"sheets": []})
    with pytest.raises(DatasetError):
        Dataset.single_sheet(["not a row"]).columns()
    assert Dataset.from_mapping({"sheets": {"S": [{"a": 1, "b": 2}]}}).columns() == ["a", "b"]


def test_query_result_wire_shape() -> None:
    result = QueryResult(answer="ok", confidence=0.9, used_columns=["a", "a", "b"], operation="sum")
    wire = result.to_wire()
    assert wire["usedColumns"] == ["a", "b"]
    assert wire["followUpQuestions"] == []
    assert wire["data"] is None
    assert QueryResult.model_validate(wire) == result
    with pytest.raises(ValidationError):
        QueryResult(answer="bad", confidence=1.5)


def test_module_level_execute() -> None:
    result = sheet_analyst.execute("how many entries", SCORES, "en-US")
    assert result.answer == "There are a total of 5 entries in this sheet."


def test_log_lines_carry_query_id(caplog) -> None:
    _engine()
    assert any(isinstance(f, _QueryTraceLoggingFilter) for f in logging.getLogger().filters)
    with caplog.at_level(logging.INFO):
        _engine().execute("what is the average of score", SCORES, "en-US")
    done = [r.getMessage() for r in caplog.records if "event=query_done" in r.getMessage()]
    assert done
    assert done[0].startswith("query_id=")
    assert "status=ok" in done[0]
