import pytest

from sheet_analyst.lib.models import Dataset
from sheet_analyst.lib.remote_result import (
    RemoteResultError,
    build_remote_prompt,
    parse_json_object,
    parse_remote_result,
)


PAYLOAD = (
    '{"answer": "The average of score is 3.00.", "explanation": "mean", "data": [{"score": 1}],'
    ' "followUpQuestions": ["What is the sum of score?"], "confidence": 0.95,'
    ' "usedColumns": ["score", "score"], "operation": "average"}'
)


def test_parse_json_object_plain_fenced_and_noisy() -> None:
    assert parse_json_object(PAYLOAD)["operation"] == "average"
    assert parse_json_object("```json\n" + PAYLOAD + "\n```")["confidence"] == 0.95
    assert parse_json_object("Sure! Here you go:\n" + PAYLOAD + "\nBye")["answer"].startswith("The average")


def test_parse_json_object_skips_reasoning_sections() -> None:
    text = "<think>maybe {not json}</think>\n" + PAYLOAD
    assert parse_json_object(text)["operation"] == "average"


def test_parse_json_object_rejects_non_objects() -> None:
    with pytest.raises(RemoteResultError):
        parse_json_object("[1, 2, 3]")
    with pytest.raises(RemoteResultError):
        parse_json_object("")


def test_parse_remote_result_builds_query_result() -> None:
    result = parse_remote_result(PAYLOAD, "en-US")
    assert result.answer == "The average of score is 3.00."
    assert result.used_columns == ["score"]
    assert result.follow_up_questions == ["What is the sum of score?"]
    assert result.data == [{"score": 1}]


def test_parse_remote_result_normalizes_loose_fields() -> None:
    result = parse_remote_result(
        {"answer": "ok", "confidence": 1.7, "data": "n/a", "usedColumns": None, "explanation": None},
        "en-US",
    )
    assert result.confidence == 1.0
    assert result.data is None
    assert result.used_columns == []
    assert result.explanation == ""


def test_parse_remote_result_unreadable_output_is_localized() -> None:
    result = parse_remote_result("I think the answer is three", "de-DE")
    assert result.confidence == 0.3
    assert result.operation == "unknown"
    assert result.answer == "Ich konnte Ihre Anfrage nicht vollständig verstehen. Bitte versuchen Sie es erneut."


def test_parse_remote_result_missing_answer_is_rejected() -> None:
    result = parse_remote_result({"confidence": 0.9}, "en-US")
    assert result.confidence == 0.3


def test_build_remote_prompt() -> None:
    dataset = Dataset.single_sheet([{"score": 1}, {"score": 2}], name="Grades")
    prompt = build_remote_prompt("what is the average of score", dataset, "de-DE")
    assert "Sheet name: Grades" in prompt
    assert "Number of rows: 2" in prompt
    assert "Columns: score" in prompt
    assert 'USER QUERY: "what is the average of score"' in prompt
    assert "USER LANGUAGE: German" in prompt
