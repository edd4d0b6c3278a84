"""
Conformance layer for answers produced by an external language model.

The host may answer a question with a remote model instead of the offline
engine. Whatever comes back must land in the same QueryResult shape, so this
module renders the analyst prompt and turns raw model output into a result.
The network call itself belongs to the host.
"""

import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from sheet_analyst.lib.localization import render
from sheet_analyst.lib.models import Dataset, QueryResult

PROMPT_SAMPLE_ROWS = 3

REMOTE_ANALYST_PROMPT = """
You are an expert data analyst assistant. Analyze this Excel data and answer the user's query.

EXCEL DATA SUMMARY:
- Sheet name: {sheet}
- Number of rows: {rows}
- Columns: {columns}

Here's a sample of the data (first {sample_size} rows):
{sample}

USER QUERY: "{query}"
USER LANGUAGE: {language}

Provide a response in the following JSON format:
{{
  "answer": "The direct answer to the user's query",
  "explanation": "A brief explanation of how you arrived at this answer",
  "data": [Array of relevant data points used for the analysis, or null if not applicable],
  "followUpQuestions": ["3-5 relevant follow-up questions the user might want to ask"],
  "confidence": A number between 0 and 1 indicating your confidence in the answer,
  "usedColumns": ["List of column names used in the analysis"],
  "operation": "The type of operation performed (e.g., average, sum, count, filter, etc.)"
}}

Ensure your answer is accurate, concise, and directly addresses the user's query.
"""


class RemoteResultError(ValueError):
    """Raised when remote model output holds no usable JSON object."""


def build_remote_prompt(query: str, dataset: Dataset, locale: str) -> str:
    rows = dataset.active_rows()
    columns = dataset.columns()
    sample = json.dumps(list(rows[:PROMPT_SAMPLE_ROWS]), ensure_ascii=False, indent=2, default=str)
    return REMOTE_ANALYST_PROMPT.format(
        sheet=dataset.active_sheet,
        rows=len(rows),
        columns=", ".join(columns),
        sample_size=PROMPT_SAMPLE_ROWS,
        sample=sample,
        query=query,
        language="German" if locale == "de-DE" else "English",
    )


def _strip_reasoning_sections(text: str) -> str:
    s = str(text or "")
    if not s:
        return ""
    s = re.sub(r"(?is)<(think|analysis|reasoning)[^>]*>.*?</\1>", " ", s)
    s = re.sub(r"(?is)</?(think|analysis|reasoning)[^>]*>", " ", s)
    s = re.sub(r"(?is)```(?:think|thinking|analysis|reasoning)[^\n]*\n.*?```", " ", s)
    return s.strip()


def _balanced_objects(text: str) -> List[str]:
    s = (text or "").strip()
    out: List[str] = []
    start = s.find("{")
    while start != -1:
        depth = 0
        in_str = False
        escaped = False
        end = -1
        for i in range(start, len(s)):
            ch = s[i]
            if in_str:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_str = False
                continue
            if ch == '"':
                in_str = True
                continue
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    end = i
                    break
        if end == -1:
            break
        out.append(s[start : end + 1])
        start = s.find("{", end + 1)
    return out


def parse_json_object(text: str) -> Dict[str, Any]:
    s = (text or "").strip()
    if not s:
        raise RemoteResultError("remote model returned no text")
    candidates: List[str] = []
    cleaned = _strip_reasoning_sections(s)
    for source in (cleaned, s):
        if not source:
            continue
        fence = re.search(r"```(?:json)?\s*(.*?)\s*```", source, re.S | re.I)
        if fence and fence.group(1).strip() not in candidates:
            candidates.append(fence.group(1).strip())
        for cand in _balanced_objects(source):
            if cand not in candidates:
                candidates.append(cand)
    last_err: Optional[Exception] = None
    for candidate in candidates or [cleaned or s]:
        try:
            parsed = json.loads(candidate)
        except ValueError as exc:
            last_err = exc
            continue
        if isinstance(parsed, dict):
            return parsed
    if last_err is not None:
        raise RemoteResultError(f"remote model JSON is invalid: {last_err}")
    raise RemoteResultError("remote model JSON root must be an object")


def _normalize_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(payload)
    data = out.get("data")
    if data is not None and not isinstance(data, list):
        out["data"] = None
    elif isinstance(data, list):
        out["data"] = [row if isinstance(row, dict) else {"value": row} for row in data]
    for key in ("followUpQuestions", "usedColumns"):
        value = out.get(key)
        if value is None:
            out[key] = []
        elif isinstance(value, list):
            out[key] = [str(v) for v in value]
    confidence = out.get("confidence")
    if isinstance(confidence, (int, float)) and not isinstance(confidence, bool):
        out["confidence"] = max(0.0, min(1.0, float(confidence)))
    if out.get("explanation") is None:
        out["explanation"] = ""
    return out


def parse_remote_result(raw: Union[str, Mapping[str, Any]], locale: str) -> QueryResult:
    """
    Turn remote model output into a QueryResult.

    Accepts either the raw completion text or an already-decoded object. Output
    that cannot be read becomes the localized "couldn't understand" result.
    """
    try:
        payload = parse_json_object(raw) if isinstance(raw, str) else dict(raw)
        return QueryResult.model_validate(_normalize_payload(payload))
    except (RemoteResultError, ValidationError, TypeError, ValueError) as exc:
        logging.warning("event=remote_result_rejected error=%s", str(exc)[:300])
        return QueryResult(
            answer=render(locale, "remote_unparsed"),
            confidence=0.3,
            operation="unknown",
        )


__all__ = [
    "REMOTE_ANALYST_PROMPT",
    "RemoteResultError",
    "build_remote_prompt",
    "parse_json_object",
    "parse_remote_result",
]
