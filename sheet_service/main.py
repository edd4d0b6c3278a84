import base64
import logging
import os
import threading
import time
import uuid
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from sheet_analyst.lib.column_profile import profile_sheet
from sheet_analyst.lib.locale_detect import detect_locale
from sheet_analyst.lib.models import AUTO_LOCALE, Dataset, QueryResult
from sheet_analyst.lib.remote_result import parse_remote_result
from sheet_analyst.lib.workbook_io import decode_workbook
from sheet_analyst.query_engine import QueryEngine


app = FastAPI()

SHEET_SERVICE_API_KEY = os.getenv("SHEET_SERVICE_API_KEY", "")
DEF_MAX_ROWS = int(os.getenv("MAX_ROWS", "200000"))
WORKBOOK_CACHE_TTL_S = int(os.getenv("WORKBOOK_CACHE_TTL_S", "1800"))
MAX_WORKBOOK_CACHE_ITEMS = int(os.getenv("MAX_WORKBOOK_CACHE_ITEMS", "32"))
MAX_QUERY_HISTORY = int(os.getenv("MAX_QUERY_HISTORY", "200"))


class LoadRequest(BaseModel):
    file_id: Optional[str] = None
    filename: Optional[str] = None
    content_type: Optional[str] = None
    data_b64: str
    max_rows: Optional[int] = Field(default=None, ge=1)


class ActiveSheetRequest(BaseModel):
    sheet: str


class QueryRequest(BaseModel):
    workbook_id: str
    query: str
    locale: Optional[str] = AUTO_LOCALE


class RemoteResultRequest(BaseModel):
    query: str
    locale: Optional[str] = AUTO_LOCALE
    result: Union[str, Dict[str, Any]]


WORKBOOK_STORE: Dict[str, Dict[str, Any]] = {}
FILE_ID_INDEX: Dict[str, str] = {}
STORE_LOCK = threading.Lock()
ENGINE = QueryEngine()


def _require_auth(request: Request) -> None:
    if not SHEET_SERVICE_API_KEY:
        return
    auth = request.headers.get("authorization", "")
    if auth != f"Bearer {SHEET_SERVICE_API_KEY}":
        raise HTTPException(status_code=401, detail="unauthorized")


def _cleanup_store_locked() -> None:
    now = time.time()
    expired = [key for key, entry in WORKBOOK_STORE.items() if now - entry.get("ts", 0) > WORKBOOK_CACHE_TTL_S]
    for key in expired:
        entry = WORKBOOK_STORE.pop(key, None)
        if entry and entry.get("file_id"):
            FILE_ID_INDEX.pop(entry.get("file_id"), None)
    while len(WORKBOOK_STORE) > MAX_WORKBOOK_CACHE_ITEMS:
        oldest_key = min(WORKBOOK_STORE.items(), key=lambda item: item[1].get("ts", 0))[0]
        entry = WORKBOOK_STORE.pop(oldest_key, None)
        if entry and entry.get("file_id"):
            FILE_ID_INDEX.pop(entry.get("file_id"), None)


def _get_entry_locked(workbook_id: str) -> Dict[str, Any]:
    _cleanup_store_locked()
    entry = WORKBOOK_STORE.get(workbook_id)
    if not entry:
        raise HTTPException(status_code=404, detail="workbook_not_found")
    entry["ts"] = time.time()
    return entry


def _sheet_profile(dataset: Dataset) -> Dict[str, Any]:
    return profile_sheet(dataset.active_rows(), dataset.columns())


def _append_history_locked(entry: Dict[str, Any], query: str, locale: str, result: QueryResult, source: str) -> None:
    history = entry.setdefault("history", [])
    history.append(
        {"query": query, "locale": locale, "source": source, "result": result.to_wire(), "ts": time.time()}
    )
    if MAX_QUERY_HISTORY > 0 and len(history) > MAX_QUERY_HISTORY:
        entry["history"] = history[-MAX_QUERY_HISTORY:]


def _resolve_locale(locale: Optional[str], text: str) -> str:
    if not locale or locale == AUTO_LOCALE:
        return detect_locale(text)
    return ENGINE.resolve_locale(locale)


def result_to_csv(result: Dict[str, Any]) -> str:
    rows = result.get("data") or []
    if not rows:
        return ""
    return pd.DataFrame(rows).to_csv(index=False)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/v1/workbook/load")
def load_workbook(req: LoadRequest, request: Request) -> dict:
    _require_auth(request)

    with STORE_LOCK:
        _cleanup_store_locked()
        if req.file_id and req.file_id in FILE_ID_INDEX:
            workbook_id = FILE_ID_INDEX[req.file_id]
            entry = WORKBOOK_STORE.get(workbook_id)
            if entry:
                entry["ts"] = time.time()
                return {
                    "workbook_id": workbook_id,
                    "sheets": list(entry["dataset"].sheets.keys()),
                    "active_sheet": entry["dataset"].active_sheet,
                    "profile": entry.get("profile"),
                }

    try:
        data = base64.b64decode(req.data_b64, validate=True)
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid_base64")

    try:
        dataset = decode_workbook(data, req.filename or "", req.content_type or "", req.max_rows or DEF_MAX_ROWS)
    except Exception as exc:
        raise HTTPException(status_code=400, detail=f"read_error:{type(exc).__name__}:{exc}")
    if not dataset.sheets:
        raise HTTPException(status_code=400, detail="empty_workbook")

    profile = _sheet_profile(dataset)
    workbook_id = str(uuid.uuid4())
    with STORE_LOCK:
        WORKBOOK_STORE[workbook_id] = {
            "dataset": dataset,
            "profile": profile,
            "ts": time.time(),
            "file_id": req.file_id,
            "history": [],
        }
        if req.file_id:
            FILE_ID_INDEX[req.file_id] = workbook_id
    logging.info(
        "event=workbook_loaded workbook_id=%s sheets=%d active_sheet=%s rows=%d",
        workbook_id,
        len(dataset.sheets),
        dataset.active_sheet,
        profile.get("rows", 0),
    )
    return {
        "workbook_id": workbook_id,
        "sheets": list(dataset.sheets.keys()),
        "active_sheet": dataset.active_sheet,
        "profile": profile,
    }


@app.get("/v1/workbook/{workbook_id}/profile")
def get_profile(workbook_id: str, request: Request) -> dict:
    _require_auth(request)
    with STORE_LOCK:
        entry = _get_entry_locked(workbook_id)
        return {
            "workbook_id": workbook_id,
            "active_sheet": entry["dataset"].active_sheet,
            "profile": entry.get("profile"),
        }


@app.post("/v1/workbook/{workbook_id}/active-sheet")
def set_active_sheet(workbook_id: str, req: ActiveSheetRequest, request: Request) -> dict:
    _require_auth(request)
    with STORE_LOCK:
        entry = _get_entry_locked(workbook_id)
        dataset: Dataset = entry["dataset"]
        if req.sheet not in dataset.sheets:
            raise HTTPException(status_code=404, detail="sheet_not_found")
        entry["dataset"] = Dataset(sheets=dataset.sheets, active_sheet=req.sheet)
        entry["profile"] = _sheet_profile(entry["dataset"])
        return {"workbook_id": workbook_id, "active_sheet": req.sheet, "profile": entry["profile"]}


@app.post("/v1/query")
def run_query(req: QueryRequest, request: Request) -> dict:
    _require_auth(request)
    with STORE_LOCK:
        entry = _get_entry_locked(req.workbook_id)
        dataset: Dataset = entry["dataset"]
        locale = _resolve_locale(req.locale, req.query)
        result = ENGINE.execute(req.query, dataset, locale)
        _append_history_locked(entry, req.query, locale, result, "local")
    return {"workbook_id": req.workbook_id, "locale": locale, "result": result.to_wire()}


@app.post("/v1/workbook/{workbook_id}/remote-result")
def accept_remote_result(workbook_id: str, req: RemoteResultRequest, request: Request) -> dict:
    _require_auth(request)
    locale = _resolve_locale(req.locale, req.query)
    result = parse_remote_result(req.result, locale)
    with STORE_LOCK:
        entry = _get_entry_locked(workbook_id)
        _append_history_locked(entry, req.query, locale, result, "remote")
    return {"workbook_id": workbook_id, "locale": locale, "result": result.to_wire()}


@app.get("/v1/workbook/{workbook_id}/history")
def get_history(
    workbook_id: str, request: Request, limit: int = Query(default=50, ge=1, le=1000)
) -> List[Dict[str, Any]]:
    _require_auth(request)
    with STORE_LOCK:
        entry = _get_entry_locked(workbook_id)
        return list(entry.get("history") or [])[-limit:]


@app.get("/v1/workbook/{workbook_id}/export", response_class=PlainTextResponse)
def export_latest(workbook_id: str, request: Request) -> PlainTextResponse:
    _require_auth(request)
    with STORE_LOCK:
        entry = _get_entry_locked(workbook_id)
        history = entry.get("history") or []
        latest = history[-1]["result"] if history else None
    csv_text = result_to_csv(latest) if latest else ""
    if not csv_text:
        raise HTTPException(status_code=404, detail="nothing_to_export")
    return PlainTextResponse(
        csv_text,
        media_type="text/csv",
        headers={"content-disposition": 'attachment; filename="excel_analysis_result.csv"'},
    )
