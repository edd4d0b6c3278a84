import io
import logging
import math
from typing import Any, Dict, List, Optional

import pandas as pd

from sheet_analyst.lib.models import Dataset

DEF_MAX_ROWS = 200000


def guess_ext(filename: Optional[str], content_type: Optional[str]) -> str:
    if filename and "." in filename:
        return filename.rsplit(".", 1)[-1].lower()
    if content_type:
        ct = content_type.lower()
        if "csv" in ct:
            return "csv"
        if "tab-separated" in ct or "tsv" in ct:
            return "tsv"
        if "excel" in ct or "spreadsheet" in ct:
            return "xlsx"
        if "json" in ct:
            return "json"
    return ""


def _read_frames(data: bytes, ext: str, max_rows: int) -> Dict[str, pd.DataFrame]:
    if ext in {"xlsx", "xlsm", "xls"}:
        return pd.read_excel(io.BytesIO(data), sheet_name=None, engine="openpyxl", nrows=max_rows)
    if ext in {"json", "jsonl"}:
        return {"Sheet1": pd.read_json(io.BytesIO(data), lines=(ext == "jsonl"))}
    if ext == "tsv":
        return {"Sheet1": pd.read_csv(io.BytesIO(data), sep="\t", nrows=max_rows, low_memory=False)}
    return {"Sheet1": pd.read_csv(io.BytesIO(data), nrows=max_rows, low_memory=False)}


def _to_cell(value: Any) -> Any:
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    # numpy scalars -> python scalars
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        try:
            return value.item()
        except (TypeError, ValueError):
            return value
    return value


def frame_to_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Header-keyed rows with empty cells as None; blank headers and blank rows are dropped."""
    keep = [c for c in df.columns if str(c).strip() and not str(c).startswith("Unnamed:")]
    rows: List[Dict[str, Any]] = []
    for record in df[keep].to_dict(orient="records"):
        row = {str(k): _to_cell(v) for k, v in record.items()}
        if any(v is not None and v != "" for v in row.values()):
            rows.append(row)
    return rows


def decode_workbook(
    data: bytes,
    filename: str = "",
    content_type: str = "",
    max_rows: int = DEF_MAX_ROWS,
) -> Dataset:
    """Decode spreadsheet bytes into a Dataset whose first sheet is active."""
    ext = guess_ext(filename, content_type)
    frames = _read_frames(data, ext, max_rows)
    sheets: Dict[str, List[Dict[str, Any]]] = {}
    for name, df in frames.items():
        sheets[str(name)] = frame_to_rows(df.head(max_rows))
    logging.info(
        "event=workbook_decoded ext=%s sheets=%d rows=%s",
        ext or "csv",
        len(sheets),
        {name: len(rows) for name, rows in sheets.items()},
    )
    return Dataset(sheets=sheets, active_sheet=next(iter(sheets), ""))


def read_workbook_file(path: str, max_rows: int = DEF_MAX_ROWS) -> Dataset:
    with open(path, "rb") as f:
        data = f.read()
    return decode_workbook(data, filename=path, max_rows=max_rows)


__all__ = ["DEF_MAX_ROWS", "decode_workbook", "frame_to_rows", "guess_ext", "read_workbook_file"]
