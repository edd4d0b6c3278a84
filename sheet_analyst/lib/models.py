from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator


Locale = Literal["en-US", "de-DE"]
SUPPORTED_LOCALES = ("en-US", "de-DE")
AUTO_LOCALE = "auto"

Row = Dict[str, Any]


class DatasetError(ValueError):
    """Raised when a dataset snapshot does not have the expected shape."""


@dataclass(frozen=True)
class Dataset:
    """
    Read-only snapshot of a decoded workbook.

    - sheets: sheet name -> ordered rows; rows may be sparse.
    - active_sheet: the sheet queries run against.
    """

    sheets: Mapping[str, Sequence[Row]] = field(default_factory=dict)
    active_sheet: str = ""

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Dataset":
        if not isinstance(payload, Mapping):
            raise DatasetError(f"dataset must be a mapping, got {type(payload).__name__}")
        sheets = payload.get("sheets")
        if not isinstance(sheets, Mapping):
            raise DatasetError("dataset is missing a 'sheets' mapping")
        active = payload.get("activeSheet", payload.get("active_sheet"))
        if active is None and sheets:
            active = next(iter(sheets))
        return cls(sheets=sheets, active_sheet=str(active or ""))

    @classmethod
    def single_sheet(cls, rows: Sequence[Row], name: str = "Sheet1") -> "Dataset":
        return cls(sheets={name: rows}, active_sheet=name)

    def active_rows(self) -> Sequence[Row]:
        if self.active_sheet not in self.sheets:
            raise DatasetError(f"active sheet not found: {self.active_sheet!r}")
        rows = self.sheets[self.active_sheet]
        if rows is None:
            raise DatasetError(f"sheet has no rows: {self.active_sheet!r}")
        return rows

    def columns(self) -> List[str]:
        rows = self.active_rows()
        if not rows:
            return []
        first = rows[0]
        if not isinstance(first, Mapping):
            raise DatasetError(f"row must be a mapping, got {type(first).__name__}")
        return [str(k) for k in first.keys()]


class QueryResult(BaseModel):
    """
    Answer produced for one query.

    Field aliases are the camelCase wire names shared with remote-AI results,
    so hosts can render and store either source the same way.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    answer: str
    explanation: str = ""
    data: Optional[List[Dict[str, Any]]] = None
    follow_up_questions: List[str] = Field(default_factory=list, alias="followUpQuestions")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    used_columns: List[str] = Field(default_factory=list, alias="usedColumns")
    operation: str = "unknown"

    @field_validator("used_columns")
    @classmethod
    def _dedupe_used_columns(cls, value: List[str]) -> List[str]:
        return dedupe_columns(value)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def dedupe_columns(columns: Sequence[str]) -> List[str]:
    out: List[str] = []
    for col in columns:
        if col not in out:
            out.append(col)
    return out


__all__ = [
    "AUTO_LOCALE",
    "Dataset",
    "DatasetError",
    "Locale",
    "QueryResult",
    "Row",
    "SUPPORTED_LOCALES",
    "dedupe_columns",
]
