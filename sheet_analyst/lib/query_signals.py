import re
from typing import Iterable, List, Optional, Sequence

from sheet_analyst.lib.lexicon import COLUMN_KEYWORDS


DIGIT_RUN_RE = re.compile(r"\d+", re.ASCII)
QUOTED_VALUE_RE = re.compile(r"\"([^\"]*)\"|'([^']*)'")
IDENTIFIER_VALUE_RE = re.compile(r"[a-zA-Z]+-?\d+", re.ASCII)


def resolve_columns(query: str, columns: Sequence[str]) -> List[str]:
    """Columns named in the query, in sheet order, each at most once."""
    lower = (query or "").lower()
    hits: List[str] = []
    for col in columns:
        name = str(col)
        if not name.strip():
            continue
        if name.lower() in lower and name not in hits:
            hits.append(name)
    return hits


def extract_column_keywords(query: str, vocabulary: Iterable[str] = COLUMN_KEYWORDS) -> List[str]:
    lower = (query or "").lower()
    return [word for word in vocabulary if word.lower() in lower]


def find_target_column(keywords: Sequence[str], columns: Sequence[str]) -> Optional[str]:
    for keyword in keywords:
        needle = keyword.lower()
        for col in columns:
            if needle in str(col).lower():
                return str(col)
    return None


def extract_search_values(query: str) -> List[str]:
    """
    Candidate literal values mentioned in the query.

    Digit runs come first, then quoted strings, then identifier tokens such as
    ``ID123`` or ``id-456``. Overlaps between the scans are kept.
    """
    text = query or ""
    values: List[str] = []
    values.extend(DIGIT_RUN_RE.findall(text))
    values.extend(m.group(0)[1:-1] for m in QUOTED_VALUE_RE.finditer(text))
    values.extend(IDENTIFIER_VALUE_RE.findall(text))
    return values


__all__ = [
    "DIGIT_RUN_RE",
    "IDENTIFIER_VALUE_RE",
    "QUOTED_VALUE_RE",
    "extract_column_keywords",
    "extract_search_values",
    "find_target_column",
    "resolve_columns",
]
