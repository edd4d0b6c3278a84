from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


# Declaration order is the classifier's tie-break order: on equal scores the
# earlier intent wins.
INTENT_ORDER: Tuple[str, ...] = (
    "average",
    "sum",
    "count",
    "min",
    "max",
    "correlation",
    "unique",
    "overview",
    "search",
    "filter",
    "trend",
)

UNKNOWN_INTENT = "unknown"

INTENT_PHRASES: Dict[str, Tuple[str, ...]] = {
    "average": (
        "average",
        "mean",
        "avg",
        "durchschnitt",
        "mittelwert",
        "moyenne",
        "media",
        "promedio",
        "プロmedio",
        "平均",
        "what is the average",
        "calculate the average",
        "find the mean",
        "show me the average",
    ),
    "sum": (
        "sum",
        "total",
        "add",
        "summe",
        "gesamt",
        "somme",
        "total",
        "suma",
        "合計",
        "总和",
        "what is the sum",
        "calculate the sum",
        "add up",
        "total of",
        "sum of",
    ),
    "count": (
        "count",
        "how many",
        "number of",
        "anzahl",
        "wie viele",
        "combien",
        "cuántos",
        "quanti",
        "数える",
        "计数",
        "count the",
        "how many are there",
        "number of items",
        "count all",
    ),
    "min": (
        "minimum",
        "min",
        "smallest",
        "lowest",
        "kleinste",
        "minimum",
        "mínimo",
        "minimo",
        "最小",
        "最小值",
        "what is the minimum",
        "find the lowest",
        "what's the smallest",
        "show me the minimum",
    ),
    "max": (
        "maximum",
        "max",
        "largest",
        "highest",
        "größte",
        "maximum",
        "máximo",
        "massimo",
        "最大",
        "最大值",
        "what is the maximum",
        "find the highest",
        "what's the largest",
        "show me the maximum",
    ),
    "correlation": (
        "correlation",
        "relationship",
        "relates to",
        "korrelation",
        "zusammenhang",
        "corrélation",
        "correlación",
        "correlazione",
        "相関",
        "相关性",
        "how does * relate to",
        "relationship between",
        "correlation between",
        "how * correlates with",
    ),
    "unique": (
        "unique",
        "distinct",
        "different",
        "einzigartig",
        "unterschiedlich",
        "unique",
        "único",
        "unico",
        "ユニーク",
        "唯一",
        "unique values",
        "distinct values",
        "list of unique",
        "all different",
        "show me unique",
    ),
    "overview": (
        "overview",
        "summary",
        "describe",
        "überblick",
        "zusammenfassung",
        "aperçu",
        "resumen",
        "panoramica",
        "概要",
        "概述",
        "give me an overview",
        "summarize the data",
        "describe the dataset",
        "what's in the data",
    ),
    "search": (
        "is",
        "find",
        "search",
        "look for",
        "has",
        "contains",
        "where",
        "ist",
        "finde",
        "suche",
        "enthält",
        "wo",
        "rechercher",
        "buscar",
        "cercare",
        "検索",
        "搜索",
        "find records where",
        "search for rows with",
        "look for entries",
    ),
    "filter": (
        "filter",
        "only show",
        "filtern",
        "nur zeigen",
        "filtrer",
        "filtrar",
        "filtrare",
        "フィルター",
        "筛选",
        "filter by",
        "only display",
        "show only",
        "exclude",
    ),
    "trend": (
        "trend",
        "pattern",
        "over time",
        "change",
        "trend",
        "muster",
        "im laufe der zeit",
        "änderung",
        "tendance",
        "tendencia",
        "andamento",
        "トレンド",
        "趋势",
        "show me the trend",
        "how has * changed",
        "pattern of",
    ),
}


@dataclass(frozen=True)
class IntentPattern:
    """A literal trigger phrase, or a template whose `*` separates required fragments."""

    intent: str
    text: str

    @property
    def is_wildcard(self) -> bool:
        return "*" in self.text

    @property
    def is_multi_word(self) -> bool:
        return " " in self.text

    @property
    def segments(self) -> List[str]:
        return [part for part in self.text.split("*") if part]

    def matches(self, lowered_query: str) -> bool:
        if self.is_wildcard:
            parts = self.segments
            return bool(parts) and all(part in lowered_query for part in parts)
        return self.text in lowered_query


# Generic field words used to guess which column a search targets.
COLUMN_KEYWORDS: Tuple[str, ...] = (
    "id",
    "name",
    "title",
    "date",
    "time",
    "price",
    "cost",
    "value",
    "number",
    "email",
    "phone",
    "address",
    "city",
    "state",
    "country",
    "category",
    "type",
    "status",
    "description",
    "quantity",
    "amount",
)


def build_lexicon(phrases: Optional[Dict[str, Tuple[str, ...]]] = None) -> Dict[str, List[IntentPattern]]:
    source = INTENT_PHRASES if phrases is None else phrases
    return {intent: [IntentPattern(intent, text) for text in texts] for intent, texts in source.items()}


__all__ = [
    "COLUMN_KEYWORDS",
    "INTENT_ORDER",
    "INTENT_PHRASES",
    "IntentPattern",
    "UNKNOWN_INTENT",
    "build_lexicon",
]
