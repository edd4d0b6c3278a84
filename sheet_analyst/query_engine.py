import contextvars
import logging
import os
import random
import time
import uuid
from typing import Any, Callable, Dict, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field

from sheet_analyst import handlers
from sheet_analyst.intent_router import IntentClassifier, default_classifier
from sheet_analyst.lib.models import SUPPORTED_LOCALES, Dataset, QueryResult
from sheet_analyst.lib.query_signals import resolve_columns


_QUERY_ID_CTX: contextvars.ContextVar[str] = contextvars.ContextVar("sheet_analyst_query_id", default="-")


class _QueryTraceLoggingFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "_query_trace_injected", False):
            return True
        query_id = (_QUERY_ID_CTX.get() or "-").strip() or "-"
        record.msg = f"query_id={query_id} {record.msg}"
        record._query_trace_injected = True
        return True


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_choice(name: str, choices: Tuple[str, ...], default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    return raw if raw in choices else default


def _safe_preview(text: Any, limit: int = 200) -> str:
    s = str(text or "")
    if len(s) <= limit:
        return s
    return s[:limit] + "...(truncated)"


Handler = Callable[[str, Any, list, str], QueryResult]


class QueryEngine(object):
    """Offline dispatcher: classify the query, resolve columns, run the matching operation."""

    class Valves(BaseModel):
        default_locale: Literal["en-US", "de-DE"] = Field(
            default=_env_choice("SHEET_ANALYST_DEFAULT_LOCALE", SUPPORTED_LOCALES, "en-US")
        )
        display_limit: int = Field(default=_env_int("SHEET_ANALYST_DISPLAY_LIMIT", handlers.DISPLAY_LIMIT), ge=1)
        unique_answer_limit: int = Field(
            default=_env_int("SHEET_ANALYST_UNIQUE_ANSWER_LIMIT", handlers.UNIQUE_ANSWER_LIMIT), ge=1
        )
        unique_data_limit: int = Field(
            default=_env_int("SHEET_ANALYST_UNIQUE_DATA_LIMIT", handlers.UNIQUE_DATA_LIMIT), ge=1
        )
        overview_sample_rows: int = Field(
            default=_env_int("SHEET_ANALYST_OVERVIEW_SAMPLE_ROWS", handlers.OVERVIEW_SAMPLE_ROWS), ge=1
        )
        correlation_min_samples: int = Field(
            default=_env_int("SHEET_ANALYST_CORRELATION_MIN_SAMPLES", handlers.CORRELATION_MIN_SAMPLES), ge=2
        )
        correlation_pairing: Literal["independent", "row_aligned"] = Field(
            default=_env_choice("SHEET_ANALYST_CORRELATION_PAIRING", handlers.CORRELATION_PAIRINGS, "independent")
        )
        fallback_confidence_threshold: float = Field(
            default=_env_float("SHEET_ANALYST_FALLBACK_THRESHOLD", 0.5), ge=0.0, le=1.0
        )
        max_follow_ups: int = Field(default=_env_int("SHEET_ANALYST_MAX_FOLLOW_UPS", handlers.MAX_FOLLOW_UPS), ge=0)
        debug: bool = Field(default=_env_bool("SHEET_ANALYST_DEBUG", False))

    def __init__(
        self,
        valves: Optional["QueryEngine.Valves"] = None,
        classifier: Optional[IntentClassifier] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.valves = valves or self.Valves()
        self._classifier = classifier or default_classifier()
        self._rng = rng or random.Random()
        root_logger = logging.getLogger()
        if not any(isinstance(f, _QueryTraceLoggingFilter) for f in root_logger.filters):
            root_logger.addFilter(_QueryTraceLoggingFilter())
        self._handlers: Dict[str, Handler] = {
            "average": self._average,
            "sum": self._sum,
            "count": self._count,
            "min": self._min,
            "max": self._max,
            "correlation": self._correlation,
            "unique": self._unique,
        }
        if self.valves.debug:
            logging.info(
                "event=query_engine_config default_locale=%s display_limit=%s pairing=%s fallback_threshold=%.2f",
                self.valves.default_locale,
                self.valves.display_limit,
                self.valves.correlation_pairing,
                self.valves.fallback_confidence_threshold,
            )

    @property
    def classifier(self) -> IntentClassifier:
        return self._classifier

    def resolve_locale(self, locale: Optional[str]) -> str:
        if locale in SUPPORTED_LOCALES:
            return str(locale)
        logging.info(
            "event=locale_fallback requested=%s used=%s", locale, self.valves.default_locale
        )
        return self.valves.default_locale

    def _average(self, query, rows, mentioned, locale):
        return handlers.calculate_average(query, rows, mentioned, locale, display_limit=self.valves.display_limit)

    def _sum(self, query, rows, mentioned, locale):
        return handlers.calculate_sum(query, rows, mentioned, locale, display_limit=self.valves.display_limit)

    def _count(self, query, rows, mentioned, locale):
        return handlers.count_values(query, rows, mentioned, locale, display_limit=self.valves.display_limit)

    def _min(self, query, rows, mentioned, locale):
        return handlers.find_minimum(query, rows, mentioned, locale, display_limit=self.valves.display_limit)

    def _max(self, query, rows, mentioned, locale):
        return handlers.find_maximum(query, rows, mentioned, locale, display_limit=self.valves.display_limit)

    def _correlation(self, query, rows, mentioned, locale):
        return handlers.calculate_correlation(
            query,
            rows,
            mentioned,
            locale,
            display_limit=self.valves.display_limit,
            min_samples=self.valves.correlation_min_samples,
            pairing=self.valves.correlation_pairing,
        )

    def _unique(self, query, rows, mentioned, locale):
        return handlers.find_unique_values(
            query,
            rows,
            mentioned,
            locale,
            answer_limit=self.valves.unique_answer_limit,
            data_limit=self.valves.unique_data_limit,
        )

    def _search(self, query: str, rows: Any, columns: list, locale: str) -> QueryResult:
        return handlers.search_for_value(
            query, rows, columns, locale, display_limit=self.valves.display_limit, rng=self._rng
        )

    def _dispatch(self, query: str, dataset: Dataset, locale: str) -> QueryResult:
        rows = dataset.active_rows()
        columns = dataset.columns()
        intent, score = self._classifier.classify_with_score(query)
        mentioned = resolve_columns(query, columns)
        logging.info(
            "event=query_classified intent=%s score=%.2f mentioned_columns=%s sheet=%s rows=%d",
            intent,
            score,
            mentioned,
            dataset.active_sheet,
            len(rows),
        )
        if self.valves.debug:
            logging.info("event=intent_scores scores=%s", self._classifier.score(query))

        handler = self._handlers.get(intent)
        if handler is not None:
            return handler(query, rows, mentioned, locale)
        if intent == "overview":
            return handlers.get_data_overview(rows, columns, locale, sample_rows=self.valves.overview_sample_rows)
        if intent == "search":
            return self._search(query, rows, columns, locale)

        # filter, trend, unknown and anything without a dedicated handler
        result = self._search(query, rows, columns, locale)
        if result.confidence <= self.valves.fallback_confidence_threshold:
            logging.info(
                "event=query_fallback intent=%s search_confidence=%.2f", intent, result.confidence
            )
            return handlers.not_understood_result(columns, locale, self._rng, self.valves.max_follow_ups)
        return result

    def execute(
        self,
        query: str,
        dataset: Union[Dataset, Mapping[str, Any]],
        locale: Optional[str] = None,
    ) -> QueryResult:
        token = _QUERY_ID_CTX.set(uuid.uuid4().hex[:12])
        started = time.perf_counter()
        used_locale = self.resolve_locale(locale)
        try:
            snapshot = dataset if isinstance(dataset, Dataset) else Dataset.from_mapping(dataset)
            result = self._dispatch(str(query or ""), snapshot, used_locale)
            logging.info(
                "event=query_done status=ok operation=%s confidence=%.2f used_columns=%s elapsed_ms=%.1f query_preview=%s",
                result.operation,
                result.confidence,
                result.used_columns,
                (time.perf_counter() - started) * 1000.0,
                _safe_preview(query),
            )
            return result
        except Exception as exc:
            logging.exception(
                "event=query_done status=error error=%s query_preview=%s",
                type(exc).__name__,
                _safe_preview(query),
            )
            return handlers.error_result(used_locale)
        finally:
            _QUERY_ID_CTX.reset(token)


_DEFAULT_ENGINE: Optional[QueryEngine] = None


def execute(query: str, dataset: Union[Dataset, Mapping[str, Any]], locale: Optional[str] = None) -> QueryResult:
    """Run one query with a process-wide engine built from environment settings."""
    global _DEFAULT_ENGINE
    if _DEFAULT_ENGINE is None:
        _DEFAULT_ENGINE = QueryEngine()
    return _DEFAULT_ENGINE.execute(query, dataset, locale)
