import logging
from typing import Dict, List, Optional, Sequence, Tuple

from sheet_analyst.lib.lexicon import INTENT_ORDER, UNKNOWN_INTENT, IntentPattern, build_lexicon

MULTI_WORD_WEIGHT = 1.5


class IntentClassifier:
    """
    Scores a query against the lexicon and picks the best-matching intent.

    Every pattern found in the lowercased query adds one match. Intents that own
    at least one multi-word phrase have their match count weighted by 1.5.
    Ties keep the intent declared first, and a best score of zero means
    ``unknown``.
    """

    def __init__(
        self,
        lexicon: Optional[Dict[str, List[IntentPattern]]] = None,
        order: Optional[Sequence[str]] = None,
    ) -> None:
        self._lexicon = lexicon if lexicon is not None else build_lexicon()
        self._order: Tuple[str, ...] = tuple(order) if order is not None else tuple(
            [i for i in INTENT_ORDER if i in self._lexicon] + [i for i in self._lexicon if i not in INTENT_ORDER]
        )
        self._weights: Dict[str, float] = {
            intent: (MULTI_WORD_WEIGHT if any(p.is_multi_word for p in patterns) else 1.0)
            for intent, patterns in self._lexicon.items()
        }

    @property
    def intents(self) -> Tuple[str, ...]:
        return self._order

    def match_count(self, intent: str, lowered_query: str) -> int:
        return sum(1 for pattern in self._lexicon.get(intent) or [] if pattern.matches(lowered_query))

    def score(self, query: str) -> Dict[str, float]:
        lowered = (query or "").lower()
        return {intent: self.match_count(intent, lowered) * self._weights.get(intent, 1.0) for intent in self._order}

    def classify_with_score(self, query: str) -> Tuple[str, float]:
        best_intent = UNKNOWN_INTENT
        best_score = 0.0
        for intent, score in self.score(query).items():
            if score > best_score:
                best_intent = intent
                best_score = score
        return (best_intent if best_score > 0 else UNKNOWN_INTENT), best_score

    def classify(self, query: str) -> str:
        intent, score = self.classify_with_score(query)
        logging.debug("event=intent_classified intent=%s score=%.2f", intent, score)
        return intent


_DEFAULT_CLASSIFIER: Optional[IntentClassifier] = None


def default_classifier() -> IntentClassifier:
    global _DEFAULT_CLASSIFIER
    if _DEFAULT_CLASSIFIER is None:
        _DEFAULT_CLASSIFIER = IntentClassifier()
    return _DEFAULT_CLASSIFIER


def classify(query: str) -> str:
    return default_classifier().classify(query)
