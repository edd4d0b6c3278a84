from typing import FrozenSet

GERMAN_FUNCTION_WORDS: FrozenSet[str] = frozenset(
    {
        "der",
        "die",
        "das",
        "und",
        "ist",
        "in",
        "zu",
        "den",
        "mit",
        "auf",
        "für",
        "nicht",
        "auch",
        "sich",
        "von",
        "eine",
        "aber",
    }
)

GERMAN_RATIO_THRESHOLD = 0.15


def german_word_ratio(text: str) -> float:
    words = (text or "").lower().split(" ")
    if not words:
        return 0.0
    hits = sum(1 for word in words if word in GERMAN_FUNCTION_WORDS)
    return hits / len(words)


def detect_locale(text: str, threshold: float = GERMAN_RATIO_THRESHOLD) -> str:
    """Resolve the ``auto`` locale for a transcript: German when enough function words appear."""
    if not (text or "").strip():
        return "en-US"
    return "de-DE" if german_word_ratio(text) > threshold else "en-US"


__all__ = ["GERMAN_FUNCTION_WORDS", "GERMAN_RATIO_THRESHOLD", "detect_locale", "german_word_ratio"]
