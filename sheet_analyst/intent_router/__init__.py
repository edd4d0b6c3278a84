from sheet_analyst.intent_router.intent_router import IntentClassifier, classify, default_classifier

__all__ = ["IntentClassifier", "classify", "default_classifier"]
