"""Free-text job classification.

- KeywordClassifier: local rule table, deterministic
- RemoteClassifier: chat model constrained to the taxonomy
- TextClassifier: strategy selection with optional fallback
"""

from tradeline.classifier.models import (
    LOCAL_STRATEGY,
    REMOTE_STRATEGY,
    ClassificationError,
    ClassificationResult,
)
from tradeline.classifier.remote import RemoteClassifier
from tradeline.classifier.repair import parse_model_json
from tradeline.classifier.rules import KeywordClassifier
from tradeline.classifier.scoring import score_confidence
from tradeline.classifier.service import TextClassifier

__all__ = [
    "ClassificationError",
    "ClassificationResult",
    "KeywordClassifier",
    "LOCAL_STRATEGY",
    "REMOTE_STRATEGY",
    "RemoteClassifier",
    "TextClassifier",
    "parse_model_json",
    "score_confidence",
]
