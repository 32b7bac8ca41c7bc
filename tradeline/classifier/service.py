"""TextClassifier: picks a classification strategy for free text."""

import logging
from typing import Optional

from tradeline.classifier.models import ClassificationError, ClassificationResult
from tradeline.classifier.remote import RemoteClassifier
from tradeline.classifier.rules import KeywordClassifier
from tradeline.errors import ValidationError

logger = logging.getLogger(__name__)


class TextClassifier:
    """Classify job text with the remote model, or the keyword rules.

    Args:
        remote: Optional ``RemoteClassifier``. Without one, every request
            is answered by the keyword rules.
        local: Keyword classifier (default ``KeywordClassifier()``).
        fallback_on_error: When True, a remote failure is logged and the
            keyword rules answer instead. When False the ClassificationError
            propagates to the caller.
    """

    def __init__(
        self,
        remote: Optional[RemoteClassifier] = None,
        local: Optional[KeywordClassifier] = None,
        fallback_on_error: bool = False,
    ):
        self.remote = remote
        self.local = local or KeywordClassifier()
        self.fallback_on_error = fallback_on_error

    @property
    def strategy(self) -> str:
        return (self.remote or self.local).strategy

    def classify(self, text) -> ClassificationResult:
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("text required")

        if self.remote is None:
            return self.local.classify(text)

        try:
            return self.remote.classify(text)
        except ClassificationError as exc:
            if not self.fallback_on_error:
                raise
            logger.warning(f"Remote classification failed, falling back to keyword rules: {exc}")
            return self.local.classify(text)
