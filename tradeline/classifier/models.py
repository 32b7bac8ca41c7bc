"""Classification output contract."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tradeline.errors import UpstreamError

LOCAL_STRATEGY = "local"
REMOTE_STRATEGY = "remote"


class ClassificationError(UpstreamError):
    """The remote classifier failed, timed out or returned unusable output."""


@dataclass
class ClassificationResult:
    """Structured reading of a customer's free-text job request.

    ``trade_tags`` only ever holds taxonomy tags. ``confidence`` is computed
    on our side from the fields that were filled in, never taken from the
    model. ``raw`` keeps the model's reply text for remote results.
    """

    title: str
    description: str
    trade_tags: List[str] = field(default_factory=list)
    urgency: Optional[str] = None
    budget_estimate: Optional[float] = None
    location_hint: Optional[str] = None
    confidence: float = 0.0
    strategy: str = LOCAL_STRATEGY
    raw: Optional[str] = None

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("Confidence must be between 0 and 1")
        if self.strategy not in (LOCAL_STRATEGY, REMOTE_STRATEGY):
            raise ValueError(f"Invalid strategy: {self.strategy}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "trade_tags": list(self.trade_tags),
            "urgency": self.urgency,
            "budget_estimate": self.budget_estimate,
            "location_hint": self.location_hint,
            "confidence": self.confidence,
            "strategy": self.strategy,
        }
