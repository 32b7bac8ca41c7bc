"""Server-side confidence scoring for classification results."""

from typing import Optional, Sequence

BASE_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.99

# Confidence reported when no keyword rule matched and the default trade was used
NO_MATCH_CONFIDENCE = 0.3


def score_confidence(
    title: Optional[str],
    description: Optional[str],
    trade_tags: Sequence[str],
    urgency: Optional[str] = None,
    budget: Optional[float] = None,
) -> float:
    """Score how complete a classification is.

    Starts at 0.5 and adds 0.2 for at least one trade, 0.1 for a
    description longer than 30 characters, 0.05 for a title longer than
    3 characters, 0.05 for an urgency and 0.1 for a budget. Capped at 0.99.
    """
    score = BASE_CONFIDENCE
    if trade_tags:
        score += 0.2
    if description and len(description) > 30:
        score += 0.1
    if title and len(title) > 3:
        score += 0.05
    if urgency:
        score += 0.05
    if budget is not None:
        score += 0.1
    return round(min(score, MAX_CONFIDENCE), 4)
