"""
Remote classifier: a chat model reads the job text.

The model is told the exact taxonomy and a strict JSON schema. Whatever it
returns is still treated as untrusted input: tags go back through the
taxonomy, the budget through ``coerce_budget``, and confidence is scored
here rather than read from the reply.
"""

import logging
from typing import Any, Optional

from tradeline.classifier.models import (
    REMOTE_STRATEGY,
    ClassificationError,
    ClassificationResult,
)
from tradeline.classifier.repair import parse_model_json
from tradeline.classifier.scoring import score_confidence
from tradeline.jobs.models import Urgency
from tradeline.jobs.normalize import coerce_budget
from tradeline.models.base import ChatModel, ModelError
from tradeline.taxonomy import DEFAULT_TRADE, list_trades, normalize_trades

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200
FALLBACK_TITLE_LENGTH = 60

SYSTEM_PROMPT_TEMPLATE = """\
You are an assistant that converts a customer's job request (free text) into
a strict JSON object with this schema:
{{
  "title": string,
  "description": string,
  "trade_types": string[],
  "urgency": "low"|"medium"|"high"|null,
  "estimated_budget": string | null,
  "location_hint": string | null,
  "tags": string[]
}}
"trade_types" must only contain values from this list: {trades}.
Return ONLY valid JSON (no explanation). Keep descriptions concise.
"""


def build_system_prompt() -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(trades=", ".join(list_trades()))


def build_user_prompt(text: str) -> str:
    flat = text.replace("\n", " ")
    return f'User: """{flat}""" \n\nReturn the JSON now.'


def _clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = " ".join(str(value).split())
    return value or None


class RemoteClassifier:
    """Classifier backed by a ``ChatModel`` (OpenAI or Anthropic adapter).

    Raises ClassificationError on network errors, timeouts, empty or
    unparsable output. It never substitutes a default answer itself;
    falling back to the keyword rules is ``TextClassifier``'s decision.
    """

    strategy = REMOTE_STRATEGY

    def __init__(self, model: ChatModel):
        self.model = model

    def classify(self, text: str) -> ClassificationResult:
        try:
            raw = self.model.complete(build_system_prompt(), build_user_prompt(text))
        except ModelError as exc:
            logger.error(f"Remote classifier call failed | model={self.model.model_id}: {exc}")
            raise ClassificationError(f"Classifier unavailable: {exc.message}") from exc

        parsed = parse_model_json(raw)
        return self._to_result(parsed, text, raw)

    def _to_result(self, parsed: dict, text: str, raw: str) -> ClassificationResult:
        raw_tags = parsed.get("trade_types")
        if raw_tags is None:
            raw_tags = parsed.get("trades")
        if isinstance(raw_tags, str):
            raw_tags = [raw_tags]
        if not isinstance(raw_tags, list):
            raw_tags = []
        trades = normalize_trades(raw_tags, source="classifier")

        description = _clean_str(parsed.get("description")) or " ".join(text.split())
        title = _clean_str(parsed.get("title")) or description[:FALLBACK_TITLE_LENGTH].rstrip()
        title = title[:MAX_TITLE_LENGTH].rstrip()

        urgency = _clean_str(parsed.get("urgency"))
        urgency = urgency.lower() if urgency else None
        if urgency not in {u.value for u in Urgency}:
            urgency = None

        budget = coerce_budget(parsed.get("estimated_budget"))
        location = _clean_str(parsed.get("location_hint"))

        confidence = score_confidence(title, description, trades, urgency, budget)
        if not trades:
            logger.info("Classifier returned no usable trade, using default trade")
            trades = [DEFAULT_TRADE]

        return ClassificationResult(
            title=title,
            description=description,
            trade_tags=trades,
            urgency=urgency,
            budget_estimate=budget,
            location_hint=location,
            confidence=confidence,
            strategy=self.strategy,
            raw=raw,
        )
