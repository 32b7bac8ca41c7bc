"""
Keyword classifier: the local, deterministic strategy.

Maps words in the customer's text onto trade tags with a fixed rule table,
and pulls urgency, budget and location hints out with regular expressions.
It needs no network, so it also serves as the fallback when the remote
classifier is down.

Usage:
    from tradeline.classifier.rules import KeywordClassifier

    KeywordClassifier().classify("Leaking tap in the kitchen, urgent. Budget €150")
    # trade_tags=["plumbing"], urgency="high", budget_estimate=150.0
"""

import logging
import re
from typing import List, Optional, Tuple

from tradeline.classifier.models import LOCAL_STRATEGY, ClassificationResult
from tradeline.classifier.scoring import NO_MATCH_CONFIDENCE, score_confidence
from tradeline.jobs.normalize import coerce_budget
from tradeline.taxonomy import DEFAULT_TRADE

logger = logging.getLogger(__name__)

TITLE_LENGTH = 60

# (trade, keywords) in the order trades are reported. Keywords match whole
# words, with an optional plural "s", so inflected forms are listed out.
TRADE_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (
        "plumbing",
        (
            "tap", "leak", "leaking", "leaky", "leaked", "drip", "dripping", "pipe",
            "piping", "water", "sink", "toilet", "drain", "drainage", "plumber", "plumbing",
        ),
    ),
    (
        "electrical",
        (
            "electric", "electrical", "electrician", "electricity", "socket", "plug",
            "light", "lighting", "switch", "switches", "wire", "wiring", "rewire",
            "rewiring", "fuse", "fuse box", "fuse boxes",
        ),
    ),
    (
        "painting_decorating",
        (
            "paint", "painting", "painter", "decor", "decorate", "decorating",
            "decorator", "wall color", "wall colour", "wallpaper", "wallpapering",
        ),
    ),
    (
        "carpentry",
        (
            "wood", "wooden", "door", "cabinet", "shelf", "shelves", "shelving", "deck",
            "decking", "skirting", "carpenter", "carpentry",
        ),
    ),
    ("roofing", ("roof", "roofing", "roofer", "gutter", "slate", "chimney")),
    ("heating_gas", ("boiler", "heating", "heater", "radiator", "gas")),
    ("plastering", ("plaster", "plastering", "plasterer", "ceiling", "render", "rendering")),
    (
        "tiling",
        (
            "tile", "tiled", "tiling", "tiler", "bathroom floor", "kitchen floor", "grout",
            "grouting",
        ),
    ),
    (
        "landscaping",
        ("garden", "gardening", "gardener", "lawn", "patio", "fence", "fencing", "hedge"),
    ),
    ("glazing", ("window", "glass", "glazing", "glazier", "double glazed", "double glazing")),
    (
        "building_construction",
        ("build", "building", "builder", "built", "extension", "wall", "brick", "foundation"),
    ),
    ("locksmithing", ("lock", "locked out", "locksmith", "key")),
    (
        "appliance_repair",
        (
            "appliance", "washing machine", "dishwasher", "fridge", "freezer", "oven",
            "dryer", "tumble dryer",
        ),
    ),
    ("flooring", ("floor", "flooring", "floorboard", "laminate", "carpet", "parquet")),
)

URGENCY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (
        "high",
        (
            "urgent", "urgently", "emergency", "asap", "immediately", "right away", "today",
            "burst", "flood", "flooding", "flooded",
        ),
    ),
    ("medium", ("this week", "soon", "next few days")),
    ("low", ("no rush", "whenever", "flexible", "next month", "not urgent")),
)


def _word_pattern(keywords: Tuple[str, ...]) -> re.Pattern:
    alternatives = "|".join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternatives})s?\b")


_TRADE_PATTERNS = [(trade, _word_pattern(words)) for trade, words in TRADE_RULES]
_URGENCY_PATTERNS = [(level, _word_pattern(words)) for level, words in URGENCY_RULES]

_AMOUNT = r"(\d[\d,]*(?:\.\d+)?)"
_BUDGET = re.compile(
    rf"[€$£]\s?{_AMOUNT}|{_AMOUNT}\s?(?:euros?|eur|dollars?|usd|pounds?|gbp)\b",
    re.IGNORECASE,
)
_LOCATION = re.compile(r"\bin\s+((?:[A-Z][\w'\-]*)(?:\s+[A-Z][\w'\-]*)*)")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+|\n+")


class KeywordClassifier:
    """Rule-table classifier. Same input always gives the same output."""

    strategy = LOCAL_STRATEGY

    def classify(self, text: str) -> ClassificationResult:
        description = " ".join(text.split())
        lowered = description.lower()

        trades = self.match_trades(lowered)
        urgency = self.match_urgency(lowered)
        budget = self.extract_budget(description)
        location = self.extract_location(description)
        title = self.make_title(text)

        if trades:
            confidence = score_confidence(title, description, trades, urgency, budget)
        else:
            logger.debug("No trade keywords matched, using default trade")
            trades = [DEFAULT_TRADE]
            confidence = min(
                NO_MATCH_CONFIDENCE, score_confidence(title, description, [], urgency, budget)
            )

        return ClassificationResult(
            title=title,
            description=description,
            trade_tags=trades,
            urgency=urgency,
            budget_estimate=budget,
            location_hint=location,
            confidence=confidence,
            strategy=self.strategy,
        )

    @staticmethod
    def match_trades(lowered: str) -> List[str]:
        return [trade for trade, pattern in _TRADE_PATTERNS if pattern.search(lowered)]

    @staticmethod
    def match_urgency(lowered: str) -> Optional[str]:
        # "not urgent" must win over "urgent"
        matches = [level for level, pattern in _URGENCY_PATTERNS if pattern.search(lowered)]
        if "low" in matches and re.search(r"\bnot urgent|\bno rush", lowered):
            return "low"
        return matches[0] if matches else None

    @staticmethod
    def extract_budget(text: str) -> Optional[float]:
        match = _BUDGET.search(text)
        if not match:
            return None
        return coerce_budget(match.group(1) or match.group(2))

    @staticmethod
    def extract_location(text: str) -> Optional[str]:
        match = _LOCATION.search(text)
        return match.group(1).strip() if match else None

    @staticmethod
    def make_title(text: str) -> str:
        first = _SENTENCE_END.split(text.strip(), maxsplit=1)[0]
        first = " ".join(first.split()).rstrip(".!?")
        return first[:TITLE_LENGTH].rstrip() or "Untitled"
