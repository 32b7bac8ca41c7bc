"""Trade taxonomy: the closed vocabulary of trade tags.

Every trade tag stored on a job or contractor profile, and every tag the
classifier returns, is one of ``TRADES``. Matching relies on set
intersection, so free-text tags would never match across users; anything
outside the vocabulary is dropped at the boundary and logged so taxonomy
drift shows up in the logs.

Usage:
    from tradeline.taxonomy import normalize_trades

    normalize_trades(["Plumbing", "plumber", "Wizardry"])
    # Returns: ["plumbing"]  ("Wizardry" is dropped and logged)
"""

import logging
import re
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

TAXONOMY_VERSION = 1

TRADES = (
    "plumbing",
    "electrical",
    "carpentry",
    "painting_decorating",
    "roofing",
    "heating_gas",
    "plastering",
    "tiling",
    "landscaping",
    "glazing",
    "building_construction",
    "locksmithing",
    "appliance_repair",
    "flooring",
)

DEFAULT_TRADE = "building_construction"

# Display names and role names seen in user input, keyed by slugified form
TRADE_ALIASES = {
    "plumber": "plumbing",
    "electrician": "electrical",
    "electrics": "electrical",
    "carpenter": "carpentry",
    "joinery": "carpentry",
    "painter": "painting_decorating",
    "painter_decorator": "painting_decorating",
    "painting": "painting_decorating",
    "decorating": "painting_decorating",
    "painting_and_decorating": "painting_decorating",
    "roofer": "roofing",
    "heating_engineer": "heating_gas",
    "heating_and_gas": "heating_gas",
    "gas": "heating_gas",
    "plasterer": "plastering",
    "tiler": "tiling",
    "gardener": "landscaping",
    "gardening": "landscaping",
    "glazier": "glazing",
    "window_door_installer": "glazing",
    "general_builder": "building_construction",
    "builder": "building_construction",
    "building": "building_construction",
    "building_and_construction": "building_construction",
    "construction": "building_construction",
    "locksmith": "locksmithing",
    "flooring_installer": "flooring",
}

_SLUG_SEPARATORS = re.compile(r"[\s\-/]+")

_TRADE_SET = frozenset(TRADES)


def list_trades() -> List[str]:
    """Return the taxonomy in its canonical order."""
    return list(TRADES)


def is_valid_trade(tag) -> bool:
    """True if ``tag`` is exactly a canonical trade slug."""
    return isinstance(tag, str) and tag in _TRADE_SET


def _slugify(raw: str) -> str:
    slug = raw.strip().lower().replace("&", " and ")
    slug = _SLUG_SEPARATORS.sub("_", slug)
    return slug.strip("_")


def normalize_trade(raw) -> Optional[str]:
    """Map raw input onto a canonical trade slug, or None if unrecognised."""
    if not isinstance(raw, str) or not raw.strip():
        return None
    slug = _slugify(raw)
    if slug in _TRADE_SET:
        return slug
    return TRADE_ALIASES.get(slug)


def normalize_trades(raw_tags: Optional[Iterable], source: str = "input") -> List[str]:
    """Normalise a list of raw trade tags.

    Deduplicates case-insensitively, keeps first-seen order, and drops
    anything outside the taxonomy. Each dropped tag is logged with its
    ``source`` so unknown model or user vocabulary can be tracked.
    """
    if not raw_tags:
        return []
    if isinstance(raw_tags, str):
        raw_tags = [raw_tags]

    result: List[str] = []
    for raw in raw_tags:
        tag = normalize_trade(raw)
        if tag is None:
            logger.warning(f"Dropping unknown trade tag {raw!r} from {source}")
            continue
        if tag not in result:
            result.append(tag)
    return result
