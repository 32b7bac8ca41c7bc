"""Write-time normalisation of job fields.

Trade lists and budgets arrive from forms, classifier output and API
clients in many shapes. They are cleaned here before a Job is built, so
storage only ever sees canonical values.
"""

import logging
import re
from typing import Iterable, List, Optional, Tuple

from tradeline.taxonomy import normalize_trade, normalize_trades

logger = logging.getLogger(__name__)

_BUDGET_CHARS = re.compile(r"[^\d.,\-]")
_THOUSANDS = re.compile(r"^\d{1,3}(,\d{3})+(\.\d+)?$")
_PLAIN_NUMBER = re.compile(r"^\d+(\.\d+)?$")


def normalize_job_trades(
    suggested: Optional[Iterable],
    primary: Optional[str] = None,
) -> Tuple[List[str], Optional[str]]:
    """Clean a job's suggested trades and primary trade together.

    Returns ``(suggested_trades, primary_trade)`` where:
    - suggested trades are deduplicated and restricted to the taxonomy;
    - a valid primary trade missing from the list is prepended to it;
    - with no valid primary, the first suggested trade is primary, so
      ``primary_trade`` is None only when there are no trades.
    """
    trades = normalize_trades(suggested, source="job input")

    primary_tag = None
    if primary:
        primary_tag = normalize_trade(primary)
        if primary_tag is None:
            logger.warning(f"Dropping unknown primary trade {primary!r} from job input")

    if primary_tag is not None and primary_tag not in trades:
        trades.insert(0, primary_tag)
    if primary_tag is None and trades:
        primary_tag = trades[0]

    return trades, primary_tag


def coerce_budget(value) -> Optional[float]:
    """Coerce budget input to a non-negative float, or None.

    Numbers pass through. Strings are stripped to digits, commas, periods
    and dashes and then parsed:

        "€150"      -> 150.0
        "1,500"     -> 1500.0   (comma before three digits groups thousands)
        "12,50"     -> 12.5     (otherwise a comma is a decimal separator)
        "100-200"   -> None     (ranges are not averaged)
        "call me"   -> None

    Garbage never raises.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value >= 0 else None
    if not isinstance(value, str):
        return None

    cleaned = _BUDGET_CHARS.sub("", value).strip()
    if not cleaned:
        return None

    if _THOUSANDS.match(cleaned):
        cleaned = cleaned.replace(",", "")
    elif cleaned.count(",") == 1 and "." not in cleaned:
        cleaned = cleaned.replace(",", ".")

    if not _PLAIN_NUMBER.match(cleaned):
        return None
    return float(cleaned)
