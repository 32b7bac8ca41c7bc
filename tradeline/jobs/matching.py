"""Matching open jobs to contractor trade sets."""

import logging
from typing import Iterable, List, Optional

from tradeline.config import MarketplaceConfig
from tradeline.jobs.models import OPEN_STATUSES, ContractorProfile, Job
from tradeline.jobs.storage import JobStorage
from tradeline.taxonomy import normalize_trades

logger = logging.getLogger(__name__)


class JobMatcher:
    """Finds open jobs whose suggested trades overlap a contractor's trades.

    Results are newest first and capped at ``config.match_page_size``.

    A contractor with no declared trades gets every open job, unfiltered.
    That is the intended default: new contractors should see work on their
    dashboard before they have filled in a profile.
    """

    def __init__(self, storage: JobStorage, config: Optional[MarketplaceConfig] = None):
        self.storage = storage
        self.config = config or MarketplaceConfig()

    def find_open_jobs_for_trades(
        self, trades: Optional[Iterable[str]], limit: Optional[int] = None
    ) -> List[Job]:
        page_size = self.config.match_page_size
        if limit is not None:
            page_size = max(1, min(int(limit), page_size))

        trade_set = normalize_trades(trades, source="contractor trades")
        if not trade_set:
            logger.debug("No contractor trades, returning all open jobs")
            return self.storage.list_jobs(statuses=OPEN_STATUSES, limit=page_size)

        return self.storage.list_jobs(statuses=OPEN_STATUSES, trades=trade_set, limit=page_size)

    def find_matches_for_contractor(
        self, profile: ContractorProfile, limit: Optional[int] = None
    ) -> List[Job]:
        return self.find_open_jobs_for_trades(profile.trades, limit=limit)
