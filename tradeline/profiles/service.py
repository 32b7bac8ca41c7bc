"""
Contractor profile service.

A contractor declares a primary trade, secondary trades and a home area
once; the job matcher falls back to that profile whenever the dashboard
asks for matches without naming trades.
"""

import logging
from typing import Iterable, List, Optional

from tradeline.config import MarketplaceConfig
from tradeline.errors import NotFoundError, ValidationError
from tradeline.jobs.matching import JobMatcher
from tradeline.jobs.models import ContractorProfile, Job
from tradeline.profiles.storage import ProfileStorage
from tradeline.taxonomy import normalize_trade, normalize_trades
from tradeline.types import utc_now

logger = logging.getLogger(__name__)

MAX_LOCATION_LENGTH = 200


class ProfileNotFoundError(NotFoundError):
    """Contractor has not saved a profile yet."""


class ProfileService:
    """Service for contractor profiles and profile-based matching."""

    def __init__(
        self,
        storage: ProfileStorage,
        matcher: JobMatcher,
        config: Optional[MarketplaceConfig] = None,
    ):
        self.storage = storage
        self.matcher = matcher
        self.config = config or MarketplaceConfig()

    def update_profile(
        self,
        contractor_id: str,
        primary_trade: Optional[str] = None,
        secondary_trades: Optional[Iterable[str]] = None,
        location: Optional[str] = None,
    ) -> ContractorProfile:
        """Create or replace a contractor's profile.

        Trades are normalised onto the taxonomy and unknown tags dropped,
        the same way job trades are. With no usable primary trade the first
        secondary trade is promoted.

        Raises:
            ValidationError: No contractor id, no recognised trade, or an
                oversized location
        """
        if not contractor_id:
            raise ValidationError("contractor_id is required")

        primary = normalize_trade(primary_trade) if primary_trade else None
        if primary_trade and primary is None:
            logger.warning(f"Dropping unknown primary trade {primary_trade!r} from profile")
        secondary = normalize_trades(secondary_trades, source="contractor profile")
        if primary is None and secondary:
            primary = secondary.pop(0)
        if primary is None:
            raise ValidationError("A profile needs at least one trade from the taxonomy")
        secondary = [t for t in secondary if t != primary]

        location = (location or "").strip() or None
        if location is not None and len(location) > MAX_LOCATION_LENGTH:
            raise ValidationError(f"Location too long (max {MAX_LOCATION_LENGTH} characters)")

        profile = ContractorProfile(
            contractor_id=contractor_id,
            primary_trade=primary,
            secondary_trades=secondary,
            location=location,
            updated_at=utc_now(),
        )
        saved = self.storage.save_profile(profile)
        logger.info(f"Profile saved | contractor={contractor_id} | trades={saved.trades}")
        return saved

    def get_profile(self, contractor_id: str) -> ContractorProfile:
        profile = self.storage.get_profile(contractor_id)
        if profile is None:
            raise ProfileNotFoundError(f"No profile for contractor {contractor_id}")
        return profile

    def find_matches(
        self,
        contractor_id: str,
        trades: Optional[Iterable[str]] = None,
        primary_trade: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Job]:
        """Open jobs for a contractor.

        Explicit ``trades``/``primary_trade`` win. Without them the stored
        profile is used, and without a stored profile every open job is
        returned.
        """
        explicit = list(trades or [])
        if explicit or primary_trade:
            profile = ContractorProfile(
                contractor_id=contractor_id,
                primary_trade=primary_trade,
                secondary_trades=explicit,
            )
        else:
            profile = self.storage.get_profile(contractor_id)
            if profile is None:
                logger.debug(f"No stored profile for {contractor_id}, matching all open jobs")
                profile = ContractorProfile(contractor_id=contractor_id)
        return self.matcher.find_matches_for_contractor(profile, limit=limit)
