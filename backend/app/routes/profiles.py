"""Contractor profile routes: the trades a contractor is matched on."""

from fastapi import APIRouter, Request

from ..auth import CurrentUser
from ..database import MarketplaceDep
from ..logging_config import get_logger
from ..models import ProfileResponse, ProfileUpdate, to_profile_response
from ..rate_limit import READ_LIMIT, WRITE_LIMIT, limiter

logger = get_logger("tradeline.profiles")
router = APIRouter(prefix="/contractors", tags=["profiles"])


@router.put("/me/profile", response_model=ProfileResponse)
@limiter.limit(WRITE_LIMIT)
def update_my_profile(
    request: Request,
    update: ProfileUpdate,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Save the caller's trades and home area. ``/jobs/matches`` uses them by default."""
    logger.info(
        f"PUT /contractors/me/profile | contractor={auth.user_id} "
        f"| primary={update.primary_trade} | secondary={update.secondary_trades}"
    )
    profile = market.profiles.update_profile(
        auth.user_id,
        primary_trade=update.primary_trade,
        secondary_trades=update.secondary_trades,
        location=update.location,
    )
    return to_profile_response(profile)


@router.get("/me/profile", response_model=ProfileResponse)
@limiter.limit(READ_LIMIT)
def get_my_profile(
    request: Request,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    return to_profile_response(market.profiles.get_profile(auth.user_id))
