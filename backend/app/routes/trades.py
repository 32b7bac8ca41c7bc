"""Trade taxonomy route."""

from fastapi import APIRouter

from tradeline.taxonomy import TAXONOMY_VERSION, list_trades

from ..models import TradesResponse

router = APIRouter(prefix="/trades", tags=["trades"])


@router.get("", response_model=TradesResponse)
async def get_trades():
    """The fixed trade vocabulary, in display order."""
    return TradesResponse(version=TAXONOMY_VERSION, trades=list_trades())
