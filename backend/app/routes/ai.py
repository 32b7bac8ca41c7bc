"""AI routes: classify a free-text job request without creating a job."""

from fastapi import APIRouter, Request

from ..auth import CurrentUser
from ..database import MarketplaceDep
from ..logging_config import get_logger
from ..models import ClassifyRequest, ClassifyResponse, to_classification_response
from ..rate_limit import CLASSIFY_LIMIT, limiter

logger = get_logger("tradeline.ai")
router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/classify", response_model=ClassifyResponse)
@limiter.limit(CLASSIFY_LIMIT)
def classify_text(
    request: Request,
    body: ClassifyRequest,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """
    Turn free text into a structured job draft.

    Returns the parsed fields and, for the remote strategy, the model's raw
    reply. A failing remote model is a 502 unless keyword fallback is enabled.
    """
    logger.info(
        f"POST /ai/classify | user={auth.user_id} | strategy={market.classifier.strategy} "
        f"| chars={len(body.text)}"
    )
    result = market.classifier.classify(body.text)
    return ClassifyResponse(parsed=to_classification_response(result), raw=result.raw)
