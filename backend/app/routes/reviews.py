"""Review routes: ratings between job parties after completion."""

from fastapi import APIRouter, Request, status

from ..auth import CurrentUser
from ..database import MarketplaceDep
from ..logging_config import get_logger
from ..models import (
    CanReviewResponse,
    RatingResponse,
    ReviewCreate,
    ReviewResponse,
    to_review_response,
)
from ..rate_limit import READ_LIMIT, WRITE_LIMIT, limiter

logger = get_logger("tradeline.reviews")
router = APIRouter(tags=["reviews"])


@router.post(
    "/jobs/{job_id}/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED
)
@limiter.limit(WRITE_LIMIT)
def create_review(
    request: Request,
    job_id: str,
    review: ReviewCreate,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Review the other party on a completed job. One review per reviewer per job."""
    logger.info(f"POST /jobs/{job_id}/reviews | reviewer={auth.user_id} | rating={review.rating}")
    created = market.reviews.create_review(
        job_id, auth.user_id, review.reviewee_id, review.rating, review.comment
    )
    return to_review_response(created)


@router.get("/jobs/{job_id}/can-review", response_model=CanReviewResponse)
@limiter.limit(READ_LIMIT)
def can_review(
    request: Request,
    job_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    return CanReviewResponse(can_review=market.reviews.can_review(job_id, auth.user_id))


@router.get("/users/{user_id}/rating", response_model=RatingResponse)
@limiter.limit(READ_LIMIT)
def get_rating(
    request: Request,
    user_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Average rating a user has received (0 with no reviews)."""
    logger.info(f"GET /users/{user_id}/rating | user={auth.user_id}")
    return RatingResponse(
        user_id=user_id,
        average_rating=market.reviews.average_rating(user_id),
        review_count=market.reviews.review_count(user_id),
    )


@router.get("/users/{user_id}/reviews", response_model=list[ReviewResponse])
@limiter.limit(READ_LIMIT)
def list_reviews(
    request: Request,
    user_id: str,
    auth: CurrentUser,
    market: MarketplaceDep,
):
    """Reviews a user has received, newest first."""
    return [to_review_response(r) for r in market.reviews.list_reviews_for_user(user_id)]
