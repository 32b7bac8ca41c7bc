"""
Review service.

After a job is completed, its customer and its contractor can each rate
the other once. The first review moves the job ``completed -> reviewed``.
"""

import logging
from typing import List, Optional

from tradeline.config import MarketplaceConfig
from tradeline.errors import ConflictError, DuplicateRecordError, UnauthorizedError, ValidationError
from tradeline.jobs.service import InvalidTransitionError, JobService
from tradeline.reviews.models import Review
from tradeline.reviews.storage import ReviewStorage
from tradeline.types import new_id, utc_now

logger = logging.getLogger(__name__)


class DuplicateReviewError(ConflictError):
    """The reviewer has already reviewed this job."""


class ReviewService:
    """Service for reviews between job parties."""

    def __init__(
        self,
        storage: ReviewStorage,
        jobs: JobService,
        config: Optional[MarketplaceConfig] = None,
    ):
        self.storage = storage
        self.jobs = jobs
        self.config = config or MarketplaceConfig()

    def create_review(
        self,
        job_id: str,
        reviewer_id: str,
        reviewee_id: str,
        rating,
        comment: Optional[str] = None,
    ) -> Review:
        """Store a review of the other party on a completed job.

        Raises:
            ValidationError: Rating not an integer in range, comment too long,
                or the reviewee is not the other party
            JobNotFoundError: If job doesn't exist
            InvalidTransitionError: Job is not completed yet
            UnauthorizedError: Reviewer is not one of the job's parties
            DuplicateReviewError: Reviewer already reviewed this job
        """
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise ValidationError("Rating must be an integer")
        if not self.config.min_rating <= rating <= self.config.max_rating:
            raise ValidationError(
                f"Rating must be between {self.config.min_rating} and {self.config.max_rating}"
            )
        comment = (comment or "").strip() or None
        if comment and len(comment) > self.config.max_comment_length:
            raise ValidationError(
                f"Comment too long (max {self.config.max_comment_length} characters)"
            )

        job = self.jobs.get_job(job_id)
        if not job.is_reviewable:
            raise InvalidTransitionError(
                f"Job must be completed before it can be reviewed (status: {job.status})"
            )
        if not job.is_party(reviewer_id):
            raise UnauthorizedError("Only the job's customer or contractor can review it")
        if reviewee_id == reviewer_id or not job.is_party(reviewee_id):
            raise ValidationError("Reviewee must be the other party on the job")

        review = Review(
            id=new_id(),
            job_id=job_id,
            reviewer_id=reviewer_id,
            reviewee_id=reviewee_id,
            rating=rating,
            comment=comment,
            created_at=utc_now(),
        )
        try:
            self.storage.save_review(review)
        except DuplicateRecordError as exc:
            raise DuplicateReviewError("You have already reviewed this job") from exc

        self.jobs.mark_reviewed(job_id, reviewer_id)
        logger.info(
            f"Review created | job={job_id} | reviewer={reviewer_id} "
            f"| reviewee={reviewee_id} | rating={rating}"
        )
        return review

    def list_reviews_for_user(self, user_id: str) -> List[Review]:
        """Reviews a user has received, newest first."""
        return self.storage.list_reviews(reviewee_id=user_id, limit=self.config.max_page_size)

    def average_rating(self, user_id: str) -> float:
        """Mean rating received by a user, 0.0 with no reviews."""
        ratings = self.storage.list_ratings(user_id)
        if not ratings:
            return 0.0
        return round(sum(ratings) / len(ratings), 2)

    def review_count(self, user_id: str) -> int:
        return len(self.storage.list_ratings(user_id))

    def can_review(self, job_id: str, user_id: str) -> bool:
        """Whether ``user_id`` may still review this job."""
        job = self.jobs.get_job(job_id)
        if not job.is_reviewable or not job.is_party(user_id) or job.contractor_id is None:
            return False
        return self.storage.get_review(job_id, user_id) is None
