"""
Review storage layer.

At most one review per (job, reviewer). The in-memory backend checks and
inserts under one lock; Postgres enforces it with a unique index. Both
raise ``DuplicateRecordError``.
"""

import copy
import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional, Protocol

from tradeline.errors import DuplicateRecordError
from tradeline.reviews.models import Review
from tradeline.supabase_base import SupabaseStorageBase

logger = logging.getLogger(__name__)

REVIEWS_TABLE = "reviews"


class ReviewStorage(Protocol):
    """Protocol for review persistence backends."""

    def save_review(self, review: Review) -> str:
        """Save a review. Raises DuplicateRecordError if one exists for (job, reviewer)."""
        ...

    def get_review(self, job_id: str, reviewer_id: str) -> Optional[Review]:
        ...

    def list_reviews(
        self,
        reviewee_id: Optional[str] = None,
        job_id: Optional[str] = None,
        limit: int = 200,
    ) -> List[Review]:
        """List reviews newest first."""
        ...

    def list_ratings(self, reviewee_id: str) -> List[int]:
        """Every rating received by a user."""
        ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryReviewStorage:
    """In-memory review storage for testing and local development."""

    def __init__(self, lock: Optional[threading.RLock] = None):
        self.lock = lock or threading.RLock()
        self._reviews: dict[str, Review] = {}

    def save_review(self, review: Review) -> str:
        with self.lock:
            if any(
                r.job_id == review.job_id and r.reviewer_id == review.reviewer_id
                for r in self._reviews.values()
            ):
                raise DuplicateRecordError(
                    f"Review by {review.reviewer_id} on job {review.job_id} already exists"
                )
            self._reviews[review.id] = copy.deepcopy(review)
        return review.id

    def get_review(self, job_id: str, reviewer_id: str) -> Optional[Review]:
        with self.lock:
            for review in self._reviews.values():
                if review.job_id == job_id and review.reviewer_id == reviewer_id:
                    return copy.deepcopy(review)
        return None

    def list_reviews(
        self,
        reviewee_id: Optional[str] = None,
        job_id: Optional[str] = None,
        limit: int = 200,
    ) -> List[Review]:
        with self.lock:
            reviews = [copy.deepcopy(r) for r in self._reviews.values()]

        if reviewee_id is not None:
            reviews = [r for r in reviews if r.reviewee_id == reviewee_id]
        if job_id is not None:
            reviews = [r for r in reviews if r.job_id == job_id]

        reviews.sort(key=lambda r: r.created_at or _utc_now(), reverse=True)
        return reviews[:limit]

    def list_ratings(self, reviewee_id: str) -> List[int]:
        with self.lock:
            return [r.rating for r in self._reviews.values() if r.reviewee_id == reviewee_id]


class SupabaseReviewStorage(SupabaseStorageBase):
    """Review storage backed by the Supabase ``reviews`` table."""

    def save_review(self, review: Review) -> str:
        self._execute(self._table(REVIEWS_TABLE).insert(review.to_dict()), "insert review")
        return review.id

    def get_review(self, job_id: str, reviewer_id: str) -> Optional[Review]:
        query = (
            self._table(REVIEWS_TABLE)
            .select("*")
            .eq("job_id", job_id)
            .eq("reviewer_id", reviewer_id)
            .limit(1)
        )
        rows = self._rows(self._execute(query, "get review"))
        return Review.from_dict(rows[0]) if rows else None

    def list_reviews(
        self,
        reviewee_id: Optional[str] = None,
        job_id: Optional[str] = None,
        limit: int = 200,
    ) -> List[Review]:
        query = self._table(REVIEWS_TABLE).select("*")
        if reviewee_id is not None:
            query = query.eq("reviewee_id", reviewee_id)
        if job_id is not None:
            query = query.eq("job_id", job_id)
        query = query.order("created_at", desc=True).limit(limit)
        return [Review.from_dict(row) for row in self._rows(self._execute(query, "list reviews"))]

    def list_ratings(self, reviewee_id: str) -> List[int]:
        query = self._table(REVIEWS_TABLE).select("rating").eq("reviewee_id", reviewee_id)
        return [int(row["rating"]) for row in self._rows(self._execute(query, "list ratings"))]
