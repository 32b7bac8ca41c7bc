"""Reviews between job parties."""

from tradeline.reviews.models import Review
from tradeline.reviews.service import DuplicateReviewError, ReviewService
from tradeline.reviews.storage import InMemoryReviewStorage, ReviewStorage, SupabaseReviewStorage

__all__ = [
    "Review",
    "ReviewStorage",
    "InMemoryReviewStorage",
    "SupabaseReviewStorage",
    "ReviewService",
    "DuplicateReviewError",
]
