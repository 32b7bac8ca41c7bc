"""Review data model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from tradeline.types import format_datetime, parse_datetime


@dataclass
class Review:
    """One party's rating of the other after a job is completed."""

    id: str
    job_id: str
    reviewer_id: str
    reviewee_id: str
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if isinstance(self.rating, bool) or not isinstance(self.rating, int):
            raise ValueError("Rating must be an integer")
        if self.reviewer_id == self.reviewee_id:
            raise ValueError("Cannot review yourself")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "job_id": self.job_id,
            "reviewer_id": self.reviewer_id,
            "reviewee_id": self.reviewee_id,
            "rating": self.rating,
            "comment": self.comment,
            "created_at": format_datetime(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Review":
        return cls(
            id=data["id"],
            job_id=data["job_id"],
            reviewer_id=data["reviewer_id"],
            reviewee_id=data["reviewee_id"],
            rating=int(data["rating"]),
            comment=data.get("comment"),
            created_at=parse_datetime(data.get("created_at")),
        )
