"""
Quote data models.

A quote is a contractor's priced offer on an open job. Quotes move
``pending -> accepted`` (exactly one per job, together with the job
moving to ``contractor_selected``) or ``pending -> declined``.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from tradeline.types import format_datetime, parse_datetime


class QuoteStatus(Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


@dataclass
class Quote:
    """A contractor's priced offer on a job."""

    id: str
    job_id: str
    contractor_id: str
    amount: float
    currency: str = "EUR"
    description: str = ""
    estimated_duration: Optional[str] = None  # free text, e.g. "2 hours"
    start_date: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    status: str = QuoteStatus.PENDING.value
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.amount is None or self.amount < 0:
            raise ValueError("Quote amount cannot be negative")
        if isinstance(self.status, QuoteStatus):
            self.status = self.status.value
        if self.status not in {s.value for s in QuoteStatus}:
            raise ValueError(f"Invalid quote status: {self.status}")

    @property
    def is_pending(self) -> bool:
        return self.status == QuoteStatus.PENDING.value

    def is_expired(self, now: datetime) -> bool:
        return self.valid_until is not None and self.valid_until < now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "job_id": self.job_id,
            "contractor_id": self.contractor_id,
            "amount": self.amount,
            "currency": self.currency,
            "description": self.description,
            "estimated_duration": self.estimated_duration,
            "start_date": format_datetime(self.start_date),
            "valid_until": format_datetime(self.valid_until),
            "status": self.status,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quote":
        return cls(
            id=data["id"],
            job_id=data["job_id"],
            contractor_id=data["contractor_id"],
            amount=float(data["amount"]),
            currency=data.get("currency") or "EUR",
            description=data.get("description") or "",
            estimated_duration=data.get("estimated_duration"),
            start_date=parse_datetime(data.get("start_date")),
            valid_until=parse_datetime(data.get("valid_until")),
            status=data.get("status", QuoteStatus.PENDING.value),
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
        )
