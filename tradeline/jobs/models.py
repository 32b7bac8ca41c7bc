"""
Job data models.

A job moves through a fixed lifecycle:

    draft -> pending_quotes -> quotes_received -> contractor_selected
          -> in_progress -> completed -> reviewed

``cancelled`` is reachable from every non-terminal status. Jobs in
``pending_quotes`` or ``quotes_received`` are "open": they accept quotes and
can be claimed directly by a contractor.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from tradeline.types import format_datetime, parse_datetime


class JobStatus(Enum):
    """Job lifecycle status."""

    DRAFT = "draft"
    PENDING_QUOTES = "pending_quotes"
    QUOTES_RECEIVED = "quotes_received"
    CONTRACTOR_SELECTED = "contractor_selected"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REVIEWED = "reviewed"
    CANCELLED = "cancelled"


class Urgency(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


VALID_JOB_TRANSITIONS: Dict[JobStatus, set] = {
    JobStatus.DRAFT: {JobStatus.PENDING_QUOTES, JobStatus.CANCELLED},
    JobStatus.PENDING_QUOTES: {
        JobStatus.QUOTES_RECEIVED,
        JobStatus.CONTRACTOR_SELECTED,
        JobStatus.CANCELLED,
    },
    JobStatus.QUOTES_RECEIVED: {JobStatus.CONTRACTOR_SELECTED, JobStatus.CANCELLED},
    JobStatus.CONTRACTOR_SELECTED: {JobStatus.IN_PROGRESS, JobStatus.CANCELLED},
    JobStatus.IN_PROGRESS: {JobStatus.COMPLETED, JobStatus.CANCELLED},
    JobStatus.COMPLETED: {JobStatus.REVIEWED},
    JobStatus.REVIEWED: set(),
    JobStatus.CANCELLED: set(),
}

OPEN_STATUSES = (JobStatus.PENDING_QUOTES.value, JobStatus.QUOTES_RECEIVED.value)
REVIEWABLE_STATUSES = (JobStatus.COMPLETED.value, JobStatus.REVIEWED.value)
TERMINAL_STATUSES = (
    JobStatus.COMPLETED.value,
    JobStatus.REVIEWED.value,
    JobStatus.CANCELLED.value,
)

# Timestamp column stamped when a job enters each status
STATUS_TIMESTAMP_FIELDS = {
    JobStatus.CONTRACTOR_SELECTED.value: "accepted_at",
    JobStatus.IN_PROGRESS.value: "started_at",
    JobStatus.COMPLETED.value: "completed_at",
    JobStatus.REVIEWED.value: "reviewed_at",
    JobStatus.CANCELLED.value: "cancelled_at",
}

_STATUS_ALIASES = {
    "open": JobStatus.PENDING_QUOTES.value,
    "assigned": JobStatus.CONTRACTOR_SELECTED.value,
}

# Filter names that stand for a group of statuses when listing jobs
STATUS_GROUPS = {
    "open": OPEN_STATUSES,
    "assigned": (JobStatus.CONTRACTOR_SELECTED.value,),
}


def coerce_status(status) -> str:
    """Return the canonical status string for an enum, string or alias."""
    if isinstance(status, JobStatus):
        return status.value
    value = _STATUS_ALIASES.get(status, status)
    if value not in {s.value for s in JobStatus}:
        raise ValueError(f"Invalid status: {status}")
    return value


def expand_status_filter(statuses) -> List[str]:
    """Canonical statuses for a list filter.

    Group names expand to every status in the group, so ``open`` matches
    jobs that already have quotes as well as those still waiting for one.
    """
    expanded: List[str] = []
    for status in statuses:
        if isinstance(status, str) and status in STATUS_GROUPS:
            members = STATUS_GROUPS[status]
        else:
            members = (coerce_status(status),)
        for member in members:
            if member not in expanded:
                expanded.append(member)
    return expanded


def can_transition(from_status, to_status) -> bool:
    """Check if a status transition is valid."""
    try:
        source = JobStatus(coerce_status(from_status))
        target = JobStatus(coerce_status(to_status))
    except ValueError:
        return False
    return target in VALID_JOB_TRANSITIONS[source]


@dataclass
class Job:
    """A customer's request for trade work.

    ``suggested_trades`` holds canonical trade tags only; ``primary_trade``
    is always one of them (or None when there are none). ``original_text``
    keeps the customer's free text separate from any AI-enhanced
    ``description``.
    """

    id: str
    customer_id: str
    title: str
    description: str
    original_text: Optional[str] = None
    suggested_trades: List[str] = field(default_factory=list)
    primary_trade: Optional[str] = None
    budget: Optional[float] = None
    location: Optional[str] = None
    urgency: Optional[str] = None
    status: str = JobStatus.PENDING_QUOTES.value
    contractor_id: Optional[str] = None
    selected_quote_id: Optional[str] = None
    ai_generated: bool = False
    confidence: Optional[float] = None
    created_at: Optional[Any] = None
    updated_at: Optional[Any] = None
    accepted_at: Optional[Any] = None
    started_at: Optional[Any] = None
    completed_at: Optional[Any] = None
    reviewed_at: Optional[Any] = None
    cancelled_at: Optional[Any] = None

    def __post_init__(self):
        if not self.title or not str(self.title).strip():
            raise ValueError("Title is required")
        if len(self.title) > 200:
            raise ValueError("Title too long (max 200 characters)")
        if self.budget is not None and self.budget < 0:
            raise ValueError("Budget cannot be negative")
        self.status = coerce_status(self.status)
        if isinstance(self.urgency, Urgency):
            self.urgency = self.urgency.value
        if self.urgency is not None and self.urgency not in {u.value for u in Urgency}:
            raise ValueError(f"Invalid urgency: {self.urgency}")
        if self.primary_trade is not None and self.primary_trade not in self.suggested_trades:
            raise ValueError("Primary trade must be one of the suggested trades")
        if self.confidence is not None and not 0.0 <= self.confidence <= 1.0:
            raise ValueError("Confidence must be between 0 and 1")

    @property
    def is_open(self) -> bool:
        """Whether the job still accepts quotes and direct claims."""
        return self.status in OPEN_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_reviewable(self) -> bool:
        return self.status in REVIEWABLE_STATUSES

    def can_transition_to(self, new_status) -> bool:
        return can_transition(self.status, new_status)

    def is_party(self, user_id: str) -> bool:
        """True for the job's customer and its assigned contractor."""
        return user_id is not None and user_id in (self.customer_id, self.contractor_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "title": self.title,
            "description": self.description,
            "original_text": self.original_text,
            "suggested_trades": list(self.suggested_trades),
            "primary_trade": self.primary_trade,
            "budget": self.budget,
            "location": self.location,
            "urgency": self.urgency,
            "status": self.status,
            "contractor_id": self.contractor_id,
            "selected_quote_id": self.selected_quote_id,
            "ai_generated": self.ai_generated,
            "confidence": self.confidence,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
            "accepted_at": format_datetime(self.accepted_at),
            "started_at": format_datetime(self.started_at),
            "completed_at": format_datetime(self.completed_at),
            "reviewed_at": format_datetime(self.reviewed_at),
            "cancelled_at": format_datetime(self.cancelled_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        """Build a Job from a storage row."""
        budget = data.get("budget")
        return cls(
            id=data["id"],
            customer_id=data["customer_id"],
            title=data["title"],
            description=data.get("description") or "",
            original_text=data.get("original_text"),
            suggested_trades=list(data.get("suggested_trades") or []),
            primary_trade=data.get("primary_trade"),
            budget=float(budget) if budget is not None else None,
            location=data.get("location"),
            urgency=data.get("urgency"),
            status=data.get("status", JobStatus.PENDING_QUOTES.value),
            contractor_id=data.get("contractor_id"),
            selected_quote_id=data.get("selected_quote_id"),
            ai_generated=bool(data.get("ai_generated", False)),
            confidence=data.get("confidence"),
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
            accepted_at=parse_datetime(data.get("accepted_at")),
            started_at=parse_datetime(data.get("started_at")),
            completed_at=parse_datetime(data.get("completed_at")),
            reviewed_at=parse_datetime(data.get("reviewed_at")),
            cancelled_at=parse_datetime(data.get("cancelled_at")),
        )


@dataclass
class JobStateTransition:
    """Audit log entry for a job status change.

    ``from_status`` is None for the creation entry.
    """

    id: str
    job_id: str
    to_status: str
    actor_id: str
    from_status: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "job_id": self.job_id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "actor_id": self.actor_id,
            "metadata": dict(self.metadata),
            "created_at": format_datetime(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobStateTransition":
        return cls(
            id=data["id"],
            job_id=data["job_id"],
            from_status=data.get("from_status"),
            to_status=data["to_status"],
            actor_id=data["actor_id"],
            metadata=data.get("metadata") or {},
            created_at=parse_datetime(data.get("created_at")),
        )


@dataclass
class ContractorProfile:
    """A tradesperson's declared capabilities, used for job matching.

    Trades hold canonical tags only. ``primary_trade`` never repeats in
    ``secondary_trades``.
    """

    contractor_id: str
    primary_trade: Optional[str] = None
    secondary_trades: List[str] = field(default_factory=list)
    location: Optional[str] = None
    updated_at: Optional[Any] = None

    @property
    def trades(self) -> List[str]:
        """Primary trade first, then secondary trades, without repeats."""
        result = [self.primary_trade] if self.primary_trade else []
        for trade in self.secondary_trades:
            if trade not in result:
                result.append(trade)
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contractor_id": self.contractor_id,
            "primary_trade": self.primary_trade,
            "secondary_trades": list(self.secondary_trades),
            "location": self.location,
            "updated_at": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContractorProfile":
        return cls(
            contractor_id=data["contractor_id"],
            primary_trade=data.get("primary_trade"),
            secondary_trades=list(data.get("secondary_trades") or []),
            location=data.get("location"),
            updated_at=parse_datetime(data.get("updated_at")),
        )
