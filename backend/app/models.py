"""Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tradeline.classifier import ClassificationResult
from tradeline.jobs import ContractorProfile, Job, JobStateTransition
from tradeline.messages import Message
from tradeline.quotes import Quote
from tradeline.reviews import Review

Urgency = Literal["low", "medium", "high"]
JobStatus = Literal[
    "draft",
    "pending_quotes",
    "quotes_received",
    "contractor_selected",
    "in_progress",
    "completed",
    "reviewed",
    "cancelled",
]
QuoteStatus = Literal["pending", "accepted", "declined"]


# =============================================================================
# Errors
# =============================================================================


class ErrorBody(BaseModel):
    kind: str
    message: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx response raised by the marketplace."""

    error: ErrorBody


# =============================================================================
# Job Models
# =============================================================================


class JobCreate(BaseModel):
    """Request to create a job.

    Either ``title`` and ``description``, or ``from_text`` (free text that is
    classified first) must be given.
    """

    title: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=5000)
    from_text: str | None = Field(None, max_length=5000)
    suggested_trades: list[str] = Field(default_factory=list, max_length=20)
    primary_trade: str | None = None
    budget: float | str | None = None
    location: str | None = Field(None, max_length=200)
    urgency: Urgency | None = None

    @field_validator("title", "description", "from_text", "location")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def require_text_or_fields(self) -> "JobCreate":
        if self.from_text:
            return self
        if not self.title or not self.description:
            raise ValueError("title and description are required (or provide from_text)")
        return self


class JobResponse(BaseModel):
    """Job details response."""

    id: str
    customer_id: str
    title: str
    description: str
    original_text: str | None = None
    suggested_trades: list[str]
    primary_trade: str | None = None
    budget: float | None = None
    location: str | None = None
    urgency: Urgency | None = None
    status: JobStatus
    contractor_id: str | None = None
    selected_quote_id: str | None = None
    ai_generated: bool = False
    confidence: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    accepted_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    reviewed_at: datetime | None = None
    cancelled_at: datetime | None = None


class JobListResponse(BaseModel):
    """Page of jobs, newest first."""

    jobs: list[JobResponse]
    total: int
    limit: int
    offset: int


class AcceptJobRequest(BaseModel):
    """Direct claim of an open job by a contractor."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., min_length=1, alias="jobId")
    contractor_id: str | None = Field(None, alias="contractorId")


class AcceptJobResponse(BaseModel):
    job: JobResponse


class CancelJobRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class TransitionResponse(BaseModel):
    id: str
    job_id: str
    from_status: str | None = None
    to_status: str
    actor_id: str
    metadata: dict = Field(default_factory=dict)
    created_at: datetime | None = None


# =============================================================================
# Quote Models
# =============================================================================


class QuoteCreate(BaseModel):
    amount: float = Field(..., ge=0)
    currency: str | None = Field(None, min_length=3, max_length=3)
    description: str = Field("", max_length=2000)
    estimated_duration: str | None = Field(None, max_length=100)
    start_date: datetime | None = None
    valid_until: datetime | None = None


class QuoteResponse(BaseModel):
    id: str
    job_id: str
    contractor_id: str
    amount: float
    currency: str
    description: str
    estimated_duration: str | None = None
    start_date: datetime | None = None
    valid_until: datetime | None = None
    status: QuoteStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AcceptQuoteResponse(BaseModel):
    job: JobResponse
    quote: QuoteResponse


# =============================================================================
# Message Models
# =============================================================================


class MessageCreate(BaseModel):
    receiver_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=5000)


class MessageResponse(BaseModel):
    id: str
    job_id: str
    sender_id: str
    receiver_id: str
    content: str
    read: bool
    created_at: datetime | None = None
    read_at: datetime | None = None


class UnreadCountResponse(BaseModel):
    unread: int


class MarkAllReadResponse(BaseModel):
    marked: int


# =============================================================================
# Review Models
# =============================================================================


class ReviewCreate(BaseModel):
    reviewee_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5, strict=True)
    comment: str | None = Field(None, max_length=2000)


class ReviewResponse(BaseModel):
    id: str
    job_id: str
    reviewer_id: str
    reviewee_id: str
    rating: int
    comment: str | None = None
    created_at: datetime | None = None


class RatingResponse(BaseModel):
    user_id: str
    average_rating: float
    review_count: int


class CanReviewResponse(BaseModel):
    can_review: bool


# =============================================================================
# Contractor Profile Models
# =============================================================================


class ProfileUpdate(BaseModel):
    """A contractor's trades and home area. Replaces any stored profile."""

    primary_trade: str | None = None
    secondary_trades: list[str] = Field(default_factory=list, max_length=20)
    location: str | None = Field(None, max_length=200)


class ProfileResponse(BaseModel):
    contractor_id: str
    primary_trade: str | None = None
    secondary_trades: list[str]
    location: str | None = None
    updated_at: datetime | None = None


# =============================================================================
# Classifier / Taxonomy Models
# =============================================================================


class ClassifyRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)


class ClassificationResponse(BaseModel):
    title: str
    description: str
    trade_tags: list[str]
    urgency: Urgency | None = None
    budget_estimate: float | None = None
    location_hint: str | None = None
    confidence: float
    strategy: Literal["local", "remote"]


class ClassifyResponse(BaseModel):
    parsed: ClassificationResponse
    raw: str | None = None


class TradesResponse(BaseModel):
    version: int
    trades: list[str]


# =============================================================================
# Converters
# =============================================================================


def to_job_response(job: Job) -> JobResponse:
    return JobResponse(**job.to_dict())


def to_transition_response(transition: JobStateTransition) -> TransitionResponse:
    return TransitionResponse(**transition.to_dict())


def to_quote_response(quote: Quote) -> QuoteResponse:
    return QuoteResponse(**quote.to_dict())


def to_message_response(message: Message) -> MessageResponse:
    return MessageResponse(**message.to_dict())


def to_review_response(review: Review) -> ReviewResponse:
    return ReviewResponse(**review.to_dict())


def to_profile_response(profile: ContractorProfile) -> ProfileResponse:
    return ProfileResponse(**profile.to_dict())


def to_classification_response(result: ClassificationResult) -> ClassificationResponse:
    return ClassificationResponse(**result.to_dict())
