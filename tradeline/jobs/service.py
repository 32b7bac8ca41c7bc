"""
Job service.

High-level job operations: create, read, list, delete and every lifecycle
transition. Each transition is one conditional write in the storage layer
(see ``JobStorage.update_job_status``); the service never decides a race
by reading status and then writing.
"""

import logging
from typing import List, Optional, Sequence

from tradeline.config import MarketplaceConfig
from tradeline.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from tradeline.jobs.models import (
    OPEN_STATUSES,
    Job,
    JobStateTransition,
    JobStatus,
    Urgency,
    can_transition,
    coerce_status,
    expand_status_filter,
)
from tradeline.jobs.normalize import coerce_budget, normalize_job_trades
from tradeline.jobs.storage import JobStorage
from tradeline.types import new_id, utc_now

logger = logging.getLogger(__name__)


class JobNotFoundError(NotFoundError):
    """Job does not exist."""


class InvalidTransitionError(ConflictError):
    """The lifecycle graph does not allow the requested status change."""


class JobConflictError(ConflictError):
    """The job changed status concurrently (e.g. another contractor claimed it)."""


__all__ = [
    "JobService",
    "JobNotFoundError",
    "InvalidTransitionError",
    "JobConflictError",
    "UnauthorizedError",
    "ValidationError",
]


def _require(value, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} is required")
    return value.strip()


class JobService:
    """Service for job records and their lifecycle.

    Args:
        storage: Persistence backend implementing ``JobStorage``.
        config: Page sizes and field limits.
        classifier: Optional ``TextClassifier`` used by ``create_job_from_text``.
    """

    def __init__(
        self,
        storage: JobStorage,
        config: Optional[MarketplaceConfig] = None,
        classifier=None,
    ):
        self.storage = storage
        self.config = config or MarketplaceConfig()
        self.classifier = classifier

    # === Creation ===

    def create_job(
        self,
        customer_id: str,
        title: str,
        description: str,
        original_text: Optional[str] = None,
        suggested_trades: Optional[Sequence[str]] = None,
        primary_trade: Optional[str] = None,
        budget=None,
        location: Optional[str] = None,
        urgency=None,
        ai_generated: bool = False,
        confidence: Optional[float] = None,
    ) -> Job:
        """Create a job in ``pending_quotes``.

        Raises:
            ValidationError: customer, title or description missing, title
                too long, or urgency outside low/medium/high.
        """
        customer_id = _require(customer_id, "customer_id")
        title = _require(title, "title")
        description = _require(description, "description")
        if len(title) > self.config.max_title_length:
            raise ValidationError(
                f"Title too long (max {self.config.max_title_length} characters)"
            )

        if isinstance(urgency, Urgency):
            urgency = urgency.value
        if urgency is not None and urgency not in {u.value for u in Urgency}:
            raise ValidationError(f"Invalid urgency: {urgency}")

        trades, primary = normalize_job_trades(suggested_trades, primary_trade)
        now = utc_now()

        job = Job(
            id=new_id(),
            customer_id=customer_id,
            title=title,
            description=description,
            original_text=original_text if original_text is not None else description,
            suggested_trades=trades,
            primary_trade=primary,
            budget=coerce_budget(budget),
            location=(location or "").strip() or None,
            urgency=urgency,
            status=JobStatus.PENDING_QUOTES.value,
            ai_generated=ai_generated,
            confidence=confidence,
            created_at=now,
            updated_at=now,
        )

        self.storage.save_job(job)
        self.record_transition(
            job.id, JobStatus.DRAFT.value, job.status, customer_id, {"event": "created"}
        )

        logger.info(f"Job created | id={job.id} | customer={customer_id} | trades={trades}")
        return job

    def create_job_from_text(
        self,
        customer_id: str,
        text: str,
        location: Optional[str] = None,
        budget=None,
    ):
        """Classify free text and create a job from the result.

        Explicit ``location``/``budget`` override the classifier's hints.

        Returns:
            Tuple of (job, classification).
        """
        if self.classifier is None:
            raise ValidationError("No classifier configured for text job creation")

        result = self.classifier.classify(text)
        job = self.create_job(
            customer_id=customer_id,
            title=result.title,
            description=result.description,
            original_text=text,
            suggested_trades=result.trade_tags,
            primary_trade=result.trade_tags[0] if result.trade_tags else None,
            budget=budget if budget is not None else result.budget_estimate,
            location=location or result.location_hint,
            urgency=result.urgency,
            ai_generated=result.strategy != "local",
            confidence=result.confidence,
        )
        return job, result

    # === Retrieval ===

    def get_job(self, job_id: str) -> Job:
        """Get a job by ID.

        Raises:
            JobNotFoundError: If job doesn't exist
        """
        job = self.storage.get_job(job_id)
        if not job:
            raise JobNotFoundError(f"Job {job_id} not found")
        return job

    def list_jobs(
        self,
        status=None,
        statuses: Optional[Sequence] = None,
        customer_id: Optional[str] = None,
        contractor_id: Optional[str] = None,
        trades: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Job]:
        """List jobs newest first, capped at the configured page size."""
        wanted = list(statuses) if statuses else []
        if status is not None:
            wanted.append(status)
        try:
            status_filter = expand_status_filter(wanted) or None
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        return self.storage.list_jobs(
            statuses=status_filter,
            customer_id=customer_id,
            contractor_id=contractor_id,
            trades=trades,
            limit=self.config.clamp_limit(limit),
            offset=max(0, offset),
        )

    def get_jobs_for_customer(self, customer_id: str, limit: Optional[int] = None) -> List[Job]:
        return self.list_jobs(customer_id=customer_id, limit=limit)

    def get_jobs_for_contractor(self, contractor_id: str, limit: Optional[int] = None) -> List[Job]:
        return self.list_jobs(contractor_id=contractor_id, limit=limit)

    def get_job_history(self, job_id: str) -> List[JobStateTransition]:
        """Get the status history of a job, oldest first."""
        self.get_job(job_id)
        return self.storage.get_transitions(job_id)

    # === Generic transitions ===

    def update_status(self, job_id: str, new_status, actor_id: str, **updates) -> Job:
        """Move a job along the lifecycle graph.

        Raises:
            ValidationError: Unknown status
            JobNotFoundError: If job doesn't exist
            InvalidTransitionError: Graph forbids the move
            JobConflictError: Status changed while the update was in flight
        """
        try:
            target = coerce_status(new_status)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        job = self.get_job(job_id)
        return self._transition(job, target, actor_id, **updates)

    def _transition(self, job: Job, target: str, actor_id: str, metadata=None, **updates) -> Job:
        if not can_transition(job.status, target):
            raise InvalidTransitionError(f"Cannot move job from {job.status} to {target}")

        updated = self.storage.update_job_status(job.id, (job.status,), target, **updates)
        if updated is None:
            self._raise_update_failure(job.id, (job.status,))

        self.record_transition(job.id, job.status, target, actor_id, metadata)
        logger.info(f"Job {job.id} {job.status} -> {target} | actor={actor_id}")
        return updated

    def _raise_update_failure(self, job_id: str, expected: Sequence[str]) -> None:
        """Explain a conditional update that matched no row."""
        current = self.storage.get_job(job_id)
        if current is None:
            raise JobNotFoundError(f"Job {job_id} not found")

        logger.warning(
            f"Race condition detected on job {job_id}: "
            f"expected status in {list(expected)}, found '{current.status}'"
        )
        raise JobConflictError(
            f"Job {job_id} is no longer in status {' or '.join(expected)} "
            f"(now {current.status}). Please refresh and try again."
        )

    def record_transition(
        self,
        job_id: str,
        from_status: Optional[str],
        to_status: str,
        actor_id: str,
        metadata: Optional[dict] = None,
    ) -> None:
        transition = JobStateTransition(
            id=new_id(),
            job_id=job_id,
            from_status=from_status,
            to_status=to_status,
            actor_id=actor_id,
            metadata=metadata or {},
            created_at=utc_now(),
        )
        self.storage.save_transition(transition)

    # === Lifecycle operations ===

    def accept_job(self, job_id: str, contractor_id: str) -> Job:
        """Claim an open job for a contractor (direct assignment, no quotes).

        Exactly one of several concurrent claims succeeds; the storage layer
        applies ``status -> contractor_selected`` only while the job is open.

        Raises:
            ValidationError: contractor_id missing, or the customer claims own job
            JobNotFoundError: If job doesn't exist
            JobConflictError: Job already taken or otherwise not open
        """
        contractor_id = _require(contractor_id, "contractor_id")

        # Ownership never changes, so reading it first is race-free
        job = self.get_job(job_id)
        if job.customer_id == contractor_id:
            raise ValidationError("Cannot accept your own job")

        updated = self.storage.update_job_status(
            job_id,
            OPEN_STATUSES,
            JobStatus.CONTRACTOR_SELECTED.value,
            contractor_id=contractor_id,
        )
        if updated is None:
            self._raise_update_failure(job_id, OPEN_STATUSES)

        self.record_transition(
            job_id,
            job.status,
            updated.status,
            contractor_id,
            {"event": "accepted", "contractor_id": contractor_id},
        )
        logger.info(f"Job accepted | id={job_id} | contractor={contractor_id}")
        return updated

    def start_job(self, job_id: str, actor_id: str) -> Job:
        """Assigned contractor starts work: contractor_selected -> in_progress."""
        job = self.get_job(job_id)
        if job.contractor_id != actor_id:
            raise UnauthorizedError("Only the assigned contractor can start this job")
        if job.status != JobStatus.CONTRACTOR_SELECTED.value:
            raise InvalidTransitionError(
                f"Job must be contractor_selected to start (status: {job.status})"
            )
        return self._transition(job, JobStatus.IN_PROGRESS.value, actor_id)

    def complete_job(self, job_id: str, actor_id: str) -> Job:
        """Customer marks the work done: in_progress -> completed."""
        job = self.get_job(job_id)
        if job.customer_id != actor_id:
            raise UnauthorizedError("Only the customer can complete this job")
        if job.status != JobStatus.IN_PROGRESS.value:
            raise InvalidTransitionError(
                f"Job must be in_progress to complete (status: {job.status})"
            )
        return self._transition(job, JobStatus.COMPLETED.value, actor_id)

    def cancel_job(self, job_id: str, actor_id: str, reason: Optional[str] = None) -> Job:
        """Customer cancels a job that has not finished."""
        job = self.get_job(job_id)
        if job.customer_id != actor_id:
            raise UnauthorizedError("Only the customer can cancel this job")
        if job.is_terminal:
            raise InvalidTransitionError(f"Cannot cancel job in status: {job.status}")
        metadata = {"reason": reason} if reason else None
        return self._transition(job, JobStatus.CANCELLED.value, actor_id, metadata)

    def mark_quotes_received(self, job_id: str, actor_id: str) -> Optional[Job]:
        """pending_quotes -> quotes_received on the first quote.

        Returns None when the job had already moved on; that is not an error.
        """
        updated = self.storage.update_job_status(
            job_id,
            (JobStatus.PENDING_QUOTES.value,),
            JobStatus.QUOTES_RECEIVED.value,
        )
        if updated is not None:
            self.record_transition(
                job_id,
                JobStatus.PENDING_QUOTES.value,
                updated.status,
                actor_id,
                {"event": "first_quote"},
            )
        return updated

    def mark_reviewed(self, job_id: str, actor_id: str) -> Optional[Job]:
        """completed -> reviewed once a review exists. No-op if already reviewed."""
        updated = self.storage.update_job_status(
            job_id,
            (JobStatus.COMPLETED.value,),
            JobStatus.REVIEWED.value,
        )
        if updated is not None:
            self.record_transition(
                job_id,
                JobStatus.COMPLETED.value,
                updated.status,
                actor_id,
                {"event": "reviewed"},
            )
        return updated

    # === Deletion ===

    def delete_job(self, job_id: str, actor_id: str) -> None:
        """Delete a job. Only its customer may do so.

        Raises:
            JobNotFoundError: If job doesn't exist
            UnauthorizedError: Actor is not the customer
        """
        job = self.get_job(job_id)
        if job.customer_id != actor_id:
            raise UnauthorizedError("Only the customer can delete this job")
        if not self.storage.delete_job(job_id):
            raise JobNotFoundError(f"Job {job_id} not found")
        logger.info(f"Job deleted | id={job_id} | customer={actor_id}")
