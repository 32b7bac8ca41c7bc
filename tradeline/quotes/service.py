"""
Quote service.

Contractors quote on open jobs; the customer accepts one quote, which
selects that contractor for the job and declines the rest.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from tradeline.config import MarketplaceConfig
from tradeline.errors import (
    ConflictError,
    DuplicateRecordError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from tradeline.jobs.models import Job
from tradeline.jobs.service import InvalidTransitionError, JobService
from tradeline.quotes.models import Quote, QuoteStatus
from tradeline.quotes.storage import QuoteStorage
from tradeline.types import new_id, parse_datetime, utc_now

logger = logging.getLogger(__name__)


class QuoteNotFoundError(NotFoundError):
    """Quote does not exist."""


class DuplicateQuoteError(ConflictError):
    """Contractor already has a pending quote on the job."""


class QuoteExpiredError(ConflictError):
    """Quote's valid_until has passed."""


class QuoteConflictError(ConflictError):
    """Quote or job changed while the acceptance was in flight."""


def _parse_optional_datetime(value, name: str) -> Optional[datetime]:
    try:
        return parse_datetime(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid {name}: {value!r}") from exc


class QuoteService:
    """Service for quotes on jobs.

    Args:
        storage: Persistence backend implementing ``QuoteStorage``.
        jobs: The ``JobService`` for the same marketplace.
        config: Marketplace configuration.
    """

    def __init__(
        self,
        storage: QuoteStorage,
        jobs: JobService,
        config: Optional[MarketplaceConfig] = None,
    ):
        self.storage = storage
        self.jobs = jobs
        self.config = config or MarketplaceConfig()

    def create_quote(
        self,
        job_id: str,
        contractor_id: str,
        amount,
        currency: Optional[str] = None,
        description: str = "",
        estimated_duration: Optional[str] = None,
        start_date=None,
        valid_until=None,
    ) -> Quote:
        """Submit a quote on an open job.

        The first quote on a ``pending_quotes`` job moves it to
        ``quotes_received``.

        Raises:
            ValidationError: Bad amount or dates, or quoting on own job
            JobNotFoundError: If job doesn't exist
            InvalidTransitionError: Job is no longer open
            DuplicateQuoteError: Contractor already has a pending quote here
        """
        if not contractor_id:
            raise ValidationError("contractor_id is required")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise ValidationError("Quote amount must be a number")
        if amount < 0:
            raise ValidationError("Quote amount cannot be negative")

        start = _parse_optional_datetime(start_date, "start_date")
        expires = _parse_optional_datetime(valid_until, "valid_until")
        now = utc_now()
        if expires is not None and expires < now:
            raise ValidationError("valid_until is already in the past")

        job = self.jobs.get_job(job_id)
        if job.customer_id == contractor_id:
            raise ValidationError("Cannot quote on your own job")
        if not job.is_open:
            raise InvalidTransitionError(f"Job is not accepting quotes (status: {job.status})")

        quote = Quote(
            id=new_id(),
            job_id=job_id,
            contractor_id=contractor_id,
            amount=float(amount),
            currency=(currency or self.config.default_currency).upper(),
            description=(description or "").strip(),
            estimated_duration=estimated_duration,
            start_date=start,
            valid_until=expires,
            status=QuoteStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        try:
            saved = self.storage.save_quote(quote)
        except DuplicateRecordError as exc:
            raise DuplicateQuoteError(
                "You already have a pending quote on this job"
            ) from exc
        if saved is None:
            current = self.jobs.get_job(job_id)
            logger.warning(
                f"Race condition detected quoting on job {job_id}: job is {current.status}"
            )
            raise InvalidTransitionError(
                f"Job is not accepting quotes (status: {current.status})"
            )

        self.jobs.mark_quotes_received(job_id, contractor_id)
        logger.info(
            f"Quote created | id={quote.id} | job={job_id} | contractor={contractor_id} "
            f"| amount={quote.amount} {quote.currency}"
        )
        return quote

    def get_quote(self, quote_id: str) -> Quote:
        quote = self.storage.get_quote(quote_id)
        if not quote:
            raise QuoteNotFoundError(f"Quote {quote_id} not found")
        return quote

    def list_quotes_for_job(self, job_id: str) -> List[Quote]:
        """Quotes on a job, cheapest first."""
        self.jobs.get_job(job_id)
        quotes = self.storage.list_quotes(job_id=job_id, limit=self.config.max_page_size)
        return sorted(quotes, key=lambda q: (q.amount, q.created_at or utc_now()))

    def list_quotes_for_contractor(self, contractor_id: str) -> List[Quote]:
        """A contractor's quotes, newest first."""
        return self.storage.list_quotes(
            contractor_id=contractor_id, limit=self.config.max_page_size
        )

    def update_quote_status(self, quote_id: str, status, actor_id: str) -> Quote:
        """Change a quote's status on behalf of the job's customer.

        Only ``pending -> declined`` happens here. ``accepted`` is routed to
        ``accept_quote`` so the job moves with it.
        """
        if isinstance(status, QuoteStatus):
            status = status.value
        if status == QuoteStatus.ACCEPTED.value:
            _, quote = self.accept_quote(quote_id, actor_id)
            return quote
        if status != QuoteStatus.DECLINED.value:
            raise ValidationError(f"Cannot set quote status to {status!r}")
        return self.decline_quote(quote_id, actor_id)

    def decline_quote(self, quote_id: str, actor_id: str) -> Quote:
        quote = self.get_quote(quote_id)
        job = self.jobs.get_job(quote.job_id)
        if job.customer_id != actor_id:
            raise UnauthorizedError("Only the job's customer can decline a quote")
        if not quote.is_pending:
            raise InvalidTransitionError(f"Quote is already {quote.status}")

        updated = self.storage.update_quote_status(
            quote_id, QuoteStatus.PENDING.value, QuoteStatus.DECLINED.value
        )
        if updated is None:
            current = self.get_quote(quote_id)
            raise QuoteConflictError(f"Quote {quote_id} is already {current.status}")

        logger.info(f"Quote declined | id={quote_id} | job={job.id} | customer={actor_id}")
        return updated

    def accept_quote(self, quote_id: str, actor_id: str) -> Tuple[Job, Quote]:
        """Accept a quote: the job goes to its author, other quotes are declined.

        Raises:
            QuoteNotFoundError / JobNotFoundError: Unknown quote or job
            UnauthorizedError: Actor is not the job's customer
            InvalidTransitionError: Quote not pending or job not open
            QuoteExpiredError: Quote's valid_until has passed
            QuoteConflictError: Lost a race with another acceptance
        """
        quote = self.get_quote(quote_id)
        job = self.jobs.get_job(quote.job_id)
        if job.customer_id != actor_id:
            raise UnauthorizedError("Only the job's customer can accept a quote")
        if not quote.is_pending:
            raise InvalidTransitionError(f"Quote is already {quote.status}")
        if quote.is_expired(utc_now()):
            raise QuoteExpiredError(f"Quote {quote_id} expired at {quote.valid_until.isoformat()}")
        if not job.is_open:
            raise InvalidTransitionError(f"Job is not accepting quotes (status: {job.status})")

        result = self.storage.accept_quote(quote_id)
        if result is None:
            current = self.jobs.get_job(quote.job_id)
            logger.warning(
                f"Race condition detected accepting quote {quote_id}: job {current.id} "
                f"is {current.status}"
            )
            raise QuoteConflictError(
                f"Quote {quote_id} could not be accepted (job status: {current.status}). "
                "Please refresh and try again."
            )

        updated_job, accepted = result
        self.jobs.record_transition(
            updated_job.id,
            job.status,
            updated_job.status,
            actor_id,
            {"event": "quote_accepted", "quote_id": quote_id, "contractor_id": accepted.contractor_id},
        )
        logger.info(
            f"Quote accepted | id={quote_id} | job={updated_job.id} "
            f"| contractor={accepted.contractor_id}"
        )
        return updated_job, accepted
