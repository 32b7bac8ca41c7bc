"""
Quote storage layer.

Besides plain reads and writes, the storage owns the one operation that
touches two record types at once: ``accept_quote``. It marks the quote
accepted, declines the job's other pending quotes and moves the job to
``contractor_selected`` as a single unit; either all four changes happen
or none do.

- In memory: done under the lock shared with ``InMemoryJobStorage``.
- Supabase: done by the ``accept_quote`` Postgres function (see
  ``supabase/migrations/001_marketplace_schema.sql``) in one transaction.

Inserting a quote is guarded the same way: ``save_quote`` stores nothing
unless the job is open at that moment, so a quote can never land pending
on a job that has already been assigned.
"""

import copy
import logging
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Tuple

from tradeline.errors import DuplicateRecordError
from tradeline.jobs.models import OPEN_STATUSES, Job, JobStatus
from tradeline.jobs.storage import InMemoryJobStorage
from tradeline.quotes.models import Quote, QuoteStatus
from tradeline.supabase_base import SupabaseStorageBase

logger = logging.getLogger(__name__)

QUOTES_TABLE = "quotes"
ACCEPT_QUOTE_FUNCTION = "accept_quote"
SUBMIT_QUOTE_FUNCTION = "submit_quote"


class QuoteStorage(Protocol):
    """Protocol for quote persistence backends."""

    def save_quote(self, quote: Quote) -> Optional[str]:
        """Save a new quote while its job is still open.

        Returns the quote id, or None when the job is missing or no longer
        accepts quotes. The job check and the insert are one atomic step.

        Raises:
            DuplicateRecordError: The contractor already has a pending quote
                on this job.
        """
        ...

    def get_quote(self, quote_id: str) -> Optional[Quote]:
        ...

    def list_quotes(
        self,
        job_id: Optional[str] = None,
        contractor_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 200,
    ) -> List[Quote]:
        """List quotes newest first."""
        ...

    def update_quote_status(
        self, quote_id: str, expected_status: str, new_status: str
    ) -> Optional[Quote]:
        """Conditionally change a quote's status. None if no row matched."""
        ...

    def accept_quote(self, quote_id: str) -> Optional[Tuple[Job, Quote]]:
        """Accept a pending quote on an open job, atomically.

        Returns (job, quote) after the change, or None when the quote was
        not pending or its job was not open. Nothing is written on None.
        """
        ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryQuoteStorage:
    """In-memory quote storage sharing the job storage's lock.

    Args:
        job_storage: The ``InMemoryJobStorage`` holding the quoted jobs.
    """

    def __init__(self, job_storage: InMemoryJobStorage):
        self.jobs = job_storage
        self.lock = job_storage.lock
        self._quotes: dict[str, Quote] = {}

    def save_quote(self, quote: Quote) -> Optional[str]:
        with self.lock:
            job = self.jobs.get_job(quote.job_id)
            if job is None or not job.is_open:
                return None
            if quote.is_pending and any(
                q.is_pending and q.job_id == quote.job_id and q.contractor_id == quote.contractor_id
                for q in self._quotes.values()
            ):
                raise DuplicateRecordError(
                    f"Contractor {quote.contractor_id} already has a pending quote "
                    f"on job {quote.job_id}"
                )
            self._quotes[quote.id] = copy.deepcopy(quote)
        return quote.id

    def get_quote(self, quote_id: str) -> Optional[Quote]:
        with self.lock:
            quote = self._quotes.get(quote_id)
            return copy.deepcopy(quote) if quote else None

    def list_quotes(
        self,
        job_id: Optional[str] = None,
        contractor_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 200,
    ) -> List[Quote]:
        with self.lock:
            quotes = [copy.deepcopy(q) for q in self._quotes.values()]

        if job_id is not None:
            quotes = [q for q in quotes if q.job_id == job_id]
        if contractor_id is not None:
            quotes = [q for q in quotes if q.contractor_id == contractor_id]
        if status is not None:
            quotes = [q for q in quotes if q.status == status]

        quotes.sort(key=lambda q: q.created_at or _utc_now(), reverse=True)
        return quotes[:limit]

    def update_quote_status(
        self, quote_id: str, expected_status: str, new_status: str
    ) -> Optional[Quote]:
        with self.lock:
            quote = self._quotes.get(quote_id)
            if quote is None or quote.status != expected_status:
                return None
            quote.status = new_status
            quote.updated_at = _utc_now()
            return copy.deepcopy(quote)

    def accept_quote(self, quote_id: str) -> Optional[Tuple[Job, Quote]]:
        with self.lock:
            quote = self._quotes.get(quote_id)
            if quote is None or not quote.is_pending:
                return None

            # The job CAS is the last check; nothing is written before it succeeds
            job = self.jobs.update_job_status(
                quote.job_id,
                OPEN_STATUSES,
                JobStatus.CONTRACTOR_SELECTED.value,
                contractor_id=quote.contractor_id,
                selected_quote_id=quote.id,
            )
            if job is None:
                return None

            now = _utc_now()
            quote.status = QuoteStatus.ACCEPTED.value
            quote.updated_at = now
            for sibling in self._quotes.values():
                if sibling.job_id == quote.job_id and sibling.id != quote.id and sibling.is_pending:
                    sibling.status = QuoteStatus.DECLINED.value
                    sibling.updated_at = now

            return job, copy.deepcopy(quote)


class SupabaseQuoteStorage(SupabaseStorageBase):
    """Quote storage backed by the Supabase ``quotes`` table.

    One-pending-quote-per-contractor and one-accepted-quote-per-job are
    partial unique indexes in Postgres.
    """

    def save_quote(self, quote: Quote) -> Optional[str]:
        query = self.client.rpc(SUBMIT_QUOTE_FUNCTION, {"p_quote": quote.to_dict()})
        rows = self._rows(self._execute(query, "insert quote"))
        return quote.id if rows else None

    def get_quote(self, quote_id: str) -> Optional[Quote]:
        result = self._execute(
            self._table(QUOTES_TABLE).select("*").eq("id", quote_id).limit(1), "get quote"
        )
        rows = self._rows(result)
        return Quote.from_dict(rows[0]) if rows else None

    def list_quotes(
        self,
        job_id: Optional[str] = None,
        contractor_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 200,
    ) -> List[Quote]:
        query = self._table(QUOTES_TABLE).select("*")
        if job_id is not None:
            query = query.eq("job_id", job_id)
        if contractor_id is not None:
            query = query.eq("contractor_id", contractor_id)
        if status is not None:
            query = query.eq("status", status)
        query = query.order("created_at", desc=True).limit(limit)
        return [Quote.from_dict(row) for row in self._rows(self._execute(query, "list quotes"))]

    def update_quote_status(
        self, quote_id: str, expected_status: str, new_status: str
    ) -> Optional[Quote]:
        query = (
            self._table(QUOTES_TABLE)
            .update({"status": new_status, "updated_at": _utc_now().isoformat()})
            .eq("id", quote_id)
            .eq("status", expected_status)
        )
        rows = self._rows(self._execute(query, "update quote status"))
        return Quote.from_dict(rows[0]) if rows else None

    def accept_quote(self, quote_id: str) -> Optional[Tuple[Job, Quote]]:
        query = self.client.rpc(ACCEPT_QUOTE_FUNCTION, {"p_quote_id": quote_id})
        rows = self._rows(self._execute(query, "accept quote"))
        if not rows:
            return None
        quote = self.get_quote(quote_id)
        return Job.from_dict(rows[0]), quote
