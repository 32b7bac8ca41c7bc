"""
Jobs storage layer.

Provides persistence for jobs and their state-transition history, with an
in-memory backend for tests and local development and a Supabase backend
for deployments.

Status changes go through ``update_job_status``, a single conditional
write (``UPDATE ... WHERE id = ? AND status IN (...)``). It is the only
concurrency control the services rely on: a ``None`` result means no row
matched, either because the job does not exist or because its status moved.
"""

import copy
import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence

from tradeline.jobs.models import Job, JobStateTransition, STATUS_TIMESTAMP_FIELDS
from tradeline.supabase_base import SupabaseStorageBase

logger = logging.getLogger(__name__)

JOBS_TABLE = "jobs"
JOB_TRANSITIONS_TABLE = "job_state_transitions"


class JobStorage(Protocol):
    """Protocol for job persistence backends."""

    def save_job(self, job: Job) -> str:
        """Save a new job. Returns the job ID."""
        ...

    def get_job(self, job_id: str) -> Optional[Job]:
        """Get a job by ID."""
        ...

    def list_jobs(
        self,
        statuses: Optional[Sequence[str]] = None,
        customer_id: Optional[str] = None,
        contractor_id: Optional[str] = None,
        trades: Optional[Sequence[str]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Job]:
        """List jobs newest first. ``trades`` matches jobs sharing any tag."""
        ...

    def update_job_status(
        self,
        job_id: str,
        expected_statuses: Sequence[str],
        new_status: str,
        **updates,
    ) -> Optional[Job]:
        """Atomically move a job to ``new_status`` if its status is expected.

        Returns the updated job, or None when no row matched.
        """
        ...

    def delete_job(self, job_id: str) -> bool:
        """Delete a job. Returns True if a row was removed."""
        ...

    def save_transition(self, transition: JobStateTransition) -> str:
        """Save a state transition record. Returns the transition ID."""
        ...

    def get_transitions(self, job_id: str) -> List[JobStateTransition]:
        """Get all state transitions for a job, oldest first."""
        ...


def _status_update(new_status: str, now: datetime, updates: dict) -> dict:
    data = {"status": new_status, "updated_at": now, **updates}
    stamp = STATUS_TIMESTAMP_FIELDS.get(new_status)
    if stamp and stamp not in data:
        data[stamp] = now
    return data


class InMemoryJobStorage:
    """In-memory job storage for testing and local development.

    Records are kept in id-keyed maps and copied on the way in and out, so
    callers never hold a reference into the store. All writes happen under
    ``self.lock``; sibling storages (quotes, reviews) share it to make
    cross-record updates atomic.
    """

    def __init__(self, lock: Optional[threading.RLock] = None):
        """Initialize empty storage."""
        self.lock = lock or threading.RLock()
        self._jobs: dict[str, Job] = {}
        self._transitions: dict[str, list[JobStateTransition]] = {}  # job_id -> list

    def _utc_now(self) -> datetime:
        """Get current UTC timestamp."""
        return datetime.now(timezone.utc)

    # === Jobs ===

    def save_job(self, job: Job) -> str:
        """Save a job listing."""
        with self.lock:
            self._jobs[job.id] = copy.deepcopy(job)
            self._transitions.setdefault(job.id, [])
        return job.id

    def get_job(self, job_id: str) -> Optional[Job]:
        """Get a job by ID."""
        with self.lock:
            job = self._jobs.get(job_id)
            return copy.deepcopy(job) if job else None

    def list_jobs(
        self,
        statuses: Optional[Sequence[str]] = None,
        customer_id: Optional[str] = None,
        contractor_id: Optional[str] = None,
        trades: Optional[Sequence[str]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Job]:
        """List jobs with optional filters."""
        with self.lock:
            jobs = [copy.deepcopy(j) for j in self._jobs.values()]

        if statuses is not None:
            jobs = [j for j in jobs if j.status in statuses]
        if customer_id is not None:
            jobs = [j for j in jobs if j.customer_id == customer_id]
        if contractor_id is not None:
            jobs = [j for j in jobs if j.contractor_id == contractor_id]
        if trades:
            wanted = set(trades)
            jobs = [j for j in jobs if wanted.intersection(j.suggested_trades)]

        # Sort by created_at desc
        jobs.sort(key=lambda j: j.created_at or self._utc_now(), reverse=True)

        return jobs[offset : offset + limit]

    def update_job_status(
        self,
        job_id: str,
        expected_statuses: Sequence[str],
        new_status: str,
        **updates,
    ) -> Optional[Job]:
        """Compare-and-swap the job status under the storage lock."""
        with self.lock:
            job = self._jobs.get(job_id)
            if job is None or job.status not in expected_statuses:
                return None
            for key, value in _status_update(new_status, self._utc_now(), updates).items():
                setattr(job, key, value)
            return copy.deepcopy(job)

    def delete_job(self, job_id: str) -> bool:
        with self.lock:
            if self._jobs.pop(job_id, None) is None:
                return False
            self._transitions.pop(job_id, None)
            return True

    # === Transitions ===

    def save_transition(self, transition: JobStateTransition) -> str:
        """Save a state transition record."""
        with self.lock:
            self._transitions.setdefault(transition.job_id, []).append(copy.deepcopy(transition))
        return transition.id

    def get_transitions(self, job_id: str) -> List[JobStateTransition]:
        """Get all state transitions for a job."""
        with self.lock:
            transitions = [copy.deepcopy(t) for t in self._transitions.get(job_id, [])]
        # Sort by created_at asc
        return sorted(transitions, key=lambda t: t.created_at or self._utc_now())


class SupabaseJobStorage(SupabaseStorageBase):
    """Job storage backed by the Supabase ``jobs`` table.

    ``suggested_trades`` is a Postgres ``text[]`` column so trade matching
    is a server-side array overlap (``&&``).
    """

    def save_job(self, job: Job) -> str:
        self._execute(self._table(JOBS_TABLE).insert(job.to_dict()), "insert job")
        return job.id

    def get_job(self, job_id: str) -> Optional[Job]:
        result = self._execute(
            self._table(JOBS_TABLE).select("*").eq("id", job_id).limit(1), "get job"
        )
        rows = self._rows(result)
        return Job.from_dict(rows[0]) if rows else None

    def list_jobs(
        self,
        statuses: Optional[Sequence[str]] = None,
        customer_id: Optional[str] = None,
        contractor_id: Optional[str] = None,
        trades: Optional[Sequence[str]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Job]:
        query = self._table(JOBS_TABLE).select("*")
        if statuses is not None:
            query = query.in_("status", list(statuses))
        if customer_id is not None:
            query = query.eq("customer_id", customer_id)
        if contractor_id is not None:
            query = query.eq("contractor_id", contractor_id)
        if trades:
            query = query.overlaps("suggested_trades", list(trades))

        query = query.order("created_at", desc=True).range(offset, offset + limit - 1)
        result = self._execute(query, "list jobs")
        return [Job.from_dict(row) for row in self._rows(result)]

    def update_job_status(
        self,
        job_id: str,
        expected_statuses: Sequence[str],
        new_status: str,
        **updates,
    ) -> Optional[Job]:
        now = datetime.now(timezone.utc)
        data = {
            key: value.isoformat() if isinstance(value, datetime) else value
            for key, value in _status_update(new_status, now, updates).items()
        }
        # Atomic update: only succeeds if status still matches
        query = (
            self._table(JOBS_TABLE)
            .update(data)
            .eq("id", job_id)
            .in_("status", list(expected_statuses))
        )
        rows = self._rows(self._execute(query, "update job status"))
        return Job.from_dict(rows[0]) if rows else None

    def delete_job(self, job_id: str) -> bool:
        result = self._execute(self._table(JOBS_TABLE).delete().eq("id", job_id), "delete job")
        return len(self._rows(result)) > 0

    def save_transition(self, transition: JobStateTransition) -> str:
        self._execute(
            self._table(JOB_TRANSITIONS_TABLE).insert(transition.to_dict()), "insert transition"
        )
        return transition.id

    def get_transitions(self, job_id: str) -> List[JobStateTransition]:
        query = (
            self._table(JOB_TRANSITIONS_TABLE)
            .select("*")
            .eq("job_id", job_id)
            .order("created_at", desc=False)
        )
        rows = self._rows(self._execute(query, "get transitions"))
        return [JobStateTransition.from_dict(row) for row in rows]
