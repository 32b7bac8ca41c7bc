"""Jobs subsystem for the marketplace.

Models:
- Job: A customer's request for trade work
- JobStatus: Job lifecycle status
- Urgency: low / medium / high
- JobStateTransition: Audit log entry for state changes
- ContractorProfile: A contractor's trades, used for matching

Service:
- JobService: Job operations (create, accept, start, complete, cancel, ...)
- JobMatcher: Open jobs for a contractor's trade set
"""

from tradeline.jobs.matching import JobMatcher
from tradeline.jobs.models import (
    OPEN_STATUSES,
    VALID_JOB_TRANSITIONS,
    ContractorProfile,
    Job,
    JobStateTransition,
    JobStatus,
    Urgency,
)
from tradeline.jobs.service import (
    InvalidTransitionError,
    JobConflictError,
    JobNotFoundError,
    JobService,
)
from tradeline.jobs.storage import InMemoryJobStorage, JobStorage, SupabaseJobStorage

__all__ = [
    # Models
    "Job",
    "JobStatus",
    "Urgency",
    "JobStateTransition",
    "ContractorProfile",
    "VALID_JOB_TRANSITIONS",
    "OPEN_STATUSES",
    # Storage
    "JobStorage",
    "InMemoryJobStorage",
    "SupabaseJobStorage",
    # Service
    "JobService",
    "JobMatcher",
    "JobNotFoundError",
    "InvalidTransitionError",
    "JobConflictError",
]
