"""Contractor profiles and profile-based matching."""

from tradeline.jobs.models import ContractorProfile
from tradeline.profiles.service import ProfileNotFoundError, ProfileService
from tradeline.profiles.storage import (
    InMemoryProfileStorage,
    ProfileStorage,
    SupabaseProfileStorage,
)

__all__ = [
    "ContractorProfile",
    "ProfileStorage",
    "InMemoryProfileStorage",
    "SupabaseProfileStorage",
    "ProfileService",
    "ProfileNotFoundError",
]
