"""
Contractor profile storage layer.

One row per contractor, keyed by ``contractor_id``. Saving a profile
replaces the stored one.
"""

import copy
import logging
import threading
from typing import Optional, Protocol

from tradeline.jobs.models import ContractorProfile
from tradeline.supabase_base import SupabaseStorageBase

logger = logging.getLogger(__name__)

PROFILES_TABLE = "contractor_profiles"


class ProfileStorage(Protocol):
    """Protocol for contractor profile persistence backends."""

    def save_profile(self, profile: ContractorProfile) -> ContractorProfile:
        """Insert or replace the contractor's profile and return what was stored."""
        ...

    def get_profile(self, contractor_id: str) -> Optional[ContractorProfile]:
        ...


class InMemoryProfileStorage:
    """In-memory profile storage for testing and local development."""

    def __init__(self, lock: Optional[threading.RLock] = None):
        self.lock = lock or threading.RLock()
        self._profiles: dict[str, ContractorProfile] = {}

    def save_profile(self, profile: ContractorProfile) -> ContractorProfile:
        with self.lock:
            self._profiles[profile.contractor_id] = copy.deepcopy(profile)
        return copy.deepcopy(profile)

    def get_profile(self, contractor_id: str) -> Optional[ContractorProfile]:
        with self.lock:
            profile = self._profiles.get(contractor_id)
            return copy.deepcopy(profile) if profile else None


class SupabaseProfileStorage(SupabaseStorageBase):
    """Profile storage backed by the Supabase ``contractor_profiles`` table."""

    def save_profile(self, profile: ContractorProfile) -> ContractorProfile:
        query = self._table(PROFILES_TABLE).upsert(profile.to_dict(), on_conflict="contractor_id")
        rows = self._rows(self._execute(query, "upsert contractor profile"))
        return ContractorProfile.from_dict(rows[0]) if rows else profile

    def get_profile(self, contractor_id: str) -> Optional[ContractorProfile]:
        result = self._execute(
            self._table(PROFILES_TABLE).select("*").eq("contractor_id", contractor_id).limit(1),
            "get contractor profile",
        )
        rows = self._rows(result)
        return ContractorProfile.from_dict(rows[0]) if rows else None
