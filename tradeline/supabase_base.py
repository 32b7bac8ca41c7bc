"""Shared plumbing for the Supabase-backed storages.

Every query goes through ``SupabaseStorageBase._execute`` so driver
failures surface as typed marketplace errors: unique-constraint violations
become ``DuplicateRecordError`` and anything else becomes ``StorageError``.
"""

import logging
from typing import Any, List

from tradeline.errors import DuplicateRecordError, StorageError

logger = logging.getLogger(__name__)

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: Exception) -> bool:
    code = getattr(exc, "code", None)
    if code == UNIQUE_VIOLATION:
        return True
    text = str(exc).lower()
    return "duplicate key" in text or UNIQUE_VIOLATION in text


class SupabaseStorageBase:
    """Base for storages that talk to Supabase through its table API.

    Args:
        client: A ``supabase.Client`` (or anything with the same query chain).
    """

    def __init__(self, client):
        self.client = client

    def _table(self, name: str):
        return self.client.table(name)

    def _execute(self, query, operation: str) -> Any:
        try:
            return query.execute()
        except Exception as exc:
            if _is_unique_violation(exc):
                raise DuplicateRecordError(f"{operation}: record already exists") from exc
            logger.error(f"Supabase {operation} failed: {exc}")
            raise StorageError(f"{operation} failed") from exc

    @staticmethod
    def _rows(result) -> List[dict]:
        return list(getattr(result, "data", None) or [])
