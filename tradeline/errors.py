"""Error taxonomy shared by every marketplace service.

Services raise these; the HTTP layer maps ``kind`` to a status code and
returns ``{"error": {"kind": ..., "message": ...}}``.

- ValidationError:   missing or malformed input (400), never retried
- NotFoundError:     unknown id (404)
- ConflictError:     a state-transition guard failed (409); refresh and retry
- UnauthorizedError: caller is not a party allowed to act (403)
- UpstreamError:     classifier or store failed (502); safe to retry
"""


class MarketplaceError(Exception):
    """Base for all marketplace errors."""

    kind = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(MarketplaceError):
    kind = "validation"


class NotFoundError(MarketplaceError):
    kind = "not_found"


class ConflictError(MarketplaceError):
    kind = "conflict"


class UnauthorizedError(MarketplaceError):
    kind = "unauthorized"


class UpstreamError(MarketplaceError):
    kind = "upstream"


class StorageError(UpstreamError):
    """Raised when the backing store fails or times out."""


class DuplicateRecordError(ConflictError):
    """A uniqueness rule rejected an insert."""
