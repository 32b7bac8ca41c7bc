"""
Tradeline - job matching and workflow core for a trades marketplace.

Customers post jobs, tradespeople find and claim the ones that fit their
trades, and both sides exchange quotes, messages and reviews.
"""

from .config import MarketplaceConfig
from .errors import (
    ConflictError,
    MarketplaceError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)
from .marketplace import Marketplace

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("tradeline")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "Marketplace",
    "MarketplaceConfig",
    "MarketplaceError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "UnauthorizedError",
    "UpstreamError",
]
