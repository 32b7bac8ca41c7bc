"""Quotes: contractors' priced offers on open jobs."""

from tradeline.quotes.models import Quote, QuoteStatus
from tradeline.quotes.service import (
    DuplicateQuoteError,
    QuoteConflictError,
    QuoteExpiredError,
    QuoteNotFoundError,
    QuoteService,
)
from tradeline.quotes.storage import InMemoryQuoteStorage, QuoteStorage, SupabaseQuoteStorage

__all__ = [
    "Quote",
    "QuoteStatus",
    "QuoteStorage",
    "InMemoryQuoteStorage",
    "SupabaseQuoteStorage",
    "QuoteService",
    "QuoteNotFoundError",
    "DuplicateQuoteError",
    "QuoteExpiredError",
    "QuoteConflictError",
]
