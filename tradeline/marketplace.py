"""
Marketplace: one object holding every service, wired to one backend.

Usage:
    from tradeline import Marketplace

    market = Marketplace.in_memory()
    job = market.jobs.create_job("cust-1", "Fix tap", "Kitchen tap drips", suggested_trades=["plumbing"])
    quote = market.quotes.create_quote(job.id, "pro-1", 95)
    market.quotes.accept_quote(quote.id, "cust-1")
"""

import logging
import threading
from typing import Optional

from tradeline.classifier.service import TextClassifier
from tradeline.config import MarketplaceConfig
from tradeline.jobs.matching import JobMatcher
from tradeline.jobs.service import JobService
from tradeline.jobs.storage import InMemoryJobStorage, SupabaseJobStorage
from tradeline.messages.service import MessageService
from tradeline.messages.storage import InMemoryMessageStorage, SupabaseMessageStorage
from tradeline.profiles.service import ProfileService
from tradeline.profiles.storage import InMemoryProfileStorage, SupabaseProfileStorage
from tradeline.quotes.service import QuoteService
from tradeline.quotes.storage import InMemoryQuoteStorage, SupabaseQuoteStorage
from tradeline.reviews.service import ReviewService
from tradeline.reviews.storage import InMemoryReviewStorage, SupabaseReviewStorage

logger = logging.getLogger(__name__)


class Marketplace:
    """Services for jobs, matching, profiles, quotes, messages and reviews.

    Use ``in_memory()`` for tests and local runs, ``from_supabase()`` for
    deployments.
    """

    def __init__(
        self,
        job_storage,
        quote_storage,
        message_storage,
        review_storage,
        profile_storage,
        config: Optional[MarketplaceConfig] = None,
        classifier: Optional[TextClassifier] = None,
    ):
        self.config = config or MarketplaceConfig()
        self.classifier = classifier or TextClassifier()
        self.jobs = JobService(job_storage, self.config, classifier=self.classifier)
        self.matcher = JobMatcher(job_storage, self.config)
        self.profiles = ProfileService(profile_storage, self.matcher, self.config)
        self.quotes = QuoteService(quote_storage, self.jobs, self.config)
        self.messages = MessageService(message_storage, self.jobs, self.config)
        self.reviews = ReviewService(review_storage, self.jobs, self.config)

    @classmethod
    def in_memory(
        cls,
        config: Optional[MarketplaceConfig] = None,
        classifier: Optional[TextClassifier] = None,
    ) -> "Marketplace":
        """Build a marketplace whose storages share one lock."""
        lock = threading.RLock()
        job_storage = InMemoryJobStorage(lock)
        return cls(
            job_storage,
            InMemoryQuoteStorage(job_storage),
            InMemoryMessageStorage(lock),
            InMemoryReviewStorage(lock),
            InMemoryProfileStorage(lock),
            config=config,
            classifier=classifier,
        )

    @classmethod
    def from_supabase(
        cls,
        client,
        config: Optional[MarketplaceConfig] = None,
        classifier: Optional[TextClassifier] = None,
    ) -> "Marketplace":
        """Build a marketplace on a ``supabase.Client``."""
        logger.debug("Creating Supabase-backed marketplace")
        return cls(
            SupabaseJobStorage(client),
            SupabaseQuoteStorage(client),
            SupabaseMessageStorage(client),
            SupabaseReviewStorage(client),
            SupabaseProfileStorage(client),
            config=config,
            classifier=classifier,
        )
