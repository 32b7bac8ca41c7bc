"""Configuration for the marketplace services."""

from dataclasses import dataclass


@dataclass
class MarketplaceConfig:
    """Tunables shared by the job, quote, message and review services.

    Attributes:
        default_page_size: Jobs returned by a list call when no limit is given.
        max_page_size: Hard cap on any job list or match query.
        match_page_size: Cap on matcher results (contractor dashboard).
        min_rating / max_rating: Inclusive review rating bounds.
        default_currency: Currency unit assigned to quotes that omit one.
        max_title_length: Longest job title accepted.
        max_message_length: Longest message body accepted.
        max_comment_length: Longest review comment accepted.
        classifier_timeout: Seconds before a remote classification is abandoned.
    """

    default_page_size: int = 100
    max_page_size: int = 200
    match_page_size: int = 200
    min_rating: int = 1
    max_rating: int = 5
    default_currency: str = "EUR"
    max_title_length: int = 200
    max_message_length: int = 5000
    max_comment_length: int = 2000
    classifier_timeout: float = 20.0

    def __post_init__(self):
        if self.default_page_size < 1 or self.max_page_size < 1:
            raise ValueError("Page sizes must be positive")
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size cannot exceed max_page_size")
        if self.match_page_size < 1:
            raise ValueError("match_page_size must be positive")
        if self.min_rating > self.max_rating:
            raise ValueError("min_rating cannot exceed max_rating")
        if self.classifier_timeout <= 0:
            raise ValueError("classifier_timeout must be positive")

    def clamp_limit(self, limit) -> int:
        """Resolve a caller-supplied page size against the configured cap."""
        if limit is None:
            return self.default_page_size
        return max(1, min(int(limit), self.max_page_size))
