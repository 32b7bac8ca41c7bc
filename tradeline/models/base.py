"""Shared types for chat model adapters."""

from typing import Protocol

from tradeline.errors import UpstreamError


class ModelError(UpstreamError):
    """Raised when a model provider call fails.

    ``error_class`` is one of ``rate_limit``, ``auth``, ``timeout``,
    ``server``, ``empty`` or ``unknown``.
    """

    def __init__(self, error_class: str, message: str) -> None:
        super().__init__(message)
        self.error_class = error_class


class ChatModel(Protocol):
    """Anything that turns a system prompt and user text into reply text."""

    @property
    def model_id(self) -> str: ...

    def complete(self, system: str, text: str) -> str:
        """Return the model's reply text. Raises ModelError on failure."""
        ...
