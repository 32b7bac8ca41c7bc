"""AnthropicChatModel: chat completions through Anthropic's API.

Wraps the ``anthropic`` Python SDK. The SDK is imported lazily so that
the module can be imported without having ``anthropic`` installed (the
import fails only when the class is instantiated).
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from tradeline.models.base import ModelError

logger = logging.getLogger(__name__)


class AnthropicChatModel:
    """Chat model backed by the Anthropic API.

    Usage::

        model = AnthropicChatModel()  # uses ANTHROPIC_API_KEY env var
        reply = model.complete("You are terse.", "Hello")
    """

    def __init__(
        self,
        model_id: str = "claude-3-5-haiku-latest",
        *,
        api_key: Optional[str] = None,
        max_tokens: int = 450,
        temperature: float = 0.0,
        timeout: float = 20.0,
    ) -> None:
        try:
            import anthropic  # noqa: F811
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for AnthropicChatModel. "
                "Install it with: pip install anthropic"
            ) from None

        resolved_key = (
            api_key or os.environ.get("CLAUDE_API_KEY") or os.environ.get("ANTHROPIC_API_KEY")
        )
        if not resolved_key:
            raise ValueError(
                "An API key is required. Pass api_key= or set CLAUDE_API_KEY / ANTHROPIC_API_KEY."
            )

        self._model_id = model_id
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._client = anthropic.Anthropic(api_key=resolved_key, timeout=timeout, max_retries=1)

    @property
    def model_id(self) -> str:
        return self._model_id

    def complete(self, system: str, text: str) -> str:
        """Send one user turn under ``system`` and return the reply text."""
        try:
            response = self._client.messages.create(
                model=self._model_id,
                system=system,
                messages=[{"role": "user", "content": text}],
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except Exception as exc:
            logger.debug("Anthropic API completion failed: %s", exc, exc_info=True)
            raise self._classify_error(exc, "Anthropic API error") from exc

        return self._reply_text(response)

    @staticmethod
    def _reply_text(response: Any) -> str:
        parts = [block.text for block in response.content if block.type == "text"]
        content = "".join(parts)
        if not content.strip():
            raise ModelError("empty", "Anthropic API returned an empty reply")
        return content

    @staticmethod
    def _classify_error(exc: Exception, prefix: str) -> ModelError:
        """Classify an Anthropic SDK exception into an error class."""
        import anthropic as _anthropic

        _checks: list[tuple[str, str, str]] = [
            ("RateLimitError", "rate_limit", "rate limited"),
            ("AuthenticationError", "auth", "auth failed"),
            ("APITimeoutError", "timeout", "timeout"),
        ]
        for attr, cls, label in _checks:
            exc_type = getattr(_anthropic, attr, None)
            if exc_type is not None and isinstance(exc, exc_type):
                return ModelError(cls, f"{prefix}: {label}: {exc}")

        api_status = getattr(_anthropic, "APIStatusError", None)
        if api_status is not None and isinstance(exc, api_status):
            code = getattr(exc, "status_code", "?")
            return ModelError("server", f"{prefix}: API error ({code}): {exc}")

        return ModelError("unknown", f"{prefix}: {exc}")
