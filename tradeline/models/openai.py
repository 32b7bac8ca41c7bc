"""OpenAIChatModel: chat completions through OpenAI's API.

Wraps the ``openai`` Python SDK. The SDK is imported lazily so that
the module can be imported without having ``openai`` installed (the
import fails only when the class is instantiated).
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from tradeline.models.base import ModelError

logger = logging.getLogger(__name__)


class OpenAIChatModel:
    """Chat model backed by the OpenAI API.

    Usage::

        model = OpenAIChatModel()  # uses OPENAI_API_KEY env var
        reply = model.complete("You are terse.", "Hello")
    """

    def __init__(
        self,
        model_id: str = "gpt-4o-mini",
        *,
        api_key: Optional[str] = None,
        max_tokens: int = 450,
        temperature: float = 0.0,
        timeout: float = 20.0,
    ) -> None:
        try:
            import openai as _openai  # noqa: F811
        except ImportError:
            raise ImportError(
                "The 'openai' package is required for OpenAIChatModel. "
                "Install it with: pip install openai"
            ) from None

        resolved_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not resolved_key:
            raise ValueError("An API key is required. Pass api_key= or set OPENAI_API_KEY.")

        self._model_id = model_id
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._client = _openai.OpenAI(api_key=resolved_key, timeout=timeout, max_retries=1)

    @property
    def model_id(self) -> str:
        return self._model_id

    def complete(self, system: str, text: str) -> str:
        """Send one system + user turn and return the reply text."""
        try:
            response = self._client.chat.completions.create(
                model=self._model_id,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": text},
                ],
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except Exception as exc:
            logger.debug("OpenAI API completion failed: %s", exc, exc_info=True)
            raise self._classify_error(exc, "OpenAI API error") from exc

        return self._reply_text(response)

    @staticmethod
    def _reply_text(response: Any) -> str:
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise ModelError("empty", "OpenAI API returned no choices")
        content = choices[0].message.content or ""
        if not content.strip():
            raise ModelError("empty", "OpenAI API returned an empty reply")
        return content

    @staticmethod
    def _classify_error(exc: Exception, prefix: str) -> ModelError:
        """Classify an OpenAI SDK exception into an error class."""
        import openai as _openai

        _checks: list[tuple[str, str, str]] = [
            ("RateLimitError", "rate_limit", "rate limited"),
            ("AuthenticationError", "auth", "auth failed"),
            ("APITimeoutError", "timeout", "timeout"),
        ]
        for attr, cls, label in _checks:
            exc_type = getattr(_openai, attr, None)
            if exc_type is not None and isinstance(exc, exc_type):
                return ModelError(cls, f"{prefix}: {label}: {exc}")

        api_status = getattr(_openai, "APIStatusError", None)
        if api_status is not None and isinstance(exc, api_status):
            code = getattr(exc, "status_code", "?")
            return ModelError("server", f"{prefix}: API error ({code}): {exc}")

        return ModelError("unknown", f"{prefix}: {exc}")
