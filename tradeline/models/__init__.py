"""Chat model adapters used by the remote classifier.

Provider SDKs are imported only when an adapter is instantiated.
"""

from __future__ import annotations

from tradeline.models.anthropic import AnthropicChatModel
from tradeline.models.base import ChatModel, ModelError
from tradeline.models.openai import OpenAIChatModel

__all__ = ["AnthropicChatModel", "ChatModel", "ModelError", "OpenAIChatModel"]
