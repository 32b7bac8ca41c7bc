"""Job message threads."""

from tradeline.messages.models import Message
from tradeline.messages.service import MessageNotFoundError, MessageService
from tradeline.messages.storage import (
    InMemoryMessageStorage,
    MessageStorage,
    SupabaseMessageStorage,
)

__all__ = [
    "Message",
    "MessageStorage",
    "InMemoryMessageStorage",
    "SupabaseMessageStorage",
    "MessageService",
    "MessageNotFoundError",
]
