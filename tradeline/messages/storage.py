"""
Message storage layer.

Read flags are set with conditional writes (``WHERE read = false``) so a
message is never flipped back to unread and ``read_at`` keeps the first
time it was read.
"""

import copy
import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional, Protocol

from tradeline.messages.models import Message
from tradeline.supabase_base import SupabaseStorageBase

logger = logging.getLogger(__name__)

MESSAGES_TABLE = "messages"


class MessageStorage(Protocol):
    """Protocol for message persistence backends."""

    def save_message(self, message: Message) -> str:
        ...

    def get_message(self, message_id: str) -> Optional[Message]:
        ...

    def list_messages(
        self,
        job_id: str,
        user_a: Optional[str] = None,
        user_b: Optional[str] = None,
        limit: int = 200,
    ) -> List[Message]:
        """Messages on a job oldest first, optionally only between two users."""
        ...

    def mark_read(self, message_id: str) -> Optional[Message]:
        """Set read on an unread message. None if it was already read or missing."""
        ...

    def mark_all_read(self, job_id: str, receiver_id: str) -> int:
        """Mark every unread message to ``receiver_id`` on a job. Returns the count."""
        ...

    def count_unread(self, receiver_id: str) -> int:
        ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryMessageStorage:
    """In-memory message storage for testing and local development."""

    def __init__(self, lock: Optional[threading.RLock] = None):
        self.lock = lock or threading.RLock()
        self._messages: dict[str, Message] = {}

    def save_message(self, message: Message) -> str:
        with self.lock:
            self._messages[message.id] = copy.deepcopy(message)
        return message.id

    def get_message(self, message_id: str) -> Optional[Message]:
        with self.lock:
            message = self._messages.get(message_id)
            return copy.deepcopy(message) if message else None

    def list_messages(
        self,
        job_id: str,
        user_a: Optional[str] = None,
        user_b: Optional[str] = None,
        limit: int = 200,
    ) -> List[Message]:
        with self.lock:
            messages = [copy.deepcopy(m) for m in self._messages.values() if m.job_id == job_id]

        if user_a is not None and user_b is not None:
            messages = [m for m in messages if m.involves(user_a, user_b)]

        # Sort by created_at asc
        messages.sort(key=lambda m: m.created_at or _utc_now())
        return messages[:limit]

    def mark_read(self, message_id: str) -> Optional[Message]:
        with self.lock:
            message = self._messages.get(message_id)
            if message is None or message.read:
                return None
            message.read = True
            message.read_at = _utc_now()
            return copy.deepcopy(message)

    def mark_all_read(self, job_id: str, receiver_id: str) -> int:
        now = _utc_now()
        count = 0
        with self.lock:
            for message in self._messages.values():
                if message.job_id == job_id and message.receiver_id == receiver_id and not message.read:
                    message.read = True
                    message.read_at = now
                    count += 1
        return count

    def count_unread(self, receiver_id: str) -> int:
        with self.lock:
            return sum(
                1 for m in self._messages.values() if m.receiver_id == receiver_id and not m.read
            )


class SupabaseMessageStorage(SupabaseStorageBase):
    """Message storage backed by the Supabase ``messages`` table."""

    def save_message(self, message: Message) -> str:
        self._execute(self._table(MESSAGES_TABLE).insert(message.to_dict()), "insert message")
        return message.id

    def get_message(self, message_id: str) -> Optional[Message]:
        result = self._execute(
            self._table(MESSAGES_TABLE).select("*").eq("id", message_id).limit(1), "get message"
        )
        rows = self._rows(result)
        return Message.from_dict(rows[0]) if rows else None

    def list_messages(
        self,
        job_id: str,
        user_a: Optional[str] = None,
        user_b: Optional[str] = None,
        limit: int = 200,
    ) -> List[Message]:
        query = self._table(MESSAGES_TABLE).select("*").eq("job_id", job_id)
        if user_a is not None and user_b is not None:
            query = query.or_(
                f"and(sender_id.eq.{user_a},receiver_id.eq.{user_b}),"
                f"and(sender_id.eq.{user_b},receiver_id.eq.{user_a})"
            )
        query = query.order("created_at", desc=False).limit(limit)
        rows = self._rows(self._execute(query, "list messages"))
        return [Message.from_dict(row) for row in rows]

    def mark_read(self, message_id: str) -> Optional[Message]:
        query = (
            self._table(MESSAGES_TABLE)
            .update({"read": True, "read_at": _utc_now().isoformat()})
            .eq("id", message_id)
            .eq("read", False)
        )
        rows = self._rows(self._execute(query, "mark message read"))
        return Message.from_dict(rows[0]) if rows else None

    def mark_all_read(self, job_id: str, receiver_id: str) -> int:
        query = (
            self._table(MESSAGES_TABLE)
            .update({"read": True, "read_at": _utc_now().isoformat()})
            .eq("job_id", job_id)
            .eq("receiver_id", receiver_id)
            .eq("read", False)
        )
        return len(self._rows(self._execute(query, "mark all messages read")))

    def count_unread(self, receiver_id: str) -> int:
        query = (
            self._table(MESSAGES_TABLE)
            .select("id", count="exact")
            .eq("receiver_id", receiver_id)
            .eq("read", False)
        )
        result = self._execute(query, "count unread messages")
        count = getattr(result, "count", None)
        return count if count is not None else len(self._rows(result))
