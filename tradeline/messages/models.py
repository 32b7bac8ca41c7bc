"""Message data model: one note between two users about a job."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from tradeline.types import format_datetime, parse_datetime


@dataclass
class Message:
    """A message on a job thread. ``read`` only ever goes False -> True."""

    id: str
    job_id: str
    sender_id: str
    receiver_id: str
    content: str
    read: bool = False
    created_at: Optional[datetime] = None
    read_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.content or not self.content.strip():
            raise ValueError("Message content is required")
        if self.sender_id == self.receiver_id:
            raise ValueError("Cannot send a message to yourself")

    def involves(self, user_a: str, user_b: str) -> bool:
        return {self.sender_id, self.receiver_id} == {user_a, user_b}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "job_id": self.job_id,
            "sender_id": self.sender_id,
            "receiver_id": self.receiver_id,
            "content": self.content,
            "read": self.read,
            "created_at": format_datetime(self.created_at),
            "read_at": format_datetime(self.read_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            id=data["id"],
            job_id=data["job_id"],
            sender_id=data["sender_id"],
            receiver_id=data["receiver_id"],
            content=data["content"],
            read=bool(data.get("read", False)),
            created_at=parse_datetime(data.get("created_at")),
            read_at=parse_datetime(data.get("read_at")),
        )
