"""
Message service.

Job threads between a customer and the tradespeople quoting on or working
the job. Every message has the job's customer on one end.
"""

import logging
from typing import List, Optional

from tradeline.config import MarketplaceConfig
from tradeline.errors import NotFoundError, UnauthorizedError, ValidationError
from tradeline.jobs.service import JobService
from tradeline.messages.models import Message
from tradeline.messages.storage import MessageStorage
from tradeline.types import new_id, utc_now

logger = logging.getLogger(__name__)


class MessageNotFoundError(NotFoundError):
    """Message does not exist."""


class MessageService:
    """Service for job message threads."""

    def __init__(
        self,
        storage: MessageStorage,
        jobs: JobService,
        config: Optional[MarketplaceConfig] = None,
    ):
        self.storage = storage
        self.jobs = jobs
        self.config = config or MarketplaceConfig()

    def send_message(self, job_id: str, sender_id: str, receiver_id: str, content: str) -> Message:
        """Send a message about a job.

        Raises:
            ValidationError: Empty or oversized content, or sender == receiver
            JobNotFoundError: If job doesn't exist
            UnauthorizedError: Neither end of the message is the job's customer
        """
        if not sender_id or not receiver_id:
            raise ValidationError("sender_id and receiver_id are required")
        if sender_id == receiver_id:
            raise ValidationError("Cannot send a message to yourself")
        content = (content or "").strip()
        if not content:
            raise ValidationError("Message content is required")
        if len(content) > self.config.max_message_length:
            raise ValidationError(
                f"Message too long (max {self.config.max_message_length} characters)"
            )

        job = self.jobs.get_job(job_id)
        if job.customer_id not in (sender_id, receiver_id):
            raise UnauthorizedError("Messages on a job must involve its customer")

        message = Message(
            id=new_id(),
            job_id=job_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            created_at=utc_now(),
        )
        self.storage.save_message(message)
        logger.info(f"Message sent | job={job_id} | from={sender_id} | to={receiver_id}")
        return message

    def get_message(self, message_id: str) -> Message:
        message = self.storage.get_message(message_id)
        if not message:
            raise MessageNotFoundError(f"Message {message_id} not found")
        return message

    def get_conversation(self, job_id: str, user_a: str, user_b: str) -> List[Message]:
        """Messages between two users on a job, oldest first."""
        self.jobs.get_job(job_id)
        return self.storage.list_messages(
            job_id, user_a=user_a, user_b=user_b, limit=self.config.max_page_size
        )

    def list_messages_for_job(self, job_id: str) -> List[Message]:
        self.jobs.get_job(job_id)
        return self.storage.list_messages(job_id, limit=self.config.max_page_size)

    def mark_read(self, message_id: str, reader_id: str) -> Message:
        """Mark a message read. Only its receiver may; repeating is a no-op."""
        message = self.get_message(message_id)
        if message.receiver_id != reader_id:
            raise UnauthorizedError("Only the receiver can mark a message as read")
        if message.read:
            return message

        updated = self.storage.mark_read(message_id)
        # None means another request marked it first
        return updated or self.get_message(message_id)

    def mark_all_read(self, job_id: str, user_id: str) -> int:
        """Mark everything sent to ``user_id`` on a job as read."""
        self.jobs.get_job(job_id)
        count = self.storage.mark_all_read(job_id, user_id)
        logger.debug(f"Marked {count} messages read | job={job_id} | user={user_id}")
        return count

    def unread_count(self, user_id: str) -> int:
        return self.storage.count_unread(user_id)
