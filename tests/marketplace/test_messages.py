"""Tests for job message threads."""

import pytest

from tradeline import Marketplace, MarketplaceConfig
from tradeline.errors import UnauthorizedError, ValidationError
from tradeline.jobs import JobNotFoundError
from tradeline.messages import Message, MessageNotFoundError

CUSTOMER = "cust-1"
CONTRACTOR = "pro-1"
OTHER_CONTRACTOR = "pro-2"


class TestMessageModel:
    def test_empty_content(self):
        with pytest.raises(ValueError):
            Message(id="m", job_id="j", sender_id="a", receiver_id="b", content="  ")

    def test_self_message(self):
        with pytest.raises(ValueError):
            Message(id="m", job_id="j", sender_id="a", receiver_id="a", content="hi")

    def test_involves_either_direction(self):
        message = Message(id="m", job_id="j", sender_id="a", receiver_id="b", content="hi")
        assert message.involves("a", "b")
        assert message.involves("b", "a")
        assert not message.involves("a", "c")


class TestSendMessage:
    def test_send(self, market, open_job):
        message = market.messages.send_message(
            open_job.id, CONTRACTOR, CUSTOMER, "  Can I come Tuesday?  "
        )
        assert message.content == "Can I come Tuesday?"
        assert message.read is False
        assert message.read_at is None
        assert message.created_at is not None

    def test_must_involve_customer(self, market, open_job):
        with pytest.raises(UnauthorizedError):
            market.messages.send_message(open_job.id, CONTRACTOR, OTHER_CONTRACTOR, "hi")

    def test_to_self(self, market, open_job):
        with pytest.raises(ValidationError, match="yourself"):
            market.messages.send_message(open_job.id, CUSTOMER, CUSTOMER, "hi")

    def test_blank(self, market, open_job):
        with pytest.raises(ValidationError, match="content"):
            market.messages.send_message(open_job.id, CONTRACTOR, CUSTOMER, "   ")

    def test_too_long(self):
        market = Marketplace.in_memory(MarketplaceConfig(max_message_length=10))
        job = market.jobs.create_job(CUSTOMER, "Fix tap", "Drips")
        with pytest.raises(ValidationError, match="too long"):
            market.messages.send_message(job.id, CONTRACTOR, CUSTOMER, "x" * 11)

    def test_missing_job(self, market):
        with pytest.raises(JobNotFoundError):
            market.messages.send_message("nope", CONTRACTOR, CUSTOMER, "hi")


class TestConversations:
    @pytest.fixture
    def thread(self, market, open_job):
        send = market.messages.send_message
        return [
            send(open_job.id, CONTRACTOR, CUSTOMER, "Hello"),
            send(open_job.id, CUSTOMER, CONTRACTOR, "Hi, when can you come?"),
            send(open_job.id, OTHER_CONTRACTOR, CUSTOMER, "I can do it cheaper"),
            send(open_job.id, CONTRACTOR, CUSTOMER, "Tomorrow at 9"),
        ]

    def test_conversation_oldest_first(self, market, open_job, thread):
        conversation = market.messages.get_conversation(open_job.id, CUSTOMER, CONTRACTOR)
        assert [m.content for m in conversation] == [
            "Hello",
            "Hi, when can you come?",
            "Tomorrow at 9",
        ]

    def test_conversation_is_symmetric(self, market, open_job, thread):
        a = market.messages.get_conversation(open_job.id, CUSTOMER, CONTRACTOR)
        b = market.messages.get_conversation(open_job.id, CONTRACTOR, CUSTOMER)
        assert [m.id for m in a] == [m.id for m in b]

    def test_all_messages_on_job(self, market, open_job, thread):
        assert len(market.messages.list_messages_for_job(open_job.id)) == 4

    def test_mark_read_by_receiver(self, market, thread):
        updated = market.messages.mark_read(thread[0].id, CUSTOMER)
        assert updated.read is True
        assert updated.read_at is not None

    def test_mark_read_is_idempotent(self, market, thread):
        first = market.messages.mark_read(thread[0].id, CUSTOMER)
        second = market.messages.mark_read(thread[0].id, CUSTOMER)
        assert second.read is True
        assert second.read_at == first.read_at

    def test_sender_cannot_mark_read(self, market, thread):
        with pytest.raises(UnauthorizedError):
            market.messages.mark_read(thread[0].id, CONTRACTOR)

    def test_mark_missing(self, market):
        with pytest.raises(MessageNotFoundError):
            market.messages.mark_read("nope", CUSTOMER)

    def test_unread_count_and_mark_all(self, market, open_job, thread):
        assert market.messages.unread_count(CUSTOMER) == 3
        assert market.messages.unread_count(CONTRACTOR) == 1

        market.messages.mark_read(thread[0].id, CUSTOMER)
        assert market.messages.unread_count(CUSTOMER) == 2

        assert market.messages.mark_all_read(open_job.id, CUSTOMER) == 2
        assert market.messages.unread_count(CUSTOMER) == 0
        assert market.messages.mark_all_read(open_job.id, CUSTOMER) == 0
        assert market.messages.unread_count(CONTRACTOR) == 1
