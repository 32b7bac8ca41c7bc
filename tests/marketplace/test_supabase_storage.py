"""Tests for the Supabase-backed storages against a fake query chain."""

from datetime import datetime, timezone

import pytest
from postgrest.exceptions import APIError

from tradeline.errors import DuplicateRecordError, StorageError
from tradeline.jobs import Job, SupabaseJobStorage
from tradeline.messages import Message, SupabaseMessageStorage
from tradeline.profiles import ContractorProfile, SupabaseProfileStorage
from tradeline.quotes import Quote, SupabaseQuoteStorage
from tradeline.reviews import Review, SupabaseReviewStorage

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def job_row(**overrides):
    row = Job(
        id="job-1",
        customer_id="cust-1",
        title="Fix tap",
        description="Drips",
        suggested_trades=["plumbing"],
        primary_trade="plumbing",
        created_at=NOW,
        updated_at=NOW,
    ).to_dict()
    row.update(overrides)
    return row


def quote_row(**overrides):
    row = Quote(
        id="q-1", job_id="job-1", contractor_id="pro-1", amount=95.0, created_at=NOW
    ).to_dict()
    row.update(overrides)
    return row


def unique_violation():
    return APIError(
        {
            "code": "23505",
            "message": 'duplicate key value violates unique constraint "reviews_job_id_reviewer_id_key"',
            "details": None,
            "hint": None,
        }
    )


class TestErrorMapping:
    def test_unique_violation_becomes_duplicate(self, supabase_client):
        supabase_client.queue(unique_violation())
        storage = SupabaseReviewStorage(supabase_client)
        review = Review(id="r", job_id="j", reviewer_id="a", reviewee_id="b", rating=5)

        with pytest.raises(DuplicateRecordError):
            storage.save_review(review)

    def test_other_errors_become_storage_error(self, supabase_client):
        supabase_client.queue(RuntimeError("connection reset"))
        storage = SupabaseJobStorage(supabase_client)

        with pytest.raises(StorageError, match="get job") as exc_info:
            storage.get_job("job-1")
        assert exc_info.value.kind == "upstream"


class TestSupabaseJobStorage:
    def test_save_job_inserts_serialised_row(self, supabase_client):
        storage = SupabaseJobStorage(supabase_client)
        job = Job.from_dict(job_row())

        assert storage.save_job(job) == "job-1"
        query = supabase_client.last_query
        assert query.table == "jobs"
        inserted = query.called("insert")[0][0]
        assert inserted["created_at"] == "2024-05-01T12:00:00+00:00"
        assert inserted["suggested_trades"] == ["plumbing"]

    def test_get_job(self, supabase_client, mock_result):
        supabase_client.queue(mock_result([job_row()]))
        job = SupabaseJobStorage(supabase_client).get_job("job-1")

        assert job.id == "job-1"
        assert job.created_at == NOW
        assert ("id", "job-1") in supabase_client.last_query.called("eq")

    def test_get_missing_job(self, supabase_client):
        assert SupabaseJobStorage(supabase_client).get_job("nope") is None

    def test_list_jobs_filters(self, supabase_client, mock_result):
        supabase_client.queue(mock_result([job_row(), job_row(id="job-2")]))
        jobs = SupabaseJobStorage(supabase_client).list_jobs(
            statuses=["pending_quotes", "quotes_received"],
            trades=["plumbing", "tiling"],
            limit=10,
            offset=20,
        )

        assert [j.id for j in jobs] == ["job-1", "job-2"]
        query = supabase_client.last_query
        assert query.called("in_") == [("status", ["pending_quotes", "quotes_received"])]
        assert query.called("overlaps") == [("suggested_trades", ["plumbing", "tiling"])]
        assert query.called("order") == [("created_at",)]
        assert query.kwargs_for("order") == [{"desc": True}]
        assert query.called("range") == [(20, 29)]

    def test_update_job_status_is_conditional(self, supabase_client, mock_result):
        row = job_row(status="contractor_selected", contractor_id="pro-1")
        supabase_client.queue(mock_result([row]))
        job = SupabaseJobStorage(supabase_client).update_job_status(
            "job-1",
            ("pending_quotes", "quotes_received"),
            "contractor_selected",
            contractor_id="pro-1",
        )

        assert job.contractor_id == "pro-1"
        query = supabase_client.last_query
        data = query.called("update")[0][0]
        assert data["status"] == "contractor_selected"
        assert data["contractor_id"] == "pro-1"
        assert isinstance(data["accepted_at"], str)
        assert query.called("in_") == [("status", ["pending_quotes", "quotes_received"])]

    def test_update_job_status_no_match(self, supabase_client):
        storage = SupabaseJobStorage(supabase_client)
        assert storage.update_job_status("job-1", ("in_progress",), "completed") is None

    def test_delete_job(self, supabase_client, mock_result):
        supabase_client.queue(mock_result([job_row()]), mock_result([]))
        storage = SupabaseJobStorage(supabase_client)
        assert storage.delete_job("job-1") is True
        assert storage.delete_job("job-1") is False


class TestSupabaseQuoteStorage:
    def test_accept_quote_calls_rpc(self, supabase_client, mock_result):
        accepted_job = job_row(
            status="contractor_selected", contractor_id="pro-1", selected_quote_id="q-1"
        )
        supabase_client.queue(
            mock_result([accepted_job]), mock_result([quote_row(status="accepted")])
        )

        job, quote = SupabaseQuoteStorage(supabase_client).accept_quote("q-1")

        assert job.status == "contractor_selected"
        assert quote.status == "accepted"
        rpc = supabase_client.queries[0]
        assert rpc.called("rpc") == [("accept_quote", {"p_quote_id": "q-1"})]

    def test_accept_quote_no_row(self, supabase_client):
        assert SupabaseQuoteStorage(supabase_client).accept_quote("q-1") is None
        assert len(supabase_client.queries) == 1

    def test_save_quote_goes_through_guarded_rpc(self, supabase_client, mock_result):
        supabase_client.queue(mock_result([quote_row()]))
        quote = Quote.from_dict(quote_row())

        assert SupabaseQuoteStorage(supabase_client).save_quote(quote) == "q-1"
        rpc = supabase_client.queries[0]
        assert rpc.called("rpc") == [("submit_quote", {"p_quote": quote.to_dict()})]

    def test_save_quote_on_closed_job(self, supabase_client):
        storage = SupabaseQuoteStorage(supabase_client)
        assert storage.save_quote(Quote.from_dict(quote_row())) is None

    def test_duplicate_pending_quote(self, supabase_client):
        supabase_client.queue(unique_violation())
        storage = SupabaseQuoteStorage(supabase_client)
        with pytest.raises(DuplicateRecordError):
            storage.save_quote(Quote.from_dict(quote_row()))

    def test_update_quote_status_filters_on_expected(self, supabase_client):
        SupabaseQuoteStorage(supabase_client).update_quote_status("q-1", "pending", "declined")
        eqs = supabase_client.last_query.called("eq")
        assert ("id", "q-1") in eqs
        assert ("status", "pending") in eqs


class TestSupabaseMessageStorage:
    def test_conversation_filter(self, supabase_client):
        SupabaseMessageStorage(supabase_client).list_messages("job-1", "a", "b")
        query = supabase_client.last_query
        assert query.called("or_") == [
            ("and(sender_id.eq.a,receiver_id.eq.b),and(sender_id.eq.b,receiver_id.eq.a)",)
        ]
        assert query.kwargs_for("order") == [{"desc": False}]

    def test_mark_read_only_unread(self, supabase_client):
        assert SupabaseMessageStorage(supabase_client).mark_read("m-1") is None
        assert ("read", False) in supabase_client.last_query.called("eq")

    def test_count_unread_uses_exact_count(self, supabase_client, mock_result):
        supabase_client.queue(mock_result([{"id": "m-1"}], count=7))
        assert SupabaseMessageStorage(supabase_client).count_unread("cust-1") == 7
        assert supabase_client.last_query.kwargs_for("select") == [{"count": "exact"}]

    def test_save_message(self, supabase_client):
        message = Message(
            id="m-1", job_id="job-1", sender_id="a", receiver_id="b", content="hi", created_at=NOW
        )
        SupabaseMessageStorage(supabase_client).save_message(message)
        assert supabase_client.last_query.called("insert")[0][0]["read"] is False


class TestSupabaseReviewStorage:
    def test_list_ratings(self, supabase_client, mock_result):
        supabase_client.queue(mock_result([{"rating": 5}, {"rating": "3"}]))
        assert SupabaseReviewStorage(supabase_client).list_ratings("pro-1") == [5, 3]
        assert supabase_client.last_query.called("select") == [("rating",)]


class TestSupabaseProfileStorage:
    def test_save_profile_upserts_on_contractor(self, supabase_client, mock_result):
        profile = ContractorProfile(
            contractor_id="pro-1",
            primary_trade="tiling",
            secondary_trades=["plumbing"],
            updated_at=NOW,
        )
        supabase_client.queue(mock_result([profile.to_dict()]))

        saved = SupabaseProfileStorage(supabase_client).save_profile(profile)

        assert saved == profile
        query = supabase_client.last_query
        assert query.table == "contractor_profiles"
        assert query.called("upsert") == [(profile.to_dict(),)]
        assert query.kwargs_for("upsert") == [{"on_conflict": "contractor_id"}]

    def test_get_profile(self, supabase_client, mock_result):
        supabase_client.queue(
            mock_result([{"contractor_id": "pro-1", "primary_trade": "roofing"}])
        )
        profile = SupabaseProfileStorage(supabase_client).get_profile("pro-1")
        assert profile.trades == ["roofing"]
        assert ("contractor_id", "pro-1") in supabase_client.last_query.called("eq")

    def test_get_missing_profile(self, supabase_client):
        assert SupabaseProfileStorage(supabase_client).get_profile("pro-1") is None
