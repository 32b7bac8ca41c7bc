"""
Pytest fixtures and test configuration for Tradeline tests.
"""

from typing import Any, List, Optional

import pytest

from tradeline import Marketplace, MarketplaceConfig
from tradeline.models.base import ModelError

CUSTOMER = "cust-1"
CONTRACTOR = "pro-1"
OTHER_CONTRACTOR = "pro-2"


# =============================================================================
# Marketplace fixtures
# =============================================================================


@pytest.fixture
def config():
    """Marketplace configuration for tests."""
    return MarketplaceConfig()


@pytest.fixture
def market(config):
    """Fresh in-memory marketplace."""
    return Marketplace.in_memory(config)


@pytest.fixture
def open_job(market):
    """A plumbing job in pending_quotes posted by CUSTOMER."""
    return market.jobs.create_job(
        customer_id=CUSTOMER,
        title="Fix leaking tap",
        description="Kitchen tap drips constantly",
        suggested_trades=["plumbing"],
        budget=120,
    )


@pytest.fixture
def assigned_job(market, open_job):
    """``open_job`` claimed directly by CONTRACTOR."""
    return market.jobs.accept_job(open_job.id, CONTRACTOR)


@pytest.fixture
def completed_job(market, assigned_job):
    """``assigned_job`` started and completed."""
    market.jobs.start_job(assigned_job.id, CONTRACTOR)
    return market.jobs.complete_job(assigned_job.id, CUSTOMER)


# =============================================================================
# Chat model fakes
# =============================================================================


class FakeChatModel:
    """ChatModel returning a canned reply (or raising a canned ModelError)."""

    def __init__(self, reply: str = "", error: Optional[ModelError] = None):
        self.reply = reply
        self.error = error
        self.calls: List[tuple] = []

    @property
    def model_id(self) -> str:
        return "fake-model"

    def complete(self, system: str, text: str) -> str:
        self.calls.append((system, text))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def make_model():
    """Factory for ``FakeChatModel`` instances."""
    return FakeChatModel


# =============================================================================
# Supabase query chain fake
# =============================================================================


class MockResult:
    """Shape of a postgrest APIResponse: ``data`` rows and optional ``count``."""

    def __init__(self, data: Optional[List[dict]] = None, count: Optional[int] = None):
        self.data = data if data is not None else []
        self.count = count


class MockQueryBuilder:
    """Chainable stand-in for a postgrest request builder.

    Every chained call is recorded in ``calls`` as ``(method, args, kwargs)``;
    ``execute()`` returns the client's next queued result.
    """

    CHAIN_METHODS = (
        "select",
        "insert",
        "upsert",
        "update",
        "delete",
        "eq",
        "in_",
        "or_",
        "overlaps",
        "order",
        "range",
        "limit",
    )

    def __init__(self, client: "MockSupabaseClient", table: Optional[str]):
        self.client = client
        self.table = table
        self.calls: List[tuple] = []

    def __getattr__(self, name: str):
        if name not in self.CHAIN_METHODS:
            raise AttributeError(name)

        def chained(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return chained

    def called(self, name: str) -> List[tuple]:
        """Args of every call to ``name``, in order."""
        return [args for method, args, _ in self.calls if method == name]

    def kwargs_for(self, name: str) -> List[dict]:
        return [kwargs for method, _, kwargs in self.calls if method == name]

    def execute(self):
        return self.client.next_result()


class MockSupabaseClient:
    """Records queries and answers them from a FIFO of queued results.

    Queue a ``MockResult`` for rows or an exception instance to have
    ``execute()`` raise it. An empty queue answers with no rows.
    """

    def __init__(self):
        self.queries: List[MockQueryBuilder] = []
        self.results: List[Any] = []

    def queue(self, *results) -> "MockSupabaseClient":
        self.results.extend(results)
        return self

    def next_result(self):
        if not self.results:
            return MockResult()
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def table(self, name: str) -> MockQueryBuilder:
        query = MockQueryBuilder(self, name)
        self.queries.append(query)
        return query

    def rpc(self, fn: str, params: dict) -> MockQueryBuilder:
        query = MockQueryBuilder(self, None)
        query.calls.append(("rpc", (fn, params), {}))
        self.queries.append(query)
        return query

    @property
    def last_query(self) -> MockQueryBuilder:
        return self.queries[-1]


@pytest.fixture
def supabase_client():
    return MockSupabaseClient()


@pytest.fixture
def mock_result():
    """The ``MockResult`` class, for queuing rows on ``supabase_client``."""
    return MockResult
