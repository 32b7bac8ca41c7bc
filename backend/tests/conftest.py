"""Pytest configuration and fixtures."""

import os
import secrets

import pytest

# Generate a unique test secret for this test run to prevent token forgery
_TEST_JWT_SECRET = f"test-only-{secrets.token_urlsafe(32)}"

# Settings are cached on first import of the app, so set them up front
os.environ.setdefault("JWT_SECRET_KEY", _TEST_JWT_SECRET)
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["CLASSIFIER_STRATEGY"] = "local"

from app.auth import create_access_token  # noqa: E402
from app.config import get_settings  # noqa: E402
from app.database import get_marketplace  # noqa: E402
from app.main import app  # noqa: E402
from app.rate_limit import limiter  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from tradeline import Marketplace  # noqa: E402

CUSTOMER = "usr_TEST_customer"
CONTRACTOR = "usr_TEST_contractor"
OTHER_CONTRACTOR = "usr_TEST_other"


@pytest.fixture(autouse=True)
def no_rate_limits():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def market():
    """Fresh in-memory marketplace per test."""
    return Marketplace.in_memory()


@pytest.fixture
def client(market):
    """Create a test client wired to the test marketplace."""
    app.dependency_overrides[get_marketplace] = lambda: market
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def headers_for():
    """Build auth headers for any user id."""

    def _headers(user_id: str, role: str | None = None) -> dict:
        token = create_access_token(user_id, get_settings(), role=role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def customer_headers(headers_for):
    return headers_for(CUSTOMER, role="customer")


@pytest.fixture
def contractor_headers(headers_for):
    return headers_for(CONTRACTOR, role="contractor")


@pytest.fixture
def other_headers(headers_for):
    return headers_for(OTHER_CONTRACTOR, role="contractor")


@pytest.fixture
def posted_job(client, customer_headers):
    """A plumbing job posted by the customer through the API."""
    response = client.post(
        "/jobs",
        json={
            "title": "Leaking kitchen tap",
            "description": "The kitchen tap drips constantly",
            "suggested_trades": ["plumbing"],
            "budget": 120,
            "location": "Berlin",
        },
        headers=customer_headers,
    )
    assert response.status_code == 201
    return response.json()
