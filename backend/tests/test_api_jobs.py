"""Tests for job API routes."""

import pytest

CUSTOMER = "usr_TEST_customer"
CONTRACTOR = "usr_TEST_contractor"
OTHER_CONTRACTOR = "usr_TEST_other"


class TestAuthRequired:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/jobs"),
            ("post", "/jobs"),
            ("get", "/jobs/matches"),
            ("get", "/jobs/some-id"),
            ("post", "/jobs/accept"),
        ],
    )
    def test_missing_token(self, client, method, path):
        response = getattr(client, method)(path)
        assert response.status_code == 401
        assert response.json()["error"]["kind"] == "unauthenticated"

    def test_bad_token(self, client):
        response = client.get("/jobs", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid or expired token"


class TestCreateJob:
    def test_create(self, client, posted_job):
        assert posted_job["customer_id"] == CUSTOMER
        assert posted_job["status"] == "pending_quotes"
        assert posted_job["suggested_trades"] == ["plumbing"]
        assert posted_job["primary_trade"] == "plumbing"
        assert posted_job["budget"] == 120

    def test_unknown_trades_are_dropped(self, client, customer_headers):
        response = client.post(
            "/jobs",
            json={
                "title": "Hang shelves",
                "description": "Two shelves in the hallway",
                "suggested_trades": ["Carpentry", "underwater-welding"],
            },
            headers=customer_headers,
        )
        assert response.status_code == 201
        assert response.json()["suggested_trades"] == ["carpentry"]

    def test_from_text(self, client, customer_headers):
        response = client.post(
            "/jobs",
            json={"from_text": "Leaking pipe under the sink, urgent", "location": "Hamburg"},
            headers=customer_headers,
        )
        assert response.status_code == 201
        job = response.json()
        assert "plumbing" in job["suggested_trades"]
        assert job["original_text"] == "Leaking pipe under the sink, urgent"
        assert job["location"] == "Hamburg"
        assert job["ai_generated"] is False

    def test_missing_description(self, client, customer_headers):
        response = client.post("/jobs", json={"title": "Fix tap"}, headers=customer_headers)
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["kind"] == "validation"
        assert "title and description are required" in error["message"]

    def test_unparseable_budget_is_dropped(self, client, customer_headers):
        response = client.post(
            "/jobs",
            json={"title": "Fix tap", "description": "Drips", "budget": "lots"},
            headers=customer_headers,
        )
        assert response.status_code == 201
        assert response.json()["budget"] is None


class TestReadJobs:
    def test_get_job(self, client, posted_job, contractor_headers):
        response = client.get(f"/jobs/{posted_job['id']}", headers=contractor_headers)
        assert response.status_code == 200
        assert response.json()["title"] == "Leaking kitchen tap"

    def test_get_missing_job(self, client, customer_headers):
        response = client.get("/jobs/does-not-exist", headers=customer_headers)
        assert response.status_code == 404
        assert response.json() == {
            "error": {"kind": "not_found", "message": "Job does-not-exist not found"}
        }

    def test_list_open_jobs(self, client, posted_job, contractor_headers):
        response = client.get("/jobs", params={"status": "open"}, headers=contractor_headers)
        assert response.status_code == 200
        data = response.json()
        assert [j["id"] for j in data["jobs"]] == [posted_job["id"]]
        assert data["limit"] == 50
        assert data["offset"] == 0

    def test_list_by_trade(self, client, posted_job, contractor_headers):
        hits = client.get("/jobs", params={"trades": "plumbing"}, headers=contractor_headers)
        misses = client.get("/jobs", params={"trades": "roofing"}, headers=contractor_headers)
        assert len(hits.json()["jobs"]) == 1
        assert misses.json()["jobs"] == []

    def test_unknown_status_filter(self, client, contractor_headers):
        response = client.get("/jobs", params={"status": "sleeping"}, headers=contractor_headers)
        assert response.status_code == 400

    def test_mine(self, client, posted_job, customer_headers, other_headers):
        mine = client.get("/jobs", params={"mine": True}, headers=customer_headers)
        theirs = client.get("/jobs", params={"mine": True}, headers=other_headers)
        assert [j["id"] for j in mine.json()["jobs"]] == [posted_job["id"]]
        assert theirs.json()["jobs"] == []

    def test_matches(self, client, posted_job, contractor_headers):
        response = client.get(
            "/jobs/matches", params={"trades": ["plumbing", "tiling"]}, headers=contractor_headers
        )
        assert response.status_code == 200
        assert [j["id"] for j in response.json()] == [posted_job["id"]]

        response = client.get(
            "/jobs/matches", params={"trades": "electrical"}, headers=contractor_headers
        )
        assert response.json() == []

    def test_matches_without_trades_lists_open_jobs(self, client, posted_job, contractor_headers):
        response = client.get("/jobs/matches", headers=contractor_headers)
        assert [j["id"] for j in response.json()] == [posted_job["id"]]


class TestAcceptJob:
    def test_accept(self, client, posted_job, contractor_headers):
        response = client.post(
            "/jobs/accept", json={"jobId": posted_job["id"]}, headers=contractor_headers
        )
        assert response.status_code == 200
        job = response.json()["job"]
        assert job["status"] == "contractor_selected"
        assert job["contractor_id"] == CONTRACTOR
        assert job["accepted_at"] is not None

    def test_second_claim_conflicts(self, client, posted_job, contractor_headers, other_headers):
        client.post("/jobs/accept", json={"jobId": posted_job["id"]}, headers=contractor_headers)
        response = client.post(
            "/jobs/accept", json={"jobId": posted_job["id"]}, headers=other_headers
        )
        assert response.status_code == 409
        assert response.json()["error"]["kind"] == "conflict"

    def test_accept_for_someone_else(self, client, posted_job, contractor_headers):
        response = client.post(
            "/jobs/accept",
            json={"jobId": posted_job["id"], "contractorId": OTHER_CONTRACTOR},
            headers=contractor_headers,
        )
        assert response.status_code == 403
        assert response.json()["error"]["kind"] == "unauthorized"

    def test_accept_own_job(self, client, posted_job, customer_headers):
        response = client.post(
            "/jobs/accept", json={"jobId": posted_job["id"]}, headers=customer_headers
        )
        assert response.status_code == 400

    def test_accept_missing_job(self, client, contractor_headers):
        response = client.post("/jobs/accept", json={"jobId": "nope"}, headers=contractor_headers)
        assert response.status_code == 404

    def test_missing_job_id(self, client, contractor_headers):
        response = client.post("/jobs/accept", json={}, headers=contractor_headers)
        assert response.status_code == 400
        assert "jobId" in response.json()["error"]["message"]


class TestLifecycle:
    @pytest.fixture
    def assigned(self, client, posted_job, contractor_headers):
        client.post("/jobs/accept", json={"jobId": posted_job["id"]}, headers=contractor_headers)
        return posted_job["id"]

    def test_full_lifecycle_and_history(
        self, client, assigned, customer_headers, contractor_headers
    ):
        started = client.post(f"/jobs/{assigned}/start", headers=contractor_headers)
        assert started.json()["status"] == "in_progress"

        completed = client.post(f"/jobs/{assigned}/complete", headers=customer_headers)
        assert completed.json()["status"] == "completed"
        assert completed.json()["completed_at"] is not None

        history = client.get(f"/jobs/{assigned}/history", headers=customer_headers).json()
        assert [h["to_status"] for h in history] == [
            "pending_quotes",
            "contractor_selected",
            "in_progress",
            "completed",
        ]

    def test_only_contractor_starts(self, client, assigned, customer_headers):
        response = client.post(f"/jobs/{assigned}/start", headers=customer_headers)
        assert response.status_code == 403

    def test_complete_before_start(self, client, assigned, customer_headers):
        response = client.post(f"/jobs/{assigned}/complete", headers=customer_headers)
        assert response.status_code == 409

    def test_history_hidden_from_outsiders(self, client, assigned, other_headers):
        response = client.get(f"/jobs/{assigned}/history", headers=other_headers)
        assert response.status_code == 403

    def test_cancel_with_reason(self, client, posted_job, customer_headers):
        response = client.post(
            f"/jobs/{posted_job['id']}/cancel",
            json={"reason": "Fixed it myself"},
            headers=customer_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        again = client.post(f"/jobs/{posted_job['id']}/cancel", headers=customer_headers)
        assert again.status_code == 409

    def test_contractor_cannot_cancel(self, client, assigned, contractor_headers):
        response = client.post(f"/jobs/{assigned}/cancel", headers=contractor_headers)
        assert response.status_code == 403


class TestDeleteJob:
    def test_delete(self, client, posted_job, customer_headers):
        response = client.delete(f"/jobs/{posted_job['id']}", headers=customer_headers)
        assert response.status_code == 204
        assert client.get(f"/jobs/{posted_job['id']}", headers=customer_headers).status_code == 404

    def test_only_customer_deletes(self, client, posted_job, contractor_headers):
        response = client.delete(f"/jobs/{posted_job['id']}", headers=contractor_headers)
        assert response.status_code == 403
