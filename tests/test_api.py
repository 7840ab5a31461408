"""
tests/test_api.py — HTTP tests for the FastAPI app.

The database dependency is overridden with the in-memory SQLite session from
conftest.py. The lifespan hook is not entered (no `with TestClient(...)`), so
no connection check runs against the configured DATABASE_URL.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.main import app
from exposure_engine.ai_engine.processor import AnalysisError
from exposure_engine.db.session import get_db


@pytest.fixture
def client(db):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def created(client, payload):
    """A stored assessment created through the API."""
    response = client.post("/analysis", json=payload)
    assert response.status_code == 200
    return response.json()


# ── System ────────────────────────────────────────────────────────────────────

class TestSystemRoutes:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "exposure-engine"}

    def test_root(self, client):
        body = client.get("/").json()
        assert body["engine"] == "rubric"
        assert body["rubric"] == "/analysis/rubric"


# ── POST /analysis ────────────────────────────────────────────────────────────

class TestCreateAnalysis:
    def test_scores_and_stores_profile(self, created):
        assert created["assessmentId"] >= 1
        assert created["engine"] == "rubric"
        assert [s["level"] for s in created["visibilityScores"]] == ["D1", "D2", "D3", "NAIA", "JUCO"]
        assert 2 <= len(created["keyRisks"]) <= 4
        assert len(created["actionPlan"]) <= 5
        assert [b["category"] for b in created["benchmarkAnalysis"]] == ["Physical", "Soccer Resume", "Academics"]
        assert "onPaperFit" in created["scoringBreakdown"]

    def test_missing_body(self, client):
        response = client.post("/analysis")
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid profile data"

    def test_empty_object(self, client):
        response = client.post("/analysis", json={})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid profile data"

    def test_invalid_field(self, client, payload):
        payload["gender"] = "Unknown"
        response = client.post("/analysis", json=payload)
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid gender"

    def test_oversized_profile(self, client, payload):
        payload["seasons"][0]["honors"] = "x" * 20000
        response = client.post("/analysis", json=payload)
        assert response.status_code == 400
        assert response.json()["detail"] == "Profile data too large"

    def test_unknown_engine_rejected(self, client, payload):
        response = client.post("/analysis?engine=magic", json=payload)
        assert response.status_code == 422

    def test_llm_failure_is_502(self, client, payload):
        with patch(
            "exposure_engine.services.analysis_service.analyze_profile_with_llm",
            side_effect=AnalysisError("model timed out"),
        ):
            response = client.post("/analysis?engine=llm", json=payload)
        assert response.status_code == 502
        assert response.json()["detail"] == "Analysis failed. Please try again."


# ── Rubric and stored assessments ─────────────────────────────────────────────

class TestReadRoutes:
    def test_rubric(self, client):
        body = client.get("/analysis/rubric").json()
        assert body["baseVisibility"]["Male"]["Elite"]["D1"] == 75
        assert body["videoMultipliers"]["Raw_Game_Footage"] == 0.8

    def test_list_assessments(self, client, created):
        rows = client.get("/analysis").json()
        assert [r["id"] for r in rows] == [created["assessmentId"]]
        assert rows[0]["primary_level"] == created["scoringBreakdown"]["primaryLevel"]

    def test_list_filter(self, client, created):
        assert client.get("/analysis?gender=Female").json() == []
        assert len(client.get("/analysis?grad_year=2028").json()) == 1

    def test_get_assessment(self, client, created):
        body = client.get(f"/analysis/{created['assessmentId']}").json()
        assert body["profile_json"]["firstName"] == "Alex"
        assert body["result_json"]["plainLanguageSummary"] == created["plainLanguageSummary"]

    def test_get_missing_assessment(self, client):
        response = client.get("/analysis/999")
        assert response.status_code == 404


# ── Report email ──────────────────────────────────────────────────────────────

class TestEmailReport:
    def test_dry_run_to_profile_email(self, client, created):
        assessment_id = created["assessmentId"]
        response = client.post(f"/analysis/{assessment_id}/email", json={"dry_run": True})
        assert response.status_code == 200
        body = response.json()
        assert body["sent"] is True
        assert body["to_address"] == "alex.rivera@example.com"

        history = client.get(f"/analysis/{assessment_id}/emails").json()
        assert len(history) == 1
        assert history[0]["delivery_status"] == "sent"
        assert history[0]["subject"].startswith("Your Exposure Report: Alex Rivera")

    def test_explicit_recipient(self, client, created):
        response = client.post(
            f"/analysis/{created['assessmentId']}/email",
            json={"to_address": "parent@example.com", "dry_run": True},
        )
        assert response.json()["to_address"] == "parent@example.com"

    def test_no_request_body_uses_settings(self, client, created):
        response = client.post(f"/analysis/{created['assessmentId']}/email")
        assert response.status_code == 200
        assert response.json()["sent"] is True

    def test_no_recipient(self, client, payload):
        del payload["email"]
        assessment_id = client.post("/analysis", json=payload).json()["assessmentId"]
        response = client.post(f"/analysis/{assessment_id}/email", json={"dry_run": True})
        assert response.status_code == 400

    def test_email_missing_assessment(self, client):
        assert client.post("/analysis/999/email", json={"dry_run": True}).status_code == 404

    def test_history_missing_assessment(self, client):
        assert client.get("/analysis/999/emails").status_code == 404
