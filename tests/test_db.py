"""
tests/test_db.py — Unit tests for the repository and database layer.

Uses an in-memory SQLite database (the `db` fixture in conftest.py) so no
real PostgreSQL connection is required. Tests run fast and fully in isolation.
"""

from datetime import date

from exposure_engine.db.models import Assessment, DeliveryStatus, ReportEmail
from exposure_engine.db.repository import (
    get_assessment,
    get_report_emails,
    list_assessments,
    log_report_email,
    save_assessment,
    update_email_delivery_status,
)
from exposure_engine.db.session import _engine_kwargs
from exposure_engine.scoring.insights import score_profile
from exposure_engine.services.analysis_service import load_assessment

AS_OF = date(2025, 1, 1)


def _save(db, profile, engine="rubric") -> Assessment:
    result = score_profile(profile, as_of=AS_OF)
    return save_assessment(db, profile, result, engine=engine)


# ── Assessment ────────────────────────────────────────────────────────────────

class TestSaveAssessment:
    def test_saves_summary_columns(self, db, make_profile):
        assessment = _save(db, make_profile(referralSource="club coach"))
        db.commit()

        assert assessment.id is not None
        assert assessment.full_name == "Alex Rivera"
        assert assessment.gender == "Male"
        assert assessment.position == "CM"
        assert assessment.engine == "rubric"
        assert assessment.primary_level == "JUCO"
        assert assessment.visibility == {"D1": 75, "D2": 85, "D3": 65, "NAIA": 85, "JUCO": 90}
        assert assessment.referral_source == "club coach"

    def test_stores_camel_case_payloads(self, db, make_profile):
        assessment = _save(db, make_profile())
        db.commit()

        stored = db.get(Assessment, assessment.id)
        assert stored.profile_json["firstName"] == "Alex"
        assert stored.result_json["visibilityScores"][0]["level"] == "D1"
        assert stored.result_json["scoringBreakdown"]["leagueTier"] == "Elite"

    def test_round_trips_through_load_assessment(self, db, make_profile):
        profile = make_profile()
        assessment = _save(db, profile)
        db.commit()

        loaded_profile, loaded_result = load_assessment(get_assessment(db, assessment.id))
        assert loaded_profile == profile
        assert loaded_result.primary_level.value == "JUCO"


class TestQueryAssessments:
    def test_get_missing_returns_none(self, db):
        assert get_assessment(db, 999) is None

    def test_list_newest_first(self, db, make_profile):
        first = _save(db, make_profile(firstName="First"))
        second = _save(db, make_profile(firstName="Second"))
        db.commit()

        rows = list_assessments(db)
        assert [r.id for r in rows] == [second.id, first.id]

    def test_list_filters(self, db, make_profile):
        _save(db, make_profile(gradYear=2026))
        _save(db, make_profile(gradYear=2027, gender="Female", season={"league": ["ECNL"]}))
        db.commit()

        assert len(list_assessments(db, grad_year=2026)) == 1
        females = list_assessments(db, gender="Female")
        assert [r.grad_year for r in females] == [2027]

    def test_list_limit(self, db, make_profile):
        for _ in range(3):
            _save(db, make_profile())
        db.commit()
        assert len(list_assessments(db, limit=2)) == 2


# ── Report Email ──────────────────────────────────────────────────────────────

class TestReportEmails:
    def test_log_pending_email(self, db, make_profile):
        assessment = _save(db, make_profile())
        email = log_report_email(
            db, assessment_id=assessment.id, to_address="alex@example.com",
            subject="Your Exposure Report", body="Hi Alex",
        )
        db.commit()

        assert email.id is not None
        assert email.delivery_status == DeliveryStatus.PENDING
        assert email.sent_at is None

    def test_update_to_sent_sets_timestamp(self, db, make_profile):
        assessment = _save(db, make_profile())
        email = log_report_email(db, assessment.id, "alex@example.com", "Subject", "Body")
        update_email_delivery_status(db, email.id, DeliveryStatus.SENT)
        db.commit()

        stored = db.get(ReportEmail, email.id)
        db.refresh(stored)
        assert stored.delivery_status == DeliveryStatus.SENT
        assert stored.sent_at is not None

    def test_update_to_failed_keeps_error(self, db, make_profile):
        assessment = _save(db, make_profile())
        email = log_report_email(db, assessment.id, "alex@example.com", "Subject", "Body")
        update_email_delivery_status(db, email.id, DeliveryStatus.FAILED, error_message="535 auth failed")
        db.commit()

        stored = db.get(ReportEmail, email.id)
        db.refresh(stored)
        assert stored.delivery_status == DeliveryStatus.FAILED
        assert stored.error_message == "535 auth failed"

    def test_history_per_assessment(self, db, make_profile):
        one = _save(db, make_profile())
        two = _save(db, make_profile())
        log_report_email(db, one.id, "a@example.com", "S1", "B1")
        log_report_email(db, one.id, "b@example.com", "S2", "B2")
        log_report_email(db, two.id, "c@example.com", "S3", "B3")
        db.commit()

        history = get_report_emails(db, one.id)
        assert [e.to_address for e in history] == ["a@example.com", "b@example.com"]
        assert len(one.report_emails) == 2


# ── Session helpers ───────────────────────────────────────────────────────────

class TestEngineKwargs:
    def test_sqlite_has_no_pool_sizing(self):
        assert _engine_kwargs("sqlite:///:memory:") == {"connect_args": {"check_same_thread": False}}

    def test_postgres_pool(self):
        kwargs = _engine_kwargs("postgresql://user:pw@localhost/exposure")
        assert kwargs["pool_pre_ping"] is True
        assert kwargs["pool_size"] == 5
