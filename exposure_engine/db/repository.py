"""
exposure_engine/db/repository.py — All database read/write operations.

Services and routes never query the ORM directly; everything goes through
this module so it stays easy to test and mock.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from exposure_engine.db.models import Assessment, DeliveryStatus, ReportEmail
from exposure_engine.intake.profile import PlayerProfile
from exposure_engine.scoring.result import AnalysisResult

logger = logging.getLogger(__name__)


# ── Assessment ────────────────────────────────────────────────────────────────

def save_assessment(
    db: Session,
    profile: PlayerProfile,
    result: AnalysisResult,
    engine: str,
) -> Assessment:
    """Persist a scored profile together with its full report."""
    assessment = Assessment(
        first_name=profile.first_name,
        last_name=profile.last_name,
        email=profile.email,
        gender=profile.gender.value,
        grad_year=profile.grad_year,
        position=profile.position.value,
        engine=engine,
        primary_level=result.primary_level.value,
        visibility={s.level.value: s.visibility_percent for s in result.visibility_scores},
        profile_json=profile.model_dump(mode="json", by_alias=True),
        result_json=result.to_wire(),
        referral_source=profile.referral_source,
    )
    db.add(assessment)
    db.flush()
    logger.info(
        "Assessment %d saved: %s (%s, primary=%s)",
        assessment.id, assessment.full_name, engine, assessment.primary_level,
    )
    return assessment


def get_assessment(db: Session, assessment_id: int) -> Optional[Assessment]:
    return db.query(Assessment).filter(Assessment.id == assessment_id).first()


def list_assessments(
    db: Session,
    limit: int = 50,
    grad_year: Optional[int] = None,
    gender: Optional[str] = None,
) -> list[Assessment]:
    """Most recent assessments first, optionally filtered."""
    query = db.query(Assessment)
    if grad_year is not None:
        query = query.filter(Assessment.grad_year == grad_year)
    if gender:
        query = query.filter(Assessment.gender == gender)
    return query.order_by(Assessment.created_at.desc(), Assessment.id.desc()).limit(limit).all()


# ── Report Email ──────────────────────────────────────────────────────────────

def log_report_email(
    db: Session,
    assessment_id: int,
    to_address: str,
    subject: str,
    body: str,
    delivery_status: DeliveryStatus = DeliveryStatus.PENDING,
    error_message: Optional[str] = None,
) -> ReportEmail:
    """Create a ReportEmail record (called before and after sending)."""
    email = ReportEmail(
        assessment_id=assessment_id,
        to_address=to_address,
        subject=subject,
        body=body,
        delivery_status=delivery_status,
        error_message=error_message,
        sent_at=datetime.utcnow() if delivery_status == DeliveryStatus.SENT else None,
    )
    db.add(email)
    db.flush()
    return email


def update_email_delivery_status(
    db: Session,
    email_id: int,
    status: DeliveryStatus,
    error_message: Optional[str] = None,
) -> None:
    """Update delivery status after a send attempt."""
    update_data: dict = {"delivery_status": status}
    if status == DeliveryStatus.SENT:
        update_data["sent_at"] = datetime.utcnow()
    if error_message:
        update_data["error_message"] = error_message
    db.query(ReportEmail).filter(ReportEmail.id == email_id).update(update_data)
    logger.debug("Report email %d status → %s", email_id, status.value)


def get_report_emails(db: Session, assessment_id: int) -> list[ReportEmail]:
    return (
        db.query(ReportEmail)
        .filter(ReportEmail.assessment_id == assessment_id)
        .order_by(ReportEmail.created_at.asc(), ReportEmail.id.asc())
        .all()
    )
