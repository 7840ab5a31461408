"""
api/endpoints/analysis_routes.py — Scoring, stored assessments and report email.

POST   /analysis                — Validate, score and store a player profile
GET    /analysis/rubric         — The scoring tables behind every number
GET    /analysis                — List stored assessments
GET    /analysis/{id}           — One assessment with profile and full report
POST   /analysis/{id}/email     — Email the report (dry-run aware)
GET    /analysis/{id}/emails    — Send history for an assessment
"""

import logging
from typing import Any, Literal, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from exposure_engine.ai_engine.processor import AnalysisError
from exposure_engine.db.models import Assessment
from exposure_engine.db.repository import get_assessment, get_report_emails, list_assessments
from exposure_engine.db.session import get_db
from exposure_engine.intake.validation import ProfileValidationError, validate_profile_payload
from exposure_engine.scoring.tables import describe_rubric
from exposure_engine.services.analysis_service import analyze_and_store, email_report
from api.schemas import (
    AnalysisResponse,
    AssessmentDetail,
    AssessmentOut,
    EmailReportRequest,
    EmailReportResult,
    ReportEmailOut,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_or_404(db: Session, assessment_id: int) -> Assessment:
    assessment = get_assessment(db, assessment_id)
    if not assessment:
        raise HTTPException(status_code=404, detail=f"Assessment {assessment_id} not found.")
    return assessment


@router.post("", response_model=AnalysisResponse, summary="Score a player profile")
def create_analysis(
    payload: Any = Body(default=None, description="Intake form JSON (camelCase)"),
    engine: Optional[Literal["rubric", "llm"]] = Query(
        default=None,
        description="Override ANALYSIS_ENGINE for this request.",
    ),
    db: Session = Depends(get_db),
):
    """
    Validate the submitted profile, score it, and store the assessment.

    Returns 400 with a short message for invalid profiles and 502 when the
    LLM engine cannot produce a report.
    """
    try:
        profile = validate_profile_payload(payload)
    except ProfileValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        assessment, result = analyze_and_store(db, profile, engine=engine)
    except AnalysisError as exc:
        logger.error("Analysis failed for %s: %s", profile.full_name, exc)
        raise HTTPException(status_code=502, detail="Analysis failed. Please try again.")

    return AnalysisResponse(
        **result.model_dump(),
        assessment_id=assessment.id,
        engine=assessment.engine,
    )


@router.get("/rubric", summary="Scoring tables")
def rubric():
    """Every table the rubric engine scores with, so any result can be checked by hand."""
    return describe_rubric()


@router.get("", response_model=list[AssessmentOut], summary="List assessments")
def list_all(
    limit: int = Query(default=50, ge=1, le=200),
    grad_year: Optional[int] = Query(default=None, ge=2020, le=2035),
    gender: Optional[Literal["Male", "Female"]] = Query(default=None),
    db: Session = Depends(get_db),
):
    return list_assessments(db, limit=limit, grad_year=grad_year, gender=gender)


@router.get("/{assessment_id}", response_model=AssessmentDetail, summary="Get an assessment")
def get_one(assessment_id: int, db: Session = Depends(get_db)):
    return _get_or_404(db, assessment_id)


@router.post("/{assessment_id}/email", response_model=EmailReportResult, summary="Email the report")
def send_report(
    assessment_id: int,
    request: Optional[EmailReportRequest] = Body(default=None),
    db: Session = Depends(get_db),
):
    request = request or EmailReportRequest()
    assessment = _get_or_404(db, assessment_id)
    recipient = request.to_address or assessment.email
    if not recipient:
        raise HTTPException(status_code=400, detail="No recipient: pass to_address or include an email on the profile.")

    sent = email_report(db, assessment, to_address=recipient, dry_run=request.dry_run)
    message = "Report sent." if sent else "Report could not be sent; see the email log."
    return EmailReportResult(sent=sent, to_address=recipient, message=message)


@router.get("/{assessment_id}/emails", response_model=list[ReportEmailOut], summary="Report send history")
def email_history(assessment_id: int, db: Session = Depends(get_db)):
    _get_or_404(db, assessment_id)
    return get_report_emails(db, assessment_id)
