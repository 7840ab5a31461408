"""
exposure_engine/services/analysis_service.py — Business logic tying the
engines, persistence and the report mailer together.

  run_analysis(profile)           → AnalysisResult (rubric or LLM engine)
  analyze_and_store(db, profile)  → (Assessment, AnalysisResult)
  email_report(db, assessment)    → bool
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from exposure_engine.ai_engine.processor import analyze_profile_with_llm
from exposure_engine.config import settings
from exposure_engine.db import repository
from exposure_engine.db.models import Assessment
from exposure_engine.intake.profile import PlayerProfile
from exposure_engine.report.mailer import GmailMailer
from exposure_engine.report.templates import render_report_email
from exposure_engine.scoring.insights import score_profile
from exposure_engine.scoring.result import AnalysisResult

logger = logging.getLogger(__name__)

ENGINES = ("rubric", "llm")


def run_analysis(
    profile: PlayerProfile,
    engine: Optional[str] = None,
    as_of: Optional[date] = None,
) -> AnalysisResult:
    """
    Score a profile with the configured engine.

    Args:
        profile: Validated player profile.
        engine:  "rubric" or "llm". Defaults to settings.analysis_engine.
        as_of:   Evaluation date. Defaults to today.

    Raises:
        ValueError:    Unknown engine name.
        AnalysisError: The LLM engine failed.
    """
    engine = engine or settings.analysis_engine
    if engine not in ENGINES:
        raise ValueError(f"Unknown analysis engine {engine!r}; expected one of {ENGINES}")

    logger.info("Running %s analysis for %s (class of %d)", engine, profile.full_name, profile.grad_year)
    if engine == "llm":
        return analyze_profile_with_llm(profile, as_of=as_of)
    return score_profile(profile, as_of=as_of)


def analyze_and_store(
    db: Session,
    profile: PlayerProfile,
    engine: Optional[str] = None,
) -> tuple[Assessment, AnalysisResult]:
    """Run the analysis and persist profile + result as an Assessment."""
    engine = engine or settings.analysis_engine
    result = run_analysis(profile, engine=engine)
    assessment = repository.save_assessment(db, profile, result, engine=engine)
    return assessment, result


def load_assessment(assessment: Assessment) -> tuple[PlayerProfile, AnalysisResult]:
    """Rebuild the typed profile and result from a stored row."""
    profile = PlayerProfile.model_validate(assessment.profile_json)
    result = AnalysisResult.model_validate(assessment.result_json)
    return profile, result


def email_report(
    db: Session,
    assessment: Assessment,
    to_address: Optional[str] = None,
    dry_run: Optional[bool] = None,
) -> bool:
    """
    Email an assessment's report. Every attempt is logged as a ReportEmail.

    Args:
        db:         Active SQLAlchemy session.
        assessment: Stored assessment to send.
        to_address: Recipient. Defaults to the email on the profile.
        dry_run:    Override settings.mailer_dry_run.

    Returns:
        True if sent (or dry-run logged), False on send failure.

    Raises:
        ValueError: No recipient given and none on the profile.
    """
    recipient = to_address or assessment.email
    if not recipient:
        raise ValueError("No recipient address: pass to_address or include an email on the profile.")

    profile, result = load_assessment(assessment)
    email = render_report_email(profile, result, sender_name=settings.report_sender_name)
    return GmailMailer(dry_run=dry_run).send(db, assessment.id, recipient, email)
