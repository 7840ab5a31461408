"""
api/schemas.py — Pydantic request/response models for the API.

Kept separate from the ORM models so we control exactly what is exposed
over HTTP. The analysis report itself is the camelCase AnalysisResult.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from exposure_engine.db.models import DeliveryStatus
from exposure_engine.scoring.result import AnalysisResult


# ── Analysis ──────────────────────────────────────────────────────────────────

class AnalysisResponse(AnalysisResult):
    """Report plus the id it was stored under (assessmentId on the wire)."""
    assessment_id: int
    engine: str


# ── Assessment ────────────────────────────────────────────────────────────────

class AssessmentOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    gender: str
    grad_year: int
    position: str
    engine: str
    primary_level: Optional[str] = None
    visibility: dict[str, int] = Field(default_factory=dict)
    referral_source: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AssessmentDetail(AssessmentOut):
    profile_json: dict[str, Any]
    result_json: dict[str, Any]


# ── Report Email ──────────────────────────────────────────────────────────────

class EmailReportRequest(BaseModel):
    to_address: Optional[str] = Field(
        default=None,
        max_length=254,
        description="Recipient. Defaults to the email on the profile.",
    )
    dry_run: Optional[bool] = Field(
        default=None,
        description="Override MAILER_DRY_RUN for this request.",
    )


class EmailReportResult(BaseModel):
    sent: bool
    to_address: str
    message: str


class ReportEmailOut(BaseModel):
    id: int
    assessment_id: int
    to_address: str
    subject: str
    delivery_status: DeliveryStatus
    sent_at: Optional[datetime] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
