"""
exposure_engine/db/models.py — SQLAlchemy ORM models for stored assessments.

Tables:
  - Assessment  → one scored player profile (input + full report)
  - ReportEmail → an emailed copy of an assessment's report
"""

import enum

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, relationship


# ── Base ─────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Enums ────────────────────────────────────────────────────────────────────

class DeliveryStatus(str, enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


# ── Models ───────────────────────────────────────────────────────────────────

class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=True)
    gender = Column(String(10), nullable=False)
    grad_year = Column(Integer, nullable=False)
    position = Column(String(20), nullable=False)

    engine = Column(String(20), nullable=False, default="rubric")   # "rubric" | "llm"
    primary_level = Column(String(10), nullable=True)               # e.g. "D2"
    visibility = Column(JSON, nullable=False, default=dict)         # {"D1": 40, ...}
    profile_json = Column(JSON, nullable=False)                     # camelCase form payload
    result_json = Column(JSON, nullable=False)                      # camelCase AnalysisResult
    referral_source = Column(String(200), nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    # Relationships
    report_emails = relationship("ReportEmail", back_populates="assessment", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Assessment id={self.id} name={self.full_name!r} primary={self.primary_level}>"


class ReportEmail(Base):
    __tablename__ = "report_emails"

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False)
    to_address = Column(String(255), nullable=False)
    subject = Column(String(512), nullable=False)
    body = Column(Text, nullable=False)
    delivery_status = Column(Enum(DeliveryStatus), default=DeliveryStatus.PENDING, nullable=False)
    error_message = Column(Text, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    # Relationships
    assessment = relationship("Assessment", back_populates="report_emails")

    def __repr__(self) -> str:
        return f"<ReportEmail id={self.id} assessment_id={self.assessment_id} status={self.delivery_status}>"
