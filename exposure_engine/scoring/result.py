"""
exposure_engine/scoring/result.py — Analysis report models shared by both engines.

Attributes are snake_case; the API and stored JSON use the camelCase aliases
(visibilityScores, keyRisks, ...).
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from exposure_engine.scoring.tables import CollegeLevel

Severity = Literal["High", "Medium", "Low"]
Timeframe = Literal["Next_30_Days", "Next_90_Days", "Next_12_Months"]
FunnelStage = Literal["Invisible", "Outreach", "Conversation", "Evaluation", "Closing"]
RiskCategory = Literal[
    "League", "Minutes", "Academics", "Events", "Location",
    "Media", "Communication", "Verification",
]

SEVERITY_ORDER = {"High": 0, "Medium": 1, "Low": 2}


class _ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VisibilityScore(_ReportModel):
    level: CollegeLevel
    visibility_percent: int = Field(..., ge=0, le=100)
    notes: str = ""


class ReadinessScore(_ReportModel):
    athletic: int = Field(default=50, ge=0, le=100)
    technical: int = Field(default=50, ge=0, le=100)
    tactical: int = Field(default=50, ge=0, le=100)
    academic: int = Field(default=50, ge=0, le=100)
    market: int = Field(default=50, ge=0, le=100)


class RiskFlag(_ReportModel):
    category: RiskCategory
    message: str
    severity: Severity


class ActionItem(_ReportModel):
    timeframe: Timeframe
    description: str
    impact: Severity


class FunnelAnalysis(_ReportModel):
    stage: FunnelStage = "Invisible"
    conversion_rate: str = "0%"
    bottleneck: str = "Unknown"
    advice: str = "Review data"


class BenchmarkMetric(_ReportModel):
    category: str
    user_score: int = Field(..., ge=0, le=100)
    d1_score: Optional[int] = None
    d2_score: Optional[int] = None
    d3_score: Optional[int] = None
    naia_score: Optional[int] = None
    juco_score: Optional[int] = None
    market_access: Optional[int] = None
    feedback: str = ""


class AnalysisResult(_ReportModel):
    visibility_scores: list[VisibilityScore]
    readiness_score: ReadinessScore = Field(default_factory=ReadinessScore)
    key_strengths: list[str] = Field(default_factory=list)
    key_risks: list[RiskFlag] = Field(default_factory=list)
    action_plan: list[ActionItem] = Field(default_factory=list)
    plain_language_summary: str = ""
    coach_short_evaluation: str = ""
    funnel_analysis: FunnelAnalysis = Field(default_factory=FunnelAnalysis)
    benchmark_analysis: list[BenchmarkMetric] = Field(default_factory=list)
    # Rubric engine only: per-stage points behind every percentage
    scoring_breakdown: Optional[dict[str, Any]] = None

    def visibility_for(self, level: CollegeLevel) -> int:
        for score in self.visibility_scores:
            if score.level == level:
                return score.visibility_percent
        return 0

    @property
    def primary_level(self) -> CollegeLevel:
        best = max(self.visibility_scores, key=lambda s: s.visibility_percent)
        return best.level

    def to_wire(self) -> dict[str, Any]:
        """camelCase JSON-ready dict (for storage and the API)."""
        return self.model_dump(mode="json", by_alias=True)
