"""
exposure_engine/intake/profile.py — Typed player profile submitted by the intake form.

The form posts camelCase JSON (firstName, minutesPlayedPercent, ...). Models use
snake_case attributes with camelCase aliases, so both spellings validate and
`model_dump(by_alias=True)` round-trips to the wire format.
"""

import enum
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from exposure_engine.intake.normalizer import (
    blank_to_none,
    none_to_zero,
    normalize_league,
    normalize_rating,
    sanitize_text,
    split_csv,
)


# ── Enums ────────────────────────────────────────────────────────────────────

class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"


class YouthLeague(str, enum.Enum):
    MLS_NEXT = "MLS_NEXT"
    ECNL = "ECNL"
    GIRLS_ACADEMY = "Girls_Academy"
    ECNL_RL = "ECNL_RL"
    USYS_NATIONAL_LEAGUE = "USYS_National_League"
    USYS_ELITE_64 = "USYS_Elite_64"
    USL_ACADEMY = "USL_Academy"
    NPL = "NPL"
    HIGH_SCHOOL = "High_School"
    ELITE_LOCAL = "Elite_Local"
    OTHER = "Other"


class Position(str, enum.Enum):
    GK = "GK"
    CB = "CB"
    FB = "FB"
    LB = "LB"
    RB = "RB"
    WB = "WB"
    DM = "DM"
    CDM = "CDM"
    CM = "CM"
    AM = "AM"
    CAM = "CAM"
    WING = "WING"
    LW = "LW"
    RW = "RW"
    NINE = "9"
    ST = "ST"
    UTILITY = "Utility"


class ExperienceLevel(str, enum.Enum):
    YOUTH_CLUB_ONLY = "Youth_Club_Only"
    HIGH_SCHOOL_VARSITY = "High_School_Varsity"
    ADULT_AMATEUR_LEAGUE = "Adult_Amateur_League"
    SEMI_PRO = "Semi_Pro_UPSL_NPSL_WPSL"
    INTERNATIONAL_ACADEMY_U19 = "International_Academy_U19"
    PRO_ACADEMY_RESERVE = "Pro_Academy_Reserve"


class Rating(str, enum.Enum):
    BELOW_AVERAGE = "Below_Average"
    AVERAGE = "Average"
    ABOVE_AVERAGE = "Above_Average"
    TOP_10_PERCENT = "Top_10_Percent"
    ELITE = "Elite"


class SeasonRole(str, enum.Enum):
    KEY_STARTER = "Key_Starter"
    ROTATION = "Rotation"
    BENCH = "Bench"
    INJURED = "Injured"


class EventType(str, enum.Enum):
    SHOWCASE = "Showcase"
    ID_CAMP = "ID_Camp"
    ODP = "ODP"
    HS_PLAYOFFS = "HS_Playoffs"
    OTHER = "Other"


class VideoType(str, enum.Enum):
    EDITED_HIGHLIGHT_REEL = "Edited_Highlight_Reel"
    RAW_GAME_FOOTAGE = "Raw_Game_Footage"
    NONE = "None"


# ── Sub-records ──────────────────────────────────────────────────────────────

class _FormModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SeasonStat(_FormModel):
    year: int = Field(..., ge=1990, le=2100)
    team_name: str = ""
    league: list[YouthLeague] = Field(default_factory=list)
    other_league_name: Optional[str] = None
    minutes_played_percent: float = Field(default=0, ge=0, le=100)
    main_role: SeasonRole = SeasonRole.ROTATION
    goals: int = Field(default=0, ge=0)
    assists: int = Field(default=0, ge=0)
    honors: str = ""

    @field_validator("league", mode="before")
    @classmethod
    def _wrap_league(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [normalize_league(v) for v in value]

    @field_validator("minutes_played_percent", "goals", "assists", mode="before")
    @classmethod
    def _cleared_number(cls, value):
        return none_to_zero(value)

    @field_validator("team_name", "honors", mode="before")
    @classmethod
    def _clean_text(cls, value):
        return sanitize_text(value)

    @field_validator("other_league_name", mode="before")
    @classmethod
    def _clean_optional_text(cls, value):
        return sanitize_text(value) or None

    @property
    def honors_list(self) -> list[str]:
        return split_csv(self.honors)


class AcademicProfile(_FormModel):
    graduation_year: Optional[int] = None
    gpa: Optional[float] = Field(default=None, ge=0, le=5.0)
    test_score: Optional[str] = None

    @field_validator("gpa", "graduation_year", "test_score", mode="before")
    @classmethod
    def _blank(cls, value):
        return blank_to_none(value)


class AthleticProfile(_FormModel):
    speed: Rating = Rating.AVERAGE
    strength: Rating = Rating.AVERAGE
    endurance: Rating = Rating.AVERAGE
    work_rate: Rating = Rating.AVERAGE
    technical: Rating = Rating.AVERAGE
    tactical: Rating = Rating.AVERAGE

    @field_validator("*", mode="before")
    @classmethod
    def _normalize(cls, value):
        return normalize_rating(value)

    def ratings(self) -> list[Rating]:
        return [self.speed, self.strength, self.endurance, self.work_rate, self.technical, self.tactical]


class ExposureEvent(_FormModel):
    name: str = ""
    type: EventType = EventType.OTHER
    colleges_noted: str = ""

    @field_validator("name", "colleges_noted", mode="before")
    @classmethod
    def _clean_text(cls, value):
        return sanitize_text(value)

    @property
    def colleges(self) -> list[str]:
        return split_csv(self.colleges_noted)


# ── Player profile ───────────────────────────────────────────────────────────

class PlayerProfile(_FormModel):
    """Everything the intake form collects about one player."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, max_length=254)
    gender: Gender
    date_of_birth: Optional[date] = None
    citizenship: str = ""
    experience_level: list[ExperienceLevel] = Field(default_factory=list)
    position: Position
    secondary_positions: list[Position] = Field(default_factory=list, max_length=2)
    dominant_foot: str = "Right"
    height: str = ""
    grad_year: int = Field(..., ge=2020, le=2035)
    state: str = ""

    seasons: list[SeasonStat] = Field(default_factory=list)
    academics: AcademicProfile = Field(default_factory=AcademicProfile)
    athletic_profile: AthleticProfile = Field(default_factory=AthleticProfile)
    events: list[ExposureEvent] = Field(default_factory=list)

    video_type: Optional[VideoType] = None
    video_link: bool = False
    coaches_contacted: int = Field(default=0, ge=0)
    responses_received: int = Field(default=0, ge=0)
    offers_received: int = Field(default=0, ge=0)

    referral_source: Optional[str] = Field(default=None, max_length=200)

    # ── Validators ───────────────────────────────────────────────────────────

    @field_validator("first_name", "last_name", "citizenship", "state", "height", mode="before")
    @classmethod
    def _clean_text(cls, value):
        return sanitize_text(value)

    @field_validator("email", "date_of_birth", "video_type", "referral_source", mode="before")
    @classmethod
    def _blank(cls, value):
        return blank_to_none(value)

    @field_validator("coaches_contacted", "responses_received", "offers_received", mode="before")
    @classmethod
    def _cleared_number(cls, value):
        return none_to_zero(value)

    @field_validator("experience_level", mode="before")
    @classmethod
    def _wrap_experience(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("position", "secondary_positions", mode="before")
    @classmethod
    def _normalize_position(cls, value):
        def _one(v):
            if not isinstance(v, str):
                return v
            v = v.strip()
            for pos in Position:
                if pos.value.lower() == v.lower():
                    return pos.value
            return v

        if isinstance(value, list):
            return [_one(v) for v in value]
        return _one(value)

    # ── Derived values ───────────────────────────────────────────────────────

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def resolved_video_type(self) -> VideoType:
        """Explicit videoType wins; the legacy videoLink flag means a finished reel."""
        if self.video_type is not None:
            return self.video_type
        return VideoType.EDITED_HIGHLIGHT_REEL if self.video_link else VideoType.NONE

    @property
    def reply_rate(self) -> float:
        """Coach reply rate in percent (0–100)."""
        if self.coaches_contacted <= 0:
            return 0.0
        return min(100.0, self.responses_received / self.coaches_contacted * 100)

    def age_on(self, as_of: date) -> Optional[float]:
        if not self.date_of_birth:
            return None
        return (as_of - self.date_of_birth).days / 365.25

    def years_to_graduation(self, as_of: date) -> int:
        return self.grad_year - as_of.year

    def latest_seasons(self) -> list[SeasonStat]:
        """All season rows for the most recent year on the resume."""
        if not self.seasons:
            return []
        latest_year = max(s.year for s in self.seasons)
        return [s for s in self.seasons if s.year == latest_year]
