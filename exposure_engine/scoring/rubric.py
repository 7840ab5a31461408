"""
exposure_engine/scoring/rubric.py — Deterministic college visibility rubric.

compute_visibility(profile) runs every stage of the point-table model:

  A-C  classify league tier, ability band, academic band   (bands.py)
  D    base visibility by gender and league tier
  E    ability adjustment
  F    academic adjustment
  G    role / minutes tweak
  G2   maturity: age and adult / pro experience
  G3   gender market: recruiting timeline and position scarcity
       → clamp 0-100 = on_paper_fit
  H    video and outreach multipliers
       → clamp 0-100 = current_visibility

Each stage's per-level points are kept on the breakdown so any number in the
report can be traced back to the table row that produced it.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from exposure_engine.intake.profile import (
    Gender,
    PlayerProfile,
    Position,
    SeasonRole,
    SeasonStat,
    VideoType,
)
from exposure_engine.scoring.bands import (
    classify_ability_band,
    classify_academic_band,
    classify_league_tier,
    needs_verification,
)
from exposure_engine.scoring import tables as t
from exposure_engine.scoring.tables import (
    LEVELS,
    AbilityBand,
    AcademicBand,
    CollegeLevel,
    LeagueTier,
    OutreachTag,
)

logger = logging.getLogger(__name__)

LevelPoints = dict[CollegeLevel, int]

STAGES = ("base", "ability", "academic", "role", "maturity", "gender_market")


# ── Output ───────────────────────────────────────────────────────────────────

@dataclass
class VisibilityBreakdown:
    league_tier: LeagueTier
    self_rated_ability: AbilityBand
    ability_band: AbilityBand
    academic_band: AcademicBand
    verification_risk: bool
    primary_season: Optional[SeasonStat]
    age: Optional[float]
    years_to_graduation: int
    experience_tier: Optional[int]          # 1 (pro) … 3 (adult amateur), None = youth only
    adjustments: dict[str, LevelPoints]     # stage → level → points
    on_paper_fit: LevelPoints
    video_type: VideoType
    video_multiplier: float
    outreach_tag: OutreachTag
    outreach_multiplier: float
    reply_rate: float
    current_visibility: LevelPoints
    primary_level: CollegeLevel
    notes: list[str] = field(default_factory=list)

    def targetable_levels(self) -> list[CollegeLevel]:
        """Levels worth chasing; falls back to the primary level if none clear the bar."""
        levels = [lv for lv in LEVELS if self.current_visibility[lv] >= t.MIN_TARGET_VISIBILITY]
        return levels or [self.primary_level]

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view (enum values, level keys as strings)."""
        def _levels(points: LevelPoints) -> dict[str, int]:
            return {lv.value: points.get(lv, 0) for lv in LEVELS}

        return {
            "leagueTier": self.league_tier.value,
            "selfRatedAbility": self.self_rated_ability.value,
            "abilityBand": self.ability_band.value,
            "academicBand": self.academic_band.value,
            "verificationRisk": self.verification_risk,
            "age": round(self.age, 1) if self.age is not None else None,
            "yearsToGraduation": self.years_to_graduation,
            "experienceTier": self.experience_tier,
            "adjustments": {stage: _levels(points) for stage, points in self.adjustments.items()},
            "onPaperFit": _levels(self.on_paper_fit),
            "videoType": self.video_type.value,
            "videoMultiplier": self.video_multiplier,
            "outreachTag": self.outreach_tag.value,
            "outreachMultiplier": self.outreach_multiplier,
            "replyRate": round(self.reply_rate, 1),
            "currentVisibility": _levels(self.current_visibility),
            "primaryLevel": self.primary_level.value,
        }


# ── Helpers ──────────────────────────────────────────────────────────────────

def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def apply_multipliers(fit: int, video: float, outreach: float) -> int:
    """fit × video × outreach, clamped and rounded half-up, computed in integer tenths."""
    scaled = fit * round(video * 10) * round(outreach * 10)
    return int(clamp((scaled + 50) // 100))


def _add(into: LevelPoints, delta: dict) -> None:
    for level, points in delta.items():
        into[level] = into.get(level, 0) + points


def _full(points: dict) -> LevelPoints:
    return {level: points.get(level, 0) for level in LEVELS}


# ── D-G3 stages ──────────────────────────────────────────────────────────────

def role_adjustment(season: Optional[SeasonStat], tier: LeagueTier) -> LevelPoints:
    """Stage G: extra tweak for heavy starters and rarely-used bench players."""
    if season is None:
        return _full({})
    minutes = season.minutes_played_percent
    if season.main_role == SeasonRole.KEY_STARTER and minutes >= t.STARTER_BONUS_MIN_MINUTES:
        return _full(t.STARTER_BONUS)
    if season.main_role == SeasonRole.BENCH and minutes <= t.BENCH_PENALTY_MAX_MINUTES:
        # An elite-league bench player is often a D2/D3 starter
        if tier == LeagueTier.ELITE:
            return _full(t.BENCH_PENALTY_ELITE)
        return _full(t.BENCH_PENALTY_DEFAULT)
    return _full({})


def experience_tier(profile: PlayerProfile) -> Optional[int]:
    selected = set(profile.experience_level)
    for tier_number in sorted(t.EXPERIENCE_TIERS):
        values, _ = t.EXPERIENCE_TIERS[tier_number]
        if selected & values:
            return tier_number
    return None


def maturity_adjustment(profile: PlayerProfile, as_of: date) -> tuple[LevelPoints, Optional[int]]:
    """Stage G2: age factor, highest experience tier, breadth of adult experience."""
    points: LevelPoints = _full({})

    age = profile.age_on(as_of)
    if age is not None and age > t.AGE_BONUS_MIN_YEARS:
        _add(points, t.AGE_BONUS)

    tier_number = experience_tier(profile)
    if tier_number is not None:
        _add(points, t.EXPERIENCE_TIERS[tier_number][1])

    breadth = len(set(profile.experience_level) & t.TIERED_EXPERIENCE)
    for minimum, bonus in t.BREADTH_BONUSES:
        if breadth >= minimum:
            _add(points, bonus)
            break

    return points, tier_number


def gender_market_adjustment(profile: PlayerProfile, as_of: date) -> LevelPoints:
    """Stage G3: gender-specific recruiting timeline and position scarcity."""
    points: LevelPoints = _full({})
    years = profile.years_to_graduation(as_of)

    if profile.gender == Gender.FEMALE:
        if years in t.FEMALE_PEAK_YEARS:
            _add(points, t.PEAK_WINDOW_BONUS)
        elif years <= t.FEMALE_CLOSING_MAX_YEARS:
            _add(points, t.CLOSING_WINDOW_PENALTY)
    elif years in t.MALE_PEAK_YEARS:
        _add(points, t.PEAK_WINDOW_BONUS)

    if profile.position == Position.GK:
        _add(points, t.GOALKEEPER_BONUS[profile.gender])
    elif profile.gender == Gender.FEMALE and profile.position in t.FEMALE_DEFENSIVE_POSITIONS:
        _add(points, t.FEMALE_DEFENSIVE_BONUS)

    return points


# ── H. Market multipliers ────────────────────────────────────────────────────

def classify_outreach(profile: PlayerProfile) -> OutreachTag:
    if profile.coaches_contacted == 0:
        return OutreachTag.INVISIBLE
    if (
        profile.coaches_contacted >= t.SPAMMING_MIN_CONTACTS
        and profile.reply_rate < t.SPAMMING_MAX_REPLY_RATE
    ):
        return OutreachTag.SPAMMING
    if profile.responses_received >= t.TALENT_GAP_MIN_RESPONSES and profile.offers_received == 0:
        return OutreachTag.TALENT_GAP
    return OutreachTag.HEALTHY


# ── Main function ────────────────────────────────────────────────────────────

def compute_visibility(profile: PlayerProfile, as_of: Optional[date] = None) -> VisibilityBreakdown:
    """
    Score a player's realistic visibility to each college level.

    Args:
        profile: Validated player profile.
        as_of:   Evaluation date for age and graduation timeline. Defaults to today.

    Returns:
        VisibilityBreakdown with every stage's points, the on-paper fit, the
        market multipliers and the final current visibility per level.
    """
    as_of = as_of or date.today()

    tier, season = classify_league_tier(profile)
    self_band, ability = classify_ability_band(profile.athletic_profile, season)
    academic = classify_academic_band(profile.academics.gpa)
    maturity, exp_tier = maturity_adjustment(profile, as_of)

    adjustments: dict[str, LevelPoints] = {
        "base": _full(t.BASE_VISIBILITY[profile.gender][tier]),
        "ability": _full(t.ABILITY_ADJUSTMENTS[ability]),
        "academic": _full(t.ACADEMIC_ADJUSTMENTS[academic]),
        "role": role_adjustment(season, tier),
        "maturity": maturity,
        "gender_market": gender_market_adjustment(profile, as_of),
    }

    on_paper_fit = {
        level: int(clamp(sum(adjustments[stage][level] for stage in STAGES)))
        for level in LEVELS
    }

    video_type = profile.resolved_video_type
    video_multiplier = t.VIDEO_MULTIPLIERS[video_type]
    outreach_tag = classify_outreach(profile)
    outreach_multiplier = t.OUTREACH_MULTIPLIERS[outreach_tag]

    current = {
        level: apply_multipliers(on_paper_fit[level], video_multiplier, outreach_multiplier)
        for level in LEVELS
    }
    # max() keeps the first maximum, so ties go to the higher division
    primary = max(LEVELS, key=lambda lv: current[lv])

    breakdown = VisibilityBreakdown(
        league_tier=tier,
        self_rated_ability=self_band,
        ability_band=ability,
        academic_band=academic,
        verification_risk=needs_verification(tier, profile.athletic_profile),
        primary_season=season,
        age=profile.age_on(as_of),
        years_to_graduation=profile.years_to_graduation(as_of),
        experience_tier=exp_tier,
        adjustments=adjustments,
        on_paper_fit=on_paper_fit,
        video_type=video_type,
        video_multiplier=video_multiplier,
        outreach_tag=outreach_tag,
        outreach_multiplier=outreach_multiplier,
        reply_rate=profile.reply_rate,
        current_visibility=current,
        primary_level=primary,
    )

    logger.info(
        "Visibility for %s: tier=%s ability=%s academic=%s video=x%.1f outreach=%s → %s",
        profile.full_name, tier.value, ability.value, academic.value,
        video_multiplier, outreach_tag.value,
        {lv.value: current[lv] for lv in LEVELS},
    )
    return breakdown
