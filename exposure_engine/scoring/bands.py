"""
exposure_engine/scoring/bands.py — Classification stages of the visibility rubric.

  A. league tier    — from the latest season's highest league
  B. ability band   — from self ratings, then corrected by role and minutes
  C. academic band  — from unweighted GPA
"""

import logging
from typing import Optional

from exposure_engine.intake.profile import (
    AthleticProfile,
    Gender,
    PlayerProfile,
    Rating,
    SeasonRole,
    SeasonStat,
    YouthLeague,
)
from exposure_engine.scoring.tables import (
    ABILITY_ORDER,
    ACADEMY_KEYWORDS,
    GPA_HIGH,
    GPA_RISKY,
    GPA_SOLID,
    KEY_STARTER_MIN_MINUTES,
    LEAGUE_TIERS,
    LOW_MINUTES_MAX,
    STRONG_RATINGS,
    TIER_ORDER,
    WEAK_RATINGS,
    AbilityBand,
    AcademicBand,
    LeagueTier,
)

logger = logging.getLogger(__name__)


# ── A. League tier ───────────────────────────────────────────────────────────

def _other_league_tier(season: SeasonStat) -> LeagueTier:
    """An 'Other' league counts as Mid only if its name sounds like a top academy."""
    text = f"{season.other_league_name or ''} {season.team_name or ''}".lower()
    if any(kw in text for kw in ACADEMY_KEYWORDS):
        return LeagueTier.MID
    return LeagueTier.LOW


def season_tier(season: SeasonStat, gender: Gender) -> LeagueTier:
    """Highest tier among the leagues listed on one season row."""
    tiers = []
    for league in season.league:
        if league == YouthLeague.OTHER:
            tiers.append(_other_league_tier(season))
        else:
            tiers.append(LEAGUE_TIERS[gender].get(league, LeagueTier.LOW))
    if not tiers:
        tiers.append(_other_league_tier(season))
    return max(tiers, key=TIER_ORDER.index)


def classify_league_tier(profile: PlayerProfile) -> tuple[LeagueTier, Optional[SeasonStat]]:
    """
    Classify the player's current competitive environment.

    Only the latest season year counts. When that year has several leagues
    (or several team rows) the highest tier wins; ties go to the row with more
    minutes so the role checks use the player's main team.

    Returns:
        (tier, primary season) — season is None when the resume is empty.
    """
    latest = profile.latest_seasons()
    if not latest:
        logger.debug("No seasons on resume for %s — league tier Low.", profile.full_name)
        return LeagueTier.LOW, None

    ranked = sorted(
        latest,
        key=lambda s: (TIER_ORDER.index(season_tier(s, profile.gender)), s.minutes_played_percent),
        reverse=True,
    )
    primary = ranked[0]
    tier = season_tier(primary, profile.gender)
    logger.debug("League tier %s from %s (%d).", tier.value, primary.team_name or "?", primary.year)
    return tier, primary


# ── B. Ability band ──────────────────────────────────────────────────────────

def self_rated_band(athletic: AthleticProfile) -> AbilityBand:
    """Starting band from the six self ratings."""
    ratings = athletic.ratings()
    half = len(ratings) / 2
    strong = sum(1 for r in ratings if r in STRONG_RATINGS)
    weak = sum(1 for r in ratings if r in WEAK_RATINGS)
    below = sum(1 for r in ratings if r == Rating.BELOW_AVERAGE)

    if strong > half:
        return AbilityBand.HIGH
    if weak > half:
        return AbilityBand.LOW
    if below <= 1:
        return AbilityBand.MEDIUM
    return AbilityBand.LOW


def _shift(band: AbilityBand, steps: int) -> AbilityBand:
    idx = ABILITY_ORDER.index(band) + steps
    return ABILITY_ORDER[max(0, min(len(ABILITY_ORDER) - 1, idx))]


def classify_ability_band(
    athletic: AthleticProfile,
    season: Optional[SeasonStat],
) -> tuple[AbilityBand, AbilityBand]:
    """
    Returns (self-rated band, final band after role/minutes correction).

    A key starter on 70%+ minutes moves up one band; a bench player or anyone
    on 30% or fewer minutes moves down one. Bands are capped at both ends.
    """
    start = self_rated_band(athletic)
    if season is None:
        return start, start

    minutes = season.minutes_played_percent
    if season.main_role == SeasonRole.KEY_STARTER and minutes >= KEY_STARTER_MIN_MINUTES:
        final = _shift(start, +1)
    elif season.main_role == SeasonRole.BENCH or minutes <= LOW_MINUTES_MAX:
        final = _shift(start, -1)
    else:
        final = start

    logger.debug("Ability band %s → %s (role=%s, minutes=%.0f%%).",
                 start.value, final.value, season.main_role.value, minutes)
    return start, final


def needs_verification(tier: LeagueTier, athletic: AthleticProfile) -> bool:
    """'Elite' in a local league is not elite nationally — flag top self ratings below High tier."""
    if tier not in (LeagueTier.LOW, LeagueTier.MID):
        return False
    return any(r in STRONG_RATINGS for r in athletic.ratings())


# ── C. Academic band ─────────────────────────────────────────────────────────

def classify_academic_band(gpa: Optional[float]) -> AcademicBand:
    if gpa is None:
        return AcademicBand.PROBLEM
    if gpa >= GPA_HIGH:
        return AcademicBand.HIGH
    if gpa >= GPA_SOLID:
        return AcademicBand.SOLID
    if gpa >= GPA_RISKY:
        return AcademicBand.RISKY
    return AcademicBand.PROBLEM
