"""
exposure_engine/scoring/tables.py — Point tables for the college visibility rubric.

Pure configuration data. Every adjustment table is keyed by college level and
only lists the levels it touches; missing levels mean "no change".
"""

import enum

from exposure_engine.intake.profile import (
    ExperienceLevel,
    Gender,
    Position,
    Rating,
    VideoType,
    YouthLeague,
)


# ── Levels and bands ─────────────────────────────────────────────────────────

class CollegeLevel(str, enum.Enum):
    D1 = "D1"
    D2 = "D2"
    D3 = "D3"
    NAIA = "NAIA"
    JUCO = "JUCO"


LEVELS: tuple[CollegeLevel, ...] = (
    CollegeLevel.D1,
    CollegeLevel.D2,
    CollegeLevel.D3,
    CollegeLevel.NAIA,
    CollegeLevel.JUCO,
)


class LeagueTier(str, enum.Enum):
    ELITE = "Elite"
    HIGH = "High"
    MID = "Mid"
    LOW = "Low"


class AbilityBand(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class AcademicBand(str, enum.Enum):
    HIGH = "High"
    SOLID = "Solid"
    RISKY = "Risky"
    PROBLEM = "Problem"


class OutreachTag(str, enum.Enum):
    INVISIBLE = "Invisible"
    SPAMMING = "Spamming"
    TALENT_GAP = "Talent Gap"
    HEALTHY = "Healthy"


TIER_ORDER = [LeagueTier.LOW, LeagueTier.MID, LeagueTier.HIGH, LeagueTier.ELITE]
ABILITY_ORDER = [AbilityBand.LOW, AbilityBand.MEDIUM, AbilityBand.HIGH]

L = CollegeLevel


# ── A. League tiers ──────────────────────────────────────────────────────────

_SHARED_TIERS = {
    YouthLeague.ECNL_RL: LeagueTier.HIGH,
    YouthLeague.USYS_NATIONAL_LEAGUE: LeagueTier.HIGH,
    YouthLeague.USYS_ELITE_64: LeagueTier.HIGH,
    YouthLeague.USL_ACADEMY: LeagueTier.HIGH,
    YouthLeague.NPL: LeagueTier.MID,
    YouthLeague.ELITE_LOCAL: LeagueTier.MID,
    YouthLeague.HIGH_SCHOOL: LeagueTier.LOW,
}

LEAGUE_TIERS: dict[Gender, dict[YouthLeague, LeagueTier]] = {
    Gender.MALE: {
        **_SHARED_TIERS,
        YouthLeague.MLS_NEXT: LeagueTier.ELITE,
        YouthLeague.ECNL: LeagueTier.ELITE,
        # Girls-only league on a boy's resume: credit it as a strong league, not a top one
        YouthLeague.GIRLS_ACADEMY: LeagueTier.HIGH,
    },
    Gender.FEMALE: {
        **_SHARED_TIERS,
        YouthLeague.ECNL: LeagueTier.ELITE,
        YouthLeague.GIRLS_ACADEMY: LeagueTier.ELITE,
        YouthLeague.MLS_NEXT: LeagueTier.HIGH,
    },
}

# Names that make an 'Other' league sound like a top academy environment
ACADEMY_KEYWORDS = (
    "academy", "mls", "ecnl", "usl", "npl", "dpl", "premier", "bundesliga",
    "development", "elite", "pre-academy", "reserve", "u19", "u-19",
)


# ── B/C. Ability and academic inputs ─────────────────────────────────────────

STRONG_RATINGS = {Rating.TOP_10_PERCENT, Rating.ELITE}
WEAK_RATINGS = {Rating.AVERAGE, Rating.BELOW_AVERAGE}

KEY_STARTER_MIN_MINUTES = 70      # ability band up
LOW_MINUTES_MAX = 30              # ability band down

GPA_HIGH = 3.7
GPA_SOLID = 3.0
GPA_RISKY = 2.3


# ── D. Base visibility by gender and league tier ─────────────────────────────

BASE_VISIBILITY: dict[Gender, dict[LeagueTier, dict[CollegeLevel, int]]] = {
    Gender.MALE: {
        LeagueTier.ELITE: {L.D1: 75, L.D2: 85, L.D3: 60, L.NAIA: 85, L.JUCO: 95},
        LeagueTier.HIGH: {L.D1: 35, L.D2: 60, L.D3: 65, L.NAIA: 70, L.JUCO: 80},
        LeagueTier.MID: {L.D1: 15, L.D2: 35, L.D3: 60, L.NAIA: 55, L.JUCO: 65},
        LeagueTier.LOW: {L.D1: 5, L.D2: 20, L.D3: 40, L.NAIA: 45, L.JUCO: 60},
    },
    Gender.FEMALE: {
        LeagueTier.ELITE: {L.D1: 88, L.D2: 93, L.D3: 68, L.NAIA: 88, L.JUCO: 97},
        LeagueTier.HIGH: {L.D1: 48, L.D2: 68, L.D3: 73, L.NAIA: 78, L.JUCO: 88},
        LeagueTier.MID: {L.D1: 20, L.D2: 40, L.D3: 68, L.NAIA: 60, L.JUCO: 70},
        LeagueTier.LOW: {L.D1: 8, L.D2: 25, L.D3: 52, L.NAIA: 52, L.JUCO: 65},
    },
}

# Approximate program counts (2025-26); used in report wording only
PROGRAM_COUNTS: dict[Gender, dict[CollegeLevel, int]] = {
    Gender.MALE: {L.D1: 205, L.D2: 210, L.D3: 420, L.NAIA: 200, L.JUCO: 120},
    Gender.FEMALE: {L.D1: 335, L.D2: 265, L.D3: 441, L.NAIA: 230, L.JUCO: 160},
}


# ── E. Ability ───────────────────────────────────────────────────────────────

ABILITY_ADJUSTMENTS: dict[AbilityBand, dict[CollegeLevel, int]] = {
    AbilityBand.HIGH: {L.D1: 15, L.D2: 10, L.D3: 5, L.NAIA: 10, L.JUCO: 5},
    AbilityBand.MEDIUM: {},
    AbilityBand.LOW: {L.D1: -20, L.D2: -15, L.D3: -10, L.NAIA: -5, L.JUCO: 0},
}


# ── F. Academics ─────────────────────────────────────────────────────────────

ACADEMIC_ADJUSTMENTS: dict[AcademicBand, dict[CollegeLevel, int]] = {
    AcademicBand.HIGH: {L.D1: 5, L.D2: 5, L.D3: 15, L.NAIA: 0, L.JUCO: -5},
    AcademicBand.SOLID: {L.D3: 5, L.JUCO: -5},
    AcademicBand.RISKY: {L.D1: -10, L.D2: -5, L.D3: -20, L.NAIA: 5, L.JUCO: 5},
    AcademicBand.PROBLEM: {L.D1: -25, L.D2: -20, L.D3: -40, L.NAIA: 0, L.JUCO: 20},
}


# ── G. Role and minutes ──────────────────────────────────────────────────────

STARTER_BONUS_MIN_MINUTES = 80
STARTER_BONUS = {L.D1: 5, L.D2: 5}

BENCH_PENALTY_MAX_MINUTES = 20
BENCH_PENALTY_ELITE = {L.D1: -20, L.D2: -5, L.D3: -5}
BENCH_PENALTY_DEFAULT = {level: -10 for level in LEVELS}


# ── G2. Maturity and experience ──────────────────────────────────────────────

AGE_BONUS_MIN_YEARS = 18.5
AGE_BONUS = {L.D1: 5, L.D2: 5, L.NAIA: 5}

# tier number → (experience values, adjustment)
EXPERIENCE_TIERS: dict[int, tuple[frozenset, dict[CollegeLevel, int]]] = {
    1: (
        frozenset({ExperienceLevel.PRO_ACADEMY_RESERVE}),
        {L.D1: 15, L.D2: 15, L.D3: 5, L.NAIA: 10, L.JUCO: 5},
    ),
    2: (
        frozenset({ExperienceLevel.SEMI_PRO, ExperienceLevel.INTERNATIONAL_ACADEMY_U19}),
        {L.D1: 12, L.D2: 12, L.D3: 5, L.NAIA: 8, L.JUCO: 5},
    ),
    3: (
        frozenset({ExperienceLevel.ADULT_AMATEUR_LEAGUE}),
        {L.D1: 5, L.D2: 8, L.D3: 3, L.NAIA: 8, L.JUCO: 5},
    ),
}

TIERED_EXPERIENCE = frozenset().union(*(values for values, _ in EXPERIENCE_TIERS.values()))

# Minimum tiered selections → bonus; the largest matching threshold applies
BREADTH_BONUSES: list[tuple[int, dict[CollegeLevel, int]]] = [
    (3, {L.D1: 8, L.D2: 8, L.NAIA: 5, L.D3: 5}),
    (2, {L.D1: 5, L.D2: 5, L.NAIA: 3}),
]

EXPERIENCE_LABELS = {
    ExperienceLevel.PRO_ACADEMY_RESERVE: "Pro academy / reserve team experience",
    ExperienceLevel.SEMI_PRO: "Semi-pro (UPSL/NPSL/WPSL) experience",
    ExperienceLevel.INTERNATIONAL_ACADEMY_U19: "International U19 academy experience",
    ExperienceLevel.ADULT_AMATEUR_LEAGUE: "Adult amateur league experience",
}


# ── G3. Gender market dynamics ───────────────────────────────────────────────

PEAK_WINDOW_BONUS = {L.D1: 5, L.D2: 5}
CLOSING_WINDOW_PENALTY = {L.D1: -5, L.D2: -5}

FEMALE_PEAK_YEARS = (2, 3)
FEMALE_CLOSING_MAX_YEARS = 1
FEMALE_EARLY_MIN_YEARS = 4
MALE_PEAK_YEARS = (1, 2)

GOALKEEPER_BONUS = {
    Gender.FEMALE: {L.D1: 8, L.D2: 5},
    Gender.MALE: {L.D1: 3, L.D2: 3},
}
FEMALE_DEFENSIVE_POSITIONS = frozenset({Position.CB, Position.DM, Position.CDM})
FEMALE_DEFENSIVE_BONUS = {L.D1: 3, L.D2: 3}


# ── H. Market multipliers ────────────────────────────────────────────────────

VIDEO_MULTIPLIERS: dict[VideoType, float] = {
    VideoType.EDITED_HIGHLIGHT_REEL: 1.0,
    VideoType.RAW_GAME_FOOTAGE: 0.8,
    VideoType.NONE: 0.6,
}

OUTREACH_MULTIPLIERS: dict[OutreachTag, float] = {
    OutreachTag.INVISIBLE: 0.7,
    OutreachTag.SPAMMING: 0.8,
    OutreachTag.TALENT_GAP: 0.9,
    OutreachTag.HEALTHY: 1.0,
}

SPAMMING_MIN_CONTACTS = 20
SPAMMING_MAX_REPLY_RATE = 5.0
TALENT_GAP_MIN_RESPONSES = 5

# Plan never pushes levels below this visibility
MIN_TARGET_VISIBILITY = 15


# ── Output mappings ──────────────────────────────────────────────────────────

READINESS_ATHLETIC = {AbilityBand.LOW: 40, AbilityBand.MEDIUM: 75, AbilityBand.HIGH: 95}
READINESS_ACADEMIC = {
    AcademicBand.PROBLEM: 40,
    AcademicBand.RISKY: 65,
    AcademicBand.SOLID: 80,
    AcademicBand.HIGH: 95,
}
RATING_POINTS = {
    Rating.BELOW_AVERAGE: 30,
    Rating.AVERAGE: 50,
    Rating.ABOVE_AVERAGE: 70,
    Rating.TOP_10_PERCENT: 85,
    Rating.ELITE: 95,
}
TACTICAL_EXPERIENCE_BONUS = 10
TACTICAL_BONUS_EXPERIENCE = frozenset({
    ExperienceLevel.SEMI_PRO,
    ExperienceLevel.PRO_ACADEMY_RESERVE,
    ExperienceLevel.INTERNATIONAL_ACADEMY_U19,
})

VIDEO_HEALTH = {
    VideoType.EDITED_HIGHLIGHT_REEL: 100,
    VideoType.RAW_GAME_FOOTAGE: 70,
    VideoType.NONE: 20,
}
OUTREACH_HEALTH = {
    OutreachTag.INVISIBLE: 20,
    OutreachTag.SPAMMING: 40,
    OutreachTag.TALENT_GAP: 60,
    OutreachTag.HEALTHY: 85,
}
OFFER_HEALTH = 100

BENCHMARK_PHYSICAL = {AbilityBand.HIGH: 92, AbilityBand.MEDIUM: 75, AbilityBand.LOW: 60}
BENCHMARK_RESUME = {
    LeagueTier.ELITE: 95,
    LeagueTier.HIGH: 80,
    LeagueTier.MID: 65,
    LeagueTier.LOW: 45,
}
BENCHMARK_THRESHOLDS = {
    "Physical": {L.D1: 90, L.D2: 80, L.D3: 70, L.NAIA: 80, L.JUCO: 60},
    "Soccer Resume": {L.D1: 90, L.D2: 80, L.D3: 70, L.NAIA: 80, L.JUCO: 50},
}
ALL_DIVISIONS_SCORE = 90

# (gpa, market access %) anchors, interpolated linearly; below the first anchor → 0
GPA_MARKET_ACCESS = [(2.3, 0), (2.5, 20), (3.0, 65), (3.5, 85), (4.0, 100)]


# ── Export ───────────────────────────────────────────────────────────────────

def _levels(points: dict) -> dict[str, int]:
    return {lv.value: points.get(lv, 0) for lv in LEVELS}


def describe_rubric() -> dict:
    """JSON-ready view of the scoring tables, served by GET /analysis/rubric."""
    return {
        "levels": [lv.value for lv in LEVELS],
        "leagueTiers": {
            g.value: {lg.value: tier.value for lg, tier in tiers.items()}
            for g, tiers in LEAGUE_TIERS.items()
        },
        "baseVisibility": {
            g.value: {tier.value: _levels(row) for tier, row in rows.items()}
            for g, rows in BASE_VISIBILITY.items()
        },
        "abilityAdjustments": {b.value: _levels(row) for b, row in ABILITY_ADJUSTMENTS.items()},
        "academicAdjustments": {b.value: _levels(row) for b, row in ACADEMIC_ADJUSTMENTS.items()},
        "academicBands": {"High": GPA_HIGH, "Solid": GPA_SOLID, "Risky": GPA_RISKY},
        "role": {
            "starterMinMinutes": STARTER_BONUS_MIN_MINUTES,
            "starterBonus": _levels(STARTER_BONUS),
            "benchMaxMinutes": BENCH_PENALTY_MAX_MINUTES,
            "benchPenaltyElite": _levels(BENCH_PENALTY_ELITE),
            "benchPenaltyDefault": _levels(BENCH_PENALTY_DEFAULT),
        },
        "maturity": {
            "ageBonusMinYears": AGE_BONUS_MIN_YEARS,
            "ageBonus": _levels(AGE_BONUS),
            "experienceTiers": {
                str(n): {"experience": sorted(e.value for e in values), "adjustment": _levels(adj)}
                for n, (values, adj) in EXPERIENCE_TIERS.items()
            },
            "breadthBonuses": {str(minimum): _levels(bonus) for minimum, bonus in BREADTH_BONUSES},
        },
        "genderMarket": {
            "peakWindowBonus": _levels(PEAK_WINDOW_BONUS),
            "closingWindowPenalty": _levels(CLOSING_WINDOW_PENALTY),
            "femalePeakYears": list(FEMALE_PEAK_YEARS),
            "malePeakYears": list(MALE_PEAK_YEARS),
            "goalkeeperBonus": {g.value: _levels(row) for g, row in GOALKEEPER_BONUS.items()},
            "femaleDefensiveBonus": _levels(FEMALE_DEFENSIVE_BONUS),
        },
        "videoMultipliers": {v.value: m for v, m in VIDEO_MULTIPLIERS.items()},
        "outreachMultipliers": {tag.value: m for tag, m in OUTREACH_MULTIPLIERS.items()},
        "programCounts": {g.value: _levels(row) for g, row in PROGRAM_COUNTS.items()},
    }
