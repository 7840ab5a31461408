"""
exposure_engine/scoring/insights.py — Turns a VisibilityBreakdown into the report.

score_profile(profile) is the pure end-to-end rubric engine:
  compute_visibility → readiness, funnel, benchmarks, risks, action plan,
  strengths, summary and coach evaluation → AnalysisResult
"""

import logging
from datetime import date
from typing import Optional

from exposure_engine.intake.profile import (
    Gender,
    PlayerProfile,
    Position,
    SeasonRole,
    VideoType,
    YouthLeague,
)
from exposure_engine.scoring import tables as t
from exposure_engine.scoring.result import (
    SEVERITY_ORDER,
    ActionItem,
    AnalysisResult,
    BenchmarkMetric,
    FunnelAnalysis,
    ReadinessScore,
    RiskFlag,
    VisibilityScore,
)
from exposure_engine.scoring.rubric import VisibilityBreakdown, compute_visibility, round_half_up
from exposure_engine.scoring.tables import (
    LEVELS,
    AbilityBand,
    AcademicBand,
    CollegeLevel,
    LeagueTier,
    OutreachTag,
)

logger = logging.getLogger(__name__)

VIDEO_KEYWORDS = ("video", "highlight", "reel", "film", "footage")
POOR_OUTREACH = frozenset({OutreachTag.INVISIBLE, OutreachTag.SPAMMING})
MAX_PLAN_ITEMS = 5
MAX_RISKS = 4
MAX_STRENGTHS = 5

OPTIMIZE_VIDEO_TEXT = (
    "Optimize your highlight video. Coaches spend 30s avg on a reel. Ensure your first "
    "4 clips are undeniable 'Elite' moments. Remove fluff and music intros."
)
CREATE_VIDEO_TEXT = (
    "URGENT: Create a highlight video. You cannot be recruited without one. Record your "
    "next 3 matches and produce a 3-5 minute reel immediately."
)


# ── Small helpers ────────────────────────────────────────────────────────────

def probability_label(pct: float) -> str:
    if pct < 25:
        return "very low"
    if pct < 50:
        return "low"
    if pct < 75:
        return "medium"
    return "high"


def _level_phrase(levels: list[CollegeLevel]) -> str:
    names = [lv.value for lv in levels]
    if len(names) <= 1:
        return "".join(names)
    return ", ".join(names[:-1]) + " and " + names[-1]


def _gpa_text(gpa: Optional[float]) -> str:
    return f"{gpa:.2f}" if gpa is not None else "missing"


def _league_name(breakdown: VisibilityBreakdown) -> str:
    season = breakdown.primary_season
    if season is None:
        return "no club league"
    for league in season.league:
        if league == YouthLeague.OTHER:
            continue
        return league.value.replace("_", " ")
    return season.other_league_name or season.team_name or "an unlisted league"


def _focus_levels(breakdown: VisibilityBreakdown) -> list[CollegeLevel]:
    """Primary level first, then the other realistic targets."""
    targets = breakdown.targetable_levels()
    rest = [lv for lv in targets if lv != breakdown.primary_level]
    return [breakdown.primary_level] + rest


def gpa_market_access(gpa: Optional[float]) -> int:
    """Share of US college programs a GPA keeps open, interpolated between anchors."""
    anchors = t.GPA_MARKET_ACCESS
    if gpa is None or gpa < anchors[0][0]:
        return 0
    if gpa >= anchors[-1][0]:
        return anchors[-1][1]
    for (lo_gpa, lo_pct), (hi_gpa, hi_pct) in zip(anchors, anchors[1:]):
        if lo_gpa <= gpa <= hi_gpa:
            share = (gpa - lo_gpa) / (hi_gpa - lo_gpa)
            return round_half_up(lo_pct + share * (hi_pct - lo_pct))
    return 0


def _is_video_item(item: ActionItem) -> bool:
    text = item.description.lower()
    return any(kw in text for kw in VIDEO_KEYWORDS)


# ── Readiness, funnel, benchmarks ────────────────────────────────────────────

def _outreach_health(profile: PlayerProfile, breakdown: VisibilityBreakdown) -> int:
    if profile.offers_received > 0:
        return t.OFFER_HEALTH
    return t.OUTREACH_HEALTH[breakdown.outreach_tag]


def build_readiness(breakdown: VisibilityBreakdown, profile: PlayerProfile) -> ReadinessScore:
    athletic = profile.athletic_profile
    technical = (t.RATING_POINTS[athletic.technical] + t.RATING_POINTS[athletic.tactical]) / 2

    tactical = t.RATING_POINTS[athletic.tactical]
    if set(profile.experience_level) & t.TACTICAL_BONUS_EXPERIENCE:
        tactical += t.TACTICAL_EXPERIENCE_BONUS

    market = (t.VIDEO_HEALTH[breakdown.video_type] + _outreach_health(profile, breakdown)) / 2

    return ReadinessScore(
        athletic=t.READINESS_ATHLETIC[breakdown.ability_band],
        technical=round_half_up(technical),
        tactical=min(100, tactical),
        academic=t.READINESS_ACADEMIC[breakdown.academic_band],
        market=round_half_up(market),
    )


def _funnel_stage(profile: PlayerProfile) -> str:
    if profile.coaches_contacted == 0:
        return "Invisible"
    if profile.responses_received == 0:
        return "Outreach"
    if profile.offers_received > 0:
        return "Closing"
    if profile.responses_received >= t.TALENT_GAP_MIN_RESPONSES:
        return "Evaluation"
    return "Conversation"


def build_funnel(profile: PlayerProfile, breakdown: VisibilityBreakdown) -> FunnelAnalysis:
    """Recruiting funnel stage plus the single biggest blocker and its fix."""
    focus = _level_phrase(_focus_levels(breakdown))
    tag = breakdown.outreach_tag

    if breakdown.video_type == VideoType.NONE:
        bottleneck = "No Video"
        advice = "Coaches cannot evaluate you. Produce a 3-5 minute highlight reel before contacting anyone else."
    elif tag == OutreachTag.INVISIBLE:
        bottleneck = "No Coach Outreach"
        advice = f"Email 20-30 {focus} coaches with your video link, schedule and GPA."
    elif tag == OutreachTag.SPAMMING:
        bottleneck = "Spamming"
        advice = "Your emails are being ignored. Personalize every email and put grad year, position, league and GPA in the subject line."
    elif breakdown.academic_band == AcademicBand.PROBLEM:
        bottleneck = "Low GPA"
        advice = "Raise your core-course GPA and register with the NCAA Eligibility Center."
    elif breakdown.video_type == VideoType.RAW_GAME_FOOTAGE:
        bottleneck = "Unedited Video"
        advice = "Cut your raw footage into a short reel; coaches rarely watch full matches from unknown players."
    elif tag == OutreachTag.TALENT_GAP:
        bottleneck = "Talent Gap"
        advice = "Coaches reply but do not offer. Get seen live at their ID camps and target levels where you would start."
    elif profile.offers_received > 0:
        bottleneck = "Decision"
        advice = "Compare offers on fit, playing time and cost; ask each coach where you sit on their depth chart."
    else:
        bottleneck = "Low Volume"
        advice = f"Keep the conversation going: send updated stats and your schedule to every {focus} coach who replied."

    return FunnelAnalysis(
        stage=_funnel_stage(profile),
        conversion_rate=f"{round_half_up(breakdown.reply_rate)}% Reply Rate",
        bottleneck=bottleneck,
        advice=advice,
    )


def _threshold_feedback(category: str, score: int, thresholds: dict[CollegeLevel, int]) -> str:
    if score >= t.ALL_DIVISIONS_SCORE:
        return f"Your {category.lower()} profile is suited for all divisions and well within all top collegiate benchmarks."
    met = [lv for lv in LEVELS if score >= thresholds[lv]]
    missed = [lv for lv in LEVELS if score < thresholds[lv]]
    if not met:
        return f"Your {category.lower()} profile is below every collegiate benchmark right now."
    return (
        f"Your {category.lower()} profile meets the {_level_phrase(met)} benchmark; "
        f"{_level_phrase(missed)} programs expect more."
    )


def build_benchmarks(breakdown: VisibilityBreakdown, profile: PlayerProfile) -> list[BenchmarkMetric]:
    metrics = []
    for category, score in (
        ("Physical", t.BENCHMARK_PHYSICAL[breakdown.ability_band]),
        ("Soccer Resume", t.BENCHMARK_RESUME[breakdown.league_tier]),
    ):
        thresholds = t.BENCHMARK_THRESHOLDS[category]
        metrics.append(BenchmarkMetric(
            category=category,
            user_score=score,
            d1_score=thresholds[CollegeLevel.D1],
            d2_score=thresholds[CollegeLevel.D2],
            d3_score=thresholds[CollegeLevel.D3],
            naia_score=thresholds[CollegeLevel.NAIA],
            juco_score=thresholds[CollegeLevel.JUCO],
            feedback=_threshold_feedback(category, score, thresholds),
        ))

    access = gpa_market_access(profile.academics.gpa)
    if profile.academics.gpa is None:
        feedback = "No GPA on file, so no college program can confirm your academic eligibility yet."
    elif access >= 100:
        feedback = "Your GPA qualifies you for 100% of US college programs, including highly selective institutions."
    else:
        feedback = (
            f"Your GPA qualifies you for {access}% of US college programs, though it may limit "
            "access to highly selective institutions."
        )
    metrics.append(BenchmarkMetric(
        category="Academics",
        user_score=access,
        market_access=access,
        feedback=feedback,
    ))
    return metrics


# ── Risks ────────────────────────────────────────────────────────────────────

def build_risks(profile: PlayerProfile, breakdown: VisibilityBreakdown) -> list[RiskFlag]:
    """
    2-4 risk flags ordered High → Medium → Low.

    A verification risk is always kept when self ratings outrun the league.
    Every profile yields at least one Media and one Academics flag, so the
    lower bound always holds.
    """
    gpa = profile.academics.gpa
    season = breakdown.primary_season
    risks: list[RiskFlag] = []

    # Media
    if breakdown.video_type == VideoType.NONE:
        risks.append(RiskFlag(
            category="Media", severity="High",
            message=(
                "You have no highlight video. Coaches will not evaluate a player they cannot watch, "
                "so every level is cut to 60% of your on-paper fit until a reel exists."
            ),
        ))
    elif breakdown.video_type == VideoType.RAW_GAME_FOOTAGE:
        risks.append(RiskFlag(
            category="Media", severity="Medium",
            message=(
                "You only have raw game footage. Coaches skim reels in about 30 seconds; unedited "
                "film costs you 20% of your visibility at every level."
            ),
        ))
    else:
        risks.append(RiskFlag(
            category="Media", severity="Low",
            message="Your reel needs fresh clips every season; footage older than a year reads as a player who stopped developing.",
        ))

    # Academics
    band = breakdown.academic_band
    if band == AcademicBand.PROBLEM:
        risks.append(RiskFlag(
            category="Academics", severity="High",
            message=(
                f"NCAA Eligibility Center Warning: your GPA ({_gpa_text(gpa)}) is below the 2.3 "
                "core-course minimum. D1 and D2 are effectively closed and D3 drops by 40 points; "
                "JUCO becomes your realistic route until grades improve."
            ),
        ))
    elif band == AcademicBand.RISKY:
        risks.append(RiskFlag(
            category="Academics", severity="Medium",
            message=(
                f"Your {_gpa_text(gpa)} GPA keeps you eligible, but D3 programs admit on academics "
                "first; it costs you 20 points at D3 and 10 at D1."
            ),
        ))
    elif band == AcademicBand.SOLID:
        risks.append(RiskFlag(
            category="Academics", severity="Medium",
            message=(
                f"Your {_gpa_text(gpa)} GPA is solid, but it functionally removes high-academic "
                "schools from your realistic list, shrinking your total market."
            ),
        ))
    else:
        risks.append(RiskFlag(
            category="Academics", severity="Low",
            message=(
                f"Your {_gpa_text(gpa)} GPA is a real asset; submit a test score to unlock "
                "merit aid at schools with limited athletic money."
            ),
        ))

    # League environment
    if breakdown.league_tier == LeagueTier.LOW and breakdown.experience_tier is None:
        risks.append(RiskFlag(
            category="League", severity="High",
            message=(
                f"You are playing in a Low-tier environment ({_league_name(breakdown)}) with no adult "
                "experience. College coaches rarely scout there, so your base D1 visibility starts "
                "in single digits."
            ),
        ))

    if breakdown.verification_risk:
        strong = sum(1 for r in profile.athletic_profile.ratings() if r in t.STRONG_RATINGS)
        risks.append(RiskFlag(
            category="Verification", severity="Medium",
            message=(
                f"You rated yourself Top 10% or Elite in {strong} categories while playing in a "
                f"{breakdown.league_tier.value}-tier league. 'Elite' locally is not elite nationally; "
                "coaches will discount these ratings until video or live evaluation confirms them."
            ),
        ))

    # Minutes
    if season is not None and (
        season.main_role == SeasonRole.BENCH or season.minutes_played_percent <= t.LOW_MINUTES_MAX
    ):
        risks.append(RiskFlag(
            category="Minutes", severity="Medium",
            message=(
                f"You played {season.minutes_played_percent:.0f}% of minutes in a "
                f"{season.main_role.value.replace('_', ' ')} role. Coaches read low minutes as a "
                "signal your club coach does not trust you yet, which drops your ability band."
            ),
        ))

    # Outreach
    tag = breakdown.outreach_tag
    if tag == OutreachTag.INVISIBLE:
        risks.append(RiskFlag(
            category="Communication", severity="High",
            message=(
                "You have not contacted any college coaches. Programs cannot recruit a player "
                "they do not know exists, which costs you 30% of your visibility."
            ),
        ))
    elif tag == OutreachTag.SPAMMING:
        risks.append(RiskFlag(
            category="Communication", severity="Medium",
            message=(
                f"You contacted {profile.coaches_contacted} coaches with a "
                f"{breakdown.reply_rate:.0f}% reply rate. Mass emails land in spam folders; "
                "coaches answer personalized messages aimed at the right level."
            ),
        ))
    elif tag == OutreachTag.TALENT_GAP:
        risks.append(RiskFlag(
            category="Communication", severity="Medium",
            message=(
                f"{profile.responses_received} coaches replied but none offered. Interest without "
                "offers usually means they like the profile but need to see you live."
            ),
        ))
    elif profile.coaches_contacted < t.SPAMMING_MIN_CONTACTS and profile.offers_received == 0:
        risks.append(RiskFlag(
            category="Communication", severity="Low",
            message=(
                f"Only {profile.coaches_contacted} coaches contacted so far; most committed players "
                "reach 30-50 programs across their realistic levels."
            ),
        ))

    # Timeline
    years = breakdown.years_to_graduation
    if profile.gender == Gender.FEMALE and years <= t.FEMALE_CLOSING_MAX_YEARS:
        risks.append(RiskFlag(
            category="Communication", severity="Medium",
            message=(
                "Women's programs commit most of their class two to three years out. Your recruiting "
                "window is closing, so D1 and D2 visibility drops by 5 points."
            ),
        ))

    # Events
    if not profile.events:
        risks.append(RiskFlag(
            category="Events", severity="Low",
            message="No showcases, ID camps or ODP on your resume; coaches rarely offer players they have not seen live.",
        ))

    risks.sort(key=lambda r: SEVERITY_ORDER[r.severity])
    selected = risks[:MAX_RISKS]
    verification = [r for r in risks if r.category == "Verification"]
    if verification and verification[0] not in selected:
        selected[-1] = verification[0]
        selected.sort(key=lambda r: SEVERITY_ORDER[r.severity])

    logger.debug("Risk flags: %s", [(r.category, r.severity) for r in selected])
    return selected


# ── Action plan ──────────────────────────────────────────────────────────────

def ensure_video_priority(
    plan: list[ActionItem],
    video_type: VideoType,
    outreach_tag: OutreachTag,
) -> list[ActionItem]:
    """
    Guarantee a video item near the top of the plan and cap it at five items.

    The video item goes first, except for a player with an edited reel and poor
    outreach: their targeting fix stays first and the video item follows it.
    """
    plan = list(plan)
    keep_first = (
        video_type == VideoType.EDITED_HIGHLIGHT_REEL
        and outreach_tag in POOR_OUTREACH
        and bool(plan)
        and not _is_video_item(plan[0])
    )
    slot = 1 if keep_first else 0
    index = next((i for i, item in enumerate(plan) if _is_video_item(item)), None)

    if index is None:
        text = CREATE_VIDEO_TEXT if video_type == VideoType.NONE else OPTIMIZE_VIDEO_TEXT
        plan.insert(slot, ActionItem(timeframe="Next_30_Days", description=text, impact="High"))
    elif index > slot:
        plan.insert(slot, plan.pop(index))

    return plan[:MAX_PLAN_ITEMS]


def build_action_plan(profile: PlayerProfile, breakdown: VisibilityBreakdown) -> list[ActionItem]:
    """
    90-day plan aimed at the primary level.

    Only levels at or above the minimum target visibility are named, unless
    the primary level itself sits below it.
    """
    focus_levels = _focus_levels(breakdown)
    focus = _level_phrase(focus_levels)
    primary = breakdown.primary_level.value
    tag = breakdown.outreach_tag
    season = breakdown.primary_season
    plan: list[ActionItem] = []

    # First item
    if breakdown.video_type == VideoType.NONE:
        plan.append(ActionItem(
            timeframe="Next_30_Days", impact="High",
            description=(
                "Create a highlight video: record your next 3 matches and produce a 3-5 minute reel "
                "with your 4 best moments in the first 30 seconds."
            ),
        ))
    elif breakdown.video_type == VideoType.RAW_GAME_FOOTAGE:
        plan.append(ActionItem(
            timeframe="Next_30_Days", impact="High",
            description=(
                "Edit your raw game footage into a professional 3-5 minute highlight reel; "
                "lead with your 4 best moments and mark yourself before each clip."
            ),
        ))
    elif tag in POOR_OUTREACH:
        plan.append(ActionItem(
            timeframe="Next_30_Days", impact="High",
            description=(
                f"Fix your targeting and subject lines: build a list of 30 {focus} programs that "
                f"recruit your position and use subjects like '{profile.grad_year} | "
                f"{profile.position.value} | {_league_name(breakdown)} | GPA {_gpa_text(profile.academics.gpa)}'."
            ),
        ))

    # Outreach
    if tag == OutreachTag.INVISIBLE and breakdown.video_type != VideoType.EDITED_HIGHLIGHT_REEL:
        plan.append(ActionItem(
            timeframe="Next_30_Days", impact="High",
            description=f"Email 20-30 {focus} coaches with your schedule, stats and GPA, then follow up after 10 days.",
        ))
    elif tag == OutreachTag.SPAMMING and breakdown.video_type != VideoType.EDITED_HIGHLIGHT_REEL:
        plan.append(ActionItem(
            timeframe="Next_30_Days", impact="High",
            description=f"Stop mass emailing. Rewrite your email for 20 {focus} programs and name why each one fits you.",
        ))
    elif tag == OutreachTag.TALENT_GAP:
        plan.append(ActionItem(
            timeframe="Next_90_Days", impact="High",
            description=(
                f"Convert interest into offers: attend ID camps run by the {profile.responses_received} "
                f"programs that replied, prioritizing {primary}."
            ),
        ))
    elif tag == OutreachTag.HEALTHY:
        plan.append(ActionItem(
            timeframe="Next_90_Days", impact="Medium",
            description=f"Send updated stats and your next tournament schedule to every {focus} coach who replied.",
        ))

    # Academics
    if breakdown.academic_band == AcademicBand.PROBLEM:
        plan.append(ActionItem(
            timeframe="Next_90_Days", impact="High",
            description=(
                "Register with the NCAA Eligibility Center and lift your core-course GPA above 2.3; "
                "until then JUCO is your realistic path."
            ),
        ))
    elif breakdown.academic_band == AcademicBand.RISKY:
        target = "D3 and selective programs" if CollegeLevel.D3 in focus_levels else "more programs"
        plan.append(ActionItem(
            timeframe="Next_12_Months", impact="Medium",
            description=f"Raise your GPA above 3.0 to reopen {target}; ask teachers for grade-recovery options now.",
        ))

    # Verification
    if breakdown.verification_risk:
        plan.append(ActionItem(
            timeframe="Next_30_Days", impact="Medium",
            description=(
                "Back up your self ratings with verifiable proof: timed sprint results, a club coach "
                "reference and full-match clips coaches can check."
            ),
        ))

    # Minutes and league
    if season is not None and (
        season.main_role == SeasonRole.BENCH or season.minutes_played_percent <= t.LOW_MINUTES_MAX
    ):
        plan.append(ActionItem(
            timeframe="Next_12_Months", impact="Medium",
            description="Earn a starting role: ask your coach what keeps you off the field, or move to a team where you play 70%+ of minutes.",
        ))
    elif breakdown.league_tier in (LeagueTier.LOW, LeagueTier.MID) and breakdown.ability_band == AbilityBand.HIGH:
        leagues = "ECNL or Girls Academy" if profile.gender == Gender.FEMALE else "MLS NEXT or ECNL"
        plan.append(ActionItem(
            timeframe="Next_12_Months", impact="Medium",
            description=f"Trial for an {leagues} club; your ability is outgrowing a {breakdown.league_tier.value}-tier league.",
        ))

    # Events
    if not profile.events:
        plan.append(ActionItem(
            timeframe="Next_90_Days", impact="Medium",
            description=f"Attend 2 ID camps hosted by {primary} programs on your target list.",
        ))

    # Maturity
    if breakdown.experience_tier is None and breakdown.years_to_graduation <= 2:
        kind = "WPSL" if profile.gender == Gender.FEMALE else "UPSL or NPSL"
        plan.append(ActionItem(
            timeframe="Next_12_Months", impact="Low",
            description=f"Play a summer season in an adult league ({kind}) to show coaches you can handle college physicality.",
        ))

    return ensure_video_priority(plan, breakdown.video_type, tag)


# ── Narrative ────────────────────────────────────────────────────────────────

def build_strengths(profile: PlayerProfile, breakdown: VisibilityBreakdown) -> list[str]:
    strengths: list[str] = []
    season = breakdown.primary_season

    if breakdown.league_tier in (LeagueTier.ELITE, LeagueTier.HIGH):
        strengths.append(f"Competing in {_league_name(breakdown)} ({breakdown.league_tier.value} tier)")
    if season is not None and season.main_role == SeasonRole.KEY_STARTER \
            and season.minutes_played_percent >= t.KEY_STARTER_MIN_MINUTES:
        team = season.team_name or "your club"
        strengths.append(f"Key starter playing {season.minutes_played_percent:.0f}% of minutes for {team}")
    if breakdown.ability_band == AbilityBand.HIGH:
        strengths.append("Ability band rated High after role and minutes")
    if breakdown.academic_band in (AcademicBand.HIGH, AcademicBand.SOLID):
        strengths.append(f"{_gpa_text(profile.academics.gpa)} GPA keeps academic doors open")
    for level in profile.experience_level:
        if level in t.EXPERIENCE_LABELS:
            strengths.append(t.EXPERIENCE_LABELS[level])
    if breakdown.video_type == VideoType.EDITED_HIGHLIGHT_REEL:
        strengths.append("Edited highlight reel ready for coaches")
    if profile.offers_received > 0:
        strengths.append(f"{profile.offers_received} offer(s) already on the table")
    elif profile.coaches_contacted and breakdown.reply_rate >= 20:
        strengths.append(f"{breakdown.reply_rate:.0f}% coach reply rate")
    if profile.position == Position.GK:
        strengths.append("Goalkeeper: a scarce position at every level")
    noted = {c for event in profile.events for c in event.colleges}
    if noted:
        strengths.append(f"Seen by {len(noted)} college program(s) at events")

    if not strengths:
        strengths.append("Willing to get an honest read on your recruiting position")
    return strengths[:MAX_STRENGTHS]


def _gender_market_sentence(profile: PlayerProfile, breakdown: VisibilityBreakdown) -> Optional[str]:
    season = breakdown.primary_season
    leagues = set(season.league) if season is not None else set()
    counts = t.PROGRAM_COUNTS[profile.gender]

    if profile.gender == Gender.FEMALE and profile.position == Position.GK:
        return (
            "Quality goalkeepers are the #1 recruiting need in women's college soccer. "
            "Your position alone opens doors that field players don't have."
        )
    if profile.gender == Gender.FEMALE and leagues & {YouthLeague.ECNL, YouthLeague.GIRLS_ACADEMY}:
        return (
            f"The women's D1 landscape offers {counts[CollegeLevel.D1]}+ programs, and with your "
            "ECNL/GA background you have realistic paths at multiple levels."
        )
    if profile.gender == Gender.MALE and YouthLeague.MLS_NEXT in leagues:
        return (
            f"Men's D1 is highly competitive with only ~{counts[CollegeLevel.D1]} programs. Your MLS NEXT "
            "experience puts you in the conversation, but you'll need video and outreach to stand out."
        )
    return None


def build_summary(profile: PlayerProfile, breakdown: VisibilityBreakdown) -> str:
    primary = breakdown.primary_level
    pct = breakdown.current_visibility[primary]
    fit = breakdown.on_paper_fit[primary]
    sentences = [
        f"{profile.first_name}, your most realistic path right now is {primary.value} "
        f"({pct}% visibility, {probability_label(pct)} probability).",
        f"You are playing in a {breakdown.league_tier.value}-tier environment with a "
        f"{breakdown.ability_band.value.lower()} ability band and {breakdown.academic_band.value.lower()} academics.",
    ]

    if pct < fit:
        drags = []
        if breakdown.video_multiplier < 1:
            drags.append("your video situation")
        if breakdown.outreach_multiplier < 1:
            drags.append(f"your outreach ({breakdown.outreach_tag.value.lower()})")
        sentences.append(
            f"On paper you fit {primary.value} at {fit}%, but {' and '.join(drags)} "
            f"cut that to {pct}%. That gap is the fastest thing you can fix."
        )

    market = _gender_market_sentence(profile, breakdown)
    if market:
        sentences.append(market)

    if breakdown.experience_tier in (1, 2):
        tiered = [lv for lv in profile.experience_level
                  if lv in t.EXPERIENCE_TIERS[breakdown.experience_tier][0]]
        label = t.EXPERIENCE_LABELS[tiered[0]]
        sentences.append(f"{label} significantly increases recruitability due to proven maturity.")

    if profile.gender == Gender.FEMALE and breakdown.years_to_graduation >= t.FEMALE_EARLY_MIN_YEARS:
        sentences.append("Build your profile now: women's programs start evaluating sophomores.")

    return " ".join(sentences)


def build_coach_evaluation(profile: PlayerProfile, breakdown: VisibilityBreakdown) -> str:
    primary = breakdown.primary_level
    return (
        f"{profile.grad_year} {profile.gender.value.lower()} {profile.position.value} from "
        f"{_league_name(breakdown)} ({breakdown.league_tier.value} tier), "
        f"{breakdown.ability_band.value.lower()} ability, {breakdown.academic_band.value.lower()} "
        f"academics; realistic fit {primary.value} at {breakdown.current_visibility[primary]}%."
    )


def build_visibility_scores(profile: PlayerProfile, breakdown: VisibilityBreakdown) -> list[VisibilityScore]:
    audience = "women's" if profile.gender == Gender.FEMALE else "men's"
    scores = []
    for level in LEVELS:
        pct = breakdown.current_visibility[level]
        notes = (
            f"On-paper fit {breakdown.on_paper_fit[level]}%, video x{breakdown.video_multiplier:g}, "
            f"outreach x{breakdown.outreach_multiplier:g}. "
            f"~{t.PROGRAM_COUNTS[profile.gender][level]} {audience} programs."
        )
        if level == breakdown.primary_level:
            notes += " Primary level."
        elif pct < t.MIN_TARGET_VISIBILITY:
            notes += " Not a realistic target right now."
        scores.append(VisibilityScore(level=level, visibility_percent=pct, notes=notes))
    return scores


# ── Main function ────────────────────────────────────────────────────────────

def score_profile(profile: PlayerProfile, as_of: Optional[date] = None) -> AnalysisResult:
    """
    Run the full rubric engine on a validated profile.

    Args:
        profile: Validated player profile.
        as_of:   Evaluation date. Defaults to today.

    Returns:
        AnalysisResult with the scoring breakdown attached.
    """
    breakdown = compute_visibility(profile, as_of=as_of)

    result = AnalysisResult(
        visibility_scores=build_visibility_scores(profile, breakdown),
        readiness_score=build_readiness(breakdown, profile),
        key_strengths=build_strengths(profile, breakdown),
        key_risks=build_risks(profile, breakdown),
        action_plan=build_action_plan(profile, breakdown),
        plain_language_summary=build_summary(profile, breakdown),
        coach_short_evaluation=build_coach_evaluation(profile, breakdown),
        funnel_analysis=build_funnel(profile, breakdown),
        benchmark_analysis=build_benchmarks(breakdown, profile),
        scoring_breakdown=breakdown.to_dict(),
    )
    logger.info(
        "Scored %s: primary=%s risks=%d plan=%d",
        profile.full_name, breakdown.primary_level.value,
        len(result.key_risks), len(result.action_plan),
    )
    return result
