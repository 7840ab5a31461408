"""
exposure_engine/ai_engine/prompt_templates.py — LangChain prompt for the LLM engine.

The system message walks the model through the same point-table rubric the
deterministic engine uses. Numeric tables are rendered from scoring/tables.py
so both engines always score against the same numbers.
"""

from langchain_core.prompts import ChatPromptTemplate

from exposure_engine.intake.profile import Gender
from exposure_engine.scoring import tables as t
from exposure_engine.scoring.tables import LEVELS, AbilityBand, AcademicBand, LeagueTier


def _row(points: dict) -> str:
    """'D1 +15, D2 +10, ...' for the levels a table row touches."""
    parts = [f"{lv.value} {points[lv]:+d}" for lv in LEVELS if points.get(lv)]
    return ", ".join(parts) if parts else "no change"


def _base_table(gender: Gender) -> str:
    lines = []
    for tier in (LeagueTier.ELITE, LeagueTier.HIGH, LeagueTier.MID, LeagueTier.LOW):
        row = t.BASE_VISIBILITY[gender][tier]
        lines.append(f"- {tier.value}: " + ", ".join(f"{lv.value} {row[lv]}" for lv in LEVELS))
    return "\n".join(lines)


def _league_list(gender: Gender, tier: LeagueTier) -> str:
    names = [lg.value for lg, tr in t.LEAGUE_TIERS[gender].items() if tr == tier]
    return ", ".join(sorted(names))


def render_rubric_text() -> str:
    """The scoring model as plain instructions (no template braces)."""
    boys, girls = Gender.MALE, Gender.FEMALE
    sections = [
        "A - League tier. Use the latest season; with several leagues take the highest tier.",
        "Boys Elite: " + _league_list(boys, LeagueTier.ELITE)
        + ". Boys High: " + _league_list(boys, LeagueTier.HIGH) + ".",
        "Girls Elite: " + _league_list(girls, LeagueTier.ELITE)
        + ". Girls High: " + _league_list(girls, LeagueTier.HIGH) + ".",
        "Mid (both): " + _league_list(boys, LeagueTier.MID)
        + ". Low (both): " + _league_list(boys, LeagueTier.LOW) + ".",
        "'Other' leagues: Mid if otherLeagueName or teamName sounds like a top academy, else Low.",
        "",
        "B - Ability band. Start High if most self ratings are Top 10% or Elite, Low if most are "
        "Average or below, Medium for a mix with at most one Below Average. Key Starter with 70%+ "
        "minutes moves up one band; Bench or 30% or fewer minutes moves down one band (capped).",
        "If the league tier is Low or Mid and any rating is Elite or Top 10%, add a 'Verification' risk.",
        "",
        "C - Academic band (unweighted GPA): High >= 3.7, Solid 3.0-3.69, Risky 2.3-2.99, "
        "Problem < 2.3 or missing. A Problem GPA MUST produce a High severity "
        "'NCAA Eligibility Center Warning' risk.",
        "",
        "D - Base visibility, boys:",
        _base_table(boys),
        "Base visibility, girls:",
        _base_table(girls),
        "",
        "E - Ability: " + "; ".join(
            f"{band.value}: {_row(t.ABILITY_ADJUSTMENTS[band])}"
            for band in (AbilityBand.HIGH, AbilityBand.MEDIUM, AbilityBand.LOW)
        ) + ".",
        "F - Academics: " + "; ".join(
            f"{band.value}: {_row(t.ACADEMIC_ADJUSTMENTS[band])}"
            for band in (AcademicBand.HIGH, AcademicBand.SOLID, AcademicBand.RISKY, AcademicBand.PROBLEM)
        ) + ".",
        "G - Role: Key Starter with 80%+ minutes: " + _row(t.STARTER_BONUS)
        + ". Bench with 20% or fewer minutes: Elite league " + _row(t.BENCH_PENALTY_ELITE)
        + ", any other league " + _row(t.BENCH_PENALTY_DEFAULT) + ".",
        "G2 - Maturity: older than 18.5 years: " + _row(t.AGE_BONUS)
        + ". Apply only the highest experience tier: "
        + "; ".join(
            f"tier {n} ({', '.join(sorted(e.value for e in values))}): {_row(adj)}"
            for n, (values, adj) in sorted(t.EXPERIENCE_TIERS.items())
        )
        + ". Breadth: " + "; ".join(
            f"{minimum}+ tiered selections: {_row(bonus)}" for minimum, bonus in t.BREADTH_BONUSES
        ) + " (the larger bonus replaces the smaller one).",
        "If any tier 1-2 experience exists, the summary must say "
        "\"[Experience] significantly increases recruitability due to proven maturity.\"",
        "G3 - Gender market. Years to graduation = gradYear minus the current year. "
        "Female 2-3 years: " + _row(t.PEAK_WINDOW_BONUS)
        + "; female 1 year or less: " + _row(t.CLOSING_WINDOW_PENALTY)
        + "; male 1-2 years: " + _row(t.PEAK_WINDOW_BONUS) + ". "
        "Female GK: " + _row(t.GOALKEEPER_BONUS[girls])
        + "; male GK: " + _row(t.GOALKEEPER_BONUS[boys])
        + "; female CB, DM or CDM: " + _row(t.FEMALE_DEFENSIVE_BONUS) + ".",
        "Clamp each level to 0-100. This is on_paper_fit.",
        "",
        "H - Multipliers. Video: " + ", ".join(f"{v.value} x{m:g}" for v, m in t.VIDEO_MULTIPLIERS.items())
        + ". Outreach, first match wins: 0 coaches contacted = Invisible x0.7; 20+ contacted and "
        "reply rate under 5% = Spamming x0.8; 5+ responses and no offers = Talent Gap x0.9; "
        "otherwise x1.0.",
        "current_visibility = on_paper_fit x video x outreach, clamped to 0-100 and rounded.",
        "",
        "I - Action plan. No video: first item is creating a highlight video. Raw footage: first "
        "item is editing it into a 3-5 minute reel. Edited reel with poor outreach: first item is "
        "fixing targeting and subject lines. Align the plan with the level of highest visibility "
        "and never push a level under 15% visibility.",
        "Always give 2-4 keyRisks (High = hard blockers, Medium = limits on higher levels, "
        "Low = optimizations) and explain the logic in each message.",
        "",
        "Output mapping: readiness athletic Low 40 / Medium 75 / High 95; academic Problem 40 / "
        "Risky 65 / Solid 80 / High 95. Benchmarks: exactly 'Physical', 'Soccer Resume' and "
        "'Academics'. Academics carries marketAccess (GPA 4.0 = 100, 3.5 = 85, 3.0 = 65, 2.5 = 20, "
        "under 2.3 = 0) and never mentions D1. Any score of 90+ must say 'suited for all divisions'.",
    ]
    return "\n".join(sections)


OUTPUT_SCHEMA_TEXT = """Return ONLY a valid JSON object with exactly these fields:
{{
  "visibilityScores": [{{"level": "D1|D2|D3|NAIA|JUCO", "visibilityPercent": <0-100>, "notes": "<short>"}}],
  "readinessScore": {{"athletic": <0-100>, "technical": <0-100>, "tactical": <0-100>, "academic": <0-100>, "market": <0-100>}},
  "keyStrengths": ["<strength>"],
  "keyRisks": [{{"category": "League|Minutes|Academics|Events|Location|Media|Communication|Verification", "message": "<logic>", "severity": "High|Medium|Low"}}],
  "actionPlan": [{{"timeframe": "Next_30_Days|Next_90_Days|Next_12_Months", "description": "<task>", "impact": "High|Medium|Low"}}],
  "plainLanguageSummary": "<paragraph>",
  "coachShortEvaluation": "<one sentence>",
  "funnelAnalysis": {{"stage": "Invisible|Outreach|Conversation|Evaluation|Closing", "conversionRate": "<N% Reply Rate>", "bottleneck": "<main blocker>", "advice": "<fix>"}},
  "benchmarkAnalysis": [{{"category": "Physical|Soccer Resume|Academics", "userScore": <0-100>, "d1Score": <n>, "d2Score": <n>, "d3Score": <n>, "naiaScore": <n>, "jucoScore": <n>, "marketAccess": <n>, "feedback": "<short>"}}]
}}"""


# ── Profile Scoring ───────────────────────────────────────────────────────────

SCORING_RUBRIC_PROMPT = ChatPromptTemplate.from_messages([
    (
        "system",
        (
            "You are a veteran US college soccer recruiting director. You estimate how visible "
            "and realistic each college level (D1, D2, D3, NAIA, JUCO) is for a player right now, "
            "diagnose what holds them back, and give a ruthless but useful 90 day plan.\n\n"
            "Follow this scoring model exactly.\n\n"
            + render_rubric_text()
        ),
    ),
    (
        "human",
        """Score this player. Today's date is {today}.

PLAYER PROFILE (JSON):
{profile_json}

"""
        + OUTPUT_SCHEMA_TEXT,
    ),
])
