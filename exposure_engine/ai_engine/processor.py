"""
exposure_engine/ai_engine/processor.py — LLM scoring engine.

Two public functions:
  analyze_profile_with_llm(profile)  → AnalysisResult
  normalize_llm_result(raw)          → AnalysisResult
"""

import json
import logging
import re
from datetime import date
from typing import Any, Optional

from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from exposure_engine.ai_engine.prompt_templates import SCORING_RUBRIC_PROMPT
from exposure_engine.ai_engine.utils import build_openrouter_llm, parse_json_safely, truncate_for_context
from exposure_engine.config import settings
from exposure_engine.intake.profile import PlayerProfile
from exposure_engine.scoring.insights import ensure_video_priority
from exposure_engine.scoring.result import (
    ActionItem,
    AnalysisResult,
    BenchmarkMetric,
    FunnelAnalysis,
    ReadinessScore,
    RiskFlag,
    VisibilityScore,
)
from exposure_engine.scoring.rubric import clamp, classify_outreach, round_half_up
from exposure_engine.scoring.tables import LEVELS, CollegeLevel

logger = logging.getLogger(__name__)

MAX_RETRIES = 1
READINESS_KEYS = ("athletic", "technical", "tactical", "academic", "market")


class AnalysisError(RuntimeError):
    """Raised when the LLM engine cannot produce a usable report."""


class IncompleteAnalysisError(ValueError):
    """LLM answer was unparseable or missing required content (retried)."""


# ── Normalization ─────────────────────────────────────────────────────────────

def _percent(value: Any, default: float = 0) -> int:
    try:
        number = float(value) if value not in (None, "") else default
    except (TypeError, ValueError):
        number = default
    return round_half_up(clamp(number))


def _normalize_visibility(items: Any) -> tuple[list[VisibilityScore], int]:
    """Returns (one score per level in LEVELS order, number of levels the model evaluated)."""
    found: dict[CollegeLevel, VisibilityScore] = {}
    for item in items if isinstance(items, list) else []:
        if not isinstance(item, dict):
            continue
        name = re.sub(r"NCAA\s*", "", str(item.get("level") or ""), flags=re.IGNORECASE).strip().upper()
        try:
            level = CollegeLevel(name)
        except ValueError:
            logger.warning("Dropping visibility score for unknown level %r", item.get("level"))
            continue
        if level in found:
            continue
        found[level] = VisibilityScore(
            level=level,
            visibility_percent=_percent(item.get("visibilityPercent")),
            notes=str(item.get("notes") or ""),
        )

    evaluated = len(found)
    scores = [
        found.get(level) or VisibilityScore(level=level, visibility_percent=0, notes="Not evaluated")
        for level in LEVELS
    ]
    return scores, evaluated


def _normalize_readiness(raw: Any) -> ReadinessScore:
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        raw = {key: raw for key in READINESS_KEYS}
    raw = raw if isinstance(raw, dict) else {}
    # Missing or zero values fall back to the neutral midpoint
    return ReadinessScore(**{key: _percent(raw.get(key) or 50) for key in READINESS_KEYS})


def _valid_items(items: Any, model, label: str) -> list:
    valid = []
    for item in items if isinstance(items, list) else []:
        try:
            valid.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning("Dropping invalid %s from LLM output: %s", label, exc.errors()[0].get("msg"))
    return valid


def _normalize_benchmarks(items: Any) -> list[BenchmarkMetric]:
    cleaned = []
    for item in items if isinstance(items, list) else []:
        if isinstance(item, dict):
            item = {**item, "userScore": _percent(item.get("userScore"))}
        cleaned.append(item)
    return _valid_items(cleaned, BenchmarkMetric, "benchmark")


def normalize_llm_result(raw: dict[str, Any]) -> AnalysisResult:
    """
    Coerce a raw LLM answer into a complete AnalysisResult.

    Level names lose any "NCAA " prefix, percentages are clamped to 0-100,
    missing levels are added as 0% "Not evaluated", a bare readiness number
    is expanded to all five keys, and malformed list items are dropped.

    Raises:
        IncompleteAnalysisError: If the answer evaluated no college level at all.
    """
    if not isinstance(raw, dict):
        raise IncompleteAnalysisError(f"Expected a JSON object, got {type(raw).__name__}")

    scores, evaluated = _normalize_visibility(raw.get("visibilityScores"))
    if evaluated == 0:
        raise IncompleteAnalysisError("Incomplete visibility scores")

    funnel_raw = raw.get("funnelAnalysis")
    try:
        funnel = FunnelAnalysis.model_validate(funnel_raw) if isinstance(funnel_raw, dict) else FunnelAnalysis()
    except ValidationError:
        logger.warning("Invalid funnel analysis from LLM; using default.")
        funnel = FunnelAnalysis()

    strengths = raw.get("keyStrengths")
    return AnalysisResult(
        visibility_scores=scores,
        readiness_score=_normalize_readiness(raw.get("readinessScore")),
        key_strengths=[str(s) for s in strengths] if isinstance(strengths, list) else [],
        key_risks=_valid_items(raw.get("keyRisks"), RiskFlag, "risk"),
        action_plan=_valid_items(raw.get("actionPlan"), ActionItem, "action item"),
        plain_language_summary=str(raw.get("plainLanguageSummary") or ""),
        coach_short_evaluation=str(raw.get("coachShortEvaluation") or ""),
        funnel_analysis=funnel,
        benchmark_analysis=_normalize_benchmarks(raw.get("benchmarkAnalysis")),
    )


# ── LLM call ──────────────────────────────────────────────────────────────────

@retry(
    retry=retry_if_exception_type(Exception),
    stop=stop_after_attempt(MAX_RETRIES + 1),
    wait=wait_fixed(1),
    reraise=True,
)
def _score_with_chain(chain, inputs: dict[str, str]) -> AnalysisResult:
    """One LLM round trip. Retried once on any failure."""
    response = chain.invoke(inputs)
    raw_text = response.content if hasattr(response, "content") else str(response)

    parsed = parse_json_safely(raw_text)
    if not isinstance(parsed, dict):
        logger.warning("LLM scoring returned non-object: %s", truncate_for_context(raw_text, max_chars=200))
        raise IncompleteAnalysisError("No parseable JSON object in LLM response")
    return normalize_llm_result(parsed)


def analyze_profile_with_llm(profile: PlayerProfile, as_of: Optional[date] = None) -> AnalysisResult:
    """
    Score a profile by sending the rubric and the profile JSON to the LLM.

    Args:
        profile: Validated player profile.
        as_of:   Date the model should treat as today.

    Returns:
        Normalized AnalysisResult (no scoring breakdown).

    Raises:
        AnalysisError: If the LLM is not configured or fails twice.
    """
    as_of = as_of or date.today()
    try:
        llm = build_openrouter_llm(temperature=0.2)
    except RuntimeError as exc:
        raise AnalysisError(str(exc)) from exc

    chain = SCORING_RUBRIC_PROMPT | llm
    # compact and never cut: validation already caps the payload size
    profile_json = json.dumps(
        profile.model_dump(mode="json", by_alias=True, exclude_none=True),
        separators=(",", ":"), ensure_ascii=False,
    )

    logger.info("Scoring %s with LLM (%s)", profile.full_name, settings.openrouter_model)
    try:
        result = _score_with_chain(chain, {
            "today": as_of.isoformat(),
            "profile_json": profile_json,
        })
    except Exception as exc:
        logger.error("LLM analysis failed for %s: %s", profile.full_name, exc)
        raise AnalysisError("Analysis failed. Please try again.") from exc

    result.action_plan = ensure_video_priority(
        result.action_plan, profile.resolved_video_type, classify_outreach(profile),
    )
    logger.info(
        "LLM result for %s: %s",
        profile.full_name, {s.level.value: s.visibility_percent for s in result.visibility_scores},
    )
    return result
