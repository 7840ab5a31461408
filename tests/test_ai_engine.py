"""
tests/test_ai_engine.py — Unit tests for the LLM scoring engine.

Tests helpers, prompt construction and output normalization WITHOUT making
real LLM API calls. analyze_profile_with_llm is tested with mocked chain
responses to keep tests fast and free.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from exposure_engine.ai_engine.processor import (
    AnalysisError,
    IncompleteAnalysisError,
    analyze_profile_with_llm,
    normalize_llm_result,
)
from exposure_engine.ai_engine.prompt_templates import SCORING_RUBRIC_PROMPT, render_rubric_text
from exposure_engine.ai_engine.utils import build_openrouter_llm, parse_json_safely, truncate_for_context
from exposure_engine.config import settings
from exposure_engine.scoring.insights import CREATE_VIDEO_TEXT
from exposure_engine.scoring.tables import CollegeLevel


def _llm_payload(**overrides) -> dict:
    payload = {
        "visibilityScores": [
            {"level": "NCAA D1", "visibilityPercent": 35, "notes": "Stretch"},
            {"level": "D2", "visibilityPercent": 60, "notes": "Realistic"},
            {"level": "NCAA D3", "visibilityPercent": 70, "notes": "Strong"},
            {"level": "NAIA", "visibilityPercent": 72, "notes": "Strong"},
            {"level": "JUCO", "visibilityPercent": 85, "notes": "Safe"},
        ],
        "readinessScore": {"athletic": 75, "technical": 70, "tactical": 70, "academic": 80, "market": 60},
        "keyStrengths": ["Key starter"],
        "keyRisks": [
            {"category": "Media", "message": "Raw footage only.", "severity": "Medium"},
            {"category": "Academics", "message": "Solid GPA.", "severity": "Low"},
        ],
        "actionPlan": [
            {"timeframe": "Next_30_Days", "description": "Email 20 D2 coaches.", "impact": "High"},
        ],
        "plainLanguageSummary": "D2 is realistic.",
        "coachShortEvaluation": "Solid D2 midfielder.",
        "funnelAnalysis": {
            "stage": "Conversation",
            "conversionRate": "20% Reply Rate",
            "bottleneck": "Low Volume",
            "advice": "Keep emailing.",
        },
        "benchmarkAnalysis": [
            {"category": "Physical", "userScore": 75, "d1Score": 90, "feedback": "ok"},
            {"category": "Academics", "userScore": 81, "marketAccess": 81, "feedback": "ok"},
        ],
    }
    payload.update(overrides)
    return payload


# ── parse_json_safely ─────────────────────────────────────────────────────────

class TestParseJsonSafely:
    def test_parses_clean_json_object(self):
        text = '{"visibilityPercent": 85, "level": "D2"}'
        assert parse_json_safely(text) == {"visibilityPercent": 85, "level": "D2"}

    def test_parses_clean_json_array(self):
        assert parse_json_safely('["D1", "D2", "JUCO"]') == ["D1", "D2", "JUCO"]

    def test_strips_markdown_code_fence(self):
        assert parse_json_safely('```json\n{"key": "value"}\n```') == {"key": "value"}

    def test_strips_plain_code_fence(self):
        assert parse_json_safely('```\n{"key": "value"}\n```') == {"key": "value"}

    def test_extracts_json_from_surrounding_text(self):
        text = 'Here is the report:\n{"score": 75}\nDone.'
        assert parse_json_safely(text) == {"score": 75}

    def test_returns_none_for_invalid_json(self):
        assert parse_json_safely("This is not JSON at all.") is None

    def test_returns_none_for_empty_string(self):
        assert parse_json_safely("") is None

    def test_returns_none_for_none(self):
        assert parse_json_safely(None) is None


# ── truncate_for_context ──────────────────────────────────────────────────────

class TestTruncateForContext:
    def test_short_string_unchanged(self):
        assert truncate_for_context("Short text", max_chars=100) == "Short text"

    def test_long_string_truncated(self):
        result = truncate_for_context("a" * 3000, max_chars=2000)
        assert len(result) == 2003  # 2000 chars + "..."
        assert result.endswith("...")

    def test_exact_length_unchanged(self):
        text = "a" * 2000
        assert truncate_for_context(text, max_chars=2000) == text

    def test_default_limit(self):
        assert len(truncate_for_context("a" * 9000)) == 8003

    def test_none_returns_empty(self):
        assert truncate_for_context(None, max_chars=100) == ""


# ── LLM client and prompt ─────────────────────────────────────────────────────

class TestBuildOpenrouterLlm:
    def test_missing_key_raises(self):
        with patch.object(settings, "openrouter_api_key", ""):
            with pytest.raises(RuntimeError, match="OPENROUTER_API_KEY"):
                build_openrouter_llm()


class TestScoringPrompt:
    def test_prompt_variables(self):
        assert set(SCORING_RUBRIC_PROMPT.input_variables) == {"today", "profile_json"}

    def test_rubric_text_is_rendered_from_tables(self):
        text = render_rubric_text()
        assert "Elite: D1 75, D2 85, D3 60, NAIA 85, JUCO 95" in text
        assert "Elite: D1 88, D2 93, D3 68, NAIA 88, JUCO 97" in text
        assert "Problem: D1 -25, D2 -20, D3 -40, JUCO +20" in text
        assert "{" not in text

    def test_prompt_formats_with_profile(self):
        messages = SCORING_RUBRIC_PROMPT.format_messages(today="2025-01-01", profile_json='{"firstName": "Alex"}')
        assert len(messages) == 2
        assert "2025-01-01" in messages[1].content
        assert '"visibilityScores"' in messages[1].content


# ── normalize_llm_result ──────────────────────────────────────────────────────

class TestNormalizeLlmResult:
    def test_well_formed_answer(self):
        result = normalize_llm_result(_llm_payload())
        assert [s.level for s in result.visibility_scores] == list(CollegeLevel)
        assert result.visibility_for(CollegeLevel.D1) == 35
        assert result.primary_level == CollegeLevel.JUCO
        assert result.funnel_analysis.bottleneck == "Low Volume"
        assert result.benchmark_analysis[1].market_access == 81
        assert result.scoring_breakdown is None

    def test_ncaa_prefix_removed(self):
        result = normalize_llm_result(_llm_payload())
        assert result.visibility_scores[0].level == CollegeLevel.D1
        assert result.visibility_scores[2].level == CollegeLevel.D3

    def test_percentages_clamped(self):
        result = normalize_llm_result(_llm_payload(visibilityScores=[
            {"level": "D1", "visibilityPercent": 140},
            {"level": "D2", "visibilityPercent": -12},
            {"level": "D3", "visibilityPercent": "55.5"},
        ]))
        assert result.visibility_for(CollegeLevel.D1) == 100
        assert result.visibility_for(CollegeLevel.D2) == 0
        assert result.visibility_for(CollegeLevel.D3) == 56

    def test_missing_levels_filled(self):
        result = normalize_llm_result(_llm_payload(visibilityScores=[
            {"level": "D2", "visibilityPercent": 60},
            {"level": "Pro", "visibilityPercent": 99},
        ]))
        assert len(result.visibility_scores) == 5
        naia = result.visibility_scores[3]
        assert (naia.level, naia.visibility_percent, naia.notes) == (CollegeLevel.NAIA, 0, "Not evaluated")

    def test_no_evaluated_levels_is_incomplete(self):
        with pytest.raises(IncompleteAnalysisError):
            normalize_llm_result(_llm_payload(visibilityScores=[]))

    def test_non_object_is_incomplete(self):
        with pytest.raises(IncompleteAnalysisError):
            normalize_llm_result(["D1", "D2"])

    def test_bare_readiness_number_expanded(self):
        result = normalize_llm_result(_llm_payload(readinessScore=70))
        assert result.readiness_score.model_dump() == {
            "athletic": 70, "technical": 70, "tactical": 70, "academic": 70, "market": 70,
        }

    def test_missing_readiness_defaults_to_midpoint(self):
        result = normalize_llm_result(_llm_payload(readinessScore={"athletic": 90}))
        assert result.readiness_score.athletic == 90
        assert result.readiness_score.market == 50

    def test_invalid_items_dropped(self):
        result = normalize_llm_result(_llm_payload(
            keyRisks=[
                {"category": "Media", "message": "ok", "severity": "High"},
                {"category": "Media", "message": "bad severity", "severity": "Critical"},
                "not an object",
            ],
            actionPlan=[{"timeframe": "Someday", "description": "x", "impact": "High"}],
        ))
        assert len(result.key_risks) == 1
        assert result.action_plan == []

    def test_bad_funnel_uses_defaults(self):
        result = normalize_llm_result(_llm_payload(funnelAnalysis={"stage": "Dreaming"}))
        assert result.funnel_analysis.stage == "Invisible"
        assert result.funnel_analysis.advice == "Review data"


# ── analyze_profile_with_llm (mocked LLM) ─────────────────────────────────────

class TestAnalyzeProfileWithLlm:
    def _mock_llm_response(self, content: str):
        """Build a mock LangChain response object."""
        mock = MagicMock()
        mock.content = content
        return mock

    @patch("exposure_engine.ai_engine.processor.build_openrouter_llm")
    def test_valid_response(self, mock_build_llm, make_profile):
        mock_chain = MagicMock()
        mock_chain.invoke.return_value = self._mock_llm_response(
            "```json\n" + json.dumps(_llm_payload()) + "\n```"
        )
        mock_build_llm.return_value = MagicMock()

        with patch("exposure_engine.ai_engine.processor.SCORING_RUBRIC_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            result = analyze_profile_with_llm(make_profile())

        assert result.visibility_for(CollegeLevel.JUCO) == 85
        inputs = mock_chain.invoke.call_args.args[0]
        assert set(inputs) == {"today", "profile_json"}
        assert json.loads(inputs["profile_json"])["firstName"] == "Alex"

    @patch("exposure_engine.ai_engine.processor.build_openrouter_llm")
    def test_video_item_enforced(self, mock_build_llm, make_profile):
        mock_chain = MagicMock()
        mock_chain.invoke.return_value = self._mock_llm_response(json.dumps(_llm_payload()))
        mock_build_llm.return_value = MagicMock()

        with patch("exposure_engine.ai_engine.processor.SCORING_RUBRIC_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            result = analyze_profile_with_llm(make_profile(videoType="None"))

        assert result.action_plan[0].description == CREATE_VIDEO_TEXT
        assert result.action_plan[1].description == "Email 20 D2 coaches."

    @patch("exposure_engine.ai_engine.processor.build_openrouter_llm")
    def test_retries_once_then_fails(self, mock_build_llm, make_profile):
        """Garbage twice → AnalysisError with the user-facing message."""
        mock_chain = MagicMock()
        mock_chain.invoke.return_value = self._mock_llm_response("Sorry, I cannot help.")
        mock_build_llm.return_value = MagicMock()

        with patch("exposure_engine.ai_engine.processor.SCORING_RUBRIC_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            with pytest.raises(AnalysisError, match="Analysis failed. Please try again."):
                analyze_profile_with_llm(make_profile())

        assert mock_chain.invoke.call_count == 2

    @patch("exposure_engine.ai_engine.processor.build_openrouter_llm")
    def test_second_attempt_can_succeed(self, mock_build_llm, make_profile):
        mock_chain = MagicMock()
        mock_chain.invoke.side_effect = [
            self._mock_llm_response(json.dumps(_llm_payload(visibilityScores=[]))),
            self._mock_llm_response(json.dumps(_llm_payload())),
        ]
        mock_build_llm.return_value = MagicMock()

        with patch("exposure_engine.ai_engine.processor.SCORING_RUBRIC_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            result = analyze_profile_with_llm(make_profile())

        assert result.visibility_for(CollegeLevel.D2) == 60
        assert mock_chain.invoke.call_count == 2

    @patch("exposure_engine.ai_engine.processor.build_openrouter_llm")
    def test_unconfigured_llm(self, mock_build_llm, make_profile):
        mock_build_llm.side_effect = RuntimeError("OPENROUTER_API_KEY is not configured")
        with pytest.raises(AnalysisError, match="OPENROUTER_API_KEY"):
            analyze_profile_with_llm(make_profile())

    @patch("exposure_engine.ai_engine.processor.build_openrouter_llm")
    def test_long_profile_is_sent_whole(self, mock_build_llm, make_profile):
        mock_chain = MagicMock()
        mock_chain.invoke.return_value = self._mock_llm_response(json.dumps(_llm_payload()))
        mock_build_llm.return_value = MagicMock()
        profile = make_profile(season={"honors": "Golden Boot, " * 900})

        with patch("exposure_engine.ai_engine.processor.SCORING_RUBRIC_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            analyze_profile_with_llm(profile)

        sent = mock_chain.invoke.call_args.args[0]["profile_json"]
        assert len(sent) > settings.max_profile_chars
        decoded = json.loads(sent)
        assert decoded["coachesContacted"] == 10
        assert decoded["videoType"] == "Edited_Highlight_Reel"
        assert decoded["events"][0]["name"] == "Surf Cup"
        assert "\n" not in sent
