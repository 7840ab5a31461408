"""
scripts/score_profile.py — CLI to score a player profile JSON file.

Steps:
  1. Load and validate the intake JSON
  2. Score it with the rubric (or LLM) engine
  3. Print the report
  4. Optionally store it and email it (dry-run by default)

Usage:
    python scripts/score_profile.py --file scripts/sample_profile.json
    python scripts/score_profile.py --file me.json --engine llm --save --email me@example.com
"""

import argparse
import json
import logging
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ── Imports ───────────────────────────────────────────────────────────────────

from exposure_engine.ai_engine.processor import AnalysisError
from exposure_engine.config import settings
from exposure_engine.intake.validation import ProfileValidationError, validate_profile_payload
from exposure_engine.scoring.result import AnalysisResult
from exposure_engine.services.analysis_service import analyze_and_store, email_report, run_analysis

DEFAULT_PROFILE = os.path.join(os.path.dirname(__file__), "sample_profile.json")


def _print_report(result: AnalysisResult, show_breakdown: bool) -> None:
    print("\n" + "=" * 55)
    print("  ⚽  Exposure Engine — College Visibility Report")
    print("=" * 55)
    for score in result.visibility_scores:
        bar = "█" * (score.visibility_percent // 5)
        print(f"  {score.level.value:<5} {score.visibility_percent:>3}%  {bar}")

    r = result.readiness_score
    print(f"\n  Readiness  athletic={r.athletic} technical={r.technical} tactical={r.tactical} "
          f"academic={r.academic} market={r.market}")
    f = result.funnel_analysis
    print(f"  Funnel     {f.stage} · {f.conversion_rate} · bottleneck: {f.bottleneck}")

    print("\n  Key risks:")
    for risk in result.key_risks:
        print(f"   [{risk.severity:<6}] {risk.category}: {risk.message}")

    print("\n  Action plan:")
    for i, item in enumerate(result.action_plan, start=1):
        print(f"   {i}. ({item.timeframe}, {item.impact}) {item.description}")

    print(f"\n  {result.plain_language_summary}")
    print(f"\n  Coach view: {result.coach_short_evaluation}")

    if show_breakdown and result.scoring_breakdown:
        print("\n  Scoring breakdown:")
        print(json.dumps(result.scoring_breakdown, indent=2))
    print("=" * 55 + "\n")


def main() -> int:
    parser = argparse.ArgumentParser(description="Exposure Engine — score a player profile")
    parser.add_argument("--file", default=DEFAULT_PROFILE, help="Path to intake JSON (default: sample profile)")
    parser.add_argument("--engine", choices=["rubric", "llm"], default=None,
                        help="Scoring engine (default: ANALYSIS_ENGINE from .env)")
    parser.add_argument("--breakdown", action="store_true", help="Print per-stage rubric points")
    parser.add_argument("--save", action="store_true", help="Store the assessment in the database")
    parser.add_argument("--email", default=None, help="Email the report to this address (implies --save)")
    parser.add_argument("--dry-run", action="store_true", default=None,
                        help="Print the email instead of sending (overrides .env)")
    parser.add_argument("--no-dry-run", action="store_true", help="Force a real send")
    args = parser.parse_args()

    if args.dry_run:
        dry_run = True
    elif args.no_dry_run:
        dry_run = False
    else:
        dry_run = settings.mailer_dry_run

    with open(args.file, encoding="utf-8") as fh:
        raw = json.load(fh)

    try:
        profile = validate_profile_payload(raw)
    except ProfileValidationError as exc:
        logger.error("Invalid profile %s: %s", args.file, exc)
        return 2

    try:
        if args.save or args.email:
            from exposure_engine.db.session import get_session

            with get_session() as db:
                assessment, result = analyze_and_store(db, profile, engine=args.engine)
                _print_report(result, args.breakdown)
                print(f"  💾  Stored as assessment #{assessment.id}")
                if args.email:
                    sent = email_report(db, assessment, to_address=args.email, dry_run=dry_run)
                    print(f"  📧  Report email {'sent' if sent else 'FAILED'} → {args.email}")
        else:
            result = run_analysis(profile, engine=args.engine)
            _print_report(result, args.breakdown)
    except AnalysisError as exc:
        logger.error("Analysis failed: %s", exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
