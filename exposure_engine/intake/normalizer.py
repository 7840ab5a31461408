"""
exposure_engine/intake/normalizer.py — Cleans free-text form input into canonical values.

The web form sends loosely-typed strings ("Top 10%", "mls next", "<b>Surf Cup</b>").
These helpers turn them into the enum values the scoring rubric understands and
strip markup before anything reaches a prompt or an HTML email.
"""

import logging
import re
from typing import Any

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


# ── Canonical vocabularies ───────────────────────────────────────────────────

RATING_SYNONYMS = {
    "below average": "Below_Average",
    "poor": "Below_Average",
    "average": "Average",
    "avg": "Average",
    "above average": "Above_Average",
    "top 10%": "Top_10_Percent",
    "top 10 percent": "Top_10_Percent",
    "top10": "Top_10_Percent",
    "elite": "Elite",
}

LEAGUE_SYNONYMS = {
    "mls next": "MLS_NEXT",
    "mlsnext": "MLS_NEXT",
    "ecnl": "ECNL",
    "ecnl boys": "ECNL",
    "ecnl girls": "ECNL",
    "ga": "Girls_Academy",
    "girls academy": "Girls_Academy",
    "ecnl rl": "ECNL_RL",
    "ecnl regional league": "ECNL_RL",
    "usys national league": "USYS_National_League",
    "usys nl": "USYS_National_League",
    "usys elite 64": "USYS_Elite_64",
    "elite 64": "USYS_Elite_64",
    "usl academy": "USL_Academy",
    "npl": "NPL",
    "high school": "High_School",
    "elite local": "Elite_Local",
    "other": "Other",
}


# ── Helpers ──────────────────────────────────────────────────────────────────

def sanitize_text(raw: Any) -> Any:
    """
    Remove HTML tags/entities and collapse whitespace. None → ''.

    Non-string values are returned untouched so model validation rejects them.
    """
    if raw is None:
        return ""
    if not isinstance(raw, str):
        return raw
    text = raw
    if not text.strip():
        return ""
    if "<" in text or "&" in text:
        soup = BeautifulSoup(text, "lxml")
        text = soup.get_text(separator=" ")
    return re.sub(r"\s+", " ", text).strip()


def _vocab_key(value: str) -> str:
    return re.sub(r"[\s_\-]+", " ", value.strip().lower())


def normalize_rating(value: Any) -> Any:
    """
    Map a self-assessment rating to its canonical enum value.

    Unknown strings are returned untouched so model validation can reject them
    with a proper error.
    """
    if not isinstance(value, str):
        return value
    return RATING_SYNONYMS.get(_vocab_key(value), value.strip())


def normalize_league(value: Any) -> Any:
    """Map a league label to its canonical enum value; unrecognized labels become 'Other'."""
    if not isinstance(value, str):
        return value
    stripped = value.strip()
    if not stripped:
        return "Other"
    canonical = LEAGUE_SYNONYMS.get(_vocab_key(stripped))
    if canonical:
        return canonical
    if stripped in LEAGUE_SYNONYMS.values():
        return stripped
    logger.debug("Unrecognized league label %r — treating as Other.", stripped)
    return "Other"


def split_csv(value: str | None) -> list[str]:
    """Split a comma separated form field ('UCSD, SDSU, UCI') into clean items."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def blank_to_none(value: Any) -> Any:
    """Form inputs send '' for untouched optional fields."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def none_to_zero(value: Any) -> Any:
    """Cleared number inputs arrive as null (or ''); treat them as 0."""
    value = blank_to_none(value)
    return 0 if value is None else value
