"""
tests/conftest.py — Shared pytest configuration and fixtures.

Sets dummy environment variables BEFORE any exposure_engine module is imported,
so that pydantic-settings doesn't fail on missing required fields.
"""

import copy
import os

import pytest

# ── Set dummy env vars before any app module is imported ─────────────────────
# This runs at collection time, before tests execute.
os.environ.setdefault("OPENROUTER_API_KEY", "test-key")
os.environ.setdefault("OPENROUTER_MODEL", "test-model")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("GMAIL_USER", "test@example.com")
os.environ.setdefault("GMAIL_APP_PASSWORD", "test-password")
os.environ.setdefault("ANALYSIS_ENGINE", "rubric")
os.environ.setdefault("MAILER_DRY_RUN", "true")

import sqlalchemy as sa
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from exposure_engine.db.models import Base
from exposure_engine.intake.profile import PlayerProfile


# ── Profile payloads ──────────────────────────────────────────────────────────

BASE_PAYLOAD = {
    "firstName": "Alex",
    "lastName": "Rivera",
    "email": "alex.rivera@example.com",
    "gender": "Male",
    "position": "CM",
    "gradYear": 2028,               # 3 years out in 2025: no timeline bonus for boys
    "experienceLevel": ["Youth_Club_Only"],
    "videoType": "Edited_Highlight_Reel",
    "coachesContacted": 10,
    "responsesReceived": 2,
    "offersReceived": 0,
    "academics": {"gpa": 3.4},
    "athleticProfile": {
        "speed": "Above_Average",
        "strength": "Above_Average",
        "endurance": "Above_Average",
        "workRate": "Above_Average",
        "technical": "Above_Average",
        "tactical": "Above_Average",
    },
    "seasons": [
        {
            "year": 2024,
            "teamName": "Test FC",
            "league": ["MLS_NEXT"],
            "minutesPlayedPercent": 60,
            "mainRole": "Rotation",
        }
    ],
    "events": [{"name": "Surf Cup", "type": "Showcase", "collegesNoted": "UCSD, SDSU"}],
}


@pytest.fixture
def payload():
    """Fresh copy of the baseline camelCase intake payload."""
    return copy.deepcopy(BASE_PAYLOAD)


@pytest.fixture
def make_profile():
    """
    Factory for PlayerProfile objects built from the baseline payload.

    Top-level keys in overrides replace the baseline; `season` merges into the
    single baseline season row.
    """
    def _make(season: dict | None = None, **overrides) -> PlayerProfile:
        data = copy.deepcopy(BASE_PAYLOAD)
        if season:
            data["seasons"][0].update(season)
        data.update(overrides)
        return PlayerProfile.model_validate(data)

    return _make


# ── In-memory DB Fixture ──────────────────────────────────────────────────────

@pytest.fixture
def db_engine():
    """
    In-memory SQLite engine shared across connections (StaticPool).

    SQLite doesn't support PostgreSQL native ENUMs, so we temporarily
    set native_enum=False on all Enum columns before creating tables.
    """
    for table in Base.metadata.tables.values():
        for col in table.columns:
            if isinstance(col.type, sa.Enum):
                col.type.native_enum = False

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def db(db_engine):
    """Provide a fresh in-memory SQLite session for each test."""
    Session = sessionmaker(bind=db_engine, expire_on_commit=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()
