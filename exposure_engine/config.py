"""
exposure_engine/config.py — Central configuration loaded from environment variables.
All modules import settings from here; never read os.environ directly elsewhere.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Analysis ──────────────────────────────────────────────────────────────
    analysis_engine: Literal["rubric", "llm"] = Field(
        default="rubric",
        description="'rubric' runs the deterministic scorer, 'llm' delegates to OpenRouter",
    )
    max_profile_chars: int = Field(
        default=10000,
        gt=0,
        description="Max serialized size of a submitted profile (guards prompt/token abuse)",
    )

    # ── LLM ──────────────────────────────────────────────────────────────────
    openrouter_api_key: str = Field(default="", description="OpenRouter API key (llm engine only)")
    openrouter_model: str = Field(
        default="google/gemini-2.5-flash",
        description="OpenRouter model identifier",
    )

    # ── Database ──────────────────────────────────────────────────────────────
    database_url: str = Field(..., description="PostgreSQL connection URI")

    # ── Email ─────────────────────────────────────────────────────────────────
    gmail_user: str = Field(..., description="Gmail sender address")
    gmail_app_password: str = Field(..., description="Gmail App Password (16 chars)")
    report_sender_name: str = Field(
        default="Exposure Engine",
        description="Name used to sign off emailed reports",
    )
    mailer_dry_run: bool = Field(
        default=True,
        description="If True, print report emails to stdout instead of actually sending",
    )

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Root log level for scripts and the API")


# Singleton: import this everywhere
settings = Settings()
