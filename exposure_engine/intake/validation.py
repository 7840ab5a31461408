"""
exposure_engine/intake/validation.py — Gatekeeping for raw form submissions.

Turns an untrusted JSON body into a PlayerProfile or a ProfileValidationError
carrying a short message that is safe to show the user.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from exposure_engine.config import settings
from exposure_engine.intake.profile import PlayerProfile

logger = logging.getLogger(__name__)


class ProfileValidationError(ValueError):
    """Raised when a submitted profile cannot be scored."""


FIELD_MESSAGES = {
    "first_name": "Invalid first name",
    "last_name": "Invalid last name",
    "gender": "Invalid gender",
    "position": "Invalid position",
    "grad_year": "Invalid graduation year",
    "email": "Invalid email",
    "seasons": "Invalid season data",
    "academics": "Invalid academic data",
    "athletic_profile": "Invalid athletic self assessment",
    "events": "Invalid exposure events",
    "experience_level": "Invalid experience level",
    "video_type": "Invalid video type",
}


def _message_for(exc: ValidationError) -> str:
    first = exc.errors()[0]
    loc = first.get("loc") or ("profile",)
    field = to_snake(str(loc[0]))
    return FIELD_MESSAGES.get(field, f"Invalid {field.replace('_', ' ')}")


def validate_profile_payload(raw: Any, max_chars: int | None = None) -> PlayerProfile:
    """
    Validate a raw JSON body and build a PlayerProfile.

    Args:
        raw:       Decoded request body.
        max_chars: Serialized size limit. Defaults to settings.max_profile_chars.

    Returns:
        A validated PlayerProfile.

    Raises:
        ProfileValidationError: With a user-facing message on any failure.
    """
    if not raw or not isinstance(raw, dict):
        raise ProfileValidationError("Invalid profile data")

    limit = max_chars if max_chars is not None else settings.max_profile_chars
    # compact JSON, the same length the browser form measures
    size = len(json.dumps(raw, separators=(",", ":"), ensure_ascii=False, default=str))
    if size > limit:
        logger.warning("Rejected profile payload of %d chars (limit %d).", size, limit)
        raise ProfileValidationError("Profile data too large")

    try:
        profile = PlayerProfile.model_validate(raw)
    except ValidationError as exc:
        message = _message_for(exc)
        logger.info("Profile validation failed: %s (%d errors)", message, exc.error_count())
        raise ProfileValidationError(message) from exc

    logger.debug("Validated profile for %s (class of %d).", profile.full_name, profile.grad_year)
    return profile
