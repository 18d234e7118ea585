"""Shared FastAPI dependencies for API routes: path-parameter validation."""

from __future__ import annotations

import re

from fastapi import HTTPException

from nomoji.db.session import get_db  # re-export
from nomoji.rules.generator import Assistant
from nomoji.schemas.config import PRESET_NAMES

__all__ = [
    "get_db",
    "valid_assistant",
    "valid_config_id",
    "valid_preset_name",
    "valid_user_id",
]

USER_ID_RE = re.compile(r"^[A-Za-z0-9._-]{3,64}$")
CONFIG_ID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def valid_user_id(user_id: str) -> str:
    """Raise 400 unless user_id is 3-64 characters of [A-Za-z0-9._-]."""
    if not USER_ID_RE.fullmatch(user_id):
        raise HTTPException(
            status_code=400,
            detail="Invalid user ID. Must be 3-64 alphanumeric characters, "
            "hyphens, underscores, or dots.",
        )
    return user_id


def valid_config_id(config_id: str) -> str:
    if not CONFIG_ID_RE.fullmatch(config_id):
        raise HTTPException(status_code=400, detail="Invalid config ID. Must be a valid UUID.")
    return config_id


def valid_preset_name(preset_name: str) -> str:
    if preset_name not in PRESET_NAMES:
        raise HTTPException(
            status_code=400,
            detail="Invalid preset name. Must be 'strict', 'moderate', or 'relaxed'.",
        )
    return preset_name


def valid_assistant(assistant: str) -> Assistant:
    try:
        return Assistant(assistant)
    except ValueError:
        allowed = ", ".join(a.value for a in Assistant)
        raise HTTPException(
            status_code=400,
            detail=f"Invalid assistant. Must be one of: {allowed}.",
        ) from None
