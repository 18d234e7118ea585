"""System routes: health check, API info, preset catalogue."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from nomoji import __version__
from nomoji.api.errors import success_envelope
from nomoji.config import get_settings
from nomoji.db.session import get_db
from nomoji.defaults import all_preset_documents, default_config_document
from nomoji.schemas.config import PRESET_NAMES
from nomoji.services.kv_store import KVStore, StorageUnavailableError
from nomoji.services.rate_limit import moderate_limit

logger = logging.getLogger(__name__)

router = APIRouter()

API_ENDPOINTS = {
    "config": "/api/config/:userId",
    "rules": "/api/rules/:userId",
    "claude": "/api/claude/:userId",
    "cursorRules": "/api/cursor-rules/:userId",
    "cursorrules": "/api/cursorrules/:userId (deprecated)",
    "template": "/api/template/:userId/:assistant",
    "presets": "/api/presets",
    "analyze": "/api/analyze",
    "shared": "/api/shared/:configId",
}

ASSISTANT_DESCRIPTIONS = {
    "claude": "Claude Code - Download .claude/agents/nomoji.mdc subagent",
    "cursor": "Cursor - Download .cursor/rules/nomoji.mdc rules",
    "copilot": "GitHub Copilot - Get instructions format",
    "gemini": "Google Gemini CLI - Get configuration instructions",
    "openai": "OpenAI API - System instructions",
    "openai-codex": "OpenAI Codex - Terminal and IDE configuration",
    "codeium": "Codeium - Generic template",
    "tabnine": "Tabnine - Generic template",
}


@router.get("/health")
def health(db: Session = Depends(get_db)):
    """Health check. healthy/degraded answer 200, unhealthy answers 503."""
    settings = get_settings()
    checks: dict[str, dict] = {}
    try:
        KVStore(db).get_json("health_check")
        checks["kv"] = {"status": "ok"}
    except StorageUnavailableError as exc:
        logger.error("KV health check failed: %s", exc)
        checks["kv"] = {"status": "error", "message": str(exc)}
    if settings.analytics_enabled:
        checks["analytics"] = {"status": "ok"}

    statuses = [check["status"] == "ok" for check in checks.values()]
    if all(statuses):
        status = "healthy"
    elif any(statuses):
        status = "degraded"
    else:
        status = "unhealthy"

    body = {
        "status": status,
        "timestamp": datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "version": __version__,
        "checks": checks,
    }
    return JSONResponse(status_code=503 if status == "unhealthy" else 200, content=body)


@router.get("/api", dependencies=[Depends(moderate_limit)])
def api_info() -> dict:
    return {
        "name": "nomoji.dev",
        "version": __version__,
        "description": "Control emoji usage in AI-generated code and documentation",
        "endpoints": API_ENDPOINTS,
        "assistants": ASSISTANT_DESCRIPTIONS,
    }


@router.get("/api/presets", dependencies=[Depends(moderate_limit)])
def api_presets() -> dict:
    """Available preset names, their documents, and the default configuration."""
    return success_envelope(
        {
            "available": list(PRESET_NAMES),
            "presets": all_preset_documents(),
            "default": default_config_document(),
        }
    )
