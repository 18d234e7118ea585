"""Per-user configuration API routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from nomoji.api.deps import valid_preset_name, valid_user_id
from nomoji.api.errors import success_envelope
from nomoji.db.session import get_db
from nomoji.middleware.observability import PerformanceTracker
from nomoji.schemas.config import NomojiConfigUpdate
from nomoji.services.analytics import Analytics, get_analytics
from nomoji.services.config_store import (
    apply_preset,
    delete_user_config,
    get_or_create_user_config,
    update_user_config,
)
from nomoji.services.rate_limit import write_limit

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{user_id}")
def api_get_config(
    user_id: str = Depends(valid_user_id),
    db: Session = Depends(get_db),
) -> dict:
    """Return the user's configuration, or the default if none is stored."""
    config = get_or_create_user_config(db, user_id)
    return success_envelope(config.to_document())


@router.post("/{user_id}", dependencies=[Depends(write_limit)])
def api_update_config(
    request: Request,
    data: NomojiConfigUpdate,
    user_id: str = Depends(valid_user_id),
    db: Session = Depends(get_db),
    analytics: Analytics = Depends(get_analytics),
) -> dict:
    """Shallow-merge the posted fields into the user's configuration."""
    perf = getattr(request.state, "perf", None) or PerformanceTracker()
    perf.mark("config_update_db_start")
    config = update_user_config(db, user_id, data.to_partial())
    perf.mark("config_update_db_end")
    logger.info(
        "Configuration updated: user_id=%s db_ms=%.1f",
        user_id,
        perf.mark_duration_ms("config_update_db_start", "config_update_db_end"),
    )
    analytics.track_config_change(user_id=user_id, action="update")
    return success_envelope(config.to_document(), message="Configuration updated successfully")


@router.post("/{user_id}/preset/{preset_name}", dependencies=[Depends(write_limit)])
def api_apply_preset(
    user_id: str = Depends(valid_user_id),
    preset_name: str = Depends(valid_preset_name),
    db: Session = Depends(get_db),
    analytics: Analytics = Depends(get_analytics),
) -> dict:
    """Merge a named preset (strict, moderate, relaxed) into the user's configuration."""
    config = apply_preset(db, user_id, preset_name)
    analytics.track_config_change(user_id=user_id, action="update", preset=preset_name)
    return success_envelope(
        config.to_document(), message=f"Preset '{preset_name}' applied successfully"
    )


@router.delete("/{user_id}", dependencies=[Depends(write_limit)])
def api_delete_config(
    user_id: str = Depends(valid_user_id),
    db: Session = Depends(get_db),
    analytics: Analytics = Depends(get_analytics),
) -> dict:
    """Delete the user's stored configuration."""
    delete_user_config(db, user_id)
    analytics.track_config_change(user_id=user_id, action="delete")
    return success_envelope(message="Configuration deleted successfully")
