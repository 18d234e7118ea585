"""Internal job endpoints for cron/scripts.

These endpoints are secured with a static token (X-Internal-Token header).
They are meant for automated triggers only.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from nomoji.config import get_settings
from nomoji.db.session import get_db
from nomoji.services.maintenance import aggregate_metrics, cleanup_old_configs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal", include_in_schema=False)


# ── Token dependency ────────────────────────────────────────────────


def _require_internal_token(x_internal_token: str | None = Header(None)) -> None:
    """Validate the internal job token from the request header.

    Raises 403 if the configured token is empty or the header does not match it.
    """
    expected = get_settings().internal_job_token
    if not expected or not x_internal_token or not secrets.compare_digest(
        x_internal_token, expected
    ):
        logger.warning("Internal endpoint auth failed: invalid or missing token")
        raise HTTPException(status_code=403, detail="Invalid internal token")


# ── Endpoints ───────────────────────────────────────────────────────


@router.post("/cleanup_configs")
def run_cleanup_configs(
    db: Session = Depends(get_db),
    _token: None = Depends(_require_internal_token),
    max_age_days: int | None = Query(
        None, ge=0, description="Override CONFIG_MAX_AGE_DAYS for this run"
    ),
):
    """Delete shared configs older than the maximum age and purge expired entries."""
    return cleanup_old_configs(db, max_age_days=max_age_days)


@router.post("/aggregate_metrics")
def run_aggregate_metrics(
    db: Session = Depends(get_db),
    _token: None = Depends(_require_internal_token),
):
    """Write an hourly metrics snapshot."""
    return aggregate_metrics(db)
