"""Scheduled maintenance jobs: shared-config cleanup and hourly metrics snapshots.

Both jobs are fire-and-forget. Failures are logged and reported in the
result dict, never raised and never retried.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from nomoji.config import get_settings
from nomoji.services import kv_store
from nomoji.services.config_store import (
    PREFERENCES_PREFIX,
    SHARED_CONFIG_PREFIX,
    format_timestamp,
    parse_timestamp,
)
from nomoji.services.kv_store import KVStore
from nomoji.services.rate_limit import RATE_LIMIT_KEY_PREFIX

logger = logging.getLogger(__name__)

METRICS_KEY_PREFIX = "analytics:hourly:"


def _created_at(document: Any) -> datetime | None:
    if not isinstance(document, dict):
        return None
    metadata = document.get("metadata")
    if not isinstance(metadata, dict) or not metadata.get("createdAt"):
        return None
    try:
        return parse_timestamp(str(metadata["createdAt"]))
    except ValueError:
        return None


def cleanup_old_configs(db: Session, max_age_days: int | None = None) -> dict[str, Any]:
    """Delete shared configs whose metadata.createdAt is older than max_age_days.

    Shared configs without a parseable createdAt are left to their TTL. Expired
    rows of any namespace are purged as well.
    """
    if max_age_days is None:
        max_age_days = get_settings().config_max_age_days
    logger.info("Starting config cleanup: max_age_days=%d", max_age_days)

    store = KVStore(db)
    cutoff = kv_store.utcnow() - timedelta(days=max_age_days)
    deleted = 0
    try:
        for key in store.list_keys(SHARED_CONFIG_PREFIX):
            created_at = _created_at(store.get_json(key))
            if created_at is not None and created_at < cutoff:
                store.delete(key)
                deleted += 1
        purged = store.purge_expired()
    except Exception as exc:
        logger.exception("Config cleanup failed: deleted_so_far=%d", deleted)
        return {"status": "failed", "deleted_count": deleted, "error": str(exc)}

    logger.info("Config cleanup completed: deleted_count=%d purged_count=%d", deleted, purged)
    return {"status": "completed", "deleted_count": deleted, "purged_count": purged}


def aggregate_metrics(db: Session) -> dict[str, Any]:
    """Write an analytics:hourly:<timestamp> snapshot of live key counts per namespace."""
    logger.info("Starting analytics aggregation")
    settings = get_settings()
    store = KVStore(db)
    timestamp = format_timestamp(kv_store.utcnow())
    try:
        snapshot = {
            "timestamp": timestamp,
            "counts": {
                "prefs": store.count_keys(PREFERENCES_PREFIX),
                "config": store.count_keys(SHARED_CONFIG_PREFIX),
                "rl": store.count_keys(RATE_LIMIT_KEY_PREFIX),
            },
        }
        store.put_json(
            f"{METRICS_KEY_PREFIX}{timestamp}",
            snapshot,
            ttl_seconds=settings.metrics_snapshot_ttl_days * 24 * 60 * 60,
        )
    except Exception as exc:
        logger.exception("Analytics aggregation failed")
        return {"status": "failed", "error": str(exc)}

    logger.info("Analytics aggregation completed: counts=%s", snapshot["counts"])
    return {"status": "completed", "key": f"{METRICS_KEY_PREFIX}{timestamp}", **snapshot}
