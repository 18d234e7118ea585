"""Config store: per-user configurations and short-lived shared copies.

User records live under prefs:<userId> as {"userId", "config", "integrations"}.
Shared copies live under config:<configId> with a fixed expiry.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from nomoji.config import get_settings
from nomoji.defaults import PRESETS, default_config_document, preset_document
from nomoji.schemas.config import NomojiConfig
from nomoji.services import kv_store
from nomoji.services.kv_store import KVStore

logger = logging.getLogger(__name__)

PREFERENCES_PREFIX = "prefs:"
SHARED_CONFIG_PREFIX = "config:"


class UnknownPresetError(ValueError):
    """Raised when a preset name is not one of strict, moderate, relaxed."""

    pass


def user_key(user_id: str) -> str:
    return f"{PREFERENCES_PREFIX}{user_id}"


def shared_config_key(config_id: str) -> str:
    return f"{SHARED_CONFIG_PREFIX}{config_id}"


def format_timestamp(value: datetime) -> str:
    """ISO 8601 UTC with microseconds and a Z suffix."""
    return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(value: str) -> datetime:
    return kv_store.as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def _next_updated_at(previous: str | None) -> str:
    now = kv_store.utcnow()
    if previous:
        try:
            prior = parse_timestamp(previous)
        except ValueError:
            logger.warning("Unparseable updatedAt on stored config: %s", previous)
        else:
            if now <= prior:
                now = prior + timedelta(microseconds=1)
    return format_timestamp(now)


def normalize_config(document: dict[str, Any]) -> NomojiConfig:
    """Validate a config document, filling missing context keys from the default.

    Raises pydantic.ValidationError for unknown context keys or bad field types.
    """
    defaults = default_config_document()
    merged = dict(document)
    merged["contexts"] = {**defaults["contexts"], **(document.get("contexts") or {})}
    merged.setdefault("version", defaults["version"])
    merged.setdefault("enabled", defaults["enabled"])
    return NomojiConfig.model_validate(merged)


def _load_preferences(store: KVStore, user_id: str) -> dict[str, Any] | None:
    record = store.get_json(user_key(user_id))
    if isinstance(record, dict):
        return record
    return None


def get_or_create_user_config(db: Session, user_id: str) -> NomojiConfig:
    """Return the stored config for user_id, or the default stamped with fresh metadata.

    A read never persists anything.
    """
    record = _load_preferences(KVStore(db), user_id)
    if record and record.get("config"):
        return NomojiConfig.model_validate(record["config"])

    now = format_timestamp(kv_store.utcnow())
    document = default_config_document()
    document["metadata"] = {"createdAt": now, "updatedAt": now, "userId": user_id}
    return NomojiConfig.model_validate(document)


def update_user_config(db: Session, user_id: str, partial: dict[str, Any]) -> NomojiConfig:
    """Shallow-merge partial over the stored (or default) config and persist it.

    Top-level keys in partial replace the existing ones wholesale, so a
    supplied contexts map replaces the stored map; context keys it leaves out
    come back from the default configuration. createdAt is preserved,
    updatedAt always moves forward.
    """
    store = KVStore(db)
    record = _load_preferences(store, user_id) or {}
    existing = record.get("config")

    merged = {**(existing or default_config_document()), **partial}
    prior_metadata = (existing or {}).get("metadata") or {}
    merged["metadata"] = {
        "createdAt": prior_metadata.get("createdAt") or format_timestamp(kv_store.utcnow()),
        "updatedAt": _next_updated_at(prior_metadata.get("updatedAt")),
        "userId": user_id,
    }
    config = normalize_config(merged)

    store.put_json(
        user_key(user_id),
        {
            "userId": user_id,
            "config": config.to_document(),
            "integrations": record.get("integrations") or {},
        },
    )
    logger.info(
        "Config updated: user_id=%s created=%s keys=%s",
        user_id,
        existing is None,
        ",".join(sorted(partial)),
    )
    return config


def apply_preset(db: Session, user_id: str, preset_name: str) -> NomojiConfig:
    """Merge the named preset over the user's config.

    Raises UnknownPresetError if preset_name is not a known preset.
    """
    if preset_name not in PRESETS:
        raise UnknownPresetError(f"Unknown preset: {preset_name}")
    return update_user_config(db, user_id, preset_document(preset_name))


def delete_user_config(db: Session, user_id: str) -> None:
    """Remove the user's record. Subsequent reads return the default again."""
    KVStore(db).delete(user_key(user_id))
    logger.info("Config deleted: user_id=%s", user_id)


def list_user_ids(db: Session) -> list[str]:
    """All user IDs with a stored record, in key order."""
    return [
        key[len(PREFERENCES_PREFIX):]
        for key in KVStore(db).list_keys(PREFERENCES_PREFIX)
    ]


def save_shared_config(db: Session, config_id: str, document: dict[str, Any]) -> None:
    """Store document verbatim under config_id. It expires after the shared-config TTL."""
    ttl_seconds = get_settings().shared_config_ttl_days * 24 * 60 * 60
    KVStore(db).put_json(shared_config_key(config_id), document, ttl_seconds=ttl_seconds)
    logger.info("Shared config saved: config_id=%s ttl_seconds=%d", config_id, ttl_seconds)


def get_shared_config(db: Session, config_id: str) -> dict[str, Any] | None:
    """Return the shared document, or None if it never existed or has expired."""
    return KVStore(db).get_json(shared_config_key(config_id))
