"""Key-value document store over the kv_entries table.

Values are JSON documents. Expiry is enforced here: an entry past its
expires_at reads as absent and is never returned partially.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime, timedelta
from typing import Any, NoReturn

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nomoji.models.kv_entry import KVEntry

logger = logging.getLogger(__name__)


class StorageUnavailableError(RuntimeError):
    """Raised when the backing store cannot serve a read or write."""


def utcnow() -> datetime:
    """Current time for expiry decisions. Patched in tests to simulate TTL expiry."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back; stored values are always UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _is_live(entry: KVEntry, now: datetime) -> bool:
    return entry.expires_at is None or as_utc(entry.expires_at) > now


class KVStore:
    """JSON document store bound to a database session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_json(self, key: str) -> Any | None:
        """Return the decoded value for key, or None if absent or expired."""
        try:
            entry = self.db.get(KVEntry, key)
        except SQLAlchemyError as exc:
            self._fail("get", key, exc)
        if entry is None or not _is_live(entry, utcnow()):
            return None
        return json.loads(entry.value)

    def put_json(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Upsert key. A ttl_seconds value makes the entry expire that many seconds from now."""
        now = utcnow()
        expires_at = now + timedelta(seconds=ttl_seconds) if ttl_seconds is not None else None
        payload = json.dumps(value, ensure_ascii=False)
        try:
            entry = self.db.get(KVEntry, key)
            if entry is None:
                self.db.add(
                    KVEntry(
                        key=key,
                        value=payload,
                        expires_at=expires_at,
                        created_at=now,
                        updated_at=now,
                    )
                )
            else:
                entry.value = payload
                entry.expires_at = expires_at
                entry.updated_at = now
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("put", key, exc)

    def delete(self, key: str) -> None:
        """Delete key. Deleting a missing key is a no-op."""
        try:
            entry = self.db.get(KVEntry, key)
            if entry is not None:
                self.db.delete(entry)
                self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("delete", key, exc)

    def list_keys(self, prefix: str = "") -> list[str]:
        """Return live keys starting with prefix, in key order."""
        now = utcnow()
        stmt = (
            select(KVEntry.key)
            .where(KVEntry.key.startswith(prefix, autoescape=True))
            .where(or_(KVEntry.expires_at.is_(None), KVEntry.expires_at > now))
            .order_by(KVEntry.key)
        )
        try:
            return list(self.db.scalars(stmt))
        except SQLAlchemyError as exc:
            self._fail("list", prefix, exc)

    def count_keys(self, prefix: str = "") -> int:
        """Return the number of live keys starting with prefix."""
        now = utcnow()
        stmt = (
            select(func.count())
            .select_from(KVEntry)
            .where(KVEntry.key.startswith(prefix, autoescape=True))
            .where(or_(KVEntry.expires_at.is_(None), KVEntry.expires_at > now))
        )
        try:
            return self.db.scalar(stmt) or 0
        except SQLAlchemyError as exc:
            self._fail("count", prefix, exc)

    def purge_expired(self) -> int:
        """Physically delete expired rows. Returns the number removed."""
        now = utcnow()
        try:
            expired = list(
                self.db.scalars(
                    select(KVEntry).where(
                        KVEntry.expires_at.is_not(None), KVEntry.expires_at <= now
                    )
                )
            )
            for entry in expired:
                self.db.delete(entry)
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("purge", "*", exc)
        return len(expired)

    def _fail(self, op: str, key: str, exc: SQLAlchemyError) -> NoReturn:
        try:
            self.db.rollback()
        except SQLAlchemyError:
            logger.exception("KV rollback failed after %s error", op)
        logger.error("KV %s failed: key=%s error=%s", op, key, exc)
        raise StorageUnavailableError(f"Storage unavailable: {op} failed") from exc
