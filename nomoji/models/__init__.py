"""SQLAlchemy models."""

from nomoji.models.kv_entry import KVEntry

__all__ = [
    "KVEntry",
]
