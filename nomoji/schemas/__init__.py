"""Pydantic schemas for request/response validation."""

from nomoji.schemas.config import (
    CONTEXT_NAMES,
    PRESET_NAMES,
    AnalyzeRequest,
    ConfigMetadata,
    ContextConfig,
    Contexts,
    Exceptions,
    NomojiConfig,
    NomojiConfigUpdate,
    Severity,
    ShareConfigResult,
)

__all__ = [
    "CONTEXT_NAMES",
    "PRESET_NAMES",
    "AnalyzeRequest",
    "ConfigMetadata",
    "ContextConfig",
    "Contexts",
    "Exceptions",
    "NomojiConfig",
    "NomojiConfigUpdate",
    "Severity",
    "ShareConfigResult",
]
