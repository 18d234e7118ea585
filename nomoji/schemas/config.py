"""Emoji usage configuration schemas.

Field names are snake_case in Python and camelCase on the wire
(customMessage, commitMessages, allowedEmojis, ...).
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

CONTEXT_NAMES: tuple[str, ...] = (
    "documentation",
    "console",
    "cli",
    "logging",
    "comments",
    "commitMessages",
    "userInterface",
)

PRESET_NAMES: tuple[str, ...] = ("strict", "moderate", "relaxed")


def _reject_lone_surrogates(value: str) -> str:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise ValueError("text contains unpaired surrogate characters") from None
    return value


# Strings that must survive UTF-8 encoding for storage and responses.
Text = Annotated[str, AfterValidator(_reject_lone_surrogates)]


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("must not be null")
    return value


class Severity(str, Enum):
    """Policy strength for a context: strict disallows, moderate discourages, relaxed allows."""

    STRICT = "strict"
    MODERATE = "moderate"
    RELAXED = "relaxed"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ContextConfig(_CamelModel):
    """Emoji policy for one context."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = Field(..., description="Whether this context is enabled")
    severity: Severity = Field(..., description="Severity level for emoji restrictions")
    custom_message: Text | None = Field(None, description="Custom message for this context")


class Contexts(_CamelModel):
    """All seven contexts. Unknown context names are rejected."""

    model_config = ConfigDict(extra="forbid")

    documentation: ContextConfig
    console: ContextConfig
    cli: ContextConfig
    logging: ContextConfig
    comments: ContextConfig
    commit_messages: ContextConfig
    user_interface: ContextConfig


class ContextsUpdate(_CamelModel):
    """Any subset of the seven contexts, as sent by a client."""

    model_config = ConfigDict(extra="forbid")

    documentation: ContextConfig | None = None
    console: ContextConfig | None = None
    cli: ContextConfig | None = None
    logging: ContextConfig | None = None
    comments: ContextConfig | None = None
    commit_messages: ContextConfig | None = None
    user_interface: ContextConfig | None = None

    @field_validator("*", mode="before")
    @classmethod
    def context_not_null(cls, v):
        """Absent contexts are left as they are; an explicit null is rejected."""
        return _reject_null(v)


class Exceptions(_CamelModel):
    """Emojis and contexts exempt from the rules."""

    allowed_emojis: list[Text] | None = Field(
        None, description="List of emojis that are always allowed"
    )
    allowed_contexts: list[Text] | None = Field(
        None, description="List of contexts where emojis are always allowed"
    )


class ConfigMetadata(_CamelModel):
    created_at: str = Field(..., description="ISO 8601 timestamp of creation")
    updated_at: str = Field(..., description="ISO 8601 timestamp of last update")
    user_id: str | None = Field(None, description="User identifier")


class NomojiConfig(_CamelModel):
    """A complete, normalized emoji usage configuration."""

    version: str = Field(..., description="Configuration version")
    enabled: bool = Field(..., description="Whether nomoji is globally enabled")
    contexts: Contexts
    exceptions: Exceptions | None = None
    custom_rules: list[Text] | None = Field(None, description="Additional custom rules")
    metadata: ConfigMetadata | None = None

    def to_document(self) -> dict[str, Any]:
        """Wire/storage form: camelCase keys, unset optional fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def context_items(self) -> list[tuple[str, ContextConfig]]:
        """(wire name, context) pairs in canonical order."""
        return [
            (name, getattr(self.contexts, field_name))
            for name, field_name in zip(CONTEXT_NAMES, Contexts.model_fields)
        ]


class NomojiConfigUpdate(_CamelModel):
    """Partial configuration accepted by update and share requests.

    version and metadata are server-controlled and dropped if sent.
    """

    enabled: bool | None = None
    contexts: ContextsUpdate | None = None
    exceptions: Exceptions | None = None
    custom_rules: list[Text] | None = None

    @field_validator("enabled", "contexts", mode="before")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)

    def to_partial(self) -> dict[str, Any]:
        """Fields the client actually sent, camelCase, explicit nulls dropped."""
        return self.model_dump(
            mode="json", by_alias=True, exclude_unset=True, exclude_none=True
        )


class AnalyzeRequest(BaseModel):
    text: Text = Field(..., description="Text to analyze for emoji usage")


class ShareConfigResult(_CamelModel):
    config_id: str
    url: str
