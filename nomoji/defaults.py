"""Default configuration and named presets.

Both are built once at import as validated models and never mutated; the
accessors hand out fresh plain dicts so callers can merge into them freely.
"""

from __future__ import annotations

import copy
from types import MappingProxyType
from typing import Any, Mapping

from nomoji.schemas.config import NomojiConfig

_DEFAULT_DOCUMENT: dict[str, Any] = {
    "version": "1.0.0",
    "enabled": True,
    "contexts": {
        "documentation": {
            "enabled": True,
            "severity": "strict",
            "customMessage": "Do not use emojis in documentation, markdown files, or README files.",
        },
        "console": {
            "enabled": True,
            "severity": "strict",
            "customMessage": "Do not use emojis in console.log, console.error, or any console output.",
        },
        "cli": {
            "enabled": True,
            "severity": "strict",
            "customMessage": "Do not use emojis in CLI tool output, progress bars, or command-line messages.",
        },
        "logging": {
            "enabled": True,
            "severity": "strict",
            "customMessage": "Do not use emojis in application logs, error messages, or logging statements.",
        },
        "comments": {
            "enabled": True,
            "severity": "moderate",
            "customMessage": "Avoid using emojis in code comments unless absolutely necessary for clarity.",
        },
        "commitMessages": {
            "enabled": True,
            "severity": "strict",
            "customMessage": "Do not use emojis in git commit messages.",
        },
        "userInterface": {
            "enabled": False,
            "severity": "relaxed",
            "customMessage": "Emojis may be used in user-facing UI when appropriate for UX.",
        },
    },
    "exceptions": {
        "allowedEmojis": [],
        "allowedContexts": ["userInterface"],
    },
}


def _preset(contexts: dict[str, tuple[bool, str]], exceptions: dict | None = None) -> NomojiConfig:
    document = copy.deepcopy(_DEFAULT_DOCUMENT)
    document["contexts"] = {
        name: {"enabled": enabled, "severity": severity}
        for name, (enabled, severity) in contexts.items()
    }
    if exceptions is not None:
        document["exceptions"] = exceptions
    return NomojiConfig.model_validate(document)


DEFAULT_CONFIG: NomojiConfig = NomojiConfig.model_validate(_DEFAULT_DOCUMENT)

PRESETS: Mapping[str, NomojiConfig] = MappingProxyType(
    {
        "strict": _preset(
            {
                "documentation": (True, "strict"),
                "console": (True, "strict"),
                "cli": (True, "strict"),
                "logging": (True, "strict"),
                "comments": (True, "strict"),
                "commitMessages": (True, "strict"),
                "userInterface": (True, "strict"),
            },
            exceptions={"allowedEmojis": [], "allowedContexts": []},
        ),
        "moderate": _preset(
            {
                "documentation": (True, "moderate"),
                "console": (True, "moderate"),
                "cli": (True, "moderate"),
                "logging": (True, "strict"),
                "comments": (False, "relaxed"),
                "commitMessages": (True, "moderate"),
                "userInterface": (False, "relaxed"),
            }
        ),
        "relaxed": _preset(
            {
                "documentation": (True, "relaxed"),
                "console": (False, "relaxed"),
                "cli": (True, "relaxed"),
                "logging": (True, "strict"),
                "comments": (False, "relaxed"),
                "commitMessages": (False, "relaxed"),
                "userInterface": (False, "relaxed"),
            }
        ),
    }
)


def default_config_document() -> dict[str, Any]:
    """Fresh camelCase copy of the default configuration."""
    return DEFAULT_CONFIG.to_document()


def preset_document(name: str) -> dict[str, Any]:
    """Fresh camelCase copy of a preset. Raises KeyError for unknown names."""
    return PRESETS[name].to_document()


def all_preset_documents() -> dict[str, dict[str, Any]]:
    return {name: preset.to_document() for name, preset in PRESETS.items()}
