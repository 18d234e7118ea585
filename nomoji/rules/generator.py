"""Rule generation: render a configuration into assistant-specific text.

Every output format is a pure function of the normalized config, registered in
RENDERERS. Only the legacy .cursorrules stub embeds the current time.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum

from nomoji.rules.claude import generate_claude_subagent
from nomoji.rules.cursor import generate_cursor_rules
from nomoji.rules.loader import render_template
from nomoji.schemas.config import NomojiConfig


class RuleFormat(str, Enum):
    PLAIN = "plain"
    CLAUDE_SUBAGENT = "claude-subagent"
    CURSOR_MDC = "cursor-mdc"
    COPILOT = "copilot"
    GEMINI = "gemini"
    OPENAI = "openai"
    OPENAI_CODEX = "openai-codex"
    GENERIC = "generic"
    JSON = "json"


class Assistant(str, Enum):
    """Assistants accepted by the template endpoint."""

    CLAUDE = "claude"
    CURSOR = "cursor"
    COPILOT = "copilot"
    GEMINI = "gemini"
    OPENAI = "openai"
    OPENAI_CODEX = "openai-codex"
    CODEIUM = "codeium"
    TABNINE = "tabnine"
    GENERIC = "generic"


ASSISTANT_FORMATS: dict[Assistant, RuleFormat] = {
    Assistant.CLAUDE: RuleFormat.CLAUDE_SUBAGENT,
    Assistant.CURSOR: RuleFormat.CURSOR_MDC,
    Assistant.COPILOT: RuleFormat.COPILOT,
    Assistant.GEMINI: RuleFormat.GEMINI,
    Assistant.OPENAI: RuleFormat.OPENAI,
    Assistant.OPENAI_CODEX: RuleFormat.OPENAI_CODEX,
    Assistant.CODEIUM: RuleFormat.PLAIN,
    Assistant.TABNINE: RuleFormat.PLAIN,
    Assistant.GENERIC: RuleFormat.GENERIC,
}

# (context, block title, severity-prefixed fallback text, bullets) for the plain rules.
# userInterface has no block.
_PLAIN_BLOCKS: tuple[tuple[str, str, str, tuple[str, ...]], ...] = (
    (
        "documentation",
        "DOCUMENTATION & MARKDOWN:",
        "Do not use emojis in markdown files, README files, or documentation.",
        (
            "- This includes headers, lists, paragraphs, and code examples.",
            "- Use clear, professional language without emoji decoration.",
        ),
    ),
    (
        "console",
        "CONSOLE OUTPUT:",
        "Do not use emojis in console.log, console.error, console.warn, or any console output.",
        ("- Use plain text for all terminal output.",),
    ),
    (
        "cli",
        "CLI TOOLS & COMMAND-LINE OUTPUT:",
        "Do not use emojis in CLI tool output, progress bars, spinners, or command-line messages.",
        ("- Use ASCII characters and plain text only.",),
    ),
    (
        "logging",
        "LOGGING & ERROR MESSAGES:",
        "Do not use emojis in application logs, error messages, debug output, "
        "or logging statements.",
        ("- Logs should be machine-parseable and professional.",),
    ),
    (
        "comments",
        "CODE COMMENTS:",
        "Avoid using emojis in code comments.",
        ("- Write clear, descriptive comments using words only.",),
    ),
    (
        "commitMessages",
        "GIT COMMIT MESSAGES:",
        "Do not use emojis in git commit messages.",
        ("- Use conventional commit format with plain text.",),
    ),
)


def generate_rules(config: NomojiConfig) -> str:
    """Plain-text rules. Empty when the configuration is globally disabled."""
    if not config.enabled:
        return ""

    contexts = dict(config.context_items())
    lines = ["EMOJI USAGE RULES:", ""]

    for name, title, fallback, bullets in _PLAIN_BLOCKS:
        context = contexts[name]
        if not context.enabled:
            continue
        lines.append(title)
        lines.append(context.custom_message or f"- {context.severity.value.upper()}: {fallback}")
        lines.extend(bullets)
        lines.append("")

    exceptions = config.exceptions
    if exceptions is not None:
        if exceptions.allowed_emojis:
            lines.append("EXCEPTIONS:")
            lines.append(
                f"- The following emojis are allowed: {', '.join(exceptions.allowed_emojis)}"
            )
            lines.append("")
        if exceptions.allowed_contexts:
            lines.append("ALLOWED CONTEXTS:")
            lines.append(f"- Emojis may be used in: {', '.join(exceptions.allowed_contexts)}")
            lines.append("")

    if config.custom_rules:
        lines.append("CUSTOM RULES:")
        lines.extend(f"- {rule}" for rule in config.custom_rules)
        lines.append("")

    lines.append(
        "REMEMBER: Professional code should prioritize clarity and consistency over decoration."
    )
    lines.append("When in doubt, do not use emojis.")
    return "\n".join(lines)


def _wrapped(template_name: str) -> Callable[[NomojiConfig], str]:
    def render_wrapped(config: NomojiConfig) -> str:
        return render_template(
            template_name,
            RULES=generate_rules(config),
            STATUS="Enabled" if config.enabled else "Disabled",
            VERSION=config.version,
        )

    render_wrapped.__name__ = f"render_{template_name}"
    return render_wrapped


def _render_copilot(config: NomojiConfig) -> str:
    return render_template("copilot", RULES=generate_rules(config))


def generate_json(config: NomojiConfig) -> str:
    """JSON document for programmatic use, indented by two spaces."""
    return json.dumps(
        {
            "nomoji": {
                "version": config.version,
                "enabled": config.enabled,
                "rules": generate_rules(config),
                "config": config.to_document(),
            }
        },
        indent=2,
        ensure_ascii=False,
    )


RENDERERS: dict[RuleFormat, Callable[[NomojiConfig], str]] = {
    RuleFormat.PLAIN: generate_rules,
    RuleFormat.GENERIC: generate_rules,
    RuleFormat.CLAUDE_SUBAGENT: generate_claude_subagent,
    RuleFormat.CURSOR_MDC: generate_cursor_rules,
    RuleFormat.COPILOT: _render_copilot,
    RuleFormat.GEMINI: _wrapped("gemini"),
    RuleFormat.OPENAI: _wrapped("openai"),
    RuleFormat.OPENAI_CODEX: _wrapped("openai_codex"),
    RuleFormat.JSON: generate_json,
}


def render(config: NomojiConfig, rule_format: RuleFormat | str) -> str:
    """Render config in the given format. Raises ValueError for unknown format names."""
    return RENDERERS[RuleFormat(rule_format)](config)


def generate_template(config: NomojiConfig, assistant: Assistant | str) -> str:
    """Render config for an assistant. Raises ValueError for unknown assistants."""
    return render(config, ASSISTANT_FORMATS[Assistant(assistant)])


def generate_legacy_cursor_rules(config: NomojiConfig, now: datetime | None = None) -> str:
    """Deprecated .cursorrules stub pointing at the .mdc endpoint."""
    generated_at = (now or datetime.now(UTC)).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
    return render_template("cursor_legacy", GENERATED_AT=generated_at, VERSION=config.version)
