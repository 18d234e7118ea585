"""Cursor rules (.cursor/rules/nomoji.mdc) rendering."""

from __future__ import annotations

import re

from nomoji.schemas.config import NomojiConfig, Severity

# (heading, "Do not use emojis in" items, closing guidance) per strict-capable context.
_STRICT_SECTIONS: dict[str, tuple[str, tuple[str, ...], str]] = {
    "documentation": (
        "Documentation & Markdown",
        (
            "README files",
            "Markdown documentation",
            "API documentation",
            "Code examples in docs",
            "Headers, lists, or paragraphs",
        ),
        "Use clear, professional language without emoji decoration.",
    ),
    "console": (
        "Console Output",
        (
            "`console.log()`, `console.error()`, `console.warn()`",
            "Terminal output",
            "Standard output/error streams",
            "Debug messages",
        ),
        "Use plain text for all terminal output.",
    ),
    "cli": (
        "CLI Tools & Command-Line Output",
        (
            "Command-line interface output",
            "Progress bars",
            "Spinners",
            "Status messages",
            "Help text",
        ),
        "Use ASCII characters and plain text only.",
    ),
    "logging": (
        "Logging & Error Messages",
        (
            "Application logs",
            "Error messages",
            "Debug output",
            "Logging statements",
            "Stack traces",
        ),
        "Logs should be machine-parseable and professional.",
    ),
    "comments": (
        "Code Comments",
        (
            "Inline comments",
            "JSDoc/TSDoc comments",
            "Docstrings",
            "Code documentation",
        ),
        "Write clear, descriptive comments using words only.",
    ),
    "commitMessages": (
        "Git Commit Messages",
        (
            "Commit messages",
            "PR titles and descriptions",
            "Branch names",
        ),
        "Use conventional commit format with plain text.",
    ),
}

_RATIONALE = (
    "Reduce accessibility for screen readers",
    "Create inconsistent rendering across platforms",
    "Make text harder to search and parse programmatically",
    "Appear unprofessional in enterprise contexts",
    "Clutter console output and logs",
)

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")


def display_context_name(name: str) -> str:
    """commitMessages -> "Commit Messages"."""
    spaced = _CAMEL_BOUNDARY.sub(r" \1", name).strip()
    return spaced[:1].upper() + spaced[1:]


def generate_cursor_rules(config: NomojiConfig) -> str:
    contexts = dict(config.context_items())
    lines = [
        "---",
        "title: nomoji.dev - Emoji Control Rules",
        f"version: {config.version}",
        "priority: high",
        "description: Control emoji usage in AI-generated code and documentation",
        "---",
        "",
        "# Emoji Usage Rules",
        "",
        "This project enforces professional, emoji-free code and documentation.",
        "",
        "## Strict Contexts",
        "",
    ]

    for name, (heading, items, guidance) in _STRICT_SECTIONS.items():
        if not contexts[name].enabled:
            continue
        lines.append(f"### {heading}")
        lines.append("Do not use emojis in:")
        lines.extend(f"- {item}" for item in items)
        lines.extend(["", guidance, ""])

    relaxed = [
        (name, context)
        for name, context in contexts.items()
        if not context.enabled or context.severity is Severity.RELAXED
    ]
    if relaxed:
        lines.extend(["## Relaxed Contexts", ""])
        for name, context in relaxed:
            lines.append(f"### {display_context_name(name)}")
            lines.append(context.custom_message or "Emojis may be used when appropriate.")
            lines.append("")

    lines.extend(["## Rationale", "", "Emojis in code and documentation:"])
    lines.extend(f"- {reason}" for reason in _RATIONALE)
    lines.extend(
        [
            "",
            "## Configuration",
            "",
            "Generated from: https://nomoji.dev",
            "Update your rules at: https://nomoji.dev/configure",
            "",
            "---",
            "",
            "**Remember**: Professional code should prioritize clarity and consistency "
            "over decoration. When in doubt, do not use emojis.",
        ]
    )
    return "\n".join(lines)
