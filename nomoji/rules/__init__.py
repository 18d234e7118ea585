"""
Rule generation for AI coding assistants.

Templates with fixed prose live as .md files in nomoji/rules/templates/;
structured outputs are built in code.
"""

from nomoji.rules.generator import (
    ASSISTANT_FORMATS,
    RENDERERS,
    Assistant,
    RuleFormat,
    generate_json,
    generate_legacy_cursor_rules,
    generate_rules,
    generate_template,
    render,
)

__all__ = [
    "ASSISTANT_FORMATS",
    "RENDERERS",
    "Assistant",
    "RuleFormat",
    "generate_json",
    "generate_legacy_cursor_rules",
    "generate_rules",
    "generate_template",
    "render",
]
