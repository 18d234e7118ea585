"""Claude Code subagent (.claude/agents/nomoji.mdc) rendering."""

from __future__ import annotations

import re

from nomoji.rules.loader import render_template
from nomoji.schemas.config import NomojiConfig, Severity

SUBAGENT_TOOLS: tuple[str, ...] = ("Read", "Grep", "Glob", "Bash")

# Wrong/correct pairs shown under "Strict Rules", in this order, for each enabled context.
DETECTION_EXAMPLES: dict[str, str] = {
    "console": """**Console Output & Logging:**
```javascript
// ❌ WRONG
console.log('✅ Server started');
console.error('❌ Failed to connect');

// ✓ CORRECT
console.log('Server started successfully');
console.error('Failed to connect to database');
```""",
    "documentation": """**Documentation:**
```markdown
❌ WRONG:
# 🚀 Quick Start Guide

✓ CORRECT:
# Quick Start Guide
```""",
    "cli": """**CLI Output:**
```bash
# ❌ WRONG
echo "✨ Processing..."

# ✓ CORRECT
echo "[INFO] Processing files..."
```""",
    "comments": """**Code Comments:**
```typescript
// ❌ WRONG
// TODO: ⚡ Optimize this

// ✓ CORRECT
// TODO: Optimize this function
```""",
    "commitMessages": """**Git Commits:**
```
❌ WRONG:
feat: ✨ add feature

✓ CORRECT:
feat: add user authentication
```""",
}

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")


def readable_context_name(name: str) -> str:
    """commitMessages -> "commit messages"."""
    return _CAMEL_BOUNDARY.sub(r" \1", name).lower().strip()


def most_strict_severity(config: NomojiConfig) -> Severity:
    """Strictest severity among enabled contexts; relaxed when none are enabled."""
    severities = {context.severity for _, context in config.context_items() if context.enabled}
    for severity in (Severity.STRICT, Severity.MODERATE):
        if severity in severities:
            return severity
    return Severity.RELAXED


def enabled_context_names(config: NomojiConfig) -> list[str]:
    return [
        readable_context_name(name)
        for name, context in config.context_items()
        if context.enabled
    ]


def _exception_sections(config: NomojiConfig) -> str:
    exceptions = config.exceptions
    if exceptions is None:
        return ""
    sections = []
    if exceptions.allowed_contexts:
        listing = "\n".join(f"- {name}" for name in exceptions.allowed_contexts)
        sections.append(f"## Allowed Contexts\n\nEmojis may be acceptable in:\n{listing}\n\n")
    if exceptions.allowed_emojis:
        sections.append(
            "## Allowed Emojis\n\nThese specific emojis are permitted:\n"
            f"{', '.join(exceptions.allowed_emojis)}\n\n"
        )
    return "".join(sections)


def generate_claude_subagent(config: NomojiConfig) -> str:
    """Render the subagent definition.

    The global enabled flag is not consulted: a disabled config still gets a
    full subagent built from its per-context settings.
    """
    contexts = dict(config.context_items())
    enabled_contexts = enabled_context_names(config)
    examples = [
        example
        for name, example in DETECTION_EXAMPLES.items()
        if contexts[name].enabled
    ]
    return render_template(
        "claude_subagent",
        TOOLS=", ".join(SUBAGENT_TOOLS),
        ENABLED_CONTEXTS="\n".join(f"   - {name}" for name in enabled_contexts),
        DETECTION_EXAMPLES="\n\n".join(examples),
        EXCEPTION_SECTIONS=_exception_sections(config),
        SEVERITY=most_strict_severity(config).value,
        ACTIVE_CONTEXT_COUNT=str(len(enabled_contexts)),
    )
