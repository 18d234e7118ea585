"""
Rule template loader.

Loads .md templates from nomoji/rules/templates/ and renders them
by substituting {{VARIABLE_NAME}} placeholders.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

# Directory where rule template .md files live
_TEMPLATES_DIR = Path(__file__).parent / "templates"

# Pattern to match {{VARIABLE_NAME}} placeholders
_PLACEHOLDER_RE = re.compile(r"\{\{([A-Z_][A-Z0-9_]*)\}\}")


@lru_cache(maxsize=32)
def load_template(template_name: str) -> str:
    """Load a rule template by name.

    Args:
        template_name: Name of the template file (without .md extension).
            Example: "copilot"

    Returns:
        The raw template with {{PLACEHOLDER}} markers intact. The file's
        final newline is dropped, so a template file that should render
        with a trailing newline ends with a blank line.

    Raises:
        FileNotFoundError: If the template file does not exist.
    """
    path = _TEMPLATES_DIR / f"{template_name}.md"
    if not path.is_file():
        available = sorted(p.stem for p in _TEMPLATES_DIR.glob("*.md"))
        raise FileNotFoundError(
            f"Rule template '{template_name}' not found at {path}. "
            f"Available templates: {available}"
        )
    content = path.read_text(encoding="utf-8")
    return content[:-1] if content.endswith("\n") else content


def render_template(template_name: str, **variables: str) -> str:
    """Load a template and fill in {{VARIABLE}} placeholders.

    Substitution is a single pass over the template, so values that
    themselves contain {{...}} (user-supplied rules, emojis) are copied
    through untouched.

    Raises:
        FileNotFoundError: If the template file does not exist.
        ValueError: If the template uses a placeholder not given in variables.
    """
    template = load_template(template_name)
    placeholders = set(_PLACEHOLDER_RE.findall(template))
    missing = placeholders - variables.keys()
    if missing:
        raise ValueError(
            f"Unfilled placeholders in template '{template_name}': {sorted(missing)}. "
            f"Provide these as keyword arguments."
        )
    for var_name in variables.keys() - placeholders:
        logger.warning(
            "Variable '%s' provided but not found in template '%s'",
            var_name,
            template_name,
        )
    return _PLACEHOLDER_RE.sub(lambda m: str(variables[m.group(1)]), template)
