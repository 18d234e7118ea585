"""Rule and template download routes.

Each route renders the user's current configuration (the default when none
is stored) in one assistant-specific format.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.orm import Session

from nomoji.api.deps import valid_assistant, valid_user_id
from nomoji.db.session import get_db
from nomoji.rules import (
    Assistant,
    RuleFormat,
    generate_json,
    generate_legacy_cursor_rules,
    generate_template,
    render,
)
from nomoji.services.config_store import get_or_create_user_config

router = APIRouter()

MDC_DISPOSITION = 'attachment; filename="nomoji.mdc"'


@router.get("/rules/{user_id}", response_class=PlainTextResponse)
def api_get_rules(
    user_id: str = Depends(valid_user_id),
    db: Session = Depends(get_db),
) -> PlainTextResponse:
    """Plain-text rules. Empty body when the configuration is disabled."""
    config = get_or_create_user_config(db, user_id)
    return PlainTextResponse(
        render(config, RuleFormat.PLAIN),
        headers={"Content-Disposition": 'inline; filename="nomoji-rules.txt"'},
    )


@router.get("/claude/{user_id}", response_class=PlainTextResponse)
def api_get_claude_subagent(
    user_id: str = Depends(valid_user_id),
    db: Session = Depends(get_db),
) -> PlainTextResponse:
    """Claude Code subagent file for .claude/agents/."""
    config = get_or_create_user_config(db, user_id)
    return PlainTextResponse(
        render(config, RuleFormat.CLAUDE_SUBAGENT),
        media_type="text/markdown",
        headers={"Content-Disposition": MDC_DISPOSITION},
    )


@router.get("/cursor-rules/{user_id}", response_class=PlainTextResponse)
def api_get_cursor_rules(
    user_id: str = Depends(valid_user_id),
    db: Session = Depends(get_db),
) -> PlainTextResponse:
    """Cursor rules file for .cursor/rules/."""
    config = get_or_create_user_config(db, user_id)
    return PlainTextResponse(
        render(config, RuleFormat.CURSOR_MDC),
        media_type="text/markdown",
        headers={"Content-Disposition": MDC_DISPOSITION},
    )


@router.get("/cursorrules/{user_id}", response_class=PlainTextResponse, deprecated=True)
def api_get_legacy_cursorrules(
    user_id: str = Depends(valid_user_id),
    db: Session = Depends(get_db),
) -> PlainTextResponse:
    """Deprecated .cursorrules stub. Use /api/cursor-rules/{user_id}."""
    config = get_or_create_user_config(db, user_id)
    return PlainTextResponse(
        generate_legacy_cursor_rules(config),
        headers={
            "Content-Disposition": 'attachment; filename=".cursorrules"',
            "X-Deprecated": "true",
            "X-Replacement-Endpoint": "/api/cursor-rules/:userId",
        },
    )


@router.get("/template/{user_id}/{assistant}", response_class=PlainTextResponse)
def api_get_template(
    user_id: str = Depends(valid_user_id),
    assistant: Assistant = Depends(valid_assistant),
    db: Session = Depends(get_db),
) -> PlainTextResponse:
    config = get_or_create_user_config(db, user_id)
    return PlainTextResponse(generate_template(config, assistant))


@router.get("/json/{user_id}")
def api_get_json(
    user_id: str = Depends(valid_user_id),
    db: Session = Depends(get_db),
) -> Response:
    config = get_or_create_user_config(db, user_id)
    return Response(generate_json(config), media_type="application/json")
