"""Emoji analysis route."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from nomoji.api.errors import success_envelope
from nomoji.schemas.config import AnalyzeRequest
from nomoji.services.analytics import Analytics, get_analytics
from nomoji.services.emoji import analyze

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/analyze")
def api_analyze(
    data: AnalyzeRequest,
    analytics: Analytics = Depends(get_analytics),
) -> dict:
    """Count, list and strip the emojis in the posted text."""
    stats = analyze(data.text)
    logger.debug(
        "Text analyzed: text_length=%d has_emojis=%s emoji_count=%d",
        len(data.text),
        stats.has_emojis,
        stats.count,
    )
    analytics.track_analysis(
        has_emojis=stats.has_emojis, emoji_count=stats.count, text_length=len(data.text)
    )
    return success_envelope(
        {
            **stats.model_dump(by_alias=True),
            "violations": ["Text contains emojis"] if stats.has_emojis else [],
        }
    )
