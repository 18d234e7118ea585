"""Emoji detection over fixed code-point ranges.

Matching is per code point: a ZWJ sequence or a flag counts as several
matches, and joiners/variation selectors are matched on their own.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EMOJI_PATTERN = re.compile(
    "["
    "\U0001F600-\U0001F64F"  # emoticons
    "\U0001F300-\U0001F5FF"  # symbols & pictographs
    "\U0001F680-\U0001F6FF"  # transport & map
    "\U0001F1E0-\U0001F1FF"  # regional indicators
    "\u2600-\u26FF"  # misc symbols
    "\u2700-\u27BF"  # dingbats
    "\U0001F900-\U0001F9FF"  # supplemental symbols & pictographs
    "\U0001FA00-\U0001FA6F"  # chess symbols
    "\U0001FA70-\U0001FAFF"  # symbols & pictographs extended-A
    "\U0001F004"  # mahjong red dragon
    "\U0001F0CF"  # joker
    "\U0001F170-\U0001F251"  # enclosed alphanumerics / ideographic
    "\U0001F191-\U0001F19A"
    "\u200D"  # zero width joiner
    "\uFE0F"  # variation selector-16
    "\U000E0020-\U000E007F"  # tags
    "]"
)

EMOJI_CATEGORIES: dict[str, tuple[str, ...]] = {
    "faces": ("😀", "😃", "😄", "😁", "😆", "😅", "🤣", "😂", "🙂", "🙃", "😉", "😊", "😇"),
    "gestures": ("👍", "👎", "👌", "🤝", "🤞", "👏", "🙌", "👋", "🤚"),
    "symbols": ("✅", "❌", "⚠️", "🚨", "💡", "🔥", "⭐", "✨"),
    "objects": ("📝", "📄", "📊", "📈", "📉", "🎯", "🔨", "🔧", "⚙️"),
    "nature": ("🌟", "🌈", "🌍", "🌎", "🌏", "🌙", "⚡"),
}


class EmojiStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    count: int = Field(..., description="Total emoji code points found")
    unique: list[str] = Field(..., description="Distinct emojis in first-seen order")
    has_emojis: bool
    clean_text: str = Field(..., description="Input with emojis removed, trimmed at both ends")


def contains_emoji(text: str) -> bool:
    return EMOJI_PATTERN.search(text) is not None


def extract_emojis(text: str) -> list[str]:
    """Distinct matches, first occurrence first."""
    return list(dict.fromkeys(EMOJI_PATTERN.findall(text)))


def remove_emojis(text: str) -> str:
    return EMOJI_PATTERN.sub("", text).strip()


def count_emojis(text: str) -> int:
    return len(EMOJI_PATTERN.findall(text))


def is_emoji_allowed(emoji: str, allowed: list[str] | tuple[str, ...]) -> bool:
    return emoji in allowed


def is_emoji_in_category(emoji: str, category: str) -> bool:
    """True if emoji is listed under category. Unknown categories raise KeyError."""
    return emoji in EMOJI_CATEGORIES[category]


def analyze(text: str) -> EmojiStats:
    """Count, list and strip the emojis in text."""
    unique = extract_emojis(text)
    return EmojiStats(
        count=count_emojis(text),
        unique=unique,
        has_emojis=bool(unique),
        clean_text=remove_emojis(text),
    )
