"""Templated confidence notes attached to each recommendation.

Tagline selection is driven by :func:`deterministic_index`, a pure string
hash of the outfit's item ids, so the same outfit always yields the same note.
Callers wanting variety pass a ``random.Random``; the pipeline itself never
creates one.
"""

from __future__ import annotations

import logging
import random
import re
from datetime import datetime
from typing import List, Optional, Sequence

from mirror_app.logging_config import log_event
from models.context import RecommendationContext
from models.feedback import OutfitFeedback
from models.wardrobe_item import WardrobeItem, merged_colors

logger = logging.getLogger(__name__)

FALLBACK_NOTE = "You look amazing today! You're ready and confident."

BASE_NOTES = {
    "loved": "You loved how this felt last time, lean into that confidence today.",
    "rediscover": "It's time to rediscover this piece you haven't worn in a while and let it shine again.",
    "default": "You're ready for the day, calm, poised, and absolutely you.",
}

TAGLINES = (
    "Your style tells a story.",
    "Own your look today!",
    "Confidence looks good on you!",
    "Let your style lead the way.",
    "Your look is pure you.",
)
TAGLINE_FLOURISHES = ("✨", "\U0001F4AB", "\U0001F31F", "\U0001F451", "\U0001F496")

WEATHER_TAILS = {
    "rainy": " This choice suits today's rainy mood without sacrificing comfort.",
    "sunny": " Bright weather pairs well with this confident look.",
}

LOVED_ITEM_RATING = 4.5
LOVED_FEEDBACK_RATING = 4.0
HIGH_CONFIDENCE_SCORE = 0.9
SHORT_NOTE_LENGTH = 35

_UNSAFE_CHARACTERS = re.compile(r"[^\w\s.,!?'-]", re.ASCII)


def deterministic_index(seed: str, size: int) -> int:
    """Map a seed string to ``[0, size)`` with a 31-multiplier 32-bit hash.

    Intentionally deterministic so tests and repeated requests see stable text.
    """

    if size <= 0:
        raise ValueError("size must be positive")
    value = 0
    for character in seed:
        value = (value * 31 + ord(character)) & 0xFFFFFFFF
    return value % size


def sanitize_note(text: str) -> str:
    """Strip characters screen readers stumble over and collapse whitespace."""

    return re.sub(r"\s+", " ", _UNSAFE_CHARACTERS.sub("", text)).strip()


def _sentiment(
    items: Sequence[WardrobeItem], previous_feedback: Sequence[OutfitFeedback], now: datetime
) -> str:
    item_ids = {item.item_id for item in items}
    loved_items = any(
        item.usage_stats.average_rating >= LOVED_ITEM_RATING or item.usage_stats.compliments_received > 0
        for item in items
    )
    loved_feedback = any(
        item_ids.intersection(entry.item_ids)
        and (
            entry.confidence_rating >= LOVED_FEEDBACK_RATING
            or entry.social_feedback.compliments_received > 0
        )
        for entry in previous_feedback
    )
    if loved_items or loved_feedback:
        return "loved"
    if any(item.is_neglected(now) for item in items):
        return "rediscover"
    return "default"


def _palette_phrase(colors: List[str]) -> str:
    if not colors:
        return "Your look balances ease and intention."
    return f"The {' and '.join(colors[:3])} palette feels elegant and confident."


def _compose(
    items: Sequence[WardrobeItem],
    context: RecommendationContext,
    note_style: str,
    confidence_score: Optional[float],
    previous_feedback: Sequence[OutfitFeedback],
) -> str:
    sentiment = _sentiment(items, previous_feedback, context.date)
    colors = merged_colors(list(items))
    parts = [BASE_NOTES[sentiment]]

    if note_style == "witty":
        parts.append("You're set to turn heads, subtly!")
    elif note_style == "poetic":
        parts.append(_palette_phrase(colors))
        parts.append("Move through the day with quiet brilliance.")
    elif colors:
        parts.append(_palette_phrase(colors))

    if context.style_profile.preferred_styles:
        parts.append(f"Your {context.style_profile.preferred_styles[0]} style shines through.")

    high_confidence = sentiment == "loved" or (
        confidence_score is not None and confidence_score >= HIGH_CONFIDENCE_SCORE
    )
    if high_confidence and note_style != "poetic":
        parts.append("You look amazing, absolutely ready.")

    return " ".join(parts) + WEATHER_TAILS.get(context.weather.condition, "")


def generate_confidence_note(
    items: Sequence[WardrobeItem],
    context: RecommendationContext,
    *,
    note_style: Optional[str] = None,
    styled: bool = False,
    confidence_score: Optional[float] = None,
    previous_feedback: Optional[Sequence[OutfitFeedback]] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Return a short, screen-reader-safe encouragement for an outfit.

    Never raises. ``styled`` notes end with a tagline and an emoji flourish;
    plain notes append the tagline in lowercase after a comma.
    """

    try:
        if not items:
            return FALLBACK_NOTE
        style = note_style or context.user_preferences.confidence_note_style
        history = context.feedback_history if previous_feedback is None else previous_feedback
        note = sanitize_note(_compose(items, context, style, confidence_score, history))

        seed = "|".join(item.item_id for item in items)
        index = rng.randrange(len(TAGLINES)) if rng is not None else deterministic_index(seed, len(TAGLINES))
        tagline = TAGLINES[index]
        if styled:
            note = f"{note} {tagline} {TAGLINE_FLOURISHES[index]}"
            if len(note) < SHORT_NOTE_LENGTH:
                note += " You've got this."
            return note
        return f"{note.rstrip('.!')}, {tagline[0].lower()}{tagline[1:]}"
    except Exception:  # noqa: BLE001
        log_event(logger, logging.WARNING, "confidence_note_failed", exc_info=True)
        return FALLBACK_NOTE


__all__ = [
    "FALLBACK_NOTE",
    "TAGLINES",
    "deterministic_index",
    "generate_confidence_note",
    "sanitize_note",
]
