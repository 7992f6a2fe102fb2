"""Weather and occasion compatibility scoring.

Temperatures are Fahrenheit. Each item starts from a neutral 0.5 and is
moved by the first matching rule of its temperature band, then nudged by the
day's condition. The outfit score is the mean over its items.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from mirror_app.logging_config import log_event
from models.context import CalendarContext, WeatherContext
from models.wardrobe_item import WardrobeItem

logger = logging.getLogger(__name__)

FREEZING_MAX_F = 32.0
COLD_MAX_F = 50.0
MILD_MAX_F = 77.0
WARM_MAX_F = 86.0

BASE_ITEM_SCORE = 0.5
NO_OCCASION_SCORE = 0.8

OCCASION_FORMAL_TAGS = frozenset({"formal", "business", "elegant"})
OCCASION_CASUAL_TAGS = frozenset({"casual", "everyday", "relaxed"})

_ACCEPTED_CLASSES = {
    "formal": {"formal"},
    "special": {"formal"},
    "casual": {"casual", "neutral"},
    "business": {"formal", "neutral"},
}


def _clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return max(lower, min(upper, value))


def temperature_band(temperature: float) -> str:
    if temperature <= FREEZING_MAX_F:
        return "freezing"
    if temperature <= COLD_MAX_F:
        return "cold"
    if temperature <= MILD_MAX_F:
        return "mild"
    if temperature <= WARM_MAX_F:
        return "warm"
    return "hot"


def _temperature_score(item: WardrobeItem, band: str) -> float:
    outerwear = item.category == "outerwear"
    if band == "freezing":
        if outerwear and item.has_any_tag("winter", "heavy"):
            return 1.0
        if item.has_any_tag("warm", "wool", "fleece"):
            return 0.9
        if item.has_any_tag("light", "summer"):
            return 0.1
    elif band == "cold":
        if outerwear or item.has_any_tag("jacket"):
            return 0.9
        if item.has_any_tag("warm", "long-sleeve"):
            return 0.8
        if item.has_any_tag("light", "tank"):
            return 0.3
    elif band == "mild":
        if item.has_any_tag("light-jacket", "cardigan"):
            return 0.9
        if item.has_any_tag("long-sleeve", "sweater"):
            return 0.8
        if item.has_any_tag("short-sleeve"):
            return 0.7
    elif band == "warm":
        if item.has_any_tag("light", "breathable", "cotton"):
            return 0.9
        if item.has_any_tag("short-sleeve", "summer"):
            return 0.8
        if item.has_any_tag("heavy", "wool"):
            return 0.2
    else:
        if item.has_any_tag("tank", "sleeveless", "linen"):
            return 1.0
        if item.has_any_tag("light", "summer"):
            return 0.9
        if outerwear or item.has_any_tag("heavy"):
            return 0.1
    return BASE_ITEM_SCORE


def _condition_adjustment(item: WardrobeItem, score: float, condition: str) -> float:
    if condition == "rainy":
        if item.has_any_tag("waterproof", "rain-resistant"):
            score = min(1.0, score + 0.2)
        if item.has_any_tag("delicate", "silk"):
            score = max(0.1, score - 0.3)
    elif condition == "snowy":
        if item.has_any_tag("waterproof", "winter-boots"):
            score = min(1.0, score + 0.3)
        if item.category == "shoes" and not item.has_any_tag("waterproof"):
            score = max(0.1, score - 0.4)
    elif condition == "windy":
        if item.category == "outerwear" or item.has_any_tag("wind-resistant"):
            score = min(1.0, score + 0.1)
        if item.has_any_tag("loose", "flowy"):
            score = max(0.1, score - 0.2)
    return score


def score_item_for_weather(item: WardrobeItem, weather: WeatherContext) -> float:
    band = temperature_band(weather.temperature)
    score = _temperature_score(item, band)
    return _clamp(_condition_adjustment(item, score, weather.condition))


def calculate_weather_compatibility(items: List[WardrobeItem], weather: WeatherContext) -> float:
    if not items:
        return 0.0
    try:
        return _clamp(sum(score_item_for_weather(item, weather) for item in items) / len(items))
    except Exception:  # noqa: BLE001
        log_event(logger, logging.WARNING, "weather_scoring_failed", exc_info=True)
        return BASE_ITEM_SCORE


def classify_item_formality(item: WardrobeItem) -> str:
    if OCCASION_FORMAL_TAGS.intersection(item.tags):
        return "formal"
    if OCCASION_CASUAL_TAGS.intersection(item.tags):
        return "casual"
    return "neutral"


def calculate_occasion_compatibility(
    items: List[WardrobeItem], calendar: Optional[CalendarContext]
) -> float:
    """Fraction of items whose formality suits the day's primary event."""

    if calendar is None or calendar.primary_event is None:
        return NO_OCCASION_SCORE
    if not items:
        return BASE_ITEM_SCORE
    try:
        accepted = _ACCEPTED_CLASSES.get(calendar.formality_level, {"casual", "neutral"})
        aligned = sum(1 for item in items if classify_item_formality(item) in accepted)
        return _clamp(aligned / len(items))
    except Exception:  # noqa: BLE001
        log_event(logger, logging.WARNING, "occasion_scoring_failed", exc_info=True)
        return BASE_ITEM_SCORE


__all__ = [
    "COLD_MAX_F",
    "MILD_MAX_F",
    "NO_OCCASION_SCORE",
    "calculate_occasion_compatibility",
    "calculate_weather_compatibility",
    "classify_item_formality",
    "score_item_for_weather",
    "temperature_band",
]
