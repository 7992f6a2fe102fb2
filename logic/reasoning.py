"""Short human-readable justifications for a recommendation."""

from __future__ import annotations

from datetime import datetime
from typing import List

from logic.ranking import ScoredCandidate
from logic.weather_scoring import temperature_band
from models.context import WeatherContext
from models.wardrobe_item import merged_colors

HIGH_SCORE = 0.8
FAVORITE_RATING = 4.0
DEFAULT_REASON = "A fresh combination to try something new"

_BAND_REASONS = {
    "freezing": "Bundled up for freezing temperatures",
    "cold": "Warm layers for a cold day",
    "mild": "Comfortable for mild weather",
    "warm": "Light enough for a warm day",
    "hot": "Breathable pieces for the heat",
}

_CONDITION_REASONS = {
    "rainy": "Ready for rain",
    "snowy": "Prepared for snow",
    "windy": "Holds up in the wind",
    "sunny": "Made for a sunny day",
}


def build_reasoning(candidate: ScoredCandidate, weather: WeatherContext, now: datetime) -> List[str]:
    reasons: List[str] = []
    components = candidate.components

    if components.get("compatibility", 0.0) > HIGH_SCORE:
        reasons.append("Perfect color harmony and style consistency")
    if candidate.confidence.matched_history > 0 and candidate.confidence.score > HIGH_SCORE:
        reasons.append("Based on your previous positive feedback")
    if components.get("weather", 0.0) > HIGH_SCORE:
        reasons.append("Ideal for today's weather conditions")
        reasons.append(_BAND_REASONS[temperature_band(weather.temperature)])
        if weather.condition in _CONDITION_REASONS:
            reasons.append(_CONDITION_REASONS[weather.condition])

    neglected = [item for item in candidate.items if item.is_neglected(now)]
    if neglected:
        label = neglected[0].name or neglected[0].category
        reasons.append(f"Rediscover your {label.lower()}")

    colors = merged_colors(candidate.items)
    if 1 < len(colors) <= 3:
        reasons.append(f"Harmonious {', '.join(colors)} palette")

    favorites = [item for item in candidate.items if item.usage_stats.average_rating > FAVORITE_RATING]
    if favorites:
        reasons.append("Includes pieces you rate highly")

    return reasons or [DEFAULT_REASON]


__all__ = ["build_reasoning", "DEFAULT_REASON"]
