"""Deterministic availability filtering for recency, weather and cleanliness."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from logic.weather_scoring import COLD_MAX_F, MILD_MAX_F
from models.context import WeatherContext
from models.taxonomy import UNCLEAN_TAGS
from models.wardrobe_item import NEGLECT_DAYS, WardrobeItem

RECENT_WEAR_DAYS = 7
HEAVY_USE_WEARS = 10
HEAVY_USE_RECENT_DAYS = 2


@dataclass(frozen=True)
class FilteringResult:
    """Captures the outcome of a single filtering step."""

    items: List[WardrobeItem]
    removed: Dict[str, str]
    debug: Dict[str, object]


def recently_worn(item: WardrobeItem, now: datetime) -> bool:
    """Worn inside the rest window; neglected pieces are always back in rotation."""

    days = item.days_since_worn(now)
    if days > NEGLECT_DAYS:
        return False
    return days <= RECENT_WEAR_DAYS


def weather_rejection(item: WardrobeItem, weather: WeatherContext) -> Optional[str]:
    """Boolean gate mirroring the weather scorer; returns the reason when rejected."""

    temperature = weather.temperature
    if temperature < COLD_MAX_F:
        # warm pieces are kept in the cold regardless of rain, snow or wind
        if item.category == "outerwear" or item.has_any_tag("warm", "winter"):
            return None
        if item.category == "tops" and item.has_any_tag("tank", "sleeveless"):
            return "too light for cold weather"
    elif temperature > MILD_MAX_F:
        if item.has_any_tag("heavy", "winter", "wool"):
            return "too heavy for hot weather"
        if item.category == "outerwear" and not item.has_any_tag("light"):
            return "outerwear not needed in hot weather"

    if weather.condition in {"rainy", "snowy"}:
        if item.category == "shoes" and not item.has_any_tag("waterproof", "boots"):
            return f"shoes not suited to {weather.condition} weather"
        if item.has_any_tag("suede", "delicate"):
            return f"delicate material in {weather.condition} weather"
    if weather.condition == "windy" and item.has_any_tag("loose", "flowy"):
        return "loose fit in windy weather"
    return None


def needs_cleaning(item: WardrobeItem, now: datetime) -> bool:
    if UNCLEAN_TAGS.intersection(item.tags):
        return True
    return (
        item.usage_stats.total_wears > HEAVY_USE_WEARS
        and item.usage_stats.last_worn is not None
        and item.days_since_worn(now) < HEAVY_USE_RECENT_DAYS
    )


def filter_available_items(
    items: List[WardrobeItem], weather: WeatherContext, now: datetime
) -> FilteringResult:
    """Drop items that are resting, wrong for the weather, or in the laundry."""

    removed: Dict[str, str] = {}
    kept: List[WardrobeItem] = []
    for item in items:
        reason = None
        if recently_worn(item, now):
            reason = "worn within the last week"
        if reason is None:
            reason = weather_rejection(item, weather)
        if reason is None and needs_cleaning(item, now):
            reason = "needs cleaning"
        if reason:
            removed[item.item_id] = reason
        else:
            kept.append(item)

    debug = {
        "input_count": len(items),
        "kept_count": len(kept),
        "removed_count": len(removed),
        "temperature": weather.temperature,
        "condition": weather.condition,
    }
    return FilteringResult(items=kept, removed=removed, debug=debug)


def filter_clean_items(items: List[WardrobeItem], now: datetime) -> FilteringResult:
    """Relaxed pool used when nothing survives the full availability gate."""

    removed = {item.item_id: "needs cleaning" for item in items if needs_cleaning(item, now)}
    kept = [item for item in items if item.item_id not in removed]
    debug = {"input_count": len(items), "kept_count": len(kept), "removed_count": len(removed), "relaxed": True}
    return FilteringResult(items=kept, removed=removed, debug=debug)


__all__ = [
    "FilteringResult",
    "filter_available_items",
    "filter_clean_items",
    "needs_cleaning",
    "recently_worn",
    "weather_rejection",
]
