"""Wardrobe item data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

from models.taxonomy import normalise_colors, normalise_tags, validate_category

NEGLECT_DAYS = 30
NEVER_WORN_DAYS = 999


def ensure_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""

    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from ``earlier`` to ``later`` (floored, never negative)."""

    delta = ensure_utc(later) - ensure_utc(earlier)
    return max(0, delta.days)


def _ensure_list(value: Any) -> List[Any]:
    """Coerce a scalar or iterable into a list."""

    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


@dataclass
class UsageStats:
    """Wear history the engine reads but never writes."""

    total_wears: int = 0
    average_rating: float = 0.0
    last_worn: Optional[datetime] = None
    compliments_received: int = 0

    def __post_init__(self) -> None:
        self.total_wears = max(0, int(self.total_wears))
        self.average_rating = min(5.0, max(0.0, float(self.average_rating)))
        self.compliments_received = max(0, int(self.compliments_received))
        if self.last_worn is not None:
            self.last_worn = ensure_utc(self.last_worn)


@dataclass
class WardrobeItem:
    """Represents an item in the user's wardrobe."""

    item_id: str
    user_id: str
    category: str
    colors: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    usage_stats: UsageStats = field(default_factory=UsageStats)
    name: Optional[str] = None
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    fit: Optional[str] = None
    notes: Optional[str] = None
    image_uri: Optional[str] = None

    def __post_init__(self) -> None:
        self.category = validate_category(self.category)
        self.colors = normalise_colors(_ensure_list(self.colors))
        self.tags = normalise_tags(_ensure_list(self.tags))

    def has_any_tag(self, *tags: str) -> bool:
        return any(tag in self.tags for tag in tags)

    def days_since_worn(self, now: datetime) -> int:
        """Days since last wear; never-worn items read as very old."""

        if self.usage_stats.last_worn is None:
            return NEVER_WORN_DAYS
        return days_between(self.usage_stats.last_worn, now)

    def is_neglected(self, now: datetime) -> bool:
        return self.usage_stats.last_worn is None or self.days_since_worn(now) > NEGLECT_DAYS


def merged_colors(items: List[WardrobeItem]) -> List[str]:
    """All colors across an outfit, lowercased and deduplicated in order."""

    return normalise_colors(color for item in items for color in item.colors)


def has_red_pink_clash(items: List[WardrobeItem]) -> bool:
    """The one hard color rule: red and pink never appear in the same outfit."""

    colors = set(merged_colors(items))
    return "red" in colors and "pink" in colors


__all__ = [
    "NEGLECT_DAYS",
    "UsageStats",
    "WardrobeItem",
    "days_between",
    "ensure_utc",
    "has_red_pink_clash",
    "merged_colors",
    "utc_now",
]
