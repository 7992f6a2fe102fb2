"""Recommendation schemas returned by the engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from models.context import CalendarContext, WeatherContext
from models.wardrobe_item import WardrobeItem, utc_now


@dataclass
class OutfitRecommendation:
    recommendation_id: str
    items: List[WardrobeItem]
    confidence_score: float
    confidence_note: str
    reasoning: List[str] = field(default_factory=list)
    is_quick_option: bool = False
    score_breakdown: Dict[str, float] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)

    @property
    def item_ids(self) -> List[str]:
        return [item.item_id for item in self.items]


@dataclass
class DailyRecommendations:
    """The morning ritual payload: three options plus the context behind them."""

    user_id: str
    date: datetime
    recommendations: List[OutfitRecommendation]
    weather: WeatherContext
    calendar: Optional[CalendarContext] = None
    generated_at: datetime = field(default_factory=utc_now)
    used_cached_wardrobe: bool = False

    @property
    def quick_option(self) -> Optional[OutfitRecommendation]:
        return next((rec for rec in self.recommendations if rec.is_quick_option), None)


@dataclass(frozen=True)
class ShareableOutfit:
    recommendation_id: str
    title: str
    description: str
    confidence_level: str
    item_ids: List[str]


__all__ = ["DailyRecommendations", "OutfitRecommendation", "ShareableOutfit"]
