"""Shared fixtures for the Daily Mirror engine tests."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterable, Optional

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from models.context import CalendarContext, RecommendationContext, UserPreferences, WeatherContext
from models.style_profile import empty_profile
from models.wardrobe_item import UsageStats, WardrobeItem

FIXED_NOW = datetime(2025, 6, 2, 8, 0, tzinfo=timezone.utc)


@pytest.fixture()
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def make_item() -> Callable[..., WardrobeItem]:
    def _make(
        item_id: str,
        category: str,
        colors: Iterable[str] = ("black",),
        tags: Iterable[str] = (),
        rating: float = 4.0,
        wears: int = 2,
        worn_days_ago: Optional[int] = 20,
        compliments: int = 0,
        user_id: str = "user-1",
        **extra: object,
    ) -> WardrobeItem:
        last_worn = FIXED_NOW - timedelta(days=worn_days_ago) if worn_days_ago is not None else None
        return WardrobeItem(
            item_id=item_id,
            user_id=user_id,
            category=category,
            colors=list(colors),
            tags=list(tags),
            usage_stats=UsageStats(
                total_wears=wears,
                average_rating=rating,
                last_worn=last_worn,
                compliments_received=compliments,
            ),
            **extra,
        )

    return _make


@pytest.fixture()
def make_context() -> Callable[..., RecommendationContext]:
    def _make(
        temperature: float = 68.0,
        condition: str = "sunny",
        calendar: Optional[CalendarContext] = None,
        note_style: str = "encouraging",
        moment: datetime = FIXED_NOW,
        **fields: object,
    ) -> RecommendationContext:
        return RecommendationContext(
            user_id="user-1",
            date=moment,
            weather=WeatherContext(temperature=temperature, condition=condition),
            user_preferences=UserPreferences(user_id="user-1", confidence_note_style=note_style),
            style_profile=fields.pop("style_profile", None) or empty_profile("user-1"),
            calendar=calendar,
            **fields,
        )

    return _make
