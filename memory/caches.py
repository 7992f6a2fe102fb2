"""Per-process caches owned by the orchestrator.

All caches are plain objects handed to their consumers; there is no module
level state. Staleness is acceptable: the feedback cache is invalidated on the
next write for a user, the wardrobe snapshot only backs an outage, and the
daily entry is dropped whenever feedback or a wear is recorded.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from models.feedback import OutfitFeedback
from models.outfit import DailyRecommendations
from models.wardrobe_item import WardrobeItem, utc_now

logger = logging.getLogger(__name__)


class FeedbackCache:
    """Read-through cache of each user's recent feedback."""

    def __init__(self) -> None:
        self._entries: Dict[str, List[OutfitFeedback]] = {}
        self.hits = 0
        self.misses = 0

    def get_or_load(self, user_id: str, loader: Callable[[], List[OutfitFeedback]]) -> List[OutfitFeedback]:
        if user_id in self._entries:
            self.hits += 1
            return list(self._entries[user_id])
        self.misses += 1
        entries = list(loader())
        self._entries[user_id] = entries
        return list(entries)

    def invalidate(self, user_id: str) -> None:
        if self._entries.pop(user_id, None) is not None:
            logger.debug("Invalidated feedback cache entry")

    def clear(self) -> None:
        self._entries.clear()


@dataclass(frozen=True)
class WardrobeSnapshot:
    items: List[WardrobeItem]
    captured_at: datetime


class WardrobeSnapshotCache:
    """Last-known-good wardrobe per user, used when the store is unreachable."""

    def __init__(self) -> None:
        self._snapshots: Dict[str, WardrobeSnapshot] = {}

    def store(self, user_id: str, items: List[WardrobeItem]) -> None:
        self._snapshots[user_id] = WardrobeSnapshot(items=copy.deepcopy(items), captured_at=utc_now())

    def get(self, user_id: str) -> Optional[WardrobeSnapshot]:
        snapshot = self._snapshots.get(user_id)
        if snapshot is None:
            return None
        return WardrobeSnapshot(items=copy.deepcopy(snapshot.items), captured_at=snapshot.captured_at)

    def invalidate(self, user_id: str) -> None:
        self._snapshots.pop(user_id, None)


class DailyRecommendationsCache:
    """Today's recommendations per user, reused until the day changes.

    An entry serves requests for the same calendar day and location that
    arrive within ``max_age`` of generation. Callers get a copy, so quick
    option flags set downstream never leak back into the cache.
    """

    def __init__(self, max_age: timedelta = timedelta(hours=24)) -> None:
        self.max_age = max_age
        self._entries: Dict[str, Tuple[str, DailyRecommendations]] = {}
        self.hits = 0

    def get(self, user_id: str, moment: datetime, location: str) -> Optional[DailyRecommendations]:
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        cached_location, daily = entry
        age = moment - daily.date
        if cached_location != location or daily.date.date() != moment.date() or not timedelta(0) <= age < self.max_age:
            return None
        self.hits += 1
        return copy.deepcopy(daily)

    def store(self, user_id: str, location: str, daily: DailyRecommendations) -> None:
        self._entries[user_id] = (location, copy.deepcopy(daily))

    def invalidate(self, user_id: str) -> None:
        if self._entries.pop(user_id, None) is not None:
            logger.debug("Invalidated daily recommendations entry")


__all__ = [
    "DailyRecommendationsCache",
    "FeedbackCache",
    "WardrobeSnapshot",
    "WardrobeSnapshotCache",
]
