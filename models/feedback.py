"""Feedback records captured after a user wears a recommendation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from models.wardrobe_item import ensure_utc, utc_now


@dataclass(frozen=True)
class EmotionalResponse:
    primary: str
    intensity: int = 5
    additional: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ComfortRating:
    physical: int = 3
    emotional: int = 3
    confidence: int = 3


@dataclass(frozen=True)
class SocialFeedback:
    compliments_received: int = 0
    reactions: Tuple[str, ...] = ()
    context: Optional[str] = None


@dataclass(frozen=True)
class FeedbackContext:
    """Conditions recorded alongside feedback; feeds profile context factors."""

    weather_condition: Optional[str] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    event_type: Optional[str] = None
    formality: Optional[str] = None
    time_of_day: Optional[str] = None
    season: Optional[str] = None


@dataclass(frozen=True)
class OutfitFeedback:
    """One append-only feedback entry, joined with its recommendation's item ids."""

    feedback_id: str
    user_id: str
    outfit_recommendation_id: str
    item_ids: Tuple[str, ...]
    confidence_rating: float
    emotional_response: EmotionalResponse
    occasion: Optional[str] = None
    comfort: ComfortRating = field(default_factory=ComfortRating)
    social_feedback: SocialFeedback = field(default_factory=SocialFeedback)
    context: FeedbackContext = field(default_factory=FeedbackContext)
    timestamp: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if not 1 <= self.confidence_rating <= 5:
            raise ValueError(f"confidence_rating must be within 1-5, got {self.confidence_rating}")
        object.__setattr__(self, "item_ids", tuple(str(item_id) for item_id in self.item_ids))
        object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))

    @property
    def combination_key(self) -> str:
        return ",".join(sorted(self.item_ids))


@dataclass(frozen=True)
class WornOutfit:
    """An outfit the user reported wearing; drives novelty scoring."""

    user_id: str
    item_ids: Tuple[str, ...]
    worn_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "item_ids", tuple(sorted(str(item_id) for item_id in self.item_ids)))
        object.__setattr__(self, "worn_at", ensure_utc(self.worn_at))


@dataclass(frozen=True)
class FavoriteOutfit:
    """A recommendation the user saved; item order is kept as recommended."""

    user_id: str
    recommendation_id: str
    item_ids: Tuple[str, ...]
    confidence_score: float
    confidence_note: str
    saved_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "item_ids", tuple(str(item_id) for item_id in self.item_ids))
        object.__setattr__(self, "saved_at", ensure_utc(self.saved_at))


def combination_key(item_ids: List[str]) -> str:
    return ",".join(sorted(item_ids))


__all__ = [
    "ComfortRating",
    "EmotionalResponse",
    "FavoriteOutfit",
    "FeedbackContext",
    "OutfitFeedback",
    "SocialFeedback",
    "WornOutfit",
    "combination_key",
]
