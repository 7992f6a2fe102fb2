"""Pydantic schemas that normalise loose collaborator records into domain types.

Stores hand back whatever their backing engine produced (snake or camel
case keys, JSON strings, scalars where lists were expected). These records
absorb that looseness; anything past this module only sees validated
:class:`~models.wardrobe_item.WardrobeItem` and
:class:`~models.feedback.OutfitFeedback` objects.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from mirror_app.logging_config import log_event
from models.feedback import (
    ComfortRating,
    EmotionalResponse,
    FeedbackContext,
    OutfitFeedback,
    SocialFeedback,
)
from models.wardrobe_item import UsageStats, WardrobeItem, utc_now

logger = logging.getLogger(__name__)


def _coerce_string_list(value: Any) -> List[str]:
    """Scalars become one-element lists; anything else non-iterable becomes empty."""

    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(part) for part in value if part is not None and str(part).strip()]
    return []


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class UsageStatsRecord(_Record):
    total_wears: int = 0
    average_rating: float = 0.0
    last_worn: Optional[datetime] = None
    compliments_received: int = 0

    @field_validator("total_wears", "compliments_received", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> int:
        try:
            return max(0, int(value))
        except (TypeError, ValueError):
            return 0

    @field_validator("average_rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: Any) -> float:
        try:
            return min(5.0, max(0.0, float(value)))
        except (TypeError, ValueError):
            return 0.0

    @field_validator("last_worn", mode="before")
    @classmethod
    def _coerce_last_worn(cls, value: Any) -> Any:
        if value in (None, ""):
            return None
        if isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None


class WardrobeItemRecord(_Record):
    """Input contract for one wardrobe row."""

    item_id: str = Field(min_length=1, validation_alias=AliasChoices("item_id", "itemId", "id"))
    user_id: str = Field(min_length=1)
    category: str
    colors: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    usage_stats: UsageStatsRecord = Field(default_factory=UsageStatsRecord)
    name: Optional[str] = None
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    fit: Optional[str] = None
    notes: Optional[str] = None
    image_uri: Optional[str] = None

    @field_validator("item_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator("colors", "tags", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> List[str]:
        return _coerce_string_list(value)

    @field_validator("usage_stats", mode="before")
    @classmethod
    def _coerce_usage(cls, value: Any) -> Any:
        return value if isinstance(value, (Mapping, UsageStatsRecord)) else {}


class EmotionalResponseRecord(_Record):
    primary: str = "neutral"
    intensity: int = 5
    additional: List[str] = Field(default_factory=list)

    @field_validator("intensity", mode="before")
    @classmethod
    def _coerce_intensity(cls, value: Any) -> int:
        try:
            return min(10, max(1, int(value)))
        except (TypeError, ValueError):
            return 5

    @field_validator("additional", mode="before")
    @classmethod
    def _coerce_additional(cls, value: Any) -> List[str]:
        return _coerce_string_list(value)


class SocialFeedbackRecord(_Record):
    compliments_received: int = 0
    reactions: List[str] = Field(default_factory=list)
    context: Optional[str] = None

    @field_validator("compliments_received", mode="before")
    @classmethod
    def _coerce_compliments(cls, value: Any) -> int:
        try:
            return max(0, int(value))
        except (TypeError, ValueError):
            return 0

    @field_validator("reactions", mode="before")
    @classmethod
    def _coerce_reactions(cls, value: Any) -> List[str]:
        return _coerce_string_list(value)


class ComfortRecord(_Record):
    physical: int = 3
    emotional: int = 3
    confidence: int = 3


class FeedbackContextRecord(_Record):
    weather_condition: Optional[str] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    event_type: Optional[str] = None
    formality: Optional[str] = None
    time_of_day: Optional[str] = None
    season: Optional[str] = None


class FeedbackRecord(_Record):
    """Input contract for one feedback row joined with its recommendation."""

    feedback_id: str = Field(min_length=1, validation_alias=AliasChoices("feedback_id", "feedbackId", "id"))
    user_id: str = Field(min_length=1)
    outfit_recommendation_id: str = ""
    item_ids: List[str] = Field(default_factory=list)
    confidence_rating: float = Field(ge=1, le=5)
    emotional_response: EmotionalResponseRecord = Field(default_factory=EmotionalResponseRecord)
    occasion: Optional[str] = None
    comfort: ComfortRecord = Field(default_factory=ComfortRecord)
    social_feedback: SocialFeedbackRecord = Field(default_factory=SocialFeedbackRecord)
    context: FeedbackContextRecord = Field(default_factory=FeedbackContextRecord)
    timestamp: datetime = Field(default_factory=utc_now)

    @field_validator("item_ids", mode="before")
    @classmethod
    def _coerce_item_ids(cls, value: Any) -> List[str]:
        return _coerce_string_list(value)

    @field_validator("emotional_response", mode="before")
    @classmethod
    def _coerce_emotion(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"primary": value}
        return value if isinstance(value, Mapping) else {}


def to_wardrobe_item(raw: Mapping[str, Any]) -> Optional[WardrobeItem]:
    """Map one loose record to a :class:`WardrobeItem`, or ``None`` if unusable."""

    try:
        record = WardrobeItemRecord.model_validate(raw)
        return WardrobeItem(
            item_id=record.item_id,
            user_id=record.user_id,
            category=record.category,
            colors=record.colors,
            tags=record.tags,
            usage_stats=UsageStats(**record.usage_stats.model_dump()),
            name=record.name,
            subcategory=record.subcategory,
            brand=record.brand,
            fit=record.fit,
            notes=record.notes,
            image_uri=record.image_uri,
        )
    except (ValidationError, ValueError) as exc:
        log_event(logger, logging.WARNING, "wardrobe_record_skipped", error=str(exc)[:200])
        return None


def to_wardrobe_items(rows: Iterable[Mapping[str, Any]]) -> List[WardrobeItem]:
    items = [to_wardrobe_item(row) for row in rows]
    return [item for item in items if item is not None]


def to_feedback(raw: Mapping[str, Any]) -> Optional[OutfitFeedback]:
    try:
        record = FeedbackRecord.model_validate(raw)
    except ValidationError as exc:
        log_event(logger, logging.WARNING, "feedback_record_skipped", error=str(exc)[:200])
        return None
    emotion = record.emotional_response
    social = record.social_feedback
    return OutfitFeedback(
        feedback_id=record.feedback_id,
        user_id=record.user_id,
        outfit_recommendation_id=record.outfit_recommendation_id,
        item_ids=tuple(record.item_ids),
        confidence_rating=record.confidence_rating,
        emotional_response=EmotionalResponse(
            primary=emotion.primary, intensity=emotion.intensity, additional=tuple(emotion.additional)
        ),
        occasion=record.occasion,
        comfort=ComfortRating(**record.comfort.model_dump()),
        social_feedback=SocialFeedback(
            compliments_received=social.compliments_received,
            reactions=tuple(social.reactions),
            context=social.context,
        ),
        context=FeedbackContext(**record.context.model_dump()),
        timestamp=record.timestamp,
    )


def to_feedback_list(rows: Iterable[Mapping[str, Any]]) -> List[OutfitFeedback]:
    entries = [to_feedback(row) for row in rows]
    return [entry for entry in entries if entry is not None]


def feedback_to_record(feedback: OutfitFeedback) -> Dict[str, Any]:
    """Serialise feedback into the snake_case shape :func:`to_feedback` accepts."""

    payload = asdict(feedback)
    payload["item_ids"] = list(feedback.item_ids)
    payload["timestamp"] = feedback.timestamp.isoformat()
    return payload


def wardrobe_item_to_record(item: WardrobeItem) -> Dict[str, Any]:
    payload = asdict(item)
    last_worn = item.usage_stats.last_worn
    payload["usage_stats"]["last_worn"] = last_worn.isoformat() if last_worn else None
    return payload


__all__ = [
    "FeedbackRecord",
    "UsageStatsRecord",
    "WardrobeItemRecord",
    "feedback_to_record",
    "to_feedback",
    "to_feedback_list",
    "to_wardrobe_item",
    "to_wardrobe_items",
    "wardrobe_item_to_record",
]
