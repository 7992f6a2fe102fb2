"""Context objects describing the day a recommendation is made for."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from models.feedback import OutfitFeedback, WornOutfit
from models.style_profile import StyleProfile
from models.wardrobe_item import utc_now

WEATHER_CONDITIONS = ("sunny", "cloudy", "rainy", "snowy", "windy", "stormy")
EVENT_TYPES = ("work", "social", "personal", "special")
FORMALITY_LEVELS = ("casual", "business", "formal", "special")
NOTE_STYLES = ("encouraging", "witty", "poetic", "friendly")


@dataclass(frozen=True)
class WeatherContext:
    """Current conditions in Fahrenheit."""

    temperature: float
    condition: str
    humidity: float = 50.0
    wind_speed: float = 0.0
    location: str = "Unknown"
    timestamp: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if self.condition not in WEATHER_CONDITIONS:
            raise ValueError(f"Unsupported weather condition '{self.condition}'. Allowed: {WEATHER_CONDITIONS}")


def fallback_weather(location: str = "Unknown") -> WeatherContext:
    """Moderate, cloudy conditions used whenever the provider cannot answer."""

    return WeatherContext(temperature=72.0, condition="cloudy", humidity=50.0, wind_speed=5.0, location=location)


@dataclass(frozen=True)
class CalendarEvent:
    """Minimal calendar event payload safe for logs."""

    title: str
    start_time: datetime
    end_time: datetime
    event_type: str = "personal"
    location: Optional[str] = None
    is_all_day: bool = False


@dataclass(frozen=True)
class CalendarContext:
    events: List[CalendarEvent]
    primary_event: Optional[CalendarEvent] = None
    formality_level: str = "casual"


@dataclass
class UserPreferences:
    """Notification and note preferences; delivery itself lives elsewhere."""

    user_id: str
    notification_time: str = "06:00"
    timezone: str = "UTC"
    confidence_note_style: str = "encouraging"

    def __post_init__(self) -> None:
        if self.confidence_note_style not in NOTE_STYLES:
            self.confidence_note_style = "encouraging"


@dataclass
class RecommendationContext:
    """Everything the scoring pipeline needs besides the wardrobe itself."""

    user_id: str
    date: datetime
    weather: WeatherContext
    user_preferences: UserPreferences
    style_profile: StyleProfile
    calendar: Optional[CalendarContext] = None
    feedback_history: List[OutfitFeedback] = field(default_factory=list)
    worn_history: List[WornOutfit] = field(default_factory=list)


__all__ = [
    "CalendarContext",
    "CalendarEvent",
    "EVENT_TYPES",
    "FORMALITY_LEVELS",
    "NOTE_STYLES",
    "RecommendationContext",
    "UserPreferences",
    "WEATHER_CONDITIONS",
    "WeatherContext",
    "fallback_weather",
]
