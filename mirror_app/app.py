"""Daily Mirror app bootstrap."""

from datetime import datetime
import logging
from typing import Optional

from mirror_app.config import MirrorConfig
from mirror_app.logging_config import configure_logging, get_logger, log_event, operation_context
from agents.calendar_agent import CalendarAgent
from agents.orchestrator import MirrorOrchestrator
from agents.outfit_stylist_agent import OutfitStylistAgent
from agents.style_profile_agent import StyleProfileAgent
from agents.weather_agent import WeatherAgent
from memory.caches import DailyRecommendationsCache, FeedbackCache, WardrobeSnapshotCache
from models.feedback import OutfitFeedback
from models.outfit import DailyRecommendations
from models.style_profile import StyleProfile
from tools.calendar_provider import CalendarProvider, GoogleCalendarProvider
from tools.feedback_store import FeedbackStore, SQLiteFeedbackStore
from tools.profile_store import ProfileStore, SQLiteProfileStore
from tools.wardrobe_store import SQLiteWardrobeStore, WardrobeStore
from tools.weather_provider import OpenWeatherProvider, WeatherProvider


LOGGER = get_logger(__name__)


class MirrorApp:
    """Wires together stores, providers, caches and agents.

    Any collaborator can be overridden; the rest are built from the config.
    """

    def __init__(
        self,
        config: MirrorConfig | None = None,
        *,
        wardrobe_store: WardrobeStore | None = None,
        feedback_store: FeedbackStore | None = None,
        profile_store: ProfileStore | None = None,
        weather_provider: WeatherProvider | None = None,
        calendar_provider: CalendarProvider | None = None,
    ) -> None:
        self.config = config or MirrorConfig.from_env()
        configure_logging()
        profile = self.config.execution_profile

        self.wardrobe_store = wardrobe_store or SQLiteWardrobeStore(self.config.database_path)
        self.feedback_store = feedback_store or SQLiteFeedbackStore(self.config.database_path)
        self.profile_store = profile_store or SQLiteProfileStore(self.config.database_path)
        self.weather_provider = weather_provider or OpenWeatherProvider(api_key=self.config.openweather_api_key)
        self.calendar_provider = calendar_provider or GoogleCalendarProvider(
            calendar_id=self.config.calendar_id,
            credentials_path=self.config.google_credentials_path,
        )

        self.feedback_cache = FeedbackCache()
        self.wardrobe_cache = WardrobeSnapshotCache()
        self.daily_cache = DailyRecommendationsCache()

        self.weather_agent = WeatherAgent(provider=self.weather_provider, execution_profile=profile)
        self.calendar_agent = CalendarAgent(provider=self.calendar_provider, execution_profile=profile)
        self.stylist_agent = OutfitStylistAgent(weights=self.config.weights, execution_profile=profile)
        self.style_profile_agent = StyleProfileAgent(
            wardrobe_store=self.wardrobe_store,
            feedback_store=self.feedback_store,
            profile_store=self.profile_store,
            feedback_cache=self.feedback_cache,
            execution_profile=profile,
        )
        self.orchestrator = MirrorOrchestrator(
            wardrobe_store=self.wardrobe_store,
            feedback_store=self.feedback_store,
            profile_store=self.profile_store,
            weather_agent=self.weather_agent,
            calendar_agent=self.calendar_agent,
            stylist_agent=self.stylist_agent,
            style_profile_agent=self.style_profile_agent,
            feedback_cache=self.feedback_cache,
            wardrobe_cache=self.wardrobe_cache,
            daily_cache=self.daily_cache,
            execution_profile=profile,
            default_location=self.config.default_location,
        )

    def daily_recommendations(
        self, user_id: str, now: Optional[datetime] = None, location: Optional[str] = None
    ) -> DailyRecommendations:
        with operation_context("app:daily_recommendations") as correlation_id:
            log_event(
                LOGGER,
                level=logging.INFO,
                event="app_call_started",
                agent="app",
                method="daily_recommendations",
                correlation_id=correlation_id,
                user_id=user_id,
                profile=self.config.execution_profile.name,
            )
            return self.orchestrator.generate_daily_recommendations(user_id, now=now, location=location)

    def submit_feedback(self, feedback: OutfitFeedback) -> StyleProfile:
        return self.orchestrator.process_user_feedback(feedback)


__all__ = ["MirrorApp"]
