"""Root orchestrator wiring the daily mirror entry points."""

from datetime import datetime
import logging
import random
from typing import List, Optional

from mirror_app.config import ExecutionProfile, PRODUCTION_PROFILE
from mirror_app.logging_config import get_logger, log_event, operation_context
from agents.calendar_agent import CalendarAgent
from agents.outfit_stylist_agent import OutfitStylistAgent
from agents.style_profile_agent import StyleProfileAgent
from agents.weather_agent import WeatherAgent
from memory.caches import DailyRecommendationsCache, FeedbackCache, WardrobeSnapshotCache
from models.context import RecommendationContext, UserPreferences
from models.feedback import FavoriteOutfit, OutfitFeedback, WornOutfit
from models.outfit import DailyRecommendations, OutfitRecommendation, ShareableOutfit
from models.style_profile import StyleProfile, empty_profile
from models.wardrobe_item import WardrobeItem, ensure_utc, has_red_pink_clash, utc_now
from tools.errors import ConnectivityError
from tools.feedback_store import DEFAULT_FEEDBACK_LIMIT, FeedbackStore
from tools.profile_store import ProfileStore
from tools.wardrobe_store import WardrobeStore


LOGGER = get_logger(__name__)

HIGH_CONFIDENCE_LEVEL = 0.8
MEDIUM_CONFIDENCE_LEVEL = 0.6
SHARE_TITLE = "My Outfit Look"


class MirrorOrchestrator:
    """Coordinates collaborators and agents for the morning ritual.

    Every collaborator failure degrades to a documented default except a
    wardrobe outage with no snapshot to fall back on, and a failed feedback
    append; both raise :class:`ConnectivityError`.
    """

    def __init__(
        self,
        wardrobe_store: WardrobeStore,
        feedback_store: FeedbackStore,
        profile_store: ProfileStore,
        weather_agent: WeatherAgent,
        calendar_agent: CalendarAgent,
        stylist_agent: OutfitStylistAgent,
        style_profile_agent: StyleProfileAgent,
        feedback_cache: FeedbackCache | None = None,
        wardrobe_cache: WardrobeSnapshotCache | None = None,
        daily_cache: DailyRecommendationsCache | None = None,
        execution_profile: ExecutionProfile = PRODUCTION_PROFILE,
        default_location: str = "New York",
    ) -> None:
        self.wardrobe_store = wardrobe_store
        self.feedback_store = feedback_store
        self.profile_store = profile_store
        self.weather_agent = weather_agent
        self.calendar_agent = calendar_agent
        self.stylist_agent = stylist_agent
        self.style_profile_agent = style_profile_agent
        self.feedback_cache = feedback_cache or style_profile_agent.feedback_cache
        self.wardrobe_cache = wardrobe_cache or WardrobeSnapshotCache()
        self.daily_cache = daily_cache or DailyRecommendationsCache()
        self.execution_profile = execution_profile
        self.default_location = default_location

    def _load_wardrobe(self, user_id: str) -> tuple[List[WardrobeItem], bool]:
        try:
            items = self.wardrobe_store.get_user_wardrobe(user_id)
        except ConnectivityError:
            snapshot = self.wardrobe_cache.get(user_id)
            if snapshot is None:
                raise
            log_event(
                LOGGER,
                logging.WARNING,
                "wardrobe_snapshot_used",
                captured_at=snapshot.captured_at.isoformat(),
                item_count=len(snapshot.items),
            )
            return snapshot.items, True
        self.wardrobe_cache.store(user_id, items)
        return items, False

    def _load_preferences(self, user_id: str) -> UserPreferences:
        try:
            return self.profile_store.get_user_preferences(user_id)
        except ConnectivityError:
            LOGGER.warning("Preferences unavailable; using defaults", exc_info=True)
            return UserPreferences(user_id=user_id)

    def _load_style_profile(self, user_id: str) -> StyleProfile:
        try:
            stored = self.profile_store.get_style_profile(user_id)
            return stored if stored is not None else self.style_profile_agent.analyze(user_id)
        except ConnectivityError:
            LOGGER.warning("Style profile unavailable; using an empty profile", exc_info=True)
            return empty_profile(user_id)

    def _load_feedback(self, user_id: str) -> List[OutfitFeedback]:
        try:
            return self.feedback_cache.get_or_load(
                user_id, lambda: self.feedback_store.get_recent_feedback(user_id, DEFAULT_FEEDBACK_LIMIT)
            )
        except ConnectivityError:
            LOGGER.warning("Feedback history unavailable; scoring without it", exc_info=True)
            return []

    def _load_worn_history(self, user_id: str) -> List[WornOutfit]:
        try:
            return self.feedback_store.get_worn_outfits(user_id)
        except ConnectivityError:
            LOGGER.warning("Worn history unavailable; every combination reads as new", exc_info=True)
            return []

    def generate_daily_recommendations(
        self, user_id: str, now: Optional[datetime] = None, location: Optional[str] = None
    ) -> DailyRecommendations:
        """Build today's recommendations; the first entry is the quick option.

        A second request on the same day for the same location returns the
        earlier set unchanged until feedback or a wear is recorded.
        """

        with operation_context("agent:orchestrator.generate_daily_recommendations") as correlation_id:
            moment = ensure_utc(now) if now is not None else utc_now()
            place = location or self.default_location
            cached = self.daily_cache.get(user_id, moment, place)
            if cached is not None:
                log_event(
                    LOGGER,
                    level=logging.INFO,
                    event="daily_recommendations_reused",
                    correlation_id=correlation_id,
                    generated_at=cached.generated_at,
                    recommendation_count=len(cached.recommendations),
                )
                return cached

            wardrobe, used_snapshot = self._load_wardrobe(user_id)
            preferences = self._load_preferences(user_id)
            weather = self.weather_agent.get_weather_context(place)
            calendar = self.calendar_agent.get_calendar_context(user_id, moment.date())

            context = RecommendationContext(
                user_id=user_id,
                date=moment,
                weather=weather,
                user_preferences=preferences,
                style_profile=self._load_style_profile(user_id),
                calendar=calendar,
                feedback_history=self._load_feedback(user_id),
                worn_history=self._load_worn_history(user_id),
            )

            rng = None if self.execution_profile.use_deterministic_selection else random.Random()
            recommendations = self.stylist_agent.generate_style_recommendations(wardrobe, context, rng=rng)
            recommendations = self._without_color_clash(recommendations)

            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="orchestrator",
                method="generate_daily_recommendations",
                correlation_id=correlation_id,
                recommendation_count=len(recommendations),
                used_cached_wardrobe=used_snapshot,
                has_calendar=calendar is not None,
            )
            daily = DailyRecommendations(
                user_id=user_id,
                date=moment,
                recommendations=recommendations,
                weather=weather,
                calendar=calendar,
                used_cached_wardrobe=used_snapshot,
            )
            if recommendations and not used_snapshot:
                self.daily_cache.store(user_id, place, daily)
            return daily

    def _without_color_clash(self, recommendations: List[OutfitRecommendation]) -> List[OutfitRecommendation]:
        kept = [rec for rec in recommendations if not has_red_pink_clash(rec.items)]
        if len(kept) != len(recommendations):
            LOGGER.warning("Dropped %s recommendations with a red and pink clash", len(recommendations) - len(kept))
        for index, rec in enumerate(kept):
            rec.is_quick_option = index == 0
        return kept

    def process_user_feedback(self, feedback: OutfitFeedback) -> StyleProfile:
        """Persist feedback and fold it into the style profile."""

        with operation_context("agent:orchestrator.process_user_feedback") as correlation_id:
            profile = self.style_profile_agent.update_from_feedback(feedback)
            self.daily_cache.invalidate(feedback.user_id)
            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="orchestrator",
                method="process_user_feedback",
                correlation_id=correlation_id,
                rating=feedback.confidence_rating,
            )
            return profile

    def log_outfit_as_worn(
        self, user_id: str, recommendation: OutfitRecommendation, worn_at: Optional[datetime] = None
    ) -> WornOutfit:
        with operation_context("agent:orchestrator.log_outfit_as_worn") as correlation_id:
            worn = self.feedback_store.record_worn_outfit(
                user_id, recommendation.item_ids, worn_at if worn_at is not None else utc_now()
            )
            self.feedback_cache.invalidate(user_id)
            self.daily_cache.invalidate(user_id)
            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="orchestrator",
                method="log_outfit_as_worn",
                correlation_id=correlation_id,
                recommendation_id=recommendation.recommendation_id,
                confidence_score=round(recommendation.confidence_score, 3),
                item_count=len(worn.item_ids),
            )
            return worn

    def save_outfit_to_favorites(
        self, user_id: str, recommendation: OutfitRecommendation, saved_at: Optional[datetime] = None
    ) -> FavoriteOutfit:
        """Keep the item ids, score and note of a recommendation the user liked."""

        with operation_context("agent:orchestrator.save_outfit_to_favorites") as correlation_id:
            favorite = FavoriteOutfit(
                user_id=user_id,
                recommendation_id=recommendation.recommendation_id,
                item_ids=tuple(recommendation.item_ids),
                confidence_score=recommendation.confidence_score,
                confidence_note=recommendation.confidence_note,
                saved_at=saved_at if saved_at is not None else utc_now(),
            )
            self.feedback_store.save_favorite_outfit(favorite)
            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="orchestrator",
                method="save_outfit_to_favorites",
                correlation_id=correlation_id,
                recommendation_id=recommendation.recommendation_id,
                item_count=len(favorite.item_ids),
            )
            return favorite

    @staticmethod
    def generate_shareable_outfit(recommendation: OutfitRecommendation) -> ShareableOutfit:
        score = recommendation.confidence_score
        if score >= HIGH_CONFIDENCE_LEVEL:
            level = "High"
        elif score >= MEDIUM_CONFIDENCE_LEVEL:
            level = "Medium"
        else:
            level = "Building"
        description = (
            f"Feeling confident in this outfit! {recommendation.confidence_note} Confidence Level: {level} ✨"
        )
        return ShareableOutfit(
            recommendation_id=recommendation.recommendation_id,
            title=SHARE_TITLE,
            description=description,
            confidence_level=level,
            item_ids=recommendation.item_ids,
        )


__all__ = ["MirrorOrchestrator"]
