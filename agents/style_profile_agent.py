"""Style profile analyzer that keeps per-user preference summaries current."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from mirror_app.config import ExecutionProfile, PRODUCTION_PROFILE
from mirror_app.logging_config import get_logger, log_event, operation_context
from memory.caches import FeedbackCache
from models.feedback import OutfitFeedback
from models.style_profile import DEFAULT_BODY_TYPE_PREFERENCES, ConfidencePattern, StyleProfile, empty_profile
from models.wardrobe_item import WardrobeItem, utc_now
from tools.errors import ConnectivityError
from tools.feedback_store import DEFAULT_FEEDBACK_LIMIT, FeedbackStore
from tools.profile_store import ProfileStore
from tools.wardrobe_store import WardrobeStore

LOGGER = get_logger(__name__)

MAX_PREFERENCES = 10
MIN_SURVIVORS = 3
COLOR_MIN_FREQUENCY = 2
MIN_PATTERN_ENTRIES = 2
MAX_EMOTIONAL_RESPONSES = 5
DEFAULT_OCCASION_RATING = 2.5

COLD_MAX_F = 50.0
HOT_MIN_F = 77.0
HUMID_MIN = 70.0

FIT_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("slim-fit", ("slim", "fitted")),
    ("relaxed-fit", ("loose", "relaxed", "oversized")),
    ("regular-fit", ("regular", "standard")),
)
SILHOUETTE_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("a-line", ("a-line", "flare")),
    ("straight", ("straight", "column")),
    ("empire", ("empire", "high-waist")),
)


def _ranked(counter: Counter, threshold: int) -> List[str]:
    ordered = counter.most_common()
    survivors = [(value, count) for value, count in ordered if count >= threshold]
    chosen = survivors if len(survivors) >= MIN_SURVIVORS else ordered
    return [value for value, _ in chosen[:MAX_PREFERENCES]]


def style_threshold(item_count: int) -> int:
    """Minimum tag frequency, scaled with wardrobe size to filter noise."""

    if item_count < 10:
        return 1
    if item_count < 20:
        return max(1, int(item_count * 0.15))
    return max(2, int(item_count * 0.1))


def analyze_color_preferences(items: Iterable[WardrobeItem]) -> List[str]:
    counter: Counter = Counter(color for item in items for color in item.colors if color)
    return _ranked(counter, COLOR_MIN_FREQUENCY)


def analyze_style_preferences(items: List[WardrobeItem]) -> List[str]:
    counter: Counter = Counter(tag for item in items for tag in item.tags if tag)
    return _ranked(counter, style_threshold(len(items)))


def analyze_body_type_preferences(items: Iterable[WardrobeItem]) -> List[str]:
    fits: Counter = Counter()
    silhouettes: Counter = Counter()
    for item in items:
        text = " ".join([item.fit or "", item.notes or "", " ".join(item.tags)]).lower()
        if not text.strip():
            continue
        for label, keywords in FIT_KEYWORDS:
            if any(keyword in text for keyword in keywords):
                fits[label] += 1
        for label, keywords in SILHOUETTE_KEYWORDS:
            if any(keyword in text for keyword in keywords):
                silhouettes[label] += 1

    preferences = [label for label, _ in fits.most_common(2)] + [label for label, _ in silhouettes.most_common(2)]
    return preferences or list(DEFAULT_BODY_TYPE_PREFERENCES)


def extract_context_factors(entries: Iterable[OutfitFeedback]) -> List[str]:
    factors: Dict[str, None] = {}
    for entry in entries:
        ctx = entry.context
        found: List[str] = []
        if ctx.weather_condition:
            found.append(f"weather_{ctx.weather_condition}")
        if ctx.temperature is not None:
            if ctx.temperature < COLD_MAX_F:
                found.append("weather_cold")
            elif ctx.temperature > HOT_MIN_F:
                found.append("weather_hot")
            else:
                found.append("weather_mild")
        if ctx.humidity is not None and ctx.humidity > HUMID_MIN:
            found.append("weather_humid")
        if ctx.event_type:
            found.append(f"occasion_{ctx.event_type}")
        if ctx.formality:
            found.append(f"formality_{ctx.formality}")
        if ctx.time_of_day:
            found.append(f"time_{ctx.time_of_day}")
        if entry.emotional_response.primary:
            found.append(f"emotion_{entry.emotional_response.primary}")
        if ctx.season:
            found.append(f"season_{ctx.season}")
        for factor in found:
            factors.setdefault(factor, None)
    return list(factors)


def analyze_confidence_patterns(feedback: Iterable[OutfitFeedback]) -> List[ConfidencePattern]:
    groups: Dict[str, List[OutfitFeedback]] = {}
    for entry in feedback:
        if entry.item_ids:
            groups.setdefault(entry.combination_key, []).append(entry)

    patterns: List[ConfidencePattern] = []
    for key, entries in groups.items():
        if len(entries) < MIN_PATTERN_ENTRIES:
            continue
        patterns.append(
            ConfidencePattern(
                item_combination=key.split(","),
                average_rating=sum(entry.confidence_rating for entry in entries) / len(entries),
                context_factors=extract_context_factors(entries),
                emotional_responses=[
                    entry.emotional_response.primary for entry in entries if entry.emotional_response.primary
                ],
            )
        )
    return patterns


def analyze_occasion_preferences(feedback: Iterable[OutfitFeedback]) -> Dict[str, float]:
    ratings: Dict[str, List[float]] = {}
    for entry in feedback:
        if entry.occasion:
            ratings.setdefault(entry.occasion, []).append(entry.confidence_rating)
    return {occasion: sum(values) / len(values) for occasion, values in ratings.items()}


def merge_feedback(profile: StyleProfile, feedback: OutfitFeedback) -> StyleProfile:
    """Fold one feedback entry into an existing profile without re-reading history."""

    patterns = list(profile.confidence_patterns)
    if feedback.item_ids:
        existing = profile.find_pattern(list(feedback.item_ids))
        if existing is not None:
            merged = replace(
                existing,
                average_rating=(existing.average_rating + feedback.confidence_rating) / 2,
                emotional_responses=[
                    emotion
                    for emotion in [*existing.emotional_responses, feedback.emotional_response.primary]
                    if emotion
                ][-MAX_EMOTIONAL_RESPONSES:],
            )
            patterns = [merged if pattern is existing else pattern for pattern in patterns]
        else:
            patterns.append(
                ConfidencePattern(
                    item_combination=sorted(feedback.item_ids),
                    average_rating=feedback.confidence_rating,
                    context_factors=[feedback.occasion or "general"],
                    emotional_responses=[feedback.emotional_response.primary],
                )
            )

    occasions = dict(profile.occasion_preferences)
    if feedback.occasion:
        current = occasions.get(feedback.occasion) or DEFAULT_OCCASION_RATING
        occasions[feedback.occasion] = (current + feedback.confidence_rating) / 2

    return replace(profile, confidence_patterns=patterns, occasion_preferences=occasions, last_updated=utc_now())


class StyleProfileAgent:
    """Builds, persists and incrementally updates per-user style profiles."""

    def __init__(
        self,
        wardrobe_store: WardrobeStore,
        feedback_store: FeedbackStore,
        profile_store: ProfileStore,
        feedback_cache: Optional[FeedbackCache] = None,
        execution_profile: ExecutionProfile = PRODUCTION_PROFILE,
    ) -> None:
        self.wardrobe_store = wardrobe_store
        self.feedback_store = feedback_store
        self.profile_store = profile_store
        self.feedback_cache = feedback_cache or FeedbackCache()
        self.execution_profile = execution_profile

    def _recent_feedback(self, user_id: str) -> List[OutfitFeedback]:
        return self.feedback_cache.get_or_load(
            user_id, lambda: self.feedback_store.get_recent_feedback(user_id, DEFAULT_FEEDBACK_LIMIT)
        )

    def _build_profile(self, user_id: str) -> StyleProfile:
        items = self.wardrobe_store.get_user_wardrobe(user_id)
        feedback = self._recent_feedback(user_id)
        if not items and not feedback:
            if self.execution_profile.treat_empty_history_as_failure:
                raise ConnectivityError(
                    "No wardrobe or feedback history available for profile analysis",
                    operation="analyze_style_profile",
                )
            log_event(LOGGER, logging.WARNING, "empty_style_history", user_id=user_id)
            return empty_profile(user_id)

        return StyleProfile(
            user_id=user_id,
            preferred_colors=analyze_color_preferences(items),
            preferred_styles=analyze_style_preferences(items),
            body_type_preferences=analyze_body_type_preferences(items),
            occasion_preferences=analyze_occasion_preferences(feedback),
            confidence_patterns=analyze_confidence_patterns(feedback),
            last_updated=utc_now(),
        )

    def analyze(self, user_id: str) -> StyleProfile:
        """Recompute the profile from the full wardrobe and recent feedback, then store it."""

        with operation_context("agent:style_profile.analyze") as correlation_id:
            profile = self._build_profile(user_id)
            self.profile_store.upsert_style_profile(profile)
            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="style_profile",
                method="analyze",
                correlation_id=correlation_id,
                colors=len(profile.preferred_colors),
                styles=len(profile.preferred_styles),
                patterns=len(profile.confidence_patterns),
            )
            return profile

    def _current_profile(self, user_id: str) -> StyleProfile:
        try:
            stored = self.profile_store.get_style_profile(user_id)
            if stored is not None:
                return stored
        except ConnectivityError:
            LOGGER.warning("Profile store unavailable; rebuilding profile", exc_info=True)
        try:
            return self._build_profile(user_id)
        except ConnectivityError:
            LOGGER.warning("Profile rebuild failed; starting from an empty profile", exc_info=True)
            return empty_profile(user_id)

    def update_from_feedback(self, feedback: OutfitFeedback) -> StyleProfile:
        """Persist one feedback entry and fold it into the user's profile.

        The append is the only required write: its ``ConnectivityError``
        propagates, while a failed profile upsert is logged and the merged
        profile is still returned.
        """

        with operation_context("agent:style_profile.update_from_feedback") as correlation_id:
            profile = self._current_profile(feedback.user_id)
            self.feedback_store.append_feedback(feedback)
            self.feedback_cache.invalidate(feedback.user_id)

            updated = merge_feedback(profile, feedback)
            try:
                self.profile_store.upsert_style_profile(updated)
            except ConnectivityError:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "style_profile_upsert_failed",
                    correlation_id=correlation_id,
                    exc_info=True,
                )

            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="style_profile",
                method="update_from_feedback",
                correlation_id=correlation_id,
                rating=feedback.confidence_rating,
                patterns=len(updated.confidence_patterns),
            )
            return updated


__all__ = [
    "StyleProfileAgent",
    "analyze_body_type_preferences",
    "analyze_color_preferences",
    "analyze_confidence_patterns",
    "analyze_occasion_preferences",
    "analyze_style_preferences",
    "extract_context_factors",
    "merge_feedback",
    "style_threshold",
]
