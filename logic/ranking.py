"""Per-candidate scoring and diversified top-three selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from mirror_app.config import DEFAULT_WEIGHTS, ScoringWeights
from mirror_app.logging_config import log_event
from logic.outfit_scoring import calculate_outfit_compatibility
from logic.weather_scoring import calculate_occasion_compatibility, calculate_weather_compatibility
from models.context import RecommendationContext
from models.feedback import OutfitFeedback, WornOutfit, combination_key
from models.style_profile import ConfidencePattern, StyleProfile
from models.wardrobe_item import WardrobeItem, days_between, has_red_pink_clash, merged_colors

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 0.5
CONFIDENCE_FLOOR = 0.1
CONFIDENCE_CEILING = 1.0
USAGE_BONUS_DIVISOR = 12.0
USAGE_BONUS_CAP = 0.25
REDISCOVERY_BONUS = 0.1

NEW_COMBINATION_NOVELTY = 0.8
NOVELTY_STEPS = ((30, 0.6), (14, 0.4), (7, 0.2))
RECENT_NOVELTY = 0.1

BAD_PATTERN_RATING = 3.0
LOW_ITEM_RATING = 3.3
TOP_N = 3

CONTEXT_WEIGHTS = {"weather": 0.4, "occasion": 0.3, "time": 0.3, "preference": 0.2}
WORK_TAGS = ("work", "business", "professional")
EVENING_TAGS = ("evening", "elegant", "dressy")


def _clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return max(lower, min(upper, value))


@dataclass(frozen=True)
class ConfidenceBreakdown:
    score: float
    base: float = NEUTRAL_SCORE
    usage_bonus: float = 0.0
    rediscovery_bonus: float = 0.0
    matched_history: int = 0


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate outfit with every component score kept for reasoning."""

    items: List[WardrobeItem]
    final_score: float
    confidence: ConfidenceBreakdown
    components: Dict[str, float] = field(default_factory=dict)
    demoted: bool = False

    @property
    def item_ids(self) -> List[str]:
        return [item.item_id for item in self.items]


def has_preferred_color(items: Sequence[WardrobeItem], preferred_colors: Sequence[str]) -> bool:
    preferred = [color.lower() for color in preferred_colors if color]
    for color in merged_colors(list(items)):
        if any(pref in color or color in pref for pref in preferred):
            return True
    return False


def calculate_confidence_score(
    items: List[WardrobeItem], feedback_history: Sequence[OutfitFeedback], now: datetime
) -> ConfidenceBreakdown:
    """History-informed confidence, floored so no outfit reads as hopeless."""

    try:
        candidate_ids = {item.item_id for item in items}
        base = NEUTRAL_SCORE
        matched = 0
        for entry in feedback_history:
            entry_ids = set(entry.item_ids)
            overlap = len(candidate_ids & entry_ids)
            if not overlap:
                continue
            weight = overlap / max(len(candidate_ids), len(entry_ids))
            base += (entry.confidence_rating / 5.0) * weight
            matched += 1
        if matched:
            base /= matched + 1

        usage_bonus = 0.0
        if items:
            average_wears = sum(item.usage_stats.total_wears for item in items) / len(items)
            usage_bonus = min(average_wears / USAGE_BONUS_DIVISOR, USAGE_BONUS_CAP)
        rediscovery_bonus = REDISCOVERY_BONUS if any(item.is_neglected(now) for item in items) else 0.0

        score = _clamp(base + usage_bonus + rediscovery_bonus, CONFIDENCE_FLOOR, CONFIDENCE_CEILING)
        return ConfidenceBreakdown(
            score=score,
            base=base,
            usage_bonus=usage_bonus,
            rediscovery_bonus=rediscovery_bonus,
            matched_history=matched,
        )
    except Exception:  # noqa: BLE001
        log_event(logger, logging.WARNING, "confidence_scoring_failed", exc_info=True)
        return ConfidenceBreakdown(score=NEUTRAL_SCORE)


def _matching_patterns(items: Sequence[WardrobeItem], patterns: Sequence[ConfidencePattern]) -> List[ConfidencePattern]:
    candidate_ids = {item.item_id for item in items}
    return [pattern for pattern in patterns if candidate_ids.intersection(pattern.item_combination)]


def predict_user_satisfaction(items: List[WardrobeItem], style_profile: StyleProfile) -> float:
    try:
        colors = [color for item in items for color in item.colors]
        preferred_colors = set(style_profile.preferred_colors)
        color_alignment = 0.0
        if colors:
            matching = sum(1 for color in colors if color in preferred_colors)
            color_alignment = min(1.0, matching / len(colors) * 1.2)

        tags = [tag for item in items for tag in item.tags]
        preferred_styles = set(style_profile.preferred_styles)
        style_alignment = sum(1 for tag in tags if tag in preferred_styles) / len(tags) if tags else 0.0

        patterns = _matching_patterns(items, style_profile.confidence_patterns)
        pattern_alignment = 0.0
        if patterns:
            pattern_alignment = sum(pattern.average_rating / 5.0 for pattern in patterns) / len(patterns)

        return _clamp(NEUTRAL_SCORE + color_alignment * 0.3 + style_alignment * 0.3 + pattern_alignment * 0.4)
    except Exception:  # noqa: BLE001
        log_event(logger, logging.WARNING, "satisfaction_scoring_failed", exc_info=True)
        return NEUTRAL_SCORE


def calculate_time_appropriateness(items: Sequence[WardrobeItem], moment: datetime) -> float:
    hour = moment.hour
    score = NEUTRAL_SCORE
    if 6 <= hour < 12 and any(item.has_any_tag(*WORK_TAGS) for item in items):
        score += 0.2
    elif hour >= 18 and any(item.has_any_tag(*EVENING_TAGS) for item in items):
        score += 0.2
    return _clamp(score)


def calculate_preference_alignment(items: Sequence[WardrobeItem], style_profile: StyleProfile) -> float:
    if not items:
        return NEUTRAL_SCORE
    score = sum(_clamp(item.usage_stats.average_rating / 5.0) for item in items) / len(items)
    if has_preferred_color(items, style_profile.preferred_colors):
        score += 0.1
    return _clamp(score)


def calculate_contextual_relevance(items: List[WardrobeItem], context: RecommendationContext) -> float:
    """Normalised blend of weather, occasion, time of day and personal fit."""

    try:
        terms = [
            (calculate_weather_compatibility(items, context.weather), CONTEXT_WEIGHTS["weather"]),
            (calculate_time_appropriateness(items, context.date), CONTEXT_WEIGHTS["time"]),
            (calculate_preference_alignment(items, context.style_profile), CONTEXT_WEIGHTS["preference"]),
        ]
        if context.calendar is not None and context.calendar.primary_event is not None:
            terms.append(
                (calculate_occasion_compatibility(items, context.calendar), CONTEXT_WEIGHTS["occasion"])
            )
        total_weight = sum(weight for _, weight in terms)
        return _clamp(sum(value * weight for value, weight in terms) / total_weight)
    except Exception:  # noqa: BLE001
        log_event(logger, logging.WARNING, "contextual_scoring_failed", exc_info=True)
        return NEUTRAL_SCORE


def calculate_novelty_score(
    items: List[WardrobeItem], worn_history: Sequence[WornOutfit], now: datetime
) -> float:
    """Step function over days since this exact item set was last worn."""

    try:
        key = combination_key([item.item_id for item in items])
        worn_dates = [entry.worn_at for entry in worn_history if ",".join(entry.item_ids) == key]
        if not worn_dates:
            return NEW_COMBINATION_NOVELTY
        days = days_between(max(worn_dates), now)
        for threshold, score in NOVELTY_STEPS:
            if days > threshold:
                return score
        return RECENT_NOVELTY
    except Exception:  # noqa: BLE001
        log_event(logger, logging.WARNING, "novelty_scoring_failed", exc_info=True)
        return NEUTRAL_SCORE


def score_candidate(
    items: List[WardrobeItem], context: RecommendationContext, weights: Optional[ScoringWeights] = None
) -> ScoredCandidate:
    weights = weights or DEFAULT_WEIGHTS
    confidence = calculate_confidence_score(items, context.feedback_history, context.date)
    components = {
        "compatibility": calculate_outfit_compatibility(items, weights),
        "confidence": confidence.score,
        "satisfaction": predict_user_satisfaction(items, context.style_profile),
        "contextual": calculate_contextual_relevance(items, context),
        "novelty": calculate_novelty_score(items, context.worn_history, context.date),
        "weather": calculate_weather_compatibility(items, context.weather),
        "rediscovery_bonus": confidence.rediscovery_bonus,
    }
    total = sum(components[key] * weight for key, weight in weights.final.items())
    if has_preferred_color(items, context.style_profile.preferred_colors):
        total += weights.preferred_color_bonus
    if has_red_pink_clash(items):
        total -= weights.color_clash_penalty
    return ScoredCandidate(items=items, final_score=_clamp(total), confidence=confidence, components=components)


def _matches_bad_pattern(candidate: ScoredCandidate, bad_patterns: Sequence[ConfidencePattern]) -> bool:
    candidate_ids = set(candidate.item_ids)
    threshold = min(2, len(candidate_ids))
    return any(len(candidate_ids.intersection(pattern.item_combination)) >= threshold for pattern in bad_patterns)


def _has_low_rated_item(candidate: ScoredCandidate) -> bool:
    return any(0 < item.usage_stats.average_rating < LOW_ITEM_RATING for item in candidate.items)


def _filter_with_floor(
    candidates: List[ScoredCandidate], predicate: Callable[[ScoredCandidate], bool], floor: int
) -> List[ScoredCandidate]:
    """Drop flagged candidates unless that would leave fewer than ``floor``.

    Flagged candidates kept to satisfy the floor are marked demoted so they
    rank below every unflagged one.
    """

    kept = [candidate for candidate in candidates if not predicate(candidate)]
    flagged = sorted(
        (candidate for candidate in candidates if predicate(candidate)),
        key=lambda candidate: -candidate.final_score,
    )
    shortfall = max(0, min(floor, len(candidates)) - len(kept))
    return kept + [replace(candidate, demoted=True) for candidate in flagged[:shortfall]]


def _diversify(ordered: List[ScoredCandidate], limit: int) -> List[ScoredCandidate]:
    if not ordered:
        return []
    selected = [ordered[0]]
    used_categories = {item.category for item in ordered[0].items}
    used_colors = set(merged_colors(ordered[0].items))
    for candidate in ordered[1:]:
        if len(selected) >= limit:
            break
        categories = {item.category for item in candidate.items}
        colors = set(merged_colors(candidate.items))
        if categories - used_categories or len(colors - used_colors) > 2 or len(selected) < 2:
            selected.append(candidate)
            used_categories |= categories
            used_colors |= colors
    for candidate in ordered:
        if len(selected) >= limit:
            break
        if not any(candidate is chosen for chosen in selected):
            selected.append(candidate)
    return selected


def rank_candidates(
    scored: List[ScoredCandidate], style_profile: StyleProfile, limit: int = TOP_N
) -> List[ScoredCandidate]:
    """Filter, sort and diversify scored candidates down to ``limit`` results."""

    eligible = [candidate for candidate in scored if not has_red_pink_clash(candidate.items)]
    bad_patterns = [p for p in style_profile.confidence_patterns if p.average_rating < BAD_PATTERN_RATING]
    if bad_patterns:
        eligible = _filter_with_floor(eligible, lambda c: _matches_bad_pattern(c, bad_patterns), limit)
    eligible = _filter_with_floor(eligible, _has_low_rated_item, limit)

    ordered = sorted(eligible, key=lambda candidate: (candidate.demoted, -candidate.final_score))
    selected = _diversify(ordered, limit)
    logger.info(
        "Ranked %s candidates into %s selections (%s demoted)",
        len(scored),
        len(selected),
        sum(1 for candidate in selected if candidate.demoted),
    )
    return selected


__all__ = [
    "CONFIDENCE_FLOOR",
    "ConfidenceBreakdown",
    "ScoredCandidate",
    "calculate_confidence_score",
    "calculate_contextual_relevance",
    "calculate_novelty_score",
    "calculate_preference_alignment",
    "calculate_time_appropriateness",
    "has_preferred_color",
    "predict_user_satisfaction",
    "rank_candidates",
    "score_candidate",
]
