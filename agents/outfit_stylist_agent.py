"""Outfit stylist agent running the deterministic scoring pipeline."""
from __future__ import annotations

import logging
import random
import uuid
from typing import Dict, List, Optional

from mirror_app.config import DEFAULT_WEIGHTS, ExecutionProfile, PRODUCTION_PROFILE, ScoringWeights
from mirror_app.logging_config import get_logger, log_event, operation_context
from logic.combination_generator import generate_outfit_combinations
from logic.confidence_notes import generate_confidence_note
from logic.contextual_filtering import FilteringResult, filter_available_items, filter_clean_items
from logic.ranking import ScoredCandidate, rank_candidates, score_candidate
from logic.reasoning import build_reasoning
from models.context import RecommendationContext
from models.outfit import OutfitRecommendation
from models.wardrobe_item import WardrobeItem

logger = get_logger(__name__)


class OutfitStylistAgent:
    """Turns a wardrobe and a day's context into up to three ranked outfits."""

    def __init__(
        self,
        weights: Optional[ScoringWeights] = None,
        execution_profile: ExecutionProfile = PRODUCTION_PROFILE,
    ) -> None:
        self.weights = weights or DEFAULT_WEIGHTS
        self.execution_profile = execution_profile

    def generate_style_recommendations(
        self,
        wardrobe: List[WardrobeItem],
        context: RecommendationContext,
        *,
        styled_notes: bool = False,
        rng: Optional[random.Random] = None,
    ) -> List[OutfitRecommendation]:
        """Return recommendations best first; the first one is the quick option."""

        with operation_context("agent:stylist.generate_style_recommendations") as correlation_id:
            if not wardrobe:
                log_event(
                    logger,
                    level=logging.INFO,
                    event="empty_wardrobe",
                    agent="stylist",
                    correlation_id=correlation_id,
                )
                return []

            filtered = self._available_pool(wardrobe, context)
            candidates = generate_outfit_combinations(filtered.items, self.execution_profile)
            scored = [score_candidate(items, context, self.weights) for items in candidates]
            ranked = rank_candidates(scored, context.style_profile)

            recommendations = [
                self._to_recommendation(candidate, context, index == 0, styled_notes, rng)
                for index, candidate in enumerate(ranked)
            ]

            log_event(
                logger,
                level=logging.INFO,
                event="agent_call_completed",
                agent="stylist",
                method="generate_style_recommendations",
                correlation_id=correlation_id,
                wardrobe_size=len(wardrobe),
                available=len(filtered.items),
                relaxed=bool(filtered.debug.get("relaxed")),
                candidate_count=len(candidates),
                recommendation_count=len(recommendations),
                scores=[round(candidate.final_score, 3) for candidate in ranked],
            )
            return recommendations

    def _available_pool(self, wardrobe: List[WardrobeItem], context: RecommendationContext) -> FilteringResult:
        result = filter_available_items(wardrobe, context.weather, context.date)
        if result.items:
            return result
        relaxed = filter_clean_items(wardrobe, context.date)
        logger.warning(
            "Availability filter removed every item; relaxing to clean items",
            extra={"removed_count": len(result.removed), "relaxed_count": len(relaxed.items)},
        )
        return relaxed

    def _to_recommendation(
        self,
        candidate: ScoredCandidate,
        context: RecommendationContext,
        is_quick_option: bool,
        styled_notes: bool,
        rng: Optional[random.Random],
    ) -> OutfitRecommendation:
        breakdown: Dict[str, float] = dict(candidate.components)
        breakdown["final"] = candidate.final_score
        note = generate_confidence_note(
            candidate.items,
            context,
            styled=styled_notes,
            confidence_score=candidate.confidence.score,
            rng=rng,
        )
        return OutfitRecommendation(
            recommendation_id=uuid.uuid4().hex,
            items=list(candidate.items),
            confidence_score=candidate.confidence.score,
            confidence_note=note,
            reasoning=build_reasoning(candidate, context.weather, context.date),
            is_quick_option=is_quick_option,
            score_breakdown=breakdown,
        )


__all__ = ["OutfitStylistAgent"]
