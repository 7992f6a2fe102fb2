"""Deterministic compatibility scoring for candidate outfits."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, List, Optional

from mirror_app.config import DEFAULT_WEIGHTS, ScoringWeights
from mirror_app.logging_config import log_event
from models.color_theory import evaluate_harmony
from models.taxonomy import CASUAL_TAGS, FORMAL_TAGS
from models.wardrobe_item import WardrobeItem

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 0.5


def _clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return max(lower, min(upper, value))


def calculate_color_harmony(items: List[WardrobeItem]) -> float:
    """Pairwise harmony of every color present in the outfit."""

    return evaluate_harmony(color for item in items for color in item.colors).score


def calculate_style_consistency(items: List[WardrobeItem]) -> float:
    """Share of tags that recur across items, relative to outfit size."""

    if not items:
        return 0.0
    counts = Counter(tag for item in items for tag in set(item.tags))
    shared = sum(1 for count in counts.values() if count > 1)
    return _clamp(shared / len(items))


def calculate_category_balance(items: List[WardrobeItem]) -> float:
    categories = {item.category for item in items}
    if 2 <= len(categories) <= 4:
        return 1.0
    if len(categories) == 1:
        return 0.3
    if len(categories) > 4:
        return 0.6
    return 0.0


def calculate_formality_consistency(items: List[WardrobeItem]) -> float:
    """Reward outfits that lean consistently formal or consistently casual."""

    if not items:
        return 0.0
    formal = sum(1 for item in items if FORMAL_TAGS.intersection(item.tags))
    casual = sum(1 for item in items if CASUAL_TAGS.intersection(item.tags))
    return _clamp(max(formal / len(items), casual / len(items)))


def compatibility_breakdown(items: List[WardrobeItem]) -> Dict[str, float]:
    return {
        "color_harmony": calculate_color_harmony(items),
        "style_consistency": calculate_style_consistency(items),
        "category_balance": calculate_category_balance(items),
        "formality": calculate_formality_consistency(items),
    }


def calculate_outfit_compatibility(
    items: List[WardrobeItem], weights: Optional[ScoringWeights] = None
) -> float:
    """Blend the four heuristics into one score in [0, 1].

    Outfits of fewer than two pieces have nothing to be compatible with and get
    the neutral score.
    """

    if len(items) < 2:
        return NEUTRAL_SCORE
    blend = (weights or DEFAULT_WEIGHTS).compatibility
    try:
        sub_scores = compatibility_breakdown(items)
        return _clamp(sum(sub_scores[key] * blend[key] for key in blend))
    except Exception:  # noqa: BLE001
        log_event(
            logger,
            logging.WARNING,
            "compatibility_scoring_failed",
            item_ids=[getattr(item, "item_id", None) for item in items],
            exc_info=True,
        )
        return NEUTRAL_SCORE


__all__ = [
    "NEUTRAL_SCORE",
    "calculate_category_balance",
    "calculate_color_harmony",
    "calculate_formality_consistency",
    "calculate_outfit_compatibility",
    "calculate_style_consistency",
    "compatibility_breakdown",
]
