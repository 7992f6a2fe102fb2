"""Deterministic candidate outfit assembly.

Candidates are generated in priority order (dress looks, then separates, then
a pairwise fallback) and bounded by the caps of the caller's
:class:`~mirror_app.config.ExecutionProfile`. Ranking happens downstream.
"""
from __future__ import annotations

import logging
from itertools import combinations
from typing import Dict, List, Optional

from mirror_app.config import PRODUCTION_PROFILE, ExecutionProfile
from models.wardrobe_item import WardrobeItem, has_red_pink_clash

logger = logging.getLogger(__name__)

MIN_CANDIDATES = 3


def _group_by_category(items: List[WardrobeItem]) -> Dict[str, List[WardrobeItem]]:
    grouped: Dict[str, List[WardrobeItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped


def _with_outerwear(base: List[WardrobeItem], outerwear: List[WardrobeItem]) -> List[WardrobeItem]:
    return base + outerwear[:1]


def _dress_combinations(grouped: Dict[str, List[WardrobeItem]], cap: int) -> List[List[WardrobeItem]]:
    results: List[List[WardrobeItem]] = []
    outerwear = grouped.get("outerwear", [])
    for dress in grouped.get("dresses", []):
        for shoes in grouped.get("shoes", []):
            if len(results) >= cap:
                return results
            candidate = _with_outerwear([dress, shoes], outerwear)
            if not has_red_pink_clash(candidate):
                results.append(candidate)
    return results


def _separates_combinations(grouped: Dict[str, List[WardrobeItem]], cap: int) -> List[List[WardrobeItem]]:
    results: List[List[WardrobeItem]] = []
    outerwear = grouped.get("outerwear", [])
    for top in grouped.get("tops", []):
        for bottom in grouped.get("bottoms", []):
            for shoes in grouped.get("shoes", []):
                if len(results) >= cap:
                    return results
                candidate = _with_outerwear([top, bottom, shoes], outerwear)
                if not has_red_pink_clash(candidate):
                    results.append(candidate)
    return results


def _pair_combinations(items: List[WardrobeItem], cap: int) -> List[List[WardrobeItem]]:
    results: List[List[WardrobeItem]] = []
    for first, second in combinations(items, 2):
        if len(results) >= cap:
            break
        candidate = [first, second]
        if not has_red_pink_clash(candidate):
            results.append(candidate)
    return results


def _pad_with_singles(results: List[List[WardrobeItem]], items: List[WardrobeItem]) -> List[List[WardrobeItem]]:
    used_singles = {tuple(item.item_id for item in combo) for combo in results if len(combo) == 1}
    for item in items:
        if len(results) >= MIN_CANDIDATES:
            break
        if (item.item_id,) in used_singles or has_red_pink_clash([item]):
            continue
        results.append([item])
        used_singles.add((item.item_id,))
    return results


def generate_outfit_combinations(
    items: List[WardrobeItem], profile: Optional[ExecutionProfile] = None
) -> List[List[WardrobeItem]]:
    """Return candidate outfits; never raises on finite input."""

    if not items:
        return []
    caps = profile or PRODUCTION_PROFILE
    grouped = _group_by_category(items)

    dress_looks = _dress_combinations(grouped, caps.max_dress_combinations)
    separates = _separates_combinations(grouped, caps.max_triple_combinations)
    results = dress_looks + separates
    pairs: List[List[WardrobeItem]] = []
    if not results and len(items) >= 2:
        pairs = _pair_combinations(items, caps.max_pair_combinations)
        results = pairs

    results = results[: max(caps.max_total_combinations, MIN_CANDIDATES)]
    if len(results) < MIN_CANDIDATES:
        results = _pad_with_singles(results, items)

    logger.info(
        "Generated %s candidates (dress=%s separates=%s pairs=%s) from %s items using %s caps",
        len(results),
        len(dress_looks),
        len(separates),
        len(pairs),
        len(items),
        caps.name,
    )
    return results


__all__ = ["MIN_CANDIDATES", "generate_outfit_combinations"]
