"""Color harmony rule table for deterministic outfit scoring."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

from models.taxonomy import is_neutral_color, normalize_color_name

logger = logging.getLogger(__name__)

HARMONY_SCORES: Dict[str, float] = {
    "neutral": 0.99,
    "complementary": 0.9,
    "analogous": 0.85,
    "triadic": 0.8,
    "same_family": 0.92,
    "clashing": 0.6,
    "uniform": 0.9,
}

_COMPLEMENTARY_PAIRS: FrozenSet[FrozenSet[str]] = frozenset(
    {
        frozenset({"red", "green"}),
        frozenset({"blue", "orange"}),
        frozenset({"yellow", "purple"}),
    }
)

_ANALOGOUS_GROUPS: Tuple[FrozenSet[str], ...] = (
    frozenset({"red", "orange", "yellow"}),
    frozenset({"blue", "green", "purple"}),
    frozenset({"yellow", "green", "blue"}),
)

_TRIADIC_GROUPS: Tuple[FrozenSet[str], ...] = (
    frozenset({"red", "blue", "yellow"}),
    frozenset({"orange", "green", "purple"}),
)


@dataclass(frozen=True)
class HarmonyResult:
    """Represents the outcome of a harmony evaluation."""

    score: float
    pair_rules: List[Tuple[str, str, str]]
    colors: List[str]


def _normalise_colors(colors: Iterable[str]) -> List[str]:
    normalised: List[str] = []
    for color in colors:
        if not color:
            continue
        key = normalize_color_name(color)
        if key and key not in normalised:
            normalised.append(key)
    return normalised


def _in_group(first: str, second: str, groups: Sequence[FrozenSet[str]]) -> bool:
    return any(first in group and second in group for group in groups)


def classify_pair(color1: str, color2: str) -> str:
    """Return the first harmony rule the pair satisfies, in priority order."""

    c1, c2 = normalize_color_name(color1), normalize_color_name(color2)
    if is_neutral_color(c1) or is_neutral_color(c2):
        rule = "neutral"
    elif frozenset({c1, c2}) in _COMPLEMENTARY_PAIRS:
        rule = "complementary"
    elif _in_group(c1, c2, _ANALOGOUS_GROUPS):
        rule = "analogous"
    elif _in_group(c1, c2, _TRIADIC_GROUPS):
        rule = "triadic"
    elif c1 == c2 or c1 in c2 or c2 in c1:
        rule = "same_family"
    else:
        rule = "clashing"
    logger.debug("pair harmony (%s, %s) -> %s", c1, c2, rule)
    return rule


def evaluate_harmony(colors: Iterable[str]) -> HarmonyResult:
    """Average the pairwise harmony of an outfit's colors, capped at 1.0."""

    normalised = _normalise_colors(colors)
    if len(normalised) < 2:
        return HarmonyResult(score=HARMONY_SCORES["uniform"], pair_rules=[], colors=normalised)

    pair_rules = [(c1, c2, classify_pair(c1, c2)) for c1, c2 in combinations(normalised, 2)]
    average = sum(HARMONY_SCORES[rule] for _, _, rule in pair_rules) / len(pair_rules)
    return HarmonyResult(score=min(1.0, average), pair_rules=pair_rules, colors=normalised)


__all__ = ["HARMONY_SCORES", "HarmonyResult", "classify_pair", "evaluate_harmony"]
