"""Canonical taxonomy definitions for wardrobe items.

This module centralises the canonical category labels, the tag vocabularies
the scoring heuristics key off and the color normalisation used by the
harmony rules. Helper functions keep validation consistent across the
models, the scoring logic and the store mappers.
"""

import re
from typing import Dict, FrozenSet, Iterable, List

CATEGORIES: List[str] = [
    "tops",
    "bottoms",
    "dresses",
    "shoes",
    "outerwear",
    "accessories",
    "activewear",
]

_CATEGORY_ALIASES: Dict[str, str] = {
    "top": "tops",
    "bottom": "bottoms",
    "dress": "dresses",
    "shoe": "shoes",
    "accessory": "accessories",
    "jacket": "outerwear",
    "coat": "outerwear",
}

FORMAL_TAGS: FrozenSet[str] = frozenset({"formal", "business", "elegant", "dressy"})
CASUAL_TAGS: FrozenSet[str] = frozenset({"casual", "everyday", "relaxed", "comfortable"})
UNCLEAN_TAGS: FrozenSet[str] = frozenset({"needs-cleaning", "dirty", "stained", "at-cleaner", "dry-cleaning"})

NEUTRAL_COLORS: FrozenSet[str] = frozenset({"black", "white", "gray", "grey", "beige", "navy", "brown"})

_HEX_NEUTRALS: Dict[str, str] = {
    "#000000": "black",
    "#000": "black",
    "#ffffff": "white",
    "#fff": "white",
    "#808080": "gray",
    "#888888": "gray",
}

COLOR_MAP: Dict[str, str] = {
    "navy blue": "navy",
    "light blue": "blue",
    "sky blue": "blue",
    "off white": "white",
    "off-white": "white",
    "ivory": "white",
    "cream": "beige",
    "tan": "beige",
    "camel": "beige",
    "grey": "gray",
    "charcoal": "gray",
    "olive": "green",
    "burgundy": "red",
    "maroon": "red",
    "violet": "purple",
    "lavender": "purple",
}

_TAG_PATTERN = re.compile(r"\s+")


def validate_category(value: str) -> str:
    """Validate and normalise a category value.

    Raises a :class:`ValueError` if the category is not part of the canonical
    taxonomy.
    """

    key = str(value).strip().lower()
    key = _CATEGORY_ALIASES.get(key, key)
    if key not in CATEGORIES:
        raise ValueError(f"Unsupported category '{value}'. Allowed: {CATEGORIES}")
    return key


def normalize_color_name(raw_string: str) -> str:
    """Map a raw color string or common neutral hex code to a canonical name."""

    key = str(raw_string).strip().lower()
    if key.startswith("#"):
        return _HEX_NEUTRALS.get(key, key)
    return COLOR_MAP.get(key, key)


def is_neutral_color(color: str) -> bool:
    """Neutral when the normalised name contains any neutral token (``navy blue``)."""

    key = normalize_color_name(color)
    return any(neutral in key for neutral in NEUTRAL_COLORS)


def normalise_tags(values: Iterable[str]) -> List[str]:
    """Lowercase, hyphenate and deduplicate free-form tags preserving order."""

    normalised = []
    seen = set()
    for value in values:
        key = _TAG_PATTERN.sub("-", str(value).strip().lower())
        if key and key not in seen:
            normalised.append(key)
            seen.add(key)
    return normalised


def normalise_colors(values: Iterable[str]) -> List[str]:
    """Lowercase and deduplicate colors, keeping the raw token for display."""

    normalised = []
    seen = set()
    for value in values:
        key = str(value).strip().lower()
        if key and key not in seen:
            normalised.append(key)
            seen.add(key)
    return normalised


__all__ = [
    "CASUAL_TAGS",
    "CATEGORIES",
    "COLOR_MAP",
    "FORMAL_TAGS",
    "NEUTRAL_COLORS",
    "UNCLEAN_TAGS",
    "is_neutral_color",
    "normalise_colors",
    "normalise_tags",
    "normalize_color_name",
    "validate_category",
]
