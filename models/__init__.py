"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.wardrobe_item import UsageStats, WardrobeItem

__all__ = ["UsageStats", "WardrobeItem"]
