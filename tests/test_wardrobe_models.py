"""Taxonomy, wardrobe item and boundary validation tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from logic.validation import FeedbackRecord, feedback_to_record, to_feedback, to_wardrobe_item, to_wardrobe_items
from models import taxonomy
from models.feedback import EmotionalResponse, OutfitFeedback, WornOutfit
from models.wardrobe_item import WardrobeItem, has_red_pink_clash, merged_colors, utc_now


def test_category_aliases_normalise_and_unknown_categories_fail() -> None:
    assert taxonomy.validate_category("Top") == "tops"
    assert taxonomy.validate_category(" coat ") == "outerwear"
    with pytest.raises(ValueError):
        taxonomy.validate_category("spacesuit")


def test_color_normalisation_and_neutral_detection() -> None:
    assert taxonomy.normalize_color_name("Navy Blue") == "navy"
    assert taxonomy.normalize_color_name("#FFFFFF") == "white"
    assert taxonomy.normalize_color_name("burgundy") == "red"
    assert taxonomy.is_neutral_color("charcoal")
    assert not taxonomy.is_neutral_color("pink")


def test_wardrobe_item_normalises_colors_and_tags() -> None:
    item = WardrobeItem(
        item_id="a",
        user_id="u",
        category="Top",
        colors=["Navy", "navy", " White "],
        tags=["Long Sleeve", "long sleeve", "CASUAL"],
    )

    assert item.category == "tops"
    assert item.colors == ["navy", "white"]
    assert item.tags == ["long-sleeve", "casual"]


def test_never_worn_item_counts_as_neglected(make_item, now) -> None:
    fresh = make_item("a", "tops", worn_days_ago=3)
    old = make_item("b", "tops", worn_days_ago=31)
    never = make_item("c", "tops", worn_days_ago=None)

    assert not fresh.is_neglected(now)
    assert old.is_neglected(now)
    assert never.is_neglected(now)
    assert never.days_since_worn(now) == 999


def test_red_pink_clash_uses_merged_lowercase_colors(make_item) -> None:
    red = make_item("r", "tops", colors=["Red"])
    pink = make_item("p", "bottoms", colors=["PINK"])
    white = make_item("w", "shoes", colors=["white"])

    assert merged_colors([red, pink, white]) == ["red", "pink", "white"]
    assert has_red_pink_clash([red, pink])
    assert not has_red_pink_clash([red, white])


def test_loose_camel_case_record_maps_to_item() -> None:
    item = to_wardrobe_item(
        {
            "id": 42,
            "userId": "u-1",
            "category": "shoe",
            "colors": "brown, tan",
            "tags": None,
            "usageStats": {"totalWears": "7", "averageRating": 9, "lastWorn": "2025-05-01T10:00:00Z"},
        }
    )

    assert item is not None
    assert item.item_id == "42"
    assert item.category == "shoes"
    assert item.colors == ["brown", "tan"]
    assert item.tags == []
    assert item.usage_stats.total_wears == 7
    assert item.usage_stats.average_rating == 5.0
    assert item.usage_stats.last_worn == datetime(2025, 5, 1, 10, 0, tzinfo=timezone.utc)


def test_unusable_records_are_skipped() -> None:
    rows = [
        {"item_id": "ok", "user_id": "u", "category": "tops"},
        {"item_id": "bad", "user_id": "u", "category": "spacesuit"},
        {"user_id": "u", "category": "tops"},
    ]

    items = to_wardrobe_items(rows)

    assert [item.item_id for item in items] == ["ok"]


def test_feedback_record_round_trips_through_store_shape() -> None:
    feedback = OutfitFeedback(
        feedback_id="f-1",
        user_id="u",
        outfit_recommendation_id="rec-1",
        item_ids=("b", "a"),
        confidence_rating=4,
        emotional_response=EmotionalResponse(primary="confident", intensity=8),
        occasion="work",
    )

    restored = to_feedback(feedback_to_record(feedback))

    assert restored is not None
    assert restored.combination_key == "a,b"
    assert restored.emotional_response.primary == "confident"
    assert restored.occasion == "work"


def test_feedback_rating_out_of_range_is_rejected() -> None:
    assert to_feedback({"id": "f", "user_id": "u", "confidence_rating": 7}) is None
    with pytest.raises(ValueError):
        OutfitFeedback(
            feedback_id="f",
            user_id="u",
            outfit_recommendation_id="r",
            item_ids=(),
            confidence_rating=0,
            emotional_response=EmotionalResponse(primary="meh"),
        )


def test_worn_outfit_sorts_item_ids() -> None:
    worn = WornOutfit(user_id="u", item_ids=("c", "a", "b"), worn_at=datetime(2025, 1, 1))

    assert worn.item_ids == ("a", "b", "c")
    assert worn.worn_at.tzinfo is not None


def test_feedback_record_without_timestamp_defaults_to_aware_utc_now() -> None:
    record = FeedbackRecord.model_validate({"id": "f", "user_id": "u", "confidence_rating": 4})
    restored = to_feedback({"id": "f", "user_id": "u", "confidence_rating": 4})

    assert record.timestamp.utcoffset() == timedelta(0)
    assert abs(utc_now() - restored.timestamp) < timedelta(minutes=1)
