"""End-to-end orchestrator tests over in-memory collaborators."""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from agents.calendar_agent import CalendarAgent
from agents.orchestrator import MirrorOrchestrator
from agents.outfit_stylist_agent import OutfitStylistAgent
from agents.style_profile_agent import StyleProfileAgent
from agents.weather_agent import WeatherAgent
from logic.validation import wardrobe_item_to_record
from memory.caches import FeedbackCache
from mirror_app.config import BOUNDED_PROFILE
from models.feedback import EmotionalResponse, OutfitFeedback
from models.outfit import OutfitRecommendation
from models.wardrobe_item import has_red_pink_clash
from tools.calendar_provider import MockCalendarProvider
from tools.errors import ConnectivityError
from tools.feedback_store import InMemoryFeedbackStore
from tools.profile_store import InMemoryProfileStore
from tools.weather_provider import MockWeatherProvider
from tools.wardrobe_store import InMemoryWardrobeStore

TEST_PROFILE = replace(BOUNDED_PROFILE, name="test", skip_remote_calls=False)


@pytest.fixture()
def wardrobe_records(make_item):
    items = [
        make_item("navy-top", "tops", colors=["navy"], tags=["casual"], rating=4.2, wears=5, worn_days_ago=10),
        make_item("black-pants", "bottoms", colors=["black"], tags=["casual"], rating=4.5, wears=8, worn_days_ago=12),
        make_item("brown-shoes", "shoes", colors=["brown"], rating=3.8, wears=3, worn_days_ago=45),
    ]
    return [wardrobe_item_to_record(item) for item in items]


def _orchestrator(records, stylist=None, profile=TEST_PROFILE):
    wardrobe = InMemoryWardrobeStore(records)
    feedback = InMemoryFeedbackStore()
    profiles = InMemoryProfileStore()
    cache = FeedbackCache()
    orchestrator = MirrorOrchestrator(
        wardrobe_store=wardrobe,
        feedback_store=feedback,
        profile_store=profiles,
        weather_agent=WeatherAgent(MockWeatherProvider(), profile),
        calendar_agent=CalendarAgent(MockCalendarProvider(), profile),
        stylist_agent=stylist or OutfitStylistAgent(execution_profile=profile),
        style_profile_agent=StyleProfileAgent(wardrobe, feedback, profiles, cache, profile),
        feedback_cache=cache,
        execution_profile=profile,
    )
    return orchestrator, wardrobe, feedback, profiles


def test_three_item_wardrobe_yields_three_ranked_recommendations(wardrobe_records, now) -> None:
    orchestrator, _, _, profiles = _orchestrator(wardrobe_records)

    daily = orchestrator.generate_daily_recommendations("user-1", now=now)

    recs = daily.recommendations
    assert len(recs) == 3
    assert [rec.is_quick_option for rec in recs] == [True, False, False]
    assert daily.quick_option is recs[0]
    assert daily.weather.temperature == 68.0
    assert daily.calendar is None
    assert not daily.used_cached_wardrobe
    assert any(rec.score_breakdown["rediscovery_bonus"] > 0 for rec in recs)
    assert not any(has_red_pink_clash(rec.items) for rec in recs)
    for rec in recs:
        assert 0.0 <= rec.confidence_score <= 1.0
        assert rec.confidence_note
        assert rec.reasoning
    assert profiles.upsert_count == 1


def test_deterministic_runs_repeat_the_same_notes(wardrobe_records, now) -> None:
    first = _orchestrator(wardrobe_records)[0].generate_daily_recommendations("user-1", now=now)
    second = _orchestrator(wardrobe_records)[0].generate_daily_recommendations("user-1", now=now)

    assert [rec.item_ids for rec in first.recommendations] == [rec.item_ids for rec in second.recommendations]
    assert [rec.confidence_note for rec in first.recommendations] == [
        rec.confidence_note for rec in second.recommendations
    ]


def test_wardrobe_outage_falls_back_to_snapshot(wardrobe_records, now) -> None:
    orchestrator, wardrobe, _, _ = _orchestrator(wardrobe_records)
    orchestrator.generate_daily_recommendations("user-1", now=now)
    wardrobe.available = False

    daily = orchestrator.generate_daily_recommendations("user-1", now=now + timedelta(days=1))

    assert daily.used_cached_wardrobe
    assert len(daily.recommendations) == 3


def test_same_day_requests_reuse_the_first_set(wardrobe_records, now) -> None:
    varied = replace(TEST_PROFILE, use_deterministic_selection=False)
    orchestrator, _, _, _ = _orchestrator(wardrobe_records, profile=varied)

    first = orchestrator.generate_daily_recommendations("user-1", now=now)
    second = orchestrator.generate_daily_recommendations("user-1", now=now + timedelta(hours=3))
    tomorrow = orchestrator.generate_daily_recommendations("user-1", now=now + timedelta(days=1))

    first_ids = [rec.recommendation_id for rec in first.recommendations]
    assert [rec.recommendation_id for rec in second.recommendations] == first_ids
    assert [rec.confidence_note for rec in second.recommendations] == [
        rec.confidence_note for rec in first.recommendations
    ]
    assert orchestrator.weather_agent.provider.calls == 2
    assert orchestrator.daily_cache.hits == 1
    assert not set(first_ids) & {rec.recommendation_id for rec in tomorrow.recommendations}


def test_same_day_set_is_rebuilt_after_feedback_or_wear(wardrobe_records, now) -> None:
    orchestrator, _, _, _ = _orchestrator(wardrobe_records)
    first = orchestrator.generate_daily_recommendations("user-1", now=now)
    rec = first.recommendations[0]

    orchestrator.process_user_feedback(
        OutfitFeedback(
            feedback_id="fb-1",
            user_id="user-1",
            outfit_recommendation_id=rec.recommendation_id,
            item_ids=tuple(rec.item_ids),
            confidence_rating=4,
            emotional_response=EmotionalResponse(primary="happy"),
            timestamp=now,
        )
    )
    after_feedback = orchestrator.generate_daily_recommendations("user-1", now=now)
    orchestrator.log_outfit_as_worn("user-1", after_feedback.recommendations[0], worn_at=now)
    after_wear = orchestrator.generate_daily_recommendations("user-1", now=now)

    assert after_feedback.recommendations[0].recommendation_id != rec.recommendation_id
    assert after_wear.recommendations[0].recommendation_id != after_feedback.recommendations[0].recommendation_id
    assert orchestrator.daily_cache.hits == 0


def test_reused_set_is_a_copy(wardrobe_records, now) -> None:
    orchestrator, _, _, _ = _orchestrator(wardrobe_records)
    first = orchestrator.generate_daily_recommendations("user-1", now=now)
    first.recommendations[0].is_quick_option = False

    second = orchestrator.generate_daily_recommendations("user-1", now=now)

    assert second.recommendations[0].is_quick_option


def test_wardrobe_outage_without_snapshot_raises(wardrobe_records, now) -> None:
    orchestrator, wardrobe, _, _ = _orchestrator(wardrobe_records)
    wardrobe.available = False

    with pytest.raises(ConnectivityError):
        orchestrator.generate_daily_recommendations("user-1", now=now)


def test_profile_store_outage_degrades_to_defaults(wardrobe_records, now) -> None:
    orchestrator, _, _, profiles = _orchestrator(wardrobe_records)
    profiles.available = False

    daily = orchestrator.generate_daily_recommendations("user-1", now=now)

    assert len(daily.recommendations) == 3


def test_empty_wardrobe_returns_no_recommendations(now) -> None:
    orchestrator, _, _, _ = _orchestrator([])

    daily = orchestrator.generate_daily_recommendations("user-1", now=now)

    assert daily.recommendations == []
    assert daily.quick_option is None


def test_clashing_recommendations_are_dropped_and_quick_option_reassigned(make_item, now) -> None:
    clash = OutfitRecommendation(
        recommendation_id="clash",
        items=[make_item("r", "tops", colors=["red"]), make_item("p", "bottoms", colors=["pink"])],
        confidence_score=0.9,
        confidence_note="note",
        is_quick_option=True,
    )
    calm = OutfitRecommendation(
        recommendation_id="calm",
        items=[make_item("w", "tops", colors=["white"])],
        confidence_score=0.7,
        confidence_note="note",
    )

    class ClashingStylist(OutfitStylistAgent):
        def generate_style_recommendations(self, wardrobe, context, *, styled_notes=False, rng=None):
            return [clash, calm]

    records = [wardrobe_item_to_record(make_item("w", "tops"))]
    orchestrator, _, _, _ = _orchestrator(records, stylist=ClashingStylist())

    daily = orchestrator.generate_daily_recommendations("user-1", now=now)

    assert [rec.recommendation_id for rec in daily.recommendations] == ["calm"]
    assert daily.recommendations[0].is_quick_option


def test_feedback_updates_profile_and_history(wardrobe_records, now) -> None:
    orchestrator, _, feedback_store, profiles = _orchestrator(wardrobe_records)
    rec = orchestrator.generate_daily_recommendations("user-1", now=now).recommendations[0]
    feedback = OutfitFeedback(
        feedback_id="fb-1",
        user_id="user-1",
        outfit_recommendation_id=rec.recommendation_id,
        item_ids=tuple(rec.item_ids),
        confidence_rating=5,
        emotional_response=EmotionalResponse(primary="confident", intensity=8),
        occasion="work",
        timestamp=now,
    )

    profile = orchestrator.process_user_feedback(feedback)

    assert feedback_store.append_count == 1
    assert profile.find_pattern(rec.item_ids) is not None
    assert profile.occasion_preferences["work"] == pytest.approx(3.75)
    assert profiles.get_style_profile("user-1").occasion_preferences["work"] == pytest.approx(3.75)


def test_logging_an_outfit_as_worn_lowers_its_novelty(wardrobe_records, now) -> None:
    orchestrator, _, feedback_store, _ = _orchestrator(wardrobe_records)
    first = orchestrator.generate_daily_recommendations("user-1", now=now)
    outfit = next(rec for rec in first.recommendations if len(rec.items) == 3)
    assert outfit.score_breakdown["novelty"] == 0.8

    worn = orchestrator.log_outfit_as_worn("user-1", outfit, worn_at=now)
    later = orchestrator.generate_daily_recommendations("user-1", now=now + timedelta(days=1))

    assert worn.item_ids == tuple(sorted(outfit.item_ids))
    assert feedback_store.get_worn_outfits("user-1") == [worn]
    again = next(rec for rec in later.recommendations if sorted(rec.item_ids) == sorted(outfit.item_ids))
    assert again.score_breakdown["novelty"] == 0.1


def test_saving_a_favorite_keeps_items_score_and_note(wardrobe_records, now) -> None:
    orchestrator, _, feedback_store, _ = _orchestrator(wardrobe_records)
    daily = orchestrator.generate_daily_recommendations("user-1", now=now)
    rec = daily.recommendations[0]

    favorite = orchestrator.save_outfit_to_favorites("user-1", rec, saved_at=now)
    orchestrator.save_outfit_to_favorites("user-1", rec, saved_at=now + timedelta(minutes=5))
    again = orchestrator.generate_daily_recommendations("user-1", now=now)

    assert favorite.recommendation_id == rec.recommendation_id
    assert favorite.item_ids == tuple(rec.item_ids)
    assert favorite.confidence_score == rec.confidence_score
    assert favorite.confidence_note == rec.confidence_note
    saved = feedback_store.get_favorite_outfits("user-1")
    assert [fav.saved_at for fav in saved] == [now + timedelta(minutes=5)]
    assert feedback_store.get_favorite_outfits("user-2") == []
    assert again.recommendations[0].recommendation_id == rec.recommendation_id


def test_saving_a_favorite_during_an_outage_raises(wardrobe_records, now) -> None:
    orchestrator, _, feedback_store, _ = _orchestrator(wardrobe_records)
    rec = orchestrator.generate_daily_recommendations("user-1", now=now).recommendations[0]
    feedback_store.available = False

    with pytest.raises(ConnectivityError):
        orchestrator.save_outfit_to_favorites("user-1", rec)


@pytest.mark.parametrize("score, level",[(0.85, "High"), (0.6, "Medium"), (0.3, "Building")])
def test_shareable_outfit_levels(make_item, score: float, level: str) -> None:
    rec = OutfitRecommendation(
        recommendation_id="rec-1",
        items=[make_item("a", "tops"), make_item("b", "bottoms")],
        confidence_score=score,
        confidence_note="You look great.",
    )

    shareable = MirrorOrchestrator.generate_shareable_outfit(rec)

    assert shareable.title == "My Outfit Look"
    assert shareable.confidence_level == level
    assert shareable.item_ids == ["a", "b"]
    assert shareable.description == (
        f"Feeling confident in this outfit! You look great. Confidence Level: {level} ✨"
    )
