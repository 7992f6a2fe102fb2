"""Scoring and ranking engine tests."""

from __future__ import annotations

from datetime import timedelta

import pytest

from logic.ranking import (
    CONFIDENCE_FLOOR,
    ConfidenceBreakdown,
    ScoredCandidate,
    calculate_confidence_score,
    calculate_contextual_relevance,
    calculate_novelty_score,
    calculate_time_appropriateness,
    predict_user_satisfaction,
    rank_candidates,
    score_candidate,
)
from models.context import CalendarContext, CalendarEvent
from models.feedback import EmotionalResponse, OutfitFeedback, WornOutfit
from models.style_profile import ConfidencePattern, StyleProfile, empty_profile


def _feedback(item_ids, rating: float) -> OutfitFeedback:
    return OutfitFeedback(
        feedback_id=f"f-{'-'.join(item_ids)}-{rating}",
        user_id="user-1",
        outfit_recommendation_id="rec",
        item_ids=tuple(item_ids),
        confidence_rating=rating,
        emotional_response=EmotionalResponse(primary="happy"),
    )


def _candidate(items, score: float) -> ScoredCandidate:
    return ScoredCandidate(items=items, final_score=score, confidence=ConfidenceBreakdown(score=0.5))


def test_confidence_without_history_is_neutral_plus_bonuses(make_item, now) -> None:
    items = [make_item("a", "tops", wears=0, worn_days_ago=None), make_item("b", "bottoms", wears=0)]

    breakdown = calculate_confidence_score(items, [], now)

    assert breakdown.base == 0.5
    assert breakdown.usage_bonus == 0.0
    assert breakdown.rediscovery_bonus == pytest.approx(0.1)
    assert breakdown.score == pytest.approx(0.6)


def test_confidence_blends_overlapping_feedback_and_caps_usage(make_item, now) -> None:
    items = [make_item("a", "tops", wears=6, worn_days_ago=5), make_item("b", "bottoms", wears=6, worn_days_ago=5)]
    history = [_feedback(["a", "b"], 5), _feedback(["z"], 1)]

    breakdown = calculate_confidence_score(items, history, now)

    assert breakdown.matched_history == 1
    assert breakdown.base == pytest.approx((0.5 + 1.0) / 2)
    assert breakdown.usage_bonus == pytest.approx(0.25)
    assert breakdown.score == pytest.approx(1.0)


def test_confidence_never_leaves_its_bounds(make_item, now) -> None:
    items = [make_item("a", "tops", wears=0, worn_days_ago=1)]
    history = [_feedback(["a"], 1) for _ in range(5)]

    breakdown = calculate_confidence_score(items, history, now)

    assert CONFIDENCE_FLOOR <= breakdown.score <= 1.0


def test_novelty_steps_down_with_recent_wear(make_item, now) -> None:
    items = [make_item("a", "tops"), make_item("b", "bottoms")]

    def worn(days: int):
        return [WornOutfit(user_id="user-1", item_ids=("b", "a"), worn_at=now - timedelta(days=days))]

    scores = [calculate_novelty_score(items, history, now) for history in ([], worn(40), worn(20), worn(10), worn(3))]

    assert scores == [0.8, 0.6, 0.4, 0.2, 0.1]
    assert scores == sorted(scores, reverse=True)


def test_satisfaction_rewards_profile_alignment(make_item) -> None:
    items = [make_item("a", "tops", colors=["navy"], tags=["casual"]), make_item("b", "bottoms", colors=["navy"])]
    aligned = StyleProfile(
        user_id="user-1",
        preferred_colors=["navy"],
        preferred_styles=["casual"],
        confidence_patterns=[ConfidencePattern(item_combination=["a", "b"], average_rating=5.0)],
    )

    assert predict_user_satisfaction(items, empty_profile("user-1")) == 0.5
    assert predict_user_satisfaction(items, aligned) == 1.0


def test_time_of_day_bonus(make_item, now) -> None:
    work = [make_item("a", "tops", tags=["business"])]
    evening = [make_item("b", "dresses", tags=["elegant"])]

    assert calculate_time_appropriateness(work, now.replace(hour=9)) == pytest.approx(0.7)
    assert calculate_time_appropriateness(work, now.replace(hour=20)) == 0.5
    assert calculate_time_appropriateness(evening, now.replace(hour=20)) == pytest.approx(0.7)


def test_contextual_relevance_includes_occasion_only_with_primary_event(make_item, make_context, now) -> None:
    items = [make_item("a", "tops", tags=["casual"], rating=5.0)]
    event = CalendarEvent(title="Gala", start_time=now, end_time=now, event_type="special")
    calendar = CalendarContext(events=[event], primary_event=event, formality_level="formal")

    without = calculate_contextual_relevance(items, make_context())
    with_event = calculate_contextual_relevance(items, make_context(calendar=calendar))

    assert 0.0 <= with_event < without <= 1.0


def test_score_candidate_penalises_red_and_pink(make_item, make_context) -> None:
    calm = [make_item("a", "tops", colors=["white"]), make_item("b", "bottoms", colors=["pink"])]
    clash = [make_item("a", "tops", colors=["red"]), make_item("b", "bottoms", colors=["pink"])]
    context = make_context()

    calm_score = score_candidate(calm, context)
    clash_score = score_candidate(clash, context)

    assert clash_score.final_score < calm_score.final_score
    assert set(calm_score.components) >= {"compatibility", "confidence", "satisfaction", "contextual", "novelty"}
    assert 0.0 <= clash_score.final_score <= 1.0


def test_rank_drops_clashes_and_low_rated_items_when_pool_allows(make_item) -> None:
    best = _candidate([make_item("t1", "tops", colors=["white"]), make_item("b1", "bottoms", colors=["navy"])], 0.9)
    clash = _candidate([make_item("t2", "tops", colors=["red"]), make_item("b2", "bottoms", colors=["pink"])], 0.95)
    low = _candidate([make_item("t3", "tops", rating=2.0), make_item("s3", "shoes")], 0.85)
    second = _candidate([make_item("d1", "dresses", colors=["green"]), make_item("s1", "shoes")], 0.6)
    third = _candidate([make_item("t4", "tops", colors=["gray"]), make_item("b4", "bottoms")], 0.5)

    ranked = rank_candidates([best, clash, low, second, third], empty_profile("user-1"))

    assert [candidate.final_score for candidate in ranked] == [0.9, 0.6, 0.5]
    assert not any(candidate.demoted for candidate in ranked)


def test_low_rated_candidates_backfill_but_rank_last(make_item) -> None:
    good = _candidate([make_item("t1", "tops"), make_item("b1", "bottoms")], 0.4)
    low = _candidate([make_item("t2", "tops", rating=2.5), make_item("b2", "bottoms")], 0.9)

    ranked = rank_candidates([low, good], empty_profile("user-1"))

    assert [candidate.final_score for candidate in ranked] == [0.4, 0.9]
    assert ranked[1].demoted


def test_unrated_items_are_not_treated_as_low_rated(make_item) -> None:
    unrated = _candidate([make_item("t1", "tops", rating=0.0), make_item("b1", "bottoms")], 0.7)

    ranked = rank_candidates([unrated], empty_profile("user-1"))

    assert not ranked[0].demoted


def test_bad_patterns_demote_overlapping_candidates(make_item) -> None:
    profile = StyleProfile(
        user_id="user-1",
        confidence_patterns=[ConfidencePattern(item_combination=["t1", "b1"], average_rating=2.0)],
    )
    disliked = _candidate([make_item("t1", "tops"), make_item("b1", "bottoms"), make_item("s1", "shoes")], 0.9)
    fine = [
        _candidate([make_item(f"t{n}", "tops"), make_item(f"b{n}", "bottoms")], 0.5 - n / 100)
        for n in range(2, 5)
    ]

    ranked = rank_candidates([disliked, *fine], profile)

    assert disliked.item_ids not in [candidate.item_ids for candidate in ranked]
    assert len(ranked) == 3


def test_diversity_pass_prefers_new_categories(make_item) -> None:
    first = _candidate([make_item("t1", "tops"), make_item("b1", "bottoms")], 0.9)
    second = _candidate([make_item("t2", "tops"), make_item("b2", "bottoms")], 0.8)
    same = _candidate([make_item("t3", "tops"), make_item("b3", "bottoms")], 0.7)
    dress = _candidate([make_item("d1", "dresses"), make_item("s1", "shoes")], 0.6)

    ranked = rank_candidates([first, second, same, dress], empty_profile("user-1"))

    assert [candidate.final_score for candidate in ranked] == [0.9, 0.8, 0.6]
