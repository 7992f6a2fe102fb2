"""Candidate outfit generation tests."""

from __future__ import annotations

from logic.combination_generator import generate_outfit_combinations
from mirror_app.config import BOUNDED_PROFILE, PRODUCTION_PROFILE
from models.wardrobe_item import has_red_pink_clash


def _capsule(make_item, count: int):
    items = []
    for index in range(count):
        items.append(make_item(f"top-{index}", "tops", colors=["white"]))
        items.append(make_item(f"bottom-{index}", "bottoms", colors=["navy"]))
        items.append(make_item(f"shoes-{index}", "shoes", colors=["black"]))
    return items


def test_empty_wardrobe_yields_no_candidates() -> None:
    assert generate_outfit_combinations([]) == []


def test_dress_looks_come_first_and_take_one_outerwear(make_item) -> None:
    items = [
        make_item("top", "tops"),
        make_item("bottom", "bottoms"),
        make_item("dress", "dresses"),
        make_item("heels", "shoes"),
        make_item("coat", "outerwear"),
        make_item("blazer", "outerwear"),
    ]

    candidates = generate_outfit_combinations(items)

    assert [item.item_id for item in candidates[0]] == ["dress", "heels", "coat"]
    assert [item.item_id for item in candidates[1]] == ["top", "bottom", "heels", "coat"]


def test_caps_follow_the_execution_profile(make_item) -> None:
    items = _capsule(make_item, 3)

    bounded = generate_outfit_combinations(items, BOUNDED_PROFILE)
    production = generate_outfit_combinations(items, PRODUCTION_PROFILE)

    assert len(bounded) == BOUNDED_PROFILE.max_total_combinations
    assert len(production) == PRODUCTION_PROFILE.max_total_combinations


def test_each_candidate_has_one_item_per_slot(make_item) -> None:
    for candidate in generate_outfit_combinations(_capsule(make_item, 2)):
        categories = [item.category for item in candidate]
        assert len(categories) == len(set(categories))


def test_pairs_are_the_fallback_without_full_outfits(make_item) -> None:
    items = [make_item("t1", "tops"), make_item("t2", "tops"), make_item("bag", "accessories")]

    candidates = generate_outfit_combinations(items)

    assert len(candidates) == 3
    assert all(len(candidate) == 2 for candidate in candidates)


def test_small_wardrobes_are_padded_with_single_items(make_item) -> None:
    lone = generate_outfit_combinations([make_item("only", "dresses")])
    small = generate_outfit_combinations(
        [make_item("top", "tops"), make_item("bottom", "bottoms"), make_item("shoes", "shoes")]
    )

    assert [[item.item_id for item in candidate] for candidate in lone] == [["only"]]
    assert len(small) == 3
    assert [item.item_id for item in small[1]] == ["top"]
    assert [item.item_id for item in small[2]] == ["bottom"]


def test_red_and_pink_never_share_a_candidate(make_item) -> None:
    items = [
        make_item("red-top", "tops", colors=["red"]),
        make_item("pink-skirt", "bottoms", colors=["pink"]),
        make_item("flats", "shoes", colors=["white"]),
        make_item("both", "accessories", colors=["red", "pink"]),
    ]

    candidates = generate_outfit_combinations(items)

    assert candidates
    assert not any(has_red_pink_clash(candidate) for candidate in candidates)
