"""Outfit generation: slot rules, weather layering, belts and tie-breaks."""

from __future__ import annotations

from datetime import date

import pytest

from conftest import make_enriched
from logic.errors import InsufficientWardrobeError
from logic.outfit_builder import generate_candidate, slot_target, swap_item
from logic.weather_resolver import neutral_context, resolve_weather
from models.taxonomy import Slot
from models.weather import ForecastDay

DAY = date(2025, 3, 3)


def _forecast_context(high: float, low: float, precip: float = 0.0, condition: str = "clear"):
    return resolve_weather(
        DAY, [ForecastDay(day=DAY, temp_min=low, temp_max=high, precipitation_probability=precip, condition=condition)]
    )


def test_neutral_scenario_end_to_end(neutral_pool) -> None:
    """Shirt wins the top slot, the undershirt is left out in mild weather."""

    candidate = generate_candidate(neutral_pool, neutral_context())

    assert candidate.item_ids == ["shirt", "pants", "shoes"]
    assert candidate.tuck_style == "Untucked"
    assert candidate.score.formality_score == 53
    assert candidate.score.consistency_bonus == 15
    assert candidate.score.total == pytest.approx(52.1)
    assert candidate.score.percentage == 52


def test_missing_pants_names_the_category() -> None:
    pool = [make_enriched("shirt", "Shirt", 6), make_enriched("shoes", "Shoes", 5)]
    with pytest.raises(InsufficientWardrobeError) as excinfo:
        generate_candidate(pool, neutral_context())
    assert excinfo.value.category == "Pants"
    assert excinfo.value.slot == "pants"
    assert "Pants" in str(excinfo.value)


def test_missing_top_names_shirt() -> None:
    pool = [make_enriched("pants", "Pants", 5), make_enriched("tie", "Tie", 8)]
    with pytest.raises(InsufficientWardrobeError) as excinfo:
        generate_candidate(pool, neutral_context())
    assert excinfo.value.category == "Shirt"


def test_excluded_shirt_falls_back_to_undershirt(neutral_pool) -> None:
    candidate = generate_candidate(neutral_pool, neutral_context(), excluded_ids=["shirt"])
    assert candidate.item_ids == ["undershirt", "pants", "shoes"]


def test_cold_weather_adds_jacket_and_undershirt() -> None:
    pool = [
        make_enriched("sweater", "Sweater", 5),
        make_enriched("jacket", "Jacket", 5),
        make_enriched("shirt", "Shirt", 5),
        make_enriched("undershirt", "Undershirt", 4),
        make_enriched("pants", "Pants", 5),
        make_enriched("boots", "Boots", 5),
    ]
    cold = _forecast_context(6.0, -1.0, precip=0.6, condition="light snow")
    assert cold.target_weight == 3

    candidate = generate_candidate(pool, cold)

    assert candidate.slots[Slot.JACKET].item_id == "jacket"
    assert Slot.OVERSHIRT not in candidate.slots
    assert candidate.slots[Slot.UNDERSHIRT].item_id == "undershirt"
    assert candidate.item_ids[0] == "jacket"


def test_hot_weather_skips_outer_layers() -> None:
    pool = [
        make_enriched("jacket", "Jacket", 5),
        make_enriched("linen", "Shirt", 5, season=["Summer"]),
        make_enriched("shorts", "Shorts", 3),
        make_enriched("chinos", "Chinos", 5),
        make_enriched("sandals", "Sandals", 3),
    ]
    hot = _forecast_context(36.0, 30.0)
    assert hot.target_weight == 0

    candidate = generate_candidate(pool, hot)

    assert Slot.JACKET not in candidate.slots
    assert candidate.slots[Slot.PANTS].item_id == "shorts"
    assert candidate.slots[Slot.SHOES].item_id == "sandals"


def test_slot_targets_offset_outerwear_and_base_layers() -> None:
    neutral = neutral_context()
    assert slot_target(Slot.JACKET, neutral) == 3
    assert slot_target(Slot.UNDERSHIRT, neutral) == 1
    assert slot_target(Slot.PANTS, neutral) == 2
    assert slot_target(Slot.BELT, neutral) == 0


def test_belt_never_clashes_with_shoes() -> None:
    """Brown shoes rule out the black belt even though it comes first."""

    pool = [
        make_enriched("shirt", "Shirt", 6),
        make_enriched("pants", "Pants", 6),
        make_enriched("derby", "Shoes", 6, color="Dark Brown"),
        make_enriched("black_belt", "Belt", 6, color="Black"),
        make_enriched("brown_belt", "Belt", 6, color="Tan"),
    ]
    candidate = generate_candidate(pool, neutral_context())

    assert candidate.slots[Slot.BELT].item_id == "brown_belt"
    assert candidate.tuck_style == "Tucked"


def test_only_clashing_belts_means_no_belt() -> None:
    pool = [
        make_enriched("shirt", "Shirt", 6),
        make_enriched("pants", "Pants", 6),
        make_enriched("oxford", "Shoes", 6, color="Black"),
        make_enriched("brown_belt", "Belt", 6, color="Brown"),
    ]
    candidate = generate_candidate(pool, neutral_context())
    assert Slot.BELT not in candidate.slots


def test_casual_outfit_skips_belt() -> None:
    pool = [
        make_enriched("tee", "Shirt", 3),
        make_enriched("jeans", "Jeans", 4),
        make_enriched("sneakers", "Sneakers", 3),
        make_enriched("belt", "Belt", 5, color="Brown"),
    ]
    candidate = generate_candidate(pool, neutral_context())
    assert Slot.BELT not in candidate.slots
    assert candidate.tuck_style == "Untucked"


def test_ties_resolve_by_collection_order() -> None:
    first = [
        make_enriched("shirt_a", "Shirt", 5),
        make_enriched("shirt_b", "Shirt", 5),
        make_enriched("pants", "Pants", 5),
    ]
    assert generate_candidate(first, neutral_context()).slots[Slot.SHIRT].item_id == "shirt_a"
    assert generate_candidate(list(reversed(first)), neutral_context()).slots[Slot.SHIRT].item_id == "shirt_b"


def test_formality_breaks_weather_ties() -> None:
    pool = [
        make_enriched("shirt", "Shirt", 8),
        make_enriched("casual_pants", "Pants", 4),
        make_enriched("dress_pants", "Pants", 7),
    ]
    candidate = generate_candidate(pool, neutral_context())
    assert candidate.slots[Slot.PANTS].item_id == "dress_pants"


def test_generation_is_deterministic(neutral_pool) -> None:
    weather = neutral_context()
    assert generate_candidate(neutral_pool, weather) == generate_candidate(neutral_pool, weather)


def test_swap_item_replaces_one_slot_only() -> None:
    pool = [
        make_enriched("shirt_a", "Shirt", 6),
        make_enriched("shirt_b", "Shirt", 5),
        make_enriched("pants", "Pants", 5),
        make_enriched("shoes", "Shoes", 5),
    ]
    weather = neutral_context()
    candidate = generate_candidate(pool, weather)
    assert candidate.slots[Slot.SHIRT].item_id == "shirt_a"

    swapped = swap_item(candidate, Slot.SHIRT, pool, weather)

    assert swapped.item_ids == ["shirt_b", "pants", "shoes"]
    assert swapped.score.formality_score == 50

    with pytest.raises(InsufficientWardrobeError) as excinfo:
        swap_item(candidate, Slot.PANTS, pool, weather)
    assert excinfo.value.category == "Pants"
