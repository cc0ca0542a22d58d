"""Outfit scoring: formality, consistency bonus, layers and weather fit."""

from __future__ import annotations

from datetime import date

import pytest

from conftest import make_enriched
from logic.outfit_scoring import consistency_bonus, current_season, item_weather_fit, score_outfit, weather_fit
from logic.weather_resolver import neutral_context, resolve_weather, seasonal_context
from models.taxonomy import Slot
from models.weather import ForecastDay


def test_neutral_three_piece_scores_as_expected() -> None:
    """Shirt 6, pants 5 and shoes 5 give 53 formality and the full bonus."""

    breakdown = score_outfit(
        {
            Slot.SHIRT: make_enriched("shirt", "Shirt", 6),
            Slot.PANTS: make_enriched("pants", "Pants", 5),
            Slot.SHOES: make_enriched("shoes", "Shoes", 5),
        }
    )

    assert breakdown.formality_score == 53
    assert breakdown.consistency_bonus == 15
    assert breakdown.total == pytest.approx(52.1)
    assert breakdown.percentage == 52
    assert breakdown.formality_weight == 0.7
    assert breakdown.consistency_weight == 0.3


def test_empty_outfit_scores_zero() -> None:
    breakdown = score_outfit({})
    assert breakdown.total == 0
    assert breakdown.percentage == 0
    assert breakdown.layer_adjustments == []


def test_single_item_gets_no_consistency_bonus() -> None:
    breakdown = score_outfit({Slot.SHIRT: make_enriched("shirt", "Shirt", 6)})
    assert breakdown.formality_score == 60
    assert breakdown.consistency_bonus == 0
    assert breakdown.total == pytest.approx(42.0)


def test_accessories_do_not_count_towards_formality() -> None:
    breakdown = score_outfit(
        {
            Slot.SHIRT: make_enriched("shirt", "Shirt", 6),
            Slot.WATCH: make_enriched("watch", "Watch", 10),
        }
    )
    assert breakdown.formality_score == 60
    assert breakdown.consistency_bonus == 0


@pytest.mark.parametrize(
    "scores, bonus",
    [
        ([5, 5], 15),
        ([4, 7], 10),
        ([3, 7], 0),
        ([8], 0),
        ([], 0),
    ],
)
def test_consistency_bonus_bands(scores, bonus) -> None:
    assert consistency_bonus(scores) == bonus


def test_layer_adjustments_mark_covered_layers() -> None:
    breakdown = score_outfit(
        {
            Slot.JACKET: make_enriched("jacket", "Jacket", 7),
            Slot.SHIRT: make_enriched("shirt", "Shirt", 6),
            Slot.UNDERSHIRT: make_enriched("undershirt", "Undershirt", 4),
            Slot.PANTS: make_enriched("pants", "Pants", 6),
            Slot.BELT: make_enriched("belt", "Belt", 6),
        }
    )
    reasons = {adjustment.slot: adjustment.reason for adjustment in breakdown.layer_adjustments}
    assert reasons == {
        "jacket": "visible",
        "shirt": "covered",
        "undershirt": "covered",
        "pants": "visible",
        "belt": "accessory",
    }
    shirt = next(adjustment for adjustment in breakdown.layer_adjustments if adjustment.slot == "shirt")
    assert shirt.weight == 0.8
    assert shirt.adjusted_score == pytest.approx(4.8)


def test_weather_fit_by_weight_distance() -> None:
    neutral = neutral_context()
    shirt = make_enriched("shirt", "Shirt", 5)
    tee = make_enriched("tee", "T-Shirt", 3)
    sneakers = make_enriched("sneakers", "Sneakers", 3)

    assert item_weather_fit(shirt, neutral) == pytest.approx(0.9)
    assert item_weather_fit(sneakers, neutral) == pytest.approx(0.7)
    assert item_weather_fit(tee, neutral) == pytest.approx(0.4)
    assert weather_fit([shirt, tee], neutral) == pytest.approx(0.65)
    assert weather_fit([], neutral) == 0.0

    summer_day = date(2025, 7, 1)
    hot = resolve_weather(summer_day, [ForecastDay(day=summer_day, temp_min=30, temp_max=36)])
    assert hot.target_weight == 0
    assert item_weather_fit(make_enriched("coat", "Coat", 7), hot) == pytest.approx(0.2)


def test_matching_season_tag_adds_to_weather_fit() -> None:
    winter = seasonal_context(date(2025, 1, 15), latitude=51.5)
    assert current_season(winter) == "Winter"
    assert item_weather_fit(make_enriched("coat", "Coat", 7, season=["Winter"]), winter) == pytest.approx(1.0)
    assert item_weather_fit(make_enriched("coat", "Coat", 7), winter) == pytest.approx(0.9)

    # Without a calendar season the neutral tier reads as Fall by temperature.
    neutral = neutral_context()
    assert current_season(neutral) == "Fall"
    assert item_weather_fit(make_enriched("flannel", "Shirt", 5, season=["Fall"]), neutral) == pytest.approx(1.0)
    assert item_weather_fit(make_enriched("oxford", "Shirt", 5, season=["Spring"]), neutral) == pytest.approx(0.9)
