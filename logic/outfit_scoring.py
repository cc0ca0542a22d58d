"""Deterministic scoring for candidate outfits."""

from __future__ import annotations

from typing import Iterable, List, Mapping

from logic.enrichment import round_half_up
from models.enriched_item import EnrichedItem
from models.outfit import LayerAdjustment, ScoreBreakdown
from models.taxonomy import ACCESSORY_SLOTS, SLOT_ORDER, Slot
from models.weather import WeatherContext

WEIGHTS = {
    "formality": 0.7,
    "consistency": 0.3,
}

LAYER_WEIGHTS = {
    "visible": 1.0,
    "covered": 0.8,
    "accessory": 0.5,
}

# (variance ceiling, bonus); first match wins.
CONSISTENCY_BANDS = ((2.0, 15), (4.0, 10))

# Weather fit per |item weight - target weight|, anything further scores 0.2.
WEATHER_FIT_BY_DISTANCE = {0: 0.9, 1: 0.7, 2: 0.4}
WEATHER_FIT_FLOOR = 0.2
SEASON_MATCH_BONUS = 0.1
# Below this mean temperature a non-cold, non-hot day reads as Fall rather than Spring.
FALL_CEILING_C = 18.0


def _variance(values: List[float]) -> float:
    mean = sum(values) / len(values)
    return sum((value - mean) ** 2 for value in values) / len(values)


def consistency_bonus(formality_scores: List[float]) -> int:
    """Bonus for coherent formality; needs at least two scored items."""

    if len(formality_scores) < 2:
        return 0
    variance = _variance(formality_scores)
    for ceiling, bonus in CONSISTENCY_BANDS:
        if variance < ceiling:
            return bonus
    return 0


def _layer_reason(slot: Slot, populated: Iterable[Slot]) -> str:
    present = set(populated)
    if slot in ACCESSORY_SLOTS:
        return "accessory"
    if slot is Slot.OVERSHIRT and Slot.JACKET in present:
        return "covered"
    if slot is Slot.SHIRT and present.intersection({Slot.JACKET, Slot.OVERSHIRT}):
        return "covered"
    if slot is Slot.UNDERSHIRT and present.intersection({Slot.JACKET, Slot.OVERSHIRT, Slot.SHIRT}):
        return "covered"
    return "visible"


def layer_adjustments(slots: Mapping[Slot, EnrichedItem]) -> List[LayerAdjustment]:
    adjustments = []
    for slot in SLOT_ORDER:
        item = slots.get(slot)
        if item is None:
            continue
        reason = _layer_reason(slot, slots.keys())
        weight = LAYER_WEIGHTS[reason]
        adjustments.append(
            LayerAdjustment(
                item_id=item.item_id,
                slot=slot.value,
                original_score=item.formality,
                weight=weight,
                adjusted_score=round(item.formality * weight, 2),
                reason=reason,
            )
        )
    return adjustments


def score_outfit(slots: Mapping[Slot, EnrichedItem]) -> ScoreBreakdown:
    """Score the populated slots of an outfit on a 0-100 scale.

    ``formality_score`` is the mean formality of the non-accessory items as a
    percentage. The consistency bonus is already a percentage contribution, so
    it is added on top of the weighted formality score and the total capped.
    """

    populated = {slot: item for slot, item in slots.items() if item is not None}
    if not populated:
        return ScoreBreakdown()

    formality_values = [item.formality for slot, item in populated.items() if slot not in ACCESSORY_SLOTS]
    if formality_values:
        formality_score = round_half_up(sum(formality_values) / len(formality_values) * 10)
    else:
        formality_score = 0
    bonus = consistency_bonus(formality_values)

    total = formality_score * WEIGHTS["formality"] + bonus
    total = round(max(0.0, min(100.0, total)), 2)
    return ScoreBreakdown(
        formality_score=formality_score,
        formality_weight=WEIGHTS["formality"],
        consistency_bonus=bonus,
        consistency_weight=WEIGHTS["consistency"],
        layer_adjustments=layer_adjustments(populated),
        total=total,
        percentage=round_half_up(total),
    )


def current_season(weather: WeatherContext) -> str:
    """Season the weather reads as: the calendar season when known, else by temperature."""

    season = weather.details.get("season")
    if season and season != "Tropical":
        return str(season)
    if weather.temperature_band == "cold":
        return "Winter"
    if weather.temperature_band == "hot":
        return "Summer"
    return "Fall" if weather.mean_temp < FALL_CEILING_C else "Spring"


def item_weather_fit(item: EnrichedItem, weather: WeatherContext) -> float:
    distance = abs(item.weather_weight - weather.target_weight)
    fit = WEATHER_FIT_BY_DISTANCE.get(distance, WEATHER_FIT_FLOOR)
    if current_season(weather) in item.season:
        fit += SEASON_MATCH_BONUS
    return min(1.0, fit)


def weather_fit(items: Iterable[EnrichedItem], weather: WeatherContext) -> float:
    """Average per-item weather fit in 0..1 (0 for an empty set)."""

    fits = [item_weather_fit(item, weather) for item in items]
    if not fits:
        return 0.0
    return sum(fits) / len(fits)


__all__ = [
    "score_outfit",
    "consistency_bonus",
    "layer_adjustments",
    "current_season",
    "item_weather_fit",
    "weather_fit",
    "WEIGHTS",
    "LAYER_WEIGHTS",
]
