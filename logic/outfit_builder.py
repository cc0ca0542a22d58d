"""Deterministic outfit assembly from an enriched wardrobe pool."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from logic.errors import InsufficientWardrobeError
from logic.outfit_scoring import score_outfit
from models.enriched_item import EnrichedItem
from models.outfit import OutfitCandidate
from models.taxonomy import (
    ACCESSORY_SLOTS,
    CLASHING_FAMILIES,
    OUTER_LAYER_SLOTS,
    SLOT_CATEGORY_NAMES,
    SLOT_ORDER,
    Slot,
    color_family,
)
from models.weather import WeatherContext

logger = logging.getLogger(__name__)

# Per-slot share of the target weight: outerwear runs warmer, base layers lighter.
SLOT_WEIGHT_OFFSETS = {Slot.JACKET: 1, Slot.UNDERSHIRT: -1}
OUTER_LAYER_MIN_WEIGHT = 2
UNDERSHIRT_LAYER_MIN_WEIGHT = 3
BELT_PANTS_FORMALITY = 5.0
BELT_SHOES_FORMALITY = 6.0
TUCKED_FORMALITY = 6.0

Ranked = Tuple[int, EnrichedItem]


def group_by_slot(
    pool: Iterable[EnrichedItem], excluded_ids: Iterable[str] = ()
) -> Dict[Slot, List[Ranked]]:
    """Bucket items per slot keeping collection order; unmapped categories are dropped."""

    excluded = {str(item_id) for item_id in excluded_ids}
    grouped: Dict[Slot, List[Ranked]] = {slot: [] for slot in SLOT_ORDER}
    for index, item in enumerate(pool):
        slot = item.slot
        if slot is None or item.item_id in excluded:
            continue
        grouped[slot].append((index, item))
    return grouped


def slot_target(slot: Slot, weather: WeatherContext) -> int:
    if slot in ACCESSORY_SLOTS:
        return 0
    return max(0, min(3, weather.target_weight + SLOT_WEIGHT_OFFSETS.get(slot, 0)))


def _running_mean(chosen: Mapping[Slot, EnrichedItem]) -> Optional[float]:
    values = [item.formality for slot, item in chosen.items() if slot not in ACCESSORY_SLOTS]
    if not values:
        return None
    return sum(values) / len(values)


def _pick(
    candidates: List[Ranked], slot: Slot, weather: WeatherContext, chosen: Mapping[Slot, EnrichedItem]
) -> EnrichedItem:
    target = slot_target(slot, weather)
    mean = _running_mean(chosen)

    def rank(entry: Ranked) -> Tuple[int, float, int]:
        index, item = entry
        formality_distance = 0.0 if mean is None else abs(item.formality - mean)
        return (abs(item.weather_weight - target), formality_distance, index)

    return min(candidates, key=rank)[1]


def _compatible_belts(belts: List[Ranked], shoes: Optional[EnrichedItem]) -> List[Ranked]:
    if shoes is None:
        return belts
    shoe_family = color_family(shoes.inferred_color)
    if shoe_family not in CLASHING_FAMILIES:
        return belts
    compatible = []
    for index, belt in belts:
        belt_family = color_family(belt.inferred_color)
        if belt_family in CLASHING_FAMILIES and belt_family != shoe_family:
            continue
        compatible.append((index, belt))
    return compatible


def _wants_belt(chosen: Mapping[Slot, EnrichedItem]) -> bool:
    pants = chosen.get(Slot.PANTS)
    shoes = chosen.get(Slot.SHOES)
    if pants is not None and pants.formality >= BELT_PANTS_FORMALITY:
        return True
    return shoes is not None and shoes.formality >= BELT_SHOES_FORMALITY


def tuck_style_for(slots: Mapping[Slot, EnrichedItem]) -> str:
    if Slot.BELT in slots:
        return "Tucked"
    mean = _running_mean(slots)
    return "Tucked" if mean is not None and mean >= TUCKED_FORMALITY else "Untucked"


def _missing(slot: Slot) -> InsufficientWardrobeError:
    return InsufficientWardrobeError(slot.value, SLOT_CATEGORY_NAMES[slot])


def _finalise(slots: Dict[Slot, EnrichedItem]) -> OutfitCandidate:
    ordered = {slot: slots[slot] for slot in SLOT_ORDER if slot in slots}
    return OutfitCandidate(slots=ordered, tuck_style=tuck_style_for(ordered), score=score_outfit(ordered))


def generate_candidate(
    pool: Iterable[EnrichedItem], weather: WeatherContext, excluded_ids: Iterable[str] = ()
) -> OutfitCandidate:
    """Greedily select one item per slot for the given weather.

    Slots are filled in fixed order (outerwear, tops, bottoms, footwear,
    accessories). Each slot takes the item whose weather weight is closest to
    the slot's share of the target weight, then the one closest in formality
    to the items already chosen, then the earliest in collection order.
    Raises :class:`InsufficientWardrobeError` when no top or no pants remain.
    """

    grouped = group_by_slot(pool, excluded_ids)
    if not grouped[Slot.SHIRT] and not grouped[Slot.UNDERSHIRT]:
        raise _missing(Slot.SHIRT)
    if not grouped[Slot.PANTS]:
        raise _missing(Slot.PANTS)

    chosen: Dict[Slot, EnrichedItem] = {}
    if weather.target_weight >= OUTER_LAYER_MIN_WEIGHT:
        outer = next((slot for slot in OUTER_LAYER_SLOTS if grouped[slot]), None)
        if outer is not None:
            chosen[outer] = _pick(grouped[outer], outer, weather, chosen)

    if grouped[Slot.SHIRT]:
        chosen[Slot.SHIRT] = _pick(grouped[Slot.SHIRT], Slot.SHIRT, weather, chosen)
    if grouped[Slot.UNDERSHIRT] and (
        Slot.SHIRT not in chosen or weather.target_weight >= UNDERSHIRT_LAYER_MIN_WEIGHT
    ):
        chosen[Slot.UNDERSHIRT] = _pick(grouped[Slot.UNDERSHIRT], Slot.UNDERSHIRT, weather, chosen)

    chosen[Slot.PANTS] = _pick(grouped[Slot.PANTS], Slot.PANTS, weather, chosen)
    if grouped[Slot.SHOES]:
        chosen[Slot.SHOES] = _pick(grouped[Slot.SHOES], Slot.SHOES, weather, chosen)

    if _wants_belt(chosen):
        belts = _compatible_belts(grouped[Slot.BELT], chosen.get(Slot.SHOES))
        if belts:
            chosen[Slot.BELT] = _pick(belts, Slot.BELT, weather, chosen)
        elif grouped[Slot.BELT]:
            logger.info("Skipped belt: every belt clashes with the chosen shoes")

    if grouped[Slot.WATCH]:
        chosen[Slot.WATCH] = _pick(grouped[Slot.WATCH], Slot.WATCH, weather, chosen)

    candidate = _finalise(chosen)
    logger.debug("Generated candidate %s scoring %s", candidate.item_ids, candidate.score.percentage)
    return candidate


def swap_item(
    candidate: OutfitCandidate,
    slot: Slot,
    pool: Iterable[EnrichedItem],
    weather: WeatherContext,
    excluded_ids: Iterable[str] = (),
) -> OutfitCandidate:
    """Replace the item in one slot with the best alternative, keeping the rest."""

    current = candidate.slots.get(slot)
    excluded = set(excluded_ids)
    if current is not None:
        excluded.add(current.item_id)
    options = group_by_slot(pool, excluded)[slot]

    others = {key: item for key, item in candidate.slots.items() if key is not slot}
    if slot is Slot.BELT:
        options = _compatible_belts(options, others.get(Slot.SHOES))
    if not options:
        raise _missing(slot)

    others[slot] = _pick(options, slot, weather, others)
    return _finalise(others)


__all__ = [
    "generate_candidate",
    "swap_item",
    "group_by_slot",
    "slot_target",
    "tuck_style_for",
]
