"""Derive comparison attributes for raw wardrobe items.

Enrichment is a pure function of the item: no caching, no I/O and no failure
modes. Missing or unknown fields fall back to neutral defaults.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Optional

from models.enriched_item import DEFAULT_FORMALITY, EnrichedItem
from models.taxonomy import SEASON_WEIGHT_ADJUSTMENTS, base_weight_for_category
from models.wardrobe_item import WardrobeItem

UNKNOWN_COLOR = "unknown"
MIN_WEATHER_WEIGHT = 0
MAX_WEATHER_WEIGHT = 3


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (``round`` uses banker's rounding)."""

    return int(math.floor(value + 0.5))


def infer_color(item: WardrobeItem) -> str:
    color = (item.color or "").strip()
    return color or UNKNOWN_COLOR


def classify_formality_band(score: Optional[float]) -> str:
    """Map a 1-10 formality score to casual, smart-casual or refined.

    Out-of-range scores are clamped first; ``None`` counts as 5.
    """

    value = DEFAULT_FORMALITY if score is None else float(score)
    value = max(1.0, min(10.0, value))
    if value <= 3:
        return "casual"
    if value <= 6:
        return "smart-casual"
    return "refined"


def infer_weather_weight(category: Optional[str], seasons: Iterable[str] = ()) -> int:
    weight = float(base_weight_for_category(category))
    adjustments = [SEASON_WEIGHT_ADJUSTMENTS[season] for season in seasons if season in SEASON_WEIGHT_ADJUSTMENTS]
    if adjustments:
        weight += sum(adjustments) / len(adjustments)
    return max(MIN_WEATHER_WEIGHT, min(MAX_WEATHER_WEIGHT, round_half_up(weight)))


def enrich(item: WardrobeItem) -> EnrichedItem:
    return EnrichedItem(
        item=item,
        inferred_color=infer_color(item),
        formality_band=classify_formality_band(item.formality_score),
        weather_weight=infer_weather_weight(item.category, item.season),
    )


def enrich_items(items: Iterable[WardrobeItem]) -> List[EnrichedItem]:
    return [enrich(item) for item in items]


__all__ = [
    "enrich",
    "enrich_items",
    "infer_color",
    "classify_formality_band",
    "infer_weather_weight",
    "round_half_up",
]
