"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.enriched_item import EnrichedItem
from models.outfit import LayerAdjustment, OutfitCandidate, SavedOutfit, ScoreBreakdown, item_set_signature
from models.weather import ForecastDay, WeatherContext
from models.wardrobe_item import WardrobeItem, from_raw_metadata

__all__ = [
    "WardrobeItem",
    "from_raw_metadata",
    "EnrichedItem",
    "ForecastDay",
    "WeatherContext",
    "LayerAdjustment",
    "ScoreBreakdown",
    "OutfitCandidate",
    "SavedOutfit",
    "item_set_signature",
]
