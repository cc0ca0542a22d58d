"""Enriched wardrobe item carrying derived comparison attributes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from models.taxonomy import Slot, slot_for_category
from models.wardrobe_item import WardrobeItem

DEFAULT_FORMALITY = 5.0


@dataclass(frozen=True)
class EnrichedItem:
    """A wardrobe item plus fields derived purely from it.

    Built on demand by :func:`logic.enrichment.enrich`; never persisted.
    """

    item: WardrobeItem
    inferred_color: str
    formality_band: str
    weather_weight: int

    @property
    def item_id(self) -> str:
        return self.item.item_id

    @property
    def category(self) -> Optional[str]:
        return self.item.category

    @property
    def slot(self) -> Optional[Slot]:
        return slot_for_category(self.item.category)

    @property
    def season(self) -> List[str]:
        return list(self.item.season)

    @property
    def formality(self) -> float:
        """Formality score clamped to 1..10, defaulting to 5 when unset."""

        raw = self.item.formality_score
        if raw is None:
            return DEFAULT_FORMALITY
        return max(1.0, min(10.0, float(raw)))

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "category": self.category,
            "slot": self.slot.value if self.slot else None,
            "name": self.item.name,
            "inferred_color": self.inferred_color,
            "formality_band": self.formality_band,
            "weather_weight": self.weather_weight,
            "formality": self.formality,
        }


__all__ = ["EnrichedItem", "DEFAULT_FORMALITY"]
