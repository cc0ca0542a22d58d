"""Outfit candidate, score breakdown and saved outfit schemas."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.enriched_item import EnrichedItem
from models.taxonomy import SLOT_ORDER, Slot
from models.wardrobe_item import WardrobeItem


def item_set_signature(item_ids) -> str:
    """Sorted, de-duplicated, comma-joined identifiers for an item set."""

    return ",".join(sorted({str(item_id) for item_id in item_ids if item_id}))


@dataclass(frozen=True)
class LayerAdjustment:
    item_id: str
    slot: str
    original_score: float
    weight: float
    adjusted_score: float
    reason: str


@dataclass(frozen=True)
class ScoreBreakdown:
    formality_score: int = 0
    formality_weight: float = 0.7
    consistency_bonus: int = 0
    consistency_weight: float = 0.3
    layer_adjustments: List[LayerAdjustment] = field(default_factory=list)
    total: float = 0.0
    percentage: int = 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "formality_score": self.formality_score,
            "formality_weight": self.formality_weight,
            "consistency_bonus": self.consistency_bonus,
            "consistency_weight": self.consistency_weight,
            "layer_adjustments": [
                {
                    "item_id": adjustment.item_id,
                    "slot": adjustment.slot,
                    "original_score": adjustment.original_score,
                    "weight": adjustment.weight,
                    "adjusted_score": adjustment.adjusted_score,
                    "reason": adjustment.reason,
                }
                for adjustment in self.layer_adjustments
            ],
            "total": self.total,
            "percentage": self.percentage,
        }


@dataclass
class OutfitCandidate:
    """One item per populated slot plus tuck style and computed score."""

    slots: Dict[Slot, EnrichedItem]
    tuck_style: str = "Untucked"
    score: ScoreBreakdown = field(default_factory=ScoreBreakdown)

    @property
    def items(self) -> List[EnrichedItem]:
        return [self.slots[slot] for slot in SLOT_ORDER if slot in self.slots]

    @property
    def item_ids(self) -> List[str]:
        return [item.item_id for item in self.items]

    @property
    def signature(self) -> str:
        return item_set_signature(self.item_ids)

    def to_dict(self) -> Dict[str, object]:
        return {
            "slots": {slot.value: item.to_dict() for slot, item in self.slots.items()},
            "item_ids": self.item_ids,
            "tuck_style": self.tuck_style,
            "score": self.score.to_dict(),
        }


@dataclass
class SavedOutfit:
    """A persisted outfit as listed by the outfit store."""

    outfit_id: str
    name: Optional[str] = None
    source: str = "curated"
    items: List[WardrobeItem] = field(default_factory=list)

    @property
    def item_ids(self) -> List[str]:
        return [item.item_id for item in self.items]

    @property
    def signature(self) -> str:
        return item_set_signature(self.item_ids)


__all__ = [
    "LayerAdjustment",
    "ScoreBreakdown",
    "OutfitCandidate",
    "SavedOutfit",
    "item_set_signature",
]
