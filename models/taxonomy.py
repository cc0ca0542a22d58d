"""Canonical taxonomy definitions for outfit slots.

This module centralises the finite lookup from wardrobe category names to the
eight outfit slots, together with the per-category warmth weights and the slot
groupings shared by enrichment, scoring and generation. Category lookups are
case-insensitive; anything not listed here is an unmapped category and is
ignored by the outfit engine rather than coerced into a slot.
"""

from enum import Enum
from typing import Dict, Iterable, List, Optional


class Slot(str, Enum):
    """Clothing slots an outfit can fill, at most one item each."""

    JACKET = "jacket"
    OVERSHIRT = "overshirt"
    SHIRT = "shirt"
    UNDERSHIRT = "undershirt"
    PANTS = "pants"
    SHOES = "shoes"
    BELT = "belt"
    WATCH = "watch"


def _normalize_key(value: str) -> str:
    """Normalise a free-form category string into a lookup key."""

    return " ".join(value.strip().lower().replace("_", " ").split())


SLOT_ORDER: List[Slot] = [
    Slot.JACKET,
    Slot.OVERSHIRT,
    Slot.SHIRT,
    Slot.UNDERSHIRT,
    Slot.PANTS,
    Slot.SHOES,
    Slot.BELT,
    Slot.WATCH,
]

ACCESSORY_SLOTS = frozenset({Slot.BELT, Slot.WATCH})
OUTER_LAYER_SLOTS = (Slot.JACKET, Slot.OVERSHIRT)

CATEGORY_SLOTS: Dict[str, Slot] = {
    "jacket": Slot.JACKET,
    "coat": Slot.JACKET,
    "blazer": Slot.JACKET,
    "overshirt": Slot.OVERSHIRT,
    "sweater": Slot.OVERSHIRT,
    "cardigan": Slot.OVERSHIRT,
    "shirt": Slot.SHIRT,
    "t-shirt": Slot.SHIRT,
    "polo": Slot.SHIRT,
    "undershirt": Slot.UNDERSHIRT,
    "pants": Slot.PANTS,
    "jeans": Slot.PANTS,
    "chinos": Slot.PANTS,
    "shorts": Slot.PANTS,
    "shoes": Slot.SHOES,
    "boots": Slot.SHOES,
    "sneakers": Slot.SHOES,
    "loafers": Slot.SHOES,
    "sandals": Slot.SHOES,
    "belt": Slot.BELT,
    "watch": Slot.WATCH,
}

# Display names used when an error has to name a missing category.
SLOT_CATEGORY_NAMES: Dict[Slot, str] = {
    Slot.JACKET: "Jacket",
    Slot.OVERSHIRT: "Overshirt",
    Slot.SHIRT: "Shirt",
    Slot.UNDERSHIRT: "Undershirt",
    Slot.PANTS: "Pants",
    Slot.SHOES: "Shoes",
    Slot.BELT: "Belt",
    Slot.WATCH: "Watch",
}

DEFAULT_BASE_WEIGHT = 2

# Warmth proxy per category before seasonal adjustment (0 minimal, 3 heavy).
CATEGORY_BASE_WEIGHTS: Dict[str, int] = {
    "jacket": 3,
    "coat": 3,
    "blazer": 2,
    "overshirt": 2,
    "shirt": 2,
    "t-shirt": 0,
    "polo": 1,
    "sweater": 2,
    "cardigan": 2,
    "undershirt": 1,
    "pants": 2,
    "jeans": 2,
    "shorts": 0,
    "chinos": 2,
    "shoes": 2,
    "boots": 3,
    "sneakers": 1,
    "sandals": 0,
    "loafers": 1,
    "belt": 0,
    "watch": 0,
    "tie": 0,
    "pocket square": 0,
}

SEASONS = ["Spring", "Summer", "Fall", "Winter"]
SEASON_WEIGHT_ADJUSTMENTS: Dict[str, int] = {
    "Spring": 0,
    "Summer": -1,
    "Fall": 0,
    "Winter": 1,
}

# Belt and shoe colours are matched by family; black and brown never mix.
ACCESSORY_COLOR_FAMILIES: Dict[str, str] = {
    "black": "black",
    "charcoal": "black",
    "brown": "brown",
    "tan": "brown",
    "cognac": "brown",
    "chocolate": "brown",
    "dark brown": "brown",
    "light brown": "brown",
}
CLASHING_FAMILIES = frozenset({"black", "brown"})


def slot_for_category(category: Optional[str]) -> Optional[Slot]:
    """Return the outfit slot for a category name or ``None`` when unmapped."""

    if not category:
        return None
    return CATEGORY_SLOTS.get(_normalize_key(category))


def base_weight_for_category(category: Optional[str]) -> int:
    if not category:
        return DEFAULT_BASE_WEIGHT
    return CATEGORY_BASE_WEIGHTS.get(_normalize_key(category), DEFAULT_BASE_WEIGHT)


def color_family(color: Optional[str]) -> Optional[str]:
    """Map a colour name to its accessory family (``black``/``brown``) if any."""

    if not color:
        return None
    key = _normalize_key(color)
    if key in ACCESSORY_COLOR_FAMILIES:
        return ACCESSORY_COLOR_FAMILIES[key]
    for token in key.split():
        if token in ACCESSORY_COLOR_FAMILIES:
            return ACCESSORY_COLOR_FAMILIES[token]
    return None


def normalise_seasons(values: Iterable[str]) -> List[str]:
    """Title-case, deduplicate and drop unknown season tags."""

    normalised = []
    seen = set()
    for value in values:
        key = str(value).strip().title()
        if key == "Autumn":
            key = "Fall"
        if key in SEASONS and key not in seen:
            normalised.append(key)
            seen.add(key)
    return normalised


__all__ = [
    "Slot",
    "SLOT_ORDER",
    "ACCESSORY_SLOTS",
    "OUTER_LAYER_SLOTS",
    "CATEGORY_SLOTS",
    "SLOT_CATEGORY_NAMES",
    "CATEGORY_BASE_WEIGHTS",
    "DEFAULT_BASE_WEIGHT",
    "SEASONS",
    "SEASON_WEIGHT_ADJUSTMENTS",
    "CLASHING_FAMILIES",
    "slot_for_category",
    "base_weight_for_category",
    "color_family",
    "normalise_seasons",
]
