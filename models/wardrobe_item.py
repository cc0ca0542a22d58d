"""Wardrobe item data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.taxonomy import normalise_seasons


def _ensure_list(value: Any) -> List[Any]:
    """Coerce a scalar or iterable into a list."""

    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_formality(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class WardrobeItem:
    """Represents an item in the user's wardrobe.

    Items are owned by external wardrobe management; the outfit engine only
    reads them. ``category`` holds the category display name (``"Pants"``,
    ``"T-Shirt"``) and is mapped to a slot through :mod:`models.taxonomy`.
    """

    item_id: str
    user_id: str
    category: Optional[str] = None
    name: Optional[str] = None
    brand: Optional[str] = None
    material: Optional[str] = None
    color: Optional[str] = None
    formality_score: Optional[float] = None
    season: List[str] = field(default_factory=list)
    image_url: Optional[str] = None

    def __post_init__(self) -> None:
        self.item_id = str(self.item_id)
        self.user_id = str(self.user_id)
        self.category = _optional_text(self.category)
        self.formality_score = _coerce_formality(self.formality_score)
        self.season = normalise_seasons(_ensure_list(self.season))


def _category_name(raw: Any) -> Optional[str]:
    if isinstance(raw, dict):
        return _optional_text(raw.get("name"))
    return _optional_text(raw)


def from_raw_metadata(metadata: Dict[str, Any]) -> WardrobeItem:
    """Factory to build a :class:`WardrobeItem` from loose wardrobe payloads.

    Accepts either ``category`` as a plain name or the nested
    ``{"category": {"name": ...}}`` shape returned by wardrobe listings, and
    ``id`` as an alias for ``item_id``.
    """

    item_id = metadata.get("item_id") or metadata.get("id")
    user_id = metadata.get("user_id")
    missing = [name for name, value in (("item_id", item_id), ("user_id", user_id)) if not value]
    if missing:
        raise ValueError(f"Missing required fields for WardrobeItem: {missing}")

    category = _category_name(metadata.get("category")) or _category_name(metadata.get("category_name"))
    return WardrobeItem(
        item_id=str(item_id),
        user_id=str(user_id),
        category=category,
        name=_optional_text(metadata.get("name")),
        brand=_optional_text(metadata.get("brand")),
        material=_optional_text(metadata.get("material")),
        color=metadata.get("color"),
        formality_score=metadata.get("formality_score"),
        season=_ensure_list(metadata.get("season")),
        image_url=_optional_text(metadata.get("image_url")),
    )


__all__ = ["WardrobeItem", "from_raw_metadata"]
