"""Shared fixtures for planner tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from logic.enrichment import enrich
from models.enriched_item import EnrichedItem
from models.wardrobe_item import WardrobeItem


def make_item(
    item_id: str,
    category: Optional[str],
    formality: Optional[float] = 5,
    color: Optional[str] = None,
    season: Optional[List[str]] = None,
    user_id: str = "demo",
) -> WardrobeItem:
    return WardrobeItem(
        item_id=item_id,
        user_id=user_id,
        category=category,
        name=item_id,
        color=color,
        formality_score=formality,
        season=season or [],
    )


def make_enriched(*args, **kwargs) -> EnrichedItem:
    return enrich(make_item(*args, **kwargs))


@pytest.fixture()
def neutral_pool() -> List[EnrichedItem]:
    """Shirt 6, undershirt 4, pants 5, shoes 5."""

    return [
        make_enriched("shirt", "Shirt", 6),
        make_enriched("undershirt", "Undershirt", 4),
        make_enriched("pants", "Pants", 5),
        make_enriched("shoes", "Shoes", 5),
    ]
