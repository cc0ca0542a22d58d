"""Evaluation scenarios exercising weather tiers, mix strategies and existing plans."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional

from models.weather import ForecastDay

START_DATE = date(2025, 3, 3)


@dataclass
class EvaluationScenario:
    name: str
    description: str
    wardrobe_items: List[Dict[str, object]]
    expectations: Dict[str, object]
    days: int = 7
    options: Dict[str, object] = field(default_factory=dict)
    saved_outfits: List[Dict[str, object]] = field(default_factory=list)
    existing_entries: List[Dict[str, object]] = field(default_factory=list)
    forecast: List[ForecastDay] = field(default_factory=list)
    latitude: Optional[float] = None


def _item(item_id: str, category: str, formality: float, color: str = "navy", season=None) -> Dict[str, object]:
    return {
        "item_id": item_id,
        "category": {"name": category},
        "name": item_id.replace("_", " "),
        "color": color,
        "formality_score": formality,
        "season": season or [],
    }


def _wardrobe_fixtures() -> List[Dict[str, object]]:
    return [
        _item("oxford_shirt", "Shirt", 6, "white"),
        _item("linen_shirt", "Shirt", 5, "blue", ["Summer"]),
        _item("flannel_shirt", "Shirt", 4, "red", ["Winter"]),
        _item("crew_tee", "T-Shirt", 3, "gray"),
        _item("white_undershirt", "Undershirt", 4, "white"),
        _item("wool_trousers", "Pants", 6, "charcoal"),
        _item("selvedge_jeans", "Jeans", 4, "indigo"),
        _item("khaki_chinos", "Chinos", 5, "khaki"),
        _item("cargo_shorts", "Shorts", 2, "olive"),
        _item("derby_shoes", "Shoes", 6, "brown"),
        _item("white_sneakers", "Sneakers", 3, "white"),
        _item("field_jacket", "Jacket", 5, "olive"),
        _item("merino_sweater", "Sweater", 5, "navy"),
        _item("brown_belt", "Belt", 5, "brown"),
        _item("black_belt", "Belt", 6, "black"),
        _item("steel_watch", "Watch", 6, "silver"),
        _item("silk_tie", "Tie", 8, "navy"),
    ]


def _forecast(high: float, low: float, precip: float, condition: str, days: int = 7) -> List[ForecastDay]:
    return [
        ForecastDay(
            day=START_DATE + timedelta(days=offset),
            temp_min=low,
            temp_max=high,
            precipitation_probability=precip,
            condition=condition,
        )
        for offset in range(days)
    ]


SCENARIOS: List[EvaluationScenario] = [
    EvaluationScenario(
        name="balanced_week_with_saved_outfit",
        description="Even days reuse the saved outfit, odd days generate new ones.",
        wardrobe_items=_wardrobe_fixtures(),
        saved_outfits=[
            {"name": "Weekend casual", "item_ids": ["crew_tee", "selvedge_jeans", "white_sneakers"]},
        ],
        options={"mix_strategy": "balanced", "lookback_days": 1},
        expectations={
            "counts": {"matched_saved": 4, "generated_ai": 3, "skipped": 0, "overwritten": 0},
            "outcomes": ["generated-saved", "generated-ai"] * 3 + ["generated-saved"],
        },
    ),
    EvaluationScenario(
        name="cold_forecast_adds_outer_layer",
        description="A cold forecast should put an outer layer on every generated day.",
        wardrobe_items=_wardrobe_fixtures(),
        days=3,
        options={"mix_strategy": "ai-heavy", "lookback_days": 0},
        forecast=_forecast(6.0, -1.0, 0.6, "light snow", days=3),
        expectations={
            "required_categories": ["Jacket"],
            "weather_source": "forecast",
        },
    ),
    EvaluationScenario(
        name="hot_seasonal_fallback_goes_light",
        description="Tropical latitude without a forecast resolves to warm seasonal weather.",
        wardrobe_items=_wardrobe_fixtures(),
        days=2,
        options={"mix_strategy": "ai-heavy", "lookback_days": 0},
        latitude=1.35,
        expectations={
            "forbidden_categories": ["Jacket", "Sweater"],
            "weather_source": "seasonal-fallback",
        },
    ),
    EvaluationScenario(
        name="existing_plans_are_skipped",
        description="Dates that already hold a planned entry are left untouched.",
        wardrobe_items=_wardrobe_fixtures(),
        days=3,
        options={"existing_policy": "skip"},
        existing_entries=[
            {"offset": 1, "status": "planned", "item_ids": ["oxford_shirt", "wool_trousers", "derby_shoes"]},
        ],
        expectations={
            "counts": {"skipped": 1},
            "outcomes": ["generated-ai", "skipped-existing", "generated-ai"],
        },
    ),
    EvaluationScenario(
        name="missing_pants_aborts_run",
        description="A wardrobe without pants fails on the first generated date.",
        wardrobe_items=[
            _item("oxford_shirt", "Shirt", 6, "white"),
            _item("derby_shoes", "Shoes", 6, "brown"),
            _item("brown_belt", "Belt", 5, "brown"),
        ],
        days=3,
        options={"mix_strategy": "ai-heavy"},
        expectations={"error_category": "Pants", "recorded": 0},
    ),
]


__all__ = ["EvaluationScenario", "SCENARIOS", "START_DATE"]
