"""Pydantic schemas for planner options and HTTP request payloads."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.outfit import SavedOutfit
from models.plan import HistoryEntry
from models.taxonomy import Slot
from models.wardrobe_item import WardrobeItem, from_raw_metadata
from models.weather import ForecastDay

MixStrategy = Literal["saved-heavy", "balanced", "ai-heavy"]
ExistingPolicy = Literal["skip", "overwrite"]


class PlanOptions(BaseModel):
    """Options controlling one multi-day planning run."""

    model_config = ConfigDict(frozen=True)

    mix_strategy: MixStrategy = "balanced"
    existing_policy: ExistingPolicy = "skip"
    lookback_days: int = Field(default=14, ge=0, le=365)
    signature_statuses: Tuple[str, ...] = ("worn", "planned")
    worn_statuses: Tuple[str, ...] = ("worn",)
    existing_statuses: Tuple[str, ...] = ("planned",)
    plan_name_prefix: str = Field(default="AI Week Plan", min_length=1)
    trip_name: Optional[str] = None


class WardrobeItemPayload(BaseModel):
    """Loose wardrobe item as sent by clients."""

    item_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    category: Optional[str] = None
    name: Optional[str] = None
    brand: Optional[str] = None
    material: Optional[str] = None
    color: Optional[str] = None
    formality_score: Optional[float] = None
    season: List[str] = []
    image_url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_category(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("category"), dict):
            data = {**data, "category": data["category"].get("name")}
        return data

    def to_item(self) -> WardrobeItem:
        return from_raw_metadata(self.model_dump())


class ScoreRequest(BaseModel):
    """Slot name to item mapping for scoring."""

    slots: Dict[str, WardrobeItemPayload]

    @field_validator("slots")
    @classmethod
    def _validate_slots(cls, slots: Dict[str, WardrobeItemPayload]) -> Dict[str, WardrobeItemPayload]:
        allowed = {slot.value for slot in Slot}
        unknown = sorted(set(slots) - allowed)
        if unknown:
            raise ValueError(f"Unknown slots {unknown}. Allowed: {sorted(allowed)}")
        return slots


class ForecastDayPayload(BaseModel):
    """One day of a client-supplied forecast, keyed by ``date`` on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    day: date = Field(alias="date")
    temp_min: float
    temp_max: float
    precipitation_probability: float = Field(default=0.0, ge=0, le=1)
    condition: str = "unknown"

    def to_forecast_day(self) -> ForecastDay:
        return ForecastDay(
            day=self.day,
            temp_min=self.temp_min,
            temp_max=self.temp_max,
            precipitation_probability=self.precipitation_probability,
            condition=self.condition,
        )


class WeatherPayload(BaseModel):
    """Optional weather inputs; an empty payload resolves to the neutral tier."""

    target_date: Optional[date] = None
    forecast: List[ForecastDayPayload] = []
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)

    def forecast_days(self) -> List[ForecastDay]:
        return [day.to_forecast_day() for day in self.forecast]


class GenerateRequest(BaseModel):
    items: List[WardrobeItemPayload] = Field(min_length=1)
    weather: WeatherPayload = WeatherPayload()
    excluded_ids: List[str] = []


class SavedOutfitPayload(BaseModel):
    outfit_id: str = Field(min_length=1)
    name: Optional[str] = None
    source: str = "curated"
    item_ids: List[str] = []

    def to_saved(self, items_by_id: Dict[str, WardrobeItem]) -> SavedOutfit:
        # Items missing from the wardrobe are kept as bare references so the
        # planner can reject the outfit as not fully available.
        items = [
            items_by_id.get(item_id) or WardrobeItem(item_id=item_id, user_id="")
            for item_id in self.item_ids
        ]
        return SavedOutfit(outfit_id=self.outfit_id, name=self.name, source=self.source, items=items)


class HistoryEntryPayload(BaseModel):
    entry_id: str = Field(min_length=1)
    entry_date: date
    status: Literal["planned", "worn"] = "planned"
    item_ids: List[str] = []
    outfit_id: Optional[str] = None

    def to_entry(self) -> HistoryEntry:
        return HistoryEntry(
            entry_id=self.entry_id,
            entry_date=self.entry_date,
            status=self.status,
            item_ids=list(self.item_ids),
            outfit_id=self.outfit_id,
        )


class PlanRequest(BaseModel):
    """Input contract for a multi-day plan."""

    user_id: str = Field(min_length=1)
    dates: List[date] = Field(min_length=1, max_length=62)
    items: List[WardrobeItemPayload] = Field(min_length=1)
    saved_outfits: List[SavedOutfitPayload] = []
    history: List[HistoryEntryPayload] = []
    options: PlanOptions = PlanOptions()
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)

    @field_validator("dates")
    @classmethod
    def _validate_dates(cls, dates: List[date]) -> List[date]:
        if len(set(dates)) != len(dates):
            raise ValueError("dates must be unique")
        return dates


class ValidationResult(BaseModel):
    """Error payload returned when validation fails."""

    status: Literal["invalid"] = "invalid"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, errors: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent payload.

    ``ctx`` and ``url`` are dropped from each error.
    """

    details = [{key: value for key, value in error.items() if key not in ("ctx", "url")} for error in errors]
    return ValidationResult(message=message, details=details).model_dump()


__all__ = [
    "PlanOptions",
    "WardrobeItemPayload",
    "ScoreRequest",
    "WeatherPayload",
    "GenerateRequest",
    "SavedOutfitPayload",
    "HistoryEntryPayload",
    "PlanRequest",
    "ValidationResult",
    "validation_failure",
]
