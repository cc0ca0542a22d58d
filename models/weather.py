"""Weather schemas shared by providers and the weather resolver."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Literal, Optional

WeatherSource = Literal["forecast", "seasonal-fallback", "neutral"]
TemperatureBand = Literal["cold", "mild", "warm", "hot"]


@dataclass
class ForecastDay:
    """One day of forecast data as returned by a weather provider (metric)."""

    day: date
    temp_min: float
    temp_max: float
    precipitation_probability: float = 0.0
    condition: str = "unknown"
    latitude: Optional[float] = None


@dataclass(frozen=True)
class WeatherContext:
    """Resolved weather for one target date.

    Temperatures are in degrees Celsius. ``target_weight`` is the desired
    aggregate warmth (0 lightest, 3 heaviest) used to match items and outfits.
    """

    source: WeatherSource
    condition: str
    high_temp: float
    low_temp: float
    precip_chance: float
    temperature_band: TemperatureBand
    target_weight: int
    is_rain_likely: bool = False
    daily_swing: bool = False
    details: Dict[str, object] = field(default_factory=dict, compare=False)

    @property
    def mean_temp(self) -> float:
        return (self.high_temp + self.low_temp) / 2

    def snapshot(self) -> Dict[str, object]:
        """Serialisable form persisted alongside a day entry."""

        return {
            "source": self.source,
            "condition": self.condition,
            "high_temp": round(self.high_temp, 1),
            "low_temp": round(self.low_temp, 1),
            "precip_chance": round(self.precip_chance, 2),
            "temperature_band": self.temperature_band,
            "target_weight": self.target_weight,
            "is_rain_likely": self.is_rain_likely,
            "daily_swing": self.daily_swing,
        }


__all__ = ["ForecastDay", "WeatherContext", "WeatherSource", "TemperatureBand"]
