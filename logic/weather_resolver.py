"""Resolve a weather context for a target date.

Resolution degrades through three tiers and never raises: a matching forecast
day, a seasonal estimate from the month and hemisphere when a latitude is
known, and finally a neutral mild context.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from planner_app.logging_config import log_event
from models.weather import ForecastDay, WeatherContext

LOGGER = logging.getLogger(__name__)

# Upper bounds (exclusive) on the daily mean temperature in degrees Celsius.
BAND_THRESHOLDS = (("cold", 13.0), ("mild", 24.0), ("warm", 32.0))
BAND_TARGET_WEIGHTS = {"cold": 3, "mild": 2, "warm": 1, "hot": 0}
RAIN_LIKELY_THRESHOLD = 0.35
LARGE_SWING_DEGREES = 11.0
TROPICAL_LATITUDE = 23.5

NEUTRAL_HIGH = 20.0
NEUTRAL_LOW = 14.0

SEASONAL_TEMPERATURES: Dict[str, Dict[str, float]] = {
    "north": {"Spring": 18.0, "Summer": 27.0, "Fall": 16.0, "Winter": 4.0},
    "south": {"Spring": 16.0, "Summer": 24.0, "Fall": 18.0, "Winter": 10.0},
}
TROPICAL_TEMPERATURE = 27.0
_NORTHERN_SEASONS = {
    12: "Winter", 1: "Winter", 2: "Winter",
    3: "Spring", 4: "Spring", 5: "Spring",
    6: "Summer", 7: "Summer", 8: "Summer",
    9: "Fall", 10: "Fall", 11: "Fall",
}
_OPPOSITE_SEASON = {"Winter": "Summer", "Summer": "Winter", "Spring": "Fall", "Fall": "Spring"}


def temperature_band(mean_temp: float) -> str:
    for band, ceiling in BAND_THRESHOLDS:
        if mean_temp < ceiling:
            return band
    return "hot"


def season_for(target_date: date, latitude: float) -> str:
    """Calendar season at a latitude; ``Tropical`` inside the tropics."""

    if abs(latitude) < TROPICAL_LATITUDE:
        return "Tropical"
    season = _NORTHERN_SEASONS[target_date.month]
    return season if latitude >= 0 else _OPPOSITE_SEASON[season]


def _build_context(
    source: str, condition: str, high: float, low: float, precip: float, **details: object
) -> WeatherContext:
    high, low = max(high, low), min(high, low)
    precip = max(0.0, min(1.0, precip))
    band = temperature_band((high + low) / 2)
    return WeatherContext(
        source=source,
        condition=condition,
        high_temp=high,
        low_temp=low,
        precip_chance=precip,
        temperature_band=band,
        target_weight=BAND_TARGET_WEIGHTS[band],
        is_rain_likely=precip >= RAIN_LIKELY_THRESHOLD,
        daily_swing=(high - low) >= LARGE_SWING_DEGREES,
        details=dict(details),
    )


def neutral_context() -> WeatherContext:
    return _build_context("neutral", "mild", NEUTRAL_HIGH, NEUTRAL_LOW, 0.0)


def seasonal_context(target_date: date, latitude: float) -> WeatherContext:
    season = season_for(target_date, latitude)
    if season == "Tropical":
        typical = TROPICAL_TEMPERATURE
    else:
        typical = SEASONAL_TEMPERATURES["north" if latitude >= 0 else "south"][season]
    precip = 0.3 if season == "Winter" else 0.2
    return _build_context(
        "seasonal-fallback",
        f"typical {season.lower()} weather",
        typical + 3.0,
        typical - 6.0,
        precip,
        season=season,
    )


def resolve_weather(
    target_date: date,
    forecast: Optional[Iterable[ForecastDay]] = None,
    latitude: Optional[float] = None,
) -> WeatherContext:
    """Map a date to a weather context using the best available tier."""

    for day in forecast or []:
        if day.day == target_date:
            return _build_context(
                "forecast",
                day.condition or "unknown",
                day.temp_max,
                day.temp_min,
                day.precipitation_probability,
            )
    if latitude is not None:
        return seasonal_context(target_date, latitude)
    return neutral_context()


def describe_weather(context: WeatherContext) -> str:
    """One-line human readable summary of a weather context."""

    parts = [
        f"{context.condition.capitalize()}, {context.low_temp:.0f}°C to {context.high_temp:.0f}°C ({context.temperature_band})"
    ]
    if context.is_rain_likely:
        parts.append(f"rain likely ({context.precip_chance:.0%})")
    if context.daily_swing:
        parts.append("large temperature swing, dress in layers")
    if context.source != "forecast":
        parts.append(f"{context.source} estimate")
    return "; ".join(parts)


class WeatherResolver:
    """Resolve contexts for many dates with at most one provider fetch.

    ``provider`` only needs ``get_daily_forecast(location) -> list[ForecastDay]``.
    Any provider failure degrades to the seasonal or neutral tier.
    """

    def __init__(self, provider=None, location: Optional[str] = None, latitude: Optional[float] = None) -> None:
        self.provider = provider
        self.location = location
        self.latitude = latitude
        self._forecast: Optional[List[ForecastDay]] = None

    def forecast(self) -> List[ForecastDay]:
        if self._forecast is not None:
            return self._forecast
        days: List[ForecastDay] = []
        if self.provider is not None and self.location:
            try:
                days = list(self.provider.get_daily_forecast(self.location))
            except Exception as exc:  # noqa: BLE001
                log_event(LOGGER, logging.WARNING, "weather_forecast_unavailable", error=str(exc))
                days = []
        if self.latitude is None:
            self.latitude = next((day.latitude for day in days if day.latitude is not None), None)
        self._forecast = days
        return days

    def resolve(self, target_date: date) -> WeatherContext:
        context = resolve_weather(target_date, self.forecast(), self.latitude)
        log_event(
            LOGGER,
            logging.DEBUG,
            "weather_resolved",
            target_date=target_date,
            source=context.source,
            target_weight=context.target_weight,
        )
        return context


__all__ = [
    "resolve_weather",
    "describe_weather",
    "neutral_context",
    "seasonal_context",
    "season_for",
    "temperature_band",
    "WeatherResolver",
]
