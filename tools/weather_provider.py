"""Weather provider abstractions and implementations."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import date, datetime
from typing import Dict, List, Optional

import requests
from pydantic import BaseModel, ValidationError

from models.weather import ForecastDay
from tools.observability import instrument_call


LOGGER = logging.getLogger(__name__)


class _WeatherCondition(BaseModel):
    description: str = "unknown"


class _Main(BaseModel):
    temp_min: float
    temp_max: float


class _ForecastEntry(BaseModel):
    dt_txt: str
    main: _Main
    pop: float = 0.0
    weather: List[_WeatherCondition] = []


class _Coord(BaseModel):
    lat: Optional[float] = None
    lon: Optional[float] = None


class _City(BaseModel):
    name: str = ""
    coord: _Coord = _Coord()


class _ForecastResponse(BaseModel):
    list: List[_ForecastEntry] = []
    city: _City = _City()


class WeatherProvider(ABC):
    """Abstract weather provider interface."""

    @abstractmethod
    def get_daily_forecast(self, location: str) -> List[ForecastDay]:
        """Return one aggregated forecast per upcoming day; empty when unavailable."""


class OpenWeatherProvider(WeatherProvider):
    """OpenWeather 5 day / 3 hour provider with schema validation and graceful fallbacks."""

    url = "https://api.openweathermap.org/data/2.5/forecast"

    def __init__(self, api_key: str | None = None, timeout_seconds: float = 5.0, units: str = "metric") -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.units = units

    @staticmethod
    def _aggregate(parsed: _ForecastResponse) -> List[ForecastDay]:
        grouped: "OrderedDict[date, List[_ForecastEntry]]" = OrderedDict()
        for entry in parsed.list:
            try:
                day = datetime.strptime(entry.dt_txt[:10], "%Y-%m-%d").date()
            except ValueError:
                LOGGER.warning("Skipping forecast entry with bad timestamp", extra={"dt_txt": entry.dt_txt})
                continue
            grouped.setdefault(day, []).append(entry)

        latitude = parsed.city.coord.lat
        days = []
        for day, entries in grouped.items():
            conditions: Dict[str, int] = {}
            for entry in entries:
                label = entry.weather[0].description if entry.weather else "unknown"
                conditions[label] = conditions.get(label, 0) + 1
            days.append(
                ForecastDay(
                    day=day,
                    temp_min=min(entry.main.temp_min for entry in entries),
                    temp_max=max(entry.main.temp_max for entry in entries),
                    precipitation_probability=max(entry.pop for entry in entries),
                    condition=max(conditions, key=conditions.get),
                    latitude=latitude,
                )
            )
        return days

    @instrument_call("openweather.get_daily_forecast")
    def get_daily_forecast(self, location: str) -> List[ForecastDay]:
        if not location:
            raise ValueError("location is required for weather lookups")

        if not self.api_key:
            LOGGER.warning("Weather API key missing; forecast unavailable", extra={"reason": "missing_api_key"})
            return []

        LOGGER.info("Fetching weather forecast", extra={"location": location})
        params = {
            "q": location,
            "appid": self.api_key,
            "units": self.units,
        }

        try:
            response = requests.get(self.url, params=params, timeout=self.timeout_seconds)
            response.raise_for_status()
            payload = response.json()
            parsed = _ForecastResponse.model_validate(payload)
        except (requests.Timeout, requests.RequestException) as exc:
            LOGGER.error("Weather API unreachable", exc_info=exc)
            return []
        except ValidationError as exc:
            LOGGER.error("Weather payload schema validation failed", exc_info=exc)
            return []
        except ValueError as exc:
            LOGGER.error("Weather payload was not JSON", exc_info=exc)
            return []
        return self._aggregate(parsed)


class MockWeatherProvider(WeatherProvider):
    """Offline deterministic weather provider for tests."""

    def __init__(self, days: Optional[List[ForecastDay]] = None, fail: bool = False) -> None:
        self.days = list(days or [])
        self.fail = fail
        self.calls = 0

    def get_daily_forecast(self, location: str) -> List[ForecastDay]:
        self.calls += 1
        if self.fail:
            raise ConnectionError("mock weather provider offline")
        LOGGER.info("Returning mock forecast", extra={"location": location, "days": len(self.days)})
        return list(self.days)


__all__ = ["WeatherProvider", "OpenWeatherProvider", "MockWeatherProvider"]
