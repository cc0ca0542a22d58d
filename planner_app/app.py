"""Wardrobe planner app bootstrap."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional, Sequence

from logic.enrichment import enrich_items
from logic.planner import CancellationToken, MultiDayPlanner, upcoming_dates
from logic.validation import PlanOptions
from logic.weather_resolver import WeatherResolver
from models.plan import PlanRunResult
from planner_app.config import PlannerConfig
from planner_app.logging_config import configure_logging, get_logger, log_event, operation_context
from tools.calendar_store import SQLiteCalendarStore
from tools.outfit_store import SQLiteOutfitStore
from tools.wardrobe_store import SQLiteWardrobeStore
from tools.weather_provider import OpenWeatherProvider, WeatherProvider


LOGGER = get_logger(__name__)


class WardrobePlannerApp:
    """Wires together configuration, stores, the weather provider and the planner."""

    def __init__(self, config: PlannerConfig | None = None, weather_provider: WeatherProvider | None = None) -> None:
        self.config = config or PlannerConfig.from_env()
        configure_logging()

        self.wardrobe_store = SQLiteWardrobeStore(self.config.database_path)
        self.outfit_store = SQLiteOutfitStore(self.config.database_path, wardrobe_store=self.wardrobe_store)
        self.calendar_store = SQLiteCalendarStore(self.config.database_path)
        self.weather_provider = weather_provider or OpenWeatherProvider(api_key=self.config.weather_api_key)

    def default_options(self, **overrides: object) -> PlanOptions:
        """Plan options seeded from config; explicit overrides win."""

        values = {
            "mix_strategy": self.config.mix_strategy,
            "existing_policy": self.config.existing_policy,
            "lookback_days": self.config.lookback_days,
            "plan_name_prefix": self.config.plan_name_prefix,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return PlanOptions.model_validate(values)

    def weather_resolver(self, location: Optional[str] = None, latitude: Optional[float] = None) -> WeatherResolver:
        """A fresh resolver per run so each run fetches the forecast at most once."""

        return WeatherResolver(
            provider=self.weather_provider,
            location=location or self.config.default_location,
            latitude=latitude if latitude is not None else self.config.default_latitude,
        )

    def _planner(self, resolver: WeatherResolver) -> MultiDayPlanner:
        return MultiDayPlanner(
            outfit_store=self.outfit_store,
            entry_store=self.calendar_store,
            weather_resolver=resolver,
            trip_store=self.calendar_store,
        )

    def plan_dates(
        self,
        user_id: str,
        dates: Sequence[date],
        options: PlanOptions | None = None,
        location: Optional[str] = None,
        cancel_token: CancellationToken | None = None,
    ) -> PlanRunResult:
        """Plan calendar entries for ``dates`` using the user's stored wardrobe and history."""

        options = options or self.default_options()
        if not dates:
            return PlanRunResult()
        with operation_context("app:plan_dates") as correlation_id:
            items = self.wardrobe_store.list_items_for_user(user_id)
            saved = self.outfit_store.list_outfits(user_id)
            history = self.calendar_store.list_entries(
                user_id, min(dates) - timedelta(days=options.lookback_days), max(dates)
            )
            log_event(
                LOGGER,
                logging.INFO,
                "app_plan_loaded",
                correlation_id=correlation_id,
                items=len(items),
                saved_outfits=len(saved),
                history=len(history),
            )
            planner = self._planner(self.weather_resolver(location))
            return planner.plan_range(user_id, dates, enrich_items(items), saved, history, options, cancel_token)

    def plan_week(
        self,
        user_id: str,
        start: date,
        days: int = 7,
        weekdays_only: bool = False,
        options: PlanOptions | None = None,
        location: Optional[str] = None,
    ) -> PlanRunResult:
        return self.plan_dates(user_id, upcoming_dates(start, days, weekdays_only), options, location)

    def plan_trip(
        self,
        user_id: str,
        trip_id: str,
        options: PlanOptions | None = None,
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        cancel_token: CancellationToken | None = None,
    ) -> PlanRunResult:
        """Assign outfits to every day of a stored trip, using the trip's destination weather."""

        options = options or self.default_options(trip_name=trip_id)
        with operation_context("app:plan_trip"):
            trip_days = self.calendar_store.list_trip_days(user_id, trip_id)
            if not trip_days:
                return PlanRunResult()
            first = min(day.day_date for day in trip_days)
            last = max(day.day_date for day in trip_days)
            items = self.wardrobe_store.list_items_for_user(user_id)
            saved = self.outfit_store.list_outfits(user_id)
            history = self.calendar_store.list_entries(user_id, first - timedelta(days=options.lookback_days), last)
            planner = self._planner(self.weather_resolver(location, latitude))
            return planner.plan_trip(user_id, trip_days, enrich_items(items), saved, history, options, cancel_token)


__all__ = ["WardrobePlannerApp"]
