"""Multi-day outfit planning across a calendar range or a trip itinerary.

Each target date runs through a small state machine::

    pending -> resolve-weather -> decide-source -> (match-saved | generate-new)
            -> persist -> recorded

with ``skipped`` (existing entry kept) and ``failed`` as the other terminal
states. Dates are processed strictly in order: the usage state produced by one
date is the input of the next, and a date only counts as recorded once its
persistence calls have returned.
When an existing entry is overwritten it is only deleted after the replacement
outfit has been chosen and created, and each deletion is counted as it happens.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from logic.enrichment import enrich
from logic.errors import DuplicateOutfitError, ExternalPersistenceError, InsufficientWardrobeError, PlannerError
from logic.outfit_builder import generate_candidate
from logic.outfit_scoring import score_outfit, weather_fit
from logic.usage_history import build_usage_state, excluded_item_ids, recent_signatures
from logic.validation import PlanOptions
from logic.weather_resolver import WeatherResolver
from models.enriched_item import EnrichedItem
from models.outfit import SavedOutfit, item_set_signature
from models.plan import (
    OUTCOME_GENERATED,
    OUTCOME_OVERWRITTEN,
    OUTCOME_SAVED,
    OUTCOME_SKIPPED,
    DayPlanResult,
    HistoryEntry,
    PlanCounts,
    PlanRunResult,
    TripDay,
    UsageHistoryState,
)
from models.taxonomy import Slot
from models.weather import WeatherContext
from planner_app.logging_config import log_event, operation_context

LOGGER = logging.getLogger(__name__)
T = TypeVar("T")

TRIP_PLAN_PREFIX = "AI Trip Plan"
# Outfits created by calendar tooling rather than curated by the user.
CALENDAR_OUTFIT_PREFIX = "Calendar"

SAVED_WEATHER_FIT_WEIGHT = 0.6
SAVED_SCORE_WEIGHT = 0.4
SAVED_WEIGHT_PENALTY = 0.1


class CancellationToken:
    """Thread-safe flag checked by the planner between dates."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class _DayTarget:
    index: int
    target_date: date
    existing: Tuple[HistoryEntry, ...] = ()
    trip_day: Optional[TripDay] = None


@dataclass(frozen=True)
class _Choice:
    source: str
    outfit_id: str
    item_ids: Tuple[str, ...]
    score: float


def prefer_saved(index: int, strategy: str) -> bool:
    if strategy == "saved-heavy":
        return True
    if strategy == "ai-heavy":
        return index % 3 == 0
    return index % 2 == 0


def upcoming_dates(base: date, count: int, weekdays_only: bool = False) -> List[date]:
    """``count`` dates starting at ``base``, optionally Monday to Friday only."""

    dates: List[date] = []
    cursor = base
    while len(dates) < count:
        if not weekdays_only or cursor.weekday() < 5:
            dates.append(cursor)
        cursor += timedelta(days=1)
    return dates


def _slots_for(items: Iterable[EnrichedItem]) -> Dict[Slot, EnrichedItem]:
    slots: Dict[Slot, EnrichedItem] = {}
    for item in items:
        if item.slot is not None and item.slot not in slots:
            slots[item.slot] = item
    return slots


def saved_outfit_score(items: Sequence[EnrichedItem], weather: WeatherContext) -> float:
    """Blend weather fit and outfit score, penalising warmth far from the target."""

    if not items:
        return float("-inf")
    mean_weight = sum(item.weather_weight for item in items) / len(items)
    breakdown = score_outfit(_slots_for(items))
    return (
        SAVED_WEATHER_FIT_WEIGHT * weather_fit(items, weather)
        + SAVED_SCORE_WEIGHT * breakdown.total / 100
        - SAVED_WEIGHT_PENALTY * abs(mean_weight - weather.target_weight)
    )


def is_planner_generated(outfit: SavedOutfit, prefixes: Iterable[str]) -> bool:
    name = (outfit.name or "").strip()
    return any(name.startswith(f"{prefix} ") for prefix in prefixes)


def choose_saved_outfit(
    saved_outfits: Sequence[SavedOutfit],
    pool_by_id: Dict[str, EnrichedItem],
    weather: WeatherContext,
    excluded_signatures: Iterable[str],
    generated_prefixes: Iterable[str] = (CALENDAR_OUTFIT_PREFIX,),
) -> Optional[Tuple[SavedOutfit, float]]:
    """Best qualifying saved outfit for the weather, ties resolved by list order."""

    excluded = set(excluded_signatures)
    prefixes = tuple(generated_prefixes)
    best: Optional[Tuple[SavedOutfit, float]] = None
    for outfit in saved_outfits:
        ids = outfit.item_ids
        signature = item_set_signature(ids)
        if not signature or signature in excluded or is_planner_generated(outfit, prefixes):
            continue
        if any(item_id not in pool_by_id for item_id in ids):
            continue
        score = saved_outfit_score([pool_by_id[item_id] for item_id in ids], weather)
        if best is None or score > best[1]:
            best = (outfit, score)
    return best


class MultiDayPlanner:
    """Sequence outfit decisions over dates and persist them through the stores."""

    def __init__(self, outfit_store, entry_store, weather_resolver: Optional[WeatherResolver] = None, trip_store=None) -> None:
        self.outfit_store = outfit_store
        self.entry_store = entry_store
        self.weather_resolver = weather_resolver or WeatherResolver()
        self.trip_store = trip_store

    # Public entrypoints -------------------------------------------------

    def plan_range(
        self,
        user_id: str,
        dates: Sequence[date],
        pool,
        saved_outfits: Sequence[SavedOutfit] = (),
        history: Sequence[HistoryEntry] = (),
        options: Optional[PlanOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> PlanRunResult:
        """Plan calendar entries for ``dates`` in order.

        Existing entries come from ``history``: any entry on a target date whose
        status is in ``options.existing_statuses`` triggers the existing-entry
        policy. The returned result is partial when the run aborts or is
        cancelled; call ``raise_for_error()`` to turn an abort into an exception.
        """

        options = options or PlanOptions()
        existing_by_date: Dict[date, List[HistoryEntry]] = {}
        for entry in history:
            if entry.status in options.existing_statuses:
                existing_by_date.setdefault(entry.entry_date, []).append(entry)
        targets = [
            _DayTarget(index=index, target_date=day, existing=tuple(existing_by_date.get(day, ())))
            for index, day in enumerate(dates)
        ]
        state = build_usage_state(history, options.signature_statuses, options.worn_statuses)
        return self._run("plan_range", user_id, targets, pool, saved_outfits, state, options, cancel_token)

    def plan_trip(
        self,
        user_id: str,
        trip_days: Sequence[TripDay],
        pool,
        saved_outfits: Sequence[SavedOutfit] = (),
        history: Sequence[HistoryEntry] = (),
        options: Optional[PlanOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> PlanRunResult:
        """Assign outfits to trip days ordered by date then slot number."""

        if self.trip_store is None:
            raise ValueError("plan_trip requires a trip store")
        options = options or PlanOptions()
        ordered = sorted(trip_days, key=lambda day: (day.day_date, day.slot_number))
        state = build_usage_state(history, options.signature_statuses, options.worn_statuses)
        for day in ordered:
            if day.item_ids:
                state = state.record(day.day_date, day.item_ids, status="planned", entry_id=day.trip_day_id)
        targets = [
            _DayTarget(index=index, target_date=day.day_date, trip_day=day)
            for index, day in enumerate(ordered)
        ]
        return self._run("plan_trip", user_id, targets, pool, saved_outfits, state, options, cancel_token)

    # Run loop -----------------------------------------------------------

    def _run(
        self,
        operation: str,
        user_id: str,
        targets: List[_DayTarget],
        pool,
        saved_outfits: Sequence[SavedOutfit],
        state: UsageHistoryState,
        options: PlanOptions,
        cancel_token: Optional[CancellationToken],
    ) -> PlanRunResult:
        enriched = [item if isinstance(item, EnrichedItem) else enrich(item) for item in pool]
        result = PlanRunResult()

        with operation_context(operation, user_id=user_id):
            log_event(
                LOGGER,
                logging.INFO,
                "plan_started",
                operation=operation,
                dates=len(targets),
                pool_size=len(enriched),
                saved_outfits=len(saved_outfits),
                mix_strategy=options.mix_strategy,
                existing_policy=options.existing_policy,
            )
            for target in targets:
                if cancel_token is not None and cancel_token.cancelled:
                    result.cancelled = True
                    log_event(LOGGER, logging.WARNING, "plan_cancelled", before_date=target.target_date)
                    break
                try:
                    day_result, state = self._plan_day(
                        user_id, target, enriched, saved_outfits, state, options, result.counts
                    )
                except PlannerError as exc:
                    result.error = exc
                    result.failed_date = target.target_date
                    log_event(
                        LOGGER,
                        logging.ERROR,
                        "plan_day_state",
                        target_date=target.target_date,
                        state="failed",
                        error_type=type(exc).__name__,
                        error=str(exc),
                    )
                    break
                result.results.append(day_result)
                self._count(result, day_result)

            log_event(
                LOGGER,
                logging.INFO,
                "plan_finished",
                operation=operation,
                recorded=len(result.results),
                counts=result.counts.to_dict(),
                failed_date=result.failed_date,
                cancelled=result.cancelled,
            )
        return result

    @staticmethod
    def _count(result: PlanRunResult, day: DayPlanResult) -> None:
        # Deletions are counted by _clear_existing as they happen.
        if day.outcome == OUTCOME_SKIPPED:
            result.counts.skipped += 1
            return
        if day.source == "saved":
            result.counts.matched_saved += 1
        elif day.source == "generated":
            result.counts.generated_ai += 1

    def _transition(self, target: _DayTarget, state_name: str, **fields: object) -> None:
        log_event(
            LOGGER,
            logging.DEBUG,
            "plan_day_state",
            target_date=target.target_date,
            index=target.index,
            state=state_name,
            **fields,
        )

    # One date -----------------------------------------------------------

    def _plan_day(
        self,
        user_id: str,
        target: _DayTarget,
        pool: List[EnrichedItem],
        saved_outfits: Sequence[SavedOutfit],
        state: UsageHistoryState,
        options: PlanOptions,
        counts: PlanCounts,
    ) -> Tuple[DayPlanResult, UsageHistoryState]:
        day = target.target_date
        self._transition(target, "pending")

        has_existing = bool(target.existing) or (target.trip_day is not None and target.trip_day.is_assigned)
        if has_existing and options.existing_policy == "skip":
            self._transition(target, "skipped")
            existing = target.existing[0] if target.existing else None
            return (
                DayPlanResult(
                    target_date=day,
                    outcome=OUTCOME_SKIPPED,
                    source="existing",
                    outfit_id=existing.outfit_id if existing else target.trip_day.outfit_id,
                    item_ids=list(existing.item_ids if existing else target.trip_day.item_ids),
                    entry_id=existing.entry_id if existing else None,
                    trip_day_id=target.trip_day.trip_day_id if target.trip_day else None,
                ),
                state,
            )

        # Entries being replaced must not count as recent for this date. They are
        # only deleted once an outfit has been chosen and created.
        if has_existing:
            state = state.forget(self._existing_ids(target))

        self._transition(target, "resolve-weather")
        weather = self.weather_resolver.resolve(day)

        pool_by_id = {item.item_id: item for item in pool}
        use_saved = prefer_saved(target.index, options.mix_strategy)
        self._transition(target, "decide-source", prefer_saved=use_saved)

        choice: Optional[_Choice] = None
        if use_saved:
            self._transition(target, "match-saved")
            match = choose_saved_outfit(
                saved_outfits,
                pool_by_id,
                weather,
                recent_signatures(state, day, options.lookback_days),
                (options.plan_name_prefix, TRIP_PLAN_PREFIX, CALENDAR_OUTFIT_PREFIX),
            )
            if match is not None:
                outfit, score = match
                choice = _Choice("saved", outfit.outfit_id, tuple(outfit.item_ids), round(score, 4))

        if choice is None:
            self._transition(target, "generate-new")
            choice = self._generate(user_id, target, pool, saved_outfits, state, weather, options)

        deleted = self._clear_existing(user_id, target, counts) if has_existing else 0

        self._transition(target, "persist", source=choice.source, outfit_id=choice.outfit_id)
        entry_id = self._persist(user_id, target, choice, weather)
        if has_existing and target.trip_day is not None:
            # Trip days are reassigned in place by the persist step.
            deleted = 1
            counts.overwritten += 1
        state = state.record(
            day,
            choice.item_ids,
            status="planned",
            entry_id=entry_id,
            generated_in_run=choice.source == "generated",
        )

        if deleted:
            outcome = OUTCOME_OVERWRITTEN
        else:
            outcome = OUTCOME_SAVED if choice.source == "saved" else OUTCOME_GENERATED
        log_event(
            LOGGER,
            logging.INFO,
            "plan_day_state",
            target_date=day,
            index=target.index,
            state="recorded",
            outcome=outcome,
            source=choice.source,
            weather_source=weather.source,
        )
        return (
            DayPlanResult(
                target_date=day,
                outcome=outcome,
                source=choice.source,
                outfit_id=choice.outfit_id,
                item_ids=list(choice.item_ids),
                weather=weather,
                entry_id=entry_id if target.trip_day is None else None,
                score=choice.score,
                trip_day_id=target.trip_day.trip_day_id if target.trip_day else None,
            ),
            state,
        )

    @staticmethod
    def _existing_ids(target: _DayTarget) -> List[str]:
        if target.trip_day is not None:
            return [target.trip_day.trip_day_id]
        return [entry.entry_id for entry in target.existing]

    def _clear_existing(self, user_id: str, target: _DayTarget, counts: PlanCounts) -> int:
        """Delete the calendar entries being replaced, counting each one as it goes."""

        if target.trip_day is not None:
            return 0
        deleted = 0
        for entry in target.existing:
            self._call("delete_entry", target.target_date, self.entry_store.delete_entry, user_id, entry.entry_id)
            deleted += 1
            counts.overwritten += 1
        self._transition(target, "overwrite", deleted=deleted)
        return deleted

    def _generate(
        self,
        user_id: str,
        target: _DayTarget,
        pool: List[EnrichedItem],
        saved_outfits: Sequence[SavedOutfit],
        state: UsageHistoryState,
        weather: WeatherContext,
        options: PlanOptions,
    ) -> _Choice:
        day = target.target_date
        excluded = excluded_item_ids(state, day, options.lookback_days)
        try:
            candidate = generate_candidate(pool, weather, excluded)
        except InsufficientWardrobeError as exc:
            raise exc.for_date(day) from exc

        name = self._outfit_name(target, options)
        item_ids = tuple(candidate.item_ids)
        try:
            outfit_id = self._call(
                "create_outfit",
                day,
                self.outfit_store.create_outfit,
                user_id,
                list(item_ids),
                source="generated",
                name=name,
            )
        except DuplicateOutfitError as exc:
            outfit_id = self._recover_duplicate(user_id, day, exc, saved_outfits)
        return _Choice("generated", outfit_id, item_ids, candidate.score.total)

    def _recover_duplicate(
        self, user_id: str, day: date, exc: DuplicateOutfitError, saved_outfits: Sequence[SavedOutfit]
    ) -> str:
        for outfit in saved_outfits:
            if outfit.signature == exc.signature:
                log_event(LOGGER, logging.INFO, "duplicate_outfit_reused", target_date=day, outfit_id=outfit.outfit_id)
                return outfit.outfit_id
        listed = self._call("list_outfits", day, self.outfit_store.list_outfits, user_id)
        for outfit in listed:
            if outfit.signature == exc.signature:
                log_event(LOGGER, logging.INFO, "duplicate_outfit_reused", target_date=day, outfit_id=outfit.outfit_id)
                return outfit.outfit_id
        raise ExternalPersistenceError("create_outfit", day, exc)

    def _persist(self, user_id: str, target: _DayTarget, choice: _Choice, weather: WeatherContext) -> str:
        snapshot = {**weather.snapshot(), "generation_type": choice.source}
        if target.trip_day is not None:
            self._call(
                "assign_trip_day",
                target.target_date,
                self.trip_store.assign_trip_day,
                user_id,
                target.trip_day.trip_day_id,
                outfit_id=choice.outfit_id,
                item_ids=list(choice.item_ids),
                weather=snapshot,
            )
            return target.trip_day.trip_day_id
        entry = self._call(
            "create_entry",
            target.target_date,
            self.entry_store.create_entry,
            user_id,
            target.target_date,
            status="planned",
            outfit_id=choice.outfit_id,
            item_ids=list(choice.item_ids),
            weather=snapshot,
            notes="AI generated plan" if choice.source == "generated" else "AI saved outfit plan",
        )
        return entry.entry_id

    @staticmethod
    def _outfit_name(target: _DayTarget, options: PlanOptions) -> str:
        day_key = target.target_date.isoformat()
        if target.trip_day is not None:
            trip = options.trip_name or target.trip_day.trip_id
            return f"{TRIP_PLAN_PREFIX} {trip} {day_key} #{target.trip_day.slot_number}"
        return f"{options.plan_name_prefix} {day_key}"

    @staticmethod
    def _call(operation: str, target_date: date, func: Callable[..., T], *args, **kwargs) -> T:
        """Invoke a store call, wrapping unexpected failures as persistence errors."""

        try:
            return func(*args, **kwargs)
        except (DuplicateOutfitError, ExternalPersistenceError):
            raise
        except Exception as exc:  # noqa: BLE001
            raise ExternalPersistenceError(operation, target_date, exc) from exc


def plan_range(
    user_id: str,
    dates: Sequence[date],
    pool,
    saved_outfits: Sequence[SavedOutfit],
    history: Sequence[HistoryEntry],
    options: Optional[PlanOptions],
    outfit_store,
    entry_store,
    weather_resolver: Optional[WeatherResolver] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> PlanRunResult:
    """Functional wrapper around :meth:`MultiDayPlanner.plan_range`."""

    planner = MultiDayPlanner(outfit_store, entry_store, weather_resolver)
    return planner.plan_range(user_id, dates, pool, saved_outfits, history, options, cancel_token)


__all__ = [
    "MultiDayPlanner",
    "CancellationToken",
    "plan_range",
    "prefer_saved",
    "upcoming_dates",
    "choose_saved_outfit",
    "saved_outfit_score",
    "TRIP_PLAN_PREFIX",
]
