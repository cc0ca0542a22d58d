"""Planning records: history entries, usage state and plan results."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from logic.errors import PlanAbortedError, PlannerError
from models.outfit import item_set_signature
from models.weather import WeatherContext

OUTCOME_SAVED = "generated-saved"
OUTCOME_GENERATED = "generated-ai"
OUTCOME_SKIPPED = "skipped-existing"
OUTCOME_OVERWRITTEN = "overwritten"


@dataclass
class HistoryEntry:
    """A day plan already recorded for a user (calendar entry)."""

    entry_id: str
    entry_date: date
    status: str = "planned"
    item_ids: List[str] = field(default_factory=list)
    outfit_id: Optional[str] = None
    weather: Optional[Dict[str, object]] = None
    notes: Optional[str] = None


@dataclass
class TripDay:
    """One outfit slot of a trip itinerary."""

    trip_day_id: str
    trip_id: str
    day_date: date
    slot_number: int = 1
    outfit_id: Optional[str] = None
    item_ids: List[str] = field(default_factory=list)

    @property
    def is_assigned(self) -> bool:
        return bool(self.outfit_id or self.item_ids)


@dataclass(frozen=True)
class UsageRecord:
    entry_date: date
    status: str
    item_ids: Tuple[str, ...]
    entry_id: Optional[str] = None
    generated_in_run: bool = False

    @property
    def signature(self) -> str:
        return item_set_signature(self.item_ids)


@dataclass(frozen=True)
class UsageHistoryState:
    """Immutable accumulator of dated usage records.

    Each planning step returns a new state via :meth:`record` or
    :meth:`forget`; nothing is mutated in place. Window queries live in
    :mod:`logic.usage_history`.
    """

    records: Tuple[UsageRecord, ...] = ()
    signature_statuses: FrozenSet[str] = frozenset({"worn", "planned"})
    worn_statuses: FrozenSet[str] = frozenset({"worn"})

    def record(
        self,
        entry_date: date,
        item_ids: Iterable[str],
        status: str = "planned",
        entry_id: Optional[str] = None,
        generated_in_run: bool = False,
    ) -> "UsageHistoryState":
        new_record = UsageRecord(
            entry_date=entry_date,
            status=status,
            item_ids=tuple(str(item_id) for item_id in item_ids),
            entry_id=entry_id,
            generated_in_run=generated_in_run,
        )
        return replace(self, records=self.records + (new_record,))

    def forget(self, entry_ids: Iterable[str]) -> "UsageHistoryState":
        dropped = set(entry_ids)
        if not dropped:
            return self
        kept = tuple(rec for rec in self.records if rec.entry_id is None or rec.entry_id not in dropped)
        return replace(self, records=kept)


@dataclass
class DayPlanResult:
    target_date: date
    outcome: str
    source: str
    outfit_id: Optional[str] = None
    item_ids: List[str] = field(default_factory=list)
    weather: Optional[WeatherContext] = None
    entry_id: Optional[str] = None
    score: Optional[float] = None
    trip_day_id: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "target_date": self.target_date.isoformat(),
            "outcome": self.outcome,
            "source": self.source,
            "outfit_id": self.outfit_id,
            "item_ids": list(self.item_ids),
            "weather": self.weather.snapshot() if self.weather else None,
            "entry_id": self.entry_id,
            "score": self.score,
            "trip_day_id": self.trip_day_id,
        }


@dataclass
class PlanCounts:
    matched_saved: int = 0
    generated_ai: int = 0
    skipped: int = 0
    overwritten: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "matched_saved": self.matched_saved,
            "generated_ai": self.generated_ai,
            "skipped": self.skipped,
            "overwritten": self.overwritten,
        }


@dataclass
class PlanRunResult:
    """Aggregate of one planning run, possibly partial."""

    results: List[DayPlanResult] = field(default_factory=list)
    counts: PlanCounts = field(default_factory=PlanCounts)
    error: Optional[PlannerError] = None
    failed_date: Optional[date] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.cancelled

    def raise_for_error(self) -> "PlanRunResult":
        if self.error is not None:
            raise PlanAbortedError(self) from self.error
        return self

    def to_dict(self) -> Dict[str, object]:
        return {
            "results": [result.to_dict() for result in self.results],
            "counts": self.counts.to_dict(),
            "error": str(self.error) if self.error else None,
            "error_type": type(self.error).__name__ if self.error else None,
            "failed_date": self.failed_date.isoformat() if self.failed_date else None,
            "cancelled": self.cancelled,
        }


__all__ = [
    "HistoryEntry",
    "TripDay",
    "UsageRecord",
    "UsageHistoryState",
    "DayPlanResult",
    "PlanCounts",
    "PlanRunResult",
    "OUTCOME_SAVED",
    "OUTCOME_GENERATED",
    "OUTCOME_SKIPPED",
    "OUTCOME_OVERWRITTEN",
]
