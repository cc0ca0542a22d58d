"""Multi-day planning: mix strategies, existing entries, failures and trips."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

import pytest

from conftest import make_enriched, make_item
from logic.errors import DuplicateOutfitError, ExternalPersistenceError, InsufficientWardrobeError, PlanAbortedError
from logic.planner import CancellationToken, MultiDayPlanner, plan_range, prefer_saved, upcoming_dates
from logic.validation import PlanOptions
from logic.weather_resolver import WeatherResolver
from models.outfit import SavedOutfit, item_set_signature
from models.plan import HistoryEntry, TripDay
from tools.calendar_store import DayEntryStore, TripDayStore
from tools.outfit_store import OutfitStore

USER = "demo"
START = date(2025, 3, 3)


class InMemoryOutfitStore(OutfitStore):
    def __init__(self, outfits: Iterable[SavedOutfit] = ()) -> None:
        self.outfits: List[SavedOutfit] = list(outfits)
        self.created: List[SavedOutfit] = []
        self.list_calls = 0

    def create_outfit(self, user_id, item_ids, source="generated", name=None) -> str:
        ids = list(item_ids)
        signature = item_set_signature(ids)
        for outfit in self.outfits:
            if outfit.signature == signature:
                raise DuplicateOutfitError(signature, outfit.outfit_id)
        outfit = SavedOutfit(
            outfit_id=f"outfit-{len(self.outfits) + 1}",
            name=name,
            source=source,
            items=[make_item(item_id, None, user_id=user_id) for item_id in ids],
        )
        self.outfits.append(outfit)
        self.created.append(outfit)
        return outfit.outfit_id

    def list_outfits(self, user_id) -> List[SavedOutfit]:
        self.list_calls += 1
        return list(self.outfits)


class InMemoryEntryStore(DayEntryStore):
    def __init__(self, fail_on: Optional[date] = None) -> None:
        self.calls: List[tuple] = []
        self.entries: Dict[str, HistoryEntry] = {}
        self.fail_on = fail_on
        self.on_create = None

    def create_entry(self, user_id, entry_date, status="planned", outfit_id=None, item_ids=(), weather=None, notes=None):
        if entry_date == self.fail_on:
            raise RuntimeError("calendar service unavailable")
        entry = HistoryEntry(
            entry_id=f"entry-{len(self.calls) + 1}",
            entry_date=entry_date,
            status=status,
            item_ids=list(item_ids),
            outfit_id=outfit_id,
            weather=weather,
            notes=notes,
        )
        self.calls.append(("create", entry_date))
        self.entries[entry.entry_id] = entry
        if self.on_create is not None:
            self.on_create(entry)
        return entry

    def delete_entry(self, user_id, entry_id) -> bool:
        self.calls.append(("delete", entry_id))
        return self.entries.pop(entry_id, None) is not None


class InMemoryTripStore(TripDayStore):
    def __init__(self) -> None:
        self.assigned: List[tuple] = []

    def assign_trip_day(self, user_id, trip_day_id, outfit_id=None, item_ids=(), weather=None) -> TripDay:
        self.assigned.append((trip_day_id, outfit_id, list(item_ids), weather))
        return TripDay(trip_day_id=trip_day_id, trip_id="trip", day_date=START, outfit_id=outfit_id, item_ids=list(item_ids))


def _pool():
    return [
        make_enriched("shirt_a", "Shirt", 6),
        make_enriched("shirt_b", "Shirt", 5),
        make_enriched("tee", "T-Shirt", 3),
        make_enriched("pants_a", "Pants", 5),
        make_enriched("pants_b", "Chinos", 5),
        make_enriched("jeans", "Jeans", 4),
        make_enriched("shoes_a", "Shoes", 5),
        make_enriched("shoes_b", "Sneakers", 3),
        make_enriched("shoes_c", "Loafers", 5),
    ]


def _saved(outfit_id: str, item_ids: List[str], name: str = "Weekend casual") -> SavedOutfit:
    return SavedOutfit(outfit_id=outfit_id, name=name, items=[make_item(item_id, None) for item_id in item_ids])


CASUAL = _saved("saved-casual", ["tee", "jeans", "shoes_b"])
SMART = _saved("saved-smart", ["shirt_b", "pants_b", "shoes_c"], name="Office")


def _planner(saved=(), entry_store=None):
    outfit_store = InMemoryOutfitStore(saved)
    entry_store = entry_store or InMemoryEntryStore()
    planner = MultiDayPlanner(outfit_store, entry_store, WeatherResolver(), trip_store=InMemoryTripStore())
    return planner, outfit_store, entry_store


def _dates(count: int) -> List[date]:
    return [START + timedelta(days=offset) for offset in range(count)]


def test_prefer_saved_by_strategy() -> None:
    assert [prefer_saved(i, "saved-heavy") for i in range(4)] == [True, True, True, True]
    assert [prefer_saved(i, "balanced") for i in range(4)] == [True, False, True, False]
    assert [prefer_saved(i, "ai-heavy") for i in range(4)] == [True, False, False, True]


def test_upcoming_dates_can_skip_weekends() -> None:
    friday = date(2025, 3, 7)
    assert upcoming_dates(friday, 3) == [friday, date(2025, 3, 8), date(2025, 3, 9)]
    assert upcoming_dates(friday, 3, weekdays_only=True) == [friday, date(2025, 3, 10), date(2025, 3, 11)]


def test_saved_heavy_uses_every_qualifying_saved_outfit() -> None:
    """Saved outfits are used until all are recent, then the planner generates."""

    planner, outfit_store, _ = _planner([CASUAL, SMART])
    result = planner.plan_range(
        USER, _dates(3), _pool(), [CASUAL, SMART], options=PlanOptions(mix_strategy="saved-heavy")
    )

    assert result.ok
    assert [day.source for day in result.results] == ["saved", "saved", "generated"]
    assert {day.outfit_id for day in result.results[:2]} == {"saved-casual", "saved-smart"}
    assert result.results[2].item_ids == ["shirt_a", "pants_a", "shoes_a"]
    assert result.counts.to_dict() == {"matched_saved": 2, "generated_ai": 1, "skipped": 0, "overwritten": 0}
    assert [outfit.name for outfit in outfit_store.created] == ["AI Week Plan 2025-03-05"]


def test_balanced_week_alternates_saved_and_generated() -> None:
    planner, outfit_store, entry_store = _planner([CASUAL])
    result = planner.plan_range(
        USER, _dates(7), _pool(), [CASUAL], options=PlanOptions(mix_strategy="balanced", lookback_days=1)
    )

    assert [day.outcome for day in result.results] == ["generated-saved", "generated-ai"] * 3 + ["generated-saved"]
    assert result.counts.matched_saved == 4
    assert result.counts.generated_ai == 3
    # Odd days regenerate the same set once the previous one leaves the window.
    assert len(outfit_store.created) == 1
    assert outfit_store.list_calls == 2
    assert {result.results[i].outfit_id for i in (1, 3, 5)} == {outfit_store.created[0].outfit_id}
    assert [call[0] for call in entry_store.calls] == ["create"] * 7

    notes = [entry.notes for entry in entry_store.entries.values()]
    assert notes[:2] == ["AI saved outfit plan", "AI generated plan"]
    first_weather = entry_store.entries["entry-1"].weather
    assert first_weather["generation_type"] == "saved"
    assert first_weather["source"] == "neutral"


def test_generation_avoids_items_from_earlier_in_the_run() -> None:
    planner, _, _ = _planner()
    result = planner.plan_range(USER, _dates(2), _pool(), options=PlanOptions(mix_strategy="ai-heavy"))

    first, second = (set(day.item_ids) for day in result.results)
    assert first == {"shirt_a", "pants_a", "shoes_a"}
    assert second == {"shirt_b", "pants_b", "shoes_c"}


def test_ai_heavy_pattern() -> None:
    planner, _, _ = _planner([CASUAL])
    result = planner.plan_range(
        USER, _dates(4), _pool(), [CASUAL], options=PlanOptions(mix_strategy="ai-heavy", lookback_days=0)
    )
    assert [day.source for day in result.results] == ["saved", "generated", "generated", "saved"]


def test_outfits_named_by_the_planner_are_not_reused() -> None:
    planned = _saved("old-plan", ["tee", "jeans", "shoes_b"], name="AI Week Plan 2025-02-24")
    calendar = _saved("calendar", ["shirt_b", "pants_b", "shoes_c"], name="Calendar 2025-02-25")
    favourite = _saved("favourite", ["shirt_b", "jeans", "shoes_c"], name="AI Week Planner favourites")

    planner, _, _ = _planner([planned, calendar])
    result = planner.plan_range(USER, _dates(1), _pool(), [planned, calendar], options=PlanOptions(mix_strategy="saved-heavy"))
    assert result.results[0].source == "generated"

    planner, _, _ = _planner([planned, favourite])
    result = planner.plan_range(USER, _dates(1), _pool(), [planned, favourite], options=PlanOptions(mix_strategy="saved-heavy"))
    assert result.results[0].outfit_id == "favourite"


def test_saved_outfit_with_missing_items_is_not_eligible() -> None:
    partial = _saved("partial", ["tee", "jeans", "donated_shoes"])
    planner, _, _ = _planner([partial])
    result = planner.plan_range(USER, _dates(1), _pool(), [partial], options=PlanOptions(mix_strategy="saved-heavy"))
    assert result.results[0].source == "generated"


def test_skip_leaves_existing_entries_alone() -> None:
    existing = HistoryEntry(
        entry_id="existing-1", entry_date=START + timedelta(days=1), status="planned", item_ids=["shirt_b", "pants_b"]
    )
    planner, _, entry_store = _planner()
    result = planner.plan_range(USER, _dates(3), _pool(), history=[existing], options=PlanOptions(existing_policy="skip"))

    assert [day.outcome for day in result.results] == ["generated-ai", "skipped-existing", "generated-ai"]
    skipped = result.results[1]
    assert skipped.entry_id == "existing-1"
    assert skipped.item_ids == ["shirt_b", "pants_b"]
    assert skipped.weather is None
    assert result.counts.skipped == 1
    assert all(call[0] == "create" for call in entry_store.calls)
    assert ("create", START + timedelta(days=1)) not in entry_store.calls


def test_worn_entries_do_not_block_planning() -> None:
    worn = HistoryEntry(entry_id="worn-1", entry_date=START, status="worn", item_ids=["tee", "jeans"])
    planner, _, _ = _planner()
    result = planner.plan_range(USER, _dates(1), _pool(), history=[worn])
    assert result.results[0].outcome == "generated-ai"


def test_overwrite_deletes_before_recording() -> None:
    target = START + timedelta(days=1)
    existing = [
        HistoryEntry(entry_id="existing-1", entry_date=target, status="planned", item_ids=["shirt_b", "pants_b"]),
        HistoryEntry(entry_id="existing-2", entry_date=target, status="planned", item_ids=["tee", "jeans"]),
    ]
    entry_store = InMemoryEntryStore()
    planner, _, _ = _planner(entry_store=entry_store)
    result = planner.plan_range(
        USER, _dates(2), _pool(), history=existing, options=PlanOptions(existing_policy="overwrite")
    )

    assert [day.outcome for day in result.results] == ["generated-ai", "overwritten"]
    assert entry_store.calls[1:] == [("delete", "existing-1"), ("delete", "existing-2"), ("create", target)]
    assert result.counts.overwritten == 2
    assert result.counts.generated_ai == 2


def test_overwrite_keeps_existing_entry_when_generation_fails() -> None:
    pool = [
        make_enriched("shirt_a", "Shirt", 6),
        make_enriched("pants_a", "Pants", 5),
        make_enriched("shoes_a", "Shoes", 5),
    ]
    target = START + timedelta(days=1)
    existing = [HistoryEntry(entry_id="existing-1", entry_date=target, status="planned", item_ids=["shirt_a"])]
    planner, _, entry_store = _planner()
    result = planner.plan_range(
        USER,
        _dates(2),
        pool,
        history=existing,
        options=PlanOptions(mix_strategy="ai-heavy", existing_policy="overwrite"),
    )

    assert isinstance(result.error, InsufficientWardrobeError)
    assert result.failed_date == target
    assert entry_store.calls == [("create", START)]
    assert result.counts.overwritten == 0


def test_overwrite_counts_deletions_when_recording_fails() -> None:
    target = START + timedelta(days=1)
    existing = [HistoryEntry(entry_id="existing-1", entry_date=target, status="planned", item_ids=["tee", "jeans"])]
    planner, outfit_store, entry_store = _planner(entry_store=InMemoryEntryStore(fail_on=target))
    result = planner.plan_range(
        USER, _dates(2), _pool(), history=existing, options=PlanOptions(existing_policy="overwrite")
    )

    assert isinstance(result.error, ExternalPersistenceError)
    assert result.error.operation == "create_entry"
    assert entry_store.calls == [("create", START), ("delete", "existing-1")]
    assert result.counts.overwritten == 1
    assert len(result.results) == 1
    # The replacement outfit was created before the old entry was removed.
    assert len(outfit_store.created) == 2


def test_insufficient_wardrobe_aborts_with_partial_result() -> None:
    pool = [
        make_enriched("shirt_a", "Shirt", 6),
        make_enriched("shirt_b", "Shirt", 5),
        make_enriched("pants_a", "Pants", 5),
        make_enriched("shoes_a", "Shoes", 5),
    ]
    planner, _, entry_store = _planner()
    result = planner.plan_range(USER, _dates(3), pool, options=PlanOptions(mix_strategy="ai-heavy"))

    assert len(result.results) == 1
    assert isinstance(result.error, InsufficientWardrobeError)
    assert result.error.category == "Pants"
    assert result.error.target_date == START + timedelta(days=1)
    assert result.failed_date == START + timedelta(days=1)
    assert result.counts.generated_ai == 1
    assert len(entry_store.entries) == 1
    assert not result.ok

    with pytest.raises(PlanAbortedError) as excinfo:
        result.raise_for_error()
    assert excinfo.value.partial is result
    assert isinstance(excinfo.value.__cause__, InsufficientWardrobeError)


def test_store_failure_is_wrapped_as_persistence_error() -> None:
    failing_day = START + timedelta(days=1)
    planner, _, _ = _planner(entry_store=InMemoryEntryStore(fail_on=failing_day))
    result = planner.plan_range(USER, _dates(3), _pool())

    assert len(result.results) == 1
    assert isinstance(result.error, ExternalPersistenceError)
    assert result.error.operation == "create_entry"
    assert isinstance(result.error.cause, RuntimeError)
    assert result.failed_date == failing_day


def test_duplicate_outfit_is_recovered_from_the_store() -> None:
    earlier = _saved("earlier-plan", ["shirt_a", "pants_a", "shoes_a"], name="AI Week Plan 2025-02-24")
    planner, outfit_store, _ = _planner([earlier])
    result = planner.plan_range(USER, _dates(1), _pool(), saved_outfits=[])

    assert result.results[0].source == "generated"
    assert result.results[0].outfit_id == "earlier-plan"
    assert outfit_store.created == []


def test_unrecoverable_duplicate_aborts() -> None:
    class AlwaysDuplicate(InMemoryOutfitStore):
        def create_outfit(self, user_id, item_ids, source="generated", name=None) -> str:
            raise DuplicateOutfitError(item_set_signature(item_ids))

    planner = MultiDayPlanner(AlwaysDuplicate(), InMemoryEntryStore())
    result = planner.plan_range(USER, _dates(2), _pool())

    assert result.results == []
    assert isinstance(result.error, ExternalPersistenceError)
    assert result.error.operation == "create_outfit"


def test_cancellation_stops_between_dates() -> None:
    token = CancellationToken()
    entry_store = InMemoryEntryStore()
    entry_store.on_create = lambda entry: token.cancel()
    planner, _, _ = _planner(entry_store=entry_store)

    result = planner.plan_range(USER, _dates(5), _pool(), cancel_token=token)

    assert result.cancelled is True
    assert len(result.results) == 1
    assert result.error is None
    assert not result.ok


def test_plan_trip_orders_days_and_respects_assigned_slots() -> None:
    day_two = START + timedelta(days=1)
    trip_days = [
        TripDay(trip_day_id="t3", trip_id="lisbon", day_date=day_two, slot_number=1, item_ids=["tee", "jeans"]),
        TripDay(trip_day_id="t2", trip_id="lisbon", day_date=START, slot_number=2),
        TripDay(trip_day_id="t1", trip_id="lisbon", day_date=START, slot_number=1),
    ]
    planner, outfit_store, entry_store = _planner()
    result = planner.plan_trip(
        USER, trip_days, _pool(), options=PlanOptions(mix_strategy="ai-heavy", lookback_days=0, trip_name="lisbon")
    )

    assert [day.trip_day_id for day in result.results] == ["t1", "t2", "t3"]
    assert [day.outcome for day in result.results] == ["generated-ai", "generated-ai", "skipped-existing"]
    assert result.results[1].item_ids == ["shirt_b", "pants_b", "shoes_c"]
    assert [outfit.name for outfit in outfit_store.created] == [
        "AI Trip Plan lisbon 2025-03-03 #1",
        "AI Trip Plan lisbon 2025-03-03 #2",
    ]
    assert [assigned[0] for assigned in planner.trip_store.assigned] == ["t1", "t2"]
    assert entry_store.calls == []
    assert all(day.entry_id is None for day in result.results[:2])


def test_plan_trip_requires_trip_store() -> None:
    planner = MultiDayPlanner(InMemoryOutfitStore(), InMemoryEntryStore())
    with pytest.raises(ValueError):
        planner.plan_trip(USER, [], _pool())


def test_module_level_plan_range() -> None:
    outfit_store = InMemoryOutfitStore()
    entry_store = InMemoryEntryStore()
    result = plan_range(USER, _dates(2), _pool(), [], [], None, outfit_store, entry_store)

    assert result.counts.generated_ai == 2
    assert len(entry_store.entries) == 2
