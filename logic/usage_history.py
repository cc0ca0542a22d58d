"""Recent-usage tracking for repeat avoidance.

The usage state is a value: the planner folds each decided day into it with
``state.record(...)`` and passes the returned state to the next date. Window
queries are evaluated relative to the date being planned, so records from the
same run expire exactly like stored history does.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional, Set

from models.outfit import item_set_signature
from models.plan import HistoryEntry, UsageHistoryState, UsageRecord

REPEAT_WARNING_DAYS = 7


def build_usage_state(
    history: Iterable[HistoryEntry],
    signature_statuses: Iterable[str] = ("worn", "planned"),
    worn_statuses: Iterable[str] = ("worn",),
) -> UsageHistoryState:
    state = UsageHistoryState(
        signature_statuses=frozenset(signature_statuses),
        worn_statuses=frozenset(worn_statuses),
    )
    for entry in history:
        if not entry.item_ids:
            continue
        state = state.record(entry.entry_date, entry.item_ids, status=entry.status, entry_id=entry.entry_id)
    return state


def _in_window(record: UsageRecord, as_of: date, lookback_days: int) -> bool:
    return as_of - timedelta(days=lookback_days) <= record.entry_date <= as_of


def recent_signatures(state: UsageHistoryState, as_of: date, lookback_days: int) -> Set[str]:
    return {
        record.signature
        for record in state.records
        if record.status in state.signature_statuses and _in_window(record, as_of, lookback_days)
    }


def recent_worn_item_ids(state: UsageHistoryState, as_of: date, lookback_days: int) -> Set[str]:
    return {
        item_id
        for record in state.records
        if record.status in state.worn_statuses and _in_window(record, as_of, lookback_days)
        for item_id in record.item_ids
    }


def run_generated_item_ids(state: UsageHistoryState, as_of: date, lookback_days: int) -> Set[str]:
    """Items generated earlier in the current run that are still inside the window."""

    return {
        item_id
        for record in state.records
        if record.generated_in_run and _in_window(record, as_of, lookback_days)
        for item_id in record.item_ids
    }


def excluded_item_ids(state: UsageHistoryState, as_of: date, lookback_days: int) -> Set[str]:
    return recent_worn_item_ids(state, as_of, lookback_days) | run_generated_item_ids(state, as_of, lookback_days)


def find_repeat_warning(
    history: Iterable[HistoryEntry],
    target_date: date,
    item_ids: Iterable[str],
    window_days: int = REPEAT_WARNING_DAYS,
) -> Optional[str]:
    """Warn when the same item set was worn in the days before ``target_date``."""

    signature = item_set_signature(item_ids)
    if not signature:
        return None
    start = target_date - timedelta(days=window_days)
    for entry in history:
        if entry.status != "worn" or not (start <= entry.entry_date < target_date):
            continue
        if item_set_signature(entry.item_ids) == signature:
            return f"Similar outfit was worn on {entry.entry_date.isoformat()} (within {window_days} days)."
    return None


__all__ = [
    "item_set_signature",
    "build_usage_state",
    "recent_signatures",
    "recent_worn_item_ids",
    "run_generated_item_ids",
    "excluded_item_ids",
    "find_repeat_warning",
]
