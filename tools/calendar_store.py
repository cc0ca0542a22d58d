"""Calendar entry and trip-day storage abstractions with a SQLite implementation."""
from __future__ import annotations

import sqlite3
import uuid
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from models.plan import HistoryEntry, TripDay
from tools.observability import instrument_call
from tools.wardrobe_store import SQLiteStoreMixin


class DayEntryStore:
    """Persistence interface for dated outfit plans."""

    def create_entry(
        self,
        user_id: str,
        entry_date: date,
        status: str = "planned",
        outfit_id: Optional[str] = None,
        item_ids: Iterable[str] = (),
        weather: Optional[Dict[str, object]] = None,
        notes: Optional[str] = None,
    ) -> HistoryEntry:
        raise NotImplementedError

    def delete_entry(self, user_id: str, entry_id: str) -> bool:
        raise NotImplementedError

    def list_entries(self, user_id: str, start: date, end: date) -> List[HistoryEntry]:
        """Entries with ``start <= entry_date <= end`` ordered by date."""

        raise NotImplementedError


class TripDayStore:
    """Persistence interface for trip itineraries."""

    def create_trip_day(self, user_id: str, trip_id: str, day_date: date, slot_number: int = 1) -> TripDay:
        raise NotImplementedError

    def list_trip_days(self, user_id: str, trip_id: str) -> List[TripDay]:
        raise NotImplementedError

    def assign_trip_day(
        self,
        user_id: str,
        trip_day_id: str,
        outfit_id: Optional[str] = None,
        item_ids: Iterable[str] = (),
        weather: Optional[Dict[str, object]] = None,
    ) -> TripDay:
        raise NotImplementedError


class SQLiteCalendarStore(SQLiteStoreMixin, DayEntryStore, TripDayStore):
    """Local SQLite-backed store for calendar entries and trip days."""

    def __init__(self, database_path: str | Path = "data/wardrobe.db") -> None:
        self._prepare_path(database_path)
        self._ensure_tables()

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS calendar_entries (
                    entry_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    entry_date TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'planned',
                    outfit_id TEXT,
                    item_ids TEXT,
                    weather TEXT,
                    notes TEXT,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                );
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS trip_days (
                    trip_day_id TEXT PRIMARY KEY,
                    trip_id TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    day_date TEXT NOT NULL,
                    slot_number INTEGER NOT NULL DEFAULT 1,
                    outfit_id TEXT,
                    item_ids TEXT,
                    weather TEXT,
                    UNIQUE (trip_id, day_date, slot_number)
                );
                """
            )

    def _row_to_entry(self, row: sqlite3.Row) -> HistoryEntry:
        return HistoryEntry(
            entry_id=row["entry_id"],
            entry_date=date.fromisoformat(row["entry_date"]),
            status=row["status"],
            item_ids=list(self._deserialise(row["item_ids"])),
            outfit_id=row["outfit_id"],
            weather=self._deserialise(row["weather"], default={}) or None,
            notes=row["notes"],
        )

    def _row_to_trip_day(self, row: sqlite3.Row) -> TripDay:
        return TripDay(
            trip_day_id=row["trip_day_id"],
            trip_id=row["trip_id"],
            day_date=date.fromisoformat(row["day_date"]),
            slot_number=int(row["slot_number"]),
            outfit_id=row["outfit_id"],
            item_ids=list(self._deserialise(row["item_ids"])),
        )

    @instrument_call("calendar.create_entry")
    def create_entry(
        self,
        user_id: str,
        entry_date: date,
        status: str = "planned",
        outfit_id: Optional[str] = None,
        item_ids: Iterable[str] = (),
        weather: Optional[Dict[str, object]] = None,
        notes: Optional[str] = None,
    ) -> HistoryEntry:
        entry_id = uuid.uuid4().hex
        ids = [str(item_id) for item_id in item_ids]
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO calendar_entries (
                    entry_id, user_id, entry_date, status, outfit_id, item_ids, weather, notes
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry_id,
                    user_id,
                    entry_date.isoformat(),
                    status,
                    outfit_id,
                    self._serialise(ids),
                    self._serialise(weather or {}),
                    notes,
                ),
            )
        return HistoryEntry(
            entry_id=entry_id,
            entry_date=entry_date,
            status=status,
            item_ids=ids,
            outfit_id=outfit_id,
            weather=weather,
            notes=notes,
        )

    @instrument_call("calendar.delete_entry")
    def delete_entry(self, user_id: str, entry_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM calendar_entries WHERE user_id = ? AND entry_id = ?",
                (user_id, entry_id),
            )
            return cursor.rowcount > 0

    @instrument_call("calendar.list_entries")
    def list_entries(self, user_id: str, start: date, end: date) -> List[HistoryEntry]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM calendar_entries
                WHERE user_id = ? AND entry_date BETWEEN ? AND ?
                ORDER BY entry_date, rowid
                """,
                (user_id, start.isoformat(), end.isoformat()),
            ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def create_trip_day(self, user_id: str, trip_id: str, day_date: date, slot_number: int = 1) -> TripDay:
        trip_day_id = uuid.uuid4().hex
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO trip_days (trip_day_id, trip_id, user_id, day_date, slot_number)
                VALUES (?, ?, ?, ?, ?)
                """,
                (trip_day_id, trip_id, user_id, day_date.isoformat(), slot_number),
            )
        return TripDay(trip_day_id=trip_day_id, trip_id=trip_id, day_date=day_date, slot_number=slot_number)

    @instrument_call("trips.list_trip_days")
    def list_trip_days(self, user_id: str, trip_id: str) -> List[TripDay]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM trip_days WHERE user_id = ? AND trip_id = ?
                ORDER BY day_date, slot_number
                """,
                (user_id, trip_id),
            ).fetchall()
        return [self._row_to_trip_day(row) for row in rows]

    @instrument_call("trips.assign_trip_day")
    def assign_trip_day(
        self,
        user_id: str,
        trip_day_id: str,
        outfit_id: Optional[str] = None,
        item_ids: Iterable[str] = (),
        weather: Optional[Dict[str, object]] = None,
    ) -> TripDay:
        ids = [str(item_id) for item_id in item_ids]
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE trip_days SET outfit_id = ?, item_ids = ?, weather = ?
                WHERE user_id = ? AND trip_day_id = ?
                """,
                (outfit_id, self._serialise(ids), self._serialise(weather or {}), user_id, trip_day_id),
            )
            if cursor.rowcount == 0:
                raise KeyError(f"Unknown trip day {trip_day_id}")
            row = conn.execute("SELECT * FROM trip_days WHERE trip_day_id = ?", (trip_day_id,)).fetchone()
        return self._row_to_trip_day(row)


__all__ = ["DayEntryStore", "TripDayStore", "SQLiteCalendarStore"]
