"""Wardrobe storage abstractions and SQLite implementation."""
from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import List, Optional

from models.wardrobe_item import WardrobeItem
from tools.observability import instrument_call


class WardrobeStore:
    """Persistence interface for wardrobe items."""

    def create_item(self, item: WardrobeItem) -> WardrobeItem:
        raise NotImplementedError

    def get_item(self, user_id: str, item_id: str) -> Optional[WardrobeItem]:
        raise NotImplementedError

    def list_items_for_user(self, user_id: str) -> List[WardrobeItem]:
        raise NotImplementedError

    def delete_item(self, user_id: str, item_id: str) -> bool:
        raise NotImplementedError


class SQLiteStoreMixin:
    """Shared connection handling for the SQLite reference adapters."""

    database_path: Path

    def _prepare_path(self, database_path: str | Path) -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def _serialise(values: object) -> str:
        return json.dumps(values if values is not None else [])

    @staticmethod
    def _deserialise(raw: Optional[str], default: object = None) -> object:
        if not raw:
            return [] if default is None else default
        return json.loads(raw)


class SQLiteWardrobeStore(SQLiteStoreMixin, WardrobeStore):
    """Local SQLite-backed store for wardrobe items."""

    def __init__(self, database_path: str | Path = "data/wardrobe.db") -> None:
        self._prepare_path(database_path)
        self._ensure_tables()

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS wardrobe_items (
                    user_id TEXT NOT NULL,
                    item_id TEXT NOT NULL,
                    category TEXT,
                    name TEXT,
                    brand TEXT,
                    material TEXT,
                    color TEXT,
                    formality_score REAL,
                    season TEXT,
                    image_url TEXT,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (user_id, item_id)
                );
                """
            )

    @instrument_call("wardrobe.create_item")
    def create_item(self, item: WardrobeItem) -> WardrobeItem:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO wardrobe_items (
                    user_id, item_id, category, name, brand, material, color,
                    formality_score, season, image_url
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item.user_id,
                    item.item_id,
                    item.category,
                    item.name,
                    item.brand,
                    item.material,
                    item.color,
                    item.formality_score,
                    self._serialise(item.season),
                    item.image_url,
                ),
            )
        return item

    def _row_to_item(self, row: sqlite3.Row) -> WardrobeItem:
        return WardrobeItem(
            item_id=row["item_id"],
            user_id=row["user_id"],
            category=row["category"],
            name=row["name"],
            brand=row["brand"],
            material=row["material"],
            color=row["color"],
            formality_score=row["formality_score"],
            season=self._deserialise(row["season"]),
            image_url=row["image_url"],
        )

    def get_item(self, user_id: str, item_id: str) -> Optional[WardrobeItem]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM wardrobe_items WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            row = cursor.fetchone()
            return self._row_to_item(row) if row else None

    @instrument_call("wardrobe.list_items_for_user")
    def list_items_for_user(self, user_id: str) -> List[WardrobeItem]:
        # rowid keeps insertion order, which is the collection order used for tie-breaks.
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM wardrobe_items WHERE user_id = ? ORDER BY rowid",
                (user_id,),
            )
            return [self._row_to_item(row) for row in cursor.fetchall()]

    def delete_item(self, user_id: str, item_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM wardrobe_items WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            return cursor.rowcount > 0


__all__ = ["WardrobeStore", "SQLiteStoreMixin", "SQLiteWardrobeStore"]
