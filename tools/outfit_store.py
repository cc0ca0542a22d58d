"""Saved outfit storage abstractions and SQLite implementation."""
from __future__ import annotations

import sqlite3
import uuid
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from logic.errors import DuplicateOutfitError
from models.outfit import SavedOutfit, item_set_signature
from models.wardrobe_item import WardrobeItem
from tools.observability import instrument_call
from tools.wardrobe_store import SQLiteStoreMixin, WardrobeStore


class OutfitStore:
    """Persistence interface for saved outfits."""

    def create_outfit(
        self, user_id: str, item_ids: Iterable[str], source: str = "generated", name: Optional[str] = None
    ) -> str:
        """Persist an outfit and return its id.

        Raises :class:`DuplicateOutfitError` when the user already has an
        outfit with the same item set.
        """

        raise NotImplementedError

    def list_outfits(self, user_id: str) -> List[SavedOutfit]:
        raise NotImplementedError

    def delete_outfit(self, user_id: str, outfit_id: str) -> bool:
        raise NotImplementedError


class SQLiteOutfitStore(SQLiteStoreMixin, OutfitStore):
    """Local SQLite-backed store for saved outfits.

    Items are hydrated from ``wardrobe_store`` when one is given; otherwise
    outfits carry bare item references.
    """

    def __init__(self, database_path: str | Path = "data/wardrobe.db", wardrobe_store: WardrobeStore | None = None) -> None:
        self._prepare_path(database_path)
        self.wardrobe_store = wardrobe_store
        self._ensure_tables()

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS outfits (
                    outfit_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT,
                    source TEXT NOT NULL DEFAULT 'curated',
                    signature TEXT NOT NULL,
                    item_ids TEXT NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE (user_id, signature)
                );
                """
            )

    @instrument_call("outfits.create_outfit")
    def create_outfit(
        self, user_id: str, item_ids: Iterable[str], source: str = "generated", name: Optional[str] = None
    ) -> str:
        ids = [str(item_id) for item_id in item_ids]
        signature = item_set_signature(ids)
        if not signature:
            raise ValueError("an outfit needs at least one item")
        outfit_id = uuid.uuid4().hex
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO outfits (outfit_id, user_id, name, source, signature, item_ids)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (outfit_id, user_id, name, source, signature, self._serialise(ids)),
                )
        except sqlite3.IntegrityError as exc:
            raise DuplicateOutfitError(signature, self._find_id(user_id, signature)) from exc
        return outfit_id

    def _find_id(self, user_id: str, signature: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT outfit_id FROM outfits WHERE user_id = ? AND signature = ?",
                (user_id, signature),
            ).fetchone()
        return row["outfit_id"] if row else None

    def _items_by_id(self, user_id: str) -> Dict[str, WardrobeItem]:
        if self.wardrobe_store is None:
            return {}
        return {item.item_id: item for item in self.wardrobe_store.list_items_for_user(user_id)}

    @instrument_call("outfits.list_outfits")
    def list_outfits(self, user_id: str) -> List[SavedOutfit]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM outfits WHERE user_id = ? ORDER BY rowid",
                (user_id,),
            ).fetchall()
        items_by_id = self._items_by_id(user_id)
        outfits = []
        for row in rows:
            items = [
                items_by_id.get(item_id) or WardrobeItem(item_id=item_id, user_id=user_id)
                for item_id in self._deserialise(row["item_ids"])
            ]
            outfits.append(
                SavedOutfit(outfit_id=row["outfit_id"], name=row["name"], source=row["source"], items=items)
            )
        return outfits

    def delete_outfit(self, user_id: str, outfit_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM outfits WHERE user_id = ? AND outfit_id = ?",
                (user_id, outfit_id),
            )
            return cursor.rowcount > 0


__all__ = ["OutfitStore", "SQLiteOutfitStore"]
