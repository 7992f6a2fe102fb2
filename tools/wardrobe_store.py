"""Wardrobe storage abstractions and SQLite implementation.

The engine only ever reads wardrobes. Writes (``add_item``, ``record_wear``)
exist so local deployments and tests can seed and maintain the SQLite store.
"""
from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from logic.validation import to_wardrobe_items, wardrobe_item_to_record
from models.wardrobe_item import WardrobeItem, ensure_utc
from tools.errors import ConnectivityError
from tools.observability import instrument_tool


class WardrobeStore:
    """Read interface for wardrobe items."""

    def get_user_wardrobe(self, user_id: str) -> List[WardrobeItem]:
        """Return every item the user owns; raises :class:`ConnectivityError`."""

        raise NotImplementedError


class SQLiteWardrobeStore(WardrobeStore):
    """Local SQLite-backed store for wardrobe items."""

    def __init__(self, database_path: str | Path = "data/mirror.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS wardrobe_items (
                    user_id TEXT NOT NULL,
                    item_id TEXT NOT NULL,
                    category TEXT,
                    colors TEXT,
                    tags TEXT,
                    total_wears INTEGER DEFAULT 0,
                    average_rating REAL DEFAULT 0,
                    last_worn TEXT,
                    compliments_received INTEGER DEFAULT 0,
                    name TEXT,
                    subcategory TEXT,
                    brand TEXT,
                    fit TEXT,
                    notes TEXT,
                    image_uri TEXT,
                    PRIMARY KEY (user_id, item_id)
                );
                """
            )

    @staticmethod
    def _serialise_list(values: Optional[List[object]]) -> str:
        return json.dumps(values or [])

    @staticmethod
    def _deserialise_list(raw: str) -> Any:
        try:
            return json.loads(raw) if raw else []
        except json.JSONDecodeError:
            return raw

    def add_item(self, item: WardrobeItem) -> WardrobeItem:
        record = wardrobe_item_to_record(item)
        usage = record["usage_stats"]
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO wardrobe_items (
                        user_id, item_id, category, colors, tags, total_wears, average_rating,
                        last_worn, compliments_received, name, subcategory, brand, fit, notes, image_uri
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.user_id,
                        item.item_id,
                        item.category,
                        self._serialise_list(item.colors),
                        self._serialise_list(item.tags),
                        usage["total_wears"],
                        usage["average_rating"],
                        usage["last_worn"],
                        usage["compliments_received"],
                        item.name,
                        item.subcategory,
                        item.brand,
                        item.fit,
                        item.notes,
                        item.image_uri,
                    ),
                )
        except sqlite3.Error as exc:
            raise ConnectivityError(f"Failed to store wardrobe item: {exc}", operation="add_item") from exc
        return item

    def record_wear(self, user_id: str, item_ids: List[str], worn_at: datetime) -> None:
        """Bump wear counters for items logged as worn."""

        try:
            with self._connect() as conn:
                conn.executemany(
                    """
                    UPDATE wardrobe_items
                    SET total_wears = total_wears + 1, last_worn = ?
                    WHERE user_id = ? AND item_id = ?
                    """,
                    [(ensure_utc(worn_at).isoformat(), user_id, item_id) for item_id in item_ids],
                )
        except sqlite3.Error as exc:
            raise ConnectivityError(f"Failed to record wear: {exc}", operation="record_wear") from exc

    def _row_to_record(self, row: sqlite3.Row) -> Dict[str, object]:
        return {
            "item_id": row["item_id"],
            "user_id": row["user_id"],
            "category": row["category"],
            "colors": self._deserialise_list(row["colors"]),
            "tags": self._deserialise_list(row["tags"]),
            "usage_stats": {
                "total_wears": row["total_wears"],
                "average_rating": row["average_rating"],
                "last_worn": row["last_worn"],
                "compliments_received": row["compliments_received"],
            },
            "name": row["name"],
            "subcategory": row["subcategory"],
            "brand": row["brand"],
            "fit": row["fit"],
            "notes": row["notes"],
            "image_uri": row["image_uri"],
        }

    @instrument_tool("get_user_wardrobe")
    def get_user_wardrobe(self, user_id: str) -> List[WardrobeItem]:
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "SELECT * FROM wardrobe_items WHERE user_id = ? ORDER BY item_id",
                    (user_id,),
                )
                rows = [self._row_to_record(row) for row in cursor.fetchall()]
        except sqlite3.Error as exc:
            raise ConnectivityError(f"Wardrobe store unavailable: {exc}", operation="get_user_wardrobe") from exc
        return to_wardrobe_items(rows)


class InMemoryWardrobeStore(WardrobeStore):
    """Offline deterministic wardrobe store for tests and local demos.

    Holds raw records so the same boundary normalisation runs as for SQLite.
    Set ``available`` to ``False`` to simulate an outage.
    """

    def __init__(self, records: List[Mapping[str, Any]] | None = None) -> None:
        self._records: List[Mapping[str, Any]] = list(records or [])
        self.available = True

    def add_item(self, item: WardrobeItem) -> WardrobeItem:
        self._records.append(wardrobe_item_to_record(item))
        return item

    def add_record(self, record: Mapping[str, Any]) -> None:
        self._records.append(record)

    @instrument_tool("get_user_wardrobe")
    def get_user_wardrobe(self, user_id: str) -> List[WardrobeItem]:
        if not self.available:
            raise ConnectivityError("In-memory wardrobe store marked unavailable", operation="get_user_wardrobe")
        rows = [row for row in self._records if str(row.get("user_id", row.get("userId"))) == user_id]
        return to_wardrobe_items(rows)


__all__ = ["InMemoryWardrobeStore", "SQLiteWardrobeStore", "WardrobeStore"]
