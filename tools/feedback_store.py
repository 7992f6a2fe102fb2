"""Append-only feedback, worn-outfit and favorite-outfit storage."""
from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping

from logic.validation import feedback_to_record, to_feedback_list
from models.feedback import FavoriteOutfit, OutfitFeedback, WornOutfit
from models.wardrobe_item import ensure_utc
from tools.errors import ConnectivityError
from tools.observability import instrument_tool

DEFAULT_FEEDBACK_LIMIT = 100


class FeedbackStore:
    """Persistence interface for feedback entries and wear logs.

    Feedback and wear entries are never updated or deleted once appended.
    """

    def get_recent_feedback(self, user_id: str, limit: int = DEFAULT_FEEDBACK_LIMIT) -> List[OutfitFeedback]:
        """Newest first."""

        raise NotImplementedError

    def append_feedback(self, entry: OutfitFeedback) -> None:
        raise NotImplementedError

    def record_worn_outfit(self, user_id: str, item_ids: List[str], worn_at: datetime) -> WornOutfit:
        raise NotImplementedError

    def get_worn_outfits(self, user_id: str) -> List[WornOutfit]:
        raise NotImplementedError

    def save_favorite_outfit(self, favorite: FavoriteOutfit) -> None:
        """Saving the same recommendation again replaces the earlier entry."""

        raise NotImplementedError

    def get_favorite_outfits(self, user_id: str) -> List[FavoriteOutfit]:
        raise NotImplementedError


class SQLiteFeedbackStore(FeedbackStore):
    """Local SQLite-backed store; each feedback row keeps its full JSON payload."""

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
                CREATE TABLE IF NOT EXISTS outfit_feedback (
                    feedback_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    payload TEXT NOT NULL
                );
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS worn_outfits (
                    user_id TEXT NOT NULL,
                    item_ids TEXT NOT NULL,
                    worn_at TEXT NOT NULL
                );
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS favorites (
                    user_id TEXT NOT NULL,
                    recommendation_id TEXT NOT NULL,
                    item_ids TEXT NOT NULL,
                    confidence_score REAL NOT NULL,
                    confidence_note TEXT NOT NULL,
                    saved_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, recommendation_id)
                );
                """
            )

    @instrument_tool("get_recent_feedback")
    def get_recent_feedback(self, user_id: str, limit: int = DEFAULT_FEEDBACK_LIMIT) -> List[OutfitFeedback]:
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "SELECT payload FROM outfit_feedback WHERE user_id = ? ORDER BY created_at DESC LIMIT ?",
                    (user_id, limit),
                )
                rows = [json.loads(row["payload"]) for row in cursor.fetchall()]
        except (sqlite3.Error, json.JSONDecodeError) as exc:
            raise ConnectivityError(f"Feedback store unavailable: {exc}", operation="get_recent_feedback") from exc
        return to_feedback_list(rows)

    @instrument_tool("append_feedback")
    def append_feedback(self, entry: OutfitFeedback) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO outfit_feedback (feedback_id, user_id, created_at, payload) VALUES (?, ?, ?, ?)",
                    (entry.feedback_id, entry.user_id, entry.timestamp.isoformat(), json.dumps(feedback_to_record(entry))),
                )
        except sqlite3.Error as exc:
            raise ConnectivityError(f"Failed to append feedback: {exc}", operation="append_feedback") from exc

    @instrument_tool("record_worn_outfit")
    def record_worn_outfit(self, user_id: str, item_ids: List[str], worn_at: datetime) -> WornOutfit:
        worn = WornOutfit(user_id=user_id, item_ids=tuple(item_ids), worn_at=worn_at)
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO worn_outfits (user_id, item_ids, worn_at) VALUES (?, ?, ?)",
                    (user_id, json.dumps(list(worn.item_ids)), worn.worn_at.isoformat()),
                )
        except sqlite3.Error as exc:
            raise ConnectivityError(f"Failed to log worn outfit: {exc}", operation="record_worn_outfit") from exc
        return worn

    @instrument_tool("get_worn_outfits")
    def get_worn_outfits(self, user_id: str) -> List[WornOutfit]:
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "SELECT item_ids, worn_at FROM worn_outfits WHERE user_id = ? ORDER BY worn_at DESC",
                    (user_id,),
                )
                return [
                    WornOutfit(
                        user_id=user_id,
                        item_ids=tuple(json.loads(row["item_ids"])),
                        worn_at=datetime.fromisoformat(row["worn_at"]),
                    )
                    for row in cursor.fetchall()
                ]
        except (sqlite3.Error, json.JSONDecodeError) as exc:
            raise ConnectivityError(f"Feedback store unavailable: {exc}", operation="get_worn_outfits") from exc

    @instrument_tool("save_favorite_outfit")
    def save_favorite_outfit(self, favorite: FavoriteOutfit) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO favorites
                        (user_id, recommendation_id, item_ids, confidence_score, confidence_note, saved_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        favorite.user_id,
                        favorite.recommendation_id,
                        json.dumps(list(favorite.item_ids)),
                        favorite.confidence_score,
                        favorite.confidence_note,
                        favorite.saved_at.isoformat(),
                    ),
                )
        except sqlite3.Error as exc:
            raise ConnectivityError(f"Failed to save favorite outfit: {exc}", operation="save_favorite_outfit") from exc

    @instrument_tool("get_favorite_outfits")
    def get_favorite_outfits(self, user_id: str) -> List[FavoriteOutfit]:
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    """
                    SELECT recommendation_id, item_ids, confidence_score, confidence_note, saved_at
                    FROM favorites WHERE user_id = ? ORDER BY saved_at DESC
                    """,
                    (user_id,),
                )
                return [
                    FavoriteOutfit(
                        user_id=user_id,
                        recommendation_id=row["recommendation_id"],
                        item_ids=tuple(json.loads(row["item_ids"])),
                        confidence_score=row["confidence_score"],
                        confidence_note=row["confidence_note"],
                        saved_at=datetime.fromisoformat(row["saved_at"]),
                    )
                    for row in cursor.fetchall()
                ]
        except (sqlite3.Error, json.JSONDecodeError) as exc:
            raise ConnectivityError(f"Feedback store unavailable: {exc}", operation="get_favorite_outfits") from exc


class InMemoryFeedbackStore(FeedbackStore):
    """Offline deterministic feedback store; counts appends for assertions."""

    def __init__(self, records: List[Mapping[str, Any]] | None = None) -> None:
        self._records: List[Dict[str, Any]] = [dict(record) for record in records or []]
        self._worn: List[WornOutfit] = []
        self._favorites: Dict[tuple[str, str], FavoriteOutfit] = {}
        self.append_count = 0
        self.available = True

    def _check_available(self, operation: str) -> None:
        if not self.available:
            raise ConnectivityError("In-memory feedback store marked unavailable", operation=operation)

    @instrument_tool("get_recent_feedback")
    def get_recent_feedback(self, user_id: str, limit: int = DEFAULT_FEEDBACK_LIMIT) -> List[OutfitFeedback]:
        self._check_available("get_recent_feedback")
        entries = [entry for entry in to_feedback_list(self._records) if entry.user_id == user_id]
        entries.sort(key=lambda entry: entry.timestamp, reverse=True)
        return entries[:limit]

    @instrument_tool("append_feedback")
    def append_feedback(self, entry: OutfitFeedback) -> None:
        self._check_available("append_feedback")
        self._records.append(feedback_to_record(entry))
        self.append_count += 1

    @instrument_tool("record_worn_outfit")
    def record_worn_outfit(self, user_id: str, item_ids: List[str], worn_at: datetime) -> WornOutfit:
        self._check_available("record_worn_outfit")
        worn = WornOutfit(user_id=user_id, item_ids=tuple(item_ids), worn_at=ensure_utc(worn_at))
        self._worn.append(worn)
        return worn

    @instrument_tool("get_worn_outfits")
    def get_worn_outfits(self, user_id: str) -> List[WornOutfit]:
        self._check_available("get_worn_outfits")
        return sorted((w for w in self._worn if w.user_id == user_id), key=lambda w: w.worn_at, reverse=True)

    @instrument_tool("save_favorite_outfit")
    def save_favorite_outfit(self, favorite: FavoriteOutfit) -> None:
        self._check_available("save_favorite_outfit")
        self._favorites[(favorite.user_id, favorite.recommendation_id)] = favorite

    @instrument_tool("get_favorite_outfits")
    def get_favorite_outfits(self, user_id: str) -> List[FavoriteOutfit]:
        self._check_available("get_favorite_outfits")
        saved = [fav for (owner, _), fav in self._favorites.items() if owner == user_id]
        return sorted(saved, key=lambda fav: fav.saved_at, reverse=True)


__all__ = ["DEFAULT_FEEDBACK_LIMIT", "FeedbackStore", "InMemoryFeedbackStore", "SQLiteFeedbackStore"]
