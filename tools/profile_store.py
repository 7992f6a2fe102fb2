"""Style profile and user preference storage (last write wins)."""
from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Optional

from models.context import UserPreferences
from models.style_profile import StyleProfile
from tools.errors import ConnectivityError
from tools.observability import instrument_tool


class ProfileStore:
    """Persistence interface for style profiles and notification preferences."""

    def upsert_style_profile(self, profile: StyleProfile) -> None:
        raise NotImplementedError

    def get_style_profile(self, user_id: str) -> Optional[StyleProfile]:
        raise NotImplementedError

    def get_user_preferences(self, user_id: str) -> UserPreferences:
        """Stored preferences, or defaults when the user never set any."""

        raise NotImplementedError

    def save_user_preferences(self, preferences: UserPreferences) -> None:
        raise NotImplementedError


class SQLiteProfileStore(ProfileStore):
    """Local SQLite-backed store with JSON payload columns."""

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
                CREATE TABLE IF NOT EXISTS style_profiles (
                    user_id TEXT PRIMARY KEY,
                    payload TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS user_preferences (
                    user_id TEXT PRIMARY KEY,
                    notification_time TEXT,
                    timezone TEXT,
                    confidence_note_style TEXT
                );
                """
            )

    @instrument_tool("upsert_style_profile")
    def upsert_style_profile(self, profile: StyleProfile) -> None:
        payload = profile.to_dict()
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO style_profiles (user_id, payload, updated_at) VALUES (?, ?, ?)",
                    (profile.user_id, json.dumps(payload), payload["last_updated"]),
                )
        except sqlite3.Error as exc:
            raise ConnectivityError(f"Failed to upsert style profile: {exc}", operation="upsert_style_profile") from exc

    @instrument_tool("get_style_profile")
    def get_style_profile(self, user_id: str) -> Optional[StyleProfile]:
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT payload FROM style_profiles WHERE user_id = ?", (user_id,)).fetchone()
        except sqlite3.Error as exc:
            raise ConnectivityError(f"Profile store unavailable: {exc}", operation="get_style_profile") from exc
        return StyleProfile.from_dict(json.loads(row["payload"])) if row else None

    @instrument_tool("get_user_preferences")
    def get_user_preferences(self, user_id: str) -> UserPreferences:
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT * FROM user_preferences WHERE user_id = ?", (user_id,)).fetchone()
        except sqlite3.Error as exc:
            raise ConnectivityError(f"Profile store unavailable: {exc}", operation="get_user_preferences") from exc
        if not row:
            return UserPreferences(user_id=user_id)
        return UserPreferences(
            user_id=user_id,
            notification_time=row["notification_time"] or "06:00",
            timezone=row["timezone"] or "UTC",
            confidence_note_style=row["confidence_note_style"] or "encouraging",
        )

    def save_user_preferences(self, preferences: UserPreferences) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO user_preferences VALUES (?, ?, ?, ?)",
                    (
                        preferences.user_id,
                        preferences.notification_time,
                        preferences.timezone,
                        preferences.confidence_note_style,
                    ),
                )
        except sqlite3.Error as exc:
            raise ConnectivityError(f"Failed to save preferences: {exc}", operation="save_user_preferences") from exc


class InMemoryProfileStore(ProfileStore):
    """Offline deterministic profile store; counts upserts for assertions."""

    def __init__(self) -> None:
        self._profiles: Dict[str, Dict[str, object]] = {}
        self._preferences: Dict[str, UserPreferences] = {}
        self.upsert_count = 0
        self.available = True

    def _check_available(self, operation: str) -> None:
        if not self.available:
            raise ConnectivityError("In-memory profile store marked unavailable", operation=operation)

    @instrument_tool("upsert_style_profile")
    def upsert_style_profile(self, profile: StyleProfile) -> None:
        self._check_available("upsert_style_profile")
        self._profiles[profile.user_id] = profile.to_dict()
        self.upsert_count += 1

    @instrument_tool("get_style_profile")
    def get_style_profile(self, user_id: str) -> Optional[StyleProfile]:
        self._check_available("get_style_profile")
        payload = self._profiles.get(user_id)
        return StyleProfile.from_dict(payload) if payload else None

    @instrument_tool("get_user_preferences")
    def get_user_preferences(self, user_id: str) -> UserPreferences:
        self._check_available("get_user_preferences")
        stored = self._preferences.get(user_id)
        return UserPreferences(**asdict(stored)) if stored else UserPreferences(user_id=user_id)

    def save_user_preferences(self, preferences: UserPreferences) -> None:
        self._check_available("save_user_preferences")
        self._preferences[preferences.user_id] = preferences


__all__ = ["InMemoryProfileStore", "ProfileStore", "SQLiteProfileStore"]
