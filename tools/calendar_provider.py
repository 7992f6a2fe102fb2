"""Calendar provider abstractions and implementations."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, time, timezone
from typing import List, Optional

import google.auth
import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from models.context import CalendarEvent
from models.wardrobe_item import ensure_utc
from tools.errors import ConnectivityError
from tools.observability import instrument_tool

LOGGER = logging.getLogger(__name__)
SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]
EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/{calendar_id}/events"
MAX_EVENTS_PER_DAY = 50


class _EventTime(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date_time: Optional[str] = Field(default=None, alias="dateTime")
    all_day: Optional[str] = Field(default=None, alias="date")

    def resolve(self) -> datetime:
        raw = self.date_time or self.all_day
        if not raw:
            raise ValueError("calendar event has no start or end time")
        return ensure_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))


class _GoogleEvent(BaseModel):
    summary: str = "Untitled event"
    start: _EventTime = Field(default_factory=_EventTime)
    end: _EventTime = Field(default_factory=_EventTime)
    location: Optional[str] = None

    def to_event(self) -> CalendarEvent:
        return CalendarEvent(
            title=self.summary or "Untitled event",
            start_time=self.start.resolve(),
            end_time=self.end.resolve(),
            location=self.location,
            is_all_day=self.start.date_time is None,
        )


class CalendarProvider(ABC):
    """Abstract calendar provider interface."""

    @abstractmethod
    def get_events(self, user_id: str, start_date: date, end_date: date) -> List[CalendarEvent]:
        """Fetch calendar events for the user in the inclusive date range."""


class GoogleCalendarProvider(CalendarProvider):
    """Reads one Google calendar with a service account file or ADC.

    Credential and transport failures raise :class:`ConnectivityError`; the
    calendar agent treats that as "no calendar today". All times come back
    in UTC, all-day events at midnight.
    """

    def __init__(
        self,
        calendar_id: str | None = None,
        credentials_path: str | None = None,
        timeout_seconds: float = 5.0,
    ) -> None:
        self.calendar_id = calendar_id or "primary"
        self.credentials_path = credentials_path
        self.timeout_seconds = timeout_seconds

    def _credentials(self):
        if self.credentials_path:
            credentials, _ = google.auth.load_credentials_from_file(self.credentials_path, scopes=SCOPES)
        else:
            credentials, _ = google.auth.default(scopes=SCOPES)
        if not credentials.valid:
            credentials.refresh(Request())
        return credentials

    @staticmethod
    def _day_window(start_date: date, end_date: date) -> dict:
        return {
            "timeMin": datetime.combine(start_date, time.min, tzinfo=timezone.utc).isoformat(),
            "timeMax": datetime.combine(end_date, time.max, tzinfo=timezone.utc).isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": MAX_EVENTS_PER_DAY,
        }

    @instrument_tool("get_calendar_events")
    def get_events(self, user_id: str, start_date: date, end_date: date) -> List[CalendarEvent]:
        if not user_id:
            raise ValueError("user_id is required")
        if start_date > end_date:
            raise ValueError("start_date must be on or before end_date")

        try:
            token = self._credentials().token
        except GoogleAuthError as exc:
            raise ConnectivityError(f"Failed to acquire Google credentials: {exc}", operation="get_events") from exc

        try:
            response = requests.get(
                EVENTS_URL.format(calendar_id=self.calendar_id),
                headers={"Authorization": f"Bearer {token}"},
                params=self._day_window(start_date, end_date),
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise ConnectivityError(f"Calendar API unreachable: {exc}", operation="get_events") from exc

        events: List[CalendarEvent] = []
        for raw in payload.get("items", []):
            try:
                events.append(_GoogleEvent.model_validate(raw).to_event())
            except (ValidationError, ValueError):
                LOGGER.warning("Skipping malformed calendar event", exc_info=True)
        return events


class MockCalendarProvider(CalendarProvider):
    """Offline deterministic calendar provider; ``fail=True`` simulates an outage."""

    def __init__(self, events: List[CalendarEvent] | None = None, fail: bool = False) -> None:
        self._events = list(events or [])
        self.fail = fail

    def get_events(self, user_id: str, start_date: date, end_date: date) -> List[CalendarEvent]:
        if self.fail:
            raise ConnectivityError("mock calendar outage", operation="get_events")
        LOGGER.debug("Returning %s mock calendar events", len(self._events))
        return list(self._events)


__all__ = ["CalendarProvider", "GoogleCalendarProvider", "MockCalendarProvider"]
