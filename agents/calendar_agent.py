"""Calendar agent that classifies the day's events into an occasion context."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional, Tuple

from mirror_app.config import ExecutionProfile, PRODUCTION_PROFILE
from mirror_app.logging_config import get_logger, log_event, operation_context
from models.context import CalendarContext, CalendarEvent
from tools.calendar_provider import CalendarProvider

LOGGER = get_logger(__name__)


EVENT_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "special": ("wedding", "gala", "interview", "ceremony", "graduation", "anniversary", "black tie"),
    "work": ("meeting", "sync", "call", "1:1", "standup", "office", "project", "deadline", "presentation", "client"),
    "social": ("dinner", "drinks", "party", "friends", "lunch", "brunch", "date"),
    "personal": ("doctor", "appointment", "errand", "personal", "gym", "yoga"),
}

_EVENT_FORMALITY = {"special": "formal", "work": "business", "social": "casual", "personal": "casual"}
_FORMALITY_RANK = {"casual": 0, "business": 1, "formal": 2}


class CalendarAgent:
    """Classifies calendar events into a deterministic occasion context."""

    def __init__(self, provider: CalendarProvider, execution_profile: ExecutionProfile = PRODUCTION_PROFILE) -> None:
        self.provider = provider
        self.execution_profile = execution_profile

    def classify_event(self, event: CalendarEvent) -> str:
        lower_title = event.title.lower()
        for event_type, keywords in EVENT_KEYWORDS.items():
            if any(keyword in lower_title for keyword in keywords):
                return event_type
        return "personal"

    def _primary_event(self, events: List[CalendarEvent]) -> Optional[CalendarEvent]:
        """Most formal event of the day; the earliest wins ties."""

        if not events:
            return None
        ordered = sorted(events, key=lambda event: event.start_time)
        return max(ordered, key=lambda event: _FORMALITY_RANK[_EVENT_FORMALITY[event.event_type]])

    def get_calendar_context(self, user_id: str, day: date) -> Optional[CalendarContext]:
        """Return the day's occasion context, or ``None`` when there is nothing to honour."""

        with operation_context("agent:calendar.get_calendar_context") as correlation_id:
            if self.execution_profile.skip_remote_calls:
                return None
            try:
                raw_events = self.provider.get_events(user_id=user_id, start_date=day, end_date=day)
            except Exception:  # noqa: BLE001
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "calendar_unavailable",
                    correlation_id=correlation_id,
                    exc_info=True,
                )
                return None

            events = [replace(event, event_type=self.classify_event(event)) for event in raw_events]
            primary = self._primary_event(events)
            if primary is None:
                return None
            context = CalendarContext(
                events=events,
                primary_event=primary,
                formality_level=_EVENT_FORMALITY[primary.event_type],
            )

            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="calendar",
                method="get_calendar_context",
                correlation_id=correlation_id,
                event_count=len(events),
                event_types=sorted({event.event_type for event in events}),
                formality=context.formality_level,
            )
            return context


__all__ = ["CalendarAgent", "EVENT_KEYWORDS"]
