"""Weather agent that always produces a usable weather context."""

from __future__ import annotations

import logging

from mirror_app.config import ExecutionProfile, PRODUCTION_PROFILE
from mirror_app.logging_config import get_logger, log_event, operation_context
from logic.weather_scoring import temperature_band
from models.context import WeatherContext, fallback_weather
from tools.weather_provider import WeatherProvider

LOGGER = get_logger(__name__)


class WeatherAgent:
    """Fetches current conditions and substitutes the fallback on any failure."""

    def __init__(self, provider: WeatherProvider, execution_profile: ExecutionProfile = PRODUCTION_PROFILE) -> None:
        self.provider = provider
        self.execution_profile = execution_profile

    def get_weather_context(self, location: str) -> WeatherContext:
        with operation_context("agent:weather.get_weather_context") as correlation_id:
            if self.execution_profile.skip_remote_calls:
                weather = fallback_weather(location)
                source = "skipped"
            else:
                try:
                    weather = self.provider.get_current_weather(location)
                    source = "provider"
                except Exception:  # noqa: BLE001
                    log_event(
                        LOGGER,
                        logging.WARNING,
                        "weather_fallback_used",
                        correlation_id=correlation_id,
                        location=location,
                        exc_info=True,
                    )
                    weather = fallback_weather(location)
                    source = "fallback"

            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="weather",
                method="get_weather_context",
                correlation_id=correlation_id,
                source=source,
                temperature=weather.temperature,
                condition=weather.condition,
                band=temperature_band(weather.temperature),
            )
            return weather


__all__ = ["WeatherAgent"]
