"""Weather provider abstractions and implementations."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List

import requests
from pydantic import BaseModel, ValidationError

from mirror_app.logging_config import log_event
from models.context import WeatherContext, fallback_weather
from tools.observability import instrument_tool

LOGGER = logging.getLogger(__name__)

WINDY_THRESHOLD_MPH = 20.0

_CONDITION_MAP = {
    "clear": "sunny",
    "clouds": "cloudy",
    "mist": "cloudy",
    "fog": "cloudy",
    "haze": "cloudy",
    "rain": "rainy",
    "drizzle": "rainy",
    "snow": "snowy",
    "thunderstorm": "stormy",
    "squall": "windy",
    "tornado": "stormy",
}


class _WeatherCondition(BaseModel):
    main: str = "Clouds"
    description: str = "unknown"


class _Wind(BaseModel):
    speed: float = 0.0


class _Main(BaseModel):
    temp: float
    humidity: float = 50.0


class _CurrentWeatherResponse(BaseModel):
    main: _Main
    wind: _Wind = _Wind()
    weather: List[_WeatherCondition] = []
    name: str = ""


class WeatherProvider(ABC):
    """Abstract weather provider interface."""

    @abstractmethod
    def get_current_weather(self, location: str) -> WeatherContext:
        """Return current conditions for a location."""


class OpenWeatherProvider(WeatherProvider):
    """OpenWeather provider with schema validation and graceful fallbacks."""

    def __init__(self, api_key: str | None = None, timeout_seconds: float = 5.0) -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def _fallback_context(self, location: str, reason: str) -> WeatherContext:
        log_event(LOGGER, logging.WARNING, "weather_fallback_used", reason=reason, location=location)
        return fallback_weather(location or "Unknown")

    @staticmethod
    def _map_condition(parsed: _CurrentWeatherResponse) -> str:
        main = parsed.weather[0].main.lower() if parsed.weather else "clouds"
        condition = _CONDITION_MAP.get(main, "cloudy")
        if condition in {"sunny", "cloudy"} and parsed.wind.speed >= WINDY_THRESHOLD_MPH:
            return "windy"
        return condition

    @instrument_tool("get_current_weather")
    def get_current_weather(self, location: str) -> WeatherContext:
        if not location:
            raise ValueError("location is required for weather lookups")

        if not self.api_key:
            return self._fallback_context(location, "missing_api_key")

        log_event(LOGGER, logging.INFO, "weather_fetch_started", location=location, units="imperial")
        params = {"q": location, "appid": self.api_key, "units": "imperial"}
        url = "https://api.openweathermap.org/data/2.5/weather"

        try:
            response = requests.get(url, params=params, timeout=self.timeout_seconds)
            response.raise_for_status()
            parsed = _CurrentWeatherResponse.model_validate(response.json())
            return WeatherContext(
                temperature=parsed.main.temp,
                condition=self._map_condition(parsed),
                humidity=parsed.main.humidity,
                wind_speed=parsed.wind.speed,
                location=parsed.name or location,
            )
        except (requests.Timeout, requests.RequestException) as exc:
            LOGGER.error("Weather API unreachable", exc_info=exc)
            return self._fallback_context(location, "request_error")
        except (ValidationError, ValueError) as exc:
            LOGGER.error("Weather payload schema validation failed", exc_info=exc)
            return self._fallback_context(location, "schema_validation")


class MockWeatherProvider(WeatherProvider):
    """Offline deterministic weather provider for tests."""

    def __init__(self, context: WeatherContext | None = None, fail: bool = False) -> None:
        self.context = context or WeatherContext(temperature=68.0, condition="sunny", humidity=45.0, wind_speed=4.0)
        self.fail = fail
        self.calls = 0

    def get_current_weather(self, location: str) -> WeatherContext:
        self.calls += 1
        log_event(LOGGER, logging.INFO, "mock_weather_returned", location=location)
        if self.fail:
            raise requests.ConnectionError("mock weather outage")
        return self.context


__all__ = ["MockWeatherProvider", "OpenWeatherProvider", "WeatherProvider"]
