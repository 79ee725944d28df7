"""
Weather API abstraction for current surface observations.

Provides a pluggable interface for live weather integration. The
StubWeatherProvider returns configurable hardcoded values for development
and testing; OpenWeatherMapProvider queries the OpenWeatherMap current
weather endpoint in imperial units and normalizes wind speed to m/s.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import requests

from config import (
    MPH_TO_MPS,
    OPENWEATHER_API_KEY,
    OPENWEATHER_URL,
    WEATHER_TIMEOUT_S,
)
from errors import InvalidInputError, UpstreamUnavailableError, require_finite

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeatherObservation:
    """A snapshot of surface weather at the release point."""

    wind_speed: float               # m/s
    wind_direction: float           # Meteorological degrees (0-360), direction wind comes FROM
    temperature: float              # degrees F
    humidity: float = 0.0           # %
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        require_finite(
            wind_speed=self.wind_speed,
            wind_direction=self.wind_direction,
            temperature=self.temperature,
        )
        if self.wind_speed < 0:
            raise InvalidInputError("Wind speed must be >= 0")

    def to_dict(self) -> dict:
        return {
            "windSpeed": self.wind_speed,
            "windDirection": self.wind_direction,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


class WeatherProvider(ABC):
    """Abstract base class for weather data sources."""

    @abstractmethod
    def get_current_weather(self, latitude: float, longitude: float) -> WeatherObservation:
        """Return the current observation at a coordinate, wind speed in m/s."""
        ...


class StubWeatherProvider(WeatherProvider):
    """Configurable stub that returns hardcoded weather.

    Args:
        wind_speed: Wind speed (m/s).
        wind_direction: Wind direction (meteorological degrees).
        temperature: Air temperature (degrees F).
        humidity: Relative humidity (%).
    """

    def __init__(
        self,
        wind_speed: float = 4.47,
        wind_direction: float = 270.0,
        temperature: float = 65.0,
        humidity: float = 50.0,
    ):
        self.wind_speed = wind_speed
        self.wind_direction = wind_direction
        self.temperature = temperature
        self.humidity = humidity

    def get_current_weather(self, latitude: float, longitude: float) -> WeatherObservation:
        return WeatherObservation(
            wind_speed=self.wind_speed,
            wind_direction=self.wind_direction,
            temperature=self.temperature,
            humidity=self.humidity,
            timestamp=datetime.now(timezone.utc),
        )


class OpenWeatherMapProvider(WeatherProvider):
    """Current weather from the OpenWeatherMap API.

    The API is queried with ``units=imperial``, so wind speed arrives in mph
    and is converted to m/s here; temperature stays in degrees F.

    Args:
        api_key: OpenWeatherMap API key. Defaults to ``OPENWEATHER_API_KEY``.
        url: Endpoint URL.
        timeout: Request timeout in seconds.
        session: Optional ``requests.Session`` (or compatible) to send with.

    Raises:
        UpstreamUnavailableError: On a missing key, transport failure,
            non-2xx response or unparseable body.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        url: str = OPENWEATHER_URL,
        timeout: float = WEATHER_TIMEOUT_S,
        session=None,
    ):
        self.api_key = OPENWEATHER_API_KEY if api_key is None else api_key
        self.url = url
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def get_current_weather(self, latitude: float, longitude: float) -> WeatherObservation:
        if not self.api_key:
            raise UpstreamUnavailableError(
                "OPENWEATHER_API_KEY is not set in environment variables"
            )

        params = {
            "lat": latitude,
            "lon": longitude,
            "units": "imperial",
            "appid": self.api_key,
        }
        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("OpenWeatherMap request failed: %s", exc)
            raise UpstreamUnavailableError(f"Failed to fetch weather data: {exc}") from exc

        if not response.ok:
            logger.error(
                "OpenWeatherMap API error: %s - %s", response.status_code, response.text
            )
            raise UpstreamUnavailableError(f"Weather API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError("Weather API returned invalid JSON") from exc

        wind = data.get("wind") or {}
        main = data.get("main") or {}
        wind_speed_mph = wind.get("speed") or 0.0
        logger.debug("Original wind speed (mph): %s", wind_speed_mph)

        return WeatherObservation(
            wind_speed=wind_speed_mph * MPH_TO_MPS,
            wind_direction=wind.get("deg") or 0.0,
            temperature=main.get("temp") or 0.0,
            humidity=main.get("humidity") or 0.0,
            timestamp=datetime.now(timezone.utc),
        )
