"""
Weather snapshot fetching from the Open-Meteo forecast API.

Any failure (timeout, non-200 response, unexpected payload) yields
FALLBACK_WEATHER instead of an error. There is no retry: the next scheduled
refresh simply tries again.

No HA imports.
"""
from __future__ import annotations

import asyncio
import logging

import aiohttp

from .const import UNKNOWN_WEATHER, WEATHER_API_URL, WEATHER_CURRENT_FIELDS, WEATHER_DESCRIPTIONS
from .models import Coordinate, WeatherSnapshot

_LOGGER = logging.getLogger(__name__)

FALLBACK_WEATHER = WeatherSnapshot(
    temperature=75,
    feels_like=78,
    humidity=65,
    precipitation=0,
    wind_speed=8,
    wind_direction=180,
    description="Partly Cloudy",
    icon="mdi:weather-partly-cloudy",
    code=2,
    is_fallback=True,
)


def describe_weather_code(code: int | None) -> tuple[str, str]:
    """Return (description, icon) for a WMO weather code."""
    return WEATHER_DESCRIPTIONS.get(code, UNKNOWN_WEATHER)


def parse_weather(raw: dict) -> WeatherSnapshot:
    """Build a WeatherSnapshot from the `current` block of a forecast response."""
    current = raw["current"]
    code = current.get("weather_code")
    description, icon = describe_weather_code(code)
    return WeatherSnapshot(
        temperature=round(current["temperature_2m"]),
        feels_like=round(current["apparent_temperature"]),
        humidity=current["relative_humidity_2m"],
        precipitation=current["precipitation"],
        wind_speed=round(current["wind_speed_10m"]),
        wind_direction=current["wind_direction_10m"],
        description=description,
        icon=icon,
        code=code,
    )


async def fetch_weather(coordinate: Coordinate) -> WeatherSnapshot:
    """Fetch current conditions at coordinate, or FALLBACK_WEATHER on any error."""
    lat = round(coordinate.latitude, 4)
    lng = round(coordinate.longitude, 4)
    params = {
        "latitude": lat,
        "longitude": lng,
        "current": WEATHER_CURRENT_FIELDS,
        "temperature_unit": "fahrenheit",
        "wind_speed_unit": "mph",
        "timezone": "auto",
    }
    headers = {"accept": "application/json"}
    timeout = aiohttp.ClientTimeout(total=15)

    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(WEATHER_API_URL, headers=headers, params=params) as resp:
                if resp.status != 200:
                    _LOGGER.warning(
                        "Weather API returned HTTP %s for (%.4f, %.4f)", resp.status, lat, lng
                    )
                    return FALLBACK_WEATHER
                raw = await resp.json()
    except asyncio.TimeoutError:
        _LOGGER.warning("Timeout fetching weather for (%.4f, %.4f)", lat, lng)
        return FALLBACK_WEATHER
    except Exception as exc:  # noqa: BLE001
        _LOGGER.error("Unexpected error fetching weather for (%.4f, %.4f): %s", lat, lng, exc)
        return FALLBACK_WEATHER

    try:
        return parse_weather(raw)
    except (KeyError, TypeError) as exc:
        _LOGGER.warning("Unexpected weather response for (%.4f, %.4f): %s (%s)", lat, lng, raw, exc)
        return FALLBACK_WEATHER
