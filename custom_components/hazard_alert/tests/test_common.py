"""
Shared helpers and factory functions for Hazard Alert tests.
Import from this module in each test file to avoid duplication.
"""

from __future__ import annotations

import asyncio
import math
from datetime import datetime, timezone
from unittest.mock import MagicMock

from custom_components.hazard_alert.const import EARTH_RADIUS_KM
from custom_components.hazard_alert.coordinator import HazardAlertCoordinator
from custom_components.hazard_alert.hazards import FixedHazardSource
from custom_components.hazard_alert.models import (
    Coordinate,
    HazardCategory,
    HazardReport,
    ScanConfig,
)


ORIGIN = Coordinate(0.0, 0.0)

# Short intervals so timer behaviour can be observed within a test
FAST_CONFIG = ScanConfig(tick_interval=0.05, alert_duration=0.1)


def point_east_km(km: float, origin: Coordinate = ORIGIN) -> Coordinate:
    """A coordinate `km` kilometres due east of an equatorial origin."""
    return Coordinate(origin.latitude, origin.longitude + math.degrees(km / EARTH_RADIUS_KM))


def make_hazard(hazard_id: str = "hazard-0", km: float = 2.0, **kwargs) -> HazardReport:
    """A hazard `km` kilometres due east of ORIGIN."""
    defaults = dict(
        id=hazard_id,
        coordinate=point_east_km(km),
        category=HazardCategory.SPEED,
        report_count=25,
        reported_at=datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
    )
    defaults.update(kwargs)
    return HazardReport(**defaults)


def make_entry_data(**kwargs) -> dict:
    defaults = dict(
        guid="test-guid",
        entry_name="Test Entry",
        source_entity="device_tracker.phone",
        fallback_latitude=26.1420,
        fallback_longitude=-81.7948,
        fetch_weather=False,
        cue_media_player="",
        cue_media_url="",
    )
    defaults.update(kwargs)
    return defaults


def make_state(lat: float | None, lng: float | None) -> MagicMock:
    """An HA-like State whose attributes carry a position."""
    state = MagicMock()
    state.attributes = {}
    if lat is not None:
        state.attributes["latitude"] = lat
    if lng is not None:
        state.attributes["longitude"] = lng
    return state


def make_coordinator(hass=None, hazards=None, **entry_kwargs) -> HazardAlertCoordinator:
    """Build a coordinator with a mocked hass and a fixed hazard source."""
    if hass is None:
        hass = MagicMock()
        hass.async_create_task = lambda coro: asyncio.ensure_future(coro)
        hass.states.get = MagicMock(return_value=None)
    entry = MagicMock()
    entry.data = make_entry_data(**entry_kwargs)
    entry.pref_disable_polling = False
    source = FixedHazardSource(hazards if hazards is not None else [make_hazard()])
    return HazardAlertCoordinator(hass, entry, hazard_source=source)
