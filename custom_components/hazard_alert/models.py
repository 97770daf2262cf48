"""
Domain models for the Hazard Alert integration.

This module contains pure data classes shared by the proximity engine and the
entities. These classes have no dependencies on HTTP, timers, or Home Assistant
internals.
"""
from __future__ import annotations

import dataclasses
import math
from datetime import datetime
from enum import StrEnum

from .const import (
    ALERT_DURATION,
    HAZARD_NAMES,
    INNER_BOUND_KM,
    OUTER_BOUND_KM,
    TICK_INTERVAL,
)


@dataclasses.dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


class HazardCategory(StrEnum):
    """Kind of reported hazard."""

    SPEED = "speed"
    CHECKPOINT = "checkpoint"

    @property
    def display_name(self) -> str:
        return HAZARD_NAMES[self.value]


@dataclasses.dataclass(frozen=True)
class HazardReport:
    """
    A single reported hazard.

    Created by a hazard source and never changed afterwards; a new set of
    reports replaces the old one wholesale.
    """

    id: str
    coordinate: Coordinate
    category: HazardCategory
    report_count: int
    reported_at: datetime


def alert_signature(hazard_id: str, distance_km: float) -> str:
    """
    Dedup key for a hazard at a given distance.

    The distance is bucketed to 0.1 km, so approaching a single hazard yields a
    new signature every time the bucket changes.
    """
    return f"{hazard_id}-{math.floor(distance_km * 10)}"


@dataclasses.dataclass(frozen=True)
class ProximityAlert:
    """The user-facing warning for a hazard within range."""

    signature: str
    hazard: HazardReport
    distance_km: float
    triggered_at: datetime

    @property
    def distance_label(self) -> str:
        return f"{self.distance_km:.1f} km"


@dataclasses.dataclass(frozen=True)
class Destination:
    """Route target chosen by the user."""

    name: str
    coordinate: Coordinate


@dataclasses.dataclass(frozen=True)
class WeatherSnapshot:
    """Current conditions at a coordinate (imperial units)."""

    temperature: float
    feels_like: float
    humidity: float
    precipitation: float
    wind_speed: float
    wind_direction: float
    description: str
    icon: str
    code: int | None
    is_fallback: bool = False


@dataclasses.dataclass(frozen=True)
class ScanConfig:
    """
    Proximity scan parameters.

    A hazard qualifies when inner_bound_km < distance <= outer_bound_km.
    Intervals are in seconds. ledger_max_age=None keeps every seen signature
    for the lifetime of the engine.
    """

    inner_bound_km: float = INNER_BOUND_KM
    outer_bound_km: float = OUTER_BOUND_KM
    tick_interval: float = TICK_INTERVAL
    alert_duration: float = ALERT_DURATION
    ledger_max_age: float | None = None
