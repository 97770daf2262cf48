"""
Spherical geometry helpers.

Pure math, no HA imports.
"""
from __future__ import annotations

import math

from .const import EARTH_RADIUS_KM, KM_PER_DEGREE
from .models import Coordinate


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle (haversine) distance in kilometres."""
    d_lat = math.radians(b.latitude - a.latitude)
    d_lng = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push h a hair past 1 for antipodal points
    h = min(1.0, h)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def bearing_degrees(origin: Coordinate, target: Coordinate) -> float:
    """Initial compass bearing from origin to target, in [0, 360)."""
    phi1 = math.radians(origin.latitude)
    phi2 = math.radians(target.latitude)
    d_lambda = math.radians(target.longitude - origin.longitude)

    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    bearing = (math.degrees(math.atan2(y, x)) + 360) % 360
    # (-tiny + 360) % 360 can round to exactly 360.0
    return 0.0 if bearing >= 360 else bearing


def flat_distance_km(a: Coordinate, b: Coordinate) -> float:
    """
    Rough planar estimate: Euclidean degree delta times 111 km.

    Display only. Alert thresholds always use distance_km.
    """
    return math.hypot(b.latitude - a.latitude, b.longitude - a.longitude) * KM_PER_DEGREE
