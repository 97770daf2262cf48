"""
Position source helpers.

Reads a Coordinate from a state object carrying latitude/longitude attributes
(device_tracker, person or zone entities) and substitutes the caller's
fallback when the source fails. Works on any object with an `attributes`
mapping, so there are no HA imports here.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from .models import Coordinate

_LOGGER = logging.getLogger(__name__)


class PositionUnavailable(Exception):
    """Raised when the position source cannot produce a coordinate."""


def coordinate_from_state(entity_id: str, state) -> Coordinate:
    """Extract a Coordinate from an HA-like state object."""
    if state is None:
        raise PositionUnavailable(f"{entity_id} does not exist")
    lat = state.attributes.get("latitude")
    lng = state.attributes.get("longitude")
    if lat is None or lng is None:
        raise PositionUnavailable(f"{entity_id} has no latitude/longitude attributes")
    try:
        return Coordinate(float(lat), float(lng))
    except (TypeError, ValueError) as exc:
        raise PositionUnavailable(f"{entity_id} has invalid coordinates: {exc}") from exc


async def resolve_position(
    source: Callable[[], Awaitable[Coordinate]],
    fallback: Coordinate,
) -> Coordinate:
    """Await the position source; on any failure return fallback instead."""
    try:
        return await source()
    except PositionUnavailable as exc:
        _LOGGER.warning("Position unavailable, using fallback %s: %s", fallback, exc)
    except Exception as exc:  # noqa: BLE001
        _LOGGER.warning("Position source failed, using fallback %s: %s", fallback, exc)
    return fallback
