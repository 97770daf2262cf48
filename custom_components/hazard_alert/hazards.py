"""
Hazard storage and hazard sources.

HazardStore holds the current set of hazard reports for the engine.
HazardSource is the capability the coordinator asks for a fresh set whenever
the live position has moved far enough; production uses the simulated
RandomHazardSource, tests use FixedHazardSource.

No HA imports.
"""
from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable, Iterator
from datetime import datetime, timedelta, timezone
from typing import Protocol

from .const import SIMULATED_HAZARD_COUNT, SIMULATED_HAZARD_SPREAD, SIMULATED_MAX_AGE
from .models import Coordinate, HazardCategory, HazardReport

_LOGGER = logging.getLogger(__name__)


class HazardSource(Protocol):
    """Anything that can supply the hazards around a position."""

    async def async_get_hazards(self, position: Coordinate) -> list[HazardReport]:
        ...


class HazardStore:
    """
    Ordered, replace-only collection of HazardReport objects.

    Iteration order is the order the source delivered the reports in; the
    proximity scanner relies on it.
    """

    def __init__(self, hazards: Iterable[HazardReport] = ()) -> None:
        self._hazards: tuple[HazardReport, ...] = tuple(hazards)

    def replace(self, hazards: Iterable[HazardReport]) -> None:
        """Swap in a whole new hazard set."""
        self._hazards = tuple(hazards)
        _LOGGER.debug("Hazard store now holds %s reports", len(self._hazards))

    @property
    def hazards(self) -> tuple[HazardReport, ...]:
        return self._hazards

    def __iter__(self) -> Iterator[HazardReport]:
        return iter(self._hazards)

    def __len__(self) -> int:
        return len(self._hazards)

    def __bool__(self) -> bool:
        return bool(self._hazards)


class FixedHazardSource:
    """Returns the same hazards regardless of position."""

    def __init__(self, hazards: Iterable[HazardReport] = ()) -> None:
        self._hazards = list(hazards)

    async def async_get_hazards(self, position: Coordinate) -> list[HazardReport]:
        return list(self._hazards)


class RandomHazardSource:
    """
    Simulated crowd-sourced reports scattered around the position.

    Each call produces SIMULATED_HAZARD_COUNT hazards with ids hazard-0..n,
    jittered by up to half of SIMULATED_HAZARD_SPREAD degrees on both axes,
    10-59 reports each and a report time within the last hour.
    """

    def __init__(
        self,
        count: int = SIMULATED_HAZARD_COUNT,
        spread: float = SIMULATED_HAZARD_SPREAD,
        rng: random.Random | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._count = count
        self._spread = spread
        self._rng = rng or random.Random()
        self._now = now or (lambda: datetime.now(timezone.utc))

    async def async_get_hazards(self, position: Coordinate) -> list[HazardReport]:
        now = self._now()
        hazards = []
        for i in range(self._count):
            lat = position.latitude + (self._rng.random() - 0.5) * self._spread
            lng = position.longitude + (self._rng.random() - 0.5) * self._spread
            category = HazardCategory.SPEED if self._rng.random() > 0.5 else HazardCategory.CHECKPOINT
            hazards.append(
                HazardReport(
                    id=f"hazard-{i}",
                    coordinate=Coordinate(lat, lng),
                    category=category,
                    report_count=self._rng.randrange(10, 60),
                    reported_at=now - timedelta(seconds=self._rng.random() * SIMULATED_MAX_AGE),
                )
            )
        return hazards
