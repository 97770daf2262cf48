"""
ProximityScanner and TrackingGate.

The scanner evaluates one tick: it measures every hazard, records new
signatures in the dedup ledger and returns them as triggers in iteration
order. Scheduling lives in the engine.

No HA imports.
"""
from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable

from .alert_lifecycle import DedupLedger
from .geo import distance_km
from .models import Coordinate, HazardReport, ScanConfig, alert_signature

_LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ProximityTrigger:
    """A qualifying hazard whose signature had not been seen before."""

    hazard: HazardReport
    distance_km: float
    signature: str


class ProximityScanner:
    """Compares a position against every hazard once per tick."""

    def __init__(self, config: ScanConfig, ledger: DedupLedger) -> None:
        self._config = config
        self._ledger = ledger

    def qualifies(self, distance: float) -> bool:
        """Close enough to matter, far enough not to be already passed."""
        return self._config.inner_bound_km < distance <= self._config.outer_bound_km

    def evaluate(self, position: Coordinate, hazards: Iterable[HazardReport]) -> list[ProximityTrigger]:
        """
        Return the new triggers for this tick, in hazard order.

        Every returned signature is already in the ledger when this returns,
        so the same (hazard, 0.1 km bucket) pair never comes back.
        """
        triggers = []
        for hazard in hazards:
            distance = distance_km(position, hazard.coordinate)
            if not self.qualifies(distance):
                continue
            signature = alert_signature(hazard.id, distance)
            if signature in self._ledger:
                continue
            self._ledger.add(signature)
            triggers.append(ProximityTrigger(hazard, distance, signature))

        if triggers:
            _LOGGER.debug("Tick produced %s new triggers: %s", len(triggers), [t.signature for t in triggers])
        return triggers


@dataclasses.dataclass
class TrackingGate:
    """User toggles plus the data preconditions for scanning."""

    tracking_enabled: bool = True
    alerts_enabled: bool = True

    def is_open(self, position: Coordinate | None, hazards: Iterable[HazardReport] | None) -> bool:
        return (
            self.tracking_enabled
            and self.alerts_enabled
            and position is not None
            and bool(hazards)
        )
