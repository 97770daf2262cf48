"""
AlertEngine, the proximity alerting core.

Responsibilities:
- Own the HazardStore, DedupLedger, AlertLifecycle and ProximityScanner.
- Re-evaluate the TrackingGate on every input change and start/stop the scan
  task idempotently.
- Keep the compass bearing and route distance to the destination current.

Everything here runs on a single asyncio loop; no locking. No HA imports.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

from .alert_lifecycle import AlertLifecycle, DedupLedger
from .geo import bearing_degrees, distance_km, flat_distance_km
from .hazards import HazardStore
from .models import Coordinate, Destination, HazardReport, ProximityAlert, ScanConfig
from .scanner import ProximityScanner, TrackingGate

_LOGGER = logging.getLogger(__name__)


class AlertEngine:
    """
    Proximity alerting for one live position.

    Mutators: on_position_update, on_hazards_changed, tick, dismiss and the
    toggle/destination setters. on_change is called after each of them once
    the state has settled.
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        cue: Callable[[ProximityAlert], None] | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.config = config or ScanConfig()
        self._on_change = on_change

        self.store = HazardStore()
        self.ledger = DedupLedger(max_age=self.config.ledger_max_age)
        self.lifecycle = AlertLifecycle(
            self.config.alert_duration,
            cue=cue,
            on_change=lambda _alert: self._notify(),
        )
        self.scanner = ProximityScanner(self.config, self.ledger)
        self.gate = TrackingGate()

        self._position: Coordinate | None = None
        self._destination: Destination | None = None
        self._bearing: float = 0.0
        self._scan_task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------

    @property
    def position(self) -> Coordinate | None:
        return self._position

    @property
    def hazards(self) -> tuple[HazardReport, ...]:
        return self.store.hazards

    @property
    def active_alert(self) -> ProximityAlert | None:
        return self.lifecycle.active

    @property
    def destination(self) -> Destination | None:
        return self._destination

    @property
    def bearing(self) -> float:
        """Last computed bearing to the destination; 0 until a route exists."""
        return self._bearing

    @property
    def route_distance_km(self) -> float | None:
        if self._position is None or self._destination is None:
            return None
        return distance_km(self._position, self._destination.coordinate)

    @property
    def route_estimate_km(self) -> float | None:
        """Flat degree-based estimate, for display next to route_distance_km."""
        if self._position is None or self._destination is None:
            return None
        return flat_distance_km(self._position, self._destination.coordinate)

    @property
    def is_scanning(self) -> bool:
        return self._scan_task is not None and not self._scan_task.done()

    def hazard_distances(self) -> list[tuple[HazardReport, float]]:
        """Every hazard paired with its distance from the live position, nearest first."""
        if self._position is None:
            return []
        pairs = [(hazard, distance_km(self._position, hazard.coordinate)) for hazard in self.store]
        return sorted(pairs, key=lambda pair: pair[1])

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def on_position_update(self, position: Coordinate) -> None:
        """Replace the live position."""
        self._position = position
        self._update_bearing()
        self._evaluate_gate()
        self._notify()

    def on_hazards_changed(self, hazards: Iterable[HazardReport]) -> None:
        """Replace the hazard set wholesale."""
        self.store.replace(hazards)
        self._evaluate_gate()
        self._notify()

    def set_tracking_enabled(self, enabled: bool) -> None:
        self.gate.tracking_enabled = enabled
        self._evaluate_gate()
        self._notify()

    def set_alerts_enabled(self, enabled: bool) -> None:
        self.gate.alerts_enabled = enabled
        self._evaluate_gate()
        self._notify()

    def set_destination(self, destination: Destination) -> None:
        self._destination = destination
        self._update_bearing()
        self._notify()

    def clear_destination(self) -> None:
        """End the route; the bearing keeps its last value."""
        self._destination = None
        self._notify()

    def tick(self) -> ProximityAlert | None:
        """
        Run one proximity evaluation.

        Every new trigger goes through the lifecycle in hazard order, so the
        last one evaluated is the alert left active. Returns that alert, or
        None when the tick produced nothing new or the gate is closed.
        """
        if not self.gate.is_open(self._position, self.store):
            return None
        alert = None
        for trigger in self.scanner.evaluate(self._position, self.store):
            alert = self.lifecycle.trigger(trigger.hazard, trigger.distance_km)
        return alert

    def dismiss(self) -> bool:
        """Clear the active alert; its signature stays in the ledger."""
        return self.lifecycle.dismiss()

    def shutdown(self) -> None:
        """Cancel the scan task and any pending alert expiry."""
        self._stop_scanning()
        self.lifecycle.cancel()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _evaluate_gate(self) -> None:
        if self.gate.is_open(self._position, self.store):
            self._start_scanning()
        else:
            self._stop_scanning()
            self.lifecycle.cancel()

    def _start_scanning(self) -> None:
        if self.is_scanning:
            return
        _LOGGER.debug("Starting proximity scan every %.1fs", self.config.tick_interval)
        self.tick()
        self._scan_task = asyncio.get_running_loop().create_task(self._scan_loop())

    def _stop_scanning(self) -> None:
        if self._scan_task is None:
            return
        _LOGGER.debug("Stopping proximity scan")
        self._scan_task.cancel()
        self._scan_task = None

    async def _scan_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.tick_interval)
            try:
                self.tick()
            except Exception as exc:  # noqa: BLE001
                _LOGGER.error("Proximity tick failed: %s", exc)

    def _update_bearing(self) -> None:
        if self._position is not None and self._destination is not None:
            self._bearing = bearing_degrees(self._position, self._destination.coordinate)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()
