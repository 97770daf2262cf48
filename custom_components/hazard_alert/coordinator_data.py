"""
CoordinatorData — immutable snapshot of the alerting state shared with entities.

This is a pure data module with no HA or network dependencies.
"""
from __future__ import annotations

import dataclasses

from .models import Coordinate, Destination, HazardReport, ProximityAlert, WeatherSnapshot


@dataclasses.dataclass(frozen=True)
class CoordinatorData:
    """
    Typed, copy-on-write snapshot of the engine and collaborator state.

    Always replace via dataclasses.replace() — never mutate in place.
    """

    # Live position (None until the first position read)
    position: Coordinate | None = None

    # Current hazard set, in source order
    hazards: tuple[HazardReport, ...] = ()

    # hazard id → distance from the live position in km
    hazard_distances: dict[str, float] = dataclasses.field(default_factory=dict)

    # The single displayed alert
    active_alert: ProximityAlert | None = None

    # Route state
    destination: Destination | None = None
    bearing: float = 0.0
    route_distance_km: float | None = None
    route_estimate_km: float | None = None

    # User toggles and scan state
    tracking_enabled: bool = True
    alerts_enabled: bool = True
    scanning: bool = False
    seen_signatures: int = 0

    # Latest weather snapshot (None until the first fetch completes)
    weather: WeatherSnapshot | None = None

    @property
    def nearest_hazard(self) -> tuple[HazardReport, float] | None:
        if not self.hazard_distances:
            return None
        by_id = {hazard.id: hazard for hazard in self.hazards}
        hazard_id = min(self.hazard_distances, key=self.hazard_distances.get)
        if hazard_id not in by_id:
            return None
        return by_id[hazard_id], self.hazard_distances[hazard_id]
