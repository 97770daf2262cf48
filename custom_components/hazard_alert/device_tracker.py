"""
Platform for the Hazard Alert live position.
Mirrors the position the proximity engine is scanning from, which is the
source entity's position or the fallback coordinate when it was unavailable.
"""
from __future__ import annotations

import logging

from homeassistant import config_entries
from homeassistant.components.device_tracker import SourceType
from homeassistant.components.device_tracker.config_entry import TrackerEntity
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import HazardAlertCoordinator

_LOGGER = logging.getLogger(__name__)


class HazardAlertPositionTracker(CoordinatorEntity[HazardAlertCoordinator], TrackerEntity):
    """Representation of the live position used for proximity scans."""

    def __init__(self, coordinator: HazardAlertCoordinator) -> None:
        super().__init__(coordinator)
        guid = coordinator.entry_data.get("guid", "default")
        self._attr_unique_id = f"hazard_alert_{guid}_position"
        self._attr_name = f"{coordinator.get_device_info()['name']} Location"
        self._attr_icon = "mdi:map-marker"

    @property
    def device_info(self):
        return self.coordinator.get_device_info()

    @property
    def latitude(self) -> float | None:
        position = self.coordinator.data.position
        return position.latitude if position is not None else None

    @property
    def longitude(self) -> float | None:
        position = self.coordinator.data.position
        return position.longitude if position is not None else None

    @property
    def source_type(self) -> SourceType:
        return SourceType.GPS


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: config_entries.ConfigEntry,
    async_add_entities,
):
    """Add the position tracker for passed config_entry in HA."""
    coordinator: HazardAlertCoordinator = config_entry.runtime_data
    async_add_entities([HazardAlertPositionTracker(coordinator)])
