"""
Platform for the Hazard Alert proximity binary sensor.
The sensor is on while the engine has an active alert and carries the alert
details as attributes.
"""
from __future__ import annotations

import logging
from typing import Any

from homeassistant import config_entries
from homeassistant.components.binary_sensor import BinarySensorDeviceClass, BinarySensorEntity
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import HAZARD_ICONS
from .coordinator import HazardAlertCoordinator

_LOGGER = logging.getLogger(__name__)


class ProximityAlertSensor(CoordinatorEntity[HazardAlertCoordinator], BinarySensorEntity):
    """
    Representation of the single displayed proximity alert.
    Takes the data from the HazardAlertCoordinator snapshot.
    """

    def __init__(self, coordinator: HazardAlertCoordinator) -> None:
        super().__init__(coordinator)
        guid = coordinator.entry_data.get("guid", "default")
        self._attr_unique_id = f"hazard_alert_{guid}_proximity_alert"
        self._attr_name = f"{coordinator.get_device_info()['name']} Proximity Alert"
        self._attr_device_class = BinarySensorDeviceClass.PROBLEM

    @property
    def device_info(self):
        return self.coordinator.get_device_info()

    @property
    def is_on(self) -> bool:
        return self.coordinator.data.active_alert is not None

    @property
    def icon(self) -> str:
        alert = self.coordinator.data.active_alert
        if alert is None:
            return "mdi:shield-check"
        return HAZARD_ICONS.get(alert.hazard.category.value, "mdi:alert")

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        alert = self.coordinator.data.active_alert
        if alert is None:
            return {}
        hazard = alert.hazard
        return {
            "hazard_id": hazard.id,
            "category": hazard.category.display_name,
            "distance_km": round(alert.distance_km, 1),
            "distance": alert.distance_label,
            "report_count": hazard.report_count,
            "reported_at": hazard.reported_at.isoformat(),
            "signature": alert.signature,
            "triggered_at": alert.triggered_at.isoformat(),
            "latitude": hazard.coordinate.latitude,
            "longitude": hazard.coordinate.longitude,
        }


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: config_entries.ConfigEntry,
    async_add_entities,
):
    """Add the proximity alert sensor for passed config_entry in HA."""
    coordinator: HazardAlertCoordinator = config_entry.runtime_data
    async_add_entities([ProximityAlertSensor(coordinator)])
