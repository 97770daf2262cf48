"""
Platform for Hazard Alert switches.
This module sets up the "Tracking" and "Alerts" toggles. Both feed the
tracking gate of the proximity engine: turning either one off stops the scan
and clears the displayed alert.
"""
from __future__ import annotations

import logging

from homeassistant import config_entries
from homeassistant.components.switch import SwitchDeviceClass, SwitchEntity
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import HazardAlertCoordinator

_LOGGER = logging.getLogger(__name__)


class HazardAlertSwitch(CoordinatorEntity[HazardAlertCoordinator], SwitchEntity):
    """Base class for the two gate toggles."""

    _key: str = ""
    _label: str = ""

    def __init__(self, coordinator: HazardAlertCoordinator) -> None:
        super().__init__(coordinator)
        guid = coordinator.entry_data.get("guid", "default")
        self._attr_unique_id = f"hazard_alert_{guid}_switch_{self._key}"
        self._attr_name = f"{coordinator.get_device_info()['name']} {self._label}"
        self._attr_device_class = SwitchDeviceClass.SWITCH

    @property
    def device_info(self):
        return self.coordinator.get_device_info()


class TrackingSwitch(HazardAlertSwitch):
    """Follows the source entity while on; freezes the live position while off."""

    _key = "tracking"
    _label = "Tracking"

    @property
    def is_on(self) -> bool:
        return self.coordinator.data.tracking_enabled

    @property
    def icon(self) -> str:
        return "mdi:crosshairs-gps" if self.is_on else "mdi:crosshairs-off"

    async def async_turn_on(self, **kwargs) -> None:
        await self.coordinator.async_set_tracking(True)

    async def async_turn_off(self, **kwargs) -> None:
        await self.coordinator.async_set_tracking(False)


class AlertsSwitch(HazardAlertSwitch):
    """Enables proximity alerts."""

    _key = "alerts"
    _label = "Alerts"

    @property
    def is_on(self) -> bool:
        return self.coordinator.data.alerts_enabled

    @property
    def icon(self) -> str:
        return "mdi:bell" if self.is_on else "mdi:bell-off"

    async def async_turn_on(self, **kwargs) -> None:
        await self.coordinator.async_set_alerts(True)

    async def async_turn_off(self, **kwargs) -> None:
        await self.coordinator.async_set_alerts(False)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: config_entries.ConfigEntry,
    async_add_entities,
):
    """Add switches for passed config_entry in HA."""
    coordinator: HazardAlertCoordinator = config_entry.runtime_data
    _LOGGER.debug("Adding Hazard Alert switches")
    async_add_entities([TrackingSwitch(coordinator), AlertsSwitch(coordinator)])
