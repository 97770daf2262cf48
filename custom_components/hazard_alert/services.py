"""
Service handlers for the Hazard Alert integration.

Every service acts on all loaded entries; there is normally only one.
"""
from __future__ import annotations

import logging

import homeassistant.helpers.config_validation as cv
import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall

from .const import DOMAIN

_LOGGER = logging.getLogger(__name__)

SERVICE_DISMISS_ALERT = "dismiss_alert"
SERVICE_SET_DESTINATION = "set_destination"
SERVICE_CLEAR_DESTINATION = "clear_destination"
SERVICE_REFRESH_HAZARDS = "refresh_hazards"
SERVICE_REFRESH_WEATHER = "refresh_weather"

SET_DESTINATION_SCHEMA = vol.Schema(
    {
        vol.Required("latitude"): cv.latitude,
        vol.Required("longitude"): cv.longitude,
        vol.Optional("name", default="Destination"): cv.string,
    }
)
EMPTY_SCHEMA = vol.Schema({})


def _loaded_coordinators(hass: HomeAssistant) -> list:
    coordinators = []
    for entry in hass.config_entries.async_entries(DOMAIN):
        coordinator = getattr(entry, "runtime_data", None)
        if coordinator is not None:
            coordinators.append(coordinator)
    if not coordinators:
        _LOGGER.warning("No loaded Hazard Alert entries to handle the service call")
    return coordinators


async def _async_dismiss_alert(hass: HomeAssistant, call: ServiceCall) -> None:
    for coordinator in _loaded_coordinators(hass):
        await coordinator.async_dismiss_alert()


async def _async_set_destination(hass: HomeAssistant, call: ServiceCall) -> None:
    for coordinator in _loaded_coordinators(hass):
        await coordinator.async_set_destination(
            call.data["latitude"], call.data["longitude"], call.data["name"]
        )


async def _async_clear_destination(hass: HomeAssistant, call: ServiceCall) -> None:
    for coordinator in _loaded_coordinators(hass):
        await coordinator.async_clear_destination()


async def _async_refresh_hazards(hass: HomeAssistant, call: ServiceCall) -> None:
    for coordinator in _loaded_coordinators(hass):
        await coordinator.async_refresh_hazards()


async def _async_refresh_weather(hass: HomeAssistant, call: ServiceCall) -> None:
    for coordinator in _loaded_coordinators(hass):
        await coordinator.async_refresh_weather()


SERVICES = {
    SERVICE_DISMISS_ALERT: (_async_dismiss_alert, EMPTY_SCHEMA),
    SERVICE_SET_DESTINATION: (_async_set_destination, SET_DESTINATION_SCHEMA),
    SERVICE_CLEAR_DESTINATION: (_async_clear_destination, EMPTY_SCHEMA),
    SERVICE_REFRESH_HAZARDS: (_async_refresh_hazards, EMPTY_SCHEMA),
    SERVICE_REFRESH_WEATHER: (_async_refresh_weather, EMPTY_SCHEMA),
}


def async_register_services(hass: HomeAssistant) -> None:
    """Register every hazard_alert.* service once."""
    for name, (handler, schema) in SERVICES.items():
        if hass.services.has_service(DOMAIN, name):
            continue

        async def _handle(call: ServiceCall, handler=handler) -> None:
            await handler(hass, call)

        hass.services.async_register(DOMAIN, name, _handle, schema=schema)
