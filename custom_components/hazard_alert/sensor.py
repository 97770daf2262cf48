"""
Platform for Hazard Alert sensors.
This module sets up the alert distance, nearest hazard, hazard count, compass
bearing, route distance and weather sensors, all read from the
HazardAlertCoordinator snapshot.
"""
from __future__ import annotations

import logging
from typing import Any

from homeassistant import config_entries
from homeassistant.components.sensor import SensorDeviceClass, SensorEntity, SensorStateClass
from homeassistant.const import DEGREE, UnitOfLength, UnitOfTemperature
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import CONF_FETCH_WEATHER, OUTER_BOUND_KM
from .coordinator import HazardAlertCoordinator

_LOGGER = logging.getLogger(__name__)

COMPASS_POINTS = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]


def compass_point(bearing: float) -> str:
    """Eight-wind compass label for a bearing in degrees."""
    return COMPASS_POINTS[int((bearing + 22.5) / 45) % 8]


class HazardAlertSensor(CoordinatorEntity[HazardAlertCoordinator], SensorEntity):
    """Base class wiring unique id, name and device info."""

    _key: str = ""
    _label: str = ""

    def __init__(self, coordinator: HazardAlertCoordinator) -> None:
        super().__init__(coordinator)
        guid = coordinator.entry_data.get("guid", "default")
        self._attr_unique_id = f"hazard_alert_{guid}_{self._key}"
        self._attr_name = f"{coordinator.get_device_info()['name']} {self._label}"

    @property
    def device_info(self):
        return self.coordinator.get_device_info()


class AlertDistanceSensor(HazardAlertSensor):
    """Distance to the hazard of the active alert, None when nothing is shown."""

    _key = "alert_distance"
    _label = "Alert Distance"
    _attr_icon = "mdi:map-marker-distance"
    _attr_device_class = SensorDeviceClass.DISTANCE
    _attr_native_unit_of_measurement = UnitOfLength.KILOMETERS
    _attr_suggested_display_precision = 1

    @property
    def native_value(self) -> float | None:
        alert = self.coordinator.data.active_alert
        if alert is None:
            return None
        return round(alert.distance_km, 1)


class NearestHazardSensor(HazardAlertSensor):
    """Distance to the closest hazard, with every hazard listed as attributes."""

    _key = "nearest_hazard"
    _label = "Nearest Hazard"
    _attr_icon = "mdi:alert-octagon"
    _attr_device_class = SensorDeviceClass.DISTANCE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfLength.KILOMETERS
    _attr_suggested_display_precision = 2

    @property
    def native_value(self) -> float | None:
        nearest = self.coordinator.data.nearest_hazard
        if nearest is None:
            return None
        return round(nearest[1], 2)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        data = self.coordinator.data
        hazards = []
        for hazard in data.hazards:
            distance = data.hazard_distances.get(hazard.id)
            hazards.append(
                {
                    "id": hazard.id,
                    "category": hazard.category.display_name,
                    "latitude": hazard.coordinate.latitude,
                    "longitude": hazard.coordinate.longitude,
                    "report_count": hazard.report_count,
                    "reported_at": hazard.reported_at.isoformat(),
                    "distance_km": round(distance, 2) if distance is not None else None,
                    "nearby": distance is not None and distance <= OUTER_BOUND_KM,
                }
            )
        return {"hazards": hazards}


class HazardCountSensor(HazardAlertSensor):
    """Number of hazards currently known around the position."""

    _key = "hazard_count"
    _label = "Hazard Count"
    _attr_icon = "mdi:counter"
    _attr_state_class = SensorStateClass.MEASUREMENT

    @property
    def native_value(self) -> int:
        return len(self.coordinator.data.hazards)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        data = self.coordinator.data
        return {"scanning": data.scanning, "seen_signatures": data.seen_signatures}


class BearingSensor(HazardAlertSensor):
    """Compass bearing to the destination; keeps its last value when the route ends."""

    _key = "bearing"
    _label = "Bearing"
    _attr_icon = "mdi:compass"
    _attr_native_unit_of_measurement = DEGREE
    _attr_suggested_display_precision = 0

    @property
    def native_value(self) -> float:
        return round(self.coordinator.data.bearing, 1)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        data = self.coordinator.data
        attrs: dict[str, Any] = {"compass_point": compass_point(data.bearing)}
        if data.destination is not None:
            attrs["destination"] = data.destination.name
        return attrs


class RouteDistanceSensor(HazardAlertSensor):
    """Great-circle distance to the destination."""

    _key = "route_distance"
    _label = "Route Distance"
    _attr_icon = "mdi:map-marker-path"
    _attr_device_class = SensorDeviceClass.DISTANCE
    _attr_native_unit_of_measurement = UnitOfLength.KILOMETERS
    _attr_suggested_display_precision = 2

    @property
    def native_value(self) -> float | None:
        distance = self.coordinator.data.route_distance_km
        return round(distance, 2) if distance is not None else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        data = self.coordinator.data
        if data.destination is None:
            return {}
        estimate = data.route_estimate_km
        return {
            "destination": data.destination.name,
            "destination_latitude": data.destination.coordinate.latitude,
            "destination_longitude": data.destination.coordinate.longitude,
            # Flat degree approximation, shown for comparison only
            "approximate_distance_km": round(estimate, 2) if estimate is not None else None,
        }


class WeatherTemperatureSensor(HazardAlertSensor):
    """Temperature at the live position, with the rest of the snapshot as attributes."""

    _key = "weather"
    _label = "Temperature"
    _attr_device_class = SensorDeviceClass.TEMPERATURE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfTemperature.FAHRENHEIT

    @property
    def native_value(self) -> float | None:
        weather = self.coordinator.data.weather
        return weather.temperature if weather is not None else None

    @property
    def icon(self) -> str:
        weather = self.coordinator.data.weather
        return weather.icon if weather is not None else "mdi:thermometer"

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        weather = self.coordinator.data.weather
        if weather is None:
            return {}
        return {
            "description": weather.description,
            "feels_like": weather.feels_like,
            "humidity": weather.humidity,
            "precipitation_mm": weather.precipitation,
            "wind_speed_mph": weather.wind_speed,
            "wind_direction": weather.wind_direction,
            "weather_code": weather.code,
            "fallback": weather.is_fallback,
        }


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: config_entries.ConfigEntry,
    async_add_entities,
):
    """Add sensors for passed config_entry in HA."""
    coordinator: HazardAlertCoordinator = config_entry.runtime_data
    entities: list[SensorEntity] = [
        AlertDistanceSensor(coordinator),
        NearestHazardSensor(coordinator),
        HazardCountSensor(coordinator),
        BearingSensor(coordinator),
        RouteDistanceSensor(coordinator),
    ]
    if coordinator.entry_data.get(CONF_FETCH_WEATHER, True):
        entities.append(WeatherTemperatureSensor(coordinator))
    else:
        _LOGGER.debug("Weather disabled, skipping temperature sensor")
    async_add_entities(entities)
