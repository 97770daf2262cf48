"""
DataUpdateCoordinator for the Hazard Alert integration.

Responsibilities:
- Own the AlertEngine for the lifetime of a config entry.
- Feed it positions from the source entity: on every poll, and on every
  state-change event of that entity. A failed read falls back to the
  configured fallback coordinate.
- Ask the hazard source for a new hazard set once the position has moved
  HAZARD_REFRESH_DISTANCE_KM from the previous request.
- Refresh the weather snapshot every WEATHER_INTERVAL seconds.
- Push CoordinatorData snapshots to entities whenever the engine changes.
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from datetime import timedelta

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import Event, HomeAssistant, callback
from homeassistant.helpers.event import async_track_state_change_event
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .const import (
    CONF_CUE_MEDIA_PLAYER,
    CONF_CUE_MEDIA_URL,
    CONF_ENTRY_NAME,
    CONF_FALLBACK_LATITUDE,
    CONF_FALLBACK_LONGITUDE,
    CONF_FETCH_WEATHER,
    CONF_SOURCE_ENTITY,
    DOMAIN,
    EVENT_PROXIMITY_ALERT,
    HAZARD_REFRESH_DISTANCE_KM,
    POSITION_INTERVAL,
    VERSION,
    WEATHER_INTERVAL,
)
from .coordinator_data import CoordinatorData
from .engine import AlertEngine
from .geo import distance_km
from .hazards import HazardSource, RandomHazardSource
from .models import Coordinate, Destination, ProximityAlert, WeatherSnapshot
from .position import PositionUnavailable, coordinate_from_state, resolve_position
from .weather import fetch_weather

__all__ = ["CoordinatorData", "HazardAlertCoordinator"]

_LOGGER = logging.getLogger(__name__)


class HazardAlertCoordinator(DataUpdateCoordinator[CoordinatorData]):
    """
    Coordinator for the Hazard Alert integration.

    Polling only covers the position and weather; the proximity scan runs on
    the engine's own task and pushes snapshots as alerts come and go.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry | None,
        hazard_source: HazardSource | None = None,
    ) -> None:
        """Initialize the coordinator from a config entry."""
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=DOMAIN,
            update_interval=timedelta(seconds=POSITION_INTERVAL),
        )
        self._entry_data = dict(config_entry.data) if config_entry is not None else {}
        self.hazard_source: HazardSource = hazard_source or RandomHazardSource()
        self.engine = AlertEngine(cue=self._play_alert_cue, on_change=self._publish)

        # Position the current hazard set was requested for
        self._hazard_anchor: Coordinate | None = None

        self._last_weather_fetch: float | None = None
        self._background_tasks: set[asyncio.Task] = set()
        self._unsub_source = None

        self.data = CoordinatorData()

    # ------------------------------------------------------------------
    # HA entry point
    # ------------------------------------------------------------------

    async def _async_update_data(self) -> CoordinatorData:
        """
        Called by HA on every update_interval tick.

        Reads the source entity (unless tracking is off), lets the engine
        re-evaluate, and fires a weather refresh in the background when due.
        """
        if self.engine.gate.tracking_enabled:
            await self._refresh_position()
        self._maybe_schedule_weather()
        return self._snapshot()

    @callback
    def async_start_listeners(self) -> None:
        """Subscribe to state changes of the source entity."""
        entity_id = self._entry_data.get(CONF_SOURCE_ENTITY)
        if not entity_id or self._unsub_source is not None:
            return
        self._unsub_source = async_track_state_change_event(
            self.hass, [entity_id], self._handle_source_event
        )

    @callback
    def _handle_source_event(self, event: Event) -> None:
        """Apply a pushed position from the source entity."""
        if not self.engine.gate.tracking_enabled:
            return
        entity_id = event.data.get("entity_id", self._entry_data.get(CONF_SOURCE_ENTITY))
        try:
            position = coordinate_from_state(entity_id, event.data.get("new_state"))
        except PositionUnavailable as exc:
            _LOGGER.debug("Ignoring state change without a position: %s", exc)
            return
        self._track_task(self.hass.async_create_task(self._apply_position(position)))

    # ------------------------------------------------------------------
    # Position and hazards
    # ------------------------------------------------------------------

    @property
    def fallback_position(self) -> Coordinate:
        return Coordinate(
            float(self._entry_data.get(CONF_FALLBACK_LATITUDE, self.hass.config.latitude)),
            float(self._entry_data.get(CONF_FALLBACK_LONGITUDE, self.hass.config.longitude)),
        )

    async def _read_source_position(self) -> Coordinate:
        entity_id = self._entry_data.get(CONF_SOURCE_ENTITY)
        if not entity_id:
            raise PositionUnavailable("no source entity configured")
        return coordinate_from_state(entity_id, self.hass.states.get(entity_id))

    async def _refresh_position(self) -> None:
        position = await resolve_position(self._read_source_position, self.fallback_position)
        await self._apply_position(position)

    async def _apply_position(self, position: Coordinate) -> None:
        """Hand the engine a new position, then refresh hazards if it moved far enough."""
        self.engine.on_position_update(position)
        if self._hazards_due(position):
            await self._refresh_hazards(position)
        # Every push reschedules the poll, so frequent source events would
        # otherwise starve the weather refresh
        self._maybe_schedule_weather()

    def _hazards_due(self, position: Coordinate) -> bool:
        if not self.engine.hazards or self._hazard_anchor is None:
            return True
        return distance_km(self._hazard_anchor, position) >= HAZARD_REFRESH_DISTANCE_KM

    async def _refresh_hazards(self, position: Coordinate) -> None:
        try:
            hazards = await self.hazard_source.async_get_hazards(position)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning("Failed to fetch hazards near %s: %s", position, exc)
            return
        self._hazard_anchor = position
        self.engine.on_hazards_changed(hazards)

    # ------------------------------------------------------------------
    # Weather
    # ------------------------------------------------------------------

    def _maybe_schedule_weather(self) -> None:
        if not self._entry_data.get(CONF_FETCH_WEATHER, True):
            return
        position = self.engine.position
        if position is None:
            return
        if (
            self._last_weather_fetch is not None
            and time.monotonic() - self._last_weather_fetch < WEATHER_INTERVAL
        ):
            return
        self._last_weather_fetch = time.monotonic()
        self._track_task(self.hass.async_create_task(self._run_weather(position)))

    async def _run_weather(self, position: Coordinate) -> None:
        """Fetch weather for position and push it; the latest response wins."""
        snapshot = await self._fetch_weather(position)
        self.async_set_updated_data(dataclasses.replace(self._snapshot(), weather=snapshot))

    async def _fetch_weather(self, position: Coordinate) -> WeatherSnapshot:
        """Delegate to weather.fetch_weather (keeps HTTP details out of the coordinator)."""
        return await fetch_weather(position)

    # ------------------------------------------------------------------
    # Alert cue
    # ------------------------------------------------------------------

    def _play_alert_cue(self, alert: ProximityAlert) -> None:
        """Fire the proximity event and optionally play a sound on a media player."""
        hazard = alert.hazard
        self.hass.bus.async_fire(
            EVENT_PROXIMITY_ALERT,
            {
                "signature": alert.signature,
                "hazard_id": hazard.id,
                "category": hazard.category.value,
                "distance_km": round(alert.distance_km, 1),
                "report_count": hazard.report_count,
            },
        )
        player = self._entry_data.get(CONF_CUE_MEDIA_PLAYER)
        url = self._entry_data.get(CONF_CUE_MEDIA_URL)
        if player and url:
            self._track_task(self.hass.async_create_task(self._async_play_cue_media(player, url)))

    async def _async_play_cue_media(self, player: str, url: str) -> None:
        try:
            await self.hass.services.async_call(
                "media_player",
                "play_media",
                {
                    "entity_id": player,
                    "media_content_id": url,
                    "media_content_type": "music",
                },
                blocking=True,
            )
        except Exception as exc:  # noqa: BLE001
            _LOGGER.debug("Alert cue playback on %s failed: %s", player, exc)

    # ------------------------------------------------------------------
    # Write path — called from switch.py and services.py
    # ------------------------------------------------------------------

    async def async_set_tracking(self, enabled: bool) -> None:
        """
        Toggle tracking. Turning it back on reads a fresh position first so
        the immediate evaluation uses where the user is now.
        """
        if enabled and not self.engine.gate.tracking_enabled:
            await self._refresh_position()
        self.engine.set_tracking_enabled(enabled)

    async def async_set_alerts(self, enabled: bool) -> None:
        self.engine.set_alerts_enabled(enabled)

    async def async_dismiss_alert(self) -> bool:
        return self.engine.dismiss()

    async def async_set_destination(self, latitude: float, longitude: float, name: str) -> None:
        self.engine.set_destination(Destination(name, Coordinate(latitude, longitude)))

    async def async_clear_destination(self) -> None:
        self.engine.clear_destination()

    async def async_refresh_hazards(self) -> None:
        position = self.engine.position
        if position is None:
            _LOGGER.warning("Cannot refresh hazards before the first position is known")
            return
        await self._refresh_hazards(position)

    async def async_refresh_weather(self) -> None:
        position = self.engine.position
        if position is None:
            _LOGGER.warning("Cannot refresh weather before the first position is known")
            return
        self._last_weather_fetch = time.monotonic()
        await self._run_weather(position)

    # ------------------------------------------------------------------
    # Snapshot publication
    # ------------------------------------------------------------------

    def _snapshot(self) -> CoordinatorData:
        engine = self.engine
        return dataclasses.replace(
            self.data,
            position=engine.position,
            hazards=engine.hazards,
            hazard_distances={hazard.id: dist for hazard, dist in engine.hazard_distances()},
            active_alert=engine.active_alert,
            destination=engine.destination,
            bearing=engine.bearing,
            route_distance_km=engine.route_distance_km,
            route_estimate_km=engine.route_estimate_km,
            tracking_enabled=engine.gate.tracking_enabled,
            alerts_enabled=engine.gate.alerts_enabled,
            scanning=engine.is_scanning,
            seen_signatures=len(engine.ledger),
        )

    @callback
    def _publish(self) -> None:
        self.async_set_updated_data(self._snapshot())

    def _track_task(self, task: asyncio.Task) -> None:
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    # ------------------------------------------------------------------
    # Entity helper — device info dict
    # ------------------------------------------------------------------

    def get_device_info(self) -> dict:
        """Return the HA DeviceInfo dict for this entry."""
        return {
            "identifiers": {(DOMAIN, self._entry_data.get("guid", "default"))},
            "name": self._entry_data.get(CONF_ENTRY_NAME) or "Hazard Alert",
            "manufacturer": "Hazard Alert",
            "model": "Proximity engine",
            "sw_version": VERSION,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def async_shutdown(self) -> None:
        """Clean up all resources owned by this coordinator."""
        await super().async_shutdown()
        if self._unsub_source is not None:
            self._unsub_source()
            self._unsub_source = None
        self.engine.shutdown()
        for task in list(self._background_tasks):
            task.cancel()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()

    @property
    def entry_data(self):
        return self._entry_data
