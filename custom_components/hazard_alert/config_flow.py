"""Config flow for Hazard Alert integration."""
from __future__ import annotations
import logging
import uuid
from typing import Any, Dict, Optional
import homeassistant.helpers.config_validation as cv
import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback

from .const import (
    CONF_CUE_MEDIA_PLAYER,
    CONF_CUE_MEDIA_URL,
    CONF_ENTRY_NAME,
    CONF_FALLBACK_LATITUDE,
    CONF_FALLBACK_LONGITUDE,
    CONF_FETCH_WEATHER,
    CONF_SOURCE_ENTITY,
    DOMAIN,
)

_LOGGER = logging.getLogger(__name__)

ENTRY_KEYS = (
    CONF_ENTRY_NAME,
    CONF_SOURCE_ENTITY,
    CONF_FALLBACK_LATITUDE,
    CONF_FALLBACK_LONGITUDE,
    CONF_FETCH_WEATHER,
    CONF_CUE_MEDIA_PLAYER,
    CONF_CUE_MEDIA_URL,
)


def build_schema(defaults: Dict[str, Any]) -> vol.Schema:
    """Schema shared by the user step and the options step."""
    return vol.Schema(
        {
            vol.Required(CONF_ENTRY_NAME, default=defaults.get(CONF_ENTRY_NAME, 'Hazard Alert')): cv.string,
            vol.Required(CONF_SOURCE_ENTITY, default=defaults.get(CONF_SOURCE_ENTITY, '')): cv.string,
            vol.Required(CONF_FALLBACK_LATITUDE, default=defaults.get(CONF_FALLBACK_LATITUDE, 0.0)): vol.Coerce(float),
            vol.Required(CONF_FALLBACK_LONGITUDE, default=defaults.get(CONF_FALLBACK_LONGITUDE, 0.0)): vol.Coerce(float),
            vol.Required(CONF_FETCH_WEATHER, default=defaults.get(CONF_FETCH_WEATHER, True)): cv.boolean,
            vol.Optional(CONF_CUE_MEDIA_PLAYER, default=defaults.get(CONF_CUE_MEDIA_PLAYER, '')): cv.string,
            vol.Optional(CONF_CUE_MEDIA_URL, default=defaults.get(CONF_CUE_MEDIA_URL, '')): cv.string,
        }
    )


def validate_input(user_input: Dict[str, Any]) -> Dict[str, str]:
    """Return a form errors dict; empty when the input is usable."""
    errors: Dict[str, str] = {}
    if not user_input.get(CONF_ENTRY_NAME):
        errors['base'] = 'entry_name_required'
    source = user_input.get(CONF_SOURCE_ENTITY)
    if source and '.' not in source:
        errors['base'] = 'invalid_source_entity'
    if not -90 <= user_input.get(CONF_FALLBACK_LATITUDE, 0.0) <= 90:
        errors['base'] = 'invalid_latitude'
    if not -180 <= user_input.get(CONF_FALLBACK_LONGITUDE, 0.0) <= 180:
        errors['base'] = 'invalid_longitude'
    if user_input.get(CONF_CUE_MEDIA_PLAYER) and not user_input.get(CONF_CUE_MEDIA_URL):
        errors['base'] = 'cue_media_url_required'
    return errors


class CustomFlow(config_entries.ConfigFlow, domain=DOMAIN):
    data: Optional[Dict[str, Any]]

    async def async_step_user(self, user_input: Optional[Dict[str, Any]] = None):
        errors: Dict[str, str] = {}
        if user_input is not None:
            errors = validate_input(user_input)
            if not errors:
                self.data = dict(user_input)
                # Create new guid for the entry
                self.data['guid'] = str(uuid.uuid4())
                return self.async_create_entry(title=f"{self.data[CONF_ENTRY_NAME]}", data=self.data)

        defaults = {
            CONF_FALLBACK_LATITUDE: self.hass.config.latitude,
            CONF_FALLBACK_LONGITUDE: self.hass.config.longitude,
        }
        return self.async_show_form(step_id="user", data_schema=build_schema(defaults), errors=errors)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Get the options flow for this handler."""
        return OptionsFlowHandler()


class OptionsFlowHandler(config_entries.OptionsFlow):
    """Handles options flow for the component."""

    async def async_step_init(
        self, user_input: Dict[str, Any] = None
    ) -> Dict[str, Any]:
        errors: Dict[str, str] = {}

        # Options win over the original entry data
        defaults = {
            key: self.config_entry.options.get(key, self.config_entry.data.get(key))
            for key in ENTRY_KEYS
            if key in self.config_entry.options or key in self.config_entry.data
        }

        if user_input is not None:
            errors = validate_input(user_input)
            if not errors:
                new_data = {'guid': self.config_entry.data['guid']}
                new_data.update({key: user_input.get(key) for key in ENTRY_KEYS})

                # Rename the entry in the UI
                self.hass.config_entries.async_update_entry(
                    self.config_entry,
                    data=new_data,
                    title=new_data[CONF_ENTRY_NAME],
                )
                return self.async_create_entry(title=f"{new_data[CONF_ENTRY_NAME]}", data=new_data)

        return self.async_show_form(step_id="init", data_schema=build_schema(defaults), errors=errors)
