"""Config flow for FitFlow."""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.helpers import config_validation as cv

from .api import normalize_base_url
from .const import (
    CONF_API_URL,
    CONF_NAME,
    DEFAULT_API_URL,
    DEFAULT_NAME,
    DOMAIN,
)


def _validate_api_url(raw: Any) -> tuple[str, str | None]:
    """Return the cleaned URL and an error key; blank means local mode."""
    url = normalize_base_url(raw)
    if not url:
        return "", None
    try:
        cv.url(url)
    except vol.Invalid:
        return url, "invalid_url"
    return url, None


def _schema(name: str, api_url: str) -> vol.Schema:
    return vol.Schema(
        {
            vol.Required(CONF_NAME, default=name): str,
            vol.Optional(CONF_API_URL, default=api_url): str,
        }
    )


class FitflowConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for FitFlow."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        errors: dict[str, str] = {}
        if user_input is not None:
            name = str(user_input.get(CONF_NAME, DEFAULT_NAME)).strip() or DEFAULT_NAME
            api_url, error = _validate_api_url(user_input.get(CONF_API_URL))
            if error:
                errors[CONF_API_URL] = error
            else:
                await self.async_set_unique_id(name.lower())
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=name,
                    data={
                        CONF_NAME: name,
                        CONF_API_URL: api_url,
                    },
                )

        return self.async_show_form(
            step_id="user",
            data_schema=_schema(DEFAULT_NAME, DEFAULT_API_URL),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        return FitflowOptionsFlow(config_entry)


class FitflowOptionsFlow(config_entries.OptionsFlow):
    """Handle options for FitFlow; saving reloads the entry."""

    def __init__(self, config_entry) -> None:
        self._entry = config_entry

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        errors: dict[str, str] = {}
        if user_input is not None:
            name = str(user_input.get(CONF_NAME, DEFAULT_NAME)).strip() or DEFAULT_NAME
            api_url, error = _validate_api_url(user_input.get(CONF_API_URL))
            if error:
                errors[CONF_API_URL] = error
            else:
                return self.async_create_entry(
                    title="",
                    data={
                        CONF_NAME: name,
                        CONF_API_URL: api_url,
                    },
                )

        opts = self._entry.options
        data = self._entry.data
        current_name = opts.get(CONF_NAME, data.get(CONF_NAME, DEFAULT_NAME))
        current_url = opts.get(CONF_API_URL, data.get(CONF_API_URL, DEFAULT_API_URL))
        return self.async_show_form(
            step_id="init",
            data_schema=_schema(str(current_name), str(current_url or "")),
            errors=errors,
        )
