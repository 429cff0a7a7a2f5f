"""Coordinator for FitFlow."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .const import DOMAIN
from .errors import FitflowError
from .runtime import FitflowRuntime

_LOGGER = logging.getLogger(__name__)


class FitflowCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Publishes the current plan and session user for one entry."""

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry, runtime: FitflowRuntime) -> None:
        self.entry = entry
        self.runtime = runtime

        super().__init__(
            hass,
            logger=_LOGGER,
            name=f"{DOMAIN}_{entry.entry_id}",
            update_interval=timedelta(hours=6),
        )

    async def _async_update_data(self) -> dict[str, Any]:
        session = await self.runtime.session.async_load()
        if self.runtime.remote_enabled and (session is None or not session.token):
            # Signed out: the service would reject every call until login.
            return {"plan": None, "user": None, "mode": self.runtime.mode}
        try:
            plan = await self.runtime.personalization.async_get_latest()
            user = await self.runtime.auth.async_me()
        except FitflowError as err:
            raise UpdateFailed(str(err)) from err
        return {"plan": plan, "user": user, "mode": self.runtime.mode}

    async def async_generate_plan(self, reason: str | None = None) -> dict[str, Any]:
        plan = await self.runtime.personalization.async_generate(reason)
        await self.async_request_refresh()
        return plan

    async def async_adjust_nutrition(self, foods: Iterable[str], purpose: str | None = None) -> dict[str, Any]:
        plan = await self.runtime.personalization.async_adjust_nutrition(foods, purpose)
        await self.async_request_refresh()
        return plan

    async def async_update_intake(self, profile: dict[str, Any]) -> dict[str, Any]:
        user = await self.runtime.personalization.async_update_intake(profile)
        await self.async_request_refresh()
        return user
