"""Button platform for FitFlow."""

from __future__ import annotations

from homeassistant.components.button import ButtonEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import FitflowCoordinator
from .entity import device_info_from_entry


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    coordinator: FitflowCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([GeneratePlanButton(entry, coordinator)])


class GeneratePlanButton(ButtonEntity):
    """Button to generate a fresh personalized plan."""

    _attr_has_entity_name = True
    _attr_name = "Generate plan"
    _attr_icon = "mdi:refresh"
    _attr_translation_key = "generate_plan"

    def __init__(self, entry: ConfigEntry, coordinator: FitflowCoordinator) -> None:
        self._entry = entry
        self._coordinator = coordinator
        self._attr_unique_id = f"{entry.entry_id}_generate_plan"
        self._attr_device_info = device_info_from_entry(entry)

    async def async_press(self) -> None:
        await self._coordinator.async_generate_plan("button")
