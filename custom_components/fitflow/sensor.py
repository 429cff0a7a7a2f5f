"""Sensor platform for FitFlow."""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import FitflowCoordinator
from .entity import device_info_from_entry


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    coordinator: FitflowCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([PersonalizedPlanSensor(entry, coordinator)])


class PersonalizedPlanSensor(CoordinatorEntity[FitflowCoordinator], SensorEntity):
    """Daily calorie target of the current personalized plan."""

    _attr_has_entity_name = True
    _attr_name = "Personalized plan"
    _attr_icon = "mdi:food-apple"
    _attr_translation_key = "personalized_plan"
    _attr_native_unit_of_measurement = "kcal"

    def __init__(self, entry: ConfigEntry, coordinator: FitflowCoordinator) -> None:
        super().__init__(coordinator)
        self._entry = entry
        self._attr_unique_id = f"{entry.entry_id}_personalized_plan"
        self._attr_device_info = device_info_from_entry(entry)

    def _plan(self) -> dict[str, Any]:
        data = self.coordinator.data or {}
        plan = data.get("plan") if isinstance(data, dict) else None
        return plan if isinstance(plan, dict) else {}

    @property
    def native_value(self) -> int | None:
        nutrition = self._plan().get("nutrition_plan")
        if isinstance(nutrition, dict) and nutrition.get("calories_target") is not None:
            return int(nutrition["calories_target"])
        return None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        plan = self._plan()
        nutrition = plan.get("nutrition_plan") if isinstance(plan.get("nutrition_plan"), dict) else {}
        data = self.coordinator.data or {}
        return {
            "entry_id": self._entry.entry_id,
            "mode": data.get("mode") if isinstance(data, dict) else None,
            "plan_id": plan.get("id"),
            "source": plan.get("source"),
            "generated_reason": plan.get("generated_reason"),
            "snack_count": len(nutrition.get("snacks") or []),
            "guidance": list(nutrition.get("guidance") or []),
            "readiness_score": plan.get("readiness_score"),
            "created_at": plan.get("createdAt"),
            "updated_at": plan.get("updatedAt"),
        }
