"""Services for FitFlow."""

from __future__ import annotations

import voluptuous as vol

from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse
from homeassistant.helpers import config_validation as cv

from .const import DEFAULT_SCAN_TOP_K, DOMAIN
from .ws_state import public_user

SERVICE_GENERATE_PLAN = "generate_plan"
SERVICE_GET_PLAN = "get_plan"
SERVICE_ADJUST_NUTRITION = "adjust_nutrition"
SERVICE_UPDATE_INTAKE = "update_intake"
SERVICE_LOGIN = "login"
SERVICE_LOGOUT = "logout"
SERVICE_LOG_MOOD = "log_mood"
SERVICE_SCAN_MEAL = "scan_meal"
SERVICE_REGISTER = "register"
SERVICE_UPDATE_PROFILE = "update_profile"
SERVICE_ASK_COACH = "ask_coach"
SERVICE_GENERATE_MEAL_PLAN = "generate_meal_plan"

_ENTRY_SCHEMA = vol.Schema({vol.Required("entry_id"): str})
_GENERATE_SCHEMA = vol.Schema({vol.Required("entry_id"): str, vol.Optional("reason"): str})
_ADJUST_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Required("foods"): vol.All(cv.ensure_list, [cv.string]),
        vol.Optional("purpose"): str,
    }
)
_INTAKE_SCHEMA = vol.Schema({vol.Required("entry_id"): str, vol.Required("profile"): dict})
_LOGIN_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Optional("email"): str,
        vol.Optional("password"): str,
    }
)
_MOOD_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Optional("mood"): str,
        vol.Optional("energy_level"): str,
        vol.Optional("stress_level"): str,
        vol.Optional("motivation_level"): str,
        vol.Optional("soreness_level"): str,
        vol.Optional("sleep_quality"): str,
        vol.Optional("tags"): vol.All(cv.ensure_list, [cv.string]),
        vol.Optional("note"): str,
        vol.Optional("context"): str,
        vol.Optional("custom_mood"): str,
    }
)
_SCAN_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Optional("image_url"): str,
        vol.Optional("top_k", default=DEFAULT_SCAN_TOP_K): vol.All(vol.Coerce(int), vol.Range(min=1, max=20)),
    }
)
_REGISTER_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Optional("email"): cv.string,
        vol.Optional("password"): cv.string,
        vol.Optional("full_name"): cv.string,
        vol.Optional("profile", default={}): dict,
    }
)
_PROFILE_SCHEMA = vol.Schema({vol.Required("entry_id"): str, vol.Required("updates"): dict})
_COACH_SCHEMA = vol.Schema({vol.Required("entry_id"): str, vol.Required("question"): cv.string})
_MEAL_PLAN_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Optional("dietary_preference"): cv.string,
        vol.Optional("calorie_target"): vol.All(vol.Coerce(float), vol.Range(min=0)),
        vol.Optional("protein_target"): vol.All(vol.Coerce(float), vol.Range(min=0)),
        vol.Optional("carbs_target"): vol.All(vol.Coerce(float), vol.Range(min=0)),
        vol.Optional("fat_target"): vol.All(vol.Coerce(float), vol.Range(min=0)),
    }
)


async def async_register(hass: HomeAssistant) -> None:
    def _coordinator_for_entry(entry_id: str):
        return hass.data.get(DOMAIN, {}).get(entry_id)

    async def _async_generate_plan(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        plan = await coordinator.async_generate_plan(call.data.get("reason"))
        return {"ok": True, "entry_id": entry_id, "plan": plan}

    async def _async_get_plan(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        plan = await coordinator.runtime.personalization.async_get_latest()
        return {"ok": True, "entry_id": entry_id, "plan": plan}

    async def _async_adjust_nutrition(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        foods = [food.strip() for food in call.data["foods"] if food.strip()]
        plan = await coordinator.async_adjust_nutrition(foods, call.data.get("purpose"))
        return {"ok": True, "entry_id": entry_id, "plan": plan}

    async def _async_update_intake(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        user = await coordinator.async_update_intake(dict(call.data["profile"]))
        return {"ok": True, "entry_id": entry_id, "user": public_user(user)}

    async def _async_login(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        session = await coordinator.runtime.auth.async_login(call.data.get("email"), call.data.get("password"))
        await coordinator.async_request_refresh()
        return {"ok": True, "entry_id": entry_id, "user": public_user(session.user)}

    async def _async_logout(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        await coordinator.runtime.auth.async_logout()
        await coordinator.async_request_refresh()
        return {"ok": True, "entry_id": entry_id}

    async def _async_log_mood(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        payload = {key: value for key, value in call.data.items() if key != "entry_id"}
        mood = await coordinator.runtime.mood.async_create(payload)
        return {"ok": True, "entry_id": entry_id, "mood": mood}

    async def _async_scan_meal(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        result = await coordinator.runtime.meals.async_scan_meal(call.data.get("image_url"), call.data["top_k"])
        return {"ok": True, "entry_id": entry_id, **result}

    async def _async_register_user(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        session = await coordinator.runtime.auth.async_register(
            call.data.get("email"),
            call.data.get("password"),
            call.data.get("full_name"),
            dict(call.data["profile"]),
        )
        await coordinator.async_request_refresh()
        return {"ok": True, "entry_id": entry_id, "user": public_user(session.user)}

    async def _async_update_profile(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        user = await coordinator.runtime.auth.async_update_profile(dict(call.data["updates"]))
        await coordinator.async_request_refresh()
        return {"ok": True, "entry_id": entry_id, "user": public_user(user)}

    async def _async_ask_coach(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        reply = await coordinator.runtime.coach.async_ask_coach(call.data["question"])
        return {"ok": True, "entry_id": entry_id, **reply}

    async def _async_generate_meal_plan(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        meal_plan = await coordinator.runtime.coach.async_generate_meal_plan(
            call.data.get("dietary_preference"),
            call.data.get("calorie_target"),
            call.data.get("protein_target"),
            call.data.get("carbs_target"),
            call.data.get("fat_target"),
        )
        return {"ok": True, "entry_id": entry_id, **meal_plan}

    handlers = (
        (SERVICE_GENERATE_PLAN, _async_generate_plan, _GENERATE_SCHEMA),
        (SERVICE_GET_PLAN, _async_get_plan, _ENTRY_SCHEMA),
        (SERVICE_ADJUST_NUTRITION, _async_adjust_nutrition, _ADJUST_SCHEMA),
        (SERVICE_UPDATE_INTAKE, _async_update_intake, _INTAKE_SCHEMA),
        (SERVICE_LOGIN, _async_login, _LOGIN_SCHEMA),
        (SERVICE_LOGOUT, _async_logout, _ENTRY_SCHEMA),
        (SERVICE_LOG_MOOD, _async_log_mood, _MOOD_SCHEMA),
        (SERVICE_SCAN_MEAL, _async_scan_meal, _SCAN_SCHEMA),
        (SERVICE_REGISTER, _async_register_user, _REGISTER_SCHEMA),
        (SERVICE_UPDATE_PROFILE, _async_update_profile, _PROFILE_SCHEMA),
        (SERVICE_ASK_COACH, _async_ask_coach, _COACH_SCHEMA),
        (SERVICE_GENERATE_MEAL_PLAN, _async_generate_meal_plan, _MEAL_PLAN_SCHEMA),
    )
    for name, handler, schema in handlers:
        if not hass.services.has_service(DOMAIN, name):
            hass.services.async_register(
                DOMAIN,
                name,
                handler,
                schema=schema,
                supports_response=SupportsResponse.ONLY,
            )
