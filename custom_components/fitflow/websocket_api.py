"""Websocket API for FitFlow."""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant.components import websocket_api
from homeassistant.core import HomeAssistant

from .const import DOMAIN, EntityType
from .errors import (
    ConfigurationError,
    FitflowError,
    ParseError,
    TransportError,
    UnsupportedOperation,
)
from .runtime import FitflowRuntime
from .ws_state import public_state

_ENTITY_TYPES = [kind.value for kind in EntityType]


def _error_code(err: FitflowError) -> str:
    if isinstance(err, UnsupportedOperation):
        return "not_supported"
    if isinstance(err, ConfigurationError):
        return "not_configured"
    if isinstance(err, ParseError):
        return "parse_error"
    if isinstance(err, TransportError):
        return "transport_error"
    return "unknown_error"


def _coordinator(hass: HomeAssistant, connection: websocket_api.ActiveConnection, msg: dict[str, Any]):
    entry_id = msg["entry_id"]
    coordinator = hass.data.get(DOMAIN, {}).get(entry_id)
    if coordinator is None:
        connection.send_error(msg["id"], "entry_not_found", f"No entry found for entry_id={entry_id}")
    return coordinator


@websocket_api.websocket_command({vol.Required("type"): "fitflow/list_entries"})
@websocket_api.async_response
async def ws_list_entries(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    entries = hass.config_entries.async_entries(DOMAIN)
    payload = [{"entry_id": entry.entry_id, "title": entry.title} for entry in entries]
    connection.send_result(msg["id"], {"entries": payload})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "fitflow/get_state",
        vol.Required("entry_id"): str,
    }
)
@websocket_api.async_response
async def ws_get_state(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    state = public_state(coordinator.data or {}, adapters=coordinator.runtime.adapter_modes())
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], "state": state})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "fitflow/get_plan",
        vol.Required("entry_id"): str,
    }
)
@websocket_api.async_response
async def ws_get_plan(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        plan = await coordinator.runtime.personalization.async_get_latest()
    except FitflowError as err:
        connection.send_error(msg["id"], _error_code(err), str(err))
        return
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], "plan": plan})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "fitflow/entities/list",
        vol.Required("entry_id"): str,
        vol.Required("entity_type"): vol.In(_ENTITY_TYPES),
        vol.Optional("order"): str,
        vol.Optional("limit"): vol.Coerce(int),
    }
)
@websocket_api.async_response
async def ws_entities_list(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    adapter = coordinator.runtime.entities[msg["entity_type"]]
    try:
        records = await adapter.async_list(msg.get("order"), msg.get("limit"))
    except FitflowError as err:
        connection.send_error(msg["id"], _error_code(err), str(err))
        return
    connection.send_result(msg["id"], {"entity_type": msg["entity_type"], "records": records})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "fitflow/entities/filter",
        vol.Required("entry_id"): str,
        vol.Required("entity_type"): vol.In(_ENTITY_TYPES),
        vol.Optional("criteria", default={}): dict,
        vol.Optional("order"): str,
        vol.Optional("limit"): vol.Coerce(int),
    }
)
@websocket_api.async_response
async def ws_entities_filter(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    adapter = coordinator.runtime.entities[msg["entity_type"]]
    try:
        records = await adapter.async_filter(msg.get("criteria") or {}, msg.get("order"), msg.get("limit"))
    except FitflowError as err:
        connection.send_error(msg["id"], _error_code(err), str(err))
        return
    connection.send_result(msg["id"], {"entity_type": msg["entity_type"], "records": records})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "fitflow/entities/create",
        vol.Required("entry_id"): str,
        vol.Required("entity_type"): vol.In(_ENTITY_TYPES),
        vol.Required("record"): dict,
    }
)
@websocket_api.async_response
async def ws_entities_create(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    adapter = coordinator.runtime.entities[msg["entity_type"]]
    try:
        record = await adapter.async_create(msg["record"])
    except FitflowError as err:
        connection.send_error(msg["id"], _error_code(err), str(err))
        return
    connection.send_result(msg["id"], {"entity_type": msg["entity_type"], "record": record})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "fitflow/entities/update",
        vol.Required("entry_id"): str,
        vol.Required("entity_type"): vol.In(_ENTITY_TYPES),
        vol.Required("record_id"): str,
        vol.Required("patch"): dict,
    }
)
@websocket_api.async_response
async def ws_entities_update(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        result = await async_update_result(coordinator.runtime, msg)
    except FitflowError as err:
        connection.send_error(msg["id"], _error_code(err), str(err))
        return
    connection.send_result(msg["id"], result)


async def async_update_result(runtime: FitflowRuntime, msg: dict[str, Any]) -> dict[str, Any]:
    """Result of an entity update; an unknown id yields ``record: None``."""
    adapter = runtime.entities[msg["entity_type"]]
    record = await adapter.async_update(msg["record_id"], msg["patch"])
    return {"entity_type": msg["entity_type"], "record": record}


async def async_user_summary_result(runtime: FitflowRuntime, msg: dict[str, Any]) -> dict[str, Any]:
    summary = await runtime.admin.async_get_user_summary(msg["user_id"])
    return {"user_id": msg["user_id"], "summary": summary}


@websocket_api.websocket_command(
    {
        vol.Required("type"): "fitflow/admin/list_users",
        vol.Required("entry_id"): str,
    }
)
@websocket_api.require_admin
@websocket_api.async_response
async def ws_admin_list_users(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        users = await coordinator.runtime.admin.async_list_users()
    except FitflowError as err:
        connection.send_error(msg["id"], _error_code(err), str(err))
        return
    connection.send_result(msg["id"], {"users": users})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "fitflow/admin/user_summary",
        vol.Required("entry_id"): str,
        vol.Required("user_id"): str,
    }
)
@websocket_api.require_admin
@websocket_api.async_response
async def ws_admin_user_summary(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        result = await async_user_summary_result(coordinator.runtime, msg)
    except FitflowError as err:
        connection.send_error(msg["id"], _error_code(err), str(err))
        return
    connection.send_result(msg["id"], result)


def async_register(hass: HomeAssistant) -> None:
    websocket_api.async_register_command(hass, ws_list_entries)
    websocket_api.async_register_command(hass, ws_get_state)
    websocket_api.async_register_command(hass, ws_get_plan)
    websocket_api.async_register_command(hass, ws_entities_list)
    websocket_api.async_register_command(hass, ws_entities_filter)
    websocket_api.async_register_command(hass, ws_entities_create)
    websocket_api.async_register_command(hass, ws_entities_update)
    websocket_api.async_register_command(hass, ws_admin_list_users)
    websocket_api.async_register_command(hass, ws_admin_user_summary)
