"""Diagnostics support for FitFlow.

This file is picked up by Home Assistant automatically when present.
"""

from __future__ import annotations

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_API_URL, DOMAIN
from .ws_state import public_user


def _redact(value: Any) -> Any:
    if value is None:
        return None
    raw = str(value)
    if not raw:
        return ""
    if len(raw) <= 4:
        return "***"
    return f"{raw[:2]}***{raw[-2:]}"


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant,
    entry: ConfigEntry,
) -> dict[str, Any]:
    """Return diagnostics for a config entry (URL and session token redacted)."""
    coordinator = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    data = dict(entry.data)
    options = dict(entry.options)
    for section in (data, options):
        if CONF_API_URL in section:
            section[CONF_API_URL] = _redact(section.get(CONF_API_URL))

    payload: dict[str, Any] = {
        "entry": {
            "entry_id": entry.entry_id,
            "title": entry.title,
            "version": entry.version,
            "data": data,
            "options": options,
        },
    }

    if coordinator is not None:
        runtime = coordinator.runtime
        session = runtime.session.current
        payload["runtime"] = {
            "mode": runtime.mode,
            "adapters": dict(runtime.adapter_modes()),
            "session_token": _redact(session.token) if session else None,
        }
        state = dict(coordinator.data or {})
        state["user"] = public_user(state.get("user"))
        payload["coordinator"] = {
            "last_update_success": bool(getattr(coordinator, "last_update_success", False)),
            "last_exception": repr(getattr(coordinator, "last_exception", None)),
            "data": state,
        }

    return payload
