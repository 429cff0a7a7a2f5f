"""Websocket state helpers."""

from __future__ import annotations

from typing import Any

from .version import BACKEND_VERSION


def public_user(user: dict[str, Any] | None) -> dict[str, Any] | None:
    if not isinstance(user, dict):
        return None
    return {key: value for key, value in user.items() if key not in ("password", "token")}


def public_state(state: dict[str, Any], *, adapters: dict[str, str] | None = None) -> dict[str, Any]:
    """Return a stable public payload for the UI; the session token is never included."""
    if not isinstance(state, dict):
        return {}
    return {
        "backend_version": BACKEND_VERSION,
        "mode": str(state.get("mode") or "local"),
        "plan": state.get("plan") if isinstance(state.get("plan"), dict) else None,
        "user": public_user(state.get("user")),
        "adapters": dict(adapters or {}),
    }
