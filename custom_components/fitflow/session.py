"""Current credential/user pair for the FitFlow data layer."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from homeassistant.exceptions import HomeAssistantError

from .const import AUTH_KEY, STORAGE_PREFIX, storage_key
from .storage import StorageMedium, clone

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class Session:
    token: str
    user: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {"token": self.token, "user": clone(self.user)}


class SessionHolder:
    """Owns the single session; persisted under ``<prefix>:auth``.

    Lifecycle: ``async_establish`` on login/register, ``async_refresh`` when the
    profile changes, ``async_clear`` on logout.
    """

    def __init__(self, medium: StorageMedium, *, prefix: str = STORAGE_PREFIX) -> None:
        self._medium = medium
        self._key = storage_key(AUTH_KEY, prefix=prefix)
        self._session: Session | None = None
        self._loaded = False

    @property
    def current(self) -> Session | None:
        if self._session is None:
            return None
        return Session(token=self._session.token, user=clone(self._session.user))

    @property
    def token(self) -> str | None:
        return self._session.token if self._session else None

    @property
    def user(self) -> dict[str, Any] | None:
        return clone(self._session.user) if self._session else None

    async def async_load(self) -> Session | None:
        if not self._loaded:
            self._loaded = True
            try:
                raw = await self._medium.async_load(self._key)
            except (HomeAssistantError, ValueError) as err:
                _LOGGER.warning("Failed to parse auth state, starting signed out: %s", err)
                raw = None
            if isinstance(raw, dict) and raw.get("token") is not None:
                user = raw.get("user")
                self._session = Session(token=str(raw["token"]), user=dict(user) if isinstance(user, dict) else {})
        return self.current

    async def async_establish(self, token: str, user: Mapping[str, Any]) -> Session:
        self._loaded = True
        self._session = Session(token=str(token), user=clone(dict(user)))
        await self._medium.async_save(self._key, self._session.as_dict())
        return self.current

    async def async_refresh(self, user: Mapping[str, Any], *, token: str | None = None) -> Session:
        """Replace the user, keeping the current token unless one is given."""
        next_token = token if token is not None else (self.token or "")
        return await self.async_establish(next_token, user)

    async def async_clear(self) -> None:
        self._loaded = True
        self._session = None
        await self._medium.async_remove(self._key)
