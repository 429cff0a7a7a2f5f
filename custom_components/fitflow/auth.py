"""Sign-in, registration and profile updates."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .api import FitflowApiClient
from .const import DEMO_TOKEN, OFFLINE_USER_ID
from .errors import ConfigurationError, NotAuthenticatedError, ParseError
from .library import SeedLibrary
from .session import Session, SessionHolder
from .storage import Record, clone

_LOGGER = logging.getLogger(__name__)


def _session_from(payload: Any) -> tuple[str, Record]:
    if not isinstance(payload, dict) or not isinstance(payload.get("user"), dict) or not payload.get("token"):
        raise ParseError("Response is missing 'token' or 'user'")
    return str(payload["token"]), payload["user"]


def _user_from(payload: Any) -> Record:
    user = payload.get("user") if isinstance(payload, dict) else None
    if not isinstance(user, dict):
        raise ParseError("Response is missing 'user'")
    return user


class AuthService:
    """Session boundary for the data layer.

    Offline, login always succeeds with the bundled demo identity. Online, the
    service issues the token and the returned user replaces the session user.
    """

    def __init__(self, client: FitflowApiClient, session: SessionHolder, library: SeedLibrary) -> None:
        self._client = client
        self._session = session
        self._library = library

    def _demo_session(self) -> Session:
        return Session(token=DEMO_TOKEN, user=self._library.demo_user())

    async def async_login(self, email: str | None = None, password: str | None = None) -> Session:
        if self._client.remote_enabled:
            if not email or not password:
                raise ConfigurationError("Email and password are required")
            payload = await self._client.async_post("/auth/login", {"email": email, "password": password})
            token, user = _session_from(payload)
            _LOGGER.debug("Signed in as %s", user.get("email"))
            return await self._session.async_establish(token, user)

        demo = self._demo_session()
        return await self._session.async_establish(demo.token, demo.user)

    async def async_register(
        self,
        email: str | None = None,
        password: str | None = None,
        full_name: str | None = None,
        profile: Mapping[str, Any] | None = None,
    ) -> Session:
        if self._client.remote_enabled:
            if not email or not password or not full_name:
                raise ConfigurationError("Registration details are required")
            body = {
                "email": email,
                "password": password,
                "full_name": full_name,
                "profile": clone(dict(profile or {})),
            }
            token, user = _session_from(await self._client.async_post("/auth/register", body))
            return await self._session.async_establish(token, user)

        demo = self._demo_session()
        user = {
            **demo.user,
            **clone(dict(profile or {})),
            "id": OFFLINE_USER_ID,
            "email": email or demo.user.get("email"),
            "full_name": full_name or demo.user.get("full_name"),
            "profile_completed": True,
        }
        return await self._session.async_establish(demo.token, user)

    async def async_logout(self) -> None:
        await self._session.async_clear()

    async def async_me(self) -> Record | None:
        """Return the session user, refreshed from the service when online."""
        current = await self._session.async_load()
        if not self._client.remote_enabled:
            return current.user if current else None

        if current is None or not current.token:
            raise NotAuthenticatedError("Not authenticated")
        user = _user_from(await self._client.async_get("/auth/me"))
        session = await self._session.async_refresh(user, token=current.token)
        return session.user

    async def async_update_profile(self, updates: Mapping[str, Any]) -> Record:
        await self._session.async_load()
        if self._client.remote_enabled:
            user = _user_from(await self._client.async_put("/auth/profile", clone(dict(updates))))
            session = await self._session.async_refresh(user)
            return session.user

        existing = self._session.current or self._demo_session()
        session = await self._session.async_establish(existing.token, {**existing.user, **clone(dict(updates))})
        return session.user
