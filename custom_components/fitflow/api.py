"""HTTP client for the remote FitFlow service."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from .errors import ConfigurationError, ParseError, TransportError
from .session import SessionHolder

_LOGGER = logging.getLogger(__name__)


def normalize_base_url(raw: str | None) -> str:
    return str(raw or "").strip().rstrip("/")


def encode_params(params: Mapping[str, Any] | None) -> dict[str, str]:
    """Drop unset values and render the rest the way the service expects."""
    out: dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            out[key] = "true" if value else "false"
        else:
            out[key] = str(value)
    return out


def _error_message(text: str, status: int) -> str:
    message = f"Request failed with status {status}"
    try:
        parsed = json.loads(text) if text else None
    except ValueError:
        return message
    if isinstance(parsed, dict) and parsed.get("message"):
        return str(parsed["message"])
    return message


class FitflowApiClient:
    """Talks JSON to the remote service.

    ``remote_enabled`` is fixed at construction: true iff a base URL was given.
    Each call is attempted once; there is no retry and no timeout beyond what
    the shared aiohttp session applies.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None,
        base_url: str | None,
        auth: SessionHolder,
    ) -> None:
        self._session = session
        self._base_url = normalize_base_url(base_url)
        self._auth = auth

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def remote_enabled(self) -> bool:
        return bool(self._base_url)

    async def async_request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        payload: Any = None,
    ) -> Any:
        if not self.remote_enabled or self._session is None:
            raise ConfigurationError("API base URL is not configured")

        headers: dict[str, str] = {}
        if self._auth.token:
            headers["Authorization"] = f"Bearer {self._auth.token}"
        kwargs: dict[str, Any] = {"headers": headers}
        query = encode_params(params)
        if query:
            kwargs["params"] = query
        if payload is not None:
            kwargs["json"] = payload

        url = f"{self._base_url}{path}"
        _LOGGER.debug("%s %s params=%s", method, url, query)
        try:
            async with self._session.request(method, url, **kwargs) as resp:
                status = resp.status
                text = await resp.text()
        except aiohttp.ClientError as err:
            raise TransportError(f"Request to {path} failed: {err}") from err

        if not 200 <= status < 300:
            raise TransportError(_error_message(text, status), status=status)
        if not text:
            return {}
        try:
            return json.loads(text)
        except ValueError as err:
            raise ParseError() from err

    async def async_get(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        return await self.async_request("GET", path, params=params)

    async def async_post(self, path: str, payload: Any = None) -> Any:
        return await self.async_request("POST", path, payload=payload)

    async def async_put(self, path: str, payload: Any = None) -> Any:
        return await self.async_request("PUT", path, payload=payload)

    async def async_patch(self, path: str, payload: Any = None) -> Any:
        return await self.async_request("PATCH", path, payload=payload)
