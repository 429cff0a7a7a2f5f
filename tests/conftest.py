from __future__ import annotations

import json
from typing import Any

import pytest
import pytest_asyncio

from custom_components.fitflow.library import SeedLibrary
from custom_components.fitflow.runtime import FitflowRuntime
from custom_components.fitflow.storage import MemoryStorageMedium

API_URL = "https://api.fitflow.test/api/"


class FakeResponse:
    def __init__(self, status: int, body: Any) -> None:
        self.status = status
        self._text = body if isinstance(body, str) else json.dumps(body)

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *exc: object) -> None:
        return None


class FakeHttpSession:
    """Shaped like aiohttp.ClientSession.request; each queued reply answers one request to its (method, path)."""

    def __init__(self, base_url: str = API_URL.rstrip("/")) -> None:
        self.base_url = base_url
        self.calls: list[dict[str, Any]] = []
        self._replies: dict[tuple[str, str], list[Any]] = {}

    def reply(self, method: str, path: str, body: Any = None, *, status: int = 200) -> None:
        self._replies.setdefault((method, path), []).append((status, {} if body is None else body))

    def fail(self, method: str, path: str, error: BaseException) -> None:
        self._replies.setdefault((method, path), []).append(error)

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        path = url[len(self.base_url):]
        self.calls.append({"method": method, "url": url, "path": path, **kwargs})
        queue = self._replies.get((method, path)) or []
        if not queue:
            return FakeResponse(404, {"message": f"No fake reply for {method} {path}"})
        reply = queue.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        status, body = reply
        return FakeResponse(status, body)


@pytest.fixture
def medium() -> MemoryStorageMedium:
    return MemoryStorageMedium()


@pytest.fixture
def http() -> FakeHttpSession:
    return FakeHttpSession()


@pytest_asyncio.fixture
async def offline_runtime(medium: MemoryStorageMedium, http: FakeHttpSession) -> FitflowRuntime:
    return await FitflowRuntime.async_create(medium, http_session=http, api_url="")


@pytest_asyncio.fixture
async def remote_runtime(medium: MemoryStorageMedium, http: FakeHttpSession) -> FitflowRuntime:
    return await FitflowRuntime.async_create(medium, http_session=http, api_url=API_URL)


@pytest_asyncio.fixture
async def seed() -> SeedLibrary:
    library = SeedLibrary()
    await library.async_load()
    return library
