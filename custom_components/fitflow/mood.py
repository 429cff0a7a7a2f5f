"""Mood journal backed by the MoodLog collection."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .api import FitflowApiClient
from .const import DEFAULT_MOOD_LIMIT
from .dispatcher import safe_remote_call
from .errors import ParseError
from .normalize import normalize_document, normalize_documents
from .storage import EntityStore, Record, apply_query, clone, now_iso

MOOD_DEFAULTS: dict[str, Any] = {
    "mood": "balanced",
    "energy_level": "moderate",
    "stress_level": "moderate",
    "motivation_level": "moderate",
    "soreness_level": "moderate",
    "sleep_quality": "good",
}


def build_mood_entry(payload: Mapping[str, Any], *, timestamp: str | None = None) -> Record:
    entry: Record = {key: payload.get(key) or default for key, default in MOOD_DEFAULTS.items()}
    entry["tags"] = list(payload.get("tags") or [])
    entry["createdAt"] = payload.get("createdAt") or timestamp or now_iso()
    for key in ("note", "context", "custom_mood"):
        if payload.get(key) is not None:
            entry[key] = payload[key]
    return entry


class MoodJournal:
    def __init__(self, store: EntityStore, client: FitflowApiClient) -> None:
        self._store = store
        self._client = client

    async def async_list(self, limit: int = DEFAULT_MOOD_LIMIT) -> list[Record]:
        async def _remote() -> list[Record]:
            payload = await self._client.async_get("/mood", params={"limit": limit})
            moods = payload.get("moods") if isinstance(payload, dict) else None
            if not isinstance(moods, list):
                raise ParseError("Response is missing 'moods'")
            records = await self._store.async_upsert_many(normalize_documents(moods))
            return apply_query(records, order="-createdAt", limit=limit)

        return await safe_remote_call(
            self._client.remote_enabled,
            lambda: self._store.async_list("-createdAt", limit),
            _remote,
        )

    async def async_latest(self) -> Record | None:
        moods = await self.async_list(1)
        return moods[0] if moods else None

    async def async_create(self, payload: Mapping[str, Any]) -> Record:
        async def _remote() -> Record:
            response = await self._client.async_post("/mood", clone(dict(payload)))
            mood = response.get("mood") if isinstance(response, dict) else None
            if not isinstance(mood, dict):
                raise ParseError("Response is missing 'mood'")
            return await self._store.async_upsert(normalize_document(mood))

        return await safe_remote_call(
            self._client.remote_enabled,
            lambda: self._store.async_create(build_mood_entry(payload)),
            _remote,
        )
