"""Seed data loader."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .const import EntityType
from .storage import Record, clone

SEED_PATH = Path(__file__).parent / "data" / "seed.json"


class SeedLibrary:
    """Loads the bundled seed collections, demo user and default plan, and caches them.

    Accessors hand out copies; the cached defaults are never handed out directly.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or SEED_PATH
        self._cache: dict[str, Any] | None = None

    async def async_load(self) -> dict[str, Any]:
        if self._cache is not None:
            return self._cache

        raw = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raw = {}
        collections = raw.get("collections")
        if not isinstance(collections, dict):
            collections = {}
        for kind in EntityType:
            items = collections.get(kind.value)
            collections[kind.value] = [r for r in items if isinstance(r, dict)] if isinstance(items, list) else []
        raw["collections"] = collections
        raw.setdefault("demo_user", {})
        raw.setdefault("default_plan", {})
        self._cache = raw
        return self._cache

    def _loaded(self) -> dict[str, Any]:
        if self._cache is None:
            raise RuntimeError("SeedLibrary.async_load() must run first")
        return self._cache

    def collection(self, kind: EntityType) -> list[Record]:
        return clone(self._loaded()["collections"].get(kind.value, []))

    def demo_user(self) -> Record:
        return clone(self._loaded()["demo_user"])

    def default_plan(self) -> Record:
        return clone(self._loaded()["default_plan"])
