"""Durable local storage for FitFlow entity collections (.storage).

State model:
- one collection per entity type, persisted under ``fitflow:<EntityType>``
- a collection is a list of plain-data records, newest first
- the session lives next to the collections under ``fitflow:auth``

Every read and every write goes through ``clone`` so callers never share
structure with the cached collection.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime
from functools import cmp_to_key
from typing import Any, Protocol
from uuid import uuid4

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from .const import STORAGE_PREFIX, STORAGE_VERSION, storage_key

_LOGGER = logging.getLogger(__name__)

Record = dict[str, Any]

_MISSING = object()


def now_iso() -> str:
    return datetime.now(UTC).isoformat()


def clone(value: Any) -> Any:
    """Deep-copy plain data (mappings, lists, tuples, scalars).

    Records are JSON-shaped, so cyclic graphs are not expected and not handled.
    Tuples come back as lists, matching what a JSON round trip would give.
    """
    if isinstance(value, Mapping):
        return {key: clone(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [clone(item) for item in value]
    return value


def random_token(*, allow_weak: bool = True) -> str:
    """Return a random hex token for record ids.

    Uses the OS entropy source through ``uuid4``. When that is unavailable the
    token comes from ``random`` instead, which keeps ids unique enough for a
    single local writer but is not a security guarantee.
    """
    try:
        return uuid4().hex
    except NotImplementedError:
        if not allow_weak:
            raise
        _LOGGER.warning("No strong random source available, falling back to pseudo-random record ids")
        return f"{random.getrandbits(128):032x}"


def _strict_equals(left: Any, right: Any) -> bool:
    # bool is an int subclass; True must not match 1.
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right


def matches_criteria(record: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
    """Return True when every criterion that is not None equals the record field."""
    for key, expected in criteria.items():
        if expected is None:
            continue
        if not _strict_equals(record.get(key, _MISSING), expected):
            return False
    return True


def _compare(left: Any, right: Any) -> int:
    if left is None or right is None or left == right:
        return 0
    try:
        return 1 if left > right else -1
    except TypeError:
        return 0


def sort_records(records: list[Record], order: str | None) -> list[Record]:
    """Stable sort by ``field`` or ``-field``.

    Records where the field is missing (or None) stay in their slot; the others
    are sorted stably among the remaining slots.
    """
    if not order:
        return records
    descending = order.startswith("-")
    field = order[1:] if order[0] in "+-" else order
    slots = [idx for idx, rec in enumerate(records) if rec.get(field) is not None]
    ordered = sorted(
        (records[idx] for idx in slots),
        key=cmp_to_key(lambda a, b: _compare(a.get(field), b.get(field))),
        reverse=descending,
    )
    out = list(records)
    for idx, rec in zip(slots, ordered, strict=True):
        out[idx] = rec
    return out


def apply_query(
    records: list[Record],
    *,
    criteria: Mapping[str, Any] | None = None,
    order: str | None = None,
    limit: int | None = None,
) -> list[Record]:
    """Filter, then sort, then truncate."""
    if criteria:
        records = [rec for rec in records if matches_criteria(rec, criteria)]
    records = sort_records(records, order)
    if limit is not None:
        records = records[: max(0, int(limit))]
    return records


class StorageMedium(Protocol):
    """Persistent key-value medium the entity stores write to."""

    async def async_load(self, key: str) -> Any: ...

    async def async_save(self, key: str, value: Any) -> None: ...

    async def async_remove(self, key: str) -> None: ...


class HassStorageMedium:
    """Home Assistant ``.storage`` backed medium, one file per key and entry."""

    def __init__(self, hass: HomeAssistant, namespace: str) -> None:
        self._hass = hass
        self._namespace = namespace
        self._stores: dict[str, Store[Any]] = {}

    def _store(self, key: str) -> Store[Any]:
        store = self._stores.get(key)
        if store is None:
            # .storage file names cannot rely on ':' being portable.
            store = Store(self._hass, STORAGE_VERSION, f"{key.replace(':', '.')}.{self._namespace}")
            self._stores[key] = store
        return store

    async def async_load(self, key: str) -> Any:
        return await self._store(key).async_load()

    async def async_save(self, key: str, value: Any) -> None:
        await self._store(key).async_save(value)

    async def async_remove(self, key: str) -> None:
        await self._store(key).async_remove()


class MemoryStorageMedium:
    """Keeps serialized snapshots in memory.

    Used when nothing should outlive the process (demo sessions) and in tests.
    ``raw`` holds the JSON text per key, so a snapshot can be inspected or
    corrupted directly.
    """

    def __init__(self) -> None:
        self.raw: dict[str, str] = {}

    async def async_load(self, key: str) -> Any:
        text = self.raw.get(key)
        if text is None:
            return None
        return json.loads(text)

    async def async_save(self, key: str, value: Any) -> None:
        self.raw[key] = json.dumps(value)

    async def async_remove(self, key: str) -> None:
        self.raw.pop(key, None)


class EntityStore:
    """Cached collection of one entity type over a storage medium."""

    def __init__(
        self,
        medium: StorageMedium,
        entity_type: str,
        seed: Sequence[Mapping[str, Any]] = (),
        *,
        prefix: str = STORAGE_PREFIX,
        allow_weak_ids: bool = True,
    ) -> None:
        self.entity_type = str(entity_type)
        self.key = storage_key(self.entity_type, prefix=prefix)
        self._medium = medium
        self._seed: tuple[Record, ...] = tuple(clone(list(seed)))
        self._allow_weak_ids = allow_weak_ids
        self._cache: list[Record] | None = None
        self._load_lock = asyncio.Lock()

    def invalidate(self) -> None:
        """Drop the in-memory cache; the next read goes back to the medium."""
        self._cache = None

    async def _async_load_or_seed(self) -> list[Record]:
        try:
            loaded = await self._medium.async_load(self.key)
        except (HomeAssistantError, ValueError) as err:
            _LOGGER.warning("Failed to parse %s from storage, using defaults: %s", self.key, err)
            return clone(list(self._seed))

        if loaded is None:
            seeded = clone(list(self._seed))
            await self._medium.async_save(self.key, clone(seeded))
            return seeded

        if not isinstance(loaded, list) or not all(isinstance(rec, dict) for rec in loaded):
            _LOGGER.warning("Stored %s is not a list of records, using defaults", self.key)
            return clone(list(self._seed))
        return loaded

    async def _async_read(self) -> list[Record]:
        if self._cache is None:
            # One cold load per cache; later waiters see what earlier writers left.
            async with self._load_lock:
                if self._cache is None:
                    self._cache = await self._async_load_or_seed()
        return clone(self._cache)

    async def _async_write(self, records: list[Record]) -> None:
        self._cache = clone(records)
        await self._medium.async_save(self.key, clone(records))

    def _new_id(self, records: Iterable[Mapping[str, Any]]) -> str:
        taken = {str(rec.get("id")) for rec in records}
        while True:
            candidate = f"{self.entity_type}-{random_token(allow_weak=self._allow_weak_ids)}"
            if candidate not in taken:
                return candidate

    async def async_list(self, order: str | None = None, limit: int | None = None) -> list[Record]:
        data = await self._async_read()
        return apply_query(data, order=order, limit=limit)

    async def async_filter(
        self,
        criteria: Mapping[str, Any],
        order: str | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        data = await self._async_read()
        return apply_query(data, criteria=criteria, order=order, limit=limit)

    async def async_create(self, record: Mapping[str, Any]) -> Record:
        data = await self._async_read()
        entity = clone(dict(record))
        if entity.get("id") is None:
            entity["id"] = self._new_id(data)
        await self._async_write([entity, *data])
        return clone(entity)

    async def async_update(self, record_id: str, patch: Mapping[str, Any]) -> Record | None:
        data = await self._async_read()
        updated: Record | None = None
        next_data: list[Record] = []
        for item in data:
            if item.get("id") != record_id:
                next_data.append(item)
                continue
            updated = {**item, **clone(dict(patch))}
            next_data.append(updated)
        if updated is None:
            return None
        await self._async_write(next_data)
        return clone(updated)

    async def async_upsert_many(self, records: Iterable[Mapping[str, Any]]) -> list[Record]:
        """Mirror records into the collection.

        Known ids are replaced in place; unknown ones are prepended keeping
        their incoming order.
        """
        data = await self._async_read()
        positions = {rec.get("id"): idx for idx, rec in enumerate(data)}
        fresh: list[Record] = []
        fresh_positions: dict[Any, int] = {}
        mirrored: list[Record] = []
        for raw in records:
            rec = clone(dict(raw))
            if rec.get("id") is None:
                rec["id"] = self._new_id([*data, *fresh])
            rec_id = rec["id"]
            if rec_id in positions:
                data[positions[rec_id]] = rec
            elif rec_id in fresh_positions:
                fresh[fresh_positions[rec_id]] = rec
            else:
                fresh_positions[rec_id] = len(fresh)
                fresh.append(rec)
            mirrored.append(rec)
        if not mirrored:
            return []
        await self._async_write([*fresh, *data])
        return clone(mirrored)

    async def async_upsert(self, record: Mapping[str, Any]) -> Record:
        mirrored = await self.async_upsert_many([record])
        return mirrored[0]
