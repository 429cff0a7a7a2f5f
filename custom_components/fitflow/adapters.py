"""Entity adapters: one contract, a local and a remote implementation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from .api import FitflowApiClient
from .const import EntityType
from .dispatcher import AdapterTable, safe_remote_call, select_adapter
from .errors import ParseError, UnsupportedOperation
from .normalize import normalize_document, normalize_documents
from .storage import EntityStore, Record, apply_query

_LOGGER = logging.getLogger(__name__)


class EntityAdapter(ABC):
    """list/filter/create/update for one entity type."""

    mode = "local"

    def __init__(self, entity_type: EntityType) -> None:
        self.entity_type = entity_type

    @property
    def supports_create(self) -> bool:
        return True

    @property
    def supports_update(self) -> bool:
        return True

    @abstractmethod
    async def async_list(self, order: str | None = None, limit: int | None = None) -> list[Record]:
        """Return all records, optionally sorted and truncated."""

    @abstractmethod
    async def async_filter(
        self,
        criteria: Mapping[str, Any],
        order: str | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        """Return records matching every criterion."""

    @abstractmethod
    async def async_create(self, record: Mapping[str, Any]) -> Record:
        """Store a new record and return it."""

    @abstractmethod
    async def async_update(self, record_id: str, patch: Mapping[str, Any]) -> Record | None:
        """Merge ``patch`` into a record; None when the id is unknown."""


class LocalEntityAdapter(EntityAdapter):
    def __init__(self, store: EntityStore, entity_type: EntityType) -> None:
        super().__init__(entity_type)
        self.store = store

    async def async_list(self, order: str | None = None, limit: int | None = None) -> list[Record]:
        return await self.store.async_list(order, limit)

    async def async_filter(
        self,
        criteria: Mapping[str, Any],
        order: str | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        return await self.store.async_filter(criteria, order, limit)

    async def async_create(self, record: Mapping[str, Any]) -> Record:
        return await self.store.async_create(record)

    async def async_update(self, record_id: str, patch: Mapping[str, Any]) -> Record | None:
        return await self.store.async_update(record_id, patch)


def _no_criteria(_criteria: Mapping[str, Any]) -> dict[str, Any]:
    return {}


def _by_date(criteria: Mapping[str, Any]) -> dict[str, Any]:
    return {"date": criteria.get("date")}


def _by_week_start(criteria: Mapping[str, Any]) -> dict[str, Any]:
    return {"week_start_date": criteria.get("week_start_date")}


def _by_community(criteria: Mapping[str, Any]) -> dict[str, Any]:
    return {"is_community": criteria.get("is_community")}


def _unread_only(criteria: Mapping[str, Any]) -> dict[str, Any]:
    return {"unread": "true" if criteria.get("read") is False else None}


@dataclass(frozen=True, slots=True)
class RemoteRoute:
    """How one entity type maps onto the remote service."""

    path: str
    collection_key: str
    item_key: str
    list_params: frozenset[str] = frozenset({"sort", "limit"})
    filter_params: frozenset[str] = frozenset({"sort", "limit"})
    criteria_params: Callable[[Mapping[str, Any]], dict[str, Any]] = _by_date
    can_create: bool = True
    can_update: bool = False
    # PATCH <path>/<id>/read when the patch only flips ``read`` on.
    read_shortcut: bool = False


_PAGING = frozenset({"limit"})
_NONE: frozenset[str] = frozenset()

REMOTE_ROUTES: dict[EntityType, RemoteRoute] = {
    EntityType.WORKOUT_SESSION: RemoteRoute("/workouts", "workouts", "workout", can_update=True),
    EntityType.NUTRITION_LOG: RemoteRoute("/nutrition/logs", "meals", "meal"),
    EntityType.WATER_LOG: RemoteRoute(
        "/nutrition/water", "logs", "log", list_params=_PAGING, filter_params=_PAGING
    ),
    EntityType.SLEEP_LOG: RemoteRoute("/sleep", "logs", "log"),
    EntityType.AI_INSIGHT: RemoteRoute(
        "/insights",
        "insights",
        "insight",
        criteria_params=_unread_only,
        can_update=True,
        read_shortcut=True,
    ),
    EntityType.MEAL_PLAN: RemoteRoute(
        "/meal-plans",
        "plans",
        "plan",
        list_params=_PAGING,
        filter_params=_NONE,
        criteria_params=_by_week_start,
        can_update=True,
    ),
    EntityType.RECOVERY_SCORE: RemoteRoute(
        "/recovery", "scores", "score", list_params=_PAGING, filter_params=_PAGING
    ),
    EntityType.WORKOUT_BUDDY: RemoteRoute(
        "/social/buddies",
        "buddies",
        "buddy",
        list_params=_NONE,
        filter_params=_NONE,
        criteria_params=_no_criteria,
    ),
    EntityType.CHALLENGE: RemoteRoute(
        "/social/challenges",
        "challenges",
        "challenge",
        list_params=_NONE,
        filter_params=_NONE,
        criteria_params=_by_community,
    ),
}


def _paging(allowed: frozenset[str], order: str | None, limit: int | None) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if "sort" in allowed:
        params["sort"] = order
    if "limit" in allowed:
        params["limit"] = limit
    return params


class RemoteEntityAdapter(EntityAdapter):
    """Serves one entity type from the remote service.

    Responses are normalized, narrowed with the same criteria/order/limit the
    local store applies, and mirrored into the local store so they stay
    queryable offline.
    """

    mode = "remote"

    def __init__(
        self,
        client: FitflowApiClient,
        local: LocalEntityAdapter,
        route: RemoteRoute,
    ) -> None:
        super().__init__(local.entity_type)
        self._client = client
        self._local = local
        self._route = route

    @property
    def supports_create(self) -> bool:
        return self._route.can_create

    @property
    def supports_update(self) -> bool:
        return self._route.can_update

    def _collection(self, payload: Any) -> list[Record]:
        items = payload.get(self._route.collection_key) if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise ParseError(f"Response is missing '{self._route.collection_key}'")
        return normalize_documents(items)

    def _item(self, payload: Any) -> Record:
        item = payload.get(self._route.item_key) if isinstance(payload, dict) else None
        if not isinstance(item, dict):
            raise ParseError(f"Response is missing '{self._route.item_key}'")
        return normalize_document(item)

    async def _async_fetch(self, params: dict[str, Any]) -> list[Record]:
        payload = await self._client.async_get(self._route.path, params=params)
        # The mirrored copies carry any ids the store had to assign.
        return await self._local.store.async_upsert_many(self._collection(payload))

    async def async_list(self, order: str | None = None, limit: int | None = None) -> list[Record]:
        async def _remote() -> list[Record]:
            records = await self._async_fetch(_paging(self._route.list_params, order, limit))
            return apply_query(records, order=order, limit=limit)

        return await safe_remote_call(
            self._client.remote_enabled,
            lambda: self._local.async_list(order, limit),
            _remote,
        )

    async def async_filter(
        self,
        criteria: Mapping[str, Any],
        order: str | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        async def _remote() -> list[Record]:
            params = {
                **_paging(self._route.filter_params, order, limit),
                **self._route.criteria_params(criteria),
            }
            records = await self._async_fetch(params)
            return apply_query(records, criteria=criteria, order=order, limit=limit)

        return await safe_remote_call(
            self._client.remote_enabled,
            lambda: self._local.async_filter(criteria, order, limit),
            _remote,
        )

    async def async_create(self, record: Mapping[str, Any]) -> Record:
        if not self.supports_create:
            raise UnsupportedOperation(self.entity_type, "create")

        async def _remote() -> Record:
            payload = await self._client.async_post(self._route.path, dict(record))
            created = self._item(payload)
            return await self._local.store.async_upsert(created)

        return await safe_remote_call(
            self._client.remote_enabled,
            lambda: self._local.async_create(record),
            _remote,
        )

    async def async_update(self, record_id: str, patch: Mapping[str, Any]) -> Record | None:
        if not self.supports_update:
            raise UnsupportedOperation(self.entity_type, "update")

        async def _remote() -> Record | None:
            item_path = f"{self._route.path}/{quote(str(record_id), safe='')}"
            if self._route.read_shortcut and patch.get("read") is True:
                payload = await self._client.async_patch(f"{item_path}/read")
            else:
                payload = await self._client.async_put(item_path, dict(patch))
            updated = self._item(payload)
            return await self._local.store.async_upsert(updated)

        return await safe_remote_call(
            self._client.remote_enabled,
            lambda: self._local.async_update(record_id, patch),
            _remote,
        )


def build_adapter_table(
    client: FitflowApiClient,
    stores: Mapping[EntityType, EntityStore],
) -> AdapterTable:
    """Bind every entity type once, local or remote, from the capability flag."""
    adapters: dict[EntityType, EntityAdapter] = {}
    for kind in EntityType:
        local = LocalEntityAdapter(stores[kind], kind)
        route = REMOTE_ROUTES.get(kind)
        remote = RemoteEntityAdapter(client, local, route) if route is not None else None
        adapters[kind] = select_adapter(kind, remote_enabled=client.remote_enabled, local=local, remote=remote)
    return AdapterTable(adapters)
