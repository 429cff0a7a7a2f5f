"""Adapter selection for the local and remote backends."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping
from typing import TYPE_CHECKING, TypeVar

from .const import EntityType

if TYPE_CHECKING:
    from .adapters import EntityAdapter

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


async def safe_remote_call(
    remote_enabled: bool,
    local: Callable[[], Awaitable[_T]],
    remote: Callable[[], Awaitable[_T]],
) -> _T:
    """Run exactly one of the two paths.

    The choice follows the capability flag only. A remote failure propagates to
    the caller; it never falls through to ``local``.
    """
    if not remote_enabled:
        return await local()
    return await remote()


class AdapterTable(Mapping[EntityType, "EntityAdapter"]):
    """Adapters bound once per runtime, one per entity type."""

    def __init__(self, adapters: Mapping[EntityType, EntityAdapter]) -> None:
        missing = [kind for kind in EntityType if kind not in adapters]
        if missing:
            raise ValueError(f"No adapter bound for: {', '.join(missing)}")
        self._adapters: dict[EntityType, EntityAdapter] = dict(adapters)

    def __getitem__(self, kind: EntityType | str) -> EntityAdapter:
        try:
            return self._adapters[EntityType(kind)]
        except ValueError as err:
            raise KeyError(kind) from err

    def __iter__(self) -> Iterator[EntityType]:
        return iter(self._adapters)

    def __len__(self) -> int:
        return len(self._adapters)

    def modes(self) -> dict[str, str]:
        return {str(kind): adapter.mode for kind, adapter in self._adapters.items()}


def select_adapter(
    kind: EntityType,
    *,
    remote_enabled: bool,
    local: EntityAdapter,
    remote: EntityAdapter | None,
) -> EntityAdapter:
    if remote_enabled and remote is not None:
        _LOGGER.debug("Binding %s to the remote service", kind)
        return remote
    _LOGGER.debug("Binding %s to local storage", kind)
    return local
