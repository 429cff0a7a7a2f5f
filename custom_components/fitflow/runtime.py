"""Composition root for one FitFlow data layer instance."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import aiohttp
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .adapters import build_adapter_table
from .admin import AdminService
from .api import FitflowApiClient
from .auth import AuthService
from .coach import AICoach
from .const import CONF_API_URL, DEFAULT_API_URL, STORAGE_PREFIX, EntityType
from .dispatcher import AdapterTable
from .library import SeedLibrary
from .mood import MoodJournal
from .nutrition import MealScanner
from .personalization import PersonalizationSynthesizer
from .session import SessionHolder
from .storage import EntityStore, HassStorageMedium, StorageMedium

_LOGGER = logging.getLogger(__name__)


def api_url_from_entry(entry: ConfigEntry) -> str:
    data = entry.data or {}
    opts = entry.options or {}
    return str(opts.get(CONF_API_URL, data.get(CONF_API_URL, DEFAULT_API_URL)) or "").strip()


@dataclass(slots=True)
class FitflowRuntime:
    """Everything one entry needs, bound once at setup."""

    medium: StorageMedium
    library: SeedLibrary
    stores: dict[EntityType, EntityStore]
    session: SessionHolder
    client: FitflowApiClient
    entities: AdapterTable
    auth: AuthService
    personalization: PersonalizationSynthesizer
    mood: MoodJournal
    meals: MealScanner
    admin: AdminService
    coach: AICoach

    @property
    def remote_enabled(self) -> bool:
        return self.client.remote_enabled

    @property
    def mode(self) -> str:
        return "remote" if self.remote_enabled else "local"

    @classmethod
    async def async_create(
        cls,
        medium: StorageMedium,
        *,
        http_session: aiohttp.ClientSession | Any | None = None,
        api_url: str | None = None,
        library: SeedLibrary | None = None,
        prefix: str = STORAGE_PREFIX,
    ) -> FitflowRuntime:
        library = library or SeedLibrary()
        await library.async_load()

        stores = {
            kind: EntityStore(medium, kind.value, library.collection(kind), prefix=prefix)
            for kind in EntityType
        }
        session = SessionHolder(medium, prefix=prefix)
        await session.async_load()
        client = FitflowApiClient(http_session, api_url, session)
        entities = build_adapter_table(client, stores)
        _LOGGER.debug("FitFlow data layer bound in %s mode", "remote" if client.remote_enabled else "local")

        return cls(
            medium=medium,
            library=library,
            stores=stores,
            session=session,
            client=client,
            entities=entities,
            auth=AuthService(client, session, library),
            personalization=PersonalizationSynthesizer(
                stores[EntityType.PERSONALIZED_PLAN], client, session, library
            ),
            mood=MoodJournal(stores[EntityType.MOOD_LOG], client),
            meals=MealScanner(client),
            admin=AdminService(
                client,
                entities[EntityType.WORKOUT_SESSION],
                entities[EntityType.NUTRITION_LOG],
                entities[EntityType.RECOVERY_SCORE],
            ),
            coach=AICoach(client),
        )

    def store(self, kind: EntityType | str) -> EntityStore:
        return self.stores[EntityType(kind)]

    def adapter_modes(self) -> Mapping[str, str]:
        return self.entities.modes()


async def async_build_runtime(hass: HomeAssistant, entry: ConfigEntry) -> FitflowRuntime:
    """Bind a runtime to the entry's ``.storage`` files and HA's shared HTTP session."""
    api_url = api_url_from_entry(entry)
    return await FitflowRuntime.async_create(
        HassStorageMedium(hass, entry.entry_id),
        http_session=async_get_clientsession(hass) if api_url else None,
        api_url=api_url,
    )
