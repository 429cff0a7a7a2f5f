"""Personalized plan synthesis.

The offline path derives plans from the bundled default plan; the remote path
asks the service and mirrors what it returns. Either way every generated or
adjusted plan is stored as a new history entry, and the current plan is the
one with the greatest ``updatedAt``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .api import FitflowApiClient
from .const import (
    DEFAULT_ADJUSTMENT_PURPOSE,
    DEFAULT_GENERATION_REASON,
    DEMO_TOKEN,
    SNACK_ESTIMATE,
)
from .dispatcher import safe_remote_call
from .errors import ParseError
from .library import SeedLibrary
from .normalize import normalize_document
from .session import SessionHolder
from .storage import EntityStore, Record, clone, now_iso

_LOGGER = logging.getLogger(__name__)


def build_offline_plan(template: Mapping[str, Any], reason: str | None = None, *, timestamp: str | None = None) -> Record:
    """Return a fresh plan derived from ``template`` (the template is not touched).

    The id is dropped so the store assigns a new one.
    """
    ts = timestamp or now_iso()
    why = reason or DEFAULT_GENERATION_REASON
    plan = clone(dict(template))
    plan.pop("id", None)
    plan["source"] = "fallback"
    plan["generated_reason"] = why
    plan["createdAt"] = ts
    plan["updatedAt"] = ts
    plan["metadata"] = {
        **(plan.get("metadata") or {}),
        "last_generated_reason": why,
        "demo": True,
    }
    return plan


def snack_for(food: str, purpose: str | None = None) -> Record:
    return {
        "name": food,
        "meal_type": "custom",
        **SNACK_ESTIMATE,
        "ingredients": [food],
        "notes": f"Added by user preference ({purpose or DEFAULT_ADJUSTMENT_PURPOSE}).",
    }


def apply_nutrition_adjustment(
    plan: Mapping[str, Any],
    foods: Iterable[str],
    purpose: str | None = None,
    *,
    timestamp: str | None = None,
) -> Record:
    """Add one estimated snack per food to a copy of ``plan``.

    With k foods the snack list grows by k and the calorie target by
    ``SNACK_ESTIMATE["calories"] * k``. Prior snacks and guidance are kept.
    """
    names = [str(food) for food in foods]
    base = clone(dict(plan))
    nutrition = dict(base.get("nutrition_plan") or {})
    additions = [snack_for(name, purpose) for name in names]

    nutrition["snacks"] = [*(nutrition.get("snacks") or []), *additions]
    nutrition["guidance"] = [
        *(nutrition.get("guidance") or []),
        f"Plan tuned with user foods: {', '.join(names)}.",
    ]
    nutrition["calories_target"] = (nutrition.get("calories_target") or 0) + sum(
        snack["calories"] for snack in additions
    )

    previous_id = base.pop("id", None)
    base["nutrition_plan"] = nutrition
    base["updatedAt"] = timestamp or now_iso()
    base["metadata"] = {
        **(base.get("metadata") or {}),
        "adjusted_from": previous_id,
        "last_adjustment_reason": purpose or DEFAULT_ADJUSTMENT_PURPOSE,
        "last_adjustment_foods": names,
    }
    return base


def _plan_from(payload: Any) -> Record:
    plan = payload.get("plan") if isinstance(payload, dict) else None
    if not isinstance(plan, dict):
        raise ParseError("Response is missing 'plan'")
    return normalize_document(plan)


class PersonalizationSynthesizer:
    """Produces and tunes the personalized plan for the signed-in user."""

    def __init__(
        self,
        store: EntityStore,
        client: FitflowApiClient,
        session: SessionHolder,
        library: SeedLibrary,
    ) -> None:
        self._store = store
        self._client = client
        self._session = session
        self._library = library

    async def _async_latest_local(self) -> Record:
        plans = await self._store.async_list("-updatedAt", 1)
        if plans:
            return plans[0]
        return self._library.default_plan()

    async def _async_mirror(self, payload: Any, *, default_source: str | None = None) -> Record:
        plan = _plan_from(payload)
        if default_source is not None:
            plan.setdefault("source", default_source)
        return await self._store.async_upsert(plan)

    async def async_get_latest(self) -> Record:
        async def _remote() -> Record:
            return await self._async_mirror(await self._client.async_get("/personalization"))

        return await safe_remote_call(self._client.remote_enabled, self._async_latest_local, _remote)

    async def async_generate(self, reason: str | None = None) -> Record:
        async def _local() -> Record:
            plan = build_offline_plan(self._library.default_plan(), reason)
            created = await self._store.async_create(plan)
            _LOGGER.debug("Generated offline plan %s (%s)", created["id"], created["generated_reason"])
            return created

        async def _remote() -> Record:
            payload = await self._client.async_post("/personalization/generate", {"reason": reason})
            return await self._async_mirror(payload, default_source="external")

        return await safe_remote_call(self._client.remote_enabled, _local, _remote)

    async def async_adjust_nutrition(self, foods: Iterable[str], purpose: str | None = None) -> Record:
        names = [str(food) for food in foods]

        async def _local() -> Record:
            latest = await self._async_latest_local()
            return await self._store.async_create(apply_nutrition_adjustment(latest, names, purpose))

        async def _remote() -> Record:
            body: dict[str, Any] = {"foods": names}
            if purpose is not None:
                body["purpose"] = purpose
            payload = await self._client.async_post("/personalization/nutrition/adjust", body)
            return await self._async_mirror(payload)

        return await safe_remote_call(self._client.remote_enabled, _local, _remote)

    async def async_update_intake(self, profile: Mapping[str, Any]) -> Record:
        """Merge intake answers into the session user; the plan is not touched."""
        await self._session.async_load()

        async def _local() -> Record:
            current = self._session.current
            token = current.token if current else DEMO_TOKEN
            user = current.user if current else self._library.demo_user()
            updated = {**user, **clone(dict(profile)), "profile_completed": True}
            session = await self._session.async_establish(token, updated)
            return session.user

        async def _remote() -> Record:
            payload = await self._client.async_post("/personalization/intake", clone(dict(profile)))
            user = payload.get("user") if isinstance(payload, dict) else None
            if not isinstance(user, dict):
                raise ParseError("Response is missing 'user'")
            session = await self._session.async_establish(self._session.token or DEMO_TOKEN, user)
            return session.user

        return await safe_remote_call(self._client.remote_enabled, _local, _remote)
