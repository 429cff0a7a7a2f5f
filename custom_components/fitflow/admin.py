"""Read-only user administration."""

from __future__ import annotations

from urllib.parse import quote

from .adapters import EntityAdapter
from .api import FitflowApiClient
from .errors import ParseError
from .normalize import normalize_document, normalize_documents
from .storage import Record


class AdminService:
    def __init__(
        self,
        client: FitflowApiClient,
        workouts: EntityAdapter,
        meals: EntityAdapter,
        recovery: EntityAdapter,
    ) -> None:
        self._client = client
        self._workouts = workouts
        self._meals = meals
        self._recovery = recovery

    async def async_list_users(self) -> list[Record]:
        if not self._client.remote_enabled:
            return []
        payload = await self._client.async_get("/admin/users")
        users = payload.get("users") if isinstance(payload, dict) else None
        if not isinstance(users, list):
            raise ParseError("Response is missing 'users'")
        return normalize_documents(users)

    async def async_get_user_summary(self, user_id: str) -> Record:
        """Activity counts and the latest recovery score for one user.

        Offline there is a single local user, so ``user_id`` is not consulted.
        """
        if not self._client.remote_enabled:
            workouts = await self._workouts.async_list()
            meals = await self._meals.async_list()
            recovery = await self._recovery.async_list("-date", 1)
            return {
                "metrics": {
                    "workouts": len(workouts),
                    "meals": len(meals),
                    "latestRecovery": recovery[0] if recovery else None,
                }
            }

        summary = await self._client.async_get(f"/admin/users/{quote(str(user_id), safe='')}/summary")
        if not isinstance(summary, dict):
            raise ParseError("Response is not an object")
        metrics = summary.get("metrics")
        if isinstance(metrics, dict) and isinstance(metrics.get("latestRecovery"), dict):
            metrics["latestRecovery"] = normalize_document(metrics["latestRecovery"])
        return summary
