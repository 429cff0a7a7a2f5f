"""AI coaching endpoints. These exist only on the remote service."""

from __future__ import annotations

from typing import Any

from .api import FitflowApiClient
from .errors import ParseError


def _object(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ParseError("Response is not an object")
    return payload


class AICoach:
    def __init__(self, client: FitflowApiClient) -> None:
        self._client = client

    async def async_ask_coach(self, question: str) -> dict[str, Any]:
        """Return ``answer`` and ``tips``, plus ``recommended_exercises`` and ``follow_up_prompt`` when sent."""
        return _object(await self._client.async_post("/ai/coach", {"question": question}))

    async def async_generate_meal_plan(
        self,
        dietary_preference: str | None = None,
        calorie_target: float | None = None,
        protein_target: float | None = None,
        carbs_target: float | None = None,
        fat_target: float | None = None,
    ) -> dict[str, Any]:
        body = {
            "dietaryPreference": dietary_preference,
            "calorieTarget": calorie_target,
            "proteinTarget": protein_target,
            "carbsTarget": carbs_target,
            "fatTarget": fat_target,
        }
        # Unset targets are left to the service's defaults.
        body = {key: value for key, value in body.items() if value is not None}
        return _object(await self._client.async_post("/ai/meal-plan", body))
