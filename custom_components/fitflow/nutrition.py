"""Meal scanning: remote food recognition, or a keyword estimate offline."""

from __future__ import annotations

from typing import Any

from .api import FitflowApiClient
from .const import DEFAULT_SCAN_TOP_K
from .dispatcher import safe_remote_call
from .storage import Record

# (keywords, result) pairs; the first three matches name the scanned meal.
FOOD_LIBRARY: tuple[tuple[tuple[str, ...], Record], ...] = (
    (("salmon", "fish"), {"id": "food-salmon", "name": "Grilled Salmon", "confidence": 0.91}),
    (("oat", "porridge"), {"id": "food-oats", "name": "Protein Oats Bowl", "confidence": 0.87}),
    (("yogurt", "parfait"), {"id": "food-yogurt", "name": "Greek Yogurt Parfait", "confidence": 0.84}),
    (("smoothie", "shake"), {"id": "food-smoothie", "name": "Recovery Smoothie", "confidence": 0.83}),
    (("chicken", "bowl"), {"id": "food-chicken", "name": "Power Chicken Bowl", "confidence": 0.86}),
    (("tofu", "plant"), {"id": "food-tofu", "name": "Tempeh Glow Bowl", "confidence": 0.8}),
    (("avocado", "toast"), {"id": "food-avocado", "name": "Avocado Toast", "confidence": 0.78}),
)

FALLBACK_FOODS: tuple[Record, ...] = (
    {"id": "food-balanced-bowl", "name": "Rainbow Macro Bowl", "confidence": 0.75},
    {"id": "food-protein-shake", "name": "Protein Shake", "confidence": 0.7},
)


def recognize_from_text(description: str, top_k: int = DEFAULT_SCAN_TOP_K) -> list[Record]:
    lower = description.lower()
    matches = [dict(result) for keywords, result in FOOD_LIBRARY if any(word in lower for word in keywords)]
    if not matches:
        matches = [dict(result) for result in FALLBACK_FOODS]
    return matches[: max(0, top_k)]


def estimate_analysis(foods: list[Record]) -> Record:
    names = [food["name"] for food in foods[:3]]
    return {
        "meal_name": f"AI Scan: {' + '.join(names[:2]) or 'Detected Meal'}",
        "description": f"Estimated from detected foods: {', '.join(names) or 'mixed ingredients'}",
        "calories": 420,
        "protein": 28,
        "carbs": 42,
        "fat": 15,
        "healthy_alternatives": [
            "Add a vegetable side for fiber and micronutrients",
            "Prefer grilled or baked prep methods when possible",
        ],
        "nutrition_tips": [
            "Use AI scan values as estimates and adjust with manual logs",
            "Pair this meal with water to support digestion and satiety",
        ],
    }


def _coerce_food(raw: Any) -> Record | None:
    if not isinstance(raw, dict):
        return None
    confidence = raw.get("confidence")
    if confidence is None:
        confidence = raw.get("value")
    try:
        score = float(confidence) if confidence is not None else 0.0
    except (TypeError, ValueError):
        score = 0.0
    return {**raw, "confidence": score}


class MealScanner:
    def __init__(self, client: FitflowApiClient) -> None:
        self._client = client

    async def async_scan_meal(self, image_url: str | None = None, top_k: int = DEFAULT_SCAN_TOP_K) -> Record:
        async def _local() -> Record:
            foods = recognize_from_text(image_url or "user meal", top_k)
            return {"foods": foods, "analysis": estimate_analysis(foods)}

        async def _remote() -> Record:
            body: dict[str, Any] = {"topK": top_k}
            if image_url:
                body["imageUrl"] = image_url
            payload = await self._client.async_post("/nutrition/recognize", body)
            payload = payload if isinstance(payload, dict) else {}
            foods = [food for food in map(_coerce_food, payload.get("foods") or []) if food is not None]
            return {"foods": foods, "analysis": payload.get("analysis")}

        return await safe_remote_call(self._client.remote_enabled, _local, _remote)

    async def async_recognize_food(self, image_url: str | None = None, top_k: int = DEFAULT_SCAN_TOP_K) -> list[Record]:
        result = await self.async_scan_meal(image_url, top_k)
        return result["foods"]
