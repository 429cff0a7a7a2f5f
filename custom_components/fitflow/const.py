"""Constants for the FitFlow data layer integration."""

from __future__ import annotations

from enum import StrEnum

from homeassistant.const import Platform

DOMAIN = "fitflow"

PLATFORMS: list[Platform] = [
    Platform.BUTTON,
    Platform.SENSOR,
]

CONF_NAME = "name"
CONF_API_URL = "api_url"

DEFAULT_NAME = "FitFlow"
DEFAULT_API_URL = ""

STORAGE_PREFIX = "fitflow"
STORAGE_VERSION = 1
AUTH_KEY = "auth"

DEMO_TOKEN = "demo-token"
OFFLINE_USER_ID = "user-offline"

DEFAULT_GENERATION_REASON = "demo-refresh"
DEFAULT_ADJUSTMENT_PURPOSE = "custom"
DEFAULT_MOOD_LIMIT = 21
DEFAULT_SCAN_TOP_K = 5

# Per-item estimate used when foods are folded into a plan offline.
SNACK_ESTIMATE = {
    "calories": 220,
    "protein": 15,
    "carbs": 20,
    "fat": 7,
    "fiber": 4,
}


class EntityType(StrEnum):
    """Entity types served by the data layer."""

    WORKOUT_SESSION = "WorkoutSession"
    NUTRITION_LOG = "NutritionLog"
    SLEEP_LOG = "SleepLog"
    WATER_LOG = "WaterLog"
    AI_INSIGHT = "AIInsight"
    EXERCISE = "Exercise"
    WORKOUT_BUDDY = "WorkoutBuddy"
    CHALLENGE = "Challenge"
    ACHIEVEMENT = "Achievement"
    MEAL_PLAN = "MealPlan"
    RECOVERY_SCORE = "RecoveryScore"
    PERSONALIZED_PLAN = "PersonalizedPlan"
    MOOD_LOG = "MoodLog"


def storage_key(name: str, *, prefix: str = STORAGE_PREFIX) -> str:
    """Return the namespaced key a collection or the session is stored under."""
    return f"{prefix}:{name}"
