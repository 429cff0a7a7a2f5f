from __future__ import annotations

import pytest

from custom_components.fitflow.const import EntityType
from custom_components.fitflow.nutrition import recognize_from_text
from custom_components.fitflow.runtime import FitflowRuntime

from .conftest import FakeHttpSession


@pytest.mark.asyncio
async def test_mood_list_is_newest_first(offline_runtime: FitflowRuntime) -> None:
    moods = await offline_runtime.mood.async_list()
    assert [mood["id"] for mood in moods] == ["mood-1", "mood-2", "mood-3"]
    assert len(await offline_runtime.mood.async_list(2)) == 2


@pytest.mark.asyncio
async def test_mood_create_fills_defaults(offline_runtime: FitflowRuntime) -> None:
    entry = await offline_runtime.mood.async_create({"note": "solid day", "energy_level": "high"})

    assert entry["mood"] == "balanced"
    assert entry["energy_level"] == "high"
    assert entry["stress_level"] == "moderate"
    assert entry["sleep_quality"] == "good"
    assert entry["tags"] == []
    assert entry["note"] == "solid day"
    assert "custom_mood" not in entry
    assert entry["id"].startswith("MoodLog-")

    latest = await offline_runtime.mood.async_latest()
    assert latest["id"] == entry["id"]


@pytest.mark.asyncio
async def test_remote_mood_list_mirrors(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.reply(
        "GET",
        "/mood",
        {
            "moods": [
                {"_id": "m-a", "mood": "calm", "createdAt": "2025-05-01T08:00:00+00:00"},
                {"_id": "m-b", "mood": "tired", "createdAt": "2025-05-02T08:00:00+00:00"},
            ]
        },
    )
    moods = await remote_runtime.mood.async_list(5)
    assert [mood["id"] for mood in moods] == ["m-b", "m-a"]
    assert http.calls[0]["params"] == {"limit": "5"}
    stored = await remote_runtime.store(EntityType.MOOD_LOG).async_filter({"id": "m-a"})
    assert stored[0]["mood"] == "calm"


def test_keyword_recognition() -> None:
    foods = recognize_from_text("Salmon with avocado toast")
    assert [food["name"] for food in foods] == ["Grilled Salmon", "Avocado Toast"]
    assert [food["name"] for food in recognize_from_text("mystery stew")] == ["Rainbow Macro Bowl", "Protein Shake"]
    assert len(recognize_from_text("chicken bowl with oat and fish", top_k=1)) == 1


@pytest.mark.asyncio
async def test_offline_meal_scan(offline_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    result = await offline_runtime.meals.async_scan_meal("https://img.example/salmon-bowl.jpg")
    names = [food["name"] for food in result["foods"]]
    assert names == ["Grilled Salmon", "Power Chicken Bowl"]
    assert result["analysis"]["meal_name"] == "AI Scan: Grilled Salmon + Power Chicken Bowl"
    assert result["analysis"]["calories"] == 420
    assert http.calls == []


@pytest.mark.asyncio
async def test_remote_meal_scan_coerces_confidence(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.reply(
        "POST",
        "/nutrition/recognize",
        {"foods": [{"id": "f1", "name": "Rice", "value": "0.5"}, {"id": "f2", "name": "Egg"}]},
    )
    foods = await remote_runtime.meals.async_recognize_food("https://img.example/x.jpg", 3)
    assert [food["confidence"] for food in foods] == [0.5, 0.0]
    assert http.calls[0]["json"] == {"topK": 3, "imageUrl": "https://img.example/x.jpg"}


@pytest.mark.asyncio
async def test_offline_admin(offline_runtime: FitflowRuntime) -> None:
    assert await offline_runtime.admin.async_list_users() == []
    summary = await offline_runtime.admin.async_get_user_summary("anyone")
    assert summary["metrics"]["workouts"] == 3
    assert summary["metrics"]["meals"] == 4
    assert summary["metrics"]["latestRecovery"]["id"] == "recovery-1"


@pytest.mark.asyncio
async def test_remote_admin_normalizes(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.reply("GET", "/admin/users", {"users": [{"_id": "u1", "email": "a@b.c"}]})
    http.reply(
        "GET",
        "/admin/users/u1/summary",
        {"metrics": {"workouts": 9, "meals": 2, "latestRecovery": {"_id": "r1", "user": {"_id": "u1"}}}},
    )
    assert await remote_runtime.admin.async_list_users() == [{"id": "u1", "email": "a@b.c"}]
    summary = await remote_runtime.admin.async_get_user_summary("u1")
    assert summary["metrics"]["latestRecovery"] == {"id": "r1", "user": "u1"}
