from __future__ import annotations

import pytest

from custom_components.fitflow.errors import ConfigurationError, ParseError
from custom_components.fitflow.runtime import FitflowRuntime

from .conftest import FakeHttpSession


@pytest.mark.asyncio
async def test_coach_needs_the_service(offline_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    with pytest.raises(ConfigurationError):
        await offline_runtime.coach.async_ask_coach("How do I deadlift?")
    with pytest.raises(ConfigurationError):
        await offline_runtime.coach.async_generate_meal_plan(calorie_target=2000)
    assert http.calls == []


@pytest.mark.asyncio
async def test_ask_coach_posts_the_question(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    await remote_runtime.session.async_establish("tok-1", {"id": "u-1"})
    http.reply(
        "POST",
        "/ai/coach",
        {"answer": "Brace first.", "tips": ["Neutral spine"], "follow_up_prompt": "Want a warm-up?"},
    )

    reply = await remote_runtime.coach.async_ask_coach("How do I deadlift?")

    assert reply["answer"] == "Brace first."
    assert reply["tips"] == ["Neutral spine"]
    assert http.calls[0]["json"] == {"question": "How do I deadlift?"}
    assert http.calls[0]["headers"]["Authorization"] == "Bearer tok-1"


@pytest.mark.asyncio
async def test_meal_plan_sends_only_given_targets(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.reply(
        "POST",
        "/ai/meal-plan",
        {"meals": [{"name": "Oats"}], "grocery_list": ["oats"], "total_cost_estimate": 12.5},
    )

    plan = await remote_runtime.coach.async_generate_meal_plan("vegetarian", calorie_target=2200, protein_target=140)

    assert plan["total_cost_estimate"] == 12.5
    assert http.calls[0]["json"] == {
        "dietaryPreference": "vegetarian",
        "calorieTarget": 2200,
        "proteinTarget": 140,
    }


@pytest.mark.asyncio
async def test_coach_rejects_non_object_reply(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.reply("POST", "/ai/coach", ["not", "an", "object"])
    with pytest.raises(ParseError):
        await remote_runtime.coach.async_ask_coach("Hi")
