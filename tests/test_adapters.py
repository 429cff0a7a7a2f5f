from __future__ import annotations

import aiohttp
import pytest

from custom_components.fitflow.adapters import LocalEntityAdapter, RemoteEntityAdapter
from custom_components.fitflow.const import EntityType
from custom_components.fitflow.dispatcher import AdapterTable, safe_remote_call
from custom_components.fitflow.errors import (
    ConfigurationError,
    ParseError,
    TransportError,
    UnsupportedOperation,
)
from custom_components.fitflow.runtime import FitflowRuntime
from custom_components.fitflow.websocket_api import async_update_result

from .conftest import FakeHttpSession


@pytest.mark.asyncio
async def test_safe_remote_call_runs_exactly_one_path() -> None:
    ran: list[str] = []

    async def _local() -> str:
        ran.append("local")
        return "local"

    async def _remote() -> str:
        ran.append("remote")
        raise TransportError("down", status=503)

    assert await safe_remote_call(False, _local, _remote) == "local"
    with pytest.raises(TransportError):
        await safe_remote_call(True, _local, _remote)
    assert ran == ["local", "remote"]


@pytest.mark.asyncio
async def test_offline_runtime_binds_everything_locally(offline_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    assert set(offline_runtime.adapter_modes().values()) == {"local"}

    for kind in EntityType:
        adapter = offline_runtime.entities[kind]
        await adapter.async_list("-date", 5)
        await adapter.async_filter({"date": "2025-01-06"})
        created = await adapter.async_create({"note": "offline"})
        await adapter.async_update(created["id"], {"note": "edited"})
    await offline_runtime.personalization.async_generate("test")
    await offline_runtime.auth.async_login()

    assert http.calls == []


@pytest.mark.asyncio
async def test_remote_runtime_binds_routed_types_remotely(remote_runtime: FitflowRuntime) -> None:
    modes = remote_runtime.adapter_modes()
    assert modes["WorkoutSession"] == "remote"
    assert modes["Challenge"] == "remote"
    assert modes["Exercise"] == "local"
    assert modes["PersonalizedPlan"] == "local"
    assert isinstance(remote_runtime.entities["Exercise"], LocalEntityAdapter)
    assert isinstance(remote_runtime.entities[EntityType.SLEEP_LOG], RemoteEntityAdapter)


def test_adapter_table_rejects_unknown_and_incomplete() -> None:
    with pytest.raises(ValueError):
        AdapterTable({})


@pytest.mark.asyncio
async def test_adapter_table_lookup_by_name(offline_runtime: FitflowRuntime) -> None:
    assert "NotAThing" not in offline_runtime.entities
    assert offline_runtime.entities.get("NotAThing") is None
    assert len(offline_runtime.entities) == len(EntityType)


@pytest.mark.asyncio
async def test_remote_list_sends_bearer_and_query_then_mirrors(
    remote_runtime: FitflowRuntime, http: FakeHttpSession
) -> None:
    await remote_runtime.session.async_establish("tok-123", {"id": "u-1"})
    http.reply(
        "GET",
        "/workouts",
        {
            "workouts": [
                {"_id": "r-1", "date": "2025-02-01", "user": {"_id": "u-1"}},
                {"_id": "r-2", "date": "2025-02-03", "user": {"_id": "u-1"}},
            ]
        },
    )

    records = await remote_runtime.entities[EntityType.WORKOUT_SESSION].async_list("-date", 10)

    assert [rec["id"] for rec in records] == ["r-2", "r-1"]
    assert records[0]["user"] == "u-1"
    call = http.calls[0]
    assert call["url"] == "https://api.fitflow.test/api/workouts"
    assert call["headers"]["Authorization"] == "Bearer tok-123"
    assert call["params"] == {"sort": "-date", "limit": "10"}

    mirrored = await remote_runtime.store(EntityType.WORKOUT_SESSION).async_filter({"id": "r-1"})
    assert mirrored[0]["date"] == "2025-02-01"


@pytest.mark.asyncio
async def test_remote_filter_reapplies_criteria(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.reply(
        "GET",
        "/sleep",
        {"logs": [{"id": "s-1", "date": "2025-01-06"}, {"id": "s-2", "date": "2025-01-05"}]},
    )
    records = await remote_runtime.entities[EntityType.SLEEP_LOG].async_filter({"date": "2025-01-06"})
    assert [rec["id"] for rec in records] == ["s-1"]
    assert http.calls[0]["params"]["date"] == "2025-01-06"
    assert "Authorization" not in http.calls[0]["headers"]


@pytest.mark.asyncio
async def test_non_success_status_raises_transport_error(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.reply("GET", "/sleep", {"message": "Token expired"}, status=401)
    with pytest.raises(TransportError) as err:
        await remote_runtime.entities[EntityType.SLEEP_LOG].async_list()
    assert str(err.value) == "Token expired"
    assert err.value.status == 401

    http.reply("GET", "/recovery", "", status=500)
    with pytest.raises(TransportError, match="Request failed with status 500"):
        await remote_runtime.entities[EntityType.RECOVERY_SCORE].async_list()


@pytest.mark.asyncio
async def test_remote_failure_does_not_fall_back_to_local(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.fail("GET", "/workouts", aiohttp.ClientConnectionError("refused"))
    with pytest.raises(TransportError) as err:
        await remote_runtime.entities[EntityType.WORKOUT_SESSION].async_list()
    assert err.value.status is None


@pytest.mark.asyncio
async def test_unparsable_body_raises_parse_error(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.reply("GET", "/insights", "<html>oops</html>")
    with pytest.raises(ParseError, match="Failed to parse response from server"):
        await remote_runtime.entities[EntityType.AI_INSIGHT].async_list()


@pytest.mark.asyncio
async def test_missing_collection_key_raises_parse_error(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.reply("GET", "/insights", {})
    with pytest.raises(ParseError):
        await remote_runtime.entities[EntityType.AI_INSIGHT].async_list()


@pytest.mark.asyncio
async def test_remote_create_mirrors_created_record(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.reply("POST", "/nutrition/logs", {"meal": {"_id": "m-9", "meal_name": "Oats"}})
    created = await remote_runtime.entities[EntityType.NUTRITION_LOG].async_create({"meal_name": "Oats"})

    assert created == {"id": "m-9", "meal_name": "Oats"}
    assert http.calls[0]["json"] == {"meal_name": "Oats"}
    local = await remote_runtime.store(EntityType.NUTRITION_LOG).async_list()
    assert local[0]["id"] == "m-9"


@pytest.mark.asyncio
async def test_insight_read_flag_uses_shortcut(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.reply("PATCH", "/insights/insight-1/read", {"insight": {"_id": "insight-1", "read": True}})
    updated = await remote_runtime.entities[EntityType.AI_INSIGHT].async_update("insight-1", {"read": True})
    assert updated["read"] is True
    assert http.calls[0]["method"] == "PATCH"


@pytest.mark.asyncio
async def test_remote_update_puts_patch(remote_runtime: FitflowRuntime, http: FakeHttpSession) -> None:
    http.reply("PUT", "/workouts/ws%2F1", {"workout": {"_id": "ws/1", "notes": "ok"}})
    updated = await remote_runtime.entities[EntityType.WORKOUT_SESSION].async_update("ws/1", {"notes": "ok"})
    assert updated == {"id": "ws/1", "notes": "ok"}
    assert http.calls[0]["json"] == {"notes": "ok"}


@pytest.mark.asyncio
async def test_unsupported_update_is_rejected_before_any_request(
    remote_runtime: FitflowRuntime, http: FakeHttpSession
) -> None:
    adapter = remote_runtime.entities[EntityType.SLEEP_LOG]
    assert adapter.supports_update is False
    with pytest.raises(UnsupportedOperation, match="SleepLog does not support update"):
        await adapter.async_update("sleep-1", {"duration_hours": 8})
    assert http.calls == []


@pytest.mark.asyncio
async def test_client_without_base_url_refuses_requests(offline_runtime: FitflowRuntime) -> None:
    with pytest.raises(ConfigurationError):
        await offline_runtime.client.async_get("/workouts")


@pytest.mark.asyncio
async def test_remote_records_without_id_come_back_with_the_mirrored_id(
    remote_runtime: FitflowRuntime, http: FakeHttpSession
) -> None:
    http.reply("GET", "/sleep", {"logs": [{"date": "2025-01-07", "duration_hours": 7}]})

    records = await remote_runtime.entities[EntityType.SLEEP_LOG].async_list()

    assert records[0]["id"].startswith("SleepLog-")
    mirrored = await remote_runtime.store(EntityType.SLEEP_LOG).async_filter({"id": records[0]["id"]})
    assert mirrored == records


@pytest.mark.asyncio
async def test_update_result_for_unknown_id_carries_no_record(offline_runtime: FitflowRuntime) -> None:
    result = await async_update_result(
        offline_runtime,
        {"entity_type": "WorkoutSession", "record_id": "missing", "patch": {"notes": "x"}},
    )
    assert result == {"entity_type": "WorkoutSession", "record": None}

    result = await async_update_result(
        offline_runtime,
        {"entity_type": "WorkoutSession", "record_id": "ws-1", "patch": {"notes": "x"}},
    )
    assert result["record"]["notes"] == "x"
