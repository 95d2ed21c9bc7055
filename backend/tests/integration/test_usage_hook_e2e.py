"""End-to-end tests: generated events delivered to the local sink."""
import httpx
import pytest
from fastapi import FastAPI
from structlog.testing import capture_logs

from usagehook.config import settings
from usagehook.runner import UsageRunner
from usagehook.services.dispatcher import UsageHookClient
from usagehook.services.generator import UsageEventGenerator
from usagehook.sink import HOOK_PATH


@pytest.mark.asyncio
async def test_light_event_delivered_once_with_version_header(
    generator: UsageEventGenerator,
    sink_client: UsageHookClient,
    sink_app: FastAPI,
) -> None:
    """Test that one generated light event reaches the sink with the version header and model."""
    event = generator.generate("debug_light", "light")

    with capture_logs() as logs:
        result = await sink_client.send(event)

    assert result.ok
    assert result.body == {"ok": True}

    deliveries = sink_app.state.deliveries
    assert len(deliveries) == 1
    assert deliveries[0]["cli_version"] == "0.2.9"
    assert deliveries[0]["body"]["model"] == settings.event_model
    assert deliveries[0]["body"]["twitter_handle"] == "debug_light"
    assert deliveries[0]["body"]["interaction_hash"] == event.interaction_hash

    responses = [entry for entry in logs if entry["event"] == "usage_hook_response"]
    assert len(responses) == 1
    assert responses[0]["status_code"] == 200


@pytest.mark.asyncio
async def test_sink_rejects_missing_version_header(sink_app: FastAPI) -> None:
    """Test that the sink answers 400 without X-CLI-Version."""
    transport = httpx.ASGITransport(app=sink_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://sink.test") as client:
        response = await client.post(HOOK_PATH, json={"model": "x"})

    assert response.status_code == 400
    assert sink_app.state.deliveries == []


@pytest.mark.asyncio
async def test_unknown_path_surfaces_as_http_status_error(
    generator: UsageEventGenerator,
    sink_client: UsageHookClient,
) -> None:
    """Test that a 404 from the sink comes back as a failed result with the body text."""
    result = await sink_client.send(generator.generate(), endpoint_url="http://sink.test/missing")

    assert not result.ok
    assert result.status_code == 404
    assert "404" in str(result.error)
    assert "Not Found" in str(result.error)


@pytest.mark.asyncio
async def test_sink_delivery_listing_and_clear(sink_client: UsageHookClient, sink_app: FastAPI, generator) -> None:
    """Test the delivery log endpoints."""
    await sink_client.send(generator.generate("a", "heavy"))
    await sink_client.send(generator.generate("b", "medium"))

    transport = httpx.ASGITransport(app=sink_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://sink.test") as client:
        listed = (await client.get("/deliveries")).json()
        health = (await client.get("/health")).json()
        cleared = (await client.delete("/deliveries")).json()

    assert [d["body"]["twitter_handle"] for d in listed["deliveries"]] == ["a", "b"]
    assert health["deliveries_received"] == 2
    assert cleared == {"cleared": 2}
    assert sink_app.state.deliveries == []


@pytest.mark.asyncio
async def test_batch_against_sink(sink_client: UsageHookClient, sink_app: FastAPI, generator, fake_sleep) -> None:
    """Test a full batch run landing distinct interactions in the sink."""
    runner = UsageRunner(client=sink_client, generator=generator, sleep=fake_sleep)

    summary = await runner.run_batch(runs=4, delay_seconds=0)

    assert summary.successes == 4
    bodies = [d["body"] for d in sink_app.state.deliveries]
    assert len({b["interaction_id"] for b in bodies}) == 4
    assert {b["model"] for b in bodies} == {settings.template_model}
    assert all(b["interaction_id"].startswith("int_") for b in bodies)
