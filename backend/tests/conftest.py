"""Pytest configuration and fixtures."""
import random
from datetime import datetime, timezone
from typing import Callable

import httpx
import pytest
from fastapi import FastAPI

from usagehook.services.dispatcher import UsageHookClient
from usagehook.services.generator import UsageEventGenerator
from usagehook.sink import HOOK_PATH, create_app

TEST_ENDPOINT = "http://hook.test/api/usage/hook"
SINK_ENDPOINT = f"http://sink.test{HOOK_PATH}"
FIXED_NOW = datetime(2025, 8, 5, 12, 0, 0, 123000, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def rng() -> random.Random:
    """Seeded random source so generated values are reproducible."""
    return random.Random(20250805)


@pytest.fixture(scope="function")
def fixed_clock() -> Callable[[], datetime]:
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture(scope="function")
def generator(rng: random.Random, fixed_clock: Callable[[], datetime]) -> UsageEventGenerator:
    """
    Generator with seeded randomness and a frozen clock.

    Returns:
        UsageEventGenerator: Deterministic generator
    """
    return UsageEventGenerator(rng=rng, clock=fixed_clock)


@pytest.fixture(scope="function")
def mock_client() -> Callable[..., UsageHookClient]:
    """
    Factory for clients backed by httpx.MockTransport.

    Returns:
        Callable taking a request handler and optional client kwargs
    """

    def _build(handler: Callable, **kwargs) -> UsageHookClient:
        kwargs.setdefault("endpoint_url", TEST_ENDPOINT)
        return UsageHookClient(transport=httpx.MockTransport(handler), **kwargs)

    return _build


@pytest.fixture(scope="function")
def sink_app() -> FastAPI:
    """Fresh local sink app with an empty delivery log."""
    return create_app()


@pytest.fixture(scope="function")
def sink_client(sink_app: FastAPI) -> UsageHookClient:
    """
    Client wired to the local sink through an ASGI transport.

    Returns:
        UsageHookClient: Client posting into ``sink_app``
    """
    return UsageHookClient(
        endpoint_url=SINK_ENDPOINT,
        transport=httpx.ASGITransport(app=sink_app),
    )


@pytest.fixture(scope="function")
def recorded_sleeps() -> list[float]:
    return []


@pytest.fixture(scope="function")
def fake_sleep(recorded_sleeps: list[float]) -> Callable:
    """Async sleep replacement that records requested delays."""

    async def _sleep(seconds: float) -> None:
        recorded_sleeps.append(seconds)

    return _sleep
