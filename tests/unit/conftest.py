"""Unit-specific fixtures (no I/O beyond respx-mocked HTTP)."""

from __future__ import annotations

import httpx
import pytest

from context7_relay.cache import Cache


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> Cache:
    return Cache(default_ttl=60.0, clock=clock)


@pytest.fixture()
async def http_client():
    async with httpx.AsyncClient() as client:
        yield client
