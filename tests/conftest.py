"""Test fixtures for provider-sync."""

from datetime import datetime, timedelta, timezone

import pytest

from provider_sync.client import InMemoryClient
from provider_sync.config import SyncConfig

START_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock returning a fixed time that tests move forward explicitly."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(name="clock")
def clock_fixture() -> FakeClock:
    """Fake clock starting at a fixed time."""
    return FakeClock(START_TIME)


@pytest.fixture(name="config")
def config_fixture(clock: FakeClock) -> SyncConfig:
    """Synchronizer configuration using the fake clock."""
    return SyncConfig(clock=clock)


@pytest.fixture(name="client")
def client_fixture() -> InMemoryClient:
    """Create an in-memory client for testing."""
    return InMemoryClient()
