"""Shared fixtures."""
import pytest

from keepalive.services import pinger as pinger_module
from keepalive.services.pinger import Pinger
from keepalive.services.stats_log import StatsLog

from .helpers import TARGET_URL, FakeClock, client_factory_for


@pytest.fixture(autouse=True)
def no_cooldown(monkeypatch):
    monkeypatch.setattr(pinger_module, "RETRY_COOLDOWN_SECONDS", 0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stats():
    return StatsLog()


@pytest.fixture
def make_pinger(stats, clock):
    def _make(target) -> Pinger:
        return Pinger(stats, TARGET_URL, client_factory=client_factory_for(target), clock=clock)
    return _make
