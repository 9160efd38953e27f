"""Shared fixtures for trustgate tests."""

import pytest
from trustgate.cache import InMemoryTTLCache
from trustgate.config import TrustgateConfig


class FakeClock:
    """Manually advanced unix clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeReputation:
    """In-memory stand-in for the networked reputation client."""

    def __init__(
        self,
        disposable: set[str] | None = None,
        no_mx: set[str] | None = None,
    ):
        self.disposable = disposable or set()
        self.no_mx = no_mx or set()
        self.disposable_calls: list[str] = []
        self.mx_calls: list[str] = []

    async def is_disposable(self, domain: str) -> bool:
        self.disposable_calls.append(domain)
        return domain in self.disposable

    async def has_mail_exchanger(self, domain: str) -> bool:
        self.mx_calls.append(domain)
        return domain not in self.no_mx


@pytest.fixture
def clock() -> FakeClock:
    """A fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryTTLCache:
    """In-memory cache driven by the fake clock."""
    return InMemoryTTLCache(clock=clock)


@pytest.fixture
def reputation() -> FakeReputation:
    """Reputation source with one remotely-known disposable domain."""
    return FakeReputation(disposable={"burner-remote.io"}, no_mx={"nomail.test"})


@pytest.fixture
def config() -> TrustgateConfig:
    """Default config, independent of the environment."""
    return TrustgateConfig()
