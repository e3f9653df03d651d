"""
Shared test fixtures.
"""

import pytest


class FakeClock:
    """Monotonic clock the tests can move forward."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    from secret_core.store import InMemorySecretStore

    return InMemorySecretStore(clock=clock)


@pytest.fixture
def outbox():
    from secret_core.delivery import OutboxMailer

    return OutboxMailer()
