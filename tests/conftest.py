import pytest

from src.registry.config import Settings
from src.registry.service import Registry


class FakeClock:
    def __init__(self, t: int = 0):
        self.t = t

    def now(self) -> int:
        return self.t


@pytest.fixture
def clock():
    return FakeClock(100)


@pytest.fixture
def registry(clock):
    return Registry(Settings(default_port=443, initial_ttl=60, expire_period=10), clock=clock)
