import pytest

from backend.cache import ResultCache
from backend.errors import ProviderFailure
from backend.models import PollutantReading
from backend.providers import ProviderAdapter
from backend.validation import validate_coordinates


class FakeProvider(ProviderAdapter):
    """Provider returning a fixed reading, recording every call."""

    def __init__(self, name, pm25=0.0, pm10=0.0, fail=False, error=None, call_log=None):
        super().__init__()
        self.name = name
        self.pm25 = pm25
        self.pm10 = pm10
        self.fail = fail
        self.error = error
        self.calls = 0
        self.call_log = call_log if call_log is not None else []

    async def fetch(self, session, coord):
        self.calls += 1
        self.call_log.append(self.name)
        if self.error is not None:
            raise self.error
        if self.fail:
            raise ProviderFailure(self.name, "unavailable")
        return PollutantReading(pm25=self.pm25, pm10=self.pm10, source=self.name,
                                observed_at="2024-06-08T12:00:00+00:00")


class Clock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def call_log():
    return []


@pytest.fixture
def make_provider(call_log):
    def _make(name, **kwargs):
        return FakeProvider(name, call_log=call_log, **kwargs)
    return _make


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def aqi_cache(clock):
    return ResultCache(300, name="aqi", clock=clock)


@pytest.fixture
def coord():
    return validate_coordinates("28.6139", "77.2090")
