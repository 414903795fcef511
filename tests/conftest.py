import pytest
from fastapi.testclient import TestClient

from contact_api.config import Settings
from contact_api.main import app
from contact_api.photos import InlinePhotoStore, get_photo_store
from contact_api.rate_limit import SlidingWindowRateLimiter, get_rate_limiter
from contact_api.sinks import ContactSink, get_contact_sink


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)  # type: ignore


class RecordingSink(ContactSink):
    name = "recording"
    unavailable_message = "Email service is not configured. Please contact us directly."

    def __init__(self, configured: bool = True, result: bool = True):
        self._configured = configured
        self.result = result
        self.delivered = []

    @property
    def configured(self) -> bool:
        return self._configured

    def deliver(self, submission) -> bool:
        self.delivered.append(submission)
        return self.result


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def limiter():
    return SlidingWindowRateLimiter(window_ms=60_000, max_requests=5)


@pytest.fixture
def photo_store():
    return InlinePhotoStore()


@pytest.fixture
def client(sink, limiter, photo_store):
    app.dependency_overrides[get_contact_sink] = lambda: sink
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_photo_store] = lambda: photo_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
