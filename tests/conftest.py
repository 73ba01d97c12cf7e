from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from pastebin.config import settings
from pastebin.database import InMemoryStore, get_store
from pastebin.expiration import ExpirationPolicy
from pastebin.ids import IdGenerator
from pastebin.main import app
from pastebin.service import PasteService

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def to_ms(moment: datetime) -> str:
    return str(int(moment.timestamp() * 1000))


class StubIdGenerator:
    """Hands out a fixed sequence of candidate IDs."""

    def __init__(self, ids):
        self.ids = list(ids)
        self.calls = 0

    def generate(self) -> str:
        candidate = self.ids[self.calls]
        self.calls += 1
        return candidate


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def service(store: InMemoryStore) -> PasteService:
    return PasteService(store, IdGenerator(), ExpirationPolicy())


@pytest.fixture
def client(store: InMemoryStore, monkeypatch):
    """
    TestClient wired to a fresh in-memory store, with TEST_MODE on so the
    x-test-now-ms header drives the clock.
    """
    monkeypatch.setattr(settings, "TEST_MODE", True)
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
