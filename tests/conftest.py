import pytest
from fastapi.testclient import TestClient

from passport.db.store import build_store, get_optional_store, get_store
from passport.main import app
from passport.routers import analyze
from passport.services.rate_limiter import SlidingWindowRateLimiter


@pytest.fixture
def store():
    return build_store("sqlite://")


@pytest.fixture
def client(store, monkeypatch):
    monkeypatch.setattr(
        analyze, "limiter", SlidingWindowRateLimiter(max_requests=5, window_ms=60_000)
    )
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_optional_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
