# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from civictrack.core.settings import Settings
from civictrack.db.session import create_tables, drop_tables, make_engine, make_session_factory
from civictrack.main import create_app
from civictrack.storage import MemStorage, SqlStorage, Storage

TEST_DB_URL = "sqlite://"


class TickingClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 5, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture()
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture()
def mem_storage(clock: TickingClock) -> MemStorage:
    """Fresh in-memory storage per test."""
    return MemStorage(clock=clock)


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = make_engine(TEST_DB_URL)
    create_tables(engine)
    try:
        yield engine
    finally:
        drop_tables(engine)
        engine.dispose()


@pytest.fixture()
def sql_storage(engine: Engine, clock: TickingClock) -> SqlStorage:
    """SQL storage over a private in-memory SQLite database."""
    return SqlStorage(make_session_factory(engine), clock=clock)


@pytest.fixture(params=["memory", "sql"])
def storage(request: pytest.FixtureRequest) -> Storage:
    """Run storage contract tests against every backend."""
    if request.param == "memory":
        return request.getfixturevalue("mem_storage")
    return request.getfixturevalue("sql_storage")


@pytest.fixture()
def test_settings() -> Settings:
    """Provide settings with administration left open."""
    return Settings(STORAGE_BACKEND="memory", ADMIN_TOKEN=None, LOG_LEVEL="WARNING")


@pytest.fixture()
def app(test_settings: Settings, mem_storage: MemStorage) -> FastAPI:
    return create_app(settings=test_settings, storage=mem_storage)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def issue_payload() -> Callable[..., dict[str, Any]]:
    """Return a factory for valid issue creation bodies."""

    def _build(**overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": "Pothole on Main Street",
            "description": "Deep pothole in the right lane near the bakery",
            "category": "roads",
            "latitude": 40.0,
            "longitude": -74.0,
            "address": "12 Main Street",
            "images": ["pothole-1.jpg"],
        }
        payload.update(overrides)
        return payload

    return _build


@pytest.fixture()
def created_issue(client: TestClient, issue_payload: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    """Create an issue through the API and return its JSON body."""
    response = client.post("/api/issues", json=issue_payload())
    assert response.status_code == 201
    return response.json()


@pytest.fixture()
def registered_user(client: TestClient) -> dict[str, Any]:
    """Register a user through the API and return its JSON body."""
    response = client.post(
        "/api/users",
        json={"username": "alice", "email": "alice@example.org"},
    )
    assert response.status_code == 201
    return response.json()
