"""Test fixtures for web backend tests."""

from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient

from dubdesk.config import Config
from dubdesk.review import QueryCache
from dubdesk.web.backend import dependencies
from dubdesk.web.backend.app import create_app
from dubdesk.web.backend.config import WebConfig
from dubdesk.web.backend.services.session_registry import SessionRegistry


@pytest.fixture
def web_config() -> WebConfig:
    """Create a test web configuration."""
    return WebConfig(cors_origins=["http://localhost:5173"], max_sessions=5)


@pytest.fixture
def registry(remote, test_config: Config) -> SessionRegistry:
    """Session registry wired to the in-memory remote."""
    # Requests below must not race the auto-save timer
    test_config.review.autosave_delay_seconds = 60
    return SessionRegistry(remote.client(), QueryCache(), test_config, max_sessions=5)


@pytest.fixture
def test_client(
    web_config: WebConfig,
    registry: SessionRegistry,
    remote,
) -> Generator[TestClient, None, None]:
    """Create a test client with dependency overrides."""
    dependencies.get_config.cache_clear()
    dependencies.get_app_config.cache_clear()
    dependencies.get_cache.cache_clear()
    dependencies.get_sync_client.cache_clear()
    dependencies.get_session_registry.cache_clear()

    app = create_app(web_config)
    app.dependency_overrides[dependencies.get_config] = lambda: web_config
    app.dependency_overrides[dependencies.get_session_registry] = lambda: registry
    app.dependency_overrides[dependencies.get_sync_client] = lambda: registry.sync

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def open_body(documents: list[dict[str, Any]]) -> dict[str, Any]:
    """Request body that opens a transcriber session over the sample episode."""
    return {
        "project_id": "proj-1",
        "database_name": "studio_db",
        "collection_name": "episode_1",
        "username": "ana",
        "role": "transcriber",
        "dialogues": documents,
    }


@pytest.fixture
def open_session(test_client: TestClient, open_body: dict[str, Any]):
    """Open a session and return its id."""

    def factory(**overrides: Any) -> str:
        response = test_client.post("/api/v1/sessions", json={**open_body, **overrides})
        assert response.status_code == 201, response.text
        return response.json()["session_id"]

    return factory
