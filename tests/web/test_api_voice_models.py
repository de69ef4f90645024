"""Tests for the voice catalog endpoint and health check."""

import httpx
from fastapi.testclient import TestClient


class TestVoiceModelsAPI:
    """Tests for /api/v1/voice-models."""

    def test_list_voice_models(self, test_client: TestClient) -> None:
        """The whole catalog is returned by default."""
        response = test_client.get("/api/v1/voice-models")
        assert response.status_code == 200
        assert [m["id"] for m in response.json()] == ["voice-1", "voice-2", "voice-3"]

    def test_filter_by_gender(self, test_client: TestClient) -> None:
        """Gender matches the voice labels."""
        response = test_client.get("/api/v1/voice-models", params={"gender": "male"})
        assert [m["id"] for m in response.json()] == ["voice-2", "voice-3"]

    def test_search(self, test_client: TestClient) -> None:
        """Search looks at names and accents."""
        response = test_client.get("/api/v1/voice-models", params={"search": "ital"})
        assert [m["id"] for m in response.json()] == ["voice-2"]

    def test_catalog_unavailable(self, test_client: TestClient, remote) -> None:
        """Catalog failures surface as a bad gateway."""
        remote.override(
            "GET",
            "/api/voice-models",
            lambda request: httpx.Response(503, json={"error": "Voice service down"}),
        )
        response = test_client.get("/api/v1/voice-models")
        assert response.status_code == 502
        assert response.json()["detail"] == "Voice service down"


class TestHealth:
    """Tests for the health check."""

    def test_health(self, test_client: TestClient) -> None:
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
