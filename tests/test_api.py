"""API endpoint tests using FastAPI TestClient."""

import pytest
from unittest.mock import AsyncMock, patch, MagicMock
from fastapi.testclient import TestClient

from api.server import app
from swapnet.errors import MissingCredentialError
from swapnet.models import BatchResult
from swapnet.services import AssetLibrary, CredentialStore


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def tryon_body(person_asset, garment_asset):
    return {
        "primary_image": person_asset.model_dump(),
        "secondary_image": garment_asset.model_dump(),
        "note": "Roll up the sleeves",
        "mode": "new-bg",
        "replica_count": 2,
    }


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, client):
        """Root endpoint returns OK status."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "service" in data
        assert "version" in data

    def test_health_reports_credential(self, client):
        with patch('api.server.get_credentials', return_value=CredentialStore(default="env-key-123")):
            data = client.get("/health").json()

        assert data == {"status": "ok", "credential": "configured"}

    def test_health_degraded_without_key(self, client):
        with patch('api.server.get_credentials', return_value=CredentialStore()):
            data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["credential"] == "missing"


class TestTryOnEndpoint:
    """Tests for the main try-on endpoint."""

    def test_missing_person_image(self, client, garment_asset):
        response = client.post("/api/tryon", json={"secondary_image": garment_asset.model_dump()})

        assert response.status_code == 422

    def test_missing_garment_and_accessory(self, client, person_asset):
        response = client.post("/api/tryon", json={"primary_image": person_asset.model_dump()})

        assert response.status_code == 422

    def test_unknown_mode(self, client, tryon_body):
        tryon_body["mode"] = "swap-everything"

        assert client.post("/api/tryon", json=tryon_body).status_code == 422

    def test_success_response(self, client, tryon_body):
        with patch('api.server.get_coordinator') as mock_coordinator:
            mock_instance = MagicMock()
            mock_instance.run = AsyncMock(return_value=BatchResult(
                outputs=["data:image/png;base64,QUJD", "data:image/png;base64,REVG"],
                last_error=None,
            ))
            mock_coordinator.return_value = mock_instance

            response = client.post("/api/tryon", json=tryon_body)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["status"] == "completed"
        assert len(data["images"]) == 2
        assert data["error"] is None

        request = mock_instance.run.await_args.args[0]
        assert request.replica_count == 2
        assert request.note == "Roll up the sleeves"

    def test_partial_failure_hides_error(self, client, tryon_body):
        with patch('api.server.get_coordinator') as mock_coordinator:
            mock_instance = MagicMock()
            mock_instance.run = AsyncMock(return_value=BatchResult(
                outputs=["data:image/png;base64,QUJD"],
                last_error="Image blocked by the safety filter.",
            ))
            mock_coordinator.return_value = mock_instance

            data = client.post("/api/tryon", json=tryon_body).json()

        assert data["success"] is True
        assert data["error"] is None

    def test_total_failure_response(self, client, tryon_body):
        with patch('api.server.get_coordinator') as mock_coordinator:
            mock_instance = MagicMock()
            mock_instance.run = AsyncMock(return_value=BatchResult(last_error="Image blocked by the safety filter."))
            mock_coordinator.return_value = mock_instance

            data = client.post("/api/tryon", json=tryon_body).json()

        assert data["success"] is False
        assert data["status"] == "failed"
        assert data["images"] == []
        assert data["error"] == "Image blocked by the safety filter."

    def test_missing_credential_response(self, client, tryon_body):
        with patch('api.server.get_coordinator') as mock_coordinator:
            mock_instance = MagicMock()
            mock_instance.run = AsyncMock(side_effect=MissingCredentialError("Missing API key."))
            mock_coordinator.return_value = mock_instance

            data = client.post("/api/tryon", json=tryon_body).json()

        assert data["success"] is False
        assert data["error"] == "Missing API key."


class TestBackgroundEndpoint:

    def test_background_batch(self, client, person_asset):
        with patch('api.server.get_coordinator') as mock_coordinator:
            mock_instance = MagicMock()
            mock_instance.change_background = AsyncMock(return_value=BatchResult(
                outputs=["data:image/png;base64,QUJD"],
            ))
            mock_coordinator.return_value = mock_instance

            response = client.post("/api/background", json={
                "source_image": person_asset.payload,
                "prompts": ["A beach", "A forest"],
            })

        assert response.json()["success"] is True
        request = mock_instance.change_background.await_args.args[0]
        assert request.prompts == ["A beach", "A forest"]


class TestAnalyzeEndpoint:

    def test_analysis_and_prompts(self, client, person_asset):
        with patch('api.server.get_analyzer') as mock_analyzer:
            mock_instance = MagicMock()
            mock_instance.analyze_outfit = AsyncMock(return_value="A red dress")
            mock_instance.generate_prompts = AsyncMock(return_value=["Spin", "Walk"])
            mock_analyzer.return_value = mock_instance

            data = client.post("/api/analyze", json={"image": person_asset.model_dump(), "count": 2}).json()

        assert data == {"success": True, "analysis": "A red dress", "prompts": ["Spin", "Walk"], "error": None}
        mock_instance.generate_prompts.assert_awaited_once_with("A red dress", 2)

    def test_reuses_previous_analysis(self, client, person_asset):
        with patch('api.server.get_analyzer') as mock_analyzer:
            mock_instance = MagicMock()
            mock_instance.analyze_outfit = AsyncMock()
            mock_instance.generate_prompts = AsyncMock(return_value=["Spin"])
            mock_analyzer.return_value = mock_instance

            client.post("/api/analyze", json={"image": person_asset.model_dump(), "analysis": "cached"})

        mock_instance.analyze_outfit.assert_not_awaited()

    def test_error_response(self, client, person_asset):
        with patch('api.server.get_analyzer') as mock_analyzer:
            mock_instance = MagicMock()
            mock_instance.analyze_outfit = AsyncMock(side_effect=Exception("Test error"))
            mock_analyzer.return_value = mock_instance

            data = client.post("/api/analyze", json={"image": person_asset.model_dump()}).json()

        assert data["success"] is False
        assert data["error"] == "Test error"


class TestCredentialEndpoints:

    def test_set_and_clear(self, client, tmp_path):
        store = CredentialStore(tmp_path / "gemini_api_key", default="env-key-123")
        with patch('api.server.get_credentials', return_value=store):
            assert client.put("/api/credential", json={"api_key": "manual-key-456"}).status_code == 200
            assert store.get() == "manual-key-456"

            data = client.delete("/api/credential").json()

        assert data["credential"] == "configured"
        assert store.get() == "env-key-123"

    def test_short_key_rejected(self, client):
        with patch('api.server.get_credentials', return_value=CredentialStore()):
            response = client.put("/api/credential", json={"api_key": "short"})

        assert response.status_code == 422


class TestLibraryEndpoints:

    @pytest.fixture
    def library(self, tmp_path):
        library = AssetLibrary(tmp_path / "saved_models.json")
        with patch('api.server.get_library', return_value=library):
            yield library

    def test_save_list_delete(self, client, library, person_asset, garment_asset):
        assert client.post("/api/library", json=person_asset.model_dump()).status_code == 201
        response = client.post("/api/library", json=garment_asset.model_dump())
        assert [a["id"] for a in response.json()] == [garment_asset.id, person_asset.id]

        assert [a["id"] for a in client.get("/api/library").json()] == [garment_asset.id, person_asset.id]

        response = client.delete(f"/api/library/{garment_asset.id}")
        assert [a["id"] for a in response.json()] == [person_asset.id]

    def test_duplicate_conflict(self, client, library, person_asset):
        client.post("/api/library", json=person_asset.model_dump())
        duplicate = person_asset.model_copy(update={"id": "other-id"})

        response = client.post("/api/library", json=duplicate.model_dump())

        assert response.status_code == 409
        assert len(library.entries()) == 1

    def test_delete_missing(self, client, library):
        assert client.delete("/api/library/nope").status_code == 404
