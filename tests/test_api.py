"""
API Tests for the Wildlife Safety Identifier Service

Tests the main API endpoints with the heuristic classifier injected in
place of the downloaded primary model.
"""

import base64
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.core.config import Settings, get_settings
from app.core.dependencies import get_identification_service
from app.main import app
from app.services.identification_service import IdentificationService
from app.services.species_catalog import SpeciesCatalog


@pytest.fixture
def service():
    """Fallback-only identification service."""
    return IdentificationService(
        catalog=SpeciesCatalog.load(),
        settings=Settings(enable_primary_model=False, random_seed=17),
    )


@pytest.fixture
def client(service):
    """Create test client with the injected service."""
    app.dependency_overrides[get_identification_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def encode_image(img: Image.Image, fmt: str = "PNG") -> str:
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


@pytest.fixture
def sample_image_base64():
    """A brown, snake-coloured photo."""
    return encode_image(Image.new("RGB", (224, 224), color=(140, 100, 60)), fmt="JPEG")


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_health_check(self, client):
        """Test basic health check."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert "version" in data

    def test_liveness_check(self, client):
        """Test liveness probe."""
        response = client.get("/api/v1/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_readiness_check(self, client):
        """Startup pre-loads the classifier, here into fallback mode."""
        response = client.get("/api/v1/health/ready")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "degraded"
        assert data["classifier"]["state"] == "ready_fallback"
        assert data["classifier"]["load_attempts"] == 1

    def test_not_ready_without_catalog(self):
        """An empty catalog makes the service unready."""
        empty = IdentificationService(
            catalog=SpeciesCatalog([]),
            settings=Settings(enable_primary_model=False),
        )
        app.dependency_overrides[get_identification_service] = lambda: empty
        try:
            with TestClient(app) as test_client:
                response = test_client.get("/api/v1/health/ready")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 503


class TestIdentifyEndpoint:
    """Test species identification."""

    def test_identify(self, client, sample_image_base64):
        """A photo yields a species with safety guidance."""
        response = client.post("/api/v1/identify", json={"image": sample_image_base64})

        assert response.status_code == 200
        data = response.json()

        assert data["species"] is not None
        assert data["species"]["id"] in {"dugite", "redback", "bobtail", "tiger-snake", "huntsman"}
        assert data["species"]["safety_tips"]
        assert 0.70 <= data["confidence"] <= 0.98
        assert data["source"] == "heuristic"
        assert data["metadata"]["classifier_state"] == "ready_fallback"

    def test_warning_flag_matches_danger(self, client, sample_image_base64):
        """requires_warning is set exactly for dangerous and lethal species."""
        for _ in range(20):
            data = client.post("/api/v1/identify", json={"image": sample_image_base64}).json()
            danger = data["species"]["danger_level"]
            assert data["requires_warning"] == (danger in {"dangerous", "lethal"})

    def test_data_url_prefix(self, client):
        """Data URL prefixes are accepted."""
        encoded = encode_image(Image.new("RGB", (64, 64), color=(20, 160, 40)))

        response = client.post(
            "/api/v1/identify",
            json={"image": f"data:image/png;base64,{encoded}"}
        )

        assert response.status_code == 200
        assert response.json()["species"] is not None

    def test_tiny_image(self, client):
        """Images smaller than the sampling window are fine."""
        encoded = encode_image(Image.new("RGB", (1, 1), color=(0, 0, 0)))

        response = client.post("/api/v1/identify", json={"image": encoded})

        assert response.status_code == 200

    def test_invalid_base64(self, client):
        """Test with invalid base64 image."""
        response = client.post("/api/v1/identify", json={"image": "not_valid_base64!"})

        assert response.status_code == 422  # Validation error

    def test_not_an_image(self, client):
        """Valid base64 that is not an image is rejected."""
        encoded = base64.b64encode(b"definitely not a picture").decode("utf-8")

        response = client.post("/api/v1/identify", json={"image": encoded})

        assert response.status_code == 400
        assert "decode" in response.json()["detail"]

    def test_decompression_bomb(self, client):
        """Images over Pillow's pixel limit are rejected, not a server error."""
        encoded = encode_image(Image.new("1", (20000, 10000)))

        response = client.post("/api/v1/identify", json={"image": encoded})

        assert response.status_code == 400
        assert "too many pixels" in response.json()["detail"]

    def test_configured_size_limit(self, client, monkeypatch):
        """The upload limit comes from settings."""
        noise = np.random.default_rng(3).integers(0, 255, (64, 64, 3), dtype=np.uint8)
        encoded = encode_image(Image.fromarray(noise))

        monkeypatch.setenv("WILDLIFE_ID_MAX_IMAGE_SIZE_MB", "0.001")
        get_settings.cache_clear()
        try:
            response = client.post("/api/v1/identify", json={"image": encoded})
        finally:
            get_settings.cache_clear()

        assert response.status_code == 422
        assert "0.001MB" in response.text

    def test_no_candidates(self, sample_image_base64):
        """With no candidate clearing the threshold the species is null."""
        strict = IdentificationService(
            catalog=SpeciesCatalog.load(),
            settings=Settings(enable_primary_model=False, min_candidate_weight=50.0),
        )
        app.dependency_overrides[get_identification_service] = lambda: strict
        try:
            with TestClient(app) as test_client:
                response = test_client.post(
                    "/api/v1/identify", json={"image": sample_image_base64}
                )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        data = response.json()
        assert data["species"] is None
        assert data["confidence"] == 0.0
        assert data["confidence_level"] == "very_low"
        assert data["requires_warning"] is False


class TestSpeciesEndpoints:
    """Test catalog endpoints."""

    def test_list_species(self, client):
        """All species are listed in catalog order."""
        response = client.get("/api/v1/species")
        assert response.status_code == 200

        data = response.json()
        assert data["total"] == 5
        assert data["species"][0]["id"] == "dugite"

    def test_list_by_category(self, client):
        """Category filter."""
        response = client.get("/api/v1/species", params={"category": "spider"})

        data = response.json()
        assert [s["id"] for s in data["species"]] == ["redback", "huntsman"]

    def test_invalid_category(self, client):
        """Unknown categories fail validation."""
        response = client.get("/api/v1/species", params={"category": "dragon"})
        assert response.status_code == 422

    def test_get_species(self, client):
        """Lethal species include first aid and emergency advice."""
        response = client.get("/api/v1/species/dugite")
        assert response.status_code == 200

        data = response.json()
        assert data["danger_level"] == "lethal"
        assert data["first_aid"]
        assert "000" in data["emergency_advice"]

    def test_get_species_by_scientific_name(self, client):
        """Species can be looked up by scientific name."""
        response = client.get("/api/v1/species/Tiliqua rugosa")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "bobtail"
        assert data["first_aid"] is None

    def test_unknown_species(self, client):
        """Unknown species return 404."""
        response = client.get("/api/v1/species/drop-bear")
        assert response.status_code == 404


class TestRootEndpoint:
    """Test root endpoint."""

    def test_root(self, client):
        """Test root endpoint returns API info."""
        response = client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert "name" in data
        assert "version" in data
        assert "documentation" in data
