"""
Tests for the variables HTTP endpoints.

Adapters are swapped through FastAPI dependency overrides; the Figma side
is the in-memory fake server from conftest.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from tokensync.adapters.figma_api import FigmaVariablesApi
from tokensync.adapters.fs.mapping_store import JsonMappingStore
from tokensync.api.deps import (
    get_change_recorder,
    get_mapping_store,
    get_rules,
    get_variables_api,
)
from tokensync.api.main import app
from tokensync.rules.models import Rules


@pytest.fixture
def mapping_dir(tmp_path: Path) -> Path:
    return tmp_path / "mappings"


@pytest.fixture
def client(figma_server, access_token: str, mapping_dir: Path) -> Iterator[TestClient]:
    """Create test client wired to fake adapters."""
    app.dependency_overrides[get_rules] = lambda: Rules()
    app.dependency_overrides[get_variables_api] = lambda: FigmaVariablesApi(
        access_token, transport=figma_server.transport
    )
    app.dependency_overrides[get_mapping_store] = lambda: JsonMappingStore(mapping_dir)
    app.dependency_overrides[get_change_recorder] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    def test_health_check(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["transformer"] == "figma-variables"


class TestTransformEndpoint:
    """Test POST /api/variables/transform."""

    def test_transform(self, client: TestClient, sample_system: dict[str, Any]) -> None:
        response = client.post("/api/variables/transform", json={"tokenSystem": sample_system})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert {c["name"] for c in data["variableCollections"]} >= {"Color", "Spacing"}
        assert data["stats"]["updated"] == 0
        assert data["stats"]["created"] == len(data["variables"])
        assert data["mapping"] == {}

    def test_display_p3_profile(self, client: TestClient, sample_system: dict[str, Any]) -> None:
        response = client.post(
            "/api/variables/transform",
            json={"tokenSystem": sample_system, "colorProfile": "display-p3"},
        )

        assert response.status_code == 200

    def test_invalid_system(self, client: TestClient, sample_system: dict[str, Any]) -> None:
        sample_system["tokenCollections"] = []

        response = client.post("/api/variables/transform", json={"tokenSystem": sample_system})

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["success"] is False
        assert "NO_TOKEN_COLLECTIONS" in [e["code"] for e in detail["errors"]]

    def test_unknown_profile(self, client: TestClient, sample_system: dict[str, Any]) -> None:
        response = client.post(
            "/api/variables/transform",
            json={"tokenSystem": sample_system, "colorProfile": "cmyk"},
        )

        assert response.status_code == 422
        assert "cmyk" in response.json()["detail"]


class TestPublishEndpoint:
    """Test POST /api/variables/publish."""

    def test_publish_creates_then_updates(
        self,
        client: TestClient,
        sample_system: dict[str, Any],
        mapping_dir: Path,
    ) -> None:
        body = {"fileKey": "FILE123", "tokenSystem": sample_system}

        first = client.post("/api/variables/publish", json=body)
        second = client.post("/api/variables/publish", json=body)

        assert first.status_code == 200
        assert first.json()["success"] is True
        assert first.json()["result"]["stats"]["updated"] == 0
        assert (mapping_dir / "FILE123.json").exists()
        assert second.status_code == 200
        assert second.json()["result"]["stats"]["created"] == 0

    def test_upstream_failure(
        self, client: TestClient, figma_server, sample_system: dict[str, Any]
    ) -> None:
        figma_server.fail_with = 500

        response = client.post(
            "/api/variables/publish", json={"fileKey": "FILE123", "tokenSystem": sample_system}
        )

        assert response.status_code == 502
        assert response.json()["detail"]["error"]["code"] == "FETCH_FAILED"

    def test_blank_file_key(self, client: TestClient, sample_system: dict[str, Any]) -> None:
        response = client.post(
            "/api/variables/publish", json={"fileKey": " ", "tokenSystem": sample_system}
        )

        assert response.status_code == 422
        assert response.json()["detail"]["error"]["code"] == "MISSING_FILE_KEY"

    def test_missing_access_token(
        self,
        client: TestClient,
        sample_system: dict[str, Any],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.delenv("FIGMA_ACCESS_TOKEN", raising=False)
        del app.dependency_overrides[get_variables_api]

        response = client.post(
            "/api/variables/publish", json={"fileKey": "FILE123", "tokenSystem": sample_system}
        )

        assert response.status_code == 503
        assert "FIGMA_ACCESS_TOKEN" in response.json()["detail"]
