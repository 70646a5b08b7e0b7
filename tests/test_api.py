"""
Tests for the verification API.
"""

from typing import Any
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from proofcheck.core.errors import FetchFailedError
from proofcheck.main import create_application

from conftest import DATA_URL, SAMPLE_TX_ID


@pytest.fixture
def application(
    mock_data_fetcher: AsyncMock,
    mock_transaction_fetcher: AsyncMock,
) -> FastAPI:
    """Create an application wired to mock collaborators."""
    app = create_application()
    app.state.data_fetcher = mock_data_fetcher
    app.state.transaction_fetcher = mock_transaction_fetcher
    return app


@pytest.fixture
def client(application: FastAPI) -> TestClient:
    # Not entered as a context manager, so the lifespan keeps the mocks
    return TestClient(application)


class TestVerifyEndpoint:
    """Tests for POST /api/v1/verify."""

    def test_valid_proof(self, client: TestClient, proof_document: dict[str, Any]) -> None:
        """Test that a valid proof yields a passing report."""
        response = client.post("/api/v1/verify", json={"proof": proof_document})

        assert response.status_code == 200
        body = response.json()
        assert body["overall_valid"] is True
        assert body["confirmations"] == 4097
        assert body["validations"] == {
            "target_hash_valid": True,
            "merkle_root_valid": True,
            "data_hash_valid": True,
            "transaction_valid": True,
        }
        assert body["data_location"] == DATA_URL
        assert body["transaction_id"] == SAMPLE_TX_ID
        assert body["merkle_root"] == proof_document["header"]["merkle_root"]

    def test_data_url_override(
        self,
        client: TestClient,
        proof_document: dict[str, Any],
        mock_data_fetcher: AsyncMock,
    ) -> None:
        """Test that the request can point at another copy of the data."""
        response = client.post(
            "/api/v1/verify",
            json={"proof": {"proof": proof_document}, "data_url": "http://mirror.test/file"},
        )

        assert response.status_code == 200
        assert response.json()["data_location"] == "http://mirror.test/file"
        mock_data_fetcher.fetch.assert_awaited_once_with("http://mirror.test/file")

    def test_invalid_proof_reported(
        self,
        client: TestClient,
        proof_document: dict[str, Any],
    ) -> None:
        """Test that a failing check is a 200 with a negative verdict."""
        proof_document["extras"]["leaves"][1] = {"data": "forged payload"}

        response = client.post("/api/v1/verify", json={"proof": proof_document})

        assert response.status_code == 200
        body = response.json()
        assert body["overall_valid"] is False
        assert body["validations"]["target_hash_valid"] is False

    def test_malformed_proof(self, client: TestClient, proof_document: dict[str, Any]) -> None:
        """Test that a proof missing its header is rejected."""
        del proof_document["header"]

        response = client.post("/api/v1/verify", json={"proof": proof_document})

        assert response.status_code == 422

    def test_unsupported_algorithm(
        self,
        client: TestClient,
        proof_document: dict[str, Any],
    ) -> None:
        """Test that an unknown hash type is rejected."""
        proof_document["header"]["hash_type"] = "whirlpool-9000"

        response = client.post("/api/v1/verify", json={"proof": proof_document})

        assert response.status_code == 422
        assert "whirlpool9000" in response.json()["detail"]

    def test_no_data_location(self, client: TestClient, proof_document: dict[str, Any]) -> None:
        """Test that a proof with neither data location nor leaves is rejected."""
        del proof_document["extras"]

        response = client.post("/api/v1/verify", json={"proof": proof_document})

        assert response.status_code == 422

    def test_fetch_failure(
        self,
        client: TestClient,
        proof_document: dict[str, Any],
        mock_data_fetcher: AsyncMock,
    ) -> None:
        """Test that an unreachable data source is a gateway error."""
        mock_data_fetcher.fetch.side_effect = FetchFailedError("unreachable", status=503)

        response = client.post("/api/v1/verify", json={"proof": proof_document})

        assert response.status_code == 502
        assert "unreachable" in response.json()["detail"]


class TestHealthEndpoints:
    """Tests for health probes."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_live(self, client: TestClient) -> None:
        response = client.get("/live")

        assert response.status_code == 200
        assert response.text == "alive"
