"""
Unit tests for FastAPI application endpoints.
"""
from unittest.mock import patch

from fastapi.testclient import TestClient

from app import app


class TestRootEndpoint:
    """Test suite for the root endpoint."""

    def test_root_success(self, client):
        """Test API information response."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Compliance Records Tracker API"
        assert data["health"] == "/api/v1/health"
        assert data["docs"] == "/docs"

    def test_root_response_headers(self, client):
        response = client.get("/")

        assert "application/json" in response.headers.get("content-type", "")

    def test_root_method_not_allowed(self, client):
        """Test that POST method is not allowed on root endpoint."""
        assert client.post("/").status_code == 405

    def test_unknown_path(self, client):
        assert client.get("/nonexistent").status_code == 404


class TestLifecycle:
    """Test startup scan and shutdown cleanup."""

    def test_startup_runs_daily_scan(self, client, empty_store, scanner):
        empty_store.create("other_topic", {"name": "Permit", "number": "P-1"})
        with patch('app.get_record_store', return_value=empty_store), \
                patch('app.get_scanner', return_value=scanner):
            with TestClient(app):
                pass

        assert scanner.last_scan_date is not None
        scanner.sender.close.assert_called_once()

    def test_cors_headers(self, client):
        response = client.get("/api/v1/health", headers={"Origin": "http://example.com"})
        assert response.headers.get("access-control-allow-origin") in ("*", "http://example.com")
