"""
Sync Routes Integration Tests
=============================

Integration tests for /api/sync:
- Running a spreadsheet sync
- Listing sync logs
- Bishop / Data Clerk only access
"""

import pytest
from fastapi.testclient import TestClient


pytestmark = pytest.mark.integration


class TestSyncSheets:
    """Integration tests for POST /api/sync/sheets."""

    def test_clerk_runs_sync(self, client: TestClient, clerk_headers: dict):
        # Act
        response = client.post(
            "/api/sync/sheets",
            json={"direction": "from_sheets", "force": True},
            headers=clerk_headers,
        )

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Synchronisation completed"
        assert data["results"]["direction"] == "from_sheets"
        assert data["results"]["force"] is True

    def test_body_is_optional(self, client: TestClient, bishop_headers: dict):
        response = client.post("/api/sync/sheets", headers=bishop_headers)

        assert response.status_code == 200
        assert response.json()["results"]["direction"] == "both"

    def test_invalid_direction(self, client: TestClient, bishop_headers: dict):
        response = client.post(
            "/api/sync/sheets", json={"direction": "sideways"}, headers=bishop_headers
        )
        assert response.status_code == 422

    def test_leader_is_forbidden(self, client: TestClient, leader_headers: dict):
        response = client.post("/api/sync/sheets", headers=leader_headers)
        assert response.status_code == 403


class TestSyncLogs:
    """Integration tests for GET /api/sync/logs."""

    def test_lists_runs(self, client: TestClient, bishop_headers: dict):
        # Arrange
        client.post("/api/sync/sheets", headers=bishop_headers)
        client.post("/api/sync/sheets", headers=bishop_headers)

        # Act
        response = client.get("/api/sync/logs", headers=bishop_headers)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["page"] == 1
        assert data["total_pages"] == 1
        assert all(log["sync_status"] == "completed" for log in data["logs"])

    def test_filter_by_status(self, client: TestClient, bishop_headers: dict):
        client.post("/api/sync/sheets", headers=bishop_headers)

        response = client.get("/api/sync/logs?sync_status=failed", headers=bishop_headers)

        assert response.json()["total"] == 0

    def test_pastor_is_forbidden(self, client: TestClient, pastor_headers: dict):
        response = client.get("/api/sync/logs", headers=pastor_headers)
        assert response.status_code == 403
