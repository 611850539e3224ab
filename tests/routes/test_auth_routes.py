"""
Authentication Routes Integration Tests
========================================

Integration tests for authentication endpoints including:
- POST /api/auth/login
- GET /api/auth/verify
- GET /api/auth/me
- POST /api/auth/change-password
- POST /api/auth/logout
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.user import User
from app.services.auth_service import AuthService


pytestmark = pytest.mark.integration

PASSWORD = "Password123!"


class TestLoginEndpoint:
    """Integration tests for POST /api/auth/login endpoint."""

    def test_login_success(self, client: TestClient, leader: User):
        """Test successful login with valid credentials."""
        # Arrange
        login_data = {"email": "leader@example.com", "password": PASSWORD}

        # Act
        response = client.post("/api/auth/login", json=login_data)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Login successful"
        assert data["token"]
        assert data["user"]["email"] == "leader@example.com"
        assert data["user"]["role"] == "Bacenta_Leader"
        assert "hashed_password" not in data["user"]

    def test_login_sets_httponly_cookie(self, client: TestClient, leader: User):
        # Act
        response = client.post(
            "/api/auth/login",
            json={"email": "leader@example.com", "password": PASSWORD},
        )

        # Assert
        assert response.cookies.get("token") == response.json()["token"]
        assert "httponly" in response.headers["set-cookie"].lower()

    def test_login_wrong_password(self, client: TestClient, leader: User):
        # Act
        response = client.post(
            "/api/auth/login",
            json={"email": "leader@example.com", "password": "WrongPassword!"},
        )

        # Assert
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_login_unknown_email(self, client: TestClient):
        response = client.post(
            "/api/auth/login",
            json={"email": "ghost@example.com", "password": PASSWORD},
        )
        assert response.status_code == 401

    def test_login_inactive_account(self, client: TestClient, inactive_user: User):
        response = client.post(
            "/api/auth/login",
            json={"email": "inactive@example.com", "password": PASSWORD},
        )
        assert response.status_code == 401

    def test_login_with_non_argon2_stored_hash(
        self, client: TestClient, db_session: Session, leader: User
    ):
        """A bcrypt hash from an older system is rejected, not a server error."""
        # Arrange
        leader.hashed_password = "$2b$10$N9qo8uLOickgx2ZMRZoMyeIjZAgcfl7p92ldGxad68LJZdL17lhWy"
        db_session.commit()

        # Act
        response = client.post(
            "/api/auth/login",
            json={"email": "leader@example.com", "password": PASSWORD},
        )

        # Assert
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_login_invalid_payload(self, client: TestClient):
        """Malformed bodies are rejected with the field list."""
        # Act
        response = client.post("/api/auth/login", json={"email": "not-an-email"})

        # Assert
        assert response.status_code == 422
        fields = {error["field"] for error in response.json()["details"]["errors"]}
        assert "body.email" in fields
        assert "body.password" in fields


class TestVerifyAndMe:
    """Integration tests for token verification endpoints."""

    def test_verify_valid_token(self, client: TestClient, leader: User, leader_headers: dict):
        # Act
        response = client.get("/api/auth/verify", headers=leader_headers)

        # Assert
        assert response.status_code == 200
        assert response.json()["valid"] is True
        assert response.json()["user"]["id"] == str(leader.id)

    def test_missing_token(self, client: TestClient):
        # Act
        response = client.get("/api/auth/me")

        # Assert
        assert response.status_code == 401
        assert response.json()["message"] == "Access token required"

    def test_invalid_token(self, client: TestClient):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    def test_cookie_is_accepted(self, client: TestClient, bishop: User):
        # Arrange
        client.cookies.set("token", AuthService.create_access_token(bishop))

        # Act
        response = client.get("/api/auth/me")

        # Assert
        assert response.status_code == 200
        assert response.json()["email"] == "bishop@example.com"

    def test_me_returns_area(self, client: TestClient, area_pastor: User, pastor_headers: dict, area):
        response = client.get("/api/auth/me", headers=pastor_headers)

        assert response.status_code == 200
        assert response.json()["area"]["number"] == 1


class TestChangePassword:
    """Integration tests for POST /api/auth/change-password."""

    def test_change_password_success(self, client: TestClient, leader: User, leader_headers: dict):
        # Act
        response = client.post(
            "/api/auth/change-password",
            json={"current_password": PASSWORD, "new_password": "NewSecret456"},
            headers=leader_headers,
        )

        # Assert
        assert response.status_code == 200
        login = client.post(
            "/api/auth/login",
            json={"email": "leader@example.com", "password": "NewSecret456"},
        )
        assert login.status_code == 200

    def test_wrong_current_password(self, client: TestClient, leader_headers: dict):
        response = client.post(
            "/api/auth/change-password",
            json={"current_password": "nope", "new_password": "NewSecret456"},
            headers=leader_headers,
        )
        assert response.status_code == 401

    def test_new_password_too_short(self, client: TestClient, leader_headers: dict):
        response = client.post(
            "/api/auth/change-password",
            json={"current_password": PASSWORD, "new_password": "123"},
            headers=leader_headers,
        )
        assert response.status_code == 422


class TestLogoutEndpoint:
    """Integration tests for POST /api/auth/logout endpoint."""

    def test_logout_revokes_token(self, client: TestClient, leader_headers: dict):
        # Act
        response = client.post("/api/auth/logout", headers=leader_headers)

        # Assert
        assert response.status_code == 200
        assert response.json()["message"] == "Successfully logged out"
        again = client.get("/api/auth/me", headers=leader_headers)
        assert again.status_code == 401
