"""
Notification Routes Integration Tests
=====================================

Integration tests for /api/notifications including:
- Listing (newest first, unread filter, unread count)
- Marking one or all as read
- Deleting, and isolation between users
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.enums import NotificationType
from app.models.notification import Notification
from app.models.user import User
from app.services.notification_service import notify


pytestmark = pytest.mark.integration


@pytest.fixture
def notifications(db_session: Session, leader: User) -> list[Notification]:
    """Three notifications for `leader`, the first one already read."""
    created = [
        notify(db_session, leader.id, f"Title {i}", f"Message {i}", type=NotificationType.INFO)
        for i in range(3)
    ]
    created[0].read = True
    db_session.commit()
    return created


class TestListNotifications:
    """Integration tests for GET /api/notifications."""

    def test_list_newest_first(
        self, client: TestClient, leader_headers: dict, notifications: list[Notification]
    ):
        # Act
        response = client.get("/api/notifications/", headers=leader_headers)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["unread_count"] == 2
        assert [n["title"] for n in data["notifications"]] == ["Title 2", "Title 1", "Title 0"]

    def test_unread_only(
        self, client: TestClient, leader_headers: dict, notifications: list[Notification]
    ):
        data = client.get(
            "/api/notifications/", params={"unread_only": True}, headers=leader_headers
        ).json()

        assert data["total"] == 2
        assert all(n["read"] is False for n in data["notifications"])

    def test_other_users_see_nothing(
        self, client: TestClient, other_leader_headers: dict, notifications: list[Notification]
    ):
        data = client.get("/api/notifications/", headers=other_leader_headers).json()
        assert data["total"] == 0
        assert data["unread_count"] == 0


class TestMarkRead:
    """Integration tests for PUT /api/notifications/{id}/read and /read-all."""

    def test_mark_one_read(
        self, client: TestClient, leader_headers: dict, notifications: list[Notification]
    ):
        # Act
        response = client.put(
            f"/api/notifications/{notifications[1].id}/read", headers=leader_headers
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["read"] is True

    def test_mark_all_read(
        self, client: TestClient, leader_headers: dict, notifications: list[Notification]
    ):
        # Act
        response = client.put("/api/notifications/read-all", headers=leader_headers)

        # Assert
        assert response.json()["updated"] == 2
        data = client.get("/api/notifications/", headers=leader_headers).json()
        assert data["unread_count"] == 0

    def test_cannot_touch_someone_elses_notification(
        self, client: TestClient, other_leader_headers: dict, notifications: list[Notification]
    ):
        response = client.put(
            f"/api/notifications/{notifications[1].id}/read", headers=other_leader_headers
        )
        assert response.status_code == 404


class TestDeleteNotification:
    """Integration tests for DELETE /api/notifications/{id}."""

    def test_delete(
        self, client: TestClient, db_session: Session, leader_headers: dict,
        notifications: list[Notification],
    ):
        response = client.delete(f"/api/notifications/{notifications[2].id}", headers=leader_headers)

        assert response.status_code == 200
        assert db_session.query(Notification).count() == 2

    def test_unknown_notification(self, client: TestClient, leader_headers: dict):
        response = client.delete("/api/notifications/9999", headers=leader_headers)
        assert response.status_code == 404
