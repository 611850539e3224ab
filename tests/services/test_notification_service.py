"""
Notification Service Unit Tests
===============================
"""

import pytest
from sqlalchemy.orm import Session

from app.core.enums import NotificationType
from app.models.notification import Notification
from app.services.notification_service import notify


pytestmark = pytest.mark.unit


class TestNotify:
    """Tests for notify()."""

    def test_type_drives_icon_and_color(self, db_session: Session, leader):
        # Act
        notification = notify(
            db_session, leader.id, "Call", "Call John", type=NotificationType.CALL
        )

        # Assert
        assert notification.id is not None
        assert notification.type == "call"
        assert notification.icon == "phone"
        assert notification.color == "#8B5CF6"
        assert notification.read is False

    def test_unknown_type_falls_back_to_info_style(self, db_session: Session, leader):
        notification = notify(db_session, leader.id, "Hi", "Hello", type="custom")

        assert notification.type == "custom"
        assert notification.icon == "bell"

    def test_without_commit_joins_transaction(self, db_session: Session, leader):
        # Act
        notify(db_session, leader.id, "Later", "Pending", commit=False)
        db_session.rollback()

        # Assert
        assert db_session.query(Notification).count() == 0
