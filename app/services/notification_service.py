"""
Notification Service
====================

Creates in-app notifications for users. Other modules call `notify`
when something happens that a leader should know about.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.enums import NotificationType
from app.core.logging import get_logger
from app.models.notification import Notification

logger = get_logger(__name__)

# icon, color per notification type
NOTIFICATION_STYLES: Dict[str, tuple[str, str]] = {
    NotificationType.INFO.value: ("bell", "#6B7280"),
    NotificationType.SUCCESS.value: ("check-circle", "#10B981"),
    NotificationType.WARNING.value: ("alert-triangle", "#F59E0B"),
    NotificationType.ERROR.value: ("x-circle", "#EF4444"),
    NotificationType.ATTENDANCE.value: ("calendar", "#3B82F6"),
    NotificationType.CALL.value: ("phone", "#8B5CF6"),
    NotificationType.MEETING.value: ("users", "#EC4899"),
}


def notify(
    db: Session,
    user_id: UUID,
    title: str,
    message: str,
    type: NotificationType | str = NotificationType.INFO,
    data: Optional[Dict[str, Any]] = None,
    commit: bool = True,
) -> Notification:
    """
    Create a notification for a user.

    Args:
        db: Database session
        user_id: Recipient
        title: Short title
        message: Body text
        type: Notification type, drives icon and color
        data: Optional payload for the client (e.g. ids to navigate to)
        commit: Commit immediately; pass False to join the caller's transaction

    Returns:
        The created Notification
    """
    type_value = type.value if isinstance(type, NotificationType) else str(type)
    icon, color = NOTIFICATION_STYLES.get(type_value, NOTIFICATION_STYLES[NotificationType.INFO.value])

    notification = Notification(
        user_id=user_id,
        type=type_value,
        title=title,
        message=message,
        data=data,
        read=False,
        icon=icon,
        color=color,
    )
    db.add(notification)

    if commit:
        db.commit()
        db.refresh(notification)
    else:
        db.flush()

    logger.info("notification_created", recipient_id=str(user_id), type=type_value)
    return notification
