"""
Notification Routes Module
==========================

In-app notifications. Every endpoint only ever touches the caller's own
notifications; someone else's notification is reported as not found.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.dependencies.auth import get_current_user
from app.core.exceptions import NotFoundError
from app.core.logging import get_logger
from app.db.session import get_db
from app.models.notification import Notification
from app.models.user import User
from app.schemas.common import ErrorResponse
from app.schemas.notification import NotificationListResponse, NotificationResponse
from app.services.aggregates import paginate

logger = get_logger(__name__)


router = APIRouter(
    prefix="/notifications",
    tags=["Notifications"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Notification not found"},
    },
)


def get_own_notification(db: Session, user: User, notification_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user.id)
        .first()
    )
    if notification is None:
        raise NotFoundError("Notification", str(notification_id))
    return notification


@router.get("/", response_model=NotificationListResponse, summary="List Notifications")
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Newest first. `unread_count` is always over all of the caller's notifications."""
    own = db.query(Notification).filter(Notification.user_id == current_user.id)
    unread_count = own.filter(Notification.read.is_(False)).count()

    query = own.filter(Notification.read.is_(False)) if unread_only else own
    query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
    notifications, total, pages = paginate(query, page, limit)

    return {
        "notifications": notifications,
        "total": total,
        "unread_count": unread_count,
        "page": page,
        "total_pages": pages,
    }


@router.put("/read-all", summary="Mark All As Read")
def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id, Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session=False)
    )
    db.commit()
    return {"message": "All notifications marked as read", "updated": updated}


@router.put("/{notification_id}/read", response_model=NotificationResponse, summary="Mark As Read")
def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Notification:
    notification = get_own_notification(db, current_user, notification_id)
    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification


@router.delete("/{notification_id}", summary="Delete Notification")
def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    notification = get_own_notification(db, current_user, notification_id)
    db.delete(notification)
    db.commit()
    return {"message": "Notification deleted"}
