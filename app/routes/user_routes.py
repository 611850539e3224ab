"""
User Routes Module
==================

Management of leader accounts.

Security:
- Listing and creation restricted to Bishop, Assisting Overseer, Governor
- Reading/updating a user allowed for the user themself, Bishop or Governor
- Role and activation changes restricted to Bishop and Governor
- All changes are audit logged
"""

import math
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session, selectinload

from app.core.dependencies.auth import get_current_user
from app.core.dependencies.rbac import ensure_self_or_role, require_role, require_role_or_higher
from app.core.exceptions import AreaNotFoundError, DuplicateError, UserNotFoundError, ValidationError
from app.core.logging import audit_logger, get_logger
from app.core.scope import RoleScope
from app.db.session import get_db
from app.models.area import Area
from app.models.bacenta import BacentaMeeting
from app.models.call_log import CallLog
from app.models.member import Member
from app.models.role_enum import Role
from app.models.user import User
from app.schemas import (
    ErrorResponse,
    UserCreate,
    UserDetailResponse,
    UserListResponse,
    UserResponse,
    UserSettingsUpdate,
    UserUpdate,
)
from app.services.auth_service import AuthService
from app.services.upload_service import delete_upload, save_image

# Initialize logger
logger = get_logger(__name__)

# Governor and above: Governor, Assisting_Overseer, Bishop
require_user_manager = require_role_or_higher(Role.GOVERNOR)
USER_SUPERVISORS = (Role.BISHOP, Role.GOVERNOR)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Insufficient permissions"},
    },
)


def _get_user_or_404(db: Session, user_id: UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(str(user_id))
    return user


def _check_area(db: Session, area_id: Optional[UUID]) -> None:
    if area_id is not None and db.get(Area, area_id) is None:
        raise AreaNotFoundError(str(area_id))


# =====================================
# List / Create
# =====================================

@router.get(
    "/",
    response_model=UserListResponse,
    summary="List Users",
)
def list_users(
    role: Optional[Role] = Query(None, description="Filter by role"),
    area_id: Optional[UUID] = Query(None, description="Filter by area"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(50, ge=1, le=200, description="Users per page"),
    current_user: User = Depends(require_user_manager),
    db: Session = Depends(get_db),
) -> dict:
    """
    List users visible to the caller, newest first.

    Args:
        role: Optional role filter
        area_id: Optional area filter
        page: Page number
        limit: Users per page
        current_user: Current authenticated user
        db: Database session

    Returns:
        Paginated list of users
    """
    query = RoleScope(db, current_user).filter_users(db.query(User))

    if role:
        query = query.filter(User.role == role.value)
    if area_id:
        query = query.filter(User.area_id == area_id)

    total = query.count()
    users = (
        query.options(selectinload(User.area))
        .order_by(User.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "users": users,
        "total": total,
        "page": page,
        "total_pages": math.ceil(total / limit),
    }


@router.post(
    "/",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    responses={400: {"model": ErrorResponse, "description": "Email already in use"}},
)
def create_user(
    payload: UserCreate,
    current_user: User = Depends(require_user_manager),
    db: Session = Depends(get_db),
) -> User:
    """
    Create a leader account.

    Args:
        payload: New user data
        current_user: Current authenticated user
        db: Database session

    Returns:
        The created user

    Raises:
        DuplicateError: If the email is already registered
    """
    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise DuplicateError("user", "email")
    _check_area(db, payload.area_id)

    user = User(
        email=email,
        hashed_password=AuthService.hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
        role=payload.role.value,
        area_id=payload.area_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="create",
        resource="user",
        resource_id=str(user.id),
        role=user.role,
    )

    return user


# =====================================
# Own settings / picture
# =====================================

@router.put("/settings", summary="Update My Settings")
def update_settings(
    payload: UserSettingsUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Shallow-merge the given keys into the caller's settings."""
    merged = {**(current_user.settings or {}), **payload.settings}
    # Reassign so the JSON column is flagged as modified
    current_user.settings = merged
    db.commit()

    return {"message": "Settings updated", "settings": merged}


@router.post("/profile-picture", response_model=UserResponse, summary="Upload My Photo")
def upload_profile_picture(
    photo: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    old_url = current_user.photo_url
    current_user.photo_url = save_image(photo, "profiles", "user")
    db.commit()
    delete_upload(old_url)

    return current_user


# =====================================
# Single user
# =====================================

@router.get(
    "/{user_id}",
    response_model=UserDetailResponse,
    summary="Get User",
)
def get_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """Return a user with their area and the members they lead."""
    ensure_self_or_role(current_user, user_id, *USER_SUPERVISORS)
    return _get_user_or_404(db, user_id)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update User",
)
def update_user(
    user_id: UUID,
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """
    Update a user.

    `role` and `is_active` are ignored unless the caller is a Bishop or
    Governor.
    """
    ensure_self_or_role(current_user, user_id, *USER_SUPERVISORS)
    user = _get_user_or_404(db, user_id)

    changes = payload.model_dump(exclude_unset=True)
    if current_user.role not in USER_SUPERVISORS:
        changes.pop("role", None)
        changes.pop("is_active", None)

    if "email" in changes and changes["email"]:
        changes["email"] = changes["email"].lower()
        taken = (
            db.query(User)
            .filter(User.email == changes["email"], User.id != user.id)
            .first()
        )
        if taken:
            raise DuplicateError("user", "email")
    if "area_id" in changes:
        _check_area(db, changes["area_id"])
    if changes.get("role") is not None:
        changes["role"] = Role(changes["role"]).value

    for field, value in changes.items():
        if value is None and field in ("email", "first_name", "last_name", "role", "is_active"):
            continue
        setattr(user, field, value)

    db.commit()
    db.refresh(user)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="update",
        resource="user",
        resource_id=str(user.id),
        fields=sorted(changes),
    )

    return user


@router.delete("/{user_id}", summary="Delete User")
def delete_user(
    user_id: UUID,
    current_user: User = Depends(require_role(*USER_SUPERVISORS)),
    db: Session = Depends(get_db),
) -> dict:
    """
    Delete a user, or deactivate them if they still have history.

    A user who leads members (or has recorded meetings or calls) is
    deactivated so that history keeps its author.
    """
    user = _get_user_or_404(db, user_id)
    if user.id == current_user.id:
        raise ValidationError("You cannot delete your own account")

    has_history = (
        db.query(Member.id).filter(Member.leader_id == user.id).first()
        or db.query(BacentaMeeting.id).filter(BacentaMeeting.leader_id == user.id).first()
        or db.query(CallLog.id).filter(CallLog.caller_id == user.id).first()
    )

    if has_history:
        user.is_active = False
        db.commit()
        action = "deactivated"
        message = "User deactivated because they still lead members"
    else:
        photo_url = user.photo_url
        db.delete(user)
        db.commit()
        delete_upload(photo_url)
        action = "deleted"
        message = "User deleted successfully"

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="delete",
        resource="user",
        resource_id=str(user_id),
        outcome=action,
    )

    return {"message": message, "action": action}


@router.post(
    "/{user_id}/photo",
    response_model=UserResponse,
    summary="Upload User Photo",
)
def upload_user_photo(
    user_id: UUID,
    photo: UploadFile = File(...),
    current_user: User = Depends(require_role(*USER_SUPERVISORS)),
    db: Session = Depends(get_db),
) -> User:
    user = _get_user_or_404(db, user_id)

    old_url = user.photo_url
    user.photo_url = save_image(photo, "profiles", "user")
    db.commit()
    delete_upload(old_url)

    return user
