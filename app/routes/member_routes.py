"""
Member Routes Module
====================

Congregation members, scoped to what the caller oversees.

Security:
- Listing and reading follow the caller's RoleScope
- Creation open to every role except Governor
- Updates restricted to Bishop, Assisting Overseer, Area Pastor, Data Clerk
- Deletion (deactivation) restricted to Bishop and Assisting Overseer
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.core.dependencies.auth import get_current_user
from app.core.dependencies.rbac import require_role
from app.core.enums import MemberState, NotificationType
from app.core.exceptions import (
    AuthorizationError,
    MemberNotFoundError,
    NotFoundError,
    UserNotFoundError,
    ValidationError,
)
from app.core.logging import audit_logger, get_logger
from app.core.scope import RoleScope
from app.db.session import get_db
from app.models.area import Area
from app.models.attendance import Attendance
from app.models.call_log import CallLog
from app.models.member import Member
from app.models.ministry import Ministry
from app.models.role_enum import Role
from app.models.user import User
from app.schemas.common import ErrorResponse
from app.schemas.member import (
    MemberCreate,
    MemberDetailResponse,
    MemberListResponse,
    MemberResponse,
    MemberUpdate,
)
from app.services.aggregates import paginate
from app.services.notification_service import notify
from app.services.upload_service import delete_upload, save_image

logger = get_logger(__name__)

MEMBER_CREATORS = (
    Role.BISHOP,
    Role.ASSISTING_OVERSEER,
    Role.AREA_PASTOR,
    Role.DATA_CLERK,
    Role.BACENTA_LEADER,
)
MEMBER_EDITORS = (Role.BISHOP, Role.ASSISTING_OVERSEER, Role.AREA_PASTOR, Role.DATA_CLERK)
MEMBER_REMOVERS = (Role.BISHOP, Role.ASSISTING_OVERSEER)


router = APIRouter(
    prefix="/members",
    tags=["Members"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Outside your scope"},
        404: {"model": ErrorResponse, "description": "Member not found"},
    },
)


def get_scoped_member(db: Session, scope: RoleScope, member_id: UUID) -> Member:
    """
    Load a member and check the caller may see it.

    Raises:
        MemberNotFoundError: Unknown member
        ScopeViolationError: Member outside the caller's scope
    """
    member = db.get(Member, member_id)
    if member is None:
        raise MemberNotFoundError(str(member_id))
    scope.ensure_member(member)
    return member


# =====================================
# List
# =====================================

@router.get("/", response_model=MemberListResponse, summary="List Members")
def list_members(
    search: Optional[str] = Query(None, description="Matches first name, last name or phone"),
    area_id: Optional[UUID] = Query(None),
    leader_id: Optional[UUID] = Query(None),
    state: Optional[MemberState] = Query(None),
    is_active: Optional[bool] = Query(None),
    is_registered: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    List the members visible to the caller, ordered by first name.

    Filters narrow the caller's scope, they never widen it.
    """
    query = RoleScope(db, current_user).filter_members(db.query(Member))

    if area_id:
        query = query.filter(Member.area_id == area_id)
    if leader_id:
        query = query.filter(Member.leader_id == leader_id)
    if state:
        query = query.filter(Member.state == state.value)
    if is_active is not None:
        query = query.filter(Member.is_active.is_(is_active))
    if is_registered is not None:
        query = query.filter(Member.is_registered.is_(is_registered))
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Member.first_name.ilike(pattern),
                Member.last_name.ilike(pattern),
                Member.phone_primary.ilike(pattern),
            )
        )

    query = query.options(joinedload(Member.area), joinedload(Member.leader)).order_by(
        Member.first_name, Member.last_name
    )
    members, total, pages = paginate(query, page, limit)

    return {"members": members, "total": total, "page": page, "total_pages": pages}


# =====================================
# Read
# =====================================

@router.get("/{member_id}", response_model=MemberDetailResponse, summary="Get Member")
def get_member(
    member_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Member with area, leader, last 10 attendances and last 10 calls."""
    member = get_scoped_member(db, RoleScope(db, current_user), member_id)

    attendances = (
        db.query(Attendance)
        .filter(Attendance.member_id == member.id)
        .order_by(Attendance.sunday_date.desc())
        .limit(10)
        .all()
    )
    call_logs = (
        db.query(CallLog)
        .options(joinedload(CallLog.caller))
        .filter(CallLog.member_id == member.id)
        .order_by(CallLog.call_date.desc())
        .limit(10)
        .all()
    )

    detail = MemberResponse.model_validate(member).model_dump()
    detail["attendances"] = attendances
    detail["call_logs"] = call_logs
    return detail


# =====================================
# Create
# =====================================

@router.post(
    "/",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Member",
    responses={400: {"model": ErrorResponse, "description": "No area could be determined"}},
)
def create_member(
    payload: MemberCreate,
    current_user: User = Depends(require_role(*MEMBER_CREATORS)),
    db: Session = Depends(get_db),
) -> Member:
    """
    Register a new member.

    The member's area defaults to the leader's area. The leader is
    notified when someone else registers the member for them.
    """
    scope = RoleScope(db, current_user)

    leader = db.get(User, payload.leader_id)
    if leader is None:
        raise UserNotFoundError(str(payload.leader_id))
    if scope.is_leader_scoped and leader.id != current_user.id:
        raise AuthorizationError("Bacenta leaders can only register their own members")

    area_id = payload.area_id or leader.area_id
    if area_id is None:
        raise ValidationError("The member has no area and the leader has none either")
    if db.get(Area, area_id) is None:
        raise NotFoundError("Area", str(area_id))
    if not scope.is_leader_scoped:
        scope.ensure_area(area_id)
    if payload.ministry_id and db.get(Ministry, payload.ministry_id) is None:
        raise NotFoundError("Ministry", str(payload.ministry_id))

    data = payload.model_dump(exclude={"area_id"})
    data["gender"] = payload.gender.value
    data["state"] = payload.state.value

    member = Member(**data, area_id=area_id, is_active=True)
    db.add(member)
    db.commit()
    db.refresh(member)

    if leader.id != current_user.id:
        notify(
            db,
            user_id=leader.id,
            title="New member",
            message=f"{member.full_name} has been added to your members by {current_user.full_name}.",
            type=NotificationType.INFO,
            data={"member_id": str(member.id)},
        )

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="create",
        resource="member",
        resource_id=str(member.id),
        leader_id=str(leader.id),
    )
    return member


# =====================================
# Update / Delete
# =====================================

@router.put("/{member_id}", response_model=MemberResponse, summary="Update Member")
def update_member(
    member_id: UUID,
    payload: MemberUpdate,
    current_user: User = Depends(require_role(*MEMBER_EDITORS)),
    db: Session = Depends(get_db),
) -> Member:
    scope = RoleScope(db, current_user)
    member = get_scoped_member(db, scope, member_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("leader_id") and db.get(User, changes["leader_id"]) is None:
        raise UserNotFoundError(str(changes["leader_id"]))
    if changes.get("area_id"):
        if db.get(Area, changes["area_id"]) is None:
            raise NotFoundError("Area", str(changes["area_id"]))
        scope.ensure_area(changes["area_id"])
    if changes.get("ministry_id") and db.get(Ministry, changes["ministry_id"]) is None:
        raise NotFoundError("Ministry", str(changes["ministry_id"]))

    required = {"first_name", "last_name", "phone_primary", "gender", "leader_id", "area_id",
                "state", "is_registered", "is_active"}
    for field, value in changes.items():
        if value is None and field in required:
            continue
        setattr(member, field, value.value if hasattr(value, "value") else value)

    db.commit()
    db.refresh(member)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="update",
        resource="member",
        resource_id=str(member.id),
        fields=sorted(changes),
    )
    return member


@router.delete("/{member_id}", summary="Deactivate Member")
def delete_member(
    member_id: UUID,
    current_user: User = Depends(require_role(*MEMBER_REMOVERS)),
    db: Session = Depends(get_db),
) -> dict:
    """Soft delete: the member is marked inactive and keeps their history."""
    member = get_scoped_member(db, RoleScope(db, current_user), member_id)
    member.is_active = False
    db.commit()

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="delete",
        resource="member",
        resource_id=str(member.id),
    )
    return {"message": "Member deactivated successfully"}


@router.post("/{member_id}/photo", response_model=MemberResponse, summary="Upload Member Photo")
def upload_member_photo(
    member_id: UUID,
    photo: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Member:
    member = get_scoped_member(db, RoleScope(db, current_user), member_id)

    old_url = member.photo_url
    member.photo_url = save_image(photo, "members", "member")
    db.commit()
    delete_upload(old_url)

    return member
