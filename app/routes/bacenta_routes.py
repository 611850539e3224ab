"""
Bacenta Routes Module
=====================

Home-group (Bacenta) meetings with their attendance, offerings,
supervisor verification and photo.

Security:
- A Bacenta leader only reaches the meetings they lead
- Other roles reach the meetings of leaders in their areas
- Verification restricted to Bishop, Assisting Overseer and Area Pastor
"""

from collections import Counter, defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.core.dependencies.auth import get_current_user
from app.core.dependencies.rbac import require_role
from app.core.enums import NotificationType
from app.core.exceptions import AuthorizationError, MeetingNotFoundError
from app.core.logging import audit_logger, get_logger
from app.core.scope import RoleScope
from app.db.base import utcnow
from app.db.session import get_db
from app.models.bacenta import BacentaAttendance, BacentaMeeting, BacentaOffering
from app.models.member import Member
from app.models.role_enum import Role
from app.models.user import User
from app.schemas.bacenta import (
    MeetingAttendanceRequest,
    MeetingCreate,
    MeetingDetailResponse,
    MeetingListResponse,
    MeetingResponse,
    MeetingUpdate,
    MeetingVerifyRequest,
    OfferingResponse,
    OfferingsRequest,
)
from app.schemas.common import ErrorResponse
from app.services.aggregates import paginate
from app.services.notification_service import notify
from app.services.upload_service import delete_upload, save_image

logger = get_logger(__name__)

MEETING_SUPERVISORS = (Role.BISHOP, Role.ASSISTING_OVERSEER, Role.AREA_PASTOR)

# request field -> column
MEETING_FIELDS = {"date": "meeting_date", "type": "meeting_type", "time": "meeting_time"}


router = APIRouter(
    prefix="/bacenta",
    tags=["Bacenta"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not your meeting"},
        404: {"model": ErrorResponse, "description": "Meeting not found"},
    },
)


# =====================================
# Helpers
# =====================================

def get_scoped_meeting(db: Session, current_user: User, meeting_id: UUID) -> BacentaMeeting:
    meeting = db.get(BacentaMeeting, meeting_id)
    if meeting is None:
        raise MeetingNotFoundError(str(meeting_id))
    RoleScope(db, current_user).ensure_meeting(meeting)
    return meeting


def meeting_detail(meeting: BacentaMeeting) -> dict:
    """Serialize a meeting with its attendance and offerings breakdown."""
    by_type: dict[str, float] = defaultdict(float)
    for offering in meeting.offerings:
        by_type[str(offering.offering_type)] += float(offering.amount)

    detail = MeetingResponse.model_validate(meeting).model_dump()
    detail["attendances"] = meeting.attendances
    detail["offerings"] = meeting.offerings
    detail["offerings_by_type"] = dict(by_type)
    return detail


def column_values(changes: dict) -> dict:
    values = {}
    for field, value in changes.items():
        column = MEETING_FIELDS.get(field, field)
        values[column] = value.value if hasattr(value, "value") else value
    return values


# =====================================
# Leader views
# =====================================

@router.get("/stats", summary="Bacenta Statistics")
def bacenta_stats(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Totals over the meetings the caller leads."""
    query = db.query(BacentaMeeting).filter(BacentaMeeting.leader_id == current_user.id)
    if start_date:
        query = query.filter(BacentaMeeting.meeting_date >= start_date)
    if end_date:
        query = query.filter(BacentaMeeting.meeting_date <= end_date)
    meetings = query.all()

    total_attendance = sum(m.total_members_present for m in meetings)
    return {
        "total_meetings": len(meetings),
        "total_offering": float(sum((m.offering_amount for m in meetings), Decimal("0"))),
        "total_attendance": total_attendance,
        "average_attendance": round(total_attendance / len(meetings)) if meetings else 0,
        "verified_meetings": sum(1 for m in meetings if m.is_verified),
        "meetings_by_type": dict(Counter(str(m.meeting_type) for m in meetings)),
    }


@router.get("/members", summary="Bacenta Members")
def bacenta_members(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[dict]:
    """Members available for meeting attendance, as a compact list."""
    members = (
        RoleScope(db, current_user)
        .filter_members(db.query(Member))
        .filter(Member.is_active.is_(True))
        .order_by(Member.first_name, Member.last_name)
        .all()
    )
    return [
        {
            "id": member.id,
            "first_name": member.first_name,
            "last_name": member.last_name,
            "phone": member.phone_primary,
        }
        for member in members
    ]


# =====================================
# Meetings
# =====================================

@router.get("/meetings", response_model=MeetingListResponse, summary="List Meetings")
def list_meetings(
    leader_id: Optional[UUID] = Query(None),
    is_verified: Optional[bool] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    query = RoleScope(db, current_user).filter_meetings(db.query(BacentaMeeting))

    if leader_id:
        query = query.filter(BacentaMeeting.leader_id == leader_id)
    if is_verified is not None:
        query = query.filter(BacentaMeeting.is_verified.is_(is_verified))
    if start_date:
        query = query.filter(BacentaMeeting.meeting_date >= start_date)
    if end_date:
        query = query.filter(BacentaMeeting.meeting_date <= end_date)

    query = query.options(
        selectinload(BacentaMeeting.leader),
        selectinload(BacentaMeeting.attendances).selectinload(BacentaAttendance.member),
        selectinload(BacentaMeeting.offerings),
    ).order_by(BacentaMeeting.meeting_date.desc(), BacentaMeeting.created_at.desc())
    meetings, total, pages = paginate(query, page, limit)

    return {
        "meetings": [meeting_detail(meeting) for meeting in meetings],
        "total": total,
        "page": page,
        "total_pages": pages,
    }


@router.post(
    "/meetings",
    response_model=MeetingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Meeting",
)
def create_meeting(
    payload: MeetingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> BacentaMeeting:
    """Create a meeting led by the caller."""
    meeting = BacentaMeeting(leader_id=current_user.id, **column_values(payload.model_dump()))
    db.add(meeting)
    db.commit()
    db.refresh(meeting)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="create",
        resource="bacenta_meeting",
        resource_id=str(meeting.id),
    )
    return meeting


@router.get("/meetings/{meeting_id}", response_model=MeetingDetailResponse, summary="Get Meeting")
def get_meeting(
    meeting_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return meeting_detail(get_scoped_meeting(db, current_user, meeting_id))


@router.put("/meetings/{meeting_id}", response_model=MeetingDetailResponse, summary="Update Meeting")
def update_meeting(
    meeting_id: UUID,
    payload: MeetingUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    meeting = get_scoped_meeting(db, current_user, meeting_id)
    changes = payload.model_dump(exclude_unset=True)

    for column, value in column_values(changes).items():
        if value is None and column in ("meeting_date", "meeting_type"):
            continue
        setattr(meeting, column, value)

    db.commit()
    db.refresh(meeting)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="update",
        resource="bacenta_meeting",
        resource_id=str(meeting.id),
        fields=sorted(changes),
    )
    return meeting_detail(meeting)


@router.delete("/meetings/{meeting_id}", summary="Delete Meeting")
def delete_meeting(
    meeting_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    meeting = get_scoped_meeting(db, current_user, meeting_id)
    photo_url = meeting.photo_url

    db.delete(meeting)
    db.commit()
    delete_upload(photo_url)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="delete",
        resource="bacenta_meeting",
        resource_id=str(meeting_id),
    )
    return {"message": "Meeting deleted successfully"}


# =====================================
# Attendance & Offerings
# =====================================

@router.post("/{meeting_id}/attendance", summary="Mark Meeting Attendance")
def mark_meeting_attendance(
    meeting_id: UUID,
    payload: MeetingAttendanceRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    Record who attended a meeting.

    Existing marks are updated. `total_members_present` is recomputed
    from every mark of the meeting afterwards.
    """
    meeting = get_scoped_meeting(db, current_user, meeting_id)
    scope = RoleScope(db, current_user)
    successes = 0
    errors: list[str] = []

    for item in payload.attendance:
        member = db.get(Member, item.member_id)
        if member is None:
            errors.append(f"Member {item.member_id} not found")
            continue
        if not scope.can_access_member(member):
            errors.append(f"Access denied for member {member.full_name}")
            continue

        record = (
            db.query(BacentaAttendance)
            .filter(
                BacentaAttendance.bacenta_meeting_id == meeting.id,
                BacentaAttendance.member_id == member.id,
            )
            .first()
        )
        if record is None:
            record = BacentaAttendance(bacenta_meeting_id=meeting.id, member_id=member.id)
            db.add(record)

        record.present = item.status == "present"
        record.arrival_time = item.arrival_time
        record.special_notes = item.special_notes
        record.marked_by_user_id = current_user.id
        successes += 1

    db.flush()
    meeting.total_members_present = (
        db.query(func.count(BacentaAttendance.id))
        .filter(
            BacentaAttendance.bacenta_meeting_id == meeting.id,
            BacentaAttendance.present.is_(True),
        )
        .scalar()
    )
    db.commit()

    return {
        "message": f"Attendance marked for {successes} members",
        "successes": successes,
        "errors": len(errors),
        "total_members_present": meeting.total_members_present,
        "details": errors,
    }


@router.post(
    "/{meeting_id}/offerings",
    status_code=status.HTTP_201_CREATED,
    summary="Add Meeting Offerings",
)
def add_meeting_offerings(
    meeting_id: UUID,
    payload: OfferingsRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    Record offerings collected during a meeting.

    Entries with a zero or negative amount are ignored. The meeting's
    `offering_amount` becomes the sum of all its offerings.
    """
    meeting = get_scoped_meeting(db, current_user, meeting_id)

    created = []
    for item in payload.offerings:
        if item.amount <= 0:
            continue
        offering = BacentaOffering(
            bacenta_meeting_id=meeting.id,
            offering_type=item.type.value,
            amount=item.amount,
            currency="XAF",
            collected_by=current_user.id,
            is_verified=False,
        )
        db.add(offering)
        created.append(offering)

    db.flush()
    total = (
        db.query(func.coalesce(func.sum(BacentaOffering.amount), 0))
        .filter(BacentaOffering.bacenta_meeting_id == meeting.id)
        .scalar()
    )
    meeting.offering_amount = Decimal(str(total))
    db.commit()

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="create",
        resource="bacenta_offering",
        resource_id=str(meeting.id),
        count=len(created),
    )

    return {
        "message": f"{len(created)} offerings added",
        "total": float(meeting.offering_amount),
        "offerings": [OfferingResponse.model_validate(o).model_dump() for o in created],
    }


# =====================================
# Verification & Photo
# =====================================

@router.put("/meetings/{meeting_id}/verify", response_model=MeetingResponse, summary="Verify Meeting")
def verify_meeting(
    meeting_id: UUID,
    payload: MeetingVerifyRequest,
    current_user: User = Depends(require_role(*MEETING_SUPERVISORS)),
    db: Session = Depends(get_db),
) -> BacentaMeeting:
    """Mark a meeting as verified by a supervisor and tell its leader."""
    meeting = get_scoped_meeting(db, current_user, meeting_id)

    meeting.is_verified = True
    meeting.verified_by = current_user.id
    meeting.verified_at = utcnow()
    meeting.verification_notes = payload.verification_notes
    db.commit()
    db.refresh(meeting)

    notify(
        db,
        user_id=meeting.leader_id,
        title="Meeting verified",
        message=f"Your meeting of {meeting.meeting_date.isoformat()} was verified by {current_user.full_name}.",
        type=NotificationType.MEETING,
        data={"meeting_id": str(meeting.id)},
    )

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="verify",
        resource="bacenta_meeting",
        resource_id=str(meeting.id),
    )
    return meeting


@router.put("/meetings/{meeting_id}/photo", summary="Upload Meeting Photo")
def upload_meeting_photo(
    meeting_id: UUID,
    photo: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Only the meeting's leader or a supervisor may set its photo."""
    meeting = db.get(BacentaMeeting, meeting_id)
    if meeting is None:
        raise MeetingNotFoundError(str(meeting_id))
    if meeting.leader_id != current_user.id:
        if current_user.role not in MEETING_SUPERVISORS:
            raise AuthorizationError("Only the leader or a supervisor can change this photo")
        RoleScope(db, current_user).ensure_meeting(meeting)

    old_url = meeting.photo_url
    meeting.photo_url = save_image(photo, "bacenta-meetings", "meeting")
    db.commit()
    delete_upload(old_url)

    return {"message": "Photo uploaded successfully", "photo_url": meeting.photo_url}
