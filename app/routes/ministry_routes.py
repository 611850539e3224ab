"""
Ministry Routes Module
======================

Ministries (choir, ushering, media, ...), their members, attendance
and per-date headcounts.

Creating and deleting ministries is restricted to Bishop, Governor and
Data Clerk. Every other endpoint is open to authenticated users.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.core.dependencies.auth import get_current_user
from app.core.dependencies.rbac import require_role
from app.core.exceptions import NotFoundError, UserNotFoundError
from app.core.logging import audit_logger, get_logger
from app.db.session import get_db
from app.models.member import Member
from app.models.ministry import Ministry, MinistryAttendance, MinistryHeadcount
from app.models.role_enum import Role
from app.models.user import User
from app.schemas.common import ErrorResponse
from app.schemas.member import MemberResponse
from app.schemas.ministry import HeadcountRequest, MinistryAttendanceRequest, MinistryCreate

logger = get_logger(__name__)

MINISTRY_ADMINS = (Role.BISHOP, Role.GOVERNOR, Role.DATA_CLERK)


router = APIRouter(
    prefix="/ministries",
    tags=["Ministries"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Ministry not found"},
    },
)


def get_ministry_or_404(db: Session, ministry_id: UUID) -> Ministry:
    ministry = db.get(Ministry, ministry_id)
    if ministry is None:
        raise NotFoundError("Ministry", str(ministry_id))
    return ministry


def active_member_counts(db: Session) -> dict:
    rows = (
        db.query(Member.ministry_id, func.count(Member.id))
        .filter(Member.ministry_id.isnot(None), Member.is_active.is_(True))
        .group_by(Member.ministry_id)
        .all()
    )
    return {ministry_id: count for ministry_id, count in rows}


def serialize_ministry(ministry: Ministry, member_count: int) -> dict:
    return {
        "id": ministry.id,
        "name": ministry.name,
        "description": ministry.description,
        "leader": ministry.leader.full_name if ministry.leader else None,
        "member_count": member_count,
    }


# =====================================
# Ministries
# =====================================

@router.get("/", summary="List Ministries")
def list_ministries(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[dict]:
    ministries = db.query(Ministry).options(joinedload(Ministry.leader)).order_by(Ministry.name).all()
    counts = active_member_counts(db)
    return [serialize_ministry(m, counts.get(m.id, 0)) for m in ministries]


@router.post("/", status_code=status.HTTP_201_CREATED, summary="Create Ministry")
def create_ministry(
    payload: MinistryCreate,
    current_user: User = Depends(require_role(*MINISTRY_ADMINS)),
    db: Session = Depends(get_db),
) -> dict:
    if payload.leader_id and db.get(User, payload.leader_id) is None:
        raise UserNotFoundError(str(payload.leader_id))

    ministry = Ministry(**payload.model_dump())
    db.add(ministry)
    db.commit()
    db.refresh(ministry)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="create",
        resource="ministry",
        resource_id=str(ministry.id),
        name=ministry.name,
    )
    return serialize_ministry(ministry, 0)


# =====================================
# Overview & Headcounts
# =====================================

@router.get("/overview", summary="Ministries Attendance Overview")
def ministries_overview(
    day: Optional[date] = Query(None, alias="date", description="Defaults to today"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Per ministry: active members, members marked present and the headcount for one date."""
    day = day or date.today()
    counts = active_member_counts(db)

    present_rows = (
        db.query(MinistryAttendance.ministry_id, func.count(MinistryAttendance.id))
        .filter(MinistryAttendance.date == day, MinistryAttendance.present.is_(True))
        .group_by(MinistryAttendance.ministry_id)
        .all()
    )
    present = {ministry_id: count for ministry_id, count in present_rows}

    headcounts = {
        row.ministry_id: row
        for row in db.query(MinistryHeadcount).filter(MinistryHeadcount.date == day).all()
    }

    overview = []
    for ministry in db.query(Ministry).order_by(Ministry.name).all():
        headcount = headcounts.get(ministry.id)
        overview.append(
            {
                "id": ministry.id,
                "name": ministry.name,
                "member_count": counts.get(ministry.id, 0),
                "present_count": present.get(ministry.id, 0),
                "headcount": headcount.headcount if headcount else None,
                "headcount_notes": headcount.notes if headcount else None,
            }
        )

    return {"date": day, "ministries": overview}


@router.post("/headcounts", summary="Save Headcounts")
def save_headcounts(
    payload: HeadcountRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Upsert the headcount of several ministries for one date."""
    saved = 0
    errors: list[str] = []

    for item in payload.headcounts:
        if db.get(Ministry, item.ministry_id) is None:
            errors.append(f"Ministry {item.ministry_id} not found")
            continue

        record = (
            db.query(MinistryHeadcount)
            .filter(
                MinistryHeadcount.ministry_id == item.ministry_id,
                MinistryHeadcount.date == payload.date,
            )
            .first()
        )
        if record is None:
            record = MinistryHeadcount(ministry_id=item.ministry_id, date=payload.date)
            db.add(record)

        record.headcount = item.headcount
        record.notes = item.notes
        record.marked_by_user_id = current_user.id
        saved += 1

    db.commit()

    return {
        "message": f"Headcounts saved for {saved} ministries",
        "successes": saved,
        "errors": len(errors),
        "details": errors,
    }


# =====================================
# Single ministry
# =====================================

@router.delete("/{ministry_id}", summary="Delete Ministry")
def delete_ministry(
    ministry_id: UUID,
    current_user: User = Depends(require_role(*MINISTRY_ADMINS)),
    db: Session = Depends(get_db),
) -> dict:
    """Delete a ministry. Its members stay, without a ministry."""
    ministry = get_ministry_or_404(db, ministry_id)
    db.query(Member).filter(Member.ministry_id == ministry.id).update(
        {Member.ministry_id: None}, synchronize_session=False
    )
    db.delete(ministry)
    db.commit()

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="delete",
        resource="ministry",
        resource_id=str(ministry_id),
    )
    return {"message": "Ministry deleted successfully"}


@router.get("/{ministry_id}/members", response_model=list[MemberResponse], summary="Ministry Members")
def ministry_members(
    ministry_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[Member]:
    get_ministry_or_404(db, ministry_id)
    return (
        db.query(Member)
        .options(joinedload(Member.leader))
        .filter(Member.ministry_id == ministry_id, Member.is_active.is_(True))
        .order_by(Member.first_name, Member.last_name)
        .all()
    )


@router.post("/{ministry_id}/attendance", summary="Mark Ministry Attendance")
def mark_ministry_attendance(
    ministry_id: UUID,
    payload: MinistryAttendanceRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    ministry = get_ministry_or_404(db, ministry_id)
    saved = 0
    errors: list[str] = []

    for item in payload.attendances:
        if db.get(Member, item.member_id) is None:
            errors.append(f"Member {item.member_id} not found")
            continue

        record = (
            db.query(MinistryAttendance)
            .filter(
                MinistryAttendance.ministry_id == ministry.id,
                MinistryAttendance.member_id == item.member_id,
                MinistryAttendance.date == payload.date,
            )
            .first()
        )
        if record is None:
            record = MinistryAttendance(
                ministry_id=ministry.id,
                member_id=item.member_id,
                date=payload.date,
            )
            db.add(record)

        record.present = item.present
        record.marked_by_user_id = current_user.id
        saved += 1

    db.commit()

    return {
        "message": "Attendance updated",
        "successes": saved,
        "errors": len(errors),
        "details": errors,
    }


@router.get("/{ministry_id}/attendance/stats", summary="Ministry Attendance Stats")
def ministry_attendance_stats(
    ministry_id: UUID,
    day: date = Query(..., alias="date"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Attendance of the ministry's active members on one date. Unmarked members count as absent."""
    get_ministry_or_404(db, ministry_id)

    members = (
        db.query(Member)
        .filter(Member.ministry_id == ministry_id, Member.is_active.is_(True))
        .order_by(Member.first_name, Member.last_name)
        .all()
    )
    marks = {
        record.member_id: record.present
        for record in db.query(MinistryAttendance).filter(
            MinistryAttendance.ministry_id == ministry_id,
            MinistryAttendance.date == day,
        )
    }

    details = [
        {"member_id": m.id, "name": m.full_name, "present": marks.get(m.id, False)}
        for m in members
    ]

    return {
        "date": day,
        "total_present": sum(1 for entry in details if entry["present"]),
        "total_members": len(members),
        "details": details,
    }
