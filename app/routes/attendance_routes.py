"""
Attendance Routes Module
========================

Sunday service attendance: listing, bulk marking, per-Sunday statistics
and the weekly call list of members who dropped out.

Every endpoint is limited to the members in the caller's scope.
"""

from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import case, func, select
from sqlalchemy.orm import Session, joinedload

from app.core.dependencies.auth import get_current_user
from app.core.logging import audit_logger, get_logger
from app.core.scope import RoleScope
from app.db.base import utcnow
from app.db.session import get_db
from app.models.attendance import Attendance
from app.models.member import Member
from app.models.user import User
from app.schemas.attendance import AttendanceListResponse, BulkAttendanceRequest
from app.schemas.common import ErrorResponse
from app.services.aggregates import last_sunday, paginate, percentage

logger = get_logger(__name__)


router = APIRouter(
    prefix="/attendance",
    tags=["Attendance"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)


def apply_member_filters(query, area_id: Optional[UUID], leader_id: Optional[UUID]):
    """Narrow an Attendance query by the member's area or leader."""
    if area_id or leader_id:
        query = query.join(Member, Attendance.member_id == Member.id)
    if area_id:
        query = query.filter(Member.area_id == area_id)
    if leader_id:
        query = query.filter(Member.leader_id == leader_id)
    return query


def apply_date_range(query, column, start_date: Optional[date], end_date: Optional[date]):
    if start_date:
        query = query.filter(column >= start_date)
    if end_date:
        query = query.filter(column <= end_date)
    return query


# =====================================
# List
# =====================================

@router.get("/", response_model=AttendanceListResponse, summary="List Attendance")
def list_attendance(
    member_id: Optional[UUID] = Query(None),
    leader_id: Optional[UUID] = Query(None),
    area_id: Optional[UUID] = Query(None),
    sunday_date: Optional[date] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    List attendance records, most recent Sunday first.

    `sunday_date` takes precedence over a start/end range.
    """
    query = RoleScope(db, current_user).filter_attendance(db.query(Attendance))
    query = apply_member_filters(query, area_id, leader_id)

    if member_id:
        query = query.filter(Attendance.member_id == member_id)
    if sunday_date:
        query = query.filter(Attendance.sunday_date == sunday_date)
    else:
        query = apply_date_range(query, Attendance.sunday_date, start_date, end_date)

    query = query.options(joinedload(Attendance.member)).order_by(
        Attendance.sunday_date.desc(), Attendance.created_at.desc()
    )
    records, total, pages = paginate(query, page, limit)

    return {"attendances": records, "total": total, "page": page, "total_pages": pages}


# =====================================
# Bulk marking
# =====================================

@router.post("/bulk", summary="Mark Attendance")
def bulk_attendance(
    payload: BulkAttendanceRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    Mark attendance of several members for one Sunday.

    Existing records for the same member and Sunday are updated. Members
    that do not exist or lie outside the caller's scope are reported in
    `details` and skipped; the others are saved.

    Returns:
        {message, successes, errors, details}
    """
    scope = RoleScope(db, current_user)
    successes = 0
    errors: list[str] = []

    for item in payload.attendances:
        member = db.get(Member, item.member_id)
        if member is None:
            errors.append(f"Member {item.member_id} not found")
            continue
        if not scope.can_access_member(member):
            errors.append(f"Access denied for member {member.full_name}")
            continue

        record = (
            db.query(Attendance)
            .filter(
                Attendance.member_id == member.id,
                Attendance.sunday_date == payload.sunday_date,
            )
            .first()
        )
        if record is None:
            record = Attendance(member_id=member.id, sunday_date=payload.sunday_date)
            db.add(record)

        record.present = item.present
        record.notes = item.notes
        record.marked_by_user_id = current_user.id

        if item.present and (
            member.last_attendance_date is None or member.last_attendance_date < payload.sunday_date
        ):
            member.last_attendance_date = payload.sunday_date

        successes += 1

    db.commit()

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="mark",
        resource="attendance",
        sunday_date=payload.sunday_date.isoformat(),
        successes=successes,
        errors=len(errors),
    )

    return {
        "message": f"Attendance marked for {successes} members",
        "successes": successes,
        "errors": len(errors),
        "details": errors,
    }


# =====================================
# Statistics
# =====================================

@router.get("/stats/summary", summary="Attendance Statistics")
def attendance_stats(
    area_id: Optional[UUID] = Query(None),
    leader_id: Optional[UUID] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[dict]:
    """Totals per Sunday, most recent first."""
    present_sum = func.coalesce(func.sum(case((Attendance.present.is_(True), 1), else_=0)), 0)
    query = db.query(
        Attendance.sunday_date,
        func.count(Attendance.id),
        present_sum,
    )
    query = RoleScope(db, current_user).filter_attendance(query)
    query = apply_member_filters(query, area_id, leader_id)
    query = apply_date_range(query, Attendance.sunday_date, start_date, end_date)

    rows = query.group_by(Attendance.sunday_date).order_by(Attendance.sunday_date.desc()).all()

    stats = []
    for sunday, total, present in rows:
        total, present = int(total), int(present or 0)
        stats.append(
            {
                "sunday_date": sunday,
                "total": total,
                "present_count": present,
                "absent_count": total - present,
                "percentage": percentage(present, total),
            }
        )
    return stats


# =====================================
# Call list
# =====================================

@router.get("/call-list", summary="Generate Call List")
def call_list(
    weeks_back: int = Query(2, ge=1, le=52),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    Members who attended the previous Sunday but missed the last one.

    The "last" Sunday is the most recent Sunday moved back by
    `weeks_back - 1` weeks.
    """
    latest = last_sunday(date.today()) - timedelta(weeks=weeks_back - 1)
    previous = latest - timedelta(weeks=1)
    marked = select(Attendance.member_id).where(Attendance.sunday_date.in_([previous, latest]))

    members = (
        RoleScope(db, current_user)
        .filter_members(db.query(Member))
        .options(joinedload(Member.area))
        .filter(Member.id.in_(marked))
        .all()
    )

    entries = []
    for member in members:
        marks = {
            record.sunday_date: record.present
            for record in member.attendances
            if record.sunday_date in (previous, latest)
        }
        if marks.get(previous) is True and marks.get(latest) is False:
            entries.append(
                {
                    "id": member.id,
                    "first_name": member.first_name,
                    "last_name": member.last_name,
                    "phone_primary": member.phone_primary,
                    "phone_secondary": member.phone_secondary,
                    "area": member.area.name if member.area else None,
                    "last_attendance_date": member.last_attendance_date,
                }
            )

    logger.info("call_list_generated", last_sunday=latest.isoformat(), members=len(entries))

    return {
        "generated_at": utcnow(),
        "date_range": {"previous_sunday": previous, "last_sunday": latest},
        "call_list": entries,
    }
