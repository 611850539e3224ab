"""
Report Service
==============

Builds the reports exposed under /api/reports. Every report receives a
RoleScope so figures never include data outside the caller's area.
"""

import csv
import io
from collections import defaultdict
from datetime import date, datetime, timedelta, UTC
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.exceptions import ValidationError
from app.core.scope import RoleScope
from app.models.area import Area
from app.models.attendance import Attendance
from app.models.bacenta import BacentaMeeting
from app.models.call_log import CallLog
from app.models.member import Member
from app.models.region import Region
from app.models.user import User
from app.services.aggregates import attendance_totals, day_start, percentage

EXPORT_TYPES = ("members", "attendance", "bacenta_meetings")

GROWTH_PERIODS = {
    "1month": 30,
    "3months": 91,
    "6months": 182,
    "1year": 365,
}


def _person(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {"id": user.id, "first_name": user.first_name, "last_name": user.last_name}


# ==========================================
# ATTENDANCE REPORT
# ==========================================

def attendance_report(
    db: Session,
    scope: RoleScope,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    area_id: Optional[UUID] = None,
    leader_id: Optional[UUID] = None,
) -> dict:
    """
    Attendance totals over a period, broken down by leader.

    Members whose two most recent records in the period are both absences
    are listed as needing follow-up.
    """
    member_query = scope.filter_members(db.query(Member))
    if area_id:
        member_query = member_query.filter(Member.area_id == area_id)
    if leader_id:
        member_query = member_query.filter(Member.leader_id == leader_id)

    by_leader_rows = (
        member_query.with_entities(Member.leader_id, func.count(Member.id))
        .group_by(Member.leader_id)
        .all()
    )
    leaders = {
        u.id: u
        for u in db.query(User).filter(User.id.in_([row[0] for row in by_leader_rows])).all()
    } if by_leader_rows else {}
    total_members = sum(count for _, count in by_leader_rows)

    member_ids = member_query.with_entities(Member.id).subquery()
    attendance_query = db.query(Attendance).filter(Attendance.member_id.in_(member_ids.select()))
    if start_date:
        attendance_query = attendance_query.filter(Attendance.sunday_date >= start_date)
    if end_date:
        attendance_query = attendance_query.filter(Attendance.sunday_date <= end_date)

    total_records, total_present = attendance_totals(db, attendance_query)
    total_weeks = attendance_query.with_entities(
        func.count(func.distinct(Attendance.sunday_date))
    ).scalar() or 0

    # Two most recent records per member, newest first
    recent: Dict[UUID, List[bool]] = defaultdict(list)
    for member_id, present in (
        attendance_query.with_entities(Attendance.member_id, Attendance.present)
        .order_by(Attendance.member_id, Attendance.sunday_date.desc())
        .all()
    ):
        if len(recent[member_id]) < 2:
            recent[member_id].append(present)

    absent_ids = [
        member_id
        for member_id, marks in recent.items()
        if len(marks) == 2 and not any(marks)
    ]
    follow_up = (
        db.query(Member).filter(Member.id.in_(absent_ids)).order_by(Member.first_name).all()
        if absent_ids else []
    )

    return {
        "period": {
            "start_date": start_date,
            "end_date": end_date,
            "total_weeks": total_weeks,
        },
        "summary": {
            "total_members": total_members,
            "total_attendance_records": total_records,
            "total_present": total_present,
            "overall_percentage": percentage(total_present, total_records),
            "members_with_consecutive_absences": len(follow_up),
        },
        "by_leader": [
            {"leader": _person(leaders.get(leader_id_)), "total_members": count}
            for leader_id_, count in by_leader_rows
        ],
        "members_needing_follow_up": [
            {
                "id": m.id,
                "first_name": m.first_name,
                "last_name": m.last_name,
                "phone_primary": m.phone_primary,
                "leader_id": m.leader_id,
            }
            for m in follow_up
        ],
    }


# ==========================================
# BACENTA REPORT
# ==========================================

def bacenta_report(
    db: Session,
    scope: RoleScope,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    leader_id: Optional[UUID] = None,
) -> dict:
    query = scope.filter_meetings(db.query(BacentaMeeting)).options(joinedload(BacentaMeeting.leader))
    if leader_id:
        query = query.filter(BacentaMeeting.leader_id == leader_id)
    if start_date:
        query = query.filter(BacentaMeeting.meeting_date >= start_date)
    if end_date:
        query = query.filter(BacentaMeeting.meeting_date <= end_date)

    meetings = query.order_by(BacentaMeeting.meeting_date.desc()).all()

    total_attendance = sum(m.total_members_present or 0 for m in meetings)
    total_offering = sum(float(m.offering_amount or 0) for m in meetings)

    return {
        "period": {"start_date": start_date, "end_date": end_date},
        "summary": {
            "total_meetings": len(meetings),
            "average_attendance": round(total_attendance / len(meetings)) if meetings else 0,
            "total_offering": total_offering,
        },
        "meetings": [
            {
                "id": m.id,
                "meeting_date": m.meeting_date,
                "meeting_type": m.meeting_type,
                "leader": _person(m.leader),
                "location": m.location,
                "total_members_present": m.total_members_present,
                "offering_amount": float(m.offering_amount or 0),
                "is_verified": m.is_verified,
            }
            for m in meetings
        ],
    }


# ==========================================
# AREA ATTENDANCE (GOVERNOR VIEW)
# ==========================================

def area_attendance_report(
    db: Session,
    scope: RoleScope,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> dict:
    areas = scope.filter_areas(db.query(Area)).order_by(Area.number).all()

    rows = []
    for area in areas:
        query = (
            db.query(Attendance)
            .join(Member, Attendance.member_id == Member.id)
            .filter(Member.area_id == area.id)
        )
        if start_date:
            query = query.filter(Attendance.sunday_date >= start_date)
        if end_date:
            query = query.filter(Attendance.sunday_date <= end_date)

        records, present = attendance_totals(db, query)
        members = (
            db.query(func.count(Member.id))
            .filter(Member.area_id == area.id, Member.is_active.is_(True))
            .scalar()
        ) or 0

        rows.append({
            "area": {"id": area.id, "name": area.name, "number": area.number},
            "total_members": members,
            "total_records": records,
            "total_present": present,
            "percentage": percentage(present, records),
        })

    all_records = sum(r["total_records"] for r in rows)
    all_present = sum(r["total_present"] for r in rows)

    return {
        "period": {"start_date": start_date, "end_date": end_date},
        "summary": {
            "total_areas": len(rows),
            "total_records": all_records,
            "total_present": all_present,
            "overall_percentage": percentage(all_present, all_records),
        },
        "areas": rows,
    }


# ==========================================
# CALL LOG REPORT
# ==========================================

def call_log_report(
    db: Session,
    scope: RoleScope,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    today: Optional[date] = None,
) -> dict:
    today = today or date.today()

    query = scope.filter_call_logs(db.query(CallLog))
    if start_date:
        query = query.filter(CallLog.call_date >= day_start(start_date))
    if end_date:
        query = query.filter(
            CallLog.call_date < day_start(end_date + timedelta(days=1))
        )

    def grouped(column) -> Dict[str, int]:
        return {
            str(key): count
            for key, count in query.with_entities(column, func.count(CallLog.id)).group_by(column).all()
        }

    by_caller_rows = (
        query.with_entities(CallLog.caller_id, func.count(CallLog.id))
        .group_by(CallLog.caller_id)
        .all()
    )
    callers = {
        u.id: u
        for u in db.query(User).filter(User.id.in_([row[0] for row in by_caller_rows])).all()
    } if by_caller_rows else {}

    followups_due = query.filter(
        CallLog.next_followup_date.isnot(None),
        CallLog.next_followup_date <= today,
    ).count()

    return {
        "period": {"start_date": start_date, "end_date": end_date},
        "summary": {
            "total_calls": query.count(),
            "followups_due": followups_due,
        },
        "by_outcome": grouped(CallLog.outcome),
        "by_contact_method": grouped(CallLog.contact_method),
        "by_caller": [
            {"caller": _person(callers.get(caller_id)), "total_calls": count}
            for caller_id, count in by_caller_rows
        ],
    }


# ==========================================
# MEMBER GROWTH
# ==========================================

def _label(day: date) -> str:
    return f"{day.day}/{day.month}"


def member_growth_report(
    db: Session,
    scope: RoleScope,
    period: str = "3months",
    group_by: str = "global",
) -> dict:
    """
    Cumulative member count over a period, as chart data.

    Each point is a day on which at least one member was added; the
    first point is the period start. With `group_by="region"` there is
    one dataset per region.
    """
    end = datetime.now(UTC)
    start = end - timedelta(days=GROWTH_PERIODS.get(period, GROWTH_PERIODS["3months"]))

    base = scope.filter_members(db.query(Member))
    initial_count = base.filter(Member.created_at < start).count()

    new_members = (
        base.filter(Member.created_at >= start, Member.created_at <= end)
        .options(joinedload(Member.area))
        .order_by(Member.created_at)
        .all()
    )

    growth_days: List[date] = []
    for member in new_members:
        day = member.created_at.date()
        if not growth_days or growth_days[-1] != day:
            growth_days.append(day)
    labels = [_label(start.date())] + [_label(day) for day in growth_days]

    def cumulative(initial: int, members: List[Member]) -> List[int]:
        added: Dict[date, int] = defaultdict(int)
        for member in members:
            added[member.created_at.date()] += 1
        points = [initial]
        for day in growth_days:
            points.append(points[-1] + added.get(day, 0))
        return points

    datasets = []
    if group_by == "region":
        regions = db.query(Region).options(selectinload(Region.areas)).order_by(Region.name).all()
        for region in regions:
            area_ids = {area.id for area in region.areas}
            region_initial = base.filter(
                Member.created_at < start, Member.area_id.in_(area_ids)
            ).count() if area_ids else 0
            region_members = [m for m in new_members if m.area_id in area_ids]
            datasets.append({
                "label": region.name,
                "data": cumulative(region_initial, region_members),
            })
    else:
        datasets.append({"label": "Members", "data": cumulative(initial_count, new_members)})

    return {
        "period": {"start_date": start, "end_date": end},
        "initial_count": initial_count,
        "total_new": len(new_members),
        "final_count": initial_count + len(new_members),
        "chart_data": {"labels": labels, "datasets": datasets},
    }


# ==========================================
# EXPORT
# ==========================================

def _member_row(m: Member) -> Dict[str, Any]:
    return {
        "id": str(m.id),
        "first_name": m.first_name,
        "last_name": m.last_name,
        "phone_primary": m.phone_primary,
        "phone_secondary": m.phone_secondary or "",
        "gender": m.gender,
        "state": m.state,
        "is_registered": m.is_registered,
        "is_active": m.is_active,
        "area": m.area.name if m.area else "",
        "leader": m.leader.full_name if m.leader else "",
        "last_attendance_date": m.last_attendance_date.isoformat() if m.last_attendance_date else "",
        "created_at": m.created_at.isoformat() if m.created_at else "",
    }


def _attendance_row(a: Attendance) -> Dict[str, Any]:
    return {
        "id": str(a.id),
        "sunday_date": a.sunday_date.isoformat(),
        "member_id": str(a.member_id),
        "member": a.member.full_name if a.member else "",
        "present": a.present,
        "service_type": a.service_type,
        "marked_by": a.marked_by.full_name if a.marked_by else "",
        "notes": a.notes or "",
    }


def _meeting_row(m: BacentaMeeting) -> Dict[str, Any]:
    return {
        "id": str(m.id),
        "meeting_date": m.meeting_date.isoformat(),
        "meeting_type": m.meeting_type,
        "leader": m.leader.full_name if m.leader else "",
        "location": m.location or "",
        "total_members_present": m.total_members_present,
        "offering_amount": float(m.offering_amount or 0),
        "is_verified": m.is_verified,
    }


def export_rows(
    db: Session,
    scope: RoleScope,
    export_type: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """
    Flat rows for an export.

    Raises:
        ValidationError: Unknown export type
    """
    if export_type == "members":
        query = scope.filter_members(db.query(Member)).options(
            joinedload(Member.area), joinedload(Member.leader)
        )
        return [_member_row(m) for m in query.order_by(Member.first_name).all()]

    if export_type == "attendance":
        query = scope.filter_attendance(db.query(Attendance)).options(
            joinedload(Attendance.member), joinedload(Attendance.marked_by)
        )
        if start_date:
            query = query.filter(Attendance.sunday_date >= start_date)
        if end_date:
            query = query.filter(Attendance.sunday_date <= end_date)
        return [_attendance_row(a) for a in query.order_by(Attendance.sunday_date.desc()).all()]

    if export_type == "bacenta_meetings":
        query = scope.filter_meetings(db.query(BacentaMeeting)).options(joinedload(BacentaMeeting.leader))
        if start_date:
            query = query.filter(BacentaMeeting.meeting_date >= start_date)
        if end_date:
            query = query.filter(BacentaMeeting.meeting_date <= end_date)
        return [_meeting_row(m) for m in query.order_by(BacentaMeeting.meeting_date.desc()).all()]

    raise ValidationError(
        "Unsupported export type",
        details={"type": export_type, "allowed": list(EXPORT_TYPES)},
    )


def rows_to_csv(rows: List[Dict[str, Any]]) -> str:
    """Render export rows as CSV text (header only from the first row)."""
    if not rows:
        return ""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(rows[0].keys()))
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()
