"""
Dashboard Service
=================

Aggregated figures for the home screen of each role.
"""

from datetime import date, datetime, timedelta, UTC
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.scope import RoleScope
from app.models.area import Area
from app.models.attendance import Attendance
from app.models.bacenta import BacentaAttendance, BacentaMeeting, BacentaOffering
from app.models.call_log import CallLog
from app.models.member import Member
from app.models.role_enum import Role
from app.models.user import User
from app.services.aggregates import attendance_totals, last_sunday, percentage

QUICK_ACTIONS = [
    {"action": "mark_attendance", "label": "Mark attendance", "icon": "check"},
    {"action": "view_call_list", "label": "Call list", "icon": "phone"},
    {"action": "create_bacenta", "label": "New meeting", "icon": "users"},
]


# ==========================================
# BACENTA LEADER DASHBOARD
# ==========================================

def build_leader_dashboard(db: Session, user: User, today: date | None = None) -> dict:
    today = today or date.today()
    week_ago = today - timedelta(days=7)

    total_members = (
        db.query(func.count(Member.id))
        .filter(Member.leader_id == user.id, Member.is_active.is_(True))
        .scalar()
    ) or 0

    recent_attendance = (
        db.query(Attendance)
        .join(Member, Attendance.member_id == Member.id)
        .filter(Member.leader_id == user.id, Attendance.sunday_date >= week_ago)
    )
    records, present = attendance_totals(db, recent_attendance)

    pending_follow_ups = (
        db.query(func.count(CallLog.id))
        .filter(CallLog.caller_id == user.id, CallLog.next_followup_date >= today)
        .scalar()
    ) or 0

    meeting_ids = [
        row[0]
        for row in db.query(BacentaMeeting.id)
        .filter(BacentaMeeting.leader_id == user.id, BacentaMeeting.meeting_date >= week_ago)
        .all()
    ]

    total_offering = Decimal("0")
    attendees = 0
    if meeting_ids:
        total_offering = (
            db.query(func.coalesce(func.sum(BacentaOffering.amount), 0))
            .filter(BacentaOffering.bacenta_meeting_id.in_(meeting_ids))
            .scalar()
        ) or Decimal("0")
        attendees = (
            db.query(func.count(BacentaAttendance.id))
            .filter(
                BacentaAttendance.bacenta_meeting_id.in_(meeting_ids),
                BacentaAttendance.present.is_(True),
            )
            .scalar()
        ) or 0

    return {
        "user_role": user.role,
        "last_updated": datetime.now(UTC),
        "summary": {
            "total_members": total_members,
            "last_attendance_percentage": percentage(present, records),
            "pending_follow_ups": pending_follow_ups,
            "recent_bacenta_meetings": len(meeting_ids),
        },
        "bacenta_stats": {
            "recent_meetings": len(meeting_ids),
            "total_offering": float(total_offering),
            "average_attendance": round(attendees / len(meeting_ids)) if meeting_ids else 0,
        },
        "quick_actions": QUICK_ACTIONS,
    }


# ==========================================
# SCOPED SUMMARY DASHBOARD
# ==========================================

def build_summary_dashboard(db: Session, user: User, today: date | None = None) -> dict:
    """Summary for every role above Bacenta leader, restricted to their scope."""
    today = today or date.today()
    scope = RoleScope(db, user)
    since = datetime.now(UTC) - timedelta(days=7)

    total_members = scope.filter_members(
        db.query(Member).filter(Member.is_active.is_(True))
    ).count()

    total_leaders = scope.filter_users(
        db.query(User).filter(User.role == Role.BACENTA_LEADER.value, User.is_active.is_(True))
    ).count()

    total_areas = scope.filter_areas(db.query(Area)).count()

    this_sunday = last_sunday(today)
    previous_sunday = this_sunday - timedelta(days=7)

    current_query = scope.filter_attendance(
        db.query(Attendance).filter(Attendance.sunday_date >= this_sunday)
    )
    previous_query = scope.filter_attendance(
        db.query(Attendance).filter(
            Attendance.sunday_date >= previous_sunday,
            Attendance.sunday_date < this_sunday,
        )
    )
    records, present = attendance_totals(db, current_query)
    current = percentage(present, records)
    records, present = attendance_totals(db, previous_query)
    previous = percentage(present, records)

    recent_call_logs = scope.filter_call_logs(
        db.query(CallLog).filter(CallLog.created_at >= since)
    ).count()
    recent_meetings = scope.filter_meetings(
        db.query(BacentaMeeting).filter(BacentaMeeting.created_at >= since)
    ).count()

    return {
        "user_role": user.role,
        "last_updated": datetime.now(UTC),
        "summary": {
            "total_members": total_members,
            "total_leaders": total_leaders,
            "total_areas": total_areas,
            "current_week_attendance": current,
            "attendance_change": current - previous,
            "recent_call_logs": recent_call_logs,
            "recent_bacenta_meetings": recent_meetings,
        },
    }


# ==========================================
# AREA / LEADER STATISTICS
# ==========================================

def build_area_stats(db: Session, area: Area, today: date | None = None) -> dict:
    today = today or date.today()

    leaders = (
        db.query(User)
        .filter(
            User.area_id == area.id,
            User.role == Role.BACENTA_LEADER.value,
            User.is_active.is_(True),
        )
        .order_by(User.first_name)
        .all()
    )

    total_members = (
        db.query(func.count(Member.id))
        .filter(Member.area_id == area.id, Member.is_active.is_(True))
        .scalar()
    ) or 0

    todays = (
        db.query(Attendance)
        .join(Member, Attendance.member_id == Member.id)
        .filter(Member.area_id == area.id, Attendance.sunday_date == today)
    )
    records, present = attendance_totals(db, todays)

    return {
        "area": {"id": area.id, "name": area.name, "number": area.number},
        "statistics": {
            "total_members": total_members,
            "total_leaders": len(leaders),
            "recent_attendance_percentage": percentage(present, records),
            "leaders": [
                {"id": leader.id, "first_name": leader.first_name, "last_name": leader.last_name}
                for leader in leaders
            ],
        },
    }


def build_leader_stats(db: Session, leader: User, today: date | None = None) -> dict:
    today = today or date.today()

    members = (
        db.query(Member)
        .filter(Member.leader_id == leader.id, Member.is_active.is_(True))
        .order_by(Member.first_name)
        .all()
    )

    sunday_query = (
        db.query(Attendance)
        .join(Member, Attendance.member_id == Member.id)
        .filter(Member.leader_id == leader.id, Attendance.sunday_date == last_sunday(today))
    )
    records, present = attendance_totals(db, sunday_query)

    area = leader.area
    return {
        "leader": {
            "id": leader.id,
            "first_name": leader.first_name,
            "last_name": leader.last_name,
            "area": {"id": area.id, "name": area.name, "number": area.number} if area else None,
        },
        "statistics": {
            "total_members": len(members),
            "recent_attendance_percentage": percentage(present, records),
        },
        "members": [
            {
                "id": m.id,
                "first_name": m.first_name,
                "last_name": m.last_name,
                "phone_primary": m.phone_primary,
                "gender": m.gender,
                "state": m.state,
                "created_at": m.created_at,
            }
            for m in members
        ],
    }
