"""
Shared aggregation helpers used by the dashboard and report services.
"""

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple

from sqlalchemy import case, func
from sqlalchemy.orm import Query, Session

from app.models.attendance import Attendance


def last_sunday(today: date) -> date:
    """The Sunday on or before `today`."""
    return today - timedelta(days=(today.weekday() + 1) % 7)


def day_start(day: date) -> datetime:
    """Midnight UTC at the start of `day`."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def percentage(part: int, whole: int) -> int:
    return round(part * 100 / whole) if whole else 0


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def paginate(query: Query, page: int, limit: int) -> Tuple[list, int, int]:
    """
    Apply page/limit to a query.

    Returns:
        (items, total, total_pages)
    """
    total = query.count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total, total_pages(total, limit)


def attendance_totals(db: Session, query: Query) -> Tuple[int, int]:
    """
    Count records and present records of a (filtered) Attendance query.

    Returns:
        (total_records, total_present)
    """
    subquery = query.with_entities(Attendance.id, Attendance.present).subquery()
    row = db.query(
        func.count(subquery.c.id),
        func.coalesce(func.sum(case((subquery.c.present.is_(True), 1), else_=0)), 0),
    ).one()
    return int(row[0] or 0), int(row[1] or 0)
