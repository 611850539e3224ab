"""
Aggregation Helper Tests
========================
"""

from datetime import date, datetime, timezone

import pytest
from sqlalchemy.orm import Session

from app.models.attendance import Attendance
from app.models.member import Member
from app.services.aggregates import (
    attendance_totals,
    day_start,
    last_sunday,
    paginate,
    percentage,
    total_pages,
)


pytestmark = pytest.mark.unit


class TestLastSunday:

    @pytest.mark.parametrize(
        "today, expected",
        [
            (date(2026, 10, 18), date(2026, 10, 18)),  # Sunday
            (date(2026, 10, 19), date(2026, 10, 18)),  # Monday
            (date(2026, 10, 24), date(2026, 10, 18)),  # Saturday
        ],
    )
    def test_sunday_on_or_before(self, today: date, expected: date):
        assert last_sunday(today) == expected


class TestSmallHelpers:

    def test_day_start_is_utc_midnight(self):
        assert day_start(date(2026, 10, 18)) == datetime(2026, 10, 18, tzinfo=timezone.utc)

    def test_percentage_rounds(self):
        assert percentage(1, 3) == 33
        assert percentage(2, 3) == 67

    def test_percentage_of_nothing_is_zero(self):
        assert percentage(0, 0) == 0

    def test_total_pages(self):
        assert total_pages(0, 50) == 0
        assert total_pages(50, 50) == 1
        assert total_pages(51, 50) == 2


class TestQueryHelpers:

    def test_paginate(self, db_session: Session, member, other_member):
        query = db_session.query(Member).order_by(Member.first_name)

        items, total, pages = paginate(query, page=2, limit=1)

        assert total == 2
        assert pages == 2
        assert [m.first_name for m in items] == ["John"]

    def test_attendance_totals(self, db_session: Session, member, other_member):
        # Arrange
        db_session.add_all([
            Attendance(member_id=member.id, sunday_date=date(2026, 10, 18), present=True),
            Attendance(member_id=other_member.id, sunday_date=date(2026, 10, 18), present=False),
        ])
        db_session.commit()

        # Act
        records, present = attendance_totals(db_session, db_session.query(Attendance))

        # Assert
        assert (records, present) == (2, 1)

    def test_attendance_totals_empty(self, db_session: Session):
        assert attendance_totals(db_session, db_session.query(Attendance)) == (0, 0)
