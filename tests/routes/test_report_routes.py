"""
Report Routes Integration Tests
===============================

Integration tests for /api/reports including:
- Attendance, Bacenta and call-log reports
- Member growth chart data
- Per-area attendance (Bishop, Governor)
- JSON and CSV exports
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.attendance import Attendance
from app.models.bacenta import BacentaMeeting
from app.models.call_log import CallLog


pytestmark = pytest.mark.integration

SUNDAY = date(2026, 10, 18)
PREVIOUS = date(2026, 10, 11)


@pytest.fixture
def two_absences(db_session: Session, member, other_member):
    """`member` missed the last two Sundays, `other_member` attended both."""
    db_session.add_all([
        Attendance(member_id=member.id, sunday_date=SUNDAY, present=False),
        Attendance(member_id=member.id, sunday_date=PREVIOUS, present=False),
        Attendance(member_id=other_member.id, sunday_date=SUNDAY, present=True),
        Attendance(member_id=other_member.id, sunday_date=PREVIOUS, present=True),
    ])
    db_session.commit()


class TestAttendanceReport:
    """Integration tests for GET /api/reports/attendance."""

    def test_bishop_sees_everything(self, client: TestClient, bishop_headers: dict, two_absences):
        # Act
        response = client.get("/api/reports/attendance", headers=bishop_headers)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["period"]["total_weeks"] == 2
        assert data["summary"]["total_members"] == 2
        assert data["summary"]["total_attendance_records"] == 4
        assert data["summary"]["total_present"] == 2
        assert data["summary"]["overall_percentage"] == 50
        assert [m["first_name"] for m in data["members_needing_follow_up"]] == ["John"]

    def test_leader_sees_own_flock(self, client: TestClient, leader_headers: dict, two_absences):
        data = client.get("/api/reports/attendance", headers=leader_headers).json()

        assert data["summary"]["total_members"] == 1
        assert data["summary"]["overall_percentage"] == 0
        assert data["summary"]["members_with_consecutive_absences"] == 1

    def test_date_range(self, client: TestClient, bishop_headers: dict, two_absences):
        response = client.get(
            f"/api/reports/attendance?start_date={SUNDAY.isoformat()}", headers=bishop_headers
        )

        data = response.json()
        assert data["period"]["total_weeks"] == 1
        assert data["summary"]["total_attendance_records"] == 2
        # A single record in range is not two consecutive absences
        assert data["members_needing_follow_up"] == []


class TestBacentaReport:
    """Integration tests for GET /api/reports/bacenta."""

    def test_totals(self, client: TestClient, db_session: Session, bishop_headers: dict, leader):
        # Arrange
        db_session.add_all([
            BacentaMeeting(leader_id=leader.id, meeting_date=date(2026, 10, 7),
                           total_members_present=4, offering_amount=Decimal("1000")),
            BacentaMeeting(leader_id=leader.id, meeting_date=date(2026, 10, 14),
                           total_members_present=6, offering_amount=Decimal("1500")),
        ])
        db_session.commit()

        # Act
        response = client.get("/api/reports/bacenta", headers=bishop_headers)

        # Assert
        data = response.json()
        assert data["summary"] == {
            "total_meetings": 2,
            "average_attendance": 5,
            "total_offering": 2500.0,
        }
        assert data["meetings"][0]["meeting_date"] == "2026-10-14"
        assert data["meetings"][0]["leader"]["first_name"] == "Lydia"

    def test_other_leader_sees_nothing(
        self, client: TestClient, db_session: Session, other_leader_headers: dict, leader
    ):
        db_session.add(BacentaMeeting(leader_id=leader.id, meeting_date=date(2026, 10, 14)))
        db_session.commit()

        data = client.get("/api/reports/bacenta", headers=other_leader_headers).json()

        assert data["summary"]["total_meetings"] == 0


class TestCallLogReport:
    """Integration tests for GET /api/reports/call-logs."""

    def test_grouping(self, client: TestClient, db_session: Session, bishop_headers: dict,
                      leader, member):
        # Arrange
        db_session.add_all([
            CallLog(member_id=member.id, caller_id=leader.id, outcome="Contacted",
                    call_date=datetime(2026, 10, 12, 10, 0, tzinfo=timezone.utc),
                    next_followup_date=date(2026, 10, 13)),
            CallLog(member_id=member.id, caller_id=leader.id, outcome="No_Answer",
                    contact_method="WhatsApp",
                    call_date=datetime(2026, 10, 14, 10, 0, tzinfo=timezone.utc)),
        ])
        db_session.commit()

        # Act
        response = client.get("/api/reports/call-logs", headers=bishop_headers)

        # Assert
        data = response.json()
        assert data["summary"] == {"total_calls": 2, "followups_due": 1}
        assert data["by_outcome"] == {"Contacted": 1, "No_Answer": 1}
        assert data["by_contact_method"] == {"Phone": 1, "WhatsApp": 1}
        assert data["by_caller"][0]["total_calls"] == 2

    def test_end_date_includes_whole_day(
        self, client: TestClient, db_session: Session, bishop_headers: dict, leader, member
    ):
        db_session.add(CallLog(member_id=member.id, caller_id=leader.id, outcome="Contacted",
                               call_date=datetime(2026, 10, 12, 23, 0, tzinfo=timezone.utc)))
        db_session.commit()

        response = client.get(
            "/api/reports/call-logs?start_date=2026-10-12&end_date=2026-10-12",
            headers=bishop_headers,
        )

        assert response.json()["summary"]["total_calls"] == 1


class TestMemberGrowth:
    """Integration tests for GET /api/reports/member-growth."""

    def test_global_growth(self, client: TestClient, bishop_headers: dict, member, other_member):
        # Act
        response = client.get("/api/reports/member-growth?period=1month", headers=bishop_headers)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["initial_count"] == 0
        assert data["total_new"] == 2
        assert data["final_count"] == 2
        datasets = data["chart_data"]["datasets"]
        assert len(datasets) == 1
        assert datasets[0]["data"][-1] == 2
        assert len(data["chart_data"]["labels"]) == len(datasets[0]["data"])

    def test_by_region(self, client: TestClient, bishop_headers: dict, member, other_member):
        data = client.get(
            "/api/reports/member-growth?group_by=region", headers=bishop_headers
        ).json()

        datasets = data["chart_data"]["datasets"]
        assert [d["label"] for d in datasets] == ["Centre"]
        # other_member's area belongs to no region
        assert datasets[0]["data"][-1] == 1

    def test_invalid_period(self, client: TestClient, bishop_headers: dict):
        response = client.get("/api/reports/member-growth?period=decade", headers=bishop_headers)
        assert response.status_code == 422


class TestAreaAttendance:
    """Integration tests for GET /api/reports/governor/attendance."""

    def test_governor_sees_governed_areas(
        self, client: TestClient, governor_headers: dict, two_absences
    ):
        # Act
        response = client.get("/api/reports/governor/attendance", headers=governor_headers)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["total_areas"] == 1
        assert data["areas"][0]["area"]["name"] == "Area One"
        assert data["areas"][0]["percentage"] == 0

    def test_bishop_sees_all_areas(self, client: TestClient, bishop_headers: dict, two_absences):
        data = client.get("/api/reports/governor/attendance", headers=bishop_headers).json()

        assert data["summary"]["total_areas"] == 2
        assert data["summary"]["overall_percentage"] == 50

    def test_leader_is_forbidden(self, client: TestClient, leader_headers: dict):
        response = client.get("/api/reports/governor/attendance", headers=leader_headers)
        assert response.status_code == 403


class TestExport:
    """Integration tests for GET /api/reports/export."""

    def test_json_export(self, client: TestClient, bishop_headers: dict, member, other_member):
        # Act
        response = client.get("/api/reports/export?type=members", headers=bishop_headers)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "members"
        assert data["count"] == 2
        assert {row["first_name"] for row in data["data"]} == {"John", "Jane"}

    def test_csv_export(self, client: TestClient, leader_headers: dict, two_absences):
        # Act
        response = client.get(
            "/api/reports/export?type=attendance&format=csv", headers=leader_headers
        )

        # Assert
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith("attachment; filename=export-attendance-")
        assert disposition.endswith(".csv")

        lines = response.text.strip().splitlines()
        assert lines[0].startswith("id,sunday_date,member_id")
        # Header plus the leader's two records
        assert len(lines) == 3

    def test_unknown_type(self, client: TestClient, bishop_headers: dict):
        response = client.get("/api/reports/export?type=payroll", headers=bishop_headers)

        assert response.status_code == 400
        assert response.json()["details"]["allowed"] == [
            "members",
            "attendance",
            "bacenta_meetings",
        ]

    def test_requires_auth(self, client: TestClient):
        assert client.get("/api/reports/export?type=members").status_code == 401
