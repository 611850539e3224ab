"""
Ministry Routes Integration Tests
=================================

Integration tests for /api/ministries including:
- Listing with active member counts
- Creation and deletion (admin roles only)
- Ministry members, attendance marking and per-date stats
- Overview and headcounts
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.member import Member
from app.models.ministry import Ministry, MinistryAttendance
from app.models.user import User


pytestmark = pytest.mark.integration


@pytest.fixture
def choir(db_session: Session, leader: User, member: Member) -> Ministry:
    """Choir led by `leader`, with `member` in it."""
    ministry = Ministry(name="Choir", description="Sunday choir", leader_id=leader.id)
    db_session.add(ministry)
    db_session.commit()
    member.ministry_id = ministry.id
    db_session.commit()
    db_session.refresh(ministry)
    return ministry


class TestListAndCreate:
    """Integration tests for GET/POST /api/ministries."""

    def test_list_with_member_counts(
        self, client: TestClient, db_session: Session, leader_headers: dict, choir: Ministry
    ):
        # Arrange
        db_session.add(Ministry(name="Ushers"))
        db_session.commit()

        # Act
        response = client.get("/api/ministries/", headers=leader_headers)

        # Assert
        assert response.status_code == 200
        assert response.json() == [
            {
                "id": str(choir.id),
                "name": "Choir",
                "description": "Sunday choir",
                "leader": "Lydia Leader",
                "member_count": 1,
            },
            {
                "id": response.json()[1]["id"],
                "name": "Ushers",
                "description": None,
                "leader": None,
                "member_count": 0,
            },
        ]

    def test_inactive_members_are_not_counted(
        self, client: TestClient, db_session: Session, leader_headers: dict,
        choir: Ministry, member: Member,
    ):
        member.is_active = False
        db_session.commit()

        response = client.get("/api/ministries/", headers=leader_headers)

        assert response.json()[0]["member_count"] == 0

    def test_create_ministry(self, client: TestClient, clerk_headers: dict):
        response = client.post(
            "/api/ministries/", json={"name": "Media", "description": "Sound"}, headers=clerk_headers
        )

        assert response.status_code == 201
        assert response.json()["name"] == "Media"
        assert response.json()["member_count"] == 0

    def test_leader_cannot_create(self, client: TestClient, leader_headers: dict):
        response = client.post("/api/ministries/", json={"name": "Media"}, headers=leader_headers)
        assert response.status_code == 403

    def test_unknown_ministry_leader(self, client: TestClient, bishop_headers: dict):
        response = client.post(
            "/api/ministries/",
            json={"name": "Media", "leader_id": "00000000-0000-0000-0000-000000000000"},
            headers=bishop_headers,
        )
        assert response.status_code == 404


class TestDeleteMinistry:
    """Integration tests for DELETE /api/ministries/{id}."""

    def test_members_are_detached(
        self, client: TestClient, db_session: Session, bishop_headers: dict,
        choir: Ministry, member: Member,
    ):
        # Act
        response = client.delete(f"/api/ministries/{choir.id}", headers=bishop_headers)

        # Assert
        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.get(Ministry, choir.id) is None
        assert db_session.get(Member, member.id).ministry_id is None

    def test_unknown_ministry(self, client: TestClient, bishop_headers: dict):
        response = client.delete(
            "/api/ministries/00000000-0000-0000-0000-000000000000", headers=bishop_headers
        )
        assert response.status_code == 404


class TestMinistryAttendance:
    """Integration tests for ministry members, attendance and stats."""

    def test_members_of_ministry(
        self, client: TestClient, leader_headers: dict, choir: Ministry, member: Member
    ):
        response = client.get(f"/api/ministries/{choir.id}/members", headers=leader_headers)

        assert response.status_code == 200
        assert [m["id"] for m in response.json()] == [str(member.id)]

    def test_mark_attendance_upserts(
        self, client: TestClient, db_session: Session, leader_headers: dict,
        choir: Ministry, member: Member,
    ):
        # Arrange
        url = f"/api/ministries/{choir.id}/attendance"
        body = {"date": "2026-10-18", "attendances": [{"member_id": str(member.id)}]}

        # Act
        client.post(url, json=body, headers=leader_headers)
        body["attendances"][0]["present"] = False
        response = client.post(url, json=body, headers=leader_headers)

        # Assert
        assert response.status_code == 200
        assert response.json()["message"] == "Attendance updated"
        record = db_session.query(MinistryAttendance).one()
        db_session.refresh(record)
        assert record.present is False

    def test_unknown_member_is_reported(
        self, client: TestClient, leader_headers: dict, choir: Ministry
    ):
        response = client.post(
            f"/api/ministries/{choir.id}/attendance",
            json={
                "date": "2026-10-18",
                "attendances": [{"member_id": "00000000-0000-0000-0000-000000000000"}],
            },
            headers=leader_headers,
        )

        assert response.json()["errors"] == 1
        assert response.json()["successes"] == 0

    def test_stats_count_unmarked_as_absent(
        self, client: TestClient, db_session: Session, leader_headers: dict,
        leader: User, choir: Ministry, member: Member,
    ):
        # Arrange
        absent = Member(
            first_name="Zoe", last_name="Abena", phone_primary="+237644444444",
            gender="F", leader_id=leader.id, area_id=member.area_id, ministry_id=choir.id,
        )
        db_session.add(absent)
        db_session.add(MinistryAttendance(
            ministry_id=choir.id, member_id=member.id, date=date(2026, 10, 18), present=True,
        ))
        db_session.commit()

        # Act
        response = client.get(
            f"/api/ministries/{choir.id}/attendance/stats",
            params={"date": "2026-10-18"},
            headers=leader_headers,
        )

        # Assert
        data = response.json()
        assert data["date"] == "2026-10-18"
        assert data["total_present"] == 1
        assert data["total_members"] == 2
        assert [entry["present"] for entry in data["details"]] == [True, False]

    def test_stats_require_date(self, client: TestClient, leader_headers: dict, choir: Ministry):
        response = client.get(
            f"/api/ministries/{choir.id}/attendance/stats", headers=leader_headers
        )
        assert response.status_code == 422


class TestOverviewAndHeadcounts:
    """Integration tests for /api/ministries/overview and /headcounts."""

    def test_headcounts_feed_overview(
        self, client: TestClient, leader_headers: dict, choir: Ministry, member: Member
    ):
        # Arrange
        client.post(
            f"/api/ministries/{choir.id}/attendance",
            json={"date": "2026-10-18", "attendances": [{"member_id": str(member.id)}]},
            headers=leader_headers,
        )
        saved = client.post(
            "/api/ministries/headcounts",
            json={
                "date": "2026-10-18",
                "headcounts": [{"ministry_id": str(choir.id), "headcount": 12, "notes": "Full"}],
            },
            headers=leader_headers,
        )

        # Act
        response = client.get(
            "/api/ministries/overview", params={"date": "2026-10-18"}, headers=leader_headers
        )

        # Assert
        assert saved.json()["successes"] == 1
        assert response.json() == {
            "date": "2026-10-18",
            "ministries": [
                {
                    "id": str(choir.id),
                    "name": "Choir",
                    "member_count": 1,
                    "present_count": 1,
                    "headcount": 12,
                    "headcount_notes": "Full",
                }
            ],
        }

    def test_headcount_is_replaced(
        self, client: TestClient, leader_headers: dict, choir: Ministry
    ):
        for count in (10, 14):
            client.post(
                "/api/ministries/headcounts",
                json={
                    "date": "2026-10-18",
                    "headcounts": [{"ministry_id": str(choir.id), "headcount": count}],
                },
                headers=leader_headers,
            )

        overview = client.get(
            "/api/ministries/overview", params={"date": "2026-10-18"}, headers=leader_headers
        ).json()

        assert overview["ministries"][0]["headcount"] == 14

    def test_unmarked_ministry_has_no_headcount(
        self, client: TestClient, leader_headers: dict, choir: Ministry
    ):
        overview = client.get(
            "/api/ministries/overview", params={"date": "2026-10-11"}, headers=leader_headers
        ).json()

        assert overview["ministries"][0]["headcount"] is None
        assert overview["ministries"][0]["present_count"] == 0

    def test_unknown_ministry_headcount(self, client: TestClient, leader_headers: dict):
        response = client.post(
            "/api/ministries/headcounts",
            json={
                "date": "2026-10-18",
                "headcounts": [{"ministry_id": "00000000-0000-0000-0000-000000000000"}],
            },
            headers=leader_headers,
        )

        assert response.json()["errors"] == 1
