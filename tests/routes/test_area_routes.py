"""
Area & Region Routes Integration Tests
======================================

Integration tests for:
- /api/areas CRUD, assignment and leader listing
- /api/regions CRUD
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.area import Area
from app.models.region import Region
from app.models.user import User


pytestmark = pytest.mark.integration


class TestListAreas:
    """Integration tests for GET /api/areas."""

    def test_bishop_lists_all_areas_by_number(
        self, client: TestClient, bishop_headers: dict, area: Area, second_area: Area
    ):
        # Act
        response = client.get("/api/areas/", headers=bishop_headers)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert [a["number"] for a in data["areas"]] == [1, 2]
        assert data["areas"][0]["region"]["name"] == "Centre"
        assert data["total"] == 2

    def test_governor_sees_governed_areas(
        self, client: TestClient, governor_headers: dict, area: Area, second_area: Area
    ):
        response = client.get("/api/areas/", headers=governor_headers)
        assert [a["id"] for a in response.json()["areas"]] == [str(area.id)]

    def test_search_on_name(
        self, client: TestClient, bishop_headers: dict, area: Area, second_area: Area
    ):
        response = client.get("/api/areas/", params={"search": "two"}, headers=bishop_headers)
        assert [a["number"] for a in response.json()["areas"]] == [2]

    def test_area_pastor_is_forbidden(self, client: TestClient, pastor_headers: dict):
        response = client.get("/api/areas/", headers=pastor_headers)
        assert response.status_code == 403


class TestAreaCrud:
    """Integration tests for POST/PUT/DELETE /api/areas."""

    def test_create_area(self, client: TestClient, bishop_headers: dict, region):
        # Act
        response = client.post(
            "/api/areas/",
            json={"name": "Area Three", "number": 3, "region_id": str(region.id)},
            headers=bishop_headers,
        )

        # Assert
        assert response.status_code == 201
        assert response.json()["region_id"] == str(region.id)

    def test_number_must_be_unique(self, client: TestClient, bishop_headers: dict, area: Area):
        response = client.post(
            "/api/areas/", json={"name": "Copy", "number": 1}, headers=bishop_headers
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "number"

    def test_number_out_of_range(self, client: TestClient, bishop_headers: dict):
        response = client.post(
            "/api/areas/", json={"name": "Too far", "number": 51}, headers=bishop_headers
        )
        assert response.status_code == 422

    def test_unknown_overseer(self, client: TestClient, bishop_headers: dict):
        response = client.post(
            "/api/areas/",
            json={
                "name": "Area Four",
                "number": 4,
                "overseer_id": "00000000-0000-0000-0000-000000000000",
            },
            headers=bishop_headers,
        )
        assert response.status_code == 404

    def test_update_area(
        self, client: TestClient, bishop_headers: dict, area: Area, overseer: User
    ):
        # Act
        response = client.put(
            f"/api/areas/{area.id}",
            json={"name": "Area One Renamed", "overseer_id": str(overseer.id)},
            headers=bishop_headers,
        )

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Area One Renamed"
        assert data["overseer"]["email"] == "overseer@example.com"

    def test_governor_cannot_touch_other_area(
        self, client: TestClient, governor_headers: dict, second_area: Area
    ):
        response = client.put(
            f"/api/areas/{second_area.id}", json={"name": "Mine"}, headers=governor_headers
        )
        assert response.status_code == 403

    def test_governor_creates_area_in_governed_region(
        self, client: TestClient, governor_headers: dict, region
    ):
        response = client.post(
            "/api/areas/",
            json={"name": "Area Five", "number": 5, "region_id": str(region.id)},
            headers=governor_headers,
        )
        assert response.status_code == 201

    def test_governor_cannot_create_area_outside_region(
        self, client: TestClient, db_session: Session, governor_headers: dict
    ):
        # Arrange
        other = Region(name="Littoral")
        db_session.add(other)
        db_session.commit()

        # Act
        response = client.post(
            "/api/areas/",
            json={"name": "Area Six", "number": 6, "region_id": str(other.id)},
            headers=governor_headers,
        )

        # Assert
        assert response.status_code == 403
        assert response.json()["details"]["resource"] == "region"
        assert db_session.query(Area).filter(Area.number == 6).count() == 0

    def test_governor_cannot_create_area_without_region(
        self, client: TestClient, governor_headers: dict, region
    ):
        response = client.post(
            "/api/areas/", json={"name": "Loose", "number": 7}, headers=governor_headers
        )
        assert response.status_code == 403

    def test_governor_cannot_move_area_out_of_region(
        self, client: TestClient, governor_headers: dict, area: Area
    ):
        response = client.put(
            f"/api/areas/{area.id}", json={"region_id": ""}, headers=governor_headers
        )
        assert response.status_code == 403

    def test_delete_empty_area(
        self, client: TestClient, db_session: Session, bishop_headers: dict, second_area: Area
    ):
        # Act
        response = client.delete(f"/api/areas/{second_area.id}", headers=bishop_headers)

        # Assert
        assert response.status_code == 200
        assert db_session.get(Area, second_area.id) is None

    def test_area_with_members_cannot_be_deleted(
        self, client: TestClient, bishop_headers: dict, area: Area, member
    ):
        response = client.delete(f"/api/areas/{area.id}", headers=bishop_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Area still has members and cannot be deleted"

    def test_unknown_area(self, client: TestClient, bishop_headers: dict):
        response = client.get(
            "/api/areas/00000000-0000-0000-0000-000000000000", headers=bishop_headers
        )
        assert response.status_code == 404


class TestAssignAndLeaders:
    """Integration tests for area assignment and leader listing."""

    def test_assign_user(
        self, client: TestClient, db_session: Session, bishop_headers: dict,
        data_clerk: User, second_area: Area,
    ):
        # Act
        response = client.post(
            "/api/areas/assign",
            json={"user_id": str(data_clerk.id), "area_id": str(second_area.id)},
            headers=bishop_headers,
        )

        # Assert
        assert response.status_code == 200
        db_session.refresh(data_clerk)
        assert data_clerk.area_id == second_area.id

    def test_assign_unknown_user(self, client: TestClient, bishop_headers: dict, area: Area):
        response = client.post(
            "/api/areas/assign",
            json={"user_id": "00000000-0000-0000-0000-000000000000", "area_id": str(area.id)},
            headers=bishop_headers,
        )
        assert response.status_code == 404

    def test_leaders_with_member_counts(
        self, client: TestClient, bishop_headers: dict, area: Area, leader: User, member
    ):
        # Act
        response = client.get(f"/api/areas/{area.id}/leaders", headers=bishop_headers)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["area"]["number"] == 1
        counts = {row["email"]: row["member_count"] for row in data["leaders"]}
        assert counts == {"leader@example.com": 1}


class TestRegions:
    """Integration tests for /api/regions."""

    def test_list_regions_with_areas(
        self, client: TestClient, leader_headers: dict, region, area: Area
    ):
        # Act
        response = client.get("/api/regions/", headers=leader_headers)

        # Assert
        assert response.status_code == 200
        regions = response.json()
        assert regions[0]["name"] == "Centre"
        assert regions[0]["governor"]["email"] == "governor@example.com"
        assert [a["number"] for a in regions[0]["areas"]] == [1]

    def test_create_region(self, client: TestClient, bishop_headers: dict, governor: User):
        response = client.post(
            "/api/regions/",
            json={"name": "Littoral", "governor_id": str(governor.id)},
            headers=bishop_headers,
        )

        assert response.status_code == 201
        assert response.json()["governor_id"] == str(governor.id)

    def test_only_bishop_creates_regions(self, client: TestClient, governor_headers: dict):
        response = client.post("/api/regions/", json={"name": "Mine"}, headers=governor_headers)
        assert response.status_code == 403

    def test_update_region_clears_governor(
        self, client: TestClient, bishop_headers: dict, region
    ):
        response = client.put(
            f"/api/regions/{region.id}", json={"governor_id": None}, headers=bishop_headers
        )

        assert response.status_code == 200
        assert response.json()["governor_id"] is None

    def test_delete_region_keeps_areas(
        self, client: TestClient, db_session: Session, bishop_headers: dict, region, area: Area
    ):
        # Act
        response = client.delete(f"/api/regions/{region.id}", headers=bishop_headers)

        # Assert
        assert response.status_code == 200
        db_session.refresh(area)
        assert area.region_id is None

    def test_unknown_region(self, client: TestClient, bishop_headers: dict):
        response = client.delete(
            "/api/regions/00000000-0000-0000-0000-000000000000", headers=bishop_headers
        )
        assert response.status_code == 404
