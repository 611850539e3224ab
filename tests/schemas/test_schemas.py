"""
Schema Validation Unit Tests
=============================

Tests for Pydantic schema validation including:
- LoginRequest
- ChangePasswordRequest
- UserCreate / UserUpdate
- AreaCreate
- MemberCreate
- MeetingCreate and meeting type aliases
- Attendance and offering payloads
"""

from datetime import date
from uuid import uuid4

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.core.enums import MeetingType, MemberState, OfferingType, SyncDirection
from app.models.role_enum import Role
from app.schemas.area import AreaCreate
from app.schemas.attendance import BulkAttendanceRequest
from app.schemas.auth import ChangePasswordRequest, LoginRequest
from app.schemas.bacenta import MeetingAttendanceRequest, MeetingCreate, OfferingsRequest
from app.schemas.call_log import CallLogCreate
from app.schemas.member import MemberCreate, MemberUpdate
from app.schemas.ministry import HeadcountRequest
from app.schemas.sync import SyncRequest
from app.schemas.user import UserCreate, UserUpdate


pytestmark = pytest.mark.unit


class TestAuthSchemas:
    """Tests for login and password payloads."""

    def test_login_valid(self):
        request = LoginRequest(email="pastor@example.com", password="secret")
        assert request.email == "pastor@example.com"

    def test_login_invalid_email(self):
        with pytest.raises(PydanticValidationError):
            LoginRequest(email="not-an-email", password="secret")

    def test_login_empty_password(self):
        with pytest.raises(PydanticValidationError):
            LoginRequest(email="pastor@example.com", password="")

    def test_new_password_minimum_length(self):
        with pytest.raises(PydanticValidationError):
            ChangePasswordRequest(current_password="old", new_password="12345")


class TestUserSchemas:
    """Tests for user payloads."""

    def test_user_create_parses_role(self):
        # Act
        user = UserCreate(
            email="clerk@example.com",
            password="secret1",
            first_name="Data",
            last_name="Clerk",
            role="Data_Clerk",
        )

        # Assert
        assert user.role == Role.DATA_CLERK
        assert user.area_id is None

    def test_user_create_rejects_unknown_role(self):
        with pytest.raises(PydanticValidationError):
            UserCreate(
                email="x@example.com",
                password="secret1",
                first_name="X",
                last_name="Y",
                role="Janitor",
            )

    def test_blank_area_becomes_none(self):
        update = UserUpdate(area_id="")
        assert update.area_id is None

    def test_update_only_carries_sent_fields(self):
        update = UserUpdate(first_name="New")
        assert update.model_dump(exclude_unset=True) == {"first_name": "New"}


class TestAreaSchemas:
    """Area numbers run from 1 to 50."""

    def test_number_in_range(self):
        assert AreaCreate(name="Area", number=50).number == 50

    @pytest.mark.parametrize("number", [0, 51])
    def test_number_out_of_range(self, number):
        with pytest.raises(PydanticValidationError):
            AreaCreate(name="Area", number=number)


class TestMemberSchemas:
    """Tests for member payloads."""

    def test_member_create_defaults(self):
        # Act
        member = MemberCreate(
            first_name="John",
            last_name="Doe",
            phone_primary="+237600000000",
            gender="M",
            leader_id=uuid4(),
        )

        # Assert
        assert member.state == MemberState.SHEEP
        assert member.is_registered is False
        assert member.area_id is None

    def test_member_create_rejects_unknown_gender(self):
        with pytest.raises(PydanticValidationError):
            MemberCreate(
                first_name="John",
                last_name="Doe",
                phone_primary="+237600000000",
                gender="X",
                leader_id=uuid4(),
            )

    def test_member_update_blank_ministry(self):
        assert MemberUpdate(ministry_id="").ministry_id is None


class TestBacentaSchemas:
    """Tests for meeting, attendance and offering payloads."""

    @pytest.mark.parametrize(
        "alias, expected",
        [
            ("weekly", MeetingType.WEEKLY_SHARING),
            ("midweek", MeetingType.PRAYER_MEETING),
            ("special", MeetingType.OTHER),
            ("Bible_Study", MeetingType.BIBLE_STUDY),
        ],
    )
    def test_meeting_type_aliases(self, alias, expected):
        meeting = MeetingCreate(date=date(2026, 10, 14), type=alias)
        assert meeting.type == expected

    def test_unknown_meeting_type(self):
        with pytest.raises(PydanticValidationError):
            MeetingCreate(date=date(2026, 10, 14), type="party")

    def test_attendance_status_must_be_present_or_absent(self):
        with pytest.raises(PydanticValidationError):
            MeetingAttendanceRequest(attendance=[{"member_id": str(uuid4()), "status": "late"}])

    def test_attendance_list_cannot_be_empty(self):
        with pytest.raises(PydanticValidationError):
            MeetingAttendanceRequest(attendance=[])

    def test_offering_defaults_to_offering_type(self):
        request = OfferingsRequest(offerings=[{"amount": "1500"}])
        assert request.offerings[0].type == OfferingType.OFFERING


class TestOtherSchemas:
    """Sunday attendance, call logs, headcounts and sync payloads."""

    def test_bulk_attendance_requires_entries(self):
        with pytest.raises(PydanticValidationError):
            BulkAttendanceRequest(sunday_date=date(2026, 10, 18), attendances=[])

    def test_call_log_defaults(self):
        call = CallLogCreate(member_id=uuid4(), outcome="Contacted")
        assert call.contact_method == "Phone"
        assert call.call_date is None

    def test_call_log_rejects_negative_duration(self):
        with pytest.raises(PydanticValidationError):
            CallLogCreate(member_id=uuid4(), outcome="Contacted", call_duration=-1)

    def test_headcount_cannot_be_negative(self):
        with pytest.raises(PydanticValidationError):
            HeadcountRequest(
                date=date(2026, 10, 18),
                headcounts=[{"ministry_id": str(uuid4()), "headcount": -3}],
            )

    def test_sync_request_defaults(self):
        request = SyncRequest()
        assert request.direction == SyncDirection.BOTH
        assert request.force is False
