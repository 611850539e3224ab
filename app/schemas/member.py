"""
Member Schemas Module
=====================

Pydantic models for congregation members.
"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.enums import Gender, MemberState
from app.schemas.common import empty_to_none
from app.schemas.user import AreaBrief, UserBriefResponse


class MemberCreate(BaseModel):
    """Schema for registering a new member."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone_primary: str = Field(..., min_length=1, max_length=50)
    phone_secondary: Optional[str] = Field(default=None, max_length=50)
    gender: Gender
    leader_id: UUID = Field(..., description="Leader following up the member")
    area_id: Optional[UUID] = Field(
        default=None,
        description="Defaults to the leader's area"
    )
    ministry_id: Optional[UUID] = None
    state: MemberState = MemberState.SHEEP
    is_registered: bool = False
    profession: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None

    @field_validator("area_id", "ministry_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return empty_to_none(v)


class MemberUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone_primary: Optional[str] = Field(default=None, min_length=1, max_length=50)
    phone_secondary: Optional[str] = Field(default=None, max_length=50)
    gender: Optional[Gender] = None
    leader_id: Optional[UUID] = None
    area_id: Optional[UUID] = None
    ministry_id: Optional[UUID] = None
    state: Optional[MemberState] = None
    is_registered: Optional[bool] = None
    is_active: Optional[bool] = None
    profession: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None

    @field_validator("area_id", "ministry_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return empty_to_none(v)


class MemberResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    phone_primary: str
    phone_secondary: Optional[str] = None
    gender: str
    state: str
    is_registered: bool
    is_active: bool
    area_id: UUID
    leader_id: UUID
    ministry_id: Optional[UUID] = None
    profession: Optional[str] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    last_attendance_date: Optional[date] = None
    area: Optional[AreaBrief] = None
    leader: Optional[UserBriefResponse] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MemberBrief(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    phone_primary: str

    model_config = ConfigDict(from_attributes=True)


class MemberAttendanceEntry(BaseModel):
    id: UUID
    sunday_date: date
    present: bool
    service_type: str
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MemberCallLogEntry(BaseModel):
    id: UUID
    call_date: datetime
    outcome: str
    notes: Optional[str] = None
    next_followup_date: Optional[date] = None
    caller: Optional[UserBriefResponse] = None

    model_config = ConfigDict(from_attributes=True)


class MemberDetailResponse(MemberResponse):
    """Member with recent attendance and call history."""

    attendances: List[MemberAttendanceEntry] = Field(default_factory=list)
    call_logs: List[MemberCallLogEntry] = Field(default_factory=list)


class MemberListResponse(BaseModel):
    members: List[MemberResponse]
    total: int
    page: int
    total_pages: int
