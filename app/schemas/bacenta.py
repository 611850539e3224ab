"""
Bacenta Schemas Module
======================

Request and response models for Bacenta meetings, their attendance and
their offerings.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.enums import MEETING_TYPE_ALIASES, MeetingType, OfferingType
from app.schemas.member import MemberBrief
from app.schemas.user import UserBriefResponse


def normalize_meeting_type(value: Any) -> Any:
    """Map the short client codes (weekly, midweek, special) to MeetingType."""
    if isinstance(value, str) and value.lower() in MEETING_TYPE_ALIASES:
        return MEETING_TYPE_ALIASES[value.lower()]
    return value


# ==========================
# Meetings
# ==========================

class MeetingCreate(BaseModel):
    """
    A new meeting. The leader is always the caller.

    `date` and `type` are the names used by the mobile client.
    """

    date: dt.date = Field(..., description="Meeting date")
    type: MeetingType = Field(..., description="Meeting type or short alias")
    time: Optional[dt.time] = None
    title: Optional[str] = Field(default=None, max_length=255)
    host: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)
    expected_participants: Optional[int] = Field(default=None, ge=0)
    agenda: Optional[List[str]] = None
    notes: Optional[str] = None
    meeting_duration: Optional[int] = Field(default=None, ge=0, description="Minutes")

    @field_validator("type", mode="before")
    @classmethod
    def resolve_alias(cls, v):
        return normalize_meeting_type(v)


class MeetingUpdate(BaseModel):
    date: Optional[dt.date] = None
    type: Optional[MeetingType] = None
    time: Optional[dt.time] = None
    title: Optional[str] = Field(default=None, max_length=255)
    host: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)
    expected_participants: Optional[int] = Field(default=None, ge=0)
    agenda: Optional[List[str]] = None
    notes: Optional[str] = None
    meeting_duration: Optional[int] = Field(default=None, ge=0)

    @field_validator("type", mode="before")
    @classmethod
    def resolve_alias(cls, v):
        return normalize_meeting_type(v)


class MeetingVerifyRequest(BaseModel):
    verification_notes: Optional[str] = None


class BacentaAttendanceResponse(BaseModel):
    id: UUID
    member_id: UUID
    present: bool
    arrival_time: Optional[dt.time] = None
    special_notes: Optional[str] = None
    member: Optional[MemberBrief] = None

    model_config = ConfigDict(from_attributes=True)


class OfferingResponse(BaseModel):
    id: UUID
    offering_type: str
    amount: float
    currency: str
    is_verified: bool
    created_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class MeetingResponse(BaseModel):
    id: UUID
    leader_id: UUID
    meeting_date: dt.date
    meeting_time: Optional[dt.time] = None
    meeting_type: str
    title: Optional[str] = None
    host: Optional[str] = None
    location: Optional[str] = None
    expected_participants: Optional[int] = None
    agenda: Optional[List[str]] = None
    family_photo: Optional[str] = None
    photo_url: Optional[str] = None
    notes: Optional[str] = None
    meeting_duration: Optional[int] = None
    offering_amount: float
    total_members_present: int
    is_verified: bool
    verified_by: Optional[UUID] = None
    verified_at: Optional[dt.datetime] = None
    verification_notes: Optional[str] = None
    leader: Optional[UserBriefResponse] = None
    created_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class MeetingDetailResponse(MeetingResponse):
    """Meeting with attendance list and offerings breakdown."""

    attendances: List[BacentaAttendanceResponse] = Field(default_factory=list)
    offerings: List[OfferingResponse] = Field(default_factory=list)
    offerings_by_type: Dict[str, float] = Field(default_factory=dict)


class MeetingListResponse(BaseModel):
    meetings: List[MeetingDetailResponse]
    total: int
    page: int
    total_pages: int


# ==========================
# Attendance & Offerings
# ==========================

class MeetingAttendanceItem(BaseModel):
    member_id: UUID
    status: Literal["present", "absent"]
    arrival_time: Optional[dt.time] = None
    special_notes: Optional[str] = None


class MeetingAttendanceRequest(BaseModel):
    attendance: List[MeetingAttendanceItem] = Field(..., min_length=1)


class OfferingItem(BaseModel):
    type: OfferingType = OfferingType.OFFERING
    amount: Decimal = Field(..., description="Amount in XAF, must be positive")


class OfferingsRequest(BaseModel):
    offerings: List[OfferingItem] = Field(..., min_length=1)
