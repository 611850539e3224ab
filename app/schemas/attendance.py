"""
Attendance Schemas
==================

Sunday attendance marking and listing.
"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.member import MemberBrief


class AttendanceItem(BaseModel):
    member_id: UUID
    present: bool
    notes: Optional[str] = None


class BulkAttendanceRequest(BaseModel):
    """Attendance of several members for one Sunday."""

    sunday_date: date
    attendances: List[AttendanceItem] = Field(..., min_length=1)


class AttendanceResponse(BaseModel):
    id: UUID
    member_id: UUID
    sunday_date: date
    present: bool
    service_type: str
    notes: Optional[str] = None
    marked_by_user_id: Optional[UUID] = None
    member: Optional[MemberBrief] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AttendanceListResponse(BaseModel):
    attendances: List[AttendanceResponse]
    total: int
    page: int
    total_pages: int
