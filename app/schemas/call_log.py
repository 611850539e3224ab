"""
Call Log Schemas
================
"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import CallOutcome, ContactMethod
from app.schemas.member import MemberBrief
from app.schemas.user import UserBriefResponse


class CallLogCreate(BaseModel):
    member_id: UUID
    outcome: CallOutcome
    call_date: Optional[datetime] = Field(default=None, description="Defaults to now")
    notes: Optional[str] = None
    next_followup_date: Optional[date] = None
    followup_notes: Optional[str] = None
    call_duration: Optional[int] = Field(default=None, ge=0, description="Duration in seconds")
    contact_method: ContactMethod = ContactMethod.PHONE
    is_completed: bool = True


class CallLogUpdate(BaseModel):
    outcome: Optional[CallOutcome] = None
    call_date: Optional[datetime] = None
    notes: Optional[str] = None
    next_followup_date: Optional[date] = None
    followup_notes: Optional[str] = None
    call_duration: Optional[int] = Field(default=None, ge=0)
    contact_method: Optional[ContactMethod] = None
    is_completed: Optional[bool] = None


class CallLogResponse(BaseModel):
    id: UUID
    member_id: UUID
    caller_id: UUID
    call_date: datetime
    outcome: str
    notes: Optional[str] = None
    next_followup_date: Optional[date] = None
    followup_notes: Optional[str] = None
    call_duration: Optional[int] = None
    contact_method: str
    is_completed: bool
    member: Optional[MemberBrief] = None
    caller: Optional[UserBriefResponse] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CallLogListResponse(BaseModel):
    call_logs: List[CallLogResponse]
    total: int
    page: int
    total_pages: int
