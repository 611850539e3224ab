"""
Ministry Schemas
================
"""

import datetime as dt
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import empty_to_none


class MinistryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    leader_id: Optional[UUID] = None

    @field_validator("leader_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return empty_to_none(v)


class MinistryAttendanceItem(BaseModel):
    member_id: UUID
    present: bool = True


class MinistryAttendanceRequest(BaseModel):
    date: dt.date
    attendances: List[MinistryAttendanceItem] = Field(..., min_length=1)


class HeadcountItem(BaseModel):
    ministry_id: UUID
    headcount: int = Field(default=0, ge=0)
    notes: Optional[str] = None


class HeadcountRequest(BaseModel):
    """Headcounts of several ministries for one date."""

    date: dt.date
    headcounts: List[HeadcountItem] = Field(..., min_length=1)
