"""
Area & Region Schemas
=====================

Request and response models for areas and the regions grouping them.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import empty_to_none
from app.schemas.user import UserBriefResponse


# ==========================
# Areas
# ==========================

class AreaCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    number: int = Field(..., ge=1, le=50, description="Area number, 1 to 50")
    region_id: Optional[UUID] = None
    overseer_id: Optional[UUID] = None
    leader_id: Optional[UUID] = None
    description: Optional[str] = None

    @field_validator("region_id", "overseer_id", "leader_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return empty_to_none(v)


class AreaUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    number: Optional[int] = Field(default=None, ge=1, le=50)
    region_id: Optional[UUID] = None
    overseer_id: Optional[UUID] = None
    leader_id: Optional[UUID] = None
    description: Optional[str] = None

    @field_validator("region_id", "overseer_id", "leader_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return empty_to_none(v)


class AreaAssignRequest(BaseModel):
    """Attach a user to an area."""

    user_id: UUID
    area_id: UUID


class RegionBrief(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class AreaResponse(BaseModel):
    id: UUID
    name: str
    number: int
    description: Optional[str] = None
    region_id: Optional[UUID] = None
    overseer_id: Optional[UUID] = None
    leader_id: Optional[UUID] = None
    region: Optional[RegionBrief] = None
    overseer: Optional[UserBriefResponse] = None
    leader: Optional[UserBriefResponse] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AreaLeaderResponse(UserBriefResponse):
    """A user of an area together with the number of members they lead."""

    is_active: bool
    member_count: int = 0


# ==========================
# Regions
# ==========================

class RegionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    governor_id: Optional[UUID] = None

    @field_validator("governor_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return empty_to_none(v)


class RegionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    governor_id: Optional[UUID] = None

    @field_validator("governor_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return empty_to_none(v)


class RegionAreaBrief(BaseModel):
    id: UUID
    name: str
    number: int

    model_config = ConfigDict(from_attributes=True)


class RegionResponse(BaseModel):
    id: UUID
    name: str
    governor_id: Optional[UUID] = None
    governor: Optional[UserBriefResponse] = None
    areas: List[RegionAreaBrief] = Field(default_factory=list)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
