"""
User Schemas Module
===================

Pydantic models for user-related request/response validation.

Password hashes are never part of any response schema.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.role_enum import Role
from app.schemas.common import empty_to_none


# ==========================
# Nested Schemas
# ==========================

class AreaBrief(BaseModel):
    id: UUID
    name: str
    number: int

    model_config = ConfigDict(from_attributes=True)


class UserBriefResponse(BaseModel):
    """Brief user response for nested references."""

    id: UUID
    first_name: str
    last_name: str
    email: str
    role: str
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ==========================
# Request Schemas
# ==========================

class UserCreate(BaseModel):
    """Schema for creating a new leader account."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(
        ...,
        min_length=6,
        description="Initial password"
    )
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: Role = Field(..., description="User role")
    phone: Optional[str] = Field(default=None, max_length=50)
    area_id: Optional[UUID] = Field(default=None, description="Area the user belongs to")

    @field_validator("area_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return empty_to_none(v)


class UserUpdate(BaseModel):
    """
    Schema for updating user information.

    `role` and `is_active` are only honoured for Bishops and Governors.
    """

    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)
    area_id: Optional[UUID] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None

    @field_validator("area_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return empty_to_none(v)


class UserSettingsUpdate(BaseModel):
    settings: Dict[str, Any] = Field(..., description="Keys to merge into the user's settings")


# ==========================
# Response Schemas
# ==========================

class UserResponse(BaseModel):
    """User response schema (excludes sensitive data)."""

    id: UUID = Field(..., description="User UUID")
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: str
    area_id: Optional[UUID] = None
    area: Optional[AreaBrief] = None
    is_active: bool
    photo_url: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "email": "pastor@example.com",
                "first_name": "Jean",
                "last_name": "Mbarga",
                "role": "Area_Pastor",
                "area_id": "550e8400-e29b-41d4-a716-446655440001",
                "is_active": True,
                "created_at": "2024-01-15T10:30:00Z"
            }
        }
    )


class LedMemberBrief(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    phone_primary: str
    state: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class UserDetailResponse(UserResponse):
    """A user with the members they lead."""

    led_members: List[LedMemberBrief] = Field(default_factory=list)


class UserListResponse(BaseModel):
    """Response schema for user list."""

    users: List[UserResponse]
    total: int = Field(..., description="Total number of users")
    page: int = Field(default=1, description="Current page number")
    total_pages: int = Field(default=0, description="Number of pages")
