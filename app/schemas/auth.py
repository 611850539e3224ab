"""
Authentication Schemas Module
=============================

Pydantic models for authentication request/response validation.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.schemas.user import UserResponse


# ==========================
# Login Schemas
# ==========================

class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(
        ...,
        description="User email address",
        examples=["pastor@example.com"]
    )
    password: str = Field(
        ...,
        min_length=1,
        description="User password",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "pastor@example.com",
                "password": "secret123"
            }
        }
    )


class LoginResponse(BaseModel):
    """Login response: the token is also set as an httpOnly cookie."""

    message: str = Field(default="Login successful")
    token: str = Field(..., description="JWT access token")
    user: UserResponse


class VerifyResponse(BaseModel):
    valid: bool = True
    user: UserResponse


# ==========================
# Password Schemas
# ==========================

class ChangePasswordRequest(BaseModel):
    """Password change for the logged-in user."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="New password (min 6 characters)"
    )
