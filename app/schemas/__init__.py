"""
Schemas Package Initialization
==============================

Exports the Pydantic schemas shared across routers.

Usage:
    from app.schemas import LoginRequest, UserResponse, ErrorResponse
"""

from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    VerifyResponse,
    ChangePasswordRequest,
)
from app.schemas.user import (
    UserCreate,
    UserUpdate,
    UserSettingsUpdate,
    UserResponse,
    UserBriefResponse,
    UserDetailResponse,
    UserListResponse,
)

__all__ = [
    # Common
    "ErrorResponse",
    "MessageResponse",
    # Auth
    "LoginRequest",
    "LoginResponse",
    "VerifyResponse",
    "ChangePasswordRequest",
    # User
    "UserCreate",
    "UserUpdate",
    "UserSettingsUpdate",
    "UserResponse",
    "UserBriefResponse",
    "UserDetailResponse",
    "UserListResponse",
]
