"""
Authentication Routes Module
============================

Handles:
- User login (token returned in the body and as an httpOnly cookie)
- Token verification
- Current user lookup
- Password change
- Logout (token invalidation)

Security Features:
- Token version validation
- Rate limiting on login (see RateLimitMiddleware)
- Security logging
"""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.dependencies.auth import get_current_user
from app.core.logging import get_logger
from app.db.session import get_db
from app.models.user import User
from app.schemas import (
    ChangePasswordRequest,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    UserResponse,
    VerifyResponse,
)
from app.services.auth_service import AuthService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"model": ErrorResponse, "description": "Authentication failed"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)


# =====================================
# Login Endpoint
# =====================================

@router.post(
    "/login",
    response_model=LoginResponse,
    summary="User Login",
    description="""
    Authenticate with email and password.

    The JWT is returned in the body and also set as an httpOnly `token`
    cookie for browser clients.
    """,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials or inactive account"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
)
def login(
    request: Request,
    response: Response,
    login_data: LoginRequest,
    db: Session = Depends(get_db),
) -> dict:
    """
    Authenticate user and return a JWT.

    Args:
        request: FastAPI request object
        response: Response used to set the auth cookie
        login_data: Login credentials
        db: Database session

    Returns:
        Message, token and the authenticated user
    """
    auth_service = AuthService(db)
    client_ip = request.client.host if request.client else "unknown"

    user, token = auth_service.authenticate_user(
        email=login_data.email,
        password=login_data.password,
        ip_address=client_ip,
    )

    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

    logger.info("user_logged_in", user_id=str(user.id), ip_address=client_ip)

    return {
        "message": "Login successful",
        "token": token,
        "user": UserResponse.model_validate(user),
    }


# =====================================
# Verify / Me
# =====================================

@router.get(
    "/verify",
    response_model=VerifyResponse,
    summary="Verify Token",
)
def verify_token(current_user: User = Depends(get_current_user)) -> dict:
    """Confirm the presented token is valid and return its user."""
    return {"valid": True, "user": UserResponse.model_validate(current_user)}


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get Current User",
)
def get_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user


# =====================================
# Change Password
# =====================================

@router.post(
    "/change-password",
    response_model=MessageResponse,
    summary="Change Password",
    responses={
        401: {"model": ErrorResponse, "description": "Current password is incorrect"},
        422: {"model": ErrorResponse, "description": "New password too short"},
    },
)
def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    Change the caller's password.

    Args:
        payload: Current and new password
        current_user: Current authenticated user
        db: Database session
    """
    AuthService(db).change_password(
        current_user,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return {"message": "Password changed successfully"}


# =====================================
# Logout Endpoint
# =====================================

@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="User Logout",
    description="""
    Logout the current user by invalidating all tokens.

    This increments the user's token version, making all
    existing tokens invalid, and clears the auth cookie.
    """,
)
def logout(
    request: Request,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    AuthService(db).logout(current_user)
    response.delete_cookie(settings.AUTH_COOKIE_NAME)

    logger.info(
        "user_logged_out",
        user_id=str(current_user.id),
        ip_address=request.client.host if request.client else "unknown",
    )

    return {"message": "Successfully logged out"}
