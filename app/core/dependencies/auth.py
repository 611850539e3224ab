"""
Authentication Dependencies Module
==================================

FastAPI dependencies for authentication and user extraction.

Features:
- JWT token read from the Authorization header or the auth cookie
- Token version validation (logout revokes every issued token)
- Account status verification

Usage:
    @router.get("/protected")
    def protected_route(user: User = Depends(get_current_user)):
        return {"user": user.email}
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    AuthenticationError,
    TokenInvalidError,
    TokenVersionMismatchError,
)
from app.core.logging import get_logger, security_logger, user_id_context
from app.db.session import get_db
from app.models.user import User
from app.services.auth_service import AuthService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# OAuth2 Scheme
# =====================================

# auto_error is off so the cookie can be used as a fallback
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/auth/login",
    auto_error=False,
    description="Bearer token, or the `token` cookie set at login",
)


def extract_token(request: Request, bearer_token: Optional[str]) -> Optional[str]:
    """Return the bearer token if present, otherwise the auth cookie."""
    if bearer_token:
        return bearer_token
    return request.cookies.get(settings.AUTH_COOKIE_NAME)


# =====================================
# Get Current User
# =====================================

def get_current_user(
    request: Request,
    bearer_token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate JWT and return current user from database.

    Security checks performed:
    - Token signature, issuer and audience validation
    - Token expiration check
    - Token version validation (for revocation)
    - Account status check

    Args:
        request: FastAPI request object
        bearer_token: JWT token from Authorization header
        db: Database session

    Returns:
        User model instance

    Raises:
        AuthenticationError: If authentication fails
    """
    token = extract_token(request, bearer_token)
    ip_address = request.client.host if request.client else "unknown"

    if not token:
        raise AuthenticationError("Access token required")

    auth_service = AuthService(db)

    try:
        user = auth_service.validate_access_token(token)
    except TokenVersionMismatchError:
        security_logger.log_token_invalid(
            reason="token_version_mismatch",
            ip_address=ip_address,
        )
        raise
    except TokenInvalidError as e:
        security_logger.log_token_invalid(
            reason=e.details.get("reason", "invalid"),
            ip_address=ip_address,
        )
        raise

    # Set request context for logging
    request.state.user_id = str(user.id)
    user_id_context.set(str(user.id))

    return user
