"""
Authentication Service Module
=============================

Consolidated authentication service handling:
- Password hashing using Argon2
- JWT access token creation
- Token decoding and validation
- Token version tracking for logout / forced re-login

Security Features:
- Argon2id password hashing (memory-hard, resistant to GPU attacks)
- Issuer and audience validation
- Token version for revocation support
"""

from datetime import datetime, timedelta, UTC
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session
from jose import jwt, JWTError
from argon2 import PasswordHasher
from argon2.exceptions import Argon2Error, InvalidHashError, VerifyMismatchError

from app.models.user import User
from app.core.config import settings
from app.core.exceptions import (
    AccountDisabledError,
    AuthenticationError,
    InvalidCredentialsError,
    TokenExpiredError,
    TokenInvalidError,
    TokenVersionMismatchError,
)
from app.core.logging import get_logger, security_logger

# Initialize logger
logger = get_logger(__name__)


# ==========================
# Password Hasher Configuration
# ==========================

ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,  # 64 MB
    parallelism=4,
    hash_len=32,
    salt_len=16,
)


class TokenType:
    """Token type constants."""
    ACCESS = "access"


# ==========================
# Auth Service Class
# ==========================

class AuthService:
    """
    Authentication service handling all auth-related operations.

    Usage:
        auth_service = AuthService(db)
        user, token = auth_service.authenticate_user(email, password)
    """

    def __init__(self, db: Session):
        self.db = db

    # --------------------------
    # Password Utilities
    # --------------------------

    @staticmethod
    def hash_password(password: str) -> str:
        """
        Hash a password using Argon2id.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        return ph.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Password to verify
            hashed_password: Stored hash from database

        Returns:
            True if password matches, False otherwise
        """
        try:
            ph.verify(hashed_password, plain_password)
            return True
        except VerifyMismatchError:
            return False
        except (Argon2Error, InvalidHashError) as e:
            logger.warning("password_verification_error", error=str(e))
            return False

    # --------------------------
    # Token Creation
    # --------------------------

    @staticmethod
    def create_access_token(
        user: User,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a JWT access token for a user.

        The payload carries the identity claims the client needs to
        render its navigation (email, role, area) plus the token version
        used for revocation.

        Args:
            user: User the token is issued for
            expires_delta: Custom expiration time

        Returns:
            Encoded JWT access token
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        now = datetime.now(UTC)
        role = user.role.value if hasattr(user.role, "value") else user.role

        payload = {
            "sub": str(user.id),
            "email": user.email,
            "role": role,
            "area_id": str(user.area_id) if user.area_id else None,
            "token_version": user.token_version,
            "type": TokenType.ACCESS,
            "exp": now + expires_delta,
            "iat": now,
            "iss": settings.ISSUER,
            "aud": settings.AUDIENCE,
        }

        return jwt.encode(
            payload,
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM
        )

    # --------------------------
    # Token Decoding & Validation
    # --------------------------

    @staticmethod
    def decode_token(token: str) -> dict:
        """
        Decode and validate a JWT token.

        Raises:
            TokenExpiredError: If token has expired
            TokenInvalidError: If token is invalid
        """
        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
                issuer=settings.ISSUER,
                audience=settings.AUDIENCE,
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            logger.warning("token_decode_error", error=str(e))
            raise TokenInvalidError(reason=str(e))

        if payload.get("type") != TokenType.ACCESS:
            raise TokenInvalidError(reason="Unexpected token type")

        return payload

    def validate_access_token(self, token: str) -> User:
        """
        Validate an access token and return the user.

        Raises:
            TokenInvalidError: If token is invalid or the user is gone
            TokenVersionMismatchError: If the token was revoked
            AccountDisabledError: If the account is inactive
        """
        payload = self.decode_token(token)

        user_id = payload.get("sub")
        token_version = payload.get("token_version")

        if not user_id or token_version is None:
            raise TokenInvalidError(reason="Invalid token payload")

        try:
            user_uuid = UUID(user_id)
        except ValueError:
            raise TokenInvalidError(reason="Invalid user ID format")

        user = self.db.get(User, user_uuid)

        if not user:
            raise TokenInvalidError(reason="User not found")

        if user.token_version != token_version:
            raise TokenVersionMismatchError()

        if not user.is_active:
            raise AccountDisabledError()

        return user

    # --------------------------
    # Authentication Methods
    # --------------------------

    def authenticate_user(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
    ) -> tuple[User, str]:
        """
        Authenticate a user with email and password.

        On success `last_login` is stamped and a fresh access token is
        returned alongside the user.

        Raises:
            InvalidCredentialsError: Unknown email, wrong password or
                inactive account
        """
        ip = ip_address or "unknown"
        user = self.db.query(User).filter(User.email == email.lower()).first()

        if not user:
            security_logger.log_login_failure(email=email, ip_address=ip, reason="user_not_found")
            raise InvalidCredentialsError()

        if not self.verify_password(password, user.hashed_password):
            security_logger.log_login_failure(email=email, ip_address=ip, reason="invalid_password")
            raise InvalidCredentialsError()

        if not user.is_active:
            security_logger.log_login_failure(email=email, ip_address=ip, reason="account_disabled")
            raise InvalidCredentialsError()

        user.last_login = datetime.now(UTC)
        self.db.commit()

        security_logger.log_login_success(user_id=str(user.id), ip_address=ip)

        return user, self.create_access_token(user)

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        """
        Replace a user's password after checking the current one.

        Raises:
            AuthenticationError: If the current password is wrong
        """
        if not self.verify_password(current_password, user.hashed_password):
            raise AuthenticationError("Current password is incorrect")

        user.hashed_password = self.hash_password(new_password)
        self.db.commit()

        security_logger.log_password_changed(user_id=str(user.id))

    def logout(self, user: User) -> None:
        """
        Logout user by invalidating all tokens.

        Args:
            user: User model instance
        """
        user.invalidate_tokens()
        self.db.commit()

        security_logger.log_logout(user_id=str(user.id))
