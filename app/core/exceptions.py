"""
Centralized Exception Handling Module
=====================================

Defines custom exception classes for the application.

Every exception carries a message, an HTTP status code and an optional
details mapping. The application-level handler renders them as:

    {"message": "...", "details": {...}}

Usage:
    raise NotFoundError("Member", str(member_id))
    raise ScopeViolationError("member")
"""

from typing import Any, Dict, Optional

from fastapi import status


class FlockException(Exception):
    """
    Base exception class for the application.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ==========================
# Authentication Exceptions
# ==========================

class AuthenticationError(FlockException):
    """Raised when authentication fails."""

    def __init__(
        self,
        message: str = "Could not validate credentials",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid."""

    def __init__(self):
        super().__init__(message="Invalid email or password")


class TokenExpiredError(AuthenticationError):
    """Raised when a JWT token has expired."""

    def __init__(self):
        super().__init__(message="Token has expired")


class TokenInvalidError(AuthenticationError):
    """Raised when a JWT token is invalid."""

    def __init__(self, reason: str = "Invalid token"):
        super().__init__(
            message="Invalid token",
            details={"reason": reason}
        )


class TokenVersionMismatchError(AuthenticationError):
    """Raised when token version doesn't match user's current version."""

    def __init__(self):
        super().__init__(
            message="Token has been invalidated. Please log in again."
        )


class AccountDisabledError(AuthenticationError):
    """Raised when the account has been deactivated."""

    def __init__(self):
        super().__init__(
            message="Account has been disabled. Please contact your administrator."
        )


# ==========================
# Authorization Exceptions
# ==========================

class AuthorizationError(FlockException):
    """Raised when user lacks required permissions."""

    def __init__(
        self,
        message: str = "Insufficient permissions",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class RoleNotAuthorizedError(AuthorizationError):
    """Raised when user's role is not authorized for the action."""

    def __init__(self, required_roles: list):
        super().__init__(
            message="Your role is not authorized for this action",
            details={"required_roles": required_roles}
        )


class ScopeViolationError(AuthorizationError):
    """Raised when a record lies outside the caller's area or flock."""

    def __init__(self, resource: str = "resource"):
        super().__init__(
            message=f"Access denied: this {resource} is outside your scope",
            details={"resource": resource},
        )


# ==========================
# Resource Exceptions
# ==========================

class NotFoundError(FlockException):
    """Raised when a resource is not found."""

    def __init__(self, resource: str = "Resource", identifier: Optional[str] = None):
        message = f"{resource} not found"
        details = {"resource": resource}
        if identifier:
            details["identifier"] = identifier
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class UserNotFoundError(NotFoundError):
    """Raised when a user is not found."""

    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="User", identifier=identifier)


class MemberNotFoundError(NotFoundError):
    """Raised when a member is not found."""

    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="Member", identifier=identifier)


class AreaNotFoundError(NotFoundError):
    """Raised when an area is not found."""

    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="Area", identifier=identifier)


class MeetingNotFoundError(NotFoundError):
    """Raised when a Bacenta meeting is not found."""

    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="Bacenta meeting", identifier=identifier)


# ==========================
# Validation Exceptions
# ==========================

class ValidationError(FlockException):
    """Raised when a business validation rule fails."""

    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class DuplicateError(ValidationError):
    """Raised when a unique value is already taken."""

    def __init__(self, resource: str, field: str):
        super().__init__(
            message=f"A {resource} with this {field} already exists",
            details={"resource": resource, "field": field},
        )


class FileUploadError(ValidationError):
    """Raised when an uploaded file is rejected."""

    def __init__(self, reason: str):
        super().__init__(
            message="File upload rejected",
            details={"reason": reason},
        )


# ==========================
# Rate Limiting Exceptions
# ==========================

class RateLimitError(FlockException):
    """Rate limit exceeded. Rendered by RateLimitMiddleware."""

    def __init__(
        self,
        retry_after: int = 60,
        message: str = "Too many requests. Please try again later.",
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details={"retry_after_seconds": retry_after}
        )

