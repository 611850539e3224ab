"""
Role-Based Access Control (RBAC) Dependencies Module
=====================================================

FastAPI dependencies for role-based authorization.

Features:
- Strict role enforcement
- Multiple role support
- Hierarchical role checking
- Audit logging for unauthorized access

Usage:
    @router.delete("/{member_id}")
    def delete_member(user: User = Depends(require_role(Role.BISHOP, Role.ASSISTING_OVERSEER))):
        ...
"""

from typing import Callable

from fastapi import Depends, Request

from app.models.user import User
from app.models.role_enum import Role
from app.core.dependencies.auth import get_current_user
from app.core.exceptions import AuthorizationError, RoleNotAuthorizedError
from app.core.logging import get_logger, security_logger

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Role Hierarchy
# =====================================

# Define role hierarchy (higher index = more authority)
ROLE_HIERARCHY: list[Role] = [
    Role.BACENTA_LEADER,
    Role.DATA_CLERK,
    Role.AREA_PASTOR,
    Role.GOVERNOR,
    Role.ASSISTING_OVERSEER,
    Role.BISHOP,
]


def get_role_level(role: Role) -> int:
    """
    Get the hierarchy level for a role.

    Args:
        role: Role to get level for

    Returns:
        Integer level (higher = more authority), -1 for unknown roles
    """
    try:
        return ROLE_HIERARCHY.index(Role(role))
    except ValueError:
        return -1


def has_role_or_higher(user_role: Role, required_role: Role) -> bool:
    """Check if user has the required role or higher."""
    return get_role_level(user_role) >= get_role_level(required_role)


def _deny(request: Request, user: User, allowed: list[str]) -> None:
    security_logger.log_unauthorized_access(
        user_id=str(user.id),
        resource=request.url.path,
        action=request.method,
    )
    logger.warning(
        "role_access_denied",
        user_role=str(user.role),
        required_roles=allowed,
        path=request.url.path,
    )
    raise RoleNotAuthorizedError(required_roles=allowed)


# =====================================
# Role Requirement Dependencies
# =====================================

def require_role(*allowed_roles: Role) -> Callable:
    """
    Create a dependency that requires specific roles.

    Only users with exactly one of the allowed roles can access.

    Args:
        *allowed_roles: Roles that are allowed access

    Returns:
        Dependency function returning the current user
    """
    async def role_checker(
        request: Request,
        current_user: User = Depends(get_current_user),
    ) -> User:
        if current_user.role not in allowed_roles:
            _deny(request, current_user, [r.value for r in allowed_roles])
        return current_user

    return role_checker


def require_role_or_higher(minimum_role: Role) -> Callable:
    """
    Create a dependency that requires a minimum role level.

    Users with the required role or any higher role can access.
    """
    async def role_checker(
        request: Request,
        current_user: User = Depends(get_current_user),
    ) -> User:
        if not has_role_or_higher(current_user.role, minimum_role):
            allowed = [r.value for r in ROLE_HIERARCHY[get_role_level(minimum_role):]]
            _deny(request, current_user, allowed)
        return current_user

    return role_checker


# =====================================
# Self or Role Check
# =====================================

def ensure_self_or_role(current_user: User, target_user_id, *allowed_roles: Role) -> None:
    """
    Allow the action when the caller is the target user or holds one of
    the given roles.

    Raises:
        AuthorizationError: Otherwise
    """
    if current_user.id == target_user_id or current_user.role in allowed_roles:
        return

    security_logger.log_unauthorized_access(
        user_id=str(current_user.id),
        resource=f"user:{target_user_id}",
        action="access",
    )
    raise AuthorizationError("Access denied")
