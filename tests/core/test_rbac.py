"""
Role-Based Access Control (RBAC) Unit Tests
============================================

Tests for RBAC functionality including:
- Role hierarchy
- Role level checking
- require_role dependency
- require_role_or_higher dependency
- ensure_self_or_role helper
"""

import asyncio
from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.core.dependencies.rbac import (
    ROLE_HIERARCHY,
    ensure_self_or_role,
    get_role_level,
    has_role_or_higher,
    require_role,
    require_role_or_higher,
)
from app.core.exceptions import AuthorizationError, RoleNotAuthorizedError
from app.models.role_enum import Role


pytestmark = pytest.mark.rbac


def fake_user(role: Role):
    return SimpleNamespace(id=uuid4(), role=role.value)


def fake_request():
    return SimpleNamespace(url=SimpleNamespace(path="/api/test"), method="GET")


class TestRoleHierarchy:
    """Tests for role hierarchy configuration."""

    def test_bacenta_leader_is_lowest(self):
        assert ROLE_HIERARCHY[0] == Role.BACENTA_LEADER

    def test_bishop_is_highest(self):
        assert ROLE_HIERARCHY[-1] == Role.BISHOP

    def test_every_role_is_ranked(self):
        assert set(ROLE_HIERARCHY) == set(Role)


class TestGetRoleLevel:
    """Tests for get_role_level function."""

    def test_level_accepts_stored_string(self):
        # Act
        level = get_role_level("Bishop")

        # Assert
        assert level == len(ROLE_HIERARCHY) - 1

    def test_unknown_role_is_negative(self):
        assert get_role_level("Janitor") == -1

    def test_governor_outranks_area_pastor(self):
        assert get_role_level(Role.GOVERNOR) > get_role_level(Role.AREA_PASTOR)


class TestHasRoleOrHigher:
    """Tests for has_role_or_higher function."""

    def test_same_role_passes(self):
        assert has_role_or_higher(Role.AREA_PASTOR, Role.AREA_PASTOR)

    def test_higher_role_passes(self):
        assert has_role_or_higher(Role.BISHOP, Role.DATA_CLERK)

    def test_lower_role_fails(self):
        assert not has_role_or_higher(Role.BACENTA_LEADER, Role.DATA_CLERK)


class TestRequireRole:
    """Tests for the require_role dependency factory."""

    def test_allowed_role_returns_user(self):
        # Arrange
        checker = require_role(Role.BISHOP, Role.DATA_CLERK)
        user = fake_user(Role.DATA_CLERK)

        # Act
        result = asyncio.run(checker(request=fake_request(), current_user=user))

        # Assert
        assert result is user

    def test_other_role_is_rejected(self):
        # Arrange
        checker = require_role(Role.BISHOP)
        user = fake_user(Role.GOVERNOR)

        # Act & Assert
        with pytest.raises(RoleNotAuthorizedError) as exc_info:
            asyncio.run(checker(request=fake_request(), current_user=user))

        assert exc_info.value.status_code == 403
        assert exc_info.value.details["required_roles"] == ["Bishop"]

    def test_higher_role_is_not_implied(self):
        """require_role matches exact roles only."""
        checker = require_role(Role.AREA_PASTOR)

        with pytest.raises(RoleNotAuthorizedError):
            asyncio.run(checker(request=fake_request(), current_user=fake_user(Role.BISHOP)))


class TestRequireRoleOrHigher:
    """Tests for the require_role_or_higher dependency factory."""

    def test_higher_role_passes(self):
        checker = require_role_or_higher(Role.AREA_PASTOR)
        user = fake_user(Role.ASSISTING_OVERSEER)

        assert asyncio.run(checker(request=fake_request(), current_user=user)) is user

    def test_lower_role_lists_allowed_roles(self):
        # Arrange
        checker = require_role_or_higher(Role.GOVERNOR)

        # Act
        with pytest.raises(RoleNotAuthorizedError) as exc_info:
            asyncio.run(checker(request=fake_request(), current_user=fake_user(Role.DATA_CLERK)))

        # Assert
        assert exc_info.value.details["required_roles"] == [
            "Governor",
            "Assisting_Overseer",
            "Bishop",
        ]


class TestEnsureSelfOrRole:
    """Tests for ensure_self_or_role helper."""

    def test_self_is_allowed(self):
        user = fake_user(Role.BACENTA_LEADER)
        ensure_self_or_role(user, user.id, Role.BISHOP)

    def test_listed_role_is_allowed(self):
        ensure_self_or_role(fake_user(Role.GOVERNOR), uuid4(), Role.BISHOP, Role.GOVERNOR)

    def test_other_user_is_denied(self):
        with pytest.raises(AuthorizationError):
            ensure_self_or_role(fake_user(Role.BACENTA_LEADER), uuid4(), Role.BISHOP)
