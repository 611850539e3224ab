"""
Dashboard Routes Module
=======================

Home screen figures. The shape of `GET /dashboard` depends on the
caller's role: Bacenta leaders get their own flock, every other role a
summary of their scope.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies.auth import get_current_user
from app.core.dependencies.rbac import ensure_self_or_role, require_role
from app.core.exceptions import AreaNotFoundError, UserNotFoundError
from app.core.logging import get_logger
from app.core.scope import RoleScope
from app.db.session import get_db
from app.models.area import Area
from app.models.role_enum import Role
from app.models.user import User
from app.schemas.common import ErrorResponse
from app.services.dashboard_service import (
    build_area_stats,
    build_leader_dashboard,
    build_leader_stats,
    build_summary_dashboard,
)

logger = get_logger(__name__)

DASHBOARD_SUPERVISORS = (Role.BISHOP, Role.GOVERNOR)


router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Insufficient permissions"},
    },
)


@router.get("/", summary="Dashboard")
def get_dashboard(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    if current_user.role == Role.BACENTA_LEADER:
        return build_leader_dashboard(db, current_user)
    return build_summary_dashboard(db, current_user)


@router.get("/area/{area_id}/stats", summary="Area Statistics")
def area_stats(
    area_id: UUID,
    current_user: User = Depends(require_role(*DASHBOARD_SUPERVISORS)),
    db: Session = Depends(get_db),
) -> dict:
    area = db.get(Area, area_id)
    if area is None:
        raise AreaNotFoundError(str(area_id))
    RoleScope(db, current_user).ensure_area(area.id)
    return build_area_stats(db, area)


@router.get("/leader/{leader_id}/stats", summary="Leader Statistics")
def leader_stats(
    leader_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Available to the leader themselves, Bishops and Governors within their regions."""
    ensure_self_or_role(current_user, leader_id, *DASHBOARD_SUPERVISORS)

    leader = db.get(User, leader_id)
    if leader is None:
        raise UserNotFoundError(str(leader_id))
    RoleScope(db, current_user).ensure_user(leader)
    return build_leader_stats(db, leader)
