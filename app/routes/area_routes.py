"""
Area Routes Module
==================

CRUD for the numbered church areas, plus user assignment.

Security:
- Restricted to Bishop and Governor
- A Governor only sees and manages the areas of the regions they govern
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.core.dependencies.rbac import require_role
from app.core.exceptions import (
    AreaNotFoundError,
    DuplicateError,
    NotFoundError,
    UserNotFoundError,
    ValidationError,
)
from app.core.logging import audit_logger, get_logger
from app.core.scope import RoleScope
from app.db.session import get_db
from app.models.area import Area
from app.models.member import Member
from app.models.region import Region
from app.models.role_enum import Role
from app.models.user import User
from app.schemas.area import (
    AreaAssignRequest,
    AreaCreate,
    AreaLeaderResponse,
    AreaResponse,
    AreaUpdate,
)
from app.schemas.common import ErrorResponse
from app.services.aggregates import paginate

logger = get_logger(__name__)

require_area_admin = require_role(Role.BISHOP, Role.GOVERNOR)

router = APIRouter(
    prefix="/areas",
    tags=["Areas"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Insufficient permissions"},
    },
)


def _get_area(db: Session, scope: RoleScope, area_id: UUID) -> Area:
    area = db.get(Area, area_id)
    if area is None:
        raise AreaNotFoundError(str(area_id))
    scope.ensure_area(area.id)
    return area


def _check_references(db: Session, data: dict) -> None:
    if data.get("region_id") and db.get(Region, data["region_id"]) is None:
        raise NotFoundError("Region", str(data["region_id"]))
    for field in ("overseer_id", "leader_id"):
        if data.get(field) and db.get(User, data[field]) is None:
            raise UserNotFoundError(str(data[field]))


def _check_number_free(db: Session, number: int, exclude_id: Optional[UUID] = None) -> None:
    query = db.query(Area.id).filter(Area.number == number)
    if exclude_id:
        query = query.filter(Area.id != exclude_id)
    if query.first():
        raise DuplicateError("area", "number")


@router.get("/", summary="List Areas")
def list_areas(
    search: Optional[str] = Query(None, description="Search on area name"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(require_area_admin),
    db: Session = Depends(get_db),
) -> dict:
    """
    List areas ordered by number.

    Args:
        search: Case-insensitive substring of the area name
        page: Page number
        limit: Areas per page
    """
    query = RoleScope(db, current_user).filter_areas(db.query(Area))
    if search:
        query = query.filter(Area.name.ilike(f"%{search}%"))

    query = query.options(
        joinedload(Area.region),
        joinedload(Area.overseer),
        joinedload(Area.leader),
    ).order_by(Area.number)

    areas, total, pages = paginate(query, page, limit)

    return {
        "areas": [AreaResponse.model_validate(a) for a in areas],
        "total": total,
        "page": page,
        "total_pages": pages,
    }


@router.post(
    "/assign",
    summary="Assign User To Area",
)
def assign_user(
    payload: AreaAssignRequest,
    current_user: User = Depends(require_area_admin),
    db: Session = Depends(get_db),
) -> dict:
    """Set a user's area. 404 if either the user or the area is unknown."""
    user = db.get(User, payload.user_id)
    if user is None:
        raise UserNotFoundError(str(payload.user_id))
    area = _get_area(db, RoleScope(db, current_user), payload.area_id)

    user.area_id = area.id
    db.commit()

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="assign",
        resource="user",
        resource_id=str(user.id),
        area_id=str(area.id),
    )

    return {
        "message": "User assigned to area",
        "user_id": user.id,
        "area_id": area.id,
    }


@router.get("/{area_id}", response_model=AreaResponse, summary="Get Area")
def get_area(
    area_id: UUID,
    current_user: User = Depends(require_area_admin),
    db: Session = Depends(get_db),
) -> Area:
    return _get_area(db, RoleScope(db, current_user), area_id)


@router.post(
    "/",
    response_model=AreaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Area",
    responses={400: {"model": ErrorResponse, "description": "Area number already used"}},
)
def create_area(
    payload: AreaCreate,
    current_user: User = Depends(require_area_admin),
    db: Session = Depends(get_db),
) -> Area:
    data = payload.model_dump()
    _check_number_free(db, payload.number)
    _check_references(db, data)
    RoleScope(db, current_user).ensure_region(data.get("region_id"))

    area = Area(**data)
    db.add(area)
    db.commit()
    db.refresh(area)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="create",
        resource="area",
        resource_id=str(area.id),
        number=area.number,
    )
    return area


@router.put("/{area_id}", response_model=AreaResponse, summary="Update Area")
def update_area(
    area_id: UUID,
    payload: AreaUpdate,
    current_user: User = Depends(require_area_admin),
    db: Session = Depends(get_db),
) -> Area:
    scope = RoleScope(db, current_user)
    area = _get_area(db, scope, area_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("number") is not None and changes["number"] != area.number:
        _check_number_free(db, changes["number"], exclude_id=area.id)
    _check_references(db, changes)
    if "region_id" in changes:
        scope.ensure_region(changes["region_id"])

    for field, value in changes.items():
        if value is None and field in ("name", "number"):
            continue
        setattr(area, field, value)

    db.commit()
    db.refresh(area)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="update",
        resource="area",
        resource_id=str(area.id),
        fields=sorted(changes),
    )
    return area


@router.delete("/{area_id}", summary="Delete Area")
def delete_area(
    area_id: UUID,
    current_user: User = Depends(require_area_admin),
    db: Session = Depends(get_db),
) -> dict:
    area = _get_area(db, RoleScope(db, current_user), area_id)

    if db.query(Member.id).filter(Member.area_id == area.id).first():
        raise ValidationError("Area still has members and cannot be deleted")

    db.delete(area)
    db.commit()

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="delete",
        resource="area",
        resource_id=str(area_id),
    )
    return {"message": "Area deleted successfully"}


@router.get("/{area_id}/leaders", summary="List Area Leaders")
def list_area_leaders(
    area_id: UUID,
    current_user: User = Depends(require_area_admin),
    db: Session = Depends(get_db),
) -> dict:
    """Users of the area, each with the number of members they lead."""
    area = _get_area(db, RoleScope(db, current_user), area_id)

    rows = (
        db.query(User, func.count(Member.id))
        .outerjoin(Member, Member.leader_id == User.id)
        .filter(User.area_id == area.id)
        .group_by(User.id)
        .order_by(User.first_name)
        .all()
    )

    return {
        "area": {"id": area.id, "name": area.name, "number": area.number},
        "leaders": [
            AreaLeaderResponse(
                id=user.id,
                first_name=user.first_name,
                last_name=user.last_name,
                email=user.email,
                role=user.role,
                phone=user.phone,
                is_active=user.is_active,
                member_count=count,
            )
            for user, count in rows
        ],
    }
