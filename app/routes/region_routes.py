"""
Region Routes Module
====================

Regions group areas under a Governor. Listing is open to every
authenticated user; changes are reserved to the Bishop.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.dependencies.auth import get_current_user
from app.core.dependencies.rbac import require_role
from app.core.exceptions import NotFoundError, UserNotFoundError
from app.core.logging import audit_logger
from app.db.session import get_db
from app.models.region import Region
from app.models.role_enum import Role
from app.models.user import User
from app.schemas.area import RegionCreate, RegionResponse, RegionUpdate
from app.schemas.common import ErrorResponse

router = APIRouter(
    prefix="/regions",
    tags=["Regions"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Insufficient permissions"},
    },
)


def _get_region(db: Session, region_id: UUID) -> Region:
    region = db.get(Region, region_id)
    if region is None:
        raise NotFoundError("Region", str(region_id))
    return region


def _check_governor(db: Session, governor_id) -> None:
    if governor_id and db.get(User, governor_id) is None:
        raise UserNotFoundError(str(governor_id))


@router.get("/", response_model=list[RegionResponse], summary="List Regions")
def list_regions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[Region]:
    return (
        db.query(Region)
        .options(joinedload(Region.governor), selectinload(Region.areas))
        .order_by(Region.name)
        .all()
    )


@router.post(
    "/",
    response_model=RegionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Region",
)
def create_region(
    payload: RegionCreate,
    current_user: User = Depends(require_role(Role.BISHOP)),
    db: Session = Depends(get_db),
) -> Region:
    _check_governor(db, payload.governor_id)

    region = Region(name=payload.name, governor_id=payload.governor_id)
    db.add(region)
    db.commit()
    db.refresh(region)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="create",
        resource="region",
        resource_id=str(region.id),
    )
    return region


@router.put("/{region_id}", response_model=RegionResponse, summary="Update Region")
def update_region(
    region_id: UUID,
    payload: RegionUpdate,
    current_user: User = Depends(require_role(Role.BISHOP)),
    db: Session = Depends(get_db),
) -> Region:
    region = _get_region(db, region_id)
    changes = payload.model_dump(exclude_unset=True)
    _check_governor(db, changes.get("governor_id"))

    if changes.get("name"):
        region.name = changes["name"]
    if "governor_id" in changes:
        region.governor_id = changes["governor_id"]

    db.commit()
    db.refresh(region)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="update",
        resource="region",
        resource_id=str(region.id),
    )
    return region


@router.delete("/{region_id}", summary="Delete Region")
def delete_region(
    region_id: UUID,
    current_user: User = Depends(require_role(Role.BISHOP)),
    db: Session = Depends(get_db),
) -> dict:
    """Delete a region. Its areas are kept and detached from it."""
    region = _get_region(db, region_id)
    for area in region.areas:
        area.region_id = None

    db.delete(region)
    db.commit()

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="delete",
        resource="region",
        resource_id=str(region_id),
    )
    return {"message": "Region deleted successfully"}
