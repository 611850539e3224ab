"""
Call Log Routes Module
======================

Follow-up calls made by leaders to members.

A call log is visible to whoever can see its member.
"""

from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload

from app.core.dependencies.auth import get_current_user
from app.core.enums import CallOutcome
from app.core.exceptions import MemberNotFoundError, NotFoundError
from app.core.logging import audit_logger, get_logger
from app.core.scope import RoleScope
from app.db.base import utcnow
from app.db.session import get_db
from app.models.call_log import CallLog
from app.models.member import Member
from app.models.user import User
from app.schemas.call_log import (
    CallLogCreate,
    CallLogListResponse,
    CallLogResponse,
    CallLogUpdate,
)
from app.schemas.common import ErrorResponse
from app.services.aggregates import day_start, paginate

logger = get_logger(__name__)


router = APIRouter(
    prefix="/call-logs",
    tags=["Call Logs"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Member outside your scope"},
        404: {"model": ErrorResponse, "description": "Call log not found"},
    },
)


def get_scoped_call_log(db: Session, scope: RoleScope, call_log_id: UUID) -> CallLog:
    call_log = db.get(CallLog, call_log_id)
    if call_log is None:
        raise NotFoundError("Call log", str(call_log_id))
    scope.ensure_member(call_log.member)
    return call_log


@router.get("/", response_model=CallLogListResponse, summary="List Call Logs")
def list_call_logs(
    member_id: Optional[UUID] = Query(None),
    caller_id: Optional[UUID] = Query(None),
    outcome: Optional[CallOutcome] = Query(None),
    area_id: Optional[UUID] = Query(None),
    leader_id: Optional[UUID] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """List call logs, most recent call first. Dates are inclusive."""
    query = RoleScope(db, current_user).filter_call_logs(db.query(CallLog))

    if member_id:
        query = query.filter(CallLog.member_id == member_id)
    if caller_id:
        query = query.filter(CallLog.caller_id == caller_id)
    if outcome:
        query = query.filter(CallLog.outcome == outcome.value)
    if area_id or leader_id:
        query = query.join(Member, CallLog.member_id == Member.id)
        if area_id:
            query = query.filter(Member.area_id == area_id)
        if leader_id:
            query = query.filter(Member.leader_id == leader_id)
    if start_date:
        query = query.filter(CallLog.call_date >= day_start(start_date))
    if end_date:
        query = query.filter(CallLog.call_date < day_start(end_date + timedelta(days=1)))

    query = query.options(joinedload(CallLog.member), joinedload(CallLog.caller)).order_by(
        CallLog.call_date.desc()
    )
    call_logs, total, pages = paginate(query, page, limit)

    return {"call_logs": call_logs, "total": total, "page": page, "total_pages": pages}


@router.post(
    "/",
    response_model=CallLogResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log a Call",
)
def create_call_log(
    payload: CallLogCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CallLog:
    """Record a call made by the current user."""
    member = db.get(Member, payload.member_id)
    if member is None:
        raise MemberNotFoundError(str(payload.member_id))
    RoleScope(db, current_user).ensure_member(member)

    data = payload.model_dump()
    data["outcome"] = payload.outcome.value
    data["contact_method"] = payload.contact_method.value
    data["call_date"] = payload.call_date or utcnow()

    call_log = CallLog(**data, caller_id=current_user.id)
    db.add(call_log)
    db.commit()
    db.refresh(call_log)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="create",
        resource="call_log",
        resource_id=str(call_log.id),
        member_id=str(member.id),
        outcome=call_log.outcome,
    )
    return call_log


@router.get("/{call_log_id}", response_model=CallLogResponse, summary="Get Call Log")
def get_call_log(
    call_log_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CallLog:
    return get_scoped_call_log(db, RoleScope(db, current_user), call_log_id)


@router.put("/{call_log_id}", response_model=CallLogResponse, summary="Update Call Log")
def update_call_log(
    call_log_id: UUID,
    payload: CallLogUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CallLog:
    call_log = get_scoped_call_log(db, RoleScope(db, current_user), call_log_id)
    changes = payload.model_dump(exclude_unset=True)

    for field, value in changes.items():
        if value is None and field in ("outcome", "call_date", "contact_method", "is_completed"):
            continue
        setattr(call_log, field, value.value if hasattr(value, "value") else value)

    db.commit()
    db.refresh(call_log)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="update",
        resource="call_log",
        resource_id=str(call_log.id),
        fields=sorted(changes),
    )
    return call_log


@router.delete("/{call_log_id}", summary="Delete Call Log")
def delete_call_log(
    call_log_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    call_log = get_scoped_call_log(db, RoleScope(db, current_user), call_log_id)
    db.delete(call_log)
    db.commit()

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="delete",
        resource="call_log",
        resource_id=str(call_log_id),
    )
    return {"message": "Call log deleted successfully"}
