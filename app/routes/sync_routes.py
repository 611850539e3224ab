"""
Sync Routes Module
==================

Spreadsheet synchronisation, restricted to Bishops and Data Clerks.
"""

from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.dependencies.rbac import require_role
from app.core.enums import SyncStatus
from app.core.logging import audit_logger
from app.db.session import get_db
from app.models.role_enum import Role
from app.models.sync_log import SyncLog
from app.models.user import User
from app.schemas.common import ErrorResponse
from app.schemas.sync import SyncLogListResponse, SyncRequest
from app.services.aggregates import day_start, paginate
from app.services.sync_service import sync_with_sheets

require_sync_role = require_role(Role.BISHOP, Role.DATA_CLERK)


router = APIRouter(
    prefix="/sync",
    tags=["Sync"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Bishop or Data Clerk only"},
    },
)


@router.post("/sheets", summary="Sync With Spreadsheet")
def sync_sheets(
    payload: Optional[SyncRequest] = None,
    current_user: User = Depends(require_sync_role),
    db: Session = Depends(get_db),
) -> dict:
    payload = payload or SyncRequest()
    results = sync_with_sheets(db, payload.direction, payload.force, user_id=current_user.id)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="sync",
        resource="sheets",
        direction=payload.direction.value,
    )
    return {"message": "Synchronisation completed", "results": results}


@router.get("/logs", response_model=SyncLogListResponse, summary="Sync Logs")
def sync_logs(
    sync_status: Optional[SyncStatus] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(require_sync_role),
    db: Session = Depends(get_db),
) -> dict:
    query = db.query(SyncLog)
    if sync_status:
        query = query.filter(SyncLog.sync_status == sync_status.value)
    if start_date:
        query = query.filter(SyncLog.created_at >= day_start(start_date))
    if end_date:
        query = query.filter(SyncLog.created_at < day_start(end_date + timedelta(days=1)))

    logs, total, pages = paginate(query.order_by(SyncLog.created_at.desc()), page, limit)
    return {"logs": logs, "total": total, "page": page, "total_pages": pages}
