"""
Report Routes
=============

Attendance, Bacenta, call-log and growth reports, plus data exports.
Every report is limited to the caller's scope.
"""

from datetime import date
from io import BytesIO
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.core.dependencies.auth import get_current_user
from app.core.dependencies.rbac import require_role
from app.core.logging import audit_logger
from app.core.scope import RoleScope
from app.db.session import get_db
from app.models.role_enum import Role
from app.models.user import User
from app.schemas.common import ErrorResponse
from app.services.report_service import (
    area_attendance_report,
    attendance_report,
    bacenta_report,
    call_log_report,
    export_rows,
    member_growth_report,
    rows_to_csv,
)

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)


@router.get("/attendance", summary="Attendance Report")
def get_attendance_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    area_id: Optional[UUID] = Query(None),
    leader_id: Optional[UUID] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return attendance_report(
        db,
        RoleScope(db, current_user),
        start_date=start_date,
        end_date=end_date,
        area_id=area_id,
        leader_id=leader_id,
    )


@router.get("/bacenta", summary="Bacenta Report")
def get_bacenta_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    leader_id: Optional[UUID] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return bacenta_report(
        db,
        RoleScope(db, current_user),
        start_date=start_date,
        end_date=end_date,
        leader_id=leader_id,
    )


@router.get("/call-logs", summary="Call Log Report")
def get_call_log_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return call_log_report(db, RoleScope(db, current_user), start_date=start_date, end_date=end_date)


@router.get("/member-growth", summary="Member Growth")
def get_member_growth(
    period: Literal["1month", "3months", "6months", "1year"] = Query("3months"),
    group_by: Literal["global", "region"] = Query("global"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return member_growth_report(db, RoleScope(db, current_user), period=period, group_by=group_by)


@router.get(
    "/governor/attendance",
    summary="Attendance Per Area",
    responses={403: {"model": ErrorResponse, "description": "Bishop or Governor only"}},
)
def get_area_attendance(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(require_role(Role.BISHOP, Role.GOVERNOR)),
    db: Session = Depends(get_db),
) -> dict:
    return area_attendance_report(db, RoleScope(db, current_user), start_date=start_date, end_date=end_date)


@router.get(
    "/export",
    summary="Export Data",
    responses={400: {"model": ErrorResponse, "description": "Unsupported export type"}},
)
def export_data(
    export_type: str = Query(..., alias="type", description="members, attendance or bacenta_meetings"),
    export_format: Literal["json", "csv"] = Query("json", alias="format"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Export scoped data as JSON or as a CSV attachment.

    Returns:
        JSON `{type, count, data}` or a `text/csv` download
    """
    rows = export_rows(db, RoleScope(db, current_user), export_type, start_date, end_date)

    audit_logger.log_action(
        user_id=str(current_user.id),
        action="export",
        resource=export_type,
        format=export_format,
        count=len(rows),
    )

    if export_format == "csv":
        filename = f"export-{export_type}-{date.today().isoformat()}.csv"
        return StreamingResponse(
            BytesIO(rows_to_csv(rows).encode("utf-8")),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    return {"type": export_type, "count": len(rows), "data": rows}
