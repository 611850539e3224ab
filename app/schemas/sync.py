"""
Sync Schemas
============
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.core.enums import SyncDirection


class SyncRequest(BaseModel):
    direction: SyncDirection = SyncDirection.BOTH
    force: bool = False


class SyncLogResponse(BaseModel):
    id: UUID
    entity_type: str
    entity_id: Optional[UUID] = None
    action: str
    sync_direction: str
    sync_status: str
    data_snapshot: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    user_id: Optional[UUID] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SyncLogListResponse(BaseModel):
    logs: List[SyncLogResponse]
    total: int
    page: int
    total_pages: int
