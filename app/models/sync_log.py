import uuid

from sqlalchemy import JSON, Column, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.core.enums import SyncStatus
from app.db.base import Base, TimestampMixin


class SyncLog(TimestampMixin, Base):
    """Trace of a synchronisation run with the external spreadsheet."""

    __tablename__ = "sync_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    entity_type = Column(String(50), nullable=False)
    entity_id = Column(UUID(as_uuid=True), nullable=True)
    action = Column(String(50), nullable=False)
    sync_direction = Column(String(20), nullable=False)
    sync_status = Column(String(20), default=SyncStatus.PENDING.value, nullable=False, index=True)
    data_snapshot = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)

    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
