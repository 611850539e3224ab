"""
Attendance Model
================

One row per member per Sunday service. Re-marking the same Sunday
updates the existing row.
"""

import uuid
from datetime import date
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Date, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.member import Member
    from app.models.user import User


class Attendance(TimestampMixin, Base):
    __tablename__ = "attendances"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    member_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sunday_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    present: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    marked_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    service_type: Mapped[str] = mapped_column(String(50), default="Experience", nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    member: Mapped["Member"] = relationship("Member", back_populates="attendances")
    marked_by: Mapped[Optional["User"]] = relationship("User", foreign_keys=[marked_by_user_id])

    __table_args__ = (
        UniqueConstraint("member_id", "sunday_date", name="uq_attendance_member_sunday"),
    )
