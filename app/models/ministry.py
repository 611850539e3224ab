"""
Ministry Models
===============

Ministries (choir, ushering, media, ...) with their member attendance
and a per-date headcount.
"""

import uuid
import datetime as dt
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.member import Member
    from app.models.user import User


class Ministry(TimestampMixin, Base):
    __tablename__ = "ministries"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    leader_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    leader: Mapped[Optional["User"]] = relationship("User", foreign_keys=[leader_id])
    members: Mapped[List["Member"]] = relationship("Member", back_populates="ministry")


class MinistryAttendance(TimestampMixin, Base):
    __tablename__ = "ministry_attendances"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    ministry_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("ministries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    member_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    present: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    marked_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    member: Mapped["Member"] = relationship("Member")

    __table_args__ = (
        UniqueConstraint("ministry_id", "member_id", "date", name="uq_ministry_attendance"),
    )


class MinistryHeadcount(TimestampMixin, Base):
    __tablename__ = "ministry_headcounts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    ministry_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("ministries.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    headcount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    marked_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("ministry_id", "date", name="uq_ministry_headcount"),
    )
