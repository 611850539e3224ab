"""
Member Model
============

A member of the congregation, followed up by one leader.

Members are never hard-deleted through the API: deletion sets
`is_active` to False so attendance and call history stay intact.
"""

import uuid
from datetime import date
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.core.enums import Gender, MemberState
from app.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.area import Area
    from app.models.attendance import Attendance
    from app.models.call_log import CallLog
    from app.models.ministry import Ministry
    from app.models.user import User


class Member(TimestampMixin, Base):
    __tablename__ = "members"

    def __init__(self, **kwargs):
        if "state" not in kwargs:
            kwargs["state"] = MemberState.SHEEP.value
        if "is_registered" not in kwargs:
            kwargs["is_registered"] = False
        if "is_active" not in kwargs:
            kwargs["is_active"] = True
        super().__init__(**kwargs)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # ==========================
    # Identity
    # ==========================
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_primary: Mapped[str] = mapped_column(String(50), nullable=False)
    phone_secondary: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    gender: Mapped[Gender] = mapped_column(String(1), nullable=False)
    profession: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # ==========================
    # Status
    # ==========================
    is_registered: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    state: Mapped[MemberState] = mapped_column(
        String(20),
        default=MemberState.SHEEP.value,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_attendance_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # ==========================
    # Ownership
    # ==========================
    area_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("areas.id"),
        nullable=False,
    )
    leader_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )
    ministry_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("ministries.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ==========================
    # Relationships
    # ==========================
    area: Mapped["Area"] = relationship("Area", back_populates="members")
    leader: Mapped["User"] = relationship(
        "User",
        foreign_keys=[leader_id],
        back_populates="led_members",
    )
    ministry: Mapped[Optional["Ministry"]] = relationship("Ministry", back_populates="members")

    attendances: Mapped[List["Attendance"]] = relationship(
        "Attendance",
        back_populates="member",
        cascade="all, delete-orphan",
    )
    call_logs: Mapped[List["CallLog"]] = relationship(
        "CallLog",
        back_populates="member",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_members_area_id", "area_id"),
        Index("ix_members_leader_id", "leader_id"),
        Index("ix_members_state", "state"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, name={self.full_name})>"
