"""
Bacenta Models
==============

A Bacenta is a small home group run by a Bacenta leader. This module
holds the meeting itself, the per-member attendance of a meeting and
the offerings collected during it.
"""

import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.core.enums import MeetingType, OfferingType
from app.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.member import Member
    from app.models.user import User


# ==========================
# Meeting
# ==========================

class BacentaMeeting(TimestampMixin, Base):
    """
    A single Bacenta meeting.

    `offering_amount` and `total_members_present` are denormalised
    totals, recomputed whenever offerings or attendance are recorded.
    """

    __tablename__ = "bacenta_meetings"

    def __init__(self, **kwargs):
        if "meeting_type" not in kwargs:
            kwargs["meeting_type"] = MeetingType.WEEKLY_SHARING.value
        if "offering_amount" not in kwargs:
            kwargs["offering_amount"] = Decimal("0")
        if "total_members_present" not in kwargs:
            kwargs["total_members_present"] = 0
        if "is_verified" not in kwargs:
            kwargs["is_verified"] = False
        super().__init__(**kwargs)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    leader_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    meeting_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    meeting_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    meeting_type: Mapped[MeetingType] = mapped_column(
        String(30),
        default=MeetingType.WEEKLY_SHARING.value,
        nullable=False,
    )

    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    host: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    expected_participants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    agenda: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    family_photo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    meeting_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minutes

    # Totals
    offering_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )
    total_members_present: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # ==========================
    # Verification
    # ==========================
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verified_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    verification_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ==========================
    # Relationships
    # ==========================
    leader: Mapped["User"] = relationship("User", foreign_keys=[leader_id])
    verifier: Mapped[Optional["User"]] = relationship("User", foreign_keys=[verified_by])

    attendances: Mapped[List["BacentaAttendance"]] = relationship(
        "BacentaAttendance",
        back_populates="meeting",
        cascade="all, delete-orphan",
    )
    offerings: Mapped[List["BacentaOffering"]] = relationship(
        "BacentaOffering",
        back_populates="meeting",
        cascade="all, delete-orphan",
    )


# ==========================
# Attendance
# ==========================

class BacentaAttendance(TimestampMixin, Base):
    __tablename__ = "bacenta_attendances"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    bacenta_meeting_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("bacenta_meetings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    member_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
    )
    present: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    arrival_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    offering_contribution: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    special_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    marked_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    meeting: Mapped["BacentaMeeting"] = relationship("BacentaMeeting", back_populates="attendances")
    member: Mapped["Member"] = relationship("Member")

    __table_args__ = (
        UniqueConstraint("bacenta_meeting_id", "member_id", name="uq_bacenta_attendance_meeting_member"),
    )


# ==========================
# Offering
# ==========================

class BacentaOffering(TimestampMixin, Base):
    __tablename__ = "bacenta_offerings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    bacenta_meeting_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("bacenta_meetings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    offering_type: Mapped[OfferingType] = mapped_column(
        String(20),
        default=OfferingType.OFFERING.value,
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="XAF", nullable=False)
    collected_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    verified_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    verification_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    meeting: Mapped["BacentaMeeting"] = relationship("BacentaMeeting", back_populates="offerings")
