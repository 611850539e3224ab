"""
Call Log Model
==============

Records a follow-up contact between a leader and a member.
"""

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.core.enums import CallOutcome, ContactMethod
from app.db.base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from app.models.member import Member
    from app.models.user import User


class CallLog(TimestampMixin, Base):
    __tablename__ = "call_logs"

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
    caller_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    call_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    outcome: Mapped[CallOutcome] = mapped_column(String(30), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Follow-up
    next_followup_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    followup_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    call_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # seconds
    contact_method: Mapped[ContactMethod] = mapped_column(
        String(20),
        default=ContactMethod.PHONE.value,
        nullable=False,
    )
    is_completed: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    member: Mapped["Member"] = relationship("Member", back_populates="call_logs")
    caller: Mapped["User"] = relationship("User", foreign_keys=[caller_id])
