"""
Area Model
==========

Areas are the numbered pastoral units (1 to 50) the church is divided
into. Each one may belong to a region and has an overseer and a leader.

Database Indexes:
- Primary key: id (UUID)
- Unique index: number
- Index: region_id
"""

import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.member import Member
    from app.models.region import Region
    from app.models.user import User


class Area(TimestampMixin, Base):
    __tablename__ = "areas"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    region_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("regions.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    overseer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    leader_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ==========================
    # Relationships
    # ==========================
    region: Mapped[Optional["Region"]] = relationship("Region", back_populates="areas")
    overseer: Mapped[Optional["User"]] = relationship("User", foreign_keys=[overseer_id])
    leader: Mapped[Optional["User"]] = relationship("User", foreign_keys=[leader_id])

    users: Mapped[List["User"]] = relationship(
        "User",
        foreign_keys="User.area_id",
        back_populates="area",
    )
    members: Mapped[List["Member"]] = relationship("Member", back_populates="area")

    def __repr__(self) -> str:
        return f"<Area(number={self.number}, name={self.name})>"
