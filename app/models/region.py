"""
Region Model
============

A region groups several areas and is overseen by a Governor.
"""

import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.area import Area
    from app.models.user import User


class Region(TimestampMixin, Base):
    __tablename__ = "regions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    governor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    governor: Mapped[Optional["User"]] = relationship("User", foreign_keys=[governor_id])

    areas: Mapped[List["Area"]] = relationship(
        "Area",
        back_populates="region",
        order_by="Area.number",
    )

    def __repr__(self) -> str:
        return f"<Region(id={self.id}, name={self.name})>"
