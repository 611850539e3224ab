"""
User Model
==========

Users are the leaders of the church who log in to the system: from the
Bishop down to Bacenta leaders and data clerks.

Security Features:
- Argon2 password hashes only, never plain passwords
- Token version for JWT invalidation (logout revokes every token)
- Enum-based role enforcement
- Soft disable via is_active flag

Database Indexes:
- Primary key: id (UUID)
- Unique index: email
- Index: role, area_id
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.db.base import Base, TimestampMixin
from app.models.role_enum import Role

if TYPE_CHECKING:
    from app.models.area import Area
    from app.models.member import Member


def default_user_settings() -> Dict[str, Any]:
    return {"notifications": True, "darkMode": False, "language": "fr"}


class User(TimestampMixin, Base):
    """
    User entity representing authenticated church leaders.

    Attributes:
        id: UUID primary key
        email: Unique login email
        hashed_password: Argon2 hashed password
        role: One of the six church roles
        area_id: Area the user belongs to (optional for Bishop/Data_Clerk)
        settings: Per-user UI preferences
        token_version: JWT version for invalidation
    """

    __tablename__ = "users"

    def __init__(self, **kwargs):
        """Initialize User with Python-level defaults."""
        if "role" not in kwargs:
            kwargs["role"] = Role.BACENTA_LEADER.value
        if "is_active" not in kwargs:
            kwargs["is_active"] = True
        if "token_version" not in kwargs:
            kwargs["token_version"] = 1
        if "settings" not in kwargs:
            kwargs["settings"] = default_user_settings()
        super().__init__(**kwargs)

    # ==========================
    # Primary Key
    # ==========================
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        index=True,
    )

    # ==========================
    # Authentication
    # ==========================
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # ==========================
    # Profile
    # ==========================
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    settings: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=default_user_settings,
    )

    # ==========================
    # Authorization
    # ==========================
    role: Mapped[Role] = mapped_column(
        String(50),
        nullable=False,
        default=Role.BACENTA_LEADER.value,
    )

    # users.area_id and areas.overseer_id/leader_id reference each other
    area_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey(
            "areas.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_users_area_id",
        ),
        nullable=True,
    )

    # ==========================
    # Account Status
    # ==========================
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # JWT Version Control
    token_version: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
    )

    # ==========================
    # Relationships
    # ==========================
    area: Mapped[Optional["Area"]] = relationship(
        "Area",
        foreign_keys=[area_id],
        back_populates="users",
    )

    led_members: Mapped[List["Member"]] = relationship(
        "Member",
        foreign_keys="Member.leader_id",
        back_populates="leader",
    )

    __table_args__ = (
        Index("ix_users_role", "role"),
        Index("ix_users_area_id", "area_id"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def invalidate_tokens(self) -> None:
        """Invalidate all tokens by incrementing version."""
        self.token_version += 1
