"""
Model Package Initialization
============================

Ensures models are properly registered when imported by the application.

All SQLAlchemy ORM models are exported from this module.

Usage:
    from app.models import User, Member, Role
"""

from .role_enum import Role
from .user import User
from .region import Region
from .area import Area
from .member import Member
from .attendance import Attendance
from .call_log import CallLog
from .bacenta import BacentaMeeting, BacentaAttendance, BacentaOffering
from .ministry import Ministry, MinistryAttendance, MinistryHeadcount
from .notification import Notification
from .sync_log import SyncLog

__all__ = [
    "Role",
    "User",
    "Region",
    "Area",
    "Member",
    "Attendance",
    "CallLog",
    "BacentaMeeting",
    "BacentaAttendance",
    "BacentaOffering",
    "Ministry",
    "MinistryAttendance",
    "MinistryHeadcount",
    "Notification",
    "SyncLog",
]
