"""
Enumeration Module
==================

Defines enumerations used across the application.

All enums are `str` based so they can be stored in plain string
columns and compared directly with the stored values.
"""

from enum import Enum


class Gender(str, Enum):
    MALE = "M"
    FEMALE = "F"


class MemberState(str, Enum):
    """Spiritual state of a member as tracked by their leader."""

    SHEEP = "Sheep"
    GOAT = "Goat"
    DEER = "Deer"


class CallOutcome(str, Enum):
    CONTACTED = "Contacted"
    NO_ANSWER = "No_Answer"
    CALLBACK_REQUESTED = "Callback_Requested"
    WRONG_NUMBER = "Wrong_Number"
    OTHER = "Other"


class ContactMethod(str, Enum):
    PHONE = "Phone"
    WHATSAPP = "WhatsApp"
    SMS = "SMS"
    IN_PERSON = "In_Person"


class MeetingType(str, Enum):
    """Kinds of Bacenta meetings."""

    WEEKLY_SHARING = "Weekly_Sharing"
    PRAYER_MEETING = "Prayer_Meeting"
    BIBLE_STUDY = "Bible_Study"
    EVANGELISM = "Evangelism"
    OTHER = "Other"


# Short codes used by the mobile client
MEETING_TYPE_ALIASES = {
    "weekly": MeetingType.WEEKLY_SHARING,
    "midweek": MeetingType.PRAYER_MEETING,
    "special": MeetingType.OTHER,
}


class OfferingType(str, Enum):
    TITHE = "Tithe"
    OFFERING = "Offering"
    SEED = "Seed"
    PROJECT = "Project"
    THANKSGIVING = "Thanksgiving"
    OTHER = "Other"


class SyncStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class SyncDirection(str, Enum):
    TO_SHEETS = "to_sheets"
    FROM_SHEETS = "from_sheets"
    BOTH = "both"


class NotificationType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"
    ATTENDANCE = "attendance"
    CALL = "call"
    MEETING = "meeting"
