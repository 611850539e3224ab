"""
Role Enumeration Module
=======================

Defines all valid roles in the church hierarchy.

Security Purpose:
- Prevents arbitrary role injection
- Prevents frontend role manipulation
- Enforces strict backend validation
"""

from enum import Enum


class Role(str, Enum):
    """
    System-wide allowed roles, from the top of the hierarchy down.
    """

    BISHOP = "Bishop"
    ASSISTING_OVERSEER = "Assisting_Overseer"
    GOVERNOR = "Governor"
    AREA_PASTOR = "Area_Pastor"
    DATA_CLERK = "Data_Clerk"
    BACENTA_LEADER = "Bacenta_Leader"
