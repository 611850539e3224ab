"""
Role Scope Utilities Module
===========================

Restricts every query to the part of the church the caller oversees.

Visibility rules:
- Bishop, Data_Clerk: everything
- Assisting_Overseer, Area_Pastor: their own area (nothing if unassigned)
- Governor: all areas of the regions they govern, plus their own area
- Bacenta_Leader: only the members and meetings they lead

Members carry their area directly. Attendance and call logs are scoped
through their member, Bacenta meetings through their leader's area and
users through `User.area_id`.

Security:
- Enforces visibility at the query level
- Logs single-record scope violations
"""

from functools import cached_property
from typing import Optional
from uuid import UUID

from sqlalchemy import false, select
from sqlalchemy.orm import Query, Session

from app.core.exceptions import ScopeViolationError
from app.core.logging import get_logger, security_logger
from app.models.area import Area
from app.models.attendance import Attendance
from app.models.bacenta import BacentaMeeting
from app.models.call_log import CallLog
from app.models.member import Member
from app.models.region import Region
from app.models.role_enum import Role
from app.models.user import User

# Initialize logger
logger = get_logger(__name__)

UNRESTRICTED_ROLES = (Role.BISHOP, Role.DATA_CLERK)
AREA_ROLES = (Role.ASSISTING_OVERSEER, Role.AREA_PASTOR)


class RoleScope:
    """
    Helper class for role-scoped database queries.

    Usage:
        scope = RoleScope(db, current_user)
        members = scope.filter_members(db.query(Member)).all()
        scope.ensure_member(member)
    """

    def __init__(self, db: Session, current_user: User):
        self.db = db
        self.current_user = current_user

    # --------------------------
    # Scope derivation
    # --------------------------

    @property
    def is_unrestricted(self) -> bool:
        return self.current_user.role in UNRESTRICTED_ROLES

    @property
    def is_leader_scoped(self) -> bool:
        """Bacenta leaders see only what they lead."""
        return self.current_user.role == Role.BACENTA_LEADER

    @cached_property
    def area_ids(self) -> Optional[list[UUID]]:
        """
        Areas visible to the caller.

        Returns:
            None when unrestricted, otherwise a (possibly empty) list
        """
        user = self.current_user

        if self.is_unrestricted:
            return None

        if user.role == Role.GOVERNOR:
            governed = (
                self.db.query(Area.id)
                .join(Region, Area.region_id == Region.id)
                .filter(Region.governor_id == user.id)
                .all()
            )
            ids = [row[0] for row in governed]
            if user.area_id and user.area_id not in ids:
                ids.append(user.area_id)
            return ids

        return [user.area_id] if user.area_id else []

    def can_see_area(self, area_id: Optional[UUID]) -> bool:
        if self.area_ids is None:
            return True
        return area_id is not None and area_id in self.area_ids

    # --------------------------
    # Query filters
    # --------------------------

    def member_condition(self):
        """SQL condition on Member matching the caller's scope, or None."""
        if self.is_leader_scoped:
            return Member.leader_id == self.current_user.id
        if self.area_ids is None:
            return None
        if not self.area_ids:
            return false()
        return Member.area_id.in_(self.area_ids)

    def filter_members(self, query: Query) -> Query:
        condition = self.member_condition()
        return query if condition is None else query.filter(condition)

    def _scoped_member_ids(self):
        return select(Member.id).where(self.member_condition()).correlate(None)

    def filter_attendance(self, query: Query) -> Query:
        if self.member_condition() is None:
            return query
        return query.filter(Attendance.member_id.in_(self._scoped_member_ids()))

    def filter_call_logs(self, query: Query) -> Query:
        if self.member_condition() is None:
            return query
        return query.filter(CallLog.member_id.in_(self._scoped_member_ids()))

    def filter_meetings(self, query: Query) -> Query:
        if self.is_leader_scoped:
            return query.filter(BacentaMeeting.leader_id == self.current_user.id)
        if self.area_ids is None:
            return query
        if not self.area_ids:
            return query.filter(false())
        leaders = select(User.id).where(User.area_id.in_(self.area_ids)).correlate(None)
        return query.filter(BacentaMeeting.leader_id.in_(leaders))

    def filter_users(self, query: Query) -> Query:
        if self.area_ids is None:
            return query
        if not self.area_ids:
            return query.filter(User.id == self.current_user.id)
        return query.filter(User.area_id.in_(self.area_ids))

    def filter_areas(self, query: Query) -> Query:
        if self.area_ids is None:
            return query
        if not self.area_ids:
            return query.filter(false())
        return query.filter(Area.id.in_(self.area_ids))

    # --------------------------
    # Single-record checks
    # --------------------------

    def _violation(self, resource: str, resource_id) -> None:
        security_logger.log_scope_violation(
            user_id=str(self.current_user.id),
            role=str(self.current_user.role),
            resource=resource,
            resource_id=str(resource_id),
        )
        raise ScopeViolationError(resource)

    def can_access_member(self, member: Member) -> bool:
        if self.is_leader_scoped:
            return member.leader_id == self.current_user.id
        return self.can_see_area(member.area_id)

    def ensure_member(self, member: Member) -> None:
        """
        Raises:
            ScopeViolationError: If the member is outside the caller's scope
        """
        if not self.can_access_member(member):
            self._violation("member", member.id)

    def ensure_meeting(self, meeting: BacentaMeeting) -> None:
        if self.is_leader_scoped:
            allowed = meeting.leader_id == self.current_user.id
        else:
            leader = meeting.leader
            allowed = self.can_see_area(leader.area_id if leader else None)

        if not allowed:
            self._violation("meeting", meeting.id)

    def ensure_user(self, user: User) -> None:
        if user.id == self.current_user.id or self.area_ids is None:
            return
        if not self.can_see_area(user.area_id):
            self._violation("user", user.id)

    def ensure_area(self, area_id: UUID) -> None:
        if not self.can_see_area(area_id):
            self._violation("area", area_id)

    def ensure_region(self, region_id: Optional[UUID]) -> None:
        """
        Governors may only place areas in a region they govern.

        Raises:
            ScopeViolationError: If a Governor targets another region or none
        """
        if self.current_user.role != Role.GOVERNOR:
            return
        region = self.db.get(Region, region_id) if region_id else None
        if region is None or region.governor_id != self.current_user.id:
            self._violation("region", region_id)
