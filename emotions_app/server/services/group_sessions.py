"""
Group Session Service.

Scheduling of support group sessions, live session start/end, attendance
tracking and the group/member analytics built on attendance rows.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from emotions_app.core.database.base import utc_now
from emotions_app.core.database.entities.group_sessions import GroupSession, SessionAttendance
from emotions_app.core.database.entities.support_groups import SupportGroup
from emotions_app.core.database.repositories.bundle import RepositoryBundle
from emotions_app.core.exceptions import NotFoundError, PermissionDeniedError
from emotions_app.core.logging_config import get_logger
from emotions_app.core.models.domain.enums import AttendanceStatus, GroupSessionStatus, MemberStatus
from emotions_app.core.models.domain.identity import CurrentUser
from emotions_app.core.models.domain.transitions import GROUP_SESSION_TRANSITIONS, ensure_transition
from emotions_app.core.models.io.support_groups import (
    AttendanceRead,
    GroupAnalytics,
    GroupSessionCreate,
    GroupSessionRead,
    GroupSessionUpdate,
    JoinEligibility,
    MemberAnalytics,
    RecentGroupActivity,
    ResetSessionDataResult,
)
from emotions_app.core.monitoring import log_domain_event

from .meeting_rooms import MeetingRoomClient, session_room_name
from .notifications import NotificationService
from .support_groups import SupportGroupService

logger = get_logger(__name__)

COUNTED_SESSION_STATUSES = (GroupSessionStatus.completed.value, GroupSessionStatus.in_progress.value)


def _percent(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


class GroupSessionService:
    def __init__(
        self,
        repos: RepositoryBundle,
        groups: SupportGroupService,
        rooms: MeetingRoomClient,
        notifications: NotificationService,
        absent_cutoff_hours: int = 2,
        late_after_minutes: int = 10,
        room_expiry_seconds: int = 24 * 60 * 60,
    ) -> None:
        self.repos = repos
        self.groups = groups
        self.rooms = rooms
        self.notifications = notifications
        self.absent_cutoff = dt.timedelta(hours=absent_cutoff_hours)
        self.late_after = dt.timedelta(minutes=late_after_minutes)
        self.room_expiry_seconds = room_expiry_seconds

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load(self, session_id: str) -> GroupSession:
        session = await self.repos.group_sessions.get_by_id(session_id)
        if session is None:
            raise NotFoundError.for_entity("Group session", session_id)
        return session

    async def _load_owned(self, user: CurrentUser, session_id: str) -> tuple[GroupSession, SupportGroup]:
        session = await self._load(session_id)
        group = await self.groups.load_owned_group(user, session.group_id)
        return session, group

    async def _read(self, session: GroupSession, active_members: Optional[int] = None) -> GroupSessionRead:
        if active_members is None:
            active_members = await self.repos.members.count_for_group(session.group_id, MemberStatus.active.value)
        attended = await self.repos.attendance.count_attended(session.id, MemberStatus.active.value)
        read = GroupSessionRead.model_validate(session)
        read.attendance_count = attended
        read.total_members = active_members
        read.attendance_rate = _percent(attended, active_members)
        return read

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    async def create_session(self, user: CurrentUser, group_id: str, data: GroupSessionCreate) -> GroupSessionRead:
        group = await self.groups.load_owned_group(user, group_id)
        session = await self.repos.group_sessions.create(
            GroupSession(group_id=group.id, created_by=user.id, **data.model_dump())
        )
        return await self._read(session)

    async def update_session(self, user: CurrentUser, session_id: str, patch: GroupSessionUpdate) -> GroupSessionRead:
        session, _ = await self._load_owned(user, session_id)
        for key, value in patch.model_dump(exclude_unset=True).items():
            setattr(session, key, value)
        session = await self.repos.group_sessions.update(session)
        return await self._read(session)

    async def list_sessions(self, group_id: str) -> List[GroupSessionRead]:
        group = await self.groups.load_group(group_id)
        active = await self.repos.members.count_for_group(group.id, MemberStatus.active.value)
        return [await self._read(s, active) for s in await self.repos.group_sessions.list_for_group(group.id)]

    async def todays_sessions(self, group_id: str, today: Optional[dt.date] = None) -> List[GroupSessionRead]:
        group = await self.groups.load_group(group_id)
        active = await self.repos.members.count_for_group(group.id, MemberStatus.active.value)
        rows = await self.repos.group_sessions.for_group_on(group.id, today or dt.date.today())
        return [await self._read(s, active) for s in rows]

    async def get_session(self, session_id: str) -> GroupSessionRead:
        return await self._read(await self._load(session_id))

    # ------------------------------------------------------------------
    # Live session
    # ------------------------------------------------------------------

    async def start_session(self, user: CurrentUser, session_id: str) -> GroupSessionRead:
        session, group = await self._load_owned(user, session_id)
        ensure_transition(
            GROUP_SESSION_TRANSITIONS, session.status, GroupSessionStatus.in_progress.value, "group session"
        )

        room = await self.rooms.create_room(
            session_room_name("group", session.id), expiry_seconds=self.room_expiry_seconds
        )
        session.meeting_link = room.url or group.room_url
        session.status = GroupSessionStatus.in_progress.value
        session = await self.repos.group_sessions.update(session)
        log_domain_event("group_session.started", session_id=session.id, group_id=group.id)

        members = await self.repos.members.list_for_group(group.id, MemberStatus.active.value)
        await self.notifications.notify_group_session_started([m.user_id for m in members], group, session)
        return await self._read(session, len(members))

    async def _finish(self, user: CurrentUser, session_id: str, target: GroupSessionStatus) -> GroupSessionRead:
        session, _ = await self._load_owned(user, session_id)
        ensure_transition(GROUP_SESSION_TRANSITIONS, session.status, target.value, "group session")
        session.status = target.value
        session = await self.repos.group_sessions.update(session)
        log_domain_event(f"group_session.{target.value}", session_id=session.id)
        return await self._read(session)

    async def end_session(self, user: CurrentUser, session_id: str) -> GroupSessionRead:
        return await self._finish(user, session_id, GroupSessionStatus.completed)

    async def cancel_session(self, user: CurrentUser, session_id: str) -> GroupSessionRead:
        return await self._finish(user, session_id, GroupSessionStatus.cancelled)

    async def can_user_join_session(self, session: GroupSession, user_id: str) -> JoinEligibility:
        group = await self.groups.load_group(session.group_id)
        if group.mentor_id != user_id:
            membership = await self.repos.members.get_membership(group.id, user_id)
            if membership is None or membership.status != MemberStatus.active.value:
                return JoinEligibility(can_join=False, reason="You are not an active member of this group")
        if session.status != GroupSessionStatus.in_progress.value:
            return JoinEligibility(can_join=False, reason="Session has not started yet")
        link = session.meeting_link or group.room_url
        if not link:
            return JoinEligibility(can_join=False, reason="Session has no meeting link")
        return JoinEligibility(can_join=True, meeting_url=link)

    async def join_eligibility(self, user: CurrentUser, session_id: str) -> JoinEligibility:
        return await self.can_user_join_session(await self._load(session_id), user.id)

    async def track_session_join(
        self, user: CurrentUser, session_id: str, now: Optional[dt.datetime] = None
    ) -> Optional[AttendanceRead]:
        """Record the caller as present (or late) when they open the session room.

        The group mentor hosts the session and gets no attendance row.
        """
        session = await self._load(session_id)
        eligibility = await self.can_user_join_session(session, user.id)
        if not eligibility.can_join:
            raise PermissionDeniedError(eligibility.reason or "Cannot join this session")
        group = await self.groups.load_group(session.group_id)
        if group.mentor_id == user.id:
            return None

        now = now or utc_now()
        status = AttendanceStatus.late if now - session.starts_at() > self.late_after else AttendanceStatus.present
        record = await self.repos.attendance.get_record(session.id, user.id)
        if record is None:
            record = SessionAttendance(session_id=session.id, group_id=session.group_id, user_id=user.id)
        if record.joined_at is None or not record.attended:
            record.status = status.value
            record.joined_at = now
        record = await self.repos.attendance.update(record)

        membership = await self.repos.members.get_membership(session.group_id, user.id)
        if membership is not None:
            membership.last_activity = now
            await self.repos.members.update(membership)
        return AttendanceRead.model_validate(record)

    # ------------------------------------------------------------------
    # Attendance
    # ------------------------------------------------------------------

    async def _upsert_attendance(
        self,
        session: GroupSession,
        user_id: str,
        status: AttendanceStatus,
        marked_by: str,
        notes: Optional[str] = None,
    ) -> SessionAttendance:
        record = await self.repos.attendance.get_record(session.id, user_id)
        if record is None:
            record = SessionAttendance(session_id=session.id, group_id=session.group_id, user_id=user_id)
        record.status = status.value
        record.duration_minutes = session.duration_minutes() if status.attended else 0
        record.marked_by = marked_by
        if notes is not None:
            record.notes = notes
        return await self.repos.attendance.update(record)

    async def mark_attendance(
        self,
        user: CurrentUser,
        session_id: str,
        member_user_id: str,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> AttendanceRead:
        session, group = await self._load_owned(user, session_id)
        if await self.repos.members.get_membership(group.id, member_user_id) is None:
            raise NotFoundError(f"User {member_user_id} is not a member of group {group.id}")
        record = await self._upsert_attendance(session, member_user_id, status, user.id, notes)
        return AttendanceRead.model_validate(record)

    async def auto_mark_absent(self, user: CurrentUser, session_id: str, now: Optional[dt.datetime] = None) -> int:
        """Mark active members without attendance as absent once the cutoff has passed.

        Returns:
            Number of members marked absent (0 before the cutoff).
        """
        session, group = await self._load_owned(user, session_id)
        now = now or utc_now()
        if now < session.starts_at() + self.absent_cutoff:
            return 0

        members = await self.repos.members.list_for_group(group.id, MemberStatus.active.value)
        recorded = {row.user_id for row in await self.repos.attendance.list_for_session(session.id)}
        missing = [m.user_id for m in members if m.user_id not in recorded]
        if missing:
            await self.repos.attendance.create_many(
                [
                    SessionAttendance(
                        session_id=session.id,
                        group_id=group.id,
                        user_id=member_id,
                        status=AttendanceStatus.absent.value,
                        duration_minutes=0,
                        marked_by=user.id,
                    )
                    for member_id in missing
                ]
            )
        logger.info(f"Auto-marked {len(missing)} members absent for group session {session.id}")
        return len(missing)

    async def get_session_attendance(self, user: CurrentUser, session_id: str) -> List[AttendanceRead]:
        session = await self._load(session_id)
        group = await self.groups.load_group(session.group_id)
        if group.mentor_id != user.id and not user.is_admin:
            rows = [r for r in await self.repos.attendance.list_for_session(session.id) if r.user_id == user.id]
        else:
            rows = await self.repos.attendance.list_for_session(session.id)
        return [AttendanceRead.model_validate(r) for r in rows]

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    async def group_analytics(
        self, user: CurrentUser, group_id: str, now: Optional[dt.datetime] = None
    ) -> GroupAnalytics:
        group = await self.groups.load_owned_group(user, group_id)
        now = now or utc_now()
        members = await self.repos.members.list_for_group(group.id)
        active_members = [m for m in members if m.status == MemberStatus.active.value]
        sessions = await self.repos.group_sessions.list_for_group(group.id)
        counted = {s.id for s in sessions if s.status in COUNTED_SESSION_STATUSES}
        attended_rows = [
            r for r in await self.repos.attendance.list_for_group(group.id) if r.attended and r.session_id in counted
        ]

        active_ids = {m.user_id for m in active_members}
        attended_rows = [r for r in attended_rows if r.user_id in active_ids]
        engaged = {r.user_id for r in attended_rows}
        week_ago = now - dt.timedelta(days=7)
        return GroupAnalytics(
            group_id=group.id,
            total_members=len(members),
            active_members=len(active_members),
            total_sessions=len(sessions),
            average_attendance=round(len(attended_rows) / len(counted), 1) if counted else 0.0,
            attendance_rate=_percent(len(attended_rows), len(counted) * len(active_members)),
            member_engagement=_percent(len(engaged), len(active_members)),
            recent_activity=RecentGroupActivity(
                new_members=sum(1 for m in members if m.joined_at >= week_ago),
                upcoming_sessions=await self.repos.group_sessions.count_upcoming(group.id, now.date()),
                completed_sessions=sum(1 for s in sessions if s.status == GroupSessionStatus.completed.value),
            ),
        )

    async def member_analytics(
        self, user: CurrentUser, group_id: str, member_user_id: str, now: Optional[dt.datetime] = None
    ) -> MemberAnalytics:
        group = await self.groups.load_group(group_id)
        if user.id != member_user_id and group.mentor_id != user.id and not user.is_admin:
            raise PermissionDeniedError("You can only view your own analytics")
        membership = await self.repos.members.get_membership(group.id, member_user_id)
        if membership is None:
            raise NotFoundError(f"User {member_user_id} is not a member of group {group_id}")

        now = now or utc_now()
        counted = {
            s.id for s in await self.repos.group_sessions.list_for_group(group.id, statuses=COUNTED_SESSION_STATUSES)
        }
        rows = [
            r
            for r in await self.repos.attendance.list_for_group(group.id, user_id=member_user_id)
            if r.session_id in counted
        ]
        attended = [r for r in rows if r.attended]
        rate = _percent(len(attended), len(counted))
        last_attendance = max((r.joined_at or r.created_at for r in attended), default=None)

        engagement = rate
        if membership.last_activity and now - membership.last_activity <= dt.timedelta(days=7):
            engagement = min(100.0, engagement + 10)

        return MemberAnalytics(
            group_id=group.id,
            user_id=member_user_id,
            attendance_rate=rate,
            sessions_attended=len(attended),
            total_sessions=len(counted),
            last_attendance=last_attendance,
            engagement_score=round(engagement, 1),
        )

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def reset_all_session_data(self) -> ResetSessionDataResult:
        attendance_deleted = await self.repos.attendance.delete_where()
        sessions_deleted = await self.repos.group_sessions.delete_where()
        synced = await self.groups.sync_member_counts()
        logger.warning(
            f"Reset all group session data: attendance={attendance_deleted}, sessions={sessions_deleted}"
        )
        return ResetSessionDataResult(
            attendance_deleted=attendance_deleted,
            sessions_deleted=sessions_deleted,
            groups_synced=synced.updated,
        )
