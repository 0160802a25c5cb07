"""
Support Group Service.

Group catalogue, membership and waiting list management. The participant
count stored on a group is always recomputed from active membership rows
after a change, never incremented in place.
"""

from __future__ import annotations

from typing import List, Optional

from emotions_app.core.database.base import utc_now
from emotions_app.core.database.entities.support_groups import GroupMember, GroupWaitingListEntry, SupportGroup
from emotions_app.core.database.repositories.bundle import RepositoryBundle
from emotions_app.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from emotions_app.core.logging_config import get_logger
from emotions_app.core.models.domain.enums import MemberStatus, WaitingListStatus
from emotions_app.core.models.domain.identity import CurrentUser
from emotions_app.core.models.io.support_groups import (
    GroupMemberRead,
    GroupMemberUpdate,
    JoinEligibility,
    SupportGroupCreate,
    SupportGroupRead,
    SupportGroupUpdate,
    SyncCountsResult,
    WaitingListEntryRead,
)
from emotions_app.core.monitoring import log_domain_event

from .notifications import NotificationService
from .profiles import display_name

logger = get_logger(__name__)


def to_group_read(
    group: SupportGroup, mentor_name: Optional[str] = None, mentor_specialty: Optional[str] = None
) -> SupportGroupRead:
    data = group.model_dump()
    data["meeting_schedule"] = group.get_schedule_list()
    return SupportGroupRead.model_validate({**data, "mentor_name": mentor_name, "mentor_specialty": mentor_specialty})


class SupportGroupService:
    def __init__(self, repos: RepositoryBundle, notifications: NotificationService) -> None:
        self.repos = repos
        self.notifications = notifications

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def load_group(self, group_id: str) -> SupportGroup:
        group = await self.repos.groups.get_by_id(group_id)
        if group is None:
            raise NotFoundError.for_entity("Support group", group_id)
        return group

    async def load_owned_group(self, user: CurrentUser, group_id: str) -> SupportGroup:
        """Load a group the caller facilitates (admins may act on any group)."""
        group = await self.load_group(group_id)
        if group.mentor_id != user.id and not user.is_admin:
            raise PermissionDeniedError("Only the group's mentor can manage it")
        return group

    async def sync_group_count(self, group: SupportGroup) -> bool:
        """Recompute ``current_participants``; returns True when the stored value changed."""
        active = await self.repos.members.count_for_group(group.id, MemberStatus.active.value)
        if group.current_participants == active:
            return False
        group.current_participants = active
        await self.repos.groups.update(group)
        return True

    async def _with_mentor(self, group: SupportGroup) -> SupportGroupRead:
        mentor = await self.repos.mentors.get_by_user_id(group.mentor_id)
        return to_group_read(
            group,
            mentor_name=mentor.full_name if mentor else None,
            mentor_specialty=mentor.specialty if mentor else None,
        )

    # ------------------------------------------------------------------
    # Catalogue
    # ------------------------------------------------------------------

    async def list_groups(
        self,
        group_type: Optional[str] = None,
        meeting_type: Optional[str] = None,
        mentor_id: Optional[str] = None,
        active_only: bool = True,
        public_only: bool = False,
    ) -> List[SupportGroupRead]:
        groups = await self.repos.groups.search(
            group_type=group_type,
            meeting_type=meeting_type,
            mentor_id=mentor_id,
            active_only=active_only,
            public_only=public_only,
        )
        mentors = await self.repos.mentors.get_many_by_user_ids(list({g.mentor_id for g in groups}))
        return [
            to_group_read(
                group,
                mentor_name=mentors[group.mentor_id].full_name if group.mentor_id in mentors else None,
                mentor_specialty=mentors[group.mentor_id].specialty if group.mentor_id in mentors else None,
            )
            for group in groups
        ]

    async def get_group(self, group_id: str) -> SupportGroupRead:
        return await self._with_mentor(await self.load_group(group_id))

    async def create_group(self, mentor: CurrentUser, data: SupportGroupCreate) -> SupportGroupRead:
        if not (mentor.is_mentor or mentor.is_admin):
            raise PermissionDeniedError("Only mood mentors can create support groups")
        group = SupportGroup(
            name=data.name,
            description=data.description,
            group_type=data.group_type.value,
            meeting_type=data.meeting_type.value,
            max_participants=data.max_participants,
            location=data.location,
            group_rules=data.group_rules,
            is_public=data.is_public,
            mentor_id=mentor.id,
        )
        group.set_schedule_list([slot.model_dump(mode="json") for slot in data.meeting_schedule])
        group = await self.repos.groups.create(group)
        log_domain_event("support_group.created", group_id=group.id, mentor_id=mentor.id)
        return await self._with_mentor(group)

    async def update_group(self, user: CurrentUser, group_id: str, patch: SupportGroupUpdate) -> SupportGroupRead:
        group = await self.load_owned_group(user, group_id)
        changes = patch.model_dump(exclude_unset=True, mode="json")
        schedule = changes.pop("meeting_schedule", None)
        for key, value in changes.items():
            setattr(group, key, value)
        if schedule is not None:
            group.set_schedule_list(schedule)
        group = await self.repos.groups.update(group)
        return await self._with_mentor(group)

    async def delete_group(self, user: CurrentUser, group_id: str) -> None:
        group = await self.load_owned_group(user, group_id)
        await self.repos.attendance.delete_where(group_id=group.id)
        await self.repos.group_sessions.delete_where(group_id=group.id)
        await self.repos.waiting_list.delete_where(group_id=group.id)
        await self.repos.members.delete_where(group_id=group.id)
        await self.repos.groups.delete(group.id)
        log_domain_event("support_group.deleted", group_id=group_id)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    async def can_user_join_group(self, group: SupportGroup, user_id: str) -> JoinEligibility:
        if not group.is_active:
            return JoinEligibility(can_join=False, reason="Group is not active")
        membership = await self.repos.members.get_membership(group.id, user_id)
        if membership is not None and membership.status == MemberStatus.active.value:
            return JoinEligibility(can_join=False, reason="Already a member of this group")
        active = await self.repos.members.count_for_group(group.id, MemberStatus.active.value)
        if active >= group.max_participants:
            return JoinEligibility(can_join=False, reason="Group is full")
        return JoinEligibility(can_join=True)

    async def join_eligibility(self, user: CurrentUser, group_id: str) -> JoinEligibility:
        return await self.can_user_join_group(await self.load_group(group_id), user.id)

    async def _add_member(self, group: SupportGroup, user_id: str) -> GroupMember:
        membership = await self.repos.members.get_membership(group.id, user_id)
        if membership is None:
            membership = await self.repos.members.create(GroupMember(group_id=group.id, user_id=user_id))
        else:
            membership.status = MemberStatus.active.value
            membership.joined_at = utc_now()
            membership = await self.repos.members.update(membership)
        await self.sync_group_count(group)
        return membership

    async def join_group(self, user: CurrentUser, group_id: str) -> GroupMemberRead:
        group = await self.load_group(group_id)
        eligibility = await self.can_user_join_group(group, user.id)
        if not eligibility.can_join:
            raise ConflictError(eligibility.reason or "Cannot join this group")
        membership = await self._add_member(group, user.id)
        log_domain_event("support_group.joined", group_id=group.id, user_id=user.id)
        await self.notifications.notify_group_membership(
            group.mentor_id, await display_name(self.repos, user.id), group, joined=True
        )
        return GroupMemberRead.model_validate(membership)

    async def leave_group(self, user: CurrentUser, group_id: str) -> None:
        group = await self.load_group(group_id)
        membership = await self.repos.members.get_membership(group.id, user.id)
        if membership is None:
            raise NotFoundError(f"You are not a member of group {group_id}")
        await self.repos.members.delete(membership.id)
        await self.sync_group_count(group)
        log_domain_event("support_group.left", group_id=group.id, user_id=user.id)
        await self.notifications.notify_group_membership(
            group.mentor_id, await display_name(self.repos, user.id), group, joined=False
        )

    async def _ensure_can_view_members(self, user: CurrentUser, group: SupportGroup) -> None:
        if user.is_admin or group.mentor_id == user.id:
            return
        membership = await self.repos.members.get_membership(group.id, user.id)
        if membership is None or membership.status != MemberStatus.active.value:
            raise PermissionDeniedError("Only members can see the member list")

    async def list_members(self, user: CurrentUser, group_id: str) -> List[GroupMemberRead]:
        group = await self.load_group(group_id)
        await self._ensure_can_view_members(user, group)
        members = await self.repos.members.list_for_group(group.id)
        patients = await self.repos.patients.get_many_by_user_ids([m.user_id for m in members])
        counted_sessions = {
            s.id
            for s in await self.repos.group_sessions.list_for_group(group.id, statuses=("completed", "in_progress"))
        }
        attendance = await self.repos.attendance.list_for_group(group.id)

        result = []
        for member in members:
            attended = sum(
                1
                for row in attendance
                if row.user_id == member.user_id and row.attended and row.session_id in counted_sessions
            )
            rate = round(attended / len(counted_sessions) * 100, 1) if counted_sessions else 0.0
            read = GroupMemberRead.model_validate(member)
            read.full_name = patients[member.user_id].full_name if member.user_id in patients else None
            read.attendance_rate = rate
            result.append(read)
        return result

    async def update_member(
        self, user: CurrentUser, group_id: str, member_user_id: str, patch: GroupMemberUpdate
    ) -> GroupMemberRead:
        group = await self.load_owned_group(user, group_id)
        membership = await self.repos.members.get_membership(group.id, member_user_id)
        if membership is None:
            raise NotFoundError(f"User {member_user_id} is not a member of group {group_id}")
        if patch.status is not None:
            membership.status = patch.status.value
        if patch.notes is not None:
            membership.notes = patch.notes
        membership = await self.repos.members.update(membership)
        await self.sync_group_count(group)
        return GroupMemberRead.model_validate(membership)

    async def user_groups(self, user: CurrentUser) -> List[SupportGroupRead]:
        memberships = await self.repos.members.list_for_user(user.id, MemberStatus.active.value)
        groups = await self.repos.groups.get_many([m.group_id for m in memberships])
        return [to_group_read(group) for group in groups]

    # ------------------------------------------------------------------
    # Waiting list
    # ------------------------------------------------------------------

    async def apply(self, user: CurrentUser, group_id: str, personal_message: Optional[str] = None) -> WaitingListEntryRead:
        group = await self.load_group(group_id)
        membership = await self.repos.members.get_membership(group.id, user.id)
        if membership is not None and membership.status == MemberStatus.active.value:
            raise ConflictError("Already a member of this group")
        if await self.repos.waiting_list.get_pending(group.id, user.id) is not None:
            raise ConflictError("You are already on the waiting list for this group")
        entry = await self.repos.waiting_list.create(
            GroupWaitingListEntry(group_id=group.id, user_id=user.id, personal_message=personal_message)
        )
        return WaitingListEntryRead.model_validate(entry)

    async def list_waiting(self, user: CurrentUser, group_id: str) -> List[WaitingListEntryRead]:
        group = await self.load_owned_group(user, group_id)
        return [WaitingListEntryRead.model_validate(e) for e in await self.repos.waiting_list.list_waiting(group.id)]

    async def process_application(
        self, user: CurrentUser, entry_id: str, decision: WaitingListStatus
    ) -> WaitingListEntryRead:
        entry = await self.repos.waiting_list.get_by_id(entry_id)
        if entry is None:
            raise NotFoundError.for_entity("Waiting list entry", entry_id)
        group = await self.load_owned_group(user, entry.group_id)
        if entry.status != WaitingListStatus.waiting.value:
            raise ConflictError(f"Application was already {entry.status}")

        approved = decision == WaitingListStatus.approved
        if approved:
            eligibility = await self.can_user_join_group(group, entry.user_id)
            if not eligibility.can_join and eligibility.reason != "Already a member of this group":
                raise ConflictError(eligibility.reason or "Cannot add member")
            await self._add_member(group, entry.user_id)

        entry.status = decision.value
        entry.processed_at = utc_now()
        entry.processed_by = user.id
        entry = await self.repos.waiting_list.update(entry)
        await self.notifications.notify_waiting_list_decision(entry.user_id, group, approved)
        return WaitingListEntryRead.model_validate(entry)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def sync_member_counts(self) -> SyncCountsResult:
        updated = errors = 0
        for group in await self.repos.groups.list():
            try:
                if await self.sync_group_count(group):
                    updated += 1
            except Exception as e:
                errors += 1
                logger.error(f"Failed to sync member count for group {group.id}: {e}", exc_info=True)
        logger.info(f"Synced support group member counts: updated={updated}, errors={errors}")
        return SyncCountsResult(updated=updated, errors=errors)
