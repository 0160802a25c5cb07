"""Unit tests for support groups, membership and the waiting list."""

import pytest

from emotions_app.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from emotions_app.core.models.domain.enums import GroupType, MemberStatus, NotificationType, WaitingListStatus
from emotions_app.core.models.io.support_groups import (
    GroupMemberUpdate,
    MeetingScheduleSlot,
    SupportGroupCreate,
    SupportGroupUpdate,
)
from emotions_app.server.services.support_groups import SupportGroupService


@pytest.fixture
def service(repos, notifications) -> SupportGroupService:
    return SupportGroupService(repos, notifications)


@pytest.fixture
async def group(service, seed_profiles, mentor):
    return await service.create_group(
        mentor,
        SupportGroupCreate(
            name="Calm Minds",
            group_type=GroupType.anxiety,
            max_participants=2,
            meeting_schedule=[MeetingScheduleSlot(day="Monday", time="18:30")],
        ),
    )


class TestCatalogue:
    async def test_create_group(self, group):
        assert group.mentor_id == "mentor_1"
        assert group.mentor_name == "Dr. Grace Wanjiru"
        assert group.mentor_specialty == "Anxiety"
        assert group.current_participants == 0
        assert group.meeting_schedule[0].time == "18:30"

    async def test_patients_cannot_create(self, service, patient):
        with pytest.raises(PermissionDeniedError):
            await service.create_group(patient, SupportGroupCreate(name="Mine"))

    def test_schedule_time_format(self):
        with pytest.raises(ValueError):
            MeetingScheduleSlot(day="Monday", time="6pm")

    async def test_list_filters(self, service, group):
        assert [g.id for g in await service.list_groups(group_type="anxiety")] == [group.id]
        assert await service.list_groups(group_type="grief") == []

    async def test_update_requires_owner(self, service, group, other_mentor, admin):
        with pytest.raises(PermissionDeniedError):
            await service.update_group(other_mentor, group.id, SupportGroupUpdate(name="Taken"))
        updated = await service.update_group(
            admin, group.id, SupportGroupUpdate(meeting_schedule=[MeetingScheduleSlot(day="Friday", time="09:00")])
        )
        assert updated.meeting_schedule[0].day == "Friday"

    async def test_delete_group(self, service, group, mentor, patient):
        await service.join_group(patient, group.id)
        await service.delete_group(mentor, group.id)
        with pytest.raises(NotFoundError):
            await service.get_group(group.id)


class TestMembership:
    async def test_join_updates_count_and_notifies(self, service, group, patient, mentor, notifications):
        member = await service.join_group(patient, group.id)
        assert member.status == MemberStatus.active
        assert (await service.get_group(group.id)).current_participants == 1
        inbox = await notifications.list(mentor)
        assert inbox[0].type == NotificationType.group.value
        assert inbox[0].metadata == {"group_id": group.id, "event": "joined"}

    async def test_cannot_join_twice(self, service, group, patient):
        await service.join_group(patient, group.id)
        eligibility = await service.join_eligibility(patient, group.id)
        assert eligibility.can_join is False
        with pytest.raises(ConflictError, match="Already a member"):
            await service.join_group(patient, group.id)

    async def test_full_group(self, service, group, patient, other_patient, admin):
        await service.join_group(patient, group.id)
        await service.join_group(other_patient, group.id)
        with pytest.raises(ConflictError, match="full"):
            await service.join_group(admin, group.id)

    async def test_leave_recomputes_count(self, service, group, patient, other_patient):
        await service.join_group(patient, group.id)
        await service.join_group(other_patient, group.id)
        await service.leave_group(patient, group.id)
        assert (await service.get_group(group.id)).current_participants == 1
        with pytest.raises(NotFoundError):
            await service.leave_group(patient, group.id)

    async def test_member_list_visibility(self, service, group, patient, other_patient, mentor):
        await service.join_group(patient, group.id)
        with pytest.raises(PermissionDeniedError):
            await service.list_members(other_patient, group.id)
        members = await service.list_members(mentor, group.id)
        assert [m.full_name for m in members] == ["Amina Njeri"]
        assert members[0].attendance_rate == 0.0

    async def test_deactivating_a_member(self, service, group, patient, mentor):
        await service.join_group(patient, group.id)
        updated = await service.update_member(
            mentor, group.id, patient.id, GroupMemberUpdate(status=MemberStatus.inactive, notes="On leave")
        )
        assert updated.status == MemberStatus.inactive
        assert (await service.get_group(group.id)).current_participants == 0
        assert await service.user_groups(patient) == []

    async def test_sync_member_counts(self, service, group, repos):
        stored = await repos.groups.get_by_id(group.id)
        stored.current_participants = 7
        await repos.groups.update(stored)
        result = await service.sync_member_counts()
        assert result.updated == 1
        assert result.errors == 0
        assert (await repos.groups.get_by_id(group.id)).current_participants == 0


class TestWaitingList:
    async def test_apply_and_approve(self, service, group, patient, mentor, notifications):
        entry = await service.apply(patient, group.id, "I'd like to join")
        assert [e.id for e in await service.list_waiting(mentor, group.id)] == [entry.id]

        processed = await service.process_application(mentor, entry.id, WaitingListStatus.approved)
        assert processed.status == WaitingListStatus.approved
        assert processed.processed_by == mentor.id
        assert (await service.get_group(group.id)).current_participants == 1
        inbox = await notifications.list(patient)
        assert inbox[0].title == "Application Approved"

    async def test_reject(self, service, group, patient, mentor):
        entry = await service.apply(patient, group.id)
        processed = await service.process_application(mentor, entry.id, WaitingListStatus.rejected)
        assert processed.status == WaitingListStatus.rejected
        assert (await service.get_group(group.id)).current_participants == 0
        with pytest.raises(ConflictError):
            await service.process_application(mentor, entry.id, WaitingListStatus.approved)

    async def test_duplicate_application(self, service, group, patient):
        await service.apply(patient, group.id)
        with pytest.raises(ConflictError):
            await service.apply(patient, group.id)

    async def test_only_owner_processes(self, service, group, patient, other_mentor):
        entry = await service.apply(patient, group.id)
        with pytest.raises(PermissionDeniedError):
            await service.process_application(other_mentor, entry.id, WaitingListStatus.approved)
