"""Tests for support group, membership and waiting list repositories."""

from __future__ import annotations

import datetime as dt
from datetime import datetime

from emotions_app.core.database.entities import (
    GroupMember,
    GroupSession,
    GroupWaitingListEntry,
    SessionAttendance,
    SupportGroup,
)


async def _group(repos, **overrides) -> SupportGroup:
    data = {"name": "Calm Minds", "mentor_id": "mentor_1", "group_type": "anxiety"}
    data.update(overrides)
    return await repos.groups.create(SupportGroup(**data))


class TestSupportGroupRepository:
    async def test_search_filters(self, repos):
        await _group(repos)
        await _group(repos, name="Private", is_public=False)
        await _group(repos, name="Old", is_active=False)
        await _group(repos, name="Grief Circle", group_type="grief", mentor_id="mentor_2")
        assert len(await repos.groups.search()) == 3
        assert len(await repos.groups.search(public_only=True)) == 2
        assert len(await repos.groups.search(active_only=False)) == 4
        assert [g.name for g in await repos.groups.search(group_type="grief")] == ["Grief Circle"]
        assert len(await repos.groups.search(mentor_id="mentor_1")) == 2

    async def test_get_many(self, repos):
        first = await _group(repos)
        second = await _group(repos, name="Second")
        assert {g.id for g in await repos.groups.get_many([first.id, second.id])} == {first.id, second.id}
        assert await repos.groups.get_many([]) == []


class TestMembershipRepositories:
    async def test_membership_counts(self, repos):
        group = await _group(repos)
        await repos.members.create_many(
            [
                GroupMember(group_id=group.id, user_id="p1"),
                GroupMember(group_id=group.id, user_id="p2"),
                GroupMember(group_id=group.id, user_id="p3", status="removed"),
            ]
        )
        assert await repos.members.count_for_group(group.id) == 2
        assert await repos.members.count_for_group(group.id, status="removed") == 1
        assert len(await repos.members.list_for_group(group.id)) == 3
        assert len(await repos.members.list_for_group(group.id, status="active")) == 2
        assert (await repos.members.get_membership(group.id, "p3")).status == "removed"
        assert len(await repos.members.list_for_user("p1")) == 1

    async def test_waiting_list_priority_order(self, repos):
        group = await _group(repos)
        await repos.waiting_list.create_many(
            [
                GroupWaitingListEntry(group_id=group.id, user_id="p1", applied_at=datetime(2026, 1, 1)),
                GroupWaitingListEntry(group_id=group.id, user_id="p2", priority_score=5, applied_at=datetime(2026, 1, 2)),
                GroupWaitingListEntry(group_id=group.id, user_id="p3", status="rejected"),
            ]
        )
        assert [e.user_id for e in await repos.waiting_list.list_waiting(group.id)] == ["p2", "p1"]
        assert await repos.waiting_list.get_pending(group.id, "p3") is None
        assert (await repos.waiting_list.get_pending(group.id, "p1")).user_id == "p1"


class TestGroupSessionRepositories:
    async def test_sessions_and_attendance(self, repos):
        group = await _group(repos)
        today = dt.date(2026, 3, 10)
        past = await repos.group_sessions.create(
            GroupSession(
                group_id=group.id,
                title="Week 1",
                session_date=dt.date(2026, 3, 3),
                start_time=dt.time(18, 0),
                status="completed",
            )
        )
        await repos.group_sessions.create_many(
            [
                GroupSession(group_id=group.id, title="Week 2", session_date=today, start_time=dt.time(18, 0)),
                GroupSession(
                    group_id=group.id, title="Week 3", session_date=dt.date(2026, 3, 17), start_time=dt.time(18, 0)
                ),
            ]
        )
        assert await repos.group_sessions.count_upcoming(group.id, today) == 2
        assert [s.title for s in await repos.group_sessions.for_group_on(group.id, today)] == ["Week 2"]
        assert len(await repos.group_sessions.list_for_group(group.id, statuses=["completed"])) == 1
        assert [s.title for s in await repos.group_sessions.list_for_group(group.id)] == ["Week 3", "Week 2", "Week 1"]

        await repos.attendance.create_many(
            [
                SessionAttendance(session_id=past.id, group_id=group.id, user_id="p1", status="present"),
                SessionAttendance(session_id=past.id, group_id=group.id, user_id="p2", status="late"),
                SessionAttendance(session_id=past.id, group_id=group.id, user_id="p3", status="absent"),
            ]
        )
        assert await repos.attendance.count_attended(past.id) == 2

        await repos.members.create_many(
            [
                GroupMember(group_id=group.id, user_id="p1"),
                GroupMember(group_id=group.id, user_id="p2", status="inactive"),
            ]
        )
        assert await repos.attendance.count_attended(past.id, member_status="active") == 1
        assert len(await repos.attendance.list_for_session(past.id)) == 3
        assert len(await repos.attendance.list_for_group(group.id, user_id="p1")) == 1
        assert (await repos.attendance.get_record(past.id, "p3")).status == "absent"
