"""
API endpoints for support group sessions, attendance and group analytics.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, status

from emotions_app.core.models.io.support_groups import (
    AttendanceMark,
    AttendanceRead,
    AutoMarkResult,
    GroupAnalytics,
    GroupSessionCreate,
    GroupSessionRead,
    GroupSessionUpdate,
    JoinEligibility,
    MemberAnalytics,
)
from emotions_app.server.services.deps import CurrentUserDep, GroupSessionServiceDep, MentorDep

router = APIRouter(tags=["group-sessions"])


@router.post(
    "/support-groups/{group_id}/sessions",
    response_model=GroupSessionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule Group Session",
)
async def create_session(
    group_id: str, data: GroupSessionCreate, mentor: MentorDep, service: GroupSessionServiceDep
) -> GroupSessionRead:
    return await service.create_session(mentor, group_id, data)


@router.get(
    "/support-groups/{group_id}/sessions",
    response_model=List[GroupSessionRead],
    summary="List Group Sessions",
    description="Sessions of a group, newest first, each with attendance count and rate.",
)
async def list_sessions(group_id: str, user: CurrentUserDep, service: GroupSessionServiceDep) -> List[GroupSessionRead]:
    return await service.list_sessions(group_id)


@router.get("/support-groups/{group_id}/sessions/today", response_model=List[GroupSessionRead], summary="Today's Group Sessions")
async def todays_sessions(group_id: str, user: CurrentUserDep, service: GroupSessionServiceDep) -> List[GroupSessionRead]:
    return await service.todays_sessions(group_id)


@router.get(
    "/support-groups/{group_id}/analytics",
    response_model=GroupAnalytics,
    summary="Group Analytics",
    description="Membership, attendance and engagement figures for the group's mentor.",
)
async def group_analytics(group_id: str, mentor: MentorDep, service: GroupSessionServiceDep) -> GroupAnalytics:
    return await service.group_analytics(mentor, group_id)


@router.get(
    "/support-groups/{group_id}/members/{member_user_id}/analytics",
    response_model=MemberAnalytics,
    summary="Member Analytics",
)
async def member_analytics(
    group_id: str, member_user_id: str, user: CurrentUserDep, service: GroupSessionServiceDep
) -> MemberAnalytics:
    return await service.member_analytics(user, group_id, member_user_id)


@router.get("/group-sessions/{session_id}", response_model=GroupSessionRead, summary="Get Group Session")
async def get_session(session_id: str, user: CurrentUserDep, service: GroupSessionServiceDep) -> GroupSessionRead:
    return await service.get_session(session_id)


@router.patch("/group-sessions/{session_id}", response_model=GroupSessionRead, summary="Update Group Session")
async def update_session(
    session_id: str, patch: GroupSessionUpdate, mentor: MentorDep, service: GroupSessionServiceDep
) -> GroupSessionRead:
    return await service.update_session(mentor, session_id, patch)


@router.post(
    "/group-sessions/{session_id}/start",
    response_model=GroupSessionRead,
    summary="Start Group Session",
    description="Open a meeting room for the session and notify every active member.",
    responses={409: {"description": "Session is not scheduled"}},
)
async def start_session(session_id: str, mentor: MentorDep, service: GroupSessionServiceDep) -> GroupSessionRead:
    return await service.start_session(mentor, session_id)


@router.post("/group-sessions/{session_id}/end", response_model=GroupSessionRead, summary="End Group Session")
async def end_session(session_id: str, mentor: MentorDep, service: GroupSessionServiceDep) -> GroupSessionRead:
    return await service.end_session(mentor, session_id)


@router.post("/group-sessions/{session_id}/cancel", response_model=GroupSessionRead, summary="Cancel Group Session")
async def cancel_session(session_id: str, mentor: MentorDep, service: GroupSessionServiceDep) -> GroupSessionRead:
    return await service.cancel_session(mentor, session_id)


@router.get("/group-sessions/{session_id}/eligibility", response_model=JoinEligibility, summary="Can I Join Session")
async def join_eligibility(session_id: str, user: CurrentUserDep, service: GroupSessionServiceDep) -> JoinEligibility:
    return await service.join_eligibility(user, session_id)


@router.post(
    "/group-sessions/{session_id}/join",
    response_model=Optional[AttendanceRead],
    summary="Join Group Session",
    description=(
        "Record the caller's attendance as present, or late when joining after the grace period. "
        "The hosting mentor gets no attendance row and receives null."
    ),
)
async def join_session(
    session_id: str, user: CurrentUserDep, service: GroupSessionServiceDep
) -> Optional[AttendanceRead]:
    return await service.track_session_join(user, session_id)


@router.get("/group-sessions/{session_id}/attendance", response_model=List[AttendanceRead], summary="Session Attendance")
async def get_attendance(session_id: str, user: CurrentUserDep, service: GroupSessionServiceDep) -> List[AttendanceRead]:
    return await service.get_session_attendance(user, session_id)


@router.put("/group-sessions/{session_id}/attendance", response_model=AttendanceRead, summary="Mark Attendance")
async def mark_attendance(
    session_id: str, body: AttendanceMark, mentor: MentorDep, service: GroupSessionServiceDep
) -> AttendanceRead:
    return await service.mark_attendance(mentor, session_id, body.user_id, body.status, body.notes)


@router.post(
    "/group-sessions/{session_id}/attendance/auto-absent",
    response_model=AutoMarkResult,
    summary="Auto-mark Absentees",
    description="Mark active members without attendance as absent once the cutoff after the start has passed.",
)
async def auto_mark_absent(session_id: str, mentor: MentorDep, service: GroupSessionServiceDep) -> AutoMarkResult:
    return AutoMarkResult(marked_absent=await service.auto_mark_absent(mentor, session_id))
