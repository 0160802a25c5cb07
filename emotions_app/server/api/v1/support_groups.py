"""
API endpoints for support groups.

Group catalogue, membership, and the waiting list used when a patient asks
to join a group through an application rather than directly.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Response, status

from emotions_app.core.models.domain.enums import GroupMeetingType, GroupType
from emotions_app.core.models.io.support_groups import (
    GroupMemberRead,
    GroupMemberUpdate,
    JoinEligibility,
    SupportGroupCreate,
    SupportGroupRead,
    SupportGroupUpdate,
    WaitingListApply,
    WaitingListDecision,
    WaitingListEntryRead,
)
from emotions_app.server.services.deps import CurrentUserDep, MentorDep, PatientDep, SupportGroupServiceDep

router = APIRouter(tags=["support-groups"])


@router.get(
    "",
    response_model=List[SupportGroupRead],
    summary="List Support Groups",
    description="Browse support groups, optionally filtered by type, meeting type or mentor.",
    response_description="A list of support groups with their mentor's name and specialty.",
)
async def list_groups(
    service: SupportGroupServiceDep,
    group_type: Optional[GroupType] = None,
    meeting_type: Optional[GroupMeetingType] = None,
    mentor_id: Optional[str] = None,
    active_only: bool = True,
    public_only: bool = False,
) -> List[SupportGroupRead]:
    return await service.list_groups(
        group_type=group_type.value if group_type else None,
        meeting_type=meeting_type.value if meeting_type else None,
        mentor_id=mentor_id,
        active_only=active_only,
        public_only=public_only,
    )


@router.post(
    "",
    response_model=SupportGroupRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Support Group",
    description="Create a support group facilitated by the calling mentor.",
)
async def create_group(data: SupportGroupCreate, mentor: MentorDep, service: SupportGroupServiceDep) -> SupportGroupRead:
    """
    Create a support group.

    - **name**: Display name of the group.
    - **max_participants**: Capacity (1-100); joining fails once it is reached.
    - **meeting_schedule**: Recurring slots shown to prospective members.
    """
    return await service.create_group(mentor, data)


@router.get("/mine", response_model=List[SupportGroupRead], summary="My Groups")
async def my_groups(user: CurrentUserDep, service: SupportGroupServiceDep) -> List[SupportGroupRead]:
    """Groups in which the caller is an active member."""
    return await service.user_groups(user)


@router.get("/{group_id}", response_model=SupportGroupRead, summary="Get Support Group")
async def get_group(group_id: str, service: SupportGroupServiceDep) -> SupportGroupRead:
    return await service.get_group(group_id)


@router.patch("/{group_id}", response_model=SupportGroupRead, summary="Update Support Group")
async def update_group(
    group_id: str, patch: SupportGroupUpdate, user: CurrentUserDep, service: SupportGroupServiceDep
) -> SupportGroupRead:
    return await service.update_group(user, group_id, patch)


@router.delete(
    "/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Support Group",
    description="Delete a group together with its members, waiting list, sessions and attendance.",
)
async def delete_group(group_id: str, user: CurrentUserDep, service: SupportGroupServiceDep) -> Response:
    await service.delete_group(user, group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----------------------------------------------------------------------
# Membership
# ----------------------------------------------------------------------


@router.get("/{group_id}/eligibility", response_model=JoinEligibility, summary="Can I Join")
async def join_eligibility(group_id: str, user: CurrentUserDep, service: SupportGroupServiceDep) -> JoinEligibility:
    return await service.join_eligibility(user, group_id)


@router.post(
    "/{group_id}/join",
    response_model=GroupMemberRead,
    status_code=status.HTTP_201_CREATED,
    summary="Join Support Group",
    responses={409: {"description": "Already a member, group full or inactive"}},
)
async def join_group(group_id: str, patient: PatientDep, service: SupportGroupServiceDep) -> GroupMemberRead:
    return await service.join_group(patient, group_id)


@router.delete("/{group_id}/membership", status_code=status.HTTP_204_NO_CONTENT, summary="Leave Support Group")
async def leave_group(group_id: str, user: CurrentUserDep, service: SupportGroupServiceDep) -> Response:
    await service.leave_group(user, group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{group_id}/members",
    response_model=List[GroupMemberRead],
    summary="List Members",
    description="Members with their attendance rate over completed and in-progress sessions.",
)
async def list_members(group_id: str, user: CurrentUserDep, service: SupportGroupServiceDep) -> List[GroupMemberRead]:
    return await service.list_members(user, group_id)


@router.patch("/{group_id}/members/{member_user_id}", response_model=GroupMemberRead, summary="Update Member")
async def update_member(
    group_id: str,
    member_user_id: str,
    patch: GroupMemberUpdate,
    user: CurrentUserDep,
    service: SupportGroupServiceDep,
) -> GroupMemberRead:
    return await service.update_member(user, group_id, member_user_id, patch)


# ----------------------------------------------------------------------
# Waiting list
# ----------------------------------------------------------------------


@router.post(
    "/{group_id}/waiting-list",
    response_model=WaitingListEntryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to Join",
)
async def apply_to_group(
    group_id: str, body: WaitingListApply, patient: PatientDep, service: SupportGroupServiceDep
) -> WaitingListEntryRead:
    return await service.apply(patient, group_id, body.personal_message)


@router.get("/{group_id}/waiting-list", response_model=List[WaitingListEntryRead], summary="List Applications")
async def list_waiting(group_id: str, user: CurrentUserDep, service: SupportGroupServiceDep) -> List[WaitingListEntryRead]:
    return await service.list_waiting(user, group_id)


@router.post(
    "/waiting-list/{entry_id}/decision",
    response_model=WaitingListEntryRead,
    summary="Approve or Reject Application",
    description="Approving adds the applicant as an active member; the applicant is notified either way.",
)
async def process_application(
    entry_id: str, body: WaitingListDecision, user: CurrentUserDep, service: SupportGroupServiceDep
) -> WaitingListEntryRead:
    return await service.process_application(user, entry_id, body.status)
