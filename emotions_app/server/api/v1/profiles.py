"""
API endpoints for patient and mood mentor profiles.

Covers self-registration (rate limited per email), profile reads and
updates, and the public mentor directory.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query, status

from emotions_app.core.models.io.profiles import (
    MentorProfileRead,
    MentorProfileUpdate,
    MentorPublicProfile,
    MentorSignup,
    PatientProfileRead,
    PatientProfileUpdate,
    PatientSignup,
    SignupAttemptStatus,
)
from emotions_app.server.services.deps import CurrentUserDep, ProfileServiceDep

router = APIRouter(tags=["profiles"])


@router.post(
    "/patients",
    response_model=PatientProfileRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register Patient",
    description="Create the patient profile of the calling user.",
    responses={
        201: {"description": "Profile created"},
        409: {"description": "A profile already exists for this user or email"},
        422: {"description": "Signup data failed validation"},
        429: {"description": "Too many signup attempts for this email"},
    },
)
async def register_patient(data: PatientSignup, user: CurrentUserDep, service: ProfileServiceDep) -> PatientProfileRead:
    """
    Register the caller as a patient.

    - **email**: Contact email; disposable domains are rejected.
    - **first_name** / **last_name** / **country**: Required.
    """
    return await service.register_patient(user, data)


@router.post(
    "/mentors",
    response_model=MentorProfileRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register Mood Mentor",
    description="Create the mood mentor profile of the calling user.",
    responses={
        201: {"description": "Profile created"},
        409: {"description": "A profile already exists for this user or email"},
        422: {"description": "Signup data failed validation"},
        429: {"description": "Too many signup attempts for this email"},
    },
)
async def register_mentor(data: MentorSignup, user: CurrentUserDep, service: ProfileServiceDep) -> MentorProfileRead:
    """Register the caller as a mood mentor."""
    return await service.register_mentor(user, data)


@router.get(
    "/signup-status",
    response_model=SignupAttemptStatus,
    summary="Signup Attempt Status",
    description="Remaining signup attempts and lockout time for an email address.",
)
async def signup_status(service: ProfileServiceDep, email: str = Query(...)) -> SignupAttemptStatus:
    return service.signup_status(email)


@router.get("/patients/{user_id}", response_model=PatientProfileRead, summary="Get Patient Profile")
async def get_patient(user_id: str, user: CurrentUserDep, service: ProfileServiceDep) -> PatientProfileRead:
    return await service.get_patient(user_id)


@router.patch(
    "/patients/{user_id}",
    response_model=PatientProfileRead,
    summary="Update Patient Profile",
    description="Partially update a patient profile. Only the owner or an admin may do this.",
)
async def update_patient(
    user_id: str, patch: PatientProfileUpdate, user: CurrentUserDep, service: ProfileServiceDep
) -> PatientProfileRead:
    return await service.update_patient(user, user_id, patch)


@router.get(
    "/mentors",
    response_model=List[MentorProfileRead],
    summary="List Mood Mentors",
    description="Browse the mentor directory, optionally filtered by specialty or a name search.",
)
async def list_mentors(
    service: ProfileServiceDep,
    specialty: Optional[str] = None,
    search: Optional[str] = None,
    active_only: bool = True,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> List[MentorProfileRead]:
    return await service.list_mentors(
        specialty=specialty, active_only=active_only, search=search, limit=limit, offset=offset
    )


@router.get(
    "/mentors/{user_id}",
    response_model=MentorPublicProfile,
    summary="Get Mentor Public Profile",
    description="Public mentor profile including the average rating of published reviews.",
)
async def get_mentor_public_profile(user_id: str, service: ProfileServiceDep) -> MentorPublicProfile:
    return await service.get_mentor_public_profile(user_id)


@router.patch("/mentors/{user_id}", response_model=MentorProfileRead, summary="Update Mentor Profile")
async def update_mentor(
    user_id: str, patch: MentorProfileUpdate, user: CurrentUserDep, service: ProfileServiceDep
) -> MentorProfileRead:
    return await service.update_mentor(user, user_id, patch)
