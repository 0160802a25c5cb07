"""
API endpoints for one-to-one appointments.

Patients book sessions with a mood mentor; both parties can reschedule or
cancel, the mentor confirms and completes, and either side can open the
chat or the video room attached to the appointment.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Query, status

from emotions_app.core.models.domain.enums import AppointmentStatus
from emotions_app.core.models.io.appointments import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentRate,
    AppointmentRead,
    AppointmentReschedule,
    ChatStarted,
    SessionRoom,
)
from emotions_app.server.services.deps import AppointmentServiceDep, CurrentUserDep, MentorDep, PatientDep

router = APIRouter(tags=["appointments"])


@router.post(
    "",
    response_model=AppointmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Book Appointment",
    description="Book a session with a mood mentor. A meeting room is created for video and audio sessions.",
    responses={
        201: {"description": "Appointment booked, status pending"},
        404: {"description": "Mentor not found"},
        502: {"description": "Meeting room provider failed"},
    },
)
async def book_appointment(data: AppointmentCreate, patient: PatientDep, service: AppointmentServiceDep) -> AppointmentRead:
    """
    Book an appointment.

    The appointment starts in `pending` until the mentor confirms it. The mentor
    receives an in-app notification.
    """
    return await service.book(patient, data)


@router.get(
    "",
    response_model=List[AppointmentRead],
    summary="List My Appointments",
    description="Appointments of the caller (as patient or mentor), newest first.",
)
async def list_appointments(
    user: CurrentUserDep,
    service: AppointmentServiceDep,
    status_filter: Optional[AppointmentStatus] = Query(default=None, alias="status"),
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> List[AppointmentRead]:
    return await service.list_for_user(
        user, status=status_filter, start_date=start_date, end_date=end_date, limit=limit, offset=offset
    )


@router.get(
    "/today",
    response_model=List[AppointmentRead],
    summary="Today's Sessions",
    description="The calling mentor's non-cancelled appointments for today, by start time.",
)
async def todays_sessions(mentor: MentorDep, service: AppointmentServiceDep) -> List[AppointmentRead]:
    return await service.todays_sessions(mentor)


@router.get("/{appointment_id}", response_model=AppointmentRead, summary="Get Appointment")
async def get_appointment(appointment_id: str, user: CurrentUserDep, service: AppointmentServiceDep) -> AppointmentRead:
    return await service.get(user, appointment_id)


@router.post(
    "/{appointment_id}/confirm",
    response_model=AppointmentRead,
    summary="Confirm Appointment",
    responses={409: {"description": "Appointment cannot be confirmed from its current status"}},
)
async def confirm_appointment(appointment_id: str, mentor: MentorDep, service: AppointmentServiceDep) -> AppointmentRead:
    return await service.confirm(mentor, appointment_id)


@router.post(
    "/{appointment_id}/cancel",
    response_model=AppointmentRead,
    summary="Cancel Appointment",
    description="Cancel an appointment. The other participant is notified with the reason.",
)
async def cancel_appointment(
    appointment_id: str, body: AppointmentCancel, user: CurrentUserDep, service: AppointmentServiceDep
) -> AppointmentRead:
    return await service.cancel(user, appointment_id, body.reason)


@router.post("/{appointment_id}/reschedule", response_model=AppointmentRead, summary="Reschedule Appointment")
async def reschedule_appointment(
    appointment_id: str, body: AppointmentReschedule, user: CurrentUserDep, service: AppointmentServiceDep
) -> AppointmentRead:
    return await service.reschedule(user, appointment_id, body)


@router.post("/{appointment_id}/complete", response_model=AppointmentRead, summary="Complete Appointment")
async def complete_appointment(appointment_id: str, mentor: MentorDep, service: AppointmentServiceDep) -> AppointmentRead:
    return await service.complete(mentor, appointment_id)


@router.post("/{appointment_id}/rate", response_model=AppointmentRead, summary="Rate Appointment")
async def rate_appointment(
    appointment_id: str, body: AppointmentRate, patient: PatientDep, service: AppointmentServiceDep
) -> AppointmentRead:
    return await service.rate(patient, appointment_id, body.rating, body.feedback)


@router.post(
    "/{appointment_id}/chat",
    response_model=ChatStarted,
    summary="Start Chat",
    description="Return the conversation between the two participants, creating it if needed.",
)
async def start_chat(appointment_id: str, user: CurrentUserDep, service: AppointmentServiceDep) -> ChatStarted:
    return await service.start_chat(user, appointment_id)


@router.post(
    "/{appointment_id}/session",
    response_model=SessionRoom,
    summary="Start Session",
    description="Create a fresh meeting room for the appointment and store its link on it.",
)
async def start_session(appointment_id: str, user: CurrentUserDep, service: AppointmentServiceDep) -> SessionRoom:
    return await service.start_session(user, appointment_id)
