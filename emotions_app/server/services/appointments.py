"""
Appointment Service.

Booking, listing and status management of one-to-one appointments. Every
status change goes through ``APPOINTMENT_TRANSITIONS`` and is restricted to
the participant allowed to make it; the other participant is notified.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from emotions_app.core.database.entities.appointments import Appointment
from emotions_app.core.database.repositories.bundle import RepositoryBundle
from emotions_app.core.exceptions import DomainValidationError, NotFoundError, PermissionDeniedError
from emotions_app.core.logging_config import get_logger
from emotions_app.core.models.domain.enums import AppointmentStatus, MeetingType
from emotions_app.core.models.domain.identity import CurrentUser
from emotions_app.core.models.domain.transitions import APPOINTMENT_TRANSITIONS, ensure_transition
from emotions_app.core.models.io.appointments import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentReschedule,
    ChatStarted,
    SessionRoom,
)
from emotions_app.core.monitoring import log_domain_event

from .meeting_rooms import MeetingRoomClient, appointment_room_name, session_room_name
from .messaging import MessagingService
from .notifications import NotificationService
from .profiles import display_name

logger = get_logger(__name__)

PATIENT_DASHBOARD = "patient-dashboard"
MENTOR_DASHBOARD = "mood-mentor-dashboard"


class AppointmentService:
    def __init__(
        self,
        repos: RepositoryBundle,
        rooms: MeetingRoomClient,
        notifications: NotificationService,
        messaging: MessagingService,
        room_expiry_seconds: int = 24 * 60 * 60,
    ) -> None:
        self.repos = repos
        self.rooms = rooms
        self.notifications = notifications
        self.messaging = messaging
        self.room_expiry_seconds = room_expiry_seconds

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load(self, appointment_id: str) -> Appointment:
        appointment = await self.repos.appointments.get_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError.for_entity("Appointment", appointment_id)
        return appointment

    async def get_for_participant(self, user: CurrentUser, appointment_id: str) -> Appointment:
        appointment = await self._load(appointment_id)
        if not appointment.involves(user.id) and not user.is_admin:
            raise PermissionDeniedError("You are not a participant of this appointment")
        return appointment

    async def _notify_other_party(
        self, actor: CurrentUser, appointment: Appointment, title: str, message: str, event: str
    ) -> None:
        recipient = appointment.other_party(actor.id)
        dashboard = MENTOR_DASHBOARD if recipient == appointment.mentor_id else PATIENT_DASHBOARD
        await self.notifications.notify_appointment(recipient, title, message, appointment.id, event, dashboard)

    async def _transition(self, appointment: Appointment, target: AppointmentStatus) -> Appointment:
        ensure_transition(APPOINTMENT_TRANSITIONS, appointment.status, target.value, "appointment")
        appointment.status = target.value
        return appointment

    # ------------------------------------------------------------------
    # Booking and queries
    # ------------------------------------------------------------------

    async def book(self, patient: CurrentUser, data: AppointmentCreate) -> AppointmentRead:
        """Book an appointment with a mentor as the calling patient."""
        if not patient.is_patient:
            raise PermissionDeniedError("Only patients can book appointments")
        mentor = await self.repos.mentors.get_by_user_id(data.mentor_id)
        if mentor is None or not mentor.is_active:
            raise NotFoundError.for_entity("Mood mentor", data.mentor_id)

        room = await self.rooms.create_room(appointment_room_name(patient.id, data.mentor_id))
        appointment = await self.repos.appointments.create(
            Appointment(
                patient_id=patient.id,
                mentor_id=data.mentor_id,
                title=data.title,
                description=data.description,
                date=data.date,
                start_time=data.start_time,
                end_time=data.end_time,
                meeting_type=data.meeting_type.value,
                notes=data.notes,
                meeting_link=room.url,
                status=AppointmentStatus.pending.value,
            )
        )
        log_domain_event("appointment.booked", appointment_id=appointment.id, mentor_id=data.mentor_id)

        patient_name = await display_name(self.repos, patient.id)
        await self.notifications.notify_appointment(
            data.mentor_id,
            "New Appointment Request",
            f"{patient_name} booked a session on {data.date.isoformat()} at {data.start_time.strftime('%H:%M')}",
            appointment.id,
            "booked",
            MENTOR_DASHBOARD,
        )
        return AppointmentRead.model_validate(appointment)

    async def list_for_user(
        self,
        user: CurrentUser,
        status: Optional[AppointmentStatus] = None,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[AppointmentRead]:
        rows = await self.repos.appointments.search(
            patient_id=user.id if user.is_patient else None,
            mentor_id=user.id if user.is_mentor else None,
            statuses=[status.value] if status else None,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
            offset=offset,
        )
        return [AppointmentRead.model_validate(row) for row in rows]

    async def get(self, user: CurrentUser, appointment_id: str) -> AppointmentRead:
        return AppointmentRead.model_validate(await self.get_for_participant(user, appointment_id))

    async def todays_sessions(self, mentor: CurrentUser, today: Optional[dt.date] = None) -> List[AppointmentRead]:
        if not mentor.is_mentor:
            raise PermissionDeniedError("Only mood mentors have a session agenda")
        rows = await self.repos.appointments.for_mentor_on(
            mentor.id, today or dt.date.today(), exclude_statuses=[AppointmentStatus.cancelled.value]
        )
        return [AppointmentRead.model_validate(row) for row in rows]

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    async def confirm(self, mentor: CurrentUser, appointment_id: str) -> AppointmentRead:
        appointment = await self._load(appointment_id)
        if appointment.mentor_id != mentor.id:
            raise PermissionDeniedError("Only the appointment's mentor can confirm it")
        await self._transition(appointment, AppointmentStatus.scheduled)
        appointment = await self.repos.appointments.update(appointment)
        log_domain_event("appointment.confirmed", appointment_id=appointment.id)
        await self._notify_other_party(
            mentor,
            appointment,
            "Appointment Confirmed",
            f"Your session on {appointment.date.isoformat()} has been confirmed",
            "confirmed",
        )
        return AppointmentRead.model_validate(appointment)

    async def cancel(self, user: CurrentUser, appointment_id: str, reason: Optional[str] = None) -> AppointmentRead:
        appointment = await self.get_for_participant(user, appointment_id)
        await self._transition(appointment, AppointmentStatus.cancelled)
        appointment.cancellation_reason = reason
        appointment.cancelled_by = user.id
        appointment = await self.repos.appointments.update(appointment)
        log_domain_event("appointment.cancelled", appointment_id=appointment.id, cancelled_by=user.id)

        when = f"{appointment.date.isoformat()} at {appointment.start_time.strftime('%H:%M')}"
        suffix = f". Reason: {reason}" if reason else ""
        if user.id not in (appointment.mentor_id, appointment.patient_id):
            # Admin cancellations reach both participants
            message = f"An administrator has cancelled the appointment scheduled for {when}{suffix}"
            for recipient, dashboard in (
                (appointment.patient_id, PATIENT_DASHBOARD),
                (appointment.mentor_id, MENTOR_DASHBOARD),
            ):
                await self.notifications.notify_appointment(
                    recipient, "Appointment Cancelled", message, appointment.id, "cancelled", dashboard
                )
            return AppointmentRead.model_validate(appointment)

        if user.id == appointment.mentor_id:
            message = f"Your mood mentor has cancelled your appointment scheduled for {when}{suffix}"
        else:
            patient_name = await display_name(self.repos, user.id)
            message = f"{patient_name} has cancelled their appointment scheduled for {when}{suffix}"
        await self._notify_other_party(user, appointment, "Appointment Cancelled", message, "cancelled")
        return AppointmentRead.model_validate(appointment)

    async def reschedule(self, user: CurrentUser, appointment_id: str, data: AppointmentReschedule) -> AppointmentRead:
        appointment = await self.get_for_participant(user, appointment_id)
        await self._transition(appointment, AppointmentStatus.rescheduled)
        appointment.date = data.date
        appointment.start_time = data.start_time
        appointment.end_time = data.end_time
        if data.reason:
            appointment.notes = data.reason
        appointment = await self.repos.appointments.update(appointment)
        log_domain_event("appointment.rescheduled", appointment_id=appointment.id)
        await self._notify_other_party(
            user,
            appointment,
            "Appointment Rescheduled",
            f"Your appointment has been moved to {data.date.isoformat()} at {data.start_time.strftime('%H:%M')}",
            "rescheduled",
        )
        return AppointmentRead.model_validate(appointment)

    async def complete(self, mentor: CurrentUser, appointment_id: str) -> AppointmentRead:
        appointment = await self._load(appointment_id)
        if appointment.mentor_id != mentor.id:
            raise PermissionDeniedError("Only the appointment's mentor can mark it completed")
        await self._transition(appointment, AppointmentStatus.completed)
        appointment = await self.repos.appointments.update(appointment)
        log_domain_event("appointment.completed", appointment_id=appointment.id)
        await self._notify_other_party(
            mentor,
            appointment,
            "Session Completed",
            "Your session has been marked as completed. We'd love to hear your feedback.",
            "completed",
        )
        return AppointmentRead.model_validate(appointment)

    async def rate(
        self, patient: CurrentUser, appointment_id: str, rating: int, feedback: Optional[str] = None
    ) -> AppointmentRead:
        appointment = await self._load(appointment_id)
        if appointment.patient_id != patient.id:
            raise PermissionDeniedError("Only the appointment's patient can rate it")
        if appointment.status != AppointmentStatus.completed.value:
            raise DomainValidationError("Only completed appointments can be rated")
        if not 1 <= rating <= 5:
            raise DomainValidationError("Rating must be between 1 and 5")
        appointment.rating = rating
        appointment.feedback = feedback
        appointment = await self.repos.appointments.update(appointment)
        return AppointmentRead.model_validate(appointment)

    # ------------------------------------------------------------------
    # Live session and chat
    # ------------------------------------------------------------------

    async def start_chat(self, user: CurrentUser, appointment_id: str) -> ChatStarted:
        appointment = await self.get_for_participant(user, appointment_id)
        conversation = await self.messaging.get_or_create_conversation(
            appointment.patient_id, appointment.mentor_id, appointment.id
        )
        return ChatStarted(conversation_id=conversation.id)

    async def start_session(self, user: CurrentUser, appointment_id: str) -> SessionRoom:
        """Create a fresh meeting room for the appointment and store its link."""
        appointment = await self.get_for_participant(user, appointment_id)
        if appointment.status in (AppointmentStatus.cancelled.value, AppointmentStatus.completed.value):
            raise DomainValidationError(f"Cannot start a session for a {appointment.status} appointment")

        properties = {}
        if appointment.meeting_type == MeetingType.audio.value:
            properties["start_video_off"] = True
        room = await self.rooms.create_room(
            session_room_name("appointment", appointment.id),
            expiry_seconds=self.room_expiry_seconds,
            properties=properties,
        )
        appointment.meeting_link = room.url
        await self.repos.appointments.update(appointment)
        log_domain_event("appointment.session_started", appointment_id=appointment.id, started_by=user.id)
        return SessionRoom(room_url=room.url, room_name=room.name, is_new=True)
