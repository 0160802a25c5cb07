"""
Call Session Service.

Tracks which participant devices are connected to an appointment call and
keeps a timeline of join/leave events. Clients send heartbeats while the
call is open; connections whose heartbeat stops are swept up by
:meth:`CallSessionService.cleanup_stale`.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from emotions_app.core.database.base import utc_now
from emotions_app.core.database.entities.appointments import Appointment
from emotions_app.core.database.entities.call_sessions import CallSession, SessionEvent
from emotions_app.core.database.repositories.bundle import RepositoryBundle
from emotions_app.core.exceptions import NotFoundError, PermissionDeniedError
from emotions_app.core.logging_config import get_logger
from emotions_app.core.models.domain.enums import CallSessionStatus, EventInitiator, SessionEventType
from emotions_app.core.models.domain.identity import CurrentUser
from emotions_app.core.models.io.call_sessions import CallSessionRead, SessionEventRead

logger = get_logger(__name__)


class CallSessionService:
    def __init__(self, repos: RepositoryBundle, stale_after_minutes: int = 5) -> None:
        self.repos = repos
        self.stale_after = dt.timedelta(minutes=stale_after_minutes)

    async def _participant_appointment(self, user: CurrentUser, appointment_id: str) -> Appointment:
        appointment = await self.repos.appointments.get_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError.for_entity("Appointment", appointment_id)
        if not appointment.involves(user.id) and not user.is_admin:
            raise PermissionDeniedError("You are not a participant of this appointment")
        return appointment

    async def _record_event(
        self,
        appointment_id: str,
        event_type: SessionEventType,
        initiated_by: EventInitiator,
        message: Optional[str] = None,
    ) -> SessionEvent:
        return await self.repos.session_events.create(
            SessionEvent(
                appointment_id=appointment_id,
                event_type=event_type.value,
                initiated_by=initiated_by.value,
                message=message,
            )
        )

    async def start(
        self,
        user: CurrentUser,
        appointment_id: str,
        device_id: Optional[str] = None,
        is_audio_only: bool = False,
    ) -> CallSessionRead:
        """Register the caller's connection, reusing an already active one."""
        appointment = await self._participant_appointment(user, appointment_id)
        existing = await self.repos.call_sessions.get_active(appointment.id, user.id)
        if existing is not None:
            existing.last_heartbeat = utc_now()
            if device_id:
                existing.device_id = device_id
            existing = await self.repos.call_sessions.update(existing)
            return CallSessionRead.model_validate(existing)

        call = await self.repos.call_sessions.create(
            CallSession(
                appointment_id=appointment.id,
                user_id=user.id,
                device_id=device_id,
                is_audio_only=is_audio_only,
            )
        )
        joined = (
            SessionEventType.mentor_joined
            if user.id == appointment.mentor_id
            else SessionEventType.patient_joined
        )
        await self._record_event(appointment.id, joined, user.initiator)
        logger.info(f"Call session {call.id} started for appointment {appointment.id}")
        return CallSessionRead.model_validate(call)

    async def heartbeat(self, user: CurrentUser, session_id: str) -> CallSessionRead:
        call = await self.repos.call_sessions.get_by_id(session_id)
        if call is None or call.user_id != user.id:
            raise NotFoundError.for_entity("Call session", session_id)
        call.last_heartbeat = utc_now()
        return CallSessionRead.model_validate(await self.repos.call_sessions.update(call))

    async def end(self, user: CurrentUser, appointment_id: str) -> int:
        """End every active connection of the caller for the appointment."""
        appointment = await self._participant_appointment(user, appointment_id)
        active = await self.repos.call_sessions.list_active(appointment.id, user.id)
        now = utc_now()
        for call in active:
            call.status = CallSessionStatus.ended.value
            call.ended_at = now
        if active:
            await self.repos.call_sessions.update_many(active)
        await self._record_event(appointment.id, SessionEventType.session_ended, user.initiator)
        return len(active)

    async def log_event(
        self, user: CurrentUser, appointment_id: str, event_type: SessionEventType, message: Optional[str] = None
    ) -> SessionEventRead:
        appointment = await self._participant_appointment(user, appointment_id)
        event = await self._record_event(appointment.id, event_type, user.initiator, message)
        return SessionEventRead.model_validate(event)

    async def latest_events(self, user: CurrentUser, appointment_id: str, limit: int = 20) -> List[SessionEventRead]:
        appointment = await self._participant_appointment(user, appointment_id)
        events = await self.repos.session_events.latest(appointment.id, limit)
        return [SessionEventRead.model_validate(e) for e in events]

    async def cleanup_stale(self, now: Optional[dt.datetime] = None) -> int:
        """Mark connections without a recent heartbeat as disconnected."""
        now = now or utc_now()
        stale = await self.repos.call_sessions.list_stale(now - self.stale_after)
        for call in stale:
            call.status = CallSessionStatus.disconnected.value
            call.ended_at = now
        if stale:
            await self.repos.call_sessions.update_many(stale)
            logger.info(f"Disconnected {len(stale)} stale call sessions")
        return len(stale)
