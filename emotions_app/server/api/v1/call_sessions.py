"""
API endpoints for live call tracking.

Participants register their connection when they open the call room, send
heartbeats while it stays open and end it when leaving.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, status

from emotions_app.core.models.io.call_sessions import (
    CallSessionEnd,
    CallSessionRead,
    CallSessionStart,
    EndedSessions,
    SessionEventCreate,
    SessionEventRead,
)
from emotions_app.server.services.deps import CallSessionServiceDep, CurrentUserDep

router = APIRouter(tags=["call-sessions"])


@router.post(
    "/start",
    response_model=CallSessionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Start Call Session",
    description="Register the caller's connection; an already active connection is reused.",
)
async def start_call(body: CallSessionStart, user: CurrentUserDep, service: CallSessionServiceDep) -> CallSessionRead:
    return await service.start(user, body.appointment_id, body.device_id, body.is_audio_only)


@router.post("/end", response_model=EndedSessions, summary="End Call Session")
async def end_call(body: CallSessionEnd, user: CurrentUserDep, service: CallSessionServiceDep) -> EndedSessions:
    return EndedSessions(ended=await service.end(user, body.appointment_id))


@router.post("/{session_id}/heartbeat", response_model=CallSessionRead, summary="Heartbeat")
async def heartbeat(session_id: str, user: CurrentUserDep, service: CallSessionServiceDep) -> CallSessionRead:
    return await service.heartbeat(user, session_id)


@router.post("/events", response_model=SessionEventRead, status_code=status.HTTP_201_CREATED, summary="Log Call Event")
async def log_event(body: SessionEventCreate, user: CurrentUserDep, service: CallSessionServiceDep) -> SessionEventRead:
    return await service.log_event(user, body.appointment_id, body.event_type, body.message)


@router.get(
    "/events/{appointment_id}",
    response_model=List[SessionEventRead],
    summary="Latest Call Events",
    description="Most recent call events of an appointment, newest first.",
)
async def latest_events(
    appointment_id: str,
    user: CurrentUserDep,
    service: CallSessionServiceDep,
    limit: int = Query(default=20, ge=1, le=100),
) -> List[SessionEventRead]:
    return await service.latest_events(user, appointment_id, limit)
