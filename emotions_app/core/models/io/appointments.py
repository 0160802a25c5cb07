"""
Appointment I/O models for API requests and responses.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..domain.enums import AppointmentStatus, MeetingType


class _TimeSlot(BaseModel):
    date: dt.date = Field(description="Calendar day")
    start_time: dt.time = Field(description="Start time")
    end_time: dt.time = Field(description="End time")

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class AppointmentCreate(_TimeSlot):
    """Schema for booking an appointment as a patient."""

    mentor_id: str = Field(description="User id of the mood mentor")
    title: str = Field(default="Counseling session", max_length=255)
    description: Optional[str] = None
    meeting_type: MeetingType = MeetingType.video
    notes: Optional[str] = None


class AppointmentReschedule(_TimeSlot):
    """Schema for moving an appointment to a new slot."""

    reason: Optional[str] = None


class AppointmentCancel(BaseModel):
    reason: Optional[str] = Field(default=None, description="Shown to the other party")


class AppointmentRate(BaseModel):
    rating: int = Field(ge=1, le=5)
    feedback: Optional[str] = None


class AppointmentRead(BaseModel):
    """Schema for reading an appointment."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_id: str
    mentor_id: str
    title: str
    description: Optional[str] = None
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    meeting_type: MeetingType
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    status: AppointmentStatus
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[str] = None
    rating: Optional[int] = None
    feedback: Optional[str] = None
    review_submitted: bool = False
    created_at: dt.datetime
    updated_at: dt.datetime


class SessionRoom(BaseModel):
    """Meeting room handed to a participant who starts a live session."""

    room_url: str
    room_name: str
    is_new: bool = True


class ChatStarted(BaseModel):
    conversation_id: str
