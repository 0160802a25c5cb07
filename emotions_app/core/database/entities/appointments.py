"""
Appointment entity model.

One-to-one sessions between a patient and a mood mentor. Status changes are
validated in the service layer against ``APPOINTMENT_TRANSITIONS``.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class AppointmentBase(Base):
    """Base fields for appointment entity."""

    title: str = Field(default="Counseling session", max_length=255)
    description: Optional[str] = Field(default=None)
    date: dt.date = Field(index=True, description="Calendar day of the appointment")
    start_time: dt.time = Field(description="Local start time")
    end_time: dt.time = Field(description="Local end time")
    meeting_type: str = Field(default="video", max_length=16, description="video, audio or chat")
    notes: Optional[str] = Field(default=None)


class Appointment(AppointmentBase, table=True):
    """Entity for appointments.

    Table: appointments
    """

    __tablename__ = "appointments"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    patient_id: str = Field(max_length=64, index=True, description="User id of the patient")
    mentor_id: str = Field(max_length=64, index=True, description="User id of the mood mentor")

    status: str = Field(default="pending", max_length=16, index=True)
    meeting_link: Optional[str] = Field(default=None, max_length=1024)
    cancellation_reason: Optional[str] = Field(default=None)
    cancelled_by: Optional[str] = Field(default=None, max_length=64)
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    feedback: Optional[str] = Field(default=None)
    review_submitted: bool = Field(default=False)

    created_at: dt.datetime = Field(default_factory=utc_now, index=True)
    updated_at: dt.datetime = Field(default_factory=utc_now)

    def starts_at(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.start_time)

    def involves(self, user_id: str) -> bool:
        return user_id in (self.patient_id, self.mentor_id)

    def other_party(self, user_id: str) -> str:
        return self.mentor_id if user_id == self.patient_id else self.patient_id

    def __repr__(self) -> str:
        return f"Appointment(id={self.id}, status={self.status}, date={self.date})"
