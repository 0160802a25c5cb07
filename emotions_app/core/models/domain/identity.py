"""Authenticated caller as seen by the service layer."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import EventInitiator, UserRole


@dataclass(frozen=True)
class CurrentUser:
    """User id and role asserted by the upstream identity provider."""

    id: str
    role: UserRole

    @property
    def is_patient(self) -> bool:
        return self.role == UserRole.patient

    @property
    def is_mentor(self) -> bool:
        return self.role == UserRole.mood_mentor

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    @property
    def initiator(self) -> EventInitiator:
        """Role used when recording call session events."""
        if self.is_mentor:
            return EventInitiator.mentor
        if self.is_patient:
            return EventInitiator.patient
        return EventInitiator.system
