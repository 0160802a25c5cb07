"""Domain enums for the Emotions App platform."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Role attached to an authenticated user by the identity provider."""

    patient = "patient"
    mood_mentor = "mood_mentor"
    admin = "admin"


class AppointmentStatus(str, Enum):
    """Lifecycle of a one-to-one appointment between a patient and a mentor."""

    pending = "pending"  # Booked by the patient, awaiting mentor confirmation.
    scheduled = "scheduled"
    rescheduled = "rescheduled"
    completed = "completed"
    cancelled = "cancelled"


class MeetingType(str, Enum):
    """How an appointment is held."""

    video = "video"
    audio = "audio"
    chat = "chat"


class GroupType(str, Enum):
    anxiety = "anxiety"
    depression = "depression"
    stress = "stress"
    relationships = "relationships"
    grief = "grief"
    addiction = "addiction"
    trauma = "trauma"
    youth = "youth"
    other = "other"


class GroupMeetingType(str, Enum):
    online = "online"
    in_person = "in-person"
    hybrid = "hybrid"


class ScheduleFrequency(str, Enum):
    weekly = "weekly"
    bi_weekly = "bi-weekly"
    monthly = "monthly"


class MemberStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    removed = "removed"


class WaitingListStatus(str, Enum):
    waiting = "waiting"
    approved = "approved"
    rejected = "rejected"
    expired = "expired"


class GroupSessionStatus(str, Enum):
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class AttendanceStatus(str, Enum):
    present = "present"
    late = "late"
    absent = "absent"
    excused = "excused"

    @property
    def attended(self) -> bool:
        return self in (AttendanceStatus.present, AttendanceStatus.late)


class ReviewStatus(str, Enum):
    pending = "pending"
    published = "published"
    rejected = "rejected"
    flagged = "flagged"


class NotificationType(str, Enum):
    message = "message"
    group = "group"
    session = "session"
    reminder = "reminder"
    resource = "resource"
    alert = "alert"
    mood_tracking = "mood_tracking"
    appointment = "appointment"
    review = "review"
    welcome = "welcome"


class MoodType(str, Enum):
    positive = "positive"
    neutral = "neutral"
    negative = "negative"


class StressLevel(str, Enum):
    low = "low"
    moderate = "moderate"
    high = "high"


class CallSessionStatus(str, Enum):
    active = "active"
    ended = "ended"
    disconnected = "disconnected"


class SessionEventType(str, Enum):
    mentor_joined = "mentor_joined"
    patient_joined = "patient_joined"
    mentor_left = "mentor_left"
    patient_left = "patient_left"
    session_ended = "session_ended"
    connection_issue = "connection_issue"


class EventInitiator(str, Enum):
    mentor = "mentor"
    patient = "patient"
    system = "system"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class ReviewSortField(str, Enum):
    date = "date"
    rating = "rating"
    status = "status"
