"""
Database entities.

Importing this package registers every table on ``Base.metadata``.
"""

from .appointments import Appointment
from .call_sessions import CallSession, SessionEvent
from .group_sessions import GroupSession, SessionAttendance
from .messaging import Conversation, ConversationParticipant, Message
from .notifications import Notification
from .profiles import MoodMentorProfile, PatientProfile
from .reviews import MentorReview, ReviewNote, ReviewRequestLink, ReviewResponse
from .support_groups import GroupMember, GroupWaitingListEntry, SupportGroup
from .wellbeing import MoodEntry, StressAssessment, UserAssessmentMetrics

__all__ = [
    "Appointment",
    "CallSession",
    "Conversation",
    "ConversationParticipant",
    "GroupMember",
    "GroupSession",
    "GroupWaitingListEntry",
    "MentorReview",
    "Message",
    "MoodEntry",
    "MoodMentorProfile",
    "Notification",
    "PatientProfile",
    "ReviewNote",
    "ReviewRequestLink",
    "ReviewResponse",
    "SessionAttendance",
    "SessionEvent",
    "StressAssessment",
    "SupportGroup",
    "UserAssessmentMetrics",
]
