"""
Repository bundle for dependency injection.

This module provides a convenience bundle of all repository instances
sharing one session, for easy dependency injection in services.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from .appointments import AppointmentRepository
from .call_sessions import CallSessionRepository, SessionEventRepository
from .group_sessions import GroupSessionRepository, SessionAttendanceRepository
from .messaging import ConversationParticipantRepository, ConversationRepository, MessageRepository
from .notifications import NotificationRepository
from .profiles import MoodMentorProfileRepository, PatientProfileRepository
from .reviews import (
    MentorReviewRepository,
    ReviewNoteRepository,
    ReviewRequestLinkRepository,
    ReviewResponseRepository,
)
from .support_groups import GroupMemberRepository, GroupWaitingListRepository, SupportGroupRepository
from .wellbeing import MoodEntryRepository, StressAssessmentRepository, UserAssessmentMetricsRepository


@dataclass(frozen=True)
class RepositoryBundle:
    """Convenience bundle of all SQL repositories for dependency injection."""

    patients: PatientProfileRepository
    mentors: MoodMentorProfileRepository
    appointments: AppointmentRepository
    groups: SupportGroupRepository
    members: GroupMemberRepository
    waiting_list: GroupWaitingListRepository
    group_sessions: GroupSessionRepository
    attendance: SessionAttendanceRepository
    reviews: MentorReviewRepository
    review_responses: ReviewResponseRepository
    review_notes: ReviewNoteRepository
    review_requests: ReviewRequestLinkRepository
    conversations: ConversationRepository
    participants: ConversationParticipantRepository
    messages: MessageRepository
    notifications: NotificationRepository
    mood_entries: MoodEntryRepository
    stress_assessments: StressAssessmentRepository
    assessment_metrics: UserAssessmentMetricsRepository
    call_sessions: CallSessionRepository
    session_events: SessionEventRepository


def build_repositories(session: AsyncSession) -> RepositoryBundle:
    """Build a RepositoryBundle whose repositories all share ``session``.

    Args:
        session: Async session for the current unit of work

    Returns:
        Bundle containing all repository instances
    """
    return RepositoryBundle(
        patients=PatientProfileRepository(session),
        mentors=MoodMentorProfileRepository(session),
        appointments=AppointmentRepository(session),
        groups=SupportGroupRepository(session),
        members=GroupMemberRepository(session),
        waiting_list=GroupWaitingListRepository(session),
        group_sessions=GroupSessionRepository(session),
        attendance=SessionAttendanceRepository(session),
        reviews=MentorReviewRepository(session),
        review_responses=ReviewResponseRepository(session),
        review_notes=ReviewNoteRepository(session),
        review_requests=ReviewRequestLinkRepository(session),
        conversations=ConversationRepository(session),
        participants=ConversationParticipantRepository(session),
        messages=MessageRepository(session),
        notifications=NotificationRepository(session),
        mood_entries=MoodEntryRepository(session),
        stress_assessments=StressAssessmentRepository(session),
        assessment_metrics=UserAssessmentMetricsRepository(session),
        call_sessions=CallSessionRepository(session),
        session_events=SessionEventRepository(session),
    )
