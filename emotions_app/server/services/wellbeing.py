"""
Wellbeing Service.

Mood journal and stress assessments. Adding a mood entry may alert the
patient's mentor about a low mood or congratulate the patient on a run of
good days.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from emotions_app.core.database.base import utc_now
from emotions_app.core.database.entities.wellbeing import MoodEntry, StressAssessment, UserAssessmentMetrics
from emotions_app.core.database.repositories.bundle import RepositoryBundle
from emotions_app.core.exceptions import NotFoundError
from emotions_app.core.logging_config import get_logger
from emotions_app.core.models.domain.enums import MoodType
from emotions_app.core.models.domain.identity import CurrentUser
from emotions_app.core.models.domain.stress import QUESTIONS, score_responses
from emotions_app.core.models.domain.transitions import OPEN_APPOINTMENT_STATUSES
from emotions_app.core.models.io.wellbeing import (
    AssessmentMetricsRead,
    MoodEntryCreate,
    MoodEntryRead,
    MoodEntryUpdate,
    StressAssessmentRead,
    StressQuestionRead,
)
from emotions_app.core.monitoring import log_domain_event

from .notifications import NotificationService
from .profiles import display_name

logger = get_logger(__name__)

LOW_MOOD_MAX_SCORE = 3
STREAK_MIN_SCORE = 8
STREAK_WINDOW = 7
STREAK_MIN_ENTRIES = 5
STREAK_MIN_AVERAGE = 7.0
CONSISTENCY_DAYS = 7


def to_mood_read(entry: MoodEntry) -> MoodEntryRead:
    return MoodEntryRead(
        id=entry.id,
        user_id=entry.user_id,
        mood=entry.mood,
        mood_type=entry.mood_type,
        score=entry.score,
        notes=entry.notes,
        tags=entry.get_tags_list(),
        activities=entry.get_activities_list(),
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )


def to_assessment_read(assessment: StressAssessment) -> StressAssessmentRead:
    return StressAssessmentRead(
        id=assessment.id,
        user_id=assessment.user_id,
        stress_score=assessment.stress_score,
        health_percentage=assessment.health_percentage,
        status=assessment.status,
        responses={int(k): v for k, v in assessment.get_responses_dict().items()},
        created_at=assessment.created_at,
    )


class WellbeingService:
    def __init__(self, repos: RepositoryBundle, notifications: NotificationService) -> None:
        self.repos = repos
        self.notifications = notifications

    # ------------------------------------------------------------------
    # Mood journal
    # ------------------------------------------------------------------

    async def _owned_entry(self, user: CurrentUser, entry_id: str) -> MoodEntry:
        entry = await self.repos.mood_entries.get_by_id(entry_id)
        if entry is None or entry.user_id != user.id:
            raise NotFoundError.for_entity("Mood entry", entry_id)
        return entry

    async def add_mood_entry(self, user: CurrentUser, data: MoodEntryCreate) -> MoodEntryRead:
        entry = MoodEntry(
            user_id=user.id,
            mood=data.mood,
            mood_type=data.mood_type.value,
            score=data.score,
            notes=data.notes,
        )
        entry.set_tags_list(data.tags)
        entry.set_activities_list(data.activities)
        entry = await self.repos.mood_entries.create(entry)
        log_domain_event("mood.logged", user_id=user.id, score=entry.score, mood_type=entry.mood_type)

        await self._check_mood_alert(entry)
        await self._check_positive_streak(entry)
        return to_mood_read(entry)

    async def _check_mood_alert(self, entry: MoodEntry) -> bool:
        if entry.score > LOW_MOOD_MAX_SCORE and entry.mood_type != MoodType.negative.value:
            return False
        appointment = await self.repos.appointments.latest_for_patient(
            entry.user_id, [status.value for status in OPEN_APPOINTMENT_STATUSES]
        )
        if appointment is None:
            logger.debug(f"No open appointment for {entry.user_id}, skipping mood alert")
            return False
        await self.notifications.notify_mood_alert(
            appointment.mentor_id, await display_name(self.repos, entry.user_id), entry
        )
        return True

    async def _check_positive_streak(self, entry: MoodEntry) -> bool:
        if entry.score < STREAK_MIN_SCORE or entry.mood_type != MoodType.positive.value:
            return False
        recent = await self.repos.mood_entries.latest_for_user(entry.user_id, STREAK_WINDOW)
        if len(recent) < STREAK_MIN_ENTRIES:
            return False
        average = sum(e.score for e in recent) / len(recent)
        if average < STREAK_MIN_AVERAGE:
            return False
        await self.notifications.notify_positive_streak(entry.user_id, average)
        return True

    async def list_mood_entries(
        self,
        user: CurrentUser,
        start: Optional[dt.datetime] = None,
        end: Optional[dt.datetime] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[MoodEntryRead]:
        rows = await self.repos.mood_entries.list_for_user(user.id, start=start, end=end, limit=limit, offset=offset)
        return [to_mood_read(row) for row in rows]

    async def get_mood_entry(self, user: CurrentUser, entry_id: str) -> MoodEntryRead:
        return to_mood_read(await self._owned_entry(user, entry_id))

    async def update_mood_entry(self, user: CurrentUser, entry_id: str, patch: MoodEntryUpdate) -> MoodEntryRead:
        entry = await self._owned_entry(user, entry_id)
        changes = patch.model_dump(exclude_unset=True, mode="json")
        tags = changes.pop("tags", None)
        activities = changes.pop("activities", None)
        for key, value in changes.items():
            setattr(entry, key, value)
        if tags is not None:
            entry.set_tags_list(tags)
        if activities is not None:
            entry.set_activities_list(activities)
        return to_mood_read(await self.repos.mood_entries.update(entry))

    async def delete_mood_entry(self, user: CurrentUser, entry_id: str) -> None:
        entry = await self._owned_entry(user, entry_id)
        await self.repos.mood_entries.delete(entry.id)

    # ------------------------------------------------------------------
    # Stress assessments
    # ------------------------------------------------------------------

    @staticmethod
    def questions() -> List[StressQuestionRead]:
        return [StressQuestionRead(id=q.id, text=q.text, category=q.category, weight=q.weight) for q in QUESTIONS]

    async def submit_assessment(
        self, user: CurrentUser, responses: dict, now: Optional[dt.datetime] = None
    ) -> StressAssessmentRead:
        result = score_responses(responses)
        now = now or utc_now()
        assessment = StressAssessment(
            user_id=user.id,
            stress_score=result.stress_score,
            health_percentage=result.health_percentage,
            status=result.status.value,
            created_at=now,
            updated_at=now,
        )
        assessment.set_responses_dict(responses)
        assessment = await self.repos.stress_assessments.create(assessment)
        await self._update_metrics(user.id, result.stress_score, now)
        log_domain_event(
            "stress.assessed", user_id=user.id, stress_score=result.stress_score, status=result.status.value
        )
        return to_assessment_read(assessment)

    async def _update_metrics(self, user_id: str, stress_score: float, now: dt.datetime) -> UserAssessmentMetrics:
        since = now - dt.timedelta(days=CONSISTENCY_DAYS)
        recent = await self.repos.stress_assessments.list_for_user(user_id, since=since)
        active_days = {a.created_at.date() for a in recent}
        consistency = round(min(len(active_days), CONSISTENCY_DAYS) / CONSISTENCY_DAYS, 4)

        metrics = await self.repos.assessment_metrics.get_by_id(user_id)
        if metrics is None:
            metrics = UserAssessmentMetrics(user_id=user_id)
        metrics.stress_level = round(stress_score / 10, 4)
        metrics.consistency = consistency
        metrics.last_assessment_at = now
        return await self.repos.assessment_metrics.update(metrics)

    async def assessment_history(self, user: CurrentUser) -> List[StressAssessmentRead]:
        return [to_assessment_read(a) for a in await self.repos.stress_assessments.list_for_user(user.id)]

    async def assessment_metrics(self, user: CurrentUser) -> AssessmentMetricsRead:
        metrics = await self.repos.assessment_metrics.get_by_id(user.id)
        if metrics is None:
            raise NotFoundError(f"No stress assessments recorded for user {user.id}")
        return AssessmentMetricsRead(
            user_id=metrics.user_id,
            stress_level=metrics.stress_level,
            consistency=metrics.consistency,
            last_assessment_at=metrics.last_assessment_at,
        )
