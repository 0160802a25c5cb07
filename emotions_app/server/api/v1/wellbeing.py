"""
API endpoints for mood tracking and stress assessments.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Query, Response, status

from emotions_app.core.models.io.wellbeing import (
    AssessmentMetricsRead,
    MoodEntryCreate,
    MoodEntryRead,
    MoodEntryUpdate,
    StressAssessmentRead,
    StressAssessmentSubmit,
    StressQuestionRead,
)
from emotions_app.server.services.deps import CurrentUserDep, PatientDep, WellbeingServiceDep
from emotions_app.server.services.wellbeing import WellbeingService

router = APIRouter(tags=["wellbeing"])


@router.post(
    "/mood-entries",
    response_model=MoodEntryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Log Mood",
    description=(
        "Add a mood journal entry. A low score or negative mood alerts the patient's mentor; "
        "a run of good days earns the patient a congratulation."
    ),
)
async def add_mood_entry(data: MoodEntryCreate, patient: PatientDep, service: WellbeingServiceDep) -> MoodEntryRead:
    return await service.add_mood_entry(patient, data)


@router.get("/mood-entries", response_model=List[MoodEntryRead], summary="List Mood Entries")
async def list_mood_entries(
    user: CurrentUserDep,
    service: WellbeingServiceDep,
    start: Optional[dt.datetime] = None,
    end: Optional[dt.datetime] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    offset: Optional[int] = Query(default=None, ge=0),
) -> List[MoodEntryRead]:
    return await service.list_mood_entries(user, start=start, end=end, limit=limit, offset=offset)


@router.get("/mood-entries/{entry_id}", response_model=MoodEntryRead, summary="Get Mood Entry")
async def get_mood_entry(entry_id: str, user: CurrentUserDep, service: WellbeingServiceDep) -> MoodEntryRead:
    return await service.get_mood_entry(user, entry_id)


@router.patch("/mood-entries/{entry_id}", response_model=MoodEntryRead, summary="Update Mood Entry")
async def update_mood_entry(
    entry_id: str, patch: MoodEntryUpdate, user: CurrentUserDep, service: WellbeingServiceDep
) -> MoodEntryRead:
    return await service.update_mood_entry(user, entry_id, patch)


@router.delete("/mood-entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Mood Entry")
async def delete_mood_entry(entry_id: str, user: CurrentUserDep, service: WellbeingServiceDep) -> Response:
    await service.delete_mood_entry(user, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/stress-assessments/questions", response_model=List[StressQuestionRead], summary="Stress Questionnaire")
async def stress_questions() -> List[StressQuestionRead]:
    return WellbeingService.questions()


@router.post(
    "/stress-assessments",
    response_model=StressAssessmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Stress Assessment",
    responses={422: {"description": "Missing, unknown or out-of-range answers"}},
)
async def submit_assessment(
    body: StressAssessmentSubmit, patient: PatientDep, service: WellbeingServiceDep
) -> StressAssessmentRead:
    """
    Score a completed stress questionnaire.

    Every question must be answered with a value from 1 (never) to 5 (very
    often). The result is stored and the caller's assessment metrics are
    refreshed.
    """
    return await service.submit_assessment(patient, body.responses)


@router.get("/stress-assessments", response_model=List[StressAssessmentRead], summary="Assessment History")
async def assessment_history(user: CurrentUserDep, service: WellbeingServiceDep) -> List[StressAssessmentRead]:
    return await service.assessment_history(user)


@router.get("/stress-assessments/metrics", response_model=AssessmentMetricsRead, summary="Assessment Metrics")
async def assessment_metrics(user: CurrentUserDep, service: WellbeingServiceDep) -> AssessmentMetricsRead:
    return await service.assessment_metrics(user)
