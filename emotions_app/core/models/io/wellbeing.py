"""
Mood and stress tracking I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..domain.enums import MoodType, StressLevel


class MoodEntryCreate(BaseModel):
    mood: str = Field(min_length=1, max_length=64)
    mood_type: MoodType
    score: int = Field(ge=1, le=10)
    notes: str = ""
    tags: List[str] = Field(default_factory=list)
    activities: List[str] = Field(default_factory=list)


class MoodEntryUpdate(BaseModel):
    mood: Optional[str] = Field(default=None, min_length=1, max_length=64)
    mood_type: Optional[MoodType] = None
    score: Optional[int] = Field(default=None, ge=1, le=10)
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    activities: Optional[List[str]] = None


class MoodEntryRead(BaseModel):
    id: str
    user_id: str
    mood: str
    mood_type: MoodType
    score: int
    notes: str
    tags: List[str]
    activities: List[str]
    created_at: datetime
    updated_at: datetime


class StressQuestionRead(BaseModel):
    id: int
    text: str
    category: str
    weight: float


class StressAssessmentSubmit(BaseModel):
    responses: Dict[int, int] = Field(description="Question id mapped to an answer between 1 and 5")


class StressAssessmentRead(BaseModel):
    id: str
    user_id: str
    stress_score: float
    health_percentage: float
    status: StressLevel
    responses: Dict[int, int]
    created_at: datetime


class AssessmentMetricsRead(BaseModel):
    user_id: str
    stress_level: float
    consistency: float
    last_assessment_at: datetime
