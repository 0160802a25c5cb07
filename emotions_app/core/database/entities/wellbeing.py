"""
Wellbeing tracking entity models.

Mood journal entries, stress assessments and the per-user metrics derived
from them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from sqlmodel import Field

from ..base import Base, dump_json, load_json, new_id, utc_now


class MoodEntry(Base, table=True):
    """Entity for mood journal entries.

    Table: mood_entries
    """

    __tablename__ = "mood_entries"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=64, index=True)
    mood: str = Field(max_length=64, description="Mood label, e.g. 'calm'")
    mood_type: str = Field(max_length=16, index=True, description="positive, neutral or negative")
    score: int = Field(ge=1, le=10)
    notes: str = Field(default="")
    tags: str = Field(default="[]", description="JSON list of tags")
    activities: str = Field(default="[]", description="JSON list of activities")
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def get_tags_list(self) -> List[str]:
        return load_json(self.tags, [])

    def set_tags_list(self, tags: List[str]) -> None:
        self.tags = dump_json(tags)

    def get_activities_list(self) -> List[str]:
        return load_json(self.activities, [])

    def set_activities_list(self, activities: List[str]) -> None:
        self.activities = dump_json(activities)


class StressAssessment(Base, table=True):
    """Entity for stress questionnaire results.

    Table: stress_assessments
    """

    __tablename__ = "stress_assessments"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=64, index=True)
    stress_score: float = Field(ge=0, le=10)
    health_percentage: float = Field(ge=0, le=100)
    status: str = Field(max_length=16)
    responses: str = Field(default="{}", description="JSON map of question id to answer")
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def get_responses_dict(self) -> Dict[str, Any]:
        return load_json(self.responses, {})

    def set_responses_dict(self, responses: Dict[Any, Any]) -> None:
        self.responses = dump_json({str(k): v for k, v in responses.items()})


class UserAssessmentMetrics(Base, table=True):
    """Rolling assessment metrics, one row per user.

    Table: user_assessment_metrics
    """

    __tablename__ = "user_assessment_metrics"

    user_id: str = Field(primary_key=True, max_length=64)
    stress_level: float = Field(default=0.0, ge=0, le=1)
    consistency: float = Field(default=0.0, ge=0, le=1)
    last_assessment_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
