"""
Admin analytics I/O models.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_users: int
    total_patients: int
    total_mentors: int
    active_patients: int
    active_mentors: int
    total_appointments: int
    completed_appointments: int
    cancelled_appointments: int
    total_mood_entries: int
    total_messages: int
    total_support_groups: int
    active_support_groups: int
    total_reviews: int
    average_rating: Optional[float] = None


class Distribution(BaseModel):
    counts: Dict[str, int]
    total: int


class MonthlyGrowth(BaseModel):
    month: str
    patients: int
    mentors: int


class UserGrowth(BaseModel):
    months: List[MonthlyGrowth]
