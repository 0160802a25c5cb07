"""
Admin Analytics Service.

Platform-wide counters and distributions for the admin dashboard.
"""

from __future__ import annotations

import datetime as dt
from typing import Dict, Optional

from emotions_app.core.database.base import utc_now
from emotions_app.core.database.repositories.bundle import RepositoryBundle
from emotions_app.core.models.domain.enums import AppointmentStatus
from emotions_app.core.models.io.analytics import DashboardStats, Distribution, MonthlyGrowth, UserGrowth

from .reviews import month_keys

UNSPECIFIED = "unspecified"


def _distribution(counts: Dict[Optional[str], int]) -> Distribution:
    normalized: Dict[str, int] = {}
    for key, total in counts.items():
        label = key or UNSPECIFIED
        normalized[label] = normalized.get(label, 0) + total
    return Distribution(counts=normalized, total=sum(normalized.values()))


class AnalyticsService:
    def __init__(self, repos: RepositoryBundle) -> None:
        self.repos = repos

    async def dashboard_stats(self) -> DashboardStats:
        repos = self.repos
        total_patients = await repos.patients.count()
        total_mentors = await repos.mentors.count()
        appointments_by_status = await repos.appointments.count_by("status")
        total_reviews, average = await repos.reviews.rating_summary()
        return DashboardStats(
            total_users=total_patients + total_mentors,
            total_patients=total_patients,
            total_mentors=total_mentors,
            active_patients=await repos.patients.count({"is_active": True}),
            active_mentors=await repos.mentors.count({"is_active": True}),
            total_appointments=sum(appointments_by_status.values()),
            completed_appointments=appointments_by_status.get(AppointmentStatus.completed.value, 0),
            cancelled_appointments=appointments_by_status.get(AppointmentStatus.cancelled.value, 0),
            total_mood_entries=await repos.mood_entries.count(),
            total_messages=await repos.messages.count(),
            total_support_groups=await repos.groups.count(),
            active_support_groups=await repos.groups.count({"is_active": True}),
            total_reviews=total_reviews,
            average_rating=round(average, 1) if average is not None else None,
        )

    async def mood_distribution(self) -> Distribution:
        return _distribution(await self.repos.mood_entries.count_by("mood_type"))

    async def gender_distribution(self) -> Distribution:
        return _distribution(await self.repos.patients.gender_distribution())

    async def appointment_status_breakdown(self) -> Distribution:
        return _distribution(await self.repos.appointments.count_by("status"))

    async def user_growth(self, months: int = 6, now: Optional[dt.datetime] = None) -> UserGrowth:
        now = now or utc_now()
        keys = month_keys(now, months)
        first_year, first_month = (int(part) for part in keys[0].split("-"))
        since = dt.datetime(first_year, first_month, 1)

        patients = {key: 0 for key in keys}
        mentors = {key: 0 for key in keys}
        for created in await self.repos.patients.created_since(since):
            key = created.strftime("%Y-%m")
            if key in patients:
                patients[key] += 1
        for created in await self.repos.mentors.created_since(since):
            key = created.strftime("%Y-%m")
            if key in mentors:
                mentors[key] += 1
        return UserGrowth(
            months=[MonthlyGrowth(month=key, patients=patients[key], mentors=mentors[key]) for key in keys]
        )
