"""
Admin-only API endpoints: platform analytics and maintenance jobs.
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from emotions_app.core.models.io.analytics import DashboardStats, Distribution, UserGrowth
from emotions_app.core.models.io.call_sessions import CleanupResult
from emotions_app.core.models.io.support_groups import ResetSessionDataResult, SyncCountsResult
from emotions_app.server.services.deps import (
    AdminDep,
    AnalyticsServiceDep,
    CallSessionServiceDep,
    GroupSessionServiceDep,
    SupportGroupServiceDep,
)

router = APIRouter(tags=["admin"])


@router.get(
    "/analytics/dashboard",
    response_model=DashboardStats,
    summary="Dashboard Statistics",
    description="Platform-wide totals for users, appointments, mood entries, messages, groups and reviews.",
)
async def dashboard_stats(admin: AdminDep, service: AnalyticsServiceDep) -> DashboardStats:
    return await service.dashboard_stats()


@router.get("/analytics/mood-distribution", response_model=Distribution, summary="Mood Distribution")
async def mood_distribution(admin: AdminDep, service: AnalyticsServiceDep) -> Distribution:
    return await service.mood_distribution()


@router.get("/analytics/gender-distribution", response_model=Distribution, summary="Gender Distribution")
async def gender_distribution(admin: AdminDep, service: AnalyticsServiceDep) -> Distribution:
    return await service.gender_distribution()


@router.get("/analytics/appointment-status", response_model=Distribution, summary="Appointment Status Breakdown")
async def appointment_status(admin: AdminDep, service: AnalyticsServiceDep) -> Distribution:
    return await service.appointment_status_breakdown()


@router.get("/analytics/user-growth", response_model=UserGrowth, summary="User Growth")
async def user_growth(
    admin: AdminDep, service: AnalyticsServiceDep, months: int = Query(default=6, ge=1, le=24)
) -> UserGrowth:
    """New patients and mentors per calendar month, oldest first."""
    return await service.user_growth(months=months)


@router.post(
    "/support-groups/sync-counts",
    response_model=SyncCountsResult,
    summary="Sync Member Counts",
    description="Recompute every group's participant count from active memberships.",
)
async def sync_counts(admin: AdminDep, service: SupportGroupServiceDep) -> SyncCountsResult:
    return await service.sync_member_counts()


@router.post(
    "/support-groups/reset-sessions",
    response_model=ResetSessionDataResult,
    summary="Reset Group Session Data",
    description="Delete every group session and attendance record, then resync member counts.",
)
async def reset_sessions(admin: AdminDep, service: GroupSessionServiceDep) -> ResetSessionDataResult:
    return await service.reset_all_session_data()


@router.post("/call-sessions/cleanup", response_model=CleanupResult, summary="Disconnect Stale Calls")
async def cleanup_calls(admin: AdminDep, service: CallSessionServiceDep) -> CleanupResult:
    return CleanupResult(disconnected=await service.cleanup_stale())
