"""
Appointment repository.
"""

from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.appointments import Appointment
from .base import QueryBuilder, SQLModelRepository


class AppointmentRepository(SQLModelRepository[Appointment]):
    """Repository for appointment data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Appointment)

    async def search(
        self,
        patient_id: Optional[str] = None,
        mentor_id: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Appointment]:
        """List appointments, newest date first.

        Args:
            patient_id: Restrict to one patient
            mentor_id: Restrict to one mentor
            statuses: Allowed status values
            start_date: Inclusive lower bound on the appointment date
            end_date: Inclusive upper bound on the appointment date
            limit: Maximum records to return
            offset: Records to skip
        """
        stmt = select(Appointment).order_by(
            Appointment.date.desc(), Appointment.start_time.desc()  # type: ignore
        )
        stmt = QueryBuilder.apply_filters(
            stmt,
            Appointment,
            {
                "patient_id": patient_id,
                "mentor_id": mentor_id,
                "status": list(statuses) if statuses else None,
            },
        )
        if start_date is not None:
            stmt = stmt.where(Appointment.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(Appointment.date <= end_date)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        return await self._all(stmt)

    async def latest_for_patient(self, patient_id: str, statuses: Iterable[str]) -> Optional[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.patient_id == patient_id, Appointment.status.in_(list(statuses)))  # type: ignore
            .order_by(Appointment.date.desc(), Appointment.start_time.desc())  # type: ignore
        )
        return await self._first(stmt)

    async def for_mentor_on(self, mentor_id: str, day: dt.date, exclude_statuses: Iterable[str] = ()) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.mentor_id == mentor_id, Appointment.date == day)
            .order_by(Appointment.start_time)
        )
        excluded = list(exclude_statuses)
        if excluded:
            stmt = stmt.where(Appointment.status.not_in(excluded))  # type: ignore
        return await self._all(stmt)
