"""
Status transition tables.

Appointment and group session statuses used to be flipped by whichever
button the client rendered. The tables below are the single source of truth
for which changes are allowed; services call :func:`ensure_transition` before
touching a status column.
"""

from __future__ import annotations

from typing import Mapping, FrozenSet, TypeVar

from emotions_app.core.exceptions import InvalidStateTransitionError

from .enums import AppointmentStatus, GroupSessionStatus

StatusT = TypeVar("StatusT", AppointmentStatus, GroupSessionStatus)

APPOINTMENT_TRANSITIONS: Mapping[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.pending: frozenset(
        {
            AppointmentStatus.scheduled,
            AppointmentStatus.rescheduled,
            AppointmentStatus.cancelled,
            AppointmentStatus.completed,
        }
    ),
    AppointmentStatus.scheduled: frozenset(
        {AppointmentStatus.rescheduled, AppointmentStatus.cancelled, AppointmentStatus.completed}
    ),
    AppointmentStatus.rescheduled: frozenset(
        {
            AppointmentStatus.scheduled,
            AppointmentStatus.rescheduled,
            AppointmentStatus.cancelled,
            AppointmentStatus.completed,
        }
    ),
    AppointmentStatus.completed: frozenset(),
    AppointmentStatus.cancelled: frozenset(),
}

GROUP_SESSION_TRANSITIONS: Mapping[GroupSessionStatus, FrozenSet[GroupSessionStatus]] = {
    GroupSessionStatus.scheduled: frozenset({GroupSessionStatus.in_progress, GroupSessionStatus.cancelled}),
    GroupSessionStatus.in_progress: frozenset({GroupSessionStatus.completed, GroupSessionStatus.cancelled}),
    GroupSessionStatus.completed: frozenset(),
    GroupSessionStatus.cancelled: frozenset(),
}

# Appointment statuses that still count as an upcoming engagement.
OPEN_APPOINTMENT_STATUSES = frozenset(
    {AppointmentStatus.pending, AppointmentStatus.scheduled, AppointmentStatus.rescheduled}
)


def can_transition(table: Mapping[StatusT, FrozenSet[StatusT]], current: StatusT, target: StatusT) -> bool:
    return target in table.get(current, frozenset())


def ensure_transition(
    table: Mapping[StatusT, FrozenSet[StatusT]], current: str, target: str, entity: str
) -> StatusT:
    """Validate ``current -> target`` against ``table`` and return the target member.

    Raises:
        InvalidStateTransitionError: when the table does not allow the change or
            either value is not a known status.
    """
    status_enum = type(next(iter(table)))
    try:
        current_status = status_enum(current)
        target_status = status_enum(target)
    except ValueError:
        raise InvalidStateTransitionError(entity, str(current), str(target))
    if not can_transition(table, current_status, target_status):
        raise InvalidStateTransitionError(entity, current_status.value, target_status.value)
    return target_status
