"""
Service Dependencies.

FastAPI dependency providers for the caller identity, the per-request
repository bundle and the domain services built on top of it. Process-wide
collaborators (signup rate limiter, meeting room client) are singletons.
"""

from datetime import timedelta
from typing import Annotated, Callable, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from emotions_app.core.database.repositories.bundle import RepositoryBundle, build_repositories
from emotions_app.core.database.session import get_session
from emotions_app.core.models.domain.enums import ReviewStatus, UserRole
from emotions_app.core.models.domain.identity import CurrentUser
from emotions_app.core.models.domain.rate_limit import AttemptRateLimiter
from emotions_app.server.core.config import settings
from emotions_app.server.core.constant import USER_ID_HEADER, USER_ROLE_HEADER

from .analytics import AnalyticsService
from .appointments import AppointmentService
from .call_sessions import CallSessionService
from .group_sessions import GroupSessionService
from .meeting_rooms import MeetingRoomClient
from .messaging import MessagingService
from .notifications import NotificationService
from .profiles import ProfileService
from .reviews import ReviewService
from .support_groups import SupportGroupService
from .wellbeing import WellbeingService

# ----------------------------------------------------------------------
# Identity
# ----------------------------------------------------------------------


def get_current_user(
    x_user_id: Annotated[Optional[str], Header(alias=USER_ID_HEADER)] = None,
    x_user_role: Annotated[Optional[str], Header(alias=USER_ROLE_HEADER)] = None,
) -> CurrentUser:
    """Resolve the caller from the identity headers set by the auth gateway."""
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {USER_ID_HEADER} or {USER_ROLE_HEADER} header",
        )
    try:
        role = UserRole(x_user_role)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Unknown user role '{x_user_role}'")
    return CurrentUser(id=x_user_id, role=role)


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


def require_role(*roles: UserRole) -> Callable[[CurrentUser], CurrentUser]:
    """Build a dependency that only lets the given roles through."""

    def _checker(user: CurrentUserDep) -> CurrentUser:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"This action requires role: {', '.join(r.value for r in roles)}",
            )
        return user

    return _checker


PatientDep = Annotated[CurrentUser, Depends(require_role(UserRole.patient))]
MentorDep = Annotated[CurrentUser, Depends(require_role(UserRole.mood_mentor, UserRole.admin))]
AdminDep = Annotated[CurrentUser, Depends(require_role(UserRole.admin))]

# ----------------------------------------------------------------------
# Shared collaborators
# ----------------------------------------------------------------------

_rate_limiter: Optional[AttemptRateLimiter] = None
_meeting_rooms: Optional[MeetingRoomClient] = None


def get_rate_limiter() -> AttemptRateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        policy = settings.policy
        _rate_limiter = AttemptRateLimiter(
            max_attempts=policy.signup_max_attempts,
            window=timedelta(minutes=policy.signup_window_minutes),
        )
    return _rate_limiter


def get_meeting_room_client() -> MeetingRoomClient:
    global _meeting_rooms
    if _meeting_rooms is None:
        _meeting_rooms = MeetingRoomClient(settings.daily)
    return _meeting_rooms


def get_repositories(session: AsyncSession = Depends(get_session)) -> RepositoryBundle:
    return build_repositories(session)


RepositoriesDep = Annotated[RepositoryBundle, Depends(get_repositories)]
MeetingRoomsDep = Annotated[MeetingRoomClient, Depends(get_meeting_room_client)]

# ----------------------------------------------------------------------
# Services
# ----------------------------------------------------------------------


def get_notification_service(repos: RepositoriesDep) -> NotificationService:
    return NotificationService(repos.notifications)


NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]


def get_profile_service(
    repos: RepositoriesDep,
    notifications: NotificationServiceDep,
    rate_limiter: Annotated[AttemptRateLimiter, Depends(get_rate_limiter)],
) -> ProfileService:
    return ProfileService(repos, rate_limiter, notifications)


def get_messaging_service(repos: RepositoriesDep, notifications: NotificationServiceDep) -> MessagingService:
    return MessagingService(repos, notifications)


MessagingServiceDep = Annotated[MessagingService, Depends(get_messaging_service)]


def get_appointment_service(
    repos: RepositoriesDep,
    rooms: MeetingRoomsDep,
    notifications: NotificationServiceDep,
    messaging: MessagingServiceDep,
) -> AppointmentService:
    return AppointmentService(repos, rooms, notifications, messaging, settings.daily.room_expiry_seconds)


def get_support_group_service(repos: RepositoriesDep, notifications: NotificationServiceDep) -> SupportGroupService:
    return SupportGroupService(repos, notifications)


SupportGroupServiceDep = Annotated[SupportGroupService, Depends(get_support_group_service)]


def get_group_session_service(
    repos: RepositoriesDep,
    groups: SupportGroupServiceDep,
    rooms: MeetingRoomsDep,
    notifications: NotificationServiceDep,
) -> GroupSessionService:
    policy = settings.policy
    return GroupSessionService(
        repos,
        groups,
        rooms,
        notifications,
        absent_cutoff_hours=policy.attendance_absent_cutoff_hours,
        late_after_minutes=policy.attendance_late_after_minutes,
        room_expiry_seconds=settings.daily.room_expiry_seconds,
    )


def get_review_service(repos: RepositoriesDep, notifications: NotificationServiceDep) -> ReviewService:
    policy = settings.policy
    return ReviewService(
        repos,
        notifications,
        default_status=ReviewStatus(policy.review_default_status),
        request_ttl_days=policy.review_request_ttl_days,
    )


def get_wellbeing_service(repos: RepositoriesDep, notifications: NotificationServiceDep) -> WellbeingService:
    return WellbeingService(repos, notifications)


def get_call_session_service(repos: RepositoriesDep) -> CallSessionService:
    return CallSessionService(repos, stale_after_minutes=settings.policy.call_stale_after_minutes)


def get_analytics_service(repos: RepositoriesDep) -> AnalyticsService:
    return AnalyticsService(repos)


ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
AppointmentServiceDep = Annotated[AppointmentService, Depends(get_appointment_service)]
GroupSessionServiceDep = Annotated[GroupSessionService, Depends(get_group_session_service)]
ReviewServiceDep = Annotated[ReviewService, Depends(get_review_service)]
WellbeingServiceDep = Annotated[WellbeingService, Depends(get_wellbeing_service)]
CallSessionServiceDep = Annotated[CallSessionService, Depends(get_call_session_service)]
AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]
