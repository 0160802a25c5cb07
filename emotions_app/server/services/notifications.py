"""
Notification Service.

Creates typed in-app notifications and serves the notification inbox. Other
services call the ``notify_*`` helpers after their primary write; delivery
problems there are logged and never undo the write that triggered them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from emotions_app.core.database.entities.notifications import Notification
from emotions_app.core.database.repositories.notifications import NotificationRepository
from emotions_app.core.exceptions import NotFoundError
from emotions_app.core.logging_config import get_logger
from emotions_app.core.models.domain.enums import NotificationType
from emotions_app.core.models.domain.identity import CurrentUser
from emotions_app.core.models.io.notifications import NotificationRead

logger = get_logger(__name__)


def to_notification_read(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id,
        user_id=notification.user_id,
        title=notification.title,
        message=notification.message,
        type=notification.type,
        is_read=notification.is_read,
        action_url=notification.action_url,
        metadata=notification.get_payload_dict(),
        created_at=notification.created_at,
    )


class NotificationService:
    def __init__(self, repository: NotificationRepository) -> None:
        self.repository = repository

    async def create(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType,
        action_url: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type.value,
            action_url=action_url,
        )
        notification.set_payload_dict(metadata or {})
        return await self.repository.create(notification)

    async def notify_safely(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType,
        action_url: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Notification]:
        """Create a notification, logging instead of raising on failure."""
        try:
            return await self.create(user_id, title, message, type, action_url, metadata)
        except Exception as e:
            logger.warning(
                f"Failed to deliver {type.value} notification to {user_id}: {e}",
                extra={"user_id": user_id, "notification_type": type.value},
            )
            try:
                await self.repository.session.rollback()
            except Exception:
                logger.debug("Rollback after failed notification also failed", exc_info=True)
            return None

    # ------------------------------------------------------------------
    # Typed constructors
    # ------------------------------------------------------------------

    async def notify_new_message(self, recipient_id: str, sender_name: str, conversation_id: str) -> None:
        await self.notify_safely(
            recipient_id,
            "New Message",
            f"You have a new message from {sender_name}",
            NotificationType.message,
            action_url=f"/messages/{conversation_id}",
            metadata={"conversation_id": conversation_id},
        )

    async def notify_group_membership(self, mentor_id: str, member_name: str, group: Any, joined: bool) -> None:
        verb = "joined" if joined else "left"
        await self.notify_safely(
            mentor_id,
            f"Member {verb.capitalize()} Group",
            f"{member_name} has {verb} your support group \"{group.name}\"",
            NotificationType.group,
            action_url=f"/mood-mentor-dashboard/groups/{group.id}",
            metadata={"group_id": group.id, "event": verb},
        )

    async def notify_group_session_started(self, member_ids: List[str], group: Any, session: Any) -> None:
        for member_id in member_ids:
            await self.notify_safely(
                member_id,
                "Group Session Started",
                f"\"{session.title}\" of {group.name} has started. Join now!",
                NotificationType.session,
                action_url=f"/patient-dashboard/groups/{group.id}/sessions/{session.id}",
                metadata={"group_id": group.id, "session_id": session.id},
            )

    async def notify_waiting_list_decision(self, user_id: str, group: Any, approved: bool) -> None:
        if approved:
            title, message = "Application Approved", f"You have been added to the support group \"{group.name}\""
        else:
            title, message = "Application Declined", f"Your application to \"{group.name}\" was not accepted"
        await self.notify_safely(
            user_id, title, message, NotificationType.group, metadata={"group_id": group.id, "approved": approved}
        )

    async def notify_appointment(
        self, user_id: str, title: str, message: str, appointment_id: str, event: str, dashboard: str
    ) -> None:
        await self.notify_safely(
            user_id,
            title,
            message,
            NotificationType.appointment,
            action_url=f"/{dashboard}/appointments",
            metadata={"appointment_id": appointment_id, "event": event},
        )

    async def notify_mood_alert(self, mentor_id: str, patient_name: str, entry: Any) -> None:
        await self.notify_safely(
            mentor_id,
            "Patient Mood Alert",
            f"{patient_name} logged a low mood ({entry.mood}, score {entry.score}/10)",
            NotificationType.alert,
            action_url=f"/mood-mentor-dashboard/patients/{entry.user_id}",
            metadata={"patient_id": entry.user_id, "mood_entry_id": entry.id, "score": entry.score},
        )

    async def notify_positive_streak(self, user_id: str, average: float) -> None:
        await self.notify_safely(
            user_id,
            "Great Progress!",
            f"Your mood has averaged {average:.1f}/10 over your recent check-ins. Keep it up!",
            NotificationType.mood_tracking,
            action_url="/patient-dashboard/mood-tracker",
            metadata={"average_score": round(average, 2)},
        )

    async def notify_review_received(self, mentor_id: str, review: Any) -> None:
        await self.notify_safely(
            mentor_id,
            "New Review",
            f"You received a new {review.rating}-star review",
            NotificationType.review,
            action_url="/mood-mentor-dashboard/reviews",
            metadata={"review_id": review.id, "rating": review.rating},
        )

    async def notify_review_request(self, patient_id: str, mentor_name: str, link: Any) -> None:
        await self.notify_safely(
            patient_id,
            "Share Your Experience",
            f"{mentor_name} would appreciate your feedback on your recent session",
            NotificationType.review,
            action_url=f"/review/{link.token}",
            metadata={"token": link.token, "appointment_id": link.appointment_id},
        )

    async def notify_welcome(self, user_id: str, name: str) -> None:
        await self.notify_safely(
            user_id,
            "Welcome to Emotions App",
            f"Hi {name}, your account is ready. We're glad you're here.",
            NotificationType.welcome,
        )

    # ------------------------------------------------------------------
    # Inbox
    # ------------------------------------------------------------------

    async def list(
        self, user: CurrentUser, unread_only: bool = False, limit: int = 20, offset: int = 0
    ) -> List[NotificationRead]:
        rows = await self.repository.list_for_user(user.id, unread_only=unread_only, limit=limit, offset=offset)
        return [to_notification_read(row) for row in rows]

    async def unread_count(self, user: CurrentUser) -> int:
        return await self.repository.count_unread(user.id)

    async def _owned(self, user: CurrentUser, notification_id: str) -> Notification:
        notification = await self.repository.get_by_id(notification_id)
        # Other users' notifications are reported as missing.
        if notification is None or notification.user_id != user.id:
            raise NotFoundError.for_entity("Notification", notification_id)
        return notification

    async def mark_read(self, user: CurrentUser, notification_id: str) -> NotificationRead:
        notification = await self._owned(user, notification_id)
        if not notification.is_read:
            notification.is_read = True
            notification = await self.repository.update(notification)
        return to_notification_read(notification)

    async def mark_all_read(self, user: CurrentUser) -> int:
        return await self.repository.mark_all_read(user.id)

    async def delete(self, user: CurrentUser, notification_id: str) -> None:
        notification = await self._owned(user, notification_id)
        await self.repository.delete(notification.id)
