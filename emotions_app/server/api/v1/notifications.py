"""
API endpoints for the in-app notification inbox.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, Response, status

from emotions_app.core.models.io.notifications import MarkAllReadResult, NotificationRead, UnreadCount
from emotions_app.server.services.deps import CurrentUserDep, NotificationServiceDep

router = APIRouter(tags=["notifications"])


@router.get("", response_model=List[NotificationRead], summary="List Notifications")
async def list_notifications(
    user: CurrentUserDep,
    service: NotificationServiceDep,
    unread_only: bool = False,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> List[NotificationRead]:
    return await service.list(user, unread_only=unread_only, limit=limit, offset=offset)


@router.get("/unread-count", response_model=UnreadCount, summary="Unread Count")
async def unread_count(user: CurrentUserDep, service: NotificationServiceDep) -> UnreadCount:
    return UnreadCount(unread=await service.unread_count(user))


@router.post("/read-all", response_model=MarkAllReadResult, summary="Mark All Read")
async def mark_all_read(user: CurrentUserDep, service: NotificationServiceDep) -> MarkAllReadResult:
    return MarkAllReadResult(marked=await service.mark_all_read(user))


@router.post("/{notification_id}/read", response_model=NotificationRead, summary="Mark Read")
async def mark_read(notification_id: str, user: CurrentUserDep, service: NotificationServiceDep) -> NotificationRead:
    return await service.mark_read(user, notification_id)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Notification")
async def delete_notification(notification_id: str, user: CurrentUserDep, service: NotificationServiceDep) -> Response:
    await service.delete(user, notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
