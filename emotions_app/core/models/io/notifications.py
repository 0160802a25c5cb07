"""
Notification I/O models for API responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ..domain.enums import NotificationType


class NotificationRead(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    is_read: bool
    action_url: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class UnreadCount(BaseModel):
    unread: int


class MarkAllReadResult(BaseModel):
    marked: int
