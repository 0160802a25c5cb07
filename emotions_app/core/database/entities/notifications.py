"""
Notification entity model.

In-app notifications replace the email and push channels of the platform;
clients poll them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import Field

from ..base import Base, dump_json, load_json, new_id, utc_now


class Notification(Base, table=True):
    """Entity for in-app notifications.

    Table: notifications
    """

    __tablename__ = "notifications"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=64, index=True)
    title: str = Field(max_length=255)
    message: str
    type: str = Field(max_length=32, index=True)
    is_read: bool = Field(default=False, index=True)
    action_url: Optional[str] = Field(default=None, max_length=1024)
    payload: str = Field(default="{}", description="JSON metadata attached to the notification")
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def get_payload_dict(self) -> Dict[str, Any]:
        return load_json(self.payload, {})

    def set_payload_dict(self, payload: Dict[str, Any]) -> None:
        self.payload = dump_json(payload)

    def __repr__(self) -> str:
        return f"Notification(id={self.id}, user_id={self.user_id}, type={self.type})"
