"""
Support group entity models.

This module contains the support group itself, its membership rows and the
waiting list used when a group is full or invitation-only.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, dump_json, load_json, new_id, utc_now


class SupportGroupBase(Base):
    """Base fields for support group entity."""

    name: str = Field(max_length=255)
    description: str = Field(default="")
    group_type: str = Field(default="other", max_length=32, index=True)
    meeting_type: str = Field(default="online", max_length=16)
    max_participants: int = Field(default=20, ge=1, le=100)
    location: Optional[str] = Field(default=None, max_length=255)
    meeting_schedule: str = Field(default="[]", description="JSON list of {day, time, frequency}")
    group_rules: Optional[str] = Field(default=None)
    is_public: bool = Field(default=True)
    room_url: Optional[str] = Field(default=None, max_length=1024)


class SupportGroup(SupportGroupBase, table=True):
    """Entity for support groups.

    Table: support_groups
    """

    __tablename__ = "support_groups"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    mentor_id: str = Field(max_length=64, index=True, description="User id of the facilitating mentor")
    current_participants: int = Field(default=0, ge=0)
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def get_schedule_list(self) -> List[Dict[str, Any]]:
        return load_json(self.meeting_schedule, [])

    def set_schedule_list(self, schedule: List[Dict[str, Any]]) -> None:
        self.meeting_schedule = dump_json(schedule)

    @property
    def is_full(self) -> bool:
        return self.current_participants >= self.max_participants

    def __repr__(self) -> str:
        return f"SupportGroup(id={self.id}, name={self.name})"


class GroupMember(Base, table=True):
    """Membership of a user in a support group.

    Table: group_members
    """

    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    group_id: str = Field(max_length=64, index=True, foreign_key="support_groups.id")
    user_id: str = Field(max_length=64, index=True)
    status: str = Field(default="active", max_length=16)
    notes: Optional[str] = Field(default=None)
    joined_at: datetime = Field(default_factory=utc_now)
    last_activity: Optional[datetime] = Field(default=None)


class GroupWaitingListEntry(Base, table=True):
    """Application to join a support group.

    Table: group_waiting_list
    """

    __tablename__ = "group_waiting_list"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    group_id: str = Field(max_length=64, index=True, foreign_key="support_groups.id")
    user_id: str = Field(max_length=64, index=True)
    personal_message: Optional[str] = Field(default=None)
    status: str = Field(default="waiting", max_length=16, index=True)
    priority_score: int = Field(default=0)
    applied_at: datetime = Field(default_factory=utc_now)
    processed_at: Optional[datetime] = Field(default=None)
    processed_by: Optional[str] = Field(default=None, max_length=64)
