"""
Mentor review entity models.

Reviews are written by patients after a completed appointment and moderated
by the reviewed mentor, who may answer publicly and keep private notes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class MentorReview(Base, table=True):
    """Entity for a patient's review of a mood mentor.

    Table: mentor_reviews
    """

    __tablename__ = "mentor_reviews"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    appointment_id: str = Field(max_length=64, unique=True, index=True)
    mentor_id: str = Field(max_length=64, index=True)
    patient_id: str = Field(max_length=64, index=True)

    rating: int = Field(ge=1, le=5)
    content: str = Field(default="")
    is_anonymous: bool = Field(default=False)

    status: str = Field(default="published", max_length=16, index=True)
    rejection_reason: Optional[str] = Field(default=None)
    is_featured: bool = Field(default=False)
    display_order: int = Field(default=0)
    published_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"MentorReview(id={self.id}, mentor_id={self.mentor_id}, rating={self.rating})"


class ReviewResponse(Base, table=True):
    """Public answer of the mentor to a review (at most one per review).

    Table: review_responses
    """

    __tablename__ = "review_responses"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    review_id: str = Field(max_length=64, unique=True, index=True, foreign_key="mentor_reviews.id")
    mentor_id: str = Field(max_length=64, index=True)
    content: str
    is_published: bool = Field(default=True)
    published_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ReviewNote(Base, table=True):
    """Private note a mentor keeps about a review.

    Table: review_notes
    """

    __tablename__ = "review_notes"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    review_id: str = Field(max_length=64, index=True, foreign_key="mentor_reviews.id")
    mentor_id: str = Field(max_length=64, index=True)
    content: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ReviewRequestLink(Base, table=True):
    """Tokenised link inviting a patient to review a mentor.

    Table: review_request_links
    """

    __tablename__ = "review_request_links"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    mentor_id: str = Field(max_length=64, index=True)
    patient_id: Optional[str] = Field(default=None, max_length=64, index=True)
    appointment_id: Optional[str] = Field(default=None, max_length=64)
    token: str = Field(max_length=64, unique=True, index=True)
    expires_at: datetime
    is_used: bool = Field(default=False)
    used_at: Optional[datetime] = Field(default=None)
    email_sent: bool = Field(default=False)
    email_sent_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)

    def is_valid(self, now: datetime) -> bool:
        return not self.is_used and self.expires_at > now
