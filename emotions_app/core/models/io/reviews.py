"""
Review I/O models for API requests and responses.
"""

from __future__ import annotations

import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.enums import ReviewSortField, ReviewStatus, SortOrder


class ReviewSubmit(BaseModel):
    """Schema for a patient reviewing a completed appointment."""

    appointment_id: str
    rating: int = Field(ge=1, le=5)
    content: str = Field(default="", max_length=5000)
    is_anonymous: bool = False
    token: Optional[str] = Field(default=None, description="Review request token, when the review came from a link")


class ReviewFilter(BaseModel):
    """Listing filter used by the mentor review dashboard and CSV export."""

    status: Optional[ReviewStatus] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    search: Optional[str] = None
    sort_by: ReviewSortField = ReviewSortField.date
    sort_order: SortOrder = SortOrder.desc


class ReviewStatusUpdate(BaseModel):
    status: ReviewStatus
    reason: Optional[str] = Field(default=None, description="Stored as the rejection reason when rejecting")


class ReviewResponseWrite(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
    is_published: bool = True


class ReviewNoteWrite(BaseModel):
    content: str = Field(min_length=1, max_length=5000)


class FeaturedUpdate(BaseModel):
    is_featured: bool


class DisplayOrderUpdate(BaseModel):
    display_order: int = Field(ge=0)


class ReviewRequestCreate(BaseModel):
    appointment_id: Optional[str] = None
    patient_id: Optional[str] = None


class ReviewResponseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    review_id: str
    content: str
    is_published: bool
    published_at: Optional[dt.datetime] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class ReviewNoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    review_id: str
    content: str
    created_at: dt.datetime
    updated_at: dt.datetime


class ReviewPatient(BaseModel):
    id: Optional[str] = None
    name: str = "Anonymous"
    avatar_url: Optional[str] = None


class ReviewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    appointment_id: str
    mentor_id: str
    rating: int
    content: str
    is_anonymous: bool
    status: ReviewStatus
    rejection_reason: Optional[str] = None
    is_featured: bool
    display_order: int
    published_at: Optional[dt.datetime] = None
    created_at: dt.datetime
    updated_at: dt.datetime
    patient: ReviewPatient = Field(default_factory=ReviewPatient)
    response: Optional[ReviewResponseRead] = None
    notes: List[ReviewNoteRead] = Field(default_factory=list)


class MonthlyReviewCount(BaseModel):
    month: str = Field(description="YYYY-MM")
    count: int


class ReviewStats(BaseModel):
    total_reviews: int
    average_rating: float
    rating_distribution: Dict[int, int]
    status_distribution: Dict[str, int]
    published_count: int
    pending_count: int
    rejected_count: int
    flagged_count: int
    reviews_over_time: List[MonthlyReviewCount]


class ReviewRequestLinkRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    mentor_id: str
    patient_id: Optional[str] = None
    appointment_id: Optional[str] = None
    token: str
    expires_at: dt.datetime
    is_used: bool
    used_at: Optional[dt.datetime] = None
    email_sent: bool
    email_sent_at: Optional[dt.datetime] = None
    created_at: dt.datetime
