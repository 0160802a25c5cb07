"""
Review repositories.

Data access for mentor reviews, mentor responses, private notes and review
request links.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.reviews import MentorReview, ReviewNote, ReviewRequestLink, ReviewResponse
from .base import SQLModelRepository


class MentorReviewRepository(SQLModelRepository[MentorReview]):
    """Repository for mentor review data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, MentorReview)

    async def get_by_appointment(self, appointment_id: str) -> Optional[MentorReview]:
        return await self._first(select(MentorReview).where(MentorReview.appointment_id == appointment_id))

    async def list_for_mentor(
        self,
        mentor_id: str,
        status: Optional[str] = None,
        rating: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[MentorReview]:
        """List a mentor's reviews, newest first; sorting beyond that happens in the service."""
        stmt = (
            select(MentorReview)
            .where(MentorReview.mentor_id == mentor_id)
            .order_by(MentorReview.created_at.desc())  # type: ignore
        )
        if status is not None:
            stmt = stmt.where(MentorReview.status == status)
        if rating is not None:
            stmt = stmt.where(MentorReview.rating == rating)
        if start is not None:
            stmt = stmt.where(MentorReview.created_at >= start)
        if end is not None:
            stmt = stmt.where(MentorReview.created_at <= end)
        return await self._all(stmt)

    async def list_published(self, mentor_id: str) -> List[MentorReview]:
        stmt = (
            select(MentorReview)
            .where(MentorReview.mentor_id == mentor_id, MentorReview.status == "published")
            .order_by(
                MentorReview.is_featured.desc(),  # type: ignore
                MentorReview.display_order,
                MentorReview.created_at.desc(),  # type: ignore
            )
        )
        return await self._all(stmt)

    async def rating_summary(self, mentor_id: Optional[str] = None) -> tuple[int, Optional[float]]:
        """Count and average rating of published reviews, for one mentor or overall."""
        stmt = select(func.count(), func.avg(MentorReview.rating)).where(MentorReview.status == "published")
        if mentor_id is not None:
            stmt = stmt.where(MentorReview.mentor_id == mentor_id)
        total, average = (await self.session.execute(stmt)).one()
        return int(total or 0), float(average) if average is not None else None


class ReviewResponseRepository(SQLModelRepository[ReviewResponse]):
    """Repository for mentor responses to reviews."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ReviewResponse)

    async def get_by_review(self, review_id: str) -> Optional[ReviewResponse]:
        return await self._first(select(ReviewResponse).where(ReviewResponse.review_id == review_id))

    async def map_for_reviews(self, review_ids: List[str]) -> Dict[str, ReviewResponse]:
        if not review_ids:
            return {}
        rows = await self._all(select(ReviewResponse).where(ReviewResponse.review_id.in_(review_ids)))  # type: ignore
        return {row.review_id: row for row in rows}


class ReviewNoteRepository(SQLModelRepository[ReviewNote]):
    """Repository for private review notes."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ReviewNote)

    async def map_for_reviews(self, review_ids: List[str]) -> Dict[str, List[ReviewNote]]:
        notes: Dict[str, List[ReviewNote]] = {review_id: [] for review_id in review_ids}
        if not review_ids:
            return notes
        rows = await self._all(
            select(ReviewNote)
            .where(ReviewNote.review_id.in_(review_ids))  # type: ignore
            .order_by(ReviewNote.created_at)
        )
        for row in rows:
            notes[row.review_id].append(row)
        return notes


class ReviewRequestLinkRepository(SQLModelRepository[ReviewRequestLink]):
    """Repository for review request links."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ReviewRequestLink)

    async def get_by_token(self, token: str) -> Optional[ReviewRequestLink]:
        return await self._first(select(ReviewRequestLink).where(ReviewRequestLink.token == token))

    async def list_for_mentor(self, mentor_id: str) -> List[ReviewRequestLink]:
        return await self._all(
            select(ReviewRequestLink)
            .where(ReviewRequestLink.mentor_id == mentor_id)
            .order_by(ReviewRequestLink.created_at.desc())  # type: ignore
        )
