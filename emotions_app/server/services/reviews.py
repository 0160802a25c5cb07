"""
Review Service.

Patients review mentors after a completed appointment. Mentors moderate
their own reviews: publish or reject, answer publicly, keep private notes,
feature and order them, and invite patients to leave feedback through
tokenised request links.
"""

from __future__ import annotations

import csv
import datetime as dt
import io
import secrets
from typing import Dict, List, Optional

from emotions_app.core.database.base import utc_now
from emotions_app.core.database.entities.appointments import Appointment
from emotions_app.core.database.entities.reviews import MentorReview, ReviewNote, ReviewRequestLink, ReviewResponse
from emotions_app.core.database.repositories.bundle import RepositoryBundle
from emotions_app.core.exceptions import ConflictError, DomainValidationError, NotFoundError, PermissionDeniedError
from emotions_app.core.logging_config import get_logger
from emotions_app.core.models.domain.enums import AppointmentStatus, ReviewSortField, ReviewStatus, SortOrder
from emotions_app.core.models.domain.identity import CurrentUser
from emotions_app.core.models.io.reviews import (
    MonthlyReviewCount,
    ReviewFilter,
    ReviewNoteRead,
    ReviewPatient,
    ReviewRead,
    ReviewRequestLinkRead,
    ReviewResponseRead,
    ReviewStats,
    ReviewSubmit,
)
from emotions_app.core.monitoring import log_domain_event

from .notifications import NotificationService
from .profiles import display_name

logger = get_logger(__name__)

CSV_HEADER = ["ID", "Patient", "Rating", "Content", "Status", "Created At", "Response"]
STATS_MONTHS = 6


def month_keys(now: dt.datetime, months: int) -> List[str]:
    """``YYYY-MM`` keys of the last ``months`` calendar months, oldest first."""
    year, month = now.year, now.month
    keys = []
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


class ReviewService:
    def __init__(
        self,
        repos: RepositoryBundle,
        notifications: NotificationService,
        default_status: ReviewStatus = ReviewStatus.published,
        request_ttl_days: int = 30,
    ) -> None:
        self.repos = repos
        self.notifications = notifications
        self.default_status = default_status
        self.request_ttl = dt.timedelta(days=request_ttl_days)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load(self, review_id: str) -> MentorReview:
        review = await self.repos.reviews.get_by_id(review_id)
        if review is None:
            raise NotFoundError.for_entity("Review", review_id)
        return review

    async def _load_owned(self, mentor: CurrentUser, review_id: str) -> MentorReview:
        review = await self._load(review_id)
        if review.mentor_id != mentor.id and not mentor.is_admin:
            raise PermissionDeniedError("You can only manage your own reviews")
        return review

    async def _to_reads(self, reviews: List[MentorReview], include_notes: bool) -> List[ReviewRead]:
        review_ids = [r.id for r in reviews]
        patients = await self.repos.patients.get_many_by_user_ids(
            list({r.patient_id for r in reviews if not r.is_anonymous})
        )
        responses = await self.repos.review_responses.map_for_reviews(review_ids)
        notes = await self.repos.review_notes.map_for_reviews(review_ids) if include_notes else {}

        reads = []
        for review in reviews:
            read = ReviewRead.model_validate(review)
            patient = None if review.is_anonymous else patients.get(review.patient_id)
            if patient is not None:
                read.patient = ReviewPatient(
                    id=review.patient_id, name=patient.full_name, avatar_url=patient.avatar_url
                )
            elif not review.is_anonymous:
                read.patient = ReviewPatient(id=review.patient_id, name="Patient")
            response = responses.get(review.id)
            if response is not None:
                read.response = ReviewResponseRead.model_validate(response)
            read.notes = [ReviewNoteRead.model_validate(n) for n in notes.get(review.id, [])]
            reads.append(read)
        return reads

    @staticmethod
    def _apply_status(review: MentorReview, status: ReviewStatus, reason: Optional[str] = None) -> None:
        review.status = status.value
        if status == ReviewStatus.published and review.published_at is None:
            review.published_at = utc_now()
        review.rejection_reason = reason if status == ReviewStatus.rejected else None

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def can_patient_review(self, appointment: Appointment, patient_id: str) -> Optional[str]:
        """Return the reason the patient cannot review, or None when they can."""
        if appointment.patient_id != patient_id:
            return "You can only review your own appointments"
        if appointment.status != AppointmentStatus.completed.value:
            return "Only completed appointments can be reviewed"
        if appointment.review_submitted or await self.repos.reviews.get_by_appointment(appointment.id) is not None:
            return "This appointment has already been reviewed"
        return None

    async def _consume_token(self, token: str, mentor_id: str) -> None:
        link = await self.repos.review_requests.get_by_token(token)
        if link is None or link.mentor_id != mentor_id or not link.is_valid(utc_now()):
            logger.info(f"Ignoring invalid review request token for mentor {mentor_id}")
            return
        link.is_used = True
        link.used_at = utc_now()
        await self.repos.review_requests.update(link)

    async def submit_review(self, patient: CurrentUser, data: ReviewSubmit) -> ReviewRead:
        appointment = await self.repos.appointments.get_by_id(data.appointment_id)
        if appointment is None:
            raise NotFoundError.for_entity("Appointment", data.appointment_id)
        reason = await self.can_patient_review(appointment, patient.id)
        if reason is not None:
            if appointment.patient_id != patient.id:
                raise PermissionDeniedError(reason)
            raise ConflictError(reason)
        if not 1 <= data.rating <= 5:
            raise DomainValidationError("Rating must be between 1 and 5")

        review = MentorReview(
            appointment_id=appointment.id,
            mentor_id=appointment.mentor_id,
            patient_id=patient.id,
            rating=data.rating,
            content=data.content.strip(),
            is_anonymous=data.is_anonymous,
        )
        self._apply_status(review, self.default_status)
        review = await self.repos.reviews.create(review)

        appointment.review_submitted = True
        await self.repos.appointments.update(appointment)
        if data.token:
            await self._consume_token(data.token, appointment.mentor_id)

        log_domain_event("review.submitted", review_id=review.id, mentor_id=review.mentor_id, rating=review.rating)
        await self.notifications.notify_review_received(review.mentor_id, review)
        return (await self._to_reads([review], include_notes=False))[0]

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def _filtered(self, mentor_id: str, review_filter: ReviewFilter) -> List[MentorReview]:
        start = dt.datetime.combine(review_filter.start_date, dt.time.min) if review_filter.start_date else None
        end = dt.datetime.combine(review_filter.end_date, dt.time.max) if review_filter.end_date else None
        reviews = await self.repos.reviews.list_for_mentor(
            mentor_id,
            status=review_filter.status.value if review_filter.status else None,
            rating=review_filter.rating,
            start=start,
            end=end,
        )

        if review_filter.search:
            needle = review_filter.search.strip().lower()
            patients = await self.repos.patients.get_many_by_user_ids(list({r.patient_id for r in reviews}))

            def matches(review: MentorReview) -> bool:
                if needle in review.content.lower():
                    return True
                patient = patients.get(review.patient_id)
                return not review.is_anonymous and patient is not None and needle in patient.full_name.lower()

            reviews = [r for r in reviews if matches(r)]

        sort_key = {
            ReviewSortField.date: lambda r: r.created_at,
            ReviewSortField.rating: lambda r: (r.rating, r.created_at),
            ReviewSortField.status: lambda r: (r.status, r.created_at),
        }[review_filter.sort_by]
        return sorted(reviews, key=sort_key, reverse=review_filter.sort_order == SortOrder.desc)

    async def list_reviews(self, mentor: CurrentUser, review_filter: ReviewFilter) -> List[ReviewRead]:
        return await self._to_reads(await self._filtered(mentor.id, review_filter), include_notes=True)

    async def list_public_reviews(self, mentor_id: str) -> List[ReviewRead]:
        return await self._to_reads(await self.repos.reviews.list_published(mentor_id), include_notes=False)

    async def get_review(self, user: CurrentUser, review_id: str) -> ReviewRead:
        review = await self._load(review_id)
        is_owner = review.mentor_id == user.id or user.is_admin
        if not is_owner and review.patient_id != user.id and review.status != ReviewStatus.published.value:
            raise NotFoundError.for_entity("Review", review_id)
        return (await self._to_reads([review], include_notes=is_owner))[0]

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------

    async def update_status(
        self, mentor: CurrentUser, review_id: str, status: ReviewStatus, reason: Optional[str] = None
    ) -> ReviewRead:
        review = await self._load_owned(mentor, review_id)
        self._apply_status(review, status, reason)
        review = await self.repos.reviews.update(review)
        log_domain_event("review.status_changed", review_id=review.id, status=status.value)
        return (await self._to_reads([review], include_notes=True))[0]

    async def respond(
        self, mentor: CurrentUser, review_id: str, content: str, is_published: bool = True
    ) -> ReviewResponseRead:
        review = await self._load_owned(mentor, review_id)
        response = await self.repos.review_responses.get_by_review(review.id)
        if response is None:
            response = ReviewResponse(review_id=review.id, mentor_id=review.mentor_id, content=content)
        response.content = content
        response.is_published = is_published
        if is_published and response.published_at is None:
            response.published_at = utc_now()
        response = await self.repos.review_responses.update(response)
        return ReviewResponseRead.model_validate(response)

    async def delete_response(self, mentor: CurrentUser, response_id: str) -> None:
        response = await self.repos.review_responses.get_by_id(response_id)
        if response is None:
            raise NotFoundError.for_entity("Review response", response_id)
        await self._load_owned(mentor, response.review_id)
        await self.repos.review_responses.delete(response.id)

    async def add_note(self, mentor: CurrentUser, review_id: str, content: str) -> ReviewNoteRead:
        review = await self._load_owned(mentor, review_id)
        note = await self.repos.review_notes.create(
            ReviewNote(review_id=review.id, mentor_id=mentor.id, content=content)
        )
        return ReviewNoteRead.model_validate(note)

    async def _owned_note(self, mentor: CurrentUser, note_id: str) -> ReviewNote:
        note = await self.repos.review_notes.get_by_id(note_id)
        if note is None or (note.mentor_id != mentor.id and not mentor.is_admin):
            raise NotFoundError.for_entity("Review note", note_id)
        return note

    async def update_note(self, mentor: CurrentUser, note_id: str, content: str) -> ReviewNoteRead:
        note = await self._owned_note(mentor, note_id)
        note.content = content
        return ReviewNoteRead.model_validate(await self.repos.review_notes.update(note))

    async def delete_note(self, mentor: CurrentUser, note_id: str) -> None:
        note = await self._owned_note(mentor, note_id)
        await self.repos.review_notes.delete(note.id)

    async def toggle_featured(self, mentor: CurrentUser, review_id: str, is_featured: bool) -> ReviewRead:
        review = await self._load_owned(mentor, review_id)
        review.is_featured = is_featured
        review = await self.repos.reviews.update(review)
        return (await self._to_reads([review], include_notes=True))[0]

    async def set_display_order(self, mentor: CurrentUser, review_id: str, display_order: int) -> ReviewRead:
        if display_order < 0:
            raise DomainValidationError("Display order must not be negative")
        review = await self._load_owned(mentor, review_id)
        review.display_order = display_order
        review = await self.repos.reviews.update(review)
        return (await self._to_reads([review], include_notes=True))[0]

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    async def review_stats(self, mentor: CurrentUser, now: Optional[dt.datetime] = None) -> ReviewStats:
        reviews = await self.repos.reviews.list_for_mentor(mentor.id)
        now = now or utc_now()

        rating_distribution: Dict[int, int] = {rating: 0 for rating in range(1, 6)}
        status_distribution: Dict[str, int] = {status.value: 0 for status in ReviewStatus}
        months: Dict[str, int] = {key: 0 for key in month_keys(now, STATS_MONTHS)}
        for review in reviews:
            rating_distribution[review.rating] = rating_distribution.get(review.rating, 0) + 1
            status_distribution[review.status] = status_distribution.get(review.status, 0) + 1
            key = review.created_at.strftime("%Y-%m")
            if key in months:
                months[key] += 1

        average = round(sum(r.rating for r in reviews) / len(reviews), 1) if reviews else 0.0
        return ReviewStats(
            total_reviews=len(reviews),
            average_rating=average,
            rating_distribution=rating_distribution,
            status_distribution=status_distribution,
            published_count=status_distribution[ReviewStatus.published.value],
            pending_count=status_distribution[ReviewStatus.pending.value],
            rejected_count=status_distribution[ReviewStatus.rejected.value],
            flagged_count=status_distribution[ReviewStatus.flagged.value],
            reviews_over_time=[MonthlyReviewCount(month=key, count=count) for key, count in months.items()],
        )

    # ------------------------------------------------------------------
    # Review requests
    # ------------------------------------------------------------------

    async def generate_request_link(
        self, mentor: CurrentUser, appointment_id: Optional[str] = None, patient_id: Optional[str] = None
    ) -> ReviewRequestLinkRead:
        if appointment_id is not None:
            appointment = await self.repos.appointments.get_by_id(appointment_id)
            if appointment is None or appointment.mentor_id != mentor.id:
                raise NotFoundError.for_entity("Appointment", appointment_id)
            patient_id = patient_id or appointment.patient_id

        link = await self.repos.review_requests.create(
            ReviewRequestLink(
                mentor_id=mentor.id,
                patient_id=patient_id,
                appointment_id=appointment_id,
                token=secrets.token_urlsafe(24),
                expires_at=utc_now() + self.request_ttl,
            )
        )
        return ReviewRequestLinkRead.model_validate(link)

    async def list_request_links(self, mentor: CurrentUser) -> List[ReviewRequestLinkRead]:
        links = await self.repos.review_requests.list_for_mentor(mentor.id)
        return [ReviewRequestLinkRead.model_validate(link) for link in links]

    async def send_request(self, mentor: CurrentUser, link_id: str) -> ReviewRequestLinkRead:
        link = await self.repos.review_requests.get_by_id(link_id)
        if link is None or link.mentor_id != mentor.id:
            raise NotFoundError.for_entity("Review request link", link_id)
        if link.patient_id is None:
            raise DomainValidationError("The review request has no patient to send it to")
        if not link.is_valid(utc_now()):
            raise ConflictError("The review request link is used or expired")

        link.email_sent = True
        link.email_sent_at = utc_now()
        link = await self.repos.review_requests.update(link)
        await self.notifications.notify_review_request(link.patient_id, await display_name(self.repos, mentor.id), link)
        return ReviewRequestLinkRead.model_validate(link)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    async def export_reviews_csv(self, mentor: CurrentUser, review_filter: ReviewFilter) -> str:
        reviews = await self._to_reads(await self._filtered(mentor.id, review_filter), include_notes=False)
        if not reviews:
            raise NotFoundError("No reviews to export")

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for review in reviews:
            writer.writerow(
                [
                    review.id,
                    review.patient.name,
                    review.rating,
                    review.content,
                    review.status.value,
                    review.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                    review.response.content if review.response else "",
                ]
            )
        return buffer.getvalue()
