"""Unit tests for mentor reviews, moderation, statistics and review requests."""

import csv
import datetime as dt
import io

import pytest

from emotions_app.core.database.base import utc_now
from emotions_app.core.database.entities.appointments import Appointment
from emotions_app.core.exceptions import ConflictError, DomainValidationError, NotFoundError, PermissionDeniedError
from emotions_app.core.models.domain.enums import NotificationType, ReviewSortField, ReviewStatus, SortOrder
from emotions_app.core.models.io.reviews import ReviewFilter, ReviewSubmit
from emotions_app.server.services.reviews import CSV_HEADER, ReviewService, month_keys


@pytest.fixture
def service(repos, notifications) -> ReviewService:
    return ReviewService(repos, notifications)


async def _appointment(repos, patient_id: str, status: str = "completed") -> Appointment:
    return await repos.appointments.create(
        Appointment(
            patient_id=patient_id,
            mentor_id="mentor_1",
            date=dt.date(2026, 3, 2),
            start_time=dt.time(10, 0),
            end_time=dt.time(11, 0),
            status=status,
        )
    )


@pytest.fixture
async def appointments(repos, seed_profiles):
    return [await _appointment(repos, "patient_1"), await _appointment(repos, "patient_2")]


@pytest.fixture
async def reviewed(service, appointments, patient, other_patient):
    first = await service.submit_review(
        patient, ReviewSubmit(appointment_id=appointments[0].id, rating=5, content="Very supportive")
    )
    second = await service.submit_review(
        other_patient,
        ReviewSubmit(appointment_id=appointments[1].id, rating=3, content="It was fine", is_anonymous=True),
    )
    return first, second


class TestSubmission:
    async def test_submit_publishes_and_notifies(self, service, reviewed, repos, mentor, notifications):
        first, _ = reviewed
        assert first.status == ReviewStatus.published
        assert first.published_at is not None
        assert first.patient.name == "Amina Njeri"
        assert (await repos.appointments.get_by_id(first.appointment_id)).review_submitted is True
        inbox = await notifications.list(mentor)
        assert {n.type for n in inbox} == {NotificationType.review.value}

    async def test_anonymous_hides_patient(self, reviewed):
        _, anonymous = reviewed
        assert anonymous.patient.id is None
        assert anonymous.patient.name == "Anonymous"

    async def test_one_review_per_appointment(self, service, reviewed, patient):
        with pytest.raises(ConflictError):
            await service.submit_review(patient, ReviewSubmit(appointment_id=reviewed[0].appointment_id, rating=4))

    async def test_only_own_completed_appointments(self, service, repos, seed_profiles, patient, other_patient):
        pending = await _appointment(repos, "patient_1", status="scheduled")
        with pytest.raises(PermissionDeniedError):
            await service.submit_review(other_patient, ReviewSubmit(appointment_id=pending.id, rating=4))
        with pytest.raises(ConflictError, match="completed"):
            await service.submit_review(patient, ReviewSubmit(appointment_id=pending.id, rating=4))
        with pytest.raises(NotFoundError):
            await service.submit_review(patient, ReviewSubmit(appointment_id="missing", rating=4))

    async def test_moderated_default_status(self, repos, notifications, appointments, patient):
        moderated = ReviewService(repos, notifications, default_status=ReviewStatus.pending)
        review = await moderated.submit_review(patient, ReviewSubmit(appointment_id=appointments[0].id, rating=4))
        assert review.status == ReviewStatus.pending
        assert review.published_at is None
        assert await moderated.list_public_reviews("mentor_1") == []

    async def test_request_token_is_consumed(self, service, appointments, patient, mentor, repos):
        link = await service.generate_request_link(mentor, appointment_id=appointments[0].id)
        assert link.patient_id == patient.id
        await service.submit_review(
            patient, ReviewSubmit(appointment_id=appointments[0].id, rating=5, token=link.token)
        )
        stored = await repos.review_requests.get_by_token(link.token)
        assert stored.is_used is True


class TestListing:
    async def test_filters_and_sorting(self, service, reviewed, mentor):
        assert [r.rating for r in await service.list_reviews(mentor, ReviewFilter(rating=3))] == [3]
        found = await service.list_reviews(mentor, ReviewFilter(search="amina"))
        assert [r.id for r in found] == [reviewed[0].id]
        ordered = await service.list_reviews(
            mentor, ReviewFilter(sort_by=ReviewSortField.rating, sort_order=SortOrder.asc)
        )
        assert [r.rating for r in ordered] == [3, 5]

    async def test_anonymous_name_is_not_searchable(self, service, reviewed, mentor):
        assert await service.list_reviews(mentor, ReviewFilter(search="brian")) == []

    async def test_rejected_reviews_leave_public_list(self, service, reviewed, mentor):
        rejected = await service.update_status(mentor, reviewed[1].id, ReviewStatus.rejected, "Off topic")
        assert rejected.rejection_reason == "Off topic"
        assert [r.id for r in await service.list_public_reviews("mentor_1")] == [reviewed[0].id]

    async def test_other_mentor_cannot_moderate(self, service, reviewed, other_mentor):
        with pytest.raises(PermissionDeniedError):
            await service.update_status(other_mentor, reviewed[0].id, ReviewStatus.flagged)

    async def test_unpublished_review_is_hidden_from_strangers(self, service, reviewed, mentor, other_patient, patient):
        await service.update_status(mentor, reviewed[0].id, ReviewStatus.flagged)
        with pytest.raises(NotFoundError):
            await service.get_review(other_patient, reviewed[0].id)
        assert (await service.get_review(patient, reviewed[0].id)).status == ReviewStatus.flagged

    async def test_featured_reviews_come_first(self, service, reviewed, mentor):
        await service.toggle_featured(mentor, reviewed[1].id, True)
        public = await service.list_public_reviews("mentor_1")
        assert public[0].id == reviewed[1].id
        with pytest.raises(DomainValidationError):
            await service.set_display_order(mentor, reviewed[0].id, -1)
        assert (await service.set_display_order(mentor, reviewed[0].id, 2)).display_order == 2


class TestResponsesAndNotes:
    async def test_respond_and_delete(self, service, reviewed, mentor):
        response = await service.respond(mentor, reviewed[0].id, "Thank you!")
        assert response.published_at is not None
        again = await service.respond(mentor, reviewed[0].id, "Thanks again!")
        assert again.id == response.id
        public = await service.list_public_reviews("mentor_1")
        assert next(r for r in public if r.id == reviewed[0].id).response.content == "Thanks again!"
        await service.delete_response(mentor, response.id)
        with pytest.raises(NotFoundError):
            await service.delete_response(mentor, response.id)

    async def test_notes_are_private(self, service, reviewed, mentor, other_mentor):
        note = await service.add_note(mentor, reviewed[0].id, "Follow up next week")
        listed = await service.list_reviews(mentor, ReviewFilter())
        assert [n.content for r in listed for n in r.notes] == ["Follow up next week"]
        public = await service.list_public_reviews("mentor_1")
        assert all(r.notes == [] for r in public)

        updated = await service.update_note(mentor, note.id, "Followed up")
        assert updated.content == "Followed up"
        with pytest.raises(NotFoundError):
            await service.update_note(other_mentor, note.id, "Mine now")
        await service.delete_note(mentor, note.id)


class TestStats:
    def test_month_keys_cross_year(self):
        assert month_keys(dt.datetime(2026, 2, 15), 3) == ["2025-12", "2026-01", "2026-02"]

    async def test_review_stats(self, service, reviewed, mentor):
        await service.update_status(mentor, reviewed[1].id, ReviewStatus.pending)
        now = utc_now()
        stats = await service.review_stats(mentor, now=now)
        assert stats.total_reviews == 2
        assert stats.average_rating == 4.0
        assert stats.rating_distribution == {1: 0, 2: 0, 3: 1, 4: 0, 5: 1}
        assert stats.published_count == 1
        assert stats.pending_count == 1
        assert len(stats.reviews_over_time) == 6
        assert stats.reviews_over_time[-1].month == now.strftime("%Y-%m")
        assert stats.reviews_over_time[-1].count == 2

    async def test_empty_stats(self, service, mentor):
        stats = await service.review_stats(mentor)
        assert stats.total_reviews == 0
        assert stats.average_rating == 0.0


class TestExport:
    async def test_csv_export(self, service, reviewed, mentor):
        await service.respond(mentor, reviewed[0].id, "Thank you!")
        rows = list(csv.reader(io.StringIO(await service.export_reviews_csv(mentor, ReviewFilter()))))
        assert rows[0] == CSV_HEADER
        by_id = {row[0]: row for row in rows[1:]}
        assert by_id[reviewed[0].id][1] == "Amina Njeri"
        assert by_id[reviewed[0].id][6] == "Thank you!"
        assert by_id[reviewed[1].id][1] == "Anonymous"

    async def test_nothing_to_export(self, service, mentor):
        with pytest.raises(NotFoundError):
            await service.export_reviews_csv(mentor, ReviewFilter())


class TestRequestLinks:
    async def test_send_request_notifies_patient(self, service, appointments, mentor, patient, notifications):
        link = await service.generate_request_link(mentor, appointment_id=appointments[0].id)
        sent = await service.send_request(mentor, link.id)
        assert sent.email_sent is True
        inbox = await notifications.list(patient)
        assert inbox[0].action_url == f"/review/{link.token}"
        assert "Dr. Grace Wanjiru" in inbox[0].message
        assert [item.id for item in await service.list_request_links(mentor)] == [link.id]

    async def test_link_without_patient(self, service, mentor):
        link = await service.generate_request_link(mentor)
        with pytest.raises(DomainValidationError):
            await service.send_request(mentor, link.id)

    async def test_used_link_cannot_be_sent(self, service, appointments, mentor, patient):
        link = await service.generate_request_link(mentor, appointment_id=appointments[0].id)
        await service.submit_review(patient, ReviewSubmit(appointment_id=appointments[0].id, rating=5, token=link.token))
        with pytest.raises(ConflictError):
            await service.send_request(mentor, link.id)

    async def test_foreign_appointment(self, service, appointments, other_mentor):
        with pytest.raises(NotFoundError):
            await service.generate_request_link(other_mentor, appointment_id=appointments[0].id)
