"""Tests for review repositories."""

from __future__ import annotations

from datetime import datetime

from emotions_app.core.database.entities import MentorReview, ReviewNote, ReviewResponse


def _review(appointment_id: str, rating: int, **overrides) -> MentorReview:
    data = {
        "appointment_id": appointment_id,
        "mentor_id": "mentor_1",
        "patient_id": "patient_1",
        "rating": rating,
        "content": "Helpful session",
    }
    data.update(overrides)
    return MentorReview(**data)


class TestMentorReviewRepository:
    async def test_rating_summary_counts_published_only(self, repos):
        await repos.reviews.create_many(
            [
                _review("a1", 5),
                _review("a2", 3),
                _review("a3", 1, status="pending"),
                _review("a4", 4, mentor_id="mentor_2"),
            ]
        )
        assert await repos.reviews.rating_summary("mentor_1") == (2, 4.0)
        total, average = await repos.reviews.rating_summary()
        assert total == 3
        assert average == 4.0

    async def test_rating_summary_empty(self, repos):
        assert await repos.reviews.rating_summary("nobody") == (0, None)

    async def test_list_for_mentor_filters(self, repos):
        await repos.reviews.create_many(
            [
                _review("a1", 5, created_at=datetime(2026, 1, 10)),
                _review("a2", 3, created_at=datetime(2026, 2, 10), status="flagged"),
                _review("a3", 5, created_at=datetime(2026, 3, 10)),
            ]
        )
        assert [r.appointment_id for r in await repos.reviews.list_for_mentor("mentor_1")] == ["a3", "a2", "a1"]
        assert len(await repos.reviews.list_for_mentor("mentor_1", rating=5)) == 2
        assert len(await repos.reviews.list_for_mentor("mentor_1", status="flagged")) == 1
        ranged = await repos.reviews.list_for_mentor(
            "mentor_1", start=datetime(2026, 2, 1), end=datetime(2026, 2, 28)
        )
        assert [r.appointment_id for r in ranged] == ["a2"]

    async def test_list_published_puts_featured_first(self, repos):
        await repos.reviews.create_many(
            [
                _review("a1", 5, display_order=2),
                _review("a2", 4, is_featured=True, display_order=5),
                _review("a3", 3, display_order=1),
                _review("a4", 2, status="rejected"),
            ]
        )
        published = await repos.reviews.list_published("mentor_1")
        assert [r.appointment_id for r in published] == ["a2", "a3", "a1"]

    async def test_get_by_appointment(self, repos):
        review = await repos.reviews.create(_review("a1", 5))
        assert (await repos.reviews.get_by_appointment("a1")).id == review.id


class TestReviewChildren:
    async def test_maps_for_reviews(self, repos):
        first = await repos.reviews.create(_review("a1", 5))
        second = await repos.reviews.create(_review("a2", 4))
        await repos.review_responses.create(ReviewResponse(review_id=first.id, mentor_id="mentor_1", content="Thanks"))
        await repos.review_notes.create_many(
            [
                ReviewNote(review_id=first.id, mentor_id="mentor_1", content="note 1"),
                ReviewNote(review_id=first.id, mentor_id="mentor_1", content="note 2"),
            ]
        )
        responses = await repos.review_responses.map_for_reviews([first.id, second.id])
        notes = await repos.review_notes.map_for_reviews([first.id, second.id])
        assert set(responses) == {first.id}
        assert len(notes[first.id]) == 2
        assert notes.get(second.id, []) == []
