"""
API endpoints for mentor reviews.

Patients submit reviews for completed appointments; mentors moderate them,
respond, keep notes, feature reviews on their public profile, invite
patients through request links and export their reviews as CSV.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from emotions_app.core.models.io.reviews import (
    DisplayOrderUpdate,
    FeaturedUpdate,
    ReviewFilter,
    ReviewNoteRead,
    ReviewNoteWrite,
    ReviewRead,
    ReviewRequestCreate,
    ReviewRequestLinkRead,
    ReviewResponseRead,
    ReviewResponseWrite,
    ReviewStats,
    ReviewStatusUpdate,
    ReviewSubmit,
)
from emotions_app.server.services.deps import CurrentUserDep, MentorDep, PatientDep, ReviewServiceDep

router = APIRouter(tags=["reviews"])


@router.post(
    "",
    response_model=ReviewRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Review",
    description="Review the mentor of a completed appointment. Each appointment can be reviewed once.",
    responses={
        403: {"description": "Appointment belongs to another patient"},
        409: {"description": "Appointment not completed or already reviewed"},
    },
)
async def submit_review(data: ReviewSubmit, patient: PatientDep, service: ReviewServiceDep) -> ReviewRead:
    """
    Submit a review.

    - **rating**: 1 to 5 stars.
    - **is_anonymous**: Hide the patient's name on the published review.
    - **token**: Review request token, consumed when it belongs to the same mentor.
    """
    return await service.submit_review(patient, data)


@router.get(
    "",
    response_model=List[ReviewRead],
    summary="List My Reviews",
    description="Reviews of the calling mentor with filters, search and sorting. Includes private notes.",
)
async def list_reviews(
    mentor: MentorDep, service: ReviewServiceDep, review_filter: ReviewFilter = Depends()
) -> List[ReviewRead]:
    return await service.list_reviews(mentor, review_filter)


@router.get(
    "/export",
    summary="Export Reviews as CSV",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}, 404: {"description": "No reviews match the filter"}},
)
async def export_reviews(mentor: MentorDep, service: ReviewServiceDep, review_filter: ReviewFilter = Depends()) -> Response:
    content = await service.export_reviews_csv(mentor, review_filter)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="reviews.csv"'},
    )


@router.get("/stats", response_model=ReviewStats, summary="Review Statistics")
async def review_stats(mentor: MentorDep, service: ReviewServiceDep) -> ReviewStats:
    return await service.review_stats(mentor)


@router.get(
    "/mentors/{mentor_id}",
    response_model=List[ReviewRead],
    summary="Public Reviews of a Mentor",
    description="Published reviews, featured first, then by display order, then newest.",
)
async def list_public_reviews(mentor_id: str, service: ReviewServiceDep) -> List[ReviewRead]:
    return await service.list_public_reviews(mentor_id)


# ----------------------------------------------------------------------
# Review requests
# ----------------------------------------------------------------------


@router.post(
    "/requests",
    response_model=ReviewRequestLinkRead,
    status_code=status.HTTP_201_CREATED,
    summary="Generate Review Request Link",
)
async def generate_request_link(
    body: ReviewRequestCreate, mentor: MentorDep, service: ReviewServiceDep
) -> ReviewRequestLinkRead:
    return await service.generate_request_link(mentor, body.appointment_id, body.patient_id)


@router.get("/requests", response_model=List[ReviewRequestLinkRead], summary="List Review Request Links")
async def list_request_links(mentor: MentorDep, service: ReviewServiceDep) -> List[ReviewRequestLinkRead]:
    return await service.list_request_links(mentor)


@router.post(
    "/requests/{link_id}/send",
    response_model=ReviewRequestLinkRead,
    summary="Send Review Request",
    description="Deliver the request link to the patient as an in-app notification.",
)
async def send_request(link_id: str, mentor: MentorDep, service: ReviewServiceDep) -> ReviewRequestLinkRead:
    return await service.send_request(mentor, link_id)


# ----------------------------------------------------------------------
# Responses and notes
# ----------------------------------------------------------------------


@router.delete("/responses/{response_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Response")
async def delete_response(response_id: str, mentor: MentorDep, service: ReviewServiceDep) -> Response:
    await service.delete_response(mentor, response_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/notes/{note_id}", response_model=ReviewNoteRead, summary="Update Note")
async def update_note(note_id: str, body: ReviewNoteWrite, mentor: MentorDep, service: ReviewServiceDep) -> ReviewNoteRead:
    return await service.update_note(mentor, note_id, body.content)


@router.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Note")
async def delete_note(note_id: str, mentor: MentorDep, service: ReviewServiceDep) -> Response:
    await service.delete_note(mentor, note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----------------------------------------------------------------------
# Single review
# ----------------------------------------------------------------------


@router.get("/{review_id}", response_model=ReviewRead, summary="Get Review")
async def get_review(review_id: str, user: CurrentUserDep, service: ReviewServiceDep) -> ReviewRead:
    return await service.get_review(user, review_id)


@router.patch(
    "/{review_id}/status",
    response_model=ReviewRead,
    summary="Moderate Review",
    description="Publish, reject (with a reason), flag or return a review to pending.",
)
async def update_status(
    review_id: str, body: ReviewStatusUpdate, mentor: MentorDep, service: ReviewServiceDep
) -> ReviewRead:
    return await service.update_status(mentor, review_id, body.status, body.reason)


@router.put("/{review_id}/response", response_model=ReviewResponseRead, summary="Respond to Review")
async def respond(
    review_id: str, body: ReviewResponseWrite, mentor: MentorDep, service: ReviewServiceDep
) -> ReviewResponseRead:
    return await service.respond(mentor, review_id, body.content, body.is_published)


@router.post(
    "/{review_id}/notes",
    response_model=ReviewNoteRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Private Note",
)
async def add_note(review_id: str, body: ReviewNoteWrite, mentor: MentorDep, service: ReviewServiceDep) -> ReviewNoteRead:
    return await service.add_note(mentor, review_id, body.content)


@router.patch("/{review_id}/featured", response_model=ReviewRead, summary="Feature Review")
async def toggle_featured(
    review_id: str, body: FeaturedUpdate, mentor: MentorDep, service: ReviewServiceDep
) -> ReviewRead:
    return await service.toggle_featured(mentor, review_id, body.is_featured)


@router.patch("/{review_id}/display-order", response_model=ReviewRead, summary="Set Display Order")
async def set_display_order(
    review_id: str, body: DisplayOrderUpdate, mentor: MentorDep, service: ReviewServiceDep
) -> ReviewRead:
    return await service.set_display_order(mentor, review_id, body.display_order)
