import datetime as dt

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


def _booking(day: dt.date = dt.date(2026, 3, 2), **overrides) -> dict:
    payload = {
        "mentor_id": "mentor_1",
        "date": day.isoformat(),
        "start_time": "10:00:00",
        "end_time": "11:00:00",
        "title": "Weekly check-in",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def booked(client: AsyncClient, headers_for, seed_profiles, patient) -> dict:
    response = await client.post("/api/v1/appointments", json=_booking(), headers=headers_for(patient))
    assert response.status_code == 201
    return response.json()


async def test_book_appointment(booked):
    assert booked["status"] == "pending"
    assert booked["patient_id"] == "patient_1"
    assert booked["mentor_id"] == "mentor_1"
    assert booked["meeting_link"].startswith("https://mock.daily.co/")


async def test_mentors_cannot_book(client: AsyncClient, headers_for, seed_profiles, mentor):
    response = await client.post("/api/v1/appointments", json=_booking(mentor_id="mentor_2"), headers=headers_for(mentor))
    assert response.status_code == 403


async def test_booking_rejects_inverted_slot(client: AsyncClient, headers_for, seed_profiles, patient):
    payload = _booking(start_time="11:00:00", end_time="10:00:00")
    response = await client.post("/api/v1/appointments", json=payload, headers=headers_for(patient))
    assert response.status_code == 422


async def test_list_and_filter(client: AsyncClient, headers_for, booked, mentor, other_patient):
    response = await client.get("/api/v1/appointments", headers=headers_for(mentor))
    assert [a["id"] for a in response.json()] == [booked["id"]]

    response = await client.get("/api/v1/appointments", params={"status": "completed"}, headers=headers_for(mentor))
    assert response.json() == []

    response = await client.get("/api/v1/appointments", headers=headers_for(other_patient))
    assert response.json() == []


async def test_outsiders_cannot_read_appointment(client: AsyncClient, headers_for, booked, other_patient):
    response = await client.get(f"/api/v1/appointments/{booked['id']}", headers=headers_for(other_patient))
    assert response.status_code == 403


async def test_confirm_then_complete_then_rate(client: AsyncClient, headers_for, booked, patient, mentor):
    base = f"/api/v1/appointments/{booked['id']}"

    response = await client.post(f"{base}/confirm", headers=headers_for(mentor))
    assert response.status_code == 200
    assert response.json()["status"] == "scheduled"

    # Rating before completion is refused
    response = await client.post(f"{base}/rate", json={"rating": 5}, headers=headers_for(patient))
    assert response.status_code == 422

    response = await client.post(f"{base}/complete", headers=headers_for(mentor))
    assert response.json()["status"] == "completed"

    response = await client.post(f"{base}/rate", json={"rating": 5, "feedback": "Very helpful"}, headers=headers_for(patient))
    assert response.status_code == 200
    assert response.json()["rating"] == 5
    assert response.json()["feedback"] == "Very helpful"


async def test_patient_cannot_confirm(client: AsyncClient, headers_for, booked, patient):
    response = await client.post(f"/api/v1/appointments/{booked['id']}/confirm", headers=headers_for(patient))
    assert response.status_code == 403


async def test_cancelled_appointment_is_terminal(client: AsyncClient, headers_for, booked, patient, mentor):
    base = f"/api/v1/appointments/{booked['id']}"
    response = await client.post(f"{base}/cancel", json={"reason": "Travelling"}, headers=headers_for(patient))
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "cancelled"
    assert data["cancellation_reason"] == "Travelling"
    assert data["cancelled_by"] == "patient_1"

    response = await client.post(f"{base}/confirm", headers=headers_for(mentor))
    assert response.status_code == 409
    assert response.json()["error_type"] == "invalid_state_transition"


async def test_reschedule(client: AsyncClient, headers_for, booked, patient):
    payload = {"date": "2026-03-04", "start_time": "14:00:00", "end_time": "15:00:00", "reason": "Clash"}
    response = await client.post(
        f"/api/v1/appointments/{booked['id']}/reschedule", json=payload, headers=headers_for(patient)
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "rescheduled"
    assert data["date"] == "2026-03-04"
    assert data["start_time"] == "14:00:00"


async def test_todays_sessions(client: AsyncClient, headers_for, seed_profiles, patient, mentor):
    await client.post("/api/v1/appointments", json=_booking(day=dt.date.today()), headers=headers_for(patient))
    await client.post(
        "/api/v1/appointments", json=_booking(day=dt.date.today() + dt.timedelta(days=1)), headers=headers_for(patient)
    )

    response = await client.get("/api/v1/appointments/today", headers=headers_for(mentor))
    assert response.status_code == 200
    assert [a["date"] for a in response.json()] == [dt.date.today().isoformat()]

    response = await client.get("/api/v1/appointments/today", headers=headers_for(patient))
    assert response.status_code == 403


async def test_start_chat_and_session(client: AsyncClient, headers_for, booked, patient, mentor):
    base = f"/api/v1/appointments/{booked['id']}"
    first = await client.post(f"{base}/chat", headers=headers_for(patient))
    second = await client.post(f"{base}/chat", headers=headers_for(mentor))
    assert first.status_code == 200
    assert first.json()["conversation_id"] == second.json()["conversation_id"]

    response = await client.post(f"{base}/session", headers=headers_for(mentor))
    assert response.status_code == 200
    room = response.json()
    assert room["room_url"] == f"https://mock.daily.co/{room['room_name']}"
