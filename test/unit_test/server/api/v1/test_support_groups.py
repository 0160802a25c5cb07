import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


@pytest.fixture
async def group(client: AsyncClient, headers_for, seed_profiles, mentor) -> dict:
    payload = {
        "name": "Evening Anxiety Circle",
        "description": "A calm space to talk through anxious weeks",
        "group_type": "anxiety",
        "max_participants": 2,
        "meeting_schedule": [{"day": "Monday", "time": "18:00", "frequency": "weekly"}],
    }
    response = await client.post("/api/v1/support-groups", json=payload, headers=headers_for(mentor))
    assert response.status_code == 201
    return response.json()


async def test_create_group(group):
    assert group["mentor_id"] == "mentor_1"
    assert group["mentor_name"] == "Dr. Grace Wanjiru"
    assert group["current_participants"] == 0


async def test_patients_cannot_create_groups(client: AsyncClient, headers_for, patient):
    response = await client.post("/api/v1/support-groups", json={"name": "Mine"}, headers=headers_for(patient))
    assert response.status_code == 403


async def test_bad_schedule_time_is_rejected(client: AsyncClient, headers_for, mentor):
    payload = {"name": "Late night", "meeting_schedule": [{"day": "Monday", "time": "6pm"}]}
    response = await client.post("/api/v1/support-groups", json=payload, headers=headers_for(mentor))
    assert response.status_code == 422


async def test_browse_and_filter(client: AsyncClient, group):
    response = await client.get("/api/v1/support-groups")
    assert [g["id"] for g in response.json()] == [group["id"]]

    response = await client.get("/api/v1/support-groups", params={"group_type": "grief"})
    assert response.json() == []

    response = await client.get(f"/api/v1/support-groups/{group['id']}")
    assert response.json()["name"] == "Evening Anxiety Circle"


async def test_update_is_owner_only(client: AsyncClient, headers_for, group, mentor, other_mentor):
    url = f"/api/v1/support-groups/{group['id']}"
    response = await client.patch(url, json={"is_public": False}, headers=headers_for(other_mentor))
    assert response.status_code == 403

    response = await client.patch(url, json={"is_public": False}, headers=headers_for(mentor))
    assert response.status_code == 200
    assert response.json()["is_public"] is False


async def test_join_leave_and_capacity(client: AsyncClient, headers_for, group, patient, other_patient, mentor):
    base = f"/api/v1/support-groups/{group['id']}"

    response = await client.get(f"{base}/eligibility", headers=headers_for(patient))
    assert response.json() == {"can_join": True, "reason": None, "meeting_url": None}

    response = await client.post(f"{base}/join", headers=headers_for(patient))
    assert response.status_code == 201
    assert response.json()["status"] == "active"

    response = await client.post(f"{base}/join", headers=headers_for(patient))
    assert response.status_code == 409

    await client.post(f"{base}/join", headers=headers_for(other_patient))
    response = await client.get(base)
    assert response.json()["current_participants"] == 2

    response = await client.get(f"{base}/members", headers=headers_for(mentor))
    assert {m["full_name"] for m in response.json()} == {"Amina Njeri", "Brian Otieno"}

    response = await client.delete(f"{base}/membership", headers=headers_for(other_patient))
    assert response.status_code == 204
    response = await client.get(base)
    assert response.json()["current_participants"] == 1

    response = await client.get("/api/v1/support-groups/mine", headers=headers_for(patient))
    assert [g["id"] for g in response.json()] == [group["id"]]


async def test_full_group_refuses_joins(client: AsyncClient, headers_for, group, patient, other_patient, admin):
    base = f"/api/v1/support-groups/{group['id']}"
    await client.patch(base, json={"max_participants": 1}, headers=headers_for(admin))
    await client.post(f"{base}/join", headers=headers_for(patient))

    response = await client.post(f"{base}/join", headers=headers_for(other_patient))
    assert response.status_code == 409
    assert response.json()["detail"] == "Group is full"


async def test_update_member_status(client: AsyncClient, headers_for, group, patient, mentor):
    base = f"/api/v1/support-groups/{group['id']}"
    await client.post(f"{base}/join", headers=headers_for(patient))

    response = await client.patch(
        f"{base}/members/patient_1", json={"status": "inactive", "notes": "On a break"}, headers=headers_for(mentor)
    )
    assert response.status_code == 200
    assert response.json()["status"] == "inactive"
    assert response.json()["notes"] == "On a break"


async def test_waiting_list_approval(client: AsyncClient, headers_for, group, patient, mentor):
    base = f"/api/v1/support-groups/{group['id']}"
    response = await client.post(
        f"{base}/waiting-list", json={"personal_message": "I would love to join"}, headers=headers_for(patient)
    )
    assert response.status_code == 201
    entry = response.json()
    assert entry["status"] == "waiting"

    response = await client.post(f"{base}/waiting-list", json={}, headers=headers_for(patient))
    assert response.status_code == 409

    response = await client.get(f"{base}/waiting-list", headers=headers_for(mentor))
    assert [e["id"] for e in response.json()] == [entry["id"]]

    response = await client.post(
        f"/api/v1/support-groups/waiting-list/{entry['id']}/decision",
        json={"status": "approved"},
        headers=headers_for(mentor),
    )
    assert response.status_code == 200
    assert response.json()["processed_by"] == "mentor_1"

    response = await client.get(f"{base}/members", headers=headers_for(mentor))
    assert [m["user_id"] for m in response.json()] == ["patient_1"]


async def test_decision_must_be_final(client: AsyncClient, headers_for, group, patient, mentor):
    base = f"/api/v1/support-groups/{group['id']}"
    entry = (await client.post(f"{base}/waiting-list", json={}, headers=headers_for(patient))).json()

    response = await client.post(
        f"/api/v1/support-groups/waiting-list/{entry['id']}/decision",
        json={"status": "waiting"},
        headers=headers_for(mentor),
    )
    assert response.status_code == 422


async def test_delete_group(client: AsyncClient, headers_for, group, mentor):
    response = await client.delete(f"/api/v1/support-groups/{group['id']}", headers=headers_for(mentor))
    assert response.status_code == 204

    response = await client.get(f"/api/v1/support-groups/{group['id']}")
    assert response.status_code == 404
