"""Unit tests for patient/mentor messaging."""

import pytest

from emotions_app.core.exceptions import DomainValidationError, NotFoundError, PermissionDeniedError
from emotions_app.core.models.domain.enums import NotificationType
from emotions_app.server.services.messaging import MessagingService


@pytest.fixture
def service(repos, notifications) -> MessagingService:
    return MessagingService(repos, notifications)


@pytest.fixture
async def conversation(service, seed_profiles, patient):
    return await service.open_conversation(patient, "mentor_1")


class TestConversations:
    async def test_one_conversation_per_pair(self, service, conversation, mentor, repos):
        again = await service.open_conversation(mentor, "patient_1")
        assert again.id == conversation.id
        participants = await repos.participants.list(filters={"conversation_id": conversation.id})
        assert sorted(p.user_id for p in participants) == ["mentor_1", "patient_1"]

    async def test_patient_needs_existing_mentor(self, service, seed_profiles, patient):
        with pytest.raises(NotFoundError):
            await service.open_conversation(patient, "ghost")

    async def test_mentor_needs_existing_patient(self, service, seed_profiles, mentor, repos):
        with pytest.raises(NotFoundError):
            await service.open_conversation(mentor, "ghost")
        assert await repos.conversations.count() == 0

    async def test_admin_cannot_open(self, service, seed_profiles, admin):
        with pytest.raises(PermissionDeniedError):
            await service.open_conversation(admin, "mentor_1")

    async def test_summaries(self, service, conversation, patient, mentor):
        await service.send_message(patient, conversation.id, "Hello doctor")
        summaries = await service.list_conversations(mentor)
        assert len(summaries) == 1
        assert summaries[0].other_user_name == "Amina Njeri"
        assert summaries[0].last_message == "Hello doctor"
        assert summaries[0].unread_count == 1

    async def test_appointment_lookup(self, service, seed_profiles, patient, other_patient):
        created = await service.get_or_create_conversation("patient_1", "mentor_1", "appt_1")
        found = await service.conversation_for_appointment(patient, "appt_1")
        assert found.id == created.id
        with pytest.raises(PermissionDeniedError):
            await service.conversation_for_appointment(other_patient, "appt_1")
        with pytest.raises(NotFoundError):
            await service.conversation_for_appointment(patient, "appt_2")


class TestMessages:
    async def test_send_strips_and_notifies(self, service, conversation, patient, mentor, notifications):
        sent = await service.send_message(patient, conversation.id, "  Hi there  ")
        assert sent.content == "Hi there"
        inbox = await notifications.list(mentor)
        assert inbox[0].type == NotificationType.message.value
        assert inbox[0].message == "You have a new message from Amina Njeri"

    @pytest.mark.parametrize("content", ["   ", "x" * 5001])
    async def test_invalid_content(self, service, conversation, patient, content):
        with pytest.raises(DomainValidationError):
            await service.send_message(patient, conversation.id, content)

    async def test_outsider_is_rejected(self, service, conversation, other_patient):
        with pytest.raises(PermissionDeniedError):
            await service.get_messages(other_patient, conversation.id)
        with pytest.raises(PermissionDeniedError):
            await service.send_message(other_patient, conversation.id, "hi")

    async def test_mark_as_read(self, service, conversation, patient, mentor):
        await service.send_message(patient, conversation.id, "one")
        await service.send_message(patient, conversation.id, "two")
        await service.send_message(mentor, conversation.id, "reply")
        assert await service.mark_as_read(mentor, conversation.id) == 2
        assert await service.mark_as_read(mentor, conversation.id) == 0

    async def test_delete_own_message_only(self, service, conversation, patient, mentor):
        sent = await service.send_message(patient, conversation.id, "oops")
        with pytest.raises(PermissionDeniedError):
            await service.delete_message(mentor, sent.id)
        await service.delete_message(patient, sent.id)
        assert await service.get_messages(patient, conversation.id) == []
        with pytest.raises(NotFoundError):
            await service.delete_message(patient, sent.id)
