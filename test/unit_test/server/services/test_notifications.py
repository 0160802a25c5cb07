"""Unit tests for the notification service."""

from unittest.mock import AsyncMock

import pytest

from emotions_app.core.exceptions import NotFoundError
from emotions_app.core.models.domain.enums import NotificationType


class TestNotificationService:
    async def test_create_stores_metadata(self, notifications, patient):
        created = await notifications.create(
            patient.id, "Hi", "Body", NotificationType.reminder, action_url="/x", metadata={"k": "v"}
        )
        items = await notifications.list(patient)
        assert [n.id for n in items] == [created.id]
        assert items[0].metadata == {"k": "v"}
        assert items[0].type == NotificationType.reminder.value

    async def test_notify_safely_swallows_failures(self, notifications, patient):
        notifications.repository.create = AsyncMock(side_effect=RuntimeError("db down"))
        assert await notifications.notify_safely(patient.id, "t", "m", NotificationType.alert) is None

    async def test_unread_and_mark_read(self, notifications, patient):
        first = await notifications.create(patient.id, "1", "m", NotificationType.message)
        await notifications.create(patient.id, "2", "m", NotificationType.message)
        assert await notifications.unread_count(patient) == 2
        read = await notifications.mark_read(patient, first.id)
        assert read.is_read is True
        assert await notifications.unread_count(patient) == 1
        assert len(await notifications.list(patient, unread_only=True)) == 1
        assert await notifications.mark_all_read(patient) == 1
        assert await notifications.unread_count(patient) == 0

    async def test_other_users_notifications_are_hidden(self, notifications, patient, other_patient):
        created = await notifications.create(patient.id, "1", "m", NotificationType.message)
        with pytest.raises(NotFoundError):
            await notifications.mark_read(other_patient, created.id)
        with pytest.raises(NotFoundError):
            await notifications.delete(other_patient, created.id)

    async def test_delete(self, notifications, patient):
        created = await notifications.create(patient.id, "1", "m", NotificationType.message)
        await notifications.delete(patient, created.id)
        assert await notifications.list(patient) == []

    async def test_typed_helpers(self, notifications, patient, mentor):
        await notifications.notify_welcome(patient.id, "Amina")
        await notifications.notify_new_message(mentor.id, "Amina", "conv_1")
        patient_items = await notifications.list(patient)
        mentor_items = await notifications.list(mentor)
        assert patient_items[0].type == NotificationType.welcome.value
        assert "Amina" in patient_items[0].message
        assert mentor_items[0].action_url == "/messages/conv_1"
        assert mentor_items[0].metadata == {"conversation_id": "conv_1"}
