"""Tests for conversation and message repositories."""

from __future__ import annotations

from datetime import datetime, timedelta

from emotions_app.core.database.entities import Conversation, Message


async def _conversation(repos, **overrides) -> Conversation:
    data = {"patient_id": "patient_1", "mentor_id": "mentor_1"}
    data.update(overrides)
    return await repos.conversations.create(Conversation(**data))


class TestConversationRepository:
    async def test_get_by_pair(self, repos):
        conv = await _conversation(repos)
        assert (await repos.conversations.get_by_pair("patient_1", "mentor_1")).id == conv.id
        assert await repos.conversations.get_by_pair("mentor_1", "patient_1") is None

    async def test_get_by_appointment(self, repos):
        conv = await _conversation(repos, appointment_id="appt_1")
        assert (await repos.conversations.get_by_appointment("appt_1")).id == conv.id

    async def test_list_for_user_orders_by_last_activity(self, repos):
        older = await _conversation(repos, mentor_id="mentor_a", last_message_at=datetime(2026, 1, 1))
        newer = await _conversation(repos, mentor_id="mentor_b", last_message_at=datetime(2026, 2, 1))
        await _conversation(repos, patient_id="someone_else", mentor_id="mentor_c")
        results = await repos.conversations.list_for_user("patient_1")
        assert [c.id for c in results] == [newer.id, older.id]


class TestMessageRepository:
    async def test_soft_deleted_messages_are_hidden(self, repos):
        conv = await _conversation(repos)
        base = datetime(2026, 1, 1, 9, 0)
        await repos.messages.create_many(
            [
                Message(conversation_id=conv.id, sender_id="patient_1", content="hi", created_at=base),
                Message(
                    conversation_id=conv.id,
                    sender_id="mentor_1",
                    content="gone",
                    created_at=base + timedelta(minutes=1),
                    deleted_at=base + timedelta(minutes=2),
                ),
            ]
        )
        listed = await repos.messages.list_for_conversation(conv.id)
        assert [m.content for m in listed] == ["hi"]
        assert (await repos.messages.last_message(conv.id)).content == "hi"

    async def test_unread_counts_and_mark_read(self, repos):
        conv = await _conversation(repos)
        await repos.messages.create_many(
            [
                Message(conversation_id=conv.id, sender_id="mentor_1", content="one"),
                Message(conversation_id=conv.id, sender_id="mentor_1", content="two"),
                Message(
                    conversation_id=conv.id, sender_id="mentor_1", content="retracted", deleted_at=datetime(2026, 1, 1)
                ),
                Message(conversation_id=conv.id, sender_id="patient_1", content="mine"),
            ]
        )
        assert await repos.messages.count_unread(conv.id, "patient_1") == 2
        assert await repos.messages.mark_read(conv.id, "patient_1", datetime(2026, 1, 1)) == 2
        assert await repos.messages.count_unread(conv.id, "patient_1") == 0
        assert await repos.messages.count_unread(conv.id, "mentor_1") == 1

        retracted = await repos.messages.list(filters={"content": "retracted"})
        assert retracted[0].read_at is None
