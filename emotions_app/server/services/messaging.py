"""
Messaging Service.

One conversation exists per patient/mentor pair. Only the two participants
may read or write it, and only the sender may delete a message.
"""

from __future__ import annotations

from typing import List, Optional

from emotions_app.core.database.base import utc_now
from emotions_app.core.database.entities.messaging import Conversation, ConversationParticipant, Message
from emotions_app.core.database.repositories.bundle import RepositoryBundle
from emotions_app.core.exceptions import DomainValidationError, NotFoundError, PermissionDeniedError
from emotions_app.core.logging_config import get_logger
from emotions_app.core.models.domain.identity import CurrentUser
from emotions_app.core.models.io.messaging import (
    MAX_MESSAGE_LENGTH,
    ConversationRead,
    ConversationSummary,
    MessageRead,
)

from .notifications import NotificationService
from .profiles import display_name

logger = get_logger(__name__)


class MessagingService:
    def __init__(self, repos: RepositoryBundle, notifications: NotificationService) -> None:
        self.repos = repos
        self.notifications = notifications

    async def get_or_create_conversation(
        self, patient_id: str, mentor_id: str, appointment_id: Optional[str] = None
    ) -> Conversation:
        """Return the pair's conversation, creating it (and read markers) on first use."""
        conversation = await self.repos.conversations.get_by_pair(patient_id, mentor_id)
        if conversation is not None:
            if appointment_id and not conversation.appointment_id:
                conversation.appointment_id = appointment_id
                conversation = await self.repos.conversations.update(conversation)
            return conversation

        conversation = await self.repos.conversations.create(
            Conversation(patient_id=patient_id, mentor_id=mentor_id, appointment_id=appointment_id)
        )
        await self.repos.participants.create_many(
            [
                ConversationParticipant(conversation_id=conversation.id, user_id=patient_id),
                ConversationParticipant(conversation_id=conversation.id, user_id=mentor_id),
            ]
        )
        logger.info(f"Created conversation {conversation.id} between {patient_id} and {mentor_id}")
        return conversation

    async def open_conversation(
        self, user: CurrentUser, other_user_id: str, appointment_id: Optional[str] = None
    ) -> ConversationRead:
        if user.is_patient:
            patient_id, mentor_id = user.id, other_user_id
            if await self.repos.mentors.get_by_user_id(mentor_id) is None:
                raise NotFoundError.for_entity("Mood mentor", mentor_id)
        elif user.is_mentor:
            patient_id, mentor_id = other_user_id, user.id
            if await self.repos.patients.get_by_user_id(patient_id) is None:
                raise NotFoundError.for_entity("Patient", patient_id)
        else:
            raise PermissionDeniedError("Only patients and mood mentors can start conversations")
        conversation = await self.get_or_create_conversation(patient_id, mentor_id, appointment_id)
        return ConversationRead.model_validate(conversation)

    async def _participant_conversation(self, user: CurrentUser, conversation_id: str) -> Conversation:
        conversation = await self.repos.conversations.get_by_id(conversation_id)
        if conversation is None:
            raise NotFoundError.for_entity("Conversation", conversation_id)
        if not conversation.involves(user.id):
            raise PermissionDeniedError("You are not a participant of this conversation")
        return conversation

    async def list_conversations(self, user: CurrentUser) -> List[ConversationSummary]:
        summaries = []
        for conversation in await self.repos.conversations.list_for_user(user.id):
            other_id = conversation.other_party(user.id)
            last = await self.repos.messages.last_message(conversation.id)
            summaries.append(
                ConversationSummary(
                    **ConversationRead.model_validate(conversation).model_dump(),
                    other_user_id=other_id,
                    other_user_name=await display_name(self.repos, other_id),
                    last_message=last.content if last else None,
                    unread_count=await self.repos.messages.count_unread(conversation.id, user.id),
                )
            )
        return summaries

    async def get_messages(
        self, user: CurrentUser, conversation_id: str, limit: int = 50, offset: int = 0
    ) -> List[MessageRead]:
        await self._participant_conversation(user, conversation_id)
        rows = await self.repos.messages.list_for_conversation(conversation_id, limit=limit, offset=offset)
        return [MessageRead.model_validate(row) for row in rows]

    async def send_message(self, user: CurrentUser, conversation_id: str, content: str) -> MessageRead:
        conversation = await self._participant_conversation(user, conversation_id)
        text = content.strip()
        if not text:
            raise DomainValidationError("Message content cannot be empty")
        if len(text) > MAX_MESSAGE_LENGTH:
            raise DomainValidationError(f"Message content exceeds {MAX_MESSAGE_LENGTH} characters")

        message = await self.repos.messages.create(
            Message(conversation_id=conversation.id, sender_id=user.id, content=text)
        )
        conversation.last_message_at = message.created_at
        await self.repos.conversations.update(conversation)

        recipient_id = conversation.other_party(user.id)
        await self.notifications.notify_new_message(
            recipient_id, await display_name(self.repos, user.id), conversation.id
        )
        return MessageRead.model_validate(message)

    async def mark_as_read(self, user: CurrentUser, conversation_id: str) -> int:
        await self._participant_conversation(user, conversation_id)
        now = utc_now()
        marked = await self.repos.messages.mark_read(conversation_id, user.id, now)
        participant = await self.repos.participants.get_participant(conversation_id, user.id)
        if participant is None:
            participant = ConversationParticipant(conversation_id=conversation_id, user_id=user.id)
        participant.last_read_at = now
        await self.repos.participants.update(participant)
        return marked

    async def delete_message(self, user: CurrentUser, message_id: str) -> None:
        message = await self.repos.messages.get_by_id(message_id)
        if message is None or message.deleted_at is not None:
            raise NotFoundError.for_entity("Message", message_id)
        if message.sender_id != user.id:
            raise PermissionDeniedError("You can only delete your own messages")
        message.deleted_at = utc_now()
        await self.repos.messages.update(message)

    async def conversation_for_appointment(self, user: CurrentUser, appointment_id: str) -> ConversationRead:
        conversation = await self.repos.conversations.get_by_appointment(appointment_id)
        if conversation is None:
            raise NotFoundError(f"No conversation for appointment {appointment_id}")
        if not conversation.involves(user.id) and not user.is_admin:
            raise PermissionDeniedError("You are not a participant of this conversation")
        return ConversationRead.model_validate(conversation)
