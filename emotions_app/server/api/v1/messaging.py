"""
API endpoints for patient-mentor conversations and messages.

Clients poll these endpoints; there is no push transport.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, Response, status

from emotions_app.core.models.io.messaging import (
    ConversationCreate,
    ConversationRead,
    ConversationSummary,
    MarkReadResult,
    MessageCreate,
    MessageRead,
)
from emotions_app.server.services.deps import CurrentUserDep, MessagingServiceDep

router = APIRouter(tags=["messaging"])


@router.get(
    "/conversations",
    response_model=List[ConversationSummary],
    summary="List Conversations",
    description="Conversations of the caller with the last message and unread count, most recent first.",
)
async def list_conversations(user: CurrentUserDep, service: MessagingServiceDep) -> List[ConversationSummary]:
    return await service.list_conversations(user)


@router.post(
    "/conversations",
    response_model=ConversationRead,
    summary="Open Conversation",
    description="Return the conversation with another user, creating it when it does not exist yet.",
)
async def open_conversation(body: ConversationCreate, user: CurrentUserDep, service: MessagingServiceDep) -> ConversationRead:
    return await service.open_conversation(user, body.other_user_id, body.appointment_id)


@router.get(
    "/conversations/by-appointment/{appointment_id}",
    response_model=ConversationRead,
    summary="Conversation of an Appointment",
)
async def conversation_for_appointment(
    appointment_id: str, user: CurrentUserDep, service: MessagingServiceDep
) -> ConversationRead:
    return await service.conversation_for_appointment(user, appointment_id)


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=List[MessageRead],
    summary="Get Messages",
    description="Messages of a conversation in chronological order. Deleted messages are omitted.",
)
async def get_messages(
    conversation_id: str,
    user: CurrentUserDep,
    service: MessagingServiceDep,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> List[MessageRead]:
    return await service.get_messages(user, conversation_id, limit=limit, offset=offset)


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send Message",
)
async def send_message(
    conversation_id: str, body: MessageCreate, user: CurrentUserDep, service: MessagingServiceDep
) -> MessageRead:
    """
    Send a message.

    The content is trimmed and must not be empty. The other participant
    receives a notification.
    """
    return await service.send_message(user, conversation_id, body.content)


@router.post("/conversations/{conversation_id}/read", response_model=MarkReadResult, summary="Mark Conversation Read")
async def mark_as_read(conversation_id: str, user: CurrentUserDep, service: MessagingServiceDep) -> MarkReadResult:
    return MarkReadResult(marked=await service.mark_as_read(user, conversation_id))


@router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Message")
async def delete_message(message_id: str, user: CurrentUserDep, service: MessagingServiceDep) -> Response:
    await service.delete_message(user, message_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
