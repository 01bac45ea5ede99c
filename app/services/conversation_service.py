"""Service layer for conversation history and manual message inserts."""

import json

import structlog

from app.core.exceptions import ValidationError
from app.models.chat_message import ChatMessage
from app.repositories.chat_repo import ChatRepository
from app.schemas.chat_schema import (
    ConversationMessagesResponse,
    FileAttachment,
    MessageResponse,
    SaveMessageRequest,
    SavedMessageResponse,
)
from app.services.session_resolver import SessionResolver

logger = structlog.get_logger()


def decode_attachments(attachments_json: str | None) -> list[FileAttachment] | None:
    """Decode a stored attachment manifest; unreadable manifests yield None."""
    if not attachments_json:
        return None
    try:
        items = json.loads(attachments_json)
        return [FileAttachment.model_validate(item) for item in items]
    except (ValueError, TypeError):
        logger.warning("Unreadable attachment manifest", raw=attachments_json[:200])
        return None


def to_message_response(message: ChatMessage) -> MessageResponse:
    return MessageResponse(
        id=message.id,
        role=message.role,
        content=message.content,
        files=decode_attachments(message.attachments_json),
        created_at=message.created_at,
    )


class ConversationService:
    """Reads and appends messages of conversations owned by the current user."""

    def __init__(self, chat_repo: ChatRepository, user_id: str) -> None:
        self._chat_repo = chat_repo
        self._resolver = SessionResolver(chat_repo, user_id)

    async def get_messages(self, conversation_id: str) -> ConversationMessagesResponse:
        """Retrieve all messages for a conversation owned by the current user."""
        session = await self._resolver.find_owned_session(conversation_id)
        messages = await self._chat_repo.find_messages_by_session_id(session.id)
        return ConversationMessagesResponse(
            conversation_id=conversation_id,
            agent_id=session.agent_id,
            model=session.model,
            messages=[to_message_response(msg) for msg in messages],
        )

    async def save_message(self, request: SaveMessageRequest) -> SavedMessageResponse:
        """Append a message to an existing conversation and touch the session."""
        if request.role is None or not request.content:
            raise ValidationError(message="Role and content are required")
        session = await self._resolver.find_owned_session(request.conversation_id)
        message = await self._chat_repo.create_message(
            session_id=session.id,
            role=request.role,
            content=request.content,
        )
        await self._chat_repo.touch_session(session.id)
        logger.info(
            "Message saved manually",
            session_id=session.id,
            message_id=message.id,
            role=request.role,
        )
        return SavedMessageResponse(
            id=message.id, conversation_id=request.conversation_id
        )
