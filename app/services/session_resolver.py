"""Maps a chat turn onto a conversation session and records the user turn."""

import json
import uuid
from dataclasses import dataclass

import structlog

from app.core.exceptions import AuthorizationError, SessionNotFoundError
from app.models.chat_session import ChatSession
from app.repositories.chat_repo import ChatRepository
from app.schemas.chat_schema import FileAttachment

logger = structlog.get_logger()


@dataclass(frozen=True)
class ResolvedTurn:
    """Session a turn belongs to and whether the turn opened it."""

    session_id: int
    conversation_id: str
    is_new_conversation: bool
    user_message_id: int


def serialize_attachments(files: list[FileAttachment]) -> str | None:
    """Serialize the attachment manifest, or None when there are no files."""
    if not files:
        return None
    return json.dumps([f.model_dump() for f in files])


class SessionResolver:
    """Resolves or creates the session for a turn owned by one user."""

    def __init__(self, chat_repo: ChatRepository, user_id: str) -> None:
        self._chat_repo = chat_repo
        self._user_id = user_id

    async def find_owned_session(self, conversation_id: str) -> ChatSession:
        """Load a session, insisting that the current user owns it."""
        session = await self._chat_repo.find_session_by_conversation_id(conversation_id)
        if session is None:
            raise SessionNotFoundError()
        if session.user_id != self._user_id:
            raise AuthorizationError(
                message="Not authorized to access this conversation"
            )
        return session

    async def resolve(
        self,
        *,
        conversation_id: str | None,
        agent_id: str,
        model: str,
        message: str,
        files: list[FileAttachment],
    ) -> ResolvedTurn:
        """Resolve the session, insert the user message and commit both.

        The commit happens here so that the rows are durable before any
        request reaches the upstream service.
        """
        if conversation_id:
            session = await self.find_owned_session(conversation_id)
            is_new = False
            logger.info(
                "Continuing conversation",
                conversation_id=conversation_id,
                session_id=session.id,
            )
        else:
            session = await self._chat_repo.create_session(
                user_id=self._user_id,
                conversation_id=str(uuid.uuid4()),
                agent_id=agent_id,
                model=model,
            )
            is_new = True
            logger.info(
                "Created chat session",
                conversation_id=session.conversation_id,
                session_id=session.id,
                agent_id=agent_id,
            )

        user_message = await self._chat_repo.create_message(
            session_id=session.id,
            role="user",
            content=message,
            attachments_json=serialize_attachments(files),
        )
        await self._chat_repo.commit()

        return ResolvedTurn(
            session_id=session.id,
            conversation_id=session.conversation_id,
            is_new_conversation=is_new,
            user_message_id=user_message.id,
        )
