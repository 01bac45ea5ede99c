"""Chat repository for session and message database operations."""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.chat_message import ChatMessage
from app.models.chat_session import ChatSession


class ChatRepository:
    """Encapsulates chat session and message database queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_session_by_conversation_id(
        self, conversation_id: str
    ) -> ChatSession | None:
        """Find a chat session by its conversation UUID."""
        result = await self._session.execute(
            select(ChatSession).where(ChatSession.conversation_id == conversation_id)
        )
        return result.scalar_one_or_none()

    async def create_session(
        self,
        user_id: str,
        conversation_id: str,
        agent_id: str,
        model: str,
    ) -> ChatSession:
        """Create a new chat session."""
        session = ChatSession(
            user_id=user_id,
            conversation_id=conversation_id,
            agent_id=agent_id,
            model=model,
        )
        self._session.add(session)
        await self._session.flush()
        await self._session.refresh(session)
        return session

    async def find_messages_by_session_id(self, session_id: int) -> list[ChatMessage]:
        """Retrieve all messages for a session in chronological order."""
        result = await self._session.execute(
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        )
        return list(result.scalars().all())

    async def create_message(
        self,
        session_id: int,
        role: str,
        content: str,
        attachments_json: str | None = None,
    ) -> ChatMessage:
        """Create a single chat message."""
        message = ChatMessage(
            session_id=session_id,
            role=role,
            content=content,
            attachments_json=attachments_json,
        )
        self._session.add(message)
        await self._session.flush()
        await self._session.refresh(message)
        return message

    async def touch_session(self, session_id: int) -> None:
        """Refresh the last-activity timestamp of a session."""
        await self._session.execute(
            update(ChatSession)
            .where(ChatSession.id == session_id)
            .values(last_active_at=func.now())
        )

    async def commit(self) -> None:
        """Commit pending writes so they are visible to other connections."""
        await self._session.commit()
