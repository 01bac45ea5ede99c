"""Records the assistant turn once an upstream stream has concluded."""

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.repositories.chat_repo import ChatRepository

logger = structlog.get_logger()


class TurnPersistenceWriter:
    """Writes the assistant message and touches the session, in its own DB session.

    Runs after the client stream has been handed over, so a failure can only
    be logged.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def write(self, session_id: int, content: str) -> bool:
        """Persist the assistant reply; return whether it was stored."""
        try:
            async with self._session_factory() as db:
                repo = ChatRepository(db)
                message = await repo.create_message(
                    session_id=session_id,
                    role="assistant",
                    content=content,
                )
                await repo.touch_session(session_id)
                await db.commit()
        except SQLAlchemyError:
            logger.exception(
                "Failed to persist assistant message",
                error_code="PERSISTENCE_FAILURE",
                session_id=session_id,
                content_length=len(content),
            )
            return False

        logger.info(
            "Assistant message saved",
            session_id=session_id,
            message_id=message.id,
            content_length=len(content),
        )
        return True
