"""Agent repository for read-only agent lookups."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.agent import Agent


class AgentRepository:
    """Reads agent configurations and their knowledge files."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, agent_id: str) -> Agent | None:
        """Find an agent (with knowledge files eagerly loaded) by its id."""
        result = await self._session.execute(select(Agent).where(Agent.id == agent_id))
        return result.scalar_one_or_none()
