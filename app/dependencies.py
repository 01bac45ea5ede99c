"""Global dependencies for the application."""

from collections.abc import Callable

import httpx
from fastapi import Depends, Request
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.core.database import get_async_session, get_session_factory
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.repositories.agent_repo import AgentRepository
from app.repositories.chat_repo import ChatRepository
from app.services.chat_relay_service import ChatRelayService
from app.services.conversation_service import ConversationService
from app.services.persistence_writer import TurnPersistenceWriter
from app.services.upstream_client import UpstreamClient

# --- Auth dependencies ---


class CurrentUser(BaseModel):
    """Authenticated user extracted from request state."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    role: str


def get_current_user(request: Request) -> CurrentUser:
    """Extract the authenticated user from middleware-populated state."""
    state = getattr(request, "state", None)
    user_id = getattr(state, "user_id", None) if state else None
    if user_id is None:
        raise AuthenticationError(message="Not authenticated")
    return CurrentUser(
        id=state.user_id,
        email=state.email,
        role=state.role,
    )


def require_role(*allowed_roles: str) -> Callable[..., CurrentUser]:
    """Dependency factory that enforces role-based access control."""

    def _check(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                message=f"Role '{current_user.role}' is not permitted"
            )
        return current_user

    return _check


# --- Repositories ---


def get_chat_repository(
    session: AsyncSession = Depends(get_async_session),
) -> ChatRepository:
    """Get ChatRepository bound to the current session."""
    return ChatRepository(session)


def get_agent_repository(
    session: AsyncSession = Depends(get_async_session),
) -> AgentRepository:
    """Get AgentRepository bound to the current session."""
    return AgentRepository(session)


# --- Upstream ---


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Get the shared upstream HTTP client created in the app lifespan."""
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        raise RuntimeError("Upstream HTTP client not initialized")
    return client


def get_upstream_client(
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> UpstreamClient:
    """Get UpstreamClient for the configured completion service."""
    return UpstreamClient(http_client, settings.upstream)


def get_persistence_writer(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> TurnPersistenceWriter:
    """Get the writer that records assistant turns after streaming."""
    return TurnPersistenceWriter(session_factory)


# --- Services ---


def get_chat_relay_service(
    chat_repo: ChatRepository = Depends(get_chat_repository),
    agent_repo: AgentRepository = Depends(get_agent_repository),
    upstream: UpstreamClient = Depends(get_upstream_client),
    writer: TurnPersistenceWriter = Depends(get_persistence_writer),
    current_user: CurrentUser = Depends(get_current_user),
) -> ChatRelayService:
    """Get ChatRelayService for the authenticated user."""
    return ChatRelayService(
        chat_repo=chat_repo,
        agent_repo=agent_repo,
        upstream=upstream,
        writer=writer,
        config=settings.upstream,
        user_id=current_user.id,
        user_email=current_user.email,
    )


def get_conversation_service(
    chat_repo: ChatRepository = Depends(get_chat_repository),
    current_user: CurrentUser = Depends(get_current_user),
) -> ConversationService:
    """Get ConversationService for the authenticated user."""
    return ConversationService(chat_repo=chat_repo, user_id=current_user.id)
