"""Chat relay: forwards a turn upstream and streams the reply back."""

import asyncio
import enum
from collections.abc import AsyncGenerator, Iterator
from dataclasses import dataclass, field

import httpx
import structlog

from app.core.exceptions import UpstreamErrorStatusError, UpstreamUnavailableError
from app.core.settings import UpstreamConfig
from app.models.agent import Agent
from app.repositories.agent_repo import AgentRepository
from app.repositories.chat_repo import ChatRepository
from app.schemas.chat_schema import ChatRequest
from app.schemas.upstream_schema import CompletionPayload, HistoryTurn
from app.services.persistence_writer import TurnPersistenceWriter
from app.services.session_resolver import ResolvedTurn, SessionResolver
from app.services.sse_reframer import (
    ContentEvent,
    ConversationIdEvent,
    DoneEvent,
    ErrorEvent,
    PassthroughEvent,
    RelayEvent,
    SSEReframer,
    encode_frame,
)
from app.services.turn_validator import validate_turn
from app.services.upstream_client import UpstreamClient
from app.services.upstream_notifier import UpstreamNotifier, collect_file_urls

logger = structlog.get_logger()

STREAM_INTERRUPTED_MESSAGE = "Upstream stream interrupted"


class ChatVariant(enum.StrEnum):
    """Call site a turn arrived through."""

    USER = "user"
    ADMIN = "admin"


class StreamOutcome(enum.Enum):
    """How an upstream stream concluded."""

    DONE = "done"
    EXHAUSTED = "exhausted"
    ERROR = "error"


@dataclass(frozen=True)
class AgentSettings:
    """Agent configuration effective for one turn."""

    name: str
    model: str
    instructions: str


@dataclass
class _RelayState:
    content: list[str] = field(default_factory=list)
    outcome: StreamOutcome | None = None


class RelayStream:
    """Client-facing body of one turn.

    Owns the open upstream response; iterating ``frames`` reframes it, keeps
    the reply text and persists it once the stream has concluded normally.
    """

    def __init__(
        self,
        response: httpx.Response,
        turn: ResolvedTurn,
        writer: TurnPersistenceWriter,
    ) -> None:
        self._response = response
        self._turn = turn
        self._writer = writer
        self.outcome: StreamOutcome | None = None
        self.persisted = False

    @property
    def turn(self) -> ResolvedTurn:
        return self._turn

    async def frames(self) -> AsyncGenerator[bytes, None]:
        """Yield SSE frames for the client, recording the assistant turn.

        The reply is persisted before the terminal ``done`` frame is sent, so
        a client that hangs up once it has the whole reply cannot lose it.
        """
        state = _RelayState()
        reframer = SSEReframer()
        try:
            if self._turn.is_new_conversation:
                yield encode_frame(ConversationIdEvent(self._turn.conversation_id))
            try:
                async for chunk in self._response.aiter_bytes():
                    for frame in self._relay(reframer.feed(chunk), state):
                        yield frame
                    if state.outcome is not None:
                        break
                else:
                    for frame in self._relay(reframer.finish(), state):
                        yield frame
            except httpx.HTTPError:
                logger.exception(
                    "Upstream stream interrupted",
                    session_id=self._turn.session_id,
                    received_fragments=len(state.content),
                )
                state.outcome = StreamOutcome.ERROR
                yield encode_frame(ErrorEvent(STREAM_INTERRUPTED_MESSAGE))
        except (asyncio.CancelledError, GeneratorExit):
            logger.info(
                "Client aborted turn; reply discarded",
                session_id=self._turn.session_id,
                received_fragments=len(state.content),
            )
            raise
        finally:
            await self._response.aclose()

        self.outcome = state.outcome or StreamOutcome.EXHAUSTED
        if self.outcome is StreamOutcome.ERROR:
            logger.info(
                "Skipping persistence for failed turn",
                session_id=self._turn.session_id,
                discarded_fragments=len(state.content),
            )
            return

        # Shielded: the turn has concluded, a disconnect must not cancel the write.
        self.persisted = await asyncio.shield(
            self._writer.write(self._turn.session_id, "".join(state.content))
        )
        yield encode_frame(DoneEvent())

    def _relay(self, events: list[RelayEvent], state: _RelayState) -> Iterator[bytes]:
        for event in events:
            match event:
                case ContentEvent(text=text):
                    state.content.append(text)
                    yield encode_frame(event)
                case DoneEvent():
                    # Forwarded by frames() once the reply is stored.
                    state.outcome = StreamOutcome.DONE
                    return
                case ErrorEvent(message=message):
                    logger.warning(
                        "Upstream reported an error",
                        session_id=self._turn.session_id,
                        error=message,
                    )
                    state.outcome = StreamOutcome.ERROR
                    yield encode_frame(event)
                    return
                case ConversationIdEvent():
                    # The relay announces the conversation itself.
                    logger.debug(
                        "Dropped upstream conversation id",
                        session_id=self._turn.session_id,
                    )
                case PassthroughEvent():
                    yield encode_frame(event)


class ChatRelayService:
    """Runs one chat turn for one authenticated user."""

    def __init__(
        self,
        *,
        chat_repo: ChatRepository,
        agent_repo: AgentRepository,
        upstream: UpstreamClient,
        writer: TurnPersistenceWriter,
        config: UpstreamConfig,
        user_id: str,
        user_email: str,
    ) -> None:
        self._chat_repo = chat_repo
        self._agent_repo = agent_repo
        self._upstream = upstream
        self._notifier = UpstreamNotifier(upstream)
        self._writer = writer
        self._config = config
        self._user_id = user_id
        self._user_email = user_email

    async def start_turn(
        self, request: ChatRequest, variant: ChatVariant = ChatVariant.USER
    ) -> RelayStream:
        """Validate, record the user turn and open the upstream stream.

        Every failure raised here happens before the client stream starts.
        """
        validate_turn(request)
        agent_id = request.agent_id or ""

        if variant is ChatVariant.ADMIN:
            logger.info(
                "Admin chat request",
                user_id=self._user_id,
                agent_id=agent_id,
                message_length=len(request.message),
                file_count=len(request.files),
                model=request.model,
                instructions_length=len(request.instructions or ""),
                web_search=request.web_search,
                conversation_id=request.conversation_id,
            )

        agent = await self._agent_repo.find_by_id(agent_id)
        if agent is None:
            logger.warning("Unknown agent; using request settings", agent_id=agent_id)
        agent_settings = self.resolve_agent_settings(request, agent, variant)

        resolver = SessionResolver(self._chat_repo, self._user_id)
        turn = await resolver.resolve(
            conversation_id=request.conversation_id,
            agent_id=agent_id,
            model=agent_settings.model,
            message=request.message,
            files=request.files,
        )

        if turn.is_new_conversation:
            await self._notifier.notify(
                user_email=self._user_email,
                agent_id=agent_id,
                agent_name=agent_settings.name,
                file_urls=collect_file_urls(agent, request.files),
                model=agent_settings.model,
                instructions=agent_settings.instructions,
            )

        payload = CompletionPayload(
            user_email=self._user_email,
            gpt_id=agent_id,
            gpt_name=agent_settings.name,
            message=request.message,
            history=await self._load_history(turn),
            user_document_keys=[f.url or f.name or "" for f in request.files],
            model=agent_settings.model,
            system_prompt=agent_settings.instructions,
            web_search_enabled=request.web_search,
        )
        try:
            response = await self._upstream.open_stream(payload)
        except (UpstreamUnavailableError, UpstreamErrorStatusError) as exc:
            # The user turn is already stored under this conversation.
            exc.details = {
                "conversation_id": turn.conversation_id,
                "is_new_conversation": turn.is_new_conversation,
            }
            raise
        logger.info(
            "Upstream stream opened",
            session_id=turn.session_id,
            is_new_conversation=turn.is_new_conversation,
            variant=variant.value,
        )
        return RelayStream(response=response, turn=turn, writer=self._writer)

    def resolve_agent_settings(
        self, request: ChatRequest, agent: Agent | None, variant: ChatVariant
    ) -> AgentSettings:
        """Pick model and instructions for a turn.

        End users always get the agent's stored configuration; admins may
        override it from the request to try out changes.
        """
        name = agent.name if agent is not None and agent.name else None
        stored_model = agent.model if agent is not None else None
        stored_instructions = agent.instructions if agent is not None else None

        if variant is ChatVariant.ADMIN:
            model = request.model or stored_model
            instructions = (
                request.instructions
                if request.instructions is not None
                else stored_instructions
            )
        else:
            model = stored_model or request.model
            instructions = (
                stored_instructions
                if stored_instructions is not None
                else request.instructions
            )

        return AgentSettings(
            name=name or self._config.fallback_agent_name,
            model=model or self._config.default_model,
            instructions=instructions or "",
        )

    async def _load_history(self, turn: ResolvedTurn) -> list[HistoryTurn]:
        if not self._config.replay_history or turn.is_new_conversation:
            return []
        messages = await self._chat_repo.find_messages_by_session_id(turn.session_id)
        return [
            HistoryTurn(role=msg.role, content=msg.content)
            for msg in messages
            if msg.id != turn.user_message_id
        ]
