"""Chat API router for end users."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from app.api.v1.streaming import sse_response
from app.core.config import settings
from app.core.rate_limit import limiter
from app.dependencies import get_chat_relay_service, require_role
from app.schemas.chat_schema import ChatRequest
from app.services.chat_relay_service import ChatRelayService, ChatVariant

router = APIRouter(
    prefix="/api/v1/chat",
    tags=["chat"],
    dependencies=[Depends(require_role("user", "admin"))],
)

ChatRelayServiceDep = Annotated[ChatRelayService, Depends(get_chat_relay_service)]


@router.post("/stream")
@limiter.limit(settings.auth.chat_rate_limit)
async def stream_chat(
    request: Request,
    body: ChatRequest,
    relay_service: ChatRelayServiceDep,
) -> StreamingResponse:
    """Relay a chat turn to the completion service as Server-Sent Events."""
    stream = await relay_service.start_turn(body, ChatVariant.USER)
    return sse_response(stream)
