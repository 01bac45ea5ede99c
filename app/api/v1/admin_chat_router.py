"""Chat API router for administrators testing agents."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse

from app.api.v1.streaming import sse_response
from app.core.config import settings
from app.core.rate_limit import limiter
from app.dependencies import (
    get_chat_relay_service,
    get_conversation_service,
    require_role,
)
from app.schemas.chat_schema import (
    ChatRequest,
    SavedMessageResponse,
    SaveMessageRequest,
)
from app.schemas.response_schema import ApiResponse, success_response
from app.services.chat_relay_service import ChatRelayService, ChatVariant
from app.services.conversation_service import ConversationService

router = APIRouter(
    prefix="/api/v1/admin/chat",
    tags=["admin-chat"],
    dependencies=[Depends(require_role("admin"))],
)

ChatRelayServiceDep = Annotated[ChatRelayService, Depends(get_chat_relay_service)]
ConversationServiceDep = Annotated[
    ConversationService, Depends(get_conversation_service)
]


@router.post("/stream")
@limiter.limit(settings.auth.chat_rate_limit)
async def stream_chat(
    request: Request,
    body: ChatRequest,
    relay_service: ChatRelayServiceDep,
) -> StreamingResponse:
    """Relay a chat turn, honouring model and instruction overrides."""
    stream = await relay_service.start_turn(body, ChatVariant.ADMIN)
    return sse_response(stream)


@router.post(
    "/messages",
    response_model=ApiResponse[SavedMessageResponse],
    status_code=status.HTTP_201_CREATED,
)
async def save_message(
    body: SaveMessageRequest,
    service: ConversationServiceDep,
) -> dict:
    """Append a message to one of the caller's conversations."""
    result = await service.save_message(body)
    return success_response(result, status=201, message="Message saved")
