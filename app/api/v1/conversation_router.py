"""Conversation history API router."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.dependencies import get_conversation_service, require_role
from app.schemas.chat_schema import ConversationMessagesResponse
from app.schemas.response_schema import ApiResponse, success_response
from app.services.conversation_service import ConversationService

router = APIRouter(
    prefix="/api/v1/conversations",
    tags=["conversations"],
    dependencies=[Depends(require_role("user", "admin"))],
)

ConversationServiceDep = Annotated[
    ConversationService, Depends(get_conversation_service)
]


@router.get(
    "/{conversation_id}/messages",
    response_model=ApiResponse[ConversationMessagesResponse],
)
async def get_conversation_messages(
    conversation_id: str,
    service: ConversationServiceDep,
) -> dict:
    """Return the conversation's messages in chronological order."""
    result = await service.get_messages(conversation_id)
    return success_response(result)
