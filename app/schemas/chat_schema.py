"""Chat request and response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FileAttachment(BaseModel):
    """File uploaded to object storage and attached to a user turn."""

    name: str = ""
    url: str = ""
    size: int = 0
    type: str = ""


class ChatRequest(BaseModel):
    """Chat turn request schema.

    Emptiness of ``message`` and presence of ``agent_id`` are checked by the
    turn validator so they are reported as 400 rather than 422.
    """

    message: str = Field(default="", max_length=32000)
    agent_id: str | None = None
    conversation_id: str | None = None
    files: list[FileAttachment] = Field(default_factory=list)
    web_search: bool = False
    instructions: str | None = None
    model: str | None = None


class SaveMessageRequest(BaseModel):
    """Manual message insert into an existing conversation."""

    conversation_id: str = Field(..., min_length=1)
    role: Literal["user", "assistant", "system"] | None = None
    content: str = ""


class SavedMessageResponse(BaseModel):
    """Identifier of a manually inserted message."""

    model_config = ConfigDict(frozen=True)

    id: int
    conversation_id: str


class MessageResponse(BaseModel):
    """Single message within a conversation."""

    model_config = ConfigDict(frozen=True)

    id: int
    role: str
    content: str
    files: list[FileAttachment] | None = None
    created_at: datetime


class ConversationMessagesResponse(BaseModel):
    """All messages for a conversation."""

    model_config = ConfigDict(frozen=True)

    conversation_id: str
    agent_id: str
    model: str
    messages: list[MessageResponse]
