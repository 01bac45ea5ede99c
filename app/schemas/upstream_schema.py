"""Request bodies sent to the upstream completion service."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AgentSchema(BaseModel):
    """Durable model configuration handed to the upstream service."""

    model: str
    instructions: str = ""


class SessionOpenedPayload(BaseModel):
    """One-time context hint sent when a conversation is opened."""

    model_config = ConfigDict(populate_by_name=True)

    user_email: str
    gpt_id: str
    gpt_name: str
    file_urls: list[str] = Field(default_factory=list)
    use_hybrid_search: bool = True
    agent_schema: AgentSchema = Field(alias="schema")
    api_keys: dict[str, str] = Field(default_factory=dict)


class HistoryTurn(BaseModel):
    """Prior turn replayed to the upstream service."""

    role: str
    content: str


class CompletionPayload(BaseModel):
    """Streaming completion request."""

    user_email: str
    gpt_id: str
    gpt_name: str
    message: str
    history: list[HistoryTurn] = Field(default_factory=list)
    memory: list[Any] = Field(default_factory=list)
    user_document_keys: list[str] = Field(default_factory=list)
    use_hybrid_search: bool = True
    model: str
    system_prompt: str = ""
    web_search_enabled: bool = False
    mcp_enabled: bool = False
    mcp_schema: dict[str, Any] | None = None
    api_keys: dict[str, str] = Field(default_factory=dict)
