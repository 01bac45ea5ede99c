"""Unit tests for turn validation."""

import pytest

from app.core.exceptions import ValidationError
from app.schemas.chat_schema import ChatRequest, FileAttachment
from app.services.turn_validator import validate_turn


def test_accepts_message_and_agent() -> None:
    validate_turn(ChatRequest(message="Hello", agent_id="agent-1"))


def test_accepts_files_without_text() -> None:
    validate_turn(
        ChatRequest(message="  ", agent_id="agent-1", files=[FileAttachment(name="a")])
    )


@pytest.mark.parametrize(
    "request_",
    [
        ChatRequest(message="", agent_id="agent-1"),
        ChatRequest(message=" \n\t", agent_id="agent-1"),
        ChatRequest(message="Hello"),
        ChatRequest(message="Hello", agent_id=""),
        ChatRequest(message="Hello", agent_id="   "),
        ChatRequest(files=[FileAttachment(name="a")]),
    ],
    ids=[
        "empty-message",
        "whitespace-message",
        "missing-agent",
        "empty-agent",
        "blank-agent",
        "files-without-agent",
    ],
)
def test_rejects_invalid_turns(request_: ChatRequest) -> None:
    with pytest.raises(ValidationError) as exc_info:
        validate_turn(request_)
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Message and agent ID are required"
