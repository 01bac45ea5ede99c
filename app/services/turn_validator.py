"""Structural checks for chat turns, run before any I/O."""

from app.core.exceptions import ValidationError
from app.schemas.chat_schema import ChatRequest


def validate_turn(request: ChatRequest) -> None:
    """Reject a turn with nothing to say or no agent to say it to.

    A whitespace-only message is acceptable when files are attached.
    """
    has_text = bool(request.message and request.message.strip())
    if not has_text and not request.files:
        raise ValidationError()
    if not request.agent_id or not request.agent_id.strip():
        raise ValidationError()
