"""Shared helpers for Server-Sent Event responses."""

from fastapi.responses import StreamingResponse

from app.services.chat_relay_service import RelayStream

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def sse_response(stream: RelayStream) -> StreamingResponse:
    """Wrap a relay stream as a text/event-stream response."""
    return StreamingResponse(
        stream.frames(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
