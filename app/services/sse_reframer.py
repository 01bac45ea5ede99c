"""Incremental reframing of upstream Server-Sent Event streams.

The upstream service writes ``data: <json>`` events separated by a blank
line, but the network delivers them in arbitrary byte chunks: one chunk may
hold several events, half an event, or half of a multi-byte character. The
reframer keeps the undelimited tail of the stream in a per-turn buffer and
only emits events once their delimiter has arrived.
"""

import codecs
import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Final

import structlog

logger = structlog.get_logger()

EVENT_DELIMITER: Final = "\n\n"
DATA_PREFIX: Final = "data:"


@dataclass(frozen=True)
class ContentEvent:
    """Incremental fragment of the assistant reply."""

    text: str


@dataclass(frozen=True)
class DoneEvent:
    """Terminal signal: no more content follows."""


@dataclass(frozen=True)
class ConversationIdEvent:
    """Announcement of a newly created conversation."""

    conversation_id: str


@dataclass(frozen=True)
class ErrorEvent:
    """Failure reported in-band."""

    message: str


@dataclass(frozen=True)
class PassthroughEvent:
    """Event the relay does not interpret, kept as its complete raw text.

    Every line survives (`event:`, `id:`, each `data:` line exactly as sent),
    so forwarding reproduces the upstream event byte-for-byte apart from the
    CRLF folding applied while splitting.
    """

    raw: str


RelayEvent = ContentEvent | DoneEvent | ConversationIdEvent | ErrorEvent | PassthroughEvent


def encode_frame(event: RelayEvent) -> bytes:
    """Render an event in the client-facing wire format."""
    match event:
        case ContentEvent(text=text):
            body: dict[str, str] = {"type": "content", "data": text}
        case DoneEvent():
            body = {"type": "done"}
        case ConversationIdEvent(conversation_id=conversation_id):
            body = {"type": "conversation_id", "id": conversation_id}
        case ErrorEvent(message=message):
            body = {"type": "error", "error": message}
        case PassthroughEvent(raw=raw):
            return f"{raw}{EVENT_DELIMITER}".encode()
    payload = json.dumps(body, ensure_ascii=False, separators=(",", ":"))
    return f"{DATA_PREFIX} {payload}{EVENT_DELIMITER}".encode()


def split_events(buffer: str, text: str) -> tuple[list[str], str]:
    """Split buffered text plus newly decoded text into complete raw events.

    Returns the complete events and the undelimited remainder, which becomes
    the next buffer. CRLF line endings are folded to LF first; a trailing
    ``\\r`` stays in the remainder until its ``\\n`` arrives.
    """
    combined = (buffer + text).replace("\r\n", "\n")
    *complete, remainder = combined.split(EVENT_DELIMITER)
    return complete, remainder


def extract_data(raw_event: str) -> str | None:
    """Return the payload of the first ``data:`` line, or None."""
    for line in raw_event.split("\n"):
        if line.startswith(DATA_PREFIX):
            value = line[len(DATA_PREFIX):]
            return value[1:] if value.startswith(" ") else value
    return None


def parse_event(raw_event: str) -> RelayEvent | None:
    """Classify one complete raw event.

    Events without a data line (comments, keep-alives) yield None.
    """
    payload = extract_data(raw_event)
    if payload is None:
        return None

    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        logger.warning(
            "Malformed upstream frame forwarded verbatim",
            error_code="MALFORMED_UPSTREAM_FRAME",
            payload=payload[:200],
        )
        return PassthroughEvent(raw_event)

    if not isinstance(data, dict):
        return PassthroughEvent(raw_event)

    match data.get("type"):
        case "content" | "chunk":
            text = data.get("data")
            if text is None:
                text = data.get("content")
            return ContentEvent("" if text is None else str(text))
        case "end" | "done":
            return DoneEvent()
        case "conversation_id":
            return ConversationIdEvent(str(data.get("id", "")))
        case "error":
            message = data.get("error") or data.get("message") or data.get("data")
            return ErrorEvent(str(message) if message else "Unknown upstream error")
        case _:
            return PassthroughEvent(raw_event)


class SSEReframer:
    """Per-turn reframing state: an incremental decoder and a text buffer."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def buffer(self) -> str:
        """Undelimited text awaiting more bytes."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[RelayEvent]:
        """Consume one network chunk and return the events it completed."""
        text = self._decoder.decode(chunk)
        raw_events, self._buffer = split_events(self._buffer, text)
        return _parse_all(raw_events)

    def finish(self) -> list[RelayEvent]:
        """Flush the decoder and treat the remaining buffer as a final event."""
        text = self._decoder.decode(b"", final=True)
        raw_events, remainder = split_events(self._buffer, text)
        self._buffer = ""
        raw_events.append(remainder)
        return _parse_all(raw_events)


def reframe(chunks: Iterable[bytes]) -> Iterator[RelayEvent]:
    """Yield logical events from a sequence of arbitrarily cut byte chunks."""
    reframer = SSEReframer()
    for chunk in chunks:
        yield from reframer.feed(chunk)
    yield from reframer.finish()


def _parse_all(raw_events: list[str]) -> list[RelayEvent]:
    events: list[RelayEvent] = []
    for raw_event in raw_events:
        event = parse_event(raw_event)
        if event is not None:
            events.append(event)
    return events
