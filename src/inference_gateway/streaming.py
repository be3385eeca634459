"""Server-Sent Events framing for streaming chat completions.

The gateway streams ``text/event-stream`` bodies.  Network chunks do not line
up with lines or events, so :class:`SSEDecoder` keeps a residual buffer and
only emits an event once its terminating blank line has been seen:

* ``event:`` sets the event name, ``data:`` appends to the data field
  (several ``data:`` lines are joined with ``\\n``).
* Lines starting with ``:`` are comments.  Other fields (``id``, ``retry``,
  anything unknown) are ignored.
* An event without any ``data:`` line is dropped.
* At end of stream an unterminated trailing event is discarded, never emitted.

The framing layer does not look inside ``data``.  Deciding that the model has
finished (``finish_reason``, the ``[DONE]`` sentinel) is up to the caller, as
is decoding the payload, see :meth:`ServerSentEvent.decode_chunk`.
"""

import codecs
import json
from collections.abc import AsyncGenerator, AsyncIterable
from dataclasses import dataclass
from typing import Any

from inference_gateway.errors import DecodeError
from inference_gateway.models import CreateChatCompletionStreamResponse, decode_model

DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True)
class ServerSentEvent:
    """One framed event.

    Attributes:
        data: Raw data field, multi-line data joined with ``\\n``.
        event: Event name, or ``None`` when the event carried no ``event:`` line.
    """

    data: str
    event: str | None = None

    @property
    def is_done(self) -> bool:
        """``True`` for the OpenAI-style ``data: [DONE]`` terminator."""
        return self.data.strip() == DONE_SENTINEL

    def json(self) -> Any:
        """Parse :attr:`data` as JSON.

        Raises:
            DecodeError: The data is not valid JSON.
        """
        try:
            return json.loads(self.data)
        except json.JSONDecodeError as exc:
            raise DecodeError(
                f"Event data is not valid JSON: {exc}", original_error=exc
            ) from exc

    def decode_chunk(self) -> CreateChatCompletionStreamResponse:
        """Decode :attr:`data` into a :class:`CreateChatCompletionStreamResponse`.

        Raises:
            DecodeError: The data does not match the chunk schema.
        """
        return decode_model(CreateChatCompletionStreamResponse, self.data)


class SSEDecoder:
    """Incremental ``text/event-stream`` parser.

    Feed it chunks in arrival order; each :meth:`feed` returns the events the
    chunk completed (zero, one or several).  The result for a body does not
    depend on how the body was split into chunks.

    Example::

        decoder = SSEDecoder()
        events = decoder.feed(b'data: {"a": 1}\\n')  # -> []
        events = decoder.feed(b"\\n")                # -> [ServerSentEvent('{"a": 1}')]
        decoder.close()
    """

    def __init__(self) -> None:
        # Invalid UTF-8 becomes U+FFFD, as browsers' EventSource does.
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._event: str | None = None
        self._data: list[str] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> bool:
        """Whether a partial line or an unterminated event is buffered."""
        return bool(self._buffer or self._data or self._event is not None)

    def feed(self, chunk: bytes | str) -> list[ServerSentEvent]:
        """Consume *chunk* and return every event it completed, in stream order.

        Raises:
            RuntimeError: The decoder has already been closed.
        """
        if self._closed:
            raise RuntimeError("cannot feed a closed SSEDecoder")

        text = self._utf8.decode(chunk) if isinstance(chunk, bytes) else chunk
        if not text:
            return []

        *lines, self._buffer = (self._buffer + text).split("\n")

        events: list[ServerSentEvent] = []
        for line in lines:
            event = self._process_line(line.removesuffix("\r"))
            if event is not None:
                events.append(event)
        return events

    def close(self) -> bool:
        """Mark end of stream, discarding any unterminated trailing event.

        Returns:
            ``True`` if partial data was discarded.
        """
        if self._closed:
            return False
        self._buffer += self._utf8.decode(b"", final=True)
        discarded = self.pending
        self._buffer = ""
        self._event = None
        self._data = []
        self._closed = True
        return discarded

    def _process_line(self, line: str) -> ServerSentEvent | None:
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return None

        field, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if field == "event":
            self._event = value
        elif field == "data":
            self._data.append(value)
        return None

    def _dispatch(self) -> ServerSentEvent | None:
        data, event = self._data, self._event
        self._data = []
        self._event = None
        if not data:
            return None
        return ServerSentEvent(data="\n".join(data), event=event or None)


async def aiter_sse(
    byte_stream: AsyncIterable[bytes],
) -> AsyncGenerator[ServerSentEvent, None]:
    """Lazily frame *byte_stream* into :class:`ServerSentEvent` objects.

    Each pull suspends until enough bytes have arrived to complete an event or
    the stream ends.  An exception raised by *byte_stream* propagates on the
    pull that hits it; events yielded earlier are unaffected.
    """
    decoder = SSEDecoder()
    async for chunk in byte_stream:
        for event in decoder.feed(chunk):
            yield event
    decoder.close()
