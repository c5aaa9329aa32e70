"""Incremental reader for ``streamGenerateContent`` responses.

The HTTP body arrives as byte chunks whose boundaries mean nothing. Events are
separated by a blank line; each event carries one JSON response document,
optionally framed as Server-Sent-Events ``data:`` lines.
"""

from __future__ import annotations

import json
from enum import StrEnum
from typing import TYPE_CHECKING, Self, TypeAlias

from pydantic import ValidationError

from generative_ai.errors import DecodeError, MalformedEventError, TruncatedStreamError
from generative_ai.logger import BaseComponent
from generative_ai.models import GenerateContentResponse

if TYPE_CHECKING:
    from collections.abc import Generator, Iterable, Iterator
    from types import TracebackType

DELIMITER = b"\n\n"
_SSE_FIELDS = frozenset({"data", "event", "id", "retry"})

StreamEvent = GenerateContentResponse
StreamResult: TypeAlias = StreamEvent | DecodeError


class ReaderState(StrEnum):
    AWAITING_DATA = "awaiting_data"
    EMITTING_EVENT = "emitting_event"
    CLOSED = "closed"


class EventStreamReader(BaseComponent):
    """Pull-based reader that turns a chunked byte stream into response events.

    Iterating the reader yields :class:`GenerateContentResponse` objects in stream
    order. A payload that cannot be decoded is logged, recorded on :attr:`errors`
    and skipped; with ``strict=True`` it is raised instead and the reader closes.
    :meth:`iter_results` yields events and errors interleaved, in stream order.

    The reader is single-use. Closing it, or abandoning iteration, closes the
    chunk source when the source has a ``close()`` method (generators and
    streaming HTTP bodies both do).

    Callers that drive the transport themselves can skip the source and use
    :meth:`feed` and :meth:`finish` directly.
    """

    def __init__(self, source: Iterable[bytes | str] | None = None, *, strict: bool = False) -> None:
        self._source = source
        self._strict = strict
        self._buffer = bytearray()
        self._consumed = False
        self._released = False
        self.state = ReaderState.AWAITING_DATA
        self.errors: list[DecodeError] = []
        self.event_count = 0

    @property
    def strict(self) -> bool:
        return self._strict

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def __iter__(self) -> Iterator[StreamEvent]:
        results = self.iter_results()
        try:
            for result in results:
                if isinstance(result, DecodeError):
                    if self._strict:
                        raise result
                    continue
                yield result
        finally:
            results.close()

    def iter_results(self) -> Generator[StreamResult]:
        """Pull chunks from the source and yield each decoded event or decode error."""
        if self._source is None:
            message = "EventStreamReader has no chunk source; use feed() and finish()"
            raise RuntimeError(message)
        if self._consumed:
            message = "EventStreamReader can only be consumed once; issue the request again"
            raise RuntimeError(message)
        self._consumed = True
        return self._pull(self._source)

    def _pull(self, source: Iterable[bytes | str]) -> Generator[StreamResult]:
        self.log_start("read_stream", strict=self._strict)
        try:
            for chunk in source:
                for result in self.feed(chunk):
                    yield self._record(result)
                    # close() may run while the consumer holds a result.
                    if self.state is ReaderState.CLOSED:
                        return
                self.state = ReaderState.AWAITING_DATA
            for result in self.finish():
                yield self._record(result)
        finally:
            self.close()
            self.log_end("read_stream", events=self.event_count, errors=len(self.errors))

    def feed(self, chunk: bytes | str) -> list[StreamResult]:
        """Append one chunk and return every event completed by it."""
        if self.state is ReaderState.CLOSED:
            message = "Cannot feed a closed EventStreamReader"
            raise RuntimeError(message)

        self._buffer.extend(chunk.encode("utf-8") if isinstance(chunk, str) else chunk)
        if b"\r" in self._buffer:
            # A CRLF pair may straddle two chunks, so normalize the whole buffer.
            self._buffer = bytearray(self._buffer.replace(b"\r\n", b"\n"))

        results: list[StreamResult] = []
        while (index := self._buffer.find(DELIMITER)) >= 0:
            payload = bytes(self._buffer[:index])
            del self._buffer[: index + len(DELIMITER)]
            result = _decode_payload(payload, final=False)
            if result is not None:
                results.append(result)

        self.state = ReaderState.EMITTING_EVENT if results else ReaderState.AWAITING_DATA
        return results

    def finish(self) -> list[StreamResult]:
        """Signal end of data and decode whatever is still buffered."""
        if self.state is ReaderState.CLOSED:
            return []
        leftover = bytes(self._buffer)
        self._buffer.clear()
        self.state = ReaderState.CLOSED
        result = _decode_payload(leftover, final=True) if leftover.strip() else None
        return [result] if result is not None else []

    def close(self) -> None:
        """Move to ``CLOSED``, drop buffered bytes and release the chunk source."""
        self.state = ReaderState.CLOSED
        self._buffer.clear()
        if self._released:
            return
        self._released = True
        close_source = getattr(self._source, "close", None)
        if callable(close_source):
            close_source()

    def _record(self, result: StreamResult) -> StreamResult:
        if not isinstance(result, DecodeError):
            self.event_count += 1
            return result
        self.errors.append(result)
        if self._strict:
            self.logger.error("stream_event_rejected", error=type(result).__name__, detail=str(result))
        else:
            self.logger.warning("stream_event_skipped", error=type(result).__name__, detail=str(result))
        return result


def _decode_payload(payload: bytes, *, final: bool) -> StreamResult | None:
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError:
        return MalformedEventError(payload.decode("utf-8", errors="replace"), "invalid UTF-8")

    document = _event_document(text)
    if not document.strip():
        return None

    try:
        decoded = json.loads(document)
    except json.JSONDecodeError as exc:
        if final:
            return TruncatedStreamError(document)
        return MalformedEventError(document, f"invalid JSON: {exc.msg}")

    if isinstance(decoded, dict) and "error" in decoded:
        return MalformedEventError(document, f"API error: {_error_message(decoded['error'])}")

    try:
        return GenerateContentResponse.model_validate(decoded)
    except DecodeError as exc:
        error = MalformedEventError(document, str(exc))
        error.__cause__ = exc
        return error
    except ValidationError as exc:
        error = MalformedEventError(document, f"unexpected response shape ({exc.error_count()} errors)")
        error.__cause__ = exc
        return error


def _event_document(text: str) -> str:
    """Return the JSON text of one event, unwrapping SSE ``data:`` fields when present."""
    lines = text.split("\n")
    if not any(_is_sse_line(line) for line in lines):
        return text
    data_lines: list[str] = []
    for line in lines:
        name, separator, value = line.partition(":")
        if separator and name == "data":
            data_lines.append(value.removeprefix(" "))
    return "\n".join(data_lines)


def _is_sse_line(line: str) -> bool:
    name, separator, _ = line.partition(":")
    return bool(separator) and (name == "" or name in _SSE_FIELDS)


def _error_message(error: object) -> str:
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return str(error["message"])
    return str(error)
