"""
Incremental decoding of the graph endpoint's streamed body.

The server sends one JSON record per line (NDJSON), optionally wrapped in
server-sent-event framing. GraphStreamReader turns the raw byte chunks of
the HTTP body into GraphResponse items:

    async with client.get_graph_stream(paper_id) as stream:
        async for item in stream:
            ...

A failure is raised from the iteration as an ApiError; after that the
reader is finished and the byte source is closed.
"""

import asyncio
import json
from collections import deque
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

import httpx
from pydantic import ValidationError

from connected_papers.apis.errors import ApiError, MalformedPayloadError, TransportError
from connected_papers.utils.logging import get_logger
from connected_papers.utils.schemas import GraphResponse, StreamItem

logger = get_logger(__name__)

# Server-sent-event fields that carry no payload
_SSE_IGNORED_FIELDS = (b"event:", b"id:", b"retry:")


def decode_record(record: bytes) -> StreamItem:
    """Decode one framed record into a StreamItem.

    Args:
        record: Record bytes, without delimiter or SSE prefix.

    Returns:
        Decoded item.

    Raises:
        MalformedPayloadError: Record is not UTF-8, not JSON, or not a graph response.
    """
    try:
        data = json.loads(record.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise MalformedPayloadError(f"invalid UTF-8: {e}", payload=record) from e
    except json.JSONDecodeError as e:
        raise MalformedPayloadError(f"invalid JSON: {e}", payload=record) from e

    try:
        return GraphResponse.model_validate(data)
    except ValidationError as e:
        raise MalformedPayloadError(
            f"unexpected record shape: {e.error_count()} validation error(s)",
            payload=record,
        ) from e


def _frame(line: bytes) -> bytes | None:
    """Strip framing from one line; None when the line carries no record."""
    line = line.strip()
    if not line or line.startswith(b":"):
        return None
    if line.startswith(_SSE_IGNORED_FIELDS):
        return None
    if line.startswith(b"data:"):
        line = line[len(b"data:") :].strip()
        return line or None
    return line


class GraphStreamReader:
    """Lazy, finite, single-pass async iterator of StreamItems.

    Chunk boundaries are opaque: bytes are buffered until a newline and
    each complete line is decoded as one record. A record may span chunks
    and a chunk may hold several records. A non-blank unterminated tail is
    decoded when the transport ends.

    Errors:
        MalformedPayloadError: a record failed to decode.
        TransportError: the byte source failed (network, timeout, body decoding).
        Any ApiError raised by the byte source is passed through unchanged.

    After the first error, or once the body is exhausted or the reader
    closed, every further pull raises StopAsyncIteration.
    """

    def __init__(self, chunks: AsyncIterable[bytes], *, delimiter: bytes = b"\n"):
        if not delimiter:
            raise ValueError("delimiter must be non-empty")
        self._chunks = chunks
        self._delimiter = delimiter
        self._iterator: AsyncIterator[bytes] | None = None
        self._buffer = bytearray()
        self._pending: deque[bytes] = deque()
        self._exhausted = False
        self._closed = False
        self.items_read = 0

    @property
    def closed(self) -> bool:
        """True once the reader is finished and its source released."""
        return self._closed

    def __aiter__(self) -> "GraphStreamReader":
        return self

    async def __anext__(self) -> StreamItem:
        if self._closed:
            raise StopAsyncIteration

        while not self._pending:
            if self._exhausted:
                await self.aclose()
                raise StopAsyncIteration
            await self._fill()

        record = self._pending.popleft()
        try:
            item = decode_record(record)
        except MalformedPayloadError as e:
            logger.warning(
                "Malformed stream record",
                detail=e.detail,
                items_read=self.items_read,
            )
            await self.aclose()
            raise

        self.items_read += 1
        return item

    async def _fill(self) -> None:
        """Pull one chunk from the source and frame any complete records."""
        if self._iterator is None:
            self._iterator = aiter(self._chunks)

        try:
            chunk = await anext(self._iterator)
        except StopAsyncIteration:
            self._exhausted = True
            tail = bytes(self._buffer)
            self._buffer.clear()
            record = _frame(tail)
            if record is not None:
                self._pending.append(record)
            return
        except ApiError:
            await self.aclose()
            raise
        except (httpx.HTTPError, httpx.StreamError, OSError, asyncio.TimeoutError) as e:
            logger.warning(
                "Graph stream transport failure",
                error=str(e),
                items_read=self.items_read,
            )
            await self.aclose()
            raise TransportError(f"Stream interrupted: {e}") from e
        except Exception:
            await self.aclose()
            raise

        self._buffer.extend(chunk)
        while True:
            index = self._buffer.find(self._delimiter)
            if index < 0:
                break
            line = bytes(self._buffer[:index])
            del self._buffer[: index + len(self._delimiter)]
            record = _frame(line)
            if record is not None:
                self._pending.append(record)

    async def aclose(self) -> None:
        """Stop the stream and release the byte source. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._pending.clear()
        self._buffer.clear()

        source: Any = self._iterator if self._iterator is not None else self._chunks
        close = getattr(source, "aclose", None)
        if close is not None:
            await close()
        logger.debug("Graph stream closed", items_read=self.items_read)

    async def __aenter__(self) -> "GraphStreamReader":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
