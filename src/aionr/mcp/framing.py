"""Content-Length framing for the stdio channel.

Each frame is a block of ``Key: Value`` header lines, a blank line, and
exactly ``Content-Length`` bytes of payload::

    Content-Length: 42\\r\\n
    \\r\\n
    {"jsonrpc": "2.0", "method": "tools/list", ...}
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import BinaryIO

from aionr.errors import FramingError, IncompleteFrameError

logger = logging.getLogger(__name__)

CONTENT_LENGTH = "content-length"
MAX_HEADER_BYTES = 8 * 1024
MAX_BODY_BYTES = 16 * 1024 * 1024
DISCARD_CHUNK_BYTES = 8 * 1024


class FrameReader:
    """Reads framed payloads from a binary stream.

    Iterating yields payloads until end-of-stream. Iteration can be
    restarted; it always continues from the stream's current position.
    """

    def __init__(self, stream: BinaryIO, *, max_body_bytes: int = MAX_BODY_BYTES) -> None:
        self._stream = stream
        self._max_body_bytes = max_body_bytes

    def __iter__(self) -> Iterator[bytes]:
        while True:
            payload = self.read_frame()
            if payload is None:
                return
            yield payload

    def read_frame(self) -> bytes | None:
        """Read one frame and return its payload.

        Returns ``None`` when the stream is exhausted before a new frame
        starts.

        Raises:
            IncompleteFrameError: The stream ended inside a frame.
            FramingError: The header block is malformed or the payload is
                larger than the configured limit.
        """
        headers = self._read_headers()
        if headers is None:
            return None

        raw_length = headers.get(CONTENT_LENGTH)
        if raw_length is None:
            raise FramingError("Missing Content-Length header")
        try:
            length = int(raw_length)
        except ValueError as exc:
            raise FramingError(f"Invalid Content-Length: {raw_length!r}") from exc
        if length < 0:
            raise FramingError(f"Invalid Content-Length: {raw_length!r}")

        if length > self._max_body_bytes:
            self._discard(length)
            raise FramingError(f"Payload of {length} bytes exceeds limit of {self._max_body_bytes}")

        return self._read_exact(length)

    def _read_headers(self) -> dict[str, str] | None:
        headers: dict[str, str] = {}
        consumed = 0
        while True:
            line = self._stream.readline(MAX_HEADER_BYTES + 1)
            if not line:
                if consumed:
                    raise IncompleteFrameError()
                return None

            text = line.decode("ascii", errors="replace").strip()
            if not text:
                if not consumed:
                    # Stray blank line between frames.
                    continue
                return headers

            consumed += len(line)
            if consumed > MAX_HEADER_BYTES:
                raise FramingError("Header block too large")

            key, sep, value = text.partition(":")
            if not sep:
                logger.debug("Ignoring malformed header line: %r", text)
                continue
            headers[key.strip().lower()] = value.strip()

    def _read_exact(self, length: int) -> bytes:
        chunks: list[bytes] = []
        remaining = length
        while remaining > 0:
            chunk = self._stream.read(remaining)
            if not chunk:
                raise IncompleteFrameError(expected=length, received=length - remaining)
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _discard(self, length: int) -> None:
        remaining = length
        while remaining > 0:
            chunk = self._stream.read(min(remaining, DISCARD_CHUNK_BYTES))
            if not chunk:
                raise IncompleteFrameError(expected=length, received=length - remaining)
            remaining -= len(chunk)


class FrameWriter:
    """Writes framed payloads to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def write_frame(self, payload: bytes) -> None:
        """Write *payload* as a single frame and flush."""
        header = f"Content-Length: {len(payload)}\r\n\r\n".encode("ascii")
        self._stream.write(header + payload)
        self._stream.flush()
