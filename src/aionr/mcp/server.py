"""MCPServer — the read / dispatch / write loop over framed stdio.

Requests are handled strictly one at a time: a frame is read, dispatched
(including any backend round trip), and answered before the next frame is
read.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from aionr.errors import (
    FramingError,
    IncompleteFrameError,
    InternalError,
    ParseError,
    RpcError,
)
from aionr.mcp.dispatcher import error_response
from aionr.mcp.models import Response, encode_message, parse_message

if TYPE_CHECKING:
    from aionr.mcp.dispatcher import Dispatcher
    from aionr.mcp.framing import FrameReader, FrameWriter

logger = logging.getLogger(__name__)


class MCPServer:
    """Serves one stdio peer until its input stream ends.

    Usage::

        server = MCPServer(dispatcher, FrameReader(sys.stdin.buffer), FrameWriter(sys.stdout.buffer))
        await server.run()
    """

    def __init__(self, dispatcher: Dispatcher, reader: FrameReader, writer: FrameWriter) -> None:
        self._dispatcher = dispatcher
        self._reader = reader
        self._writer = writer

    async def run(self) -> None:
        """Process frames until end-of-stream.

        Only I/O failures on the output stream escape this loop.
        """
        while True:
            try:
                payload = await asyncio.to_thread(self._reader.read_frame)
            except IncompleteFrameError as exc:
                logger.warning("Discarding truncated frame: %s", exc)
                break
            except FramingError as exc:
                logger.warning("Framing error: %s", exc)
                self._send(error_response(ParseError(data={"detail": str(exc)}), None))
                continue

            if payload is None:
                logger.info("Stdin closed, shutting down.")
                break

            response = await self.handle_payload(payload)
            if response is not None:
                self._send(response)

    async def handle_payload(self, payload: bytes) -> Response | None:
        """Parse and dispatch a single frame payload."""
        try:
            message = parse_message(payload)
        except RpcError as exc:
            logger.warning("Rejecting message: %s", exc)
            return error_response(exc, exc.request_id)
        return await self._dispatcher.dispatch(message)

    def _send(self, response: Response) -> None:
        try:
            body = encode_message(response)
        except (TypeError, ValueError) as exc:
            logger.error("Cannot serialize response to id %r: %s", response.id, exc)
            error = InternalError(data={"detail": "Response is not valid JSON"})
            body = encode_message(error_response(error, response.id))
        self._writer.write_frame(body)
