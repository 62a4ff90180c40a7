"""
Line channel over a Unix stream socket.

Both peers (mpv and pmmd) speak a line-oriented protocol: every request
and every response or event is one line of text terminated by '\\n'.
LineChannel provides the two primitives the protocol clients are built on:

    write_line(text)  append the terminator, write, drain
    read_line()       block until one complete line is available

Lines are assembled by the stream reader's internal buffer, so a frame
is never handed out in pieces. If the peer goes away in the middle of a
line the partial bytes are attached to the ReadError for diagnostics.

A channel is owned by exactly one client and carries one request/response
sequence at a time, so there is no locking here.
"""

import asyncio
import logging

from spamp.protocol.errors import ConnectError, ReadError, WriteError

logger = logging.getLogger(__name__)

LINE_TERMINATOR = b"\n"

# mpv events can carry long metadata payloads (tags, track lists).
DEFAULT_LINE_LIMIT = 1024 * 1024


class LineChannel:
    """
    A connected Unix stream socket with line-level read/write.

    Attributes:
        endpoint: Filesystem path of the peer's socket.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        endpoint: str = "",
    ) -> None:
        self._reader = reader
        self._writer = writer
        self.endpoint = endpoint
        self._closed = False

    @classmethod
    async def connect(cls, endpoint: str, *, limit: int = DEFAULT_LINE_LIMIT) -> "LineChannel":
        """
        Open a connection to the socket at `endpoint`.

        Raises:
            ConnectError: If the socket file does not exist or the peer
                refuses the connection. There is no retry.
        """
        try:
            reader, writer = await asyncio.open_unix_connection(endpoint, limit=limit)
        except OSError as e:
            raise ConnectError(endpoint, e.strerror or str(e)) from e

        logger.info("Connected to %s", endpoint)
        return cls(reader, writer, endpoint)

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def write_line(self, text: str) -> None:
        """
        Write `text` followed by the line terminator and flush it.

        Raises:
            WriteError: If the socket is closed or breaks during the write.
        """
        if self._closed or self._writer.is_closing():
            raise WriteError(f"Socket {self.endpoint} is closed")

        data = text.encode("utf-8") + LINE_TERMINATOR
        try:
            self._writer.write(data)
            await self._writer.drain()
        except (ConnectionError, OSError) as e:
            raise WriteError(f"Socket {self.endpoint} closed during write: {e}") from e

        logger.debug("TX %s: %s", self.endpoint, text)

    async def read_line(self) -> str:
        """
        Read the next complete line, without its terminator.

        Blocks until a full line has arrived. A line that was fully
        terminated before the peer closed is returned normally; the error
        only comes on the following read.

        Raises:
            ReadError: If the stream ended before a terminator was seen.
                `partial` holds the truncated bytes (empty if the peer
                closed cleanly between lines).
        """
        try:
            line = await self._reader.readuntil(LINE_TERMINATOR)
        except asyncio.IncompleteReadError as e:
            if e.partial:
                raise ReadError(
                    f"Socket {self.endpoint} closed in the middle of a line "
                    f"({len(e.partial)} bytes pending)",
                    partial=e.partial,
                ) from None
            raise ReadError(f"Socket {self.endpoint} was closed") from None
        except asyncio.LimitOverrunError as e:
            raise ReadError(f"Line from {self.endpoint} exceeds buffer limit: {e}") from e
        except (ConnectionError, OSError) as e:
            raise ReadError(f"Socket {self.endpoint} read failed: {e}") from e

        text = line[: -len(LINE_TERMINATOR)].decode("utf-8", errors="replace")
        logger.debug("RX %s: %s", self.endpoint, text)
        return text

    async def close(self) -> None:
        """
        Half-close the write side, then close the socket.

        Signalling end-of-commands first lets the peer finish any write it
        has in flight instead of hitting a reset. Safe to call twice.
        """
        if self._closed:
            return
        self._closed = True

        try:
            if self._writer.can_write_eof() and not self._writer.is_closing():
                self._writer.write_eof()
        except (ConnectionError, OSError) as e:
            logger.debug("Half-close of %s failed: %s", self.endpoint, e)

        self._writer.close()
        try:
            await self._writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug("Error while closing %s: %s", self.endpoint, e)

        logger.info("Disconnected from %s", self.endpoint)

    async def __aenter__(self) -> "LineChannel":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
