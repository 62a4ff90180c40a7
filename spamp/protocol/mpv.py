"""
mpv JSON IPC client for spamp.

Running mpv as the peer:

    $ mpv --loop --idle --keep-open --audio-display=no \\
          --input-ipc-server=/tmp/valdefars_sock

- --loop lets a single big file be granulated with relative seeks
- --idle + --keep-open keep mpv alive as a server when the queue is empty
- --audio-display=no avoids the cover-art window, which slows down file
  loading and therefore delays the moment seeking becomes possible
- --input-ipc-server is the Unix socket we connect to

Protocol notes:
    mpv expects every command's reply to be read back; if replies pile up
    unread it eventually stops responding. Replies share the socket with
    unsolicited events (property changes, playback-restart, ...), so after
    each command we read lines until one contains "request_id" and drop
    everything else.

    `loadfile` is acknowledged before the file is open. Seeking before the
    "file-loaded" event arrives is rejected, so callers must use
    `wait_for_event(PlayerEvent.FILE_LOADED)` between a load and a seek.

There is no timeout by default: a peer that never answers blocks the
caller forever. Pass `timeout=` to bound a single call. A late reply
would be taken as the answer to the next command, so an expired
timeout closes the connection and the client cannot be reused.
"""

import asyncio
import logging
from collections.abc import Awaitable

from spamp.protocol.channel import LineChannel
from spamp.protocol.commands import (
    Command,
    Load,
    Loop,
    Pause,
    Play,
    Seek,
    SeekMode,
    Stop,
    serialize,
)
from spamp.protocol.events import REQUEST_ACK, EventMatch, PlayerEvent

logger = logging.getLogger(__name__)

DEFAULT_MPV_SOCKET = "/tmp/valdefars_sock"


class MpvClient:
    """
    Request/response client for one mpv IPC connection.

    Only one command may be in flight at a time; the caller awaits each
    call before issuing the next one.

    Attributes:
        channel: The line channel this client owns.
        discarded_frames: Number of unrelated frames dropped so far.
    """

    def __init__(self, channel: LineChannel) -> None:
        self.channel = channel
        self.discarded_frames = 0

    @classmethod
    async def connect(cls, socket_path: str = DEFAULT_MPV_SOCKET) -> "MpvClient":
        """Connect to mpv's IPC socket."""
        return cls(await LineChannel.connect(socket_path))

    async def send(self, command: Command, *, timeout: float | None = None) -> str:
        """
        Send a command and return mpv's acknowledgment line.

        Args:
            command: Command to send.
            timeout: Optional deadline in seconds for write + reply.

        Returns:
            The first frame containing "request_id".

        Raises:
            WriteError: If the socket closed while sending.
            ReadError: If the socket closed before the reply arrived.
            TimeoutError: If `timeout` expired. The channel is closed.
        """
        return await self._bounded(self._send(command), timeout)

    async def _send(self, command: Command) -> str:
        await self.channel.write_line(serialize(command))
        return await self.read_until(REQUEST_ACK)

    async def wait_for_event(
        self,
        event: PlayerEvent | str,
        *,
        timeout: float | None = None,
    ) -> str:
        """
        Block until an event frame arrives, dropping everything before it.

        Args:
            event: A known PlayerEvent or a raw marker substring.
            timeout: Optional deadline in seconds.

        Returns:
            The matching event frame.

        Raises:
            ReadError: If the socket closed before the event arrived.
            TimeoutError: If `timeout` expired. The channel is closed.
        """
        match = event.match if isinstance(event, PlayerEvent) else EventMatch(event)
        return await self._bounded(self.read_until(match), timeout)

    async def _bounded(self, coro: Awaitable[str], timeout: float | None) -> str:
        try:
            return await asyncio.wait_for(coro, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("No reply from %s within %ss, closing", self.channel.endpoint, timeout)
            await self.channel.close()
            raise

    async def read_until(self, match: EventMatch) -> str:
        """
        Read frames until one matches, discarding the rest.

        Unbounded: returns on a match or raises ReadError when the
        connection ends.
        """
        while True:
            frame = await self.channel.read_line()
            if match.matches(frame):
                return frame
            self.discarded_frames += 1
            logger.debug("Dropping frame while waiting for %r: %s", match.marker, frame)

    # --- Convenience commands ---

    async def stop(self) -> str:
        return await self.send(Stop())

    async def play(self) -> str:
        return await self.send(Play())

    async def pause(self) -> str:
        return await self.send(Pause())

    async def set_loop(self, enabled: bool) -> str:
        return await self.send(Loop(enabled))

    async def load(self, path: str) -> str:
        return await self.send(Load(path))

    async def seek(self, mode: SeekMode) -> str:
        return await self.send(Seek(mode))

    async def close(self) -> None:
        await self.channel.close()

    async def __aenter__(self) -> "MpvClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
