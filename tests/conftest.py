"""
Shared fixtures: fake mpv / pmmd peers on real Unix sockets.
"""

import asyncio
import json
import os
import tempfile
from collections.abc import Awaitable, Callable

import pytest

Responder = Callable[[str, asyncio.StreamWriter], Awaitable[None]]
ConnectHandler = Callable[[asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]]

MPV_ACK = '{"data":null,"request_id":0,"error":"success"}'
MPV_REJECT = '{"request_id":0,"error":"error running command"}'
MPV_NOISE = '{"event":"property-change","id":1,"name":"time-pos","data":1.5}'


class FakePeer:
    """
    Unix socket server that hands every received line to a responder.

    With `on_connect` the line loop is replaced by that coroutine, for
    peers that write raw bytes on their own.
    """

    def __init__(
        self,
        path: str,
        respond: Responder,
        on_connect: ConnectHandler | None = None,
    ) -> None:
        self.path = path
        self.respond = respond
        self.on_connect = on_connect
        self.received: list[str] = []
        self.connected = asyncio.Event()
        self.disconnected = asyncio.Event()
        self._server: asyncio.Server | None = None
        self._writers: list[asyncio.StreamWriter] = []

    async def start(self) -> None:
        self._server = await asyncio.start_unix_server(self._handle, path=self.path)

    async def stop(self) -> None:
        for writer in self._writers:
            writer.close()
        if self._server:
            self._server.close()
            await self._server.wait_closed()

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._writers.append(writer)
        self.connected.set()
        try:
            if self.on_connect is not None:
                await self.on_connect(reader, writer)
                return
            while True:
                line = await reader.readline()
                if not line:
                    break
                text = line.decode().rstrip("\n")
                self.received.append(text)
                await self.respond(text, writer)
        except ConnectionError:
            pass
        finally:
            self.disconnected.set()
            writer.close()


async def send_lines(writer: asyncio.StreamWriter, *lines: str) -> None:
    writer.write("".join(f"{line}\n" for line in lines).encode())
    await writer.drain()


async def silent(line: str, writer: asyncio.StreamWriter) -> None:
    """Responder that never answers."""


class FakeMpv:
    """
    Scripted mpv peer.

    Acks every command after `noise` unrelated events. A loadfile is acked
    first and announced as "file-loaded" a little later, like the real
    player. A seek that arrives before that announcement is rejected.

    Attributes:
        log: Wire order of received commands and emitted file-loaded events.
        rejected: Seek lines that arrived too early.
    """

    def __init__(self, noise: int = 2, load_delay: float = 0.02) -> None:
        self.noise = noise
        self.load_delay = load_delay
        self.loaded = False
        self.log: list[str] = []
        self.rejected: list[str] = []
        self._tasks: set[asyncio.Task[None]] = set()

    async def __call__(self, line: str, writer: asyncio.StreamWriter) -> None:
        name = json.loads(line)["command"][0]
        self.log.append(name)
        events = [MPV_NOISE] * self.noise

        if name == "loadfile":
            self.loaded = False
            await send_lines(writer, *events, MPV_ACK, '{"event":"start-file"}')
            task = asyncio.create_task(self._finish_loading(writer))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        elif name == "seek" and not self.loaded:
            self.rejected.append(line)
            await send_lines(writer, *events, MPV_REJECT)
        else:
            await send_lines(writer, *events, MPV_ACK)

    async def _finish_loading(self, writer: asyncio.StreamWriter) -> None:
        await asyncio.sleep(self.load_delay)
        if writer.is_closing():
            return
        self.loaded = True
        self.log.append("file-loaded")
        try:
            await send_lines(writer, MPV_NOISE, '{"event":"file-loaded"}')
        except ConnectionError:
            pass


class FakePmmd:
    """
    Scripted pmmd peer answering each request with the next reply.

    Hangs up when a request arrives after the replies are used up.
    """

    def __init__(self, replies: list[str]) -> None:
        self.replies = list(replies)

    async def __call__(self, line: str, writer: asyncio.StreamWriter) -> None:
        if not self.replies:
            writer.close()
            return
        await send_lines(writer, self.replies.pop(0))


@pytest.fixture
def socket_dir():
    """Short temporary directory (Unix socket paths are length-limited)."""
    with tempfile.TemporaryDirectory(prefix="spamp-") as d:
        yield d


@pytest.fixture
def socket_path(socket_dir: str) -> str:
    return os.path.join(socket_dir, "peer.sock")


@pytest.fixture
async def start_peer(socket_path: str):
    """Factory fixture: start a FakePeer with a responder; stopped on teardown."""
    peers: list[FakePeer] = []

    async def _start(
        respond: Responder = silent,
        path: str = socket_path,
        on_connect: ConnectHandler | None = None,
    ) -> FakePeer:
        peer = FakePeer(path, respond, on_connect)
        await peer.start()
        peers.append(peer)
        return peer

    yield _start

    for peer in peers:
        await peer.stop()
