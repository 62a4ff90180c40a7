"""
Playback loops driving mpv.

WavestackPlayer is the main loop. On every pmmd beat it:

    1. reads a wave-stack sample (w0..w3)
    2. picks a file with w1
    3. loads it
    4. waits for mpv's "file-loaded" event
    5. seeks to 100 * w2 percent
    6. starts playback

Step 4 is not optional. mpv acknowledges `loadfile` before the file is
open and rejects seeks until "file-loaded" has been emitted, so the seek
must never be sent before that event has been read.

SweepPlayer is the simpler mode without a signal: every file in turn,
seeked to a fixed percentage, with a short pause in between.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from spamp.protocol.commands import AbsolutePercent, Load, Play, Seek
from spamp.protocol.errors import ParseError
from spamp.protocol.events import PlayerEvent
from spamp.protocol.pmmd import SampleRequest, SignalSample

if TYPE_CHECKING:
    from collections.abc import Sequence

    from spamp.protocol.mpv import MpvClient
    from spamp.protocol.pmmd import PmmdClient

logger = logging.getLogger(__name__)


def select_index(w1: float, count: int) -> int:
    """
    Map a wave value in [0, 1] to a file index.

    floor(w1 * (count - 1)), clamped so it never leaves the file set even
    if pmmd sends a value slightly outside [0, 1].

    Raises:
        ValueError: If there are no files.
    """
    if count <= 0:
        raise ValueError("Cannot select from an empty file set")
    index = math.floor(w1 * (count - 1))
    return max(0, min(count - 1, index))


def seek_percent(w2: float) -> float:
    """Map a wave value in [0, 1] to a seek percentage."""
    return 100.0 * w2


@dataclass(frozen=True)
class TickResult:
    """What one loop iteration played."""

    sample: SignalSample
    index: int
    path: str
    percent: float


class WavestackPlayer:
    """
    Signal-driven playback loop.

    Attributes:
        mpv: Client for the player connection.
        pmmd: Client for the signal connection.
        files: The (already shuffled) files to choose from.
        request: Which pmmd request to sample with (BEAT waits for the tick).
        timeout: Optional per-call deadline for every IPC call.
    """

    def __init__(
        self,
        mpv: MpvClient,
        pmmd: PmmdClient,
        files: Sequence[str],
        *,
        request: SampleRequest = SampleRequest.BEAT,
        timeout: float | None = None,
    ) -> None:
        if len(files) == 0:
            raise ValueError("WavestackPlayer needs at least one file")
        self.mpv = mpv
        self.pmmd = pmmd
        self.files = files
        self.request = request
        self.timeout = timeout
        self.ticks = 0
        self.skipped = 0

    async def step(self) -> TickResult:
        """
        Run one sample → load → await-loaded → seek → play sequence.

        Raises:
            ParseError: If pmmd's reply was malformed (nothing is sent to mpv).
            IPCError: On any connection failure.
        """
        sample = await self.pmmd.sample(self.request, timeout=self.timeout)

        index = select_index(sample.w1, len(self.files))
        path = self.files[index]
        logger.info("Loading file (idx = %d) %s", index, path)
        response = await self.mpv.send(Load(path), timeout=self.timeout)
        logger.debug("load: %s", response)

        logger.info("Waiting for 'file-loaded'")
        event = await self.mpv.wait_for_event(PlayerEvent.FILE_LOADED, timeout=self.timeout)
        logger.debug("event: %s", event)

        percent = seek_percent(sample.w2)
        logger.info("Seeking to %f%%", percent)
        response = await self.mpv.send(Seek(AbsolutePercent(percent)), timeout=self.timeout)
        logger.debug("seek: %s", response)

        logger.info("Playing")
        response = await self.mpv.send(Play(), timeout=self.timeout)
        logger.debug("play: %s", response)

        self.ticks += 1
        return TickResult(sample=sample, index=index, path=path, percent=percent)

    async def run(self, max_ticks: int | None = None) -> None:
        """
        Loop forever (or `max_ticks` times).

        A malformed sample is logged and its tick skipped; every other
        error ends the loop.
        """
        done = 0
        while max_ticks is None or done < max_ticks:
            done += 1
            try:
                await self.step()
            except ParseError as e:
                self.skipped += 1
                logger.warning("Skipping tick: %s", e)


class SweepPlayer:
    """
    Play every file in order at a fixed position.

    Attributes:
        mpv: Client for the player connection.
        files: Files to play, in order.
        seek_percent: Where to start each file.
        pause: Seconds to sleep after starting each file.
        timeout: Optional per-call deadline for every IPC call.
    """

    def __init__(
        self,
        mpv: MpvClient,
        files: Sequence[str],
        *,
        seek_percent: float = 50.0,
        pause: float = 0.03,
        timeout: float | None = None,
    ) -> None:
        if len(files) == 0:
            raise ValueError("SweepPlayer needs at least one file")
        self.mpv = mpv
        self.files = files
        self.seek_percent = seek_percent
        self.pause = pause
        self.timeout = timeout

    async def play_file(self, path: str) -> None:
        logger.info("Loading file %s", path)
        await self.mpv.send(Load(path), timeout=self.timeout)
        await self.mpv.wait_for_event(PlayerEvent.FILE_LOADED, timeout=self.timeout)
        await self.mpv.send(Seek(AbsolutePercent(self.seek_percent)), timeout=self.timeout)
        await self.mpv.send(Play(), timeout=self.timeout)

    async def run(self, rounds: int | None = None) -> None:
        """Sweep through the files forever (or `rounds` times)."""
        done = 0
        while rounds is None or done < rounds:
            done += 1
            for path in self.files:
                await self.play_file(path)
                await asyncio.sleep(self.pause)
