"""
spamp - Main Application Module

This module contains the SpampApp class that wires the file set, the
socket clients and the playback loop together and manages their lifecycle.
"""

import asyncio
import logging
import signal

from spamp.config import PlayMode, SpampConfig
from spamp.core.files import FileSet, ScanConfig, discover_files
from spamp.core.orchestrator import SweepPlayer, WavestackPlayer
from spamp.protocol.mpv import MpvClient
from spamp.protocol.pmmd import PmmdClient

logger = logging.getLogger(__name__)


class SpampApp:
    """
    Runs one playback loop against mpv (and pmmd in wavestack mode).

    Connections are opened once in start() and never re-opened: if either
    peer goes away the loop fails and the app stops.
    """

    def __init__(self, config: SpampConfig) -> None:
        self.config = config
        self.files: FileSet = FileSet()
        self.mpv: MpvClient | None = None
        self.pmmd: PmmdClient | None = None
        self._running = False

    async def start(self) -> None:
        """Build the file set and connect to the peers."""
        cfg = self.config
        logger.info("Starting spamp in %s mode", cfg.mode.value)

        self.files = await discover_files(
            ScanConfig(
                root=cfg.music_root,
                pattern=cfg.pattern,
                include_hidden=cfg.include_hidden,
                probe=cfg.probe_audio,
            )
        )
        if not self.files:
            raise ValueError(f"No files matching {cfg.pattern!r} under {cfg.music_root}")

        self._running = True
        self.mpv = await MpvClient.connect(cfg.mpv_socket)
        if cfg.mode == PlayMode.WAVESTACK:
            self.pmmd = await PmmdClient.connect(cfg.pmmd_socket)

    async def stop(self) -> None:
        """Half-close and close every open connection."""
        if not self._running:
            return

        logger.info("Stopping spamp...")
        self._running = False

        if self.pmmd:
            await self.pmmd.close()
            self.pmmd = None
        if self.mpv:
            await self.mpv.close()
            self.mpv = None

        logger.info("spamp stopped")

    async def play(self) -> None:
        """Run the configured playback loop until it fails."""
        cfg = self.config
        assert self.mpv is not None

        if cfg.mode == PlayMode.SWEEP:
            await SweepPlayer(
                self.mpv,
                self.files,
                seek_percent=cfg.sweep_seek_percent,
                pause=cfg.sweep_pause,
                timeout=cfg.command_timeout,
            ).run()
        else:
            assert self.pmmd is not None
            await WavestackPlayer(
                self.mpv,
                self.pmmd,
                self.files,
                request=cfg.sample_request,
                timeout=cfg.command_timeout,
            ).run()

    async def run(self) -> None:
        """
        Start, play until the loop ends or SIGINT/SIGTERM arrives, then stop.

        Errors from the loop propagate after the connections are closed.
        """
        try:
            await self.start()

            play_task = asyncio.create_task(self.play())
            loop = asyncio.get_running_loop()

            def handle_signal() -> None:
                logger.info("Received shutdown signal")
                play_task.cancel()

            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.add_signal_handler(sig, handle_signal)
                except NotImplementedError:
                    # Signal handlers not supported on Windows
                    pass

            try:
                await play_task
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if current is not None and current.cancelling():
                    raise
                logger.debug("Playback loop cancelled")
        finally:
            await self.stop()

    @property
    def is_running(self) -> bool:
        return self._running
