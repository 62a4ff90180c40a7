"""
spamp - Entry Point

Run with: python -m spamp
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from spamp import __version__
from spamp.app import SpampApp
from spamp.config import PlayMode, SpampConfig, load_config
from spamp.protocol.errors import IPCError


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="spamp",
        description="spamp - granular mpv playback steered by a wave-stack signal",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="TOML config file (default: bundled spamp.toml)",
    )

    parser.add_argument(
        "--mode",
        choices=[m.value for m in PlayMode],
        default=None,
        help="Playback loop to run",
    )

    parser.add_argument(
        "--mpv-socket",
        type=str,
        default=None,
        help="mpv IPC socket path",
    )

    parser.add_argument(
        "--pmmd-socket",
        type=str,
        default=None,
        help="pmmd signal socket path",
    )

    parser.add_argument(
        "--music-root",
        type=Path,
        default=None,
        help="Directory to search for audio files",
    )

    parser.add_argument(
        "--pattern",
        type=str,
        default=None,
        help="Case-insensitive file name glob",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> SpampConfig:
    """Load the config file and apply command line overrides."""
    config = load_config(args.config)

    if args.mode is not None:
        config.mode = PlayMode(args.mode)
    if args.mpv_socket is not None:
        config.mpv_socket = args.mpv_socket
    if args.pmmd_socket is not None:
        config.pmmd_socket = args.pmmd_socket
    if args.music_root is not None:
        config.music_root = args.music_root
    if args.pattern is not None:
        config.pattern = args.pattern

    return config


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    logger = logging.getLogger(__name__)

    try:
        config = build_config(args)
        asyncio.run(SpampApp(config).run())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
    except IPCError as e:
        logger.error("Fatal IPC error: %s", e)
        return 1
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
