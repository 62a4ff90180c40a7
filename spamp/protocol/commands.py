"""
mpv IPC commands for Client → Player communication.

This module implements the command lines that spamp sends to mpv's JSON
IPC socket. Each command is a small immutable value; `serialize` turns it
into the one-line wire form mpv expects:

    { "command": [ "seek", "01:30", "absolute" ] }

The set of commands is closed: `to_tokens` handles every variant of
`Command` and rejects anything else.

Reference: https://mpv.io/manual/master/#json-ipc
"""

import json
from dataclasses import dataclass
from typing import Union

# --- Seek modes ---


@dataclass(frozen=True)
class AbsoluteSeconds:
    """Seek to a position counted from the start of the file."""

    seconds: int


@dataclass(frozen=True)
class RelativeSeconds:
    """Seek forwards (or backwards, if negative) from the current position."""

    seconds: int


@dataclass(frozen=True)
class AbsolutePercent:
    """Seek to a percentage of the file's duration (0-100)."""

    percent: float


@dataclass(frozen=True)
class RelativePercent:
    """Seek by a percentage of the file's duration."""

    percent: float


SeekMode = Union[AbsoluteSeconds, RelativeSeconds, AbsolutePercent, RelativePercent]


# --- Commands ---


@dataclass(frozen=True)
class Stop:
    """Stop playback and clear the playlist."""


@dataclass(frozen=True)
class Play:
    """Unpause playback."""


@dataclass(frozen=True)
class Pause:
    """Pause playback."""


@dataclass(frozen=True)
class Loop:
    """Enable or disable looping of the current file."""

    enabled: bool


@dataclass(frozen=True)
class Load:
    """Load a file, replacing the current one."""

    path: str


@dataclass(frozen=True)
class Seek:
    """Seek within the current file."""

    mode: SeekMode


Command = Union[Stop, Play, Pause, Loop, Load, Seek]


# --- Token helpers ---


def _str(value: str) -> str:
    """JSON string literal."""
    return json.dumps(value, ensure_ascii=False)


def _bool(value: bool) -> str:
    """JSON boolean literal."""
    return "true" if value else "false"


def format_clock(seconds: int) -> str:
    """
    Format a second count as zero-padded MM:SS.

    Minutes are not wrapped into hours, so 3661 becomes "61:01". Negative
    values (backwards relative seeks) get a leading minus sign.

    Args:
        seconds: Number of seconds.

    Returns:
        Clock string accepted by mpv's seek command.
    """
    if seconds < 0:
        return "-" + format_clock(-seconds)
    minutes, seconds_left = divmod(seconds, 60)
    return f"{minutes:02d}:{seconds_left:02d}"


def _format_percent(percent: float) -> str:
    return f"{percent:f}"


def _seek_tokens(mode: SeekMode) -> list[str]:
    if isinstance(mode, AbsoluteSeconds):
        return [_str("seek"), _str(format_clock(mode.seconds)), _str("absolute")]
    if isinstance(mode, RelativeSeconds):
        return [_str("seek"), _str(format_clock(mode.seconds)), _str("relative")]
    if isinstance(mode, AbsolutePercent):
        return [_str("seek"), _str(_format_percent(mode.percent)), _str("absolute-percent")]
    if isinstance(mode, RelativePercent):
        return [_str("seek"), _str(_format_percent(mode.percent)), _str("relative-percent")]
    raise TypeError(f"Unknown seek mode: {mode!r}")


def to_tokens(command: Command) -> list[str]:
    """
    Map a command to the list of JSON literal tokens of its mpv command array.

    Args:
        command: The command to render.

    Returns:
        Tokens in wire order, each already a JSON literal.

    Raises:
        TypeError: If `command` is not one of the known command types.
    """
    if isinstance(command, Stop):
        return [_str("stop")]
    if isinstance(command, Play):
        return [_str("set_property"), _str("pause"), _bool(False)]
    if isinstance(command, Pause):
        return [_str("set_property"), _str("pause"), _bool(True)]
    if isinstance(command, Loop):
        return [_str("set_property"), _str("loop-file"), _bool(command.enabled)]
    if isinstance(command, Load):
        return [_str("loadfile"), _str(command.path)]
    if isinstance(command, Seek):
        return _seek_tokens(command.mode)
    raise TypeError(f"Unknown command: {command!r}")


def serialize(command: Command) -> str:
    """
    Build the wire line for a command (without the line terminator).

    The output is deterministic: equal commands always produce
    byte-identical lines.
    """
    return '{ "command": [ %s ] }' % ", ".join(to_tokens(command))
