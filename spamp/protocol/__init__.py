"""
Protocol implementations for spamp.

This package contains the socket IPC clients:
- channel: line-oriented Unix socket channel shared by both clients
- commands: mpv command values and their wire serialization
- mpv: the mpv JSON IPC client (replies filtered out of the event stream)
- pmmd: the wave-stack signal client
"""

from spamp.protocol.channel import LineChannel
from spamp.protocol.errors import ConnectError, IPCError, ParseError, ReadError, WriteError
from spamp.protocol.mpv import MpvClient
from spamp.protocol.pmmd import PmmdClient, SignalSample

__all__ = [
    "ConnectError",
    "IPCError",
    "LineChannel",
    "MpvClient",
    "ParseError",
    "PmmdClient",
    "ReadError",
    "SignalSample",
    "WriteError",
]
