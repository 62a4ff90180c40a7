"""
Exceptions raised by the IPC protocol clients.

Every failure here is fatal for the connection it happened on: there is
no retry or reconnect layer. Callers either surface the error and stop,
or (for ParseError only) log it and move on to the next sample.
"""


class IPCError(Exception):
    """Base exception for socket IPC errors."""

    pass


class ConnectError(IPCError):
    """The peer's socket is missing or refused the connection."""

    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(f"Cannot connect to {endpoint}: {reason}")
        self.endpoint = endpoint


class WriteError(IPCError):
    """The socket was closed while a line was being written."""

    pass


class ReadError(IPCError):
    """
    The stream ended before a complete line could be read.

    Attributes:
        partial: Bytes received after the last complete line. Only useful
            for diagnostics; never a usable frame.
    """

    def __init__(self, message: str, partial: bytes = b"") -> None:
        super().__init__(message)
        self.partial = partial

    @property
    def closed_prematurely(self) -> bool:
        """True if the peer closed in the middle of a line (truncated frame)."""
        return bool(self.partial)


class ParseError(IPCError):
    """A reply line did not have the expected shape."""

    pass
