"""
Frame matching for interleaved replies and events.

mpv writes command replies and unsolicited events to the same socket and
there is no correlation ID we can use without parsing the JSON. Instead a
frame is recognised by a marker substring:

- every command reply carries "request_id"
- the end of file loading is announced by an event containing "file-loaded"

An empty marker matches any frame, which is how the signal client accepts
whatever single line pmmd sends back.

Known limitation: an unrelated event whose payload happens to contain the
marker text (e.g. a file called "request_id.mp3") is taken as the match.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class EventMatch:
    """Substring predicate over incoming frames."""

    marker: str

    def matches(self, frame: str) -> bool:
        """Return True if `frame` contains the marker (always, for an empty marker)."""
        return self.marker in frame


REQUEST_ACK = EventMatch("request_id")
FILE_LOADED = EventMatch("file-loaded")
ANY_FRAME = EventMatch("")


class PlayerEvent(Enum):
    """Asynchronous mpv events the client can wait for."""

    FILE_LOADED = "file-loaded"

    @property
    def match(self) -> EventMatch:
        return EventMatch(self.value)
