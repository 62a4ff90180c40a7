"""
spamp - granular audio playback through mpv, steered by a wave-stack signal.

spamp talks to a running mpv over its JSON IPC socket and to the pmmd
signal daemon over a second socket, and on every beat loads and seeks
into a file picked by the signal.
"""

__version__ = "0.1.0"

from spamp.app import SpampApp

__all__ = ["SpampApp", "__version__"]
