"""
Core playback package.

This package holds everything above the socket clients: building the
file set and the loops that turn signal samples into mpv commands.

Consumers should usually import from the specific module they need
(e.g. `spamp.core.orchestrator`).
"""
