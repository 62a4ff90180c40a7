"""
Configuration management for spamp.

This module loads socket paths, file selection and playback settings from
a TOML file. The defaults ship as `spamp.toml` next to this module.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from spamp.protocol.mpv import DEFAULT_MPV_SOCKET
from spamp.protocol.pmmd import DEFAULT_PMMD_SOCKET, SampleRequest

logger = logging.getLogger(__name__)

# Path to the config directory
CONFIG_DIR = Path(__file__).parent


class PlayMode(Enum):
    """Which playback loop to run."""

    WAVESTACK = "wavestack"
    SWEEP = "sweep"


@dataclass
class SpampConfig:
    """Loaded spamp configuration."""

    mpv_socket: str = DEFAULT_MPV_SOCKET
    pmmd_socket: str = DEFAULT_PMMD_SOCKET
    music_root: Path = Path(".")
    pattern: str = "*small*.mp3"
    include_hidden: bool = False
    probe_audio: bool = False
    mode: PlayMode = PlayMode.WAVESTACK
    sample_request: SampleRequest = SampleRequest.BEAT
    command_timeout: float | None = None
    sweep_seek_percent: float = 50.0
    sweep_pause: float = 0.03


# section -> {toml key: SpampConfig field}
_KEYS: dict[str, dict[str, str]] = {
    "sockets": {"mpv": "mpv_socket", "pmmd": "pmmd_socket"},
    "files": {
        "root": "music_root",
        "pattern": "pattern",
        "include_hidden": "include_hidden",
        "probe": "probe_audio",
    },
    "playback": {
        "mode": "mode",
        "sample_request": "sample_request",
        "command_timeout": "command_timeout",
    },
    "sweep": {"seek_percent": "sweep_seek_percent", "pause": "sweep_pause"},
}


def _convert(name: str, value: Any) -> Any:
    """Turn a raw TOML value into the type of SpampConfig.<name>."""
    if name == "music_root":
        return Path(str(value))
    if name == "mode":
        return PlayMode(value)
    if name == "sample_request":
        return SampleRequest(value)
    if name == "command_timeout":
        timeout = float(value)
        return timeout if timeout > 0 else None
    if name in ("include_hidden", "probe_audio"):
        return bool(value)
    if name in ("sweep_seek_percent", "sweep_pause"):
        return float(value)
    return str(value)


def parse_config(data: dict[str, Any]) -> SpampConfig:
    """
    Build a SpampConfig from parsed TOML data.

    Missing keys keep their defaults; unknown sections or keys are logged
    and ignored.

    Raises:
        ValueError: If a mode or sample request name is not recognised.
    """
    values: dict[str, Any] = {}
    for section, table in data.items():
        keys = _KEYS.get(section)
        if keys is None or not isinstance(table, dict):
            logger.warning("Ignoring unknown config section [%s]", section)
            continue
        for key, value in table.items():
            name = keys.get(key)
            if name is None:
                logger.warning("Ignoring unknown config key %s.%s", section, key)
                continue
            values[name] = _convert(name, value)
    return SpampConfig(**values)


def load_config(config_path: Path | None = None) -> SpampConfig:
    """
    Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML file. If None, uses the bundled defaults.

    Returns:
        Loaded SpampConfig instance.
    """
    if config_path is None:
        config_path = CONFIG_DIR / "spamp.toml"

    logger.debug("Loading config from %s", config_path)

    with config_path.open("rb") as f:
        data = tomllib.load(f)

    return parse_config(data)


# Global singleton instance (lazy loaded)
_config: SpampConfig | None = None


def get_config() -> SpampConfig:
    """Get the global configuration (lazy loaded singleton)."""
    global _config

    if _config is None:
        _config = load_config()

    return _config


def reload_config(config_path: Path | None = None) -> SpampConfig:
    """Force reload of the global configuration."""
    global _config
    _config = load_config(config_path)
    return _config
