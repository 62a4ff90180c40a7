"""
Tests for configuration loading and the command line.
"""

import logging
from pathlib import Path

import pytest

from spamp.__main__ import build_config, parse_args
from spamp.config import PlayMode, SpampConfig, get_config, load_config, parse_config, reload_config
from spamp.protocol.pmmd import SampleRequest


class TestLoadConfig:
    """Tests for TOML loading."""

    def test_bundled_defaults(self) -> None:
        config = load_config()

        assert config.mpv_socket == "/tmp/valdefars_sock"
        assert config.pmmd_socket == "/tmp/valdefars_pmmd_sock"
        assert config.pattern == "*small*.mp3"
        assert config.mode == PlayMode.WAVESTACK
        assert config.sample_request == SampleRequest.BEAT
        assert config.command_timeout is None
        assert config.sweep_seek_percent == 50.0

    def test_bundled_matches_dataclass_defaults(self) -> None:
        assert load_config() == SpampConfig()

    def test_custom_file(self, tmp_path: Path) -> None:
        path = tmp_path / "spamp.toml"
        path.write_text(
            "\n".join(
                [
                    "[sockets]",
                    'mpv = "/run/mpv.sock"',
                    "[files]",
                    'root = "/music"',
                    "probe = true",
                    "[playback]",
                    'mode = "sweep"',
                    'sample_request = "now"',
                    "command_timeout = 5",
                    "[sweep]",
                    "pause = 1",
                ]
            )
        )

        config = load_config(path)

        assert config.mpv_socket == "/run/mpv.sock"
        assert config.pmmd_socket == "/tmp/valdefars_pmmd_sock"
        assert config.music_root == Path("/music")
        assert config.probe_audio is True
        assert config.mode == PlayMode.SWEEP
        assert config.sample_request == SampleRequest.NOW
        assert config.command_timeout == 5.0
        assert config.sweep_pause == 1.0

    def test_global_singleton(self, tmp_path: Path) -> None:
        path = tmp_path / "spamp.toml"
        path.write_text('[files]\npattern = "*.ogg"\n')

        assert reload_config(path).pattern == "*.ogg"
        assert get_config().pattern == "*.ogg"
        assert reload_config().pattern == "*small*.mp3"


class TestParseConfig:
    """Tests for parse_config."""

    def test_zero_timeout_means_unbounded(self) -> None:
        assert parse_config({"playback": {"command_timeout": 0}}).command_timeout is None

    def test_unknown_keys_ignored(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            config = parse_config({"files": {"colour": "red"}, "extra": {"a": 1}})

        assert config == SpampConfig()
        assert "files.colour" in caplog.text
        assert "[extra]" in caplog.text

    def test_invalid_mode(self) -> None:
        with pytest.raises(ValueError):
            parse_config({"playback": {"mode": "shuffle"}})


class TestCommandLine:
    """Tests for argument parsing and overrides."""

    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.verbose is False
        assert args.config is None
        assert build_config(args) == SpampConfig()

    def test_overrides(self, tmp_path: Path) -> None:
        args = parse_args(
            [
                "-v",
                "--mode",
                "sweep",
                "--mpv-socket",
                "/a",
                "--pmmd-socket",
                "/b",
                "--music-root",
                str(tmp_path),
                "--pattern",
                "*.wav",
            ]
        )

        config = build_config(args)

        assert args.verbose is True
        assert config.mode == PlayMode.SWEEP
        assert config.mpv_socket == "/a"
        assert config.pmmd_socket == "/b"
        assert config.music_root == tmp_path
        assert config.pattern == "*.wav"

    def test_invalid_mode_rejected(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--mode", "shuffle"])
