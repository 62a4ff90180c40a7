from __future__ import annotations

import asyncio
import fnmatch
import logging
import random
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import overload

from mutagen import File as mutagen_file
from mutagen import MutagenError

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "*small*.mp3"


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """
    Where to look for audio files and which ones to keep.

    `pattern` is a shell-style glob matched case-insensitively against the
    file name. Files whose own name starts with a dot are skipped unless
    asked for; directories are walked regardless of their name.
    With `probe` enabled each candidate is opened with mutagen and kept
    only if it is recognised as audio.
    """

    root: Path
    pattern: str = DEFAULT_PATTERN
    include_hidden: bool = False
    probe: bool = False


class FileSet(Sequence[str]):
    """
    Immutable, ordered list of audio file paths.

    The order is fixed when the set is built (shuffled once at startup) and
    never changes afterwards.
    """

    __slots__ = ("_paths",)

    def __init__(self, paths: Sequence[str] = ()) -> None:
        self._paths: tuple[str, ...] = tuple(paths)

    @overload
    def __getitem__(self, index: int) -> str: ...

    @overload
    def __getitem__(self, index: slice) -> FileSet: ...

    def __getitem__(self, index: int | slice) -> str | FileSet:
        if isinstance(index, slice):
            return FileSet(self._paths[index])
        return self._paths[index]

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FileSet):
            return self._paths == other._paths
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._paths)

    def __repr__(self) -> str:
        return f"FileSet({len(self._paths)} files)"


def _is_audio(path: Path) -> bool:
    try:
        return mutagen_file(path) is not None
    except (MutagenError, OSError) as e:
        logger.warning("Skipping unreadable file %s: %s", path, e)
        return False


def find_files(config: ScanConfig) -> list[Path]:
    """
    Walk `config.root` and return matching files in directory order.

    Raises:
        FileNotFoundError: If the root does not exist.
        NotADirectoryError: If the root is not a directory.
    """
    root = config.root
    if not root.exists():
        raise FileNotFoundError(root)
    if not root.is_dir():
        raise NotADirectoryError(root)

    pattern = config.pattern.lower()
    paths: list[Path] = []
    for p in sorted(root.rglob("*")):
        try:
            if not config.include_hidden and p.name.startswith("."):
                continue
            if not fnmatch.fnmatchcase(p.name.lower(), pattern):
                continue
            if not p.is_file():
                continue
        except OSError:
            continue
        if config.probe and not _is_audio(p):
            continue
        paths.append(p)
    return paths


async def discover_files(config: ScanConfig, *, rng: random.Random | None = None) -> FileSet:
    """
    Build the FileSet: find matching files, then shuffle them once.

    The walk (and optional mutagen probing) runs in a thread so the event
    loop is not blocked on large trees.

    Args:
        config: What to scan.
        rng: Random source for the shuffle; a fresh one if not given.
    """
    paths = await asyncio.to_thread(find_files, config)
    names = [str(p) for p in paths]
    (rng or random.Random()).shuffle(names)

    logger.info("Found %d files matching %r under %s", len(names), config.pattern, config.root)
    return FileSet(names)
