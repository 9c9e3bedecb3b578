"""Filesystem helpers for forge."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from .models import LinkState


def ensure_parent(path: Path) -> None:
    """Ensure the parent directory exists."""

    path.parent.mkdir(parents=True, exist_ok=True)


def _normalise(path: Path) -> Path:
    """Resolve ``path``; a symlink loop falls back to lexical normalisation."""

    try:
        return path.resolve(strict=False)
    except (RuntimeError, OSError):
        return Path(os.path.normpath(path))


def link_destination(link: Path) -> Path:
    """Return the absolute, normalised path ``link`` points to.

    Relative link targets are anchored at the directory containing the link,
    the same way the kernel resolves them.
    """

    raw = Path(os.readlink(link))
    return _normalise(link.parent / raw)


def detect_link_state(target: Path, expected: Path) -> LinkState:
    """Classify ``target`` against the managed copy at ``expected``.

    The filesystem is inspected on every call; nothing is cached.
    """

    if target.is_symlink():
        if link_destination(target) == _normalise(expected):
            return LinkState.SYMLINK_MANAGED
        return LinkState.SYMLINK_UNMANAGED
    if target.exists():
        return LinkState.REGULAR_FILE
    return LinkState.ABSENT


def relocate(source: Path, destination: Path) -> None:
    """Move ``source`` to ``destination``, replacing any previous managed copy."""

    ensure_parent(destination)
    if destination.is_dir() and not destination.is_symlink():
        shutil.rmtree(destination)
    shutil.move(str(source), str(destination))
