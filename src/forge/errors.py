"""Errors raised while backing up or restoring a module.

Every error here is scoped to a single module: the orchestrator records it in
the run report and moves on to the next module. Configuration problems live in
:mod:`forge.config` and abort the run before any module starts.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class ForgeError(RuntimeError):
    """Base class for per-module failures."""


class UnknownModule(ForgeError):
    """Raised when a configured module name has no registry entry."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown module '{name}'")
        self.name = name


class ConflictingSymlink(ForgeError):
    """Raised when a dotfile is a symlink that points outside the managed subtree."""

    def __init__(self, target: Path, actual: Path, expected: Path) -> None:
        super().__init__(
            f"'{target}' is a symlink to '{actual}' but forge expects '{expected}'. Please resolve this manually."
        )
        self.target = target
        self.actual = actual
        self.expected = expected


class UnresolvableConflict(ForgeError):
    """Raised when restore would have to overwrite a regular file."""

    def __init__(self, target: Path, expected: Path) -> None:
        super().__init__(
            f"'{target}' is a regular file; refusing to replace it with a link to '{expected}'. "
            "Move it away or run 'forge backup' first."
        )
        self.target = target
        self.expected = expected


class MissingBackup(ForgeError):
    """Raised when restore finds nothing in the backup folder for a module."""

    def __init__(self, module: str, path: Path) -> None:
        super().__init__(f"No backup for '{module}' found at '{path}'")
        self.module = module
        self.path = path


class ExternalToolFailure(ForgeError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, output: str = "") -> None:
        command = " ".join(args)
        message = f"Command failed ({returncode}): {command}"
        if output:
            message = f"{message}\n{output}"
        super().__init__(message)
        self.command = list(args)
        self.returncode = returncode
        self.output = output
