"""Shared models and enums for forge."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Action(str, Enum):
    """Operations the orchestrator can run across modules."""

    BACKUP = "backup"
    RESTORE = "restore"


class LinkState(str, Enum):
    """Relationship between a dotfile in home and its managed copy."""

    ABSENT = "absent"
    REGULAR_FILE = "regular_file"
    SYMLINK_MANAGED = "symlink_managed"
    SYMLINK_UNMANAGED = "symlink_unmanaged"


class ModuleOutcome(str, Enum):
    """Outcome of running an action for one module."""

    DONE = "done"
    ALREADY_MANAGED = "already_managed"
    NOTHING_TO_BACKUP = "nothing_to_backup"
    UNKNOWN = "unknown"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ModuleResult:
    """Result emitted for a single module during a run."""

    module: str
    outcome: ModuleOutcome
    details: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is not ModuleOutcome.FAILED


@dataclass(frozen=True, slots=True)
class RunReport:
    """Collection of module results for a backup or restore run."""

    action: Action
    results: tuple[ModuleResult, ...]

    @property
    def failed(self) -> tuple[ModuleResult, ...]:
        return tuple(result for result in self.results if not result.ok)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


@dataclass(frozen=True, slots=True)
class ModuleStatus:
    """Read-only view of a module reported by ``forge status``."""

    module: str
    state: LinkState | None
    target: Path | None
    details: str | None = None
