"""Configuration file parsing for forge.

The configuration is a small line-oriented text file::

    BackupFolder: ~/dotfiles-backup
    Enabled:
      - brew
      - vim
    Disabled:
      - tmux

Section headers accept an optional trailing colon, unknown lines are ignored and
a module listed under both sections is treated as disabled.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict

DEFAULT_CONFIG_FILENAME = ".forge.conf"

_BACKUP_FOLDER_PREFIX = "BackupFolder:"
_SECTION_RE = re.compile(r"^(Enabled|Disabled)\s*:?$")
_ITEM_RE = re.compile(r"^-\s*(.*)$")


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be loaded or validated."""


class ConfigNotFound(ConfigError):
    """Raised when the configuration file does not exist."""


class MissingBackupFolder(ConfigError):
    """Raised when a configuration does not name a backup folder."""


def _expand_path(raw: str | os.PathLike[str] | Path, *, base_dir: Path) -> Path:
    """Return an absolute ``Path`` by expanding env vars and user segments."""

    text = str(raw)
    expanded = Path(os.path.expandvars(text)).expanduser()
    if expanded.is_absolute():
        return expanded.resolve(strict=False)
    return (base_dir / expanded).resolve(strict=False)


class Configuration(BaseModel):
    """Fully parsed configuration file."""

    model_config = ConfigDict(frozen=True)

    backup_folder: str
    enabled_modules: tuple[str, ...] = ()
    disabled_modules: tuple[str, ...] = ()
    config_path: Path | None = None

    def _sections(self) -> tuple[str, tuple[str, ...], tuple[str, ...]]:
        return (self.backup_folder, self.enabled_modules, self.disabled_modules)

    # Where a configuration was loaded from is not part of its identity.
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Configuration):
            return NotImplemented
        return self._sections() == other._sections()

    def __hash__(self) -> int:
        return hash(self._sections())

    def effective_modules(self) -> tuple[str, ...]:
        """Enabled modules in declaration order, without repeats or disabled names."""

        disabled = set(self.disabled_modules)
        seen: set[str] = set()
        modules: list[str] = []
        for name in self.enabled_modules:
            if name in disabled or name in seen:
                continue
            seen.add(name)
            modules.append(name)
        return tuple(modules)

    def resolve_backup_folder(self) -> Path:
        """Absolute backup folder; relative paths are anchored at the config file."""

        base_dir = self.config_path.parent if self.config_path is not None else Path.cwd()
        return _expand_path(self.backup_folder, base_dir=base_dir)


def parse(text: str, *, config_path: Path | None = None) -> Configuration:
    """Parse configuration ``text`` into a :class:`Configuration`.

    Raises:
        MissingBackupFolder: if no non-empty ``BackupFolder:`` line was found.
    """

    backup_folder = ""
    enabled: list[str] = []
    disabled: list[str] = []
    section: list[str] | None = None

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith(_BACKUP_FOLDER_PREFIX):
            backup_folder = line[len(_BACKUP_FOLDER_PREFIX) :].strip()
            section = None
            continue

        header = _SECTION_RE.match(line)
        if header:
            section = enabled if header.group(1) == "Enabled" else disabled
            continue

        item = _ITEM_RE.match(line)
        if item and section is not None:
            name = item.group(1).strip()
            if name:
                section.append(name)

    if not backup_folder:
        where = f" in '{config_path}'" if config_path is not None else ""
        raise MissingBackupFolder(f"Configuration{where} must define a non-empty 'BackupFolder:' line")

    return Configuration(
        backup_folder=backup_folder,
        enabled_modules=tuple(enabled),
        disabled_modules=tuple(disabled),
        config_path=config_path,
    )


def render_config(configuration: Configuration) -> str:
    """Serialise ``configuration`` in the grammar understood by :func:`parse`."""

    lines = [f"{_BACKUP_FOLDER_PREFIX} {configuration.backup_folder}", "", "Enabled:"]
    lines.extend(f"  - {name}" for name in configuration.enabled_modules)
    lines.extend(["", "Disabled:"])
    lines.extend(f"  - {name}" for name in configuration.disabled_modules)
    return "\n".join(lines) + "\n"


def load_config(path: Path | None = None) -> Configuration:
    """Load and validate a configuration file.

    Args:
        path: Optional path to the configuration file, or a directory containing
            ``.forge.conf``. Defaults to ``.forge.conf`` in the current working
            directory.
    """

    config_path = _resolve_config_path(path)
    return parse(config_path.read_text(), config_path=config_path)


def _resolve_config_path(path: Path | None) -> Path:
    if path is None:
        path = Path.cwd() / DEFAULT_CONFIG_FILENAME
    else:
        path = Path(path)

    if not path.exists():
        raise ConfigNotFound(f"Configuration file '{path}' does not exist")
    if path.is_dir():
        candidate = path / DEFAULT_CONFIG_FILENAME
        if not candidate.exists():
            raise ConfigNotFound(f"Expected to find '{DEFAULT_CONFIG_FILENAME}' inside '{path}', but none was located")
        path = candidate

    return path.resolve(strict=False)
