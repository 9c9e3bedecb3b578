"""Registry of the modules forge knows how to back up and restore."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Protocol

from .errors import ConflictingSymlink, MissingBackup, UnknownModule, UnresolvableConflict
from .filesystem import detect_link_state, link_destination, relocate
from .models import LinkState, ModuleOutcome, ModuleResult, ModuleStatus
from .tools import ToolRunner

logger = logging.getLogger(__name__)

STOW_DIRNAME = "STOW"
BREWFILE_NAME = "Brewfile"


@dataclass(frozen=True)
class ModuleContext:
    """Locations and tools shared by every module in a run."""

    home: Path
    backup_folder: Path
    tools: ToolRunner

    @property
    def stow_dir(self) -> Path:
        return self.backup_folder / STOW_DIRNAME


class ModuleDescriptor(Protocol):
    name: str

    def backup(self, ctx: ModuleContext) -> ModuleResult: ...

    def restore(self, ctx: ModuleContext) -> ModuleResult: ...

    def status(self, ctx: ModuleContext) -> ModuleStatus: ...


@dataclass(frozen=True)
class PluginManager:
    """A plugin manager bootstrapped by cloning it into the home directory."""

    name: str
    repository: str
    install_dir: Path

    def is_installed(self, home: Path) -> bool:
        return (home / self.install_dir).is_dir()

    def ensure_installed(self, ctx: ModuleContext) -> bool:
        """Clone the plugin manager unless its directory already exists.

        Returns ``True`` if a clone was made.
        """

        if self.is_installed(ctx.home):
            return False
        logger.info("%s not found, installing...", self.name)
        ctx.tools.git_clone(self.repository, ctx.home / self.install_dir)
        return True


@dataclass(frozen=True)
class PackageModule:
    """Package manager module backed by a manifest file in the backup folder."""

    name: str
    manifest_name: str = BREWFILE_NAME

    def manifest(self, ctx: ModuleContext) -> Path:
        return ctx.backup_folder / self.manifest_name

    def backup(self, ctx: ModuleContext) -> ModuleResult:
        manifest = self.manifest(ctx)
        logger.info("Backing up %s...", self.name)
        manifest.parent.mkdir(parents=True, exist_ok=True)
        ctx.tools.brew_dump(manifest)
        return ModuleResult(self.name, ModuleOutcome.DONE, f"Wrote {manifest}")

    def restore(self, ctx: ModuleContext) -> ModuleResult:
        manifest = self.manifest(ctx)
        if not manifest.is_file():
            raise MissingBackup(self.name, manifest)
        logger.info("Restoring %s configuration...", self.name)
        ctx.tools.brew_install(manifest)
        return ModuleResult(self.name, ModuleOutcome.DONE, f"Installed packages from {manifest}")

    def status(self, ctx: ModuleContext) -> ModuleStatus:
        manifest = self.manifest(ctx)
        details = f"Manifest at {manifest}" if manifest.is_file() else "No manifest backed up yet"
        return ModuleStatus(self.name, None, None, details)


@dataclass(frozen=True)
class DotfileModule:
    """A single dotfile in the home directory kept in ``STOW/<name>/``."""

    name: str
    dotfile: Path
    prerequisites: tuple[PluginManager, ...] = ()
    plugin_install: tuple[str, ...] = ()

    def target(self, ctx: ModuleContext) -> Path:
        return ctx.home / self.dotfile

    def managed(self, ctx: ModuleContext) -> Path:
        return ctx.stow_dir / self.name / self.dotfile

    def backup(self, ctx: ModuleContext) -> ModuleResult:
        target = self.target(ctx)
        managed = self.managed(ctx)
        logger.info("Backing up %s...", self.name)

        state = detect_link_state(target, managed)
        if state is LinkState.SYMLINK_MANAGED:
            logger.info("%s is already managed by stow. Skipping.", self.dotfile)
            return ModuleResult(self.name, ModuleOutcome.ALREADY_MANAGED, f"{target} -> {managed}")
        if state is LinkState.SYMLINK_UNMANAGED:
            raise ConflictingSymlink(target, link_destination(target), managed)
        if state is LinkState.ABSENT:
            logger.info("%s not found, nothing to back up.", self.dotfile)
            return ModuleResult(self.name, ModuleOutcome.NOTHING_TO_BACKUP, f"{target} does not exist")

        logger.info("Found %s. Moving it to stow directory and creating symlink.", self.dotfile)
        relocate(target, managed)
        ctx.tools.stow(ctx.stow_dir, ctx.home, self.name)
        return ModuleResult(self.name, ModuleOutcome.DONE, f"Moved {target} to {managed}")

    def restore(self, ctx: ModuleContext) -> ModuleResult:
        target = self.target(ctx)
        managed = self.managed(ctx)
        logger.info("Restoring %s configuration...", self.name)

        state = detect_link_state(target, managed)
        if state is LinkState.SYMLINK_MANAGED:
            # A link into STOW/ whose file is gone is dangling, not managed.
            if not managed.exists():
                raise MissingBackup(self.name, managed)
            logger.info("%s is already managed by stow. Skipping.", self.dotfile)
            return ModuleResult(self.name, ModuleOutcome.ALREADY_MANAGED, f"{target} -> {managed}")
        if state is LinkState.REGULAR_FILE:
            raise UnresolvableConflict(target, managed)
        if state is LinkState.SYMLINK_UNMANAGED:
            raise ConflictingSymlink(target, link_destination(target), managed)
        if not managed.exists():
            raise MissingBackup(self.name, managed)

        for manager in self.prerequisites:
            manager.ensure_installed(ctx)
        ctx.tools.stow(ctx.stow_dir, ctx.home, self.name, restow=True)
        if self.plugin_install:
            argv = [part.format(home=ctx.home) for part in self.plugin_install]
            ctx.tools.run(argv, env={"HOME": str(ctx.home)})
        return ModuleResult(self.name, ModuleOutcome.DONE, f"Linked {target} -> {managed}")

    def status(self, ctx: ModuleContext) -> ModuleStatus:
        target = self.target(ctx)
        managed = self.managed(ctx)
        state = detect_link_state(target, managed)
        details = None
        if state is LinkState.SYMLINK_UNMANAGED:
            details = f"Points to {link_destination(target)}, expected {managed}"
        elif not managed.exists():
            details = "No managed copy in backup folder"
        return ModuleStatus(self.name, state, target, details)


VUNDLE = PluginManager("Vundle", "https://github.com/VundleVim/Vundle.vim.git", Path(".vim/bundle/Vundle.vim"))
TPM = PluginManager("tpm", "https://github.com/tmux-plugins/tpm", Path(".tmux/plugins/tpm"))
OH_MY_ZSH = PluginManager("oh-my-zsh", "https://github.com/ohmyzsh/ohmyzsh.git", Path(".oh-my-zsh"))
ZPLUG = PluginManager("zplug", "https://github.com/zplug/zplug", Path(".zplug"))

REGISTRY: Mapping[str, ModuleDescriptor] = MappingProxyType({
    "brew": PackageModule("brew"),
    "vim": DotfileModule(
        "vim",
        Path(".vimrc"),
        prerequisites=(VUNDLE,),
        plugin_install=("vim", "+PluginInstall", "+qall"),
    ),
    "tmux": DotfileModule(
        "tmux",
        Path(".tmux.conf"),
        prerequisites=(TPM,),
        plugin_install=("{home}/.tmux/plugins/tpm/bin/install_plugins",),
    ),
    "zsh": DotfileModule(
        "zsh",
        Path(".zshrc"),
        prerequisites=(OH_MY_ZSH, ZPLUG),
        plugin_install=("zsh", "-c", "source {home}/.zplug/init.zsh && zplug install"),
    ),
})


def lookup(name: str) -> ModuleDescriptor:
    try:
        return REGISTRY[name]
    except KeyError:
        raise UnknownModule(name) from None


def available_modules() -> tuple[str, ...]:
    return tuple(REGISTRY)
