"""Thin wrapper around the external commands forge drives."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

from .errors import ExternalToolFailure

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class RunResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str


class ToolRunner:
    """Runs external tools and turns a non-zero exit into :class:`ExternalToolFailure`."""

    def run(
        self,
        args: Iterable[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> RunResult:
        argv = [str(arg) for arg in args]
        logger.debug("RUN %s", shlex.join(argv))

        merged_env = None
        if env is not None:
            merged_env = dict(os.environ)
            merged_env.update(dict(env))

        try:
            cp = subprocess.run(
                argv,
                text=True,
                encoding="utf-8",
                errors="replace",
                capture_output=True,
                check=False,
                cwd=str(cwd) if cwd is not None else None,
                env=merged_env,
            )
        except FileNotFoundError as exc:
            raise ExternalToolFailure(argv, COMMAND_NOT_FOUND, f"{argv[0]}: command not found") from exc

        if cp.stdout:
            logger.debug("stdout from %s:\n%s", argv[0], cp.stdout.rstrip())
        if cp.stderr:
            logger.debug("stderr from %s:\n%s", argv[0], cp.stderr.rstrip())

        if cp.returncode != 0:
            raise ExternalToolFailure(argv, cp.returncode, (cp.stderr or "").strip())
        return RunResult(args=argv, returncode=cp.returncode, stdout=cp.stdout or "", stderr=cp.stderr or "")

    # ------------------------------------------------------------------
    # Named operations

    def brew_dump(self, manifest: Path) -> RunResult:
        """Export installed packages to ``manifest``, overwriting it."""

        return self.run(["brew", "bundle", "dump", "--file", str(manifest), "--force"])

    def brew_install(self, manifest: Path) -> RunResult:
        """Install everything listed in ``manifest``."""

        return self.run(["brew", "bundle", "--file", str(manifest)])

    def stow(self, stow_dir: Path, target: Path, package: str, *, restow: bool = False) -> RunResult:
        args = ["stow"]
        if restow:
            args.append("-R")
        args.extend(["-d", str(stow_dir), "-t", str(target), package])
        return self.run(args)

    def git_clone(self, url: str, destination: Path) -> RunResult:
        return self.run(["git", "clone", url, str(destination)])
