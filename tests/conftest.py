from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Mapping

import pytest

from forge.errors import ExternalToolFailure
from forge.tools import RunResult, ToolRunner


class FakeToolRunner(ToolRunner):
    """Records commands and imitates stow, git and brew on the filesystem."""

    def __init__(self, fail: Iterable[str] = ()) -> None:
        self.calls: list[list[str]] = []
        self.envs: list[Mapping[str, str] | None] = []
        self.fail = set(fail)

    def run(self, args, *, cwd=None, env=None) -> RunResult:  # noqa: ANN001
        argv = [str(arg) for arg in args]
        self.calls.append(argv)
        self.envs.append(env)
        if argv[0] in self.fail:
            raise ExternalToolFailure(argv, 1, "simulated failure")

        if argv[0] == "stow":
            self._stow(argv)
        elif argv[:2] == ["git", "clone"]:
            Path(argv[3]).mkdir(parents=True)
        elif argv[:3] == ["brew", "bundle", "dump"]:
            Path(argv[argv.index("--file") + 1]).write_text('brew "git"\n')

        return RunResult(args=argv, returncode=0, stdout="", stderr="")

    @staticmethod
    def _stow(argv: list[str]) -> None:
        stow_dir = Path(argv[argv.index("-d") + 1])
        target = Path(argv[argv.index("-t") + 1])
        package = stow_dir / argv[-1]
        if not package.is_dir():
            raise ExternalToolFailure(argv, 2, f"no such package: {argv[-1]}")
        for child in sorted(package.iterdir()):
            link = target / child.name
            if link.is_symlink():
                if link.resolve() == child.resolve():
                    continue
                raise ExternalToolFailure(argv, 1, f"existing target is not owned by stow: {child.name}")
            if link.exists():
                raise ExternalToolFailure(argv, 1, f"existing target is neither a link nor a directory: {child.name}")
            link.symlink_to(os.path.relpath(child, target))

    def programs(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


@pytest.fixture
def tools() -> FakeToolRunner:
    return FakeToolRunner()


@pytest.fixture
def backup_folder(tmp_path: Path) -> Path:
    return tmp_path / "cfgbak"


@pytest.fixture
def make_tools():
    return FakeToolRunner
