from __future__ import annotations

from pathlib import Path

import pytest

from forge.config import parse
from forge.manager import ForgeManager
from forge.models import Action, LinkState, ModuleOutcome


def _manager(body: str, home: Path, tools) -> ForgeManager:
    return ForgeManager(parse(body), home=home, tools=tools)


def test_backup_then_restore_scenario(fake_home: Path, backup_folder: Path, tools) -> None:
    (fake_home / ".vimrc").write_text("set number\n")
    manager = _manager(f"BackupFolder: {backup_folder}\nEnabled\n- vim\nDisabled\n", fake_home, tools)

    report = manager.backup()

    managed = backup_folder / "STOW" / "vim" / ".vimrc"
    assert report.ok
    assert [(r.module, r.outcome) for r in report.results] == [("vim", ModuleOutcome.DONE)]
    assert managed.read_text() == "set number\n"
    assert (fake_home / ".vimrc").is_symlink()
    assert (fake_home / ".vimrc").resolve() == managed.resolve()

    tools.calls.clear()
    restore_report = manager.restore()

    assert [(r.module, r.outcome) for r in restore_report.results] == [("vim", ModuleOutcome.ALREADY_MANAGED)]
    assert restore_report.exit_code == 0
    assert tools.calls == []


def test_modules_run_in_declaration_order(fake_home: Path, backup_folder: Path, tools) -> None:
    for name in (".zshrc", ".vimrc"):
        (fake_home / name).write_text("x\n")
    manager = _manager(f"BackupFolder: {backup_folder}\nEnabled:\n- zsh\n- brew\n- vim\n", fake_home, tools)

    report = manager.run(Action.BACKUP)

    assert [r.module for r in report.results] == ["zsh", "brew", "vim"]
    assert [call[-1] for call in tools.calls] == ["zsh", "--force", "vim"]


def test_disabled_modules_are_never_run(fake_home: Path, backup_folder: Path, tools) -> None:
    (fake_home / ".vimrc").write_text("x\n")
    manager = _manager(
        f"BackupFolder: {backup_folder}\nEnabled:\n- vim\n- brew\nDisabled:\n- vim\n",
        fake_home,
        tools,
    )

    report = manager.backup()

    assert [r.module for r in report.results] == ["brew"]
    assert not (fake_home / ".vimrc").is_symlink()


def test_duplicate_modules_run_once(fake_home: Path, backup_folder: Path, tools) -> None:
    manager = _manager(f"BackupFolder: {backup_folder}\nEnabled:\n- brew\n- brew\n", fake_home, tools)

    report = manager.backup()

    assert [r.module for r in report.results] == ["brew"]
    assert len(tools.calls) == 1


def test_unknown_module_is_skipped(fake_home: Path, backup_folder: Path, tools) -> None:
    manager = _manager(f"BackupFolder: {backup_folder}\nEnabled:\n- emacs\n- brew\n", fake_home, tools)

    report = manager.backup()

    assert [(r.module, r.outcome) for r in report.results] == [
        ("emacs", ModuleOutcome.UNKNOWN),
        ("brew", ModuleOutcome.DONE),
    ]
    assert report.ok


def test_failing_module_does_not_stop_later_modules(fake_home: Path, backup_folder: Path, make_tools) -> None:
    tools = make_tools(fail={"brew"})
    (fake_home / ".tmux.conf").write_text("set -g mouse on\n")
    manager = _manager(f"BackupFolder: {backup_folder}\nEnabled:\n- brew\n- tmux\n", fake_home, tools)

    report = manager.backup()

    assert [(r.module, r.outcome) for r in report.results] == [
        ("brew", ModuleOutcome.FAILED),
        ("tmux", ModuleOutcome.DONE),
    ]
    assert "simulated failure" in (report.results[0].details or "")
    assert report.exit_code == 1
    assert [r.module for r in report.failed] == ["brew"]


def test_conflicts_are_reported_per_module(fake_home: Path, backup_folder: Path, tools) -> None:
    (fake_home / ".vimrc").symlink_to(fake_home / "elsewhere")
    (fake_home / ".zshrc").write_text("x\n")
    manager = _manager(f"BackupFolder: {backup_folder}\nEnabled:\n- vim\n- zsh\n", fake_home, tools)

    report = manager.backup()

    assert [(r.module, r.outcome) for r in report.results] == [
        ("vim", ModuleOutcome.FAILED),
        ("zsh", ModuleOutcome.DONE),
    ]
    assert str(fake_home / "elsewhere") in (report.results[0].details or "")


def test_filesystem_errors_are_contained(
    fake_home: Path, backup_folder: Path, tools, monkeypatch: pytest.MonkeyPatch
) -> None:
    (fake_home / ".vimrc").write_text("x\n")

    def deny(*_args, **_kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr("forge.modules.relocate", deny)
    manager = _manager(f"BackupFolder: {backup_folder}\nEnabled:\n- vim\n- brew\n", fake_home, tools)

    report = manager.backup()

    assert [(r.module, r.outcome) for r in report.results] == [
        ("vim", ModuleOutcome.FAILED),
        ("brew", ModuleOutcome.DONE),
    ]


def test_status_does_not_mutate(fake_home: Path, backup_folder: Path, tools) -> None:
    (fake_home / ".vimrc").write_text("x\n")
    manager = _manager(f"BackupFolder: {backup_folder}\nEnabled:\n- vim\n- brew\n- emacs\n", fake_home, tools)

    entries = manager.status()

    assert [(e.module, e.state) for e in entries] == [
        ("vim", LinkState.REGULAR_FILE),
        ("brew", None),
        ("emacs", None),
    ]
    assert tools.calls == []
    assert not backup_folder.exists()


def test_home_defaults_to_user_home(fake_home: Path, backup_folder: Path) -> None:
    manager = ForgeManager(parse(f"BackupFolder: {backup_folder}\n"))

    assert manager.context.home == fake_home
    assert manager.context.backup_folder == backup_folder.resolve()


def test_symlink_loop_fails_only_its_module(fake_home: Path, backup_folder: Path, tools) -> None:
    (fake_home / ".vimrc").symlink_to(".vimrc")
    manager = _manager(f"BackupFolder: {backup_folder}\nEnabled:\n- vim\n- brew\n", fake_home, tools)

    report = manager.backup()

    assert [(r.module, r.outcome) for r in report.results] == [
        ("vim", ModuleOutcome.FAILED),
        ("brew", ModuleOutcome.DONE),
    ]
    assert [entry.state for entry in manager.status()] == [LinkState.SYMLINK_UNMANAGED, None]
