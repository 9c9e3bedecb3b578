"""Command-line interface for forge."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import DEFAULT_CONFIG_FILENAME, ConfigError, ConfigNotFound, Configuration, load_config, render_config
from .log import setup_logging
from .manager import ForgeManager
from .models import Action, LinkState, ModuleOutcome, ModuleStatus, RunReport
from .modules import available_modules

app = typer.Typer(help="Mirror dotfiles and packages into a backup folder and restore them")
console = Console()

CONFIG_OPTION_HELP = f"Path to the configuration file (defaults to ./{DEFAULT_CONFIG_FILENAME})"


def _load_manager(config: Path | None) -> ForgeManager:
    return ForgeManager(load_config(config))


def _handle_error(exc: Exception) -> None:
    if isinstance(exc, PermissionError):
        console.print("[red]Permission denied.[/red] Check that you can write to the backup folder and home directory.")
        raise typer.Exit(code=1)
    if isinstance(exc, ConfigError):
        console.print(f"[red]{escape(str(exc))}[/red]")
        if isinstance(exc, ConfigNotFound):
            console.print("[yellow]Use 'forge init --config <path>' to create a configuration file.[/yellow]")
        raise typer.Exit(code=1)
    raise exc


_OUTCOME_STYLES = {
    ModuleOutcome.DONE: "green",
    ModuleOutcome.ALREADY_MANAGED: "green",
    ModuleOutcome.NOTHING_TO_BACKUP: "yellow",
    ModuleOutcome.UNKNOWN: "yellow",
    ModuleOutcome.FAILED: "red",
}

_STATE_STYLES = {
    LinkState.SYMLINK_MANAGED: "green",
    LinkState.ABSENT: "yellow",
    LinkState.REGULAR_FILE: "yellow",
    LinkState.SYMLINK_UNMANAGED: "red",
}


def _format_report(report: RunReport) -> None:
    table = Table(show_header=True, header_style="bold magenta", title=report.action.value)
    table.add_column("Module")
    table.add_column("Outcome")
    table.add_column("Details", overflow="fold")

    for result in report.results:
        style = _OUTCOME_STYLES.get(result.outcome, "white")
        table.add_row(
            escape(result.module),
            f"[{style}]{result.outcome.value}[/{style}]",
            escape(result.details or ""),
        )

    console.print(table)


def _format_status(entries: Iterable[ModuleStatus]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Module")
    table.add_column("State")
    table.add_column("Target", overflow="fold")
    table.add_column("Details", overflow="fold")

    for entry in entries:
        if entry.state is None:
            state = "-"
        else:
            style = _STATE_STYLES.get(entry.state, "white")
            state = f"[{style}]{entry.state.value}[/{style}]"
        table.add_row(
            escape(entry.module),
            state,
            escape(str(entry.target)) if entry.target is not None else "",
            escape(entry.details or ""),
        )

    console.print(table)


def _run_action(config: Path | None, action: Action) -> None:
    try:
        manager = _load_manager(config)
        report = manager.run(action)
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)
        return

    _format_report(report)
    if not report.ok:
        failed = escape(", ".join(result.module for result in report.failed))
        console.print(f"[red]{action.value} failed for: {failed}[/red]")
        raise typer.Exit(code=report.exit_code)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every external command as it runs"),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Append debug output, including external tool output, to this file",
        dir_okay=False,
    ),
) -> None:
    """Mirror dotfiles and packages into a backup folder and restore them."""

    setup_logging(verbose=verbose, log_file=log_file)


@app.command()
def backup(
    config: Path | None = typer.Option(None, "--config", "-f", help=CONFIG_OPTION_HELP),
) -> None:
    """Move dotfiles into the backup folder, link them back and dump packages."""

    _run_action(config, Action.BACKUP)


@app.command()
def restore(
    config: Path | None = typer.Option(None, "--config", "-f", help=CONFIG_OPTION_HELP),
) -> None:
    """Install packages and plugin managers, then link dotfiles from the backup folder."""

    _run_action(config, Action.RESTORE)


@app.command()
def status(
    config: Path | None = typer.Option(None, "--config", "-f", help=CONFIG_OPTION_HELP),
) -> None:
    """Show how each enabled module's dotfile relates to the backup folder."""

    try:
        manager = _load_manager(config)
        entries = manager.status()
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)
        return

    _format_status(entries)


@app.command()
def init(
    config: Path = typer.Option(
        Path(DEFAULT_CONFIG_FILENAME),
        "--config",
        "-f",
        help="Path to write the configuration file",
        dir_okay=False,
        writable=True,
    ),
    backup_folder: str = typer.Option(
        "./backup",
        "--backup-folder",
        help="Backup folder to record in the configuration",
    ),
    module: list[str] = typer.Option(
        None,
        "--module",
        "-m",
        help="Module to enable (repeatable, defaults to every known module)",
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite existing config if present"),
) -> None:
    """Create a starter forge configuration file."""

    if config.exists() and not force:
        console.print(f"[red]Configuration '{escape(str(config))}' already exists. Use --force to overwrite.[/red]")
        raise typer.Exit(code=1)

    if not backup_folder.strip():
        console.print("[red]--backup-folder must not be empty.[/red]")
        raise typer.Exit(code=1)

    known = available_modules()
    enabled = tuple(module) if module else known
    unknown = [name for name in enabled if name not in known]
    if unknown:
        console.print(f"[red]Unknown module(s): {escape(', '.join(unknown))}. Known modules: {', '.join(known)}[/red]")
        raise typer.Exit(code=1)

    configuration = Configuration(backup_folder=backup_folder, enabled_modules=enabled)
    config.parent.mkdir(parents=True, exist_ok=True)
    config.write_text(render_config(configuration))
    console.print(f"[green]Created '{escape(str(config))}'.[/green]")


def run() -> None:
    """Entry point used for console_script bindings."""

    app()
