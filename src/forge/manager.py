"""High level orchestration for forge backup and restore runs."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import Configuration
from .errors import ForgeError, UnknownModule
from .models import Action, ModuleOutcome, ModuleResult, ModuleStatus, RunReport
from .modules import ModuleContext, ModuleDescriptor, lookup
from .tools import ToolRunner

logger = logging.getLogger(__name__)


class ForgeManager:
    """Runs an action for every enabled module, one module at a time.

    A failing module is recorded in the report and never stops the modules
    after it.
    """

    def __init__(
        self,
        config: Configuration,
        *,
        home: Path | None = None,
        tools: ToolRunner | None = None,
    ) -> None:
        self.config = config
        self.context = ModuleContext(
            home=home if home is not None else Path.home(),
            backup_folder=config.resolve_backup_folder(),
            tools=tools if tools is not None else ToolRunner(),
        )

    def backup(self) -> RunReport:
        return self.run(Action.BACKUP)

    def restore(self) -> RunReport:
        return self.run(Action.RESTORE)

    def run(self, action: Action) -> RunReport:
        results: list[ModuleResult] = []
        for name in self.config.effective_modules():
            try:
                descriptor = lookup(name)
            except UnknownModule as exc:
                logger.warning("%s; skipping.", exc)
                results.append(ModuleResult(name, ModuleOutcome.UNKNOWN, str(exc)))
                continue
            results.append(self._run_module(descriptor, action))

        report = RunReport(action=action, results=tuple(results))
        if not report.ok:
            logger.error("%s failed for: %s", action.value, ", ".join(r.module for r in report.failed))
        return report

    def status(self) -> list[ModuleStatus]:
        entries: list[ModuleStatus] = []
        for name in self.config.effective_modules():
            try:
                descriptor = lookup(name)
            except UnknownModule as exc:
                entries.append(ModuleStatus(name, None, None, str(exc)))
                continue
            entries.append(descriptor.status(self.context))
        return entries

    # ------------------------------------------------------------------
    # Internal helpers

    def _run_module(self, descriptor: ModuleDescriptor, action: Action) -> ModuleResult:
        try:
            if action is Action.BACKUP:
                return descriptor.backup(self.context)
            return descriptor.restore(self.context)
        except (ForgeError, OSError) as exc:
            logger.error("%s %s failed: %s", descriptor.name, action.value, exc)
            return ModuleResult(descriptor.name, ModuleOutcome.FAILED, str(exc))
