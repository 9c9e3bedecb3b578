"""Core package for the forge project."""

from .cli import app, run
from .config import ConfigError, ConfigNotFound, Configuration, MissingBackupFolder, load_config, parse, render_config
from .errors import (
    ConflictingSymlink,
    ExternalToolFailure,
    ForgeError,
    MissingBackup,
    UnknownModule,
    UnresolvableConflict,
)
from .filesystem import detect_link_state
from .manager import ForgeManager
from .models import Action, LinkState, ModuleOutcome, ModuleResult, ModuleStatus, RunReport
from .modules import lookup
from .tools import ToolRunner

__all__ = [
    "Configuration",
    "ConfigError",
    "ConfigNotFound",
    "MissingBackupFolder",
    "load_config",
    "parse",
    "render_config",
    "ForgeError",
    "UnknownModule",
    "ConflictingSymlink",
    "UnresolvableConflict",
    "MissingBackup",
    "ExternalToolFailure",
    "detect_link_state",
    "ForgeManager",
    "Action",
    "LinkState",
    "ModuleOutcome",
    "ModuleResult",
    "ModuleStatus",
    "RunReport",
    "lookup",
    "ToolRunner",
    "app",
    "run",
]
