"""Core orchestration: configuration, command execution and build planning."""

from .builder import ProjectBuilder
from .command import Command, ShellCommand, compose
from .config import (
    CURRENT_DIRECTORY,
    ConfigurationBuilder,
    NodePackageManager,
    PackageManagerSelection,
    ProjectConfiguration,
)
from .errors import (
    ConfigurationViolation,
    ExecutionError,
    ExecutionTimeout,
    InstallerError,
    RemoteFetchFailure,
    UnsupportedOperation,
)
from .runner import CommandResult, CommandRunner

__all__ = [
    "CURRENT_DIRECTORY",
    "Command",
    "CommandResult",
    "CommandRunner",
    "ConfigurationBuilder",
    "ConfigurationViolation",
    "ExecutionError",
    "ExecutionTimeout",
    "InstallerError",
    "NodePackageManager",
    "PackageManagerSelection",
    "ProjectBuilder",
    "ProjectConfiguration",
    "RemoteFetchFailure",
    "ShellCommand",
    "UnsupportedOperation",
    "compose",
]
