"""Exception types raised by the installer core.

The CLI maps every ``InstallerError`` to a printed error and exit status 1.
Advisory failures (``UnsupportedOperation``, ``RemoteFetchFailure``) are caught
where they occur and reported as warnings instead.
"""

from __future__ import annotations

__all__ = [
    "InstallerError",
    "ExecutionError",
    "ExecutionTimeout",
    "UnsupportedOperation",
    "RemoteFetchFailure",
    "ConfigurationViolation",
]


class InstallerError(Exception):
    """Base class for all installer errors."""


class ExecutionError(InstallerError):
    """Raised when a composed command exits with a nonzero status."""

    def __init__(self, command_line: str, stderr: str = "", returncode: int | None = None):
        self.command_line = command_line
        self.stderr = stderr
        self.returncode = returncode
        message = f"Command failed: {command_line}"
        if stderr.strip():
            message += f"\n{stderr.rstrip()}"
        super().__init__(message)


class ExecutionTimeout(ExecutionError):
    """Raised when a command outlives the runner's configured timeout."""

    def __init__(self, command_line: str, timeout: float, stderr: str = ""):
        self.timeout = timeout
        super().__init__(command_line, stderr or f"Timed out after {timeout:g}s")


class UnsupportedOperation(InstallerError):
    """Raised when a best-effort host feature (e.g. a pseudo-terminal) is unavailable."""


class RemoteFetchFailure(InstallerError):
    """Raised inside the version checker when the feed cannot be read or parsed."""


class ConfigurationViolation(InstallerError):
    """Raised when a configuration breaks an invariant, before any command runs."""
