"""Locating the PHP and Composer executables and inspecting PHP extensions."""

from __future__ import annotations

import shutil
from pathlib import Path

from laravel_installer.core.command import Command
from laravel_installer.core.constants import REQUIRED_PHP_EXTENSIONS
from laravel_installer.core.errors import InstallerError
from laravel_installer.core.runner import CommandRunner

__all__ = [
    "find_php_binary",
    "find_composer",
    "loaded_extensions",
    "ensure_extensions_available",
]


def find_php_binary() -> str:
    """Return the PHP executable on PATH, or plain ``php``."""
    return shutil.which("php") or "php"


def find_composer(working_path: Path | None = None) -> tuple[str, ...]:
    """Return the argv prefix that invokes Composer.

    A ``composer.phar`` in the working directory wins over a global install.
    """
    root = working_path or Path.cwd()
    if (root / "composer.phar").exists():
        return (find_php_binary(), "composer.phar")
    return ("composer",)


def loaded_extensions(runner: CommandRunner, php: str | None = None) -> set[str]:
    result = runner.run_checked([Command(php or find_php_binary(), "-m")])
    if not result.ok:
        raise InstallerError(f"Unable to list PHP extensions: {result.stderr.strip() or result.command_line}")
    return {
        line.strip().lower()
        for line in result.stdout.splitlines()
        if line.strip() and not line.startswith("[")
    }


def ensure_extensions_available(runner: CommandRunner, php: str | None = None) -> None:
    available = loaded_extensions(runner, php)
    missing = [name for name in REQUIRED_PHP_EXTENSIONS if name not in available]
    if missing:
        raise InstallerError(
            "The following PHP extensions are required but are not installed: " + ", ".join(missing)
        )
