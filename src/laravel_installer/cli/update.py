"""Advisory update notice shown before a project is created."""

from __future__ import annotations

import logging
import os
import platform
import shutil
from typing import Callable, Sequence

import typer
from rich.console import Console

from laravel_installer.core.command import Command
from laravel_installer.core.constants import INSTALLER_PACKAGE
from laravel_installer.core.runner import CommandRunner
from laravel_installer.services.version_check import VersionChecker

from .helpers import warn

__all__ = ["check_and_prompt_for_update", "herd_lite_update_command", "installer_location"]

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

PHP_NEW_COMMANDS = {
    "Windows": (
        "Set-ExecutionPolicy Bypass -Scope Process -Force; "
        "[System.Net.ServicePointManager]::SecurityProtocol = "
        "[System.Net.ServicePointManager]::SecurityProtocol -bor 3072; "
        "iex ((New-Object System.Net.WebClient).DownloadString('https://php.new/install/windows'))"
    ),
    "Darwin": '/bin/bash -c "$(curl -fsSL https://php.new/install/mac)"',
    "Linux": '/bin/bash -c "$(curl -fsSL https://php.new/install/linux)"',
}


def installer_location(path: str | None = None) -> str:
    """Classify how the installer was installed: ``herd``, ``herd-lite`` or ``composer``."""
    path = path if path is not None else (shutil.which("laravel") or "")
    if f"{os.sep}Herd{os.sep}" in path:
        return "herd"
    if f"{os.sep}herd-lite{os.sep}" in path:
        return "herd-lite"
    return "composer"


def herd_lite_update_command(system: str | None = None) -> str:
    system = system or platform.system()
    return PHP_NEW_COMMANDS.get(system, PHP_NEW_COMMANDS["Linux"])


def _proxy(runner: CommandRunner, argv: Sequence[str], console: Console) -> None:
    """Re-run the updated installer with the original arguments, then exit with its status."""
    console.print()
    result = runner.run_streamed([Command("laravel", *argv)], cwd=os.getcwd())
    raise typer.Exit(result.returncode)


def check_and_prompt_for_update(
    current: str,
    argv: Sequence[str],
    *,
    checker: VersionChecker,
    runner: CommandRunner,
    console: Console,
    confirm: Confirm,
    location: str | None = None,
) -> str | None:
    """Warn about a newer release and offer to update.

    Returns the newer version, or ``None`` when already up to date. When the
    user updates, the installer is re-run and this raises ``typer.Exit``.
    """
    latest = checker.newer_version(current)
    if latest is None:
        return None

    warn(
        "A new version of the Laravel installer is available. "
        f"You have version {current} installed, the latest version is {latest}.",
        console,
    )

    location = location or installer_location()
    logger.debug("Installer location: %s", location)

    if location == "herd":
        console.print(
            "  To update, open [bold]Herd[/] > [bold]Settings[/] > [bold]PHP[/] > "
            '[bold]Laravel Installer[/] and click the [bold]"Update"[/] button.'
        )
        if confirm("Have you updated? Re-run with the new version now?"):
            _proxy(runner, argv, console)
    elif location == "herd-lite":
        console.print("  To update, run the following command in your terminal:")
        console.print(f"  {herd_lite_update_command()}", markup=False, highlight=False)
        if confirm("Have you updated? Re-run with the new version now?"):
            _proxy(runner, argv, console)
    elif confirm("Would you like to update now?"):
        runner.run_streamed([Command("composer", "global", "update", INSTALLER_PACKAGE)])
        _proxy(runner, argv, console)

    console.print()
    return latest
