"""Build-plan assembly for a new Laravel application.

``ProjectBuilder.assemble`` turns a ``ProjectConfiguration`` into the ordered
list of commands that materialize the project. It only builds values; the
commands run when ``build`` hands them to the ``CommandRunner``.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from typing import Sequence

from .command import AnyCommand, Command, ShellCommand
from .config import ConfigurationBuilder, ProjectConfiguration
from .constants import COMPONENTS_CHANNEL, DEFAULT_TEMPLATE, WORKOS_CHANNEL
from .runner import CommandResult, CommandRunner

__all__ = ["ProjectBuilder"]

logger = logging.getLogger(__name__)


class ProjectBuilder:
    """Assembles and runs the commands that create a project."""

    def __init__(
        self,
        runner: CommandRunner,
        *,
        composer: Sequence[str] | None = None,
        php: str | None = None,
        windows: bool | None = None,
    ):
        self.runner = runner
        self._composer = tuple(composer) if composer else None
        self._php = php
        self.windows = runner.windows if windows is None else windows

    @property
    def composer(self) -> tuple[str, ...]:
        if self._composer is None:
            from laravel_installer.services.php import find_composer

            self._composer = find_composer()
        return self._composer

    @property
    def php(self) -> str:
        if self._php is None:
            from laravel_installer.services.php import find_php_binary

            self._php = find_php_binary()
        return self._php

    def assemble(self, config: ProjectConfiguration) -> list[AnyCommand]:
        """Return the ordered creation plan for ``config``."""
        ConfigurationBuilder.validate(config)

        directory = config.directory
        artisan = f"{directory}/artisan"
        commands: list[AnyCommand] = []

        if config.force and not config.is_current_directory:
            commands.append(self._delete_command(directory))

        commands.extend(self._creation_commands(config))

        commands.append(Command(self.composer, "run", "post-root-package-install", "-d", directory))
        commands.append(Command(self.php, artisan, "key:generate", "--ansi"))

        if not self.windows:
            commands.append(Command("chmod", "755", artisan))

        return commands

    def build(self, config: ProjectConfiguration) -> CommandResult:
        commands = self.assemble(config)
        logger.info("Creating %s in %s", config.name, config.directory)
        cwd = os.getcwd() if config.is_current_directory else None
        return self.runner.run(commands, cwd=cwd)

    def install_and_build_assets(self, config: ProjectConfiguration, *, quiet: bool = False) -> CommandResult | None:
        """Stream the package manager's install and build steps, if one was chosen."""
        manager = config.package_manager
        if manager is None:
            return None
        commands = [
            Command(shlex.split(manager.install_command())),
            Command(shlex.split(manager.build_command())),
        ]
        return self.runner.run_streamed(commands, cwd=config.directory, quiet=quiet)

    def _creation_commands(self, config: ProjectConfiguration) -> list[AnyCommand]:
        directory = config.directory

        if not config.is_using_starter_kit:
            argv = [*self.composer, "create-project", DEFAULT_TEMPLATE, directory]
            if config.version:
                argv.append(config.version)
            argv.extend(["--remove-vcs", "--prefer-dist", "--no-scripts"])
            return [Command(argv)]

        kit = config.starter_kit
        assert kit is not None

        if config.is_using_external_starter_kit:
            cd = Command("cd", "/d", directory) if self.windows else Command("cd", directory)
            return [
                Command("npx", "tiged@latest", kit, directory),
                cd,
                Command(self.composer, "install"),
            ]

        if config.is_using_laravel_starter_kit:
            if config.use_livewire_class_components:
                kit = f"{kit}:{COMPONENTS_CHANNEL}"
            elif config.use_workos:
                kit = f"{kit}:{WORKOS_CHANNEL}"

        return [Command(self.composer, "create-project", kit, directory, "--stability=dev")]

    def _delete_command(self, directory: str) -> AnyCommand:
        if self.windows:
            quoted = subprocess.list2cmdline([directory])
            return ShellCommand(f"(if exist {quoted} rd /s /q {quoted})", program="rd")
        return Command("rm", "-rf", directory)
