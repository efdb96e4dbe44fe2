"""Swapping PHPUnit for Pest in a freshly created project."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from laravel_installer.core.command import Command
from laravel_installer.core.config import ProjectConfiguration
from laravel_installer.core.runner import CommandResult, CommandRunner

from .files import replace_in_file
from .git import GitService
from .php import find_composer, find_php_binary

__all__ = ["PestInstaller"]

logger = logging.getLogger(__name__)

REFRESH_DATABASE = "Illuminate\\Foundation\\Testing\\RefreshDatabase::class"


class PestInstaller:
    def __init__(
        self,
        runner: CommandRunner,
        git: GitService,
        *,
        composer: Sequence[str] | None = None,
        php: str | None = None,
    ):
        self.runner = runner
        self.git = git
        self._composer = tuple(composer) if composer else None
        self._php = php

    @property
    def composer(self) -> tuple[str, ...]:
        if self._composer is None:
            self._composer = find_composer()
        return self._composer

    @property
    def php(self) -> str:
        if self._php is None:
            self._php = find_php_binary()
        return self._php

    def commands(self) -> list[Command]:
        composer, php = self.composer, self.php
        return [
            Command(composer, "remove", "phpunit/phpunit", "--dev", "--no-update"),
            Command(composer, "require", "pestphp/pest", "pestphp/pest-plugin-laravel", "--no-update", "--dev"),
            Command(composer, "update"),
            Command(php, "./vendor/bin/pest", "--init"),
            Command(composer, "require", "pestphp/pest-plugin-drift", "--dev"),
            Command(php, "./vendor/bin/pest", "--drift"),
            Command(composer, "remove", "pestphp/pest-plugin-drift", "--dev"),
        ]

    def install(self, config: ProjectConfiguration, *, quiet: bool = False) -> CommandResult:
        """Install Pest, convert the existing tests and commit when using git."""
        result = self.runner.run_streamed(
            self.commands(),
            cwd=config.directory,
            env={"PEST_NO_SUPPORT": "true"},
            quiet=quiet,
        )
        if not result.ok:
            logger.warning("Pest installation exited with %s", result.returncode)
            return result

        if config.is_using_starter_kit:
            self.configure_starter_kit(Path(config.directory))

        if config.use_git:
            commit = self.git.commit_changes("Install Pest", config.directory)
            if not commit.ok:
                logger.warning("Unable to commit Pest installation: %s", commit.stderr.strip())
        return result

    def configure_starter_kit(self, directory: Path) -> None:
        replace_in_file(
            "./vendor/bin/phpunit",
            "./vendor/bin/pest",
            directory / ".github" / "workflows" / "tests.yml",
        )
        replace_in_file(
            f" // ->use({REFRESH_DATABASE})",
            f"    ->use({REFRESH_DATABASE})",
            directory / "tests" / "Pest.php",
        )
        self.remove_refresh_database_from_tests(directory / "tests")

    def remove_refresh_database_from_tests(self, tests_directory: Path) -> list[Path]:
        if not tests_directory.is_dir():
            return []
        changed = []
        for path in sorted(tests_directory.rglob("*.php")):
            if replace_in_file(f"\n\nuses(\\{REFRESH_DATABASE});", "", path):
                changed.append(path)
        return changed
