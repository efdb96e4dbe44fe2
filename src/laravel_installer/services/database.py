"""Database selection, ``.env`` rewriting and the initial migration run."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from laravel_installer.core.command import Command
from laravel_installer.core.config import ProjectConfiguration
from laravel_installer.core.errors import InstallerError
from laravel_installer.core.runner import CommandResult, CommandRunner

from .files import regex_replace_in_file, replace_in_file
from .php import find_php_binary, loaded_extensions

__all__ = ["DatabaseConfigurator", "DATABASE_LABELS"]

logger = logging.getLogger(__name__)

# driver -> (label, PDO extension)
DATABASE_LABELS: dict[str, tuple[str, str]] = {
    "sqlite": ("SQLite", "pdo_sqlite"),
    "mysql": ("MySQL", "pdo_mysql"),
    "mariadb": ("MariaDB", "pdo_mysql"),
    "pgsql": ("PostgreSQL", "pdo_pgsql"),
    "sqlsrv": ("SQL Server", "pdo_sqlsrv"),
}

DEFAULT_PORTS = {
    "pgsql": "5432",
    "sqlsrv": "1433",
}

DB_DEFAULTS = (
    "DB_HOST=127.0.0.1",
    "DB_PORT=3306",
    "DB_DATABASE=laravel",
    "DB_USERNAME=root",
    "DB_PASSWORD=",
)

APP_URL = "http://localhost:8000"

SelectPrompt = Callable[[dict[str, str], str, Optional[str]], str]
ConfirmPrompt = Callable[[str], bool]


class DatabaseConfigurator:
    """Points a new application at its database and optionally migrates it.

    ``select`` and ``confirm`` are the interactive prompts; without them the
    configured driver is used as-is.
    """

    def __init__(
        self,
        runner: CommandRunner,
        *,
        php: str | None = None,
        select: SelectPrompt | None = None,
        confirm: ConfirmPrompt | None = None,
    ):
        self.runner = runner
        self._php = php
        self.select = select
        self.confirm = confirm

    @property
    def php(self) -> str:
        if self._php is None:
            self._php = find_php_binary()
        return self._php

    def available_databases(self) -> dict[str, str]:
        """Drivers with their labels, those with a loaded PDO extension first."""
        try:
            extensions = loaded_extensions(self.runner, self.php)
        except InstallerError as exc:
            logger.warning("Unable to detect PDO extensions: %s", exc)
            extensions = set()

        entries = [
            (driver, label, extension in extensions)
            for driver, (label, extension) in DATABASE_LABELS.items()
        ]
        entries.sort(key=lambda entry: not entry[2])
        return {
            driver: label if loaded else f"{label} (Missing PDO extension)"
            for driver, label, loaded in entries
        }

    def resolve(self, config: ProjectConfiguration, *, explicit: bool = False) -> tuple[str, bool]:
        """Return ``(driver, should_migrate)`` for ``config``."""
        if config.is_using_starter_kit:
            # Starter kits ship their own migration setup.
            return config.database, False

        if not explicit and config.is_interactive and self.select is not None:
            options = self.available_databases()
            default = next(iter(options), None)
            selected = self.select(options, "Which database will your application use?", default)
            if selected == "sqlite":
                return selected, True
            should_migrate = (
                self.confirm("Would you like to run the default database migrations?")
                if self.confirm is not None
                else False
            )
            return selected, should_migrate

        return config.database, True

    def configure(
        self,
        config: ProjectConfiguration,
        *,
        explicit: bool = False,
        quiet: bool = False,
    ) -> ProjectConfiguration:
        """Rewrite the environment files and run migrations when requested.

        Returns ``config`` updated with the chosen driver.
        """
        database, should_migrate = self.resolve(config, explicit=explicit)
        config = config.with_database(database, should_migrate)
        directory = Path(config.directory)

        replace_in_file("APP_URL=http://localhost", f"APP_URL={APP_URL}", directory / ".env")
        self.configure_connection(directory, database, config.name)

        if should_migrate:
            result = self.run_migrations(config, quiet=quiet)
            if not result.ok:
                logger.warning("Migrations exited with %s", result.returncode)
        return config

    def configure_connection(self, directory: Path, database: str, name: str) -> None:
        for env_file in (directory / ".env", directory / ".env.example"):
            regex_replace_in_file(r"DB_CONNECTION=.*", f"DB_CONNECTION={database}", env_file)

        if database == "sqlite":
            self._comment_defaults(directory)
        else:
            self._uncomment_defaults(directory, database, name)

    def _comment_defaults(self, directory: Path) -> None:
        env_path = directory / ".env"
        if env_path.is_file() and "# DB_HOST=127.0.0.1" in env_path.read_text(encoding="utf-8"):
            return
        commented = [f"# {line}" for line in DB_DEFAULTS]
        for env_file in (env_path, directory / ".env.example"):
            replace_in_file(DB_DEFAULTS, commented, env_file)

    def _uncomment_defaults(self, directory: Path, database: str, name: str) -> None:
        commented = [f"# {line}" for line in DB_DEFAULTS]
        database_name = name.lower().replace("-", "_")
        for env_file in (directory / ".env", directory / ".env.example"):
            replace_in_file(commented, DB_DEFAULTS, env_file)
            if database in DEFAULT_PORTS:
                replace_in_file("DB_PORT=3306", f"DB_PORT={DEFAULT_PORTS[database]}", env_file)
            replace_in_file("DB_DATABASE=laravel", f"DB_DATABASE={database_name}", env_file)

    def run_migrations(self, config: ProjectConfiguration, *, quiet: bool = False) -> CommandResult:
        if config.database == "sqlite":
            sqlite_path = Path(config.directory) / "database" / "database.sqlite"
            if not sqlite_path.exists():
                sqlite_path.parent.mkdir(parents=True, exist_ok=True)
                sqlite_path.touch()

        command = Command(self.php, "artisan", "migrate")
        if not config.is_interactive:
            command = command.with_flags("--no-interaction")
        return self.runner.run_streamed([command], cwd=config.directory, quiet=quiet)
