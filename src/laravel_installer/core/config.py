"""Resolved configuration for a single ``laravel new`` run.

``ProjectConfiguration`` is frozen. The CLI collects choices on a
``ConfigurationBuilder`` and calls ``build()``, which validates every invariant
before any command is assembled. The package manager is only known once the
project exists on disk, so it is attached by re-construction with
``with_package_manager()`` rather than by mutating the record.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .constants import (
    DATABASE_DRIVERS,
    DEFAULT_DATABASE,
    FIRST_PARTY_KIT_PREFIX,
)
from .errors import ConfigurationViolation

__all__ = [
    "CURRENT_DIRECTORY",
    "NodePackageManager",
    "PackageManagerSelection",
    "ProjectConfiguration",
    "ConfigurationBuilder",
    "validate_project_name",
]

CURRENT_DIRECTORY = "."

_PROJECT_NAME = re.compile(r"^[\w.-]+$")


class NodePackageManager(str, Enum):
    NPM = "npm"
    PNPM = "pnpm"
    BUN = "bun"
    YARN = "yarn"

    def install_command(self) -> str:
        if self is NodePackageManager.YARN:
            return "yarn"
        return f"{self.value} install"

    def build_command(self) -> str:
        return f"{self.value} run build"

    def lock_files(self) -> tuple[str, ...]:
        return _LOCK_FILES[self]

    @classmethod
    def all_lock_files(cls) -> tuple[str, ...]:
        return tuple(lock for manager in cls for lock in manager.lock_files())


_LOCK_FILES: dict[NodePackageManager, tuple[str, ...]] = {
    NodePackageManager.NPM: ("package-lock.json",),
    NodePackageManager.PNPM: ("pnpm-lock.yaml",),
    NodePackageManager.BUN: ("bun.lock", "bun.lockb"),
    NodePackageManager.YARN: ("yarn.lock",),
}


@dataclass(frozen=True)
class PackageManagerSelection:
    """Detected package manager and whether it was explicitly requested."""

    manager: NodePackageManager
    should_run: bool


@dataclass(frozen=True)
class ProjectConfiguration:
    """Every resolved choice for one scaffolding run."""

    name: str
    directory: str
    version: str = ""
    starter_kit: Optional[str] = None
    database: str = DEFAULT_DATABASE
    should_migrate: bool = False
    use_git: bool = False
    git_branch: str = "main"
    use_github: bool = False
    github_organization: Optional[str] = None
    github_flags: str = "--private"
    use_pest: bool = False
    package_manager: Optional[NodePackageManager] = None
    should_run_package_manager: bool = False
    force: bool = False
    is_dev: bool = False
    is_interactive: bool = True
    use_livewire_class_components: bool = False
    use_workos: bool = False

    @property
    def is_current_directory(self) -> bool:
        return self.directory == CURRENT_DIRECTORY

    @property
    def is_using_starter_kit(self) -> bool:
        return self.starter_kit is not None

    @property
    def is_using_laravel_starter_kit(self) -> bool:
        return bool(self.starter_kit) and self.starter_kit.startswith(FIRST_PARTY_KIT_PREFIX)

    @property
    def is_using_external_starter_kit(self) -> bool:
        return (
            bool(self.starter_kit)
            and not self.is_using_laravel_starter_kit
            and "://" in self.starter_kit
        )

    def with_package_manager(self, selection: PackageManagerSelection | None, should_run: bool | None = None) -> "ProjectConfiguration":
        """Return a copy carrying the detected package manager."""
        if selection is None:
            return dataclasses.replace(self, package_manager=None, should_run_package_manager=False)
        run = selection.should_run if should_run is None else should_run
        return dataclasses.replace(
            self,
            package_manager=selection.manager,
            should_run_package_manager=run,
        )

    def with_database(self, database: str, should_migrate: bool) -> "ProjectConfiguration":
        return dataclasses.replace(self, database=database, should_migrate=should_migrate)


def validate_project_name(name: str) -> str | None:
    """Return an error message for an invalid project name, else None."""
    if not name:
        return "The project name is required."
    if name != CURRENT_DIRECTORY and not _PROJECT_NAME.match(name):
        return "The name may only contain letters, numbers, dashes, underscores, and periods."
    return None


class ConfigurationBuilder:
    """Collects choices and produces a validated ``ProjectConfiguration``."""

    def __init__(self, name: str, directory: str):
        self._values: dict[str, object] = {"name": name, "directory": directory}

    def set(self, **values: object) -> "ConfigurationBuilder":
        unknown = set(values) - {f.name for f in dataclasses.fields(ProjectConfiguration)}
        if unknown:
            raise TypeError(f"Unknown configuration field(s): {', '.join(sorted(unknown))}")
        self._values.update(values)
        return self

    def build(self) -> ProjectConfiguration:
        config = ProjectConfiguration(**self._values)  # type: ignore[arg-type]
        self.validate(config)
        return config

    @staticmethod
    def validate(config: ProjectConfiguration) -> None:
        error = validate_project_name(config.name)
        if error:
            raise ConfigurationViolation(error)

        if config.is_current_directory and config.force:
            raise ConfigurationViolation(
                "Cannot use --force option when using current directory for installation!"
            )

        if config.database not in DATABASE_DRIVERS:
            raise ConfigurationViolation(
                f"Invalid database driver [{config.database}]. "
                f"Possible values are: {', '.join(DATABASE_DRIVERS)}."
            )

        if config.use_livewire_class_components and config.use_workos:
            raise ConfigurationViolation(
                "Livewire class components and WorkOS authentication cannot be combined; "
                "choose one starter kit variant."
            )
