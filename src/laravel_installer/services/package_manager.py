"""Choosing the Node package manager for a new project."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from laravel_installer.core.config import (
    NodePackageManager,
    PackageManagerSelection,
    ProjectConfiguration,
)

__all__ = ["PackageManagerDetector"]

logger = logging.getLogger(__name__)

# Order in which explicitly requested managers win.
_FLAG_PRIORITY = (
    NodePackageManager.PNPM,
    NodePackageManager.BUN,
    NodePackageManager.YARN,
    NodePackageManager.NPM,
)


class PackageManagerDetector:
    def detect(
        self,
        directory: str | Path,
        requested: Iterable[NodePackageManager] = (),
    ) -> PackageManagerSelection:
        """Pick a manager from explicit flags, then from lock files, else npm.

        Only an explicit request marks the selection as ``should_run``.
        """
        wanted = set(requested)
        for manager in _FLAG_PRIORITY:
            if manager in wanted:
                return PackageManagerSelection(manager, True)

        root = Path(directory)
        for manager in NodePackageManager:
            if manager is NodePackageManager.NPM:
                continue
            for lock_file in manager.lock_files():
                if (root / lock_file).exists():
                    logger.debug("Found %s, using %s", lock_file, manager.value)
                    return PackageManagerSelection(manager, False)

        return PackageManagerSelection(NodePackageManager.NPM, False)

    def cleanup_lock_files(self, config: ProjectConfiguration) -> list[Path]:
        """Delete lock files that belong to other package managers."""
        if config.package_manager is None:
            return []

        keep = set(config.package_manager.lock_files())
        removed: list[Path] = []
        for lock_file in NodePackageManager.all_lock_files():
            if lock_file in keep:
                continue
            path = Path(config.directory) / lock_file
            if path.exists():
                path.unlink()
                removed.append(path)
        return removed
