"""Services that act on a project once it exists on disk."""

from .database import DatabaseConfigurator
from .git import GitService
from .github import GitHubService
from .package_manager import PackageManagerDetector
from .pest import PestInstaller
from .version_check import FileCacheStore, MemoryCacheStore, VersionChecker

__all__ = [
    "DatabaseConfigurator",
    "FileCacheStore",
    "GitHubService",
    "GitService",
    "MemoryCacheStore",
    "PackageManagerDetector",
    "PestInstaller",
    "VersionChecker",
]
