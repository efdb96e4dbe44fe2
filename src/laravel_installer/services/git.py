"""Git repository setup for a freshly created project."""

from __future__ import annotations

import logging

from laravel_installer.core.command import Command
from laravel_installer.core.config import ProjectConfiguration
from laravel_installer.core.runner import CommandResult, CommandRunner

__all__ = ["GitService"]

logger = logging.getLogger(__name__)

FALLBACK_BRANCH = "main"


class GitService:
    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def default_branch(self) -> str:
        """Return the user's ``init.defaultBranch``, or ``main``."""
        result = self.runner.run_checked([Command("git", "config", "--global", "init.defaultBranch")])
        branch = result.stdout.strip()
        return branch if result.ok and branch else FALLBACK_BRANCH

    def initialize(self, config: ProjectConfiguration) -> CommandResult:
        """Create the repository with an initial commit on ``config.git_branch``."""
        commands = [
            Command("git", "init", "-q"),
            Command("git", "add", "."),
            Command("git", "commit", "-q", "-m", "Set up a fresh Laravel app"),
            Command("git", "branch", "-M", config.git_branch),
        ]
        result = self.runner.run_checked(commands, cwd=config.directory)
        if not result.ok:
            logger.warning("git initialization failed: %s", result.stderr.strip())
        return result

    def commit_changes(self, message: str, directory: str) -> CommandResult:
        commands = [
            Command("git", "add", "."),
            Command("git", "commit", "-q", "-m", message),
        ]
        return self.runner.run_checked(commands, cwd=directory)
