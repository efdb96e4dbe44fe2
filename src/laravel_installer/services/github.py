"""Publishing a new project to GitHub through the ``gh`` CLI."""

from __future__ import annotations

import shlex

from laravel_installer.core.command import Command
from laravel_installer.core.config import ProjectConfiguration
from laravel_installer.core.runner import CommandResult, CommandRunner

__all__ = ["GitHubService"]


class GitHubService:
    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def is_authenticated(self) -> bool:
        return self.runner.run_checked([Command("gh", "auth", "status")]).ok

    def repository_name(self, config: ProjectConfiguration) -> str:
        if config.github_organization:
            return f"{config.github_organization}/{config.name}"
        return config.name

    def create_and_push(self, config: ProjectConfiguration) -> CommandResult | None:
        """Create the remote repository and push; ``None`` when ``gh`` is not authenticated."""
        if not self.is_authenticated():
            return None

        command = Command(
            "gh",
            "repo",
            "create",
            self.repository_name(config),
            "--source=.",
            "--push",
            shlex.split(config.github_flags),
        )
        return self.runner.run_checked(
            [command],
            cwd=config.directory,
            env={"GIT_TERMINAL_PROMPT": "0"},
        )
