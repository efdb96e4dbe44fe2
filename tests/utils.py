"""Shared test doubles."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from laravel_installer.core.command import AnyCommand, compose
from laravel_installer.core.runner import CommandResult


@dataclass
class RecordedCall:
    mode: str
    commands: list[AnyCommand]
    cwd: object = None
    env: Optional[dict[str, str]] = None
    quiet: bool = False

    @property
    def lines(self) -> list[str]:
        return [command.render() for command in self.commands]


Responder = Callable[[RecordedCall], tuple[int, str, str]]


@dataclass
class RecordingRunner:
    """Stands in for ``CommandRunner``: records every command group, runs nothing."""

    responder: Optional[Responder] = None
    windows: bool = False
    calls: list[RecordedCall] = field(default_factory=list)

    def _record(self, mode, commands, cwd, env, quiet=False) -> CommandResult:
        call = RecordedCall(mode, list(commands), cwd, dict(env) if env else None, quiet)
        self.calls.append(call)
        returncode, stdout, stderr = self.responder(call) if self.responder else (0, "", "")
        return CommandResult(compose(call.commands, self.windows), returncode, stdout, stderr)

    def run(self, commands, cwd=None, env=None) -> CommandResult:
        return self._record("run", commands, cwd, env).raise_for_status()

    def run_checked(self, commands, cwd=None, env=None) -> CommandResult:
        return self._record("checked", commands, cwd, env)

    def run_streamed(self, commands, cwd=None, env=None, *, decorated=None, quiet=False, sink=None) -> CommandResult:
        return self._record("streamed", commands, cwd, env, quiet)

    def lines(self, mode: str | None = None) -> list[str]:
        return [line for call in self.calls if mode in (None, call.mode) for line in call.lines]
