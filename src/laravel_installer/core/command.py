"""Structured shell commands.

Commands are kept as argument vectors until the runner hands them to a shell.
``render()`` is the single escaping boundary: callers never quote arguments
themselves, so a path is escaped exactly once.
"""

from __future__ import annotations

import re
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Iterable, Sequence, Union

__all__ = ["Command", "ShellCommand", "AnyCommand", "compose", "program_name"]

_INTERPRETERS = {"php", "node", "python", "python3"}
_EXECUTABLE_SUFFIXES = (".exe", ".bat", ".cmd", ".phar")


def _basename(token: str) -> str:
    name = re.split(r"[\\/]", token)[-1].lower()
    for suffix in _EXECUTABLE_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def program_name(argv: Sequence[str]) -> str:
    """Return the tool an argument vector invokes.

    ``php ./vendor/bin/pest --init`` invokes ``pest``; ``php artisan migrate``
    invokes ``artisan``; ``/usr/bin/git init`` invokes ``git``.
    """
    if not argv:
        return ""
    head = _basename(argv[0])
    if head in _INTERPRETERS and len(argv) > 1 and not argv[1].startswith("-"):
        return _basename(argv[1])
    return head


@dataclass(frozen=True)
class Command:
    """A single program invocation held as an argument vector."""

    argv: tuple[str, ...]

    def __init__(self, *argv: str | Iterable[str]):
        flat: list[str] = []
        for part in argv:
            if isinstance(part, str):
                flat.append(part)
            else:
                flat.extend(part)
        object.__setattr__(self, "argv", tuple(flat))

    @property
    def program(self) -> str:
        return program_name(self.argv)

    def with_flags(self, *flags: str) -> "Command":
        return Command(self.argv + tuple(flags))

    def render(self, windows: bool = False) -> str:
        if windows:
            return subprocess.list2cmdline(list(self.argv))
        return shlex.join(self.argv)

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class ShellCommand:
    """A pre-built shell fragment, used only for shell builtins with no argv form."""

    text: str
    program: str = field(default="")

    def with_flags(self, *flags: str) -> "ShellCommand":
        return ShellCommand(" ".join((self.text, *flags)), self.program)

    def render(self, windows: bool = False) -> str:
        return self.text

    def __str__(self) -> str:
        return self.text


AnyCommand = Union[Command, ShellCommand]


def compose(commands: Sequence[AnyCommand], windows: bool = False) -> str:
    """Join rendered commands into one AND-chained shell line."""
    return " && ".join(command.render(windows) for command in commands)
