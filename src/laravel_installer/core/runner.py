"""Command execution engine.

Every mode composes its commands into one AND-chained shell line, so the
commands share a working directory and an environment snapshot, and a later
command never runs after an earlier one fails.

- ``run``: fail-fast. Output is captured; a nonzero exit raises ``ExecutionError``.
- ``run_checked``: same composition, returns a ``CommandResult`` and leaves the
  pass/fail decision to the caller (``result.raise_for_status()``).
- ``run_streamed``: echoes output line by line as it arrives, under a
  pseudo-terminal when the host has one, and never raises on exit status.

There is no timeout unless one is passed to ``CommandRunner``.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
import subprocess
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

from rich.console import Console

from laravel_installer.cli.helpers import warn as print_warning

from .command import AnyCommand, compose
from .constants import FLAG_SKIP_PROGRAMS, NO_ANSI_FLAG, OUTPUT_INDENT, QUIET_FLAG
from .errors import ExecutionError, ExecutionTimeout, UnsupportedOperation

try:
    import pty
except ImportError:  # Windows
    pty = None  # type: ignore[assignment]

__all__ = ["CommandResult", "CommandRunner", "add_output_flags"]

logger = logging.getLogger(__name__)

Sink = Callable[[str], None]


@dataclass
class CommandResult:
    """Outcome of one composed shell invocation."""

    command_line: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def error(self) -> ExecutionError | None:
        if self.ok:
            return None
        return ExecutionError(self.command_line, self.stderr, self.returncode)

    def raise_for_status(self) -> "CommandResult":
        error = self.error
        if error is not None:
            raise error
        return self


def add_output_flags(
    commands: Sequence[AnyCommand],
    *,
    decorated: bool,
    quiet: bool,
) -> list[AnyCommand]:
    """Append ``--no-ansi``/``--quiet`` to every command not on the skip list."""
    flags: list[str] = []
    if not decorated:
        flags.append(NO_ANSI_FLAG)
    if quiet:
        flags.append(QUIET_FLAG)
    if not flags:
        return list(commands)
    return [
        command if command.program in FLAG_SKIP_PROGRAMS else command.with_flags(*flags)
        for command in commands
    ]


class _Expired(Exception):
    pass


class CommandRunner:
    """Runs ordered groups of shell commands."""

    def __init__(
        self,
        console: Console | None = None,
        *,
        timeout: float | None = None,
        tty: bool | None = None,
        windows: bool | None = None,
    ):
        self.console = console or Console()
        self.timeout = timeout
        self.tty = tty
        self.windows = os.name == "nt" if windows is None else windows

    def compose(self, commands: Sequence[AnyCommand]) -> str:
        return compose(commands, windows=self.windows)

    @staticmethod
    def _environment(env: Mapping[str, str] | None) -> dict[str, str] | None:
        if not env:
            return None
        merged = os.environ.copy()
        merged.update(env)
        return merged

    def _execute(
        self,
        commands: Sequence[AnyCommand],
        cwd: str | os.PathLike[str] | None,
        env: Mapping[str, str] | None,
    ) -> CommandResult:
        command_line = self.compose(commands)
        if not command_line:
            return CommandResult(command_line="", returncode=0)

        logger.debug("Running: %s (cwd=%s)", command_line, cwd or os.getcwd())
        try:
            completed = subprocess.run(
                command_line,
                shell=True,
                cwd=None if cwd is None else str(cwd),
                env=self._environment(env),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ExecutionTimeout(command_line, self.timeout or 0) from exc

        if completed.returncode != 0:
            logger.debug("Exit %s: %s", completed.returncode, completed.stderr.strip())
        return CommandResult(
            command_line=command_line,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def run(
        self,
        commands: Sequence[AnyCommand],
        cwd: str | os.PathLike[str] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Run commands and raise ``ExecutionError`` if any of them fails."""
        return self._execute(commands, cwd, env).raise_for_status()

    def run_checked(
        self,
        commands: Sequence[AnyCommand],
        cwd: str | os.PathLike[str] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Run commands and return the result; the caller decides on failure."""
        return self._execute(commands, cwd, env)

    # -- streamed mode -----------------------------------------------------

    def tty_supported(self) -> bool:
        if self.tty is not None:
            return self.tty and not self.windows
        return not self.windows and pty is not None and self.console.is_terminal

    def _open_pty(self) -> tuple[int, int]:
        if pty is None:
            raise UnsupportedOperation("TTY mode is not supported on this platform.")
        try:
            return pty.openpty()
        except OSError as exc:
            raise UnsupportedOperation(f"TTY mode requires /dev/tty to be read/writable: {exc}") from exc

    def warn(self, message: str) -> None:
        logger.warning(message)
        print_warning(message, self.console)

    def _default_sink(self, line: str) -> None:
        self.console.out(line, end="", highlight=False)

    def run_streamed(
        self,
        commands: Sequence[AnyCommand],
        cwd: str | os.PathLike[str] | None = None,
        env: Mapping[str, str] | None = None,
        *,
        decorated: bool | None = None,
        quiet: bool = False,
        sink: Optional[Sink] = None,
    ) -> CommandResult:
        """Run commands while echoing their output; never raises on exit status."""
        if decorated is None:
            decorated = self.console.is_terminal and not self.console.no_color
        commands = add_output_flags(commands, decorated=decorated, quiet=quiet)
        command_line = self.compose(commands)
        if not command_line:
            return CommandResult(command_line="", returncode=0)

        write = sink or self._default_sink

        def emit(line: str) -> None:
            write(OUTPUT_INDENT + line)


        master_fd: int | None = None
        slave_fd: int | None = None
        if self.tty_supported():
            try:
                master_fd, slave_fd = self._open_pty()
            except UnsupportedOperation as exc:
                self.warn(str(exc))

        logger.debug("Streaming: %s (cwd=%s, tty=%s)", command_line, cwd or os.getcwd(), master_fd is not None)
        popen_kwargs = dict(
            shell=True,
            cwd=None if cwd is None else str(cwd),
            env=self._environment(env),
        )
        if master_fd is not None:
            try:
                proc = subprocess.Popen(  # noqa: S602
                    command_line,
                    stdout=slave_fd,
                    stderr=slave_fd,
                    close_fds=True,
                    **popen_kwargs,
                )
            except OSError:
                os.close(master_fd)
                raise
            finally:
                os.close(slave_fd)
            read_fd = master_fd
        else:
            proc = subprocess.Popen(  # noqa: S602
                command_line,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                **popen_kwargs,
            )
            assert proc.stdout is not None
            read_fd = proc.stdout.fileno()

        deadline = time.monotonic() + self.timeout if self.timeout else None
        try:
            output = self._pump(read_fd, emit, deadline)
            returncode = proc.wait(timeout=self._remaining(deadline))
        except (_Expired, subprocess.TimeoutExpired) as exc:
            proc.kill()
            proc.wait()
            raise ExecutionTimeout(command_line, self.timeout or 0) from exc
        finally:
            if master_fd is not None:
                os.close(master_fd)
            elif proc.stdout is not None:
                proc.stdout.close()

        return CommandResult(command_line=command_line, returncode=returncode, stdout=output)

    @staticmethod
    def _remaining(deadline: float | None) -> float | None:
        if deadline is None:
            return None
        return max(deadline - time.monotonic(), 0.0)

    def _pump(self, fd: int, emit: Sink, deadline: float | None) -> str:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        captured: list[str] = []
        pending = ""
        while True:
            if deadline is not None and not self.windows:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise _Expired()
                ready, _, _ = select.select([fd], [], [], min(remaining, 0.2))
                if not ready:
                    continue
            try:
                data = os.read(fd, 4096)
            except OSError:
                # The pty master reports EIO once the child side is closed.
                data = b""
            if not data:
                break
            text = decoder.decode(data)
            captured.append(text)
            pending += text
            while "\n" in pending:
                line, pending = pending.split("\n", 1)
                emit(line + "\n")

        tail = decoder.decode(b"", final=True)
        captured.append(tail)
        pending += tail
        if pending:
            emit(pending)
        return "".join(captured)
