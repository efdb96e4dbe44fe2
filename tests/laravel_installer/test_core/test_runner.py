from __future__ import annotations

import os
import sys

import pytest

from laravel_installer.core.command import Command, ShellCommand
from laravel_installer.core.errors import ExecutionError, ExecutionTimeout, UnsupportedOperation
from laravel_installer.core.runner import CommandRunner, add_output_flags

pytestmark = pytest.mark.skipif(os.name == "nt", reason="uses POSIX shell commands")


def _sh(script: str) -> Command:
    return Command("sh", "-c", script)


@pytest.fixture()
def runner(console) -> CommandRunner:
    return CommandRunner(console, tty=False)


# ============================================================================
# Output flag injection
# ============================================================================


def test_output_flags_skip_listed_programs():
    commands = [
        Command("composer", "install"),
        Command("git", "init", "-q"),
        Command("rm", "-rf", "app"),
        Command("chmod", "755", "app/artisan"),
        Command("php", "./vendor/bin/pest", "--init"),
        ShellCommand("(if exist app rd /s /q app)", program="rd"),
        Command("npm", "install"),
    ]

    flagged = [c.render() for c in add_output_flags(commands, decorated=False, quiet=True)]

    assert flagged == [
        "composer install --no-ansi --quiet",
        "git init -q",
        "rm -rf app",
        "chmod 755 app/artisan",
        "php ./vendor/bin/pest --init",
        "(if exist app rd /s /q app)",
        "npm install --no-ansi --quiet",
    ]


def test_output_flags_only_add_what_is_needed():
    commands = [Command("composer", "install")]

    assert add_output_flags(commands, decorated=True, quiet=False) == commands
    assert add_output_flags(commands, decorated=True, quiet=True)[0].render() == "composer install --quiet"
    assert add_output_flags(commands, decorated=False, quiet=False)[0].render() == "composer install --no-ansi"


# ============================================================================
# Fail-fast and checked modes
# ============================================================================


def test_run_captures_output(runner):
    result = runner.run([Command("echo", "hello")])

    assert result.ok
    assert result.stdout == "hello\n"


def test_run_raises_and_stops_at_first_failure(runner, tmp_path):
    marker = tmp_path / "marker"

    with pytest.raises(ExecutionError) as excinfo:
        runner.run([_sh("echo broken >&2; exit 3"), Command("touch", str(marker))])

    assert excinfo.value.returncode == 3
    assert "broken" in str(excinfo.value)
    assert not marker.exists()


def test_run_checked_returns_failure_to_caller(runner):
    result = runner.run_checked([_sh("exit 4")])

    assert result.returncode == 4
    assert not result.ok
    assert isinstance(result.error, ExecutionError)
    with pytest.raises(ExecutionError):
        result.raise_for_status()


def test_commands_share_working_directory_and_environment(runner, tmp_path):
    (tmp_path / "sub").mkdir()

    result = runner.run(
        [Command("cd", "sub"), _sh('printf "%s:%s" "$(basename "$PWD")" "$INSTALLER_TEST"')],
        cwd=tmp_path,
        env={"INSTALLER_TEST": "yes"},
    )

    assert result.stdout == "sub:yes"


def test_environment_overrides_extend_inherited_environment(runner, monkeypatch):
    monkeypatch.setenv("INHERITED_VALUE", "kept")

    result = runner.run([_sh('printf "%s-%s" "$INHERITED_VALUE" "$EXTRA"')], env={"EXTRA": "added"})

    assert result.stdout == "kept-added"


def test_arguments_with_spaces_survive_the_shell(runner, tmp_path):
    target = tmp_path / "my app"

    runner.run([Command("mkdir", str(target))])

    assert target.is_dir()


def test_empty_plan_succeeds(runner):
    assert runner.run([]).returncode == 0
    assert runner.run_streamed([]).returncode == 0


def test_timeout_raises(console):
    runner = CommandRunner(console, timeout=0.5, tty=False)

    with pytest.raises(ExecutionTimeout):
        runner.run([Command("sleep", "5")])


# ============================================================================
# Streamed mode
# ============================================================================


def test_streamed_delivers_lines_in_order(runner):
    lines: list[str] = []

    result = runner.run_streamed([_sh("echo one; echo two >&2; printf three")], sink=lines.append, decorated=True)

    assert lines == ["    one\n", "    two\n", "    three"]
    assert result.stdout == "one\ntwo\nthree"


def test_streamed_does_not_raise_on_failure(runner):
    result = runner.run_streamed([_sh("exit 5")], sink=lambda line: None, decorated=True)

    assert result.returncode == 5


def test_streamed_injects_flags(runner):
    lines: list[str] = []

    runner.run_streamed([Command("echo", "hi")], sink=lines.append, decorated=False, quiet=True)

    assert lines == ["    hi --no-ansi --quiet\n"]


def test_streamed_echoes_to_console_with_indent(console):
    runner = CommandRunner(console, tty=False)

    runner.run_streamed([Command("echo", "installing")], decorated=True)

    assert "    installing\n" in console.file.getvalue()


def test_streamed_indents_lines_for_custom_sink(runner):
    lines: list[str] = []

    result = runner.run_streamed([_sh("printf 'a\\nb'")], sink=lines.append, decorated=True)

    assert lines == ["    a\n", "    b"]
    assert result.stdout == "a\nb"


@pytest.mark.skipif(sys.platform == "win32", reason="no pty")
def test_streamed_under_pty(console):
    pytest.importorskip("pty")
    runner = CommandRunner(console, tty=True)
    lines: list[str] = []

    result = runner.run_streamed([_sh("test -t 1 && echo terminal")], sink=lines.append, decorated=True)

    assert result.ok
    assert "terminal" in result.stdout


def test_pty_failure_falls_back_with_warning(console, monkeypatch):
    runner = CommandRunner(console, tty=True)

    def broken_pty():
        raise UnsupportedOperation("TTY mode requires /dev/tty to be read/writable: nope")

    monkeypatch.setattr(runner, "_open_pty", broken_pty)
    lines: list[str] = []

    result = runner.run_streamed([Command("echo", "still works")], sink=lines.append, decorated=True)

    assert result.ok
    assert lines == ["    still works\n"]
    output = console.file.getvalue()
    assert "WARN" in output
    assert "TTY mode requires /dev/tty" in output


def test_streamed_timeout_kills_child(console):
    runner = CommandRunner(console, timeout=0.5, tty=False)

    with pytest.raises(ExecutionTimeout):
        runner.run_streamed([Command("sleep", "5")], sink=lambda line: None, decorated=True)
