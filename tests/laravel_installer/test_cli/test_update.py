from __future__ import annotations

import os

import pytest
import typer

from laravel_installer.cli.update import (
    check_and_prompt_for_update,
    herd_lite_update_command,
    installer_location,
)
from tests.utils import RecordingRunner


class StubChecker:
    def __init__(self, newer: str | None):
        self.newer = newer
        self.asked: list[str] = []

    def newer_version(self, current: str) -> str | None:
        self.asked.append(current)
        return self.newer


def _path(*parts: str) -> str:
    return os.sep + os.sep.join(parts)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        (_path("Users", "me", "Library", "Application Support", "Herd", "bin", "laravel"), "herd"),
        (_path("Users", "me", ".config", "herd-lite", "bin", "laravel"), "herd-lite"),
        (_path("home", "me", ".composer", "vendor", "bin", "laravel"), "composer"),
        ("", "composer"),
    ],
)
def test_installer_location(path, expected):
    assert installer_location(path) == expected


def test_herd_lite_update_command_per_platform():
    assert "php.new/install/mac" in herd_lite_update_command("Darwin")
    assert "php.new/install/windows" in herd_lite_update_command("Windows")
    assert "php.new/install/linux" in herd_lite_update_command("Linux")
    assert herd_lite_update_command("FreeBSD") == herd_lite_update_command("Linux")


def _check(checker, runner, console, *, confirm=lambda label: False, location="composer", argv=("new", "blog")):
    return check_and_prompt_for_update(
        "5.0.0",
        list(argv),
        checker=checker,
        runner=runner,
        console=console,
        confirm=confirm,
        location=location,
    )


def test_up_to_date_is_silent(console):
    runner = RecordingRunner()
    checker = StubChecker(None)

    assert _check(checker, runner, console) is None
    assert checker.asked == ["5.0.0"]
    assert console.file.getvalue() == ""
    assert runner.calls == []


def test_newer_version_warns_and_continues_when_declined(console):
    runner = RecordingRunner()

    assert _check(StubChecker("6.0.0"), runner, console) == "6.0.0"

    output = console.file.getvalue()
    assert "WARN" in output
    assert "You have version 5.0.0 installed, the latest version is 6.0.0." in output
    assert runner.calls == []


def test_composer_update_then_rerun(console):
    runner = RecordingRunner()

    with pytest.raises(typer.Exit) as excinfo:
        _check(StubChecker("6.0.0"), runner, console, confirm=lambda label: True, argv=("new", "blog", "--pest"))

    assert excinfo.value.exit_code == 0
    assert [call.lines for call in runner.calls] == [
        ["composer global update laravel/installer"],
        ["laravel new blog --pest"],
    ]
    assert all(call.mode == "streamed" for call in runner.calls)


def test_rerun_exit_status_is_propagated(console):
    runner = RecordingRunner(responder=lambda call: (2, "", ""))

    with pytest.raises(typer.Exit) as excinfo:
        _check(StubChecker("6.0.0"), runner, console, confirm=lambda label: True)

    assert excinfo.value.exit_code == 2


def test_herd_points_to_settings(console):
    runner = RecordingRunner()

    _check(StubChecker("6.0.0"), runner, console, location="herd")

    assert "Laravel Installer" in console.file.getvalue()
    assert "Settings" in console.file.getvalue()
    assert runner.calls == []


def test_herd_lite_rerun_skips_composer(console):
    runner = RecordingRunner()

    with pytest.raises(typer.Exit):
        _check(StubChecker("6.0.0"), runner, console, confirm=lambda label: True, location="herd-lite")

    assert "php.new" in console.file.getvalue()
    assert runner.lines() == ["laravel new blog"]
