from __future__ import annotations

import io

import pytest
from rich.console import Console

from laravel_installer.core.constants import REQUIRED_PHP_EXTENSIONS
from tests.utils import RecordingRunner


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False, width=200)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture()
def php_modules_output() -> str:
    return "[PHP Modules]\n" + "\n".join(REQUIRED_PHP_EXTENSIONS) + "\npdo_sqlite\n\n[Zend Modules]\n"
