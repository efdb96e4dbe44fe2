from __future__ import annotations

import pytest

from laravel_installer.core.errors import InstallerError
from laravel_installer.services import php as php_module
from laravel_installer.services.php import (
    ensure_extensions_available,
    find_composer,
    find_php_binary,
    loaded_extensions,
)
from tests.utils import RecordingRunner


def test_find_php_binary_prefers_path(monkeypatch):
    monkeypatch.setattr(php_module.shutil, "which", lambda name: "/opt/php/bin/php")

    assert find_php_binary() == "/opt/php/bin/php"


def test_find_php_binary_falls_back_to_bare_name(monkeypatch):
    monkeypatch.setattr(php_module.shutil, "which", lambda name: None)

    assert find_php_binary() == "php"


def test_find_composer_prefers_local_phar(tmp_path, monkeypatch):
    monkeypatch.setattr(php_module.shutil, "which", lambda name: "/usr/bin/php")
    (tmp_path / "composer.phar").write_text("", encoding="utf-8")

    assert find_composer(tmp_path) == ("/usr/bin/php", "composer.phar")


def test_find_composer_uses_global_install(tmp_path):
    assert find_composer(tmp_path) == ("composer",)


def test_loaded_extensions_parses_module_listing(php_modules_output):
    runner = RecordingRunner(responder=lambda call: (0, php_modules_output, ""))

    extensions = loaded_extensions(runner, "php")

    assert "mbstring" in extensions
    assert "pdo_sqlite" in extensions
    assert "[php modules]" not in extensions
    assert runner.lines() == ["php -m"]


def test_ensure_extensions_available_lists_missing():
    runner = RecordingRunner(responder=lambda call: (0, "ctype\nfilter\nhash\n", ""))

    with pytest.raises(InstallerError, match="mbstring, openssl, session, tokenizer"):
        ensure_extensions_available(runner, "php")


def test_ensure_extensions_available_passes(php_modules_output):
    runner = RecordingRunner(responder=lambda call: (0, php_modules_output, ""))

    ensure_extensions_available(runner, "php")


def test_missing_php_is_reported():
    runner = RecordingRunner(responder=lambda call: (127, "", "php: not found"))

    with pytest.raises(InstallerError, match="php: not found"):
        loaded_extensions(runner, "php")
