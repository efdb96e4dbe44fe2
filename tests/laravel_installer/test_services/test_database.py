from __future__ import annotations

from pathlib import Path

import pytest

from laravel_installer.core.config import ProjectConfiguration
from laravel_installer.services.database import DatabaseConfigurator
from tests.utils import RecordingRunner

FRESH_ENV = """APP_NAME=Laravel
APP_URL=http://localhost

DB_CONNECTION=sqlite
# DB_HOST=127.0.0.1
# DB_PORT=3306
# DB_DATABASE=laravel
# DB_USERNAME=root
# DB_PASSWORD=
"""

MYSQL_ENV = """APP_URL=http://localhost
DB_CONNECTION=mysql
DB_HOST=127.0.0.1
DB_PORT=3306
DB_DATABASE=laravel
DB_USERNAME=root
DB_PASSWORD=
"""


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    directory = tmp_path / "My-App"
    directory.mkdir()
    (directory / ".env").write_text(FRESH_ENV, encoding="utf-8")
    (directory / ".env.example").write_text(FRESH_ENV, encoding="utf-8")
    return directory


def _config(project: Path, **values) -> ProjectConfiguration:
    values.setdefault("is_interactive", False)
    return ProjectConfiguration(project.name, str(project), **values)


def test_non_sqlite_uncomments_and_renames_database(project):
    runner = RecordingRunner()

    config = DatabaseConfigurator(runner, php="php").configure(_config(project, database="pgsql"), explicit=True)

    env = (project / ".env").read_text(encoding="utf-8")
    assert "APP_URL=http://localhost:8000" in env
    assert "DB_CONNECTION=pgsql" in env
    assert "\nDB_HOST=127.0.0.1" in env
    assert "DB_PORT=5432" in env
    assert "DB_DATABASE=my_app" in env
    assert "# DB_" not in env
    example = (project / ".env.example").read_text(encoding="utf-8")
    assert "DB_CONNECTION=pgsql" in example and "DB_PORT=5432" in example
    assert "APP_URL=http://localhost\n" in example
    assert config.database == "pgsql"
    assert config.should_migrate is True


def test_mysql_keeps_default_port(project):
    DatabaseConfigurator(RecordingRunner(), php="php").configure(_config(project, database="mysql"), explicit=True)

    env = (project / ".env").read_text(encoding="utf-8")
    assert "DB_PORT=3306" in env
    assert "DB_CONNECTION=mysql" in env


def test_sqlite_comments_out_server_settings(project):
    (project / ".env").write_text(MYSQL_ENV, encoding="utf-8")
    (project / ".env.example").write_text(MYSQL_ENV, encoding="utf-8")

    DatabaseConfigurator(RecordingRunner(), php="php").configure(_config(project), explicit=True)

    env = (project / ".env").read_text(encoding="utf-8")
    assert "DB_CONNECTION=sqlite" in env
    assert "# DB_HOST=127.0.0.1" in env
    assert "# DB_PASSWORD=" in env
    assert "# # DB_HOST" not in env


def test_sqlite_does_not_comment_twice(project):
    DatabaseConfigurator(RecordingRunner(), php="php").configure(_config(project), explicit=True)

    assert (project / ".env").read_text(encoding="utf-8").count("# DB_HOST=127.0.0.1") == 1


def test_sqlite_migration_creates_database_file(project):
    runner = RecordingRunner()

    DatabaseConfigurator(runner, php="php").configure(_config(project), explicit=True)

    assert (project / "database" / "database.sqlite").is_file()
    call = runner.calls[-1]
    assert call.mode == "streamed"
    assert call.lines == ["php artisan migrate --no-interaction"]
    assert call.cwd == str(project)


def test_interactive_migration_omits_no_interaction(project):
    runner = RecordingRunner()

    DatabaseConfigurator(runner, php="php").configure(_config(project, is_interactive=True), explicit=True)

    assert runner.calls[-1].lines == ["php artisan migrate"]


def test_starter_kits_skip_migrations(project):
    runner = RecordingRunner()
    config = _config(project, starter_kit="laravel/react-starter-kit", database="mysql")

    updated = DatabaseConfigurator(runner, php="php").configure(config)

    assert runner.calls == []
    assert updated.should_migrate is False
    assert "DB_CONNECTION=mysql" in (project / ".env").read_text(encoding="utf-8")


def test_interactive_choice_prompts_for_driver_and_migrations(project):
    prompts: list[tuple[dict, str, str]] = []

    def select(options, label, default):
        prompts.append((options, label, default))
        return "mariadb"

    runner = RecordingRunner(responder=lambda call: (0, "pdo_mysql\npdo_sqlite\n", ""))
    configurator = DatabaseConfigurator(runner, php="php", select=select, confirm=lambda label: False)

    config = configurator.configure(_config(project, is_interactive=True))

    options, label, default = prompts[0]
    assert list(options) == ["sqlite", "mysql", "mariadb", "pgsql", "sqlsrv"]
    assert options["pgsql"] == "PostgreSQL (Missing PDO extension)"
    assert options["mysql"] == "MySQL"
    assert default == "sqlite"
    assert (config.database, config.should_migrate) == ("mariadb", False)
    assert [call.mode for call in runner.calls] == ["checked"]


def test_available_databases_orders_loaded_drivers_first():
    runner = RecordingRunner(responder=lambda call: (0, "pdo_pgsql\n", ""))

    options = DatabaseConfigurator(runner, php="php").available_databases()

    assert list(options)[0] == "pgsql"
    assert options["sqlite"] == "SQLite (Missing PDO extension)"


def test_available_databases_when_php_is_unavailable():
    runner = RecordingRunner(responder=lambda call: (1, "", "php: not found"))

    options = DatabaseConfigurator(runner, php="php").available_databases()

    assert all(label.endswith("(Missing PDO extension)") for label in options.values())
