"""The ``new`` command: scaffold a Laravel application."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.markup import escape

from laravel_installer.cli.helpers import console as default_console
from laravel_installer.cli.helpers import error, info, show_banner as default_show_banner, warn
from laravel_installer.cli.ui import select_with_arrows
from laravel_installer.cli.update import check_and_prompt_for_update
from laravel_installer.core.builder import ProjectBuilder
from laravel_installer.core.config import (
    CURRENT_DIRECTORY,
    ConfigurationBuilder,
    NodePackageManager,
    ProjectConfiguration,
    validate_project_name,
)
from laravel_installer.core.constants import (
    BLANK_STARTER_KITS,
    DATABASE_DRIVERS,
    DEFAULT_DATABASE,
    DEV_VERSION,
    STARTER_KITS,
)
from laravel_installer.core.errors import ConfigurationViolation, InstallerError
from laravel_installer.core.runner import CommandRunner
from laravel_installer.logging_utils import configure_logging
from laravel_installer.services.database import DatabaseConfigurator
from laravel_installer.services.git import GitService
from laravel_installer.services.github import GitHubService
from laravel_installer.services.package_manager import PackageManagerDetector
from laravel_installer.services.pest import PestInstaller
from laravel_installer.services.php import ensure_extensions_available, find_composer, find_php_binary
from laravel_installer.services.version_check import VersionChecker

logger = logging.getLogger(__name__)


@dataclass
class InstallerServices:
    """Collaborators used by one ``new`` run."""

    runner: CommandRunner
    php: str
    builder: ProjectBuilder
    database: DatabaseConfigurator
    git: GitService
    github: GitHubService
    pest: PestInstaller
    package_managers: PackageManagerDetector
    version_checker: VersionChecker

    @classmethod
    def create(cls, console: Console) -> "InstallerServices":
        runner = CommandRunner(console)
        php = find_php_binary()
        composer = find_composer()
        git = GitService(runner)
        return cls(
            runner=runner,
            php=php,
            builder=ProjectBuilder(runner, composer=composer, php=php),
            database=DatabaseConfigurator(
                runner,
                php=php,
                select=lambda options, label, default: select_with_arrows(options, label, default, console),
                confirm=lambda label: typer.confirm(label, default=True),
            ),
            git=git,
            github=GitHubService(runner),
            pest=PestInstaller(runner, git, composer=composer, php=php),
            package_managers=PackageManagerDetector(),
            version_checker=VersionChecker(),
        )


def _stdin_is_interactive() -> bool:
    return sys.stdin.isatty()


def installation_directory(name: str) -> str:
    if name == CURRENT_DIRECTORY:
        return CURRENT_DIRECTORY
    return os.path.join(os.getcwd(), name)


def project_exists(directory: str) -> bool:
    if directory == CURRENT_DIRECTORY:
        return False
    path = Path(directory)
    return (path.is_dir() or path.is_file()) and path.resolve() != Path.cwd().resolve()


def resolve_starter_kit(
    *,
    react: bool = False,
    vue: bool = False,
    livewire: bool = False,
    using: Optional[str] = None,
    no_authentication: bool = False,
) -> Optional[str]:
    kits = BLANK_STARTER_KITS if no_authentication else STARTER_KITS
    if react:
        return kits["react"]
    if vue:
        return kits["vue"]
    if livewire:
        return kits["livewire"]
    return using or None


def _prompt_project_name(force: bool, console: Console) -> str:
    while True:
        name = typer.prompt("What is the name of your project? (e.g. example-app)").strip().rstrip("/\\")
        problem = validate_project_name(name)
        if problem is None and not force and project_exists(installation_directory(name)):
            problem = "Application already exists."
        if problem is None:
            return name
        error(problem, console)


def _verify_project_directory(directory: str, force: bool) -> None:
    if force:
        if directory == CURRENT_DIRECTORY:
            raise ConfigurationViolation("Cannot use --force option when using current directory for installation!")
        return
    if project_exists(directory):
        raise InstallerError("Application already exists!")


def _requested_package_managers(*, npm: bool, pnpm: bool, bun: bool, yarn: bool) -> list[NodePackageManager]:
    requested = []
    for enabled, manager in (
        (npm, NodePackageManager.NPM),
        (pnpm, NodePackageManager.PNPM),
        (bun, NodePackageManager.BUN),
        (yarn, NodePackageManager.YARN),
    ):
        if enabled:
            requested.append(manager)
    return requested


def _display_success(config: ProjectConfiguration, console: Console) -> None:
    info(
        f"Application ready in [bold]\\[{escape(config.name)}][/bold]. "
        "You can start your local development using:",
        console,
    )
    console.print()
    if not config.is_current_directory:
        console.print(f"[grey50]➜[/] [bold]cd {escape(config.name)}[/bold]")
    if config.package_manager is not None and not config.should_run_package_manager:
        manager = config.package_manager
        console.print(f"[grey50]➜[/] [bold]{manager.install_command()} && {manager.build_command()}[/bold]")
    console.print("[grey50]➜[/] [bold]composer run dev[/bold]")
    console.print()
    console.print(
        "  New to Laravel? Check out our "
        "[link=https://laravel.com/docs/installation#next-steps]documentation[/link]. "
        "[bold]Build something amazing![/bold]"
    )
    console.print()


def register_new_command(
    app: typer.Typer,
    *,
    console: Console | None = None,
    show_banner: Callable[[], None] | None = None,
    services_factory: Callable[[Console], InstallerServices] | None = None,
    current_version: str = "0.0.0",
) -> None:
    """Attach the ``new`` command to ``app``."""

    console = console or default_console
    show_banner = show_banner or (lambda: default_show_banner(console))
    services_factory = services_factory or InstallerServices.create

    @app.command("new")
    def new(
        name: Optional[str] = typer.Argument(None, help="The name of the application, or . for the current directory"),
        dev: bool = typer.Option(False, "--dev", help='Install the latest "development" release'),
        git: bool = typer.Option(False, "--git", help="Initialize a Git repository"),
        branch: Optional[str] = typer.Option(None, "--branch", help="The branch that should be created for a new repository"),
        github: bool = typer.Option(False, "--github", help="Create a new repository on GitHub"),
        github_flags: str = typer.Option("--private", "--github-flags", help="Flags passed to 'gh repo create'"),
        organization: Optional[str] = typer.Option(None, "--organization", help="The GitHub organization to create the new repository for"),
        database: Optional[str] = typer.Option(
            None,
            "--database",
            help=f"The database driver your application will use. Possible values are: {', '.join(DATABASE_DRIVERS)}",
        ),
        react: bool = typer.Option(False, "--react", help="Install the React Starter Kit"),
        vue: bool = typer.Option(False, "--vue", help="Install the Vue Starter Kit"),
        livewire: bool = typer.Option(False, "--livewire", help="Install the Livewire Starter Kit"),
        livewire_class_components: bool = typer.Option(
            False, "--livewire-class-components", help="Generate stand-alone Livewire class components"
        ),
        workos: bool = typer.Option(False, "--workos", help="Use WorkOS for authentication"),
        no_authentication: bool = typer.Option(False, "--no-authentication", help="Do not generate authentication scaffolding"),
        pest: bool = typer.Option(False, "--pest", help="Install the Pest testing framework"),
        phpunit: bool = typer.Option(False, "--phpunit", help="Install the PHPUnit testing framework"),
        npm: bool = typer.Option(False, "--npm", help="Install and build NPM dependencies"),
        pnpm: bool = typer.Option(False, "--pnpm", help="Install and build NPM dependencies via PNPM"),
        bun: bool = typer.Option(False, "--bun", help="Install and build NPM dependencies via Bun"),
        yarn: bool = typer.Option(False, "--yarn", help="Install and build NPM dependencies via Yarn"),
        using: Optional[str] = typer.Option(None, "--using", help="Install a custom starter kit from a community maintained package"),
        force: bool = typer.Option(False, "--force", "-f", help="Forces install even if the directory already exists"),
        quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output from Composer and package managers"),
        no_interaction: bool = typer.Option(False, "--no-interaction", "-n", help="Do not ask any interactive question"),
        debug: bool = typer.Option(False, "--debug", help="Show debug logging"),
    ):
        """Create a new Laravel application."""
        configure_logging(debug)
        interactive = not no_interaction and _stdin_is_interactive()

        show_banner()
        services = services_factory(console)

        try:
            ensure_extensions_available(services.runner, services.php)
        except InstallerError as exc:
            error(str(exc), console)
            raise typer.Exit(1)

        try:
            check_and_prompt_for_update(
                current_version,
                sys.argv[1:],
                checker=services.version_checker,
                runner=services.runner,
                console=console,
                confirm=lambda label: typer.confirm(label, default=False) if interactive else False,
            )
        except (InstallerError, OSError) as exc:
            logger.warning("Version check failed: %s", exc)

        if name:
            name = name.rstrip("/\\") or name
        elif interactive:
            name = _prompt_project_name(force, console)
        else:
            error("The project name is required.", console)
            raise typer.Exit(1)

        problem = validate_project_name(name)
        if problem:
            error(problem, console)
            raise typer.Exit(1)

        directory = installation_directory(name)

        try:
            _verify_project_directory(directory, force)
        except InstallerError as exc:
            error(str(exc), console)
            raise typer.Exit(1)

        if interactive and not (react or vue or livewire or using):
            kit_choice = select_with_arrows(
                {"none": "None", "react": "React", "vue": "Vue", "livewire": "Livewire"},
                "Which starter kit would you like to install?",
                "none",
                console,
            )
            react, vue, livewire = kit_choice == "react", kit_choice == "vue", kit_choice == "livewire"

            if react or vue or livewire:
                auth = select_with_arrows(
                    {
                        "laravel": "Laravel's built-in authentication",
                        "workos": "WorkOS (Requires WorkOS account)",
                        "none": "No authentication scaffolding",
                    },
                    "Which authentication provider do you prefer?",
                    "laravel",
                    console,
                )
                workos = auth == "workos"
                no_authentication = auth == "none"

            if livewire and not workos and not no_authentication:
                livewire_class_components = not typer.confirm("Would you like to use Laravel Volt?", default=True)

        if interactive and not (pest or phpunit):
            framework = select_with_arrows(
                {"pest": "Pest", "phpunit": "PHPUnit"},
                "Which testing framework do you prefer?",
                "pest",
                console,
            )
            pest = framework == "pest"

        try:
            config = (
                ConfigurationBuilder(name, directory)
                .set(
                    version=DEV_VERSION if dev else "",
                    starter_kit=resolve_starter_kit(
                        react=react,
                        vue=vue,
                        livewire=livewire,
                        using=using,
                        no_authentication=no_authentication,
                    ),
                    database=database or DEFAULT_DATABASE,
                    use_git=git or github,
                    git_branch=branch or services.git.default_branch(),
                    use_github=github,
                    github_organization=organization,
                    github_flags=github_flags,
                    use_pest=pest,
                    force=force,
                    is_dev=dev,
                    is_interactive=interactive,
                    use_livewire_class_components=livewire_class_components,
                    use_workos=workos,
                )
                .build()
            )

            services.builder.build(config)

            if not config.is_current_directory:
                config = services.database.configure(config, explicit=database is not None, quiet=quiet)

            if config.use_git:
                result = services.git.initialize(config)
                if not result.ok:
                    warn(f"Unable to initialize a git repository: {result.stderr.strip()}", console)
                elif config.use_github:
                    published = services.github.create_and_push(config)
                    if published is None:
                        warn(
                            "Make sure the \"gh\" CLI tool is installed and that you're authenticated to GitHub. "
                            "Skipping...",
                            console,
                        )
                    elif not published.ok:
                        warn(f"Unable to create the GitHub repository: {published.stderr.strip()}", console)
                    console.print()

            if config.use_pest:
                result = services.pest.install(config, quiet=quiet)
                if not result.ok:
                    warn("Pest could not be installed; PHPUnit remains configured.", console)
                console.print()

            selection = services.package_managers.detect(
                config.directory,
                _requested_package_managers(npm=npm, pnpm=pnpm, bun=bun, yarn=yarn),
            )
            config = config.with_package_manager(selection)
            if not selection.should_run and interactive:
                manager = selection.manager
                config = config.with_package_manager(
                    selection,
                    should_run=typer.confirm(
                        f"Would you like to run {manager.install_command()} and {manager.build_command()}?",
                        default=True,
                    ),
                )

            services.package_managers.cleanup_lock_files(config)

            if config.should_run_package_manager:
                result = services.builder.install_and_build_assets(config, quiet=quiet)
                if result is not None and not result.ok:
                    warn("Frontend assets could not be built.", console)
        except InstallerError as exc:
            logger.error("Project creation failed for %s: %s", name, exc)
            error(str(exc), console)
            raise typer.Exit(1)

        _display_success(config, console)


__all__ = [
    "InstallerServices",
    "installation_directory",
    "project_exists",
    "register_new_command",
    "resolve_starter_kit",
]
