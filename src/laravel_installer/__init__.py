#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "typer",
#     "rich",
#     "readchar",
#     "httpx",
#     "truststore",
#     "packaging",
# ]
# ///
"""
Laravel Installer - create new Laravel applications.

Usage:
    laravel new <project-name>
    laravel new .
    laravel new blog --react --pest --git
"""

import sys
from importlib.metadata import PackageNotFoundError, version

import typer
from rich.align import Align
from typer.core import TyperGroup

from laravel_installer.cli.commands.new import register_new_command
from laravel_installer.cli.helpers import console, show_banner

try:
    __version__ = version("laravel-installer")
except PackageNotFoundError:
    # Running from a source checkout without an installed distribution.
    __version__ = "0.0.0"


class BannerGroup(TyperGroup):
    """Custom group that shows banner before help."""

    def format_help(self, ctx, formatter):
        show_banner()
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="laravel",
    help="Create new Laravel applications",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"Laravel Installer [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    show_version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show the installer version and exit",
    ),
):
    """Show banner when no subcommand is provided."""
    if ctx.invoked_subcommand is None and "--help" not in sys.argv and "-h" not in sys.argv:
        show_banner()
        console.print(Align.center("[dim]Run 'laravel new --help' for usage information[/dim]"))
        console.print()


register_new_command(app, console=console, current_version=__version__)


def main():
    app()


if __name__ == "__main__":
    main()
