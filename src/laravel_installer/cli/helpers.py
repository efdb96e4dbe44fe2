"""Shared console, banner and status badges for the CLI."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.text import Text

BANNER = r"""
 _                               _
| |                             | |
| |     __ _ _ __ __ ___   _____| |
| |    / _` |  __/ _` \ \ / / _ \ |
| |___| (_| | | | (_| |\ V /  __/ |
|______\__,_|_|  \__,_| \_/ \___|_|
"""

console = Console()


def show_banner(target: Console | None = None) -> None:
    """Display the ASCII art banner."""
    out = target or console
    banner = Text()
    for line in BANNER.strip("\n").split("\n"):
        banner.append("  " + line + "\n", style="red")
    out.print()
    out.print(banner)


def warn(message: str, target: Console | None = None) -> None:
    (target or console).print(f"  [black on yellow] WARN [/] {escape(message)}")
    (target or console).print()


def info(message: str, target: Console | None = None) -> None:
    (target or console).print(f"  [white on blue] INFO [/] {message}")


def error(message: str, target: Console | None = None) -> None:
    (target or console).print(f"[red]{escape(message)}[/red]")
