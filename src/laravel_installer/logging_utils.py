"""
Logging setup for the installer CLI.

Records go nowhere unless ``--debug`` is passed, in which case everything at
DEBUG and above is rendered through rich on stderr.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(debug: bool) -> None:
    """Configure the root logger; ``debug`` enables verbose rich output."""

    if not debug:
        logging.basicConfig(level=logging.WARNING, handlers=[logging.NullHandler()])
        return

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)],
        force=True,
    )
