"""CLI helpers exposed for other modules."""

from .helpers import console, show_banner
from .ui import select_with_arrows

__all__ = ["console", "show_banner", "select_with_arrows"]
