"""CLI command modules for the Laravel installer."""

from .new import register_new_command

__all__ = ["register_new_command"]
