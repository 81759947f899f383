"""CLI commands for module search and inspection."""

from .info import info_command
from .search import search_command

__all__ = ["search_command", "info_command"]
