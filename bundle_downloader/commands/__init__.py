"""CLI commands."""

from .bundles import fetch_command
from .bundles import info_command
from .bundles import platform_command
from .bundles import sync_command
from .source import source

__all__ = ["sync_command", "info_command", "fetch_command", "platform_command", "source"]
