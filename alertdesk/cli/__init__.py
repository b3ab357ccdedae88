"""CLI commands for AlertDesk.

This package provides the command-line interface for AlertDesk:
listing, creating, editing and deleting alerts.
"""

from alertdesk.cli.main import cli, main

__all__ = ["cli", "main"]
