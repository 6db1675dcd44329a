"""CLI command implementations for the sheetnest application.

This package contains subcommands for the sheetnest CLI, including:
- validate: Validate a pricing configuration file
"""

from sheetnest.cli.commands.validate import validate_command

__all__ = ["validate_command"]
