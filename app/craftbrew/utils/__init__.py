"""Utility modules for craftbrew.

This module exports commonly used utility functions.
"""

from craftbrew.utils.formatting import console, create_entry_table, err_console
from craftbrew.utils.shell import CommandResult, command_exists, run_command, run_interactive

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "create_entry_table",
    "err_console",
    "run_command",
    "run_interactive",
]
