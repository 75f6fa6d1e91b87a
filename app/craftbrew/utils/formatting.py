"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from craftbrew.core.theme import get_theme

if TYPE_CHECKING:
    from craftbrew.models.entry import Entry


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_entry_table(title: str, style: str = "text") -> Table:
    """Create a pre-configured table for displaying manifest entries.

    Args:
        title: Table title.
        style: Theme style applied to the identifier column.

    Returns:
        Rich Table with Kind, Package and Options columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Kind", width=8)
    table.add_column("Package", style=style, no_wrap=True)
    table.add_column("Options", style="muted")
    return table


def format_entry_row(entry: Entry) -> tuple[str, str, str]:
    """Format an entry as a table row.

    Args:
        entry: The entry to format.

    Returns:
        Tuple of (kind, identifier, options), where options also shows
        any trailing modifier.
    """
    extra = " ".join(part for part in (entry.options, entry.modifier) if part)
    return (entry.kind.value, entry.identifier, extra)
