"""Data models for craftbrew.

This module exports the core data structures used throughout the application.
"""

from craftbrew.models.entry import (
    Entry,
    EntryKind,
    count_by_kind,
    is_entry_line,
    parse_entries,
    parse_entry,
)
from craftbrew.models.options import RunOptions
from craftbrew.models.plan import Command, OperationReport, Outcome, Plan, RunReport
from craftbrew.models.system import SystemType, parse_system_type

__all__ = [
    "Command",
    "Entry",
    "EntryKind",
    "OperationReport",
    "Outcome",
    "Plan",
    "RunOptions",
    "RunReport",
    "SystemType",
    "count_by_kind",
    "is_entry_line",
    "parse_entries",
    "parse_entry",
    "parse_system_type",
]
