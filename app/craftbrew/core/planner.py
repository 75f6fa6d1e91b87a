"""Plan computation.

Compares the declared entries of a merged manifest with the installed
state and produces the read-only Plan the engine acts on.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from craftbrew.core.manifest import effective_entries
from craftbrew.models.plan import Plan

if TYPE_CHECKING:
    from craftbrew.models.entry import Entry


def _contains(entries: Iterable[Entry], entry: Entry) -> bool:
    return any(candidate.matches(entry) for candidate in entries)


def _unique(entries: Iterable[Entry]) -> list[Entry]:
    result: list[Entry] = []
    for entry in entries:
        if not _contains(result, entry):
            result.append(entry)
    return result


def compute_plan(declared: Iterable[Entry], installed: Iterable[Entry]) -> Plan:
    """Diff declared entries against the installed state.

    to_install keeps declaration order. to_remove keeps the backend's
    order and never contains an entry that matches any declaration.

    Args:
        declared: Entries of the merged manifest, duplicates allowed.
        installed: Entries reported by the backend.

    Returns:
        Plan with entries to install and entries to remove.
    """
    declared_list = effective_entries(declared)
    installed_list = _unique(installed)

    to_install = tuple(e for e in declared_list if not _contains(installed_list, e))
    to_remove = tuple(e for e in installed_list if not _contains(declared_list, e))

    return Plan(to_install=to_install, to_remove=to_remove)
