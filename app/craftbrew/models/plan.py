"""Plan and report models for reconciliation operations.

This module defines the read-only plan derived from diffing the merged
manifest against the installed state, and the per-operation report values
returned by the reconciliation engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from craftbrew.models.entry import Entry, EntryKind


@dataclass(frozen=True, slots=True)
class Plan:
    """Difference between declared and installed state.

    Each tuple holds at most one entry per package, in a stable order.

    Attributes:
        to_install: Declared entries that are not installed.
        to_remove: Installed entries not referenced by any active manifest.
    """

    to_install: tuple[Entry, ...] = ()
    to_remove: tuple[Entry, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Check if there is nothing to install or remove."""
        return not (self.to_install or self.to_remove)


class Command(str, Enum):
    """Reconciliation commands accepted by the CLI."""

    INSTALL = "install"
    CLEANUP = "cleanup"
    SYNC = "sync"
    DIFF = "diff"
    BACKUP = "backup"

    @property
    def uses_manifests(self) -> bool:
        """Check if the command operates on a merged manifest."""
        return self != Command.BACKUP


class Outcome(Enum):
    """Outcome of a single reconciliation operation.

    Attributes:
        APPLIED: The backend mutated (or wrote) state successfully.
        NOOP: Nothing needed to change.
        PLANNED: Dry-run or diff; the plan was reported only.
    """

    APPLIED = "applied"
    NOOP = "noop"
    PLANNED = "planned"


@dataclass(frozen=True, slots=True)
class OperationReport:
    """Result of one reconciliation operation.

    Attributes:
        command: Operation that produced this report.
        outcome: What the operation did.
        plan: Plan computed for the operation, if any.
        output_path: File written (backup only).
        kind_counts: Per-kind entry counts (backup and install summaries).
        message: Short human-readable summary.
    """

    command: Command
    outcome: Outcome
    plan: Plan | None = None
    output_path: Path | None = None
    kind_counts: dict[EntryKind, int] = field(default_factory=dict)
    message: str | None = None

    @property
    def changed(self) -> bool:
        """Check if the operation mutated system or file state."""
        return self.outcome == Outcome.APPLIED


@dataclass(frozen=True, slots=True)
class RunReport:
    """Aggregated reports for one invocation.

    Attributes:
        reports: Operation reports in execution order.
    """

    reports: tuple[OperationReport, ...] = ()

    def add(self, report: OperationReport) -> "RunReport":
        """Return a new RunReport with report appended."""
        return RunReport(reports=(*self.reports, report))

    @property
    def changed(self) -> bool:
        """Check if any operation mutated state."""
        return any(r.changed for r in self.reports)
