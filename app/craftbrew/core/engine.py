"""Reconciliation engine.

The ReconciliationEngine converges the installed package state towards a
merged manifest. It offers five operations: install, cleanup, sync, diff
and backup. Each returns an explicit report value; failures and
cancellations are raised as exceptions from craftbrew.core.errors.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from craftbrew.core.errors import BackendOperationError, UserCancelledError
from craftbrew.core.manifest import load_manifest
from craftbrew.core.paths import get_default_backup_path
from craftbrew.core.planner import compute_plan
from craftbrew.models.entry import EntryKind, count_by_kind
from craftbrew.models.options import RunOptions
from craftbrew.models.plan import Command, OperationReport, Outcome, Plan, RunReport
from craftbrew.utils.logs import log_success

if TYPE_CHECKING:
    from craftbrew.backends.base import Backend
    from craftbrew.core.confirm import ConfirmationGate
    from craftbrew.core.manifest import MergedManifest

logger = logging.getLogger(__name__)

# How many package references to spell out in the confirmation summary
SUMMARY_LIMIT = 10


def _format_kind_counts(counts: dict[EntryKind, int]) -> str:
    return ", ".join(f"{kind.label}: {counts.get(kind, 0)}" for kind in EntryKind)


def summarize_removals(plan: Plan, limit: int = SUMMARY_LIMIT) -> str:
    """Human-readable description of a removal plan.

    Args:
        plan: Plan whose to_remove entries are described.
        limit: Maximum number of references listed by name.

    Returns:
        Text such as "remove 2 package(s) not in manifests: brew:wget, cask:zoom".
    """
    refs = [entry.ref for entry in plan.to_remove]
    listed = ", ".join(refs[:limit])
    if len(refs) > limit:
        listed += f" (and {len(refs) - limit} more)"
    return f"remove {len(refs)} package(s) not in manifests: {listed}"


class ReconciliationEngine:
    """Engine converging installed state towards a merged manifest.

    The engine never owns the merged manifest file; callers create it with
    ``open_merged_manifest`` and pass it in for the duration of one call.

    Example:
        >>> engine = ReconciliationEngine(HomebrewBundleBackend(), ConfirmationGate(), options)
        >>> with open_merged_manifest(paths, "dev") as merged:
        ...     report = engine.diff(merged)
        >>> report.plan.is_empty
        True
    """

    def __init__(
        self,
        backend: Backend,
        gate: ConfirmationGate,
        options: RunOptions | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            backend: Package-manager backend performing real changes.
            gate: Confirmation gate consulted before removals.
            options: Run options. Defaults to RunOptions().
        """
        self.backend = backend
        self.gate = gate
        self.options = options or RunOptions()

    def plan(self, merged: MergedManifest) -> Plan:
        """Compute the plan for a merged manifest against live state.

        Args:
            merged: The active merged manifest.

        Returns:
            Plan with entries to install and to remove.

        Raises:
            BackendOperationError: If the installed state cannot be queried.
        """
        self.backend.require_available()
        installed = self.backend.installed_entries()
        logger.debug(
            "Installed state: %d entries; declared: %d entries",
            len(installed),
            len(merged.entries),
        )
        return compute_plan(merged.entries, installed)

    def install(self, merged: MergedManifest) -> OperationReport:
        """Install missing entries. Never removes anything.

        Args:
            merged: The active merged manifest.

        Returns:
            OperationReport; PLANNED in dry-run mode, APPLIED otherwise.

        Raises:
            BackendOperationError: If the backend install batch fails.
        """
        logger.info("Installing packages...")

        if self.options.dry_run:
            plan = self.plan(merged)
            logger.info("DRY RUN MODE - Would install packages from merged manifest")
            return OperationReport(
                command=Command.INSTALL,
                outcome=Outcome.PLANNED,
                plan=Plan(to_install=plan.to_install),
                message=f"{len(plan.to_install)} package(s) would be installed",
            )

        self.backend.require_available()
        try:
            self.backend.install(merged.path, verbose=self.options.verbose)
        except BackendOperationError as e:
            logger.error("Package installation failed from %s: %s", merged.path, e)
            raise

        counts = count_by_kind(list(merged.entries))
        log_success(logger, "Package installation completed")
        logger.info("Declared: %s", _format_kind_counts(counts))
        return OperationReport(
            command=Command.INSTALL,
            outcome=Outcome.APPLIED,
            kind_counts=counts,
            message="Package installation completed",
        )

    def cleanup(self, merged: MergedManifest) -> OperationReport:
        """Remove installed packages not referenced by the merged manifest.

        The removal list shown at the gate is computed from the manifest
        text. The backend removes what its own cleanup computes, which may
        also include dependencies no longer needed, so the count is advisory.

        Args:
            merged: The active merged manifest.

        Returns:
            OperationReport; NOOP when nothing is to be removed, PLANNED in
            dry-run mode, APPLIED after removal.

        Raises:
            UserCancelledError: If the user declines the removal.
            BackendOperationError: If the state query or removal fails.
        """
        logger.info("Cleaning up packages...")
        plan = Plan(to_remove=self.plan(merged).to_remove)

        if self.options.dry_run:
            logger.info("DRY RUN MODE - Would clean up packages not in manifests")
            return OperationReport(
                command=Command.CLEANUP,
                outcome=Outcome.PLANNED,
                plan=plan,
                message=f"{len(plan.to_remove)} package(s) would be removed",
            )

        if not plan.to_remove:
            log_success(logger, "No packages to remove")
            return OperationReport(
                command=Command.CLEANUP,
                outcome=Outcome.NOOP,
                plan=plan,
                message="No packages to remove",
            )

        description = summarize_removals(plan)
        logger.info(
            "%s cleanup may also remove dependencies that are no longer needed",
            self.backend.name,
        )
        if not self.gate.confirm(description, len(plan.to_remove), force=self.options.force):
            logger.info("Operation cancelled")
            raise UserCancelledError(f"Declined to {description}")

        try:
            self.backend.cleanup(merged.path, verbose=self.options.verbose)
        except BackendOperationError as e:
            logger.error("Package cleanup failed for %s: %s", merged.path, e)
            raise

        log_success(logger, "Package cleanup completed")
        return OperationReport(
            command=Command.CLEANUP,
            outcome=Outcome.APPLIED,
            plan=plan,
            message=f"Removed {len(plan.to_remove)} package(s)",
        )

    def sync(self, merged: MergedManifest) -> RunReport:
        """Install missing entries, then remove unlisted ones.

        Cleanup does not run if install raises.

        Args:
            merged: The active merged manifest.

        Returns:
            RunReport with the install and cleanup reports.
        """
        logger.info("Synchronising packages...")
        report = RunReport().add(self.install(merged))
        return report.add(self.cleanup(merged))

    def diff(self, merged: MergedManifest) -> OperationReport:
        """Show what install and cleanup would do. Always read-only.

        Args:
            merged: The active merged manifest.

        Returns:
            OperationReport carrying the full plan.
        """
        logger.info("Showing package differences...")
        plan = self.plan(merged)
        return OperationReport(
            command=Command.DIFF,
            outcome=Outcome.PLANNED,
            plan=plan,
            message=f"{len(plan.to_install)} to install, {len(plan.to_remove)} to remove",
        )

    def backup(self, output: Path | None = None, now: datetime | None = None) -> OperationReport:
        """Serialize the installed state to a new manifest.

        Independent of any system type or loaded manifest.

        Args:
            output: File to write. Defaults to a timestamped name in the
                working directory.
            now: Timestamp for the default name. Defaults to now.

        Returns:
            OperationReport with the output path and per-kind counts.

        Raises:
            BackendOperationError: If the dump fails.
        """
        path = output or get_default_backup_path(now or datetime.now())
        logger.info("Creating backup: %s", path)

        if self.options.dry_run:
            logger.info("DRY RUN MODE - Would create backup at %s", path)
            return OperationReport(
                command=Command.BACKUP,
                outcome=Outcome.PLANNED,
                output_path=path,
                message=f"Backup would be written to {path}",
            )

        self.backend.require_available()
        try:
            self.backend.dump(path)
        except BackendOperationError as e:
            logger.error("Backup to %s failed: %s", path, e)
            raise

        counts = count_by_kind(load_manifest(path))
        log_success(logger, "Backup created: %s", path)
        logger.info("Backup contains:")
        for kind in EntryKind:
            logger.info("  %s: %d", kind.label, counts[kind])

        return OperationReport(
            command=Command.BACKUP,
            outcome=Outcome.APPLIED,
            output_path=path,
            kind_counts=counts,
            message=f"Backup created: {path}",
        )

    def run(
        self,
        command: Command,
        merged: MergedManifest | None,
        output: Path | None = None,
    ) -> RunReport:
        """Dispatch a command.

        Args:
            command: Operation to run.
            merged: Merged manifest; required for every command except backup.
            output: Backup output path.

        Returns:
            RunReport with one report per executed operation.

        Raises:
            ValueError: If a manifest-based command is given no merged manifest.
        """
        if command == Command.BACKUP:
            return RunReport().add(self.backup(output))

        if merged is None:
            msg = f"Command '{command.value}' requires a merged manifest"
            raise ValueError(msg)

        if command == Command.SYNC:
            return self.sync(merged)

        handlers = {
            Command.INSTALL: self.install,
            Command.CLEANUP: self.cleanup,
            Command.DIFF: self.diff,
        }
        return RunReport().add(handlers[command](merged))
