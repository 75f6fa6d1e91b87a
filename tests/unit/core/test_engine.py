"""Unit tests for the reconciliation engine.

Uses an in-memory backend to check convergence, safety and dry-run
behavior of every operation.
"""

import logging
from collections.abc import Callable, Iterator
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from craftbrew.core.confirm import ConfirmationGate
from craftbrew.core.engine import ReconciliationEngine, summarize_removals
from craftbrew.core.errors import BackendOperationError, UserCancelledError
from craftbrew.core.loader import ManifestSelection, resolve_manifests
from craftbrew.core.manifest import MergedManifest, open_merged_manifest
from craftbrew.models.entry import Entry, EntryKind, parse_entries
from craftbrew.models.options import RunOptions
from craftbrew.models.plan import Command, Outcome, Plan
from craftbrew.models.system import SystemType
from fakes import FakeBackend


def _engine(
    backend: FakeBackend,
    answer: bool = False,
    **options: bool,
) -> tuple[ReconciliationEngine, MagicMock]:
    prompt = MagicMock(return_value=answer)
    engine = ReconciliationEngine(backend, ConfirmationGate(prompt=prompt), RunOptions(**options))
    return engine, prompt


@pytest.fixture
def dev_merged(manifest_dir: Path, tmp_path: Path) -> Iterator[MergedManifest]:
    """Merged manifest for the dev system type."""
    paths = resolve_manifests(ManifestSelection(system_type=SystemType.DEV), manifest_dir)
    with open_merged_manifest(paths, "dev", directory=tmp_path) as merged:
        yield merged


@pytest.fixture
def drifted_backend(make_backend: Callable[..., FakeBackend]) -> FakeBackend:
    """Backend with git installed plus two unmanaged packages."""
    return make_backend(installed=parse_entries('brew "git"\nbrew "wget"\ncask "zoom"\n'))


class TestInstall:
    """Tests for ReconciliationEngine.install."""

    def test_install_adds_every_declared_entry(
        self, fake_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """After install, every merged entry is installed."""
        engine, _ = _engine(fake_backend)

        report = engine.install(dev_merged)

        assert report.outcome == Outcome.APPLIED
        for entry in dev_merged.entries:
            assert any(i.matches(entry) for i in fake_backend.installed)

    def test_install_is_idempotent(
        self, fake_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """A second run finds nothing left to install."""
        engine, _ = _engine(fake_backend)
        engine.install(dev_merged)

        assert engine.plan(dev_merged).to_install == ()

    def test_install_never_removes(
        self, drifted_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """Unmanaged packages survive install."""
        engine, _ = _engine(drifted_backend)

        engine.install(dev_merged)

        refs = {e.ref for e in drifted_backend.installed}
        assert {"brew:wget", "cask:zoom"} <= refs

    def test_install_reports_kind_counts(
        self, fake_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """The report counts merged entries per kind."""
        engine, _ = _engine(fake_backend)

        report = engine.install(dev_merged)

        assert report.kind_counts[EntryKind.FORMULA] == 3
        assert report.kind_counts[EntryKind.CASK] == 1

    def test_install_failure_raises(
        self, make_backend: Callable[..., FakeBackend], dev_merged: MergedManifest
    ) -> None:
        """A backend failure is raised, not retried."""
        backend = make_backend(fail_on=("install",))
        engine, _ = _engine(backend)

        with pytest.raises(BackendOperationError):
            engine.install(dev_merged)

        assert backend.calls.count("install") == 1

    def test_install_dry_run_reports_plan(
        self, drifted_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """Dry-run reports what would be installed and changes nothing."""
        before = list(drifted_backend.installed)
        engine, _ = _engine(drifted_backend, dry_run=True)

        report = engine.install(dev_merged)

        assert report.outcome == Outcome.PLANNED
        assert report.plan is not None
        assert [e.ref for e in report.plan.to_install] == [
            "tap:homebrew/bundle",
            "brew:jq",
            "cask:docker",
            "vscode:ms-python.python",
        ]
        assert drifted_backend.installed == before
        assert "install" not in drifted_backend.calls

    def test_unavailable_backend(
        self, make_backend: Callable[..., FakeBackend], dev_merged: MergedManifest
    ) -> None:
        """A missing backend fails before any call."""
        backend = make_backend(available=False)
        engine, _ = _engine(backend)

        with pytest.raises(BackendOperationError, match="not available"):
            engine.install(dev_merged)

        assert backend.calls == []


class TestCleanup:
    """Tests for ReconciliationEngine.cleanup."""

    def test_nothing_to_remove(
        self, make_backend: Callable[..., FakeBackend], dev_merged: MergedManifest
    ) -> None:
        """An empty removal set is a no-op success without prompting."""
        backend = make_backend(installed=list(dev_merged.entries))
        engine, prompt = _engine(backend)

        report = engine.cleanup(dev_merged)

        assert report.outcome == Outcome.NOOP
        prompt.assert_not_called()
        assert "cleanup" not in backend.calls

    def test_declined_leaves_state_unchanged(
        self, drifted_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """Answering 'no' cancels without touching installed state."""
        before = list(drifted_backend.installed)
        engine, prompt = _engine(drifted_backend, answer=False)

        with pytest.raises(UserCancelledError):
            engine.cleanup(dev_merged)

        prompt.assert_called_once()
        assert drifted_backend.installed == before
        assert "cleanup" not in drifted_backend.calls

    def test_confirmed_removes(
        self, drifted_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """Answering 'yes' removes the unmanaged packages."""
        engine, _ = _engine(drifted_backend, answer=True)

        report = engine.cleanup(dev_merged)

        assert report.outcome == Outcome.APPLIED
        assert {e.ref for e in drifted_backend.installed} == {"brew:git"}

    def test_force_skips_gate(
        self, drifted_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """force removes without prompting."""
        engine, prompt = _engine(drifted_backend, force=True)

        engine.cleanup(dev_merged)

        prompt.assert_not_called()
        assert "cleanup" in drifted_backend.calls

    def test_warns_count_is_advisory(
        self,
        drifted_backend: FakeBackend,
        dev_merged: MergedManifest,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Before asking, the user is told the backend may remove more."""
        engine, _ = _engine(drifted_backend, answer=True)

        with caplog.at_level(logging.INFO, logger="craftbrew.core.engine"):
            engine.cleanup(dev_merged)

        assert "Fake cleanup may also remove dependencies" in caplog.text

    @pytest.mark.parametrize("system_type", list(SystemType))
    def test_never_proposes_declared_entries(
        self,
        system_type: SystemType,
        manifest_dir: Path,
        tmp_path: Path,
        make_backend: Callable[..., FakeBackend],
        brew_dump_output: str,
    ) -> None:
        """For every system type, removals exclude all merged entries."""
        backend = make_backend(installed=parse_entries(brew_dump_output))
        engine, _ = _engine(backend, dry_run=True)
        paths = resolve_manifests(ManifestSelection(system_type=system_type), manifest_dir)

        with open_merged_manifest(paths, system_type.value, directory=tmp_path) as merged:
            report = engine.cleanup(merged)

        assert report.plan is not None
        for entry in report.plan.to_remove:
            assert not any(entry.matches(d) for d in merged.entries)

    def test_modifier_lines_are_not_removed(
        self,
        tmp_path: Path,
        make_backend: Callable[..., FakeBackend],
    ) -> None:
        """Entries declared with an if/unless modifier count as declared."""
        source = tmp_path / "mac.brewfile"
        source.write_text('brew "git" if OS.mac?\ncask "docker" unless ENV["CI"]\n')
        backend = make_backend(installed=parse_entries('brew "git"\ncask "docker"\n'))
        engine, prompt = _engine(backend, dry_run=True)

        with open_merged_manifest([source], "custom", directory=tmp_path) as merged:
            report = engine.cleanup(merged)

        assert report.plan is not None
        assert report.plan.to_remove == ()
        prompt.assert_not_called()

    def test_dry_run_skips_gate_and_mutation(
        self, drifted_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """Dry-run reports removals without prompting or removing."""
        before = list(drifted_backend.installed)
        engine, prompt = _engine(drifted_backend, dry_run=True)

        report = engine.cleanup(dev_merged)

        assert report.outcome == Outcome.PLANNED
        assert report.plan is not None
        assert [e.ref for e in report.plan.to_remove] == ["brew:wget", "cask:zoom"]
        prompt.assert_not_called()
        assert drifted_backend.installed == before

    def test_cleanup_failure_raises(
        self, make_backend: Callable[..., FakeBackend], dev_merged: MergedManifest
    ) -> None:
        """A failed removal batch raises BackendOperationError."""
        backend = make_backend(installed=parse_entries('brew "wget"\n'), fail_on=("cleanup",))
        engine, _ = _engine(backend, force=True)

        with pytest.raises(BackendOperationError):
            engine.cleanup(dev_merged)


class TestSync:
    """Tests for ReconciliationEngine.sync."""

    def test_sync_converges(
        self, drifted_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """sync installs missing and removes unlisted packages."""
        engine, _ = _engine(drifted_backend, force=True)

        report = engine.sync(dev_merged)

        assert [r.command for r in report.reports] == [Command.INSTALL, Command.CLEANUP]
        assert engine.plan(dev_merged).is_empty

    def test_sync_skips_cleanup_after_install_failure(
        self, make_backend: Callable[..., FakeBackend], dev_merged: MergedManifest
    ) -> None:
        """A failed install stops sync before cleanup."""
        backend = make_backend(installed=parse_entries('brew "wget"\n'), fail_on=("install",))
        engine, _ = _engine(backend, force=True)

        with pytest.raises(BackendOperationError):
            engine.sync(dev_merged)

        assert "cleanup" not in backend.calls


class TestDiff:
    """Tests for ReconciliationEngine.diff."""

    def test_diff_reports_both_sides(
        self, drifted_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """diff lists installs and removals."""
        engine, _ = _engine(drifted_backend)

        report = engine.diff(dev_merged)

        assert report.plan is not None
        assert len(report.plan.to_install) == 4
        assert len(report.plan.to_remove) == 2

    def test_diff_never_prompts_or_mutates(
        self, drifted_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """diff is read-only regardless of dry_run."""
        before = list(drifted_backend.installed)
        engine, prompt = _engine(drifted_backend, dry_run=False)

        engine.diff(dev_merged)

        prompt.assert_not_called()
        assert drifted_backend.calls == ["query"]
        assert drifted_backend.installed == before


class TestBackup:
    """Tests for ReconciliationEngine.backup."""

    def test_backup_counts_per_kind(
        self, make_backend: Callable[..., FakeBackend], tmp_path: Path
    ) -> None:
        """Three formulae and one cask produce three brew lines and one cask line."""
        backend = make_backend(
            installed=parse_entries('brew "git"\nbrew "jq"\nbrew "wget"\ncask "docker"\n')
        )
        engine, _ = _engine(backend)
        output = tmp_path / "snap.manifest"

        report = engine.backup(output)

        lines = output.read_text().splitlines()
        assert sum(1 for line in lines if line.startswith("brew ")) == 3
        assert sum(1 for line in lines if line.startswith("cask ")) == 1
        assert report.kind_counts[EntryKind.FORMULA] == 3
        assert report.kind_counts[EntryKind.CASK] == 1
        assert report.output_path == output

    def test_backup_round_trip(
        self, make_backend: Callable[..., FakeBackend], tmp_path: Path, brew_dump_output: str
    ) -> None:
        """A backup used as the only manifest diffs clean against the same state."""
        backend = make_backend(installed=parse_entries(brew_dump_output))
        engine, _ = _engine(backend)
        output = tmp_path / "backup.brewfile"
        engine.backup(output)

        paths = resolve_manifests(ManifestSelection.from_names(str(output)), tmp_path)
        with open_merged_manifest(paths, "custom", directory=tmp_path) as merged:
            report = engine.diff(merged)

        assert report.plan == Plan()

    def test_default_path_is_timestamped(
        self,
        fake_backend: FakeBackend,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Without an output path the name is derived from the timestamp."""
        monkeypatch.chdir(tmp_path)
        engine, _ = _engine(fake_backend)

        report = engine.backup(now=datetime(2024, 1, 2, 3, 4, 5))

        assert report.output_path == Path("craftbrew-backup-20240102-030405.brewfile")
        assert (tmp_path / "craftbrew-backup-20240102-030405.brewfile").exists()

    def test_backup_dry_run_writes_nothing(self, fake_backend: FakeBackend, tmp_path: Path) -> None:
        """Dry-run only reports the target path."""
        engine, _ = _engine(fake_backend, dry_run=True)
        output = tmp_path / "snap.manifest"

        report = engine.backup(output)

        assert report.outcome == Outcome.PLANNED
        assert not output.exists()
        assert fake_backend.calls == []


class TestDryRunPurity:
    """Dry-run never changes installed state or the manifest directory."""

    @pytest.mark.parametrize("command", list(Command))
    def test_dry_run_changes_nothing(
        self,
        command: Command,
        drifted_backend: FakeBackend,
        manifest_dir: Path,
        tmp_path: Path,
    ) -> None:
        """Every command in dry-run mode leaves state byte-for-byte unchanged."""
        snapshot = {p.name: p.read_bytes() for p in manifest_dir.iterdir()}
        before = list(drifted_backend.installed)
        engine, prompt = _engine(drifted_backend, dry_run=True)
        paths = resolve_manifests(ManifestSelection(system_type=SystemType.ALL), manifest_dir)

        with open_merged_manifest(paths, "all", directory=tmp_path) as merged:
            engine.run(command, merged, output=tmp_path / "backup.brewfile")

        assert drifted_backend.installed == before
        assert {p.name: p.read_bytes() for p in manifest_dir.iterdir()} == snapshot
        assert not (tmp_path / "backup.brewfile").exists()
        prompt.assert_not_called()


class TestRun:
    """Tests for ReconciliationEngine.run dispatch."""

    def test_requires_merged_manifest(self, fake_backend: FakeBackend) -> None:
        """Manifest-based commands need a merged manifest."""
        engine, _ = _engine(fake_backend)

        with pytest.raises(ValueError, match="requires a merged manifest"):
            engine.run(Command.DIFF, None)

    def test_sync_dispatch_returns_two_reports(
        self, fake_backend: FakeBackend, dev_merged: MergedManifest
    ) -> None:
        """sync yields an install and a cleanup report."""
        engine, _ = _engine(fake_backend, force=True)

        report = engine.run(Command.SYNC, dev_merged)

        assert len(report.reports) == 2


class TestSummarizeRemovals:
    """Tests for summarize_removals function."""

    def test_lists_references(self) -> None:
        """Removals are listed by reference."""
        plan = Plan(to_remove=(Entry(kind=EntryKind.FORMULA, identifier="wget"),))

        assert summarize_removals(plan) == "remove 1 package(s) not in manifests: brew:wget"

    def test_truncates_long_lists(self) -> None:
        """Long lists are truncated with a remainder count."""
        plan = Plan(
            to_remove=tuple(Entry(kind=EntryKind.FORMULA, identifier=f"p{i}") for i in range(5))
        )

        assert summarize_removals(plan, limit=2).endswith("brew:p0, brew:p1 (and 3 more)")
