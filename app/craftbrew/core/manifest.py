"""Manifest file I/O and merging.

This module reads Brewfile-style manifests and merges several of them into
one ephemeral merged manifest. The merged manifest is a scoped resource:
``open_merged_manifest`` deletes it on every exit path.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from tempfile import NamedTemporaryFile

from craftbrew.core.errors import ManifestNotFoundError, ManifestWriteError
from craftbrew.models.entry import Entry, EntryKind, is_entry_line, parse_entries, parse_entry

logger = logging.getLogger(__name__)

MERGED_PREFIX = "craftbrew-merged."


@dataclass(frozen=True, slots=True)
class MergedManifest:
    """An ephemeral merged manifest on disk.

    Attributes:
        path: Location of the merged file.
        sources: Source manifests in merge order.
        entries: Entries in merge order, duplicates preserved.
        system_label: System type (or 'custom') recorded in the header.
    """

    path: Path
    sources: tuple[Path, ...]
    entries: tuple[Entry, ...]
    system_label: str


def load_manifest(path: Path) -> list[Entry]:
    """Read all recognized entries from a manifest file.

    Args:
        path: Manifest file to read.

    Returns:
        Entries in declaration order.

    Raises:
        ManifestNotFoundError: If the file does not exist.
        OSError: If the file cannot be read.
    """
    if not path.is_file():
        raise ManifestNotFoundError(path)
    return parse_entries(path.read_text(encoding="utf-8"))


def _filtered_lines(path: Path, exclude_kinds: frozenset[EntryKind]) -> list[str]:
    """Return the entry lines of a manifest, verbatim.

    Only lines parse_entry accepts are kept, so every line in the merged
    manifest is also one of its entries. Keyword lines that do not parse
    are dropped with a warning.
    """
    lines: list[str] = []
    for number, raw in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        if not is_entry_line(raw):
            continue
        entry = parse_entry(raw)
        if entry is None:
            logger.warning("Ignoring unrecognized line %s:%d: %s", path.name, number, raw.strip())
            continue
        if entry.kind in exclude_kinds:
            logger.debug("Skipping %s from %s", entry.ref, path.name)
            continue
        lines.append(raw.rstrip())
    return lines


def render_merged(
    sources: list[Path],
    system_label: str,
    generated_at: datetime,
    exclude_kinds: frozenset[EntryKind] = frozenset(),
) -> str:
    """Render merged manifest content.

    A header records generation time, system type and sources. Each source
    then contributes a provenance comment followed by its entry lines.
    Nothing is deduplicated.

    Args:
        sources: Manifest files in merge order.
        system_label: System type name recorded in the header.
        generated_at: Generation timestamp recorded in the header.
        exclude_kinds: Entry kinds to leave out.

    Returns:
        Complete merged manifest text.
    """
    source_list = ",".join(p.name for p in sources)
    parts = [
        "# Merged manifest generated by craftbrew",
        f"# Generated: {generated_at.isoformat(timespec='seconds')}",
        f"# System type: {system_label}",
        f"# Source files: {source_list}",
        "",
    ]
    for source in sources:
        parts.extend(["", f"# From: {source.name}", ""])
        parts.extend(_filtered_lines(source, exclude_kinds))
    return "\n".join(parts) + "\n"


def merge_manifests(
    sources: list[Path],
    system_label: str,
    generated_at: datetime | None = None,
    *,
    exclude_kinds: Iterable[EntryKind] = (),
    directory: Path | None = None,
) -> MergedManifest:
    """Write a new merged manifest to a temporary file.

    Callers own the returned file and must delete it; prefer
    ``open_merged_manifest`` which does so automatically.

    Args:
        sources: Resolved manifest files in merge order.
        system_label: System type name recorded in the header.
        generated_at: Header timestamp. Defaults to now.
        exclude_kinds: Entry kinds to leave out (e.g. App Store apps).
        directory: Directory for the temporary file. Defaults to the system temp dir.

    Returns:
        MergedManifest describing the written file.

    Raises:
        ManifestNotFoundError: If a source disappeared before merging.
        ManifestWriteError: If the merged file cannot be written.
    """
    for source in sources:
        if not source.is_file():
            raise ManifestNotFoundError(source)

    content = render_merged(
        sources,
        system_label,
        generated_at or datetime.now().astimezone(),
        frozenset(exclude_kinds),
    )

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            prefix=MERGED_PREFIX,
            suffix=".brewfile",
            dir=directory,
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            f.write(content)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ManifestWriteError(f"Failed to write merged manifest: {e}") from e

    entries = tuple(parse_entries(content))
    logger.debug(
        "Merged manifest created at %s with %d entries from %d file(s)",
        tmp_path,
        len(entries),
        len(sources),
    )
    return MergedManifest(
        path=tmp_path,
        sources=tuple(sources),
        entries=entries,
        system_label=system_label,
    )


def release_merged_manifest(merged: MergedManifest) -> None:
    """Delete a merged manifest file if it still exists.

    Args:
        merged: The merged manifest to release.
    """
    try:
        os.unlink(merged.path)
    except FileNotFoundError:
        return
    logger.debug("Removed merged manifest %s", merged.path)


@contextmanager
def open_merged_manifest(
    sources: list[Path],
    system_label: str,
    generated_at: datetime | None = None,
    *,
    exclude_kinds: Iterable[EntryKind] = (),
    directory: Path | None = None,
) -> Iterator[MergedManifest]:
    """Create a merged manifest that is deleted when the block exits.

    Deletion happens on normal exit, on exceptions and on interrupts.

    Args:
        sources: Resolved manifest files in merge order.
        system_label: System type name recorded in the header.
        generated_at: Header timestamp. Defaults to now.
        exclude_kinds: Entry kinds to leave out.
        directory: Directory for the temporary file.

    Yields:
        The merged manifest.
    """
    merged = merge_manifests(
        sources,
        system_label,
        generated_at,
        exclude_kinds=exclude_kinds,
        directory=directory,
    )
    try:
        yield merged
    finally:
        release_merged_manifest(merged)


def effective_entries(entries: Iterable[Entry]) -> list[Entry]:
    """Collapse repeated declarations into one entry per package.

    The last declaration wins; its position is that of the first
    declaration so merge order is kept. Conflicting metadata between
    declarations is logged as a warning.

    Args:
        entries: Entries in merge order.

    Returns:
        One entry per package, in first-declaration order.
    """
    result: list[Entry] = []
    for entry in entries:
        for index, existing in enumerate(result):
            if existing.matches(entry):
                if (existing.options, existing.modifier) != (entry.options, entry.modifier):
                    logger.warning(
                        "Conflicting declarations for %s: '%s' overrides '%s'",
                        entry.ref,
                        entry.to_line(),
                        existing.to_line(),
                    )
                result[index] = entry
                break
        else:
            result.append(entry)
    return result
