"""Manifest resolution.

Turns a system type preset or an explicit list of manifest names into an
ordered list of existing manifest files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from craftbrew.core.errors import ManifestNotFoundError
from craftbrew.models.system import SystemType

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = ".brewfile"


@dataclass(frozen=True, slots=True)
class ManifestSelection:
    """Which manifests make up the active scope.

    Exactly one of system_type or manifests is set.

    Attributes:
        system_type: Preset naming a fixed list of manifests.
        manifests: Explicit ordered manifest names or paths.
    """

    system_type: SystemType | None = None
    manifests: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate that exactly one source of manifests is given."""
        if self.system_type is not None and self.manifests:
            msg = "A system type and an explicit manifest list are mutually exclusive"
            raise ValueError(msg)
        if self.system_type is None and not self.manifests:
            msg = "Either a system type or at least one manifest is required"
            raise ValueError(msg)

    @classmethod
    def from_names(cls, names: str) -> ManifestSelection:
        """Build a selection from a comma-separated list of names.

        Args:
            names: Comma-separated manifest names or paths.

        Returns:
            ManifestSelection with the non-empty names in order.
        """
        parts = tuple(part.strip() for part in names.split(",") if part.strip())
        return cls(manifests=parts)

    @property
    def label(self) -> str:
        """Short description used in the merged manifest header."""
        if self.system_type is not None:
            return self.system_type.value
        return "custom"


def _candidate_names(selection: ManifestSelection, suffix: str) -> list[str]:
    """List manifest names for the selection, in order."""
    if selection.system_type is not None:
        return [f"{name}{suffix}" for name in selection.system_type.manifest_names]
    return list(selection.manifests)


def _resolve_one(name: str, manifest_dir: Path, suffix: str) -> Path:
    """Resolve a single manifest name to a path.

    Absolute paths and paths that exist relative to the working directory
    are used as given; anything else is looked up in the manifest directory,
    trying the suffixed name when the bare one is missing.
    """
    path = Path(name).expanduser()
    if path.is_absolute():
        return path
    if path.is_file():
        return path.resolve()

    candidate = manifest_dir / name
    if not candidate.exists() and not candidate.suffix:
        suffixed = manifest_dir / f"{name}{suffix}"
        if suffixed.exists():
            return suffixed.resolve()
    return candidate.resolve() if candidate.exists() else candidate


def resolve_manifests(
    selection: ManifestSelection,
    manifest_dir: Path,
    suffix: str = DEFAULT_SUFFIX,
) -> list[Path]:
    """Resolve a selection into an ordered list of manifest files.

    Args:
        selection: System type or explicit manifest list.
        manifest_dir: Directory bare names are resolved against.
        suffix: Suffix appended to preset manifest names.

    Returns:
        Absolute paths in the order the manifests must be merged.

    Raises:
        ManifestNotFoundError: On the first manifest that does not exist.
    """
    resolved: list[Path] = []
    for name in _candidate_names(selection, suffix):
        path = _resolve_one(name, manifest_dir, suffix)
        if not path.is_file():
            raise ManifestNotFoundError(path)
        logger.debug("Resolved manifest %s -> %s", name, path)
        resolved.append(path)
    return resolved
