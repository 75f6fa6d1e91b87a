"""Shared types and helpers for the CLI.

This module provides the backend factory and option helpers used by the
CLI entry point.
"""

from craftbrew.backends.base import Backend
from craftbrew.backends.homebrew import HomebrewBundleBackend
from craftbrew.core.loader import ManifestSelection
from craftbrew.models.entry import EntryKind
from craftbrew.models.options import RunOptions
from craftbrew.models.system import SystemType, parse_system_type

# Names listed in --system help text
SYSTEM_CHOICES = "|".join(t.value for t in SystemType)


def get_backend() -> Backend:
    """Get the package-manager backend.

    Returns:
        Homebrew bundle backend instance.
    """
    return HomebrewBundleBackend()


def build_selection(
    system: str | None,
    manifests: str | None,
    default_system: SystemType,
) -> ManifestSelection:
    """Build the manifest selection from CLI options.

    Args:
        system: Value of --system, if given.
        manifests: Value of --manifests, if given.
        default_system: System type used when neither option is given.

    Returns:
        ManifestSelection for the run.

    Raises:
        UnknownSystemTypeError: If --system names an unknown preset.
        ValueError: If --manifests contains no names.
    """
    if manifests is not None:
        return ManifestSelection.from_names(manifests)
    if system is not None:
        return ManifestSelection(system_type=parse_system_type(system))
    return ManifestSelection(system_type=default_system)


def excluded_kinds(options: RunOptions) -> frozenset[EntryKind]:
    """Entry kinds left out of the merged manifest for these options."""
    if options.skip_mas:
        return frozenset({EntryKind.APP_STORE_APP})
    return frozenset()
