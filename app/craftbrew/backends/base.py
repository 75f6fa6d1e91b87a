"""Abstract base class for package-manager backends.

This module defines the Backend interface the reconciliation engine
drives. A backend owns all real installation, removal and state queries;
its dependency resolution and idempotence are opaque to craftbrew.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from craftbrew.core.errors import BackendOperationError
from craftbrew.models.entry import Entry


class Backend(ABC):
    """Abstract base class for all package-manager backends.

    Every mutating call is one atomic batch from craftbrew's point of view:
    it either succeeds or raises BackendOperationError, and nothing is
    retried or rolled back.

    Example:
        >>> backend = HomebrewBundleBackend()
        >>> if backend.is_available():
        ...     for entry in backend.installed_entries():
        ...         print(entry.ref)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short backend name used in log messages."""

    @property
    def install_hint(self) -> str | None:
        """Hint shown when the backend is missing."""
        return None

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the backend can be used on this system.

        Returns:
            True if the package manager is installed, False otherwise.
        """

    @abstractmethod
    def installed_entries(self) -> list[Entry]:
        """Query the currently installed state.

        Returns:
            Entries describing every installed, manifest-representable package.

        Raises:
            BackendOperationError: If the query fails.
        """

    @abstractmethod
    def install(self, manifest: Path, *, verbose: bool = False) -> None:
        """Install every entry of a manifest that is missing.

        Args:
            manifest: Manifest file to install from.
            verbose: Ask the backend for verbose output.

        Raises:
            BackendOperationError: If the backend reports failure.
        """

    @abstractmethod
    def cleanup(self, manifest: Path, *, verbose: bool = False) -> None:
        """Remove installed packages not referenced by a manifest.

        Args:
            manifest: Manifest file describing what must stay.
            verbose: Ask the backend for verbose output.

        Raises:
            BackendOperationError: If the backend reports failure.
        """

    @abstractmethod
    def dump(self, output: Path) -> None:
        """Serialize the installed state to a manifest file.

        Args:
            output: File to write; overwritten if it exists.

        Raises:
            BackendOperationError: If the backend reports failure.
        """

    def require_available(self) -> None:
        """Ensure the backend is usable.

        Raises:
            BackendOperationError: If the backend is not available.
        """
        if not self.is_available():
            msg = f"{self.name} is not available on this system"
            if self.install_hint:
                msg += f". {self.install_hint}"
            raise BackendOperationError("check", msg)
