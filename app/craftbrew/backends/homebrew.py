"""Homebrew bundle backend implementation.

Drives ``brew bundle`` for installation, cleanup and state dumps.
"""

import logging
from pathlib import Path

from craftbrew.backends.base import Backend
from craftbrew.core.errors import BackendOperationError
from craftbrew.models.entry import Entry, parse_entries
from craftbrew.utils.shell import command_exists, run_command, run_interactive

logger = logging.getLogger(__name__)


class HomebrewBundleBackend(Backend):
    """Backend for Homebrew using the bundle subcommand.

    Install and cleanup pass brew's own output through to the terminal;
    no timeout is enforced on any call.

    Attributes:
        brew: Name or path of the brew executable.
    """

    def __init__(self, brew: str = "brew") -> None:
        """Initialize the backend.

        Args:
            brew: Name or path of the brew executable.
        """
        self.brew = brew

    @property
    def name(self) -> str:
        """Return 'Homebrew' as the backend name."""
        return "Homebrew"

    @property
    def install_hint(self) -> str:
        """Point the user at the Homebrew installer."""
        return "Install Homebrew from: https://brew.sh"

    def is_available(self) -> bool:
        """Check if brew is on PATH."""
        return command_exists(self.brew)

    def installed_entries(self) -> list[Entry]:
        """Query installed state with ``brew bundle dump --file=-``.

        Returns:
            Entries for installed taps, formulae, casks, App Store apps
            and editor extensions.

        Raises:
            BackendOperationError: If brew fails.
        """
        args = [self.brew, "bundle", "dump", "--file=-"]
        logger.debug("Executing: %s", " ".join(args))
        try:
            result = run_command(args)
        except OSError as e:
            raise BackendOperationError("query", f"Failed to run brew: {e}", command=args) from e

        if not result.success:
            msg = f"brew bundle dump failed: {result.stderr.strip() or 'unknown error'}"
            raise BackendOperationError(
                "query", msg, command=args, returncode=result.returncode
            )

        return parse_entries(result.stdout)

    def install(self, manifest: Path, *, verbose: bool = False) -> None:
        """Install missing entries with ``brew bundle install``."""
        args = [self.brew, "bundle", "install", "--file", str(manifest)]
        if verbose:
            args.append("--verbose")
        self._run_passthrough("install", args)

    def cleanup(self, manifest: Path, *, verbose: bool = False) -> None:
        """Remove unlisted packages with ``brew bundle cleanup --force``."""
        args = [self.brew, "bundle", "cleanup", "--file", str(manifest), "--force"]
        if verbose:
            args.append("--verbose")
        self._run_passthrough("cleanup", args)

    def dump(self, output: Path) -> None:
        """Write installed state with ``brew bundle dump --force``."""
        args = [self.brew, "bundle", "dump", "--file", str(output), "--force"]
        logger.debug("Executing: %s", " ".join(args))
        try:
            result = run_command(args)
        except OSError as e:
            raise BackendOperationError("dump", f"Failed to run brew: {e}", command=args) from e

        if not result.success:
            msg = f"brew bundle dump failed: {result.stderr.strip() or 'unknown error'}"
            raise BackendOperationError("dump", msg, command=args, returncode=result.returncode)

    def _run_passthrough(self, operation: str, args: list[str]) -> None:
        """Run a mutating brew command with output passed through.

        Args:
            operation: Operation name for error reporting.
            args: Full command line.

        Raises:
            BackendOperationError: If brew cannot be started or exits non-zero.
        """
        logger.debug("Executing: %s", " ".join(args))
        try:
            returncode = run_interactive(args)
        except OSError as e:
            raise BackendOperationError(
                operation, f"Failed to run brew: {e}", command=args
            ) from e

        if returncode != 0:
            msg = f"brew bundle {operation} failed with exit code {returncode}"
            raise BackendOperationError(operation, msg, command=args, returncode=returncode)
