"""Run options shared by every component of one invocation."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RunOptions:
    """Immutable flags for a single craftbrew run.

    Attributes:
        dry_run: Report what would happen without mutating anything.
        force: Skip confirmation prompts for destructive actions.
        verbose: Emit debug output and pass --verbose to the backend.
        quiet: Suppress non-error console output.
        skip_mas: Leave App Store entries out of the merged manifest.
    """

    dry_run: bool = False
    force: bool = False
    verbose: bool = False
    quiet: bool = False
    skip_mas: bool = False
