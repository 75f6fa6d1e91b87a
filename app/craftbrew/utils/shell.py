"""Shell execution utilities.

Provides subprocess execution for the package-manager backend.
"""

import shutil
import subprocess
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0


def run_command(args: list[str]) -> CommandResult:
    """Execute a command and capture its output.

    No timeout is applied; the call blocks until the command exits.

    Args:
        args: Command and arguments to execute.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        FileNotFoundError: If command executable is not found.
    """
    result = subprocess.run(args, capture_output=True, text=True, check=False)
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None


def run_interactive(args: list[str]) -> int:
    """Execute a command interactively, inheriting the terminal.

    Unlike run_command(), this does NOT capture stdout/stderr, so the
    backend's own progress output reaches the user's terminal directly.

    Args:
        args: Command and arguments to execute.

    Returns:
        Exit code of the command.

    Raises:
        OSError: If command cannot be executed.
    """
    return subprocess.run(args, check=False).returncode
