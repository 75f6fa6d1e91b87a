"""Confirmation gate for destructive actions."""

import logging
from collections.abc import Callable

import typer

logger = logging.getLogger(__name__)

# Signature of typer.confirm as used here: (text, default=...) -> bool
PromptFn = Callable[..., bool]


class ConfirmationGate:
    """Single yes/no gate in front of destructive actions.

    The default answer is "no". In a non-interactive context without
    force the prompt blocks waiting for input.

    Example:
        >>> gate = ConfirmationGate()
        >>> if gate.confirm("remove 3 packages not in manifests", 3, force=False):
        ...     ...
    """

    def __init__(self, prompt: PromptFn | None = None) -> None:
        """Initialize the gate.

        Args:
            prompt: Function asking the question. Defaults to typer.confirm.
        """
        self._prompt = prompt or typer.confirm

    def confirm(self, description: str, count: int, force: bool = False) -> bool:
        """Ask the user to approve a destructive action.

        Args:
            description: What will happen, e.g. "remove 3 packages".
            count: Number of items affected.
            force: If True, approve without prompting.

        Returns:
            True if the action may proceed.
        """
        if force:
            logger.debug("Confirmation skipped (--force): %s", description)
            return True

        logger.warning("This will %s", description)
        answer = bool(
            self._prompt(
                f"Are you sure you want to continue with {count} item(s)?",
                default=False,
            )
        )
        logger.debug("Confirmation answer for '%s': %s", description, answer)
        return answer
