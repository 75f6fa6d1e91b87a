"""Error taxonomy for craftbrew.

Every failure the CLI reports is one of these exceptions. All of them
derive from CraftbrewError so callers can catch the family at once.
"""


class CraftbrewError(Exception):
    """Base exception for craftbrew errors."""


class ManifestNotFoundError(CraftbrewError):
    """Raised when a named manifest file does not exist.

    Attributes:
        path: The path that was looked up.
    """

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"Manifest not found: {path}")


class UnknownSystemTypeError(CraftbrewError):
    """Raised when a system type is outside the recognized presets.

    Attributes:
        value: The rejected system type string.
    """

    def __init__(self, value: str, valid: list[str] | None = None) -> None:
        self.value = value
        msg = f"Unknown system type: {value}"
        if valid:
            msg += f" (expected one of: {', '.join(valid)})"
        super().__init__(msg)


class BackendOperationError(CraftbrewError):
    """Raised when a backend install/cleanup/dump call fails.

    The whole batch is reported failed; nothing is retried or rolled back.

    Attributes:
        operation: Backend operation name (install, cleanup, dump, query).
        command: Command line that was executed, if any.
        returncode: Exit code of the backend process, if known.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        *,
        command: list[str] | None = None,
        returncode: int | None = None,
    ) -> None:
        self.operation = operation
        self.command = command
        self.returncode = returncode
        super().__init__(message)


class UserCancelledError(CraftbrewError):
    """Raised when the user declines a destructive action.

    This is not a failure: the CLI exits with status 0.
    """


class ManifestWriteError(CraftbrewError):
    """Raised when the merged manifest cannot be written."""


class ConfigError(CraftbrewError):
    """Raised when the configuration file is unreadable or invalid."""
