"""Run logging: leveled console output mirrored to a per-run log file.

Every module logs through ``logging.getLogger(__name__)``. This module
attaches two handlers to the ``craftbrew`` logger for the duration of a
run: a console handler that renders ``[ERROR]``/``[WARN]``/``[INFO]``/
``[DEBUG]``/``[✓]`` prefixes through the themed Rich consoles, and a file
handler that records every message with a timestamp.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from craftbrew.models.options import RunOptions
from craftbrew.utils.formatting import console, err_console

ROOT_LOGGER = "craftbrew"

# Between INFO (20) and WARNING (30)
SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

FILE_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_CONSOLE_PREFIXES: dict[int, tuple[str, str]] = {
    logging.ERROR: ("error", "[ERROR]"),
    logging.WARNING: ("warning", "[WARN]"),
    SUCCESS: ("success", "[✓]"),
    logging.INFO: ("info", "[INFO]"),
    logging.DEBUG: ("debug", "[DEBUG]"),
}


class ConsoleHandler(logging.Handler):
    """Render log records on the themed Rich consoles.

    ERROR and WARNING records go to stderr, everything else to stdout.
    """

    def __init__(
        self,
        level: int = logging.INFO,
        out: Console | None = None,
        err: Console | None = None,
    ) -> None:
        super().__init__(level)
        self._out = out or console
        self._err = err or err_console

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            style, prefix = _prefix_for(record.levelno)
            target = self._err if record.levelno >= logging.WARNING else self._out
            target.print(f"[{style}]{escape(prefix)}[/] {escape(message)}", highlight=False)
        except Exception:
            self.handleError(record)


def _prefix_for(levelno: int) -> tuple[str, str]:
    """Pick the console style and prefix for a log level."""
    for threshold in (logging.ERROR, logging.WARNING, SUCCESS, logging.INFO):
        if levelno >= threshold:
            return _CONSOLE_PREFIXES[threshold]
    return _CONSOLE_PREFIXES[logging.DEBUG]


def console_level(options: RunOptions) -> int:
    """Console threshold for the given options.

    Args:
        options: Run options.

    Returns:
        DEBUG when verbose, ERROR when quiet, INFO otherwise.
    """
    if options.verbose:
        return logging.DEBUG
    if options.quiet:
        return logging.ERROR
    return logging.INFO


def configure_logging(options: RunOptions, log_path: Path | None = None) -> logging.Logger:
    """Attach console and file handlers to the craftbrew logger.

    Previously attached handlers are closed and replaced, so repeated runs
    in one process (tests) do not duplicate output.

    Args:
        options: Run options controlling console verbosity.
        log_path: Per-run log file. If None, only console output is configured.

    Returns:
        The configured craftbrew logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    shutdown_logging()

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    logger.addHandler(ConsoleHandler(level=console_level(options)))

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def shutdown_logging() -> None:
    """Close and detach all handlers from the craftbrew logger."""
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def log_success(logger: logging.Logger, message: str, *args: object) -> None:
    """Log a message at the SUCCESS level.

    Args:
        logger: Logger to emit on.
        message: Format string.
        *args: Arguments for the format string.
    """
    logger.log(SUCCESS, message, *args)
