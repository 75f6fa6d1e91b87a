"""Main CLI application entry point.

Defines the Typer application: argument parsing, validation, dispatch to
the reconciliation engine, and ownership of the merged manifest's lifetime.
"""

import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from types import FrameType
from typing import Annotated

import typer

from craftbrew import __version__
from craftbrew.cli.display import print_run_report
from craftbrew.cli.types import SYSTEM_CHOICES, build_selection, excluded_kinds, get_backend
from craftbrew.core.config import CraftbrewConfig, load_config
from craftbrew.core.confirm import ConfirmationGate
from craftbrew.core.engine import ReconciliationEngine
from craftbrew.core.errors import (
    BackendOperationError,
    ConfigError,
    CraftbrewError,
    ManifestNotFoundError,
    UnknownSystemTypeError,
    UserCancelledError,
)
from craftbrew.core.loader import resolve_manifests
from craftbrew.core.manifest import open_merged_manifest
from craftbrew.core.paths import ensure_log_dir, get_run_log_path
from craftbrew.models.options import RunOptions
from craftbrew.models.plan import Command, RunReport
from craftbrew.utils.logs import configure_logging, log_success, shutdown_logging

logger = logging.getLogger(__name__)

# Exit status for Ctrl-C, following the shell convention 128 + SIGINT
EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="craftbrew",
    help="Idempotent Homebrew package management over composable manifests.",
    rich_markup_mode="rich",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


class TerminatedError(BaseException):
    """Raised from the SIGTERM handler so cleanup paths run.

    Attributes:
        exit_code: Process exit status (128 + signal number).
    """

    def __init__(self, signum: int) -> None:
        self.exit_code = 128 + signum
        super().__init__(f"Terminated by signal {signum}")


@contextmanager
def terminate_as_exception() -> Iterator[None]:
    """Translate SIGTERM into TerminatedError for the duration of the block."""

    def _handler(signum: int, _frame: FrameType | None) -> None:
        raise TerminatedError(signum)

    previous = signal.signal(signal.SIGTERM, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"craftbrew version {__version__}")
        raise typer.Exit()


def _validate_options(
    command: Command,
    system: str | None,
    manifests: str | None,
    output: Path | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Reject option combinations that make no sense.

    Raises:
        typer.BadParameter: On an invalid combination (exit status 2).
    """
    if system is not None and manifests is not None:
        raise typer.BadParameter(
            "--system and --manifests are mutually exclusive", param_hint="'--manifests'"
        )
    if manifests is not None and not manifests.strip(" ,"):
        raise typer.BadParameter("no manifest names given", param_hint="'--manifests'")
    if output is not None and command != Command.BACKUP:
        raise typer.BadParameter(
            "--output is only valid with the backup command", param_hint="'--output'"
        )
    if verbose and quiet:
        raise typer.BadParameter(
            "--verbose and --quiet are mutually exclusive", param_hint="'--quiet'"
        )


def _start_logging(options: RunOptions, config: CraftbrewConfig, started_at: datetime) -> None:
    """Configure console logging and, where possible, the per-run log file."""
    try:
        log_dir = ensure_log_dir(config.effective_log_dir)
    except RuntimeError as e:
        configure_logging(options)
        logger.warning("Logging to console only: %s", e)
        return

    log_path = get_run_log_path(started_at, log_dir)
    configure_logging(options, log_path)
    logger.debug("Log file: %s", log_path)


def _dispatch(
    command: Command,
    engine: ReconciliationEngine,
    config: CraftbrewConfig,
    system: str | None,
    manifests: str | None,
    manifest_dir: Path | None,
    output: Path | None,
) -> RunReport:
    """Resolve, merge and run one command.

    The merged manifest is deleted when this function exits, whatever
    the outcome.
    """
    if not command.uses_manifests:
        return engine.run(command, None, output)

    selection = build_selection(system, manifests, config.default_system)
    directory = manifest_dir or config.effective_manifest_dir
    logger.debug("System type: %s", selection.label)
    logger.debug("Manifest directory: %s", directory)

    paths = resolve_manifests(selection, directory, config.manifest_suffix)
    logger.debug("Manifests: %s", ",".join(str(p) for p in paths))

    with open_merged_manifest(
        paths,
        selection.label,
        exclude_kinds=excluded_kinds(engine.options),
    ) as merged:
        return engine.run(command, merged)


def _fail(message: str, *args: object, code: int = 1) -> typer.Exit:
    """Log a fatal error and build the matching exit."""
    logger.error(message, *args)
    return typer.Exit(code=code)


@app.command()
def main(
    command: Annotated[
        Command,
        typer.Argument(
            help="Operation to run: install, cleanup, sync, diff or backup.",
            case_sensitive=False,
            show_default=True,
        ),
    ] = Command.INSTALL,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Show what would be done without executing."),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompts."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress non-error output."),
    ] = False,
    system: Annotated[
        str | None,
        typer.Option("--system", help=f"System type ({SYSTEM_CHOICES})."),
    ] = None,
    manifests: Annotated[
        str | None,
        typer.Option("--manifests", help="Comma-separated list of specific manifests to use."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", help="Output file for the backup command."),
    ] = None,
    manifest_dir: Annotated[
        Path | None,
        typer.Option(
            "--manifest-dir",
            help="Directory bare manifest names are resolved against.",
            file_okay=False,
        ),
    ] = None,
    skip_mas: Annotated[
        bool,
        typer.Option("--skip-mas", help="Skip Mac App Store entries."),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Idempotent Homebrew package management.

    Merges the manifests of a system type (or an explicit list) into one
    temporary manifest and reconciles the installed packages against it.

    Examples:
        craftbrew --system base              # Install base packages only
        craftbrew sync --dry-run             # Preview a full sync
        craftbrew cleanup --system dev -v    # Development environment cleanup
        craftbrew diff --system all          # Show differences for all packages
        craftbrew backup --output ~/my.brewfile
        craftbrew --manifests base.brewfile,dev.brewfile
    """
    _validate_options(command, system, manifests, output, verbose, quiet)

    started_at = datetime.now()
    try:
        config = load_config()
    except ConfigError as e:
        configure_logging(RunOptions(verbose=verbose, quiet=quiet))
        logger.error("%s", e)
        shutdown_logging()
        raise typer.Exit(code=1) from e

    options = RunOptions(
        dry_run=dry_run,
        force=force,
        verbose=verbose,
        quiet=quiet,
        skip_mas=skip_mas or config.skip_mas,
    )
    _start_logging(options, config, started_at)

    try:
        logger.info("Starting craftbrew v%s", __version__)
        logger.debug("Command: %s", command.value)
        if options.dry_run:
            logger.info("DRY RUN MODE - No changes will be made")

        engine = ReconciliationEngine(get_backend(), ConfirmationGate(), options)

        try:
            with terminate_as_exception():
                report = _dispatch(
                    command, engine, config, system, manifests, manifest_dir, output
                )
        except UserCancelledError:
            logger.info("Nothing was removed")
            return
        except UnknownSystemTypeError as e:
            raise _fail("%s (flag: --system, command: %s)", e, command.value) from e
        except ManifestNotFoundError as e:
            raise _fail("%s (command: %s)", e, command.value) from e
        except BackendOperationError as e:
            detail = f" (backend command: {' '.join(e.command)})" if e.command else ""
            raise _fail("%s failed: %s%s", command.value, e, detail) from e
        except CraftbrewError as e:
            raise _fail("%s failed: %s", command.value, e) from e
        except KeyboardInterrupt as e:
            raise _fail("Interrupted", code=EXIT_INTERRUPTED) from e
        except typer.Abort as e:
            raise _fail("Aborted at the confirmation prompt", code=EXIT_INTERRUPTED) from e
        except TerminatedError as e:
            raise _fail("%s", e, code=e.exit_code) from e

        print_run_report(report, quiet=options.quiet)
        if not report.changed:
            logger.info("No changes were made")
        log_success(logger, "Operation completed successfully")
    finally:
        shutdown_logging()


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
