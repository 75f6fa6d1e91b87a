"""Rich display functions for plans and reports.

Provides table builders and summary printers for the diff output and
dry-run previews.
"""

from rich.table import Table

from craftbrew.models.entry import Entry
from craftbrew.models.plan import Command, OperationReport, Outcome, Plan, RunReport
from craftbrew.utils.formatting import console, create_entry_table, format_entry_row


def create_plan_table(entries: tuple[Entry, ...], title: str, style: str) -> Table:
    """Create a table listing the entries of one side of a plan.

    Args:
        entries: Entries to list.
        title: Table title.
        style: Theme style for package names ("added" or "removed").

    Returns:
        Rich Table with one row per entry.
    """
    table = create_entry_table(title, style=style)
    for entry in entries:
        table.add_row(*format_entry_row(entry))
    return table


def print_plan(plan: Plan, *, show_install: bool = True, show_remove: bool = True) -> None:
    """Print the install and/or remove side of a plan.

    Empty sides print "None" instead of a table.

    Args:
        plan: Plan to display.
        show_install: Include the packages to install.
        show_remove: Include the packages to remove.
    """
    sections: list[tuple[str, tuple[Entry, ...], str]] = []
    if show_install:
        sections.append(("Packages to install", plan.to_install, "added"))
    if show_remove:
        sections.append(("Packages to remove", plan.to_remove, "removed"))

    for title, entries, style in sections:
        if entries:
            console.print(create_plan_table(entries, title, style))
        else:
            console.print(f"[bold_header]{title}:[/] [muted]None[/]")


def print_plan_summary(plan: Plan) -> None:
    """Print a one-line count summary of a plan."""
    parts: list[str] = []
    if plan.to_install:
        parts.append(f"[added]{len(plan.to_install)} to install[/added]")
    if plan.to_remove:
        parts.append(f"[removed]{len(plan.to_remove)} to remove[/removed]")

    if parts:
        console.print(f"\nSummary: {', '.join(parts)}")
    else:
        console.print("\n[success]System is in sync with manifests.[/]")


def print_report(report: OperationReport, *, quiet: bool = False) -> None:
    """Print the user-facing result of one operation.

    Diff output is always printed. Dry-run previews are suppressed in
    quiet mode.

    Args:
        report: Operation report to display.
        quiet: Suppress non-essential output.
    """
    if report.plan is None or report.outcome != Outcome.PLANNED:
        return

    if report.command == Command.DIFF:
        print_plan(report.plan)
        print_plan_summary(report.plan)
        return

    if quiet:
        return

    print_plan(
        report.plan,
        show_install=report.command == Command.INSTALL,
        show_remove=report.command == Command.CLEANUP,
    )


def print_run_report(run_report: RunReport, *, quiet: bool = False) -> None:
    """Print every report of a run in execution order."""
    for report in run_report.reports:
        print_report(report, quiet=quiet)
