"""deadwood CLI - find and remove unused declarations in TypeScript projects."""
import logging
import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from .analyzer.detector import UnusedCodeDetector
from .analyzer.project_loader import ProjectConfigError
from .analyzer.session import UnusedItem
from .config import __version__, get_config
from .reaper.pruner import DeadCodePruner, PruneOptions
from .report import build_report, group_by_kind, write_report
from .utils import SafeConsole, configure_logging

app = typer.Typer(
    name="deadwood",
    help="Find and remove unused declarations in TypeScript/JavaScript projects",
    add_completion=False
)
# Use SafeConsole for Windows Unicode compatibility
console = SafeConsole()


def display_path(file_path: str) -> str:
    """Path relative to the working directory when possible."""
    try:
        return os.path.relpath(file_path)
    except ValueError:
        # Different drive on Windows
        return file_path


def _resolve_project(project_path: str) -> Path:
    path = Path(project_path).resolve()
    if not path.exists():
        console.print(f"[bold red]Error:[/bold red] Project path does not exist: {escape(str(path))}")
        raise typer.Exit(1)
    return path


def run_analysis(project_path: Path, tsconfig: Optional[str], debug: bool = False):
    """Shared analysis logic for both audit and clean commands.

    Returns:
        (detector, unused items)
    """
    config = get_config(project_path)
    debug = debug or config.debug

    try:
        with console.status("[bold blue]Analyzing project...[/bold blue]"):
            detector = UnusedCodeDetector.from_path(
                project_path, tsconfig, heuristics=config.heuristics(), debug=debug
            )
            unused = detector.analyze()
    except ProjectConfigError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    return detector, unused


def _print_summary(detector: UnusedCodeDetector, unused: List[UnusedItem]) -> None:
    stats = detector.session.stats()
    console.print("\n[bold yellow]Analysis Summary:[/bold yellow]")
    console.print(f"  Files analyzed: {len(detector.project.files)}")
    console.print(f"  Total declarations: {stats['declarations']}")
    console.print(f"  Total imports: {stats['imports']}")
    console.print(f"  Total exports: {stats['exports']}")
    console.print(f"  Total usages: {stats['usages']}")
    console.print(f"  Unused declarations: {len(unused)}")
    console.print()


def _unused_table(title: str, items: List[UnusedItem], show_reasons: bool) -> Table:
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("File", style="magenta", no_wrap=False)
    table.add_column("Line", style="green", justify="right")
    if show_reasons:
        table.add_column("Reason", style="yellow")

    for item in items:
        name = escape(item.name)
        if item.exported:
            name += " [bold red]\\[EXPORTED][/bold red]"
        row = [name, escape(display_path(item.file)), str(item.line)]
        if show_reasons:
            row.append(item.reason)
        table.add_row(*row)

    return table


def _log_level(debug: bool, quiet: bool) -> int:
    if debug:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


@app.command()
def audit(
    project_path: str = typer.Argument(".", help="Project root path to analyze"),
    tsconfig: Optional[str] = typer.Option(None, "--tsconfig", "-p", help="Path to tsconfig.json (default: nearest one)"),
    debug: bool = typer.Option(False, "--debug", help="Show per-declaration analysis traces"),
    show_reasons: bool = typer.Option(False, "--show-reasons", help="Show why each declaration is considered unused"),
    include_details: bool = typer.Option(False, "--include-details", help="Include the raw analysis tables in the report"),
    report: bool = typer.Option(True, "--report/--no-report", help="Write the JSON report into the project root"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
):
    """Scan a project and list unused declarations."""
    project_path = _resolve_project(project_path)
    config = get_config(project_path)
    configure_logging(_log_level(debug or config.debug, quiet))

    console.print(f"[bold blue]Analyzing project:[/bold blue] {escape(str(project_path))}\n")
    detector, unused = run_analysis(project_path, tsconfig, debug)

    _print_summary(detector, unused)

    if not unused:
        console.print("[bold green]✓ No unused code found![/bold green]")
    else:
        for kind, items in group_by_kind(unused).items():
            console.print(_unused_table(f"Unused {kind.upper()}S ({len(items)})", items, show_reasons))
            console.print()

    if report:
        data = build_report(project_path, unused, detector.session, include_details=include_details)
        report_path = write_report(data, project_path / config.report_name)
        console.print(f"[dim]Report written to {escape(str(report_path))}[/dim]")


@app.command()
def clean(
    project_path: str = typer.Argument(".", help="Project root path to clean"),
    tsconfig: Optional[str] = typer.Option(None, "--tsconfig", "-p", help="Path to tsconfig.json (default: nearest one)"),
    preserve_exports: bool = typer.Option(False, "--preserve-exports", help="Never remove exported declarations"),
    preserve_types: bool = typer.Option(False, "--preserve-types", help="Never remove types, interfaces or enums"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be removed without changing files"),
    backup: bool = typer.Option(True, "--backup/--no-backup", help="Back up every file before modifying it"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
):
    """Remove unused declarations from their source files."""
    project_path = _resolve_project(project_path)
    config = get_config(project_path)
    configure_logging(_log_level(config.debug, quiet=False))

    _, unused = run_analysis(project_path, tsconfig)

    options = PruneOptions(
        preserve_exports=preserve_exports,
        preserve_types=preserve_types,
        dry_run=dry_run,
        backup=backup,
    )
    pruner = DeadCodePruner(options, backup_dir=config.backup_path)
    plan = pruner.plan(unused)

    if plan.skipped:
        console.print(f"[dim]Keeping {len(plan.skipped)} declaration(s) (policy or not removable)[/dim]")

    if not plan.edits:
        console.print("[bold green]✓ Project is clean. Nothing to remove.[/bold green]")
        return

    table = Table(title="Declarations to Remove")
    table.add_column("Name", style="cyan")
    table.add_column("Kind", style="yellow")
    table.add_column("File", style="magenta", no_wrap=False)
    table.add_column("Line", style="green", justify="right")
    for edit in plan.edits:
        for item in edit.items:
            table.add_row(escape(item.name), item.kind, escape(display_path(item.file)), str(item.line))
    console.print(table)

    if dry_run:
        pruner.apply(plan)
        console.print("\n[bold blue]DRY RUN - No changes were made[/bold blue]")
        return

    if not yes:
        console.print("\n[bold yellow]⚠ Warning:[/bold yellow] This will modify source files in place.")
        if not typer.confirm("Proceed with cleanup?", default=False):
            console.print("[red]✗ Aborted[/red]")
            return

    try:
        written = pruner.apply(plan)
    except OSError as e:
        console.print(f"[bold red]✗ Cleanup failed, files restored:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(
        f"[bold green]✓ Removed {plan.removal_count} declaration(s) from {len(written)} file(s)[/bold green]"
    )
    if backup:
        console.print(f"[dim]Backups stored in {escape(str(config.backup_path))}[/dim]")


def _version_callback(value: bool):
    if value:
        console.print(f"deadwood {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True,
                                 help="Show the version and exit"),
):
    """deadwood - find and remove unused TypeScript/JavaScript declarations."""
    pass


if __name__ == "__main__":
    app()
