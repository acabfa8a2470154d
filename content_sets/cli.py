"""
Content set CLI.

Commands for building, saving, duplicating and reviewing content sets from
editable-model JSON files.

Examples:
    content-sets init-db
    content-sets build lesson.json
    content-sets save lesson.json --intermediate
    content-sets duplicate <id> <id>
    content-sets status <id> review-complete
    content-sets recompute-flags --status pre-review --apply
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from config import get_settings
from content_sets.db import init_db
from content_sets.exceptions import ContentSetError
from content_sets.graph import ContentStatus
from content_sets.service import ContentSetService, SaveResult

app = typer.Typer(
    name="content-sets",
    help="Build, save, duplicate and review content sets",
    no_args_is_help=True,
)

console = Console()


def get_service() -> ContentSetService:
    """Service over the configured database."""
    return ContentSetService()


def _read_payload(path: Path) -> dict[str, Any]:
    if not path.exists():
        console.print(f"[red]Error: File not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: {path} is not valid JSON: {e}[/red]")
        raise typer.Exit(1)


def _print_save(result: SaveResult) -> None:
    if not result.success:
        console.print(f"[red]{result.message}[/red]")
        for violation in result.violations:
            console.print(f"  [yellow]-[/yellow] {violation}")
        raise typer.Exit(1)
    console.print(f"[green]{result.message}[/green]")
    console.print(f"  Content set: {result.content_set_id}")
    if result.status is not None:
        console.print(f"  Status: {result.status.value}")
    if result.version is not None:
        console.print(f"  Version: {result.version}")


# =============================================================================
# Logging
# =============================================================================


@app.callback()
def configure(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug detail")):
    """Configure logging sinks."""
    settings = get_settings()
    level = "DEBUG" if verbose else settings.log_level
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=level, rotation="10 MB", retention=5, encoding="utf-8")


# =============================================================================
# Commands
# =============================================================================


@app.command("init-db")
def init_database():
    """Create the content set tables."""
    init_db()
    console.print("[green]Database tables initialized[/green]")


@app.command("build")
def build(path: Path = typer.Argument(..., help="Editable model JSON file")):
    """Build a graph from a JSON file and report counts and validation, without saving."""
    service = get_service()
    try:
        graph = service.build_graph(_read_payload(path))
    except ContentSetError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    counts = graph.counts()
    table = Table(title=graph.content_set.title or "(untitled)")
    table.add_column("Collection", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Passages", str(len(graph.passages)))
    table.add_row("Paragraphs", str(counts.total_passages))
    table.add_row("Vocabulary terms", str(counts.total_vocabulary_terms))
    table.add_row("Vocabulary questions", str(counts.total_vocabulary_questions))
    table.add_row("Paragraph questions", str(counts.total_paragraph_questions))
    table.add_row("Comprehensive questions", str(counts.total_comprehensive_questions))
    console.print(table)

    report = service.validate(graph)
    if report.ok:
        console.print("[green]Ready for final save[/green]")
    else:
        console.print(f"[yellow]{len(report.violations)} violation(s) block a final save:[/yellow]")
        for violation in report.violations:
            console.print(f"  [yellow]-[/yellow] {violation}")


@app.command("save")
def save(
    path: Path = typer.Argument(..., help="Editable model JSON file"),
    intermediate: bool = typer.Option(
        False, "--intermediate", "-i", help="Save passages and terms only, skipping validation"
    ),
):
    """Save a content set (final by default)."""
    payload = _read_payload(path)
    service = get_service()
    result = service.save_intermediate(payload) if intermediate else service.save_final(payload)
    _print_save(result)


@app.command("update")
def update(
    content_set_id: str = typer.Argument(..., help="Content set id"),
    path: Path = typer.Argument(..., help="Editable model JSON file"),
    expected_version: int = typer.Option(None, "--expected-version", help="Version the edit is based on"),
):
    """Replace the content of a stored content set."""
    result = get_service().update(content_set_id, _read_payload(path), expected_version=expected_version)
    _print_save(result)


@app.command("duplicate")
def duplicate(content_set_ids: list[str] = typer.Argument(..., help="Content set ids to copy")):
    """Copy content sets into new, independent sets."""
    result = get_service().duplicate(content_set_ids)

    table = Table(title=f"Duplicated {result.succeeded}/{result.attempted}")
    table.add_column("Source", style="cyan")
    table.add_column("Copy")
    for source_id in content_set_ids:
        table.add_row(source_id, result.copies.get(source_id, "-"))
    console.print(table)

    for error in result.errors:
        console.print(f"  [red]-[/red] {error}")
    if result.errors:
        raise typer.Exit(1)


@app.command("status")
def status(
    content_set_id: str = typer.Argument(..., help="Content set id"),
    new_status: str = typer.Argument(..., help="Status value or slug (e.g. review-complete)"),
    expected_version: int = typer.Option(None, "--expected-version", help="Version the change is based on"),
):
    """Set the review status of one content set."""
    try:
        result = get_service().set_status(content_set_id, new_status, expected_version=expected_version)
    except ContentSetError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    if not result.success:
        console.print(f"[red]{result.message}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]{result.message}[/green] (version {result.version})")


@app.command("batch-status")
def batch_status(
    new_status: str = typer.Argument(..., help="Status value or slug"),
    content_set_ids: list[str] = typer.Argument(..., help="Content set ids"),
):
    """Set one review status on many content sets."""
    try:
        result = get_service().batch_set_status(content_set_ids, new_status)
    except ContentSetError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"Status '{result.status.value}': {result.updated} updated, {result.failed} failed "
        f"of {result.attempted}"
    )
    for error in result.errors:
        console.print(f"  [red]-[/red] {error}")
    if result.errors:
        raise typer.Exit(1)


@app.command("delete")
def delete(content_set_id: str = typer.Argument(..., help="Content set id")):
    """Delete a pre-review content set and everything it owns."""
    result = get_service().delete(content_set_id)
    if not result.success:
        console.print(f"[red]{result.message}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]{result.message}[/green]")
    for table_name, removed in result.removed.items():
        console.print(f"  {table_name}: {removed}")


@app.command("recompute-flags")
def recompute_flags(
    statuses: list[str] = typer.Option(None, "--status", "-s", help="Only sets in this status (repeatable)"),
    session_start: int = typer.Option(None, "--session-start", help="First session number"),
    session_end: int = typer.Option(None, "--session-end", help="Last session number"),
    apply: bool = typer.Option(False, "--apply", help="Write the corrected flags (default: dry run)"),
    limit: int = typer.Option(15, "--limit", help="Changes to list"),
):
    """Re-derive the question flag of stored vocabulary terms."""
    session_range = None
    if session_start is not None or session_end is not None:
        if session_start is None or session_end is None:
            console.print("[red]Error: --session-start and --session-end go together[/red]")
            raise typer.Exit(1)
        session_range = (session_start, session_end)

    try:
        result = get_service().recompute_question_flags(
            statuses or None, session_range=session_range, dry_run=not apply
        )
    except ContentSetError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    mode = "Dry run" if result.dry_run else "Applied"
    console.print(
        f"{mode}: {len(result.changes)} of {result.terms_checked} term(s) "
        f"in {result.content_sets} content set(s) need a new flag"
    )
    if result.changes:
        table = Table()
        table.add_column("Term", style="cyan")
        table.add_column("Now")
        table.add_column("Should be")
        table.add_column("Reason")
        for change in result.changes[:limit]:
            table.add_row(change.term, str(change.current), str(change.should_be), change.reason)
        console.print(table)
    if not result.dry_run:
        console.print(f"[green]Updated {result.updated} term(s)[/green]")
    for error in result.errors:
        console.print(f"  [red]-[/red] {error}")
    if result.errors:
        raise typer.Exit(1)


@app.command("show")
def show(content_set_id: str = typer.Argument(..., help="Content set id")):
    """Show a stored content set and its collection sizes."""
    try:
        rows = get_service().load_graph(content_set_id)
    except ContentSetError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    header = rows["content_sets"][0]
    status_value = header["status"]
    try:
        status_label = f"{status_value} ({ContentStatus.parse(status_value).slug})"
    except ContentSetError:
        status_label = status_value

    table = Table(title=header["title"] or "(untitled)")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Id", header["id"])
    table.add_row("Status", status_label)
    table.add_row("Version", str(header["version"]))
    table.add_row("Subject", header["subject"] or "-")
    table.add_row("Grade", header["grade"] or "-")
    for table_name, table_rows in rows.items():
        if table_name != "content_sets":
            table.add_row(table_name, str(len(table_rows)))
    console.print(table)


def run() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    run()
