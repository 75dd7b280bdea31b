"""Typer-based CLI for notecal."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import CalendarConfig
from .errors import EventError, MoveIncomplete
from .events import EventService
from .identifiers import decode_event_id
from .journal import read_journal_tail
from .models.event import EventType
from .paths import VaultPaths

app = typer.Typer(
    name="notecal",
    help="notecal - Calendar events kept as lines in daily notes",
    add_completion=False,
)

console = Console()

DATETIME_FORMATS = ["%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M"]
VAULT_HELP = "Path to vault directory (default: NOTECAL_VAULT env or auto-discovery)"
FILE_HELP = (
    "Daily note holding the event, relative to the vault (default: note of the id's day;"
    " required for dated tasks kept in another day's note)"
)


@app.callback()
def main_callback(
    debug: bool = typer.Option(False, "--debug", help="Show debug logging"),
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(vault_path: Optional[str]) -> CalendarConfig:
    try:
        return CalendarConfig.from_env(cli_vault_path=vault_path)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def _service(vault_path: Optional[str]) -> tuple[CalendarConfig, EventService]:
    config = _load_config(vault_path)
    return config, EventService.from_config(config)


def _report(error: EventError) -> None:
    console.print(f"[red]Error ({error.kind}): {escape(error.message)}[/red]")
    for key, value in error.details.items():
        if key == "lines":
            continue
        console.print(f"  [dim]{key}:[/dim] {escape(str(value))}")
    if isinstance(error, MoveIncomplete):
        console.print("[yellow]Removed lines (re-add them by hand):[/yellow]")
        for line in error.details.get("lines", []):
            console.print(f"  {line}", markup=False)


def _note_path(config: CalendarConfig, service: EventService, identifier: str, file: Optional[str]) -> Path:
    """Daily note holding ``identifier``: ``--file`` or the note of the id's day.

    Ids of dated tasks carry their start date, so a task kept in another
    day's note needs ``--file``.
    """
    if file:
        path = Path(file)
        return path if path.is_absolute() else config.vault_path / path
    day = decode_event_id(identifier).day
    path = service.store.resolve_for_date(day)
    if path is None:
        console.print(f"[red]Error: No daily note for {day.isoformat()}; pass --file[/red]")
        raise typer.Exit(code=1)
    return path


@app.command()
def init(
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Rewrite config.toml even if it exists",
    ),
):
    """Create the daily notes folder and .notecal/ state in a vault.

    This command is idempotent - it will not overwrite existing notes.
    """
    try:
        config = CalendarConfig.from_env(cli_vault_path=vault_path, mode="create_ok")
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    paths = VaultPaths.from_config(config)

    if paths.system.exists():
        console.print(f"[yellow]Vault already initialized at:[/yellow] {config.vault_path}")
    else:
        console.print(f"[green]Initializing notecal in:[/green] {config.vault_path}")

    directories_created = []
    for directory in paths.get_all_directories():
        if not directory.exists():
            directory.mkdir(parents=True, exist_ok=True)
            directories_created.append(directory)

    if directories_created:
        console.print(f"[green]+[/green] Created {len(directories_created)} directories")
    else:
        console.print("[dim]All directories already exist[/dim]")

    if force or not paths.config_file.exists():
        paths.config_file.write_text(config.to_toml_str(), encoding="utf-8")
        console.print(f"[green]+[/green] Wrote config: {paths.config_file}")
    else:
        console.print(f"[dim]Config already exists: {paths.config_file}[/dim]")

    if not paths.journal_file.exists():
        paths.journal_file.touch()
        console.print(f"[green]+[/green] Created journal: {paths.journal_file}")


@app.command("list")
def list_events(
    day: str = typer.Option(None, "--day", "-d", help="Only this day (YYYY-MM-DD)"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """List events found in daily notes."""
    config, service = _service(vault_path)
    try:
        target_day = datetime.strptime(day, "%Y-%m-%d").date() if day else None
    except ValueError:
        console.print(f"[red]Error: Invalid day '{day}', expected YYYY-MM-DD[/red]")
        raise typer.Exit(code=1)

    try:
        events = service.list_events(target_day)
    except EventError as e:
        _report(e)
        raise typer.Exit(code=1)

    if not events:
        console.print("[dim]No events found[/dim]")
        return

    table = Table(title=f"{len(events)} Event(s)")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("When", style="green")
    table.add_column("Type", style="magenta")
    table.add_column("Title")
    table.add_column("Note", style="dim")

    for event in events:
        if event.all_day:
            when = event.start.strftime("%Y-%m-%d")
            if event.end.date() != event.start.date():
                when += f" → {event.end:%Y-%m-%d}"
        else:
            when = f"{event.start:%Y-%m-%d %H:%M}-{event.end:%H:%M}"
        note = event.path.relative_to(config.vault_path).as_posix() if event.path else "-"
        table.add_row(event.id, when, event.event_type.value, escape(event.title), note)

    console.print(table)


@app.command()
def add(
    title: str = typer.Argument(..., help="Event title"),
    start: datetime = typer.Option(..., "--start", "-s", formats=DATETIME_FORMATS, help="Start (YYYY-MM-DD HH:MM)"),
    end: datetime = typer.Option(..., "--end", "-e", formats=DATETIME_FORMATS, help="End (YYYY-MM-DD HH:MM)"),
    event_type: EventType = typer.Option(EventType.DEFAULT, "--type", "-t", help="Record type"),
    notes: str = typer.Option(None, "--notes", "-n", help="Notes placed under the event"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Add an event to the daily note of its start day."""
    _, service = _service(vault_path)
    try:
        event = service.create_event(title, start, end, event_type, notes)
    except EventError as e:
        _report(e)
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Added event:[/green] {escape(event.title)}")
    console.print(f"  ID:   {event.id}")
    console.print(f"  Note: {event.path}")


@app.command()
def edit(
    identifier: str = typer.Argument(..., help="Event id"),
    original: str = typer.Option(..., "--original", "-o", help="Current event title"),
    title: str = typer.Option(None, "--title", help="New title (default: keep)"),
    start: datetime = typer.Option(..., "--start", "-s", formats=DATETIME_FORMATS, help="Start (YYYY-MM-DD HH:MM)"),
    end: datetime = typer.Option(..., "--end", "-e", formats=DATETIME_FORMATS, help="End (YYYY-MM-DD HH:MM)"),
    event_type: EventType = typer.Option(None, "--type", "-t", help="Record type (default: keep)"),
    notes: str = typer.Option(None, "--notes", "-n", help="Replace notes ('' removes them)"),
    file: str = typer.Option(None, "--file", "-f", help=FILE_HELP),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Rewrite an event. Changing the start day moves it to that day's note."""
    config, service = _service(vault_path)
    try:
        path = _note_path(config, service, identifier, file)
        event = service.update_event(
            identifier, path, original, title or original, event_type, start, end, notes
        )
    except EventError as e:
        _report(e)
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Updated event:[/green] {escape(event.title)}")
    console.print(f"  ID:   {event.id}")
    console.print(f"  Note: {event.path}")


@app.command()
def move(
    identifier: str = typer.Argument(..., help="Event id"),
    start: datetime = typer.Option(..., "--start", "-s", formats=DATETIME_FORMATS, help="New start"),
    end: datetime = typer.Option(..., "--end", "-e", formats=DATETIME_FORMATS, help="New end"),
    title: str = typer.Option(None, "--title", help="Event title, tried first when locating it"),
    file: str = typer.Option(None, "--file", "-f", help=FILE_HELP),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Reschedule an event, keeping its title, type and notes."""
    config, service = _service(vault_path)
    try:
        path = _note_path(config, service, identifier, file)
        event = service.move_event(identifier, path, start, end, title)
    except EventError as e:
        _report(e)
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Moved event:[/green] {escape(event.title)}")
    console.print(f"  ID:   {event.id}")
    console.print(f"  Note: {event.path}")


@app.command()
def toggle(
    identifier: str = typer.Argument(..., help="Event id"),
    title: str = typer.Option(None, "--title", help="Event title, tried first when locating it"),
    file: str = typer.Option(None, "--file", "-f", help=FILE_HELP),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Mark a todo as done, anything else as todo."""
    config, service = _service(vault_path)
    try:
        path = _note_path(config, service, identifier, file)
        event = service.toggle_event(identifier, path, title)
    except EventError as e:
        _report(e)
        raise typer.Exit(code=1)

    console.print(f"[green]{escape(event.title)}[/green] is now [magenta]{event.event_type.value}[/magenta]")


@app.command()
def delete(
    identifier: str = typer.Argument(..., help="Event id"),
    title: str = typer.Option(None, "--title", help="Event title, tried first when locating it"),
    file: str = typer.Option(None, "--file", "-f", help=FILE_HELP),
    hard: bool = typer.Option(False, "--hard", help="Do not keep a copy in the delete ledger"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Delete an event and its notes from a daily note."""
    config, service = _service(vault_path)
    try:
        path = _note_path(config, service, identifier, file)
        result = service.delete_event(identifier, path, title, soft=not hard)
    except EventError as e:
        _report(e)
        raise typer.Exit(code=1)

    console.print(f"[green]Deleted lines {result.start}-{result.end}[/green] from {result.path}")
    console.print(f"  [dim]Located by:[/dim] {result.strategy}")
    for line in result.removed_lines:
        console.print(f"  - {line}", markup=False)
    if result.ledger_id:
        console.print(f"  Ledger ID: {result.ledger_id}")


trash_app = typer.Typer(help="Delete ledger commands")
app.add_typer(trash_app, name="trash")


@trash_app.command("list")
def trash_list(
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Show soft-deleted events."""
    _, service = _service(vault_path)
    entries = service.list_deleted()

    if not entries:
        console.print("[dim]Delete ledger is empty[/dim]")
        return

    table = Table(title=f"{len(entries)} Deleted Event(s)")
    table.add_column("Ledger ID", style="cyan", no_wrap=True)
    table.add_column("Deleted", style="yellow")
    table.add_column("Content")

    for entry in entries:
        table.add_row(entry.id, entry.deleted_at.strftime("%Y-%m-%d %H:%M:%S"), escape(entry.content))

    console.print(table)


@trash_app.command("restore")
def trash_restore(
    ledger_id: str = typer.Argument(..., help="Ledger id from 'notecal trash list'"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Put a soft-deleted event back into its daily note."""
    _, service = _service(vault_path)
    try:
        result = service.restore_deleted(ledger_id)
    except EventError as e:
        _report(e)
        raise typer.Exit(code=1)

    if result.created_document:
        console.print(f"[green]+[/green] Created daily note {result.path}")
    console.print(f"[green]Restored:[/green] {escape(result.restored_line)}")
    console.print(f"  Note: {result.path} (line {result.inserted_at})")


@trash_app.command("purge")
def trash_purge(
    ledger_id: str = typer.Argument(..., help="Ledger id from 'notecal trash list'"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Remove a soft-deleted event for good."""
    _, service = _service(vault_path)
    try:
        entry = service.purge_deleted(ledger_id)
    except EventError as e:
        _report(e)
        raise typer.Exit(code=1)

    console.print(f"[green]Purged:[/green] {escape(entry.content)}")


journal_app = typer.Typer(help="Journal commands")
app.add_typer(journal_app, name="journal")


@journal_app.command("tail")
def journal_tail(
    n: int = typer.Option(
        20,
        "--n",
        help="Number of recent entries to display",
    ),
    full: bool = typer.Option(
        False,
        "--full",
        help="Show full payloads with JSON pretty-print",
    ),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Display the last N mutations recorded in the journal."""
    config = _load_config(vault_path)
    paths = VaultPaths.from_config(config)

    entries = read_journal_tail(paths.journal_file, n=n)
    if not entries:
        console.print("[dim]No entries in journal[/dim]")
        return

    if full:
        console.print(f"[bold]Last {len(entries)} Journal Entries[/bold]\n")
        for i, entry in enumerate(entries, 1):
            console.print(f"[cyan]Entry {i}/{len(entries)}[/cyan]")
            console.print(f"  [dim]Run ID:[/dim]      {entry.run_id}")
            console.print(f"  [dim]Timestamp:[/dim]   {entry.ts.strftime('%Y-%m-%d %H:%M:%S')} UTC")
            console.print(f"  [dim]Type:[/dim]        [magenta]{entry.event_type}[/magenta]")
            console.print(f"  [dim]Reference:[/dim]   {entry.event_ref or '-'}")
            console.print("  [dim]Payload:[/dim]")
            for line in json.dumps(entry.payload, indent=2, ensure_ascii=False).split("\n"):
                console.print(f"    {line}", markup=False)
            console.print()
        return

    table = Table(title=f"Last {len(entries)} Journal Entries")
    table.add_column("Timestamp (UTC)", style="cyan", no_wrap=True)
    table.add_column("Type", style="magenta")
    table.add_column("Reference", style="yellow")
    table.add_column("Payload", style="dim")

    for entry in entries:
        payload_str = str(entry.payload)
        if len(payload_str) > 60:
            payload_str = payload_str[:57] + "..."
        table.add_row(entry.ts.strftime("%Y-%m-%d %H:%M:%S"), entry.event_type, entry.event_ref or "-", escape(payload_str))

    console.print(table)


@app.command()
def version():
    """Show notecal version."""
    from . import __version__
    console.print(f"notecal v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
