"""Create command for notes."""

from typing import List, Optional

import typer
from rich.console import Console

from cloudnotes.cli.utils import auth
from cloudnotes.cli.utils.notes import RECORD_HELP, parse_record_options
from cloudnotes.services.notes import Note, NotesError

app = typer.Typer(help="Create a new note")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    title: str = typer.Option(..., "--title", "-t", help="Title of the note"),
    record: Optional[List[str]] = typer.Option(
        None, "--record", "-r", help=RECORD_HELP
    ),
):
    """Create a new note."""
    records = parse_record_options(record)
    service = auth.get_note_service()

    try:
        saved = auth.run(service.save_note(Note(title=title), records))
    except NotesError:
        raise typer.Exit(1)

    console.print(f"Created note [bold]{saved.id}[/bold]")
