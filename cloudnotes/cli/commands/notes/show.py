"""Show command for notes."""

import typer
from rich.console import Console
from rich.markup import escape

from cloudnotes.cli.utils import auth
from cloudnotes.cli.utils.notes import record_line
from cloudnotes.services.notes import NotesError

app = typer.Typer(help="Show a note and its records")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    note_id: str = typer.Argument(..., help="ID of the note"),
    ids: bool = typer.Option(True, help="Show record IDs (used by 'notes check')"),
):
    """Show a note and its records."""
    service = auth.get_note_service()

    try:
        note = auth.run(service.load_note(note_id))
    except NotesError:
        raise typer.Exit(1)

    console.print(f"[bold]{escape(note.title)}[/bold]")
    if note.modified_at:
        console.print(f"[dim]Modified {note.modified_at:%Y-%m-%d %H:%M %Z}[/dim]")
    if not note.records:
        console.print("[dim](no records)[/dim]")
    for record in note.records:
        console.print(record_line(record, show_id=ids))
