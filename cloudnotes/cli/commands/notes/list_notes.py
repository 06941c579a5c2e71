"""List command for notes."""

import typer
from rich.console import Console
from rich.table import Table

from cloudnotes.cli.utils import auth
from cloudnotes.services.notes import NotesError

app = typer.Typer(help="List notes, most recently modified first")
console = Console()


@app.callback(invoke_without_command=True)
def main():
    """List notes, most recently modified first."""
    service = auth.get_note_service()

    try:
        notes = auth.run(service.list_notes())
    except NotesError:
        raise typer.Exit(1)

    if not notes:
        console.print("No notes found")
        return

    table = Table(title="Notes")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Modified")

    for note in notes:
        modified = (
            note.modified_at.strftime("%Y-%m-%d %H:%M") if note.modified_at else ""
        )
        table.add_row(note.id, note.title, modified)

    console.print(table)
