"""Delete command for notes."""

import typer
from rich.console import Console

from cloudnotes.cli.utils import auth
from cloudnotes.services.notes import NotesError

app = typer.Typer(help="Delete a note and all of its records")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    note_id: str = typer.Argument(..., help="ID of the note to delete"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Delete without confirmation"
    ),
):
    """Delete a note and all of its records."""
    if not force:
        confirmed = typer.confirm(f"Are you sure you want to delete note {note_id}?")
        if not confirmed:
            console.print("Deletion cancelled")
            return

    service = auth.get_note_service()

    try:
        auth.run(service.delete_note(note_id))
    except NotesError:
        raise typer.Exit(1)
