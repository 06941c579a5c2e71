"""Check command for checklist records."""

import typer
from rich.console import Console

from cloudnotes.cli.utils import auth
from cloudnotes.cli.utils.notes import record_line
from cloudnotes.services.notes import NotesError

app = typer.Typer(help="Check or uncheck a checklist record")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    note_id: str = typer.Argument(..., help="ID of the note"),
    record_id: str = typer.Argument(..., help="ID of the record (see 'notes show')"),
    uncheck: bool = typer.Option(False, "--uncheck", help="Clear the checkmark"),
):
    """Check or uncheck a checklist record."""
    service = auth.get_note_service()

    try:
        note = auth.run(service.load_note(note_id))
        record = next((r for r in note.records if r.id == record_id), None)
        if record is None:
            console.print(f"[bold red]Error:[/bold red] Record not found: {record_id}")
            raise typer.Exit(1)
        updated = auth.run(service.set_checked(note_id, record, not uncheck))
    except NotesError:
        raise typer.Exit(1)

    console.print(record_line(updated))
