"""Export command for notes."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from cloudnotes.cli.utils import auth
from cloudnotes.services.notes import NotesError
from cloudnotes.services.notes.markup import ExportConfig, NoteHtmlRenderer
from cloudnotes.services.notes.markup.options import DEFAULT_STYLESHEET

app = typer.Typer(help="Export a note as an HTML document")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    note_id: str = typer.Argument(..., help="ID of the note"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="File to write (default: stdout)"
    ),
    timestamp: bool = typer.Option(True, help="Include the modification time"),
    style: bool = typer.Option(True, help="Embed the default stylesheet"),
):
    """Export a note as an HTML document."""
    service = auth.get_note_service()

    try:
        note = auth.run(service.load_note(note_id))
    except NotesError:
        raise typer.Exit(1)

    config = ExportConfig(
        include_timestamp=timestamp,
        stylesheet=DEFAULT_STYLESHEET if style else None,
    )
    document = NoteHtmlRenderer(config).render(note)

    if output is None:
        typer.echo(document)
        return
    output.write_text(document, encoding="utf-8")
    console.print(f"Exported note to [bold]{output}[/bold]")
