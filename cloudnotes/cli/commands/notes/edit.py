"""Edit command for notes."""

from dataclasses import replace
from typing import List, Optional

import typer
from rich.console import Console

from cloudnotes.cli.utils import auth
from cloudnotes.cli.utils.notes import RECORD_HELP, parse_record_options
from cloudnotes.services.notes import NotesError

app = typer.Typer(help="Change a note's title and/or replace its records")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    note_id: str = typer.Argument(..., help="ID of the note"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    record: Optional[List[str]] = typer.Option(
        None,
        "--record",
        "-r",
        help=RECORD_HELP + " When given, replaces all records of the note.",
    ),
):
    """
    Change a note's title and/or replace its records.

    Saving rewrites every record, so checklist items start unchecked again.
    """
    records = parse_record_options(record) if record else None
    service = auth.get_note_service()

    try:
        note = auth.run(service.load_note(note_id))
        if title is not None:
            note = replace(note, title=title)
        auth.run(service.save_note(note, records))
    except NotesError:
        raise typer.Exit(1)
