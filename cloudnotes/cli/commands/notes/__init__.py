"""Notes commands for the cloudnotes CLI."""

import typer

from . import check, create, delete, edit, export, list_notes, show

app = typer.Typer(help="Notes commands")
app.add_typer(list_notes.app, name="list")
app.add_typer(show.app, name="show")
app.add_typer(create.app, name="create")
app.add_typer(edit.app, name="edit")
app.add_typer(delete.app, name="delete")
app.add_typer(check.app, name="check")
app.add_typer(export.app, name="export")
