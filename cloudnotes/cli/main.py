#!/usr/bin/env python
"""Command line interface for cloudnotes."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from cloudnotes.cli.commands import auth, notes

app = typer.Typer(help="Personal notes stored in Cloud Firestore")
console = Console()

# Add command groups
app.add_typer(auth.app, name="auth")
app.add_typer(notes.app, name="notes")


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logs"),
):
    """Create, edit and organise your notes from the terminal."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
