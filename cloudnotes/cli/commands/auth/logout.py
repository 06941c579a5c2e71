"""Logout command for the cloudnotes CLI."""

import typer
from rich.console import Console

from cloudnotes.cli.utils import auth

app = typer.Typer(help="Log out and forget the saved session")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    keep_password: bool = typer.Option(
        False, help="Keep the password stored in the keyring"
    ),
):
    """Log out and forget the saved session."""
    credentials = auth.load_session()
    if credentials is None:
        console.print("[yellow]Not logged in[/yellow]")
        return

    if credentials.email and not keep_password:
        auth.delete_password_in_keyring(credentials.email)
    auth.clear_session()
    console.print(f"Logged out [bold]{credentials.email or credentials.user_id}[/bold]")
