"""Login command for the cloudnotes CLI."""

from typing import Optional

import typer
from rich.console import Console

from cloudnotes.cli.utils import auth

app = typer.Typer(help="Log in with email and password")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    email: Optional[str] = typer.Option(None, help="Account email"),
    password: Optional[str] = typer.Option(None, help="Account password"),
    save_config: bool = typer.Option(
        False, help="Remember the email in the config file"
    ),
):
    """Log in with email and password."""
    session = auth.login(email, password)

    if save_config and session.current_email:
        config = auth.load_config()
        config["email"] = session.current_email
        auth.save_config(config)

    console.print(f"Successfully logged in as [bold]{session.current_email}[/bold]")
