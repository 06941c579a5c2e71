"""Register command for the cloudnotes CLI."""

import typer
from rich.console import Console
from rich.markup import escape

from cloudnotes.cli.utils import auth

app = typer.Typer(help="Create a new account")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    email: str = typer.Option(..., prompt=True, help="Account email"),
    password: str = typer.Option(
        ...,
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        help="Account password",
    ),
):
    """Create a new account and log in with it."""
    session = auth.get_auth_session(auth.get_config())
    result = auth.run(session.register(email, password))
    if not result.ok:
        console.print(f"[bold red]Error:[/bold red] {escape(result.reason or '')}")
        raise typer.Exit(1)

    auth.save_session(session.credentials)
    console.print(f"Account created, logged in as [bold]{session.current_email}[/bold]")
