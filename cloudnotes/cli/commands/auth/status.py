"""Status command for the cloudnotes CLI."""

import typer
from rich.console import Console

from cloudnotes.cli.utils import auth

app = typer.Typer(help="Check authentication status")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    check: bool = typer.Option(
        False, help="Also verify the session against the auth server"
    ),
):
    """Check authentication status."""
    credentials = auth.load_session()
    if credentials is None:
        console.print("[yellow]Not logged in[/yellow]")
        return

    if check:
        session = auth.get_auth_session(auth.get_config(), credentials)
        result = auth.run(session.refresh())
        if not result.ok:
            console.print(
                "[yellow]Session exists but requires re-authentication[/yellow]"
            )
            return
        auth.save_session(session.credentials)

    console.print(
        f"[green]Logged in as:[/green] [bold]{credentials.email or '?'}[/bold] "
        f"(user id {credentials.user_id})"
    )
