"""Utility functions for the cloudnotes CLI: config, session and service wiring."""

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Awaitable, Dict, Optional, TypeVar

import keyring
import requests
import typer
from keyring.errors import KeyringError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from cloudnotes.config import CloudNotesConfig
from cloudnotes.services.auth import AuthCredentials, FirebaseAuthSession
from cloudnotes.services.notes import (
    FirestoreClient,
    FirestoreDocumentStore,
    NoteService,
    NoteStore,
)

console = Console()

T = TypeVar("T")

KEYRING_SERVICE = "cloudnotes"

# State storage
config_dir = os.path.expanduser(
    os.environ.get("CLOUDNOTES_CONFIG_DIR", "~/.config/cloudnotes")
)
session_path = os.path.join(config_dir, "session.json")
config_path = os.path.join(config_dir, "config.json")


def run(coro: Awaitable[T]) -> T:
    """Drive one service coroutine to completion from a sync command."""
    return asyncio.run(coro)


def _write_private(path: str, data: Dict[str, Any]) -> None:
    Path(config_dir).mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    # Ensure file has restrictive permissions
    os.chmod(path, 0o600)


def load_config() -> Dict[str, Any]:
    """Load configuration from file."""
    try:
        if os.path.exists(config_path):
            with open(config_path, "r", encoding="utf-8") as f:
                return json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        console.print(f"[yellow]Warning:[/yellow] Could not load config file: {exc}")
    return {}


def save_config(config: Dict[str, Any]) -> None:
    """Save configuration to file."""
    try:
        _write_private(config_path, config)
    except OSError as exc:
        console.print(f"[yellow]Warning:[/yellow] Could not save config file: {exc}")


def get_config() -> CloudNotesConfig:
    """Resolve settings; exit with help when the backend is not configured."""
    config = CloudNotesConfig.load(load_config())
    missing = config.missing()
    if missing:
        console.print(
            f"[bold red]Error:[/bold red] Missing settings: {', '.join(missing)}"
        )
        console.print(
            Panel(
                "Set the Firebase project and its Web API key, either with\n"
                "  export CLOUDNOTES_PROJECT_ID=... CLOUDNOTES_API_KEY=...\n"
                f"or in {config_path}:\n"
                '  {"project_id": "...", "api_key": "..."}',
                title="Configuration Required",
                border_style="red",
            )
        )
        raise typer.Exit(1)
    return config


# ------------------------------- Session -------------------------------------


def load_session() -> Optional[AuthCredentials]:
    try:
        with open(session_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return AuthCredentials(
            user_id=data["user_id"],
            id_token=data.get("id_token", ""),
            refresh_token=data["refresh_token"],
            email=data.get("email"),
        )
    except (OSError, json.JSONDecodeError, KeyError, TypeError):
        return None


def save_session(credentials: AuthCredentials) -> None:
    _write_private(
        session_path,
        {
            "user_id": credentials.user_id,
            "email": credentials.email,
            "id_token": credentials.id_token,
            "refresh_token": credentials.refresh_token,
        },
    )


def clear_session() -> None:
    if os.path.exists(session_path):
        os.remove(session_path)


def get_auth_session(
    config: CloudNotesConfig, credentials: Optional[AuthCredentials] = None
) -> FirebaseAuthSession:
    return FirebaseAuthSession(
        config.api_key or "",
        requests.Session(),
        credentials=credentials,
        identity_url=config.identity_url,
        token_url=config.token_url,
    )


# ------------------------------- Keyring -------------------------------------


def get_password_from_keyring(email: str) -> Optional[str]:
    try:
        return keyring.get_password(KEYRING_SERVICE, email)
    except KeyringError:
        return None


def store_password_in_keyring(email: str, password: str) -> None:
    try:
        keyring.set_password(KEYRING_SERVICE, email, password)
    except KeyringError as exc:
        console.print(f"[yellow]Warning:[/yellow] Could not store password: {exc}")


def delete_password_in_keyring(email: str) -> None:
    try:
        keyring.delete_password(KEYRING_SERVICE, email)
    except KeyringError:
        pass


# ------------------------------- Login ---------------------------------------


def login(
    email: Optional[str] = None,
    password: Optional[str] = None,
    max_retries: int = 3,
) -> FirebaseAuthSession:
    """Sign in (prompting as needed) and persist the session."""
    config = get_config()
    saved = load_session()
    resolved_email = (
        email or (saved.email if saved else None) or load_config().get("email")
    )
    if not resolved_email:
        resolved_email = typer.prompt("Email")

    session = get_auth_session(config)
    current_password = password or get_password_from_keyring(resolved_email)
    failure_count = 0
    while failure_count < max_retries:
        if not current_password:
            current_password = typer.prompt("Password", hide_input=True)
        result = run(session.login(resolved_email, current_password))
        if result.ok:
            save_session(session.credentials)
            if get_password_from_keyring(resolved_email) is None and typer.confirm(
                "Save password in keyring?", default=False
            ):
                store_password_in_keyring(resolved_email, current_password)
            return session

        failure_count += 1
        # A stored password that no longer works is useless
        delete_password_in_keyring(resolved_email)
        current_password = None
        if failure_count >= max_retries:
            console.print(f"[bold red]Error:[/bold red] {escape(result.reason or '')}")
            raise typer.Exit(1)
        console.print(
            f"[bold yellow]Warning:[/bold yellow] {escape(result.reason or '')}. "
            f"Attempts remaining: {max_retries - failure_count}"
        )

    raise typer.Exit(1)


def get_auth_session_for_user() -> FirebaseAuthSession:
    """Restore the saved session and refresh its ID token."""
    config = get_config()
    credentials = load_session()
    if credentials is None:
        console.print("[yellow]Not logged in[/yellow]")
        console.print("Run [bold]cloudnotes auth login[/bold] first")
        raise typer.Exit(1)

    session = get_auth_session(config, credentials)
    result = run(session.refresh())
    if not result.ok:
        password = credentials.email and get_password_from_keyring(credentials.email)
        if password:
            result = run(session.login(credentials.email, password))
        if not result.ok:
            console.print(f"[bold red]Error:[/bold red] {escape(result.reason or '')}")
            console.print("Please log in again")
            raise typer.Exit(1)
    save_session(session.credentials)
    return session


def notify(message: str) -> None:
    """Notifier for NoteService: one line per outcome."""
    if message.startswith("Error"):
        console.print(f"[bold red]{escape(message)}[/bold red]")
    else:
        console.print(f"[green]{escape(message)}[/green]")


def get_note_service() -> NoteService:
    """Authenticated NoteService for the saved session."""
    config = get_config()
    session = get_auth_session_for_user()
    client = FirestoreClient(
        config.project_id or "",
        requests.Session(),
        database=config.database,
        base_url=config.firestore_url,
        token_provider=lambda: session.id_token,
    )
    store = NoteStore(
        FirestoreDocumentStore(client), atomic_saves=config.atomic_saves
    )
    return NoteService(store, session, notifier=notify)
