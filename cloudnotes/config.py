"""
Runtime configuration for cloudnotes.

Values come from the CLI config file (``~/.config/cloudnotes/config.json``)
and are overridden by environment variables:

  CLOUDNOTES_PROJECT_ID     Firebase/Google Cloud project id
  CLOUDNOTES_API_KEY        Web API key used by the auth endpoints
  CLOUDNOTES_DATABASE       Firestore database id (default "(default)")
  CLOUDNOTES_ATOMIC_SAVES   true/false, save notes with one atomic commit
  CLOUDNOTES_FIRESTORE_URL, CLOUDNOTES_IDENTITY_URL, CLOUDNOTES_TOKEN_URL
                            endpoint overrides (e.g. the local emulators)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from cloudnotes.services.auth import IDENTITY_TOOLKIT_URL, SECURE_TOKEN_URL
from cloudnotes.services.notes.client import FIRESTORE_URL

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    raw = str(value).strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    return default


@dataclass(frozen=True)
class CloudNotesConfig:
    project_id: Optional[str] = None
    api_key: Optional[str] = None
    database: str = "(default)"
    atomic_saves: bool = False

    firestore_url: str = FIRESTORE_URL
    identity_url: str = IDENTITY_TOOLKIT_URL
    token_url: str = SECURE_TOKEN_URL

    @classmethod
    def load(
        cls,
        file_config: Optional[Mapping[str, Any]] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> "CloudNotesConfig":
        file_config = file_config or {}
        env = os.environ if env is None else env

        def pick(key: str, env_key: str, default=None):
            if env.get(env_key):
                return env[env_key]
            value = file_config.get(key)
            return default if value in (None, "") else value

        return cls(
            project_id=pick("project_id", "CLOUDNOTES_PROJECT_ID"),
            api_key=pick("api_key", "CLOUDNOTES_API_KEY"),
            database=pick("database", "CLOUDNOTES_DATABASE", "(default)"),
            atomic_saves=_as_bool(
                pick("atomic_saves", "CLOUDNOTES_ATOMIC_SAVES"), False
            ),
            firestore_url=pick(
                "firestore_url", "CLOUDNOTES_FIRESTORE_URL", FIRESTORE_URL
            ),
            identity_url=pick(
                "identity_url", "CLOUDNOTES_IDENTITY_URL", IDENTITY_TOOLKIT_URL
            ),
            token_url=pick("token_url", "CLOUDNOTES_TOKEN_URL", SECURE_TOKEN_URL),
        )

    def missing(self) -> list[str]:
        """Names of settings required to talk to the backend that are unset."""
        return [
            name for name in ("project_id", "api_key") if not getattr(self, name)
        ]
