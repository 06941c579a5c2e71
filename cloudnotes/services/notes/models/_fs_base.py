from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict


def _env_extra_mode(default: str = "ignore") -> str:
    """
    Determine the extra-mode from environment vars.

    CLOUDNOTES_EXTRA: allow|forbid|ignore
    Convenience booleans: "true/1/on" -> forbid (strict), "false/0/off" -> allow
    """
    raw = (os.getenv("CLOUDNOTES_EXTRA") or default).strip().lower()

    if raw in {"allow", "forbid", "ignore"}:
        return raw

    if raw in {"1", "true", "yes", "on", "strict"}:
        return "forbid"
    if raw in {"0", "false", "no", "off", "lenient"}:
        return "allow"

    return default


_EXTRA = _env_extra_mode()


class FSModel(BaseModel):
    """
    Project-wide base model for Firestore payloads.

    Firestore adds response keys over time, so unknown keys are ignored by
    default. Switch to strict parsing while developing:
      export CLOUDNOTES_EXTRA=forbid
    """

    model_config = ConfigDict(extra=_EXTRA)


__all__ = ["FSModel", "_env_extra_mode"]
