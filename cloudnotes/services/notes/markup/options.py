"""
Export/render configuration for note HTML output.

Centralizes behavior flags so callers can tune defaults without touching
core logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_STYLESHEET = """
body { font-family: -apple-system, "Helvetica Neue", Arial, sans-serif; margin: 2em; }
.records { list-style: none; padding-left: 0; }
.record { margin: 0.25em 0; }
.record.checked .content { text-decoration: line-through; color: #777; }
.modified { color: #777; font-size: 0.9em; }
""".strip()


@dataclass(frozen=True)
class ExportConfig:
    # Show the server modification time under the title
    include_timestamp: bool = True

    # Exported checkboxes are read-only by default
    checkbox_disabled: bool = True

    # <html lang=...>
    lang: str = "en"

    # Inline <style> contents; None leaves the document unstyled
    stylesheet: Optional[str] = DEFAULT_STYLESHEET

    # strftime pattern for the visible timestamp
    timestamp_format: str = "%Y-%m-%d %H:%M UTC"
