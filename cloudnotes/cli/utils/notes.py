"""Helpers shared by the notes commands: record options and rich rendering."""

from typing import List, Optional

import typer
from rich.text import Text

from cloudnotes.services.notes import Record
from cloudnotes.services.notes.markup import Style, parse_markup

_RICH_STYLES = {
    Style.BOLD: "bold",
    Style.ITALIC: "italic",
    Style.UNDERLINE: "underline",
}

RECORD_HELP = (
    "Record to store, in order. Prefix with 'checkbox:' for a checklist item "
    "or 'text:' (default) for plain text. Inline <b>, <i> and <u> are kept."
)


def parse_record_option(value: str) -> Record:
    kind, sep, content = value.partition(":")
    if sep and kind.strip().lower() == "checkbox":
        return Record.checkbox(content.strip())
    if sep and kind.strip().lower() == "text":
        return Record.text(content.strip())
    return Record.text(value.strip())


def parse_record_options(values: Optional[List[str]]) -> List[Record]:
    records = [parse_record_option(v) for v in values or []]
    if any(not r.content for r in records):
        raise typer.BadParameter("Records cannot be empty", param_hint="--record")
    return records


def markup_to_text(markup: str) -> Text:
    """Rich Text with the bold/italic/underline spans of ``markup``."""
    text = Text()
    for span in parse_markup(markup):
        style = " ".join(_RICH_STYLES[s] for s in Style if s in span.styles)
        text.append(span.text, style=style or None)
    return text


def record_line(record: Record, *, show_id: bool = False) -> Text:
    line = Text()
    if record.is_checkbox:
        line.append("[x] " if record.is_checked else "[ ] ")
    else:
        line.append("    ")
    line.append_text(markup_to_text(record.content))
    if show_id and record.id:
        line.append(f"  ({record.id})", style="dim")
    return line
