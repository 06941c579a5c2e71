"""
Pure HTML renderer for styled spans and whole notes. No I/O.

`render_spans` produces canonical markup (one <b>/<i>/<u> wrapper per
style), which also serves as an opt-in normalizer for content that picked up
redundant nested tags while editing.
"""

from __future__ import annotations

import html
from datetime import timezone
from typing import Iterable, List, Optional

from tinyhtml import h, raw

from ..models import Note, Record
from .codec import Style, StyledSpan, parse_markup
from .options import ExportConfig

# Outermost first
_WRAP_ORDER = ((Style.BOLD, "b"), (Style.ITALIC, "i"), (Style.UNDERLINE, "u"))


def _render_span(span: StyledSpan) -> str:
    tags = [tag for style, tag in _WRAP_ORDER if style in span.styles]
    if not tags:
        return html.escape(span.text, quote=False)
    node = h(tags[-1])(span.text)
    for tag in reversed(tags[:-1]):
        node = h(tag)(node)
    return node.render()


def render_spans(spans: Iterable[StyledSpan]) -> str:
    return "".join(_render_span(s) for s in spans)


def normalize_markup(markup: str) -> str:
    """Re-encode ``markup`` canonically; drops unknown tags and duplicate nesting."""
    return render_spans(parse_markup(markup))


class NoteHtmlRenderer:
    """Render a note and its records to a standalone HTML document."""

    def __init__(self, config: Optional[ExportConfig] = None):
        self.config = config or ExportConfig()

    def render(self, note: Note) -> str:
        cfg = self.config
        head: List = [h("meta", charset="utf-8"), h("title")(note.title)]
        if cfg.stylesheet:
            head.append(h("style")(raw(cfg.stylesheet)))

        article: List = [h("h1")(note.title)]
        if cfg.include_timestamp and note.modified_at is not None:
            ts = note.modified_at.astimezone(timezone.utc)
            article.append(
                h("p", **{"class": "modified"})(
                    h("time", datetime=ts.isoformat())(
                        ts.strftime(cfg.timestamp_format)
                    )
                )
            )
        article.append(
            h("ul", **{"class": "records"})(*(self._record(r) for r in note.records))
        )

        doc = h("html", lang=cfg.lang)(
            h("head")(*head),
            h("body")(
                h("article", **{"class": "note", "data-id": note.id})(*article)
            ),
        )
        return "<!DOCTYPE html>\n" + doc.render()

    def _record(self, record: Record):
        classes = ["record", record.type.value]
        children: List = []
        if record.is_checkbox:
            attrs = {"type": "checkbox"}
            if record.is_checked:
                attrs["checked"] = "checked"
                classes.append("checked")
            if self.config.checkbox_disabled:
                attrs["disabled"] = "disabled"
            children.append(h("input", **attrs))
        children.append(
            h("span", **{"class": "content"})(
                raw(render_spans(parse_markup(record.content)))
            )
        )
        attrs = {"class": " ".join(classes)}
        if record.id:
            attrs["data-id"] = record.id
        return h("li", **attrs)(*children)
