"""
Inline markup codec for record content.

Record content is a small HTML subset: <b>/<strong>, <i>/<em> and <u>. Any
other element is an inert container whose text still counts. Decoding walks
the element tree depth first and emits one StyledSpan per text node with the
union of the styles of its open ancestors.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from html.parser import HTMLParser
from typing import FrozenSet, List, Optional, Tuple

LOGGER = logging.getLogger(__name__)


class Style(str, Enum):
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"


TAG_STYLES = {
    "b": Style.BOLD,
    "strong": Style.BOLD,
    "i": Style.ITALIC,
    "em": Style.ITALIC,
    "u": Style.UNDERLINE,
}

# Elements that never have children, so they never open a style scope.
_VOID_TAGS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Raw-text elements: their content is data, not document text.
_RAW_TEXT_TAGS = frozenset({"script", "style"})

_WHITESPACE_RE = re.compile(r"[ \t\n\r\f]+")


@dataclass(frozen=True)
class StyledSpan:
    text: str
    styles: FrozenSet[Style] = frozenset()


class _SpanParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.spans: List[StyledSpan] = []
        # (tag, style contributed or None)
        self._open: List[Tuple[str, Optional[Style]]] = []
        self._pending: List[str] = []

    def _styles(self) -> FrozenSet[Style]:
        return frozenset(style for _, style in self._open if style is not None)

    def _in_raw_text(self) -> bool:
        return any(tag in _RAW_TEXT_TAGS for tag, _ in self._open)

    def _flush(self) -> None:
        if not self._pending:
            return
        text = _WHITESPACE_RE.sub(" ", "".join(self._pending))
        self._pending = []
        if text:
            self.spans.append(StyledSpan(text, self._styles()))

    def handle_starttag(self, tag, attrs):
        self._flush()
        if tag in _VOID_TAGS:
            return
        self._open.append((tag, TAG_STYLES.get(tag)))

    def handle_startendtag(self, tag, attrs):
        # <b/> style self-closing tags open nothing
        self._flush()

    def handle_endtag(self, tag):
        self._flush()
        for i in range(len(self._open) - 1, -1, -1):
            if self._open[i][0] == tag:
                # closes the element and anything left open inside it
                del self._open[i:]
                return
        LOGGER.debug("notes.markup.stray_end_tag tag=%s", tag)

    def handle_data(self, data):
        if self._in_raw_text():
            return
        self._pending.append(data)

    def close(self):
        super().close()
        self._flush()
        self._open = []


def parse_markup(markup: str) -> List[StyledSpan]:
    """Decode ``markup`` into styled spans in reading order."""
    if not markup:
        return []
    parser = _SpanParser()
    parser.feed(markup)
    parser.close()
    return parser.spans


def plain_text(markup: str) -> str:
    return "".join(span.text for span in parse_markup(markup))


def _tag_pair(tag: str) -> Tuple[str, str]:
    tag = tag.strip()
    if not tag:
        raise ValueError("tag must not be empty")
    open_tag = tag if tag.startswith("<") else f"<{tag}>"
    return open_tag, open_tag.replace("<", "</", 1)


def apply_style(text: str, selection_start: int, selection_end: int, tag: str) -> str:
    """
    Wrap ``text[selection_start:selection_end]`` in ``tag`` (``"<b>"`` or ``"b"``).

    An empty selection inserts an empty tag pair at the cursor. Styling an
    already styled range nests the tags again.
    """
    if not 0 <= selection_start <= selection_end <= len(text):
        raise ValueError(
            f"Invalid selection {selection_start}:{selection_end} "
            f"for text of length {len(text)}"
        )
    open_tag, close_tag = _tag_pair(tag)
    selected = text[selection_start:selection_end]
    return (
        text[:selection_start]
        + f"{open_tag}{selected}{close_tag}"
        + text[selection_end:]
    )
