"""Record content markup: decoding, style editing and HTML rendering."""

from .codec import Style, StyledSpan, apply_style, parse_markup, plain_text
from .options import ExportConfig
from .renderer import NoteHtmlRenderer, normalize_markup, render_spans

__all__ = [
    "Style",
    "StyledSpan",
    "parse_markup",
    "apply_style",
    "plain_text",
    "render_spans",
    "normalize_markup",
    "NoteHtmlRenderer",
    "ExportConfig",
]
