"""Markdown rendering: syntax extensions, HTML stages and summaries."""

from .pipeline import (
    create_markdown,
    extract_headings,
    headings_from_html,
    markdown_to_html,
    markdown_to_plain_text,
)
from .stages import STAGES, RenderContext
from .summaries import resolve_summary, summary_source, truncate_words

__all__ = [
    "RenderContext",
    "STAGES",
    "create_markdown",
    "extract_headings",
    "headings_from_html",
    "markdown_to_html",
    "markdown_to_plain_text",
    "resolve_summary",
    "summary_source",
    "truncate_words",
]
