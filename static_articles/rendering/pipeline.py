"""
Markdown transform pipeline.

Markdown text is parsed by Python-Markdown (tables, fenced code and the
ContentExtension syntaxes), then the resulting HTML is loaded into
BeautifulSoup and run through the ordered STAGES. The same input and
RenderContext always produce the same HTML.
"""

from __future__ import annotations

import re
from typing import Sequence

from bs4 import BeautifulSoup
from markdown import Markdown

from ..core.types import Heading
from .extensions import ContentExtension
from .stages import HEADING_TAGS, STAGES, RenderContext, Stage

_WS_RE = re.compile(r"\s+")


def create_markdown() -> Markdown:
    return Markdown(extensions=["tables", "fenced_code", ContentExtension()])


def markdown_to_html(
    text: str,
    context: RenderContext | None = None,
    stages: Sequence[Stage] = STAGES,
) -> str:
    """Render Markdown text to the final HTML string."""
    context = context or RenderContext()
    html = create_markdown().convert(text or "")
    soup = BeautifulSoup(html, "html.parser")
    for stage in stages:
        soup = stage(soup, context)
    return str(soup)


def markdown_to_plain_text(text: str) -> str:
    """Render Markdown and keep only its visible text, whitespace collapsed."""
    html = create_markdown().convert(text or "")
    plain = BeautifulSoup(html, "html.parser").get_text()
    return _WS_RE.sub(" ", plain).strip()


def headings_from_html(html: str, min_depth: int = 2, max_depth: int = 4) -> list[Heading]:
    """Read the table of contents back from rendered HTML.

    Ids are taken from the anchored headings themselves, so every entry links
    to an id present in the document.
    """
    headings = []
    for element in BeautifulSoup(html, "html.parser").find_all(list(HEADING_TAGS)):
        level = int(element.name[1])
        if not element.get("id") or not min_depth <= level <= max_depth:
            continue
        text = _WS_RE.sub(" ", element.get_text()).strip()
        headings.append(Heading(id=element["id"], text=text, level=level))
    return headings


def extract_headings(
    text: str,
    min_depth: int = 2,
    max_depth: int = 4,
    context: RenderContext | None = None,
) -> list[Heading]:
    """Return the document's headings of depth min_depth..max_depth in order."""
    return headings_from_html(markdown_to_html(text, context), min_depth, max_depth)
