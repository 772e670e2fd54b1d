"""
Summary resolution for articles and collections.

The first source that yields text wins:
1. the body of a sibling ``summary.md``
2. a ``summary`` front matter string
3. an excerpt of the body's first meaningful paragraph, capped on a word
   boundary
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterator

from ..core.frontmatter import load_markdown
from ..core.types import Summary
from .pipeline import markdown_to_html, markdown_to_plain_text
from .stages import RenderContext

ELLIPSIS = "…"

_FENCE_RE = re.compile(r"^(`{3,}|~{3,})")
_ORDERED_ITEM_RE = re.compile(r"^\d+[.)]\s")
_RULE_RE = re.compile(r"^(?:(?:[-*_]\s*){3,}|={3,})$")
_IMAGE_ONLY_RE = re.compile(r"^(?:!\[[^\]]*\]\([^)]*\)\s*)+$")
_SKIPPED_PREFIXES = ("#", ">", "<", "|", ":::", "$$", "- ", "* ", "+ ", "[!")
_MD_ESCAPE_RE = re.compile(r"([\\`*_\[\]#])")


def _blocks(body: str) -> Iterator[str]:
    """Yield blank-line separated blocks outside fences and directives."""
    current: list[str] = []
    closer: str | None = None
    for line in body.splitlines():
        stripped = line.strip()
        if closer is not None:
            closed = stripped.endswith(closer) if closer == "$$" else stripped.startswith(closer)
            if closed:
                closer = None
            continue

        fence = _FENCE_RE.match(stripped)
        opens_math = stripped.startswith("$$") and not (len(stripped) > 4 and stripped.endswith("$$"))
        opens_directive = stripped.startswith(":::") and stripped != ":::"
        if fence or opens_math or opens_directive:
            if current:
                yield "\n".join(current)
                current = []
            if fence:
                closer = fence.group(1)
            elif opens_math:
                closer = "$$"
            else:
                closer = ":::"
            continue

        if not stripped:
            if current:
                yield "\n".join(current)
                current = []
            continue
        current.append(line)
    if current:
        yield "\n".join(current)


def _is_meaningful(block: str) -> bool:
    if block.startswith(("    ", "\t")):
        return False
    head = block.strip()
    if head.startswith(_SKIPPED_PREFIXES) or _ORDERED_ITEM_RE.match(head):
        return False
    if _RULE_RE.match(head) or _IMAGE_ONLY_RE.match(head):
        return False
    return True


def first_meaningful_paragraph(body: str) -> str | None:
    """Return the first prose paragraph of a Markdown body, if any."""
    for block in _blocks(body or ""):
        if _is_meaningful(block) and markdown_to_plain_text(block):
            return block.strip()
    return None


def truncate_words(text: str, max_chars: int, marker: str = ELLIPSIS) -> str:
    """Cap text at max_chars without splitting a word."""
    if len(text) <= max_chars:
        return text
    cut = text[:max_chars]
    if not text[max_chars].isspace():
        space = cut.rfind(" ")
        if space > 0:
            cut = cut[:space]
    return cut.rstrip(" ,;:.-") + marker


def _escape_markdown(text: str) -> str:
    return _MD_ESCAPE_RE.sub(r"\\\1", text).replace("<", "&lt;")


def excerpt_source(body: str, max_chars: int) -> str:
    paragraph = first_meaningful_paragraph(body)
    if paragraph is None:
        return ""
    plain = markdown_to_plain_text(paragraph)
    if len(plain) <= max_chars:
        return paragraph
    return _escape_markdown(truncate_words(plain, max_chars))


def summary_source(
    folder: Path,
    front: dict[str, Any],
    body: str,
    summary_filename: str = "summary.md",
    max_chars: int = 200,
) -> str:
    """Pick the Markdown source of a summary."""
    summary_file = folder / summary_filename
    if summary_file.is_file():
        content = load_markdown(summary_file).content.strip()
        if content:
            return content

    value = front.get("summary")
    if isinstance(value, str) and value.strip():
        return value.strip()

    return excerpt_source(body, max_chars)


def resolve_summary(
    folder: Path,
    front: dict[str, Any],
    body: str,
    context: RenderContext | None = None,
    *,
    summary_filename: str = "summary.md",
    max_chars: int = 200,
) -> Summary:
    source = summary_source(folder, front, body, summary_filename, max_chars)
    if not source:
        return Summary(text="", html="")
    return Summary(text=markdown_to_plain_text(source), html=markdown_to_html(source, context))
