"""
Python-Markdown syntax extensions used by the transform pipeline.

Adds, on top of the stock parser:
- ``:::spoiler[Title]`` container directives rendered as <details>
- GitHub-style alerts (``> [!NOTE]``) rendered as titled, collapsible <details>
- ``$inline$`` and ``$$display$$`` math nodes
- ``===`` on its own line as a "strong" horizontal rule
- ``~~strikethrough~~`` and bare URL autolinks

Malformed directives and unbalanced math fences are left to the paragraph
processor, so they render as literal text instead of failing the build.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as etree
from typing import Callable

from markdown import Markdown
from markdown.blockprocessors import BlockProcessor
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor, SimpleTagInlineProcessor
from markdown.treeprocessors import Treeprocessor
from markdown.util import AtomicString


ALERT_TYPES = ("NOTE", "TIP", "IMPORTANT", "WARNING", "CAUTION")
ALERT_RE = re.compile(r"^\s*\[!(NOTE|TIP|IMPORTANT|WARNING|CAUTION)\][ \t]*(?:\n|$)", re.IGNORECASE)

INLINE_MATH_RE = r"(?<![\\$])\$(?![\s$])([^$\n]+?)(?<![\s\\])\$(?![$\d])"
STRIKETHROUGH_RE = r"(~{2})(?!~)(.+?)~~"
BARE_URL_RE = r"(?<![\w/\"'=(<\[])((?:https?://|www\.)[^\s<>\"']*[^\s<>\"'.,;:!?)\]])"


def _split_fenced(
    blocks: list[str], first_rest: str, is_close: Callable[[str], bool]
) -> tuple[int, list[str], str, str] | None:
    """Locate the closing fence of a block-level construct.

    Returns (blocks consumed, inner chunks, closing line, trailing text), or
    None when no closing line exists before the end of the document.
    """
    chunks: list[str] = []
    candidates = [first_rest] + blocks[1:]
    for index, chunk in enumerate(candidates):
        lines = chunk.split("\n") if chunk else []
        for line_no, line in enumerate(lines):
            if is_close(line):
                chunks.append("\n".join(lines[:line_no]))
                trailing = "\n".join(lines[line_no + 1 :])
                return index + 1, [c for c in chunks if c.strip()], line, trailing
        chunks.append(chunk)
    return None


class SpoilerBlockProcessor(BlockProcessor):
    """``:::spoiler[Label]`` ... ``:::`` becomes <details><summary>Label</summary>...</details>.

    Without a label, the first paragraph of the block becomes the title.
    """

    START_RE = re.compile(r"^:::spoiler(?:\[(?P<label>[^\]\n]*)\])?[ \t]*$")
    END_RE = re.compile(r"^:::[ \t]*$")
    FALLBACK_TITLE = "Details"

    def test(self, parent: etree.Element, block: str) -> bool:
        return bool(self.START_RE.match(block.split("\n", 1)[0]))

    def run(self, parent: etree.Element, blocks: list[str]) -> bool | None:
        first_line, _, rest = blocks[0].partition("\n")
        label = (self.START_RE.match(first_line).group("label") or "").strip()
        found = _split_fenced(blocks, rest, lambda line: bool(self.END_RE.match(line)))
        if found is None:
            return False

        consumed, chunks, _, trailing = found
        del blocks[:consumed]
        if trailing.strip():
            blocks.insert(0, trailing)

        title = label
        if not title and chunks and _is_plain_paragraph(chunks[0]):
            title = " ".join(chunks.pop(0).split())

        details = etree.SubElement(parent, "details")
        summary = etree.SubElement(details, "summary")
        summary.text = title or self.FALLBACK_TITLE
        if chunks:
            self.parser.parseChunk(details, "\n\n".join(chunks))
        return None


class MathBlockProcessor(BlockProcessor):
    """``$$ ... $$`` display math, on one line or spanning several blocks."""

    def test(self, parent: etree.Element, block: str) -> bool:
        return block.startswith("$$")

    def run(self, parent: etree.Element, blocks: list[str]) -> bool | None:
        first_line, _, rest = blocks[0].partition("\n")
        opener = first_line[2:].rstrip()
        if opener.endswith("$$") and opener[:-2].strip():
            tex = opener[:-2]
            blocks.pop(0)
            if rest.strip():
                blocks.insert(0, rest)
        else:
            found = _split_fenced(blocks, rest, lambda line: line.rstrip().endswith("$$"))
            if found is None:
                return False
            consumed, chunks, closing, trailing = found
            closing_tex = closing.rstrip()[:-2]
            tex = "\n".join(part for part in [opener, *chunks, closing_tex] if part.strip())
            del blocks[:consumed]
            if trailing.strip():
                blocks.insert(0, trailing)

        div = etree.SubElement(parent, "div")
        div.set("class", "math math-display")
        div.text = AtomicString(tex.strip())
        return None


class StrongRuleProcessor(BlockProcessor):
    """A paragraph made only of ``===`` becomes a decorative separator."""

    def test(self, parent: etree.Element, block: str) -> bool:
        return block.strip() == "==="

    def run(self, parent: etree.Element, blocks: list[str]) -> None:
        blocks.pop(0)
        etree.SubElement(
            parent,
            "div",
            {"role": "separator", "class": "md-hr-strong md-hr-dots", "aria-hidden": "true"},
        )


class InlineMathProcessor(InlineProcessor):
    def handleMatch(self, m: re.Match, data: str):  # noqa: N802
        span = etree.Element("span")
        span.set("class", "math math-inline")
        span.text = AtomicString(m.group(1))
        return span, m.start(0), m.end(0)


class BareUrlProcessor(InlineProcessor):
    ANCESTOR_EXCLUDES = ("a",)

    def handleMatch(self, m: re.Match, data: str):  # noqa: N802
        url = m.group(1)
        link = etree.Element("a")
        link.set("href", url if "://" in url else f"http://{url}")
        link.text = AtomicString(url)
        return link, m.start(1), m.end(1)


class GithubAlertTreeprocessor(Treeprocessor):
    """Turn ``> [!TYPE]`` blockquotes into collapsible alerts.

    A leading **bold** run right after the marker becomes a custom title:
    "Note: <bold text>".
    """

    def run(self, root: etree.Element) -> None:
        for quote in list(root.iter("blockquote")):
            if len(quote) == 0 or quote[0].tag != "p":
                continue
            first = quote[0]
            match = ALERT_RE.match(first.text or "")
            if not match:
                continue

            alert_type = match.group(1).upper()
            first.text = (first.text or "")[match.end() :]
            if _is_empty(first):
                quote.remove(first)

            custom_title = None
            if len(quote) and quote[0].tag == "p":
                para = quote[0]
                if not (para.text or "").strip() and len(para) and para[0].tag == "strong":
                    strong = para[0]
                    custom_title = "".join(strong.itertext()).strip()
                    para.text = (strong.tail or "").lstrip()
                    para.remove(strong)
                    if _is_empty(para):
                        quote.remove(para)

            base_title = alert_type.capitalize()
            quote.tag = "details"
            quote.set("class", f"md-alert md-alert-{alert_type.lower()}")
            quote.set("data-alert-type", alert_type)
            summary = etree.Element("summary")
            summary.set("class", "md-alert-title")
            summary.text = f"{base_title}: {custom_title}" if custom_title else base_title
            quote.insert(0, summary)


def _is_empty(element: etree.Element) -> bool:
    return not (element.text or "").strip() and len(element) == 0


def _is_plain_paragraph(chunk: str) -> bool:
    head = chunk.lstrip()
    return bool(head) and not head.startswith(("#", "```", "~~~", ">", "- ", "* ", "|", "<", "$$", ":::"))


class ContentExtension(Extension):
    """Registers every custom syntax used by content documents."""

    def extendMarkdown(self, md: Markdown) -> None:  # noqa: N802
        md.parser.blockprocessors.register(SpoilerBlockProcessor(md.parser), "spoiler", 75)
        md.parser.blockprocessors.register(MathBlockProcessor(md.parser), "math_block", 74)
        md.parser.blockprocessors.register(StrongRuleProcessor(md.parser), "strong_hr", 55)
        md.inlinePatterns.register(InlineMathProcessor(INLINE_MATH_RE, md), "math_inline", 185)
        md.inlinePatterns.register(BareUrlProcessor(BARE_URL_RE, md), "bare_url", 110)
        md.inlinePatterns.register(SimpleTagInlineProcessor(STRIKETHROUGH_RE, "del"), "strikethrough", 65)
        md.treeprocessors.register(GithubAlertTreeprocessor(md), "github_alerts", 15)
