"""
HTML tree stages of the transform pipeline.

Each stage is a function ``(soup, context) -> soup`` working on the
BeautifulSoup tree produced from the Markdown output. Stages only touch the
tree they are given; everything they need about the document (slug, mode,
collection membership) comes from the RenderContext.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import quote

from bs4 import BeautifulSoup, Tag
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from ..core.utilities import Slugger


HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
DEV_IMAGE_ENDPOINT = "/api/dev-images"
_ENCODE_URI_SAFE = "!'()*~"


@dataclass(frozen=True)
class RenderContext:
    """Per-document rendering context.

    Attributes:
        slug: Slug of the document being rendered (empty for fragments)
        mode: "production" or "development"
        parent_collection_slug: Enclosing collection, None for standalone documents
        kind: "article" or "collection"
        base_path: Deployment sub-path ("" or "/repo-name")
        class_prefix: Prefix of the semantic classes
        highlight: Whether to run Pygments over fenced code
    """

    slug: str = ""
    mode: str = "production"
    parent_collection_slug: Optional[str] = None
    kind: str = "article"
    base_path: str = ""
    class_prefix: str = "md-"
    highlight: bool = True

    @property
    def in_collection_namespace(self) -> bool:
        return self.kind == "collection" or bool(self.parent_collection_slug)


Stage = Callable[[BeautifulSoup, RenderContext], BeautifulSoup]


def _classes(tag: Tag) -> list[str]:
    value = tag.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return list(value)


def _add_class(tag: Tag, name: str) -> None:
    classes = _classes(tag)
    if name and name not in classes:
        classes.append(name)
    tag["class"] = classes


def wrap_iframes(soup: BeautifulSoup, context: RenderContext) -> BeautifulSoup:
    """Wrap every <iframe> in a window frame with a traffic-light title bar."""
    for iframe in soup.find_all("iframe"):
        parent = iframe.parent
        if isinstance(parent, Tag) and "md-iframe-window" in _classes(parent):
            continue
        window = soup.new_tag("div", attrs={"class": "md-iframe-window"})
        titlebar = soup.new_tag("div", attrs={"class": "md-iframe-titlebar"})
        for color in ("red", "yellow", "green"):
            titlebar.append(
                soup.new_tag("span", attrs={"class": f"md-iframe-light md-iframe-light-{color}"})
            )
        iframe.wrap(window)
        window.insert(0, titlebar)
    return soup


def render_math(soup: BeautifulSoup, context: RenderContext) -> BeautifulSoup:
    """Render math nodes as delimited TeX for client-side typesetting."""
    for node in soup.find_all("span", class_="math-inline"):
        tex = node.get_text()
        node.string = f"\\({tex}\\)"
        node["data-math"] = "inline"
    for node in soup.find_all("div", class_="math-display"):
        tex = node.get_text()
        node.string = f"\\[{tex}\\]"
        node["data-math"] = "display"
    return soup


def _code_language(code: Tag) -> str | None:
    for name in _classes(code):
        if name.startswith("language-"):
            return name[len("language-") :]
    return None


def highlight_code(soup: BeautifulSoup, context: RenderContext) -> BeautifulSoup:
    """Syntax highlight fenced code blocks that declare a known language."""
    if not context.highlight:
        return soup
    formatter = HtmlFormatter(nowrap=True)
    for code in soup.find_all("code"):
        if not isinstance(code.parent, Tag) or code.parent.name != "pre":
            continue
        language = _code_language(code)
        if not language:
            continue
        try:
            lexer = get_lexer_by_name(language)
        except ClassNotFound:
            continue
        fragment = BeautifulSoup(highlight(code.get_text(), lexer, formatter), "html.parser")
        code.clear()
        for child in list(fragment.contents):
            code.append(child.extract())
        _add_class(code, "highlight")
    return soup


def anchor_headings(soup: BeautifulSoup, context: RenderContext) -> BeautifulSoup:
    """Give headings unique ids and wrap their content in a self-link."""
    slugger = Slugger()
    headings = soup.find_all(list(HEADING_TAGS))
    for heading in headings:
        if heading.get("id"):
            slugger.reserve(heading["id"])
    for heading in headings:
        text = heading.get_text().strip()
        if not heading.get("id"):
            if not text:
                continue
            heading["id"] = slugger.slug(text)
        link = soup.new_tag("a", attrs={"href": f"#{heading['id']}"})
        for child in list(heading.contents):
            link.append(child.extract())
        heading.append(link)
    return soup


_SCOPED_TAGS = (
    "p",
    "blockquote",
    "ul",
    "ol",
    "li",
    "table",
    "thead",
    "tbody",
    "tr",
    "th",
    "td",
    "a",
    "strong",
    "em",
    "del",
    "img",
    "hr",
    "details",
    "summary",
)


def scope_classes(soup: BeautifulSoup, context: RenderContext) -> BeautifulSoup:
    """Tag every Markdown-produced element with a predictable prefixed class."""
    prefix = context.class_prefix.strip()
    for tag in soup.find_all(True):
        name = tag.name
        if name in HEADING_TAGS:
            _add_class(tag, f"{prefix}heading")
            _add_class(tag, f"{prefix}{name}")
        elif name in _SCOPED_TAGS:
            _add_class(tag, f"{prefix}{name}")
        elif name == "code":
            in_pre = isinstance(tag.parent, Tag) and tag.parent.name == "pre"
            _add_class(tag, f"{prefix}code-block" if in_pre else f"{prefix}code-inline")
        elif name == "pre":
            _add_class(tag, f"{prefix}pre")
            code = tag.find("code", recursive=False)
            language = _code_language(code) if code is not None else None
            if language:
                tag["data-lang"] = language
                _add_class(tag, f"{prefix}pre--lang-{language}")
    return soup


def code_block_copy(soup: BeautifulSoup, context: RenderContext) -> BeautifulSoup:
    """Wrap each <pre><code> in a container with a copy-to-clipboard button."""
    for pre in soup.find_all("pre"):
        code = pre.find("code", recursive=False)
        if code is None:
            continue
        parent = pre.parent
        if isinstance(parent, Tag) and "code-block" in _classes(parent):
            continue
        wrapper = soup.new_tag("div", attrs={"class": "code-block"})
        button = soup.new_tag("button", attrs={"class": "copy-btn", "data-code": code.get_text()})
        button.string = "Copy"
        pre.wrap(wrapper)
        wrapper.insert(0, button)
    return soup


def _local_image_path(src: str) -> str | None:
    if src.startswith("./images/"):
        return src[2:]
    if src.startswith("images/"):
        return src
    return None


def rewrite_images(soup: BeautifulSoup, context: RenderContext) -> BeautifulSoup:
    """Point relative ``images/...`` references at where the image is served.

    Development: the on-demand dev image endpoint, keyed by slug and path.
    Production: the public copy under /collections/<slug>/ or /articles/<slug>/.
    """
    for img in soup.find_all("img"):
        image_path = _local_image_path(str(img.get("src") or ""))
        if image_path is None:
            continue
        if context.mode == "development":
            img["src"] = (
                f"{DEV_IMAGE_ENDPOINT}?slug={quote(context.slug, safe=_ENCODE_URI_SAFE)}"
                f"&imagePath={quote(image_path, safe=_ENCODE_URI_SAFE)}"
            )
        else:
            namespace = "/collections" if context.in_collection_namespace else "/articles"
            img["src"] = f"{context.base_path}{namespace}/{context.slug}/{image_path}"
    return soup


STAGES: tuple[Stage, ...] = (
    wrap_iframes,
    render_math,
    highlight_code,
    anchor_headings,
    scope_classes,
    code_block_copy,
    rewrite_images,
)
