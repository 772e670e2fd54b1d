"""
Entity builders: assemble Article and Collection records from folders.

A builder reads the folder's index.md, validates the front matter, runs the
transform pipeline over the body and the resolved summary source, and returns
a frozen record. Validation failures raise FrontmatterError and abort the
build.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Any, Sequence

from ..config import AppConfig, is_live
from ..core.frontmatter import MarkdownFile, derive_cover, ensure_basics, format_date, load_markdown, parse_date
from ..core.types import Article, Collection, ReadingTime
from ..core.utilities import extract_tags, parse_status
from ..errors import MissingIndexError
from ..logging_utils import log_event, log_warning
from ..rendering import RenderContext, headings_from_html, markdown_to_html, resolve_summary
from .routes import base_path

logger = logging.getLogger(__name__)

# Han, kana and hangul characters are read one at a time, not as words
_CJK_RE = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff\uac00-\ud7af]")


def reading_time(text: str, words_per_minute: int = 200) -> ReadingTime:
    """Estimate reading time from the raw body ("3 min read")."""
    cjk_count = len(_CJK_RE.findall(text))
    words = len(_CJK_RE.sub(" ", text).split()) + cjk_count
    minutes = words / words_per_minute if words_per_minute > 0 else 0.0
    displayed = math.ceil(round(minutes, 2))
    return ReadingTime(text=f"{displayed} min read", minutes=minutes, words=words)


def render_context(
    cfg: AppConfig,
    slug: str,
    parent_collection_slug: str | None = None,
    kind: str = "article",
) -> RenderContext:
    return RenderContext(
        slug=slug,
        mode=cfg.build.mode,
        parent_collection_slug=parent_collection_slug,
        kind=kind,
        base_path=base_path(cfg.site),
        class_prefix=cfg.markdown.class_prefix,
        highlight=cfg.markdown.highlight,
    )


def _load_index(folder: Path, kind: str, cfg: AppConfig) -> MarkdownFile:
    index_path = folder / cfg.content.index_filename
    if not index_path.is_file():
        raise MissingIndexError(folder, kind)
    doc = load_markdown(index_path)
    ensure_basics(doc.data, index_path, require_slug=cfg.content.require_slug)
    return doc


def _resolve_status(front: dict[str, Any], index_path: Path, cfg: AppConfig) -> str:
    if front.get("status") is None:
        log_warning(
            logger,
            f"No status in {index_path}; using {cfg.content.default_status!r}",
            event="missing_status",
            path=str(index_path),
            default=cfg.content.default_status,
        )
    return parse_status(front.get("status"), index_path, cfg.content.default_status)


def build_article_from_folder(
    folder: Path,
    slug_pieces: Sequence[str],
    parent_collection_slug: str | None,
    cfg: AppConfig,
) -> Article:
    """Build the Article stored in ``folder``.

    Args:
        folder: Absolute article folder
        slug_pieces: Slugified folder names from the content root down to ``folder``
        parent_collection_slug: Slug of the enclosing collection, if any
        cfg: Application configuration

    Returns:
        The fully rendered Article

    Raises:
        MissingIndexError: If the folder has no index.md
        FrontmatterError: If title, date, status (or a required slug) is invalid
    """
    doc = _load_index(folder, "article", cfg)
    front = doc.data
    slug = "/".join(slug_pieces)
    status = _resolve_status(front, doc.path, cfg)
    context = render_context(cfg, slug, parent_collection_slug, kind="article")
    html = markdown_to_html(doc.content, context)

    article = Article(
        slug=slug,
        title=str(front["title"]).strip(),
        status=status,
        date=format_date(parse_date(front["date"])),
        summary=resolve_summary(
            folder,
            front,
            doc.content,
            context,
            summary_filename=cfg.content.summary_filename,
            max_chars=cfg.markdown.summary_max_chars,
        ),
        cover=derive_cover(front, folder),
        content=doc.content,
        html=html,
        headings=headings_from_html(html, cfg.markdown.toc_min_depth, cfg.markdown.toc_max_depth),
        reading_time=reading_time(doc.content, cfg.markdown.words_per_minute),
        tags=extract_tags(front.get("tags")),
        collection_slug=parent_collection_slug,
        folder=str(folder.resolve()) if is_live(cfg) else None,
    )
    log_event(logger, f"Built article {slug}", event="article_built", slug=slug, status=status)
    return article


def build_collection_from_folder(
    folder: Path,
    slug_pieces: Sequence[str],
    child_articles: Sequence[Article],
    child_collections: Sequence[Collection],
    cfg: AppConfig,
) -> Collection:
    """Build the Collection stored in ``folder`` around its pre-built direct children.

    Totals are the lengths of the direct-child lists, not subtree sizes.
    """
    doc = _load_index(folder, "collection", cfg)
    front = doc.data
    slug = "/".join(slug_pieces)
    status = _resolve_status(front, doc.path, cfg)
    context = render_context(cfg, slug, kind="collection")

    collection = Collection(
        slug=slug,
        title=str(front["title"]).strip(),
        status=status,
        cover=derive_cover(front, folder),
        summary=resolve_summary(
            folder,
            front,
            doc.content,
            context,
            summary_filename=cfg.content.summary_filename,
            max_chars=cfg.markdown.summary_max_chars,
        ),
        articles=list(child_articles),
        collections=list(child_collections),
        total_articles=len(child_articles),
        total_collections=len(child_collections),
        folder=str(folder.resolve()) if is_live(cfg) else None,
    )
    log_event(
        logger,
        f"Built collection {slug}",
        event="collection_built",
        slug=slug,
        articles=collection.total_articles,
        collections=collection.total_collections,
    )
    return collection
