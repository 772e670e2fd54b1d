"""
Tree classifier and walker.

Every directory below the content root is classified as:
- a standalone article: has index.md and no content-bearing subdirectory
- a collection: has index.md and at least one content-bearing subdirectory
- a structural node: has no index.md; it only groups its descendants

The walk is depth first and returns the navigation tree together with flat
lists of every article and collection found below the directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from ..config import AppConfig
from ..core.types import (
    Article,
    Collection,
    CollectionNode,
    GroupNode,
    NodeKind,
    StandaloneArticleNode,
    WalkResult,
)
from ..core.utilities import path_to_id, slugify, sort_key, title_from_folder
from ..errors import ContentError, ContentRootNotFoundError
from ..logging_utils import log_warning
from .builders import build_article_from_folder, build_collection_from_folder

logger = logging.getLogger(__name__)

ROOT_TITLE = "Root"


def has_index(folder: Path, cfg: AppConfig) -> bool:
    return (folder / cfg.content.index_filename).is_file()


def list_child_dirs(folder: Path) -> list[Path]:
    """Immediate subdirectories in sibling order; hidden directories are skipped."""
    children = [p for p in folder.iterdir() if p.is_dir() and not p.name.startswith(".")]
    return sorted(children, key=lambda p: sort_key(p.name))


def is_content_bearing(folder: Path, cfg: AppConfig) -> bool:
    """A folder bears content if it, or any folder below it, has an index.md."""
    if has_index(folder, cfg):
        return True
    return any(is_content_bearing(child, cfg) for child in list_child_dirs(folder))


def classify(folder: Path, cfg: AppConfig) -> NodeKind:
    if not has_index(folder, cfg):
        return NodeKind.NODE
    if any(is_content_bearing(child, cfg) for child in list_child_dirs(folder)):
        return NodeKind.COLLECTION
    return NodeKind.STANDALONE


def _content_children(folder: Path, cfg: AppConfig) -> list[Path]:
    """Content-bearing subdirectories; warns about skipped folders holding Markdown."""
    children = []
    for child in list_child_dirs(folder):
        if is_content_bearing(child, cfg):
            children.append(child)
            continue
        stray = sorted(p.name for p in child.rglob("*.md"))
        if stray:
            log_warning(
                logger,
                f"Ignoring {child}: Markdown files without {cfg.content.index_filename}",
                event="ignored_folder",
                folder=str(child),
                files=stray,
            )
    return children


def _walk_children(
    children: Sequence[Path],
    slug_pieces: Sequence[str],
    parent_collection_slug: str | None,
    cfg: AppConfig,
) -> list[WalkResult]:
    return [
        walk(child, [*slug_pieces, slugify(child.name)], parent_collection_slug, cfg)
        for child in children
    ]


def walk(
    folder: Path,
    slug_pieces: Sequence[str],
    parent_collection_slug: str | None,
    cfg: AppConfig,
) -> WalkResult:
    """Classify ``folder`` and build everything at or below it.

    Args:
        folder: Directory to walk
        slug_pieces: Slugified names of the folders from the content root down to ``folder``
        parent_collection_slug: Slug of the nearest enclosing collection
        cfg: Application configuration

    Returns:
        WalkResult with the node for ``folder`` and the flat article and
        collection lists of its subtree, in sibling order
    """
    slug = "/".join(slug_pieces)
    node_id = path_to_id(slug)
    kind = classify(folder, cfg)

    if kind is NodeKind.STANDALONE:
        article = build_article_from_folder(folder, slug_pieces, parent_collection_slug, cfg)
        node = StandaloneArticleNode(
            id=node_id,
            slug=slug,
            title=article.title,
            status=article.status,
            article_slug=article.slug,
            collection_slug=article.collection_slug,
        )
        return WalkResult(tree=node, articles=[article], collections=[], self_article=article)

    if kind is NodeKind.COLLECTION:
        results = _walk_children(_content_children(folder, cfg), slug_pieces, slug, cfg)
        direct_articles = [r.self_article for r in results if r.self_article is not None]
        direct_collections = [r.self_collection for r in results if r.self_collection is not None]
        collection = build_collection_from_folder(
            folder, slug_pieces, direct_articles, direct_collections, cfg
        )
        node = CollectionNode(
            id=node_id,
            slug=slug,
            title=collection.title,
            status=collection.status,
            collection_slug=collection.slug,
            articles_count=collection.total_articles,
            collections_count=collection.total_collections,
            children=[r.tree for r in results],
        )
        return WalkResult(
            tree=node,
            articles=[a for r in results for a in r.articles],
            collections=[collection, *(c for r in results for c in r.collections)],
            self_collection=collection,
        )

    results = _walk_children(_content_children(folder, cfg), slug_pieces, parent_collection_slug, cfg)
    node = GroupNode(
        id=node_id,
        slug=slug,
        title=title_from_folder(folder.name) if slug_pieces else ROOT_TITLE,
        children=[r.tree for r in results],
        articles_count=sum(1 for r in results if r.self_article is not None),
        collections_count=sum(1 for r in results if r.self_collection is not None),
    )
    return WalkResult(
        tree=node,
        articles=[a for r in results for a in r.articles],
        collections=[c for r in results for c in r.collections],
    )


def _check_unique_slugs(articles: Sequence[Article], collections: Sequence[Collection]) -> None:
    seen: set[str] = set()
    for slug in [a.slug for a in articles] + [c.slug for c in collections]:
        if slug in seen:
            raise ContentError(f"Duplicate slug {slug!r}: two content folders slugify to the same path")
        seen.add(slug)


def load_all_from_disk(cfg: AppConfig) -> WalkResult:
    """Walk the configured content root.

    Raises:
        ContentRootNotFoundError: If the content root does not exist
        ContentError: On invalid front matter or slug collisions
    """
    root = Path(cfg.content.root)
    if not root.is_dir():
        raise ContentRootNotFoundError(root)
    result = walk(root, [], None, cfg)
    _check_unique_slugs(result.articles, result.collections)
    return result
