"""
Content store: memoized build plus read-only accessors.

The store owns one build task. Concurrent callers of ensure_loaded() share the
in-flight build instead of walking the content tree twice. In live
(development) mode every call starts a fresh build so edits on disk show up
immediately; otherwise the first build is kept until invalidate() or
reload().

A successful production build also writes the JSON snapshots, sitemap, RSS
feed and image assets.
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Union

from ..config import AppConfig, is_live
from ..core.types import (
    Article,
    Collection,
    CollectionNode,
    GroupNode,
    NodeKind,
    StandaloneArticleNode,
    SubjectNode,
    WalkResult,
)
from ..errors import DevImageError
from ..logging_utils import log_event
from .artifacts import write_artifacts
from .routes import article_path, canonical_url, collection_path
from .tree import load_all_from_disk

logger = logging.getLogger(__name__)

DRAFT = "draft"


@dataclass(frozen=True)
class DevImage:
    path: Path
    content_type: str


def _count_direct(children: list[SubjectNode]) -> tuple[int, int]:
    articles = sum(1 for c in children if c.kind is NodeKind.STANDALONE)
    collections = sum(1 for c in children if c.kind is NodeKind.COLLECTION)
    return articles, collections


def filter_draft_nodes(node: SubjectNode) -> Optional[SubjectNode]:
    """Drop draft nodes and the structural nodes they leave empty.

    Direct-child counts are recomputed from the surviving children. The root
    node is always kept.
    """
    if node.kind is NodeKind.STANDALONE:
        return None if node.status == DRAFT else node

    if node.kind is NodeKind.COLLECTION and node.status == DRAFT:
        return None

    children = [kept for kept in (filter_draft_nodes(c) for c in node.children) if kept is not None]
    articles_count, collections_count = _count_direct(children)
    if node.kind is NodeKind.NODE and not children and node.slug:
        return None
    return replace(
        node,
        children=children,
        articles_count=articles_count,
        collections_count=collections_count,
    )


def _visible_slugs(node: SubjectNode, articles: set[str], collections: set[str]) -> None:
    if node.kind is NodeKind.STANDALONE:
        articles.add(node.article_slug)
        return
    if node.kind is NodeKind.COLLECTION:
        collections.add(node.collection_slug)
    for child in node.children:
        _visible_slugs(child, articles, collections)


def filter_drafts(result: WalkResult) -> WalkResult:
    """Published view of a build: drafts and everything only reachable through them removed."""
    tree = filter_draft_nodes(result.tree) or result.tree
    article_slugs: set[str] = set()
    collection_slugs: set[str] = set()
    _visible_slugs(tree, article_slugs, collection_slugs)

    def prune(collection: Collection) -> Collection:
        articles = [a for a in collection.articles if a.slug in article_slugs]
        children = [prune(c) for c in collection.collections if c.slug in collection_slugs]
        return replace(
            collection,
            articles=articles,
            collections=children,
            total_articles=len(articles),
            total_collections=len(children),
        )

    return WalkResult(
        tree=tree,
        articles=[a for a in result.articles if a.slug in article_slugs],
        collections=[prune(c) for c in result.collections if c.slug in collection_slugs],
    )


class ContentStore:
    """Memoized content build and the accessors the site layer reads from.

    Attributes:
        cfg: Application configuration
    """

    def __init__(self, cfg: AppConfig):
        self.cfg = cfg
        self._task: asyncio.Future[WalkResult] | None = None
        self._published: tuple[WalkResult, WalkResult] | None = None

    @property
    def live(self) -> bool:
        return is_live(self.cfg)

    def invalidate(self) -> None:
        """Discard the memoized build; the next access rebuilds."""
        self._task = None
        self._published = None

    async def reload(self) -> WalkResult:
        self.invalidate()
        return await self.ensure_loaded()

    async def ensure_loaded(self) -> WalkResult:
        """Return the memoized build, starting it if needed.

        A failed build stays memoized, and keeps raising, until invalidate();
        live mode retries on every call. Cancelling one caller leaves the
        shared build running for the others.
        """
        if self._task is None or self.live:
            self._task = asyncio.ensure_future(self._build())
        return await asyncio.shield(self._task)

    async def _build(self) -> WalkResult:
        started = time.perf_counter()
        log_event(
            logger,
            f"Building content from {self.cfg.content.root}",
            event="build_start",
            root=self.cfg.content.root,
            mode=self.cfg.build.mode,
        )
        result = await asyncio.to_thread(load_all_from_disk, self.cfg)
        articles = sorted(result.articles, key=lambda a: a.date, reverse=True)
        result = replace(result, articles=articles)

        if not self.live:
            await asyncio.to_thread(write_artifacts, result, self.cfg, filter_drafts(result))

        log_event(
            logger,
            f"Built {len(result.articles)} articles and {len(result.collections)} collections",
            event="build_done",
            articles=len(result.articles),
            collections=len(result.collections),
            elapsed_s=round(time.perf_counter() - started, 3),
        )
        return result

    async def _view(self, include_drafts: bool | None) -> WalkResult:
        result = await self.ensure_loaded()
        if include_drafts is None:
            include_drafts = self.live
        if include_drafts:
            return result
        if self._published is None or self._published[0] is not result:
            self._published = (result, filter_drafts(result))
        return self._published[1]

    async def get_subject_tree(self, include_drafts: bool | None = None) -> SubjectNode:
        return (await self._view(include_drafts)).tree

    async def get_all_articles(self, include_drafts: bool | None = None) -> list[Article]:
        """Every article, newest first. Drafts are hidden outside live mode by default."""
        return list((await self._view(include_drafts)).articles)

    async def get_collections(self, include_drafts: bool | None = None) -> list[Collection]:
        return list((await self._view(include_drafts)).collections)

    async def get_article_by_slug(self, slug: str, include_drafts: bool | None = None) -> Article | None:
        for article in (await self._view(include_drafts)).articles:
            if article.slug == slug:
                return article
        return None

    async def get_collection_by_slug(
        self, slug: str, include_drafts: bool | None = None
    ) -> Collection | None:
        for collection in (await self._view(include_drafts)).collections:
            if collection.slug == slug:
                return collection
        return None

    async def get_all_tags(self, include_drafts: bool | None = None) -> list[str]:
        tags = {tag for a in (await self._view(include_drafts)).articles for tag in a.tags}
        return sorted(tags, key=str.casefold)

    async def get_articles_by_tag(self, tag: str, include_drafts: bool | None = None) -> list[Article]:
        wanted = tag.casefold()
        return [
            a
            for a in (await self._view(include_drafts)).articles
            if any(t.casefold() == wanted for t in a.tags)
        ]

    async def get_knowledge_path(self, slug: str, include_drafts: bool | None = None) -> list[SubjectNode]:
        """Nodes from the top level down to the node with ``slug`` (empty if absent)."""
        tree = await self.get_subject_tree(include_drafts)

        def search(node: SubjectNode, trail: list[SubjectNode]) -> list[SubjectNode] | None:
            if node.slug == slug:
                return trail
            if node.kind is NodeKind.STANDALONE:
                return None
            for child in node.children:
                found = search(child, [*trail, child])
                if found is not None:
                    return found
            return None

        if not slug:
            return []
        return search(tree, []) or []

    async def get_adjacent_articles(
        self, slug: str, include_drafts: bool | None = None
    ) -> tuple[Article | None, Article | None]:
        """Previous and next article within the article's parent collection."""
        article = await self.get_article_by_slug(slug, include_drafts)
        if article is None or not article.collection_slug:
            return None, None
        parent = await self.get_collection_by_slug(article.collection_slug, include_drafts)
        if parent is None:
            return None, None
        slugs = [a.slug for a in parent.articles]
        if slug not in slugs:
            return None, None
        index = slugs.index(slug)
        previous = parent.articles[index - 1] if index > 0 else None
        following = parent.articles[index + 1] if index + 1 < len(slugs) else None
        return previous, following

    def canonical_url(self, entity: Union[Article, Collection]) -> str:
        if isinstance(entity, Article):
            return canonical_url(article_path(entity), self.cfg.site)
        return canonical_url(collection_path(entity.slug), self.cfg.site)

    async def resolve_dev_image(self, slug: str | None, image_path: str | None) -> DevImage:
        """Locate an image requested through the development image endpoint.

        Raises:
            DevImageError: 400 for missing parameters, 404 for an unknown
                document or missing file, 403 for paths escaping the document folder
        """
        if not slug or not image_path:
            raise DevImageError("Missing parameters", 400)

        target: Article | Collection | None = await self.get_article_by_slug(slug, include_drafts=True)
        if target is None:
            target = await self.get_collection_by_slug(slug, include_drafts=True)
        if target is None or not target.folder:
            raise DevImageError("Not found", 404)

        folder = Path(target.folder).resolve()
        full_path = (folder / image_path).resolve()
        if not full_path.is_relative_to(folder):
            raise DevImageError("Forbidden", 403)
        if not full_path.is_file():
            raise DevImageError("Image not found", 404)

        content_type = mimetypes.guess_type(full_path.name)[0] or "application/octet-stream"
        return DevImage(path=full_path, content_type=content_type)
