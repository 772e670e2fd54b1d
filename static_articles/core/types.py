"""
Core data types for the content model.

This module defines the records produced by a build:
- Article: A fully rendered standalone or collection-member document
- Collection: A document whose folder holds further content folders
- SubjectNode: The navigation tree, a tagged union of three node variants
  discriminated by their ``kind`` field
- WalkResult: What the tree walker returns for one directory

All records are frozen; the walker is their only writer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


STATUSES = ("draft", "published", "archived")


class NodeKind(str, Enum):
    STANDALONE = "standalone"
    COLLECTION = "collection"
    NODE = "node"


@dataclass(frozen=True)
class Heading:
    """A table-of-contents entry.

    Attributes:
        id: Anchor id, unique within its document
        text: Plain heading text
        level: Heading depth (1-6)
    """

    id: str
    text: str
    level: int


@dataclass(frozen=True)
class Summary:
    text: str
    html: str


@dataclass(frozen=True)
class ReadingTime:
    text: str
    minutes: float
    words: int


@dataclass(frozen=True)
class Article:
    """A rendered document.

    Attributes:
        slug: Corpus-unique "/"-joined path of slugified folder names
        title: Title from front matter
        status: One of "draft", "published", "archived"
        date: ISO 8601 UTC timestamp from front matter
        summary: Plain-text and HTML summary
        cover: Cover image path relative to the article folder, if any
        content: Raw Markdown body (front matter removed)
        html: Body rendered through the transform pipeline
        headings: Table-of-contents entries
        reading_time: Reading-time statistics of the body
        tags: Front matter tags
        collection_slug: Slug of the enclosing collection, None if top-level
        folder: Absolute source folder, only kept in development mode
    """

    slug: str
    title: str
    status: str
    date: str
    summary: Summary
    cover: Optional[str]
    content: str
    html: str
    headings: list[Heading]
    reading_time: ReadingTime
    tags: list[str] = field(default_factory=list)
    collection_slug: Optional[str] = None
    folder: Optional[str] = None


@dataclass(frozen=True)
class Collection:
    """A document grouping direct child articles and collections.

    ``articles`` and ``collections`` hold direct children only; the totals are
    their lengths, not subtree sizes.
    """

    slug: str
    title: str
    status: str
    cover: Optional[str]
    summary: Summary
    articles: list[Article] = field(default_factory=list)
    collections: list["Collection"] = field(default_factory=list)
    total_articles: int = 0
    total_collections: int = 0
    folder: Optional[str] = None


@dataclass(frozen=True)
class StandaloneArticleNode:
    id: str
    slug: str
    title: str
    status: str
    article_slug: str
    collection_slug: Optional[str] = None
    kind: NodeKind = field(default=NodeKind.STANDALONE, init=False)


@dataclass(frozen=True)
class CollectionNode:
    id: str
    slug: str
    title: str
    status: str
    collection_slug: str
    articles_count: int
    collections_count: int
    children: list["SubjectNode"] = field(default_factory=list)
    kind: NodeKind = field(default=NodeKind.COLLECTION, init=False)


@dataclass(frozen=True)
class GroupNode:
    """Structural node mirroring a directory without index.md."""

    id: str
    slug: str
    title: str
    children: list["SubjectNode"] = field(default_factory=list)
    articles_count: int = 0
    collections_count: int = 0
    status: Optional[str] = None
    kind: NodeKind = field(default=NodeKind.NODE, init=False)


SubjectNode = Union[StandaloneArticleNode, CollectionNode, GroupNode]


@dataclass(frozen=True)
class WalkResult:
    """Result of walking one directory.

    Attributes:
        tree: Navigation node for the directory
        articles: Every article at or below the directory
        collections: Every collection at or below the directory
        self_article: The directory's own article when it is a standalone article
        self_collection: The directory's own collection when it is a collection
    """

    tree: SubjectNode
    articles: list[Article]
    collections: list[Collection]
    self_article: Optional[Article] = None
    self_collection: Optional[Collection] = None
