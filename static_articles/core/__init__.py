"""
Core domain models and helpers.

This package contains data types and folder/front matter helpers that are
independent of the transform pipeline and the tree walker.
"""

from .frontmatter import MarkdownFile, derive_cover, ensure_basics, load_markdown, parse_date
from .types import (
    Article,
    Collection,
    CollectionNode,
    GroupNode,
    Heading,
    NodeKind,
    ReadingTime,
    StandaloneArticleNode,
    SubjectNode,
    Summary,
    WalkResult,
)
from .utilities import (
    Slugger,
    extract_tags,
    numeric_prefix_or_none,
    parse_status,
    path_to_id,
    slugify,
    sort_dir_names,
    title_from_folder,
)

__all__ = [
    "Article",
    "Collection",
    "CollectionNode",
    "GroupNode",
    "Heading",
    "MarkdownFile",
    "NodeKind",
    "ReadingTime",
    "Slugger",
    "StandaloneArticleNode",
    "SubjectNode",
    "Summary",
    "WalkResult",
    "derive_cover",
    "ensure_basics",
    "extract_tags",
    "load_markdown",
    "numeric_prefix_or_none",
    "parse_date",
    "parse_status",
    "path_to_id",
    "slugify",
    "sort_dir_names",
    "title_from_folder",
]
