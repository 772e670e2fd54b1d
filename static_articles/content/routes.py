"""Canonical paths and URLs for articles and collections."""

from __future__ import annotations

from ..config import SiteConfig
from ..core.types import Article


def base_path(site: SiteConfig) -> str:
    """Deployment sub-path ("" or "/<repo>") prefixed to public asset paths."""
    repo = site.repo_name.strip("/ ")
    return f"/{repo}" if repo else ""


def site_url(site: SiteConfig) -> str:
    """Absolute site origin without a trailing slash, including the sub-path."""
    url = site.site_url.strip().rstrip("/")
    prefix = base_path(site)
    if prefix and not url.endswith(prefix):
        url = f"{url}{prefix}"
    return url


def collection_path(slug: str) -> str:
    return f"/collections/{slug}/"


def article_path(article: Article) -> str:
    """Canonical path of an article.

    Articles inside a collection live in the collection namespace, so the
    chapter "bar/chapter-1" of collection "bar" is /collections/bar/chapter-1/.
    """
    if article.collection_slug:
        return collection_path(article.slug)
    return f"/articles/{article.slug}/"


def canonical_url(path: str, site: SiteConfig) -> str:
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{site_url(site)}{path}"
