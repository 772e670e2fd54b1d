"""
Build artifacts written after a successful production build.

- JSON snapshots of the tree, articles and collections in the cache directory
- sitemap.xml and rss.xml in the public directory, rendered from Jinja2 templates
- image folders copied next to each document's public path

Artifacts are side effects: a failed write is logged and the build goes on.
"""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import asdict
from email.utils import format_datetime
from pathlib import Path
from typing import Any, Callable, Iterator, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from ..config import AppConfig, SiteConfig
from ..core.frontmatter import parse_date
from ..core.types import Article, Collection, WalkResult
from ..core.utilities import slugify
from ..logging_utils import log_event, log_warning
from .routes import article_path, canonical_url, collection_path, site_url
from .tree import has_index, list_child_dirs

logger = logging.getLogger(__name__)

TREE_SNAPSHOT = "content-tree.json"
ARTICLES_SNAPSHOT = "articles.json"
COLLECTIONS_SNAPSHOT = "collections.json"
SITEMAP_FILENAME = "sitemap.xml"
RSS_FILENAME = "rss.xml"


def _cdata(value: Any) -> Markup:
    text = str(value).replace("]]>", "]]]]><![CDATA[>")
    return Markup(f"<![CDATA[{text}]]>")


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(Path(__file__).parent.parent / "templates")),
        autoescape=select_autoescape(["xml"]),
    )
    env.filters["cdata"] = _cdata
    return env


def _dump_json(path: Path, payload: Any) -> None:
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False, default=str), encoding="utf-8")


def persist_caches(result: WalkResult, cache_dir: Path) -> list[Path]:
    """Write the tree, article and collection snapshots as JSON."""
    cache_dir.mkdir(parents=True, exist_ok=True)
    paths = [cache_dir / TREE_SNAPSHOT, cache_dir / ARTICLES_SNAPSHOT, cache_dir / COLLECTIONS_SNAPSHOT]
    _dump_json(paths[0], asdict(result.tree))
    _dump_json(paths[1], [asdict(a) for a in result.articles])
    _dump_json(paths[2], [asdict(c) for c in result.collections])
    return paths


def sitemap_urls(
    articles: Sequence[Article], collections: Sequence[Collection], site: SiteConfig
) -> list[str]:
    """Distinct canonical URLs of the site root and every page, sorted."""
    pages = {f"{site_url(site)}/"}
    pages.update(canonical_url(article_path(a), site) for a in articles)
    pages.update(canonical_url(collection_path(c.slug), site) for c in collections)
    return sorted(pages)


def render_sitemap(articles: Sequence[Article], collections: Sequence[Collection], site: SiteConfig) -> str:
    template = _environment().get_template(SITEMAP_FILENAME)
    return template.render(urls=sitemap_urls(articles, collections, site))


def render_rss(articles: Sequence[Article], site: SiteConfig) -> str:
    """Render the RSS 2.0 feed, one item per article in list order."""
    items = []
    for article in articles:
        link = canonical_url(article_path(article), site)
        published = parse_date(article.date)
        items.append(
            {
                "title": article.title,
                "link": link,
                "pub_date": format_datetime(published, usegmt=True) if published else "",
                "description": article.summary.text,
            }
        )
    template = _environment().get_template(RSS_FILENAME)
    return template.render(
        title=site.feed_title,
        description=site.feed_description,
        site_url=site_url(site),
        items=items,
    )


def generate_sitemap(
    articles: Sequence[Article], collections: Sequence[Collection], site: SiteConfig, public_dir: Path
) -> Path:
    public_dir.mkdir(parents=True, exist_ok=True)
    path = public_dir / SITEMAP_FILENAME
    path.write_text(render_sitemap(articles, collections, site), encoding="utf-8")
    return path


def generate_rss(articles: Sequence[Article], site: SiteConfig, public_dir: Path) -> Path:
    public_dir.mkdir(parents=True, exist_ok=True)
    path = public_dir / RSS_FILENAME
    path.write_text(render_rss(articles, site), encoding="utf-8")
    return path


def _content_folders(folder: Path, slug_pieces: list[str], cfg: AppConfig) -> Iterator[tuple[Path, str]]:
    if has_index(folder, cfg):
        yield folder, "/".join(slug_pieces)
    for child in list_child_dirs(folder):
        yield from _content_folders(child, [*slug_pieces, slugify(child.name)], cfg)


def copy_image_assets(
    articles: Sequence[Article], collections: Sequence[Collection], cfg: AppConfig
) -> list[Path]:
    """Copy ``*images`` folders of every document under its public canonical path."""
    public_paths = {a.slug: article_path(a) for a in articles}
    public_paths.update({c.slug: collection_path(c.slug) for c in collections})
    public_dir = Path(cfg.build.public_dir)
    suffix = cfg.content.image_dir_suffix

    copied = []
    for folder, slug in _content_folders(Path(cfg.content.root), [], cfg):
        target_base = public_paths.get(slug)
        if target_base is None:
            continue
        for child in list_child_dirs(folder):
            if not child.name.endswith(suffix) or has_index(child, cfg):
                continue
            target = public_dir / target_base.strip("/") / child.name
            shutil.copytree(child, target, dirs_exist_ok=True)
            copied.append(target)
    return copied


def write_artifacts(
    result: WalkResult, cfg: AppConfig, published: WalkResult | None = None
) -> dict[str, Any]:
    """Write every artifact; failures are logged per artifact and skipped.

    Snapshots hold the full build. The sitemap, feed and image assets are
    written from ``published`` when given, so drafts stay off the public site.
    """
    public = published or result
    cache_dir = Path(cfg.build.cache_dir)
    public_dir = Path(cfg.build.public_dir)
    steps: list[tuple[str, Callable[[], Any]]] = [
        ("snapshots", lambda: persist_caches(result, cache_dir)),
        ("sitemap", lambda: generate_sitemap(public.articles, public.collections, cfg.site, public_dir)),
        ("rss", lambda: generate_rss(public.articles, cfg.site, public_dir)),
    ]
    if cfg.build.copy_assets:
        steps.append(("images", lambda: copy_image_assets(public.articles, public.collections, cfg)))

    written: dict[str, Any] = {}
    for name, step in steps:
        try:
            written[name] = step()
        except OSError as exc:
            log_warning(
                logger,
                f"Failed to write {name}: {exc}",
                event="artifact_write_failed",
                artifact=name,
                error=str(exc),
            )
            continue
        log_event(logger, f"Wrote {name}", event="artifact_written", artifact=name)
    return written
