"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ContentConfig: Content source layout and front matter policy
- MarkdownConfig: Transform pipeline, table of contents and summary settings
- SiteConfig: Public site URL, deployment sub-path and feed metadata
- BuildConfig: Execution mode and artifact output directories
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml


EXECUTION_MODES = ("production", "development")


@dataclass
class ContentConfig:
    """Configuration for the content source tree.

    Attributes:
        root: Directory holding the nested content folders
        index_filename: File that marks a folder as content-bearing
        summary_filename: Optional sibling file holding a dedicated summary
        require_slug: If True, front matter must carry a non-empty "slug"
        default_status: Status applied when front matter omits "status"
        image_dir_suffix: Folders ending with this name are copied as assets
    """

    root: str = "content"
    index_filename: str = "index.md"
    summary_filename: str = "summary.md"
    require_slug: bool = False
    default_status: str = "draft"
    image_dir_suffix: str = "images"


@dataclass
class MarkdownConfig:
    """Configuration for the document transform pipeline.

    Attributes:
        class_prefix: Prefix of the semantic classes added to every element
        toc_min_depth: Shallowest heading level listed in the table of contents
        toc_max_depth: Deepest heading level listed in the table of contents
        summary_max_chars: Cap for excerpts derived from the document body
        words_per_minute: Reading speed used for reading-time statistics
        highlight: Whether fenced code blocks are syntax highlighted
    """

    class_prefix: str = "md-"
    toc_min_depth: int = 2
    toc_max_depth: int = 4
    summary_max_chars: int = 200
    words_per_minute: int = 200
    highlight: bool = True


@dataclass
class SiteConfig:
    """Configuration for the public site.

    Attributes:
        site_url: Absolute origin used for canonical URLs, sitemap and feed
        repo_name: Optional deployment sub-path (e.g. GitHub Pages repo name)
        feed_title: RSS channel title
        feed_description: RSS channel description
    """

    site_url: str = "https://example.com"
    repo_name: str = ""
    feed_title: str = "Articles"
    feed_description: str = "Latest articles"


@dataclass
class BuildConfig:
    """Configuration for a build.

    Attributes:
        mode: "production" builds once, hides drafts and writes artifacts;
              "development" rebuilds on every access and includes drafts
        cache_dir: Directory receiving the JSON snapshots
        public_dir: Directory receiving sitemap.xml, rss.xml and image assets
        copy_assets: Whether image folders are copied into public_dir
    """

    mode: str = "production"
    cache_dir: str = ".cache"
    public_dir: str = "public"
    copy_assets: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "build.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    content: ContentConfig = field(default_factory=ContentConfig)
    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)
    site: SiteConfig = field(default_factory=SiteConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


DEFAULT_CONFIG = AppConfig()


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults and env overrides."""
    if not path:
        return apply_env_overrides(_fromdict(_asdict(DEFAULT_CONFIG)))

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return apply_env_overrides(_merge_config(DEFAULT_CONFIG, raw))


def apply_env_overrides(cfg: AppConfig) -> AppConfig:
    """Apply SITE_URL, REPO_NAME and CONTENT_MODE environment overrides."""
    site_url = os.getenv("SITE_URL")
    if site_url:
        cfg.site.site_url = site_url
    repo_name = os.getenv("REPO_NAME")
    if repo_name:
        cfg.site.repo_name = repo_name
    mode = os.getenv("CONTENT_MODE")
    if mode:
        cfg.build.mode = mode
    if cfg.build.mode not in EXECUTION_MODES:
        raise ValueError(
            f"Unknown build mode {cfg.build.mode!r}; expected one of {', '.join(EXECUTION_MODES)}"
        )
    return cfg


def is_live(cfg: AppConfig) -> bool:
    """Live mode rebuilds on every access and keeps drafts visible."""
    return cfg.build.mode == "development"


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "content": {
            "root": cfg.content.root,
            "index_filename": cfg.content.index_filename,
            "summary_filename": cfg.content.summary_filename,
            "require_slug": cfg.content.require_slug,
            "default_status": cfg.content.default_status,
            "image_dir_suffix": cfg.content.image_dir_suffix,
        },
        "markdown": {
            "class_prefix": cfg.markdown.class_prefix,
            "toc_min_depth": cfg.markdown.toc_min_depth,
            "toc_max_depth": cfg.markdown.toc_max_depth,
            "summary_max_chars": cfg.markdown.summary_max_chars,
            "words_per_minute": cfg.markdown.words_per_minute,
            "highlight": cfg.markdown.highlight,
        },
        "site": {
            "site_url": cfg.site.site_url,
            "repo_name": cfg.site.repo_name,
            "feed_title": cfg.site.feed_title,
            "feed_description": cfg.site.feed_description,
        },
        "build": {
            "mode": cfg.build.mode,
            "cache_dir": cfg.build.cache_dir,
            "public_dir": cfg.build.public_dir,
            "copy_assets": cfg.build.copy_assets,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "filename": cfg.logging.filename,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        content=ContentConfig(**data["content"]),
        markdown=MarkdownConfig(**data["markdown"]),
        site=SiteConfig(**data["site"]),
        build=BuildConfig(**data["build"]),
        logging=LoggingConfig(**data["logging"]),
    )
