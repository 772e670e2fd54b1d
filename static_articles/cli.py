"""
Command-line interface for Static Articles.

Uses Typer to provide a CLI with options for the major configuration
settings. Supports loading .env files for SITE_URL, REPO_NAME and
CONTENT_MODE.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from .config import EXECUTION_MODES, AppConfig, is_live, load_config
from .content.store import ContentStore, filter_drafts
from .content.tree import load_all_from_disk
from .core.types import NodeKind, SubjectNode
from .errors import ContentError
from .logging_utils import setup_logging

app = typer.Typer(add_completion=False)
console = Console()


def _configure(
    config: Path | None,
    content: Path | None,
    mode: str | None,
    site_url: str | None = None,
    repo_name: str | None = None,
    cache_dir: Path | None = None,
    public_dir: Path | None = None,
    log_level: str | None = None,
    log_format: str | None = None,
    log_file: bool | None = None,
) -> AppConfig:
    # Load environment variables from .env if available
    load_dotenv()
    cfg = load_config(str(config) if config else None)

    # Override with CLI options
    if content is not None:
        cfg.content.root = str(content)
    if mode:
        if mode not in EXECUTION_MODES:
            raise typer.BadParameter(f"expected one of {', '.join(EXECUTION_MODES)}", param_hint="--mode")
        cfg.build.mode = mode
    if site_url:
        cfg.site.site_url = site_url
    if repo_name is not None:
        cfg.site.repo_name = repo_name
    if cache_dir is not None:
        cfg.build.cache_dir = str(cache_dir)
    if public_dir is not None:
        cfg.build.public_dir = str(public_dir)
    if log_level:
        cfg.logging.level = log_level
    if log_format:
        cfg.logging.format = log_format
    if log_file is not None:
        cfg.logging.file = log_file
    return cfg


@app.command()
def build(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    content: Path | None = typer.Option(None, "--content", help="Content root directory."),
    mode: str | None = typer.Option(None, "--mode", help="production or development."),
    site_url: str | None = typer.Option(None, "--site-url", help="Absolute site origin."),
    repo_name: str | None = typer.Option(None, "--repo-name", help="Deployment sub-path."),
    cache_dir: Path | None = typer.Option(None, "--cache-dir", help="JSON snapshot directory."),
    public_dir: Path | None = typer.Option(None, "--public-dir", help="Sitemap, feed and asset directory."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(None, "--log-format", help="Log file format: jsonl or plain."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Build the content tree and write snapshots, sitemap and RSS feed.

    Exits with status 1 when the content fails validation.
    """
    cfg = _configure(
        config, content, mode, site_url, repo_name, cache_dir, public_dir, log_level, log_format, log_file
    )
    setup_logging(cfg.logging, Path(cfg.build.cache_dir))

    store = ContentStore(cfg)
    try:
        result = asyncio.run(store.ensure_loaded())
    except ContentError as exc:
        console.print(f"[red]Build failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print(
        f"Built {len(result.articles)} articles and {len(result.collections)} collections "
        f"({cfg.build.mode})"
    )
    if not is_live(cfg):
        console.print(f"Snapshots: {cfg.build.cache_dir}")
        console.print(f"Sitemap and feed: {cfg.build.public_dir}")


def _label(node: SubjectNode) -> str:
    title = escape(node.title)
    if node.kind is NodeKind.STANDALONE:
        return f"{title} [dim]{node.slug}[/dim] [cyan]{node.status}[/cyan]"
    if node.kind is NodeKind.COLLECTION:
        return (
            f"[bold]{title}[/bold] [dim]{node.slug}[/dim] [cyan]{node.status}[/cyan] "
            f"({node.articles_count} articles, {node.collections_count} collections)"
        )
    return f"[bold magenta]{title}[/bold magenta]"


def _add_children(branch: Tree, node: SubjectNode) -> None:
    if node.kind is NodeKind.STANDALONE:
        return
    for child in node.children:
        _add_children(branch.add(_label(child)), child)


@app.command()
def tree(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    content: Path | None = typer.Option(None, "--content", help="Content root directory."),
    mode: str | None = typer.Option(None, "--mode", help="production or development."),
    drafts: bool | None = typer.Option(
        None, "--drafts/--no-drafts", help="Show drafts (default: only in development)."
    ),
):
    """Print the navigation tree without writing any artifact."""
    cfg = _configure(config, content, mode)
    setup_logging(cfg.logging, None)

    try:
        result = load_all_from_disk(cfg)
    except ContentError as exc:
        console.print(f"[red]Build failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    show_drafts = is_live(cfg) if drafts is None else drafts
    if not show_drafts:
        result = filter_drafts(result)

    root = Tree(_label(result.tree))
    _add_children(root, result.tree)
    console.print(root)


if __name__ == "__main__":
    app()
