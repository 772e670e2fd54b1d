"""
Static Articles - Markdown content tree resolver.

This package walks a directory of nested Markdown folders, classifies each
folder as an article, a collection or a structural node, renders every
document to HTML and publishes JSON snapshots, a sitemap and an RSS feed.

Main entry point is the CLI via `static-articles build` command.

Example:
    $ static-articles build --content content/ --site-url https://blog.example.org
"""

__all__ = ["__version__", "ContentStore", "load_config", "markdown_to_html", "slugify"]
__version__ = "0.1.0"

from .config import load_config
from .content.store import ContentStore
from .core.utilities import slugify
from .rendering.pipeline import markdown_to_html
