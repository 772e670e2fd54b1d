"""
Front matter loading and validation.

Markdown files carry a YAML front matter block. The loader splits it from the
body with python-frontmatter; validation enforces the fields every content
folder must provide and raises FrontmatterError naming the file and field.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import frontmatter
import yaml

from ..errors import FrontmatterError

logger = logging.getLogger(__name__)


@dataclass
class MarkdownFile:
    """A Markdown file split into front matter and body.

    Attributes:
        path: Source file
        data: Front matter mapping (empty when the file has none)
        content: Body with the front matter removed
    """

    path: Path
    data: dict[str, Any]
    content: str


def load_markdown(path: Path) -> MarkdownFile:
    """Split ``path`` into front matter and body.

    Raises:
        FrontmatterError: If the front matter is not valid YAML, or holds a
            value YAML cannot construct (such as the date 2024-02-30)
    """
    try:
        post = frontmatter.load(str(path))
    except yaml.YAMLError as exc:
        raise FrontmatterError(path, "front matter", "valid YAML") from exc
    except ValueError as exc:
        raise FrontmatterError(path, _unloadable_field(path), f"valid ({exc})") from exc
    return MarkdownFile(path=path, data=dict(post.metadata), content=post.content)


def _unloadable_field(path: Path) -> str:
    """Name the front matter key whose value fails to load, re-reading every value as plain text."""
    try:
        fm, _ = frontmatter.YAMLHandler().split(path.read_text(encoding="utf-8"))
        raw = yaml.load(fm, Loader=yaml.BaseLoader)
    except (ValueError, yaml.YAMLError):
        return "front matter"
    if not isinstance(raw, dict):
        return "front matter"
    for key, value in raw.items():
        if not isinstance(value, str):
            continue
        try:
            yaml.safe_load(value)
        except yaml.YAMLError:
            continue
        except ValueError:
            return str(key)
    return "front matter"


def parse_date(value: Any) -> datetime | None:
    """Parse a front matter date into a timezone-aware datetime.

    YAML turns unquoted ISO dates into ``date``/``datetime`` objects, so those
    are accepted alongside strings. Returns None when the value is unusable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        if raw.endswith("Z"):
            raw = f"{raw[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_date(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def ensure_basics(data: dict[str, Any], path: Path, *, require_slug: bool = False) -> None:
    """Validate the front matter fields required of every content folder."""
    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise FrontmatterError(path, "title", "non-empty")

    if parse_date(data.get("date")) is None:
        raise FrontmatterError(path, "date", "a valid ISO date")

    if require_slug:
        slug = data.get("slug")
        if not isinstance(slug, str) or not slug.strip():
            raise FrontmatterError(path, "slug", "non-empty")


def derive_cover(front: dict[str, Any], folder: Path) -> str | None:
    """Resolve the cover image key against the folder.

    The relative path is kept whether or not the file exists; the rendering
    layer performs the final resolution.
    """
    key = front.get("coverImage", front.get("cover"))
    if not isinstance(key, str) or not key.strip():
        return None
    rel = key.strip()
    if not (folder / rel).is_file():
        logger.debug("Cover %s not found under %s; keeping relative path", rel, folder)
    return rel
