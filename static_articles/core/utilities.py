"""Slug, title, ordering and id helpers derived from folder names."""

from __future__ import annotations

import base64
import re
import unicodedata
from pathlib import Path
from typing import Any, Iterable

from ..errors import FrontmatterError
from .types import STATUSES


_NUMERIC_PREFIX_RE = re.compile(r"^([0-9]+)")
_NUMERIC_PREFIX_DASH_RE = re.compile(r"^[0-9]+-")
_TITLE_PREFIX_RE = re.compile(r"^[0-9]+[-_ ]*")
_DIGITS_RE = re.compile(r"(\d+)")


def slugify(name: str) -> str:
    """Convert a folder name to a URL-safe path segment.

    Examples:
        >>> slugify("03-My Folder!")
        'my-folder'
        >>> slugify("Rendering  Pipeline")
        'rendering-pipeline'
    """
    slug = name.strip()
    # Remove numeric ordering prefixes like "01-"
    slug = _NUMERIC_PREFIX_DASH_RE.sub("", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-zA-Z0-9\-]", "", slug)
    slug = re.sub(r"--+", "-", slug)
    slug = slug.strip("-")
    return slug.lower()


def numeric_prefix_or_none(name: str) -> int | None:
    match = _NUMERIC_PREFIX_RE.match(name)
    return int(match.group(1)) if match else None


def title_from_folder(name: str) -> str:
    """Derive a human title from a folder name ("02-computer_science" -> "Computer Science")."""
    stripped = _TITLE_PREFIX_RE.sub("", name.strip()) or name.strip()
    words = re.split(r"[-_\s]+", stripped)
    return " ".join(word[:1].upper() + word[1:] for word in words if word)


def path_to_id(slug: str) -> str:
    """Stable short id for a slug (base64url of the slug, root encoded as "/")."""
    encoded = base64.urlsafe_b64encode((slug or "/").encode("utf-8")).decode("ascii")
    return encoded.rstrip("=")[:16]


def _natural_key(name: str) -> list[Any]:
    parts = _DIGITS_RE.split(name)
    return [int(part) if index % 2 else part.casefold() for index, part in enumerate(parts)]


def sort_key(name: str) -> tuple[Any, ...]:
    """Sort key for sibling folders.

    Numerically prefixed names come first, ordered by their prefix; the rest
    follow in natural order. The raw name breaks every remaining tie.
    """
    prefix = numeric_prefix_or_none(name)
    if prefix is not None:
        return (0, prefix, _natural_key(name), name)
    return (1, 0, _natural_key(name), name)


def sort_dir_names(names: Iterable[str]) -> list[str]:
    return sorted(names, key=sort_key)


def parse_status(value: Any, path: Path | str, default: str) -> str:
    """Resolve a front matter status against the enumerated set."""
    if value is None:
        return default
    status = str(value).strip().lower()
    if status not in STATUSES:
        raise FrontmatterError(path, "status", f"one of {', '.join(STATUSES)}")
    return status


def extract_tags(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [tag.strip() for tag in value if isinstance(tag, str) and tag.strip()]


class Slugger:
    """GitHub-compatible heading slugger scoped to one document.

    Repeated slugs receive "-1", "-2", ... suffixes, so every id handed out by
    one instance is unique.
    """

    _STRIP_RE = re.compile(r"[^\w\- ]")

    def __init__(self) -> None:
        self._occurrences: dict[str, int] = {}

    def slug(self, text: str) -> str:
        base = self._normalize(text)
        slug = base
        if slug in self._occurrences:
            count = self._occurrences[base]
            while True:
                count += 1
                slug = f"{base}-{count}"
                if slug not in self._occurrences:
                    break
            self._occurrences[base] = count
        self._occurrences[slug] = 0
        return slug

    def reserve(self, slug: str) -> None:
        """Mark an id that already exists in the document as taken."""
        self._occurrences.setdefault(slug, 0)

    def _normalize(self, text: str) -> str:
        lowered = unicodedata.normalize("NFC", text).strip().lower()
        return self._STRIP_RE.sub("", lowered).replace(" ", "-")
