"""
Error types raised while resolving the content tree.

Content errors are fatal: they abort the whole build so that no partial tree
is ever served. Dev image errors carry the HTTP status the serving layer
should answer with.
"""

from __future__ import annotations

from pathlib import Path


class ContentError(Exception):
    """Base class for fatal content errors."""


class ContentRootNotFoundError(ContentError):
    def __init__(self, root: Path):
        super().__init__(f"Content directory not found: {root}")
        self.root = root


class MissingIndexError(ContentError):
    def __init__(self, folder: Path, kind: str):
        super().__init__(f"{kind.capitalize()} missing index.md at {folder}")
        self.folder = folder
        self.kind = kind


class FrontmatterError(ContentError):
    """Raised when a required front matter field is missing or malformed.

    Attributes:
        path: The offending Markdown file
        field: The front matter key that failed validation
    """

    def __init__(self, path: Path | str, field: str, requirement: str):
        super().__init__(f'Invalid frontmatter in {path}: "{field}" must be {requirement}.')
        self.path = Path(path)
        self.field = field


class DevImageError(Exception):
    """Raised by the development image resolver.

    Attributes:
        status: HTTP status code the serving layer should respond with
    """

    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.status = status
