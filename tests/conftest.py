from __future__ import annotations

import logging
from pathlib import Path

import pytest

from static_articles.config import AppConfig


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    for name in ("SITE_URL", "REPO_NAME", "CONTENT_MODE"):
        monkeypatch.delenv(name, raising=False)
    yield
    logger = logging.getLogger("static_articles")
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def write_doc(
    folder: Path,
    title: str = "Untitled",
    date: str = "2024-01-01",
    status: str | None = "published",
    body: str = "Body text.",
    extra: str = "",
) -> Path:
    """Create ``folder/index.md`` with front matter and return the folder."""
    folder.mkdir(parents=True, exist_ok=True)
    lines = ["---", f"title: {title}", f"date: {date}"]
    if status is not None:
        lines.append(f"status: {status}")
    if extra:
        lines.append(extra.strip("\n"))
    lines.append("---")
    (folder / "index.md").write_text("\n".join(lines) + "\n" + body + "\n", encoding="utf-8")
    return folder


@pytest.fixture
def make_doc():
    return write_doc


@pytest.fixture
def site_tree(tmp_path: Path) -> Path:
    """A content root with standalone articles, a collection and ignored folders.

    content/
      01-intro/            standalone (tags python, web) with images/pic.png
      02-setup/            standalone
      empty/               no content
      guides/              structural node
        03-python-guide/   collection
          01-basics/       article (tags python) with images/diagram.png
          02-advanced/     draft article
          03-extras/       structural node
            01-tips/       article
      notes/scratch.md     Markdown without index.md
    """
    root = tmp_path / "content"
    intro = write_doc(
        root / "01-intro",
        title="Introduction",
        date="2024-01-01",
        body="Welcome to the site.\n\n![pic](./images/pic.png)",
        extra="tags:\n  - python\n  - web",
    )
    (intro / "images").mkdir()
    (intro / "images" / "pic.png").write_bytes(b"\x89PNG fake")
    write_doc(root / "02-setup", title="Setup", date="2024-02-01")
    (root / "empty").mkdir()

    guide = root / "guides" / "03-python-guide"
    write_doc(guide, title="Python Guide", date="2024-01-15", body="A guide to Python.")
    basics = write_doc(
        guide / "01-basics",
        title="Basics",
        date="2024-03-01",
        extra="tags:\n  - python",
    )
    (basics / "images").mkdir()
    (basics / "images" / "diagram.png").write_bytes(b"\x89PNG fake")
    write_doc(guide / "02-advanced", title="Advanced", date="2024-03-02", status="draft")
    write_doc(guide / "03-extras" / "01-tips", title="Tips", date="2024-03-03")

    (root / "notes").mkdir()
    (root / "notes" / "scratch.md").write_text("# scratch\n", encoding="utf-8")
    return root


@pytest.fixture
def site_config(tmp_path: Path, site_tree: Path) -> AppConfig:
    cfg = AppConfig()
    cfg.content.root = str(site_tree)
    cfg.build.cache_dir = str(tmp_path / ".cache")
    cfg.build.public_dir = str(tmp_path / "public")
    cfg.logging.console = False
    return cfg
