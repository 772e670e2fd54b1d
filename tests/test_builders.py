import logging
from pathlib import Path

import pytest

from static_articles.config import AppConfig
from static_articles.content.builders import (
    build_article_from_folder,
    build_collection_from_folder,
    reading_time,
)
from static_articles.errors import FrontmatterError, MissingIndexError


def _config(mode: str = "production") -> AppConfig:
    cfg = AppConfig()
    cfg.build.mode = mode
    return cfg


def test_build_article_populates_every_field(tmp_path: Path, make_doc) -> None:
    folder = make_doc(
        tmp_path / "01-hello",
        title="Hello World",
        date="2024-03-05",
        body="## Setup\n\nSome words here.\n\n![d](images/d.png)",
        extra="tags:\n  - python\ncoverImage: images/cover.png",
    )
    (folder / "summary.md").write_text("A *short* summary.", encoding="utf-8")

    article = build_article_from_folder(folder, ["hello"], None, _config())

    assert article.slug == "hello"
    assert article.title == "Hello World"
    assert article.status == "published"
    assert article.date == "2024-03-05T00:00:00Z"
    assert article.summary.text == "A short summary."
    assert article.cover == "images/cover.png"
    assert article.tags == ["python"]
    assert article.collection_slug is None
    assert article.folder is None
    assert [(h.id, h.level) for h in article.headings] == [("setup", 2)]
    assert "/articles/hello/images/d.png" in article.html
    assert article.reading_time.words == len(article.content.split())
    assert article.content.lstrip().startswith("## Setup")


def test_collection_member_images_use_collection_namespace(tmp_path: Path, make_doc) -> None:
    folder = make_doc(tmp_path / "intro", body="![d](images/d.png)")

    article = build_article_from_folder(folder, ["guide", "intro"], "guide", _config())

    assert article.collection_slug == "guide"
    assert "/collections/guide/intro/images/d.png" in article.html


def test_development_mode_keeps_the_source_folder(tmp_path: Path, make_doc) -> None:
    folder = make_doc(tmp_path / "post", body="![d](images/d.png)")

    article = build_article_from_folder(folder, ["post"], None, _config("development"))

    assert article.folder == str(folder.resolve())
    assert "/api/dev-images?slug=post&amp;imagePath=images%2Fd.png" in article.html


def test_missing_status_defaults_and_warns(tmp_path: Path, make_doc, caplog) -> None:
    folder = make_doc(tmp_path / "post", status=None)

    with caplog.at_level(logging.WARNING):
        article = build_article_from_folder(folder, ["post"], None, _config())

    assert article.status == "draft"
    assert any(getattr(r, "event", None) == "missing_status" for r in caplog.records)


def test_default_status_is_configurable(tmp_path: Path, make_doc) -> None:
    folder = make_doc(tmp_path / "post", status=None)
    cfg = _config()
    cfg.content.default_status = "published"

    assert build_article_from_folder(folder, ["post"], None, cfg).status == "published"


def test_invalid_status_is_fatal(tmp_path: Path, make_doc) -> None:
    folder = make_doc(tmp_path / "post", status="live")

    with pytest.raises(FrontmatterError) as excinfo:
        build_article_from_folder(folder, ["post"], None, _config())
    assert excinfo.value.field == "status"


def test_required_slug_is_enforced(tmp_path: Path, make_doc) -> None:
    folder = make_doc(tmp_path / "post")
    cfg = _config()
    cfg.content.require_slug = True

    with pytest.raises(FrontmatterError) as excinfo:
        build_article_from_folder(folder, ["post"], None, cfg)
    assert excinfo.value.field == "slug"


def test_missing_index_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(MissingIndexError):
        build_article_from_folder(tmp_path, ["x"], None, _config())


def test_build_collection_counts_direct_children(tmp_path: Path, make_doc) -> None:
    cfg = _config()
    folder = make_doc(tmp_path / "guide", title="Guide", body="Intro to the guide.")
    first = build_article_from_folder(make_doc(folder / "01-a"), ["guide", "a"], "guide", cfg)
    second = build_article_from_folder(make_doc(folder / "02-b"), ["guide", "b"], "guide", cfg)

    collection = build_collection_from_folder(folder, ["guide"], [first, second], [], cfg)

    assert collection.slug == "guide"
    assert collection.title == "Guide"
    assert collection.summary.text == "Intro to the guide."
    assert [a.slug for a in collection.articles] == ["guide/a", "guide/b"]
    assert collection.total_articles == 2
    assert collection.total_collections == 0


def test_reading_time() -> None:
    stats = reading_time("word " * 400, 200)
    assert stats.words == 400
    assert stats.minutes == 2.0
    assert stats.text == "2 min read"

    assert reading_time("word " * 250, 200).text == "2 min read"
    assert reading_time("", 200).text == "0 min read"
    assert reading_time("你好世界 hello", 200).words == 5
