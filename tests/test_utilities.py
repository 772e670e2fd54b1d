import pytest

from static_articles.core.utilities import (
    Slugger,
    extract_tags,
    numeric_prefix_or_none,
    parse_status,
    path_to_id,
    slugify,
    sort_dir_names,
    title_from_folder,
)
from static_articles.errors import FrontmatterError


def test_slugify_strips_prefix_punctuation_and_case() -> None:
    assert slugify("03-My Folder!") == "my-folder"
    assert slugify("Rendering  Pipeline") == "rendering-pipeline"
    assert slugify("  --Hello__World-- ") == "helloworld"


def test_numeric_prefix_or_none() -> None:
    assert numeric_prefix_or_none("12-abc") == 12
    assert numeric_prefix_or_none("007x") == 7
    assert numeric_prefix_or_none("abc") is None


def test_title_from_folder() -> None:
    assert title_from_folder("02-computer_science") == "Computer Science"
    assert title_from_folder("rendering-pipeline") == "Rendering Pipeline"


def test_path_to_id_is_short_and_stable() -> None:
    assert path_to_id("") == "Lw"
    assert path_to_id("abc") == "YWJj"
    assert len(path_to_id("a" * 40)) == 16
    assert path_to_id("guides/python") == path_to_id("guides/python")


def test_sort_dir_names_prefixed_first_then_natural() -> None:
    assert sort_dir_names(["b", "10-z", "2-y", "a"]) == ["2-y", "10-z", "a", "b"]
    assert sort_dir_names(["item10", "item2", "Item1"]) == ["Item1", "item2", "item10"]
    assert sort_dir_names(["02-setup", "01-intro"]) == ["01-intro", "02-setup"]


def test_parse_status() -> None:
    assert parse_status(None, "index.md", "draft") == "draft"
    assert parse_status("Published", "index.md", "draft") == "published"
    with pytest.raises(FrontmatterError) as excinfo:
        parse_status("live", "content/a/index.md", "draft")
    assert excinfo.value.field == "status"
    assert "content/a/index.md" in str(excinfo.value)


def test_extract_tags_keeps_non_empty_strings() -> None:
    assert extract_tags(["a", " b ", 3, ""]) == ["a", "b"]
    assert extract_tags("a") == []


def test_slugger_suffixes_repeated_headings() -> None:
    slugger = Slugger()
    assert slugger.slug("Hello World") == "hello-world"
    assert slugger.slug("Hello World") == "hello-world-1"
    assert slugger.slug("Hello World") == "hello-world-2"
    assert slugger.slug("What's new?") == "whats-new"


def test_slugger_respects_reserved_ids() -> None:
    slugger = Slugger()
    slugger.reserve("intro")
    assert slugger.slug("Intro") == "intro-1"
    assert slugger.slug("intro") == "intro-2"
