import pytest
from bs4 import BeautifulSoup

from static_articles.rendering.pipeline import extract_headings, markdown_to_html, markdown_to_plain_text
from static_articles.rendering.stages import RenderContext


def _render(text: str, context: RenderContext | None = None) -> BeautifulSoup:
    return BeautifulSoup(markdown_to_html(text, context), "html.parser")


def test_elements_receive_prefixed_classes() -> None:
    soup = _render("Hello *world* and **bold** with `x`.\n\n- one\n- two\n")

    assert soup.find("p")["class"] == ["md-p"]
    assert soup.find("em")["class"] == ["md-em"]
    assert soup.find("strong")["class"] == ["md-strong"]
    assert soup.find("code")["class"] == ["md-code-inline"]
    assert soup.find("ul")["class"] == ["md-ul"]
    assert soup.find("li")["class"] == ["md-li"]


def test_class_prefix_comes_from_context() -> None:
    soup = _render("Hello\n", RenderContext(class_prefix="doc-"))
    assert soup.find("p")["class"] == ["doc-p"]


def test_tables_get_cell_classes() -> None:
    soup = _render("| a | b |\n|---|---|\n| 1 | 2 |\n")

    assert "md-table" in soup.find("table")["class"]
    assert "md-th" in soup.find("th")["class"]
    assert "md-td" in soup.find("td")["class"]


def test_headings_get_unique_ids_and_self_links() -> None:
    soup = _render("## Intro\n\ntext\n\n## Intro\n")
    headings = soup.find_all("h2")

    assert [h["id"] for h in headings] == ["intro", "intro-1"]
    assert headings[0]["class"] == ["md-heading", "md-h2"]
    link = headings[1].find("a")
    assert link["href"] == "#intro-1"
    assert link.get_text() == "Intro"


def test_fenced_code_is_highlighted_and_wrapped_with_copy_button() -> None:
    soup = _render("```python\nprint('hi')\n```\n")

    wrapper = soup.find("div", class_="code-block")
    assert wrapper is not None
    children = wrapper.find_all(True, recursive=False)
    assert [child.name for child in children] == ["button", "pre"]

    button = children[0]
    assert "copy-btn" in button["class"]
    assert button.get_text() == "Copy"
    assert button["data-code"].strip() == "print('hi')"

    pre = children[1]
    assert pre["data-lang"] == "python"
    assert "md-pre" in pre["class"]
    assert "md-pre--lang-python" in pre["class"]
    code = pre.find("code")
    assert "md-code-block" in code["class"]
    assert code.find("span") is not None


def test_unknown_language_is_left_unhighlighted() -> None:
    soup = _render("```nosuchlang\nplain\n```\n")
    code = soup.find("pre").find("code")
    assert code.find("span") is None
    assert code.get_text().strip() == "plain"


def test_spoiler_with_label() -> None:
    soup = _render(":::spoiler[Answer]\nThe answer is 42.\n:::\n")

    details = soup.find("details")
    assert "md-details" in details["class"]
    assert details.find("summary").get_text() == "Answer"
    assert details.find("p").get_text() == "The answer is 42."


def test_spoiler_takes_title_from_first_paragraph() -> None:
    soup = _render(":::spoiler\nClick to reveal\n\nHidden body\n:::\n\nAfter.\n")

    details = soup.find("details")
    assert details.find("summary").get_text() == "Click to reveal"
    assert details.find("p").get_text() == "Hidden body"
    assert soup.find_all("p")[-1].get_text() == "After."


def test_unterminated_spoiler_renders_literally() -> None:
    soup = _render(":::spoiler[Oops]\nno closing fence\n")

    assert soup.find("details") is None
    assert ":::spoiler[Oops]" in soup.get_text()


def test_github_alert_becomes_titled_details() -> None:
    soup = _render("> [!NOTE]\n> Remember this.\n")

    details = soup.find("details")
    assert "md-alert" in details["class"]
    assert "md-alert-note" in details["class"]
    assert details["data-alert-type"] == "NOTE"
    summary = details.find("summary")
    assert "md-alert-title" in summary["class"]
    assert summary.get_text() == "Note"
    assert details.find("p").get_text() == "Remember this."
    assert soup.find("blockquote") is None


def test_github_alert_with_custom_title() -> None:
    soup = _render("> [!WARNING]\n> **Careful now**\n> Details follow.\n")

    details = soup.find("details")
    assert "md-alert-warning" in details["class"]
    assert details.find("summary").get_text() == "Warning: Careful now"
    assert details.find("p").get_text().strip() == "Details follow."


def test_plain_blockquote_is_untouched() -> None:
    soup = _render("> Just a quote.\n")
    assert soup.find("blockquote")["class"] == ["md-blockquote"]
    assert soup.find("details") is None


def test_math_is_rendered_with_delimiters() -> None:
    soup = _render("Euler: $e^{i\\pi}+1=0$\n\n$$\nx^2\n$$\n")

    inline = soup.find("span", class_="math-inline")
    assert inline.get_text() == "\\(e^{i\\pi}+1=0\\)"
    display = soup.find("div", class_="math-display")
    assert display.get_text() == "\\[x^2\\]"
    assert display["data-math"] == "display"


def test_unbalanced_display_math_renders_literally() -> None:
    soup = _render("$$\nx^2\n")

    assert soup.find("div", class_="math-display") is None
    assert "$$" in soup.get_text()


def test_prices_are_not_math() -> None:
    soup = _render("It costs $5 and $10.\n")
    assert soup.find("span", class_="math-inline") is None


def test_strong_horizontal_rule() -> None:
    soup = _render("above\n\n===\n\nbelow\n")

    rule = soup.find("div", attrs={"role": "separator"})
    assert "md-hr-strong" in rule["class"]
    assert "md-hr-dots" in rule["class"]
    assert rule["aria-hidden"] == "true"


def test_strikethrough_and_bare_urls() -> None:
    soup = _render("~~gone~~ Visit https://example.com/docs today.\n")

    assert soup.find("del").get_text() == "gone"
    link = soup.find("a")
    assert link["href"] == "https://example.com/docs"
    assert link["class"] == ["md-a"]


def test_raw_html_passes_through() -> None:
    soup = _render("Press <kbd>Ctrl</kbd> now.\n")
    assert soup.find("kbd").get_text() == "Ctrl"


def test_iframes_are_wrapped_in_a_window() -> None:
    soup = _render('<iframe src="https://example.com/embed"></iframe>\n')

    iframe = soup.find("iframe")
    window = iframe.parent
    assert window["class"] == ["md-iframe-window"]
    first = window.find_all(True, recursive=False)[0]
    assert first["class"] == ["md-iframe-titlebar"]
    lights = first.find_all("span")
    assert len(lights) == 3
    assert "md-iframe-light-green" in lights[-1]["class"]


def test_production_images_use_article_namespace() -> None:
    soup = _render("![alt](./images/pic.png)\n", RenderContext(slug="my-post"))
    img = soup.find("img")
    assert img["src"] == "/articles/my-post/images/pic.png"
    assert img["class"] == ["md-img"]


def test_production_images_use_collection_namespace_and_base_path() -> None:
    context = RenderContext(slug="guide/intro", parent_collection_slug="guide", base_path="/blog")
    soup = _render("![alt](images/pic.png)\n", context)
    assert soup.find("img")["src"] == "/blog/collections/guide/intro/images/pic.png"


def test_development_images_use_dev_endpoint() -> None:
    context = RenderContext(slug="guide/intro", mode="development", parent_collection_slug="guide")
    soup = _render("![alt](./images/pic.png)\n", context)
    assert soup.find("img")["src"] == "/api/dev-images?slug=guide%2Fintro&imagePath=images%2Fpic.png"


def test_non_local_images_are_untouched() -> None:
    soup = _render("![a](https://cdn.example.com/x.png) ![b](../images/y.png)\n", RenderContext(slug="p"))
    assert [img["src"] for img in soup.find_all("img")] == [
        "https://cdn.example.com/x.png",
        "../images/y.png",
    ]


def test_rendering_is_deterministic() -> None:
    text = "## Title\n\n```python\nx = 1\n```\n\n> [!TIP]\n> Try it.\n\n![i](images/a.png)\n"
    context = RenderContext(slug="post")
    assert markdown_to_html(text, context) == markdown_to_html(text, context)


def test_extract_headings_default_window() -> None:
    text = "# Title\n\n## Setup\n\n### Install deps\n\n#### Deep\n\n##### Deeper\n\n## Setup\n"

    headings = extract_headings(text)

    assert [(h.id, h.text, h.level) for h in headings] == [
        ("setup", "Setup", 2),
        ("install-deps", "Install deps", 3),
        ("deep", "Deep", 4),
        ("setup-1", "Setup", 2),
    ]


def test_extract_headings_custom_window() -> None:
    text = "# Title\n\n## Setup\n\n### Install\n\n## Setup\n"
    headings = extract_headings(text, min_depth=1, max_depth=2)
    assert [(h.id, h.level) for h in headings] == [("title", 1), ("setup", 2), ("setup-1", 2)]


def test_extract_headings_matches_rendered_ids() -> None:
    text = "## Using `pip` *fast*\n"
    headings = extract_headings(text)
    soup = _render(text)

    assert headings[0].text == "Using pip fast"
    assert soup.find("h2")["id"] == headings[0].id == "using-pip-fast"


@pytest.mark.parametrize(
    "text",
    [
        "## Foo  bar\n",
        "## Tom &amp; Jerry\n",
        "<h2>Intro</h2>\n\n## Intro\n",
        "## Sum $x$\n",
    ],
)
def test_table_of_contents_links_resolve(text: str) -> None:
    rendered = [h["id"] for h in _render(text).find_all("h2")]
    assert [h.id for h in extract_headings(text)] == rendered


def test_heading_text_is_collapsed_but_id_is_not() -> None:
    heading = extract_headings("## Foo  bar\n")[0]
    assert heading.text == "Foo bar"
    assert heading.id == "foo--bar"


def test_markdown_to_plain_text_strips_syntax() -> None:
    text = "# Title\n\nSome **bold** [link](http://x).\n"
    assert markdown_to_plain_text(text) == "Title Some bold link."
