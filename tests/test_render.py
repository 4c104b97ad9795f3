from __future__ import annotations

import pytest
from markupsafe import Markup

from mdblog.content import Post
from mdblog.errors import SourceNotFoundError
from mdblog.render import MarkdownRenderer, is_relative_link, loosen_block_spacing


def render_text(tmp_path, text: str) -> str:
    (tmp_path / "post.md").write_text(text, encoding="utf-8")
    post = Post(id="post", date="2025-10-20", filename="post.md", title="Post")
    return MarkdownRenderer(tmp_path).render(post)


def test_render_returns_trusted_markup(tmp_path):
    html = render_text(tmp_path, "Hello *world*\n")
    assert isinstance(html, Markup)
    assert "<p>Hello <em>world</em></p>" in html


def test_headings_get_anchor_ids(tmp_path):
    html = render_text(tmp_path, "# Getting Started\n\nText\n\n## Next Steps\n")
    assert '<h1 id="getting-started">Getting Started</h1>' in html
    assert '<h2 id="next-steps">Next Steps</h2>' in html


def test_heading_needs_no_blank_line(tmp_path):
    html = render_text(tmp_path, "Some text\n## Sub\n")
    assert '<h2 id="sub">Sub</h2>' in html


def test_list_needs_no_blank_line(tmp_path):
    html = render_text(tmp_path, "Things:\n- one\n- two\n")
    assert "<ul>" in html
    assert "<li>one</li>" in html
    assert "<li>two</li>" in html


def test_table_needs_no_blank_line(tmp_path):
    html = render_text(tmp_path, "Intro\n| a | b |\n|---|---|\n| 1 | 2 |\n")
    assert "<p>Intro</p>" in html
    assert "<table>" in html
    assert "<th>a</th>" in html
    assert "<td>2</td>" in html


def test_bare_urls_become_external_links(tmp_path):
    html = render_text(tmp_path, "See https://example.com now.\n")
    assert 'href="https://example.com"' in html
    assert 'target="_blank"' in html
    assert 'rel="noopener noreferrer"' in html


def test_strikethrough(tmp_path):
    html = render_text(tmp_path, "~~gone~~ and ~kept~\n")
    assert "<del>gone</del>" in html
    assert "~kept~" in html


def test_smart_typography(tmp_path):
    html = render_text(tmp_path, '"quoted" -- dash --- longer\n')
    assert "&ldquo;quoted&rdquo;" in html
    assert "&ndash;" in html
    assert "&mdash;" in html


def test_footnotes(tmp_path):
    html = render_text(tmp_path, "Claim.[^1]\n\n[^1]: Source.\n")
    assert 'class="footnote"' in html
    assert 'href="#fn:1"' in html
    assert "target=" not in html


def test_fenced_code_is_highlighted(tmp_path):
    html = render_text(tmp_path, "Code:\n\n```python\nprint('hi')\n```\n")
    assert 'class="codehilite"' in html


def test_external_links_open_in_new_tab(tmp_path):
    html = render_text(
        tmp_path,
        "[ext](https://example.com) [site](/about) [anchor](#top) [proto](//cdn.example.com/x)\n",
    )
    assert html.count('target="_blank"') == 2
    assert html.count('rel="noopener noreferrer"') == 2
    assert '<a href="/about">site</a>' in html
    assert '<a href="#top">anchor</a>' in html


@pytest.mark.parametrize(
    "href, expected",
    [
        ("#top", True),
        ("/", True),
        ("/posts/a", True),
        ("./a.md", True),
        ("../a.md", True),
        ("", True),
        ("//cdn.example.com", False),
        ("https://example.com", False),
        ("mailto:me@example.com", False),
        ("other.html", False),
    ],
)
def test_is_relative_link(href, expected):
    assert is_relative_link(href) is expected


def test_missing_source(tmp_path):
    post = Post(id="gone", date="2025-10-20", filename="gone.md", title="Gone")
    with pytest.raises(SourceNotFoundError):
        MarkdownRenderer(tmp_path).render(post)


def test_source_outside_posts_dir(tmp_path):
    posts_dir = tmp_path / "posts"
    posts_dir.mkdir()
    (tmp_path / "secret.md").write_text("secret", encoding="utf-8")
    post = Post(id="escape", date="2025-10-20", filename="../secret.md", title="Escape")
    with pytest.raises(SourceNotFoundError):
        MarkdownRenderer(posts_dir).render(post)


def test_source_is_reread_on_every_render(tmp_path):
    post = Post(id="post", date="2025-10-20", filename="post.md", title="Post")
    renderer = MarkdownRenderer(tmp_path)
    (tmp_path / "post.md").write_text("first\n", encoding="utf-8")
    assert "first" in renderer.render(post)
    (tmp_path / "post.md").write_text("second\n", encoding="utf-8")
    assert "second" in renderer.render(post)


def test_loosen_block_spacing_before_lists():
    assert loosen_block_spacing("Intro\n- a\n- b") == "Intro\n\n- a\n- b"
    assert loosen_block_spacing("Intro\n1. a\n2. b") == "Intro\n\n1. a\n2. b"


def test_loosen_block_spacing_leaves_fences_and_nested_lists():
    text = "```\nIntro\n- not a list\n```\n\n- a\n  - nested"
    assert loosen_block_spacing(text) == text


def test_loosen_block_spacing_rewrites_double_quote_marker():
    assert loosen_block_spacing(">>quoted") == "> quoted"


def test_loosen_block_spacing_before_tables():
    text = "Intro\n| a | b |\n|:--|--:|\n| 1 | 2 |"
    assert loosen_block_spacing(text) == "Intro\n\n| a | b |\n|:--|--:|\n| 1 | 2 |"


def test_loosen_block_spacing_leaves_pipes_in_text():
    text = "Use a | b in shell\nand --- below\n| not | a table |\nbecause no delimiter follows"
    assert loosen_block_spacing(text) == text


def test_loosen_block_spacing_leaves_tables_in_fences():
    text = "~~~\nIntro\n| a | b |\n|---|---|\n~~~"
    assert loosen_block_spacing(text) == text
