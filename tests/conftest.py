from __future__ import annotations

import json
from pathlib import Path

import pytest

from mdblog.app import create_app
from mdblog.comments import CommentLog
from mdblog.content import PostRegistry
from mdblog.render import MarkdownRenderer
from mdblog.site import Blog
from mdblog.templates import TemplateComposer

REPO_ROOT = Path(__file__).resolve().parent.parent

POSTS = [
    {"id": "first", "date": "2025-10-20", "filename": "first.md", "title": "First post"},
    {"id": "second", "date": "2024-01-02", "filename": "second.md", "title": "Second <post>"},
    {"id": "ghost", "date": "2024-02-29", "filename": "missing.md", "title": "No source"},
]


def write_site(root: Path) -> Path:
    posts_dir = root / "posts"
    posts_dir.mkdir()
    (posts_dir / "first.md").write_text(
        "# Intro\n\nSee [docs](https://example.com/docs) and [home](/).\n", encoding="utf-8"
    )
    (posts_dir / "second.md").write_text("Just text.\n", encoding="utf-8")
    (root / "posts.json").write_text(json.dumps(POSTS), encoding="utf-8")

    templates_dir = root / "templates"
    templates_dir.mkdir()
    for name in ("base.html", "index.html", "post.html", "404.html"):
        source = REPO_ROOT / "templates" / name
        (templates_dir / name).write_text(source.read_text(encoding="utf-8"), encoding="utf-8")
    return root


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    return write_site(tmp_path)


@pytest.fixture
def blog(site_dir: Path) -> Blog:
    return Blog(
        registry=PostRegistry.from_file(site_dir / "posts.json"),
        renderer=MarkdownRenderer(site_dir / "posts"),
        composer=TemplateComposer(site_dir / "templates"),
        comments=CommentLog(),
    )


@pytest.fixture
def client(blog: Blog):
    app = create_app(blog)
    app.config["TESTING"] = True
    return app.test_client()
