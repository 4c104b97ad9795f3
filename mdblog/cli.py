from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Optional, Sequence

from .app import create_app
from .comments import CommentLog
from .config import fail, load_config
from .content import PostRegistry
from .errors import DateFormatError, MetadataError, TemplateError
from .render import MarkdownRenderer
from .site import Blog
from .templates import TemplateComposer
from .utils import DEFAULT_LISTEN_ADDRESS, parse_bool, parse_listen_address


def build_blog(args: argparse.Namespace) -> Blog:
    posts_file = Path(args.posts_file)
    try:
        registry = PostRegistry.from_file(posts_file)
    except (MetadataError, DateFormatError) as exc:
        fail(f"Cannot load posts from {posts_file}: {exc}")

    posts_dir = Path(args.posts)
    if not posts_dir.is_dir():
        fail(f"Posts directory not found: {posts_dir}")
    templates_dir = Path(args.templates)
    if not templates_dir.is_dir():
        fail(f"Templates directory not found: {templates_dir}")

    blog = Blog(
        registry=registry,
        renderer=MarkdownRenderer(posts_dir),
        composer=TemplateComposer(templates_dir),
        comments=CommentLog(),
        layout=args.layout,
    )
    if args.check_templates:
        try:
            blog.check_templates()
        except TemplateError as exc:
            fail(f"Broken templates in {templates_dir}: {exc}")
    print(f"Loaded {len(registry)} posts from {posts_file}.")
    return blog


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))

    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        return str(cfg_value(key, default))

    def cfg_bool(key: str, default: bool) -> bool:
        return parse_bool(cfg_value(key, default))

    listen_default = os.environ.get("LISTEN_ADDRESS") or cfg_str("listen", DEFAULT_LISTEN_ADDRESS)

    parser = argparse.ArgumentParser(description="Serve a Markdown blog with in-memory comments.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument(
        "--posts-file",
        default=cfg_str("posts_file", "posts.json"),
        help="JSON document listing the posts.",
    )
    parser.add_argument("--posts", default=cfg_str("posts", "posts"), help="Directory containing Markdown posts.")
    parser.add_argument(
        "--templates",
        default=cfg_str("templates", "templates"),
        help="Directory containing layout and page templates.",
    )
    parser.add_argument("--static", default=cfg_str("static", "static"), help="Directory containing static assets.")
    parser.add_argument("--layout", default=cfg_str("layout", "base"), help="Layout template wrapping every page.")
    parser.add_argument(
        "--listen",
        default=listen_default,
        help="HOST:PORT to listen on (defaults to $LISTEN_ADDRESS).",
    )
    parser.add_argument(
        "--threaded",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("threaded", True),
        help="Handle each request in its own thread.",
    )
    parser.add_argument(
        "--check-templates",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("check_templates", True),
        help="Validate all page templates before serving.",
    )
    parser.add_argument(
        "--debug",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("debug", False),
        help="Run the server in debug mode.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    try:
        host, port = parse_listen_address(args.listen)
    except ValueError as exc:
        fail(str(exc))
    blog = build_blog(args)
    static_dir = Path(args.static)
    app = create_app(blog, static_dir if static_dir.is_dir() else None)
    print(f"Listening on {host}:{port}")
    app.run(host=host, port=port, threaded=args.threaded, debug=args.debug, use_reloader=False)


if __name__ == "__main__":
    main()
