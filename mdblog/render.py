from __future__ import annotations

import re
from pathlib import Path

import markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor
from markupsafe import Markup

from .content import Post
from .errors import SourceNotFoundError

FENCE_RE = re.compile(r"^[ \t]*(?P<marker>`{3,}|~{3,})")
LIST_ITEM_RE = re.compile(r"^(?:[-+*]|\d+[.)])\s+")
NESTED_QUOTE_RE = re.compile(r"^(?P<indent>[ \t]*)>>(?!>)[ \t]*(?P<rest>.*)$")
TABLE_DELIMITER_RE = re.compile(r"^[ \t]*\|?[ \t]*:?-+:?[ \t]*(?:\|[ \t]*:?-+:?[ \t]*)*\|?[ \t]*$")
RELATIVE_LINK_PREFIXES = ("#", "./", "../")

MARKDOWN_EXTENSIONS = [
    "fenced_code",
    "codehilite",
    "tables",
    "footnotes",
    "def_list",
    "toc",
    "smarty",
    "pymdownx.magiclink",
    "pymdownx.tilde",
]
MARKDOWN_EXTENSION_CONFIGS = {
    "codehilite": {"guess_lang": False, "css_class": "codehilite"},
    "toc": {"permalink": False},
    # ~x~ stays literal, only ~~x~~ is markup
    "pymdownx.tilde": {"subscript": False},
}


def is_table_header(lines: list[str], index: int) -> bool:
    if index + 1 >= len(lines) or "|" not in lines[index]:
        return False
    delimiter = lines[index + 1]
    return "|" in delimiter and TABLE_DELIMITER_RE.match(delimiter) is not None


def starts_block(line: str, previous: str, lines: list[str], index: int) -> bool:
    if LIST_ITEM_RE.match(line):
        return not LIST_ITEM_RE.match(previous)
    return is_table_header(lines, index)


def loosen_block_spacing(text: str) -> str:
    """Let lists and tables start right after a paragraph line.

    python-markdown only opens these blocks after a blank line, so one is
    inserted. Fenced code is copied untouched and ``>>`` becomes a plain
    ``>`` quote.
    """
    lines = text.splitlines()
    out: list[str] = []
    fence = ""
    for index, line in enumerate(lines):
        fence_match = FENCE_RE.match(line)
        if fence:
            if fence_match and fence_match.group("marker") == fence:
                fence = ""
            out.append(line)
            continue
        if fence_match:
            fence = fence_match.group("marker")
            out.append(line)
            continue

        quote_match = NESTED_QUOTE_RE.match(line)
        if quote_match:
            indent, rest = quote_match.group("indent", "rest")
            line = f"{indent}> {rest}" if rest else f"{indent}>"

        previous = out[-1] if out else ""
        if previous.strip() and starts_block(line, previous, lines, index):
            out.append("")
        out.append(line)
    return "\n".join(out)


def is_relative_link(href: str) -> bool:
    if not href:
        return True
    if href.startswith(RELATIVE_LINK_PREFIXES):
        return True
    # "/about" is site-relative, "//host/path" is not
    return href.startswith("/") and not href.startswith("//")


class TargetBlankProcessor(Treeprocessor):
    def run(self, root):
        for el in root.iter("a"):
            if is_relative_link(el.get("href", "")):
                continue
            el.set("target", "_blank")
            el.set("rel", "noopener noreferrer")


class TargetBlankExtension(Extension):
    def extendMarkdown(self, md):
        # after inline patterns (20) so autolinks and references are resolved
        md.treeprocessors.register(TargetBlankProcessor(md), "target_blank", 5)


class MarkdownRenderer:
    def __init__(self, posts_dir: Path):
        self.posts_dir = posts_dir

    def source_path(self, post: Post) -> Path:
        root = self.posts_dir.resolve()
        path = (root / post.filename).resolve()
        if not path.is_relative_to(root):
            raise SourceNotFoundError(f"Post source {post.filename!r} is outside {self.posts_dir}")
        return path

    def read_source(self, post: Post) -> str:
        path = self.source_path(post)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceNotFoundError(f"Cannot read post source {path}: {exc}") from exc

    def render(self, post: Post) -> Markup:
        text = self.read_source(post)
        # Markdown instances keep per-document state, so each call gets its own.
        md = markdown.Markdown(
            extensions=[*MARKDOWN_EXTENSIONS, TargetBlankExtension()],
            extension_configs=MARKDOWN_EXTENSION_CONFIGS,
        )
        return Markup(md.convert(loosen_block_spacing(text)))
