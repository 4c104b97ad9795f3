from __future__ import annotations

import datetime as dt
import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Union

from .errors import DateFormatError, MetadataError

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
POST_FIELDS = ("id", "date", "filename", "title")

# Names are fixed so output does not depend on the process locale.
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True)
class Post:
    id: str
    date: str
    filename: str
    title: str
    display_date: str = field(default="", compare=False)


def parse_date(value: str) -> dt.date:
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise DateFormatError(f"Expected a YYYY-MM-DD date, got {value!r}")
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise DateFormatError(f"Invalid calendar date {value!r}: {exc}") from exc


def format_date(value: str) -> str:
    date = parse_date(value)
    return f"{WEEKDAYS[date.weekday()]}, {MONTHS[date.month - 1]} {date.day}"


def parse_post(entry: object, index: int) -> Post:
    if not isinstance(entry, dict):
        raise MetadataError(f"Post #{index} must be an object, got {type(entry).__name__}")
    fields = {}
    for key, value in entry.items():
        name = key.lower()
        if name in fields:
            raise MetadataError(f"Post #{index} has field {name!r} more than once")
        fields[name] = value
    values = {}
    for name in POST_FIELDS:
        if name not in fields:
            raise MetadataError(f"Post #{index} is missing field {name!r}")
        value = fields[name]
        if not isinstance(value, str):
            raise MetadataError(
                f"Post #{index} field {name!r} must be a string, got {type(value).__name__}"
            )
        values[name] = value
    return Post(display_date=format_date(values["date"]), **values)


def load_posts(source: Union[str, bytes]) -> list[Post]:
    try:
        data = json.loads(source)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MetadataError(f"Invalid JSON in posts metadata: {exc}") from exc
    if not isinstance(data, list):
        raise MetadataError("Posts metadata must be an array of posts")

    posts: list[Post] = []
    seen: set[str] = set()
    for index, entry in enumerate(data):
        post = parse_post(entry, index)
        if post.id in seen:
            raise MetadataError(f"Duplicate post id {post.id!r}")
        seen.add(post.id)
        posts.append(post)
    return posts


class PostRegistry:
    """Posts in declaration order, indexed by id. Never changes after load."""

    def __init__(self, posts: list[Post]):
        by_id: dict[str, Post] = {}
        for post in posts:
            if post.id in by_id:
                raise MetadataError(f"Duplicate post id {post.id!r}")
            by_id[post.id] = post
        self._posts = tuple(posts)
        self._by_id = by_id

    @classmethod
    def from_file(cls, path: Path) -> "PostRegistry":
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise MetadataError(f"Cannot read posts metadata {path}: {exc}") from exc
        return cls(load_posts(source))

    def lookup(self, post_id: str) -> Optional[Post]:
        return self._by_id.get(post_id)

    @property
    def posts(self) -> tuple[Post, ...]:
        return self._posts

    def __iter__(self) -> Iterator[Post]:
        return iter(self._posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __contains__(self, post_id: object) -> bool:
        return post_id in self._by_id
