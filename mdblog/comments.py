from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class Comment:
    name: str
    content: str


class CommentLog:
    """Per-post comments in submission order, shared by all request threads.

    Every access to the map goes through one lock, so appends to the same
    post never lose entries and creating a new post's list cannot race with
    another thread growing the dict.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._comments: dict[str, list[Comment]] = {}

    def append(self, post_id: str, comment: Comment) -> None:
        with self._lock:
            self._comments.setdefault(post_id, []).append(comment)

    def get(self, post_id: str) -> tuple[Comment, ...]:
        with self._lock:
            return tuple(self._comments.get(post_id, ()))

    def count(self, post_id: str) -> int:
        with self._lock:
            return len(self._comments.get(post_id, ()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._comments)
