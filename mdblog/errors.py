from __future__ import annotations


class BlogError(Exception):
    pass


class MetadataError(BlogError):
    """The posts metadata document is unreadable, malformed or ambiguous."""


class DateFormatError(BlogError):
    pass


class TemplateError(BlogError):
    """A layout or page template is missing, broken or incomplete."""


class PostNotFoundError(BlogError):
    def __init__(self, post_id: str):
        super().__init__(f"No post with id {post_id!r}")
        self.post_id = post_id


class SourceNotFoundError(BlogError):
    pass
