from __future__ import annotations

from .comments import Comment, CommentLog
from .content import Post, PostRegistry
from .errors import PostNotFoundError
from .render import MarkdownRenderer
from .templates import TemplateComposer

PAGE_IDS = ("index", "post", "404")


class Blog:
    def __init__(
        self,
        registry: PostRegistry,
        renderer: MarkdownRenderer,
        composer: TemplateComposer,
        comments: CommentLog,
        layout: str = "base",
    ):
        self.registry = registry
        self.renderer = renderer
        self.composer = composer
        self.comments = comments
        self.layout = layout

    def check_templates(self) -> None:
        for page_id in PAGE_IDS:
            self.composer.check(self.layout, page_id)

    def get_post(self, post_id: str) -> Post:
        post = self.registry.lookup(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        return post

    def render_index(self) -> str:
        return self.composer.compose(self.layout, "index", self.registry.posts)

    def render_post(self, post_id: str) -> str:
        post = self.get_post(post_id)
        data = {
            "post": post,
            "content": self.renderer.render(post),
            "comments": self.comments.get(post.id),
        }
        return self.composer.compose(self.layout, "post", data)

    def render_not_found(self) -> str:
        return self.composer.compose(self.layout, "404")

    def submit_comment(self, post_id: str, name: str, message: str) -> Comment:
        post = self.get_post(post_id)
        comment = Comment(name=name, content=message)
        self.comments.append(post.id, comment)
        return comment
