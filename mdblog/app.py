from __future__ import annotations

from pathlib import Path
from typing import Optional

from flask import Flask, Response, redirect, request, url_for

from .errors import PostNotFoundError, SourceNotFoundError, TemplateError
from .site import Blog

HTML_MIMETYPE = "text/html"


def create_app(blog: Blog, static_dir: Optional[Path] = None) -> Flask:
    static_folder = str(static_dir.resolve()) if static_dir is not None else None
    app = Flask(__name__, static_folder=static_folder, static_url_path="/static")
    app.config["BLOG"] = blog

    def html_response(body: str, status: int = 200) -> Response:
        return Response(body, status=status, mimetype=HTML_MIMETYPE)

    def not_found() -> Response:
        return html_response(blog.render_not_found(), 404)

    @app.route("/")
    def index():
        return html_response(blog.render_index())

    @app.route("/posts/<post_id>")
    def view_post(post_id):
        try:
            return html_response(blog.render_post(post_id))
        except PostNotFoundError:
            return not_found()
        except SourceNotFoundError as exc:
            app.logger.error("Post %r has no readable source: %s", post_id, exc)
            return not_found()

    @app.route("/posts/<post_id>/comments", methods=["POST"])
    def submit_comment(post_id):
        name = request.form.get("name", "")
        message = request.form.get("message", "")
        try:
            blog.submit_comment(post_id, name, message)
        except PostNotFoundError:
            app.logger.info("Rejected comment for unknown post %r", post_id)
            return not_found()
        return redirect(url_for("view_post", post_id=post_id), code=303)

    @app.errorhandler(404)
    def page_not_found(error):
        return not_found()

    @app.errorhandler(TemplateError)
    def template_error(error):
        app.logger.error("Template error: %s", error)
        return Response("Internal Server Error\n", status=500, mimetype="text/plain")

    return app
