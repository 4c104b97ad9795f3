from __future__ import annotations

import threading
import weakref
from pathlib import Path

import jinja2
from jinja2 import nodes

from .errors import TemplateError


def template_name(template_id: str) -> str:
    return f"{template_id}.html"


class TemplateComposer:
    """Renders a page template inside a layout template.

    A layout declares its insertion points as ``{% block %}`` tags. A page
    starts with ``{% extends layout %}`` and has to fill every block the
    layout declares. The page sees the payload as ``data``. Every value is
    escaped unless it is ``markupsafe.Markup``.
    """

    def __init__(self, templates_dir: Path):
        self.templates_dir = templates_dir
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(templates_dir), encoding="utf-8"),
            autoescape=True,
            undefined=jinja2.StrictUndefined,
            auto_reload=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._lock = threading.Lock()
        self._extends: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()

    def load(self, template_id: str) -> jinja2.Template:
        name = template_name(template_id)
        try:
            return self.env.get_template(name)
        except jinja2.TemplateNotFound as exc:
            raise TemplateError(f"Template {name!r} not found in {self.templates_dir}") from exc
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateError(
                f"Syntax error in template {exc.name or name} line {exc.lineno}: {exc.message}"
            ) from exc

    def extends_layout(self, page: jinja2.Template) -> bool:
        with self._lock:
            known = self._extends.get(page)
        if known is not None:
            return known
        source, _, _ = self.env.loader.get_source(self.env, page.name)
        tree = self.env.parse(source, page.name)
        extends = tree.find(nodes.Extends)
        result = (
            extends is not None
            and isinstance(extends.template, nodes.Name)
            and extends.template.name == "layout"
        )
        # keyed by the compiled template, so an edited file is parsed again
        with self._lock:
            self._extends[page] = result
        return result

    def check(self, layout_id: str, page_id: str) -> tuple[jinja2.Template, jinja2.Template]:
        layout = self.load(layout_id)
        page = self.load(page_id)
        if not self.extends_layout(page):
            raise TemplateError(
                f"Page template {page.name!r} does not extend the layout with {{% extends layout %}}"
            )
        missing = sorted(set(layout.blocks) - set(page.blocks))
        if missing:
            raise TemplateError(
                f"Page template {page.name!r} does not fill layout blocks: {', '.join(missing)}"
            )
        return layout, page

    def compose(self, layout_id: str, page_id: str, data: object = None) -> str:
        layout, page = self.check(layout_id, page_id)
        try:
            return page.render(layout=layout.name, data=data)
        except jinja2.TemplateError as exc:
            raise TemplateError(f"Cannot render {page.name!r} in {layout.name!r}: {exc}") from exc
