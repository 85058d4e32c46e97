"""Shared blog state for Bloggy.

A Site owns everything request handlers read from: the configuration, the
Templater (which holds the current Index, compiled templates and context
cache) and the URL resolver. It is created once per process and injected
into the HTTP server, the command shell and the exporter.

Key classes:
- RenderResult: Status code plus rendered HTML of one view.
- Site: Renders views and performs reloads.

Reload builds the new Index and compiles the new templates without holding
any lock readers care about, then publishes both with a single swap inside
``Templater.update``. If compilation fails the previous generation keeps
serving.
"""

from __future__ import annotations

import io
import threading
from dataclasses import dataclass
from pathlib import Path

import structlog
from jinja2 import TemplateError

from .config import SiteConfig, load_config
from .content import build_index
from .errors import BloggyError, NotFoundError
from .templates import (
    ERROR_TEMPLATE,
    INDEX_TEMPLATE,
    PAGE_TEMPLATE,
    POST_TEMPLATE,
    Templater,
    TemplateSet,
)
from .urls import URLResolver, default_resolver

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RenderResult:
    status: int
    body: str


class Site:
    """Blog state shared by all request handlers.

    Attributes:
        base: Blog folder.
        config: Site configuration (loaded once, not reloaded).
        templater: Context cache and template renderer.
        resolver: URL resolver shared with the Index.
    """

    def __init__(
        self,
        base: Path,
        config: SiteConfig,
        templater: Templater,
        resolver: URLResolver | None = None,
    ):
        self.base = base
        self.config = config
        self.templater = templater
        self.resolver = resolver or default_resolver
        self._reload_lock = threading.Lock()

    @classmethod
    def open(cls, base: Path) -> Site:
        """Load configuration, content and templates from a blog folder.

        Raises:
            ConfigError: If ``config.yaml`` is malformed.
            jinja2.TemplateError: If a display template fails to compile.
        """
        config = load_config(base)
        resolver = default_resolver
        index = build_index(base, resolver)
        templates = TemplateSet.load(base)
        return cls(base, config, Templater(config, index, templates), resolver)

    def reload(self) -> None:
        """Rebuild the Index, recompile templates and clear the cache.

        Concurrent reloads are serialized. On a template compilation error
        the previous generation stays published and the error is re-raised.
        """
        with self._reload_lock:
            logger.info("reloading", base=str(self.base))
            index = build_index(self.base, self.resolver)
            try:
                templates = TemplateSet.load(self.base)
            except TemplateError as exc:
                logger.error("failed to compile templates", error=str(exc))
                raise
            self.templater.update(index, templates)

    def render_index(self) -> RenderResult:
        """Render the index view listing the latest posts."""
        return self._render(INDEX_TEMPLATE, self.templater.index_context)

    def render_post(self, slug: str) -> RenderResult:
        """Render a post, or the error view with status 404 if it does not exist."""
        return self._render(POST_TEMPLATE, lambda: self.templater.post_context(slug))

    def render_page(self, slug: str) -> RenderResult:
        """Render a page, or the error view with status 404 if it does not exist."""
        return self._render(PAGE_TEMPLATE, lambda: self.templater.page_context(slug))

    def _render(self, name: str, make_context) -> RenderResult:
        try:
            context = make_context()
        except NotFoundError as exc:
            return self.render_error(exc, 404)
        buffer = io.StringIO()
        try:
            self.templater.apply_template(name, context, buffer)
        except (BloggyError, TemplateError) as exc:
            return self.render_error(exc, 500)
        return RenderResult(200, buffer.getvalue())

    def render_error(self, err: BaseException, status: int) -> RenderResult:
        """Render the error view; fall back to plain text if that fails too."""
        logger.error("failed to render page", error=str(err), status=status)
        buffer = io.StringIO()
        try:
            self.templater.apply_template(
                ERROR_TEMPLATE, self.templater.error_context(err, status), buffer
            )
        except (BloggyError, TemplateError) as exc:
            logger.error("failed to render error page", error=str(exc))
            return RenderResult(status, f"{exc}\n")
        return RenderResult(status, buffer.getvalue())
