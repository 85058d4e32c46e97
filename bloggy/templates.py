"""Template rendering and view-model caching for Bloggy.

This module turns Index entries into read-only view-models (contexts) and
applies them to named Jinja2 templates.

Key classes:
- SiteContext, PostContext, PageContext, IndexContext, ErrorContext:
  Frozen view-models handed to templates.
- TemplateSet: The compiled display templates of one reload cycle.
- Templater: Builds contexts lazily, memoizes them per cache generation
  and renders templates.

Cache generations:
    All memoized contexts of a generation live in one ``_Generation``
    object. Readers take a reference to the current generation once per
    call and never see a half-built one; ``clear_cache`` and ``update``
    publish a fresh generation by swapping that reference.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, fields
from datetime import datetime
from pathlib import Path
from typing import IO, Any

import humanize
import structlog
from jinja2 import Environment, FileSystemLoader, Template, select_autoescape
from markupsafe import Markup

from .config import SiteConfig
from .content import Index, NavigationLink, Post
from .errors import NotFoundError, TemplateMissingError
from .protocols import Entry
from .renderers import MarkdownRenderer, default_renderer

logger = structlog.get_logger(__name__)

TEMPLATE_FOLDER = "templates"
DISPLAY_FOLDER = "displays"
INCLUDE_FOLDER = "includes"

INDEX_TEMPLATE = "index"
POST_TEMPLATE = "post"
PAGE_TEMPLATE = "page"
ERROR_TEMPLATE = "error"


@dataclass(frozen=True)
class NavItem:
    title: str
    url: str


@dataclass(frozen=True)
class SiteContext:
    """Site-wide values shared by every view.

    Attributes:
        title: Blog title.
        subtitle: Blog subtitle.
        author: Author name.
        email: Author email.
        url: Root URL of the blog.
        year: Year at the time the context was built.
        nav: Navigation items, pages first then configured links.
    """

    title: str
    subtitle: str
    author: str
    email: str
    url: str
    year: str
    nav: tuple[NavItem, ...]


@dataclass(frozen=True)
class PostContext:
    site: SiteContext
    title: str
    subtitle: str
    date: str
    published: datetime
    content: Markup
    url: str


@dataclass(frozen=True)
class PageContext:
    site: SiteContext
    title: str
    content: Markup
    url: str


@dataclass(frozen=True)
class IndexContext:
    site: SiteContext
    posts: tuple[Post, ...]


@dataclass(frozen=True)
class ErrorContext:
    site: SiteContext
    message: str
    status: int = 500


def template_variables(context: Any) -> dict[str, Any]:
    """Expose a context's fields as top-level template variables."""
    return {f.name: getattr(context, f.name) for f in fields(context)}


class TemplateSet:
    """Compiled display templates.

    Every ``{base}/templates/displays/*.html`` file becomes a template named
    after its stem. ``{base}/templates/includes`` is on the loader path so
    displays can ``{% extends %}`` or ``{% include %}`` shared layouts.

    Attributes:
        env: Jinja2 environment the templates were compiled in.
    """

    def __init__(self, templates: dict[str, Template], env: Environment | None = None):
        self._templates = dict(templates)
        self.env = env

    @classmethod
    def load(cls, base: Path) -> TemplateSet:
        """Compile all display templates of a blog folder.

        Args:
            base: Blog folder.

        Returns:
            A new TemplateSet.

        Raises:
            jinja2.TemplateError: If a display template fails to compile.
        """
        root = base / TEMPLATE_FOLDER
        displays_dir = root / DISPLAY_FOLDER
        env = create_environment([displays_dir, root / INCLUDE_FOLDER])
        templates: dict[str, Template] = {}
        if displays_dir.is_dir():
            for path in sorted(displays_dir.glob("*.html")):
                templates[path.stem] = env.get_template(path.name)
        else:
            logger.error("template folder not found", folder=str(displays_dir))
        logger.debug("loaded displays", displays=sorted(templates))
        return cls(templates, env)

    @classmethod
    def from_strings(cls, sources: dict[str, str]) -> TemplateSet:
        """Compile templates from source strings, mainly for tests and embedding."""
        env = create_environment([])
        return cls({name: env.from_string(src) for name, src in sources.items()}, env)

    def get(self, name: str) -> Template:
        """Return a compiled template.

        Raises:
            TemplateMissingError: If no template with that name was compiled.
        """
        try:
            return self._templates[name]
        except KeyError:
            raise TemplateMissingError(name) from None

    def names(self) -> list[str]:
        return sorted(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates


def create_environment(search_path: list[Path]) -> Environment:
    """Create the Jinja2 environment used for display templates.

    Templates are compiled once per reload, so automatic recompilation on
    file change is disabled.
    """
    env = Environment(
        loader=FileSystemLoader([str(p) for p in search_path]),
        autoescape=select_autoescape(["html", "xml"], default_for_string=True),
        auto_reload=False,
    )
    env.filters["naturaltime"] = humanize.naturaltime
    return env


class _Generation:
    """Memoized contexts of one cache generation."""

    def __init__(self, number: int, index: Index, templates: TemplateSet):
        self.number = number
        self.index = index
        self.templates = templates
        self.lock = threading.Lock()
        self.site: SiteContext | None = None
        self.index_context: IndexContext | None = None
        self.posts: dict[str, PostContext] = {}
        self.pages: dict[str, PageContext] = {}


class Templater:
    """Lazily builds, memoizes and renders view-models over an Index.

    Contexts are cached until ``clear_cache`` (or ``update``) starts a new
    generation. Edits on disk are therefore invisible until the next reload.

    Attributes:
        config: Site configuration.
    """

    def __init__(
        self,
        config: SiteConfig,
        index: Index,
        templates: TemplateSet,
        renderer: MarkdownRenderer | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the templater.

        Args:
            config: Site configuration.
            index: Index to read posts and pages from.
            templates: Compiled display templates.
            renderer: Optional custom Markdown renderer.
            clock: Returns the current time; injectable for tests.
        """
        self.config = config
        self._renderer = renderer or default_renderer
        self._clock = clock
        self._swap_lock = threading.Lock()
        self._generation = _Generation(1, index, templates)

    @property
    def generation(self) -> int:
        """Number of the current cache generation, starting at 1."""
        return self._generation.number

    @property
    def index(self) -> Index:
        return self._generation.index

    @property
    def templates(self) -> TemplateSet:
        return self._generation.templates

    def clear_cache(self) -> None:
        """Drop every memoized context and start a new generation."""
        with self._swap_lock:
            current = self._generation
            self._generation = _Generation(current.number + 1, current.index, current.templates)
        logger.info("clearing cache", generation=self._generation.number)

    def update(self, index: Index, templates: TemplateSet) -> None:
        """Publish a new Index and template set with an empty cache."""
        with self._swap_lock:
            number = self._generation.number + 1
            self._generation = _Generation(number, index, templates)
        logger.info("published new index", generation=number)

    def site_context(self) -> SiteContext:
        """Return the site-wide context of the current generation."""
        return self._site_context(self._generation)

    def _site_context(self, gen: _Generation) -> SiteContext:
        if gen.site is None:
            with gen.lock:
                if gen.site is None:
                    gen.site = self._build_site_context(gen.index)
        return gen.site

    def _build_site_context(self, index: Index) -> SiteContext:
        entries: list[Entry] = list(index.pages)
        entries.extend(NavigationLink(title, url) for title, url in self.config.links.items())
        nav = tuple(NavItem(title=e.title, url=e.url) for e in entries)
        logger.debug("built navigation", items=[item.title for item in nav])
        return SiteContext(
            title=self.config.meta.title,
            subtitle=self.config.meta.subtitle,
            author=self.config.author.name,
            email=self.config.author.email,
            url="/",
            year=str(self._clock().year),
            nav=nav,
        )

    def post_context(self, slug: str) -> PostContext:
        """Return the cached context of a post, building it on a miss.

        Raises:
            NotFoundError: If no post has that slug.
        """
        gen = self._generation
        cached = gen.posts.get(slug)
        if cached is not None:
            return cached
        post = gen.index.post(slug)
        if post is None:
            raise NotFoundError("post", slug)
        context = PostContext(
            site=self._site_context(gen),
            title=post.title,
            subtitle=post.subtitle,
            date=humanize.naturaltime(post.date, when=self._clock()),
            published=post.date,
            content=Markup(self._renderer.render(post.content)),
            url=post.url,
        )
        with gen.lock:
            context = gen.posts.setdefault(slug, context)
        logger.debug("created cache version of post", slug=slug)
        return context

    def page_context(self, slug: str) -> PageContext:
        """Return the cached context of a page, building it on a miss.

        Raises:
            NotFoundError: If no page has that slug.
        """
        gen = self._generation
        cached = gen.pages.get(slug)
        if cached is not None:
            return cached
        page = gen.index.page(slug)
        if page is None:
            raise NotFoundError("page", slug)
        context = PageContext(
            site=self._site_context(gen),
            title=page.title,
            content=Markup(self._renderer.render(page.content)),
            url=page.url,
        )
        with gen.lock:
            context = gen.pages.setdefault(slug, context)
        logger.debug("created cache version of page", slug=slug)
        return context

    def index_context(self) -> IndexContext:
        """Return the cached index context listing the latest posts."""
        gen = self._generation
        if gen.index_context is None:
            site = self._site_context(gen)
            with gen.lock:
                if gen.index_context is None:
                    posts = tuple(gen.index.latest_posts(self.config.latest_posts))
                    gen.index_context = IndexContext(site=site, posts=posts)
        return gen.index_context

    def error_context(self, err: BaseException, status: int = 500) -> ErrorContext:
        """Build a fresh, uncached context describing an error."""
        return ErrorContext(site=self.site_context(), message=str(err), status=status)

    def apply_template(self, name: str, context: Any, stream: IO[str]) -> None:
        """Render a named template with a context into a text stream.

        Raises:
            TemplateMissingError: If the template is not registered.
        """
        template = self._generation.templates.get(name)
        for chunk in template.generate(**template_variables(context)):
            stream.write(chunk)
