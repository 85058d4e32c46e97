"""Content loading for Bloggy.

This module scans a blog folder for posts and pages, parses their front
matter and builds the Index that every request reads from.

Key classes:
- Post: Dated blog post.
- Page: Undated standalone page.
- NavigationLink: Configured external navigation entry.
- Index: Ordered and slug-keyed collections of posts and pages.
- FileContentLoader: Lists the Markdown files of one content folder.
- IndexBuilder: Builds a fresh Index from a blog folder.

An Index is never mutated after construction. Reloading builds a new one
and publishes it by swapping a reference (see ``bloggy.site``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import structlog

from .collections import PageCollection, PostCollection
from .errors import FrontMatterError
from .frontmatter import FrontMatter, parse_file
from .protocols import SlugResolver
from .urls import default_resolver
from .utils import is_markdown, parse_post_date

logger = structlog.get_logger(__name__)

POSTS_FOLDER = "posts"
PAGES_FOLDER = "pages"


@dataclass(frozen=True)
class Post:
    """A dated blog post.

    Attributes:
        title: Post title.
        subtitle: Optional subtitle.
        date: Publish date parsed from front matter.
        slug: Normalized slug.
        content: Raw Markdown body.
        url: Canonical path, e.g. ``/post/hello``.
        path: Source file, if loaded from disk.
    """

    title: str
    subtitle: str
    date: datetime
    slug: str
    content: str
    url: str
    path: Path | None = None


@dataclass(frozen=True)
class Page:
    """A standalone page such as ``about``.

    Attributes:
        title: Page title.
        slug: Normalized slug.
        content: Raw Markdown body.
        url: Canonical path, e.g. ``/about``.
        path: Source file, if loaded from disk.
    """

    title: str
    slug: str
    content: str
    url: str
    path: Path | None = None


@dataclass(frozen=True)
class NavigationLink:
    """External link shown in the navigation bar."""

    title: str
    url: str

    @property
    def content(self) -> str:
        return ""


class Index:
    """Posts and pages of one load cycle.

    Posts are ordered newest-first, pages in load order. Slug lookups are
    backed by dictionaries; when two entries share a slug the later one
    wins the lookup while both stay in the ordered collection.
    """

    def __init__(self, posts: list[Post] | None = None, pages: list[Page] | None = None):
        self.posts = PostCollection(posts or [])
        self.pages = PageCollection(pages or [])
        self._post_by_slug = _slug_map(self.posts, "post")
        self._page_by_slug = _slug_map(self.pages, "page")

    def post(self, slug: str) -> Post | None:
        """Look up a post by slug."""
        return self._post_by_slug.get(slug)

    def page(self, slug: str) -> Page | None:
        """Look up a page by slug."""
        return self._page_by_slug.get(slug)

    def latest_posts(self, count: int) -> list[Post]:
        """Return the ``count`` most recent posts, or all of them if fewer exist."""
        return self.posts.latest(count)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"Index({len(self.posts)} posts, {len(self.pages)} pages)"


def _slug_map(entries, kind: str) -> dict:
    mapping = {}
    for entry in entries:
        if entry.slug in mapping:
            # Later entries overwrite earlier ones, routing stays as loaded.
            logger.warning(
                "duplicate slug",
                kind=kind,
                slug=entry.slug,
                kept=str(entry.path),
                shadowed=str(mapping[entry.slug].path),
            )
        mapping[entry.slug] = entry
    return mapping


class FileContentLoader:
    """Lists content files of a single folder.

    Only ``*.md`` files directly inside the folder are returned, sorted by
    name so that load order (and date ties) are deterministic.

    Attributes:
        folder: Directory to scan.
    """

    def __init__(self, folder: Path):
        self.folder = folder

    def iter_files(self) -> list[Path]:
        """Return the Markdown files in the folder.

        Raises:
            OSError: If the folder is missing or unreadable.
        """
        if not self.folder.is_dir():
            raise FileNotFoundError(f"content folder not found: {self.folder}")
        return sorted(
            path for path in self.folder.iterdir() if path.is_file() and is_markdown(path)
        )


class IndexBuilder:
    """Builds an Index from ``{base}/posts`` and ``{base}/pages``.

    Files that cannot be read, decoded or dated are logged and skipped; a
    missing folder is logged and yields an empty collection. The build
    itself never raises for content problems.

    Attributes:
        base: Blog folder.
        resolver: Resolver used to compute entity URLs.
    """

    def __init__(self, base: Path, resolver: SlugResolver | None = None):
        self.base = base
        self.resolver = resolver or default_resolver

    def build(self) -> Index:
        """Scan the blog folder and return a new Index."""
        posts: list[Post] = []
        for item in self._load_folder(self.base / POSTS_FOLDER):
            post = self._make_post(item)
            if post is not None:
                posts.append(post)
        pages = [self._make_page(item) for item in self._load_folder(self.base / PAGES_FOLDER)]
        index = Index(posts, pages)
        logger.info("index built", base=str(self.base), posts=len(index.posts), pages=len(index.pages))
        return index

    def _load_folder(self, folder: Path) -> list[tuple[Path, FrontMatter]]:
        try:
            files = FileContentLoader(folder).iter_files()
        except OSError as exc:
            logger.error("failed to scan folder", folder=str(folder), error=str(exc))
            return []
        logger.debug("scanning folder", folder=str(folder), entries=[p.name for p in files])

        parsed: list[tuple[Path, FrontMatter]] = []
        for path in files:
            try:
                parsed.append((path, parse_file(path)))
            except (OSError, UnicodeDecodeError, FrontMatterError) as exc:
                logger.warning("failed to parse", file=str(path), error=str(exc))
        return parsed

    def _make_post(self, item: tuple[Path, FrontMatter]) -> Post | None:
        path, data = item
        try:
            date = parse_post_date(data.date)
        except ValueError:
            logger.warning("skipping post without valid date", file=str(path), date=data.date)
            return None
        return Post(
            title=data.title,
            subtitle=data.subtitle,
            date=date,
            slug=data.slug,
            content=data.body,
            url=self.resolver.post(data.slug),
            path=path,
        )

    def _make_page(self, item: tuple[Path, FrontMatter]) -> Page:
        path, data = item
        return Page(
            title=data.title,
            slug=data.slug,
            content=data.body,
            url=self.resolver.page(data.slug),
            path=path,
        )


def build_index(base: Path, resolver: SlugResolver | None = None) -> Index:
    """Build a new Index from a blog folder.

    Args:
        base: Blog folder containing ``posts`` and ``pages``.
        resolver: Optional custom URL resolver.

    Returns:
        A fresh Index.
    """
    return IndexBuilder(base, resolver).build()
