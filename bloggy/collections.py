from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .content import Page, Post


class PostCollection(Sequence["Post"]):
    """Posts ordered newest-first by publish date.

    Sorting is stable, so posts sharing a date keep the order they were
    given in (the Index passes them in filename order).
    """

    def __init__(self, posts: Iterable[Post]):
        self._posts = sorted(posts, key=lambda p: p.date, reverse=True)

    def __iter__(self) -> Iterator[Post]:
        return iter(self._posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __getitem__(self, item):
        return self._posts[item]

    def latest(self, count: int) -> list[Post]:
        """Return at most ``count`` most recent posts."""
        if count <= 0:
            return []
        return self._posts[:count]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PostCollection({len(self._posts)} posts)"


class PageCollection(Sequence["Page"]):
    """Pages in the order they were loaded."""

    def __init__(self, pages: Iterable[Page]):
        self._pages = list(pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __getitem__(self, item):
        return self._pages[item]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PageCollection({len(self._pages)} pages)"
