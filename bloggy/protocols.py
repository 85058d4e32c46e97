"""Protocol definitions for Bloggy.

These small interfaces keep the Index, the Templater and the HTTP layer
loosely coupled and easy to fake in tests.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class Entry(Protocol):
    """Anything that can appear in navigation or be rendered as content.

    Posts, pages and configured navigation links all satisfy this protocol.
    """

    @property
    @abstractmethod
    def title(self) -> str:
        """Human-readable title."""
        ...

    @property
    @abstractmethod
    def url(self) -> str:
        """Canonical URL path or external link."""
        ...

    @property
    @abstractmethod
    def content(self) -> str:
        """Raw Markdown body (empty for links)."""
        ...


@runtime_checkable
class SlugResolver(Protocol):
    """Protocol for mapping slugs to request paths."""

    @abstractmethod
    def post(self, slug: str) -> str:
        """Return the path for a post slug."""
        ...

    @abstractmethod
    def page(self, slug: str) -> str:
        """Return the path for a page slug."""
        ...
