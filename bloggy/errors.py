"""Exception hierarchy for Bloggy."""

from __future__ import annotations

from pathlib import Path


class BloggyError(Exception):
    """Base class for all Bloggy errors."""


class FrontMatterError(BloggyError):
    """Front matter of a content file could not be decoded.

    Attributes:
        source_path: Path to the offending file.
        message: Human-readable error message.
    """

    def __init__(self, source_path: Path | str, message: str):
        self.source_path = Path(source_path)
        self.message = message
        super().__init__(f"{source_path}: {message}")


class NotFoundError(BloggyError):
    """No post or page is registered under the requested slug."""

    def __init__(self, kind: str, slug: str):
        self.kind = kind
        self.slug = slug
        super().__init__(f"{kind} '{slug}' not found")


class TemplateMissingError(BloggyError):
    """A named display template is not part of the compiled template set."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"template '{name}' not found")


class ConfigError(BloggyError):
    """The blog configuration file is malformed."""
