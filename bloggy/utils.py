"""Utility functions for Bloggy.

This module contains small helpers used throughout the Bloggy codebase:
slug normalization, post date parsing and path handling.

Key functions:
    normalize_slug: Reduce a raw slug to lowercase letters and hyphens.
    slug_from_filename: Derive a raw slug from a content file name.
    parse_post_date: Parse a post's ``date`` front matter token.
    is_markdown: Tell content files apart from other files.
    ensure_clean_dir: Wipe and recreate an output directory.
"""

from __future__ import annotations

import re
import shutil
from datetime import datetime
from pathlib import Path

SLUG_STRIP_RE = re.compile(r"[^A-Za-z-]")

# Front matter dates look like ``2021-Jan-01``.
POST_DATE_FORMAT = "%Y-%b-%d"


def normalize_slug(raw: str) -> str:
    """Strip every character outside ``[A-Za-z-]`` and lowercase the rest.

    Digits, underscores and whitespace are dropped rather than replaced,
    so ``My_Post 1`` becomes ``mypost``.

    Args:
        raw: Slug as written in front matter or derived from a file name.

    Returns:
        Normalized slug (possibly empty).

    Examples:
        >>> normalize_slug("my-SLUG")
        'my-slug'

        >>> normalize_slug("example slug")
        'exampleslug'
    """
    return SLUG_STRIP_RE.sub("", raw).lower()


def slug_from_filename(filename: str | Path) -> str:
    """Return the base name of a file without its extension.

    Args:
        filename: File name or path.

    Returns:
        The file stem, not yet normalized.
    """
    return Path(filename).stem


def parse_post_date(token: str) -> datetime:
    """Parse a post publish date in ``YYYY-Mon-DD`` form.

    Args:
        token: Raw date token from front matter.

    Returns:
        Naive datetime at midnight of that day.

    Raises:
        ValueError: If the token does not match the date format.
    """
    return datetime.strptime(token.strip(), POST_DATE_FORMAT)


def is_markdown(path: Path) -> bool:
    """Return True for ``.md`` files, ignoring case."""
    return path.suffix.lower() == ".md"


def ensure_clean_dir(path: Path) -> None:
    """Remove ``path`` with everything below it, then create it empty."""
    if path.exists():
        shutil.rmtree(str(path))
    path.mkdir(parents=True, exist_ok=True)
