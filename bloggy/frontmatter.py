"""Front matter parsing for Bloggy.

A content file consists of an optional preamble, a metadata block delimited
by lines that are exactly ``---``, and a Markdown body::

    ignored preamble
    ---
    title: Hello
    date: 2021-Jan-01
    ---
    # Body text

Key objects:
- FrontMatter: Dataclass holding the decoded metadata and the raw body.
- parse_lines: Scans lines and decodes the metadata block.
- parse_file: Reads a file and parses it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .errors import FrontMatterError
from .utils import normalize_slug, slug_from_filename

DELIMITER = "---"

KNOWN_FIELDS = ("title", "subtitle", "date", "slug")


class _ScanState(Enum):
    BEFORE_HEADER = 0
    IN_HEADER = 1
    IN_BODY = 2


@dataclass(frozen=True)
class FrontMatter:
    """Parsed content file.

    Attributes:
        title: Title as written.
        subtitle: Optional subtitle (posts only).
        date: Raw publish date token (posts only).
        slug: Normalized slug, derived from the file name when absent.
        body: Everything after the closing delimiter.
    """

    title: str
    subtitle: str
    date: str
    slug: str
    body: str


def split_lines(lines: Iterable[str]) -> tuple[str, str]:
    """Split a file into its metadata text and body text.

    Lines before the first delimiter are discarded. When the closing
    delimiter is missing everything after the opening one is treated as
    metadata and the body is empty.

    Args:
        lines: File lines, with or without trailing newlines.

    Returns:
        Tuple of (metadata text, body text).
    """
    state = _ScanState.BEFORE_HEADER
    header: list[str] = []
    body: list[str] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if state is _ScanState.BEFORE_HEADER:
            if line == DELIMITER:
                state = _ScanState.IN_HEADER
        elif state is _ScanState.IN_HEADER:
            if line == DELIMITER:
                state = _ScanState.IN_BODY
            else:
                header.append(line + "\n")
        else:
            body.append(line + "\n")
    return "".join(header), "".join(body)


def decode_metadata(text: str, source: Path | str = "<string>") -> dict[str, str]:
    """Decode a YAML metadata block into the known string fields.

    Scalars are kept exactly as written (``Yes`` stays ``"Yes"`` and
    ``1.10`` stays ``"1.10"``); unknown keys are ignored and missing fields
    become empty strings.

    Args:
        text: Metadata text between the delimiters.
        source: Path used in error messages.

    Returns:
        Dictionary with exactly the keys in KNOWN_FIELDS.

    Raises:
        FrontMatterError: If the YAML is invalid or a field has the wrong shape.
    """
    try:
        # BaseLoader resolves no tags, so every scalar comes back as a str.
        data = yaml.load(text, Loader=yaml.BaseLoader)
    except yaml.YAMLError as exc:
        raise FrontMatterError(source, f"invalid YAML in front matter: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError(source, "front matter must be a mapping")

    fields: dict[str, str] = {}
    for key in KNOWN_FIELDS:
        fields[key] = _coerce_field(key, data.get(key), source)
    return fields


def _coerce_field(key: str, value: Any, source: Path | str) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise FrontMatterError(source, f"front matter field '{key}' must be a scalar")
    return str(value)


def parse_lines(lines: Iterable[str], filename: Path | str) -> FrontMatter:
    """Parse a content file given as lines.

    Args:
        lines: File contents as a sequence of lines.
        filename: Name of the file, used for slug derivation and errors.

    Returns:
        FrontMatter record with a normalized slug.

    Raises:
        FrontMatterError: If the metadata block cannot be decoded.
    """
    header, body = split_lines(lines)
    fields = decode_metadata(header, filename)
    raw_slug = fields["slug"] or slug_from_filename(filename)
    return FrontMatter(
        title=fields["title"],
        subtitle=fields["subtitle"],
        date=fields["date"],
        slug=normalize_slug(raw_slug),
        body=body,
    )


def parse_file(path: Path) -> FrontMatter:
    """Read and parse a content file.

    Raises:
        OSError: If the file cannot be read.
        FrontMatterError: If the metadata block cannot be decoded.
    """
    text = path.read_text(encoding="utf-8")
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return parse_lines(lines, path)
