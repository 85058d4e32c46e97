"""Markdown rendering for Bloggy.

Bodies are rendered in two stages:

1. mistune converts Markdown to HTML (tables, strikethrough, footnotes,
   autolinks, fenced code highlighted with Pygments, heading anchors).
2. nh3 sanitizes the HTML with a user-generated-content policy: scripts,
   styles, event handlers and unsafe URLs are removed while formatting,
   links and images survive.

Key objects:
- MarkdownRenderer: Configurable two-stage renderer.
- render: Module-level shortcut using the default renderer.

Rendering is pure. Every call builds its own mistune renderer, so the
functions here are safe to call from concurrent request threads.
"""

from __future__ import annotations

import re

import mistune
import nh3
from mistune.util import escape
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

MARKDOWN_PLUGINS = ["strikethrough", "footnotes", "table", "url"]

EXTRA_TAGS = {"section"}

EXTRA_ATTRIBUTES = {
    "h1": {"id"},
    "h2": {"id"},
    "h3": {"id"},
    "h4": {"id"},
    "h5": {"id"},
    "h6": {"id"},
    "div": {"class"},
    "pre": {"class"},
    "code": {"class"},
    "span": {"class"},
    "sup": {"class", "id"},
    "li": {"id"},
    "a": {"class"},
    "section": {"class"},
    "th": {"style"},
    "td": {"style"},
}


_TAG_RE = re.compile(r"<[^>]+>")
_NON_WORD_RE = re.compile(r"[^\w\s-]")
_SEPARATOR_RE = re.compile(r"[-\s]+")


def anchor_id(text: str) -> str:
    """Turn heading text (possibly containing inline markup) into an anchor."""
    plain = _NON_WORD_RE.sub("", _TAG_RE.sub("", text).lower().strip())
    return _SEPARATOR_RE.sub("-", plain).strip("-")


class _BlogHTMLRenderer(mistune.HTMLRenderer):
    """Adds unique heading anchors and Pygments output for fenced code."""

    def __init__(self):
        # Raw HTML passes through here and is cleaned in the sanitize stage.
        super().__init__(escape=False)
        self._anchors_seen: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        anchor = anchor_id(text)
        seen = self._anchors_seen.get(anchor)
        self._anchors_seen[anchor] = 0 if seen is None else seen + 1
        if seen is not None:
            anchor = f"{anchor}-{seen + 1}"
        return f'<h{level} id="{anchor}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        """Highlight a fenced block by its info string.

        Unknown or missing languages fall back to an escaped ``<pre><code>``
        block tagged with ``language-<name>`` when a name was given.
        """
        words = (info or "").split()
        lang = words[0] if words else ""
        lexer = _find_lexer(lang) if lang else None
        if lexer is not None:
            return highlight(code, lexer, HtmlFormatter(cssclass="highlight"))
        css = f' class="language-{escape(lang)}"' if lang else ""
        return "<pre><code" + css + ">" + escape(code) + "</code></pre>\n"


def _find_lexer(lang: str):
    try:
        return get_lexer_by_name(lang, stripall=True)
    except ClassNotFound:
        return None


class MarkdownRenderer:
    """Renders Markdown bodies to sanitized HTML.

    Attributes:
        plugins: mistune plugin names to enable.
        tags: Allowed HTML tags after sanitization.
        attributes: Allowed attributes per tag after sanitization.
    """

    def __init__(self, plugins: list[str] | None = None):
        """Initialize the renderer.

        Args:
            plugins: Optional mistune plugin list overriding the defaults.
        """
        self.plugins = list(plugins) if plugins is not None else list(MARKDOWN_PLUGINS)
        self.tags = set(nh3.ALLOWED_TAGS) | EXTRA_TAGS
        self.attributes = {tag: set(attrs) for tag, attrs in nh3.ALLOWED_ATTRIBUTES.items()}
        for tag, attrs in EXTRA_ATTRIBUTES.items():
            self.attributes.setdefault(tag, set()).update(attrs)

    def to_html(self, content: str) -> str:
        """Convert Markdown to unsanitized HTML.

        Args:
            content: Markdown source.

        Returns:
            HTML string.
        """
        markdown = mistune.create_markdown(renderer=_BlogHTMLRenderer(), plugins=self.plugins)
        return markdown(content)

    def sanitize(self, html: str) -> str:
        """Strip unsafe markup from HTML.

        ``<script>`` and ``<style>`` elements are removed together with their
        content. Applying this to already sanitized HTML returns it unchanged.

        Args:
            html: HTML to clean.

        Returns:
            Sanitized HTML.
        """
        return nh3.clean(
            html,
            tags=self.tags,
            attributes=self.attributes,
            filter_style_properties={"text-align"},
        )

    def render(self, content: str) -> str:
        """Render Markdown to sanitized HTML.

        Args:
            content: Markdown source.

        Returns:
            Sanitized HTML.
        """
        return self.sanitize(self.to_html(content))


# Default renderer instance
default_renderer = MarkdownRenderer()


def render(content: str) -> str:
    """Render a Markdown body to sanitized HTML with the default renderer."""
    return default_renderer.render(content)
