"""Bloggy content-serving engine.

This package loads posts and pages (YAML front matter plus Markdown bodies)
from a blog folder, renders them to sanitized HTML and serves them over HTTP
through Jinja2 templates, memoizing the rendered view-models between reloads.

The main entry point is the CLI module, which provides commands for serving
a blog, exporting it as static files and initializing a new blog folder.

Architecture:
- frontmatter: splits files into metadata and body.
- content / collections: the Index of posts and pages.
- renderers: Markdown to sanitized HTML.
- templates: context cache and template application.
- site: owns the shared state and performs reloads.
"""

__all__ = ["__version__"]
__version__ = "0.2.0"
