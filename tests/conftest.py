"""Shared fixtures for Bloggy tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bloggy.logs import configure_logging

CONFIG = """\
meta:
  title: Test Blog
  subtitle: Notes and things
author:
  name: Jane Doe
  email: jane@example.com
links:
  GitHub: https://github.com/jane
  Mastodon: https://social.example/@jane
latest_posts: 10
"""

BASE_TEMPLATE = """\
<html><head><title>{{ site.title }}</title></head>
<body>
<nav>{% for item in site.nav %}<a href="{{ item.url }}">{{ item.title }}</a>{% endfor %}</nav>
{% block body %}{% endblock %}
<footer>{{ site.author }} {{ site.year }}</footer>
</body></html>
"""

DISPLAYS = {
    "index.html": (
        '{% extends "base.html" %}{% block body %}'
        '{% for post in posts %}<a class="post" href="{{ post.url }}">{{ post.title }}</a>{% endfor %}'
        "{% endblock %}"
    ),
    "post.html": (
        '{% extends "base.html" %}{% block body %}'
        "<h1>{{ title }}</h1><p>{{ subtitle }}</p><time>{{ date }}</time>"
        "<article>{{ content }}</article>{% endblock %}"
    ),
    "page.html": (
        '{% extends "base.html" %}{% block body %}'
        "<h1>{{ title }}</h1><article>{{ content }}</article>{% endblock %}"
    ),
    "error.html": (
        '{% extends "base.html" %}{% block body %}'
        '<p class="error">{{ status }}: {{ message }}</p>{% endblock %}'
    ),
}


def write_post(folder: Path, name: str, title: str, date: str | None, body: str = "", slug: str | None = None) -> Path:
    lines = ["---", f"title: {title}"]
    if date is not None:
        lines.append(f"date: {date}")
    if slug is not None:
        lines.append(f"slug: {slug}")
    lines.append("---")
    path = folder / name
    path.write_text("\n".join(lines) + "\n" + body, encoding="utf-8")
    return path


def create_blog(root: Path) -> Path:
    blog = root / "blog"
    (blog / "posts").mkdir(parents=True)
    (blog / "pages").mkdir()
    (blog / "static" / "css").mkdir(parents=True)
    (blog / "templates" / "displays").mkdir(parents=True)
    (blog / "templates" / "includes").mkdir(parents=True)

    (blog / "config.yaml").write_text(CONFIG, encoding="utf-8")
    (blog / "templates" / "includes" / "base.html").write_text(BASE_TEMPLATE, encoding="utf-8")
    for name, source in DISPLAYS.items():
        (blog / "templates" / "displays" / name).write_text(source, encoding="utf-8")
    (blog / "static" / "css" / "main.css").write_text("body { color: black; }", encoding="utf-8")

    write_post(blog / "posts", "old-post.md", "Old Post", "2020-Jan-01", "# Old\n\nFirst words.\n")
    write_post(blog / "posts", "new-post.md", "New Post", "2021-Jan-01", "# New\n\nLatest words.\n")
    write_post(blog / "pages", "about.md", "About", None, "About *me*.\n")
    return blog


@pytest.fixture
def blog(tmp_path: Path) -> Path:
    """Blog folder with config, two posts, one page, templates and a stylesheet."""
    return create_blog(tmp_path)


@pytest.fixture(autouse=True)
def _restore_logging():
    """Route structlog through stdlib logging and restore logger state afterwards."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    bloggy_logger = logging.getLogger("bloggy")
    bloggy_level = bloggy_logger.level
    configure_logging()
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    bloggy_logger.setLevel(bloggy_level)
