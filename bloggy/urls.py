"""URL resolution for Bloggy.

Maps entity slugs to canonical request paths. The same resolver is used by
the Index (entity ``url`` properties), by navigation building and by the
HTTP router, so links and routes always agree.
"""

from __future__ import annotations

INDEX_BASE_URL = "/"
PAGE_BASE_URL = "/"
POST_BASE_URL = "/post/"
STATIC_BASE_URL = "/static/"
FAVICON_URL = "/favicon.ico"


class URLResolver:
    """Derives canonical paths for posts and pages.

    Both methods are pure and total: any slug yields a path.
    """

    def __init__(self, post_base: str = POST_BASE_URL, page_base: str = PAGE_BASE_URL):
        self.post_base = post_base
        self.page_base = page_base

    def post(self, slug: str) -> str:
        """Return the path of the post with the given slug, e.g. ``/post/hello``."""
        return f"{self.post_base}{slug}"

    def page(self, slug: str) -> str:
        """Return the path of the page with the given slug, e.g. ``/about``."""
        return f"{self.page_base}{slug}"


default_resolver = URLResolver()
