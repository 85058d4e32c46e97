"""Static export for Bloggy.

Renders every route of a Site into a directory so the blog can be hosted
without running the server:

- ``/`` -> ``index.html``
- ``/post/<slug>`` -> ``post/<slug>/index.html``
- ``/<slug>`` -> ``<slug>/index.html``
- ``static/`` is copied verbatim.

Key functions:
- export_site: Write all views of a Site to an output directory.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from .errors import BloggyError
from .site import RenderResult, Site
from .urls import STATIC_BASE_URL
from .utils import ensure_clean_dir

logger = structlog.get_logger(__name__)

STATIC_FOLDER = "static"


class BuildError(BloggyError):
    """A view failed to render during export.

    Attributes:
        url: Path of the view that failed.
        status: Status the view rendered with.
    """

    def __init__(self, url: str, status: int):
        self.url = url
        self.status = status
        super().__init__(f"{url}: rendered with status {status}")


@dataclass
class BuildResult:
    """Result of a static export.

    Attributes:
        output_dir: Directory the site was written to.
        urls: Paths that were written, in write order.
        skipped: Paths whose output file was already taken by a static
            file or an earlier view.
    """

    output_dir: Path
    urls: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def export_site(site: Site, output_dir: Path) -> BuildResult:
    """Render every view of a site into ``output_dir``.

    The output directory is wiped first and ``static/`` is copied before any
    view is written. A view never overwrites an existing output file: the
    index wins over a page with an empty slug and a copied
    ``static/index.html`` wins over a page named ``static``. Such views are logged and listed in
    ``BuildResult.skipped``.

    Args:
        site: Site to export.
        output_dir: Target directory.

    Returns:
        BuildResult listing the exported URLs.

    Raises:
        BuildError: If any view renders with a non-200 status.
    """
    ensure_clean_dir(output_dir)
    result = BuildResult(output_dir=output_dir)
    index = site.templater.index

    static_dir = site.base / STATIC_FOLDER
    if static_dir.is_dir():
        shutil.copytree(static_dir, output_dir / STATIC_BASE_URL.strip("/"), dirs_exist_ok=True)

    _export(result, "/", site.render_index())
    for post in index.posts:
        _export(result, post.url, site.render_post(post.slug))
    for page in index.pages:
        _export(result, page.url, site.render_page(page.slug))

    logger.info("exported site", output=str(output_dir), views=len(result.urls))
    return result


def _export(result: BuildResult, url: str, rendered: RenderResult) -> None:
    if rendered.status != 200:
        raise BuildError(url, rendered.status)
    html_path = _output_path(result.output_dir, url)
    if html_path.exists():
        logger.warning("output path already taken; skipping view", url=url, file=str(html_path))
        result.skipped.append(url)
        return
    _write_page(html_path, rendered.body)
    result.urls.append(url)


def _output_path(output_dir: Path, url: str) -> Path:
    return output_dir / url.strip("/") / "index.html"


def _write_page(html_path: Path, rendered: str) -> None:
    """Write a rendered view, creating its parent directories.

    Args:
        html_path: Target ``index.html`` path.
        rendered: Rendered HTML content.
    """
    html_path.parent.mkdir(parents=True, exist_ok=True)
    with open(html_path, "w", encoding="utf-8") as f:
        f.write(rendered)
