"""Command-line interface for Bloggy.

This module defines the CLI commands using Click framework.

Commands:
- serve: Serve a blog folder over HTTP.
- build: Export a blog folder as static HTML.
- init: Create a new blog folder from a blueprint repository.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import click

from . import __version__
from .logs import configure_logging

DEFAULT_BLOG = "content"
DEFAULT_REPOSITORY = "https://github.com/lnsp/bloggy-blueprint"


@click.group()
@click.version_option(version=__version__, prog_name="bloggy")
@click.option("-d", "--debug", is_flag=True, help="Enable debug logging")
@click.option("--log-json", is_flag=True, help="Emit logs as JSON lines")
def cli(debug: bool, log_json: bool):
    """Minimal blogging engine."""
    configure_logging(verbose=debug, log_json=log_json)


@cli.command()
@click.option("-b", "--blog", default=DEFAULT_BLOG, show_default=True, help="Blog folder to serve")
@click.option("--port", type=int, required=False, help="Port to listen on (overrides config.yaml)")
@click.option("-i", "--interactive", is_flag=True, help="Run the interactive command shell")
@click.option("--watch", is_flag=True, help="Reload automatically when content changes")
def serve(blog: str, port: int | None, interactive: bool, watch: bool):
    """Run a HTTP server and serve the blog content."""
    from .server import BlogServer
    from .shell import Shell

    site = _open_site(Path(blog))
    server = BlogServer(site, port=port)
    if interactive:
        server.serve_in_background(watch=watch)
        Shell(site, on_stop=server.stop).run()
    else:
        server.serve_forever(watch=watch)


@cli.command()
@click.option("-b", "--blog", default=DEFAULT_BLOG, show_default=True, help="Blog folder to export")
@click.option(
    "-o", "--output", default="build", show_default=True, help="Directory to write the site to"
)
def build(blog: str, output: str):
    """Export the blog as static HTML files."""
    from .build import BuildError, export_site

    site = _open_site(Path(blog))
    try:
        result = export_site(site, Path(output))
    except BuildError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  URL: {exc.url}", fg="yellow"), err=True)
        click.echo(click.style(f"  Status: {exc.status}", fg="white"), err=True)
        raise SystemExit(1) from None
    for url in result.skipped:
        click.echo(click.style(f"Skipped {url}: output path already taken", fg="yellow"), err=True)
    click.echo(f"Built {len(result.urls)} views into {result.output_dir}")


@cli.command()
@click.option("-b", "--blog", default=DEFAULT_BLOG, show_default=True, help="Blog folder to create")
@click.option(
    "-r",
    "--repository",
    default=DEFAULT_REPOSITORY,
    show_default=True,
    help="Repository to clone from",
)
def init(blog: str, repository: str):
    """Initialize a new blog folder."""
    target = Path(blog).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(f"Refusing to initialize into non-empty directory: {target}")
    git_bin = shutil.which("git")
    if not git_bin:
        raise click.ClickException("git is required to initialize a blog")
    click.echo(f"Cloning {repository}")
    try:
        subprocess.run(
            [git_bin, "clone", repository, str(target)],
            check=True,
            capture_output=True,
        )
    except subprocess.CalledProcessError as exc:
        stderr = exc.stderr.decode("utf-8", "replace").strip() if exc.stderr else ""
        raise click.ClickException(f"git clone failed: {stderr or exc}") from exc
    click.echo(f"New blog created at {target}")


def _open_site(base: Path):
    from jinja2 import TemplateError

    from .errors import BloggyError
    from .site import Site

    if not base.is_dir():
        raise click.ClickException(f"Blog folder not found: {base}")
    try:
        return Site.open(base)
    except (BloggyError, TemplateError) as exc:
        raise click.ClickException(str(exc)) from exc


def main():
    """Entry point for the CLI application."""
    cli()
