"""HTTP server for Bloggy.

Serves a Site over HTTP, one thread per request:

- ``GET /`` renders the index.
- ``GET /post/<slug>`` renders a post, ``GET /<slug>`` a page.
- ``GET /static/...`` serves files from the blog's ``static`` folder
  (directory listings are rejected with a 404).
- ``GET /favicon.ico`` serves the configured favicon.
- ``POST /-/reload`` reloads content when ``server.admin_reload`` is on.

Optionally watches the blog folder and reloads on changes.

Key classes:
- BlogServer: Owns the HTTP server, the file watcher and the shell thread.
- _BlogHandler: Request handler dispatching routes to the Site.
- _ChangeHandler: File system event handler triggering reloads.
"""

from __future__ import annotations

import functools
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import unquote, urlsplit

import structlog
from jinja2 import TemplateError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .build import STATIC_FOLDER
from .config import CONFIG_FILE
from .content import PAGES_FOLDER, POSTS_FOLDER
from .errors import BloggyError, NotFoundError
from .site import RenderResult, Site
from .templates import TEMPLATE_FOLDER
from .urls import FAVICON_URL, POST_BASE_URL, STATIC_BASE_URL

logger = structlog.get_logger(__name__)

RELOAD_URL = "/-/reload"
WATCHED_FOLDERS = (POSTS_FOLDER, PAGES_FOLDER, TEMPLATE_FOLDER)


class _BlogHandler(SimpleHTTPRequestHandler):
    """Routes requests to a Site; static files are served from ``directory``.

    Attributes:
        site: Site to render views from (set on a subclass per server).
    """

    site: Site

    def do_GET(self):
        self._dispatch(send_body=True)

    def do_HEAD(self):
        self._dispatch(send_body=False)

    def do_POST(self):
        path = urlsplit(self.path).path
        if path != RELOAD_URL or not self.site.config.server.admin_reload:
            self._send(self._not_found(path), send_body=True)
            return
        try:
            self.site.reload()
        except TemplateError as exc:
            self._send(self.site.render_error(exc, 500), send_body=True)
            return
        self.send_response(204)
        self.end_headers()

    def _dispatch(self, send_body: bool) -> None:
        split = urlsplit(self.path)
        path = split.path
        if path == "/":
            self._send(self.site.render_index(), send_body)
        elif path.startswith(STATIC_BASE_URL):
            # Strip the prefix and let SimpleHTTPRequestHandler serve the file.
            self.path = "/" + split.path[len(STATIC_BASE_URL) :]
            if split.query:
                self.path += "?" + split.query
            if send_body:
                super().do_GET()
            else:
                super().do_HEAD()
        elif path == FAVICON_URL and self.site.config.meta.favicon:
            self._send_favicon(send_body)
        elif path.startswith(POST_BASE_URL):
            slug = unquote(path[len(POST_BASE_URL) :])
            if "/" in slug:
                self._send(self._not_found(path), send_body)
            else:
                self._send(self.site.render_post(slug), send_body)
        else:
            slug = unquote(path[1:])
            if not slug or "/" in slug:
                self._send(self._not_found(path), send_body)
            else:
                self._send(self.site.render_page(slug), send_body)

    def _not_found(self, path: str) -> RenderResult:
        return self.site.render_error(NotFoundError("route", path), 404)

    def _send(self, result: RenderResult, send_body: bool) -> None:
        encoded = result.body.encode("utf-8")
        self.send_response(result.status)
        self.send_header("Content-type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(encoded)))
        self.end_headers()
        if send_body:
            self.wfile.write(encoded)

    def _send_favicon(self, send_body: bool) -> None:
        favicon = self.site.base / self.site.config.meta.favicon
        try:
            data = favicon.read_bytes()
        except OSError as exc:
            logger.warning("failed to read favicon", file=str(favicon), error=str(exc))
            self._send(self._not_found(FAVICON_URL), send_body)
            return
        self.send_response(200)
        self.send_header("Content-type", self.guess_type(str(favicon)))
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        if send_body:
            self.wfile.write(data)

    def list_directory(self, path):
        # Directory listings are answered like missing content.
        self._send(self._not_found(self.path), send_body=self.command != "HEAD")
        return None

    def send_error(self, code, message=None, explain=None):
        if code == 404:
            self._send(self._not_found(self.path), send_body=self.command != "HEAD")
            return
        super().send_error(code, message, explain)

    def log_message(self, format, *args):
        logger.debug("request", client=self.address_string(), message=format % args)


class BlogServer:
    """HTTP server for a Site with optional reload-on-change.

    Attributes:
        site: Site being served.
        host: Interface to bind.
        port: Port to listen on.
    """

    def __init__(self, site: Site, port: int | None = None, host: str = ""):
        """Initialize the server.

        Args:
            site: Site to serve.
            port: Optional override for ``server.port`` from the configuration.
            host: Interface to bind, all interfaces by default.
        """
        self.site = site
        self.host = host
        self.port = int(port if port is not None else site.config.server.port)
        self._httpd: ThreadingHTTPServer | None = None
        self._observer: Observer | None = None
        self._last_signature: tuple | None = None

    def make_handler(self):
        """Return a request handler class bound to this server's site."""
        handler_cls = type("_BoundBlogHandler", (_BlogHandler,), {"site": self.site})
        return functools.partial(handler_cls, directory=str(self.site.base / STATIC_FOLDER))

    def create_httpd(self) -> ThreadingHTTPServer:
        self._httpd = ThreadingHTTPServer((self.host, self.port), self.make_handler())
        return self._httpd

    def serve_forever(self, watch: bool = False) -> None:  # pragma: no cover - integration path
        """Serve until interrupted."""
        httpd = self.create_httpd()
        if watch:
            self.start_watcher()
        logger.info("serving", base=str(self.site.base), port=self.port)
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    def serve_in_background(self, watch: bool = False) -> threading.Thread:
        """Start serving on a daemon thread and return it."""
        httpd = self.create_httpd()
        if watch:
            self.start_watcher()
        thread = threading.Thread(target=httpd.serve_forever, daemon=True)
        thread.start()
        logger.info("serving", base=str(self.site.base), port=self.port)
        return thread

    def stop(self) -> None:
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        if self._httpd:
            self._httpd.shutdown()
            self._httpd.server_close()
            self._httpd = None

    def start_watcher(self) -> None:
        self._last_signature = self._compute_signature()
        handler = _ChangeHandler(self)
        observer = Observer()
        for folder in WATCHED_FOLDERS:
            watch_path = self.site.base / folder
            if watch_path.exists():
                observer.schedule(handler, str(watch_path), recursive=True)
        observer.start()
        self._observer = observer

    def reload(self) -> None:
        """Reload the site in response to a file change.

        Bursts of events for one save share a content signature and cause a
        single reload; any later edit changes the signature and reloads again.
        """
        signature = self._compute_signature()
        if signature == self._last_signature:
            return
        self._last_signature = signature
        logger.info("change detected; reloading")
        try:
            self.site.reload()
        except (BloggyError, TemplateError) as exc:
            logger.error("reload failed; keeping previous content", error=str(exc))

    def _compute_signature(self) -> tuple:
        entries: list[tuple] = []
        for folder in WATCHED_FOLDERS:
            root = self.site.base / folder
            if not root.is_dir():
                continue
            for path in sorted(root.rglob("*")):
                if path.is_dir() or path.name.startswith("."):
                    continue
                try:
                    stat = path.stat()
                except OSError:
                    continue
                entries.append((str(path.relative_to(self.site.base)), stat.st_mtime_ns, stat.st_size))
        return tuple(entries)


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, server: BlogServer):
        super().__init__()
        self.server = server

    def on_any_event(self, event):
        if event.is_directory:
            return
        path = Path(event.src_path)
        if path.name == CONFIG_FILE or path.name.startswith("."):
            return
        self.server.reload()
