"""Interactive command shell for Bloggy.

Runs next to the HTTP server and lets an operator control it::

    ~ reload
    ~ debug on
    ~ help reload
    ~ build
    ~ stop

Key classes:
- Command: Name, usage string and handler of a shell command.
- Shell: Command registry and read-eval loop.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import IO

import click
from jinja2 import TemplateError

from . import __version__
from .build import export_site
from .errors import BloggyError
from .logs import set_debug
from .site import Site

PROMPT = "~ "
DEFAULT_BUILD_DIR = Path("build")


class ShellError(BloggyError):
    """A shell command failed or was used incorrectly."""


class StopShell(Exception):
    """Raised by the ``stop`` command to leave the loop."""


@dataclass(frozen=True)
class Command:
    name: str
    usage: str
    execute: Callable[[list[str]], None]


class Shell:
    """Reads commands from a stream and executes them against a Site.

    Attributes:
        site: Site the commands operate on.
        build_dir: Output directory of the ``build`` command.
    """

    def __init__(
        self,
        site: Site,
        build_dir: Path = DEFAULT_BUILD_DIR,
        on_stop: Callable[[], None] | None = None,
    ):
        self.site = site
        self.build_dir = build_dir
        self._on_stop = on_stop
        self._commands: dict[str, Command] = {}
        self.register("reload", "> reload", self._reload)
        self.register("stop", "> stop", self._stop)
        self.register("debug", "> debug [on|off]", self._debug)
        self.register("help", "> help [command]", self._help)
        self.register("build", "> build", self._build)

    def register(self, name: str, usage: str, execute: Callable[[list[str]], None]) -> None:
        """Register a command; a later registration replaces an earlier one."""
        self._commands[name] = Command(name, usage, execute)

    def command_names(self) -> list[str]:
        return list(self._commands)

    def get(self, name: str) -> Command:
        try:
            return self._commands[name]
        except KeyError:
            raise ShellError("command not found") from None

    def execute(self, line: str) -> bool:
        """Run one input line.

        Returns:
            False if the shell should stop, True otherwise.
        """
        tokens = line.split()
        if not tokens:
            return True
        try:
            self.get(tokens[0].lower()).execute(tokens[1:])
        except StopShell:
            return False
        except (BloggyError, TemplateError, OSError) as exc:
            _message("error:", str(exc))
        return True

    def run(self, stream: IO[str] | None = None) -> None:
        """Read and execute commands until ``stop`` or end of input."""
        stream = stream or sys.stdin
        _message("bloggy", __version__)
        while True:
            click.echo(PROMPT, nl=False)
            line = stream.readline()
            if not line:
                break
            if not self.execute(line):
                break

    def _reload(self, args: list[str]) -> None:
        _message("reload templates, posts and pages")
        self.site.reload()

    def _stop(self, args: list[str]) -> None:
        _message("stop the server")
        if self._on_stop:
            self._on_stop()
        raise StopShell()

    def _debug(self, args: list[str]) -> None:
        if len(args) != 1:
            raise ShellError("bad arguments")
        if args[0] == "on":
            set_debug(True)
            _message("activated debug mode")
        elif args[0] == "off":
            set_debug(False)
            _message("deactivated debug mode")
        else:
            raise ShellError(f"unknown mode: {args[0]}")

    def _help(self, args: list[str]) -> None:
        if not args:
            _message("help:", ", ".join(self.command_names()))
        elif len(args) == 1:
            _message("help:", self.get(args[0]).usage)
        else:
            raise ShellError("bad arguments")

    def _build(self, args: list[str]) -> None:
        result = export_site(self.site, self.build_dir)
        _message(f"built {len(result.urls)} views into {result.output_dir}")


def _message(*items: str) -> None:
    click.echo("[CLI] " + " ".join(items))
