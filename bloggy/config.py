"""Blog configuration for Bloggy.

The configuration lives in ``config.yaml`` at the root of the blog folder::

    server:
      port: 8080
      admin_reload: false
    meta:
      title: My Blog
      subtitle: Notes
      favicon: static/favicon.ico
    author:
      name: Jane Doe
      email: jane@example.com
    links:
      GitHub: https://github.com/jane
    latest_posts: 10

Every key is optional. A missing file yields the defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

CONFIG_FILE = "config.yaml"
DEFAULT_PORT = 8080
DEFAULT_LATEST_POSTS = 10


@dataclass
class ServerConfig:
    port: int = DEFAULT_PORT
    admin_reload: bool = False


@dataclass
class MetaConfig:
    title: str = ""
    subtitle: str = ""
    favicon: str = ""


@dataclass
class AuthorConfig:
    name: str = ""
    email: str = ""


@dataclass
class SiteConfig:
    """Complete blog configuration.

    Attributes:
        base: Blog folder the configuration was loaded from.
        server: HTTP server settings.
        meta: Site title, subtitle and favicon.
        author: Author name and email.
        links: Navigation labels mapped to URLs, in file order.
        latest_posts: Number of posts listed on the index page.
    """

    base: Path = field(default_factory=Path)
    server: ServerConfig = field(default_factory=ServerConfig)
    meta: MetaConfig = field(default_factory=MetaConfig)
    author: AuthorConfig = field(default_factory=AuthorConfig)
    links: dict[str, str] = field(default_factory=dict)
    latest_posts: int = DEFAULT_LATEST_POSTS


def load_config(base: Path) -> SiteConfig:
    """Load ``config.yaml`` from a blog folder.

    Args:
        base: Blog folder.

    Returns:
        SiteConfig with defaults applied for missing keys.

    Raises:
        ConfigError: If the file is not valid YAML or has the wrong shape.
    """
    config_path = base / CONFIG_FILE
    loaded: Any = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"{config_path}: invalid YAML: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f"{config_path}: expected a mapping at the top level")
    return config_from_dict(loaded, base)


def config_from_dict(data: dict[str, Any], base: Path) -> SiteConfig:
    """Build a SiteConfig from decoded YAML.

    Args:
        data: Top-level configuration mapping.
        base: Blog folder.

    Returns:
        SiteConfig instance.

    Raises:
        ConfigError: If a section or value has the wrong type.
    """
    server = _section(data, "server")
    meta = _section(data, "meta")
    author = _section(data, "author")
    links = _section(data, "links")
    return SiteConfig(
        base=base,
        server=ServerConfig(
            port=_int(server.get("port", DEFAULT_PORT), "server.port"),
            admin_reload=bool(server.get("admin_reload", False)),
        ),
        meta=MetaConfig(
            title=_str(meta.get("title")),
            subtitle=_str(meta.get("subtitle")),
            favicon=_str(meta.get("favicon")),
        ),
        author=AuthorConfig(
            name=_str(author.get("name")),
            email=_str(author.get("email")),
        ),
        links={str(label): _str(url) for label, url in links.items()},
        latest_posts=_int(data.get("latest_posts", DEFAULT_LATEST_POSTS), "latest_posts"),
    )


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"config section '{name}' must be a mapping")
    return value


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"config value '{name}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"config value '{name}' must be an integer") from exc
