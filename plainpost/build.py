"""Blog building functionality for plainpost.

This module contains the core logic for building a static blog from a source
directory of posts. It loads configuration, parses and renders posts, renders
the page templates and writes the feeds.

Key functions:
- build_site: Main function to build the entire blog.
- load_config: Loads configuration from plainpost.yaml.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .collections import Posts, TagIndex
from .content import Post, PostLoader, log_post
from .errors import ConfigError, PostError
from .feeds import FeedSettings, write_feeds
from .templates import TemplateEngine
from .utils import md_to_html

CONFIG_FILENAME = "plainpost.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "site_title": "plainpost - All posts",
    "site_url": "http://localhost:8080/",
    "site_description": "",
    "author_name": "",
    "author_email": "",
    "copyright": "",
    "posts_dir": "posts",
    "recent_posts": 5,
    "port": ":8080",
    "static_dir": "static",
    "watch_dir": "",
    "watch_cmd": "",
}


@dataclass
class BuildResult:
    """Result of a build.

    Attributes:
        posts: Posts, newest first.
        output_dir: Directory where the blog was built.
        files: Every file written, in write order.
    """

    posts: Posts
    output_dir: Path
    files: list[Path] = field(default_factory=list)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the configuration file. Defaults to
            plainpost.yaml in the working directory.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If the file exists but is not valid YAML or a
            value has the wrong type.
    """
    config_path = config_path or Path(CONFIG_FILENAME)
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(config_path, f"Cannot load configuration: {exc}", exc) from exc
        if isinstance(loaded, dict):
            config.update(loaded)
    _validate_config(config, config_path)
    return config


def _validate_config(config: dict[str, Any], source_path: Path | str) -> None:
    """Reject values the build cannot use.

    Raises:
        ConfigError: If ``recent_posts`` is not a non-negative integer or
            ``posts_dir`` is not a string.
    """
    recent = config.get("recent_posts")
    if isinstance(recent, bool) or not isinstance(recent, int) or recent < 0:
        raise ConfigError(
            source_path, f"recent_posts must be a non-negative integer, got {recent!r}"
        )
    posts_dir = config.get("posts_dir")
    if posts_dir is not None and not isinstance(posts_dir, str):
        raise ConfigError(source_path, f"posts_dir must be a string, got {posts_dir!r}")


def build_site(
    src_dir: Path,
    template_dir: Path,
    dest_dir: Path,
    config: dict[str, Any] | None = None,
    log: Callable[[str], None] | None = None,
) -> BuildResult:
    """Build the blog.

    Posts are parsed and rendered one at a time, each written to its own page
    as soon as it is ready. The collection is then sorted newest first and the
    index, about, contact and archive pages and the feeds are written. Nothing
    is rolled back on failure.

    Args:
        src_dir: Directory of markdown posts.
        template_dir: Directory of Jinja2 templates.
        dest_dir: Output directory; created if missing, never cleaned.
        config: Configuration mapping; defaults apply when omitted.
        log: Optional callable receiving per-post progress lines.

    Returns:
        BuildResult with the sorted posts and written files.

    Raises:
        PlainpostError: Any parse, template, write or feed failure.
    """
    config = {**DEFAULT_CONFIG, **(config or {})}
    _validate_config(config, CONFIG_FILENAME)
    engine = TemplateEngine(template_dir, site=config)
    posts_dir = str(config.get("posts_dir") or "").strip("/")
    loader = PostLoader(src_dir, posts_dir=posts_dir)

    dest_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    loaded: list[Post] = []
    for path in loader.iter_files():
        post = loader.load_post(path)
        if log is not None:
            log_post(post, log)
        page = dest_dir / posts_dir / md_to_html(path.name)
        written.append(engine.render(page, "default.html", {"content": post}))
        loaded.append(post)

    if not loaded:
        raise PostError(src_dir, "No posts found")

    posts = Posts(loaded).sorted()
    newest = posts[0]
    tags = TagIndex(posts)
    recent = config["recent_posts"]

    pages = [
        ("index.html", {"title": "", "posts": posts, "tags": tags}),
        ("about.html", {"title": "About", "author": newest.author}),
        ("contact.html", {"title": "Contact", "author": newest.author}),
        ("archive.html", {"title": "Archive", "posts": posts.archive(recent)}),
    ]
    for name, context in pages:
        written.append(engine.render(dest_dir / name, name, context))

    written.extend(write_feeds(dest_dir, posts, FeedSettings.from_config(config)))
    return BuildResult(posts=posts, output_dir=dest_dir, files=written)
