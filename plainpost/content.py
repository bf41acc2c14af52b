"""Content model and loading for plainpost.

This module defines the records a blog is built from and the loader that turns
a source directory into rendered posts.

Key classes:
- User: Author of a post, parsed from a ``First Last <email>`` line.
- Tag: A single tag name attached to a post.
- Post: Dataclass representing one blog entry.
- PostLoader: Lists a source directory and builds rendered Post instances.
- log_post: Reports a parsed post's metadata.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .errors import PostError
from .renderers import MarkdownRenderer
from .utils import ZERO_DATE, md_to_html


@dataclass
class User:
    """Author of a post.

    Attributes:
        first_name: Everything before the last name.
        last_name: Last whitespace-separated word before the email.
        email: Address inside the angle brackets.
        pubkey: Public key, carried but unused.
        username: Account name, carried but unused.
    """

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    pubkey: bytes = b""
    username: str = ""

    def combine(self) -> str:
        """Return ``First Last``."""
        return f"{self.first_name} {self.last_name}"


@dataclass
class Tag:
    """A tag attached to a post. Only the name is ever populated."""

    name: str
    id: int = 0
    created: datetime | None = None


@dataclass
class Post:
    """Represents one blog entry.

    Attributes:
        title: Post title from the ``title:`` line.
        description: Short summary from the ``description:`` line.
        date: Publication timestamp (timezone-aware).
        body: Markdown text until ``render`` replaces it with HTML.
        author: Post author.
        signed: Whether the post is signed (unused).
        signature: Signature bytes (unused).
        tags: Tags in the order they were listed.
        url: Root-relative URL of the rendered page.
        source_path: Markdown file the post was read from.
    """

    title: str = ""
    description: str = ""
    date: datetime = ZERO_DATE
    body: str = ""
    author: User = field(default_factory=User)
    signed: bool = False
    signature: bytes = b""
    tags: list[Tag] = field(default_factory=list)
    url: str = ""
    source_path: Path | None = None

    def render(self, renderer: MarkdownRenderer) -> None:
        """Replace the markdown body with its HTML rendering."""
        self.body = renderer.render(self.body)

    def tag_names(self) -> list[str]:
        return [tag.name for tag in self.tags]


class PostLoader:
    """Loads and renders every post in a source directory.

    Only regular ``.md`` files directly inside the directory are read, in
    filename order, so posts with equal dates keep a predictable order once
    sorted.

    Attributes:
        src_dir: Directory containing markdown posts.
        posts_dir: URL prefix (and output subdirectory) for post pages.
        renderer: Markdown renderer applied to each body.
    """

    def __init__(
        self,
        src_dir: Path,
        posts_dir: str = "posts",
        renderer: MarkdownRenderer | None = None,
    ):
        self.src_dir = src_dir
        self.posts_dir = posts_dir.strip("/")
        self.renderer = renderer or MarkdownRenderer()

    def iter_files(self) -> list[Path]:
        """Return the markdown files to build, sorted by name.

        Raises:
            PostError: If the source directory cannot be listed.
        """
        try:
            entries = sorted(self.src_dir.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            raise PostError(self.src_dir, f"Cannot list directory: {exc}", exc) from exc
        return [p for p in entries if p.is_file() and p.suffix.lower() == ".md"]

    def url_for(self, path: Path) -> str:
        name = md_to_html(path.name)
        if self.posts_dir:
            return f"/{self.posts_dir}/{name}"
        return f"/{name}"

    def load_post(self, path: Path) -> Post:
        """Parse, render and address a single post file."""
        # Import here to avoid circular imports
        from .frontmatter import parse_post

        post = parse_post(path)
        post.render(self.renderer)
        post.url = self.url_for(path)
        return post


def log_post(post: Post, log: Callable[[str], None]) -> None:
    """Report a parsed post's metadata, one field per line."""
    author = post.author
    log(f"Author: {author.first_name} {author.last_name} ({author.email})")
    log(f"Title: {post.title}")
    log(f"Date: {post.date.isoformat()}")
    log(f"Tags: {post.tag_names()}")
    log(f"Description: {post.description}")
    log("-----")
