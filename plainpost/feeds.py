"""Feed generation for plainpost.

This module builds the site feed from the sorted post collection and writes
it as Atom and RSS documents. Serialisation is delegated to feedgen; this
module only maps posts and site settings onto feedgen's model.

Classes:
    FeedSettings: Static feed-level fields taken from configuration.
    FeedWriter: Base class for feed writers.
    AtomWriter: Writes atom.xml.
    RSSWriter: Writes rss.xml.
    FeedRegistry: Registry for managing feed writers.

Functions:
    build_feed: Build a feedgen FeedGenerator from posts.
    write_feeds: Write every default feed into a directory.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from feedgen.feed import FeedGenerator

from .errors import FeedError
from .utils import join_url

if TYPE_CHECKING:
    from .content import Post


@dataclass
class FeedSettings:
    """Feed-level fields shared by the Atom and RSS output.

    Attributes:
        title: Feed title.
        link: Base URL of the site; post URLs are joined onto it.
        description: Feed description (RSS) / subtitle (Atom).
        author_name: Default author name.
        author_email: Default author email, also used for every entry.
        copyright: Copyright line.
    """

    title: str
    link: str
    description: str = ""
    author_name: str = ""
    author_email: str = ""
    copyright: str = ""

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> FeedSettings:
        return cls(
            title=str(config.get("site_title") or ""),
            link=str(config.get("site_url") or ""),
            description=str(config.get("site_description") or ""),
            author_name=str(config.get("author_name") or ""),
            author_email=str(config.get("author_email") or ""),
            copyright=str(config.get("copyright") or ""),
        )


def _author(name: str, email: str) -> dict[str, str]:
    author = {"name": name}
    if email:
        author["email"] = email
    return author


def build_feed(posts: Sequence[Post], settings: FeedSettings) -> FeedGenerator:
    """Build a feed with one entry per post, in collection order.

    The newest post's date becomes the feed's updated timestamp, so ``posts``
    is expected to be sorted newest first.

    Args:
        posts: Rendered posts, newest first.
        settings: Feed-level fields.

    Returns:
        A populated feedgen FeedGenerator.

    Raises:
        FeedError: If there are no posts or a field is rejected by feedgen.
    """
    if not posts:
        raise FeedError(Path(settings.link or "."), "Cannot build a feed without posts")
    try:
        fg = FeedGenerator()
        fg.id(settings.link)
        fg.title(settings.title)
        fg.link(href=settings.link, rel="alternate")
        fg.description(settings.description or settings.title)
        if settings.author_name:
            fg.author(_author(settings.author_name, settings.author_email))
        if settings.copyright:
            fg.rights(settings.copyright)
        fg.updated(posts[0].date)

        for post in posts:
            link = join_url(settings.link, post.url)
            fe = fg.add_entry(order="append")
            fe.id(link)
            fe.title(post.title or post.url)
            fe.link(href=link)
            fe.author(_author(post.author.combine(), settings.author_email))
            fe.published(post.date)
            fe.updated(post.date)
            fe.description(post.body)
            fe.content(post.body, type="html")
    except ValueError as exc:
        raise FeedError(Path(settings.link or "."), f"Invalid feed data: {exc}", exc) from exc
    return fg


class FeedWriter(ABC):
    """Abstract base class for feed writers.

    Subclasses serialise an already-built feed into one format.
    """

    @property
    @abstractmethod
    def filename(self) -> str:
        """Return the output filename for this feed."""
        ...

    @abstractmethod
    def serialize(self, feed: FeedGenerator, path: Path) -> None:
        """Write ``feed`` to ``path``."""
        ...

    def write(self, output_dir: Path, feed: FeedGenerator) -> Path:
        """Serialise the feed into the output directory.

        Args:
            output_dir: Directory to write the feed file to.
            feed: Feed to serialise.

        Returns:
            Path of the written file.

        Raises:
            FeedError: If serialisation or writing fails.
        """
        output_path = output_dir / self.filename
        try:
            self.serialize(feed, output_path)
        except (OSError, ValueError) as exc:
            raise FeedError(output_path, f"Cannot write feed: {exc}", exc) from exc
        return output_path


class AtomWriter(FeedWriter):
    """Writes an Atom 1.0 document."""

    @property
    def filename(self) -> str:
        return "atom.xml"

    def serialize(self, feed: FeedGenerator, path: Path) -> None:
        feed.atom_file(str(path), pretty=True)


class RSSWriter(FeedWriter):
    """Writes an RSS 2.0 document."""

    @property
    def filename(self) -> str:
        return "rss.xml"

    def serialize(self, feed: FeedGenerator, path: Path) -> None:
        feed.rss_file(str(path), pretty=True)


class FeedRegistry:
    """Registry for managing feed writers.

    Attributes:
        _writers: List of registered feed writers.
    """

    def __init__(self) -> None:
        self._writers: list[FeedWriter] = []

    def register(self, writer: FeedWriter) -> None:
        self._writers.append(writer)

    def write_all(self, output_dir: Path, feed: FeedGenerator) -> list[Path]:
        """Write the feed with every registered writer.

        Returns:
            Paths of the files written, in registration order.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        return [writer.write(output_dir, feed) for writer in self._writers]


def create_default_feed_registry() -> FeedRegistry:
    """Create a registry with the Atom and RSS writers."""
    registry = FeedRegistry()
    registry.register(AtomWriter())
    registry.register(RSSWriter())
    return registry


def write_feeds(
    output_dir: Path, posts: Sequence[Post], settings: FeedSettings
) -> list[Path]:
    """Build the feed from ``posts`` and write atom.xml and rss.xml."""
    feed = build_feed(posts, settings)
    return create_default_feed_registry().write_all(output_dir, feed)
