"""Line-prefix frontmatter parsing for plainpost.

A post is a markdown file in which any line starting with one of five literal
prefixes carries metadata::

    author: Jane Doe <jane@example.com>
    title: Hello
    date: Mon, 02 Jan 2006 15:04:05 MST
    tags: go, web
    description: A first post

Every other line is body text. The prefixes are matched anywhere in the file,
not only at the top, so a prose line that happens to begin with ``title: ``
is taken as metadata and dropped from the body.

Key functions:
- classify_line: Tag a single line with its LineKind.
- parse_post: Read a file into a Post.
- format_frontmatter: Write a Post's metadata back out as lines.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from pathlib import Path

from .content import Post, Tag, User
from .errors import PostError
from .utils import format_date


class LineKind(enum.Enum):
    AUTHOR = "author"
    TITLE = "title"
    DATE = "date"
    TAGS = "tags"
    DESCRIPTION = "description"
    BODY = "body"


# Tested in this order; the first match claims the line.
LINE_PATTERNS: list[tuple[LineKind, re.Pattern[str]]] = [
    (LineKind.AUTHOR, re.compile(r"^author:\s(.*)$")),
    (LineKind.TITLE, re.compile(r"^title:\s(.*)$")),
    (LineKind.DATE, re.compile(r"^date:\s(.*)$")),
    (LineKind.TAGS, re.compile(r"^tags:\s(.*)$")),
    (LineKind.DESCRIPTION, re.compile(r"^description:\s(.*)$")),
]

AUTHOR_RE = re.compile(r"^(.*)\s(.*)\s<(.*)>$")

# Day, DD Mon YYYY HH:MM:SS followed by a zone name or numeric offset.
RFC1123_RE = re.compile(
    r"^[A-Z][a-z]{2}, \d{2} [A-Z][a-z]{2} \d{4} \d{2}:\d{2}:\d{2} (?:[A-Z]{2,5}|[+-]\d{4})$"
)


def classify_line(line: str) -> tuple[LineKind, str]:
    """Classify a single line (without its line ending).

    Args:
        line: Line of a post file.

    Returns:
        Tuple of (kind, value). For metadata lines the value is the text after
        the prefix; for body lines it is the line itself.

    Examples:
        >>> classify_line("title: Hello")
        (<LineKind.TITLE: 'title'>, 'Hello')
        >>> classify_line("Title: Hello")
        (<LineKind.BODY: 'body'>, 'Title: Hello')
    """
    for kind, pattern in LINE_PATTERNS:
        match = pattern.match(line)
        if match:
            return kind, match.group(1)
    return LineKind.BODY, line


def parse_author(text: str) -> User:
    """Parse a ``First Last <email>`` string.

    A value that does not have that shape yields an empty User.
    """
    match = AUTHOR_RE.match(text)
    if not match:
        return User()
    first, last, email = match.groups()
    return User(first_name=first, last_name=last, email=email)


def parse_tags(text: str) -> list[Tag]:
    """Split a comma-separated tag list, trimming each name."""
    return [Tag(name=name.strip()) for name in text.split(",")]


def parse_date(text: str, source_path: Path | str) -> datetime:
    """Parse an RFC 1123 timestamp such as ``Mon, 02 Jan 2006 15:04:05 MST``.

    Only that exact shape is accepted: weekday, two-digit day, four-digit
    year and seconds are all required and nothing may follow the zone.
    Numeric offsets and the zone names of RFC 2822 are honoured. Other zone
    names are read as UTC, so the result is always timezone-aware.

    Args:
        text: Timestamp text.
        source_path: File the timestamp came from, for error reporting.

    Raises:
        PostError: If the text is not a valid timestamp.
    """
    if not RFC1123_RE.fullmatch(text):
        raise PostError(source_path, f"Invalid date {text!r}: expected RFC 1123")
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError) as exc:
        raise PostError(source_path, f"Invalid date {text!r}: {exc}", exc) from exc
    if parsed is None:
        raise PostError(source_path, f"Invalid date {text!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def iter_lines(text: str) -> Iterator[str]:
    """Yield the lines of ``text`` split on ``\\n``.

    A single ``\\r`` before each newline is dropped and a trailing newline does
    not produce an empty final line.
    """
    if not text:
        return
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    for line in lines:
        yield line[:-1] if line.endswith("\r") else line


def parse_text(text: str, source_path: Path | str = "<string>") -> Post:
    """Parse post text into a Post with a markdown body."""
    post = Post(source_path=Path(source_path))
    body: list[str] = []
    for line in iter_lines(text):
        kind, value = classify_line(line)
        if kind is LineKind.AUTHOR:
            post.author = parse_author(value)
        elif kind is LineKind.TITLE:
            post.title = value
        elif kind is LineKind.DATE:
            post.date = parse_date(value, source_path)
        elif kind is LineKind.TAGS:
            post.tags.extend(parse_tags(value))
        elif kind is LineKind.DESCRIPTION:
            post.description = value
        else:
            body.append(value + "\n")
    post.body = "".join(body)
    return post


def parse_post(path: Path) -> Post:
    """Read a post file and parse its frontmatter and body.

    Args:
        path: Markdown file to read.

    Returns:
        Post whose body is still markdown.

    Raises:
        PostError: If the file cannot be read or its date is malformed.
    """
    try:
        with open(path, encoding="utf-8", newline="") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise PostError(path, f"Cannot read post: {exc}", exc) from exc
    return parse_text(text, path)


def format_frontmatter(post: Post) -> list[str]:
    """Serialise a post's metadata back to its line forms.

    Author, tags and description lines are only emitted when set.
    """
    lines: list[str] = []
    author = post.author
    if author.first_name or author.last_name or author.email:
        lines.append(f"author: {author.first_name} {author.last_name} <{author.email}>")
    lines.append(f"title: {post.title}")
    lines.append(f"date: {format_date(post.date)}")
    if post.tags:
        lines.append(f"tags: {', '.join(post.tag_names())}")
    if post.description:
        lines.append(f"description: {post.description}")
    return lines
