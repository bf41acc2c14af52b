"""Utility functions for plainpost.

This module contains small string, path and date helpers used throughout the
plainpost codebase.

Key functions:
    slugify: Convert titles and filenames to URL slugs.
    md_to_html: Swap a markdown filename's extension for .html.
    format_date: Format a timestamp as RFC 1123.
    short_date: Format a timestamp as a long-form calendar date.
    join_url: Join a base URL with a root-relative path.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path

#: Date used for posts that carry no ``date:`` line.
ZERO_DATE = datetime(1, 1, 1, tzinfo=timezone.utc)


def slugify(name: str) -> str:
    """Convert a title or filename stem to a slug.

    Args:
        name: Text to convert.

    Returns:
        URL-friendly slug, or ``"post"`` when nothing usable remains.
    """
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", name)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "post"


def md_to_html(filename: str) -> str:
    """Return the output filename for a markdown source file.

    Examples:
        >>> md_to_html("hello.md")
        'hello.html'
        >>> md_to_html("posts/notes.md")
        'posts/notes.html'
    """
    path = Path(filename)
    if path.suffix.lower() == ".md":
        path = path.with_suffix(".html")
    return path.as_posix()


def format_date(value: datetime) -> str:
    """Format a timestamp as RFC 1123 with a numeric zone offset.

    Naive timestamps are treated as UTC.

    Examples:
        >>> format_date(datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone.utc))
        'Mon, 02 Jan 2006 15:04:05 +0000'
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value)


def short_date(value: datetime) -> str:
    """Format a timestamp as ``January  2, 2006`` (space-padded day)."""
    return f"{value:%B} {value.day:2d}, {value.year:04d}"


def join_url(base_url: str, path: str) -> str:
    """Join a base URL and a path, avoiding double slashes.

    Examples:
        >>> join_url("https://example.com/", "/posts/a.html")
        'https://example.com/posts/a.html'
    """
    if not base_url:
        return path
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base_url.rstrip('/')}{suffix}"
