"""Exception types for plainpost.

Every failure that should stop a build or the watch loop is raised as a
PlainpostError subclass carrying the path it concerns. The CLI is the single
place that decides how these are reported and turned into an exit status.
"""

from __future__ import annotations

from pathlib import Path


class PlainpostError(Exception):
    """Error with file context.

    Attributes:
        source_path: Path to the file or directory that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught, if any.
    """

    def __init__(
        self,
        source_path: Path | str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = Path(source_path)
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class ConfigError(PlainpostError):
    """Configuration file could not be read."""


class PostError(PlainpostError):
    """A post file could not be read or its frontmatter is malformed."""


class TemplateLoadError(PlainpostError):
    """The template set could not be loaded."""


class RenderError(PlainpostError):
    """A template could not be rendered to its destination."""


class FeedError(PlainpostError):
    """The Atom or RSS feed could not be written."""


class WatchError(PlainpostError):
    """Watch mode could not subscribe to its directory or bind its server."""
