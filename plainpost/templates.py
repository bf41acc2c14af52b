"""Template rendering engine for plainpost.

This module uses Jinja2 to render the blog's pages. The template set is loaded
and compiled once from a directory of ``*.html`` files; the resulting engine is
handed to the build explicitly rather than kept as module state.

Key class:
- TemplateEngine: Loads templates and renders them to destination files.

Template helpers (available as filters and as globals):
- format_date: RFC 1123 timestamp.
- short_date: ``January  2, 2006``.
- print_byte: Bytes or text to text.
- join_tags: Comma-separated tag names.
- print_html: Mark a string as safe HTML.
- lop: Slice with a clamped upper bound.
- has_title: Whether a title is non-empty.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
    select_autoescape,
)
from markupsafe import Markup

from .collections import lop
from .errors import RenderError, TemplateLoadError
from .utils import format_date, short_date

__all__ = ["TemplateEngine", "print_byte", "join_tags", "print_html", "has_title"]


def print_byte(value: bytes | str) -> str:
    """Return ``value`` as text, decoding bytes as UTF-8."""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def join_tags(tags: Iterable[Any]) -> Markup:
    """Join tag names with ``", "``.

    Accepts Tag objects or plain strings. Names are escaped.
    """
    names = [getattr(tag, "name", tag) for tag in tags]
    return Markup(", ").join(names)


def print_html(value: bytes | str) -> Markup:
    """Mark rendered HTML as safe so autoescaping leaves it alone."""
    return Markup(print_byte(value))


def has_title(value: str | None) -> bool:
    return bool(value)


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        template_dir: Directory containing the ``*.html`` templates.
        site: Configuration mapping exposed to templates as ``site``.
        env: Jinja2 environment.
    """

    def __init__(self, template_dir: Path, site: Mapping[str, Any] | None = None):
        """Initialize the engine and compile every template.

        Args:
            template_dir: Directory with templates.
            site: Optional site configuration for templates.

        Raises:
            TemplateLoadError: If the directory is missing or a template does
                not compile.
        """
        if not template_dir.is_dir():
            raise TemplateLoadError(template_dir, "Template directory not found")
        self.template_dir = template_dir
        self.site = dict(site or {})
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            enable_async=False,
        )
        self._install_helpers()
        self.names = self._load_templates()

    def _install_helpers(self) -> None:
        """Install filters and globals in the Jinja environment."""
        helpers = {
            "format_date": format_date,
            "short_date": short_date,
            "print_byte": print_byte,
            "join_tags": join_tags,
            "print_html": print_html,
            "lop": lop,
        }
        self.env.filters.update(helpers)
        self.env.globals.update(helpers)
        self.env.tests["has_title"] = has_title
        self.env.globals["has_title"] = has_title
        self.env.globals["site"] = self.site

    def _load_templates(self) -> list[str]:
        """Compile all ``*.html`` templates so syntax errors surface at startup."""
        names = self.env.list_templates(filter_func=lambda n: n.endswith(".html"))
        for name in names:
            try:
                self.env.get_template(name)
            except TemplateSyntaxError as exc:
                raise TemplateLoadError(
                    self.template_dir / name,
                    f"Template syntax error on line {exc.lineno}: {exc.message}",
                    exc,
                ) from exc
        return names

    def render_string(self, name: str, context: Mapping[str, Any]) -> str:
        """Render a named template to a string.

        Raises:
            RenderError: If the template is missing or fails to render.
        """
        try:
            template = self.env.get_template(name)
            return template.render(**context)
        except TemplateNotFound as exc:
            raise RenderError(
                self.template_dir / name, f"Template not found: {exc}", exc
            ) from exc
        except Exception as exc:
            raise RenderError(
                self.template_dir / name, _format_error_message(exc), exc
            ) from exc

    def render(self, dst: Path, name: str, context: Mapping[str, Any]) -> Path:
        """Render a named template into ``dst``, replacing any existing file.

        Args:
            dst: Destination file.
            name: Template name such as ``index.html``.
            context: Variables to make available in the template.

        Returns:
            The destination path.

        Raises:
            RenderError: If rendering or writing fails.
        """
        try:
            rendered = self.render_string(name, context)
        except RenderError as exc:
            raise RenderError(
                dst, f"{name}: {exc.message}", exc.original_error
            ) from exc
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            with open(dst, "w", encoding="utf-8") as f:
                f.write(rendered)
        except OSError as exc:
            raise RenderError(dst, f"Cannot write output: {exc}", exc) from exc
        return dst


def _format_error_message(exc: Exception) -> str:
    """Describe a template runtime failure in one line."""
    if isinstance(exc, UndefinedError):
        return f"Undefined variable: {exc}"
    return f"{type(exc).__name__}: {exc}"
