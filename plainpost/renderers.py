"""Markdown rendering for plainpost.

Post bodies are converted with mistune using a "common" markdown dialect:
headings, lists, emphasis, links, code blocks, tables, strikethrough and
bare URL autolinks. Raw HTML in a post is passed through untouched.
"""

from __future__ import annotations

import mistune

DEFAULT_PLUGINS = ["table", "strikethrough", "url"]


class MarkdownRenderer:
    """Renders Markdown post bodies to HTML.

    The mistune parser is built once and reused for every post.

    Attributes:
        plugins: Names of the mistune plugins enabled.
    """

    def __init__(self, plugins: list[str] | None = None):
        self.plugins = list(DEFAULT_PLUGINS if plugins is None else plugins)
        self._markdown = mistune.create_markdown(
            renderer=mistune.HTMLRenderer(escape=False),
            plugins=self.plugins,
        )

    def render(self, content: str) -> str:
        """Render Markdown content to HTML.

        Args:
            content: Markdown source with the frontmatter already removed.

        Returns:
            Rendered HTML.
        """
        return self._markdown(content)
