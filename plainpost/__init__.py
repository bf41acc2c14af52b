"""plainpost static blog generator.

This package turns a directory of markdown posts with a line-prefix frontmatter
header into static HTML pages, an archive and Atom/RSS feeds rendered through
Jinja2 templates.

The main entry point is the CLI module, which provides commands for building a
blog, watching a directory and serving the output, and scaffolding new blogs
and posts.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
