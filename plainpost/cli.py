"""Command-line interface for plainpost.

This module defines the CLI commands using Click framework.
It provides commands for building a blog, watching a directory while serving
the output, and scaffolding new blogs and posts.

Commands:
- build: Build the blog from SRC with TEMPLATES into DEST.
- watch: Serve the static directory and run a command on file changes.
- new: Scaffold a new blog.
- post: Create a new post interactively.
- dateconv: Print a YYYY-MM-DD date as an RFC 1123 timestamp.
"""

from __future__ import annotations

import shutil
from datetime import datetime, timezone
from pathlib import Path

import click
import questionary

from . import __version__
from .errors import PlainpostError
from .utils import format_date

# Path to the files copied by `plainpost new`
_SKELETON_DIR = Path(__file__).parent / "skeleton"

_path_type = click.Path(path_type=Path)

_PROMPT_STYLE = questionary.Style(
    [
        ("qmark", "fg:green bold"),
        ("question", "bold"),
        ("answer", "fg:green"),
        ("instruction", "fg:ansibrightblack italic"),
    ]
)


@click.group()
@click.version_option(version=__version__, prog_name="plainpost")
def cli():
    """plainpost static blog generator."""


@cli.command()
@click.argument("src", type=_path_type)
@click.argument("templates", type=_path_type)
@click.argument("dest", type=_path_type)
@click.option(
    "--config",
    "config_path",
    type=_path_type,
    default=None,
    help="Configuration file (default: plainpost.yaml)",
)
@click.option("-v", "--verbose", is_flag=True, help="Print each post's metadata")
def build(src: Path, templates: Path, dest: Path, config_path: Path | None, verbose: bool):
    """Build the blog from SRC with TEMPLATES into DEST."""
    from .build import build_site, load_config

    try:
        config = load_config(config_path)
        click.echo(f"Generating static html from {src} to {dest}")
        result = build_site(
            src, templates, dest, config, log=click.echo if verbose else None
        )
    except PlainpostError as exc:
        _report_failure("Build failed:", exc)
        raise SystemExit(1) from None
    click.echo(f"Built {len(result.posts)} posts into {result.output_dir}")


@cli.command()
@click.option("--dir", "watch_dir", help="Directory to watch for changes")
@click.option("--cmd", "watch_cmd", help="Command to run when a file in --dir changes")
@click.option("--port", help="Address to serve the static files on, e.g. :8080")
@click.option("--static", "static_dir", type=_path_type, help="Directory to serve")
@click.option(
    "--config",
    "config_path",
    type=_path_type,
    default=None,
    help="Configuration file (default: plainpost.yaml)",
)
def watch(
    watch_dir: str | None,
    watch_cmd: str | None,
    port: str | None,
    static_dir: Path | None,
    config_path: Path | None,
):
    """Serve the static directory and run a command on file changes."""
    from .build import load_config
    from .server import WatchServer

    try:
        config = load_config(config_path)
        server = WatchServer(
            watch_dir or config.get("watch_dir", ""),
            watch_cmd or config.get("watch_cmd", ""),
            address=port or config.get("port", ":8080"),
            static_dir=static_dir or config.get("static_dir", "static"),
        )
        server.start()
    except PlainpostError as exc:
        _report_failure("Watch failed:", exc)
        raise SystemExit(1) from None


@cli.command()
@click.argument("name")
def new(name: str):
    """Scaffold a new blog."""
    target = Path(name).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(
            f"Refusing to initialize into non-empty directory: {target}"
        )
    _scaffold(target)
    click.echo(f"New blog created at {target}")


@cli.command()
@click.argument("src", type=_path_type, default="posts")
@click.option(
    "--config",
    "config_path",
    type=_path_type,
    default=None,
    help="Configuration file (default: plainpost.yaml)",
)
def post(src: Path, config_path: Path | None):
    """Create a new post in SRC interactively."""
    from .build import load_config
    from .content import Post, User
    from .frontmatter import format_frontmatter, parse_tags
    from .utils import slugify

    if not src.is_dir():
        raise click.ClickException(f"No posts directory found at {src}")
    try:
        config = load_config(config_path)
    except PlainpostError as exc:
        raise click.ClickException(exc.message) from None

    title = questionary.text(
        "Title:",
        validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
        style=_PROMPT_STYLE,
    ).ask()
    if title is None:
        raise click.Abort()

    tags = questionary.text("Tags (comma-separated):", style=_PROMPT_STYLE).ask()
    if tags is None:
        raise click.Abort()

    description = questionary.text("Description:", style=_PROMPT_STYLE).ask()
    if description is None:
        raise click.Abort()

    title = title.strip()
    target = src / f"{slugify(title)}.md"
    if target.exists():
        raise click.ClickException(f"File already exists: {target}")

    first, _, last = str(config.get("author_name") or "").strip().rpartition(" ")
    entry = Post(
        title=title,
        description=description.strip(),
        date=datetime.now(timezone.utc).replace(microsecond=0),
        author=User(first_name=first, last_name=last, email=str(config.get("author_email") or "")),
        tags=parse_tags(tags) if tags.strip() else [],
    )
    lines = format_frontmatter(entry)
    target.write_text("\n".join(lines) + f"\n\n# {title}\n\n", encoding="utf-8")
    click.echo(f"Created {target}")


@cli.command()
@click.argument("date")
def dateconv(date: str):
    """Print DATE (YYYY-MM-DD) as an RFC 1123 timestamp."""
    try:
        parsed = datetime.strptime(date, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError:
        raise click.BadParameter(
            f"expected YYYY-MM-DD, got {date!r}", param_hint="DATE"
        ) from None
    click.echo(format_date(parsed))


def _report_failure(title: str, exc: PlainpostError) -> None:
    """Display a user-friendly error message on stderr."""
    click.echo(click.style(title, fg="red", bold=True), err=True)
    click.echo(click.style(f"  File: {exc.source_path}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)


def main():
    """Entry point for the CLI application."""
    cli()


def _scaffold(root: Path) -> None:
    """Create the directory structure and files for a new blog.

    Args:
        root: Root directory for the new blog.
    """
    for src_path in _SKELETON_DIR.rglob("*"):
        if src_path.is_dir():
            continue
        rel_path = src_path.relative_to(_SKELETON_DIR)
        dest_path = root / rel_path
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        if src_path.name == ".keep":
            continue
        shutil.copy2(src_path, dest_path)
    (root / "rebuild.sh").chmod(0o755)
