"""Watch mode for plainpost.

Serves a static directory over HTTP and runs a command whenever a file in a
watched directory is written:
- The HTTP server is bound before anything else so a busy port fails fast.
- Requests are served read-only from a daemon thread with caching disabled.
- Each write event runs the command synchronously on watchdog's dispatch
  thread. Events are not debounced or queued, and a failing command is
  reported without stopping the loop.

Key classes:
- WatchServer: Runs the static server and the watcher.
- _StaticHandler: HTTP request handler that disables caching.
- _WriteHandler: File system event handler that triggers the command.
"""

from __future__ import annotations

import functools
import subprocess
import threading
import time
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import click
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .errors import WatchError


def parse_address(address: str) -> tuple[str, int]:
    """Split a ``[host]:port`` or bare port string.

    Examples:
        >>> parse_address(":8080")
        ('', 8080)
        >>> parse_address("127.0.0.1:9000")
        ('127.0.0.1', 9000)
        >>> parse_address("4000")
        ('', 4000)

    Raises:
        WatchError: If the port is not a number in range.
    """
    host, sep, port = str(address).rpartition(":")
    if not sep:
        host = ""
    try:
        number = int(port)
    except ValueError:
        raise WatchError(address, f"Invalid port in address {address!r}") from None
    if not 0 <= number <= 65535:
        raise WatchError(address, f"Port out of range in address {address!r}")
    return host, number


class _StaticHandler(SimpleHTTPRequestHandler):
    """Serves files from the static directory with caching disabled."""

    def end_headers(self):
        self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
        super().end_headers()


class WatchServer:
    """Static file server plus a directory watcher that runs a command.

    Attributes:
        watch_dir: Directory whose file writes trigger the command.
        command: Program to run; executed without arguments or a shell.
        host: Interface the HTTP server binds to ("" for all).
        port: HTTP port.
        static_dir: Directory served over HTTP.
        _observer: File system observer, once started.
        _httpd: HTTP server, once bound.
    """

    def __init__(
        self,
        watch_dir: Path | str,
        command: str,
        address: str = ":8080",
        static_dir: Path | str = "static",
    ):
        self.watch_dir = Path(watch_dir) if watch_dir else None
        self.command = command
        self.host, self.port = parse_address(address)
        self.static_dir = Path(static_dir)
        self._observer: Observer | None = None
        self._httpd: ThreadingHTTPServer | None = None

    def start(self) -> None:  # pragma: no cover - integration path
        """Start serving and watching, blocking until interrupted."""
        httpd = self.bind_http()
        threading.Thread(target=httpd.serve_forever, daemon=True).start()
        click.echo(f"listening on http://localhost:{self.port}")
        self.start_watcher()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        if self._httpd:
            self._httpd.shutdown()
            self._httpd.server_close()
            self._httpd = None

    def bind_http(self) -> ThreadingHTTPServer:
        """Bind the static file server.

        Raises:
            WatchError: If the address cannot be bound.
        """
        if not self.static_dir.is_dir():
            click.echo(
                click.style(f"Static directory {self.static_dir} does not exist", fg="yellow"),
                err=True,
            )
        handler = functools.partial(_StaticHandler, directory=str(self.static_dir))
        try:
            self._httpd = ThreadingHTTPServer((self.host, self.port), handler)
        except OSError as exc:
            raise WatchError(
                self.static_dir, f"Cannot listen on {self.host}:{self.port}: {exc}", exc
            ) from exc
        return self._httpd

    def start_watcher(self) -> Observer:
        """Subscribe to write events in the watch directory.

        Raises:
            WatchError: If the directory is unset or cannot be watched.
        """
        if self.watch_dir is None:
            raise WatchError(".", "No watch directory given")
        if not self.watch_dir.is_dir():
            raise WatchError(self.watch_dir, "Watch directory does not exist")
        observer = Observer()
        try:
            observer.schedule(_WriteHandler(self), str(self.watch_dir), recursive=False)
            observer.start()
        except OSError as exc:
            raise WatchError(self.watch_dir, f"Cannot watch directory: {exc}", exc) from exc
        self._observer = observer
        return observer

    def run_command(self) -> bool:
        """Run the configured command and wait for it to finish.

        Failures are reported on stderr and swallowed so the watch loop keeps
        going.

        Returns:
            True if the command exited successfully.
        """
        try:
            subprocess.run([self.command], check=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            click.echo(f"Error: {exc}", err=True)
            return False
        return True


class _WriteHandler(FileSystemEventHandler):
    """Runs the server's command on every file ``modified`` event.

    watchdog's inotify backend also reports attribute changes (``touch``,
    ``chmod``) as modifications, so those trigger the command too.
    """

    def __init__(self, server: WatchServer):
        super().__init__()
        self.server = server

    def on_modified(self, event):
        if event.is_directory:
            return
        click.echo(f"modified file: {event.src_path}")
        self.server.run_command()
