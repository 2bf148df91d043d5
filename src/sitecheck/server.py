"""Static file server for the built site and free-port negotiation."""

from __future__ import annotations

import socket
import threading
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

from sitecheck.exceptions import SetupError
from sitecheck.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PORT = 3000
PORT_SCAN_RANGE = 100


def _is_port_free(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_free_port(preferred: int = DEFAULT_PORT, host: str = "127.0.0.1") -> int:
    """Return ``preferred`` if it is free, else the next free port above it.

    Falls back to an OS-assigned port when the scanned range is exhausted
    or ``preferred`` is 0.
    """
    if preferred > 0:
        for port in range(preferred, min(preferred + PORT_SCAN_RANGE, 65536)):
            if _is_port_free(host, port):
                return port

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


class PortResolver:
    """Negotiates the server port once and hands out the same value afterwards."""

    def __init__(
        self, preferred: int = DEFAULT_PORT, host: str = "127.0.0.1", allocator=find_free_port
    ):
        self.preferred = preferred
        self.host = host
        self._allocator = allocator
        self._port: int | None = None
        self._lock = threading.Lock()

    @property
    def port(self) -> int:
        with self._lock:
            if self._port is None:
                self._port = self._allocator(self.preferred, self.host)
            return self._port


class SiteRequestHandler(SimpleHTTPRequestHandler):
    """Serves the exported site, mapping clean URLs onto ``.html`` files."""

    def translate_path(self, path: str) -> str:
        translated = Path(super().translate_path(path))
        if translated.exists():
            return str(translated)

        # /docs/resources -> /docs/resources.html
        html_file = translated.with_name(translated.name + ".html")
        if translated.name and html_file.is_file():
            return str(html_file)
        return str(translated)

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        logger.debug("static_request", message=format % args)


class StaticSiteServer:
    """Threaded HTTP server for a directory, started and closed on demand."""

    def __init__(self, root: str | Path, host: str = "127.0.0.1", port: int = DEFAULT_PORT):
        self.root = Path(root)
        self.host = host
        self.port = port
        self._httpd: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def start(self) -> StaticSiteServer:
        """Bind and serve in a background thread.

        Raises:
            SetupError: If the root is not a directory or the port cannot be bound.
        """
        if not self.root.is_dir():
            raise SetupError(f"Site root not found: {self.root}. Build the site first.")

        handler = partial(SiteRequestHandler, directory=str(self.root))
        try:
            self._httpd = ThreadingHTTPServer((self.host, self.port), handler)
        except OSError as e:
            raise SetupError(f"Cannot bind static server to {self.host}:{self.port}: {e}") from e

        self._thread = threading.Thread(
            target=self._httpd.serve_forever, name="sitecheck-static", daemon=True
        )
        self._thread.start()
        logger.info("static_server_started", url=self.url, root=str(self.root))
        return self

    def close(self) -> None:
        if self._httpd is None:
            return
        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)
        self._httpd = None
        self._thread = None
        logger.debug("static_server_closed", url=self.url)

    def __enter__(self) -> StaticSiteServer:
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.close()
