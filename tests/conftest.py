"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Dict, Generator, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig
from minihttp.core import Connection


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: foo/1.0\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a file body."""
    body = b"hello"
    head = (
        b"POST /files/test.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
    )
    return head + f"Content-Length: {len(body)}\r\n\r\n".encode() + body


@pytest.fixture
def served_dir(tmp_path: Path) -> Path:
    """Empty serving directory."""
    directory = tmp_path / "served"
    directory.mkdir()
    return directory


@pytest.fixture
def config(served_dir: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        directory=str(served_dir),
        log_level="WARNING",
        shutdown_timeout=5.0,
    )


@pytest.fixture
def conn_pair() -> Generator[Tuple[Connection, socket.socket], None, None]:
    """
    A Connection wrapping one end of a socketpair, plus the raw peer socket.

    Write to the peer to feed the Connection; close or shut down the peer
    to simulate the client going away.
    """
    server_sock, client_sock = socket.socketpair()
    conn = Connection(socket=server_sock, address=("127.0.0.1", 50000))
    yield conn, client_sock
    client_sock.close()
    conn.close()


class ServerThread:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"configure_logging": False},
            daemon=True,
        )
        self._thread.start()
        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.stop(wait=True, timeout=5.0)
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, half_close: bool = True) -> bytes:
        """Send raw bytes on a fresh connection and read the reply to EOF."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            sock.sendall(raw)
            if half_close:
                sock.shutdown(socket.SHUT_WR)
            return read_until_eof(sock)


def read_until_eof(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def split_response(raw: bytes) -> Tuple[str, Dict[str, str], bytes]:
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[ServerThread, None, None]:
    """A running server bound to a free port, serving `served_dir`."""
    srv = ServerThread(HTTPServer(config))
    srv.start()

    yield srv

    srv.stop()


@pytest.fixture
def server_factory(config: ServerConfig) -> Generator:
    """Start servers with a custom router; all are stopped at teardown."""
    started = []

    def factory(router=None) -> ServerThread:
        srv = ServerThread(HTTPServer(config, router=router))
        srv.start()
        started.append(srv)
        return srv

    yield factory

    for srv in started:
        srv.stop()


@pytest.fixture
def read_all():
    """The read_until_eof helper."""
    return read_until_eof


@pytest.fixture
def parse_response():
    """The split_response helper, for tests that inspect raw replies."""
    return split_response
