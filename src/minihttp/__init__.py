"""
=============================================================================
MINIHTTP - A Minimal HTTP/1.1 Server Built From Raw Sockets
=============================================================================

A single-protocol request server: it reads the request line and headers
off the socket by hand, dispatches to one of five fixed routes, and writes
a hand-formatted response before closing the connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     MINIHTTP ARCHITECTURE                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   core.SocketServer       accept loop on port 4221                  │
    │   core.ConnectionThreads  one thread per connection                 │
    │   core.Connection         read_line() / read_exact(n) / send        │
    │   http.RequestParser      request line + headers (+ body)           │
    │   http.Router             ordered exact/prefix routes               │
    │   handlers                /, /echo/, /user-agent, /files/           │
    │   http.HTTPResponse       status line + headers + (gzip) body       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    # Command line
    python -m minihttp --directory /tmp/data

    # In code
    from minihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(directory="/tmp/data"))
    server.run()

    $ curl -i http://localhost:4221/echo/hello
    HTTP/1.1 200 OK
    Content-Type: text/plain
    Content-Length: 5

    hello

=============================================================================
"""

from .server import HTTPServer
from .config import ServerConfig

__version__ = "1.0.0"

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "__version__",
]
