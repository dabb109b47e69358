"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    SocketServer ──accept──► ConnectionThreads ──spawn──► _process_connection
                                                              │
       ┌──────────────────────────────────────────────────────┘
       ▼
    RequestParser.parse ─► Router.match ─► (RequestParser.read_body)
                                              │
                            handler(request, remainder) ◄┘
                                              │
                            HTTPResponse.to_bytes ─► sendall ─► close

One request per connection. Every protocol error becomes an error response
on that connection; nothing that happens on one connection can take down
the process or touch another connection.

=============================================================================
LIFECYCLE
=============================================================================

    server = HTTPServer(ServerConfig(directory="/tmp/data"))
    server.run()                    # blocks; Ctrl+C / SIGTERM to stop

    # or, from another thread:
    server.stop(wait=True, timeout=5.0)

stop() sets the shutdown signal, the acceptor closes the listening socket,
and (with wait=True) in-flight connection threads are joined through the
ConnectionThreads registry.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional, Tuple

from .config import ServerConfig
from .access_log import AccessLogger, RequestLog
from .core import SocketServer, Connection, ConnectionClosed, ConnectionState, ConnectionThreads
from .http import (
    HTTPRequest, RequestParser, HTTPResponse, HTTPError,
    Router, error_response, internal_error,
)
from .handlers import build_router

logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Thread-per-connection HTTP/1.1 server.

    Args:
        config: Server configuration. Defaults are used when omitted.
        router: Route table. Defaults to the fixed five-route table bound to
                config.directory.
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._threads = ConnectionThreads()
        self._parser = RequestParser()
        self._router = router or build_router(self.config.directory)
        self._access_log = AccessLogger(log_format=self.config.log_format)

        # Set when run() has fully returned.
        self._stopped = threading.Event()
        self._stopped.set()

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port). Holds the real port once listening on port 0."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    @property
    def active_connections(self) -> int:
        return self._threads.active

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, configure_logging: bool = True):
        """
        Start the server (blocking) until stop() or SIGINT/SIGTERM.

        Args:
            configure_logging: Apply config.log_level via logging.basicConfig.
                               Embedders with their own logging setup pass
                               False.
        """
        if configure_logging:
            self._setup_logging()

        if self.config.directory is None:
            logger.warning("No serving directory configured; /files/ routes will fail")
        elif not self.config.has_directory:
            logger.warning(f"Serving directory does not exist: {self.config.directory}")

        self._stopped.clear()
        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is bound. False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    def stop(self, wait: bool = True, timeout: Optional[float] = None) -> bool:
        """
        Stop accepting connections.

        Args:
            wait: Also wait for run() to return and for in-flight
                  connections to finish.
            timeout: Overall limit for the whole wait, in seconds. Defaults
                     to config.shutdown_timeout.

        Returns:
            True if everything finished in time (always True for wait=False).
        """
        self._socket_server.shutdown()
        if not wait:
            return True

        if timeout is None:
            timeout = self.config.shutdown_timeout
        deadline = None if timeout is None else time.monotonic() + timeout

        # The acceptor notices shutdown within one accept poll interval.
        stopped = self._stopped.wait(timeout)
        remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
        return self._threads.join_all(remaining) and stopped

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("minihttp").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        if not self._threads.join_all(self.config.shutdown_timeout):
            logger.warning(f"Abandoning {self._threads.active} unfinished connection(s)")
        self._stopped.set()
        logger.info(f"Server stopped after {self._threads.spawned} connection(s)")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called on the acceptor thread: hand the connection to its own thread."""
        self._threads.spawn(self._process_connection, conn)

    def _process_connection(self, conn: Connection):
        """
        Handle exactly one request on conn, then close it (runs in the
        connection's own thread).
        """
        started = time.perf_counter()
        request: Optional[HTTPRequest] = None

        with conn:
            try:
                request = self._parser.parse(conn)
            except HTTPError as e:
                logger.debug(f"[{conn.id}] {e}")
                response = error_response(e.status)
            except ConnectionClosed:
                logger.debug(f"[{conn.id}] Closed before a full request line")
                return
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed: {e}")
                return
            else:
                try:
                    response = self._dispatch(conn, request)
                except OSError as e:
                    logger.warning(f"[{conn.id}] Read failed: {e}")
                    return

            if conn.send_response(response.to_bytes()):
                self._log_request(conn, request, response, started)

    def _dispatch(self, conn: Connection, request: HTTPRequest) -> HTTPResponse:
        """
        Route the request, read its body if the route needs one, and run
        the handler. Protocol errors become error responses; socket errors
        propagate.
        """
        try:
            match = self._router.match(request.method, request.target)
            if match.route.reads_body:
                request = self._parser.read_body(conn, request)
        except HTTPError as e:
            logger.debug(f"[{conn.id}] {request.method} {request.target}: {e}")
            return error_response(e.status, request.version)

        conn.state = ConnectionState.DISPATCHING
        try:
            response = match.dispatch(request)
        except HTTPError as e:
            logger.debug(f"[{conn.id}] {request.method} {request.target}: {e}")
            response = error_response(e.status)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            response = internal_error()

        response.version = request.version
        return response

    def _log_request(
        self,
        conn: Connection,
        request: Optional[HTTPRequest],
        response: HTTPResponse,
        started: float,
    ):
        self._access_log.log(RequestLog(
            conn_id=conn.id,
            client_ip=conn.client_ip,
            method=request.method if request else "-",
            target=request.target if request else "-",
            status_code=int(response.status),
            content_length=len(response.wire_body()),
            duration_ms=(time.perf_counter() - started) * 1000,
            timestamp=AccessLogger.timestamp(),
        ))
