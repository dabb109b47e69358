"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop. Every accepted socket is
wrapped in a Connection and handed to a callback; what happens next is
the HTTP layer's business.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create the listening socket
    2. bind()      Reserve HOST:PORT (port 0 = OS picks one)
    3. listen()    Start queueing incoming connections (backlog)
    4. accept()    Take the next queued connection → new client socket
    5. close()     Release the listening socket on shutdown

=============================================================================
INTERRUPTIBLE ACCEPT
=============================================================================

accept() blocks forever by default, so a shutdown request from another
thread would never be noticed. The listening socket gets a short timeout
instead:

    while not shutdown requested:
        try:
            accept()          # returns within ACCEPT_POLL_INTERVAL
        except timeout:
            continue          # re-check the shutdown event

Only the acceptor polls. Client sockets are switched back to blocking
mode by Connection.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection

logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    ACCEPT_POLL_INTERVAL = 0.5

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._bound_address: Optional[Tuple[str, int]] = None

        # Set by shutdown(); the accept loop exits once it sees it.
        self._shutdown_event = threading.Event()
        # Set once the socket is listening, for callers waiting on startup.
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._ready_event.is_set() and not self._shutdown_event.is_set()

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port); the real port once bound to port 0."""
        return self._bound_address or (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # SO_REUSEADDR: rebind right after a restart instead of waiting out
        # TIME_WAIT ("Address already in use").
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # TCP_NODELAY: responses are written in one sendall(); don't let
        # Nagle hold back the tail.
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(self.ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """
        Turn SIGINT (Ctrl+C) and SIGTERM (kill, docker stop) into a graceful
        shutdown. signal.signal() only works on the main thread, so a server
        started from a background thread (as in tests) skips this.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept connections until shutdown() is called.

        Args:
            connection_handler: Called with each new Connection on the
                                acceptor thread. It must not block.

        A SocketServer is single-use: once shut down it stays down, and a
        shutdown() that arrives before start() makes start() return right
        after binding.

        Raises:
            OSError: The address could not be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]
        self._setup_signals()
        self._ready_event.set()

        logger.info(f"Server listening on {self.address[0]}:{self.address[1]}")

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while not self._shutdown_event.is_set():
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._shutdown_event.is_set():
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")
            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Ask the accept loop to stop. Idempotent and safe from any thread or
        from a signal handler. The listening socket is closed by the
        acceptor thread itself once it notices.
        """
        if not self._shutdown_event.is_set():
            logger.info("Shutting down socket server...")
        self._shutdown_event.set()

    def _cleanup(self):
        self._restore_signals()
        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None
        self._ready_event.clear()
        self._shutdown_event.set()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._ready_event.wait(timeout)
