"""
=============================================================================
CONNECTION READER / WRITER
=============================================================================

Wraps one accepted client socket with the two read primitives the request
parser needs, plus response sending and a proper close.

=============================================================================
WHY BUFFER?
=============================================================================

TCP is a byte stream, not a message stream. One recv() may return half a
request line, or the request line, all headers and part of the body at
once:

    recv() #1  →  b"POST /files/a HTTP/1.1\r\nContent-Le"
    recv() #2  →  b"ngth: 5\r\n\r\nhel"
    recv() #3  →  b"lo"

So we keep a private _buffer. read_line() pulls from it up to the next
newline; read_exact(n) pulls exactly n bytes. Whatever is left over stays
buffered for the next call:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  read_line()    → "POST /files/a HTTP/1.1"                          │
    │  read_line()    → "Content-Length: 5"                               │
    │  read_line()    → ""              (end of headers)                  │
    │  read_exact(5)  → b"hel" already buffered + b"lo" from recv()       │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
NO TIMEOUTS
=============================================================================

Reads block until data arrives or the peer closes. A client that never
sends its terminator keeps its thread parked. Each connection runs on its
own thread, so that only stalls the one connection.

=============================================================================
"""

import socket
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

logger = logging.getLogger(__name__)


class ConnectionClosed(ConnectionError):
    """
    The peer closed the stream before the requested data arrived.

    Attributes:
        partial: Bytes received before the close (may be empty).
    """

    def __init__(self, message: str = "Connection closed by peer", partial: bytes = b""):
        super().__init__(message)
        self.partial = partial


class ConnectionState(Enum):
    """
    Per-connection lifecycle:

        ACCEPTED → READING_REQUEST_LINE → READING_HEADERS
                 → (READING_BODY) → DISPATCHING → WRITING_RESPONSE → CLOSED

    Any failure jumps to WRITING_RESPONSE (error status) or straight to
    CLOSED when the peer is already gone. CLOSED is terminal.
    """

    ACCEPTED = "accepted"
    READING_REQUEST_LINE = "reading_request_line"
    READING_HEADERS = "reading_headers"
    READING_BODY = "reading_body"
    DISPATCHING = "dispatching"
    WRITING_RESPONSE = "writing_response"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used as a log prefix.
        state: Current ConnectionState.
        buffer_size: Bytes requested per recv() call.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    buffer_size: int = 8192

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        # Accepted sockets may inherit the listener's accept-poll timeout.
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def read_line(self) -> str:
        """
        Read one line terminated by "\\n".

        The terminator and a preceding "\\r" are stripped; the rest is
        decoded as UTF-8 (undecodable bytes are replaced).

        Returns:
            The line content, "" for a bare CRLF.

        Raises:
            ConnectionClosed: The peer closed before a newline arrived.
            OSError: Socket-level failure.
        """
        while True:
            newline = self._buffer.find(b"\n")
            if newline != -1:
                break
            chunk = self._recv()
            if not chunk:
                partial, self._buffer = self._buffer, b""
                raise ConnectionClosed("Connection closed before end of line", partial)
            self._buffer += chunk

        line = self._buffer[:newline]
        self._buffer = self._buffer[newline + 1:]
        if line.endswith(b"\r"):
            line = line[:-1]
        return line.decode("utf-8", errors="replace")

    def read_exact(self, n: int) -> bytes:
        """
        Read exactly n bytes, blocking until they are all available.

        Raises:
            ConnectionClosed: The peer closed early. `partial` holds what
                              did arrive.
            OSError: Socket-level failure.
        """
        if n < 0:
            raise ValueError(f"Cannot read a negative number of bytes: {n}")

        while len(self._buffer) < n:
            chunk = self._recv(min(self.buffer_size, n - len(self._buffer)))
            if not chunk:
                partial, self._buffer = self._buffer, b""
                raise ConnectionClosed(
                    f"Connection closed after {len(partial)} of {n} bytes", partial
                )
            self._buffer += chunk

        data = self._buffer[:n]
        self._buffer = self._buffer[n:]
        return data

    def _recv(self, size: Optional[int] = None) -> bytes:
        """
        Receive data from the socket.

        An abrupt reset is reported as end of stream (b""), the same as an
        orderly close.
        """
        try:
            return self.socket.recv(size or self.buffer_size)
        except ConnectionResetError:
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes to the client.

        Uses sendall() so the whole response goes out or the call fails.
        Partial writes are not retried.

        Returns:
            True if the send succeeded, False if the connection was lost.
        """
        self.state = ConnectionState.WRITING_RESPONSE
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully. Safe to call more than once.

        1. shutdown(SHUT_WR) sends FIN so the client sees end-of-response.
        2. Drain whatever the client still sent (e.g. an unread body) so
           the kernel does not answer with RST and clobber our response.
        3. close() releases the file descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # socket.timeout is an OSError

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
