"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads an HTTP/1.1 request off a Connection, one line at a time.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  POST /files/notes.txt HTTP/1.1\r\n        ← request line          │
    │  ─┬── ────────┬─────── ────┬───                                     │
    │   │           │            └── version                              │
    │   │           └── target (path + query, kept raw)                   │
    │   └── method                                                        │
    │                                                                      │
    │  Host: localhost:4221\r\n                  ← headers                │
    │  Content-Length: 5\r\n                                               │
    │  \r\n                                      ← end of headers         │
    │  hello                                     ← body (5 bytes)         │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING IN TWO PHASES
=============================================================================

The parser does not know whether a body should be read until the router
has looked at the method and target. So parsing is split:

    1. parse(conn)            request line + headers → HTTPRequest(body=None)
    2. read_body(conn, req)   only for body-bearing routes
                              → copy of req with body of Content-Length bytes

=============================================================================
LENIENCY RULES
=============================================================================

- The request line must split into exactly 3 whitespace-separated tokens.
  Anything else is MalformedRequestLine (400).
- Header lines are trimmed of surrounding whitespace, so a blank or
  whitespace-only line ends the header block. They are then split on the
  first ": ". Lines without it are skipped, never an error.
- If the client closes the stream while we are still reading headers, the
  headers collected so far are used.

=============================================================================
"""

import logging
import dataclasses
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..core.connection import Connection, ConnectionClosed, ConnectionState
from .errors import MalformedRequestLine, MalformedContentLength, BodyReadShort

logger = logging.getLogger(__name__)

# Largest Content-Length accepted; anything above is treated as malformed.
MAX_CONTENT_LENGTH = 2 ** 63 - 1


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request. Immutable once parsed.

    Attributes:
        method:   Request method as sent ("GET", "POST", ...).
        target:   Raw request target, e.g. "/echo/abc?x=1". Not URL-decoded.
        version:  Protocol version token, e.g. "HTTP/1.1".
        headers:  Header name → value. Names are kept exactly as received;
                  a repeated name keeps its last value.
        body:     Request body, or None when no body was read.
        client_address: (ip, port) of the client, for logging.
    """

    method: str
    target: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    client_address: tuple[str, int] = ("", 0)

    def get_header(self, name: str, default: str = "") -> str:
        """
        Look up a header value.

        The exact name wins. Otherwise the first header whose name matches
        case-insensitively is returned, so "user-agent" from a lower-casing
        client still satisfies get_header("User-Agent").
        """
        if name in self.headers:
            return self.headers[name]
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    @property
    def user_agent(self) -> str:
        return self.get_header("User-Agent")

    @property
    def content_length(self) -> Optional[int]:
        """
        Content-Length as a non-negative integer.

        Returns None when the header is missing, is not a plain run of
        ASCII digits ("+5", "-1", "5_0" are all rejected), or exceeds
        MAX_CONTENT_LENGTH.
        """
        raw = self.get_header("Content-Length", None)
        if raw is None or not (raw.isascii() and raw.isdigit()):
            return None
        length = int(raw)
        if length > MAX_CONTENT_LENGTH:
            return None
        return length


class RequestParser:
    """
    Parses requests straight off a Connection.

    Usage:
        parser = RequestParser()
        request = parser.parse(conn)
        if route.reads_body:
            request = parser.read_body(conn, request)
    """

    HEADER_SEPARATOR = ": "

    def parse(self, conn: Connection) -> HTTPRequest:
        """
        Read and parse the request line and headers.

        Args:
            conn: The client connection.

        Returns:
            HTTPRequest with body=None.

        Raises:
            MalformedRequestLine: Request line is not exactly 3 tokens.
            ConnectionClosed: The peer closed before a full request line.
            OSError: Socket-level failure.
        """
        conn.state = ConnectionState.READING_REQUEST_LINE
        request_line = conn.read_line()

        method, target, version = self._parse_request_line(request_line)

        conn.state = ConnectionState.READING_HEADERS
        headers = self._read_headers(conn)

        return HTTPRequest(
            method=method,
            target=target,
            version=version,
            headers=headers,
            client_address=conn.address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split "METHOD TARGET VERSION" on whitespace.

        Raises:
            MalformedRequestLine: Token count is not exactly 3.
        """
        tokens = line.split()
        if len(tokens) != 3:
            raise MalformedRequestLine(f"Invalid request line: {line!r}")
        method, target, version = tokens
        return method, target, version

    def _read_headers(self, conn: Connection) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        while True:
            try:
                line = conn.read_line()
            except ConnectionClosed:
                logger.debug(f"[{conn.id}] Stream ended inside header block")
                break

            line = line.strip()
            if line == "":
                break

            name, sep, value = line.partition(self.HEADER_SEPARATOR)
            if not sep:
                logger.debug(f"[{conn.id}] Skipping malformed header line: {line!r}")
                continue
            headers[name] = value
        return headers

    def read_body(self, conn: Connection, request: HTTPRequest) -> HTTPRequest:
        """
        Read exactly Content-Length body bytes for a body-bearing route.

        Args:
            conn: The connection the request head was read from.
            request: The head-only request returned by parse().

        Returns:
            A copy of request with body set.

        Raises:
            MalformedContentLength: Header missing, non-numeric or negative.
            BodyReadShort: The peer closed before sending every byte.
            OSError: Socket-level failure.
        """
        length = request.content_length
        if length is None:
            raise MalformedContentLength(
                f"Invalid Content-Length: {request.get_header('Content-Length', '<missing>')!r}"
            )

        conn.state = ConnectionState.READING_BODY
        try:
            body = conn.read_exact(length)
        except ConnectionClosed as e:
            raise BodyReadShort(expected=length, received=len(e.partial)) from e

        return dataclasses.replace(request, body=body)
