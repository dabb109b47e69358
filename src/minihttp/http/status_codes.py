"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can answer with, plus their reason phrases.

The reason phrase is written verbatim into the status line, so the table
below is part of the wire format:

    HTTP/1.1 404 Not Found\r\n
             ─┬─ ────┬────
              │      └── phrase (from _STATUS_PHRASES)
              └── code (the IntEnum value)

    ┌────────┬──────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK            - probe, echo, user-agent, file read   │
    │        │ 201 Created       - file write                           │
    ├────────┼──────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request   - bad request line / Content-Length    │
    │        │ 403 Forbidden     - file name escapes the serving root   │
    │        │ 404 Not Found     - unknown GET target / missing file    │
    │        │ 405 Method Not Allowed - unrouted method                 │
    ├────────┼──────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error - short body, write failure   │
    └────────┴──────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200
    CREATED = 201

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase written after the code in the status line."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        """True for any 4xx or 5xx status."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
